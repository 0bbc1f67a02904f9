"""
Low-level client library: archives, bundle operations, and the encryption
services they are locked with.
"""

from . import bundles
from .compressor import Compressor, ZipCompressor
from .core import Client, ClientSettings
from .exceptions import (
    ArchiveFormatError,
    BundleError,
    EntryDecodeError,
    ExternalServiceError,
    InvalidMetadataError,
    MissingEntryError,
)
from .files import BundleFile
from .local import LocalEncryptionService
from .service import (
    DecryptRequest,
    EncryptionService,
    EncryptResponse,
    RemoteEncryptionService,
)

__all__ = [
    "bundles",
    "ArchiveFormatError",
    "BundleError",
    "BundleFile",
    "Client",
    "ClientSettings",
    "Compressor",
    "DecryptRequest",
    "EncryptResponse",
    "EncryptionService",
    "EntryDecodeError",
    "ExternalServiceError",
    "InvalidMetadataError",
    "LocalEncryptionService",
    "MissingEntryError",
    "RemoteEncryptionService",
    "ZipCompressor",
]
