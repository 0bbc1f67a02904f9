"""
Zip payloads up and lock them with an encryption service, and the inverse.

Three bundle layouts are supported:

- a single string, stored as ``string.txt``; the whole archive is encrypted.
- several files, stored under ``encryptedAssets/``; the whole archive is
  encrypted as one ciphertext.
- a single encrypted file plus ``lit_protocol_metadata.json`` describing how
  it was locked; the archive itself is the artifact and is not encrypted.
"""

import base64

from loguru import logger
from pydantic import BaseModel, ValidationError

from lockmeta import ALL_CONDITIONS_TYPE, METADATA_FILENAME, BundleMetadata

from .compressor import ZipCompressor
from .exceptions import InvalidMetadataError, MissingEntryError
from .files import BundleFile
from .service import DecryptRequest, EncryptionService, EncryptResponse

STRING_FILENAME = "string.txt"
ASSETS_PREFIX = "encryptedAssets/"
README_FILENAME = "readme.txt"


class DecryptedFileWithMetadata(BaseModel):
    decrypted_file: bytes
    metadata: BundleMetadata


def zip_and_encrypt_string(
    service: EncryptionService,
    data: str,
    conditions: ALL_CONDITIONS_TYPE,
    chain: str,
) -> EncryptResponse:
    """
    Zip and encrypt a string.

    Arguments
    ---------
    service : EncryptionService
        The service to encrypt with.
    data : str
        The string to lock.
    conditions : ALL_CONDITIONS_TYPE
        The access-control conditions that gate decryption.
    chain : str
        The chain the conditions are evaluated on.

    Returns
    -------
    EncryptResponse
        The ciphertext of the archive and the hash of the archive bytes.

    Raises
    ------
    ExternalServiceError
        If the service fails to encrypt.
    """

    zipper = ZipCompressor()
    zipper.add_entry(STRING_FILENAME, data)

    archive = zipper.serialize()

    logger.info("Encrypting zipped string ({} byte archive)", len(archive))

    return service.encrypt(archive, conditions=conditions, chain=chain)


def decrypt_zipped_string(service: EncryptionService, request: DecryptRequest) -> str:
    """
    Decrypt and unzip a string locked with `zip_and_encrypt_string`.

    Raises
    ------
    ExternalServiceError
        If the service refuses or fails to decrypt.
    ArchiveFormatError
        If the decrypted data is not a zip archive.
    MissingEntryError
        If the archive has no ``string.txt``.
    """

    zipper = ZipCompressor.load(service.decrypt(request))

    string = zipper.read_entry(STRING_FILENAME, "text")

    if string is None:
        raise MissingEntryError(f"zip does not include {STRING_FILENAME}")

    return string


def zip_and_encrypt_files(
    service: EncryptionService,
    files: list[BundleFile],
    conditions: ALL_CONDITIONS_TYPE,
    chain: str,
) -> EncryptResponse:
    """
    Zip several files together and encrypt the whole archive as one
    ciphertext. Files are stored under ``encryptedAssets/<name>``.

    Arguments
    ---------
    service : EncryptionService
        The service to encrypt with.
    files : list[BundleFile]
        The files to lock. Later files with the same name replace earlier ones.
    conditions : ALL_CONDITIONS_TYPE
        The access-control conditions that gate decryption.
    chain : str
        The chain the conditions are evaluated on.

    Returns
    -------
    EncryptResponse
        The ciphertext of the archive and the hash of the archive bytes.
    """

    zipper = ZipCompressor()

    for file in files:
        logger.debug("Adding {} ({} bytes) to archive", file.name, file.size)
        zipper.add_entry(f"{ASSETS_PREFIX}{file.name}", file.content)

    archive = zipper.serialize()

    logger.info(
        "Encrypting {} zipped files ({} byte archive)", len(files), len(archive)
    )

    return service.encrypt(archive, conditions=conditions, chain=chain)


def decrypt_zipped_files(
    service: EncryptionService, request: DecryptRequest
) -> dict[str, bytes]:
    """
    Decrypt and unzip an archive made with `zip_and_encrypt_files`.

    Returns
    -------
    dict[str, bytes]
        File contents keyed by their original names.
    """

    zipper = ZipCompressor.load(service.decrypt(request))

    result = {}

    for key, content in zipper.read_all_entries().items():
        if zipper.is_directory(key) or not key.startswith(ASSETS_PREFIX):
            continue

        result[key.removeprefix(ASSETS_PREFIX)] = content

    logger.info("Unzipped {} files", len(result))

    return result


def encrypt_file_and_zip_with_metadata(
    service: EncryptionService,
    file: BundleFile,
    conditions: ALL_CONDITIONS_TYPE,
    chain: str,
    readme: str | None = None,
) -> bytes:
    """
    Encrypt a single file and zip the ciphertext up with the metadata needed
    to decrypt it later.

    Arguments
    ---------
    service : EncryptionService
        The service to encrypt with.
    file : BundleFile
        The file to lock.
    conditions : ALL_CONDITIONS_TYPE
        The access-control conditions that gate decryption.
    chain : str
        The chain the conditions are evaluated on.
    readme : str, optional
        Free text stored as ``readme.txt``.

    Returns
    -------
    bytes
        The bundle archive. It is not itself encrypted.
    """

    encrypted = service.encrypt(file.content, conditions=conditions, chain=chain)

    metadata = BundleMetadata.from_conditions(
        name=file.name,
        type=file.type,
        size=file.size,
        conditions=conditions,
        chain=chain,
        data_to_encrypt_hash=encrypted.data_to_encrypt_hash,
    )

    zipper = ZipCompressor()
    zipper.add_entry(METADATA_FILENAME, metadata.to_json())

    if readme:
        zipper.add_entry(README_FILENAME, readme)

    zipper.add_entry(
        f"{ASSETS_PREFIX}{file.name}",
        base64.b64decode(encrypted.ciphertext, validate=True),
    )

    logger.info("Bundled encrypted {} with metadata", file.name)

    return zipper.serialize()


def read_bundle_metadata(zipper: ZipCompressor) -> BundleMetadata:
    """
    Read and validate the metadata entry of a bundle.

    Raises
    ------
    MissingEntryError
        If the bundle has no metadata entry.
    InvalidMetadataError
        If the metadata is not valid JSON or does not describe exactly one
        condition variant.
    """

    json_file = zipper.read_entry(METADATA_FILENAME, "text")

    if json_file is None:
        raise MissingEntryError(f"Failed to read {METADATA_FILENAME} from zip file")

    try:
        metadata = BundleMetadata.model_validate_json(json_file)
    except ValidationError as e:
        logger.warning("Rejected bundle metadata: {}", e)
        raise InvalidMetadataError(f"Invalid {METADATA_FILENAME}: {e}") from e

    logger.info("zip metadata: {}", metadata)

    return metadata


def decrypt_zip_file_with_metadata(
    service: EncryptionService,
    data: bytes,
    session_sigs: dict | None = None,
) -> DecryptedFileWithMetadata:
    """
    Given a bundle made with `encrypt_file_and_zip_with_metadata`, load the
    metadata and decrypt the file it describes. The conditions, chain and hash
    used for decryption come from the metadata, not the caller.

    Arguments
    ---------
    service : EncryptionService
        The service to decrypt with.
    data : bytes
        The bundle archive.
    session_sigs : dict, optional
        Session signatures proving the caller's identity to the service.

    Returns
    -------
    DecryptedFileWithMetadata
        The decrypted file contents and the bundle metadata.

    Raises
    ------
    ArchiveFormatError
        If ``data`` is not a zip archive.
    MissingEntryError
        If the metadata or the encrypted file are missing from the bundle.
    InvalidMetadataError
        If the metadata cannot be validated.
    ExternalServiceError
        If the service refuses or fails to decrypt.
    """

    zipper = ZipCompressor.load(data)

    metadata = read_bundle_metadata(zipper)

    encrypted_file = zipper.read_entry(f"{ASSETS_PREFIX}{metadata.name}", "binary")

    if encrypted_file is None:
        raise MissingEntryError(
            f"Failed to get {ASSETS_PREFIX}{metadata.name} from zip file"
        )

    decrypted_file = service.decrypt(
        DecryptRequest(
            ciphertext=base64.b64encode(encrypted_file).decode("ascii"),
            conditions=metadata.conditions,
            chain=metadata.chain,
            data_to_encrypt_hash=metadata.data_to_encrypt_hash,
            session_sigs=session_sigs or {},
        )
    )

    return DecryptedFileWithMetadata(decrypted_file=decrypted_file, metadata=metadata)
