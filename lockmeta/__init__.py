"""
Models for the lockbox bundle format: access-control condition variants and
the metadata record stored next to an encrypted file.
"""

from .base import BaseConditions
from .bundle import METADATA_FILENAME, BundleMetadata
from .conditions import (
    ALL_CONDITIONS,
    ALL_CONDITIONS_TYPE,
    CONDITION_KINDS,
    AccessControlConditions,
    EvmContractConditions,
    SolRpcConditions,
    UnifiedAccessControlConditions,
    user_address_condition,
)

__all__ = [
    "ALL_CONDITIONS",
    "ALL_CONDITIONS_TYPE",
    "CONDITION_KINDS",
    "METADATA_FILENAME",
    "AccessControlConditions",
    "BaseConditions",
    "BundleMetadata",
    "EvmContractConditions",
    "SolRpcConditions",
    "UnifiedAccessControlConditions",
    "user_address_condition",
]
