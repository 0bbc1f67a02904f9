"""
Metadata written alongside an encrypted file inside a bundle archive.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from .conditions import ALL_CONDITIONS_TYPE

METADATA_FILENAME = "lit_protocol_metadata.json"

CONDITIONS_ADAPTER = TypeAdapter(ALL_CONDITIONS_TYPE)

# Condition kind (the JSON key) to the attribute that holds it.
CONDITION_FIELDS = {
    "accessControlConditions": "access_control_conditions",
    "evmContractConditions": "evm_contract_conditions",
    "solRpcConditions": "sol_rpc_conditions",
    "unifiedAccessControlConditions": "unified_access_control_conditions",
}


class BundleMetadata(BaseModel):
    """
    Everything needed to decrypt the single encrypted file stored in a bundle:
    what the file was, how it was locked, and the hash the network will check
    the ciphertext against.

    Exactly one of the condition fields is populated. The JSON representation
    uses the camelCase keys of the bundle format and omits the unused
    condition variants.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str
    "Original file name; the ciphertext lives at encryptedAssets/<name>"
    type: str
    "MIME type of the original file"
    size: int
    "Size of the original file in bytes"

    access_control_conditions: list[dict[str, Any]] | None = Field(
        default=None, alias="accessControlConditions"
    )
    evm_contract_conditions: list[dict[str, Any]] | None = Field(
        default=None, alias="evmContractConditions"
    )
    sol_rpc_conditions: list[dict[str, Any]] | None = Field(
        default=None, alias="solRpcConditions"
    )
    unified_access_control_conditions: list[dict[str, Any]] | None = Field(
        default=None, alias="unifiedAccessControlConditions"
    )

    chain: str
    "Chain the conditions are evaluated on"
    data_to_encrypt_hash: str = Field(alias="dataToEncryptHash")
    "Hash returned by the network at encryption time"

    @model_validator(mode="after")
    def check_single_condition_variant(self) -> "BundleMetadata":
        present = [
            kind
            for kind, attribute in CONDITION_FIELDS.items()
            if getattr(self, attribute) is not None
        ]

        if len(present) != 1:
            raise ValueError(
                f"Exactly one access-control condition variant must be present, found {present or 'none'}"
            )

        if not getattr(self, CONDITION_FIELDS[present[0]]):
            raise ValueError(f"{present[0]} must contain at least one condition")

        return self

    @property
    def conditions(self) -> ALL_CONDITIONS_TYPE:
        """
        The populated condition variant as a tagged-union member.
        """
        for kind, attribute in CONDITION_FIELDS.items():
            value = getattr(self, attribute)
            if value is not None:
                return CONDITIONS_ADAPTER.validate_python(
                    {"kind": kind, "conditions": value}
                )

    @classmethod
    def from_conditions(
        cls,
        name: str,
        type: str,
        size: int,
        conditions: ALL_CONDITIONS_TYPE,
        chain: str,
        data_to_encrypt_hash: str,
    ) -> "BundleMetadata":
        return cls(
            name=name,
            type=type,
            size=size,
            chain=chain,
            data_to_encrypt_hash=data_to_encrypt_hash,
            **{CONDITION_FIELDS[conditions.kind]: conditions.conditions},
        )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)
