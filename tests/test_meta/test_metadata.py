"""
Tests the condition variants and the bundle metadata record.
"""

import json

import pytest
from pydantic import TypeAdapter, ValidationError

from lockmeta import (
    ALL_CONDITIONS_TYPE,
    CONDITION_KINDS,
    AccessControlConditions,
    BundleMetadata,
    UnifiedAccessControlConditions,
    user_address_condition,
)

HASH = "9f86d081884c7d659a2feaa0c55ad015a3bf4f1b2b0b822cd15d6c15b0f00a08"


def metadata_json(**overrides) -> dict:
    base = {
        "name": "report.pdf",
        "type": "application/pdf",
        "size": 1234,
        "accessControlConditions": user_address_condition("0xabc", "ethereum").conditions,
        "chain": "ethereum",
        "dataToEncryptHash": HASH,
    }
    base.update(overrides)
    return base


def test_user_address_condition():
    conditions = user_address_condition("0xabc", "polygon")

    assert conditions.kind == "accessControlConditions"
    assert conditions.conditions[0]["chain"] == "polygon"
    assert conditions.conditions[0]["parameters"] == [":userAddress"]
    assert conditions.conditions[0]["returnValueTest"] == {
        "comparator": "=",
        "value": "0xabc",
    }


def test_condition_kinds():
    assert set(CONDITION_KINDS) == {
        "accessControlConditions",
        "evmContractConditions",
        "solRpcConditions",
        "unifiedAccessControlConditions",
    }


def test_discriminated_union():
    adapter = TypeAdapter(ALL_CONDITIONS_TYPE)

    parsed = adapter.validate_python(
        {"kind": "unifiedAccessControlConditions", "conditions": [{"operator": "or"}]}
    )

    assert isinstance(parsed, UnifiedAccessControlConditions)

    with pytest.raises(ValidationError):
        adapter.validate_python({"kind": "madeUpConditions", "conditions": [{}]})


def test_conditions_must_not_be_empty():
    with pytest.raises(ValidationError):
        AccessControlConditions(conditions=[])


def test_metadata_from_json():
    metadata = BundleMetadata.model_validate_json(json.dumps(metadata_json()))

    assert metadata.name == "report.pdf"
    assert metadata.data_to_encrypt_hash == HASH
    assert metadata.conditions == user_address_condition("0xabc", "ethereum")


def test_metadata_size_as_string():
    metadata = BundleMetadata.model_validate(metadata_json(size="1234"))

    assert metadata.size == 1234


def test_metadata_round_trip():
    conditions = UnifiedAccessControlConditions(
        conditions=[{"conditionType": "solRpc", "method": "getBalance"}]
    )

    metadata = BundleMetadata.from_conditions(
        name="a.bin",
        type="application/octet-stream",
        size=3,
        conditions=conditions,
        chain="solana",
        data_to_encrypt_hash=HASH,
    )

    written = json.loads(metadata.to_json())

    assert "unifiedAccessControlConditions" in written
    assert "accessControlConditions" not in written
    assert written["dataToEncryptHash"] == HASH

    assert BundleMetadata.model_validate_json(metadata.to_json()) == metadata
    assert BundleMetadata.model_validate_json(metadata.to_json()).conditions == conditions


def test_metadata_requires_a_condition_variant():
    content = metadata_json()
    del content["accessControlConditions"]

    with pytest.raises(ValidationError):
        BundleMetadata.model_validate(content)


def test_metadata_rejects_two_condition_variants():
    with pytest.raises(ValidationError):
        BundleMetadata.model_validate(
            metadata_json(evmContractConditions=[{"contractAddress": "0x0"}])
        )


def test_metadata_rejects_empty_condition_variant():
    with pytest.raises(ValidationError):
        BundleMetadata.model_validate(metadata_json(accessControlConditions=[]))


def test_metadata_null_variants_are_ignored():
    metadata = BundleMetadata.model_validate(
        metadata_json(evmContractConditions=None, solRpcConditions=None)
    )

    assert metadata.conditions.kind == "accessControlConditions"
