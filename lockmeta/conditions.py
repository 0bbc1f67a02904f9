"""
The access-control condition systems understood by the encryption network.

Exactly one of these is used to lock a payload. The individual conditions
are evaluated by the network and are opaque to us; we only carry them around
and make sure the same variant is handed back at decryption time.
"""

from typing import Annotated, Literal, Union

from pydantic import Field

from .base import BaseConditions


class AccessControlConditions(BaseConditions):
    """
    Default (contract-call based) access-control conditions.
    """

    kind: Literal["accessControlConditions"] = "accessControlConditions"


class EvmContractConditions(BaseConditions):
    """
    Conditions evaluated against an arbitrary EVM contract ABI.
    """

    kind: Literal["evmContractConditions"] = "evmContractConditions"


class SolRpcConditions(BaseConditions):
    """
    Conditions evaluated through Solana RPC calls.
    """

    kind: Literal["solRpcConditions"] = "solRpcConditions"


class UnifiedAccessControlConditions(BaseConditions):
    """
    Cross-chain conditions, where each condition names its own condition type.
    """

    kind: Literal["unifiedAccessControlConditions"] = "unifiedAccessControlConditions"


ALL_CONDITIONS = [
    AccessControlConditions,
    EvmContractConditions,
    SolRpcConditions,
    UnifiedAccessControlConditions,
]

ALL_CONDITIONS_TYPE = Annotated[
    Union[
        AccessControlConditions,
        EvmContractConditions,
        SolRpcConditions,
        UnifiedAccessControlConditions,
    ],
    Field(discriminator="kind"),
]

CONDITION_KINDS: dict[str, type[BaseConditions]] = {
    c.model_fields["kind"].default: c for c in ALL_CONDITIONS
}


def user_address_condition(address: str, chain: str) -> AccessControlConditions:
    """
    The simplest useful lock: only the wallet at ``address`` may decrypt.
    """
    return AccessControlConditions(
        conditions=[
            {
                "contractAddress": "",
                "standardContractType": "",
                "chain": chain,
                "method": "",
                "parameters": [":userAddress"],
                "returnValueTest": {
                    "comparator": "=",
                    "value": address,
                },
            }
        ]
    )
