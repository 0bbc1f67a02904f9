"""
The encryption service that bundles are locked with.

Encryption, decryption, hashing and evaluation of access-control conditions
all happen in the service; we only hand it bytes and conditions and take back
ciphertext (or plaintext).
"""

import base64
import binascii
from abc import ABC, abstractmethod
from typing import Any

import httpx
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from lockmeta import ALL_CONDITIONS_TYPE

from .exceptions import ExternalServiceError


class EncryptResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ciphertext: str
    "Base64-encoded ciphertext"
    data_to_encrypt_hash: str = Field(alias="dataToEncryptHash")
    "Hash of the plaintext, checked by the service at decryption time"

    @field_validator("ciphertext")
    @classmethod
    def check_base64(cls, value: str) -> str:
        try:
            base64.b64decode(value, validate=True)
        except binascii.Error as e:
            raise ValueError(f"ciphertext is not valid base64: {e}") from e

        return value


class DecryptRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ciphertext: str
    conditions: ALL_CONDITIONS_TYPE
    chain: str
    data_to_encrypt_hash: str = Field(alias="dataToEncryptHash")
    session_sigs: dict[str, Any] = Field(default_factory=dict, alias="sessionSigs")

    def to_wire(self) -> dict[str, Any]:
        """
        The request body, with the conditions keyed by their variant name.
        """
        return {
            "ciphertext": self.ciphertext,
            self.conditions.kind: self.conditions.conditions,
            "chain": self.chain,
            "dataToEncryptHash": self.data_to_encrypt_hash,
            "sessionSigs": self.session_sigs,
        }


class EncryptionService(ABC):
    @abstractmethod
    def encrypt(
        self, data: bytes, conditions: ALL_CONDITIONS_TYPE, chain: str
    ) -> EncryptResponse:
        """
        Encrypt ``data`` so that it can only be decrypted by someone meeting
        ``conditions`` on ``chain``.

        Raises
        ------
        ExternalServiceError
            If the service fails to encrypt.
        """

    @abstractmethod
    def decrypt(self, request: DecryptRequest) -> bytes:
        """
        Decrypt the ciphertext in ``request``.

        Raises
        ------
        ExternalServiceError
            If access is denied, the hash does not match, the session
            signatures are rejected, or the service cannot be reached.
        """


class RemoteEncryptionService(EncryptionService):
    """
    An encryption service reached over HTTP, e.g. a gateway in front of the
    encryption network.
    """

    def __init__(self, client: httpx.Client):
        self.client = client

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.client.close()

    def _post(self, endpoint: str, payload: dict[str, Any]) -> httpx.Response:
        try:
            response = self.client.post(endpoint, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ExternalServiceError(
                f"{endpoint} failed with status {e.response.status_code}: {e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"{endpoint} request failed: {e}") from e

        return response

    def encrypt(
        self, data: bytes, conditions: ALL_CONDITIONS_TYPE, chain: str
    ) -> EncryptResponse:
        logger.info("Requesting encryption of {} bytes on {}", len(data), chain)

        response = self._post(
            "/encrypt",
            {
                "dataToEncrypt": base64.b64encode(data).decode("ascii"),
                conditions.kind: conditions.conditions,
                "chain": chain,
            },
        )

        try:
            return EncryptResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise ExternalServiceError(f"Malformed encrypt response: {e}") from e

    def decrypt(self, request: DecryptRequest) -> bytes:
        logger.info(
            "Requesting decryption of ciphertext with hash {} on {}",
            request.data_to_encrypt_hash,
            request.chain,
        )

        response = self._post("/decrypt", request.to_wire())

        try:
            return base64.b64decode(response.json()["decryptedData"], validate=True)
        except (ValueError, KeyError, TypeError, binascii.Error) as e:
            raise ExternalServiceError(f"Malformed decrypt response: {e}") from e
