"""
An in-process stand-in for the encryption network, for tests, demos and
offline use. AES-256-GCM with a single key; the access-control conditions,
chain and data hash are bound to the ciphertext as associated data, so asking
to decrypt under anything other than the original lock fails.
"""

import base64
import binascii
import hashlib
import json
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from loguru import logger

from lockmeta import ALL_CONDITIONS_TYPE

from .exceptions import ExternalServiceError
from .service import DecryptRequest, EncryptionService, EncryptResponse

NONCE_SIZE = 12  # 96 bits for AES-GCM standard
TAG_SIZE = 16
KEY_SIZE = 32


def data_hash(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def associated_data(
    conditions: ALL_CONDITIONS_TYPE, chain: str, data_to_encrypt_hash: str
) -> bytes:
    return json.dumps(
        {
            "kind": conditions.kind,
            "conditions": conditions.conditions,
            "chain": chain,
            "dataToEncryptHash": data_to_encrypt_hash,
        },
        sort_keys=True,
        separators=(",", ":"),
    ).encode("utf-8")


class LocalEncryptionService(EncryptionService):
    def __init__(self, key: bytes | None = None):
        if key is None:
            key = AESGCM.generate_key(bit_length=256)

        if len(key) != KEY_SIZE:
            raise ValueError("Key must be 256-bit (32 bytes)")

        self._aesgcm = AESGCM(key)

    @classmethod
    def from_base64(cls, key_b64: str) -> "LocalEncryptionService":
        return cls(key=base64.b64decode(key_b64))

    def encrypt(
        self, data: bytes, conditions: ALL_CONDITIONS_TYPE, chain: str
    ) -> EncryptResponse:
        digest = data_hash(data)
        nonce = os.urandom(NONCE_SIZE)

        sealed = self._aesgcm.encrypt(
            nonce, data, associated_data(conditions, chain, digest)
        )

        logger.debug("Locally encrypted {} bytes under {}", len(data), conditions.kind)

        return EncryptResponse(
            ciphertext=base64.b64encode(nonce + sealed).decode("ascii"),
            data_to_encrypt_hash=digest,
        )

    def decrypt(self, request: DecryptRequest) -> bytes:
        try:
            raw = base64.b64decode(request.ciphertext, validate=True)
        except binascii.Error as e:
            raise ExternalServiceError("Ciphertext is not valid base64") from e

        if len(raw) < NONCE_SIZE + TAG_SIZE:
            raise ExternalServiceError("Ciphertext is too short")

        try:
            data = self._aesgcm.decrypt(
                raw[:NONCE_SIZE],
                raw[NONCE_SIZE:],
                associated_data(
                    request.conditions, request.chain, request.data_to_encrypt_hash
                ),
            )
        except InvalidTag as e:
            raise ExternalServiceError(
                "Decryption refused: conditions, chain or data hash do not match the ciphertext"
            ) from e

        if data_hash(data) != request.data_to_encrypt_hash:
            raise ExternalServiceError("Decrypted data does not match its hash")

        logger.debug("Locally decrypted {} bytes", len(data))

        return data
