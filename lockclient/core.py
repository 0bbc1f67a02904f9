"""
Client settings and the factories for the encryption service.
"""

import httpx
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from .local import LocalEncryptionService
from .service import EncryptionService, RemoteEncryptionService


def Client(
    host: str,
    api_key: str | None,
    timeout: int | None = None,
) -> httpx.Client:
    headers = {"X-API-Key": api_key} if api_key else None
    return httpx.Client(
        base_url=host, headers=headers, timeout=httpx.Timeout(timeout or 60)
    )


class ClientSettings(BaseSettings):
    """
    Main settings for the lockbox client. Used to configure:

    1. Which encryption service to use (remote gateway or local stand-in).
    2. Access to the remote service (host, key, timeout).
    3. Defaults for locking (chain).
    4. Verbosity.
    """

    host: str = "http://localhost:8000"
    "The URL of the encryption service gateway"
    api_key: str | None = None
    "API key sent to the encryption service gateway"
    client_timeout: int = 60
    "The timeout for the client in seconds. Encryption networks are slow, so longer than the httpx default"
    network: str = "datil-dev"
    "The encryption network the gateway talks to, recorded for reference"
    chain: str = "ethereum"
    "Default chain that access-control conditions are evaluated on"
    verbose: bool = False
    "Verbosity control: set to true for extra info"

    local: bool = False
    "Use the in-process encryption service instead of the remote gateway"
    local_key: str | None = None
    "Base64-encoded 256-bit key for the local service. A fresh key is generated when unset"

    model_config = SettingsConfigDict(
        json_file=("config.json", "~/.lockbox.conf"), env_prefix="lockbox_"
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: BaseSettings,
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            dotenv_settings,
            env_settings,
            JsonConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    @property
    def client(self) -> httpx.Client:
        """
        Return an HTTP client for the remote service.
        """
        return Client(host=self.host, api_key=self.api_key, timeout=self.client_timeout)

    @property
    def service(self) -> EncryptionService:
        """
        Return the configured encryption service.
        """
        if self.local:
            if self.local_key:
                return LocalEncryptionService.from_base64(self.local_key)
            return LocalEncryptionService()

        return RemoteEncryptionService(client=self.client)
