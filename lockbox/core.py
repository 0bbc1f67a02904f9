from rich.console import Console

from lockclient import bundles
from lockclient.bundles import DecryptedFileWithMetadata
from lockclient.core import ClientSettings
from lockclient.files import BundleFile
from lockclient.service import DecryptRequest, EncryptionService, EncryptResponse
from lockmeta import ALL_CONDITIONS_TYPE


class Lockbox:
    settings: ClientSettings
    service: EncryptionService
    console: Console
    chain: str
    session_sigs: dict

    def __init__(
        self,
        *,
        settings: ClientSettings | None = None,
        service: EncryptionService | None = None,
        console: Console | None = None,
        session_sigs: dict | None = None,
    ):
        self.settings = settings or ClientSettings()
        self.console = console or Console(quiet=(not self.settings.verbose))
        self.service = service or self.settings.service
        self.chain = self.settings.chain
        self.session_sigs = session_sigs or {}

        return

    def _request(self, encrypted: EncryptResponse, conditions: ALL_CONDITIONS_TYPE):
        return DecryptRequest(
            ciphertext=encrypted.ciphertext,
            conditions=conditions,
            chain=self.chain,
            data_to_encrypt_hash=encrypted.data_to_encrypt_hash,
            session_sigs=self.session_sigs,
        )

    def lock_string(
        self, data: str, conditions: ALL_CONDITIONS_TYPE
    ) -> EncryptResponse:
        encrypted = bundles.zip_and_encrypt_string(
            self.service, data, conditions=conditions, chain=self.chain
        )
        self.console.print(f"Locked string ({len(data)} characters)")
        return encrypted

    def unlock_string(
        self, encrypted: EncryptResponse, conditions: ALL_CONDITIONS_TYPE
    ) -> str:
        return bundles.decrypt_zipped_string(
            self.service, self._request(encrypted, conditions)
        )

    def lock_files(
        self, files: list[BundleFile], conditions: ALL_CONDITIONS_TYPE
    ) -> EncryptResponse:
        encrypted = bundles.zip_and_encrypt_files(
            self.service, files, conditions=conditions, chain=self.chain
        )
        self.console.print(f"Locked {len(files)} files together")
        return encrypted

    def unlock_files(
        self, encrypted: EncryptResponse, conditions: ALL_CONDITIONS_TYPE
    ) -> dict[str, bytes]:
        return bundles.decrypt_zipped_files(
            self.service, self._request(encrypted, conditions)
        )

    def bundle_file(
        self,
        file: BundleFile,
        conditions: ALL_CONDITIONS_TYPE,
        readme: str | None = None,
    ) -> bytes:
        bundle = bundles.encrypt_file_and_zip_with_metadata(
            self.service, file, conditions=conditions, chain=self.chain, readme=readme
        )
        self.console.print(f"Bundled {file.name} ({len(bundle)} bytes)")
        return bundle

    def unbundle_file(self, bundle: bytes) -> DecryptedFileWithMetadata:
        return bundles.decrypt_zip_file_with_metadata(
            self.service, bundle, session_sigs=self.session_sigs
        )
