"""
A CLI interface to the lockbox client.
"""

import json
import os
from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich.console import Console

from lockbox import Lockbox
from lockmeta import (
    ALL_CONDITIONS_TYPE,
    CONDITION_KINDS,
    METADATA_FILENAME,
    user_address_condition,
)

from . import bundles
from .compressor import ZipCompressor
from .core import ClientSettings
from .exceptions import BundleError
from .files import BundleFile, checksum, file_info

SETTINGS: ClientSettings | None = None
CONSOLE = Console()

# Meta-setup
APP = typer.Typer(help="Zip files up and lock them behind access-control conditions")
demo_app = typer.Typer(
    help="Round-trip demonstrations that encrypt, decrypt and validate a payload."
)
APP.add_typer(demo_app, name="demo")

AddressOption = Annotated[
    Optional[str],
    typer.Option(help="Wallet address allowed to decrypt. Random if not given."),
]
ConditionsOption = Annotated[
    Optional[Path],
    typer.Option(
        help="JSON file with one condition variant, e.g. {\"accessControlConditions\": [...]}"
    ),
]
SessionSigsOption = Annotated[
    Optional[Path],
    typer.Option(help="JSON file with the session signatures used to decrypt"),
]


def load_conditions(path: Path) -> ALL_CONDITIONS_TYPE:
    """
    Read a condition variant from a JSON file holding a single
    ``{<variant name>: [conditions...]}`` object.
    """
    content = json.loads(path.read_text())

    if not isinstance(content, dict) or len(content) != 1:
        raise typer.BadParameter(
            f"{path} must hold exactly one of {', '.join(CONDITION_KINDS)}"
        )

    ((kind, conditions),) = content.items()

    if kind not in CONDITION_KINDS:
        raise typer.BadParameter(f"Unknown condition variant {kind} in {path}")

    try:
        return CONDITION_KINDS[kind](conditions=conditions)
    except ValidationError as e:
        raise typer.BadParameter(f"Invalid conditions in {path}: {e}")


def make_lockbox(session_sigs: Path | None = None) -> Lockbox:
    global SETTINGS, CONSOLE

    settings = SETTINGS or ClientSettings()

    return Lockbox(
        settings=settings,
        console=CONSOLE,
        session_sigs=json.loads(session_sigs.read_text()) if session_sigs else None,
    )


def make_conditions(
    lockbox: Lockbox, address: str | None, conditions: Path | None
) -> ALL_CONDITIONS_TYPE:
    if conditions is not None:
        return load_conditions(conditions)

    if address is None:
        address = "0x" + os.urandom(20).hex()
        CONSOLE.print(f"Locking to random address {address}")

    return user_address_condition(address, lockbox.chain)


def report_mismatch(message: str):
    CONSOLE.print(message, style="bold red")
    raise typer.Exit(code=1)


@demo_app.command("string")
def demo_string(
    message: str = "Hello World!",
    address: AddressOption = None,
    conditions: ConditionsOption = None,
    session_sigs: SessionSigsOption = None,
):
    """
    Zip and encrypt a string, then decrypt it and check it survived.
    """
    lockbox = make_lockbox(session_sigs)
    locked_with = make_conditions(lockbox, address, conditions)

    encrypted = lockbox.lock_string(message, locked_with)
    CONSOLE.print(encrypted)

    decrypted = lockbox.unlock_string(encrypted, locked_with)

    if decrypted != message:
        report_mismatch(
            f"decryptedMessage should be {message} but received {decrypted}"
        )

    CONSOLE.print(f"decryptedMessage validated: {decrypted}", style="bold green")


@demo_app.command("files")
def demo_files(
    files: list[Path],
    address: AddressOption = None,
    conditions: ConditionsOption = None,
    session_sigs: SessionSigsOption = None,
):
    """
    Zip and encrypt several files as one ciphertext, then decrypt them and
    compare sizes and checksums against the originals.
    """
    lockbox = make_lockbox(session_sigs)
    locked_with = make_conditions(lockbox, address, conditions)

    originals = [BundleFile.from_path(path) for path in files]

    encrypted = lockbox.lock_files(originals, locked_with)
    CONSOLE.print(encrypted)

    decrypted = lockbox.unlock_files(encrypted, locked_with)

    for original in originals:
        if original.name not in decrypted:
            report_mismatch(f"Expected {original.name} in the decrypted files")

        content = decrypted[original.name]

        if len(content) != original.size:
            report_mismatch(
                f"Expected {original.name} to be {original.size} bytes, but got {len(content)}"
            )

        if checksum(content) != original.checksum:
            report_mismatch(
                f"File hashes do not match! Original: {original.checksum}, Decrypted: {checksum(content)}"
            )

        CONSOLE.print(f"file validated: {original.name}", style="bold green")


@demo_app.command("bundle")
def demo_bundle(
    file: Path,
    address: AddressOption = None,
    conditions: ConditionsOption = None,
    session_sigs: SessionSigsOption = None,
):
    """
    Encrypt a file into a bundle with its metadata, then decrypt the bundle
    and check the metadata and contents.
    """
    lockbox = make_lockbox(session_sigs)
    locked_with = make_conditions(lockbox, address, conditions)

    original = BundleFile.from_path(file)

    result = lockbox.unbundle_file(lockbox.bundle_file(original, locked_with))

    if result.metadata.chain != lockbox.chain:
        report_mismatch(
            f"Expected metadata chain to be {lockbox.chain}, but got {result.metadata.chain}"
        )

    if result.metadata.name != original.name:
        report_mismatch(
            f"Expected metadata name to be {original.name}, but got {result.metadata.name}"
        )

    if len(result.decrypted_file) != original.size:
        report_mismatch(
            f"Expected decrypted file to be {original.size} bytes, but got {len(result.decrypted_file)}"
        )

    if checksum(result.decrypted_file) != original.checksum:
        report_mismatch(
            f"File hashes do not match! Original: {original.checksum}, Decrypted: {checksum(result.decrypted_file)}"
        )

    CONSOLE.print(f"file validated: {original.name}", style="bold green")


@APP.command("encrypt")
def encrypt(
    file: Path,
    out: Annotated[
        Optional[Path], typer.Option(help="Where to write the bundle (default FILE.zip)")
    ] = None,
    readme: Annotated[
        Optional[str], typer.Option(help="Free text stored in the bundle as readme.txt")
    ] = None,
    address: AddressOption = None,
    conditions: ConditionsOption = None,
):
    """
    Encrypt a file into a bundle carrying the metadata needed to decrypt it.
    """
    lockbox = make_lockbox()
    locked_with = make_conditions(lockbox, address, conditions)

    bundle = lockbox.bundle_file(BundleFile.from_path(file), locked_with, readme=readme)

    out = out or file.with_name(file.name + ".zip")
    out.write_bytes(bundle)

    CONSOLE.print(f"Wrote bundle to {out}", style="bold green")


@APP.command("decrypt")
def decrypt(
    bundle: Path,
    out_dir: Annotated[
        Path, typer.Option(help="Directory to write the decrypted file to")
    ] = Path("."),
    session_sigs: SessionSigsOption = None,
):
    """
    Decrypt a bundle made with the encrypt command.
    """
    lockbox = make_lockbox(session_sigs)

    result = lockbox.unbundle_file(bundle.read_bytes())

    out_dir.mkdir(parents=True, exist_ok=True)
    destination = out_dir / Path(result.metadata.name).name
    destination.write_bytes(result.decrypted_file)

    info = file_info(destination)
    CONSOLE.print(
        f"Decrypted {info['name']} ({info['size']} bytes, {info['checksum']}) to {destination}",
        style="bold green",
    )


@APP.command("inspect")
def inspect(bundle: Path):
    """
    Show the metadata and entries of a bundle without decrypting it.
    """
    zipper = ZipCompressor.load(bundle.read_bytes())

    metadata = bundles.read_bundle_metadata(zipper)

    CONSOLE.print(METADATA_FILENAME, style="bold underline color(3)")
    CONSOLE.print(metadata)
    CONSOLE.print("\n" + "Entries" + "\n", style="bold color(2)")

    for path in zipper.entries:
        if not zipper.is_directory(path):
            CONSOLE.print(path)


def main():
    global SETTINGS

    SETTINGS = ClientSettings()

    try:
        APP()
    except BundleError as e:
        CONSOLE.print(f"{type(e).__name__}: {e}", style="bold red")
        raise SystemExit(1)
