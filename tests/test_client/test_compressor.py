"""
Tests the in-memory zip archive.
"""

import io
import zipfile

import pytest

from lockclient.compressor import ZipCompressor, parent_directories
from lockclient.exceptions import ArchiveFormatError, EntryDecodeError


def test_read_back_after_load():
    zipper = ZipCompressor()
    zipper.add_entry("a.txt", "hello")

    loaded = ZipCompressor.load(zipper.serialize())

    assert loaded.read_entry("a.txt", "text") == "hello"
    assert loaded.read_entry("missing.txt", "text") is None


def test_overwrite_last_write_wins():
    zipper = ZipCompressor()
    zipper.add_entry("a.txt", "first")
    zipper.add_entry("a.txt", b"second")

    assert zipper.read_entry("a.txt") == "second"
    assert len(zipper) == 1


def test_empty_content():
    zipper = ZipCompressor()
    zipper.add_entry("empty.bin", b"")

    loaded = ZipCompressor.load(zipper.serialize())

    assert loaded.read_entry("empty.bin", "binary") == b""


def test_nested_entries_create_directory_markers():
    zipper = ZipCompressor()
    zipper.add_entry("encryptedAssets/deep/file.bin", b"\x00\x01")

    assert zipper.entries == [
        "encryptedAssets/",
        "encryptedAssets/deep/",
        "encryptedAssets/deep/file.bin",
    ]

    # Directory markers are not readable entries
    assert zipper.read_entry("encryptedAssets/", "binary") is None

    entries = ZipCompressor.load(zipper.serialize()).read_all_entries()

    assert entries["encryptedAssets/"] == b""
    assert entries["encryptedAssets/deep/file.bin"] == b"\x00\x01"
    assert [k for k in entries if not ZipCompressor.is_directory(k)] == [
        "encryptedAssets/deep/file.bin"
    ]


def test_parent_directories():
    assert parent_directories("a.txt") == []
    assert parent_directories("a/b/c.txt") == ["a/", "a/b/"]


def test_directory_cannot_carry_content():
    with pytest.raises(ValueError):
        ZipCompressor().add_entry("folder/", b"data")


def test_serialize_load_is_lossless():
    zipper = ZipCompressor()
    zipper.add_entry("text.txt", "Grüße, 世界")
    zipper.add_entry("bin/blob", bytes(range(256)))
    zipper.add_entry("bin/empty", b"")

    loaded = ZipCompressor.load(zipper.serialize())

    assert loaded.read_all_entries() == zipper.read_all_entries()
    assert loaded.read_entry("text.txt") == "Grüße, 世界"


def test_serialize_is_deterministic():
    def build():
        zipper = ZipCompressor()
        zipper.add_entry("x/y.txt", "same")
        return zipper.serialize()

    assert build() == build()


def test_serialized_bytes_are_a_standard_zip():
    zipper = ZipCompressor()
    zipper.add_entry("encryptedAssets/a.bin", b"abc")

    with zipfile.ZipFile(io.BytesIO(zipper.serialize())) as zipf:
        assert zipf.namelist() == ["encryptedAssets/", "encryptedAssets/a.bin"]
        assert zipf.read("encryptedAssets/a.bin") == b"abc"


def test_load_foreign_zip():
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zipf:
        zipf.writestr("readme.txt", "made elsewhere")

    loaded = ZipCompressor.load(buffer.getvalue())

    assert loaded.read_entry("readme.txt") == "made elsewhere"
    assert "readme.txt" in loaded


def test_text_read_of_binary_entry():
    zipper = ZipCompressor()
    zipper.add_entry("blob", b"\xff\xfe\xfd")

    assert zipper.read_entry("blob", "binary") == b"\xff\xfe\xfd"

    with pytest.raises(EntryDecodeError):
        zipper.read_entry("blob", "text")


def test_unknown_read_mode():
    zipper = ZipCompressor()
    zipper.add_entry("a.txt", "hello")

    with pytest.raises(ValueError):
        zipper.read_entry("a.txt", "blob")


@pytest.mark.parametrize(
    "data", [b"", b"definitely not a zip", b"PK\x03\x04 truncated header"]
)
def test_load_rejects_garbage(data):
    with pytest.raises(ArchiveFormatError):
        ZipCompressor.load(data)


def stored_zip(name: str, content: bytes) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zipf:
        zipf.writestr(zipfile.ZipInfo(name, date_time=(1980, 1, 1, 0, 0, 0)), content)
    return buffer.getvalue()


def set_central_directory_flag(data: bytes, flag: int) -> bytes:
    offset = data.index(b"PK\x01\x02") + 8
    flags = int.from_bytes(data[offset : offset + 2], "little") | flag
    return data[:offset] + flags.to_bytes(2, "little") + data[offset + 2 :]


def test_load_rejects_invalid_utf8_name():
    data = stored_zip("NAMEXX", b"zz").replace(b"NAMEXX", b"\xff\xfeNAME")

    with pytest.raises(ArchiveFormatError):
        ZipCompressor.load(set_central_directory_flag(data, 0x800))


def test_load_rejects_encrypted_entry():
    data = set_central_directory_flag(stored_zip("secret.txt", b"zz"), 0x1)

    with pytest.raises(ArchiveFormatError):
        ZipCompressor.load(data)


def test_load_corrupted_archive():
    zipper = ZipCompressor()
    zipper.add_entry("encryptedAssets/a.txt", "hello " * 10)
    zipper.add_entry("string.txt", b"\x00\x01\x02")
    data = zipper.serialize()

    # Every single-byte corruption either still loads or is a format error
    for position in range(len(data)):
        corrupted = bytearray(data)
        corrupted[position] ^= 0xFF

        try:
            ZipCompressor.load(bytes(corrupted))
        except ArchiveFormatError:
            pass
