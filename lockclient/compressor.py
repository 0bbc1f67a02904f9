"""
In-memory archives used to build and read bundles.

The bundle logic only talks to the `Compressor` interface, so it never depends
on a particular container format. `ZipCompressor` is the implementation used
everywhere, backed by the standard library zip codec.
"""

import io
import struct
import zipfile
import zlib
from abc import ABC, abstractmethod
from typing import Literal

from loguru import logger

from .exceptions import ArchiveFormatError, EntryDecodeError

SEPARATOR = "/"

# Fixed so that the same entries always serialize to the same bytes.
ZIP_DATE_TIME = (1980, 1, 1, 0, 0, 0)


class Compressor(ABC):
    """
    A mutable collection of named entries. Entry names are slash-separated
    paths; names ending in a slash are directory markers and carry no content.
    """

    @classmethod
    @abstractmethod
    def load(cls, data: bytes) -> "Compressor":
        """
        Parse previously serialized bytes.

        Raises
        ------
        ArchiveFormatError
            If the bytes are not a well-formed archive.
        """

    @abstractmethod
    def add_entry(self, path: str, content: str | bytes) -> None:
        """
        Add (or overwrite) the entry at ``path``. Text is stored as UTF-8.
        """

    @abstractmethod
    def read_entry(
        self, path: str, mode: Literal["text", "binary"] = "text"
    ) -> str | bytes | None:
        """
        Read the entry at ``path``, or None if there is no such entry.

        Raises
        ------
        EntryDecodeError
            If ``mode`` is "text" and the entry is not valid UTF-8.
        """

    @abstractmethod
    def read_all_entries(self) -> dict[str, bytes]:
        """
        All entries keyed by path, directory markers included.
        """

    @abstractmethod
    def serialize(self) -> bytes:
        """
        The archive as bytes that `load` reads back losslessly.
        """

    @staticmethod
    def is_directory(path: str) -> bool:
        return path.endswith(SEPARATOR)


def parent_directories(path: str) -> list[str]:
    """
    Directory markers implied by ``path``, outermost first: ``a/b/c`` gives
    ``["a/", "a/b/"]``.
    """
    parts = path.rstrip(SEPARATOR).split(SEPARATOR)[:-1]
    return [SEPARATOR.join(parts[: i + 1]) + SEPARATOR for i in range(len(parts))]


class ZipCompressor(Compressor):
    def __init__(self):
        self._entries: dict[str, bytes] = {}

    @classmethod
    def load(cls, data: bytes) -> "ZipCompressor":
        compressor = cls()

        try:
            with zipfile.ZipFile(io.BytesIO(data)) as zipf:
                for info in zipf.infolist():
                    if info.is_dir():
                        compressor._entries[info.filename] = b""
                    else:
                        compressor._entries[info.filename] = zipf.read(info)
        except (
            zipfile.BadZipFile,
            zipfile.LargeZipFile,
            zlib.error,
            EOFError,
            NotImplementedError,
            ValueError,
            RuntimeError,
            IndexError,
            OverflowError,
            struct.error,
            OSError,
        ) as e:
            raise ArchiveFormatError(f"Data is not a readable zip archive: {e}") from e

        logger.debug("Loaded zip archive with {} entries", len(compressor))

        return compressor

    def add_entry(self, path: str, content: str | bytes) -> None:
        if isinstance(content, str):
            content = content.encode("utf-8")

        if self.is_directory(path) and content:
            raise ValueError(f"Directory entry {path} cannot carry content")

        for directory in parent_directories(path):
            self._entries.setdefault(directory, b"")

        self._entries[path] = bytes(content)

    def read_entry(
        self, path: str, mode: Literal["text", "binary"] = "text"
    ) -> str | bytes | None:
        if mode not in ("text", "binary"):
            raise ValueError(f"Unknown read mode {mode!r}, expected 'text' or 'binary'")

        if self.is_directory(path) or path not in self._entries:
            return None

        content = self._entries[path]

        if mode == "binary":
            return content

        try:
            return content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise EntryDecodeError(f"Entry {path} is not valid UTF-8 text") from e

    def read_all_entries(self) -> dict[str, bytes]:
        return dict(self._entries)

    def serialize(self) -> bytes:
        buffer = io.BytesIO()

        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zipf:
            for path, content in self._entries.items():
                info = zipfile.ZipInfo(filename=path, date_time=ZIP_DATE_TIME)
                info.create_system = 0

                if self.is_directory(path):
                    info.external_attr = (0o40755 << 16) | 0x10
                else:
                    info.compress_type = zipfile.ZIP_DEFLATED
                    info.external_attr = 0o644 << 16

                zipf.writestr(info, content)

        return buffer.getvalue()

    @property
    def entries(self) -> list[str]:
        return list(self._entries.keys())

    def __contains__(self, path: str) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self):
        return f"ZipCompressor(entries={self.entries!r})"
