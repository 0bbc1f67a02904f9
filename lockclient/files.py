import mimetypes
from pathlib import Path

import xxhash
from pydantic import BaseModel, field_validator

DEFAULT_MIME_TYPE = "application/octet-stream"


def checksum(data: bytes) -> str:
    return f"xxh64:{xxhash.xxh64(data).hexdigest()}"


class BundleFile(BaseModel):
    """
    A file to be placed in a bundle: its name, MIME type and contents.
    """

    name: str
    type: str = DEFAULT_MIME_TYPE
    content: bytes

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        if not value or value.endswith("/"):
            raise ValueError(f"File name {value!r} must be non-empty and not a directory")

        return value

    @classmethod
    def from_path(cls, path: Path, name: str | None = None) -> "BundleFile":
        path = Path(path)
        mime_type, _ = mimetypes.guess_type(path.name)

        return cls(
            name=name or path.name,
            type=mime_type or DEFAULT_MIME_TYPE,
            content=path.read_bytes(),
        )

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def checksum(self) -> str:
        return checksum(self.content)

    def __repr__(self):
        return f"BundleFile(name='{self.name}', type='{self.type}', size={self.size})"


def file_info(filename: Path, description: str | None = None) -> dict:
    with open(filename, "rb") as handle:
        return {
            "name": filename.name,
            "size": filename.stat().st_size,
            "checksum": checksum(handle.read()),
            "description": description,
        }
