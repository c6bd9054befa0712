"""Shared data type definitions (FileRecord)."""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class FileRecord:
    """
    Metadata for a file that has been promoted into the storage directory.

    ``name`` is the name actually used on disk, which may carry a ``_<n>``
    suffix when the requested ``original_name`` was already taken.
    """
    id: str
    name: str
    original_name: str
    size: int
    mime_type: str
    relative_path: str
    uploaded_at: str
    size_formatted: str

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the camelCase wire shape."""
        return {
            "id": self.id,
            "name": self.name,
            "originalName": self.original_name,
            "size": self.size,
            "mimeType": self.mime_type,
            "relativePath": self.relative_path,
            "uploadedAt": self.uploaded_at,
            "sizeFormatted": self.size_formatted,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileRecord":
        """Deserialize from the camelCase wire shape."""
        return cls(
            id=data["id"],
            name=data["name"],
            original_name=data.get("originalName", data["name"]),
            size=int(data["size"]),
            mime_type=data.get("mimeType", "application/octet-stream"),
            relative_path=data.get("relativePath", ""),
            uploaded_at=data.get("uploadedAt", ""),
            size_formatted=data.get("sizeFormatted", ""),
        )
