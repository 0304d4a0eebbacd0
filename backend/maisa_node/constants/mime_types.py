"""Extension to MIME type table used for downloaded worker files."""

from __future__ import annotations

DEFAULT_MIME_TYPE = "application/octet-stream"

MIME_TYPES: dict[str, str] = {
    "pdf": "application/pdf",
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "txt": "text/plain",
    "json": "application/json",
    "xml": "application/xml",
    "csv": "text/csv",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


def get_mime_type(file_name: str) -> str:
    """Return the MIME type for ``file_name`` based on its extension only.

    A bare name without a dot (``"pdf"``) has no extension and maps to the default.
    """

    if not file_name or "." not in file_name:
        return DEFAULT_MIME_TYPE
    extension = file_name.rsplit(".", 1)[-1].lower()
    return MIME_TYPES.get(extension, DEFAULT_MIME_TYPE)
