"""Error taxonomy for the Maisa Worker pipeline."""

from __future__ import annotations

from typing import Any


class MaisaWorkerError(Exception):
    """Base class for every failure that aborts processing of one item."""


class TransportError(MaisaWorkerError):
    """Network failure, non-2xx status or a body that could not be decoded."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AttachmentNotFound(MaisaWorkerError):
    def __init__(self, property_name: str, item_index: int) -> None:
        super().__init__(f"No binary data property {property_name!r} found on item {item_index}")
        self.property_name = property_name
        self.item_index = item_index


class Timeout(MaisaWorkerError):
    def __init__(self, timeout: float) -> None:
        super().__init__(f"Worker execution timed out after {timeout:g} seconds")
        self.timeout = timeout


class RemoteFailure(MaisaWorkerError):
    """Terminal status reported a failed execution (only raised in strict mode)."""

    def __init__(self, execution_id: str, status: Any, payload: dict[str, Any] | None = None) -> None:
        super().__init__(f"MAISA_EXECUTION_{str(status).upper()}:{execution_id}")
        self.execution_id = execution_id
        self.status = status
        self.payload = payload or {}


class InvalidParameter(MaisaWorkerError):
    """A required node parameter is missing or has an unsupported value."""
