"""HTTP client for the Maisa Worker run/status/files API."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Iterable

from maisa_node.constants.mime_types import get_mime_type
from maisa_node.services.endpoints import ApiVariant, WorkerEndpoints
from maisa_node.services.errors import TransportError
from maisa_node.services.host import BinaryAttachment
from maisa_node.services.transport import WorkerTransport

DEFAULT_UPLOAD_NAME = "file"


@dataclass(slots=True)
class InputVariable:
    name: str
    value: str

    def as_dict(self) -> dict[str, str]:
        return {"name": self.name, "value": self.value}


@dataclass(slots=True)
class DownloadedFile:
    file_name: str
    data: bytes
    mime_type: str

    def describe(self) -> dict[str, Any]:
        return {"fileName": self.file_name, "mimeType": self.mime_type, "fileSize": len(self.data)}


def unwrap_envelope(payload: Any, variant: ApiVariant) -> Any:
    """Legacy responses wrap the interesting object in ``data``; runs responses do not."""

    if variant is ApiVariant.LEGACY and isinstance(payload, dict) and isinstance(payload.get("data"), dict):
        return payload["data"]
    return payload


class MaisaWorkerClient:
    def __init__(self, endpoints: WorkerEndpoints, transport: WorkerTransport) -> None:
        self.endpoints = endpoints
        self._transport = transport
        self._logger = logging.getLogger(__name__)

    @property
    def variant(self) -> ApiVariant:
        return self.endpoints.variant

    def submit(
        self,
        variables: Iterable[InputVariable],
        attachments: Iterable[BinaryAttachment] = (),
    ) -> tuple[str, Any]:
        """POST the run request. Returns ``(execution_id, parsed_body)``."""

        encoded = json.dumps([variable.as_dict() for variable in variables])
        # `(None, value)` keeps inputVariables a plain form field while forcing multipart.
        parts: list[tuple[str, tuple[Any, ...]]] = [("inputVariables", (None, encoded))]
        for attachment in attachments:
            parts.append(
                (
                    "files",
                    (
                        attachment.file_name or DEFAULT_UPLOAD_NAME,
                        attachment.data,
                        attachment.mime_type or get_mime_type(attachment.file_name or ""),
                    ),
                )
            )
        body = self._transport.request_json("POST", self.endpoints.submit, files=parts)
        execution_id = self._extract_execution_id(body)
        self._logger.info(
            "Submitted Maisa worker run execution_id=%s files=%d", execution_id, len(parts) - 1
        )
        return execution_id, body

    def _extract_execution_id(self, body: Any) -> str:
        candidate: Any = None
        if self.variant is ApiVariant.LEGACY:
            candidate = body.get("data") if isinstance(body, dict) else None
        else:
            candidate = body
        if isinstance(candidate, dict):
            candidate = candidate.get("id") or candidate.get("executionId")
        if candidate is None or isinstance(candidate, (dict, list)) or str(candidate).strip() == "":
            raise TransportError(f"MAISA_SUBMIT_NO_EXECUTION_ID body={str(body)[:300]!r}")
        return str(candidate)

    def get_status(self, execution_id: str) -> Any:
        return self._transport.request_json("GET", self.endpoints.status(execution_id))

    def get_status_payload(self, execution_id: str) -> dict[str, Any]:
        payload = unwrap_envelope(self.get_status(execution_id), self.variant)
        if not isinstance(payload, dict):
            raise TransportError(f"MAISA_STATUS_NOT_OBJECT:{str(payload)[:300]!r}")
        return payload

    def list_files(self, execution_id: str) -> Any:
        return self._transport.request_json("GET", self.endpoints.list_files(execution_id))

    def list_output_files(self, execution_id: str) -> list[dict[str, Any]]:
        listing = unwrap_envelope(self.list_files(execution_id), self.variant)
        if not isinstance(listing, dict):
            raise TransportError(f"MAISA_FILES_NOT_OBJECT:{str(listing)[:300]!r}")
        return [entry for entry in (listing.get("out") or []) if isinstance(entry, dict)]

    def download_file(self, execution_id: str, file_name: str) -> DownloadedFile:
        data = self._transport.request_bytes("GET", self.endpoints.download(execution_id, file_name))
        self._logger.info("Downloaded %s (%d bytes) from execution %s", file_name, len(data), execution_id)
        return DownloadedFile(file_name=file_name, data=data, mime_type=get_mime_type(file_name))

    def download_all(self, execution_id: str) -> list[DownloadedFile]:
        """Download every ``out`` file in listing order; the first failure aborts the rest."""

        return [
            self.download_file(execution_id, str(entry.get("fileName") or ""))
            for entry in self.list_output_files(execution_id)
        ]

    def check_health(self) -> Any:
        return self._transport.request_json("GET", self.endpoints.health())
