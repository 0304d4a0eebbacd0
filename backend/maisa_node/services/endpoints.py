"""Derive Maisa Worker endpoint URLs from the user supplied worker URL.

Users paste either the worker root (``https://host/worker/abc``) or the submit
URL they see in the console (``https://host/worker/abc/run``), with or without a
trailing slash. Both forms must produce identical endpoints:

  legacy: {root}/run, {root}/run/<id>, {root}/run/<id>/files, {root}/run/<id>/files/<name>
  runs:   {root}/run, {root}/runs/<id>/detail, {root}/runs/<id>/file/listed?limit=100,
          {root}/runs/<id>/file/<name>

No validation happens here; a URL without a scheme fails on first use in the transport.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from maisa_node.services.errors import InvalidParameter

RUN_SUFFIX = "/run"
LIST_FILES_LIMIT = 100


class ApiVariant(str, Enum):
    LEGACY = "legacy"
    RUNS = "runs"

    @classmethod
    def parse(cls, value: "str | ApiVariant | None") -> "ApiVariant":
        if isinstance(value, cls):
            return value
        raw = str(value or cls.LEGACY.value).strip().lower()
        try:
            return cls(raw)
        except ValueError as exc:
            raise InvalidParameter(f"MAISA_API_VARIANT_UNSUPPORTED:{value}") from exc


@dataclass(frozen=True, slots=True)
class WorkerEndpoints:
    root: str
    submit: str
    variant: ApiVariant

    def status(self, execution_id: str) -> str:
        if self.variant is ApiVariant.RUNS:
            return f"{self.root}/runs/{execution_id}/detail"
        return f"{self.root}/run/{execution_id}"

    def list_files(self, execution_id: str) -> str:
        if self.variant is ApiVariant.RUNS:
            return f"{self.root}/runs/{execution_id}/file/listed?limit={LIST_FILES_LIMIT}"
        return f"{self.root}/run/{execution_id}/files"

    def download(self, execution_id: str, file_name: str) -> str:
        # File names are embedded as-is; reserved characters are left to the transport.
        if self.variant is ApiVariant.RUNS:
            return f"{self.root}/runs/{execution_id}/file/{file_name}"
        return f"{self.root}/run/{execution_id}/files/{file_name}"

    def health(self) -> str:
        return f"{self.root}/health"


def resolve_endpoints(raw_url: str, variant: "str | ApiVariant | None" = ApiVariant.LEGACY) -> WorkerEndpoints:
    url = (raw_url or "").strip()
    if url.endswith("/"):
        url = url[:-1]
    if url.endswith(RUN_SUFFIX):
        root = url[: -len(RUN_SUFFIX)]
        submit = url
    else:
        root = url
        submit = f"{url}{RUN_SUFFIX}"
    return WorkerEndpoints(root=root, submit=submit, variant=ApiVariant.parse(variant))
