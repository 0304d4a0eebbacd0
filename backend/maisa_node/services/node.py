"""Maisa Worker node: runs one operation for every input item of the host."""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from maisa_node.core.config import Settings, get_settings
from maisa_node.services.assembler import assemble_result
from maisa_node.services.endpoints import ApiVariant, resolve_endpoints
from maisa_node.services.errors import InvalidParameter, MaisaWorkerError, RemoteFailure
from maisa_node.services.host import BinaryAttachment, NodeHost, NodeOutputItem
from maisa_node.services.poller import CompletionPoller, is_success
from maisa_node.services.transport import WorkerTransport
from maisa_node.services.worker_client import InputVariable, MaisaWorkerClient


MAIN_OUTPUT = 0
# With progress enabled, poll records go to output 0 and final records to output 1.
PROGRESS_OUTPUT = 0
FINAL_OUTPUT = 1


class Operation(str, Enum):
    RUN_WORKER = "runWorker"
    RUN_WORKER_ASYNC = "runWorkerAsync"
    GET_STATUS = "getStatus"
    LIST_FILES = "listFiles"
    DOWNLOAD_FILE = "downloadFile"


@dataclass(slots=True)
class ItemOutcome:
    final: NodeOutputItem
    progress: list[NodeOutputItem] = field(default_factory=list)


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def parse_input_variables(raw: Any) -> list[InputVariable]:
    """Accept either ``[{name, value}, ...]`` or the ``{"variable": [...]}`` collection shape."""

    if isinstance(raw, dict):
        raw = raw.get("variable") or []
    variables: list[InputVariable] = []
    for entry in raw or []:
        if not isinstance(entry, dict):
            continue
        name = entry.get("name")
        value = entry.get("value")
        variables.append(InputVariable(name="" if name is None else str(name), value="" if value is None else str(value)))
    return variables


def parse_property_names(raw: Any) -> list[str]:
    if not raw:
        return []
    return [name.strip() for name in str(raw).split(",") if name.strip()]


class MaisaWorkerNode:
    """Executes the selected operation against the Maisa Worker API.

    Node-level parameters (``operation``, ``baseUrl``, ``apiVariant``) are read
    from item 0; everything else is read per item.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._settings = settings or get_settings()
        self._clock = clock
        self._sleep = sleep
        self._logger = logging.getLogger(__name__)

    # ----------------------- configuration helpers ----------------------- #
    def _param(self, host: NodeHost, name: str, item_index: int, default: Any) -> Any:
        value = host.get_param(name, item_index, default)
        return default if value is None else value

    def _float_param(self, host: NodeHost, name: str, item_index: int, default: float) -> float:
        value = self._param(host, name, item_index, default)
        try:
            return float(value)
        except (TypeError, ValueError) as exc:
            raise InvalidParameter(f"MAISA_PARAM_INVALID:{name}") from exc

    def _build_client(self, host: NodeHost) -> MaisaWorkerClient:
        base_url = self._param(host, "baseUrl", 0, self._settings.maisa_base_url or "")
        if not str(base_url).strip():
            raise InvalidParameter("MAISA_BASE_URL_MISSING")
        api_key = host.get_api_key() or self._settings.maisa_api_key or ""
        variant = ApiVariant.parse(self._param(host, "apiVariant", 0, self._settings.maisa_api_variant))
        transport = WorkerTransport(api_key, timeout=float(self._settings.maisa_http_timeout))
        return MaisaWorkerClient(resolve_endpoints(str(base_url), variant), transport)

    def _operation(self, host: NodeHost) -> Operation:
        raw = self._param(host, "operation", 0, Operation.RUN_WORKER.value)
        try:
            return Operation(raw)
        except ValueError as exc:
            raise InvalidParameter(f"MAISA_OPERATION_UNSUPPORTED:{raw}") from exc

    def _required(self, host: NodeHost, name: str, item_index: int) -> str:
        value = self._param(host, name, item_index, "")
        if not str(value).strip():
            raise InvalidParameter(f"MAISA_PARAM_MISSING:{name}")
        return str(value)

    # ----------------------------- execution ----------------------------- #
    def execute(self, host: NodeHost) -> None:
        """Run the node over every input item and emit the outputs through ``host``.

        With ``emitProgress`` enabled the node has two outputs: poll records on
        output 0 and final records on output 1. Sequential runs emit poll records
        as they happen; pooled runs emit them with the item's final record.
        """

        items = host.get_input_items()
        operation = self._operation(host)
        client = self._build_client(host)
        emit_progress = operation is Operation.RUN_WORKER and _as_bool(
            self._param(host, "emitProgress", 0, False)
        )
        final_output = FINAL_OUTPUT if emit_progress else MAIN_OUTPUT

        max_workers = max(1, int(self._settings.node_max_workers or 1))
        if max_workers <= 1 or len(items) <= 1:
            report = None
            if emit_progress:
                def report(record: NodeOutputItem) -> None:
                    host.emit_item(record, PROGRESS_OUTPUT)

            for index in range(len(items)):
                host.emit_item(self._run_item(host, client, operation, index, report), final_output)
            return

        self._execute_pooled(host, client, operation, len(items), max_workers, emit_progress)

    def _execute_pooled(
        self,
        host: NodeHost,
        client: MaisaWorkerClient,
        operation: Operation,
        count: int,
        max_workers: int,
        emit_progress: bool,
    ) -> None:
        aborted = threading.Event()

        def run(index: int) -> ItemOutcome | None:
            # Items not yet started when another item aborts the run are never submitted.
            if aborted.is_set():
                return None
            progress: list[NodeOutputItem] = []
            try:
                final = self._run_item(host, client, operation, index, progress.append if emit_progress else None)
            except Exception:
                aborted.set()
                raise
            return ItemOutcome(final=final, progress=progress)

        pool = ThreadPoolExecutor(max_workers=max_workers)
        try:
            futures = [pool.submit(run, index) for index in range(count)]
            # Results are consumed in input order so outputs keep the item order.
            for future in futures:
                outcome = future.result()
                if outcome is None:
                    continue
                for record in outcome.progress:
                    host.emit_item(record, PROGRESS_OUTPUT)
                host.emit_item(outcome.final, FINAL_OUTPUT if emit_progress else MAIN_OUTPUT)
        except BaseException:
            pool.shutdown(wait=False, cancel_futures=True)
            raise
        pool.shutdown(wait=True)

    def _run_item(
        self,
        host: NodeHost,
        client: MaisaWorkerClient,
        operation: Operation,
        index: int,
        report: Callable[[NodeOutputItem], None] | None = None,
    ) -> NodeOutputItem:
        try:
            return self._dispatch(host, client, operation, index, report)
        except MaisaWorkerError as exc:
            if not host.continue_on_fail():
                raise
            self._logger.warning("Item %d failed, continuing: %s", index, exc)
            return NodeOutputItem(json={"error": str(exc)}, paired_item=index)

    def _dispatch(
        self,
        host: NodeHost,
        client: MaisaWorkerClient,
        operation: Operation,
        index: int,
        report: Callable[[NodeOutputItem], None] | None,
    ) -> NodeOutputItem:
        if operation is Operation.RUN_WORKER:
            return self.run_worker(host, client, index, report=report)
        if operation is Operation.RUN_WORKER_ASYNC:
            return self.run_worker_async(host, client, index)
        if operation is Operation.GET_STATUS:
            execution_id = self._required(host, "executionId", index)
            return NodeOutputItem(json=_as_record(client.get_status(execution_id)), paired_item=index)
        if operation is Operation.LIST_FILES:
            execution_id = self._required(host, "executionId", index)
            return NodeOutputItem(json=_as_record(client.list_files(execution_id)), paired_item=index)
        return self.download_file(host, client, index)

    # ----------------------------- operations ---------------------------- #
    def _submit(self, host: NodeHost, client: MaisaWorkerClient, index: int) -> tuple[str, Any]:
        variables = parse_input_variables(self._param(host, "inputVariables", index, []))
        attachments: list[BinaryAttachment] = [
            host.get_binary_attachment(name, index)
            for name in parse_property_names(self._param(host, "files", index, ""))
        ]
        return client.submit(variables, attachments)

    def run_worker_async(self, host: NodeHost, client: MaisaWorkerClient, index: int) -> NodeOutputItem:
        execution_id, body = self._submit(host, client, index)
        return NodeOutputItem(json={**_as_record(body), "executionId": execution_id}, paired_item=index)

    def run_worker(
        self,
        host: NodeHost,
        client: MaisaWorkerClient,
        index: int,
        *,
        report: Callable[[NodeOutputItem], None] | None = None,
    ) -> NodeOutputItem:
        interval = self._float_param(host, "pollingInterval", index, self._settings.maisa_polling_interval)
        timeout = self._float_param(host, "timeout", index, self._settings.maisa_timeout)
        auto_download = _as_bool(self._param(host, "autoDownloadFiles", index, self._settings.maisa_auto_download))
        strict = _as_bool(self._param(host, "failOnRemoteError", index, self._settings.maisa_fail_on_remote_error))

        started_at = self._clock()
        execution_id, _ = self._submit(host, client, index)

        on_poll = None
        if report is not None:
            def on_poll(attempt: int, elapsed: float, payload: dict[str, Any]) -> None:
                report(
                    NodeOutputItem(
                        json={
                            "executionId": execution_id,
                            "attempt": attempt,
                            "elapsed": round(elapsed, 3),
                            "status": payload,
                        },
                        paired_item=index,
                    )
                )

        poller = CompletionPoller(
            client.get_status_payload,
            variant=client.variant,
            interval=interval,
            timeout=timeout,
            clock=self._clock,
            sleep=self._sleep,
            on_poll=on_poll,
        )
        final_status = poller.wait(execution_id, started_at=started_at)

        succeeded = is_success(final_status, client.variant)
        if not succeeded and strict:
            raise RemoteFailure(execution_id, final_status.get("status") or "failed", final_status)

        files = client.download_all(execution_id) if auto_download and succeeded else []
        return assemble_result(final_status, execution_id, files, item_index=index)

    def download_file(self, host: NodeHost, client: MaisaWorkerClient, index: int) -> NodeOutputItem:
        execution_id = self._required(host, "executionId", index)
        file_name = self._required(host, "fileName", index)
        binary_property = str(self._param(host, "binaryProperty", index, "data") or "data")
        downloaded = client.download_file(execution_id, file_name)
        return NodeOutputItem(
            json={"fileName": file_name, "executionId": execution_id},
            binary={
                binary_property: BinaryAttachment(
                    data=downloaded.data, file_name=downloaded.file_name, mime_type=downloaded.mime_type
                )
            },
            paired_item=index,
        )


def _as_record(body: Any) -> dict[str, Any]:
    if isinstance(body, dict):
        return dict(body)
    return {"data": body}
