"""Build the per-item output record for a finished worker run."""

from __future__ import annotations

from typing import Any, Sequence

from maisa_node.services.host import BinaryAttachment, NodeOutputItem
from maisa_node.services.worker_client import DownloadedFile


def binary_slot_names(count: int) -> list[str]:
    if count == 1:
        return ["data"]
    return [f"data{index}" for index in range(count)]


def create_binary_slots(files: Sequence[DownloadedFile]) -> dict[str, BinaryAttachment]:
    # Duplicate file names still get their own slot.
    return {
        slot: BinaryAttachment(data=item.data, file_name=item.file_name, mime_type=item.mime_type)
        for slot, item in zip(binary_slot_names(len(files)), files)
    }


def assemble_result(
    status_payload: dict[str, Any],
    execution_id: str,
    files: Sequence[DownloadedFile] = (),
    *,
    item_index: int | None = None,
) -> NodeOutputItem:
    slots = binary_slot_names(len(files))
    output_files = [{**item.describe(), "binaryProperty": slot} for slot, item in zip(slots, files)]
    record = {**status_payload, "executionId": execution_id, "outputFiles": output_files}
    return NodeOutputItem(
        json=record,
        binary=create_binary_slots(files) if files else None,
        paired_item=item_index,
    )
