"""Host collaborator contract and the in-memory host used by the HTTP surface."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from maisa_node.services.errors import AttachmentNotFound

_MISSING = object()


@dataclass(slots=True)
class BinaryAttachment:
    data: bytes
    file_name: str | None = None
    mime_type: str | None = None


@dataclass(slots=True)
class NodeInputItem:
    json: dict[str, Any] = field(default_factory=dict)
    binary: dict[str, BinaryAttachment] = field(default_factory=dict)


@dataclass(slots=True)
class NodeOutputItem:
    json: dict[str, Any]
    binary: dict[str, BinaryAttachment] | None = None
    paired_item: int | None = None


class NodeHost(Protocol):
    """What the node needs from the workflow runtime that hosts it."""

    def get_input_items(self) -> list[NodeInputItem]:
        ...

    def get_param(self, name: str, item_index: int, default: Any = _MISSING) -> Any:
        ...

    def get_binary_attachment(self, name: str, item_index: int) -> BinaryAttachment:
        ...

    def get_api_key(self) -> str:
        ...

    def continue_on_fail(self) -> bool:
        ...

    def emit_item(self, item: NodeOutputItem, output_index: int = 0) -> None:
        ...


class InMemoryHost:
    """Host backed by plain dicts.

    Node-level parameters apply to every item; ``item_params`` holds optional
    per-item overrides at the same index as ``items``.
    """

    def __init__(
        self,
        *,
        items: list[NodeInputItem] | None = None,
        params: dict[str, Any] | None = None,
        item_params: list[dict[str, Any]] | None = None,
        api_key: str = "",
        continue_on_fail: bool = False,
        output_count: int = 1,
    ) -> None:
        self._items = items if items is not None else [NodeInputItem()]
        self._params = params or {}
        self._item_params = item_params or []
        self._api_key = api_key
        self._continue_on_fail = continue_on_fail
        self.outputs: list[list[NodeOutputItem]] = [[] for _ in range(max(1, output_count))]

    def get_input_items(self) -> list[NodeInputItem]:
        return self._items

    def get_param(self, name: str, item_index: int, default: Any = _MISSING) -> Any:
        if item_index < len(self._item_params) and name in self._item_params[item_index]:
            return self._item_params[item_index][name]
        if name in self._params:
            return self._params[name]
        if default is _MISSING:
            raise KeyError(f"Parameter {name!r} is not set")
        return default

    def get_binary_attachment(self, name: str, item_index: int) -> BinaryAttachment:
        try:
            item = self._items[item_index]
        except IndexError as exc:
            raise AttachmentNotFound(name, item_index) from exc
        attachment = item.binary.get(name)
        if attachment is None:
            raise AttachmentNotFound(name, item_index)
        return attachment

    def get_api_key(self) -> str:
        return self._api_key

    def continue_on_fail(self) -> bool:
        return self._continue_on_fail

    def emit_item(self, item: NodeOutputItem, output_index: int = 0) -> None:
        while len(self.outputs) <= output_index:
            self.outputs.append([])
        self.outputs[output_index].append(item)
