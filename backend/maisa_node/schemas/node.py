"""Request/response schemas for the node execution endpoints."""

from __future__ import annotations

import base64
import binascii
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from maisa_node.services.host import BinaryAttachment, NodeInputItem, NodeOutputItem


class BinaryPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    data: str = Field(description="Base64 encoded file content")
    fileName: str | None = None
    mimeType: str | None = None

    @field_validator("data")
    @classmethod
    def check_base64(cls, value: str) -> str:
        try:
            base64.b64decode(value, validate=True)
        except binascii.Error as exc:
            raise ValueError("BINARY_DATA_NOT_BASE64") from exc
        return value

    def to_attachment(self) -> BinaryAttachment:
        return BinaryAttachment(
            data=base64.b64decode(self.data),
            file_name=self.fileName,
            mime_type=self.mimeType,
        )

    @classmethod
    def from_attachment(cls, attachment: BinaryAttachment) -> "BinaryPayload":
        return cls(
            data=base64.b64encode(attachment.data).decode("utf-8"),
            fileName=attachment.file_name,
            mimeType=attachment.mime_type,
        )


class InputItem(BaseModel):
    json_: dict[str, Any] = Field(default_factory=dict, alias="json")
    binary: dict[str, BinaryPayload] = Field(default_factory=dict)
    # Per-item parameter overrides (e.g. a different executionId per item).
    parameters: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True)

    def to_node_item(self) -> NodeInputItem:
        return NodeInputItem(
            json=dict(self.json_),
            binary={name: payload.to_attachment() for name, payload in self.binary.items()},
        )


class NodeExecuteRequest(BaseModel):
    parameters: dict[str, Any] = Field(default_factory=dict)
    items: list[InputItem] = Field(default_factory=lambda: [InputItem()])
    continueOnFail: bool = False


class OutputItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    json_: dict[str, Any] = Field(alias="json")
    binary: dict[str, BinaryPayload] | None = None
    pairedItem: int | None = None

    @classmethod
    def from_node_item(cls, item: NodeOutputItem) -> "OutputItem":
        binary = None
        if item.binary:
            binary = {name: BinaryPayload.from_attachment(att) for name, att in item.binary.items()}
        return cls(json=item.json, binary=binary, pairedItem=item.paired_item)


class NodeExecuteResponse(BaseModel):
    outputs: list[list[OutputItem]]


class CredentialTestRequest(BaseModel):
    baseUrl: str
    apiVariant: str | None = None


class CredentialTestResponse(BaseModel):
    status: str
    message: str | None = None
