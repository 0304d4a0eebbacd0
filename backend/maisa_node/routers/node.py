"""Endpoints that let an HTTP host run the Maisa Worker node."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Header, HTTPException, status

from maisa_node.core.config import get_settings
from maisa_node.schemas import node as schemas
from maisa_node.services.endpoints import resolve_endpoints
from maisa_node.services.errors import (
    AttachmentNotFound,
    InvalidParameter,
    MaisaWorkerError,
    Timeout,
)
from maisa_node.services.host import InMemoryHost
from maisa_node.services.node import MaisaWorkerNode
from maisa_node.services.transport import WorkerTransport
from maisa_node.services.worker_client import MaisaWorkerClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/maisa-worker", tags=["maisa-worker"])


def _to_http_error(exc: MaisaWorkerError) -> HTTPException:
    if isinstance(exc, (AttachmentNotFound, InvalidParameter)):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, Timeout):
        return HTTPException(status_code=status.HTTP_504_GATEWAY_TIMEOUT, detail=str(exc))
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))


def _resolve_api_key(header_value: str | None) -> str:
    api_key = header_value or get_settings().maisa_api_key
    if not api_key:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="MAISA_API_KEY_MISSING")
    return api_key


@router.post("/execute", response_model=schemas.NodeExecuteResponse)
def execute_node(
    payload: schemas.NodeExecuteRequest,
    ms_api_key: str | None = Header(default=None, alias="ms-api-key"),
):
    host = InMemoryHost(
        items=[item.to_node_item() for item in payload.items],
        params=payload.parameters,
        item_params=[item.parameters for item in payload.items],
        api_key=_resolve_api_key(ms_api_key),
        continue_on_fail=payload.continueOnFail,
    )
    try:
        MaisaWorkerNode(get_settings()).execute(host)
    except MaisaWorkerError as exc:
        logger.warning("Maisa worker node execution aborted: %s", exc)
        raise _to_http_error(exc) from exc
    outputs = [[schemas.OutputItem.from_node_item(item) for item in output] for output in host.outputs]
    return schemas.NodeExecuteResponse(outputs=outputs)


@router.post("/credentials/test", response_model=schemas.CredentialTestResponse)
def test_credentials(
    payload: schemas.CredentialTestRequest,
    ms_api_key: str | None = Header(default=None, alias="ms-api-key"),
):
    settings = get_settings()
    try:
        endpoints = resolve_endpoints(payload.baseUrl, payload.apiVariant or settings.maisa_api_variant)
    except InvalidParameter as exc:
        raise _to_http_error(exc) from exc
    client = MaisaWorkerClient(
        endpoints,
        WorkerTransport(_resolve_api_key(ms_api_key), timeout=float(settings.maisa_http_timeout)),
    )
    try:
        client.check_health()
    except MaisaWorkerError as exc:
        return schemas.CredentialTestResponse(status="Error", message=str(exc))
    return schemas.CredentialTestResponse(status="OK", message="Connection successful")
