"""Single-shot HTTP transport for the Maisa Worker API."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from maisa_node.services.errors import TransportError

API_KEY_HEADER = "ms-api-key"
BODY_SNIPPET_LIMIT = 300


class WorkerTransport:
    """Issues one request per call and maps every failure to ``TransportError``.

    There are no retries here: a failed call is a failed operation.
    """

    def __init__(self, api_key: str, *, timeout: float = 60) -> None:
        self._api_key = api_key
        self._timeout = timeout
        self._logger = logging.getLogger(__name__)

    def _headers(self) -> dict[str, str]:
        return {API_KEY_HEADER: self._api_key}

    def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = httpx.request(method, url, headers=self._headers(), timeout=self._timeout, **kwargs)
        except httpx.HTTPError as exc:
            self._logger.warning("Maisa %s %s failed: %s", method, url, exc)
            raise TransportError(f"MAISA_REQUEST_FAILED:{exc}") from exc
        # Redirects are not followed, so a 3xx body is never the requested payload.
        if not 200 <= response.status_code < 300:
            detail = _snippet(response)
            try:
                payload = response.json()
            except ValueError:
                payload = None
            if isinstance(payload, dict):
                detail = payload.get("message") or payload.get("msg") or payload.get("error") or detail
            raise TransportError(
                f"MAISA_HTTP_{response.status_code}:{detail}",
                status_code=response.status_code,
            )
        return response

    def request_json(self, method: str, url: str, **kwargs: Any) -> Any:
        response = self._send(method, url, **kwargs)
        try:
            payload = response.json()
        except ValueError as exc:
            raise TransportError(
                f"MAISA_INVALID_RESPONSE status={response.status_code} body={_snippet(response)!r}",
                status_code=response.status_code,
            ) from exc
        # Some deployments return the JSON document as a JSON string.
        if isinstance(payload, str):
            try:
                return json.loads(payload)
            except ValueError:
                return payload
        return payload

    def request_bytes(self, method: str, url: str, **kwargs: Any) -> bytes:
        response = self._send(method, url, **kwargs)
        return response.content


def _snippet(response: httpx.Response) -> str:
    try:
        return (response.text or "")[:BODY_SNIPPET_LIMIT]
    except (UnicodeDecodeError, AttributeError):
        return ""
