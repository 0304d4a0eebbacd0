"""Completion poller for a submitted worker execution."""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Any, Callable

from maisa_node.services.endpoints import ApiVariant
from maisa_node.services.errors import Timeout

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = frozenset({"completed", "failed", "error"})
FAILED_STATUSES = frozenset({"failed", "error"})


class PollState(str, Enum):
    RUNNING = "running"
    DONE = "done"
    TIMED_OUT = "timed_out"


def _status_of(payload: dict[str, Any]) -> str:
    return str(payload.get("status") or "").strip().lower()


def is_complete(payload: dict[str, Any] | None, variant: ApiVariant) -> bool:
    if not isinstance(payload, dict):
        return False
    if variant is ApiVariant.RUNS:
        return _status_of(payload) in TERMINAL_STATUSES
    result = payload.get("result")
    return result is not None and result != ""


def is_success(payload: dict[str, Any] | None, variant: ApiVariant) -> bool:
    """Whether a terminal payload reports a successful run."""

    if not is_complete(payload, variant):
        return False
    if variant is ApiVariant.RUNS:
        return _status_of(payload) == "completed"
    # The legacy shape may still carry a status discriminator next to `result`.
    return _status_of(payload) not in FAILED_STATUSES


class CompletionPoller:
    """Poll ``fetch_status`` until the payload is terminal or the deadline passes.

    The deadline is checked before each query: a query already in flight when
    the deadline passes is allowed to finish, but no new one is issued.
    """

    def __init__(
        self,
        fetch_status: Callable[[str], dict[str, Any]],
        *,
        variant: ApiVariant,
        interval: float,
        timeout: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        on_poll: Callable[[int, float, dict[str, Any]], None] | None = None,
    ) -> None:
        self._fetch_status = fetch_status
        self._variant = variant
        self._interval = max(0.0, float(interval))
        self._timeout = float(timeout)
        self._clock = clock
        self._sleep = sleep
        self._on_poll = on_poll
        self.state = PollState.RUNNING
        self.attempts = 0

    def wait(self, execution_id: str, *, started_at: float | None = None) -> dict[str, Any]:
        start = self._clock() if started_at is None else started_at
        self.state = PollState.RUNNING
        while True:
            elapsed = self._clock() - start
            if elapsed > self._timeout:
                self.state = PollState.TIMED_OUT
                logger.warning(
                    "Maisa execution %s timed out after %.1fs (%d polls)", execution_id, elapsed, self.attempts
                )
                raise Timeout(self._timeout)

            payload = self._fetch_status(execution_id)
            self.attempts += 1
            logger.debug("Polled Maisa execution %s attempt=%d", execution_id, self.attempts)
            if self._on_poll is not None:
                self._on_poll(self.attempts, elapsed, payload)

            if is_complete(payload, self._variant):
                self.state = PollState.DONE
                logger.info("Maisa execution %s completed after %d polls", execution_id, self.attempts)
                return payload

            self._sleep(self._interval)
