import pytest


@pytest.mark.parametrize(
    "payload, expected",
    [
        ({"result": "x"}, True),
        ({"result": ""}, False),
        ({"result": None}, False),
        ({}, False),
        ({"result": 0}, True),
        ({"status": "completed"}, False),
    ],
)
def test_legacy_completion_predicate(payload, expected):
    from maisa_node.services.endpoints import ApiVariant
    from maisa_node.services.poller import is_complete

    assert is_complete(payload, ApiVariant.LEGACY) is expected


@pytest.mark.parametrize(
    "payload, expected",
    [
        ({"status": "completed"}, True),
        ({"status": "failed"}, True),
        ({"status": "ERROR"}, True),
        ({"status": "running"}, False),
        ({"status": None}, False),
        ({"result": "x"}, False),
    ],
)
def test_runs_completion_predicate(payload, expected):
    from maisa_node.services.endpoints import ApiVariant
    from maisa_node.services.poller import is_complete

    assert is_complete(payload, ApiVariant.RUNS) is expected


def test_failed_terminal_status_is_not_success():
    from maisa_node.services.endpoints import ApiVariant
    from maisa_node.services.poller import is_success

    assert is_success({"status": "completed"}, ApiVariant.RUNS) is True
    assert is_success({"status": "failed"}, ApiVariant.RUNS) is False
    assert is_success({"result": "x"}, ApiVariant.LEGACY) is True
    assert is_success({"result": "x", "status": "error"}, ApiVariant.LEGACY) is False


def test_poller_returns_first_terminal_payload(clock):
    from maisa_node.services.endpoints import ApiVariant
    from maisa_node.services.poller import CompletionPoller, PollState

    payloads = iter([{"result": None}, {"result": ""}, {"id": "E1", "result": "done"}])
    poller = CompletionPoller(
        lambda _id: next(payloads),
        variant=ApiVariant.LEGACY,
        interval=2,
        timeout=60,
        clock=clock,
        sleep=clock.sleep,
    )
    assert poller.wait("E1") == {"id": "E1", "result": "done"}
    assert poller.state is PollState.DONE
    assert poller.attempts == 3
    assert clock.sleeps == [2.0, 2.0]


def test_poller_times_out_within_one_interval_of_deadline(clock):
    from maisa_node.services.endpoints import ApiVariant
    from maisa_node.services.errors import Timeout
    from maisa_node.services.poller import CompletionPoller, PollState

    poller = CompletionPoller(
        lambda _id: {"result": None},
        variant=ApiVariant.LEGACY,
        interval=1,
        timeout=2,
        clock=clock,
        sleep=clock.sleep,
    )
    with pytest.raises(Timeout) as excinfo:
        poller.wait("E1")
    assert 2 <= clock.now <= 3
    assert poller.state is PollState.TIMED_OUT
    assert excinfo.value.timeout == 2
    assert "timed out after 2 seconds" in str(excinfo.value)


def test_poller_deadline_counts_from_given_start(clock):
    from maisa_node.services.endpoints import ApiVariant
    from maisa_node.services.errors import Timeout
    from maisa_node.services.poller import CompletionPoller

    calls = []
    clock.now = 10.0
    poller = CompletionPoller(
        lambda _id: calls.append(_id) or {"status": "running"},
        variant=ApiVariant.RUNS,
        interval=1,
        timeout=5,
        clock=clock,
        sleep=clock.sleep,
    )
    with pytest.raises(Timeout):
        poller.wait("E1", started_at=0.0)
    assert calls == []


def test_poller_reports_each_poll(clock):
    from maisa_node.services.endpoints import ApiVariant
    from maisa_node.services.poller import CompletionPoller

    seen = []
    payloads = iter([{"status": "running"}, {"status": "completed"}])
    poller = CompletionPoller(
        lambda _id: next(payloads),
        variant=ApiVariant.RUNS,
        interval=3,
        timeout=30,
        clock=clock,
        sleep=clock.sleep,
        on_poll=lambda attempt, elapsed, payload: seen.append((attempt, elapsed, payload["status"])),
    )
    poller.wait("E1")
    assert seen == [(1, 0.0, "running"), (2, 3.0, "completed")]
