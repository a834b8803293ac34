import sys
from types import ModuleType
from typing import Any, Dict, List

import pytest

import aio_adhoc.telemetry as telemetry
from aio_adhoc import RecvTimeoutError, run_with_timeout, send_callback


def test_maybe_logfire_returns_none_when_not_installed(monkeypatch: pytest.MonkeyPatch):
    # a None entry makes "import logfire" raise ImportError
    monkeypatch.setitem(sys.modules, "logfire", None)
    assert telemetry._maybe_logfire() is None


def test_maybe_logfire_returns_none_when_config_missing(
    monkeypatch: pytest.MonkeyPatch,
):
    fake_logfire = ModuleType("logfire")
    fake_logfire.DEFAULT_LOGFIRE_INSTANCE = object()
    monkeypatch.setitem(sys.modules, "logfire", fake_logfire)
    assert telemetry._maybe_logfire() is None


def test_maybe_logfire_returns_none_when_config_raises(monkeypatch: pytest.MonkeyPatch):
    class BrokenInstance:
        @property
        def config(self) -> Any:
            raise RuntimeError("boom")

    fake_logfire = ModuleType("logfire")
    fake_logfire.DEFAULT_LOGFIRE_INSTANCE = BrokenInstance()
    monkeypatch.setitem(sys.modules, "logfire", fake_logfire)
    assert telemetry._maybe_logfire() is None


def test_wait_span_is_noop_without_logfire(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(telemetry, "_maybe_logfire", lambda: None)
    with telemetry.wait_span(1.0) as span:
        span.set_attribute("outcome", "sent")


@pytest.fixture
def recorded_spans(monkeypatch: pytest.MonkeyPatch) -> List[Dict[str, Any]]:
    calls: List[Dict[str, Any]] = []

    class FakeConfig:
        _initialized = True

    class FakeInstance:
        config = FakeConfig()

    class FakeSpan:
        def __init__(self, name: str, attributes: Dict[str, Any]):
            self._record = {"name": name, "attributes": dict(attributes)}

        def __enter__(self) -> "FakeSpan":
            calls.append(self._record)
            return self

        def __exit__(self, exc_type, exc, tb) -> None:
            return None

        def set_attribute(self, key: str, value: Any) -> None:
            self._record["attributes"][key] = value

    fake_logfire = ModuleType("logfire")
    fake_logfire.DEFAULT_LOGFIRE_INSTANCE = FakeInstance()

    def span(name: str, **attributes: Any) -> FakeSpan:
        return FakeSpan(name, attributes)

    fake_logfire.span = span  # type: ignore[attr-defined]
    monkeypatch.setitem(sys.modules, "logfire", fake_logfire)
    return calls


def test_wait_records_sent_outcome(recorded_spans: List[Dict[str, Any]]):
    run_with_timeout(lambda: send_callback()("ok"), 1)

    assert recorded_spans == [
        {
            "name": telemetry.SPAN_NAME,
            "attributes": {"timeout": 1.0, "outcome": "sent"},
        }
    ]


def test_wait_records_timeout_outcome(recorded_spans: List[Dict[str, Any]]):
    with pytest.raises(RecvTimeoutError):
        run_with_timeout(lambda: None, 0.01)

    assert recorded_spans[0]["attributes"]["outcome"] == "timeout"


def test_wait_records_failed_outcome(recorded_spans: List[Dict[str, Any]]):
    def body() -> None:
        raise RuntimeError("body failed")

    with pytest.raises(RuntimeError):
        run_with_timeout(body, 1)

    assert recorded_spans[0]["attributes"]["outcome"] == "failed"
