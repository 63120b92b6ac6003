"""Shared test fixtures for onoffice.

Provides a canned configuration, a fake clock, helpers that build API
payloads, and an ``httpx.MockTransport`` recorder so client tests never
touch the network. Environment variables and the config directory are
isolated for every test.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Optional

import httpx
import pytest

from onoffice.models import ClientConfig
from onoffice.output import reset_output


TOKEN = "test-token"
SECRET = "test-secret"
API_URL = "https://api.test/api/stable/api.php"


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams the
    cached references go stale once the test finishes. The CLI's log
    handler holds the same stream, so it is dropped too.
    """
    yield
    reset_output()
    logger = logging.getLogger("onoffice")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path, monkeypatch) -> None:
    """Point the config directory at a temp dir and clear ONOFFICE_* vars."""
    for var in (
        "ONOFFICE_TOKEN",
        "ONOFFICE_SECRET",
        "ONOFFICE_API_VERSION",
        "ONOFFICE_API_URL",
        "ONOFFICE_CACHE_ENABLED",
        "ONOFFICE_CACHE_EXPIRATION",
        "ONOFFICE_CONFIG",
        "NO_COLOR",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.setenv("HOME", str(tmp_path / "home"))


# ---------------------------------------------------------------------------
# Config and clock
# ---------------------------------------------------------------------------


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(token=TOKEN, secret=SECRET, api_url=API_URL)


@pytest.fixture
def cached_config() -> ClientConfig:
    return ClientConfig(
        token=TOKEN,
        secret=SECRET,
        api_url=API_URL,
        cache={"enabled": True, "expiration_seconds": 60},
    )


class FakeClock:
    """Manually advanced replacement for :func:`time.time`."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ---------------------------------------------------------------------------
# Payload builders
# ---------------------------------------------------------------------------


def success_payload(
    records: Optional[list[Any]] = None,
    total: Optional[int] = None,
    errorcode: int = 0,
) -> dict[str, Any]:
    """Build a payload shaped like a successful API answer."""
    data: dict[str, Any] = {"records": records or []}
    if total is not None:
        data["meta"] = {"cntabsolute": total}
    return {
        "status": {"code": 200, "errorcode": 0, "message": "OK"},
        "response": {
            "results": [
                {
                    "actionid": "urn:onoffice-de-ns:smart:2.5:smartml:action:read",
                    "resourcetype": "estate",
                    "data": data,
                    "status": {"errorcode": errorcode, "message": "OK" if not errorcode else "Bad"},
                }
            ]
        },
    }


def make_records(start: int, count: int) -> list[dict[str, Any]]:
    return [
        {"id": str(i), "type": "estate", "elements": {"Id": str(i)}}
        for i in range(start, start + count)
    ]


# ---------------------------------------------------------------------------
# HTTP mocking
# ---------------------------------------------------------------------------


class Recorder:
    """Collects requests seen by an ``httpx.MockTransport``.

    *handler* receives the decoded JSON body and returns an
    :class:`httpx.Response` (or raises an ``httpx`` error).
    """

    def __init__(self, handler: Callable[[dict[str, Any]], httpx.Response]) -> None:
        self.handler = handler
        self.bodies: list[dict[str, Any]] = []

    @property
    def count(self) -> int:
        return len(self.bodies)

    def actions(self) -> list[dict[str, Any]]:
        return [a for body in self.bodies for a in body["request"]["actions"]]

    def transport(self) -> httpx.MockTransport:
        def _handle(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            self.bodies.append(body)
            return self.handler(body)

        return httpx.MockTransport(_handle)


def respond_with(payload: Any, status_code: int = 200) -> Callable[[dict[str, Any]], httpx.Response]:
    return lambda body: httpx.Response(status_code, json=payload)


@pytest.fixture
def recorder() -> Recorder:
    """A recorder answering every call with an empty success payload."""
    return Recorder(respond_with(success_payload()))
