"""Shared fixtures for Kayako client tests."""

from typing import Any

import pytest

from kayako_client.config import Config
from kayako_client.exceptions import TransportError
from kayako_client.transport import RESTTransport


class FakeTransport(RESTTransport):
    """Transport double recording every call and replaying queued responses."""

    def __init__(self) -> None:
        """Initialize fake transport."""
        self.calls: list[tuple[Any, ...]] = []
        self.responses: list[dict[str, Any]] = []
        self.error: TransportError | None = None

    def queue(self, *responses: dict[str, Any]) -> None:
        """Append responses returned by the next calls, in order."""
        self.responses.extend(responses)

    def _next(self) -> dict[str, Any]:
        if self.error is not None:
            raise self.error
        return self.responses.pop(0) if self.responses else {}

    def get(self, controller: str, parameters: list[Any]) -> dict[str, Any]:
        """Record a GET."""
        self.calls.append(("GET", controller, list(parameters)))
        return self._next()

    def post(
        self,
        controller: str,
        parameters: list[Any],
        data: dict[str, Any],
        files: dict[str, tuple[str, bytes]] | None = None,
    ) -> dict[str, Any]:
        """Record a POST."""
        self.calls.append(("POST", controller, list(parameters), dict(data), dict(files or {})))
        return self._next()

    def put(self, controller: str, parameters: list[Any], data: dict[str, Any]) -> dict[str, Any]:
        """Record a PUT."""
        self.calls.append(("PUT", controller, list(parameters), dict(data)))
        return self._next()

    def delete(self, controller: str, parameters: list[Any]) -> None:
        """Record a DELETE."""
        self.calls.append(("DELETE", controller, list(parameters)))
        if self.error is not None:
            raise self.error

    def calls_to(self, method: str) -> list[tuple[Any, ...]]:
        """Return recorded calls using one HTTP method."""
        return [call for call in self.calls if call[0] == method]


@pytest.fixture
def transport() -> FakeTransport:
    """Create a fake transport."""
    return FakeTransport()


@pytest.fixture
def config(transport: FakeTransport) -> Config:
    """Create a configuration bound to the fake transport."""
    return Config(
        "https://helpdesk.example.com/api/index.php",
        "api-key",
        "secret-key",
        datetime_format="%Y-%m-%d %H:%M",
        transport=transport,
    )
