"""Transport protocol and errors."""

from __future__ import annotations

from typing import Any, Protocol


class TransportError(Exception):
    """Raised when a transport fails to deliver a message."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class Transport(Protocol):
    """Protocol for notification transports.

    Failures are raised as TransportError from inside the coroutine, so
    callers observe them only when awaiting.
    """

    name: str

    async def send(self, subject: str, body: str) -> Any:
        """Send to the configured default destination."""
        ...

    async def send_to(self, destination: str, subject: str, body: str) -> Any:
        """Send to an explicit destination."""
        ...
