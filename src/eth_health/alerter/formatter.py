"""Alert message formatter.

This module turns alerts raised by the checks into human-readable
(subject, body) messages for the notification transports.
"""

from __future__ import annotations

import socket
import traceback
from collections.abc import Callable
from typing import Any

from eth_health.alerter.models import (
    BLOCKS_AWAY,
    BLOCKS_AWAY_ERROR,
    ETH_CONNECTION_ERROR,
    NO_BLOCK_NUMBERS_ERROR,
    REF_CONNECTION_ERROR,
    AlertMessage,
)
from eth_health.engine.engine import ConfigurationError

Renderer = Callable[[dict[str, Any]], AlertMessage]


class UnknownAlertError(ConfigurationError):
    """Raised when an alert has no registered renderer."""


def render_eth_connection_error(params: dict[str, Any]) -> AlertMessage:
    return AlertMessage(subject="ETH node connection error")


def render_ref_connection_error(params: dict[str, Any]) -> AlertMessage:
    return AlertMessage(subject="Reference node connection error")


def render_no_block_numbers(params: dict[str, Any]) -> AlertMessage:
    return AlertMessage(subject="Unable to fetch block numbers")


def render_blocks_away(params: dict[str, Any]) -> AlertMessage:
    blocks_away = params.get(BLOCKS_AWAY)
    return AlertMessage(
        subject="ETH node lagging behind",
        body=f"ETH node is behind the reference by {blocks_away} blocks",
    )


RENDERERS: dict[str, Renderer] = {
    ETH_CONNECTION_ERROR: render_eth_connection_error,
    REF_CONNECTION_ERROR: render_ref_connection_error,
    NO_BLOCK_NUMBERS_ERROR: render_no_block_numbers,
    BLOCKS_AWAY_ERROR: render_blocks_away,
}


def format_error(err: object) -> str:
    """Format an error parameter, with traceback when it is an exception."""
    if isinstance(err, BaseException):
        return "".join(traceback.format_exception(err)).rstrip()
    return str(err)


class AlertFormatter:
    """Renders alerts into messages tagged with the reporting host.

    Every subject is prefixed with ``(<hostname>)`` so operators watching
    several nodes can tell them apart. When the alert carries an ``err``
    parameter, its traceback is appended to the body.
    """

    def __init__(
        self,
        renderers: dict[str, Renderer] | None = None,
        *,
        hostname: str | None = None,
    ) -> None:
        """Initialize the formatter.

        Args:
            renderers: Alert name to renderer table, defaults to RENDERERS.
            hostname: Host tag for subjects, defaults to the local hostname.
        """
        self._renderers = dict(RENDERERS if renderers is None else renderers)
        self.hostname = hostname or socket.gethostname()

    @property
    def names(self) -> frozenset[str]:
        """Alert names this formatter can render."""
        return frozenset(self._renderers)

    def register(self, name: str, renderer: Renderer) -> None:
        """Register or replace the renderer for an alert name."""
        self._renderers[name] = renderer

    def format(self, name: str, params: dict[str, Any]) -> AlertMessage:
        """Render an alert.

        Args:
            name: Alert name.
            params: Alert parameters.

        Returns:
            The rendered message.

        Raises:
            UnknownAlertError: If no renderer is registered for the name.
        """
        renderer = self._renderers.get(name)
        if renderer is None:
            raise UnknownAlertError(f"No renderer registered for alert {name!r}")

        message = renderer(params)
        body = message.body
        err = params.get("err")
        if err is not None:
            stack = format_error(err)
            body = f"{body}\n\nStack:\n{stack}" if body else f"Stack:\n{stack}"

        return AlertMessage(subject=f"({self.hostname}) {message.subject}", body=body)
