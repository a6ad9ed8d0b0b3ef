"""Check execution engine.

Runs an ordered list of checks over a fresh context, stops at the first
alert and hands it to the handler registered under the alert's name.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Iterable, Mapping
from typing import TYPE_CHECKING, Any

from eth_health import metrics
from eth_health.engine.models import Alert, Check, Context, Handler

if TYPE_CHECKING:
    from eth_health.transports.transporter import DispatchResult, Transporter

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Raised when the engine or its collaborators are wired incorrectly."""


def check_name(check: object) -> str:
    """Get the display name of a check."""
    name = getattr(check, "name", None)
    return name if isinstance(name, str) else type(check).__name__


class Engine:
    """Sequential check runner with per-alert handlers.

    Checks run strictly in the order they were added, since later checks
    read context written by earlier ones. The first alert ends the run.

    Example:
        ```python
        engine = Engine(transporter)
        engine.add_checks([NodeConnectionCheck(url), BlocksAwayCheck(10)])
        engine.add_handler("blocksAwayError", handler)
        alert = await engine.execute()
        ```
    """

    def __init__(self, transporter: Transporter | None = None) -> None:
        """Initialize the engine.

        Args:
            transporter: Fan-out coordinator used by ``send_alert``.
        """
        self.transporter = transporter
        self._checks: list[Check] = []
        self._handlers: dict[str, Handler] = {}

    @property
    def checks(self) -> tuple[Check, ...]:
        """Configured checks in execution order."""
        return tuple(self._checks)

    @property
    def handlers(self) -> dict[str, Handler]:
        """Copy of the handler table."""
        return dict(self._handlers)

    def add_check(self, check: Check) -> None:
        self._checks.append(check)

    def add_checks(self, checks: Iterable[Check]) -> None:
        for check in checks:
            self.add_check(check)

    def clear_checks(self) -> None:
        self._checks = []

    def add_handler(self, name: str, handler: Handler) -> None:
        self._handlers[name] = handler

    def add_handlers(
        self, handlers: Mapping[str, Handler] | Iterable[tuple[str, Handler]]
    ) -> None:
        """Register several handlers from a mapping or (name, handler) pairs."""
        items = handlers.items() if isinstance(handlers, Mapping) else handlers
        for name, handler in items:
            self.add_handler(name, handler)

    def del_handler(self, name: str) -> None:
        self._handlers.pop(name, None)

    def clear_handlers(self) -> None:
        self._handlers = {}

    def send_alert(self, subject: str, body: str) -> Awaitable[DispatchResult]:
        """Deliver a message through every transport of the transporter.

        Args:
            subject: Message subject.
            body: Message body.

        Returns:
            Awaitable resolving to the per-transport dispatch result.

        Raises:
            ConfigurationError: If no transporter is configured.
        """
        if self.transporter is None:
            raise ConfigurationError("No transporter specified for alerts")
        return self.transporter.send_all(subject, body)

    async def execute(self) -> Alert | None:
        """Run all checks once.

        Returns:
            The alert that stopped the run, or None if every check passed.
        """
        context: Context = {}
        try:
            for check in self._checks:
                name = check_name(check)
                result = check.execute(context)
                if inspect.isawaitable(result):
                    result = await result

                if not result:
                    logger.info("[%s] Pass", name)
                    metrics.CHECK_OUTCOMES.labels(check=name, outcome="pass").inc()
                    continue

                logger.info("[%s] Fail => %s %s", name, result.name, result.params)
                metrics.CHECK_OUTCOMES.labels(check=name, outcome="fail").inc()
                metrics.ALERTS_TOTAL.labels(alert=result.name).inc()
                await self._handle(result)
                return result

            logger.debug("All %d checks passed", len(self._checks))
            return None
        finally:
            metrics.mark_run_complete()

    async def _handle(self, alert: Alert) -> None:
        """Invoke the handler for an alert, logging any failure."""
        handler = self._handlers.get(alert.name)
        if handler is None:
            logger.error(f"Unhandled alert ({alert.name})")
            return

        try:
            outcome: Any = handler(alert.name, alert.params, self)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception:
            logger.exception(f"Handler for {alert.name} failed")
