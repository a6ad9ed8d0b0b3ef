"""Engine handlers that render alerts and deliver them to transports."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from eth_health.engine.engine import ConfigurationError, check_name

if TYPE_CHECKING:
    from eth_health.alerter.formatter import AlertFormatter
    from eth_health.engine.engine import Engine
    from eth_health.engine.models import Handler

logger = logging.getLogger(__name__)


def notify_handler(formatter: AlertFormatter) -> Handler:
    """Build a handler that renders an alert and fans it out.

    Args:
        formatter: Formatter used to render the alert.

    Returns:
        Handler suitable for ``Engine.add_handler``.
    """

    async def notify(name: str, params: dict[str, Any], engine: Engine) -> None:
        message = formatter.format(name, params)
        result = await engine.send_alert(message.subject, message.body)

        if result.failure_count:
            logger.warning(
                f"Alert {name} not delivered to: {', '.join(sorted(result.failures))}"
            )
        elif result.success_count:
            logger.info(f"Alert {name} delivered to {result.success_count} transport(s)")
        else:
            logger.warning(f"Alert {name} raised but no transports are configured")

    return notify


def register_handlers(engine: Engine, formatter: AlertFormatter) -> None:
    """Register the notify handler for every alert the formatter can render."""
    handler = notify_handler(formatter)
    for name in sorted(formatter.names):
        engine.add_handler(name, handler)


def check_alert_coverage(engine: Engine, formatter: AlertFormatter) -> None:
    """Verify every alert the configured checks can raise is handled and renderable.

    Checks declare the alerts they may raise through an ``alert_names``
    attribute; checks without one are skipped.

    Raises:
        ConfigurationError: If any alert lacks a handler or a renderer.
    """
    handlers = engine.handlers
    problems: list[str] = []

    for check in engine.checks:
        for name in getattr(check, "alert_names", ()):
            if name not in handlers:
                problems.append(f"{check_name(check)}: no handler for {name}")
            if name not in formatter.names:
                problems.append(f"{check_name(check)}: no renderer for {name}")

    if problems:
        raise ConfigurationError("Alert coverage check failed: " + "; ".join(problems))
