"""Wiring of checks, handlers and transports from settings."""

from __future__ import annotations

import logging

from eth_health.alerter import AlertFormatter, check_alert_coverage, register_handlers
from eth_health.checks import BlocksAwayCheck, NodeConnectionCheck, ReferenceNodeCheck
from eth_health.config import Settings
from eth_health.engine import Alert, Engine
from eth_health.transports import EmailTransport, SlackTransport, Transporter

logger = logging.getLogger(__name__)


def build_transporter(settings: Settings, *, dry_run: bool = False) -> Transporter:
    """Create a transporter with every enabled transport.

    In dry-run mode no transports are registered, so alerts are only logged.
    """
    transporter = Transporter()
    if dry_run:
        logger.info("Dry run: notifications disabled")
        return transporter

    if settings.email.enabled:
        password = settings.email.password
        transporter.add_transport(
            "email",
            EmailTransport(
                settings.email.host or "",
                settings.email.port,
                username=settings.email.username,
                password=password.get_secret_value() if password else "",
                from_address=settings.email.from_address,
                to_address=settings.email.to_address,
                use_tls=settings.email.use_tls,
                debug=settings.verbose,
            ),
        )

    if settings.slack.webhook_url is not None:
        transporter.add_transport(
            "slack",
            SlackTransport(
                settings.slack.webhook_url.get_secret_value(),
                settings.slack.channel,
            ),
        )

    if not transporter.names:
        logger.warning("No notification transports configured")
    return transporter


def build_engine(
    settings: Settings,
    *,
    blocks: int | None = None,
    dry_run: bool = False,
    formatter: AlertFormatter | None = None,
) -> Engine:
    """Create an engine running the node, reference and sync lag checks.

    Args:
        settings: Application settings.
        blocks: Lag threshold override, defaults to ``settings.blocks``.
        dry_run: Skip registering notification transports.
        formatter: Alert formatter, defaults to one tagged with the local hostname.

    Raises:
        ConfigurationError: If a check can raise an alert with no handler or renderer.
    """
    engine = Engine(build_transporter(settings, dry_run=dry_run))
    engine.add_checks(
        [
            NodeConnectionCheck(settings.node.url, timeout=settings.node.timeout),
            ReferenceNodeCheck(
                settings.reference.endpoint,
                api_key=(
                    settings.reference.api_key.get_secret_value()
                    if settings.reference.api_key
                    else None
                ),
                timeout=settings.reference.timeout,
            ),
            BlocksAwayCheck(settings.blocks if blocks is None else blocks),
        ]
    )

    formatter = formatter or AlertFormatter()
    register_handlers(engine, formatter)
    check_alert_coverage(engine, formatter)
    return engine


async def run_health_check(engine: Engine) -> Alert | None:
    """Run a single health check pass."""
    logger.info("[Health] Node in sync...")
    alert = await engine.execute()
    if alert is None:
        logger.info("[Health] Pass")
    else:
        logger.info(f"[Health] Fail => {alert.name}")
    return alert
