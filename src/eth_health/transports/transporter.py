"""Transporter for multi-transport delivery."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from eth_health import metrics

if TYPE_CHECKING:
    from eth_health.transports.base import Transport

logger = logging.getLogger(__name__)


@dataclass
class DeliveryResult:
    """Outcome of delivering a message through one transport."""

    transport: str
    success: bool
    response: Any = None
    error: Exception | None = None


@dataclass
class DispatchResult:
    """Result of delivering a message through all transports."""

    success_count: int
    failure_count: int
    results: dict[str, DeliveryResult] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def all_succeeded(self) -> bool:
        """Return True if all transports succeeded."""
        return self.failure_count == 0 and self.success_count > 0

    @property
    def failures(self) -> dict[str, Exception | None]:
        """Errors of the transports that failed, keyed by transport name."""
        return {
            name: result.error for name, result in self.results.items() if not result.success
        }


class Transporter:
    """Fans messages out to a named set of transports.

    Every transport is attempted on each ``send_all``, concurrently; a
    failing transport never prevents delivery through the others.
    """

    def __init__(self, transports: dict[str, Transport] | None = None) -> None:
        """Initialize the transporter.

        Args:
            transports: Initial transports keyed by name.
        """
        self._transports: dict[str, Transport] = dict(transports or {})

    @property
    def names(self) -> list[str]:
        """Names of the registered transports."""
        return list(self._transports)

    def add_transport(self, name: str, transport: Transport) -> None:
        self._transports[name] = transport

    def del_transport(self, name: str) -> None:
        self._transports.pop(name, None)

    async def _deliver(
        self, name: str, transport: Transport, subject: str, body: str
    ) -> DeliveryResult:
        """Send through a single transport, capturing the outcome."""
        try:
            response = await transport.send(subject, body)
        except Exception as e:
            logger.warning(f"Delivery via {name} failed: {e}")
            metrics.DELIVERIES_TOTAL.labels(transport=name, outcome="failure").inc()
            return DeliveryResult(transport=name, success=False, error=e)

        logger.debug(f"Delivery via {name} succeeded")
        metrics.DELIVERIES_TOTAL.labels(transport=name, outcome="success").inc()
        return DeliveryResult(transport=name, success=True, response=response)

    async def send(self, name: str, subject: str, body: str) -> DeliveryResult | None:
        """Send through one named transport.

        Args:
            name: Transport name.
            subject: Message subject.
            body: Message body.

        Returns:
            The delivery result, or None if no transport has that name.
        """
        transport = self._transports.get(name)
        if transport is None:
            logger.debug(f"No transport named {name}, skipping")
            return None
        return await self._deliver(name, transport, subject, body)

    async def send_all(self, subject: str, body: str) -> DispatchResult:
        """Send through all transports concurrently.

        Args:
            subject: Message subject.
            body: Message body.

        Returns:
            DispatchResult with per-transport outcomes.
        """
        if not self._transports:
            logger.warning("No transports configured for delivery")
            return DispatchResult(success_count=0, failure_count=0)

        tasks = [
            self._deliver(name, transport, subject, body)
            for name, transport in list(self._transports.items())
        ]
        deliveries = await asyncio.gather(*tasks)

        results = {delivery.transport: delivery for delivery in deliveries}
        success_count = sum(1 for delivery in deliveries if delivery.success)
        failure_count = len(deliveries) - success_count

        logger.info(f"Delivery complete: {success_count}/{len(deliveries)} succeeded")

        return DispatchResult(
            success_count=success_count,
            failure_count=failure_count,
            results=results,
        )
