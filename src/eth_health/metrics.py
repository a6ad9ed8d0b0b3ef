"""Prometheus metrics for health check runs.

Runs are short-lived (one pass per scheduler tick), so metrics are exported
through the node_exporter textfile collector rather than an HTTP endpoint.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, write_to_textfile

logger = logging.getLogger(__name__)

CHECK_OUTCOMES = Counter(
    "eth_health_check_outcomes_total",
    "Check outcomes by check and result",
    ["check", "outcome"],
)

ALERTS_TOTAL = Counter(
    "eth_health_alerts_total",
    "Alerts raised by checks",
    ["alert"],
)

DELIVERIES_TOTAL = Counter(
    "eth_health_deliveries_total",
    "Notification deliveries by transport and result",
    ["transport", "outcome"],
)

BLOCKS_AWAY = Gauge(
    "eth_health_blocks_away",
    "Reference chain height minus local node height",
)

LAST_RUN_TIMESTAMP = Gauge(
    "eth_health_last_run_timestamp",
    "Unix timestamp of the last completed engine run",
)


def mark_run_complete() -> None:
    """Record the completion time of an engine run."""
    LAST_RUN_TIMESTAMP.set(time.time())


def write_metrics(path: str | Path, registry: CollectorRegistry = REGISTRY) -> None:
    """Write all metrics to a textfile collector file.

    Args:
        path: Destination file, typically ending in ``.prom``.
        registry: Registry to export.
    """
    write_to_textfile(str(path), registry)
    logger.debug("Metrics written to %s", path)
