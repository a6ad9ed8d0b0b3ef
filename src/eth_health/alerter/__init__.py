"""Alerting layer - alert rendering and notification handlers."""

from eth_health.alerter.formatter import RENDERERS, AlertFormatter, UnknownAlertError
from eth_health.alerter.handlers import check_alert_coverage, notify_handler, register_handlers
from eth_health.alerter.models import AlertMessage

__all__ = [
    "RENDERERS",
    "AlertFormatter",
    "AlertMessage",
    "UnknownAlertError",
    "check_alert_coverage",
    "notify_handler",
    "register_handlers",
]
