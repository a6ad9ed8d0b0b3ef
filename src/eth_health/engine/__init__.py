"""Check execution engine - sequential checks, first-alert dispatch."""

from eth_health.engine.engine import ConfigurationError, Engine
from eth_health.engine.models import Alert, Check, Context, Handler

__all__ = [
    "Alert",
    "Check",
    "ConfigurationError",
    "Context",
    "Engine",
    "Handler",
]
