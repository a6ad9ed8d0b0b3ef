"""Notification transports and the fan-out transporter."""

from eth_health.transports.base import Transport, TransportError
from eth_health.transports.email import EmailTransport
from eth_health.transports.slack import SlackTransport
from eth_health.transports.transporter import DeliveryResult, DispatchResult, Transporter

__all__ = [
    "DeliveryResult",
    "DispatchResult",
    "EmailTransport",
    "SlackTransport",
    "Transport",
    "TransportError",
    "Transporter",
]
