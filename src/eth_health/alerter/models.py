"""Data models and names for the alerter module."""

from __future__ import annotations

from dataclasses import dataclass

# Alert names raised by the bundled checks
ETH_CONNECTION_ERROR = "ethConnectionError"
REF_CONNECTION_ERROR = "refConnectionError"
NO_BLOCK_NUMBERS_ERROR = "noBlockNumbersError"
BLOCKS_AWAY_ERROR = "blocksAwayError"

# Context keys written by the bundled checks
ETH_BLOCK_NUMBER = "ethBlockNumber"
REF_BLOCK_NUMBER = "refBlockNumber"

# Parameter of blocksAwayError
BLOCKS_AWAY = "blocksAway"


@dataclass(frozen=True)
class AlertMessage:
    """A rendered alert ready for delivery.

    Attributes:
        subject: Short headline, used as the email subject or chat title.
        body: Message body, may be empty.
    """

    subject: str
    body: str = ""
