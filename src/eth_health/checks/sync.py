"""Sync lag check comparing the local node with the reference chain."""

from __future__ import annotations

import logging

from eth_health import metrics
from eth_health.alerter.models import (
    BLOCKS_AWAY,
    BLOCKS_AWAY_ERROR,
    ETH_BLOCK_NUMBER,
    NO_BLOCK_NUMBERS_ERROR,
    REF_BLOCK_NUMBER,
)
from eth_health.engine.models import Alert, Context

logger = logging.getLogger(__name__)

DEFAULT_MAX_BLOCKS_AWAY = 10


class BlocksAwayCheck:
    """Alert when the local node trails the reference by too many blocks.

    Reads the heights written by NodeConnectionCheck and ReferenceNodeCheck,
    so it must run after both. A node ahead of the reference (negative lag)
    passes.
    """

    name = "BlocksAwayCheck"
    alert_names = (NO_BLOCK_NUMBERS_ERROR, BLOCKS_AWAY_ERROR)

    def __init__(self, blocks: int = DEFAULT_MAX_BLOCKS_AWAY) -> None:
        """Initialize the check.

        Args:
            blocks: Maximum allowed lag in blocks.
        """
        self.blocks = blocks

    async def execute(self, context: Context) -> Alert | None:
        eth_block_number = context.get(ETH_BLOCK_NUMBER)
        ref_block_number = context.get(REF_BLOCK_NUMBER)

        if not eth_block_number or not ref_block_number:
            logger.info("Unable to fetch block numbers")
            return Alert(NO_BLOCK_NUMBERS_ERROR, {})

        blocks_away = ref_block_number - eth_block_number
        metrics.BLOCKS_AWAY.set(blocks_away)

        if blocks_away > self.blocks:
            logger.info(
                f"REF ({ref_block_number}) is {blocks_away} blocks ahead "
                f"of node ({eth_block_number})"
            )
            return Alert(BLOCKS_AWAY_ERROR, {BLOCKS_AWAY: blocks_away})

        logger.debug(f"Node is {blocks_away} blocks away from REF, within {self.blocks}")
        return None
