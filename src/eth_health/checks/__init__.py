"""Health checks - block height sources and sync lag."""

from eth_health.checks.node import NodeConnectionCheck, ReferenceNodeCheck, parse_block_number
from eth_health.checks.sync import BlocksAwayCheck

__all__ = [
    "BlocksAwayCheck",
    "NodeConnectionCheck",
    "ReferenceNodeCheck",
    "parse_block_number",
]
