"""Block height checks against the local node and a reference explorer.

Both checks turn connectivity failures into alerts instead of raising, so
an unreachable node ends the run with a notification rather than a crash.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
from web3 import AsyncWeb3
from web3.providers import AsyncHTTPProvider

from eth_health.alerter.models import (
    ETH_BLOCK_NUMBER,
    ETH_CONNECTION_ERROR,
    REF_BLOCK_NUMBER,
    REF_CONNECTION_ERROR,
)
from eth_health.engine.models import Alert, Context

logger = logging.getLogger(__name__)

DEFAULT_NODE_URL = "http://localhost:8545"
DEFAULT_TIMEOUT = 10.0


def parse_block_number(value: Any) -> int:
    """Parse a block height from an RPC quantity.

    Accepts ints, hex quantities (``"0x1b4"``) and decimal strings.

    Raises:
        ValueError: If the value is not a block height.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid block number: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text[:2].lower() == "0x":
            return int(text, 16)
        return int(text)
    raise ValueError(f"Invalid block number: {value!r}")


class NodeConnectionCheck:
    """Fetch the local node's block height over JSON-RPC."""

    name = "NodeConnectionCheck"
    alert_names = (ETH_CONNECTION_ERROR,)

    def __init__(
        self,
        rpc_url: str = DEFAULT_NODE_URL,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        w3: AsyncWeb3 | None = None,
    ) -> None:
        """Initialize the check.

        Args:
            rpc_url: JSON-RPC endpoint of the local node.
            timeout: Maximum time to wait for the node, in seconds.
            w3: Preconfigured web3 instance, built from rpc_url when omitted.
        """
        self.rpc_url = rpc_url
        self.timeout = timeout
        self._w3 = w3 or AsyncWeb3(AsyncHTTPProvider(rpc_url))

    async def get_block_number(self) -> int:
        """Get the node's current block height."""
        height = await asyncio.wait_for(self._w3.eth.block_number, timeout=self.timeout)
        return parse_block_number(height)

    async def execute(self, context: Context) -> Alert | None:
        try:
            block_number = await self.get_block_number()
        except Exception as e:
            logger.error(f"ETH node {self.rpc_url} unreachable: {e}")
            return Alert(ETH_CONNECTION_ERROR, {"err": e})

        logger.debug(f"ETH node block number: {block_number}")
        context[ETH_BLOCK_NUMBER] = block_number
        return None


class ReferenceNodeCheck:
    """Fetch the reference chain height from an Etherscan-style proxy API."""

    name = "ReferenceNodeCheck"
    alert_names = (REF_CONNECTION_ERROR,)

    def __init__(
        self,
        url: str,
        *,
        api_key: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the check.

        Args:
            url: Endpoint answering ``eth_blockNumber`` with a JSON ``result``.
            api_key: Optional explorer API key, sent as the ``apikey`` parameter.
            timeout: HTTP request timeout in seconds.
            transport: Optional httpx transport, such as ``httpx.MockTransport``.
        """
        self.url = url
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    async def get_block_number(self) -> int:
        """Get the reference chain's current block height."""
        url = httpx.URL(self.url)
        if self.api_key:
            url = url.copy_merge_params({"apikey": self.api_key})

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.get(url)
            response.raise_for_status()
            payload = response.json()

        if not isinstance(payload, dict) or "result" not in payload:
            raise ValueError(f"Unexpected reference response: {payload!r}")
        return parse_block_number(payload["result"])

    async def execute(self, context: Context) -> Alert | None:
        try:
            block_number = await self.get_block_number()
        except Exception as e:
            logger.error(f"Reference node {self.url} unreachable: {e}")
            return Alert(REF_CONNECTION_ERROR, {"err": e})

        logger.debug(f"Reference block number: {block_number}")
        context[REF_BLOCK_NUMBER] = block_number
        return None
