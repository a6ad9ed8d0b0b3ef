"""Tests for engine wiring from settings."""

from __future__ import annotations

import os
from typing import Any
from unittest.mock import AsyncMock, patch

import pytest

from eth_health.alerter import AlertFormatter
from eth_health.alerter.models import BLOCKS_AWAY_ERROR, ETH_CONNECTION_ERROR
from eth_health.checks import BlocksAwayCheck, NodeConnectionCheck, ReferenceNodeCheck
from eth_health.config import Settings
from eth_health.engine import Alert, Context
from eth_health.monitor import build_engine, build_transporter, run_health_check
from eth_health.transports import EmailTransport, SlackTransport

FULL_ENV = {
    "SMTP_HOST": "smtp.example.com",
    "SMTP_USER": "user",
    "SMTP_PASSWORD": "secret",
    "EMAIL_TO": "ops@example.com",
    "SLACK_WEBHOOK_URL": "https://hooks.slack.com/services/T/B/X",
    "SLACK_CHANNEL": "#alerts",
    "ETHERSCAN_API_KEY": "KEY",
    "BLOCKS": "20",
}


def load_settings(env: dict[str, str] | None = None) -> Settings:
    with patch.dict(os.environ, env or {}, clear=True):
        return Settings(_env_file=None)  # type: ignore[call-arg]


class TestBuildTransporter:
    """Tests for transport selection."""

    def test_all_transports(self) -> None:
        transporter = build_transporter(load_settings(FULL_ENV))

        assert sorted(transporter.names) == ["email", "slack"]

    def test_dry_run_has_no_transports(self) -> None:
        transporter = build_transporter(load_settings(FULL_ENV), dry_run=True)

        assert transporter.names == []

    def test_nothing_configured(self) -> None:
        assert build_transporter(load_settings()).names == []


class TestBuildEngine:
    """Tests for engine construction."""

    def test_check_order(self) -> None:
        engine = build_engine(load_settings(FULL_ENV))

        node, reference, sync = engine.checks
        assert isinstance(node, NodeConnectionCheck)
        assert isinstance(reference, ReferenceNodeCheck)
        assert isinstance(sync, BlocksAwayCheck)
        assert reference.api_key == "KEY"
        assert sync.blocks == 20

    def test_blocks_override(self) -> None:
        engine = build_engine(load_settings(FULL_ENV), blocks=3)

        assert engine.checks[-1].blocks == 3  # type: ignore[attr-defined]

    def test_handlers_registered(self) -> None:
        engine = build_engine(load_settings())

        assert set(engine.handlers) >= {ETH_CONNECTION_ERROR, BLOCKS_AWAY_ERROR}

    def test_transports_configured(self) -> None:
        engine = build_engine(load_settings(FULL_ENV))

        assert engine.transporter is not None
        assert sorted(engine.transporter.names) == ["email", "slack"]


class TestRunHealthCheck:
    """End-to-end run with stubbed data sources and transports."""

    @pytest.mark.asyncio
    async def test_lagging_node_notifies_all_transports(self) -> None:
        engine = build_engine(load_settings(FULL_ENV), formatter=AlertFormatter(hostname="node-1"))
        node, reference, _ = engine.checks

        with (
            patch.object(node, "get_block_number", AsyncMock(return_value=100)),
            patch.object(reference, "get_block_number", AsyncMock(return_value=150)),
            patch.object(EmailTransport, "send", AsyncMock(return_value="<id>")) as email_send,
            patch.object(SlackTransport, "send", AsyncMock(return_value="ok")) as slack_send,
        ):
            alert = await run_health_check(engine)

        assert alert == Alert(BLOCKS_AWAY_ERROR, {"blocksAway": 50})
        email_send.assert_awaited_once()
        slack_send.assert_awaited_once()
        subject: Any = email_send.await_args.args[0]
        assert subject == "(node-1) ETH node lagging behind"

    @pytest.mark.asyncio
    async def test_in_sync_sends_nothing(self) -> None:
        engine = build_engine(load_settings(FULL_ENV))
        node, reference, _ = engine.checks

        with (
            patch.object(node, "get_block_number", AsyncMock(return_value=100)),
            patch.object(reference, "get_block_number", AsyncMock(return_value=105)),
            patch.object(EmailTransport, "send", AsyncMock()) as email_send,
        ):
            alert = await run_health_check(engine)

        assert alert is None
        email_send.assert_not_called()

    @pytest.mark.asyncio
    async def test_node_down_skips_remaining_checks(self) -> None:
        engine = build_engine(load_settings(), formatter=AlertFormatter(hostname="node-1"))
        node, reference, _ = engine.checks
        reference_fetch = AsyncMock(return_value=105)

        with (
            patch.object(node, "get_block_number", AsyncMock(side_effect=OSError("refused"))),
            patch.object(reference, "get_block_number", reference_fetch),
        ):
            alert = await run_health_check(engine)

        assert alert is not None
        assert alert.name == ETH_CONNECTION_ERROR
        reference_fetch.assert_not_called()

    @pytest.mark.asyncio
    async def test_custom_check_added_after_defaults(self) -> None:
        """Test extra checks can read the heights written by the defaults."""
        seen: dict[str, Any] = {}

        class Snapshot:
            name = "Snapshot"

            async def execute(self, context: Context) -> Alert | None:
                seen.update(context)
                return None

        engine = build_engine(load_settings())
        engine.add_check(Snapshot())
        node, reference, _ = engine.checks[:3]

        with (
            patch.object(node, "get_block_number", AsyncMock(return_value=100)),
            patch.object(reference, "get_block_number", AsyncMock(return_value=101)),
        ):
            await run_health_check(engine)

        assert seen == {"ethBlockNumber": 100, "refBlockNumber": 101}
