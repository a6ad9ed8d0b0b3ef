"""Tests for the alert message formatter."""

from __future__ import annotations

import pytest

from eth_health.alerter.formatter import (
    RENDERERS,
    AlertFormatter,
    UnknownAlertError,
    format_error,
    render_blocks_away,
)
from eth_health.alerter.models import (
    BLOCKS_AWAY_ERROR,
    ETH_CONNECTION_ERROR,
    NO_BLOCK_NUMBERS_ERROR,
    REF_CONNECTION_ERROR,
    AlertMessage,
)
from eth_health.engine import ConfigurationError

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def formatter() -> AlertFormatter:
    """Create a formatter with a fixed hostname."""
    return AlertFormatter(hostname="node-1")


def raised_error() -> ConnectionError:
    """Create an exception carrying a traceback."""
    try:
        raise ConnectionError("connection refused")
    except ConnectionError as e:
        return e


# ============================================================================
# Renderer Tests
# ============================================================================


class TestRenderers:
    """Tests for the per-alert renderers."""

    def test_covers_all_check_alerts(self) -> None:
        """Test every alert the bundled checks raise has a renderer."""
        assert set(RENDERERS) == {
            ETH_CONNECTION_ERROR,
            REF_CONNECTION_ERROR,
            NO_BLOCK_NUMBERS_ERROR,
            BLOCKS_AWAY_ERROR,
        }

    def test_blocks_away_body(self) -> None:
        """Test the lag is included in the body."""
        message = render_blocks_away({"blocksAway": 15})
        assert message == AlertMessage(
            subject="ETH node lagging behind",
            body="ETH node is behind the reference by 15 blocks",
        )

    def test_renderers_are_pure(self) -> None:
        """Test rendering the same params twice gives the same message."""
        for renderer in RENDERERS.values():
            assert renderer({}) == renderer({})


# ============================================================================
# AlertFormatter Tests
# ============================================================================


class TestAlertFormatter:
    """Tests for AlertFormatter."""

    def test_default_hostname(self) -> None:
        """Test the local hostname is used when none is given."""
        assert AlertFormatter().hostname

    def test_subject_tagged_with_hostname(self, formatter: AlertFormatter) -> None:
        """Test subjects are prefixed with the host."""
        message = formatter.format(NO_BLOCK_NUMBERS_ERROR, {})
        assert message.subject == "(node-1) Unable to fetch block numbers"
        assert message.body == ""

    def test_blocks_away(self, formatter: AlertFormatter) -> None:
        """Test a lag alert renders subject and body."""
        message = formatter.format(BLOCKS_AWAY_ERROR, {"blocksAway": 42})
        assert message.subject == "(node-1) ETH node lagging behind"
        assert "42 blocks" in message.body

    def test_error_stack_appended(self, formatter: AlertFormatter) -> None:
        """Test the error traceback is appended to the body."""
        message = formatter.format(ETH_CONNECTION_ERROR, {"err": raised_error()})

        assert message.subject == "(node-1) ETH node connection error"
        assert message.body.startswith("Stack:\n")
        assert "Traceback" in message.body
        assert "ConnectionError: connection refused" in message.body

    def test_error_after_body(self, formatter: AlertFormatter) -> None:
        """Test the stack follows an existing body."""
        message = formatter.format(BLOCKS_AWAY_ERROR, {"blocksAway": 12, "err": "boom"})
        assert message.body == (
            "ETH node is behind the reference by 12 blocks\n\nStack:\nboom"
        )

    def test_unknown_alert_raises(self, formatter: AlertFormatter) -> None:
        """Test a missing renderer is a configuration error."""
        with pytest.raises(UnknownAlertError, match="unknownError"):
            formatter.format("unknownError", {})

    def test_unknown_alert_is_configuration_error(self) -> None:
        """Test UnknownAlertError can be caught as ConfigurationError."""
        assert issubclass(UnknownAlertError, ConfigurationError)

    def test_register_custom_renderer(self, formatter: AlertFormatter) -> None:
        """Test the renderer table is extensible."""
        formatter.register("peerCountError", lambda p: AlertMessage(f"{p['peers']} peers"))

        assert "peerCountError" in formatter.names
        assert formatter.format("peerCountError", {"peers": 0}).subject == "(node-1) 0 peers"

    def test_register_does_not_mutate_defaults(self, formatter: AlertFormatter) -> None:
        """Test registering on one formatter leaves the module table alone."""
        formatter.register("peerCountError", lambda p: AlertMessage("peers"))
        assert "peerCountError" not in RENDERERS

    def test_custom_renderer_table(self) -> None:
        """Test a formatter restricted to a subset of alerts."""
        formatter = AlertFormatter({BLOCKS_AWAY_ERROR: render_blocks_away}, hostname="h")
        assert formatter.names == frozenset({BLOCKS_AWAY_ERROR})


class TestFormatError:
    """Tests for error formatting."""

    def test_string(self) -> None:
        assert format_error("plain message") == "plain message"

    def test_exception_without_traceback(self) -> None:
        assert format_error(ValueError("bad")) == "ValueError: bad"
