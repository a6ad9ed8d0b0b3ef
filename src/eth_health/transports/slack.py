"""Slack incoming webhook transport implementation."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime

import httpx

from eth_health.transports.base import TransportError

logger = logging.getLogger(__name__)


def parse_retry_after(value: str | None, default: float) -> float:
    """Get the wait in seconds from a Retry-After header.

    The header holds either a number of seconds or an HTTP-date. Missing or
    malformed values fall back to ``default``.
    """
    if not value:
        return default
    try:
        return max(float(value), 0.0)
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return default
    if when.tzinfo is None:
        when = when.replace(tzinfo=UTC)
    return max((when - datetime.now(UTC)).total_seconds(), 0.0)


class SlackTransport:
    """Slack incoming webhook transport for sending alerts.

    Posts alerts to a Slack webhook with retry support for timeouts,
    rate limiting and server errors.
    """

    def __init__(
        self,
        webhook_url: str,
        channel: str | None = None,
        *,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        timeout: float = 10.0,
    ) -> None:
        """Initialize Slack transport.

        Args:
            webhook_url: Slack incoming webhook URL.
            channel: Default channel, None to use the webhook's own channel.
            max_retries: Maximum delivery attempts.
            retry_delay: Base delay between retries (exponential backoff).
            timeout: HTTP request timeout in seconds.
        """
        self.webhook_url = webhook_url
        self.channel = channel
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.timeout = timeout
        self.name = "slack"

    @staticmethod
    def build_text(subject: str, body: str) -> str:
        """Combine subject and body into Slack mrkdwn text."""
        if not body:
            return subject
        return f"*{subject}*\n{body}"

    async def send(self, subject: str, body: str) -> str:
        """Send to the default channel."""
        return await self.send_to(self.channel, subject, body)

    async def send_to(self, destination: str | None, subject: str, body: str) -> str:
        """Send a message to a Slack channel.

        Args:
            destination: Channel override, None for the webhook default.
            subject: Message headline.
            body: Message body.

        Returns:
            The webhook response body (``ok`` on success).

        Raises:
            TransportError: If delivery failed after all retries.
        """
        payload: dict[str, str] = {"text": self.build_text(subject, body)}
        if destination:
            payload["channel"] = destination

        last_error = "no attempts made"
        for attempt in range(self.max_retries):
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.webhook_url, json=payload)

                    if response.status_code == 200:
                        logger.debug(f"[msg:slack] #{destination or 'default'} => {subject}")
                        return response.text

                    if response.status_code == 429:
                        last_error = "rate limited"
                        if attempt == self.max_retries - 1:
                            break
                        retry_after = parse_retry_after(
                            response.headers.get("Retry-After"), self.retry_delay
                        )
                        logger.warning(f"Slack rate limited, retry after {retry_after}s")
                        await asyncio.sleep(retry_after)
                        continue

                    last_error = f"{response.status_code} {response.text}"
                    if response.status_code < 500:
                        raise TransportError(f"Slack webhook rejected message: {last_error}")

                    logger.error(f"Slack webhook failed: {last_error}")

            except httpx.TimeoutException:
                last_error = "timeout"
                logger.warning(f"Slack webhook timeout (attempt {attempt + 1})")
            except httpx.HTTPError as e:
                last_error = str(e)
                logger.error(f"Slack webhook error: {e}")

            if attempt < self.max_retries - 1:
                delay = self.retry_delay * (2**attempt)
                await asyncio.sleep(delay)

        raise TransportError(f"Slack delivery failed after all retries: {last_error}")
