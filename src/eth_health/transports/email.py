"""SMTP email transport implementation."""

from __future__ import annotations

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from email.utils import make_msgid

from eth_health.transports.base import TransportError

logger = logging.getLogger(__name__)


class EmailTransport:
    """Email transport sending alerts through an SMTP relay.

    The blocking SMTP session runs in a worker thread so concurrent
    transports are not held up.
    """

    def __init__(
        self,
        host: str,
        port: int = 587,
        *,
        username: str = "",
        password: str = "",
        from_address: str,
        to_address: str | None = None,
        use_tls: bool = True,
        timeout: float = 10.0,
        debug: bool = False,
    ) -> None:
        """Initialize email transport.

        Args:
            host: SMTP server host.
            port: SMTP server port.
            username: SMTP login, skipped when empty.
            password: SMTP password.
            from_address: Sender address.
            to_address: Default recipient used by ``send``.
            use_tls: Upgrade the connection with STARTTLS.
            timeout: SMTP socket timeout in seconds.
            debug: Enable smtplib protocol debug output.
        """
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_address = from_address
        self.to_address = to_address
        self.use_tls = use_tls
        self.timeout = timeout
        self.debug = debug
        self.name = "email"

    def _build_message(self, to: str, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.from_address
        message["To"] = to
        message["Subject"] = subject
        message["Message-ID"] = make_msgid()
        message.set_content(body)
        return message

    def _deliver(self, message: EmailMessage) -> str:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            if self.debug:
                server.set_debuglevel(1)
            if self.use_tls:
                server.starttls()
            if self.username:
                server.login(self.username, self.password)
            server.send_message(message)
        return str(message["Message-ID"])

    async def send(self, subject: str, body: str) -> str:
        """Send to the default recipient."""
        return await self.send_to(self.to_address or "", subject, body)

    async def send_to(self, destination: str, subject: str, body: str) -> str:
        """Send an email.

        Args:
            destination: Recipient address.
            subject: Email subject.
            body: Plain text body.

        Returns:
            The Message-ID of the sent email.

        Raises:
            TransportError: If no recipient is given or delivery fails.
        """
        if not destination:
            raise TransportError("You need to supply an email to send to")

        message = self._build_message(destination, subject, body)
        try:
            response = await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            raise TransportError(f"Email delivery to {destination} failed: {e}", e) from e

        logger.debug(f"[msg:email] ({response}) {destination} => {subject}")
        return response
