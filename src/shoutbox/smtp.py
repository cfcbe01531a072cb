# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""SMTP client for Shoutbox mail submission.

Messages are converted to MIME and submitted to the Shoutbox submission
host over STARTTLS, authenticating with the API key as password. No session
is kept between operations: every send and every verification opens,
authenticates and closes its own connection.

Example:
    Verifying credentials, then sending::

        client = SMTPClient("api-key")
        if await client.verify_connection():
            await client.send_email(options)
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from email.message import EmailMessage
from email.utils import formataddr
from typing import Any

import aiosmtplib

from .attachments import DEFAULT_CONTENT_TYPE, AttachmentReader, FilesystemReader
from .config import (
    DEFAULT_SMTP_HOST,
    DEFAULT_SMTP_PORT,
    DEFAULT_SMTP_USERNAME,
    ShoutboxConfig,
    require_api_key,
)
from .logger import get_logger
from .models import EmailOptions, address_list
from .normalize import normalize_for_smtp
from .templates import Jinja2Renderer, TemplateRenderer

DEFAULT_SMTP_TIMEOUT = 10.0

logger = get_logger("Shoutbox.smtp")


def split_content_type(content_type: str | None) -> tuple[str, str]:
    """Split a MIME type into (maintype, subtype), defaulting to octet-stream."""
    if not content_type or "/" not in content_type:
        content_type = DEFAULT_CONTENT_TYPE
    maintype, subtype = content_type.split("/", 1)
    return maintype, subtype


def build_message(options: EmailOptions, headers: dict[str, str] | None = None) -> EmailMessage:
    """Build an EmailMessage from normalized options.

    Text and HTML bodies become a ``multipart/alternative`` pair; a single
    body becomes a single part. Custom headers replace existing ones with
    the same name. Attachments must already carry raw content.

    Args:
        options: Options returned by ``normalize_for_smtp``.
        headers: Extra message headers.

    Returns:
        The MIME message ready for submission.
    """
    msg = EmailMessage()
    msg["From"] = formataddr((options.name, options.from_)) if options.name else options.from_
    msg["To"] = ", ".join(address_list(options.to))
    if cc := address_list(options.cc):
        msg["Cc"] = ", ".join(cc)
    msg["Subject"] = options.subject
    if options.reply_to:
        msg["Reply-To"] = options.reply_to

    if options.text and options.html:
        msg.set_content(options.text)
        msg.add_alternative(options.html, subtype="html")
    elif options.html:
        msg.set_content(options.html, subtype="html")
    else:
        msg.set_content(options.text or "")

    for header, value in (headers or {}).items():
        if header in msg:
            msg.replace_header(header, value)
        else:
            msg[header] = value

    for attachment in options.attachments or []:
        maintype, subtype = split_content_type(attachment.content_type)
        msg.add_attachment(
            attachment.content.as_bytes(),
            maintype=maintype,
            subtype=subtype,
            filename=attachment.filename,
        )
    return msg


class SMTPClient:
    """Client for Shoutbox SMTP submission.

    Attributes:
        host: Submission host.
        port: Submission port; the session is upgraded with STARTTLS.
        username: Login name; the API key is the password.
        renderer: Renderer used for ``template_content``.
        reader: Reader used for attachments without inline content.
        timeout: Connection timeout in seconds.
    """

    def __init__(
        self,
        api_key: str | None,
        *,
        host: str = DEFAULT_SMTP_HOST,
        port: int = DEFAULT_SMTP_PORT,
        username: str = DEFAULT_SMTP_USERNAME,
        renderer: TemplateRenderer | None = None,
        reader: AttachmentReader | None = None,
        timeout: float = DEFAULT_SMTP_TIMEOUT,
    ):
        """Initialize the client.

        Raises:
            ConfigurationError: If the API key is missing or blank.
        """
        self._api_key = require_api_key(api_key)
        self.host = host
        self.port = port
        self.username = username
        self.renderer = renderer or Jinja2Renderer()
        self.reader = reader or FilesystemReader()
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: ShoutboxConfig, **kwargs: Any) -> "SMTPClient":
        """Build a client from a ``ShoutboxConfig``."""
        return cls(
            config.api_key,
            host=config.smtp_host,
            port=config.smtp_port,
            username=config.smtp_username,
            timeout=config.timeout,
            **kwargs,
        )

    async def _connect(self) -> aiosmtplib.SMTP:
        """Open, upgrade and authenticate a new SMTP session.

        Raises:
            asyncio.TimeoutError: If the handshake does not complete in time.
            aiosmtplib.SMTPException: If connection or authentication fails.
        """
        smtp = aiosmtplib.SMTP(
            hostname=self.host,
            port=self.port,
            start_tls=True,
            use_tls=False,
            validate_certs=True,
            timeout=self.timeout,
        )

        async def _do_connect():
            await smtp.connect()
            await smtp.login(self.username, self._api_key)

        logger.debug("Connecting to %s:%s", self.host, self.port)
        try:
            await asyncio.wait_for(_do_connect(), timeout=self.timeout + 5.0)
        except BaseException:
            await self._close(smtp)
            raise
        return smtp

    async def _close(self, smtp: aiosmtplib.SMTP) -> None:
        try:
            await smtp.quit()
        except Exception as exc:
            logger.debug("Ignoring error while closing SMTP session: %s", exc)

    async def verify_connection(self) -> bool:
        """Check that the server accepts a connection and the credentials.

        Returns:
            True on success, False on any failure. Never raises.
        """
        try:
            smtp = await self._connect()
        except Exception as exc:
            logger.error("SMTP connection error: %s", exc)
            return False
        await self._close(smtp)
        return True

    async def send_email(self, options: EmailOptions) -> None:
        """Send one message over SMTP.

        Raises:
            OSError: If an attachment file cannot be read.
            aiosmtplib.SMTPException: On connection, auth or submission errors.
            asyncio.TimeoutError: If the connection times out.
        """
        try:
            options, headers = await normalize_for_smtp(options, self.renderer, self.reader)
            message = build_message(options, headers)
            smtp = await self._connect()
            try:
                await smtp.send_message(message)
            finally:
                await self._close(smtp)
        except Exception as exc:
            logger.error("SMTP error: %s", exc)
            raise
        logger.info("Email submitted via %s to %s", self.host, message["To"])

    async def send_emails(self, options_list: Iterable[EmailOptions]) -> list[None]:
        """Send several messages concurrently; any failure fails the call.

        The first exception raised by a send propagates. Sends already in
        flight are not cancelled, and there is no per-message outcome.
        """
        return await asyncio.gather(*[self.send_email(options) for options in options_list])

    send_many_all_or_nothing = send_emails

    def __repr__(self) -> str:
        return f"<SMTPClient host='{self.host}:{self.port}' user='{self.username}'>"
