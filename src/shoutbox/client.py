# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""HTTP client for the Shoutbox send API.

Each send normalizes the options, serializes them to compact JSON, checks
the body against the 1 MiB ceiling and issues one authenticated POST.

Outcomes:
- 2xx: ``SendResult(ok=True)`` carrying the parsed JSON response
- non-2xx: ``SendResult(ok=False)`` carrying the response text (not raised)
- network failure or timeout: the ``aiohttp`` exception is raised
- oversized body: ``PayloadTooLargeError`` raised before any request

Example:
    Sending several messages; each outcome is independent::

        async with Shoutbox("api-key") as client:
            results = await client.send_emails([first, second])
            failed = [r for r in results if not r.ok]
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Iterable
from typing import Any

import aiohttp

from .attachments import AttachmentReader, FilesystemReader
from .config import DEFAULT_API_ENDPOINT, DEFAULT_TIMEOUT, ShoutboxConfig, require_api_key
from .errors import PayloadTooLargeError
from .logger import get_logger
from .models import EmailOptions, SendResult
from .normalize import normalize_for_http
from .templates import Jinja2Renderer, TemplateRenderer

MAX_BODY_SIZE = 1024 * 1024

logger = get_logger("Shoutbox.http")


def serialize_payload(options: EmailOptions) -> bytes:
    """Encode normalized options as the JSON request body.

    Unset fields are omitted; ``headers`` and ``templateContent`` never
    appear in the body.
    """
    data = options.model_dump(
        mode="json",
        by_alias=True,
        exclude_none=True,
        exclude={"headers", "template_content"},
    )
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


class Shoutbox:
    """Client for the Shoutbox HTTP API.

    Attributes:
        endpoint: URL the requests are posted to.
        renderer: Renderer used for ``template_content``.
        reader: Reader used for attachments without inline content.
        timeout: Total request timeout in seconds.
    """

    def __init__(
        self,
        api_key: str | None,
        endpoint: str = DEFAULT_API_ENDPOINT,
        *,
        renderer: TemplateRenderer | None = None,
        reader: AttachmentReader | None = None,
        session: aiohttp.ClientSession | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """Initialize the client.

        Args:
            api_key: Shoutbox API key, sent as a bearer token.
            endpoint: Send endpoint URL.
            renderer: Template renderer (default: ``Jinja2Renderer()``).
            reader: Attachment reader (default: ``FilesystemReader()``).
            session: Shared aiohttp session; not closed by the client.
            timeout: Total request timeout in seconds.

        Raises:
            ConfigurationError: If the API key is missing or blank.
        """
        self._api_key = require_api_key(api_key)
        self.endpoint = endpoint or DEFAULT_API_ENDPOINT
        self.renderer = renderer or Jinja2Renderer()
        self.reader = reader or FilesystemReader()
        self.timeout = timeout
        self._session = session
        self._owns_session = False

    @classmethod
    def from_config(cls, config: ShoutboxConfig, **kwargs: Any) -> "Shoutbox":
        """Build a client from a ``ShoutboxConfig``."""
        return cls(config.api_key, config.endpoint, timeout=config.timeout, **kwargs)

    async def __aenter__(self) -> "Shoutbox":
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self._owns_session = True
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None
            self._owns_session = False

    def _headers(self, extra: dict[str, str]) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        headers.update(extra)
        return headers

    async def send_email(self, options: EmailOptions) -> SendResult:
        """Send one message through the HTTP API.

        Returns:
            The outcome; a rejection by the service is a failed result.

        Raises:
            PayloadTooLargeError: If the JSON body exceeds ``MAX_BODY_SIZE``.
            OSError: If an attachment file cannot be read.
            aiohttp.ClientError: On connection-level failures.
            asyncio.TimeoutError: If the request times out.
        """
        options, extra_headers = await normalize_for_http(options, self.renderer, self.reader)
        body = serialize_payload(options)
        if len(body) > MAX_BODY_SIZE:
            raise PayloadTooLargeError(len(body), MAX_BODY_SIZE)

        logger.debug("Posting %d byte payload to %s", len(body), self.endpoint)
        try:
            return await self._post(body, self._headers(extra_headers))
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.error("Error during request to %s: %s", self.endpoint, exc)
            raise

    async def send_emails(self, options_list: Iterable[EmailOptions]) -> list[SendResult]:
        """Send several messages concurrently with independent outcomes.

        All sends run to completion; a failing send never cancels the
        others. Exceptions are turned into failed results.

        Returns:
            One ``SendResult`` per message, in input order.
        """
        results = await asyncio.gather(
            *[self.send_email(options) for options in options_list],
            return_exceptions=True,
        )
        outcomes: list[SendResult] = []
        for result in results:
            if isinstance(result, BaseException):
                outcomes.append(SendResult.from_exception(result))
            else:
                outcomes.append(result)
        return outcomes

    send_many_independent = send_emails

    async def _post(self, body: bytes, headers: dict[str, str]) -> SendResult:
        if self._session is not None:
            return await self._do_post(self._session, body, headers)
        async with aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.timeout)
        ) as session:
            return await self._do_post(session, body, headers)

    async def _do_post(self, session: aiohttp.ClientSession, body: bytes, headers: dict[str, str]) -> SendResult:
        async with session.post(
            self.endpoint,
            data=body,
            headers=headers,
            timeout=aiohttp.ClientTimeout(total=self.timeout),
        ) as response:
            if 200 <= response.status < 300:
                try:
                    data = await response.json(content_type=None)
                except ValueError:
                    data = await response.text()
                    logger.warning("Non-JSON success response from %s", self.endpoint)
                logger.info("Email sent successfully: %s", data)
                return SendResult(ok=True, status=response.status, data=data)

            text = await response.text()
            logger.error("Failed to send email (status %s): %s", response.status, text)
            return SendResult(ok=False, status=response.status, error=text)

    def __repr__(self) -> str:
        return f"<Shoutbox endpoint='{self.endpoint}'>"
