# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Exceptions raised locally by the Shoutbox client.

Attachment read failures and transport failures (``aiohttp.ClientError``,
``aiosmtplib.SMTPException``, timeouts) are not wrapped and reach the caller
as raised. A remote rejection on the HTTP path is not an exception at all:
it is returned as a failed ``SendResult``.
"""

from __future__ import annotations


class ShoutboxError(Exception):
    """Base class for errors detected by the client before any I/O."""

    code = "shoutbox_error"


class ConfigurationError(ShoutboxError):
    """Raised when a client is built with a missing or invalid setting."""

    code = "configuration_error"


class PayloadTooLargeError(ShoutboxError):
    """Raised when the serialized request body exceeds the size ceiling.

    Attributes:
        size: Actual size of the encoded body in bytes.
        limit: Maximum accepted size in bytes.
    """

    code = "payload_too_large"

    def __init__(self, size: int, limit: int):
        super().__init__(f"Body too large, expected at most {limit} bytes, {size} bytes given")
        self.size = size
        self.limit = limit
