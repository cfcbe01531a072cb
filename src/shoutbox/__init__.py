# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Python client for the Shoutbox transactional email service.

This package sends email through Shoutbox either over its HTTPS API or
over SMTP submission, sharing one options model between both paths:

- ``Shoutbox``: JSON POST to the send endpoint, independent bulk outcomes
- ``SMTPClient``: MIME message over STARTTLS, all-or-nothing bulk sends
- ``EmailOptions`` / ``Attachment``: the request model
- Jinja2 or callable template rendering into the HTML body

Example:
    Sending through the HTTP API::

        from shoutbox import EmailOptions, Shoutbox

        client = Shoutbox("api-key")
        result = await client.send_email(EmailOptions(
            from_="no-reply@example.com",
            to=["user@example.com"],
            subject="Welcome",
            html="<h1>Hello</h1>",
        ))
"""

from .client import DEFAULT_API_ENDPOINT, MAX_BODY_SIZE, Shoutbox
from .config import ShoutboxConfig
from .errors import ConfigurationError, PayloadTooLargeError, ShoutboxError
from .models import Attachment, Base64Content, EmailOptions, RawContent, SendResult
from .smtp import SMTPClient
from .templates import CallableRenderer, Jinja2Renderer, TemplateRef

__all__ = [
    "Attachment",
    "Base64Content",
    "CallableRenderer",
    "ConfigurationError",
    "DEFAULT_API_ENDPOINT",
    "EmailOptions",
    "Jinja2Renderer",
    "MAX_BODY_SIZE",
    "PayloadTooLargeError",
    "RawContent",
    "SMTPClient",
    "SendResult",
    "Shoutbox",
    "ShoutboxConfig",
    "ShoutboxError",
    "TemplateRef",
]
