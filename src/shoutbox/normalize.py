# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Normalization of ``EmailOptions`` before dispatch.

Both dispatchers run the same steps on a request before encoding it for
their transport:

1. Extract custom headers out of the options
2. Render ``template_content`` into ``html``
3. Resolve every attachment (content, filename, content type)
4. Derive a plain-text body from the HTML (SMTP only)

The caller's options object is never mutated; each step returns a copy.

Example:
    Preparing a request for the HTTP API::

        options, headers = await normalize_for_http(options, renderer, reader)
"""

from __future__ import annotations

import re
from pathlib import PurePath
from typing import Literal

from .attachments import DEFAULT_CONTENT_TYPE, AttachmentReader, guess_content_type
from .errors import ConfigurationError
from .logger import get_logger
from .models import Attachment, Base64Content, EmailOptions, RawContent
from .templates import TemplateRenderer

logger = get_logger("Shoutbox.normalize")

HTML_TAG_PATTERN = re.compile(r"<[^>]*>")

# Renderer output artifacts removed from SMTP bodies
DOCTYPE_PATTERN = re.compile(r"<!DOCTYPE[^>]*>", re.IGNORECASE)
HTML_WRAPPER_PATTERN = re.compile(r"</?html[^>]*>", re.IGNORECASE)
MARKER_TAG_PATTERN = re.compile(r"\$<|>\$/")
MARKER_PATTERN = re.compile(r"\$|/\$")

ContentEncoding = Literal["base64", "raw"]


def strip_html(html: str) -> str:
    """Remove every ``<...>`` span from ``html``.

    This is a plain tag-stripping pass, not an HTML parser.

    Example:
        >>> strip_html("<h1>Hi</h1><p>Bye</p>")
        'HiBye'
    """
    return HTML_TAG_PATTERN.sub("", html)


def clean_rendered_html(html: str) -> str:
    """Strip document wrapper and marker artifacts from rendered HTML.

    Removes a ``<!DOCTYPE>`` declaration, ``<html>`` open/close tags and
    the ``$`` markers some component renderers leave around elements.
    Only meant for renderer output, not as a general sanitizer.
    """
    html = DOCTYPE_PATTERN.sub("", html, count=1)
    html = HTML_WRAPPER_PATTERN.sub("", html)
    html = MARKER_TAG_PATTERN.sub("<", html)
    html = MARKER_PATTERN.sub("", html)
    return html.strip()


def extract_headers(options: EmailOptions) -> tuple[EmailOptions, dict[str, str]]:
    """Split custom headers from the options.

    Returns:
        Tuple of (options without headers, headers dict).
    """
    headers = dict(options.headers or {})
    return options.model_copy(update={"headers": None}), headers


async def render_template(
    options: EmailOptions,
    renderer: TemplateRenderer | None,
    *,
    clean: bool = False,
) -> EmailOptions:
    """Render ``template_content`` into ``html``, overwriting any given html.

    Args:
        options: The request to render.
        renderer: Renderer for the template value.
        clean: Apply ``clean_rendered_html`` to the rendered string.

    Raises:
        ConfigurationError: If a template is set but no renderer is available.
    """
    if options.template_content is None:
        return options
    if renderer is None:
        raise ConfigurationError("A template renderer is required for template_content")

    html = await renderer.render(options.template_content)
    if clean:
        html = clean_rendered_html(html)
    if options.html:
        logger.debug("Rendered template replaces the supplied html body")
    return options.model_copy(update={"html": html})


async def resolve_attachment(
    attachment: Attachment,
    reader: AttachmentReader,
    *,
    encoding: ContentEncoding,
) -> Attachment:
    """Fill in content, filename and content type of one attachment.

    Args:
        attachment: The attachment as given by the caller.
        reader: Used to load ``filepath`` when no inline content is set.
        encoding: Content variant required by the transport.

    Returns:
        A resolved copy of the attachment.

    Raises:
        OSError: If the file cannot be read; propagated unchanged.
    """
    content = attachment.content
    if content is None:
        content = RawContent(data=await reader.read(attachment.filepath))

    filename = attachment.filename or PurePath(attachment.filepath).name
    content_type = (
        attachment.content_type
        or guess_content_type(filename)
        or DEFAULT_CONTENT_TYPE
    )

    if encoding == "base64":
        content = Base64Content(data=content.as_base64())
    else:
        content = RawContent(data=content.as_bytes())

    return attachment.model_copy(
        update={"content": content, "filename": filename, "content_type": content_type}
    )


async def resolve_attachments(
    attachments: list[Attachment] | None,
    reader: AttachmentReader,
    *,
    encoding: ContentEncoding,
) -> list[Attachment] | None:
    """Resolve attachments in list order; the first failure aborts."""
    if attachments is None:
        return None
    resolved = []
    for attachment in attachments:
        resolved.append(await resolve_attachment(attachment, reader, encoding=encoding))
    return resolved


async def normalize_for_http(
    options: EmailOptions,
    renderer: TemplateRenderer | None,
    reader: AttachmentReader,
) -> tuple[EmailOptions, dict[str, str]]:
    """Prepare options for the JSON API: base64 attachments, no text fallback."""
    options, headers = extract_headers(options)
    options = await render_template(options, renderer)
    attachments = await resolve_attachments(options.attachments, reader, encoding="base64")
    return options.model_copy(update={"attachments": attachments}), headers


async def normalize_for_smtp(
    options: EmailOptions,
    renderer: TemplateRenderer | None,
    reader: AttachmentReader,
) -> tuple[EmailOptions, dict[str, str]]:
    """Prepare options for MIME encoding: raw attachments, text fallback."""
    options, headers = extract_headers(options)
    options = await render_template(options, renderer, clean=True)
    attachments = await resolve_attachments(options.attachments, reader, encoding="raw")
    update: dict = {"attachments": attachments}
    if not options.text and options.html:
        update["text"] = strip_html(options.html)
    return options.model_copy(update=update), headers
