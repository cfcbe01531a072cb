# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Command-line interface for the Shoutbox client.

Settings come from ``--config`` (INI file) or from ``SHOUTBOX_*``
environment variables; a ``.env`` file in the working directory is loaded
first.

Usage:
    shoutbox send --from no-reply@example.com --to user@example.com \\
        --subject "Hello" --html "<h1>Hello</h1>"
    shoutbox send --smtp --from ... --to ... --subject ... --attach report.pdf
    shoutbox verify-smtp

Example:
    $ shoutbox send --from me@example.com --to a@example.com --to b@example.com \\
        --subject "Report" --template emails/report.html --var month=May \\
        --header X-Campaign=monthly
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

import aiohttp
import aiosmtplib
import click
from dotenv import find_dotenv, load_dotenv
from pydantic import ValidationError
from rich.console import Console

from .client import Shoutbox
from .config import ShoutboxConfig
from .errors import ShoutboxError
from .models import Attachment, EmailOptions
from .smtp import SMTPClient
from .templates import Jinja2Renderer, TemplateRef

console = Console()
err_console = Console(stderr=True)

SEND_ERRORS = (
    ShoutboxError,
    ValidationError,
    OSError,
    aiohttp.ClientError,
    aiosmtplib.SMTPException,
    asyncio.TimeoutError,
)


def run_async(coro):
    """Run an async coroutine synchronously."""
    return asyncio.run(coro)


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    err_console.print(f"[red]Error:[/red] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]✓[/green] {message}")


def print_json(data: Any) -> None:
    """Print data as formatted JSON."""
    console.print_json(json.dumps(data, indent=2, default=str))


def parse_pairs(values: tuple[str, ...], label: str) -> dict[str, str]:
    """Parse repeated ``KEY=VALUE`` options into a dict."""
    pairs: dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {item!r}", param_hint=label)
        pairs[key] = value
    return pairs


def load_config(config_path: str | None) -> ShoutboxConfig:
    """Load settings from the INI file if given, else from the environment."""
    if config_path:
        return ShoutboxConfig.from_file(config_path)
    return ShoutboxConfig.from_env()


@click.group()
@click.version_option(package_name="shoutbox")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None,
              help="INI file with a [shoutbox] section.")
@click.option("--log-level", default=None,
              help="Logging level (default: $SHOUTBOX_LOG_LEVEL or WARNING).")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, log_level: str | None) -> None:
    """shoutbox CLI - Send email through the Shoutbox API or SMTP."""
    load_dotenv(find_dotenv(usecwd=True))
    level = (log_level or os.getenv("SHOUTBOX_LOG_LEVEL", "WARNING")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    try:
        ctx.obj = load_config(config_path)
    except ShoutboxError as exc:
        print_error(str(exc))
        sys.exit(1)


@main.command("send")
@click.option("--from", "sender", required=True, help="Sender address.")
@click.option("--name", default=None, help="Sender display name.")
@click.option("--to", "to", multiple=True, required=True, help="Recipient (repeatable).")
@click.option("--cc", multiple=True, help="Carbon-copy recipient (repeatable).")
@click.option("--subject", "-s", required=True, help="Subject line.")
@click.option("--html", default=None, help="HTML body.")
@click.option("--html-file", type=click.Path(exists=True, dir_okay=False), default=None,
              help="Read the HTML body from a file.")
@click.option("--text", default=None, help="Plain-text body.")
@click.option("--template", "template_path", type=click.Path(exists=True, dir_okay=False),
              default=None, help="Jinja2 template rendered as the HTML body.")
@click.option("--var", "variables", multiple=True, help="Template variable KEY=VALUE (repeatable).")
@click.option("--reply-to", default=None, help="Reply-To address.")
@click.option("--attach", "attachments", multiple=True, type=click.Path(exists=True, dir_okay=False),
              help="File to attach (repeatable).")
@click.option("--header", "headers", multiple=True, help="Extra header KEY=VALUE (repeatable).")
@click.option("--tag", "tags", multiple=True, help="Tag KEY=VALUE (repeatable).")
@click.option("--smtp", "use_smtp", is_flag=True, help="Send over SMTP instead of the HTTP API.")
@click.pass_obj
def send(
    config: ShoutboxConfig,
    sender: str,
    name: str | None,
    to: tuple[str, ...],
    cc: tuple[str, ...],
    subject: str,
    html: str | None,
    html_file: str | None,
    text: str | None,
    template_path: str | None,
    variables: tuple[str, ...],
    reply_to: str | None,
    attachments: tuple[str, ...],
    headers: tuple[str, ...],
    tags: tuple[str, ...],
    use_smtp: bool,
) -> None:
    """Send one email.

    Example:

        shoutbox send --from me@example.com --to you@example.com -s Hi --html "<b>Hi</b>"
    """
    if html_file:
        html = Path(html_file).read_text(encoding="utf-8")

    renderer = None
    template_content = None
    if template_path:
        template_file = Path(template_path)
        renderer = Jinja2Renderer(template_file.parent)
        template_content = TemplateRef(template_file.name, parse_pairs(variables, "--var"))

    try:
        options = EmailOptions(
            from_=sender,
            name=name,
            to=list(to),
            cc=list(cc) or None,
            subject=subject,
            html=html,
            text=text,
            template_content=template_content,
            reply_to=reply_to,
            attachments=[Attachment(filepath=path) for path in attachments] or None,
            headers=parse_pairs(headers, "--header") or None,
            tags=parse_pairs(tags, "--tag") or None,
        )
        if use_smtp:
            smtp_client = SMTPClient.from_config(config, renderer=renderer)
            run_async(smtp_client.send_email(options))
            print_success(f"Email submitted via {smtp_client.host}")
            return

        client = Shoutbox.from_config(config, renderer=renderer)
        result = run_async(client.send_email(options))
    except SEND_ERRORS as exc:
        print_error(str(exc))
        sys.exit(1)

    if not result.ok:
        print_error(f"Rejected by Shoutbox (HTTP {result.status}): {result.error}")
        sys.exit(1)
    print_success("Email sent")
    if result.data is not None:
        print_json(result.data)


@main.command("verify-smtp")
@click.pass_obj
def verify_smtp(config: ShoutboxConfig) -> None:
    """Check that the SMTP server accepts the configured API key."""
    try:
        client = SMTPClient.from_config(config)
    except ShoutboxError as exc:
        print_error(str(exc))
        sys.exit(1)

    if run_async(client.verify_connection()):
        print_success(f"SMTP connection to {client.host}:{client.port} verified")
        return
    print_error(f"Could not connect to {client.host}:{client.port}")
    sys.exit(1)


if __name__ == "__main__":
    main()
