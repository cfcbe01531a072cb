# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Client configuration for the Shoutbox dispatchers.

Clients never read the process environment on their own. Settings are
passed explicitly, or collected once into a ``ShoutboxConfig`` from the
environment or from an INI file and handed to ``Shoutbox.from_config`` /
``SMTPClient.from_config``.

Example:
    Configuration file format (shoutbox.ini)::

        [shoutbox]
        api_key = sk_live_...
        endpoint = https://api.shoutbox.net/send
        smtp_host = mail.shoutbox.net
        smtp_port = 587
        timeout = 30

    Loading it::

        config = ShoutboxConfig.from_file("shoutbox.ini")
        client = Shoutbox.from_config(config)

Environment variables (used by ``from_env`` and as INI fallbacks):
    SHOUTBOX_API_KEY, SHOUTBOX_API_ENDPOINT, SHOUTBOX_SMTP_HOST,
    SHOUTBOX_SMTP_PORT, SHOUTBOX_SMTP_USERNAME, SHOUTBOX_TIMEOUT
"""

from __future__ import annotations

import configparser
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigurationError
from .logger import get_logger

DEFAULT_API_ENDPOINT = "https://api.shoutbox.net/send"
DEFAULT_SMTP_HOST = "mail.shoutbox.net"
DEFAULT_SMTP_PORT = 587
DEFAULT_SMTP_USERNAME = "shoutbox"
DEFAULT_TIMEOUT = 30.0

ENV_KEYS = {
    "api_key": "SHOUTBOX_API_KEY",
    "endpoint": "SHOUTBOX_API_ENDPOINT",
    "smtp_host": "SHOUTBOX_SMTP_HOST",
    "smtp_port": "SHOUTBOX_SMTP_PORT",
    "smtp_username": "SHOUTBOX_SMTP_USERNAME",
    "timeout": "SHOUTBOX_TIMEOUT",
}

logger = get_logger("Shoutbox.config")


def require_api_key(api_key: str | None) -> str:
    """Return ``api_key`` or raise if it is missing or blank."""
    if api_key is None or not str(api_key).strip():
        raise ConfigurationError("API key is required for Shoutbox")
    return api_key


@dataclass
class ShoutboxConfig:
    """Settings shared by the HTTP and SMTP clients.

    Attributes:
        api_key: Shoutbox API key (bearer token / SMTP password).
        endpoint: URL of the HTTP send endpoint.
        smtp_host: SMTP submission host.
        smtp_port: SMTP submission port (STARTTLS).
        smtp_username: SMTP login name.
        timeout: Network timeout in seconds.
    """

    api_key: str | None = None
    endpoint: str = DEFAULT_API_ENDPOINT
    smtp_host: str = DEFAULT_SMTP_HOST
    smtp_port: int = DEFAULT_SMTP_PORT
    smtp_username: str = DEFAULT_SMTP_USERNAME
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_mapping(cls, values: Mapping[str, str | None]) -> "ShoutboxConfig":
        """Build a config from string values keyed by field name.

        Missing or empty values keep their defaults.

        Raises:
            ConfigurationError: If a numeric value cannot be parsed.
        """
        config = cls()
        if values.get("api_key"):
            config.api_key = values["api_key"]
        if values.get("endpoint"):
            config.endpoint = values["endpoint"]
        if values.get("smtp_host"):
            config.smtp_host = values["smtp_host"]
        if values.get("smtp_username"):
            config.smtp_username = values["smtp_username"]
        if values.get("smtp_port"):
            try:
                config.smtp_port = int(values["smtp_port"])
            except ValueError:
                raise ConfigurationError(
                    f"Invalid smtp_port: {values['smtp_port']!r}"
                ) from None
        if values.get("timeout"):
            try:
                config.timeout = float(values["timeout"])
            except ValueError:
                raise ConfigurationError(
                    f"Invalid timeout: {values['timeout']!r}"
                ) from None
        return config

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ShoutboxConfig":
        """Collect settings from ``SHOUTBOX_*`` environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``.
        """
        env = os.environ if environ is None else environ
        return cls.from_mapping({field: env.get(key) for field, key in ENV_KEYS.items()})

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        section: str = "shoutbox",
        environ: Mapping[str, str] | None = None,
    ) -> "ShoutboxConfig":
        """Load settings from an INI file, falling back to the environment.

        Args:
            path: Path to the INI file.
            section: Section holding the settings.
            environ: Mapping used for fallbacks instead of ``os.environ``.

        Raises:
            ConfigurationError: If the file is missing or unreadable.
        """
        parser = configparser.ConfigParser()
        try:
            read = parser.read(path)
        except configparser.Error as exc:
            raise ConfigurationError(f"Invalid configuration file {path}: {exc}") from exc
        if not read:
            raise ConfigurationError(f"Configuration file not found: {path}")

        env = os.environ if environ is None else environ
        values: dict[str, str | None] = {}
        for field, key in ENV_KEYS.items():
            values[field] = parser.get(section, field, fallback=None) or env.get(key)
        if not parser.has_section(section):
            logger.warning("Section [%s] not found in %s, using environment only", section, path)
        return cls.from_mapping(values)
