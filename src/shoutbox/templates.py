# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Template renderers for ``EmailOptions.template_content``.

The dispatchers treat the template value as opaque and only ask a renderer
for an HTML string. Two renderers are provided:

- ``Jinja2Renderer``: renders a ``jinja2.Template``, a template source
  string, or a ``TemplateRef`` naming a file in a templates directory
- ``CallableRenderer``: wraps any sync or async ``(value) -> str`` function

Example:
    Rendering a file template::

        renderer = Jinja2Renderer("/srv/app/emails")
        client = Shoutbox(api_key, renderer=renderer)
        await client.send_email(EmailOptions(
            from_="no-reply@example.com",
            to="user@example.com",
            subject="Welcome",
            template_content=TemplateRef("welcome.html", {"user": "Ada"}),
        ))
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol, Union

from jinja2 import Environment, FileSystemLoader, Template, select_autoescape


class TemplateRenderer(Protocol):
    """Turns a template value into an HTML string."""

    async def render(self, value: Any) -> str: ...


@dataclass(frozen=True)
class TemplateRef:
    """Reference to a named template plus its rendering context."""

    name: str
    context: dict[str, Any] = field(default_factory=dict)


class Jinja2Renderer:
    """Render template values with Jinja2.

    Attributes:
        env: The Jinja2 environment used for named and string templates.
    """

    def __init__(
        self,
        templates_dir: Union[str, Path, None] = None,
        *,
        environment: Environment | None = None,
    ):
        """Initialize the renderer.

        Args:
            templates_dir: Directory searched for ``TemplateRef`` names.
            environment: Pre-configured environment; overrides templates_dir.
        """
        if environment is None:
            loader = FileSystemLoader(str(templates_dir)) if templates_dir else None
            environment = Environment(
                loader=loader,
                autoescape=select_autoescape(["html", "xml"], default_for_string=True),
            )
        self.env = environment

    async def render(self, value: Any) -> str:
        """Render ``value`` to HTML.

        Raises:
            TypeError: If the value is not a supported template type.
            jinja2.TemplateNotFound: If a referenced template does not exist.
        """
        context: dict[str, Any] = {}
        if isinstance(value, TemplateRef):
            template = self.env.get_template(value.name)
            context = value.context
        elif isinstance(value, Template):
            template = value
        elif isinstance(value, str):
            template = self.env.from_string(value)
        else:
            raise TypeError(f"Unsupported template value: {type(value).__name__}")

        if template.environment.is_async:
            return await template.render_async(**context)
        return template.render(**context)


class CallableRenderer:
    """Adapt a plain function into a renderer."""

    def __init__(self, func: Callable[[Any], Union[str, Awaitable[str]]]):
        self._func = func

    async def render(self, value: Any) -> str:
        result = self._func(value)
        if inspect.isawaitable(result):
            result = await result
        if not isinstance(result, str):
            raise TypeError(f"Renderer returned {type(result).__name__}, expected str")
        return result
