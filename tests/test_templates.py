"""Tests for the template renderers."""

import pytest
from jinja2 import Environment, Template, TemplateNotFound

from shoutbox.templates import CallableRenderer, Jinja2Renderer, TemplateRef


class TestJinja2Renderer:
    @pytest.mark.asyncio
    async def test_renders_template_ref(self, tmp_path):
        (tmp_path / "welcome.html").write_text("<p>Hello {{ user }}</p>")
        renderer = Jinja2Renderer(tmp_path)

        html = await renderer.render(TemplateRef("welcome.html", {"user": "Ada"}))
        assert html == "<p>Hello Ada</p>"

    @pytest.mark.asyncio
    async def test_autoescapes_html_templates(self, tmp_path):
        (tmp_path / "welcome.html").write_text("<p>{{ user }}</p>")
        renderer = Jinja2Renderer(tmp_path)

        html = await renderer.render(TemplateRef("welcome.html", {"user": "<script>"}))
        assert html == "<p>&lt;script&gt;</p>"

    @pytest.mark.asyncio
    async def test_renders_source_string(self):
        assert await Jinja2Renderer().render("<b>{{ 2 * 3 }}</b>") == "<b>6</b>"

    @pytest.mark.asyncio
    async def test_renders_template_object(self):
        assert await Jinja2Renderer().render(Template("<i>x</i>")) == "<i>x</i>"

    @pytest.mark.asyncio
    async def test_async_environment(self):
        env = Environment(enable_async=True)
        renderer = Jinja2Renderer(environment=env)
        assert await renderer.render("{{ 'async' }}") == "async"

    @pytest.mark.asyncio
    async def test_missing_template(self, tmp_path):
        with pytest.raises(TemplateNotFound):
            await Jinja2Renderer(tmp_path).render(TemplateRef("nope.html"))

    @pytest.mark.asyncio
    async def test_unsupported_value(self):
        with pytest.raises(TypeError):
            await Jinja2Renderer().render(42)


class TestCallableRenderer:
    @pytest.mark.asyncio
    async def test_sync_function(self):
        renderer = CallableRenderer(lambda value: f"<p>{value['name']}</p>")
        assert await renderer.render({"name": "Ada"}) == "<p>Ada</p>"

    @pytest.mark.asyncio
    async def test_async_function(self):
        async def render(value):
            return "<p>async</p>"

        assert await CallableRenderer(render).render(object()) == "<p>async</p>"

    @pytest.mark.asyncio
    async def test_non_string_result(self):
        with pytest.raises(TypeError):
            await CallableRenderer(lambda value: 1).render("x")
