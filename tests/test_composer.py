"""Tests for scopeplate.composer and the Jinja2 fragment loader."""

from __future__ import annotations

import io

import pytest

from scopeplate.composer import compose
from scopeplate.config import Config
from scopeplate.engine import build_environment, has_own_output, rename_slot
from scopeplate.errors import RenderError
from scopeplate.scope import ScopeMatch
from scopeplate.tree import MemoryTree


def _layers(files: dict[str, str], chain: list[str], config: Config | None = None):
    """Push *chain* into a fresh loader; return (env, loader, layer names)."""
    env, loader = build_environment(MemoryTree(files), config or Config())
    names = [loader.push_layer(env, path) for path in chain]
    return env, loader, names


class TestRenameSlot:
    def test_top_level_and_nested(self):
        source = "{% block content %}a {% block content %}{% endblock %}{% endblock %}"
        renamed, top, nested = rename_slot(source, "content", "outer", "inner")
        assert renamed == "{% block outer %}a {% block inner %}{% endblock %}{% endblock %}"
        assert (top, nested) == (1, 1)

    def test_named_endblock_follows(self):
        renamed, _, _ = rename_slot(
            "{%- block content -%}x{%- endblock content -%}", "content", "s", "n",
        )
        assert renamed == "{%- block s -%}x{%- endblock s -%}"

    def test_other_blocks_comments_and_raw_untouched(self):
        source = (
            "{# {% block content %} #}{% raw %}{% block content %}{% endraw %}"
            "{% block title %}t{% endblock title %}"
        )
        assert rename_slot(source, "content", "s", "n") == (source, 0, 0)


class TestFragmentLoader:
    def test_first_layer_untouched(self):
        env, loader, names = _layers({"v/layout.html": "L"}, ["v/layout.html"])
        assert names == ["layer:v/layout.html"]
        source, filename, uptodate = loader.get_source(env, "layer:v/layout.html")
        assert (source, filename) == ("L", "v/layout.html")
        assert uptodate()

    def test_plain_fragment_fills_parent_slot(self):
        env, loader, _ = _layers(
            {"v/layout.html": "L", "v/page.html": "p"},
            ["v/layout.html", "v/page.html"],
            Config(block_name="body"),
        )
        source, _, _ = loader.get_source(env, "layer:v/page.html")
        assert source == "{% extends 'layer:v/layout.html' %}{% block body %}p{% endblock %}"

    def test_wrapping_layout_owns_renamed_slot(self):
        env, loader, _ = _layers(
            {
                "v/layout.html": "L",
                "v/a/layout.html": "A {% block content %}{% endblock %}",
                "v/a/page.html": "p",
            },
            ["v/layout.html", "v/a/layout.html", "v/a/page.html"],
        )
        assert loader.get_source(env, "layer:v/a/layout.html")[0] == (
            "{% extends 'layer:v/layout.html' %}"
            "{% block content %}A {% block content__1 %}{% endblock %}{% endblock %}"
        )
        assert loader.get_source(env, "layer:v/a/page.html")[0] == (
            "{% extends 'layer:v/a/layout.html' %}{% block content__1 %}p{% endblock %}"
        )

    def test_overriding_layout_nested_slot(self):
        env, loader, _ = _layers(
            {
                "v/layout.html": "L",
                "v/a/layout.html": "{% block content %}A {% block content %}{% endblock %}{% endblock %}",
            },
            ["v/layout.html", "v/a/layout.html"],
        )
        assert loader.get_source(env, "layer:v/a/layout.html")[0] == (
            "{% extends 'layer:v/layout.html' %}"
            "{% block content %}A {% block content__1 %}{% endblock %}{% endblock %}"
        )

    def test_overriding_fragment_other_blocks_kept(self):
        env, loader, _ = _layers(
            {"v/layout.html": "L", "v/page.html": "{% block x %}p{% endblock %}\n"},
            ["v/layout.html", "v/page.html"],
        )
        assert loader.get_source(env, "layer:v/page.html")[0] == (
            "{% extends 'layer:v/layout.html' %}{% block x %}p{% endblock %}\n"
        )

    def test_explicit_extends_served_untouched(self):
        page = "{% extends 'base.html' %}{% block x %}p{% endblock %}"
        env, loader, _ = _layers(
            {"v/layout.html": "L", "v/page.html": page},
            ["v/layout.html", "v/page.html"],
        )
        assert loader.get_source(env, "layer:v/page.html")[0] == page

    def test_include_registered_by_base_name(self):
        tree = MemoryTree({"v/includes/nav.html": "nav"})
        env, loader = build_environment(tree, Config())
        assert loader.add_include("v/includes/nav.html") == "nav.html"
        assert env.get_template("nav.html").render() == "nav"
        assert loader.list_templates() == ["nav.html", "v/includes/nav.html"]

    def test_include_and_layer_names_do_not_collide(self):
        env, loader, _ = _layers(
            {"includes/index.html": "INC", "index.html": "page"}, ["index.html"],
        )
        loader.add_include("includes/index.html")
        assert env.get_template("index.html").render() == "INC"
        assert env.get_template("layer:index.html").render() == "page"


class TestHasOwnOutput:
    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("text", True),
            ("{{ x }}", True),
            ("{% if x %}y{% endif %}", True),
            ("{% block a %}y{% endblock %}\n", False),
            ("{% from 'm.html' import m %}{% set a = 1 %}{% macro f() %}x{% endmacro %}", False),
        ],
    )
    def test_detects_output_outside_blocks(self, source, expected):
        env, _ = build_environment(MemoryTree({}), Config())
        assert has_own_output(env.parse(source)) is expected



class TestComposedTemplate:
    @pytest.fixture
    def greeting(self):
        tree = MemoryTree({
            "views/layout.html": "<{% block content %}{% endblock %}>",
            "views/hello.html": "hello {{ name }}",
        })
        match = ScopeMatch(layouts=("views/layout.html",))
        return compose(tree, "views/hello.html", match, Config())

    def test_render_with_mapping_and_keywords(self, greeting):
        assert greeting.key == "hello"
        assert greeting.render({"name": "ada"}) == "<hello ada>"
        assert greeting.render({"name": "ada"}, name="bob") == "<hello bob>"

    def test_stream_writes_to_sink(self, greeting):
        sink = io.StringIO()
        greeting.stream(sink, name="ada")
        assert sink.getvalue() == "<hello ada>"

    def test_undefined_variable_raises(self, greeting):
        with pytest.raises(RenderError) as excinfo:
            greeting.render()
        assert excinfo.value.key == "hello"

    def test_lenient_undefined(self):
        tree = MemoryTree({"views/hello.html": "hello {{ name }}"})
        composed = compose(tree, "views/hello.html", ScopeMatch(), Config(strict_undefined=False))
        assert composed.render() == "hello "

    def test_autoescape(self, greeting):
        assert greeting.render(name="<b>") == "<hello &lt;b&gt;>"

    def test_non_template_errors_wrapped(self):
        tree = MemoryTree({"views/boom.html": "{{ boom() }}"})
        composed = compose(tree, "views/boom.html", ScopeMatch(), Config())

        def boom():
            raise ValueError("no value")

        with pytest.raises(RenderError, match="no value") as excinfo:
            composed.render(boom=boom)
        assert isinstance(excinfo.value.__cause__, ValueError)
