"""Shared fixtures for scopeplate tests."""

from __future__ import annotations

import pytest

from scopeplate import MemoryTree


def site_files(includes: str = "includes", layout: str = "layout") -> dict[str, str]:
    """A small site: root layout, nested wrapping admin layout, one include dir."""
    return {
        f"views/{layout}.html": "header {% block content %}{% endblock %} footer",
        f"views/{includes}/nav.html": "{% macro nav() %}nav{% endmacro %}",
        "views/index.html": "index",
        "views/about.html": "{% block content %}about {{ title }}{% endblock %}",
        f"views/admin/{layout}.html": "admin-layout {% block content %}{% endblock %}",
        "views/admin/dash.html": "admin-dash",
    }


@pytest.fixture
def site_tree():
    return MemoryTree(site_files())


def write_tree(root, files: dict[str, str]) -> None:
    """Write *files* (path -> source) below *root*."""
    for rel, source in files.items():
        path = root.joinpath(*rel.split("/"))
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(source, encoding="utf-8")
