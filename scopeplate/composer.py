# scopeplate — directory-scoped template composition
# Copyright (C) 2024-2026 Dr Horst Herb
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""Assembly of one composed, renderable template per page."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from jinja2 import Template, TemplateError

from scopeplate.config import Config
from scopeplate.engine import build_environment
from scopeplate.errors import (
    IncludeGlobError,
    IncludeParseError,
    PageParseError,
    RenderError,
)
from scopeplate.keys import derive_key
from scopeplate.scope import ScopeMatch
from scopeplate.tree import SourceTree

logger = logging.getLogger(__name__)


class TextSink(Protocol):
    def write(self, text: str, /) -> Any: ...


@dataclass(frozen=True)
class ComposedTemplate:
    """A page together with everything composed around it.

    Attributes:
        key: Lookup key, e.g. ``admin/index``.
        source_path: Tree path of the page fragment.
        include_order: Include directories applied, least specific first.
        layout_order: Layout files applied, least specific first.
        compiled: Compiled Jinja2 template for the page.
    """

    key: str
    source_path: str
    include_order: tuple[str, ...]
    layout_order: tuple[str, ...]
    compiled: Template

    def render(self, context: Mapping[str, Any] | None = None, **variables: Any) -> str:
        """Render the template with *context* and/or keyword variables.

        Any exception raised while rendering, including ones raised by
        callables in the context, is re-raised as
        :class:`~scopeplate.errors.RenderError`.
        """
        try:
            return self.compiled.render(_merge(context, variables))
        except Exception as exc:
            raise RenderError(self.key, str(exc)) from exc

    def stream(
        self, sink: TextSink, context: Mapping[str, Any] | None = None, **variables: Any,
    ) -> None:
        """Render into *sink* chunk by chunk.

        Output written before a failure stays in the sink.
        """
        try:
            for chunk in self.compiled.generate(_merge(context, variables)):
                sink.write(chunk)
        except Exception as exc:
            raise RenderError(self.key, str(exc)) from exc


def _merge(context: Mapping[str, Any] | None, variables: dict[str, Any]) -> dict[str, Any]:
    merged = dict(context) if context else {}
    merged.update(variables)
    return merged


def compose(tree: SourceTree, page: str, match: ScopeMatch, config: Config) -> ComposedTemplate:
    """Build the composed template for *page*.

    Include fragments are compiled first, in ascending specificity, then the
    matched layouts and finally the page itself.

    Raises:
        IncludeGlobError: an include directory could not be listed.
        IncludeParseError: an include fragment failed to compile.
        PageParseError: a layout or the page failed to compile.
    """
    key = derive_key(page, config.extension)
    env, loader = build_environment(tree, config)

    include_paths: list[str] = []
    for directory in match.includes:
        try:
            paths = tree.glob(directory, config.include_pattern)
        except OSError as exc:
            raise IncludeGlobError(f"Cannot list includes in {directory!r}: {exc}") from exc
        for path in paths:
            loader.add_include(path)
            include_paths.append(path)

    for path in include_paths:
        try:
            env.get_template(path)
        except TemplateError as exc:
            raise IncludeParseError(f"Error parsing include {path!r} for {key!r}: {exc}") from exc

    compiled = None
    for path in (*match.layouts, page):
        try:
            compiled = env.get_template(loader.push_layer(env, path))
        except TemplateError as exc:
            raise PageParseError(key, path, str(exc)) from exc

    logger.debug(
        "Composed %s from %s (includes=%s, layouts=%s)",
        key, page, list(match.includes), list(match.layouts),
    )
    return ComposedTemplate(
        key=key,
        source_path=page,
        include_order=match.includes,
        layout_order=match.layouts,
        compiled=compiled,
    )
