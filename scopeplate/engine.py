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

"""Jinja2 environment serving template fragments from a source tree.

Each composed page gets its own :class:`~jinja2.Environment`.  Its loader
keeps two separate namespaces:

* includes: every fragment found in a matched include directory, under
  its base file name (``nav.html``) and its tree path, usable from
  ``{% include %}`` and ``{% import %}``;
* layers: the matched layouts and the page itself, under internal
  ``layer:<path>`` names that include lookups can never collide with.

Every layer after the first is served as a Jinja2 child of the one before
it.  Each layer owns its own slot: the ``block_name`` block it declares is
renamed to ``<block_name>__<depth>``, and the next layer fills that slot.

* A layer with output of its own outside blocks ("wrapping" layer) has its
  whole body placed in the slot it fills.
* A layer made only of blocks, macros, imports and assignments
  ("overriding" layer) is served as-is.  Its top-level ``block_name``
  block fills the parent slot, a ``block_name`` block nested inside it
  becomes its own slot, and every other block overrides the ancestor
  block of the same name.

A layer that declares no slot of its own passes the slot it filled down
to the next layer.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable

from jinja2 import (
    BaseLoader,
    Environment,
    StrictUndefined,
    TemplateNotFound,
    Undefined,
    nodes,
)

from scopeplate.config import Config
from scopeplate.tree import SourceTree

logger = logging.getLogger(__name__)

LAYER_PREFIX = "layer:"

# comments and raw sections are matched first so tags inside them are left alone
_BLOCK_TAG_RE = re.compile(
    r"\{#.*?#\}"
    r"|\{%[-+]?\s*raw\s*[-+]?%\}.*?\{%[-+]?\s*endraw\s*[-+]?%\}"
    r"|(?P<open>\{%[-+]?\s*block\s+)(?P<name>\w+)(?P<rest>[^%]*%\})"
    r"|(?P<close>\{%[-+]?\s*endblock)(?:\s+(?P<endname>\w+))?(?P<tail>[^%]*%\})",
    re.DOTALL,
)

_SILENT_NODES = (
    nodes.Block,
    nodes.Macro,
    nodes.Import,
    nodes.FromImport,
    nodes.Assign,
    nodes.AssignBlock,
)


def _always_current() -> bool:
    return True


def rename_slot(source: str, slot: str, top: str, nested: str) -> tuple[str, int, int]:
    """Rename the *slot* blocks of *source*.

    Top-level ``{% block slot %}`` tags become *top*, ones nested inside
    another block become *nested*.  Named ``endblock`` tags follow.

    Returns:
        The rewritten source and the number of top-level and nested slot
        blocks found.
    """
    parts: list[str] = []
    open_blocks: list[str] = []
    top_count = nested_count = 0
    pos = 0
    for match in _BLOCK_TAG_RE.finditer(source):
        if match.group("open") is not None:
            name = match.group("name")
            if name == slot:
                if open_blocks:
                    name = nested
                    nested_count += 1
                else:
                    name = top
                    top_count += 1
            open_blocks.append(name)
            parts.append(source[pos:match.start()])
            parts.append(f"{match.group('open')}{name}{match.group('rest')}")
            pos = match.end()
        elif match.group("close") is not None and open_blocks:
            name = open_blocks.pop()
            if match.group("endname") is not None:
                parts.append(source[pos:match.start()])
                parts.append(f"{match.group('close')} {name}{match.group('tail')}")
                pos = match.end()
    parts.append(source[pos:])
    return "".join(parts), top_count, nested_count


def has_own_output(ast: nodes.Template) -> bool:
    """Whether a template produces output outside of its blocks."""
    for node in ast.body:
        if isinstance(node, nodes.Output):
            for child in node.nodes:
                if not isinstance(child, nodes.TemplateData) or child.data.strip():
                    return True
        elif not isinstance(node, _SILENT_NODES):
            return True
    return False


class FragmentLoader(BaseLoader):
    """Jinja2 loader for the includes and layout chain of one page."""

    def __init__(self, tree: SourceTree, block_name: str) -> None:
        self.tree = tree
        self.block_name = block_name
        self._includes: dict[str, str] = {}
        self._layers: dict[str, tuple[str, str]] = {}
        self._parent: str | None = None
        self._slot = block_name

    @staticmethod
    def layer_name(path: str) -> str:
        return LAYER_PREFIX + path

    def add_include(self, path: str) -> str:
        """Register an include fragment under its base file name.

        A later registration with the same name shadows the earlier one.
        """
        name = path.rsplit("/", 1)[-1]
        previous = self._includes.get(name)
        if previous is not None and previous != path:
            logger.debug("Include %s shadows %s", path, previous)
        self._includes[name] = path
        self._includes[path] = path
        return name

    def push_layer(self, environment: Environment, path: str) -> str:
        """Add the next layout (or finally the page), least specific first.

        Returns the internal template name of the layer.

        Raises :class:`jinja2.TemplateSyntaxError` if the fragment cannot be
        parsed.
        """
        name = self.layer_name(path)
        source = self.tree.read(path)
        if self._parent is not None:
            source, own_slot = self._as_child(environment, source, name, path)
            if own_slot is not None:
                self._slot = own_slot
        self._layers[name] = (source, path)
        self._parent = name
        return name

    def _as_child(
        self, environment: Environment, source: str, name: str, path: str,
    ) -> tuple[str, str | None]:
        own = f"{self.block_name}__{len(self._layers)}"
        trial, top, nested = rename_slot(source, self.block_name, own + "_top", own)
        ast = environment.parse(trial, name, path)
        if ast.find(nodes.Extends) is not None:
            return source, None

        extends = "{% extends " + repr(self._parent) + " %}"
        if has_own_output(ast):
            body, _, _ = rename_slot(source, self.block_name, own, own)
            wrapped = f"{extends}{{% block {self._slot} %}}{body}{{% endblock %}}"
            return wrapped, own if top + nested else None

        body, _, _ = rename_slot(source, self.block_name, self._slot, own)
        return extends + body, own if nested else None

    def list_templates(self) -> list[str]:
        return sorted({*self._includes, *self._layers})

    def get_source(
        self, environment: Environment, template: str,
    ) -> tuple[str, str, Callable[[], bool]]:
        layer = self._layers.get(template)
        if layer is not None:
            source, path = layer
            return source, path, _always_current
        path = self._includes.get(template)
        if path is None:
            raise TemplateNotFound(template)
        return self.tree.read(path), path, _always_current


def build_environment(tree: SourceTree, config: Config) -> tuple[Environment, FragmentLoader]:
    """Create a fresh environment and loader for one page."""
    loader = FragmentLoader(tree, config.block_name)
    undefined: type[Undefined] = StrictUndefined if config.strict_undefined else Undefined
    env = Environment(
        loader=loader,
        autoescape=config.autoescape,
        keep_trailing_newline=True,
        auto_reload=False,
        undefined=undefined,
    )
    return env, loader
