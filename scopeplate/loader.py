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

"""Loading a whole template tree into a read-only mapping.

Usage::

    from scopeplate import load_directory

    templates = load_directory("views")
    html = templates["admin/index"].render(user=user)

Loading runs to completion before anything is returned: either every page
is composed and the mapping is exposed, or an exception is raised and no
mapping exists.  To pick up changes, load again and swap the reference.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

from scopeplate.classify import classify_tree
from scopeplate.composer import ComposedTemplate, compose
from scopeplate.config import Config
from scopeplate.errors import DuplicateKeyError, PageParseError, TemplateLookupError
from scopeplate.scope import match_scopes
from scopeplate.tree import DirectoryTree, SourceTree

logger = logging.getLogger(__name__)


class TemplateMap(Mapping[str, ComposedTemplate]):
    """Immutable mapping of lookup key to :class:`ComposedTemplate`.

    Safe to share between threads once built.  Missing keys raise
    :class:`~scopeplate.errors.TemplateLookupError`, which is also a
    :class:`KeyError`.

    Attributes:
        errors: Pages skipped in lenient mode, by key.
    """

    def __init__(
        self,
        templates: Mapping[str, ComposedTemplate],
        errors: Mapping[str, Exception] | None = None,
    ) -> None:
        self._templates = MappingProxyType(dict(templates))
        self.errors: Mapping[str, Exception] = MappingProxyType(dict(errors or {}))

    def __getitem__(self, key: str) -> ComposedTemplate:
        try:
            return self._templates[key]
        except KeyError:
            raise TemplateLookupError(key) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._templates)

    def __len__(self) -> int:
        return len(self._templates)

    def __repr__(self) -> str:
        return f"TemplateMap({sorted(self._templates)!r})"

    def render(self, key: str, context: Mapping[str, Any] | None = None, **variables: Any) -> str:
        """Look up *key* and render it."""
        return self[key].render(context, **variables)


def load(tree: SourceTree, config: Config | None = None) -> TemplateMap:
    """Compose every page in *tree*.

    Args:
        tree: Source tree holding pages, layouts and include directories.
        config: Composition settings; defaults when omitted.

    Returns:
        A :class:`TemplateMap`, empty if the tree holds no pages.

    Raises:
        TraversalError: the tree could not be walked.
        IncludeGlobError: an include directory could not be listed.
        IncludeParseError: an include fragment failed to compile.
        PageParseError: a layout or page failed to compile (strict mode).
        DuplicateKeyError: two pages derive the same key.
    """
    config = config or Config()
    found = classify_tree(tree, config)

    templates: dict[str, ComposedTemplate] = {}
    skipped: dict[str, Exception] = {}
    for page in found.pages:
        match = match_scopes(page, found.include_scopes, found.layouts, root=found.root)
        try:
            composed = compose(tree, page, match, config)
        except PageParseError as exc:
            if config.strict:
                raise
            logger.warning("Skipping %s: %s", exc.key, exc)
            skipped[exc.key] = exc
            continue

        existing = templates.get(composed.key)
        if existing is not None:
            raise DuplicateKeyError(
                f"Key {composed.key!r} derived from both "
                f"{existing.source_path!r} and {page!r}"
            )
        templates[composed.key] = composed

    logger.info(
        "Loaded %d templates from %s (%d skipped)",
        len(templates), tree, len(skipped),
    )
    return TemplateMap(templates, skipped)


def load_directory(directory: str | Path, config: Config | None = None) -> TemplateMap:
    """Compose every page below *directory* on disk."""
    return load(DirectoryTree(directory), config)
