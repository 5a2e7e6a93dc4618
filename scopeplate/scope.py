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

"""Scope matching: which include directories and layouts apply to a page.

The scope of an include directory or a layout file is the directory that
contains it.  A scope applies to a page when the scope's path segments are
a prefix of the page's path segments, or when the scope is the tree root.
So a page sees every ancestor scope along its own path and nothing from
sibling or descendant directories.

Matches are ordered least specific first: by segment depth (root = 0),
then lexically.  Comparing segments rather than string prefixes keeps
``views/admin`` from matching ``views/admin2/index.html``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import PurePosixPath


@dataclass(frozen=True)
class ScopeMatch:
    """Include directories and layout files applying to one page."""

    includes: tuple[str, ...] = ()
    layouts: tuple[str, ...] = ()


def split_path(path: str) -> tuple[str, ...]:
    """Split a slash-separated path into segments, ignoring ``.`` parts."""
    return tuple(part for part in PurePosixPath(path).parts if part not in (".", "/"))


def scope_of(path: str) -> tuple[str, ...]:
    """Segments of the directory containing *path*."""
    return split_path(path)[:-1]


def applies_to(scope: tuple[str, ...], page: tuple[str, ...], root: tuple[str, ...] = ()) -> bool:
    if scope == root:
        return True
    return page[: len(scope)] == scope


def _precedence(path: str) -> tuple[int, str]:
    return len(scope_of(path)), path


def _select(page: tuple[str, ...], candidates: Iterable[str], root: tuple[str, ...]) -> tuple[str, ...]:
    matched = [c for c in candidates if applies_to(scope_of(c), page, root)]
    return tuple(sorted(matched, key=_precedence))


def match_scopes(
    page: str,
    include_scopes: Iterable[str],
    layouts: Iterable[str],
    root: str = "",
) -> ScopeMatch:
    """Compute the include directories and layouts that apply to *page*.

    Args:
        page: Path of the page.
        include_scopes: Paths of all include directories in the tree.
        layouts: Paths of all layout files in the tree.
        root: Root path of the tree; scopes equal to it match every page.

    Returns:
        A :class:`ScopeMatch` with both sequences ordered least specific
        first.  The page's own file is not part of ``layouts``.
    """
    page_parts = split_path(page)
    root_parts = split_path(root)
    return ScopeMatch(
        includes=_select(page_parts, include_scopes, root_parts),
        layouts=_select(page_parts, layouts, root_parts),
    )
