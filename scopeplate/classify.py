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

"""Classification of source tree entries into composition roles.

Directory position alone decides what an entry is:

* a directory named ``config.includes_dir`` is an include scope and is
  never descended into;
* a file named ``config.layout_file`` is a layout;
* any other file ending in ``config.extension`` is a page;
* everything else is ignored.
"""

from __future__ import annotations

import enum
import logging
import posixpath
from dataclasses import dataclass

from scopeplate.config import Config
from scopeplate.errors import TraversalError
from scopeplate.tree import SourceTree

logger = logging.getLogger(__name__)


class Role(enum.Enum):
    INCLUDE_SCOPE = "include_scope"
    LAYOUT = "layout"
    PAGE = "page"
    IGNORED = "ignored"


@dataclass(frozen=True)
class Classification:
    """Result of walking a tree once.

    Attributes:
        root: Root path of the tree the entries were found in.
        include_scopes: Include directories, in walk order.
        layouts: Layout files, in walk order.
        pages: Page files, in walk order.
    """

    root: str
    include_scopes: tuple[str, ...]
    layouts: tuple[str, ...]
    pages: tuple[str, ...]


def classify(path: str, is_dir: bool, config: Config) -> Role:
    """Return the role of a single entry, judged by its path alone."""
    name = posixpath.basename(path)
    if is_dir:
        return Role.INCLUDE_SCOPE if name == config.includes_dir else Role.IGNORED
    if posixpath.splitext(name)[1] != config.extension:
        return Role.IGNORED
    if name == config.layout_file:
        return Role.LAYOUT
    return Role.PAGE


def classify_tree(tree: SourceTree, config: Config) -> Classification:
    """Walk *tree* once and partition its entries by role.

    Raises :class:`~scopeplate.errors.TraversalError` if the tree cannot be
    walked.
    """
    found: dict[Role, list[str]] = {role: [] for role in Role}

    def is_include_dir(path: str) -> bool:
        return classify(path, True, config) is Role.INCLUDE_SCOPE

    try:
        for entry in tree.walk(skip_dir=is_include_dir):
            found[classify(entry.path, entry.is_dir, config)].append(entry.path)
    except OSError as exc:
        raise TraversalError(f"Cannot walk {tree!r}: {exc}") from exc

    result = Classification(
        root=tree.root,
        include_scopes=tuple(found[Role.INCLUDE_SCOPE]),
        layouts=tuple(found[Role.LAYOUT]),
        pages=tuple(found[Role.PAGE]),
    )
    logger.debug(
        "Classified %s: %d include dirs, %d layouts, %d pages",
        tree, len(result.include_scopes), len(result.layouts), len(result.pages),
    )
    return result
