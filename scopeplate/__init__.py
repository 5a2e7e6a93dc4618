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

"""Directory-scoped composition of Jinja2 templates.

Pages, layouts and includes are recognised by where they sit in a
template tree; no manifest is needed.  Every page is composed with the
includes and layouts of all its ancestor directories, deeper layouts
overriding the blocks of shallower ones.

Usage::

    from scopeplate import Config, load_directory

    templates = load_directory("views", Config(includes_dir="partials"))
    html = templates["admin/dash"].render(user="ada")
"""

from scopeplate.classify import Classification, Role, classify, classify_tree
from scopeplate.composer import ComposedTemplate, compose
from scopeplate.config import Config
from scopeplate.errors import (
    DuplicateKeyError,
    IncludeGlobError,
    IncludeParseError,
    PageParseError,
    RenderError,
    ScopeplateError,
    TemplateLookupError,
    TraversalError,
)
from scopeplate.keys import derive_key
from scopeplate.loader import TemplateMap, load, load_directory
from scopeplate.scope import ScopeMatch, match_scopes
from scopeplate.tree import DirectoryTree, MemoryTree, SourceEntry, SourceTree

__all__ = [
    "Config",
    "load",
    "load_directory",
    "TemplateMap",
    "ComposedTemplate",
    "compose",
    "Role",
    "Classification",
    "classify",
    "classify_tree",
    "ScopeMatch",
    "match_scopes",
    "derive_key",
    "SourceTree",
    "SourceEntry",
    "DirectoryTree",
    "MemoryTree",
    "ScopeplateError",
    "TraversalError",
    "IncludeGlobError",
    "IncludeParseError",
    "PageParseError",
    "DuplicateKeyError",
    "RenderError",
    "TemplateLookupError",
]
