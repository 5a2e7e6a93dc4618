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

"""Exceptions raised while loading and rendering composed templates.

Load-time errors (everything except :class:`RenderError` and
:class:`TemplateLookupError`) abort the whole :func:`~scopeplate.load` call;
no partially built mapping is ever returned.
"""

from __future__ import annotations


class ScopeplateError(Exception):
    """Base class for all scopeplate errors."""


class TraversalError(ScopeplateError):
    """The source tree could not be walked or read."""


class IncludeGlobError(ScopeplateError):
    """Listing the fragments of a matched include directory failed."""


class IncludeParseError(ScopeplateError):
    """A fragment under a matched include directory failed to compile."""


class PageParseError(ScopeplateError):
    """A layout or the page itself failed to compile.

    Attributes:
        key: Lookup key of the page being composed.
        path: Source path of the fragment that failed.
    """

    def __init__(self, key: str, path: str, message: str) -> None:
        super().__init__(f"{key}: {path}: {message}")
        self.key = key
        self.path = path


class DuplicateKeyError(ScopeplateError):
    """Two pages derive the same lookup key."""


class RenderError(ScopeplateError):
    """Jinja2 failed while rendering a composed template."""

    def __init__(self, key: str, message: str) -> None:
        super().__init__(f"{key}: {message}")
        self.key = key


class TemplateLookupError(ScopeplateError, KeyError):
    """No composed template is registered under the requested key."""

    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"No template registered for key {self.key!r}"
