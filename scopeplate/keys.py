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

"""Lookup keys for composed templates."""

from __future__ import annotations

from scopeplate.scope import split_path


def derive_key(path: str, extension: str) -> str:
    """Return the lookup key for the page at *path*.

    The first path segment (the templates root, e.g. ``views``) and the
    extension are stripped: ``views/admin/index.html`` becomes
    ``admin/index``.  A single-segment path keeps its only segment.

    Raises :class:`ValueError` if nothing is left to name the page.
    """
    parts = split_path(path)
    if len(parts) > 1:
        parts = parts[1:]
    key = "/".join(parts)
    if extension and key.endswith(extension):
        key = key[: -len(extension)]
    if not key or key.endswith("/"):
        raise ValueError(f"Cannot derive a template key from {path!r}")
    return key
