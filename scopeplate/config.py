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

"""Composition settings.

Every field has a default; passing an empty string for any of the name
fields falls back to that default, so partially filled configurations
behave like the defaults for whatever they leave out.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields

DEFAULT_EXTENSION = ".html"
DEFAULT_INCLUDES_DIR = "includes"
DEFAULT_LAYOUT_NAME = "layout"
DEFAULT_BLOCK_NAME = "content"

ENV_PREFIX = "SCOPEPLATE_"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True)
class Config:
    """Recognised options for a template tree.

    Attributes:
        extension: File extension of template fragments, dot included.
        includes_dir: Name of directories holding reusable includes.
        layout_name: Base name (without extension) of layout files.
        block_name: Block a bare page or bare nested layout fills in its
            parent layout.
        strict: Treat layout/page parse failures as fatal.  When false the
            page is skipped and reported in ``TemplateMap.errors``.
        autoescape: Enable Jinja2 autoescaping.
        strict_undefined: Raise on undefined variables at render time.
    """

    extension: str = DEFAULT_EXTENSION
    includes_dir: str = DEFAULT_INCLUDES_DIR
    layout_name: str = DEFAULT_LAYOUT_NAME
    block_name: str = DEFAULT_BLOCK_NAME
    strict: bool = True
    autoescape: bool = True
    strict_undefined: bool = True

    def __post_init__(self) -> None:
        for f in fields(self):
            if isinstance(f.default, str) and not getattr(self, f.name):
                object.__setattr__(self, f.name, f.default)

    @property
    def layout_file(self) -> str:
        """Base file name identifying a layout, e.g. ``layout.html``."""
        return self.layout_name + self.extension

    @property
    def include_pattern(self) -> str:
        """Glob pattern selecting fragments inside an include directory."""
        return "*" + self.extension

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX) -> Config:
        """Build a configuration from ``SCOPEPLATE_*`` environment variables.

        Unset variables keep their defaults.
        """
        return cls(
            extension=os.environ.get(f"{prefix}EXTENSION", ""),
            includes_dir=os.environ.get(f"{prefix}INCLUDES_DIR", ""),
            layout_name=os.environ.get(f"{prefix}LAYOUT_NAME", ""),
            block_name=os.environ.get(f"{prefix}BLOCK_NAME", ""),
            strict=_env_flag(f"{prefix}STRICT", True),
        )


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUE_VALUES
