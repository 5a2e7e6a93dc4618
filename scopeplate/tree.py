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

"""Source trees that template fragments are loaded from.

A source tree names every entry with a slash-separated path.  For a
:class:`DirectoryTree` the first segment is the name of the directory the
tree was opened on, so ``DirectoryTree("site/views")`` yields paths such as
``views/admin/index.html``.

Trees only need three operations:

* ``walk(skip_dir)``: top-down, name-sorted walk; directories for which
  ``skip_dir`` returns true are yielded but not descended into.
* ``glob(directory, pattern)``: files directly under *directory* whose
  name matches *pattern*.
* ``read(path)``: text content of a file.
"""

from __future__ import annotations

import fnmatch
import logging
import posixpath
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from scopeplate.errors import TraversalError

logger = logging.getLogger(__name__)

DirFilter = Callable[[str], bool]


@dataclass(frozen=True)
class SourceEntry:
    """One entry discovered while walking a tree."""

    path: str
    is_dir: bool


class SourceTree(Protocol):
    """Interface shared by all source trees."""

    root: str

    def walk(self, skip_dir: DirFilter | None = None) -> Iterator[SourceEntry]: ...

    def glob(self, directory: str, pattern: str) -> list[str]: ...

    def read(self, path: str) -> str: ...


def _join(parent: str, name: str) -> str:
    return f"{parent}/{name}" if parent else name


class DirectoryTree:
    """A template tree backed by a directory on disk.

    Args:
        directory: Directory holding the templates (the tree root).
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory).expanduser().resolve()
        self.root = self.directory.name

    def __repr__(self) -> str:
        return f"DirectoryTree({str(self.directory)!r})"

    def _locate(self, path: str) -> Path:
        return self.directory.parent.joinpath(*path.split("/"))

    def walk(self, skip_dir: DirFilter | None = None) -> Iterator[SourceEntry]:
        if not self.directory.is_dir():
            raise TraversalError(f"Template directory not found: {self.directory}")
        yield from self._walk(self.directory, self.root, skip_dir, {self.directory})

    def _walk(
        self,
        directory: Path,
        prefix: str,
        skip_dir: DirFilter | None,
        visited: set[Path],
    ) -> Iterator[SourceEntry]:
        try:
            children = sorted(directory.iterdir(), key=lambda p: p.name)
        except OSError as exc:
            raise TraversalError(f"Cannot list {prefix or '.'!r}: {exc}") from exc

        for child in children:
            path = _join(prefix, child.name)
            if child.is_dir():
                yield SourceEntry(path, is_dir=True)
                if skip_dir is not None and skip_dir(path):
                    logger.debug("Not descending into %s", path)
                    continue
                real = child.resolve()
                if real in visited:
                    # symlink back into a directory already being walked
                    logger.debug("Skipping directory loop at %s", path)
                    continue
                yield from self._walk(child, path, skip_dir, visited | {real})
            else:
                yield SourceEntry(path, is_dir=False)

    def glob(self, directory: str, pattern: str) -> list[str]:
        location = self._locate(directory)
        return sorted(
            _join(directory, p.name)
            for p in location.glob(pattern)
            if p.is_file()
        )

    def read(self, path: str) -> str:
        try:
            return self._locate(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise TraversalError(f"Cannot read {path!r}: {exc}") from exc


class MemoryTree:
    """A template tree held in memory.

    Directories are implied by the file paths.  Useful for tests and for
    templates bundled as Python data.

    Args:
        files: Mapping of slash-separated path to template source.
    """

    def __init__(self, files: Mapping[str, str]) -> None:
        self.root = ""
        self.files: dict[str, str] = {}
        self._children: dict[str, set[str]] = {"": set()}
        for raw_path, source in files.items():
            path = posixpath.normpath(raw_path).lstrip("/")
            if path in ("", "."):
                raise ValueError(f"Invalid template path: {raw_path!r}")
            self.files[path] = source
            parent, name = posixpath.split(path)
            self._children.setdefault(parent, set()).add(name)
            # register every ancestor directory
            while parent:
                grandparent, dirname = posixpath.split(parent)
                self._children.setdefault(grandparent, set()).add(dirname)
                parent = grandparent

    def __repr__(self) -> str:
        return f"MemoryTree({len(self.files)} files)"

    def _is_dir(self, path: str) -> bool:
        return path in self._children

    def walk(self, skip_dir: DirFilter | None = None) -> Iterator[SourceEntry]:
        yield from self._walk("", skip_dir)

    def _walk(self, directory: str, skip_dir: DirFilter | None) -> Iterator[SourceEntry]:
        for name in sorted(self._children.get(directory, ())):
            path = _join(directory, name)
            if self._is_dir(path):
                yield SourceEntry(path, is_dir=True)
                if skip_dir is not None and skip_dir(path):
                    continue
                yield from self._walk(path, skip_dir)
            else:
                yield SourceEntry(path, is_dir=False)

    def glob(self, directory: str, pattern: str) -> list[str]:
        return sorted(
            _join(directory, name)
            for name in self._children.get(directory, ())
            if fnmatch.fnmatchcase(name, pattern)
            and not self._is_dir(_join(directory, name))
        )

    def read(self, path: str) -> str:
        try:
            return self.files[path]
        except KeyError:
            raise TraversalError(f"Cannot read {path!r}: no such file") from None
