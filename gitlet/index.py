# index.py -- File parser/writer for the gitlet staging area
# Copyright (C) 2026 The Gitlet Authors
#
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later
# Gitlet is dual-licensed under the Apache License, Version 2.0 and the GNU
# General Public License as published by the Free Software Foundation; version 2.0
# or (at your option) any later version. You can redistribute it and/or
# modify it under the terms of either of these two licenses.
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# You should have received a copy of the licenses; if not, see
# <http://www.gnu.org/licenses/> for a copy of the GNU General Public License
# and <http://www.apache.org/licenses/LICENSE-2.0> for a copy of the Apache
# License, Version 2.0.
#

"""The staging index.

The index holds two disjoint sets keyed by repository-relative path: paths
staged for addition, with the bytes to record on the next commit, and paths
staged for removal.

On disk each area is a flat directory with one file per staged path. The
file name is the percent-encoded path plus ``.entry``, so nested paths never
create sub-directories and staged names can not clash with the ``.lock``
files used while writing.
"""

__all__ = [
    "ADDITION_DIR",
    "ENTRY_SUFFIX",
    "REMOVAL_DIR",
    "Index",
    "MemoryIndex",
    "paths_overlap",
]

import logging
import os
from collections.abc import Iterator
from typing import Union
from urllib.parse import quote, unquote

from .file import GitletFile, ensure_dir_exists, write_atomic

logger = logging.getLogger(__name__)

ADDITION_DIR = "addition"
REMOVAL_DIR = "removal"
ENTRY_SUFFIX = ".entry"


def paths_overlap(a: str, b: str) -> bool:
    """Check whether one path is a directory prefix of the other.

    Two such paths can not both exist as files in one working tree.
    """
    return a.startswith(b + "/") or b.startswith(a + "/")


class BaseIndex:
    """Pending additions and removals, consumed by the next commit."""

    def additions(self) -> dict[str, bytes]:
        """Paths staged for addition, mapped to their pending contents."""
        raise NotImplementedError(self.additions)

    def removals(self) -> set[str]:
        """Paths staged for removal."""
        raise NotImplementedError(self.removals)

    def _set_addition(self, path: str, contents: bytes) -> None:
        raise NotImplementedError(self._set_addition)

    def _discard_addition(self, path: str) -> bool:
        raise NotImplementedError(self._discard_addition)

    def _set_removal(self, path: str) -> None:
        raise NotImplementedError(self._set_removal)

    def _discard_removal(self, path: str) -> bool:
        raise NotImplementedError(self._discard_removal)

    def is_staged_for_addition(self, path: str) -> bool:
        return path in self.additions()

    def stage_addition(self, path: str, contents: bytes) -> None:
        """Record ``contents`` for ``path``, clearing any pending removal.

        Staged additions of a parent directory path or of paths below
        ``path`` are dropped; the working tree can only hold one of them.
        """
        self._discard_removal(path)
        for other in self.additions():
            if paths_overlap(other, path):
                self._discard_addition(other)
                logger.debug("Dropped staged %s, replaced by %s", other, path)
        self._set_addition(path, contents)
        logger.debug("Staged %s for addition", path)

    def stage_removal(self, path: str) -> None:
        """Record a removal of ``path``, clearing any pending addition."""
        self._discard_addition(path)
        self._set_removal(path)
        logger.debug("Staged %s for removal", path)

    def unstage(self, path: str) -> None:
        """Forget any pending addition or removal of ``path``."""
        self._discard_addition(path)
        self._discard_removal(path)

    def is_empty(self) -> bool:
        return not self.additions() and not self.removals()

    def clear(self) -> None:
        """Drop every pending addition and removal."""
        for path in self.additions():
            self._discard_addition(path)
        for path in self.removals():
            self._discard_removal(path)

    def drain(self) -> tuple[dict[str, bytes], set[str]]:
        """Return the pending additions and removals, and clear both."""
        additions, removals = self.additions(), self.removals()
        self.clear()
        return additions, removals

    def __iter__(self) -> Iterator[str]:
        """Iterate over every staged path, additions first."""
        yield from sorted(self.additions())
        yield from sorted(self.removals())

    def __len__(self) -> int:
        return len(self.additions()) + len(self.removals())


class MemoryIndex(BaseIndex):
    """Index that keeps its state in memory."""

    def __init__(self) -> None:
        self._additions: dict[str, bytes] = {}
        self._removals: set[str] = set()

    def additions(self) -> dict[str, bytes]:
        return dict(self._additions)

    def removals(self) -> set[str]:
        return set(self._removals)

    def _set_addition(self, path: str, contents: bytes) -> None:
        self._additions[path] = contents

    def _discard_addition(self, path: str) -> bool:
        return self._additions.pop(path, None) is not None

    def _set_removal(self, path: str) -> None:
        self._removals.add(path)

    def _discard_removal(self, path: str) -> bool:
        if path in self._removals:
            self._removals.remove(path)
            return True
        return False


class Index(BaseIndex):
    """Index stored as one file per staged path under a staging directory."""

    def __init__(self, path: Union[str, "os.PathLike[str]"]) -> None:
        """Open the staging area.

        Args:
          path: The staging directory; the addition and removal areas live
            underneath it
        """
        self.path = os.fspath(path)
        self._addition_path = os.path.join(self.path, ADDITION_DIR)
        self._removal_path = os.path.join(self.path, REMOVAL_DIR)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.path!r})"

    @classmethod
    def init(cls, path: Union[str, "os.PathLike[str]"]) -> "Index":
        """Create an empty staging area."""
        ret = cls(path)
        ensure_dir_exists(ret._addition_path)
        ensure_dir_exists(ret._removal_path)
        return ret

    @staticmethod
    def entry_name(path: str) -> str:
        """The file name under which ``path`` is staged."""
        return quote(path, safe="") + ENTRY_SUFFIX

    @staticmethod
    def _iter_entries(base: str) -> Iterator[str]:
        for name in sorted(os.listdir(base)):
            # anything else is a write in progress
            if name.endswith(ENTRY_SUFFIX):
                yield unquote(name[: -len(ENTRY_SUFFIX)])

    def additions(self) -> dict[str, bytes]:
        ret = {}
        for path in self._iter_entries(self._addition_path):
            filename = os.path.join(self._addition_path, self.entry_name(path))
            with GitletFile(filename, "rb") as f:
                ret[path] = f.read()
        return ret

    def removals(self) -> set[str]:
        return set(self._iter_entries(self._removal_path))

    def is_staged_for_addition(self, path: str) -> bool:
        return os.path.isfile(
            os.path.join(self._addition_path, self.entry_name(path))
        )

    def is_empty(self) -> bool:
        return next(self._iter_entries(self._addition_path), None) is None and (
            next(self._iter_entries(self._removal_path), None) is None
        )

    def _set_addition(self, path: str, contents: bytes) -> None:
        write_atomic(os.path.join(self._addition_path, self.entry_name(path)), contents)

    def _set_removal(self, path: str) -> None:
        write_atomic(os.path.join(self._removal_path, self.entry_name(path)), b"")

    def _discard(self, base: str, path: str) -> bool:
        try:
            os.remove(os.path.join(base, self.entry_name(path)))
        except FileNotFoundError:
            return False
        return True

    def _discard_addition(self, path: str) -> bool:
        return self._discard(self._addition_path, path)

    def _discard_removal(self, path: str) -> bool:
        return self._discard(self._removal_path, path)
