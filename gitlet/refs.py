# refs.py -- For dealing with gitlet refs
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

"""Ref handling.

Branches are stored as ``refs/heads/<name>`` holding a commit id. HEAD is a
symbolic ref naming the active branch, so the commit recorded for HEAD and
for the active branch can never disagree.
"""

__all__ = [
    "HEADREF",
    "LOCAL_BRANCH_PREFIX",
    "Branch",
    "DictRefsContainer",
    "DiskRefsContainer",
    "RefsContainer",
    "SymrefLoop",
    "check_branch_name",
    "local_branch_name",
]

import logging
import os
from collections.abc import Iterator
from typing import NamedTuple, Optional, Union

from .file import GitletFile, ensure_dir_exists
from .objects import ObjectID, valid_hexsha

logger = logging.getLogger(__name__)

HEADREF = "HEAD"
SYMREF = "ref: "
LOCAL_BRANCH_PREFIX = "refs/heads/"
BAD_REF_CHARS = set("\177 ~^:?*[/\\")


class SymrefLoop(Exception):
    """There is a loop between one or more symrefs."""

    def __init__(self, ref: str, depth: int) -> None:
        """Initialize SymrefLoop exception."""
        self.ref = ref
        self.depth = depth


class Branch(NamedTuple):
    """A named pointer to a commit."""

    name: str
    commit_id: ObjectID
    is_head: bool


def check_branch_name(name: str) -> bool:
    """Check if a branch name can be stored as a reference.

    Args:
      name: The branch name to check
    Returns: True if name is valid, False otherwise
    """
    if not name or name.startswith((".", "-")):
        return False
    if ".." in name or "@{" in name:
        return False
    if any(ord(c) < 0o40 or c in BAD_REF_CHARS for c in name):
        return False
    if name.endswith((".", ".lock")):
        return False
    return name != HEADREF


def local_branch_name(name: str) -> str:
    """Build a full branch ref from a short name.

    Args:
      name: Short branch name, e.g. "main"
    Returns: Full ref name, e.g. "refs/heads/main"
    """
    if name.startswith(LOCAL_BRANCH_PREFIX):
        return name
    return LOCAL_BRANCH_PREFIX + name


def parse_symref_value(contents: str) -> str:
    """Parse a symref value.

    Args:
      contents: Contents to parse
    Returns: Destination
    """
    if contents.startswith(SYMREF):
        return contents[len(SYMREF) :].rstrip("\r\n")
    raise ValueError(contents)


class RefsContainer:
    """A container for refs."""

    def read_loose_ref(self, refname: str) -> Optional[str]:
        """Read a reference and return its contents.

        If the reference file is a symbolic reference, only read the first
        line of the file. Otherwise, only read the first 40 bytes.

        Args:
          refname: the refname to read
        Returns: The contents of the ref file, or None if it does
          not exist.
        """
        raise NotImplementedError(self.read_loose_ref)

    def _write_ref(self, refname: str, contents: str) -> None:
        raise NotImplementedError(self._write_ref)

    def _remove_ref(self, refname: str) -> None:
        raise NotImplementedError(self._remove_ref)

    def allkeys(self) -> set[str]:
        """All refs present in this container."""
        raise NotImplementedError(self.allkeys)

    def set_symbolic_ref(self, name: str, other: str) -> None:
        """Make a ref point at another ref.

        Args:
          name: Name of the ref to set
          other: Name of the ref to point at
        """
        self._write_ref(name, SYMREF + other + "\n")

    def follow(self, name: str) -> tuple[list[str], Optional[ObjectID]]:
        """Follow a reference name.

        Returns: a tuple of (refnames, sha), wheres refnames are the names of
            references in the chain
        """
        contents: Optional[str] = SYMREF + name
        depth = 0
        refnames = []
        while contents and contents.startswith(SYMREF):
            refname = contents[len(SYMREF) :]
            refnames.append(refname)
            contents = self.read_loose_ref(refname)
            if not contents:
                break
            depth += 1
            if depth > 5:
                raise SymrefLoop(name, depth)
        return refnames, contents

    def __contains__(self, refname: str) -> bool:
        return self.read_loose_ref(refname) is not None

    def __getitem__(self, name: str) -> ObjectID:
        """Get the commit id referenced by a ref, following symbolic refs.

        Raises:
          KeyError: if the ref (or the ref it points at) does not exist
        """
        _, sha = self.follow(name)
        if sha is None:
            raise KeyError(name)
        return sha

    def __setitem__(self, name: str, sha: ObjectID) -> None:
        """Set a ref, following a symbolic ref to its target.

        Args:
          name: The refname to set the value of
          sha: The new commit id for the ref
        """
        if not valid_hexsha(sha):
            raise ValueError(f"Invalid commit id {sha!r}")
        refnames, _ = self.follow(name)
        realname = refnames[-1]
        self._write_ref(realname, sha + "\n")
        logger.debug("Updated %s to %s", realname, sha)

    def __delitem__(self, name: str) -> None:
        """Remove a ref.

        Raises:
          KeyError: if the ref does not exist
        """
        if name not in self:
            raise KeyError(name)
        self._remove_ref(name)
        logger.debug("Removed %s", name)

    def add_if_new(self, name: str, sha: ObjectID) -> bool:
        """Add a new reference only if it does not already exist.

        Returns: True if the ref was added
        """
        if name in self:
            return False
        self[name] = sha
        return True

    # Branch-level view

    def head_branch(self) -> str:
        """Return the short name of the active branch."""
        target = parse_symref_value(self.read_loose_ref(HEADREF) or "")
        return target[len(LOCAL_BRANCH_PREFIX) :]

    def set_head_branch(self, name: str) -> None:
        """Make ``name`` the active branch.

        Raises:
          KeyError: if the branch does not exist
        """
        ref = local_branch_name(name)
        if ref not in self:
            raise KeyError(name)
        self.set_symbolic_ref(HEADREF, ref)
        logger.debug("HEAD now at %s", name)

    def branch_names(self) -> list[str]:
        """Names of all branches, sorted."""
        return sorted(
            ref[len(LOCAL_BRANCH_PREFIX) :]
            for ref in self.allkeys()
            if ref.startswith(LOCAL_BRANCH_PREFIX)
        )

    def branches(self) -> list[Branch]:
        """All branches, sorted by name; exactly one has ``is_head`` set."""
        active = self.head_branch()
        return [
            Branch(name, self[local_branch_name(name)], name == active)
            for name in self.branch_names()
        ]

    def __iter__(self) -> Iterator[str]:
        return iter(self.allkeys())


class DictRefsContainer(RefsContainer):
    """RefsContainer backed by a simple dict."""

    def __init__(self, refs: Optional[dict[str, str]] = None) -> None:
        self._refs: dict[str, str] = dict(refs or {})

    def read_loose_ref(self, refname: str) -> Optional[str]:
        return self._refs.get(refname)

    def _write_ref(self, refname: str, contents: str) -> None:
        self._refs[refname] = contents.rstrip("\n")

    def _remove_ref(self, refname: str) -> None:
        del self._refs[refname]

    def allkeys(self) -> set[str]:
        return set(self._refs) - {HEADREF}


class DiskRefsContainer(RefsContainer):
    """Refs container that reads refs from disk."""

    def __init__(self, path: Union[str, "os.PathLike[str]"]) -> None:
        """Initialize DiskRefsContainer.

        Args:
          path: The repository control directory
        """
        self.path = os.fspath(path)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.path!r})"

    def refpath(self, name: str) -> str:
        """Return the disk path of a ref."""
        return os.path.join(self.path, *name.split("/"))

    def read_loose_ref(self, refname: str) -> Optional[str]:
        filename = self.refpath(refname)
        try:
            with GitletFile(filename, "rb") as f:
                header = f.read(len(SYMREF))
                if header == SYMREF.encode("ascii"):
                    # Read only the first line
                    return (header + f.readline()).rstrip(b"\r\n").decode("utf-8")
                # Read only the first 40 bytes
                return (header + f.read(40 - len(SYMREF))).decode("ascii")
        except (OSError, UnicodeError):
            return None

    def _write_ref(self, refname: str, contents: str) -> None:
        filename = self.refpath(refname)
        ensure_dir_exists(os.path.dirname(filename))
        with GitletFile(filename, "wb") as f:
            f.write(contents.encode("utf-8"))

    def _remove_ref(self, refname: str) -> None:
        os.remove(self.refpath(refname))

    def allkeys(self) -> set[str]:
        ret = set()
        heads = self.refpath(LOCAL_BRANCH_PREFIX.rstrip("/"))
        try:
            names = os.listdir(heads)
        except FileNotFoundError:
            return ret
        for name in names:
            if name.endswith(".lock"):
                continue
            if os.path.isfile(os.path.join(heads, name)):
                ret.add(LOCAL_BRANCH_PREFIX + name)
        return ret
