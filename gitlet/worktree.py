# worktree.py -- Working tree operations for gitlet repositories
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

"""Working tree operations for gitlet repositories.

A working tree file is *tracked-or-staged* when it is staged for addition
or recorded in the active commit. Operations that replace the whole working
tree (branch checkout, reset, merge) refuse to run while any other file is
present, so that no untracked work is ever overwritten.
"""

__all__ = [
    "WorkTree",
    "path_to_tree_path",
]

import logging
import os
import time
from typing import TYPE_CHECKING, Optional, Union

from .errors import (
    EmptyCommitMessage,
    FileNotInCommit,
    NoSuchFile,
    NothingStagedToCommit,
    NothingToRemove,
    UntrackedFileConflict,
)
from .file import GitletFile, ensure_dir_exists, prune_empty_dirs, write_atomic
from .index import paths_overlap
from .objects import Blob, Commit, ObjectID, local_timezone

if TYPE_CHECKING:
    from .repo import Repo

logger = logging.getLogger(__name__)


def path_to_tree_path(path: Union[str, "os.PathLike[str]"]) -> str:
    """Convert a path relative to the repository root to a tree path.

    Args:
      path: A relative filesystem path
    Returns: The path with ``/`` separators and ``.`` components removed
    Raises:
      NoSuchFile: if the path is absolute or leaves the repository
    """
    path = os.fspath(path)
    if os.path.isabs(path):
        raise NoSuchFile()
    parts = [p for p in path.replace(os.sep, "/").split("/") if p not in ("", ".")]
    if not parts or ".." in parts:
        raise NoSuchFile()
    return "/".join(parts)


class WorkTree:
    """Working tree operations for a gitlet repository.

    This class stages files, creates commits from the staging index and
    materializes commits into the working directory.
    """

    def __init__(self, repo: "Repo", path: Union[str, "os.PathLike[str]"]) -> None:
        """Initialize a WorkTree for the given repository.

        Args:
            repo: The repository this working tree belongs to
            path: Path to the working tree directory
        """
        self._repo = repo
        self.path = os.path.abspath(os.fspath(path))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.path!r})"

    def abspath(self, tree_path: str) -> str:
        """Return the filesystem path of a tree path."""
        return os.path.join(self.path, *tree_path.split("/"))

    def list_files(self) -> list[str]:
        """List the regular files of the working tree, sorted.

        The control directory is never part of the working tree.
        """
        controldir = os.path.basename(self._repo.controldir())
        ret = []
        for dirpath, dirnames, filenames in os.walk(self.path):
            if dirpath == self.path and controldir in dirnames:
                dirnames.remove(controldir)
            rel = os.path.relpath(dirpath, self.path)
            for name in filenames:
                if not os.path.isfile(os.path.join(dirpath, name)):
                    continue
                if rel == os.curdir:
                    ret.append(name)
                else:
                    ret.append("/".join(rel.split(os.sep) + [name]))
        return sorted(ret)

    def exists(self, tree_path: str) -> bool:
        return os.path.isfile(self.abspath(tree_path))

    def read_file(self, tree_path: str) -> bytes:
        """Read a working tree file.

        Raises:
          NoSuchFile: if the file is not present
        """
        try:
            with GitletFile(self.abspath(tree_path), "rb") as f:
                return f.read()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            raise NoSuchFile() from None

    def write_file(self, tree_path: str, contents: bytes) -> None:
        """Write ``contents`` to a working tree file, replacing it."""
        filename = self.abspath(tree_path)
        ensure_dir_exists(os.path.dirname(filename))
        write_atomic(filename, contents)
        logger.debug("Wrote %s", tree_path)

    def delete_file(self, tree_path: str) -> None:
        """Delete a working tree file and any directories it leaves empty."""
        filename = self.abspath(tree_path)
        try:
            os.remove(filename)
        except FileNotFoundError:
            return
        prune_empty_dirs(os.path.dirname(filename), self.path)
        logger.debug("Deleted %s", tree_path)

    # Safety checks

    def _is_tracked_or_staged(self, tree_path: str, commit: Commit) -> bool:
        return tree_path in commit or self._repo.index.is_staged_for_addition(
            tree_path
        )

    def untracked_files(self, commit: Optional[Commit] = None) -> list[str]:
        """Working files neither staged for addition nor tracked by ``commit``.

        Args:
          commit: Commit to compare against, the active commit by default
        """
        if commit is None:
            commit = self._repo.current_commit()
        additions = self._repo.index.additions()
        return [
            path
            for path in self.list_files()
            if path not in commit and path not in additions
        ]

    def check_no_untracked(self, commit: Optional[Commit] = None) -> None:
        """Make sure that no untracked file is in the way.

        Raises:
          UntrackedFileConflict: if any working file is untracked
        """
        untracked = self.untracked_files(commit)
        if untracked:
            logger.debug("Untracked files in the way: %s", ", ".join(untracked))
            raise UntrackedFileConflict()

    # Staging

    def stage(self, tree_path: str) -> None:
        """Stage the current contents of a working file.

        Contents identical to the version in the active commit are not
        staged; any stale staged copy is dropped instead. A pending removal
        of the path is always cancelled.

        Raises:
          NoSuchFile: if the file is not in the working tree
        """
        contents = self.read_file(tree_path)
        index = self._repo.index
        if self._repo.current_commit().lookup(tree_path) == Blob(contents).id:
            index.unstage(tree_path)
            logger.debug("%s is unchanged, nothing to stage", tree_path)
            return
        index.stage_addition(tree_path, contents)

    def remove(self, tree_path: str) -> None:
        """Stop tracking a file.

        The path is staged for removal; the working file is deleted only
        when the active commit tracks it.

        Raises:
          NothingToRemove: if the path is neither staged nor tracked
        """
        index = self._repo.index
        tracked = tree_path in self._repo.current_commit()
        if not tracked and not index.is_staged_for_addition(tree_path):
            raise NothingToRemove()
        index.stage_removal(tree_path)
        if tracked:
            self.delete_file(tree_path)

    def commit(
        self,
        message: str,
        commit_timestamp: Optional[int] = None,
        commit_timezone: Optional[int] = None,
        merge_parent: Optional[ObjectID] = None,
    ) -> ObjectID:
        """Create a new commit from the staging index.

        The new tree holds every staged addition, plus every path of the
        parent commit that is neither staged for addition nor for removal.
        Parent paths that sit below, or above, a staged addition are left
        out. The staging index is drained once the tree is known.

        Args:
          message: Commit message
          commit_timestamp: Commit timestamp (defaults to now)
          commit_timezone: Commit timestamp timezone (defaults to the local
            timezone)
          merge_parent: Second parent, for merge commits
        Returns:
          New commit id
        Raises:
          EmptyCommitMessage: if ``message`` is empty
          NothingStagedToCommit: if the staging index is empty
        """
        if not message:
            raise EmptyCommitMessage()
        index = self._repo.index
        if index.is_empty():
            raise NothingStagedToCommit()
        if commit_timestamp is None:
            commit_timestamp = int(time.time())
        if commit_timezone is None:
            commit_timezone = local_timezone(commit_timestamp)

        parent = self._repo.current_commit()
        additions, removals = index.drain()
        blobs = {path: Blob(contents) for path, contents in additions.items()}
        self._repo.object_store.add_objects(blobs.values())
        # a tracked file replaced by a directory, or the other way round,
        # leaves the tree with the staged path only
        tree = {
            path: blob_id
            for path, blob_id in parent.tree.items()
            if path not in removals
            and not any(paths_overlap(path, added) for added in blobs)
        }
        for path, blob in blobs.items():
            tree[path] = blob.id

        parents = [parent.id]
        if merge_parent is not None:
            parents.append(merge_parent)
        c = Commit(
            message,
            commit_timestamp,
            commit_timezone,
            parents=parents,
            tree=tree,
        )
        self._repo.object_store.add_object(c)
        self._repo.update_active_branch(c.id)
        logger.debug("Committed %s on %s", c.id, self._repo.current_branch())
        return c.id

    # Checkout

    def checkout_path(self, tree_path: str, commit: Commit) -> None:
        """Overwrite one working file with its version in ``commit``.

        Raises:
          FileNotInCommit: if ``commit`` does not track the path
        """
        blob_id = commit.lookup(tree_path)
        if blob_id is None:
            raise FileNotInCommit()
        self.write_file(tree_path, self._repo.object_store.get_blob_data(blob_id))

    def sync_to(self, target: Commit) -> None:
        """Replace the working tree with the snapshot of ``target``.

        Every tracked-or-staged file is deleted, the files of ``target``
        are written out and the staging index is cleared. Callers move the
        refs; :meth:`check_no_untracked` must have passed beforehand.
        """
        current = self._repo.current_commit()
        for path in self.list_files():
            if self._is_tracked_or_staged(path, current):
                self.delete_file(path)
        for path, blob_id in sorted(target.tree.items()):
            self.write_file(path, self._repo.object_store.get_blob_data(blob_id))
        self._repo.index.clear()
        logger.debug("Working tree now at %s", target.id)

    # Status

    def unstaged_changes(self) -> list[tuple[str, str]]:
        """Find modifications that are not staged for commit.

        Returns: sorted ``(path, kind)`` pairs, where kind is ``modified``
          or ``deleted``
        """
        commit = self._repo.current_commit()
        index = self._repo.index
        additions = index.additions()
        removals = index.removals()
        changes = {}
        for path, contents in additions.items():
            if not self.exists(path):
                changes[path] = "deleted"
            elif self.read_file(path) != contents:
                changes[path] = "modified"
        for path, blob_id in commit.tree.items():
            if path in additions or path in removals:
                continue
            if not self.exists(path):
                changes[path] = "deleted"
            elif Blob(self.read_file(path)).id != blob_id:
                changes[path] = "modified"
        return sorted(changes.items())
