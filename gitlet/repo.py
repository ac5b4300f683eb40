# repo.py -- For dealing with gitlet repositories.
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

"""Repository access.

This module contains the repository handle: every operation receives one
explicitly and reaches the object store, the refs, the staging index and
the configuration through it.
"""

__all__ = [
    "CONTROLDIR",
    "DEFAULT_BRANCH",
    "INITIAL_COMMIT_MESSAGE",
    "BaseRepo",
    "Repo",
    "UnsupportedVersion",
]

import logging
import os
from types import TracebackType
from typing import Optional, Union

from .config import ConfigFile
from .errors import (
    AlreadyInitialized,
    BranchAlreadyExists,
    CannotRemoveActiveBranch,
    InvalidBranchName,
    NoSuchBranch,
    NoSuchCommit,
    NotGitletRepository,
)
from .graph import BREADTH_FIRST, find_merge_base, is_ancestor
from .index import BaseIndex, Index
from .object_store import BaseObjectStore, DiskObjectStore
from .objects import ZERO_TIME, Commit, ObjectID
from .refs import (
    HEADREF,
    Branch,
    DiskRefsContainer,
    RefsContainer,
    check_branch_name,
    local_branch_name,
)
from .worktree import WorkTree

logger = logging.getLogger(__name__)

CONTROLDIR = ".gitlet"
OBJECTDIR = "objects"
REFSDIR = "refs"
REFSDIR_HEADS = "heads"
STAGINGDIR = "staging"
CONFIGFILE = "config"

DEFAULT_BRANCH = "main"
INITIAL_COMMIT_MESSAGE = "initial commit"
REPOSITORY_FORMAT_VERSION = 1

BASE_DIRECTORIES = [
    [OBJECTDIR],
    [REFSDIR],
    [REFSDIR, REFSDIR_HEADS],
]


class UnsupportedVersion(Exception):
    """Unsupported repository version."""

    def __init__(self, version: int) -> None:
        """Initialize UnsupportedVersion exception.

        Args:
            version: The unsupported repository version
        """
        super().__init__(f"Unsupported repository format version {version}")
        self.version = version


class BaseRepo:
    """Base class for a gitlet repository.

    Attributes:
      object_store: Dictionary-like object for accessing
        the objects
      refs: Dictionary-like object with the refs in this
        repository
      index: The staging index
    """

    def __init__(
        self, object_store: BaseObjectStore, refs: RefsContainer, index: BaseIndex
    ) -> None:
        """Open a repository.

        Args:
          object_store: Object store to use
          refs: Refs container to use
          index: Staging index to use
        """
        self.object_store = object_store
        self.refs = refs
        self.index = index

    def get_config(self) -> ConfigFile:
        """Retrieve the config object."""
        raise NotImplementedError(self.get_config)

    def get_worktree(self) -> WorkTree:
        """Get the working tree of this repository."""
        raise NotImplementedError(self.get_worktree)

    def close(self) -> None:
        """Close any files opened by this repository."""
        self.object_store.close()

    # Branches

    def current_branch(self) -> str:
        """Return the name of the active branch."""
        return self.refs.head_branch()

    def set_current_branch(self, name: str) -> None:
        """Make ``name`` the active branch.

        Raises:
          NoSuchBranch: if there is no such branch
        """
        try:
            self.refs.set_head_branch(name)
        except KeyError:
            raise NoSuchBranch() from None

    def branches(self) -> list[Branch]:
        """All branches, sorted by name."""
        return self.refs.branches()

    def has_branch(self, name: str) -> bool:
        return check_branch_name(name) and local_branch_name(name) in self.refs

    def branch_commit(self, name: str) -> Commit:
        """Return the commit a branch points at.

        Raises:
          NoSuchBranch: if there is no such branch
        """
        if not self.has_branch(name):
            raise NoSuchBranch()
        return self[self.refs[local_branch_name(name)]]

    def create_branch(self, name: str) -> None:
        """Create a branch pointing at the active commit.

        Raises:
          InvalidBranchName: if ``name`` can not be used as a branch name
          BranchAlreadyExists: if the branch exists
        """
        if not check_branch_name(name):
            raise InvalidBranchName()
        if not self.refs.add_if_new(local_branch_name(name), self.head()):
            raise BranchAlreadyExists()

    def delete_branch(self, name: str) -> None:
        """Delete a branch; its commits stay in the object store.

        Raises:
          NoSuchBranch: if there is no such branch
          CannotRemoveActiveBranch: if ``name`` is the active branch
        """
        if not self.has_branch(name):
            raise NoSuchBranch()
        if name == self.current_branch():
            raise CannotRemoveActiveBranch()
        del self.refs[local_branch_name(name)]

    # Commits

    def head(self) -> ObjectID:
        """Return the id of the active commit."""
        return self.refs[HEADREF]

    def current_commit(self) -> Commit:
        """Return the active commit."""
        return self[self.head()]

    def update_active_branch(self, commit_id: ObjectID) -> None:
        """Point the active branch at ``commit_id``."""
        self.refs[HEADREF] = commit_id

    def __getitem__(self, sha: ObjectID) -> Commit:
        """Retrieve a commit by its full id.

        Raises:
          KeyError: when the id does not name a stored commit
        """
        commit = self.object_store.get_commit(sha)
        if commit is None:
            raise KeyError(sha)
        return commit

    def __contains__(self, sha: ObjectID) -> bool:
        return self.object_store.get_commit(sha) is not None

    def get_parents(self, sha: ObjectID) -> list[ObjectID]:
        """Return the parents of a commit, first parent first."""
        return self[sha].parents

    def lookup_commit(self, prefix: str) -> Commit:
        """Resolve a full or abbreviated commit id.

        Args:
          prefix: Leading hex digits of a commit id
        Returns: The single commit whose id starts with ``prefix``
        Raises:
          NoSuchCommit: when no commit, or more than one, matches
        """
        prefix = prefix.lower()
        if not prefix:
            raise NoSuchCommit()
        matches = [
            sha
            for sha in self.object_store.iter_prefix(prefix)
            if sha in self
        ]
        if len(matches) != 1:
            if matches:
                logger.debug("Prefix %s is ambiguous: %s", prefix, matches)
            raise NoSuchCommit()
        return self[matches[0]]

    def do_commit(
        self,
        message: str,
        commit_timestamp: Optional[int] = None,
        commit_timezone: Optional[int] = None,
        merge_parent: Optional[ObjectID] = None,
    ) -> ObjectID:
        """Create a new commit from the staging index.

        See :meth:`WorkTree.commit` for the arguments.
        """
        return self.get_worktree().commit(
            message,
            commit_timestamp=commit_timestamp,
            commit_timezone=commit_timezone,
            merge_parent=merge_parent,
        )

    # Graph

    def merge_base_algorithm(self) -> str:
        """The configured merge base algorithm."""
        try:
            return self.get_config().get("merge", "baseAlgorithm")
        except KeyError:
            return BREADTH_FIRST

    def merge_base(self, c1: ObjectID, c2: ObjectID) -> Optional[ObjectID]:
        """Find the merge base of two commits with the configured algorithm."""
        return find_merge_base(
            self.object_store, c1, c2, algorithm=self.merge_base_algorithm()
        )

    def is_ancestor(self, ancestor: ObjectID, descendant: ObjectID) -> bool:
        """Check whether ``ancestor`` equals or precedes ``descendant``."""
        return is_ancestor(self.get_parents, ancestor, descendant)


class Repo(BaseRepo):
    """A gitlet repository backed by local disk.

    To open an existing repository, call the constructor with
    the path of the repository.

    To create a new repository, use the Repo.init class method.

    Attributes:
      path: Path to the working tree
    """

    path: str
    object_store: DiskObjectStore
    index: Index

    def __init__(self, root: Union[str, "os.PathLike[str]"]) -> None:
        """Open a repository on disk.

        Args:
          root: Path to the repository's working tree.
        Raises:
          NotGitletRepository: if ``root`` holds no repository
          UnsupportedVersion: if the repository format is unknown
        """
        root = os.fspath(root)
        self._controldir = os.path.join(root, CONTROLDIR)
        if not os.path.isdir(os.path.join(self._controldir, OBJECTDIR)):
            raise NotGitletRepository()
        self.path = root

        config = self.get_config()
        try:
            format_version = int(config.get("core", "repositoryformatversion"))
        except KeyError:
            format_version = REPOSITORY_FORMAT_VERSION
        except ValueError:
            raise UnsupportedVersion(-1) from None
        if format_version != REPOSITORY_FORMAT_VERSION:
            raise UnsupportedVersion(format_version)

        fsync_object_files = config.get_boolean("core", "fsyncObjectFiles", False)
        object_store = DiskObjectStore(
            os.path.join(self._controldir, OBJECTDIR),
            fsync_object_files=bool(fsync_object_files),
        )
        super().__init__(
            object_store,
            DiskRefsContainer(self._controldir),
            Index(os.path.join(self._controldir, STAGINGDIR)),
        )

    def __repr__(self) -> str:
        return f"<Repo at {self.path!r}>"

    def controldir(self) -> str:
        """Return the path of the control directory."""
        return self._controldir

    def get_config(self) -> ConfigFile:
        """Retrieve the config object.

        Returns: `ConfigFile` object for the ``.gitlet/config`` file.
        """
        path = os.path.join(self._controldir, CONFIGFILE)
        try:
            return ConfigFile.from_path(path)
        except FileNotFoundError:
            ret = ConfigFile()
            ret.path = path
            return ret

    def get_worktree(self) -> WorkTree:
        """Get the working tree of this repository."""
        return WorkTree(self, self.path)

    @classmethod
    def init(
        cls,
        path: Union[str, "os.PathLike[str]"],
        *,
        mkdir: bool = False,
        config: Optional[ConfigFile] = None,
        default_branch: Optional[str] = None,
    ) -> "Repo":
        """Create a new repository.

        The new repository holds the initial commit, on a branch named
        ``default_branch``.

        Args:
          path: Path in which to create the repository
          mkdir: Whether to create the directory
          config: Configuration values to seed the repository with
          default_branch: Default branch name
        Returns: `Repo` instance
        Raises:
          AlreadyInitialized: if ``path`` already holds a repository
          InvalidBranchName: if ``default_branch`` is not a valid name
        """
        path = os.fspath(path)
        if mkdir:
            os.mkdir(path)
        controldir = os.path.join(path, CONTROLDIR)
        if os.path.exists(controldir):
            raise AlreadyInitialized()

        if config is None:
            config = ConfigFile()
        if default_branch is None:
            try:
                default_branch = config.get("init", "defaultBranch")
            except KeyError:
                default_branch = DEFAULT_BRANCH
        if not check_branch_name(default_branch):
            raise InvalidBranchName()

        os.mkdir(controldir)
        for d in BASE_DIRECTORIES:
            os.mkdir(os.path.join(controldir, *d))
        Index.init(os.path.join(controldir, STAGINGDIR))
        config.set("core", "repositoryformatversion", str(REPOSITORY_FORMAT_VERSION))
        config.write_to_path(os.path.join(controldir, CONFIGFILE))

        ret = cls(path)
        initial = Commit(INITIAL_COMMIT_MESSAGE, ZERO_TIME, 0)
        ret.object_store.add_object(initial)
        ret.refs[local_branch_name(default_branch)] = initial.id
        ret.refs.set_symbolic_ref(HEADREF, local_branch_name(default_branch))
        logger.debug("Initialized repository at %s on %s", path, default_branch)
        return ret

    def __enter__(self) -> "Repo":
        """Enter context manager."""
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        """Exit context manager and close repository."""
        self.close()
