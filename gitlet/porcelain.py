# porcelain.py -- Porcelain-like layer on top of gitlet
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

"""Simple wrapper that provides porcelain-like functions on top of gitlet.

Currently implemented:
 * add
 * branch{_create,_delete,_list}
 * checkout_branch
 * checkout_file
 * commit
 * find
 * global_log
 * init
 * log
 * merge
 * merge_base
 * reset
 * rm
 * status

Paths are interpreted relative to the repository root. Every function
accepts either a path to a repository or an open `Repo`.
"""

__all__ = [
    "GitletStatus",
    "MergeResult",
    "add",
    "branch_create",
    "branch_delete",
    "branch_list",
    "checkout_branch",
    "checkout_file",
    "commit",
    "find",
    "global_log",
    "init",
    "log",
    "merge",
    "merge_base",
    "open_repo_closing",
    "print_commit",
    "remove",
    "reset",
    "rm",
    "status",
]

import logging
import os
import sys
import time
from collections.abc import Iterator
from contextlib import AbstractContextManager, closing, contextmanager
from typing import NamedTuple, Optional, TextIO, TypeVar, Union

from .errors import (
    AlreadyOnBranch,
    BranchIsAncestor,
    CannotMergeSelf,
    NoCommitWithMessage,
    NoSuchBranch,
    NoSuchCheckoutBranch,
    UncommittedChangesBlockMerge,
)
from .merge import CONFLICT, DELETE, Merger
from .objects import Commit, ObjectID, format_timezone
from .refs import Branch
from .repo import BaseRepo, Repo
from .worktree import path_to_tree_path

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseRepo)
RepoPath = Union[str, "os.PathLike[str]", Repo]


class GitletStatus(NamedTuple):
    """The state of the working tree and staging index.

    Every list is sorted by path.
    """

    branches: list[Branch]
    staged: list[str]
    removed: list[str]
    unstaged: list[tuple[str, str]]
    untracked: list[str]


class MergeResult(NamedTuple):
    """Outcome of a merge.

    ``commit_id`` is the new merge commit, or the commit fast-forwarded to.
    """

    commit_id: ObjectID
    fast_forward: bool
    conflicts: list[str]


@contextmanager
def _noop_context_manager(obj: T) -> Iterator[T]:
    """Context manager that has the same api as closing but does nothing."""
    yield obj


def open_repo_closing(
    path_or_repo: Union[str, "os.PathLike[str]", T],
) -> AbstractContextManager[Union[T, Repo]]:
    """Open an argument that can be a repository or a path for a repository.

    returns a context manager that will close the repo on exit if the argument
    is a path, else does nothing if the argument is a repo.
    """
    if isinstance(path_or_repo, BaseRepo):
        return _noop_context_manager(path_or_repo)
    return closing(Repo(path_or_repo))


def init(
    path: Union[str, "os.PathLike[str]"] = ".",
    *,
    default_branch: Optional[str] = None,
) -> Repo:
    """Create a new gitlet repository.

    Args:
      path: Path to repository.
      default_branch: Name of the branch holding the initial commit
    Returns: A Repo instance
    """
    if not os.path.exists(path):
        os.mkdir(path)
    return Repo.init(path, default_branch=default_branch)


def add(repo: RepoPath, path: Union[str, "os.PathLike[str]"]) -> None:
    """Stage a file for the next commit.

    Args:
      repo: Repository for the files
      path: Path of the file, relative to the repository root
    """
    with open_repo_closing(repo) as r:
        r.get_worktree().stage(path_to_tree_path(path))


def commit(
    repo: RepoPath,
    message: str,
    commit_timestamp: Optional[int] = None,
    commit_timezone: Optional[int] = None,
) -> ObjectID:
    """Create a new commit.

    Args:
      repo: Path to repository
      message: Optional commit message
      commit_timestamp: Commit time, in seconds since the epoch
      commit_timezone: Commit timezone, as seconds east of UTC
    Returns: SHA1 of the new commit
    """
    with open_repo_closing(repo) as r:
        return r.do_commit(
            message,
            commit_timestamp=commit_timestamp,
            commit_timezone=commit_timezone,
        )


def remove(repo: RepoPath, path: Union[str, "os.PathLike[str]"]) -> None:
    """Stop tracking a file, deleting it from the working tree if tracked.

    Args:
      repo: Repository for the files
      path: Path of the file, relative to the repository root
    """
    with open_repo_closing(repo) as r:
        r.get_worktree().remove(path_to_tree_path(path))


rm = remove


def print_commit(commit: Commit, outstream: TextIO = sys.stdout) -> None:
    """Write a human-readable commit log entry.

    The date is shown in the timezone recorded in the commit.

    Args:
      commit: A `Commit` object
      outstream: A stream file to write to
    """
    outstream.write("===\n")
    outstream.write("commit " + commit.id + "\n")
    if commit.is_merge:
        outstream.write(
            "Merge: " + " ".join(p[:7] for p in commit.parents) + "\n"
        )
    time_tuple = time.gmtime(commit.commit_time + commit.commit_timezone)
    time_str = (
        time.strftime("%a %b ", time_tuple)
        + str(time_tuple.tm_mday)
        + time.strftime(" %H:%M:%S %Y", time_tuple)
    )
    timezone_str = format_timezone(commit.commit_timezone)
    outstream.write("Date: " + time_str + " " + timezone_str + "\n")
    outstream.write(commit.message + "\n")
    outstream.write("\n")


def iter_first_parents(repo: BaseRepo) -> Iterator[Commit]:
    """Walk from the active commit back to the root, first parents only."""
    commit: Optional[Commit] = repo.current_commit()
    while commit is not None:
        yield commit
        parent = commit.parent
        commit = repo[parent] if parent is not None else None


def log(repo: RepoPath = ".", outstream: TextIO = sys.stdout) -> None:
    """Write the history of the active branch, newest first.

    Args:
      repo: Path to repository
      outstream: Stream to write log output to
    """
    with open_repo_closing(repo) as r:
        for entry in iter_first_parents(r):
            print_commit(entry, outstream)


def global_log(repo: RepoPath = ".", outstream: TextIO = sys.stdout) -> None:
    """Write every commit ever made, in id order.

    Args:
      repo: Path to repository
      outstream: Stream to write log output to
    """
    with open_repo_closing(repo) as r:
        for entry in r.object_store.iter_commits():
            print_commit(entry, outstream)


def find(repo: RepoPath, message: str) -> list[ObjectID]:
    """Find the commits with exactly the given message.

    Returns: the matching commit ids, in id order
    Raises:
      NoCommitWithMessage: if no commit matches
    """
    with open_repo_closing(repo) as r:
        ret = [c.id for c in r.object_store.iter_commits() if c.message == message]
    if not ret:
        raise NoCommitWithMessage()
    return ret


def status(repo: RepoPath = ".") -> GitletStatus:
    """Returns branches, staged, unstaged, and untracked changes.

    Args:
      repo: Path to repository or repository object
    Returns: GitletStatus tuple,
        branches - all branches; the active one has ``is_head`` set
        staged - paths staged for addition
        removed - paths staged for removal that the active commit tracks
        unstaged - ``(path, "modified" | "deleted")`` pairs
        untracked - working files that are neither staged nor tracked, plus
          files staged for removal that are present again
    """
    with open_repo_closing(repo) as r:
        wt = r.get_worktree()
        head = r.current_commit()
        removals = r.index.removals()
        untracked = set(wt.untracked_files(head))
        untracked.update(p for p in removals if wt.exists(p))
        return GitletStatus(
            branches=r.branches(),
            staged=sorted(r.index.additions()),
            removed=sorted(p for p in removals if p in head),
            unstaged=wt.unstaged_changes(),
            untracked=sorted(untracked),
        )


def checkout_file(
    repo: RepoPath,
    path: Union[str, "os.PathLike[str]"],
    commit: Optional[str] = None,
) -> None:
    """Restore one file from a commit, without touching anything else.

    Args:
      repo: Path to repository
      path: Path of the file, relative to the repository root
      commit: Commit id or abbreviation; the active commit by default
    Raises:
      NoSuchCommit: if ``commit`` does not resolve
      FileNotInCommit: if the commit does not track ``path``
    """
    with open_repo_closing(repo) as r:
        if commit is None:
            target = r.current_commit()
        else:
            target = r.lookup_commit(commit)
        r.get_worktree().checkout_path(path_to_tree_path(path), target)


def _switch_to(r: BaseRepo, target: Commit) -> None:
    wt = r.get_worktree()
    wt.check_no_untracked()
    wt.sync_to(target)


def checkout_branch(repo: RepoPath, name: str) -> None:
    """Switch to another branch, replacing the working tree.

    Raises:
      NoSuchCheckoutBranch: if there is no such branch
      AlreadyOnBranch: if ``name`` is the active branch
      UntrackedFileConflict: if an untracked file is in the way
    """
    with open_repo_closing(repo) as r:
        try:
            target = r.branch_commit(name)
        except NoSuchBranch:
            raise NoSuchCheckoutBranch() from None
        if name == r.current_branch():
            raise AlreadyOnBranch()
        _switch_to(r, target)
        r.set_current_branch(name)


def reset(repo: RepoPath, commit: str) -> None:
    """Move the active branch to a commit and check that commit out.

    Args:
      repo: Path to repository
      commit: Commit id or abbreviation
    Raises:
      NoSuchCommit: if ``commit`` does not resolve
      UntrackedFileConflict: if an untracked file is in the way
    """
    with open_repo_closing(repo) as r:
        target = r.lookup_commit(commit)
        _switch_to(r, target)
        r.update_active_branch(target.id)


def branch_create(repo: RepoPath, name: str) -> None:
    """Create a branch at the active commit."""
    with open_repo_closing(repo) as r:
        r.create_branch(name)


def branch_delete(repo: RepoPath, name: str) -> None:
    """Delete a branch; the commits on it are kept."""
    with open_repo_closing(repo) as r:
        r.delete_branch(name)


def branch_list(repo: RepoPath) -> list[Branch]:
    """List all branches, sorted by name."""
    with open_repo_closing(repo) as r:
        return r.branches()


def _resolve_commit(r: BaseRepo, name: str) -> ObjectID:
    if r.has_branch(name):
        return r.branch_commit(name).id
    return r.lookup_commit(name).id


def merge_base(repo: RepoPath, a: str, b: str) -> Optional[ObjectID]:
    """Find the merge base of two branches or commits.

    Branch names take precedence over commit abbreviations.

    Returns: the merge base chosen by the configured algorithm, or None
    Raises:
      NoSuchCommit: if either argument does not resolve
    """
    with open_repo_closing(repo) as r:
        return r.merge_base(_resolve_commit(r, a), _resolve_commit(r, b))


def merge(repo: RepoPath, branch: str) -> MergeResult:
    """Merge a branch into the active branch.

    Everything is validated before the working tree is touched. When the
    active commit is the merge base, the active branch is fast-forwarded
    by checking out ``branch``. Otherwise a merge commit is created, with
    conflict markers in every file both sides changed differently.

    Args:
      repo: Repository to merge in
      branch: Name of the branch to merge
    Returns: A `MergeResult`
    Raises:
      UntrackedFileConflict: if an untracked file is in the way
      UncommittedChangesBlockMerge: if the staging index is not empty
      NoSuchBranch: if there is no such branch
      CannotMergeSelf: if ``branch`` is the active branch
      BranchIsAncestor: if ``branch`` is already merged
    """
    with open_repo_closing(repo) as r:
        wt = r.get_worktree()
        wt.check_no_untracked()
        if not r.index.is_empty():
            raise UncommittedChangesBlockMerge()
        theirs = r.branch_commit(branch)
        current = r.current_branch()
        if branch == current:
            raise CannotMergeSelf()
        ours = r.current_commit()
        if r.is_ancestor(theirs.id, ours.id):
            raise BranchIsAncestor()

        base_id = r.merge_base(ours.id, theirs.id)
        if base_id == ours.id:
            wt.sync_to(theirs)
            r.set_current_branch(branch)
            logger.debug("Fast-forwarded %s to %s", current, theirs.id)
            return MergeResult(theirs.id, True, [])

        base = r[base_id] if base_id is not None else None
        merger = Merger(r.object_store)
        conflicts = []
        for change in merger.merge_commits(base, ours, theirs):
            if change.action == DELETE:
                wt.remove(change.path)
                continue
            contents = merger.contents(change)
            assert contents is not None
            wt.write_file(change.path, contents)
            wt.stage(change.path)
            if change.action == CONFLICT:
                conflicts.append(change.path)
        commit_id = r.do_commit(
            f"Merged {branch} into {current}.", merge_parent=theirs.id
        )
        return MergeResult(commit_id, False, conflicts)
