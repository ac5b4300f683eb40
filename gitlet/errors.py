# errors.py -- errors for gitlet
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

"""Gitlet-related exception classes.

Every user-facing failure is a subclass of :class:`GitletError` whose
``str()`` is the exact message shown to the user.
"""

__all__ = [
    "AlreadyInitialized",
    "AlreadyOnBranch",
    "BranchAlreadyExists",
    "BranchIsAncestor",
    "CannotMergeSelf",
    "CannotRemoveActiveBranch",
    "EmptyCommitMessage",
    "FileFormatException",
    "FileNotInCommit",
    "GitletError",
    "InvalidBranchName",
    "NoCommandGiven",
    "NoCommitWithMessage",
    "NoSuchBranch",
    "NoSuchCheckoutBranch",
    "NoSuchCommand",
    "NoSuchCommit",
    "NoSuchFile",
    "NotGitletRepository",
    "NothingStagedToCommit",
    "NothingToRemove",
    "ObjectFormatException",
    "UncommittedChangesBlockMerge",
    "UntrackedFileConflict",
    "UsageError",
]

from typing import Optional


class GitletError(Exception):
    """Base class for errors reported to the user.

    Subclasses set ``message`` to their fixed user-facing text; an explicit
    message passed to the constructor overrides it.
    """

    message = "An error occurred."

    def __init__(self, msg: Optional[str] = None) -> None:
        """Initialize GitletError.

        Args:
            msg: Message to report instead of the class default
        """
        super().__init__(msg if msg is not None else self.message)


class UsageError(GitletError):
    """Wrong number or shape of command operands."""

    message = "Incorrect operands."


class NoCommandGiven(UsageError):
    """No subcommand was given."""

    message = "Please enter a command."


class NoSuchCommand(UsageError):
    """The subcommand is not known."""

    message = "No command with that name exists."


class NotGitletRepository(GitletError):
    """Indicates that no Gitlet repository was found."""

    message = "Not in an initialized Gitlet directory."


class AlreadyInitialized(GitletError):
    """A repository already exists where one should be created."""

    message = (
        "A Gitlet version-control system already exists in the current directory."
    )


class NoSuchFile(GitletError):
    """The named working file does not exist."""

    message = "File does not exist."


class FileNotInCommit(GitletError):
    """The named path is not tracked by the requested commit."""

    message = "File does not exist in that commit."


class NoSuchCommit(GitletError):
    """No single stored commit matches the given id or prefix."""

    message = "No commit with that id exists."


class NoCommitWithMessage(GitletError):
    """No commit has the requested message."""

    message = "Found no commit with that message."


class NoSuchBranch(GitletError):
    """The named branch does not exist."""

    message = "A branch with that name does not exist."


class NoSuchCheckoutBranch(NoSuchBranch):
    """The branch named for checkout does not exist."""

    message = "No such branch exists."


class BranchAlreadyExists(GitletError):
    """A branch with the requested name already exists."""

    message = "A branch with that name already exists."


class InvalidBranchName(GitletError):
    """The requested branch name can not be stored as a reference."""

    message = "Invalid branch name."


class CannotRemoveActiveBranch(GitletError):
    """The active branch can not be deleted."""

    message = "Cannot remove the current branch."


class AlreadyOnBranch(GitletError):
    """Checkout of the branch that is already active."""

    message = "No need to checkout the current branch."


class NothingToRemove(GitletError):
    """The path is neither staged for addition nor tracked."""

    message = "No reason to remove the file."


class EmptyCommitMessage(GitletError):
    """Commit was requested with an empty message."""

    message = "Please enter a commit message."


class NothingStagedToCommit(GitletError):
    """Commit was requested with an empty staging index."""

    message = "No changes added to the commit."


class UntrackedFileConflict(GitletError):
    """An untracked working file would be overwritten or lost."""

    message = (
        "There is an untracked file in the way; delete it, or add and commit it first."
    )


class UncommittedChangesBlockMerge(GitletError):
    """Merge was requested while the staging index is not empty."""

    message = "You have uncommitted changes."


class BranchIsAncestor(GitletError):
    """The branch to merge is already contained in the active branch."""

    message = "Given branch is an ancestor of the current branch."


class CannotMergeSelf(GitletError):
    """Merge of the active branch into itself."""

    message = "Cannot merge a branch with itself."


class FileFormatException(Exception):
    """Base class for exceptions relating to reading gitlet file formats."""


class ObjectFormatException(FileFormatException):
    """Indicates an error parsing an object."""
