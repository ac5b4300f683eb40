#!/usr/bin/python3 -u
#
# gitlet - Simple command-line interface to Gitlet
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

"""Simple command-line interface to Gitlet.

Every command works on the repository in the current directory. User
errors are reported on stdout and still exit with status 0.
"""

__all__ = [
    "Command",
    "RepoCommand",
    "commands",
    "main",
    "signal_int",
    "signal_quit",
]

import argparse
import logging
import os
import signal
import sys
import types
from collections.abc import Sequence
from typing import NoReturn, Optional

from gitlet import porcelain
from gitlet.errors import (
    GitletError,
    NoCommandGiven,
    NoSuchCommand,
    UsageError,
)
from gitlet.log_utils import default_logging_config
from gitlet.repo import Repo

logger = logging.getLogger(__name__)


def signal_int(signal: int, frame: Optional[types.FrameType]) -> None:
    """Handle interrupt signal by exiting.

    Args:
        signal: Signal number
        frame: Current stack frame
    """
    sys.exit(1)


def signal_quit(signal: int, frame: Optional[types.FrameType]) -> None:
    """Handle quit signal by entering debugger.

    Args:
        signal: Signal number
        frame: Current stack frame
    """
    import pdb

    pdb.set_trace()


class OperandParser(argparse.ArgumentParser):
    """Argument parser that reports any mistake as a usage error."""

    def __init__(self, prog: str) -> None:
        super().__init__(prog=prog, add_help=False)

    def error(self, message: str) -> NoReturn:
        logger.debug("%s: %s", self.prog, message)
        raise UsageError()


class Command:
    """A Gitlet subcommand."""

    def run(self, args: Sequence[str]) -> Optional[int]:
        """Run the command."""
        raise NotImplementedError(self.run)


class RepoCommand(Command):
    """A subcommand that works on the repository in the current directory.

    The repository is opened before the operands are checked.
    """

    name = ""

    def setup_parser(self, parser: argparse.ArgumentParser) -> None:
        """Declare the operands of the command."""

    def run(self, args: Sequence[str]) -> Optional[int]:
        with Repo(os.getcwd()) as repo:
            parser = OperandParser(self.name)
            self.setup_parser(parser)
            parsed_args = parser.parse_args(args)
            return self.run_in_repo(repo, parsed_args)

    def run_in_repo(self, repo: Repo, args: argparse.Namespace) -> Optional[int]:
        raise NotImplementedError(self.run_in_repo)


class cmd_init(Command):
    """Create an empty Gitlet repository in the current directory."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the init command.

        Args:
            args: Command line arguments
        """
        parser = OperandParser("init")
        parser.parse_args(args)
        porcelain.init(os.getcwd()).close()


class cmd_add(RepoCommand):
    """Stage a file for the next commit."""

    name = "add"

    def setup_parser(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("path")

    def run_in_repo(self, repo: Repo, args: argparse.Namespace) -> None:
        porcelain.add(repo, args.path)


class cmd_commit(RepoCommand):
    """Record the staged changes in a new commit."""

    name = "commit"

    def setup_parser(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("message")

    def run_in_repo(self, repo: Repo, args: argparse.Namespace) -> None:
        porcelain.commit(repo, args.message)


class cmd_rm(RepoCommand):
    """Stop tracking a file."""

    name = "rm"

    def setup_parser(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("path")

    def run_in_repo(self, repo: Repo, args: argparse.Namespace) -> None:
        porcelain.remove(repo, args.path)


class cmd_log(RepoCommand):
    """Show the history of the active branch."""

    name = "log"

    def run_in_repo(self, repo: Repo, args: argparse.Namespace) -> None:
        porcelain.log(repo, outstream=sys.stdout)


class cmd_global_log(RepoCommand):
    """Show every commit ever made."""

    name = "global-log"

    def run_in_repo(self, repo: Repo, args: argparse.Namespace) -> None:
        porcelain.global_log(repo, outstream=sys.stdout)


class cmd_find(RepoCommand):
    """Print the ids of the commits with a given message."""

    name = "find"

    def setup_parser(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("message")

    def run_in_repo(self, repo: Repo, args: argparse.Namespace) -> None:
        for sha in porcelain.find(repo, args.message):
            sys.stdout.write(sha + "\n")


def write_section(title: str, lines: Sequence[str]) -> None:
    sys.stdout.write(f"=== {title} ===\n")
    for line in lines:
        sys.stdout.write(line + "\n")
    sys.stdout.write("\n")


class cmd_status(RepoCommand):
    """Show branches, staged files and working tree changes."""

    name = "status"

    def run_in_repo(self, repo: Repo, args: argparse.Namespace) -> None:
        status = porcelain.status(repo)
        write_section(
            "Branches",
            [("*" if b.is_head else "") + b.name for b in status.branches],
        )
        write_section("Staged Files", status.staged)
        write_section("Removed Files", status.removed)
        write_section(
            "Modifications Not Staged For Commit",
            [f"{path} ({kind})" for path, kind in status.unstaged],
        )
        write_section("Untracked Files", status.untracked)


class cmd_checkout(Command):
    """Restore a file, or switch branches.

    Accepted forms: ``-- <file>``, ``<commit> -- <file>`` and ``<branch>``.
    The separator can not go through argparse, which swallows it.
    """

    def run(self, args: Sequence[str]) -> None:
        with Repo(os.getcwd()) as repo:
            args = list(args)
            if len(args) == 2 and args[0] == "--":
                porcelain.checkout_file(repo, args[1])
            elif len(args) == 3 and args[1] == "--":
                porcelain.checkout_file(repo, args[2], commit=args[0])
            elif len(args) == 1:
                porcelain.checkout_branch(repo, args[0])
            else:
                raise UsageError()


class cmd_branch(RepoCommand):
    """Create a branch at the active commit."""

    name = "branch"

    def setup_parser(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("name")

    def run_in_repo(self, repo: Repo, args: argparse.Namespace) -> None:
        porcelain.branch_create(repo, args.name)


class cmd_rm_branch(RepoCommand):
    """Delete a branch."""

    name = "rm-branch"

    def setup_parser(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("name")

    def run_in_repo(self, repo: Repo, args: argparse.Namespace) -> None:
        porcelain.branch_delete(repo, args.name)


class cmd_reset(RepoCommand):
    """Check out a commit and move the active branch to it."""

    name = "reset"

    def setup_parser(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("commit")

    def run_in_repo(self, repo: Repo, args: argparse.Namespace) -> None:
        porcelain.reset(repo, args.commit)


class cmd_merge(RepoCommand):
    """Merge a branch into the active branch."""

    name = "merge"

    def setup_parser(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("branch")

    def run_in_repo(self, repo: Repo, args: argparse.Namespace) -> None:
        result = porcelain.merge(repo, args.branch)
        if result.fast_forward:
            sys.stdout.write("Current branch fast-forwarded.\n")
        elif result.conflicts:
            sys.stdout.write("Encountered a merge conflict.\n")


class cmd_merge_base(RepoCommand):
    """Print the merge base of two branches or commits."""

    name = "merge-base"

    def setup_parser(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("first")
        parser.add_argument("second")

    def run_in_repo(self, repo: Repo, args: argparse.Namespace) -> None:
        base = porcelain.merge_base(repo, args.first, args.second)
        if base is not None:
            sys.stdout.write(base + "\n")


commands = {
    "add": cmd_add,
    "branch": cmd_branch,
    "checkout": cmd_checkout,
    "commit": cmd_commit,
    "find": cmd_find,
    "global-log": cmd_global_log,
    "init": cmd_init,
    "log": cmd_log,
    "merge": cmd_merge,
    "merge-base": cmd_merge_base,
    "reset": cmd_reset,
    "rm": cmd_rm,
    "rm-branch": cmd_rm_branch,
    "status": cmd_status,
}


def main(argv: Optional[Sequence[str]] = None) -> Optional[int]:
    """Main entry point for the Gitlet CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code or None
    """
    if argv is None:
        argv = sys.argv[1:]

    try:
        if not argv:
            raise NoCommandGiven()
        try:
            cmd_kls = commands[argv[0]]
        except KeyError:
            raise NoSuchCommand() from None
        return cmd_kls().run(argv[1:])
    except GitletError as exc:
        sys.stdout.write(str(exc) + "\n")
        return 0


def _main() -> None:
    if "GITLET_PDB" in os.environ and getattr(signal, "SIGQUIT", None):
        signal.signal(signal.SIGQUIT, signal_quit)  # type: ignore[attr-defined,unused-ignore]
    signal.signal(signal.SIGINT, signal_int)

    default_logging_config()
    sys.exit(main())


if __name__ == "__main__":
    _main()
