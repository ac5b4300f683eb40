# test_worktree.py -- Tests for working tree operations
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


"""Tests for gitlet.worktree."""

import os

from gitlet.errors import (
    EmptyCommitMessage,
    FileNotInCommit,
    NoSuchFile,
    NothingStagedToCommit,
    NothingToRemove,
    UntrackedFileConflict,
)
from gitlet.objects import Blob
from gitlet.repo import Repo
from gitlet.worktree import path_to_tree_path

from . import TestCase


class PathToTreePathTests(TestCase):
    def test_simple(self) -> None:
        self.assertEqual("a.txt", path_to_tree_path("a.txt"))
        self.assertEqual("dir/a.txt", path_to_tree_path(os.path.join("dir", "a.txt")))

    def test_dot_components(self) -> None:
        self.assertEqual("dir/a.txt", path_to_tree_path("./dir/./a.txt"))

    def test_rejected(self) -> None:
        for path in ["", ".", "/etc/passwd", "../a.txt", "dir/../../a.txt"]:
            self.assertRaises(NoSuchFile, path_to_tree_path, path)


class WorkTreeTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.repo = Repo.init(self.make_tempdir())
        self.addCleanup(self.repo.close)
        self.wt = self.repo.get_worktree()

    def write(self, path, contents) -> None:
        self.wt.write_file(path, contents)

    def commit_file(self, path, contents, message="commit") -> str:
        self.write(path, contents)
        self.wt.stage(path)
        return self.wt.commit(message, commit_timestamp=1000, commit_timezone=0)

    def test_list_files(self) -> None:
        self.write("b.txt", b"b")
        self.write("dir/a.txt", b"a")
        self.assertEqual(["b.txt", "dir/a.txt"], self.wt.list_files())

    def test_read_missing(self) -> None:
        self.assertRaises(NoSuchFile, self.wt.read_file, "missing")

    def test_delete_prunes_directories(self) -> None:
        self.write("dir/sub/a.txt", b"a")
        self.wt.delete_file("dir/sub/a.txt")
        self.assertFalse(os.path.exists(self.wt.abspath("dir")))
        # deleting a missing file is not an error
        self.wt.delete_file("dir/sub/a.txt")

    def test_stage(self) -> None:
        self.write("a.txt", b"hello")
        self.wt.stage("a.txt")
        self.assertEqual({"a.txt": b"hello"}, self.repo.index.additions())

    def test_stage_missing(self) -> None:
        self.assertRaises(NoSuchFile, self.wt.stage, "missing")

    def test_stage_unchanged_is_noop(self) -> None:
        self.commit_file("a.txt", b"hello")
        self.wt.stage("a.txt")
        self.assertTrue(self.repo.index.is_empty())

    def test_stage_reverted_drops_staged_copy(self) -> None:
        self.commit_file("a.txt", b"hello")
        self.write("a.txt", b"changed")
        self.wt.stage("a.txt")
        self.write("a.txt", b"hello")
        self.wt.stage("a.txt")
        self.assertTrue(self.repo.index.is_empty())

    def test_stage_cancels_removal(self) -> None:
        self.commit_file("a.txt", b"hello")
        self.wt.remove("a.txt")
        self.write("a.txt", b"hello")
        self.wt.stage("a.txt")
        self.assertTrue(self.repo.index.is_empty())

    def test_remove_staged_only(self) -> None:
        self.write("a.txt", b"new")
        self.wt.stage("a.txt")
        self.wt.remove("a.txt")
        self.assertFalse(self.repo.index.is_staged_for_addition("a.txt"))
        # an untracked file is left alone
        self.assertTrue(self.wt.exists("a.txt"))

    def test_remove_tracked(self) -> None:
        self.commit_file("a.txt", b"hello")
        self.wt.remove("a.txt")
        self.assertEqual({"a.txt"}, self.repo.index.removals())
        self.assertFalse(self.wt.exists("a.txt"))

    def test_remove_untracked(self) -> None:
        self.write("a.txt", b"new")
        self.assertRaises(NothingToRemove, self.wt.remove, "a.txt")

    def test_commit(self) -> None:
        parent = self.repo.head()
        sha = self.commit_file("a.txt", b"hello", "add a")
        commit = self.repo[sha]
        self.assertEqual([parent], commit.parents)
        self.assertEqual({"a.txt": Blob(b"hello").id}, commit.tree)
        self.assertEqual("add a", commit.message)
        self.assertEqual(1000, commit.commit_time)
        self.assertEqual(sha, self.repo.head())
        self.assertTrue(self.repo.index.is_empty())
        self.assertEqual(b"hello", self.repo.object_store.get_blob_data(Blob(b"hello").id))

    def test_commit_inherits_and_removes(self) -> None:
        self.commit_file("a.txt", b"a")
        self.commit_file("b.txt", b"b")
        self.wt.remove("a.txt")
        sha = self.wt.commit("drop a", commit_timestamp=1001, commit_timezone=0)
        self.assertEqual({"b.txt": Blob(b"b").id}, self.repo[sha].tree)

    def test_commit_merge_parent(self) -> None:
        other = self.commit_file("a.txt", b"a")
        self.write("b.txt", b"b")
        self.wt.stage("b.txt")
        sha = self.wt.commit("merge", merge_parent=other)
        self.assertEqual([other, other], self.repo[sha].parents)

    def test_commit_empty_message(self) -> None:
        self.write("a.txt", b"a")
        self.wt.stage("a.txt")
        self.assertRaises(EmptyCommitMessage, self.wt.commit, "")

    def test_commit_nothing_staged(self) -> None:
        self.assertRaises(NothingStagedToCommit, self.wt.commit, "message")

    def test_checkout_path(self) -> None:
        sha = self.commit_file("a.txt", b"one")
        self.commit_file("a.txt", b"two")
        self.wt.checkout_path("a.txt", self.repo[sha])
        self.assertEqual(b"one", self.wt.read_file("a.txt"))
        # the staging index is untouched
        self.assertTrue(self.repo.index.is_empty())

    def test_checkout_path_missing(self) -> None:
        self.assertRaises(
            FileNotInCommit,
            self.wt.checkout_path,
            "a.txt",
            self.repo.current_commit(),
        )

    def test_untracked_files(self) -> None:
        self.commit_file("tracked", b"t")
        self.write("staged", b"s")
        self.wt.stage("staged")
        self.write("untracked", b"u")
        self.assertEqual(["untracked"], self.wt.untracked_files())
        self.assertRaises(UntrackedFileConflict, self.wt.check_no_untracked)

    def test_sync_to(self) -> None:
        initial = self.repo.current_commit()
        self.commit_file("a.txt", b"a")
        self.write("staged", b"s")
        self.wt.stage("staged")
        self.wt.sync_to(initial)
        self.assertEqual([], self.wt.list_files())
        self.assertTrue(self.repo.index.is_empty())

    def test_sync_to_writes_target(self) -> None:
        sha = self.commit_file("dir/a.txt", b"a")
        self.commit_file("b.txt", b"b")
        self.wt.sync_to(self.repo[sha])
        self.assertEqual(["dir/a.txt"], self.wt.list_files())
        self.assertEqual(b"a", self.wt.read_file("dir/a.txt"))

    def test_unstaged_changes(self) -> None:
        self.commit_file("modified", b"m")
        self.commit_file("deleted", b"d")
        self.commit_file("clean", b"c")
        self.write("staged-then-changed", b"1")
        self.wt.stage("staged-then-changed")
        self.write("staged-then-changed", b"2")
        self.write("staged-then-deleted", b"1")
        self.wt.stage("staged-then-deleted")
        self.wt.delete_file("staged-then-deleted")
        self.write("modified", b"changed")
        self.wt.delete_file("deleted")
        self.assertEqual(
            [
                ("deleted", "deleted"),
                ("modified", "modified"),
                ("staged-then-changed", "modified"),
                ("staged-then-deleted", "deleted"),
            ],
            self.wt.unstaged_changes(),
        )

    def test_removed_is_not_unstaged(self) -> None:
        self.commit_file("a.txt", b"a")
        self.wt.remove("a.txt")
        self.assertEqual([], self.wt.unstaged_changes())

    def test_lock_suffix_round_trip(self) -> None:
        self.write("x.lock", b"pid")
        self.wt.stage("x.lock")
        self.assertEqual([], self.wt.untracked_files())
        sha = self.wt.commit("add lock", commit_timestamp=1000, commit_timezone=0)
        self.assertEqual({"x.lock": Blob(b"pid").id}, self.repo[sha].tree)
        self.wt.remove("x.lock")
        self.assertEqual({"x.lock"}, self.repo.index.removals())
        self.assertFalse(self.wt.exists("x.lock"))
        sha = self.wt.commit("drop lock", commit_timestamp=1001, commit_timezone=0)
        self.assertEqual({}, self.repo[sha].tree)

    def test_staged_file_replaced_by_directory(self) -> None:
        self.write("a", b"file")
        self.wt.stage("a")
        self.wt.delete_file("a")
        self.write("a/b", b"nested")
        self.wt.stage("a/b")
        self.assertEqual({"a/b": b"nested"}, self.repo.index.additions())
        sha = self.wt.commit("nest", commit_timestamp=1000, commit_timezone=0)
        self.assertEqual({"a/b": Blob(b"nested").id}, self.repo[sha].tree)

    def test_tracked_file_replaced_by_directory(self) -> None:
        self.commit_file("a", b"file")
        self.wt.delete_file("a")
        self.write("a/b", b"nested")
        self.wt.stage("a/b")
        sha = self.wt.commit("nest", commit_timestamp=1001, commit_timezone=0)
        self.assertEqual({"a/b": Blob(b"nested").id}, self.repo[sha].tree)
        self.assertEqual([], self.wt.untracked_files())
        self.assertEqual([], self.wt.unstaged_changes())

    def test_tracked_directory_replaced_by_file(self) -> None:
        self.commit_file("a/b", b"nested")
        self.commit_file("a/c", b"sibling")
        self.wt.delete_file("a/b")
        self.wt.delete_file("a/c")
        self.write("a", b"file")
        self.wt.stage("a")
        sha = self.wt.commit("flatten", commit_timestamp=1002, commit_timezone=0)
        self.assertEqual({"a": Blob(b"file").id}, self.repo[sha].tree)
        self.assertEqual([], self.wt.unstaged_changes())

    def test_staged_directory_replaced_by_file(self) -> None:
        self.write("a/b", b"nested")
        self.wt.stage("a/b")
        self.wt.delete_file("a/b")
        self.write("a", b"file")
        self.wt.stage("a")
        self.assertEqual({"a": b"file"}, self.repo.index.additions())
        sha = self.wt.commit("flatten", commit_timestamp=1000, commit_timezone=0)
        self.assertEqual({"a": Blob(b"file").id}, self.repo[sha].tree)
