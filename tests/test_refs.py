# test_refs.py -- tests for refs.py
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

"""Tests for gitlet.refs."""

import os

from gitlet.refs import (
    HEADREF,
    Branch,
    DictRefsContainer,
    DiskRefsContainer,
    SymrefLoop,
    check_branch_name,
    local_branch_name,
    parse_symref_value,
)

from . import TestCase

ONE = "1" * 40
TWO = "2" * 40


class CheckBranchNameTests(TestCase):
    def test_valid(self) -> None:
        for name in ["main", "feature-1", "v1.0", "fix_bug", "x@y"]:
            self.assertTrue(check_branch_name(name), name)

    def test_invalid(self) -> None:
        for name in [
            "",
            ".hidden",
            "-flag",
            "a..b",
            "with space",
            "nested/name",
            "back\\slash",
            "tab\tname",
            "a:b",
            "a?b",
            "a*b",
            "a[b",
            "a~b",
            "a^b",
            "trailing.",
            "branch.lock",
            "a@{b",
            "HEAD",
        ]:
            self.assertFalse(check_branch_name(name), name)


class RefHelperTests(TestCase):
    def test_local_branch_name(self) -> None:
        self.assertEqual("refs/heads/main", local_branch_name("main"))
        self.assertEqual("refs/heads/main", local_branch_name("refs/heads/main"))

    def test_parse_symref_value(self) -> None:
        self.assertEqual("refs/heads/main", parse_symref_value("ref: refs/heads/main\n"))
        self.assertRaises(ValueError, parse_symref_value, ONE)


class RefsContainerTests:
    """Tests shared by the refs containers."""

    refs: "DictRefsContainer | DiskRefsContainer"

    def setup_branches(self) -> None:
        self.refs["refs/heads/main"] = ONE
        self.refs["refs/heads/other"] = TWO
        self.refs.set_symbolic_ref(HEADREF, "refs/heads/main")

    def test_empty(self) -> None:
        self.assertEqual(set(), self.refs.allkeys())
        self.assertNotIn("refs/heads/main", self.refs)
        self.assertRaises(KeyError, self.refs.__getitem__, "refs/heads/main")

    def test_setitem(self) -> None:
        self.refs["refs/heads/main"] = ONE
        self.assertEqual(ONE, self.refs["refs/heads/main"])
        self.assertIn("refs/heads/main", self.refs)

    def test_setitem_invalid(self) -> None:
        self.assertRaises(ValueError, self.refs.__setitem__, "refs/heads/main", "abc")

    def test_head_follows_branch(self) -> None:
        self.setup_branches()
        self.assertEqual(ONE, self.refs[HEADREF])
        self.assertEqual("main", self.refs.head_branch())

    def test_setting_head_moves_branch(self) -> None:
        self.setup_branches()
        self.refs[HEADREF] = TWO
        self.assertEqual(TWO, self.refs["refs/heads/main"])
        self.assertEqual("main", self.refs.head_branch())

    def test_set_head_branch(self) -> None:
        self.setup_branches()
        self.refs.set_head_branch("other")
        self.assertEqual("other", self.refs.head_branch())
        self.assertEqual(TWO, self.refs[HEADREF])

    def test_set_head_branch_missing(self) -> None:
        self.setup_branches()
        self.assertRaises(KeyError, self.refs.set_head_branch, "missing")
        self.assertEqual("main", self.refs.head_branch())

    def test_follow(self) -> None:
        self.setup_branches()
        self.assertEqual(
            (["HEAD", "refs/heads/main"], ONE), self.refs.follow(HEADREF)
        )

    def test_symref_loop(self) -> None:
        self.refs.set_symbolic_ref("refs/heads/a", "refs/heads/b")
        self.refs.set_symbolic_ref("refs/heads/b", "refs/heads/a")
        self.assertRaises(SymrefLoop, self.refs.__getitem__, "refs/heads/a")

    def test_delitem(self) -> None:
        self.setup_branches()
        del self.refs["refs/heads/other"]
        self.assertNotIn("refs/heads/other", self.refs)
        self.assertRaises(KeyError, self.refs.__delitem__, "refs/heads/other")

    def test_add_if_new(self) -> None:
        self.assertTrue(self.refs.add_if_new("refs/heads/main", ONE))
        self.assertFalse(self.refs.add_if_new("refs/heads/main", TWO))
        self.assertEqual(ONE, self.refs["refs/heads/main"])

    def test_branches(self) -> None:
        self.setup_branches()
        self.assertEqual(["main", "other"], self.refs.branch_names())
        self.assertEqual(
            [Branch("main", ONE, True), Branch("other", TWO, False)],
            self.refs.branches(),
        )
        self.refs.set_head_branch("other")
        self.assertEqual(
            ["other"], [b.name for b in self.refs.branches() if b.is_head]
        )

    def test_iter_excludes_head(self) -> None:
        self.setup_branches()
        self.assertEqual(
            {"refs/heads/main", "refs/heads/other"}, set(self.refs)
        )


class DictRefsContainerTests(RefsContainerTests, TestCase):
    def setUp(self) -> None:
        TestCase.setUp(self)
        self.refs = DictRefsContainer()


class DiskRefsContainerTests(RefsContainerTests, TestCase):
    def setUp(self) -> None:
        TestCase.setUp(self)
        self.refs = DiskRefsContainer(self.make_tempdir())

    def test_file_layout(self) -> None:
        self.setup_branches()
        with open(os.path.join(self.refs.path, "HEAD"), "rb") as f:
            self.assertEqual(b"ref: refs/heads/main\n", f.read())
        with open(
            os.path.join(self.refs.path, "refs", "heads", "main"), "rb"
        ) as f:
            self.assertEqual(ONE.encode("ascii") + b"\n", f.read())

    def test_ignores_lock_files(self) -> None:
        self.setup_branches()
        with open(
            os.path.join(self.refs.path, "refs", "heads", "main.lock"), "wb"
        ) as f:
            f.write(TWO.encode("ascii"))
        self.assertEqual(["main", "other"], self.refs.branch_names())

    def test_refpath(self) -> None:
        self.assertEqual(
            os.path.join(self.refs.path, "refs", "heads", "main"),
            self.refs.refpath("refs/heads/main"),
        )
