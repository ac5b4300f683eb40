# merge.py -- Three-way merge of commit snapshots
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

"""Three-way merge of commit snapshots.

Paths are compared by blob id across the merge base, our side and their
side. A path missing from a snapshot compares as "no blob", which is
distinct from every real blob id. Conflicts are resolved at file
granularity: both versions are written into one file between conflict
markers.
"""

__all__ = [
    "ADD",
    "CONFLICT",
    "DELETE",
    "TAKE_THEIRS",
    "MergeChange",
    "Merger",
    "classify_paths",
    "conflict_contents",
]

import logging
from collections.abc import Mapping
from typing import NamedTuple, Optional

from .object_store import BaseObjectStore
from .objects import Commit, ObjectID

logger = logging.getLogger(__name__)

TAKE_THEIRS = "take-theirs"
DELETE = "delete"
CONFLICT = "conflict"
ADD = "add"

CONFLICT_START = b"<<<<<<< HEAD\n"
CONFLICT_SEPARATOR = b"=======\n"
CONFLICT_END = b">>>>>>>\n"


class MergeChange(NamedTuple):
    """A change to apply to our side to produce the merge result.

    ``ours`` and ``theirs`` are blob ids, or None where the side lacks the
    path.
    """

    path: str
    action: str
    ours: Optional[ObjectID]
    theirs: Optional[ObjectID]


def classify_paths(
    base_tree: Mapping[str, ObjectID],
    ours_tree: Mapping[str, ObjectID],
    theirs_tree: Mapping[str, ObjectID],
) -> list[MergeChange]:
    """Decide what happens to each path in a three-way merge.

    Paths where our version stands (only we changed it, both sides made the
    same change, or it exists only on our side) produce no change.

    Args:
      base_tree: Tree of the merge base
      ours_tree: Tree of the commit being merged into
      theirs_tree: Tree of the commit being merged
    Returns: the changes, sorted by path
    """
    changes = []
    for path in sorted(base_tree):
        base = base_tree[path]
        ours = ours_tree.get(path)
        theirs = theirs_tree.get(path)
        if base == ours:
            if base != theirs:
                action = DELETE if theirs is None else TAKE_THEIRS
                changes.append(MergeChange(path, action, ours, theirs))
        elif base != theirs and ours != theirs:
            changes.append(MergeChange(path, CONFLICT, ours, theirs))
    for path in sorted(theirs_tree):
        if path not in base_tree and path not in ours_tree:
            changes.append(MergeChange(path, ADD, None, theirs_tree[path]))
    changes.sort(key=lambda change: change.path)
    return changes


def conflict_contents(ours: Optional[bytes], theirs: Optional[bytes]) -> bytes:
    """Build the contents of a conflicted file.

    A side without the file contributes nothing between its markers.
    """
    return b"".join(
        [CONFLICT_START, ours or b"", CONFLICT_SEPARATOR, theirs or b"", CONFLICT_END]
    )


class Merger:
    """Handles three-way merges of commit snapshots."""

    def __init__(self, object_store: BaseObjectStore) -> None:
        """Initialize merger.

        Args:
            object_store: Object store to read blobs from
        """
        self.object_store = object_store

    def merge_commits(
        self, base: Optional[Commit], ours: Commit, theirs: Commit
    ) -> list[MergeChange]:
        """Classify the paths of two commits against their merge base.

        A missing merge base compares as an empty snapshot.
        """
        base_tree = base.tree if base is not None else {}
        changes = classify_paths(base_tree, ours.tree, theirs.tree)
        for change in changes:
            logger.debug("Merge %s: %s", change.path, change.action)
        return changes

    def contents(self, change: MergeChange) -> Optional[bytes]:
        """The bytes to write for ``change``, or None for a deletion."""
        if change.action == DELETE:
            return None
        theirs = self._read(change.theirs)
        if change.action == CONFLICT:
            return conflict_contents(self._read(change.ours), theirs)
        return theirs

    def _read(self, blob_id: Optional[ObjectID]) -> Optional[bytes]:
        if blob_id is None:
            return None
        return self.object_store.get_blob_data(blob_id)
