# graph.py -- Graph functionality
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

"""Merge-base discovery over the commit graph.

Two algorithms are available. ``breadth-first`` walks outwards from the
first commit, first parent before merge parent, and returns the first commit
that is an ancestor of (or equal to) the second one; a root commit reached
before any match is returned as is. On histories with criss-cross merges it
may pick a common ancestor that is not the lowest one. ``lowest`` computes
the true lowest common ancestors and picks the one with the newest commit
time.
"""

__all__ = [
    "BREADTH_FIRST",
    "LOWEST",
    "MERGE_BASE_ALGORITHMS",
    "WorkList",
    "ancestors",
    "find_merge_base",
    "find_split_point",
    "is_ancestor",
]

import logging
from collections import deque
from collections.abc import Callable, Iterator, Sequence
from heapq import heappop, heappush
from typing import TYPE_CHECKING, Generic, Optional, TypeVar

from .objects import Commit, ObjectID

if TYPE_CHECKING:
    from .object_store import BaseObjectStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

BREADTH_FIRST = "breadth-first"
LOWEST = "lowest"
MERGE_BASE_ALGORITHMS = (BREADTH_FIRST, LOWEST)

ParentsLookup = Callable[[ObjectID], Sequence[ObjectID]]


# priority queue using builtin python minheap tools; commit times are
# negated so that the newest commit comes out first
class WorkList(Generic[T]):
    """Priority queue for commit processing using a min-heap."""

    def __init__(self) -> None:
        """Initialize an empty work list."""
        self.pq: list[tuple[int, T]] = []

    def add(self, item: tuple[int, T]) -> None:
        """Add an item to the work list.

        Args:
            item: Tuple of (timestamp, commit)
        """
        dt, cmt = item
        heappush(self.pq, (-dt, cmt))

    def get(self) -> Optional[tuple[int, T]]:
        """Get the highest priority item from the work list.

        Returns:
            Tuple of (timestamp, commit) or None if empty
        """
        if not self.pq:
            return None
        pr, cmt = heappop(self.pq)
        return -pr, cmt

    def iter(self) -> Iterator[tuple[int, T]]:
        """Iterate over items in the work list.

        Yields:
            Tuples of (timestamp, commit)
        """
        for pr, cmt in self.pq:
            yield (-pr, cmt)


def ancestors(lookup_parents: ParentsLookup, commit_id: ObjectID) -> set[ObjectID]:
    """Collect ``commit_id`` and every commit reachable from it."""
    seen = {commit_id}
    todo = [commit_id]
    while todo:
        for parent in lookup_parents(todo.pop()):
            if parent not in seen:
                seen.add(parent)
                todo.append(parent)
    return seen


def is_ancestor(
    lookup_parents: ParentsLookup, ancestor: ObjectID, descendant: ObjectID
) -> bool:
    """Check whether ``ancestor`` equals or is reachable from ``descendant``."""
    seen = {descendant}
    todo = [descendant]
    while todo:
        cmt = todo.pop()
        if cmt == ancestor:
            return True
        for parent in lookup_parents(cmt):
            if parent not in seen:
                seen.add(parent)
                todo.append(parent)
    return False


def find_split_point(
    lookup_parents: ParentsLookup, c1: ObjectID, c2: ObjectID
) -> ObjectID:
    """Find the split point of c1 and c2 by breadth-first search from c1.

    Args:
      lookup_parents: Function returning the parents of a commit, first
        parent first
      c1: Commit to search from
      c2: Commit whose ancestors are matched against
    Returns: the first commit found that is an ancestor of c2, or the first
      root commit reached
    """
    targets = ancestors(lookup_parents, c2)
    fringe = deque([c1])
    queued = {c1}
    while fringe:
        cmt = fringe.popleft()
        if cmt in targets:
            return cmt
        parents = lookup_parents(cmt)
        if not parents:
            return cmt
        for parent in parents:
            if parent not in queued:
                queued.add(parent)
                fringe.append(parent)
    # every commit either has parents or is returned above
    raise AssertionError("unreachable")


def _find_lcas(
    lookup_parents: ParentsLookup,
    c1: ObjectID,
    c2s: Sequence[ObjectID],
    lookup_stamp: Callable[[ObjectID], int],
) -> list[ObjectID]:
    """Find lowest common ancestors between commits.

    Args:
        lookup_parents: Function to get parent commits
        c1: First commit
        c2s: List of second commits
        lookup_stamp: Function to get commit timestamp

    Returns:
        List of lowest common ancestor commit IDs, oldest first
    """
    cands = []
    cstates: dict[ObjectID, int] = {}

    # Flags to Record State
    _ANC_OF_1 = 1  # ancestor of commit 1
    _ANC_OF_2 = 2  # ancestor of commit 2
    _DNC = 4  # Do Not Consider
    _LCA = 8  # potential LCA (Lowest Common Ancestor)

    def _has_candidates(wlst: WorkList[ObjectID]) -> bool:
        for dt, cmt in wlst.iter():
            if cmt in cstates and not (cstates[cmt] & _DNC) == _DNC:
                return True
        return False

    wlst: WorkList[ObjectID] = WorkList()
    cstates[c1] = _ANC_OF_1
    wlst.add((lookup_stamp(c1), c1))
    for c2 in c2s:
        cstates[c2] = cstates.get(c2, 0) | _ANC_OF_2
        wlst.add((lookup_stamp(c2), c2))

    # loop while at least one working list commit is still viable (not marked
    # as _DNC), adding any parents to the list in a breadth first manner
    while _has_candidates(wlst):
        result = wlst.get()
        if result is None:
            break
        dt, cmt = result
        # Look only at ANCESTRY and _DNC flags so that already
        # found _LCAs can still be marked _DNC by lower _LCAS
        cflags = cstates[cmt] & (_ANC_OF_1 | _ANC_OF_2 | _DNC)
        if cflags == (_ANC_OF_1 | _ANC_OF_2):
            if not (cstates[cmt] & _LCA) == _LCA:
                cstates[cmt] = cstates[cmt] | _LCA
                cands.append((dt, cmt))
            # parents of a common ancestor are never lowest
            cflags = cflags | _DNC
        for pcmt in lookup_parents(cmt):
            pflags = cstates.get(pcmt, 0)
            # already visited with no new ancestry/flag information
            if (pflags & cflags) == cflags:
                continue
            cstates[pcmt] = pflags | cflags
            wlst.add((lookup_stamp(pcmt), pcmt))

    # drop candidates superseded by lower _LCAs, and duplicates
    results = []
    for dt, cmt in cands:
        if not ((cstates[cmt] & _DNC) == _DNC) and (dt, cmt) not in results:
            results.append((dt, cmt))
    results.sort(key=lambda x: x[0])
    return [cmt for dt, cmt in results]


def find_merge_base(
    object_store: "BaseObjectStore",
    c1: ObjectID,
    c2: ObjectID,
    algorithm: str = BREADTH_FIRST,
) -> Optional[ObjectID]:
    """Find the commit to use as the base of a three-way merge.

    Args:
      object_store: Store to read commits from
      c1: The commit being merged into (normally HEAD)
      c2: The commit being merged
      algorithm: ``breadth-first`` or ``lowest``
    Returns: the merge base, or None when the ``lowest`` algorithm finds
      no common ancestor
    Raises:
      KeyError: if a commit on the way is missing from the store
      ValueError: for an unknown algorithm
    """
    if algorithm not in MERGE_BASE_ALGORITHMS:
        raise ValueError(f"Unknown merge base algorithm {algorithm!r}")
    cmtcache: dict[ObjectID, Commit] = {}

    def lookup_commit(cmtid: ObjectID) -> Commit:
        try:
            return cmtcache[cmtid]
        except KeyError:
            pass
        obj = object_store[cmtid]
        if not isinstance(obj, Commit):
            raise KeyError(cmtid)
        cmtcache[cmtid] = obj
        return obj

    def lookup_parents(cmtid: ObjectID) -> list[ObjectID]:
        return lookup_commit(cmtid).parents

    def lookup_stamp(cmtid: ObjectID) -> int:
        return lookup_commit(cmtid).commit_time

    if c1 == c2:
        return c1
    if algorithm == BREADTH_FIRST:
        base: Optional[ObjectID] = find_split_point(lookup_parents, c1, c2)
    else:
        lcas = _find_lcas(lookup_parents, c1, [c2], lookup_stamp)
        base = lcas[-1] if lcas else None
    logger.debug("Merge base of %s and %s (%s): %s", c1, c2, algorithm, base)
    return base
