# objects.py -- Access to base gitlet objects
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

"""Access to base gitlet objects.

Objects are immutable once created. An object's identity is the SHA-1 hex
digest of ``<type> <length>\\0<payload>``; the same bytes are what gets
compressed and written to disk.
"""

__all__ = [
    "Blob",
    "Commit",
    "ObjectID",
    "ShaFile",
    "ZERO_TIME",
    "format_timezone",
    "hex_to_filename",
    "local_timezone",
    "object_class",
    "parse_timezone",
    "valid_hexsha",
]

import hashlib
import os
import time
import zlib
from collections.abc import Iterable, Mapping, Sequence
from typing import Optional, Union

from .errors import ObjectFormatException

ObjectID = str

HEX_LENGTH = 40

# Version of the commit payload encoding
COMMIT_FORMAT = 1

_FORMAT_HEADER = "format"
_PARENT_HEADER = "parent"
_TIME_HEADER = "time"
_FILE_HEADER = "file"

ZERO_TIME = 0

_HEX_DIGITS = frozenset("0123456789abcdef")


def valid_hexsha(hex: str) -> bool:
    """Check whether ``hex`` looks like a full object id."""
    return len(hex) == HEX_LENGTH and all(c in _HEX_DIGITS for c in hex)


def hex_to_filename(path: Union[str, "os.PathLike[str]"], hex: ObjectID) -> str:
    """Takes a hex sha and returns its filename relative to the given path."""
    return os.path.join(path, hex[:2], hex[2:])


def filename_to_hex(filename: str) -> ObjectID:
    """Takes an object filename and returns its corresponding hex sha."""
    names = filename.rsplit(os.path.sep, 2)[-2:]
    hex = "".join(names)
    if not valid_hexsha(hex):
        raise ValueError(f"Invalid object filename: {filename!r}")
    return hex


def parse_timezone(text: str) -> int:
    """Parse a timezone text fragment (e.g. '+0100').

    Args:
      text: Text to parse.
    Returns: Offset from UTC in seconds
    """
    if len(text) != 5 or text[0] not in "+-" or not text[1:].isdigit():
        raise ValueError(f"Invalid timezone: {text!r}")
    sign = -1 if text[0] == "-" else 1
    hours = int(text[1:3])
    minutes = int(text[3:5])
    return sign * (hours * 3600 + minutes * 60)


def format_timezone(offset: int) -> str:
    """Format a timezone for commit payloads and log output.

    Args:
      offset: Timezone offset as seconds difference to UTC
    Returns: Timezone as a string such as '-0700'
    """
    if offset % 60 != 0:
        raise ValueError("Unable to handle non-minute offset.")
    sign = "-" if offset < 0 else "+"
    offset = abs(offset)
    return "%c%02d%02d" % (sign, offset // 3600, (offset // 60) % 60)


def local_timezone(timestamp: Optional[int] = None) -> int:
    """Offset of the local timezone from UTC in seconds, at ``timestamp``."""
    if timestamp is None:
        timestamp = int(time.time())
    # round to whole minutes; a few historic zones carry odd offsets
    return (time.localtime(timestamp).tm_gmtoff // 60) * 60


class ShaFile:
    """A content-addressed gitlet object."""

    type_name: str

    __slots__ = ("_sha",)

    def __init__(self) -> None:
        self._sha: Optional[ObjectID] = None

    def _serialize(self) -> bytes:
        raise NotImplementedError(self._serialize)

    def as_raw_string(self) -> bytes:
        """Return the payload of this object, without header."""
        return self._serialize()

    def _header(self, payload: bytes) -> bytes:
        return f"{self.type_name} {len(payload)}\0".encode("ascii")

    def as_legacy_object(self, compression_level: int = -1) -> bytes:
        """Return the compressed on-disk form of this object."""
        payload = self.as_raw_string()
        return zlib.compress(self._header(payload) + payload, compression_level)

    @property
    def id(self) -> ObjectID:
        """The hex SHA-1 that identifies this object."""
        if self._sha is None:
            payload = self.as_raw_string()
            sha = hashlib.sha1(self._header(payload))
            sha.update(payload)
            self._sha = sha.hexdigest()
        return self._sha

    @staticmethod
    def from_raw_string(type_name: str, payload: bytes) -> "ShaFile":
        """Creates an object of the indicated type from the payload given.

        Args:
          type_name: The object type, 'blob' or 'commit'
          payload: The raw uncompressed contents.
        """
        try:
            cls = object_class(type_name)
        except KeyError as exc:
            raise ObjectFormatException(f"Not a known type: {type_name!r}") from exc
        return cls._deserialize(payload)

    @classmethod
    def _deserialize(cls, payload: bytes) -> "ShaFile":
        raise NotImplementedError(cls._deserialize)

    @staticmethod
    def from_legacy_object(data: bytes) -> "ShaFile":
        """Parse the compressed on-disk form of an object.

        Raises:
          ObjectFormatException: if the data is not a well-formed object
        """
        try:
            text = zlib.decompress(data)
        except zlib.error as exc:
            raise ObjectFormatException(f"Unable to decompress object: {exc}") from exc
        header, sep, payload = text.partition(b"\0")
        if not sep:
            raise ObjectFormatException("Object header not terminated")
        try:
            type_name, size = header.decode("ascii").split(" ")
            expected = int(size)
        except ValueError as exc:
            raise ObjectFormatException(f"Invalid object header {header!r}") from exc
        if expected != len(payload):
            raise ObjectFormatException(
                f"Object length mismatch: header says {expected}, got {len(payload)}"
            )
        return ShaFile.from_raw_string(type_name, payload)

    def __hash__(self) -> int:
        return hash(self.id)

    def __eq__(self, other: object) -> bool:
        """Return true if the sha of the two objects match."""
        return isinstance(other, ShaFile) and self.id == other.id

    def __ne__(self, other: object) -> bool:
        return not self == other

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.id}>"


class Blob(ShaFile):
    """The contents of a file at one point in time."""

    type_name = "blob"

    __slots__ = ("_data",)

    def __init__(self, data: bytes = b"") -> None:
        super().__init__()
        self._data = bytes(data)

    @property
    def data(self) -> bytes:
        """The bytes contained within the blob object."""
        return self._data

    def _serialize(self) -> bytes:
        return self._data

    @classmethod
    def _deserialize(cls, payload: bytes) -> "Blob":
        return cls(payload)

    @classmethod
    def from_path(cls, path: Union[str, "os.PathLike[str]"]) -> "Blob":
        """Create a blob from the contents of a file on disk."""
        with open(path, "rb") as f:
            return cls(f.read())


def _check_tree_path(path: str) -> None:
    if not path or "\n" in path or "\0" in path:
        raise ValueError(f"Invalid tree path: {path!r}")
    if path.startswith("/") or path.endswith("/"):
        raise ValueError(f"Invalid tree path: {path!r}")
    if any(part in ("", ".", "..") for part in path.split("/")):
        raise ValueError(f"Invalid tree path: {path!r}")


class Commit(ShaFile):
    """A snapshot of the tracked files, with a message and time.

    A commit has no parents (the root), one parent, or a first parent and
    a merge parent.
    """

    type_name = "commit"

    __slots__ = ("_commit_time", "_commit_timezone", "_message", "_parents", "_tree")

    def __init__(
        self,
        message: str,
        commit_time: int,
        commit_timezone: int = 0,
        parents: Sequence[ObjectID] = (),
        tree: Optional[Mapping[str, ObjectID]] = None,
    ) -> None:
        """Create a commit.

        Args:
          message: Commit message
          commit_time: Seconds since the epoch
          commit_timezone: Offset from UTC in seconds
          parents: Zero, one or two parent commit ids; first parent first
          tree: Mapping of repository-relative path to blob id
        """
        super().__init__()
        if len(parents) > 2:
            raise ValueError("A commit has at most two parents")
        for parent in parents:
            if not valid_hexsha(parent):
                raise ValueError(f"Invalid parent id: {parent!r}")
        tree = dict(tree or {})
        for path, blob_id in tree.items():
            _check_tree_path(path)
            if not valid_hexsha(blob_id):
                raise ValueError(f"Invalid blob id for {path!r}: {blob_id!r}")
        format_timezone(commit_timezone)
        self._message = message
        self._commit_time = int(commit_time)
        self._commit_timezone = commit_timezone
        self._parents = tuple(parents)
        self._tree = tree

    @property
    def message(self) -> str:
        return self._message

    @property
    def commit_time(self) -> int:
        return self._commit_time

    @property
    def commit_timezone(self) -> int:
        return self._commit_timezone

    @property
    def parents(self) -> list[ObjectID]:
        """Parent ids, first parent before merge parent."""
        return list(self._parents)

    @property
    def parent(self) -> Optional[ObjectID]:
        """The first parent, or None for the root commit."""
        return self._parents[0] if self._parents else None

    @property
    def merge_parent(self) -> Optional[ObjectID]:
        """The second parent of a merge commit, or None."""
        return self._parents[1] if len(self._parents) > 1 else None

    @property
    def is_merge(self) -> bool:
        return len(self._parents) == 2

    @property
    def tree(self) -> dict[str, ObjectID]:
        """Mapping of tracked path to blob id."""
        return dict(self._tree)

    def __contains__(self, path: str) -> bool:
        return path in self._tree

    def lookup(self, path: str) -> Optional[ObjectID]:
        """Return the blob id recorded for ``path``, or None."""
        return self._tree.get(path)

    def _serialize(self) -> bytes:
        lines = [f"{_FORMAT_HEADER} {COMMIT_FORMAT}"]
        lines.extend(f"{_PARENT_HEADER} {p}" for p in self._parents)
        lines.append(
            f"{_TIME_HEADER} {self._commit_time} "
            f"{format_timezone(self._commit_timezone)}"
        )
        lines.extend(
            f"{_FILE_HEADER} {self._tree[path]} {path}" for path in sorted(self._tree)
        )
        return ("\n".join(lines) + "\n\n" + self._message).encode("utf-8")

    @classmethod
    def _deserialize(cls, payload: bytes) -> "Commit":
        try:
            text = payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ObjectFormatException(f"Commit is not valid UTF-8: {exc}") from exc
        headers, sep, message = text.partition("\n\n")
        if not sep:
            raise ObjectFormatException("Commit header not terminated")
        fields = list(_parse_headers(headers.split("\n")))
        if not fields or fields[0] != (_FORMAT_HEADER, str(COMMIT_FORMAT)):
            raise ObjectFormatException(f"Unsupported commit format: {fields[:1]!r}")
        parents: list[ObjectID] = []
        tree: dict[str, ObjectID] = {}
        commit_time = None
        commit_timezone = 0
        for field, value in fields[1:]:
            if field == _PARENT_HEADER:
                parents.append(value)
            elif field == _TIME_HEADER:
                try:
                    stamp, tz = value.split(" ")
                    commit_time = int(stamp)
                    commit_timezone = parse_timezone(tz)
                except ValueError as exc:
                    raise ObjectFormatException(f"Invalid time {value!r}") from exc
            elif field == _FILE_HEADER:
                blob_id, _, path = value.partition(" ")
                tree[path] = blob_id
            else:
                raise ObjectFormatException(f"Unknown commit field {field!r}")
        if commit_time is None:
            raise ObjectFormatException("Commit has no time")
        try:
            return cls(message, commit_time, commit_timezone, parents, tree)
        except ValueError as exc:
            raise ObjectFormatException(str(exc)) from exc


def _parse_headers(lines: Iterable[str]) -> Iterable[tuple[str, str]]:
    for line in lines:
        field, sep, value = line.partition(" ")
        if not sep:
            raise ObjectFormatException(f"Malformed commit header {line!r}")
        yield field, value


OBJECT_CLASSES = (Blob, Commit)

_TYPE_MAP: dict[str, type[ShaFile]] = {cls.type_name: cls for cls in OBJECT_CLASSES}


def object_class(type_name: str) -> type[ShaFile]:
    """Get the object class corresponding to the given type name.

    Raises:
      KeyError: for unknown type names
    """
    return _TYPE_MAP[type_name]
