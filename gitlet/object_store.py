# object_store.py -- Object store for gitlet objects
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

"""Content-addressed storage of blobs and commits."""

__all__ = [
    "BaseObjectStore",
    "DiskObjectStore",
    "MemoryObjectStore",
]

import logging
import os
from collections.abc import Iterable, Iterator
from typing import Optional, Union

from .errors import ObjectFormatException
from .file import GitletFile, ensure_dir_exists
from .objects import (
    Blob,
    Commit,
    ObjectID,
    ShaFile,
    filename_to_hex,
    hex_to_filename,
    valid_hexsha,
)

logger = logging.getLogger(__name__)

# Loose objects are never rewritten
OBJECT_MODE = 0o444


class BaseObjectStore:
    """Object store interface."""

    def __contains__(self, sha: ObjectID) -> bool:
        """Check if a particular object is present by id."""
        raise NotImplementedError(self.__contains__)

    def __getitem__(self, sha: ObjectID) -> ShaFile:
        """Obtain an object by id.

        Raises:
          KeyError: if the object is missing or can not be decoded
        """
        raise NotImplementedError(self.__getitem__)

    def __iter__(self) -> Iterator[ObjectID]:
        """Iterate over the ids that are present in this store."""
        raise NotImplementedError(self.__iter__)

    def add_object(self, obj: ShaFile) -> None:
        """Add a single object to this object store.

        Adding an object that is already present is a no-op.
        """
        raise NotImplementedError(self.add_object)

    def add_objects(self, objects: Iterable[ShaFile]) -> None:
        """Add a set of objects to this object store."""
        for obj in objects:
            self.add_object(obj)

    def add_blob(self, data: bytes) -> ObjectID:
        """Store ``data`` as a blob and return its id."""
        blob = Blob(data)
        self.add_object(blob)
        return blob.id

    def get(self, sha: ObjectID) -> Optional[ShaFile]:
        """Obtain an object by id, or None when it does not resolve."""
        try:
            return self[sha]
        except KeyError:
            return None

    def get_commit(self, sha: ObjectID) -> Optional[Commit]:
        """Obtain a commit by id, or None if ``sha`` is not a stored commit."""
        obj = self.get(sha)
        if isinstance(obj, Commit):
            return obj
        return None

    def get_blob_data(self, sha: ObjectID) -> bytes:
        """Return the contents of a stored blob.

        Raises:
          KeyError: if ``sha`` is not a stored blob
        """
        obj = self[sha]
        if not isinstance(obj, Blob):
            raise KeyError(sha)
        return obj.data

    def iter_commits(self) -> Iterator[Commit]:
        """Iterate over every commit in the store, in id order."""
        for sha in sorted(self):
            commit = self.get_commit(sha)
            if commit is not None:
                yield commit

    def iter_prefix(self, prefix: str) -> Iterator[ObjectID]:
        """Iterate over the ids starting with ``prefix``."""
        for sha in self:
            if sha.startswith(prefix):
                yield sha

    def close(self) -> None:
        """Close any files opened by this object store."""


class DiskObjectStore(BaseObjectStore):
    """Object store that keeps each object in its own compressed file.

    Objects live at ``<path>/<first two hex digits>/<remaining digits>``.
    """

    def __init__(
        self,
        path: Union[str, "os.PathLike[str]"],
        *,
        fsync_object_files: bool = False,
    ) -> None:
        """Open an object store.

        Args:
          path: Path of the object store.
          fsync_object_files: whether to fsync object files for durability
        """
        self.path = os.fspath(path)
        self.fsync_object_files = fsync_object_files

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({self.path!r})>"

    @classmethod
    def init(cls, path: Union[str, "os.PathLike[str]"]) -> "DiskObjectStore":
        """Create a new, empty object store at ``path``."""
        ensure_dir_exists(path)
        return cls(path)

    def _get_shafile_path(self, sha: ObjectID) -> str:
        return hex_to_filename(self.path, sha)

    def __contains__(self, sha: ObjectID) -> bool:
        if not valid_hexsha(sha):
            return False
        return os.path.exists(self._get_shafile_path(sha))

    def __iter__(self) -> Iterator[ObjectID]:
        for base in sorted(os.listdir(self.path)):
            if len(base) != 2:
                continue
            for rest in sorted(os.listdir(os.path.join(self.path, base))):
                try:
                    yield filename_to_hex(os.path.join(self.path, base, rest))
                except ValueError:
                    # lock files and other strays
                    continue

    def iter_prefix(self, prefix: str) -> Iterator[ObjectID]:
        if len(prefix) < 2:
            yield from super().iter_prefix(prefix)
            return
        subdir = os.path.join(self.path, prefix[:2])
        try:
            names = sorted(os.listdir(subdir))
        except FileNotFoundError:
            return
        for rest in names:
            sha = prefix[:2] + rest
            if valid_hexsha(sha) and sha.startswith(prefix):
                yield sha

    def __getitem__(self, sha: ObjectID) -> ShaFile:
        if not valid_hexsha(sha):
            raise KeyError(sha)
        path = self._get_shafile_path(sha)
        try:
            with GitletFile(path, "rb") as f:
                data = f.read()
        except FileNotFoundError:
            raise KeyError(sha) from None
        try:
            obj = ShaFile.from_legacy_object(data)
        except ObjectFormatException as exc:
            logger.warning("Unable to read object %s: %s", sha, exc)
            raise KeyError(sha) from exc
        if obj.id != sha:
            logger.warning("Object %s is stored with checksum %s", sha, obj.id)
            raise KeyError(sha)
        return obj

    def add_object(self, obj: ShaFile) -> None:
        path = self._get_shafile_path(obj.id)
        if os.path.exists(path):
            return  # Already there, no need to write again
        ensure_dir_exists(os.path.dirname(path))
        with GitletFile(
            path, "wb", mask=OBJECT_MODE, fsync=self.fsync_object_files
        ) as f:
            f.write(obj.as_legacy_object())
        logger.debug("Stored %s %s", obj.type_name, obj.id)


class MemoryObjectStore(BaseObjectStore):
    """Object store that keeps all objects in memory."""

    def __init__(self) -> None:
        self._data: dict[ObjectID, ShaFile] = {}

    def __contains__(self, sha: ObjectID) -> bool:
        return sha in self._data

    def __iter__(self) -> Iterator[ObjectID]:
        return iter(sorted(self._data.keys()))

    def __getitem__(self, sha: ObjectID) -> ShaFile:
        return self._data[sha]

    def __delitem__(self, sha: ObjectID) -> None:
        """Delete an object from this store, for testing only."""
        del self._data[sha]

    def add_object(self, obj: ShaFile) -> None:
        self._data.setdefault(obj.id, obj)
