# file.py -- Safe access to gitlet files
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

"""Safe access to gitlet files."""

__all__ = [
    "FileLocked",
    "GitletFile",
    "ensure_dir_exists",
    "prune_empty_dirs",
    "write_atomic",
]

import os
import warnings
from types import TracebackType
from typing import IO, Optional, Union

PathLike = Union[str, "os.PathLike[str]"]


def ensure_dir_exists(dirname: PathLike) -> None:
    """Ensure a directory exists, creating if necessary."""
    try:
        os.makedirs(dirname)
    except FileExistsError:
        pass


def prune_empty_dirs(dirname: PathLike, stop: PathLike) -> None:
    """Remove ``dirname`` and its parents while they are empty.

    Removal stops at ``stop``, which is never removed itself.
    """
    stop = os.path.abspath(stop)
    current = os.path.abspath(dirname)
    while current != stop and current.startswith(stop + os.sep):
        try:
            os.rmdir(current)
        except OSError:
            return
        current = os.path.dirname(current)


class FileLocked(Exception):
    """File is already locked."""

    def __init__(self, filename: PathLike, lockfilename: str) -> None:
        """Initialize FileLocked.

        Args:
          filename: Name of the file that is locked
          lockfilename: Name of the lock file
        """
        self.filename = filename
        self.lockfilename = lockfilename
        super().__init__(filename, lockfilename)


def GitletFile(
    filename: PathLike, mode: str = "rb", mask: int = 0o644, fsync: bool = False
) -> Union[IO[bytes], "_LockedFile"]:
    """Create a file object that obeys the lock-and-rename protocol.

    Only read-only and write-only (binary) modes are supported.

    Args:
      filename: Path to the file
      mode: File mode (only 'rb' and 'wb' are supported)
      mask: File mask for created files
      fsync: Whether to call fsync() before closing
    Returns: a builtin file object or a _LockedFile object
    """
    if "a" in mode:
        raise OSError("append mode not supported for gitlet files")
    if "+" in mode:
        raise OSError("read/write mode not supported for gitlet files")
    if "b" not in mode:
        raise OSError("text mode not supported for gitlet files")
    if "w" in mode:
        return _LockedFile(filename, mask, fsync)
    return open(filename, mode)


class _LockedFile:
    """File that follows the locking protocol for writes.

    All writes to a file foo will be written into foo.lock in the same
    directory, and the lockfile will be renamed to overwrite the original file
    on close.
    """

    def __init__(self, filename: PathLike, mask: int, fsync: bool) -> None:
        self._filename = os.fspath(filename)
        self._lockfilename = self._filename + ".lock"
        self._fsync = fsync
        try:
            fd = os.open(
                self._lockfilename,
                os.O_RDWR | os.O_CREAT | os.O_EXCL | getattr(os, "O_BINARY", 0),
                mask,
            )
        except FileExistsError as exc:
            raise FileLocked(filename, self._lockfilename) from exc
        self._file = os.fdopen(fd, "wb")
        self._closed = False

    def write(self, data: bytes) -> int:
        return self._file.write(data)

    def abort(self) -> None:
        """Close and discard the lockfile without overwriting the target."""
        if self._closed:
            return
        self._file.close()
        try:
            os.remove(self._lockfilename)
        except FileNotFoundError:
            pass
        self._closed = True

    def close(self) -> None:
        """Close this file, saving the lockfile over the original.

        Raises:
          OSError: if the original file could not be overwritten. The
            lock file is removed in that case.
        """
        if self._closed:
            return
        self._file.flush()
        if self._fsync:
            os.fsync(self._file.fileno())
        self._file.close()
        try:
            os.replace(self._lockfilename, self._filename)
        finally:
            self.abort()

    @property
    def closed(self) -> bool:
        """Return whether the file is closed."""
        return self._closed

    def __del__(self) -> None:
        if not getattr(self, "_closed", True):
            warnings.warn(f"unclosed {self!r}", ResourceWarning, stacklevel=2)
            self.abort()

    def __enter__(self) -> "_LockedFile":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        if exc_type is not None:
            self.abort()
        else:
            self.close()


def write_atomic(
    filename: PathLike, contents: bytes, mask: int = 0o644, fsync: bool = False
) -> None:
    """Replace the contents of ``filename``, creating parent directories.

    Args:
      filename: Path to write
      contents: New file contents
      mask: File mask for a newly created file
      fsync: Whether to fsync before renaming into place
    """
    ensure_dir_exists(os.path.dirname(os.path.abspath(filename)))
    with _LockedFile(filename, mask, fsync) as f:
        f.write(contents)
