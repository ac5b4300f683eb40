# log_utils.py -- Logging utilities for Gitlet
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

"""Logging setup for gitlet.

Every module logs to a child of the ``gitlet`` logger. As a library gitlet
stays silent: that logger carries a null handler until an application calls
:func:`default_logging_config`, which the command-line interface does.

Setting ``GITLET_TRACE`` turns on debug output:

- ``1``, ``2`` or ``true``: to stderr
- ``3`` to ``9``: to that file descriptor
- an absolute path: appended to that file, or to ``trace.<pid>`` inside it
  when the path is a directory

Without it only warnings and errors are shown, on stderr. Command output
goes to stdout and never passes through logging.
"""

__all__ = [
    "TRACE_ENV",
    "default_logging_config",
    "getLogger",
    "remove_null_handler",
]

import logging
import os
import sys
from typing import Optional, Union

getLogger = logging.getLogger

TRACE_ENV = "GITLET_TRACE"
TRACE_FORMAT = "%(asctime)s %(name)s %(levelname)s: %(message)s"
DEFAULT_FORMAT = "%(levelname)s: %(message)s"


class _NullHandler(logging.Handler):
    """Handler that drops every record."""

    def emit(self, record: logging.LogRecord) -> None:
        pass


_NULL_HANDLER = _NullHandler()
_GITLET_LOGGER = getLogger("gitlet")
_GITLET_LOGGER.addHandler(_NULL_HANDLER)


def _get_trace_target() -> Optional[Union[str, int]]:
    """Decode GITLET_TRACE.

    Returns: None when tracing is off, 2 for stderr, a file descriptor
      between 3 and 9, or an absolute path
    """
    value = os.environ.get(TRACE_ENV, "")
    if value.lower() in ("1", "2", "true"):
        return 2
    if value.isdigit() and 3 <= int(value) <= 9:
        return int(value)
    if os.path.isabs(value):
        return value
    return None


def _trace_handler() -> Optional[logging.Handler]:
    """Build the handler GITLET_TRACE asks for.

    A target that can not be opened is reported on stderr and tracing
    stays off.
    """
    target = _get_trace_target()
    if target is None:
        return None
    if target == 2:
        return logging.StreamHandler(sys.stderr)
    try:
        if isinstance(target, int):
            return logging.StreamHandler(os.fdopen(target, "w", buffering=1))
        if os.path.isdir(target):
            target = os.path.join(target, f"trace.{os.getpid()}")
        return logging.FileHandler(target, mode="a")
    except OSError as e:
        sys.stderr.write(f"{TRACE_ENV}: unable to open {target}: {e}\n")
        return None


def default_logging_config() -> logging.Handler:
    """Attach a real handler to the ``gitlet`` logger.

    Returns: the handler that was installed
    """
    remove_null_handler()
    handler = _trace_handler()
    if handler is not None:
        handler.setFormatter(logging.Formatter(TRACE_FORMAT))
        _GITLET_LOGGER.setLevel(logging.DEBUG)
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        _GITLET_LOGGER.setLevel(logging.WARNING)
    _GITLET_LOGGER.addHandler(handler)
    return handler


def remove_null_handler() -> None:
    """Remove the null handler from the ``gitlet`` logger."""
    _GITLET_LOGGER.removeHandler(_NULL_HANDLER)
