# test_log_utils.py -- Tests for log_utils.py
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


"""Tests for gitlet.log_utils."""

import logging
import os

from gitlet.log_utils import (
    _GITLET_LOGGER,
    _NULL_HANDLER,
    TRACE_ENV,
    _get_trace_target,
    _NullHandler,
    default_logging_config,
    getLogger,
    remove_null_handler,
)

from . import TestCase


class LogUtilsTests(TestCase):
    """Tests for log_utils."""

    def setUp(self) -> None:
        super().setUp()
        self.original_handlers = list(_GITLET_LOGGER.handlers)
        self.original_level = _GITLET_LOGGER.level

    def tearDown(self) -> None:
        for handler in _GITLET_LOGGER.handlers:
            if handler not in self.original_handlers and isinstance(
                handler, logging.FileHandler
            ):
                handler.close()
        _GITLET_LOGGER.handlers = self.original_handlers
        _GITLET_LOGGER.setLevel(self.original_level)
        super().tearDown()

    def test_null_handler(self) -> None:
        handler = _NullHandler()
        record = logging.LogRecord(
            name="test",
            level=logging.INFO,
            pathname="test.py",
            lineno=1,
            msg="Test message",
            args=(),
            exc_info=None,
        )
        # emit does nothing and raises nothing
        handler.emit(record)

    def test_null_handler_installed(self) -> None:
        self.assertIn(_NULL_HANDLER, _GITLET_LOGGER.handlers)

    def test_get_logger(self) -> None:
        logger = getLogger("gitlet.repo")
        self.assertIsInstance(logger, logging.Logger)
        self.assertEqual("gitlet.repo", logger.name)

    def test_remove_null_handler(self) -> None:
        remove_null_handler()
        self.assertNotIn(_NULL_HANDLER, _GITLET_LOGGER.handlers)

    def test_trace_disabled(self) -> None:
        self.overrideEnv(TRACE_ENV, None)
        self.assertIsNone(_get_trace_target())
        for value in ["0", "false", "FALSE", "relative/path"]:
            self.overrideEnv(TRACE_ENV, value)
            self.assertIsNone(_get_trace_target())

    def test_trace_stderr(self) -> None:
        for value in ["1", "2", "true", "True"]:
            self.overrideEnv(TRACE_ENV, value)
            self.assertEqual(2, _get_trace_target())

    def test_trace_fd(self) -> None:
        self.overrideEnv(TRACE_ENV, "5")
        self.assertEqual(5, _get_trace_target())
        self.overrideEnv(TRACE_ENV, "10")
        self.assertIsNone(_get_trace_target())

    def test_trace_path(self) -> None:
        self.overrideEnv(TRACE_ENV, "/tmp/gitlet-trace.log")
        self.assertEqual("/tmp/gitlet-trace.log", _get_trace_target())

    def test_default_config(self) -> None:
        self.overrideEnv(TRACE_ENV, None)
        handler = default_logging_config()
        self.assertNotIn(_NULL_HANDLER, _GITLET_LOGGER.handlers)
        self.assertIn(handler, _GITLET_LOGGER.handlers)
        self.assertEqual(logging.WARNING, _GITLET_LOGGER.level)

    def test_trace_to_file(self) -> None:
        filename = os.path.join(self.make_tempdir(), "trace.log")
        self.overrideEnv(TRACE_ENV, filename)
        handler = default_logging_config()
        self.assertIsInstance(handler, logging.FileHandler)
        self.assertEqual(logging.DEBUG, _GITLET_LOGGER.level)
        getLogger("gitlet.repo").debug("traced %s", "message")
        handler.flush()
        with open(filename) as f:
            self.assertIn("gitlet.repo DEBUG: traced message", f.read())

    def test_trace_to_directory(self) -> None:
        tracedir = self.make_tempdir()
        self.overrideEnv(TRACE_ENV, tracedir)
        handler = default_logging_config()
        self.assertIsInstance(handler, logging.FileHandler)
        self.assertEqual(
            [f"trace.{os.getpid()}"], os.listdir(tracedir)
        )

    def test_trace_unopenable(self) -> None:
        missing = os.path.join(self.make_tempdir(), "missing", "trace.log")
        self.overrideEnv(TRACE_ENV, missing)
        handler = default_logging_config()
        self.assertNotIsInstance(handler, logging.FileHandler)
        self.assertEqual(logging.WARNING, _GITLET_LOGGER.level)
