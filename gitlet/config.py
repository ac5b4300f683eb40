# config.py - Reading and writing gitlet config files
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

"""Reading and writing gitlet configuration files.

The syntax is the familiar git-config one: ``[section]`` headers followed by
``name = value`` lines. Section and variable names are case-insensitive.
Subsections and include directives are not supported.
"""

__all__ = [
    "Config",
    "ConfigFile",
]

import os
from collections.abc import Iterator
from typing import IO, Optional, Union

from .file import GitletFile

_COMMENT_CHARS = ("#", ";")

_ESCAPE_TABLE = {
    "\\": "\\",
    '"': '"',
    "n": "\n",
    "t": "\t",
    "b": "\b",
}


def _strip_comments(line: str) -> str:
    string_open = False
    for i, character in enumerate(line):
        # Comment characters outside balanced quotes denote comment start
        if character == '"':
            string_open = not string_open
        elif not string_open and character in _COMMENT_CHARS:
            return line[:i]
    return line


def _parse_string(value: str) -> str:
    ret: list[str] = []
    whitespace: list[str] = []
    in_quotes = False
    i = 0
    value = value.strip()
    while i < len(value):
        c = value[i]
        if c == "\\" and i + 1 < len(value):
            i += 1
            ret.extend(whitespace)
            whitespace = []
            ret.append(_ESCAPE_TABLE.get(value[i], "\\" + value[i]))
        elif c == '"':
            in_quotes = not in_quotes
        elif c in _COMMENT_CHARS and not in_quotes:
            break
        elif c in (" ", "\t"):
            whitespace.append(c)
        else:
            ret.extend(whitespace)
            whitespace = []
            ret.append(c)
        i += 1
    if in_quotes:
        raise ValueError("missing end quote")
    return "".join(ret)


def _format_string(value: str) -> str:
    escaped = (
        value.replace("\\", "\\\\")
        .replace("\n", "\\n")
        .replace("\t", "\\t")
        .replace('"', '\\"')
    )
    if value.startswith((" ", "\t")) or value.endswith((" ", "\t")):
        return '"' + escaped + '"'
    if "#" in value or ";" in value:
        return '"' + escaped + '"'
    return escaped


def _check_name(name: str) -> bool:
    return bool(name) and all(c.isalnum() or c == "-" for c in name)


class Config:
    """A gitlet configuration."""

    def get(self, section: str, name: str) -> str:
        """Retrieve the contents of a configuration setting.

        Args:
          section: Section name
          name: Variable name
        Returns:
          Contents of the setting
        Raises:
          KeyError: if the value is not set
        """
        raise NotImplementedError(self.get)

    def get_boolean(
        self, section: str, name: str, default: Optional[bool] = None
    ) -> Optional[bool]:
        """Retrieve a configuration setting as boolean.

        Args:
          section: Section name
          name: Variable name
          default: Default value if setting is not found

        Returns:
          Contents of the setting
        """
        try:
            value = self.get(section, name)
        except KeyError:
            return default
        if value.lower() in ("true", "yes", "on", "1"):
            return True
        elif value.lower() in ("false", "no", "off", "0"):
            return False
        raise ValueError(f"not a valid boolean string: {value!r}")

    def set(self, section: str, name: str, value: Union[str, bool, int]) -> None:
        """Set a configuration value."""
        raise NotImplementedError(self.set)

    def sections(self) -> Iterator[str]:
        """Iterate over the section names."""
        raise NotImplementedError(self.sections)


class ConfigFile(Config):
    """A gitlet configuration file, like .gitlet/config."""

    def __init__(self) -> None:
        self._values: dict[str, dict[str, tuple[str, str]]] = {}
        self.path: Optional[str] = None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._values!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, self.__class__) and other._values == self._values

    def get(self, section: str, name: str) -> str:
        try:
            return self._values[section.lower()][name.lower()][1]
        except KeyError:
            raise KeyError((section, name)) from None

    def set(self, section: str, name: str, value: Union[str, bool, int]) -> None:
        if not _check_name(section):
            raise ValueError(f"invalid section name {section!r}")
        if not _check_name(name):
            raise ValueError(f"invalid variable name {name!r}")
        if isinstance(value, bool):
            value = "true" if value else "false"
        self._values.setdefault(section.lower(), {})[name.lower()] = (
            name,
            str(value),
        )

    def sections(self) -> Iterator[str]:
        return iter(self._values.keys())

    @classmethod
    def from_file(cls, f: IO[bytes]) -> "ConfigFile":
        """Read configuration from a file-like object."""
        ret = cls()
        section: Optional[str] = None
        for lineno, raw in enumerate(f.readlines(), 1):
            line = raw.decode("utf-8").strip()
            if line.startswith("["):
                end = line.find("]")
                if end == -1:
                    raise ValueError(f"line {lineno}: expected trailing ]")
                section = line[1:end].strip().lower()
                if not _check_name(section):
                    raise ValueError(f"line {lineno}: invalid section name {section!r}")
                ret._values.setdefault(section, {})
                line = line[end + 1 :]
            if _strip_comments(line).strip() == "":
                continue
            if section is None:
                raise ValueError(f"line {lineno}: setting {line!r} without section")
            try:
                name, value = line.split("=", 1)
            except ValueError:
                # a bare name is a boolean set to true
                name, value = _strip_comments(line), "true"
            name = name.strip()
            if not _check_name(name):
                raise ValueError(f"line {lineno}: invalid variable name {name!r}")
            ret._values[section][name.lower()] = (name, _parse_string(value))
        return ret

    @classmethod
    def from_path(cls, path: Union[str, "os.PathLike[str]"]) -> "ConfigFile":
        """Read configuration from a file on disk."""
        with GitletFile(path, "rb") as f:
            ret = cls.from_file(f)
        ret.path = os.fspath(path)
        return ret

    def write_to_path(self, path: Optional[Union[str, "os.PathLike[str]"]] = None) -> None:
        """Write configuration to a file on disk."""
        if path is None:
            if self.path is None:
                raise ValueError("No path specified and no default path available")
            path = self.path
        with GitletFile(path, "wb") as f:
            self.write_to_file(f)

    def write_to_file(self, f: IO[bytes]) -> None:
        """Write configuration to a file-like object."""
        for section, values in self._values.items():
            f.write(f"[{section}]\n".encode())
            for name, value in values.values():
                f.write(f"\t{name} = {_format_string(value)}\n".encode())
