# Copyright 2025 Hathor Labs
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Acquisition of text input from a file or from the standard input.

The command line tools accept a source token where `-` means the standard input and anything else is a file path,
the same convention used by most unix tools.
"""

import sys
from pathlib import Path
from typing import BinaryIO, Final, Optional

from nodestate.exception import InputReadError

STDIN_TOKEN: Final[str] = '-'


class FileInput:
    """Input coming either from a file path or from the standard input."""

    __slots__ = ('path',)

    def __init__(self, path: Optional[Path] = None) -> None:
        # None means stdin
        self.path = path

    @classmethod
    def from_str(cls, txt: str) -> 'FileInput':
        """Build from a source token, suitable as an argparse `type`."""
        if txt == STDIN_TOKEN:
            return cls()
        return cls(Path(txt))

    @property
    def is_stdin(self) -> bool:
        return self.path is None

    def __str__(self) -> str:
        if self.path is None:
            return '<stdin>'
        return str(self.path)

    def __repr__(self) -> str:
        return f'FileInput({str(self)!r})'

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FileInput):
            return NotImplemented
        return self.path == other.path

    def __hash__(self) -> int:
        return hash(self.path)

    def read_to_string(self, *, stdin: Optional[BinaryIO] = None) -> str:
        """Read the whole content as UTF-8 text, line endings are kept as they are.

        Any failure is raised as InputReadError naming the path (or stdin) that could not be read.
        """
        if self.path is None:
            stream = stdin if stdin is not None else sys.stdin.buffer
            try:
                return stream.read().decode('utf-8')
            except (OSError, UnicodeDecodeError) as e:
                raise InputReadError('could not read from stdin') from e
        try:
            return self.path.read_bytes().decode('utf-8')
        except (OSError, UnicodeDecodeError) as e:
            raise InputReadError(f"cannot read from '{self.path}'") from e
