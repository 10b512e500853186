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

from typing import BinaryIO, Optional

from typing_extensions import override

from .deserializer import Deserializer

DEFAULT_CHUNK_SIZE = 65536


class StreamDeserializer(Deserializer):
    """Deserializer that reads from a binary file object.

    A read call on the source may return fewer bytes than requested without the source being exhausted (pipes, raw
    files, sockets), so reads are repeated until the request is satisfied or the source returns no bytes at all. Big
    requests are split in chunks so a bogus length does not allocate memory for data that isn't there.

    `is_empty()` has to look ahead one byte, that byte is kept and returned by the next read.
    """

    def __init__(self, source: BinaryIO, *, chunk_size: Optional[int] = None) -> None:
        if chunk_size is None:
            chunk_size = DEFAULT_CHUNK_SIZE
        if chunk_size <= 0:
            raise ValueError('chunk_size must be positive')
        self._source = source
        self._chunk_size = chunk_size
        self._lookahead = b''
        self._pos = 0

    @override
    def cur_pos(self) -> int:
        return self._pos

    def _read_once(self, n: int) -> bytes:
        data = self._source.read(n)
        if data is None:
            raise BlockingIOError('source has no data available')
        return data

    @override
    def is_empty(self) -> bool:
        if not self._lookahead:
            self._lookahead = self._read_once(1)
        return not self._lookahead

    @override
    def _read_up_to(self, n: int) -> bytes:
        parts: list[bytes] = []
        missing = n
        if self._lookahead and missing:
            parts.append(self._lookahead[:missing])
            self._lookahead = self._lookahead[missing:]
            missing -= len(parts[0])
        while missing:
            chunk = self._read_once(min(missing, self._chunk_size))
            if not chunk:
                break
            parts.append(chunk)
            missing -= len(chunk)
        data = b''.join(parts)
        self._pos += len(data)
        return data

    @override
    def read_all(self) -> bytes:
        parts: list[bytes] = [self._lookahead]
        self._lookahead = b''
        while chunk := self._read_once(self._chunk_size):
            parts.append(chunk)
        data = b''.join(parts)
        self._pos += len(data)
        return data
