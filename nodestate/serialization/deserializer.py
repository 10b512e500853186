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

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, BinaryIO, Optional

from .exceptions import TrailingDataError, TruncatedDataError
from .types import Buffer

if TYPE_CHECKING:
    from .bytes_deserializer import BytesDeserializer
    from .stream_deserializer import StreamDeserializer


class Deserializer(ABC):
    """Sequential byte source used by every decoder.

    Reads only move forward. The only signal decoders get about the end of the data is the number of bytes a read
    returned: zero bytes at the start of a value is a clean end, anything short of the requested size after that is a
    truncated record.
    """

    def finalize(self) -> None:
        """Check that all bytes were consumed, the deserializer cannot be used after this."""
        if not self.is_empty():
            raise TrailingDataError('trailing data')

    @staticmethod
    def build_bytes_deserializer(data: Buffer) -> BytesDeserializer:
        from .bytes_deserializer import BytesDeserializer
        return BytesDeserializer(data)

    @staticmethod
    def build_stream_deserializer(source: BinaryIO, *, chunk_size: Optional[int] = None) -> StreamDeserializer:
        from .stream_deserializer import StreamDeserializer
        return StreamDeserializer(source, chunk_size=chunk_size)

    @abstractmethod
    def cur_pos(self) -> int:
        """Number of bytes consumed so far."""
        raise NotImplementedError

    @abstractmethod
    def is_empty(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def _read_up_to(self, n: int) -> bytes:
        """Read at most n bytes, returning fewer only when the source is exhausted."""
        raise NotImplementedError

    def read_bytes(self, n: int, *, exact: bool = True) -> bytes:
        """Read n bytes, when exact=True it errors if there isn't enough data"""
        if n < 0:
            raise ValueError('value cannot be negative')
        data = self._read_up_to(n)
        if exact and len(data) < n:
            raise TruncatedDataError(f'not enough bytes to read: expected {n}, got {len(data)}')
        return data

    def read_byte(self) -> int:
        """Read a single byte as unsigned int."""
        data, = self.read_bytes(1)
        return data

    @abstractmethod
    def read_all(self) -> bytes:
        """Read all bytes until the reader is empty."""
        raise NotImplementedError
