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
from typing import TYPE_CHECKING, BinaryIO

from .types import Buffer

if TYPE_CHECKING:
    from .bytes_serializer import BytesSerializer
    from .stream_serializer import StreamSerializer


class Serializer(ABC):
    """Sequential byte sink used by every encoder.

    Writes only move forward, there is no seek. Every write returns the number of bytes it transferred so encoders
    can report the size of what they wrote.
    """

    def finalize(self) -> Buffer:
        """Get the resulting byte sequence, the serializer cannot be reused after this."""
        raise TypeError('this serializer does not support finalization')

    @abstractmethod
    def cur_pos(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def write_bytes(self, data: Buffer) -> int:
        """Write all of the given bytes and return how many were written."""
        raise NotImplementedError

    def write_byte(self, data: int) -> int:
        """Write a single byte."""
        # int.to_bytes checks for correct range
        return self.write_bytes(int.to_bytes(data, 1, 'little'))

    def flush(self) -> None:
        """Push buffered bytes to the underlying sink, if there is one."""
        pass

    @staticmethod
    def build_bytes_serializer() -> BytesSerializer:
        from .bytes_serializer import BytesSerializer
        return BytesSerializer()

    @staticmethod
    def build_stream_serializer(sink: BinaryIO) -> StreamSerializer:
        from .stream_serializer import StreamSerializer
        return StreamSerializer(sink)
