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

from typing import BinaryIO

from typing_extensions import override

from .serializer import Serializer
from .types import Buffer


class StreamSerializer(Serializer):
    """Serializer that writes to a binary file object.

    The file object is owned by the caller, this class never closes or seeks it.
    """

    def __init__(self, sink: BinaryIO) -> None:
        self._sink = sink
        self._pos: int = 0

    @override
    def cur_pos(self) -> int:
        return self._pos

    @override
    def write_bytes(self, data: Buffer) -> int:
        view = memoryview(data)
        total = len(view)
        # raw (unbuffered) files are allowed to accept only part of the data on each call
        while view:
            written = self._sink.write(view)
            if written is None:
                raise BlockingIOError('sink is not ready for writing')
            view = view[written:]
        self._pos += total
        return total

    @override
    def flush(self) -> None:
        self._sink.flush()
