import io
from typing import NamedTuple, Optional

from nodestate.serialization.types import Buffer

# first byte of every packed function produced by FakePacker
PACKED_MAGIC = 0xA5


class FakeFunction(NamedTuple):
    name: str
    body: bytes


class FakeCompiledFunction(NamedTuple):
    func: FakeFunction


class FakePacker:
    """Packs a function as [magic][name length][name][body], unpack returns None for anything else."""

    def pack(self, func: FakeFunction) -> bytes:
        name = func.name.encode('ascii')
        return bytes([PACKED_MAGIC, len(name)]) + name + func.body

    def unpack(self, data: Buffer) -> Optional[FakeFunction]:
        data = bytes(data)
        if len(data) < 2 or data[0] != PACKED_MAGIC or len(data) < 2 + data[1]:
            return None
        name_len = data[1]
        try:
            name = data[2:2 + name_len].decode('ascii')
        except UnicodeDecodeError:
            return None
        return FakeFunction(name=name, body=data[2 + name_len:])


class FakeCompiler:
    """Rejects functions with an empty body."""

    def __init__(self) -> None:
        self.compiled: list[FakeFunction] = []

    def compile(self, func: FakeFunction) -> Optional[FakeCompiledFunction]:
        if not func.body:
            return None
        self.compiled.append(func)
        return FakeCompiledFunction(func=func)


class ShortReadStream(io.RawIOBase):
    """Raw binary stream that returns at most `max_read` bytes per read call."""

    def __init__(self, data: bytes, max_read: int = 1) -> None:
        self._data = data
        self._pos = 0
        self._max_read = max_read
        self.read_calls = 0

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        self.read_calls += 1
        size = min(len(buffer), self._max_read, len(self._data) - self._pos)
        buffer[:size] = self._data[self._pos:self._pos + size]
        self._pos += size
        return size


class FailingStream(io.RawIOBase):
    """Raw binary stream that fails every read and write with the given error."""

    def __init__(self, error: OSError) -> None:
        self._error = error

    def readable(self) -> bool:
        return True

    def writable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        raise self._error

    def write(self, data) -> int:
        raise self._error
