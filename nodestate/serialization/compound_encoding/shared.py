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

r"""
A shared handle is encoded exactly as the value it holds, the handle itself adds nothing to the stream.

>>> from nodestate.serialization.encoding.int import encode_u128, decode_u128
>>> se = Serializer.build_bytes_serializer()
>>> encode_shared(se, Shared(7), encode_u128)
16
>>> data = bytes(se.finalize())
>>> data == (7).to_bytes(16, 'little')
True

>>> shared = decode_shared(Deserializer.build_bytes_deserializer(data), decode_u128)
>>> shared
Shared(7)
>>> shared.get()
7

A clean end stays a clean end:

>>> print(decode_shared(Deserializer.build_bytes_deserializer(b''), decode_u128))
None
"""

from typing import Any, Generic, Optional, TypeVar

from nodestate.serialization import Deserializer, Serializer

from . import Decoder, Encoder

T = TypeVar('T')


class Shared(Generic[T]):
    """Read-only handle around a value that several owners can hold.

    Two handles compare equal when their values do, a decoded handle is always a new object.
    """

    __slots__ = ('_value',)

    def __init__(self, value: T) -> None:
        self._value = value

    def get(self) -> T:
        return self._value

    def __repr__(self) -> str:
        return f'Shared({self._value!r})'

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Shared):
            return NotImplemented
        return self._value == other._value

    def __hash__(self) -> int:
        return hash(self._value)


def encode_shared(serializer: Serializer, shared: Shared[T], encoder: Encoder[T]) -> int:
    return encoder(serializer, shared.get())


def decode_shared(deserializer: Deserializer, decoder: Decoder[T]) -> Optional[Shared[T]]:
    value = decoder(deserializer)
    if value is None:
        return None
    return Shared(value)
