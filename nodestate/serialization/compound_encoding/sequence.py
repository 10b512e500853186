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
A sequence is written as its elements one after the other, there is no length and no terminator.

Layout: [value_0][value_1]...[value_N-1]<end of stream>

Because nothing marks where the sequence stops, decoding reads elements until the element decoder finds a clean end of
the stream. A sequence therefore owns the rest of its stream: anything written after it would be read as more
elements.

>>> from nodestate.serialization.encoding.int import encode_u8, decode_u8
>>> se = Serializer.build_bytes_serializer()
>>> encode_sequence(se, [1, 2, 3], encode_u8)
3
>>> bytes(se.finalize()).hex()
'010203'

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('010203'))
>>> decode_sequence(de, decode_u8)
[1, 2, 3]

An empty stream is an empty sequence:

>>> decode_sequence(Deserializer.build_bytes_deserializer(b''), decode_u8)
[]

When decoding, the builder can be any compatible collection, it only matters that the collection can be initialized
with a `list[T]`:

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('010203'))
>>> decode_sequence(de, decode_u8, tuple)
(1, 2, 3)
"""

from collections.abc import Iterable
from typing import Callable, TypeVar

from nodestate.serialization import Deserializer, Serializer

from . import Decoder, Encoder

T = TypeVar('T')
R = TypeVar('R')


def encode_sequence(serializer: Serializer, values: Iterable[T], encoder: Encoder[T]) -> int:
    """ Encodes every element in order, returns the total number of bytes written.

    This modules's docstring has more details and examples.
    """
    total = 0
    for value in values:
        total += encoder(serializer, value)
    return total


def decode_sequence(
    deserializer: Deserializer,
    decoder: Decoder[T],
    builder: Callable[[list[T]], R] = list,  # type: ignore[assignment]
) -> R:
    """ Decodes elements until the stream ends.

    The result is never None, an exhausted stream is a valid empty sequence. Errors from the element decoder propagate
    and no partial sequence is returned. The element type cannot be another sequence or mapping: those never report a
    clean end, a ValueError is raised instead of looping forever.
    """
    values: list[T] = []
    pos = deserializer.cur_pos()
    while (value := decoder(deserializer)) is not None:
        new_pos = deserializer.cur_pos()
        if new_pos == pos:
            # only a decoder that also reads up to the end of the stream can succeed without reading anything
            raise ValueError('element decoder did not consume any byte, sequences cannot hold stream-consuming values')
        pos = new_pos
        values.append(value)
    return builder(values)
