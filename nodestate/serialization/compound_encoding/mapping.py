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
A mapping is written as its keys interleaved with their values, there is no length and no terminator.

Layout: [key_0][value_0]...[key_N-1][value_N-1]<end of stream>

The order in which pairs are written is the iteration order of the mapping, readers must not rely on it. Decoding reads
pairs until a key decoder finds a clean end of the stream, so, like a sequence, a mapping owns the rest of its stream. A
key that is not followed by a value is a truncated record, not a valid end.

>>> from nodestate.serialization.encoding.int import encode_u8, decode_u8, encode_i128, decode_i128
>>> se = Serializer.build_bytes_serializer()
>>> encode_mapping(se, {1: -1, 2: 2}, encode_u8, encode_i128)
34
>>> data = bytes(se.finalize())
>>> data[:17].hex()
'01ffffffffffffffffffffffffffffffff'

>>> de = Deserializer.build_bytes_deserializer(data)
>>> decode_mapping(de, decode_u8, decode_i128)
{1: -1, 2: 2}

If a key shows up more than once the last value wins:

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('0a0b0a0c'))
>>> decode_mapping(de, decode_u8, decode_u8)
{10: 12}

A key without its value:

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('0a0b0a'))
>>> decode_mapping(de, decode_u8, decode_u8)
Traceback (most recent call last):
...
nodestate.serialization.exceptions.TruncatedDataError: key without a value
"""

from collections.abc import Mapping
from typing import Callable, TypeVar

from nodestate.serialization import Deserializer, Serializer
from nodestate.serialization.exceptions import TruncatedDataError

from . import Decoder, Encoder

KT = TypeVar('KT')
VT = TypeVar('VT')
R = TypeVar('R')


def encode_mapping(
    serializer: Serializer,
    values_mapping: Mapping[KT, VT],
    key_encoder: Encoder[KT],
    value_encoder: Encoder[VT],
) -> int:
    total = 0
    for key, value in values_mapping.items():
        total += key_encoder(serializer, key)
        total += value_encoder(serializer, value)
    serializer.flush()
    return total


def decode_mapping(
    deserializer: Deserializer,
    key_decoder: Decoder[KT],
    value_decoder: Decoder[VT],
    mapping_builder: Callable[[dict[KT, VT]], R] = dict,  # type: ignore[assignment]
) -> R:
    values: dict[KT, VT] = {}
    pos = deserializer.cur_pos()
    while (key := key_decoder(deserializer)) is not None:
        if deserializer.cur_pos() == pos:
            raise ValueError('key decoder did not consume any byte, mapping keys cannot hold stream-consuming values')
        value = value_decoder(deserializer)
        if value is None:
            raise TruncatedDataError('key without a value')
        values[key] = value
        pos = deserializer.cur_pos()
    return mapping_builder(values)
