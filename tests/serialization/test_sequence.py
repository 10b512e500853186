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

from functools import partial

import pytest

from nodestate.serialization import Deserializer, Serializer, TruncatedDataError
from nodestate.serialization.compound_encoding.mapping import decode_mapping
from nodestate.serialization.compound_encoding.sequence import decode_sequence, encode_sequence
from nodestate.serialization.encoding.int import decode_i128, decode_u8, decode_u128, encode_i128, encode_u128


@pytest.mark.parametrize('values', [
    [],
    [7],
    [0, 1, 2**128 - 1, 5, 5, 3],
    list(range(100)),
])
def test_round_trip_keeps_order(values: list[int]) -> None:
    se = Serializer.build_bytes_serializer()
    written = encode_sequence(se, values, encode_u128)
    data = bytes(se.finalize())
    assert written == len(data) == 16 * len(values)

    de = Deserializer.build_bytes_deserializer(data)
    assert decode_sequence(de, decode_u128) == values
    assert de.is_empty()


def test_no_framing_bytes() -> None:
    se = Serializer.build_bytes_serializer()
    encode_sequence(se, [1, -1], encode_i128)
    assert bytes(se.finalize()) == (1).to_bytes(16, 'little') + (-1).to_bytes(16, 'little', signed=True)


def test_builder() -> None:
    de = Deserializer.build_bytes_deserializer(b'\x03\x01\x02')
    assert decode_sequence(de, decode_u8, tuple) == (3, 1, 2)
    de = Deserializer.build_bytes_deserializer(b'\x03\x01\x03')
    assert decode_sequence(de, decode_u8, frozenset) == frozenset({1, 3})


def test_truncated_element_aborts() -> None:
    se = Serializer.build_bytes_serializer()
    encode_sequence(se, [1, 2, 3], encode_u128)
    data = bytes(se.finalize())[:-1]
    de = Deserializer.build_bytes_deserializer(data)
    with pytest.raises(TruncatedDataError):
        decode_sequence(de, decode_u128)


def test_single_top_level_value_per_stream() -> None:
    # two sequences written back to back: the first one swallows the second
    se = Serializer.build_bytes_serializer()
    encode_sequence(se, [1, 2], encode_u128)
    encode_sequence(se, [3], encode_u128)
    de = Deserializer.build_bytes_deserializer(se.finalize())
    assert decode_sequence(de, decode_u128) == [1, 2, 3]
    assert decode_sequence(de, decode_u128) == []


def test_nested_sequence_is_refused() -> None:
    se = Serializer.build_bytes_serializer()
    encode_sequence(se, [1, 2], encode_u128)
    de = Deserializer.build_bytes_deserializer(se.finalize())
    inner = partial(decode_sequence, decoder=decode_u128)
    with pytest.raises(ValueError):
        decode_sequence(de, inner)


def test_nested_mapping_is_refused() -> None:
    de = Deserializer.build_bytes_deserializer(b'')
    inner = partial(decode_mapping, key_decoder=decode_u8, value_decoder=decode_u8)
    with pytest.raises(ValueError):
        decode_sequence(de, inner)
