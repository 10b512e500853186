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
This module implements encoding of integers with a fixed size, the size and signedness are parametrized.

The encoding format itself is a standard little-endian format, there is no length or type information.

>>> se = Serializer.build_bytes_serializer()
>>> encode_int(se, 0, length=1, signed=True)  # writes 00
1
>>> encode_u8(se, 255)  # writes ff
1
>>> encode_int(se, 1234, length=2, signed=True)  # writes d204
2
>>> encode_int(se, -1234, length=2, signed=True)  # writes 2efb
2
>>> bytes(se.finalize()).hex()
'00ffd2042efb'

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('00ffd2042efb'))
>>> decode_int(de, length=1, signed=True)  # reads 00
0
>>> decode_u8(de)  # reads ff
255
>>> decode_int(de, length=2, signed=True)  # reads d204
1234
>>> decode_int(de, length=2, signed=True)  # reads 2efb
-1234

When nothing is left the decoders return None, which is how containers find their end:

>>> print(decode_int(de, length=2, signed=True))
None

But a partial value is an error:

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('2a00'))
>>> decode_u128(de)
Traceback (most recent call last):
...
nodestate.serialization.exceptions.TruncatedDataError: expected 16 bytes, got 2
"""

from typing import Final, Optional

from nodestate.serialization import Deserializer, Serializer
from nodestate.serialization.exceptions import TruncatedDataError

U8_LENGTH: Final[int] = 1
I128_LENGTH: Final[int] = 16
U128_LENGTH: Final[int] = 16


def encode_int(serializer: Serializer, number: int, *, length: int, signed: bool) -> int:
    """ Encode an int using the given byte-length and signedness, returns the number of bytes written.

    This modules's docstring has more details and examples.
    """
    try:
        data = int.to_bytes(number, length, byteorder='little', signed=signed)
    except OverflowError:
        raise ValueError(f'{number} does not fit in {length} bytes (signed={signed})')
    return serializer.write_bytes(data)


def decode_int(deserializer: Deserializer, *, length: int, signed: bool) -> Optional[int]:
    """ Decode an int using the given byte-length and signedness.

    Returns None if the deserializer was already empty, raises TruncatedDataError when it ends in the middle of the
    value. This modules's docstring has more details and examples.
    """
    data = deserializer.read_bytes(length, exact=False)
    if not data:
        return None
    if len(data) < length:
        raise TruncatedDataError(f'expected {length} bytes, got {len(data)}')
    return int.from_bytes(data, byteorder='little', signed=signed)


def encode_u8(serializer: Serializer, number: int) -> int:
    return encode_int(serializer, number, length=U8_LENGTH, signed=False)


def decode_u8(deserializer: Deserializer) -> Optional[int]:
    return decode_int(deserializer, length=U8_LENGTH, signed=False)


def encode_i128(serializer: Serializer, number: int) -> int:
    return encode_int(serializer, number, length=I128_LENGTH, signed=True)


def decode_i128(deserializer: Deserializer) -> Optional[int]:
    return decode_int(deserializer, length=I128_LENGTH, signed=True)


def encode_u128(serializer: Serializer, number: int) -> int:
    return encode_int(serializer, number, length=U128_LENGTH, signed=False)


def decode_u128(deserializer: Deserializer) -> Optional[int]:
    return decode_int(deserializer, length=U128_LENGTH, signed=False)
