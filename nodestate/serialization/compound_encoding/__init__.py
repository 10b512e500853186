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
This module was made to hold compound encoding implementations.

Compound encoders are encoders that are generic in some way and will delegate the encoding of some portion to another
encoder. For example a `list[T]` encoder writes the elements one after the other and delegates each of them to an
encoder that knows how to encode `T`.

The general organization should be that each submodule `x` deals with a single type and look like this:

    def encode_x(serializer: Serializer, value: ValueType, ...config params...) -> int:
        ...

    def decode_x(deserializer: Deserializer, ...config params...) -> Optional[ValueType]:
        ...

The element encoders/decoders are config params, they are bound once with `functools.partial` when a codec for a
concrete type is assembled, for example a `dict[int, list[int]]` codec:

    encode_state = partial(encode_mapping, key_encoder=encode_u128, value_encoder=...)

Submodules should not have to take into consideration how types are mapped to encoders.
"""

from typing import Optional, Protocol, TypeVar

from nodestate.serialization.deserializer import Deserializer
from nodestate.serialization.serializer import Serializer

T_co = TypeVar('T_co', covariant=True)
T_contra = TypeVar('T_contra', contravariant=True)


class Decoder(Protocol[T_co]):
    def __call__(self, deserializer: Deserializer, /) -> Optional[T_co]:
        ...


class Encoder(Protocol[T_contra]):
    def __call__(self, serializer: Serializer, value: T_contra, /) -> int:
        ...
