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
A compiled function is stored as its raw function, bit-packed and prefixed with the packed length.

Layout: [L: u128 little-endian][packed raw function: L bytes]

The packed bits are not byte aligned internally, the packer pads them to whole bytes and the codec treats them as an
opaque buffer. Decoding goes through three steps that can fail independently:

1. reading the buffer, a buffer shorter than L is a truncated record (`TruncatedDataError`);
2. unpacking the bits, failure raises `InvalidDataError` with `InvalidDataCause.MALFORMED_PAYLOAD`;
3. compiling the raw function, failure raises `InvalidDataError` with `InvalidDataCause.UNCOMPILABLE_FUNCTION`.

A stream that is empty where the length prefix would start is a clean end, so a sequence of function slots can be
decoded with `decode_sequence`.

>>> from typing import NamedTuple
>>> class Func(NamedTuple):
...     body: bytes
>>> class Packer:
...     def pack(self, func): return func.body
...     def unpack(self, data): return Func(bytes(data)) if data else None
>>> class Compiler:
...     def compile(self, func): return Compiled(func) if func.body != b'bad' else None
>>> class Compiled(NamedTuple):
...     func: Func

>>> se = Serializer.build_bytes_serializer()
>>> encode_compiled_function(se, Compiled(Func(b'\x01\x02')), packer=Packer())
18
>>> data = bytes(se.finalize())
>>> data.hex()
'020000000000000000000000000000000102'
>>> de = Deserializer.build_bytes_deserializer(data)
>>> decode_compiled_function(de, packer=Packer(), compiler=Compiler())
Compiled(func=Func(body=b'\x01\x02'))

>>> se = Serializer.build_bytes_serializer()
>>> _ = encode_compiled_function(se, Compiled(Func(b'bad')), packer=Packer())
>>> de = Deserializer.build_bytes_deserializer(se.finalize())
>>> try:
...     decode_compiled_function(de, packer=Packer(), compiler=Compiler())
... except InvalidDataError as e:
...     print(e.cause)
InvalidDataCause.UNCOMPILABLE_FUNCTION
"""

from functools import partial
from typing import TYPE_CHECKING, NamedTuple, Optional

from nodestate.function import CompiledFunction, FunctionCompiler, FunctionPacker
from nodestate.serialization import Deserializer, Serializer
from nodestate.serialization.encoding.int import decode_u128, encode_u128
from nodestate.serialization.exceptions import (
    InvalidDataCause,
    InvalidDataError,
    TooLongError,
    TruncatedDataError,
)

from . import Decoder, Encoder

if TYPE_CHECKING:
    from nodestate.conf.settings import NodeStateSettings


def encode_compiled_function(serializer: Serializer, func: CompiledFunction, *, packer: FunctionPacker) -> int:
    """ Encodes the raw function of `func` with a length prefix, returns the number of bytes written.

    This modules's docstring has more details and examples.
    """
    data = packer.pack(func.func)
    written = encode_u128(serializer, len(data))
    written += serializer.write_bytes(data)
    return written


def decode_compiled_function(
    deserializer: Deserializer,
    *,
    packer: FunctionPacker,
    compiler: FunctionCompiler,
    max_length: Optional[int] = None,
) -> Optional[CompiledFunction]:
    """ Decodes a length-prefixed packed function and compiles it.

    When `max_length` is given, a length prefix above it raises TooLongError before the payload is read. This
    modules's docstring has more details and examples.
    """
    length = decode_u128(deserializer)
    if length is None:
        return None
    if max_length is not None and length > max_length:
        raise TooLongError(f'function payload of {length} bytes exceeds the maximum of {max_length}')
    data = deserializer.read_bytes(length, exact=False)
    if len(data) < length:
        raise TruncatedDataError(f'function payload expected {length} bytes, got {len(data)}')
    # XXX: a payload that doesn't unpack and a function the compiler rejects are the same kind of error, the cause
    #      is kept so callers can still tell them apart
    raw_func = packer.unpack(data)
    if raw_func is None:
        raise InvalidDataError('function payload cannot be unpacked', cause=InvalidDataCause.MALFORMED_PAYLOAD)
    compiled_func = compiler.compile(raw_func)
    if compiled_func is None:
        raise InvalidDataError('function cannot be compiled', cause=InvalidDataCause.UNCOMPILABLE_FUNCTION)
    return compiled_func


class FunctionCodec(NamedTuple):
    encoder: Encoder[CompiledFunction]
    decoder: Decoder[CompiledFunction]


def function_codec(
    packer: FunctionPacker,
    compiler: FunctionCompiler,
    settings: Optional['NodeStateSettings'] = None,
) -> FunctionCodec:
    """Bind the collaborators and the configured payload limit into an encoder/decoder pair for one function slot."""
    if settings is None:
        from nodestate.conf.get_settings import get_global_settings
        settings = get_global_settings()
    return FunctionCodec(
        encoder=partial(encode_compiled_function, packer=packer),
        decoder=partial(
            decode_compiled_function,
            packer=packer,
            compiler=compiler,
            max_length=settings.MAX_FUNCTION_PAYLOAD_LENGTH,
        ),
    )
