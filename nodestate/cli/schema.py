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
Schema strings used by the command line tools to pick a codec.

The on-disk format carries no type information, so the tools need to be told what a state file holds:

    u8 | i128 | u128 | list[S] | map[K,V] | shared[S]

Map keys must be scalars. Lists and maps read until the end of their stream, so they can only appear at the top level
(optionally inside `shared[...]`), never inside another list or map.

>>> codec = parse_schema('map[u8,list[u128]]')
Traceback (most recent call last):
...
nodestate.cli.schema.SchemaError: map values cannot be a list or a map

>>> codec = parse_schema('map[u8, i128]')
>>> codec.from_json({'1': -5})
{1: -5}
"""

import re
from functools import partial
from typing import Any, Callable, Iterator, NamedTuple

from nodestate.serialization.compound_encoding import Decoder, Encoder
from nodestate.serialization.compound_encoding.mapping import decode_mapping, encode_mapping
from nodestate.serialization.compound_encoding.sequence import decode_sequence, encode_sequence
from nodestate.serialization.compound_encoding.shared import Shared, decode_shared, encode_shared
from nodestate.serialization.encoding.int import (
    decode_i128,
    decode_u8,
    decode_u128,
    encode_i128,
    encode_u8,
    encode_u128,
)

_TOKEN_RE = re.compile(r'\s*(?:(\w+)|(.))')


class SchemaError(ValueError):
    """Invalid schema string or value that doesn't match the schema."""


class SchemaCodec(NamedTuple):
    encoder: Encoder[Any]
    decoder: Decoder[Any]
    from_json: Callable[[Any], Any]
    to_json: Callable[[Any], Any]
    # reads until the end of the stream
    greedy: bool = False
    scalar: bool = False


def _int_codec(name: str, encoder: Encoder[int], decoder: Decoder[int], lower: int, upper: int) -> SchemaCodec:
    def from_json(value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise SchemaError(f'{name} expects an integer, got {value!r}')
        if not lower <= value <= upper:
            raise SchemaError(f'{value} is out of the {name} range')
        return value

    return SchemaCodec(encoder=encoder, decoder=decoder, from_json=from_json, to_json=int, scalar=True)


_SCALARS: dict[str, SchemaCodec] = {
    'u8': _int_codec('u8', encode_u8, decode_u8, 0, 2**8 - 1),
    'i128': _int_codec('i128', encode_i128, decode_i128, -2**127, 2**127 - 1),
    'u128': _int_codec('u128', encode_u128, decode_u128, 0, 2**128 - 1),
}


def _list_codec(element: SchemaCodec) -> SchemaCodec:
    if element.greedy:
        raise SchemaError('list elements cannot be a list or a map')

    def from_json(value: Any) -> list[Any]:
        if not isinstance(value, list):
            raise SchemaError(f'expected a list, got {value!r}')
        return [element.from_json(item) for item in value]

    return SchemaCodec(
        encoder=partial(encode_sequence, encoder=element.encoder),
        decoder=partial(decode_sequence, decoder=element.decoder),
        from_json=from_json,
        to_json=lambda values: [element.to_json(item) for item in values],
        greedy=True,
    )


def _map_codec(key: SchemaCodec, value: SchemaCodec) -> SchemaCodec:
    if not key.scalar:
        raise SchemaError('map keys must be scalars')
    if value.greedy:
        raise SchemaError('map values cannot be a list or a map')

    def key_from_json(raw_key: str) -> Any:
        try:
            number = int(raw_key)
        except ValueError:
            raise SchemaError(f'map key {raw_key!r} is not an integer')
        return key.from_json(number)

    def from_json(values: Any) -> dict[Any, Any]:
        if not isinstance(values, dict):
            raise SchemaError(f'expected an object, got {values!r}')
        return {key_from_json(k): value.from_json(v) for k, v in values.items()}

    return SchemaCodec(
        encoder=partial(encode_mapping, key_encoder=key.encoder, value_encoder=value.encoder),
        decoder=partial(decode_mapping, key_decoder=key.decoder, value_decoder=value.decoder),
        from_json=from_json,
        to_json=lambda values: {str(key.to_json(k)): value.to_json(v) for k, v in values.items()},
        greedy=True,
    )


def _shared_codec(inner: SchemaCodec) -> SchemaCodec:
    return SchemaCodec(
        encoder=partial(encode_shared, encoder=inner.encoder),
        decoder=partial(decode_shared, decoder=inner.decoder),
        from_json=lambda value: Shared(inner.from_json(value)),
        to_json=lambda shared: inner.to_json(shared.get()),
        greedy=inner.greedy,
    )


def _tokenize(text: str) -> Iterator[str]:
    pos = 0
    text = text.rstrip()
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        assert match is not None
        yield match.group(1) or match.group(2)
        pos = match.end()


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = list(_tokenize(text))
        self.pos = 0

    def _next(self) -> str:
        if self.pos >= len(self.tokens):
            raise SchemaError(f'unexpected end of schema: {self.text!r}')
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def _expect(self, expected: str) -> None:
        token = self._next()
        if token != expected:
            raise SchemaError(f'expected {expected!r}, got {token!r} in schema {self.text!r}')

    def parse(self) -> SchemaCodec:
        codec = self._parse_schema()
        if self.pos != len(self.tokens):
            raise SchemaError(f'unexpected {self.tokens[self.pos]!r} in schema {self.text!r}')
        return codec

    def _parse_schema(self) -> SchemaCodec:
        name = self._next()
        if name in _SCALARS:
            return _SCALARS[name]
        match name:
            case 'list':
                self._expect('[')
                element = self._parse_schema()
                self._expect(']')
                return _list_codec(element)
            case 'map':
                self._expect('[')
                key = self._parse_schema()
                self._expect(',')
                value = self._parse_schema()
                self._expect(']')
                return _map_codec(key, value)
            case 'shared':
                self._expect('[')
                inner = self._parse_schema()
                self._expect(']')
                return _shared_codec(inner)
            case _:
                raise SchemaError(f'unknown type {name!r} in schema {self.text!r}')


def parse_schema(text: str) -> SchemaCodec:
    """Build the codec described by a schema string, raises SchemaError if it is invalid."""
    return _Parser(text).parse()
