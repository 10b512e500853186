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

from enum import Enum, unique

from nodestate.exception import NodeStateError


class SerializationError(NodeStateError):
    """Base class of every error raised while encoding or decoding a value."""


class TruncatedDataError(SerializationError):
    """The stream ended in the middle of a record.

    Raised for a fixed-width value that got 1..width-1 bytes, for a key that is not followed by its value and for a
    payload shorter than its length prefix. A stream that ends exactly on a record boundary is a clean end, not an
    error.
    """


class TrailingDataError(SerializationError):
    """There are bytes left after the value was decoded."""


class TooLongError(SerializationError):
    """A declared length is bigger than the allowed maximum."""


@unique
class InvalidDataCause(Enum):
    MALFORMED_PAYLOAD = 'malformed-payload'
    UNCOMPILABLE_FUNCTION = 'uncompilable-function'


class InvalidDataError(SerializationError):
    """A complete record was read but its content was rejected.

    Both causes are the same kind of error for callers, the `cause` attribute tells them apart.
    """

    def __init__(self, message: str, *, cause: InvalidDataCause) -> None:
        super().__init__(message)
        self.cause = cause
