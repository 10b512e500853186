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
Interfaces of the collaborators needed to store compiled functions.

A compiled function is persisted as its raw (uncompiled) form, packed into bits by a `FunctionPacker`, and is compiled
again by a `FunctionCompiler` when it is loaded. Both collaborators live outside of this package, anything implementing
these protocols can be used.
"""

from typing import Optional, Protocol

from nodestate.serialization.types import Buffer


class RawFunction(Protocol):
    """Parsed representation of a function body, opaque to the codecs."""


class CompiledFunction(Protocol):
    """Executable representation of a function, only obtainable from `FunctionCompiler.compile`."""

    @property
    def func(self) -> RawFunction:
        """The raw function this was compiled from."""
        ...


class FunctionPacker(Protocol):
    def pack(self, func: RawFunction) -> bytes:
        """Bit-level encoding of the function, padded to a whole number of bytes."""
        ...

    def unpack(self, data: Buffer) -> Optional[RawFunction]:
        """Inverse of `pack`, returns None if the bits don't describe a function."""
        ...


class FunctionCompiler(Protocol):
    def compile(self, func: RawFunction) -> Optional[CompiledFunction]:
        """Compile a raw function, returns None if it is rejected."""
        ...
