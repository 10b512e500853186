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

from typing import Optional

from pydantic import field_validator

from nodestate.utils import pydantic


class NodeStateSettings(pydantic.BaseModel):
    # Maximum number of bytes requested from the underlying stream by a single read call.
    READ_CHUNK_SIZE: int = 65536

    # Upper bound of the length prefix of a compiled function record, `None` means no limit. The on-disk format
    # allows any 16-byte unsigned length, a limit only protects against corrupt prefixes.
    MAX_FUNCTION_PAYLOAD_LENGTH: Optional[int] = None

    # Whether to fsync state files before replacing the previous version.
    FSYNC_ON_SAVE: bool = True

    # Appended to the name of every state file inside a state directory.
    STATE_FILE_SUFFIX: str = ''

    @field_validator('READ_CHUNK_SIZE')
    @classmethod
    def _validate_read_chunk_size(cls, read_chunk_size: int) -> int:
        if read_chunk_size <= 0:
            raise ValueError(f'READ_CHUNK_SIZE must be positive, got {read_chunk_size}')
        return read_chunk_size

    @field_validator('MAX_FUNCTION_PAYLOAD_LENGTH')
    @classmethod
    def _validate_max_function_payload_length(cls, max_length: Optional[int]) -> Optional[int]:
        if max_length is not None and max_length <= 0:
            raise ValueError(f'MAX_FUNCTION_PAYLOAD_LENGTH must be positive, got {max_length}')
        return max_length

    @field_validator('STATE_FILE_SUFFIX')
    @classmethod
    def _validate_state_file_suffix(cls, suffix: str) -> str:
        if '/' in suffix or '\\' in suffix:
            raise ValueError('STATE_FILE_SUFFIX cannot contain a path separator')
        return suffix

    @classmethod
    def from_yaml(cls, *, filepath: str) -> 'NodeStateSettings':
        """Takes a filepath to a yaml file and returns a validated NodeStateSettings instance."""
        from nodestate.utils.yaml import model_from_extended_yaml
        return model_from_extended_yaml(cls, filepath=filepath)
