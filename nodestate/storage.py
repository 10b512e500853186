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

from __future__ import annotations

import os
import tempfile
from typing import Iterator, Optional, TypeVar

from structlog import get_logger
from typing_extensions import assert_never

from nodestate.conf.get_settings import get_global_settings
from nodestate.conf.settings import NodeStateSettings
from nodestate.serialization import Deserializer, SerializationError, Serializer
from nodestate.serialization.compound_encoding import Decoder, Encoder

logger = get_logger()

T = TypeVar('T')

_TMP_PREFIX = '.tmp-'


class StateStorage:
    """ Directory of state files, each file holds exactly one top-level value.

    There is no type information on disk, the caller must use the same encoder/decoder pair for a given name. Files are
    replaced atomically, a crash during `save` leaves the previous version in place.
    """

    def __init__(
        self,
        path: str | tempfile.TemporaryDirectory,
        *,
        settings: Optional[NodeStateSettings] = None,
    ) -> None:
        self.log = logger.new()
        self._settings = settings or get_global_settings()
        # We have to keep a reference to the TemporaryDirectory because it is cleaned up when garbage collected.
        self.path, self.temp_dir = self._get_path_and_temp_dir(path)
        os.makedirs(self.path, exist_ok=True)
        self.log.debug('state storage ready', path=self.path)

    @staticmethod
    def create_temp(*, settings: Optional[NodeStateSettings] = None) -> StateStorage:
        """Create a StateStorage instance with a temporary directory."""
        return StateStorage(path=tempfile.TemporaryDirectory(), settings=settings)

    @staticmethod
    def _get_path_and_temp_dir(
        path: str | tempfile.TemporaryDirectory,
    ) -> tuple[str, tempfile.TemporaryDirectory | None]:
        match path:
            case str():
                return path, None
            case tempfile.TemporaryDirectory():
                return path.name, path
            case _:
                assert_never(path)

    def _get_filepath(self, name: str) -> str:
        if not name or name in ('.', '..') or os.sep in name or '/' in name or name.startswith(_TMP_PREFIX):
            raise ValueError(f'invalid state name: {name!r}')
        return os.path.join(self.path, name + self._settings.STATE_FILE_SUFFIX)

    def save(self, name: str, value: T, encoder: Encoder[T]) -> int:
        """Write `value` as the only content of the state file `name`, returns the number of bytes written."""
        filepath = self._get_filepath(name)
        fd, tmp_filepath = tempfile.mkstemp(prefix=_TMP_PREFIX, dir=self.path)
        try:
            with os.fdopen(fd, 'wb') as sink:
                serializer = Serializer.build_stream_serializer(sink)
                size = encoder(serializer, value)
                serializer.flush()
                if self._settings.FSYNC_ON_SAVE:
                    os.fsync(sink.fileno())
            os.replace(tmp_filepath, filepath)
        except BaseException:
            os.unlink(tmp_filepath)
            raise
        self.log.debug('state saved', name=name, size=size)
        return size

    def load(self, name: str, decoder: Decoder[T]) -> Optional[T]:
        """Read the state file `name`, returns None when it doesn't exist.

        An empty file is decoded like any empty stream: None for fixed-size values, empty containers for sequences and
        mappings. Bytes left after the value are an error.
        """
        filepath = self._get_filepath(name)
        try:
            source = open(filepath, 'rb')
        except FileNotFoundError:
            return None
        with source:
            deserializer = Deserializer.build_stream_deserializer(
                source,
                chunk_size=self._settings.READ_CHUNK_SIZE,
            )
            try:
                value = decoder(deserializer)
                deserializer.finalize()
            except SerializationError as e:
                self.log.error('corrupt state file', name=name, path=filepath, offset=deserializer.cur_pos(),
                               error=repr(e))
                raise
        self.log.debug('state loaded', name=name, size=deserializer.cur_pos())
        return value

    def exists(self, name: str) -> bool:
        return os.path.isfile(self._get_filepath(name))

    def remove(self, name: str) -> None:
        """Remove the state file `name`, it is not an error if it doesn't exist."""
        try:
            os.unlink(self._get_filepath(name))
        except FileNotFoundError:
            pass

    def names(self) -> Iterator[str]:
        """Iterate over the names of the stored states, in no particular order."""
        suffix = self._settings.STATE_FILE_SUFFIX
        for entry in os.scandir(self.path):
            if not entry.is_file() or entry.name.startswith(_TMP_PREFIX):
                continue
            if suffix:
                if not entry.name.endswith(suffix):
                    continue
                yield entry.name[:-len(suffix)]
            else:
                yield entry.name
