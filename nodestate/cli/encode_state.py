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

import json
import os
import tempfile
from argparse import ArgumentParser, Namespace
from typing import TYPE_CHECKING, Any

from structlog import get_logger

if TYPE_CHECKING:
    from nodestate.cli.schema import SchemaCodec

logger = get_logger()


def create_parser() -> ArgumentParser:
    from nodestate.cli.util import create_parser
    from nodestate.files import STDIN_TOKEN, FileInput
    parser = create_parser()
    parser.add_argument('schema', help='Type of the value, e.g. "map[u128,i128]"')
    parser.add_argument('output', help='State file to write')
    parser.add_argument('--input', type=FileInput.from_str, default=FileInput.from_str(STDIN_TOKEN),
                        help='JSON file with the value, "-" for stdin (default)')
    return parser


def _write_state_file(output: str, codec: 'SchemaCodec', value: Any) -> int:
    """Encode `value` into `output`, the file is only replaced once the new content is completely written."""
    from nodestate.serialization import Serializer

    fd, tmp_filepath = tempfile.mkstemp(prefix='.tmp-', dir=os.path.dirname(os.path.abspath(output)))
    try:
        with os.fdopen(fd, 'wb') as sink:
            serializer = Serializer.build_stream_serializer(sink)
            size = codec.encoder(serializer, value)
            serializer.flush()
        os.replace(tmp_filepath, output)
    except BaseException:
        os.unlink(tmp_filepath)
        raise
    return size


def execute(args: Namespace) -> int:
    from nodestate.cli.schema import SchemaError, parse_schema
    from nodestate.exception import InputReadError

    log = logger.new(input=str(args.input), output=args.output)

    try:
        codec = parse_schema(args.schema)
        text = args.input.read_to_string()
        value = codec.from_json(json.loads(text))
    except (SchemaError, InputReadError, json.JSONDecodeError) as e:
        log.error('cannot encode state', error=str(e))
        return 1

    try:
        size = _write_state_file(args.output, codec, value)
    except OSError as e:
        log.error('cannot write state file', error=str(e))
        return 1

    log.info('state encoded', schema=args.schema, size=size)
    return 0


def main() -> int:
    parser = create_parser()
    args = parser.parse_args()
    return execute(args)
