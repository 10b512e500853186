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
from argparse import ArgumentParser, Namespace

from structlog import get_logger

logger = get_logger()


def create_parser() -> ArgumentParser:
    from nodestate.cli.util import create_parser
    parser = create_parser()
    parser.add_argument('schema', help='Type of the value, e.g. "map[u128,i128]"')
    parser.add_argument('path', help='State file to read')
    parser.add_argument('--indent', type=int, default=None, help='Indentation of the JSON output')
    return parser


def execute(args: Namespace) -> int:
    from nodestate.cli.schema import SchemaError, parse_schema
    from nodestate.conf.get_settings import get_global_settings
    from nodestate.serialization import Deserializer, SerializationError

    log = logger.new(path=args.path)

    try:
        codec = parse_schema(args.schema)
    except SchemaError as e:
        log.error('invalid schema', error=str(e))
        return 1

    settings = get_global_settings()
    try:
        source = open(args.path, 'rb')
    except OSError as e:
        log.error('cannot open state file', error=str(e))
        return 1

    with source:
        deserializer = Deserializer.build_stream_deserializer(source, chunk_size=settings.READ_CHUNK_SIZE)
        try:
            value = codec.decoder(deserializer)
            deserializer.finalize()
        except SerializationError as e:
            log.error('cannot decode state', offset=deserializer.cur_pos(), error=repr(e))
            return 1

    if value is None:
        log.warning('state file is empty', schema=args.schema)
        print('null')
        return 0

    print(json.dumps(codec.to_json(value), indent=args.indent))
    return 0


def main() -> int:
    parser = create_parser()
    args = parser.parse_args()
    return execute(args)
