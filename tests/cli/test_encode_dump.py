import json
import os
from contextlib import redirect_stdout
from io import BytesIO, StringIO, TextIOWrapper
from unittest.mock import patch

from structlog.testing import capture_logs

from nodestate.cli import dump_state, encode_state
from tests import unittest


class EncodeDumpStateTest(unittest.TestCase):
    def setUp(self):
        super().setUp()
        self.tmpdir = self.mkdtemp()

    def _write_json(self, value) -> str:
        path = os.path.join(self.tmpdir, 'input.json')
        with open(path, 'w') as f:
            json.dump(value, f)
        return path

    def _encode(self, schema: str, value) -> tuple[int, list[dict], str]:
        output = os.path.join(self.tmpdir, 'state.bin')
        parser = encode_state.create_parser()
        args = parser.parse_args([schema, output, '--input', self._write_json(value)])
        with capture_logs() as logs:
            ret = encode_state.execute(args)
        return ret, logs, output

    def _dump(self, schema: str, path: str) -> tuple[int, list[dict], str]:
        parser = dump_state.create_parser()
        args = parser.parse_args([schema, path])
        f = StringIO()
        with capture_logs() as logs:
            with redirect_stdout(f):
                ret = dump_state.execute(args)
        return ret, logs, f.getvalue()

    def test_balances(self):
        balances = {str(i): self.rng.randrange(-2**127, 2**127) for i in range(20)}
        ret, logs, output = self._encode('map[u128,i128]', balances)
        self.assertEqual(ret, 0)
        self.assertEqual(logs[-1]['event'], 'state encoded')
        self.assertEqual(logs[-1]['size'], 20 * 32)
        self.assertEqual(os.path.getsize(output), 20 * 32)

        ret, logs, out = self._dump('map[u128,i128]', output)
        self.assertEqual(ret, 0)
        self.assertEqual(json.loads(out), balances)

    def test_shared_list(self):
        ret, _, output = self._encode('shared[list[u8]]', [1, 2, 255])
        self.assertEqual(ret, 0)
        with open(output, 'rb') as f:
            self.assertEqual(f.read(), b'\x01\x02\xff')

        ret, _, out = self._dump('shared[list[u8]]', output)
        self.assertEqual(ret, 0)
        self.assertEqual(json.loads(out), [1, 2, 255])

    def test_encode_from_stdin(self):
        output = os.path.join(self.tmpdir, 'height.bin')
        parser = encode_state.create_parser()
        args = parser.parse_args(['u128', output])
        self.assertTrue(args.input.is_stdin)
        with capture_logs():
            with patch('sys.stdin', TextIOWrapper(BytesIO(b'1234'))):
                self.assertEqual(encode_state.execute(args), 0)
        with open(output, 'rb') as f:
            self.assertEqual(f.read(), (1234).to_bytes(16, 'little'))

    def test_encode_invalid_schema(self):
        ret, logs, output = self._encode('list[list[u8]]', [[1]])
        self.assertEqual(ret, 1)
        self.assertEqual(logs[-1]['event'], 'cannot encode state')
        self.assertFalse(os.path.exists(output))

    def test_encode_out_of_range(self):
        ret, logs, output = self._encode('u8', 256)
        self.assertEqual(ret, 1)
        self.assertIn('out of the u8 range', logs[-1]['error'])
        self.assertFalse(os.path.exists(output))

    def test_encode_missing_input(self):
        output = os.path.join(self.tmpdir, 'state.bin')
        parser = encode_state.create_parser()
        args = parser.parse_args(['u8', output, '--input', os.path.join(self.tmpdir, 'missing.json')])
        with capture_logs() as logs:
            self.assertEqual(encode_state.execute(args), 1)
        self.assertIn('missing.json', logs[-1]['error'])

    def test_encode_invalid_json(self):
        path = os.path.join(self.tmpdir, 'input.json')
        with open(path, 'w') as f:
            f.write('{not json')
        parser = encode_state.create_parser()
        args = parser.parse_args(['u8', os.path.join(self.tmpdir, 'state.bin'), '--input', path])
        with capture_logs() as logs:
            self.assertEqual(encode_state.execute(args), 1)
        self.assertEqual(logs[-1]['log_level'], 'error')

    def test_encode_missing_output_dir(self):
        output = os.path.join(self.tmpdir, 'missing-dir', 'state.bin')
        parser = encode_state.create_parser()
        args = parser.parse_args(['u8', output, '--input', self._write_json(1)])
        with capture_logs() as logs:
            self.assertEqual(encode_state.execute(args), 1)
        self.assertEqual(logs[-1]['event'], 'cannot write state file')
        self.assertFalse(os.path.exists(output))

    def test_encode_failed_write_keeps_previous_file(self):
        ret, _, output = self._encode('list[u8]', [1, 2])
        self.assertEqual(ret, 0)
        parser = encode_state.create_parser()
        args = parser.parse_args(['list[u8]', output, '--input', self._write_json([3, 4, 5])])
        with patch('os.replace', side_effect=OSError('disk full')):
            with capture_logs() as logs:
                self.assertEqual(encode_state.execute(args), 1)
        self.assertEqual(logs[-1]['event'], 'cannot write state file')
        self.assertEqual(logs[-1]['error'], 'disk full')
        with open(output, 'rb') as f:
            self.assertEqual(f.read(), b'\x01\x02')
        self.assertEqual(sorted(os.listdir(self.tmpdir)), ['input.json', 'state.bin'])

    def test_dump_empty_file(self):
        path = os.path.join(self.tmpdir, 'empty.bin')
        open(path, 'wb').close()

        ret, logs, out = self._dump('u128', path)
        self.assertEqual(ret, 0)
        self.assertEqual(out.strip(), 'null')
        self.assertEqual(logs[-1]['event'], 'state file is empty')

        ret, _, out = self._dump('list[u128]', path)
        self.assertEqual(ret, 0)
        self.assertEqual(json.loads(out), [])

    def test_dump_truncated(self):
        path = os.path.join(self.tmpdir, 'truncated.bin')
        with open(path, 'wb') as f:
            f.write(b'\x00' * 20)

        ret, logs, out = self._dump('list[u128]', path)
        self.assertEqual(ret, 1)
        self.assertEqual(out, '')
        self.assertEqual(logs[-1]['event'], 'cannot decode state')
        self.assertIn('TruncatedDataError', logs[-1]['error'])

    def test_dump_trailing_data(self):
        path = os.path.join(self.tmpdir, 'trailing.bin')
        with open(path, 'wb') as f:
            f.write(b'\x01\x02')

        ret, logs, _ = self._dump('u8', path)
        self.assertEqual(ret, 1)
        self.assertIn('TrailingDataError', logs[-1]['error'])

    def test_dump_missing_file(self):
        ret, logs, _ = self._dump('u8', os.path.join(self.tmpdir, 'missing.bin'))
        self.assertEqual(ret, 1)
        self.assertEqual(logs[-1]['event'], 'cannot open state file')

    def test_dump_indent(self):
        _, _, output = self._encode('list[u8]', [7])
        parser = dump_state.create_parser()
        args = parser.parse_args(['list[u8]', output, '--indent', '2'])
        f = StringIO()
        with capture_logs():
            with redirect_stdout(f):
                self.assertEqual(dump_state.execute(args), 0)
        self.assertEqual(f.getvalue(), '[\n  7\n]\n')
