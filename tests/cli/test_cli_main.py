import unittest
from contextlib import redirect_stdout
from io import StringIO
from unittest.mock import patch

import structlog
from structlog.testing import capture_logs

from nodestate.cli import main
from nodestate.cli.util import (
    LoggingOptions,
    LoggingOutput,
    build_logging_config,
    process_logging_options,
    process_logging_output,
)


class CliMainTest(unittest.TestCase):
    def test_init(self):
        # basically making sure importing works
        cli = main.CliManager()

        # Help method only prints on the screen
        # So just making sure it has no errors
        f = StringIO()
        with capture_logs():
            with redirect_stdout(f):
                cli.help()
        # Transforming prints str in array
        output = f.getvalue().strip().splitlines()

        # header, group and one line per command
        self.assertTrue(len(output) >= 4)
        self.assertIn('encode_state', f.getvalue())
        self.assertIn('dump_state', f.getvalue())

    def test_no_command_prints_help(self):
        cli = main.CliManager()
        f = StringIO()
        with patch('sys.argv', ['nodestate-cli']):
            with redirect_stdout(f):
                self.assertEqual(cli.execute_from_command_line(), 0)
        self.assertIn('Available subcommands', f.getvalue())

    def test_unknown_command(self):
        cli = main.CliManager()
        f = StringIO()
        with patch('sys.argv', ['nodestate-cli', 'run_node']):
            with redirect_stdout(f):
                self.assertEqual(cli.execute_from_command_line(), -1)
        self.assertIn('Unknown command: "run_node"', f.getvalue())


class LoggingArgsTest(unittest.TestCase):
    def test_default_output(self):
        argv = ['u128', 'state.bin']
        self.assertEqual(process_logging_output(argv), LoggingOutput.PRETTY)
        self.assertEqual(argv, ['u128', 'state.bin'])

    def test_json_logs_and_debug(self):
        argv = ['--json-logs', 'u128', '--debug', 'state.bin']
        self.assertEqual(process_logging_output(argv), LoggingOutput.JSON)
        self.assertEqual(process_logging_options(argv), LoggingOptions(debug=True))
        self.assertEqual(argv, ['u128', 'state.bin'])

    def test_disable_logs(self):
        argv = ['--disable-logs', 'u128', 'state.bin']
        self.assertEqual(process_logging_output(argv), LoggingOutput.NULL)
        self.assertEqual(process_logging_options(argv), LoggingOptions(debug=False))

    def test_logging_config_outputs(self):
        for output, handler in [
            (LoggingOutput.NULL, 'null'),
            (LoggingOutput.PRETTY, 'pretty'),
            (LoggingOutput.JSON, 'json'),
        ]:
            config = build_logging_config(logging_output=output, logging_options=LoggingOptions(debug=False))
            self.assertEqual(config['loggers'][''], {'handlers': [handler], 'level': 'INFO'})

    def test_logging_config_debug_and_stderr(self):
        config = build_logging_config(logging_output=LoggingOutput.PRETTY, logging_options=LoggingOptions(debug=True))
        self.assertEqual(config['loggers']['']['level'], 'DEBUG')
        self.assertEqual(config['handlers']['pretty']['stream'], 'ext://sys.stderr')
        self.assertEqual(config['handlers']['json']['stream'], 'ext://sys.stderr')
        self.assertIsInstance(config['formatters']['pretty']['processor'], structlog.dev.ConsoleRenderer)


if __name__ == '__main__':
    unittest.main()
