# SPDX-License-Identifier: BSD-2-Clause
import os
import tempfile
import unittest

from contextlib import redirect_stdout
from io import StringIO
from pathlib import Path
from unittest import mock

import pytest

from rtlbench import RtlBenchError
from rtlbench.cli import run


FIXTURES = Path(__file__).parent / "fixtures"


class MockCommand:
    """Mock command for testing CLI"""

    def __init__(self, config):
        self.config = config

    def build_cli_parser(self, parser):
        parser.add_argument("action", choices=["valid", "error", "unexpected"])

    def run_cli(self, args):
        if args.action == "error":
            raise RtlBenchError("Command error")
        elif args.action == "unexpected":
            raise ValueError("Unexpected error")
        # Valid action does nothing


class TestCLI(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.out = self.root / "out"
        patcher = mock.patch.dict(os.environ, {"RTLBENCH_ROOT": str(self.root)})
        patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self):
        self._tmp.cleanup()

    def run_cli(self, argv):
        with redirect_stdout(StringIO()) as buffer:
            run(argv)
        return buffer.getvalue()

    def run_cli_error(self, argv):
        with redirect_stdout(StringIO()) as buffer:
            with pytest.raises(SystemExit) as systemexit:
                run(argv)
        self.assertEqual(systemexit.value.code, 1)
        return buffer.getvalue()

    def test_build(self):
        output = self.run_cli(["build", str(FIXTURES / "chip.v"), "-o", str(self.out)])
        self.assertIn("Testbench and VPI extension created!", output)
        self.assertIn(f"{self.out}/rtlbench.v", output)
        self.assertTrue((self.out / "rtlbench.v").exists())
        self.assertTrue((self.out / "chip.json").exists())

    def test_default_output_directory(self):
        self.run_cli(["build", str(FIXTURES / "chip.v")])
        self.assertTrue((self.root / "output" / "rtlbench.v").exists())

    def test_missing_rtl_file_argument(self):
        output = self.run_cli_error(["build"])
        self.assertIn("Error while executing `build`: You must supply a path to the top-level RTL file", output)

    def test_rtl_file_does_not_exist(self):
        output = self.run_cli_error(["build", str(self.root / "nope.v"), "-o", str(self.out)])
        self.assertIn("File does not exist", output)
        self.assertFalse(self.out.exists())

    def test_parse_failure(self):
        output = self.run_cli_error(["build", str(FIXTURES / "broken.v"), "-o", str(self.out)])
        self.assertIn("failed to parse", output)

    def test_ambiguous_top_level(self):
        output = self.run_cli_error(["build", str(FIXTURES / "two_tops.v"), "-o", str(self.out)])
        self.assertIn("--top", output)
        self.assertIn("  top_tb\n", output)
        self.assertIn("  alu_core\n", output)
        self.assertFalse(self.out.exists())

        self.run_cli(["build", str(FIXTURES / "two_tops.v"), "-o", str(self.out), "--top", "alu_core"])
        self.assertTrue((self.out / "alu_core.json").exists())

    def test_help(self):
        with redirect_stdout(StringIO()) as buffer:
            with pytest.raises(SystemExit) as systemexit:
                run(["build", "-h"])
        self.assertEqual(systemexit.value.code, 0)
        self.assertIn("--source_dir", buffer.getvalue())

    def test_application_options(self):
        (self.root / "rtlbench.toml").write_text(
            '[rtlbench.build]\n'
            'vendor = "synopsys"\n'
            '\n'
            '[[rtlbench.build.options]]\n'
            'flags = ["--fast"]\n'
            'help = "Run without waveforms"\n'
        )
        self.run_cli(["build", str(FIXTURES / "chip.v"), "-o", str(self.out), "--fast"])
        self.assertIn("$vcdpluson", (self.out / "rtlbench.v").read_text())

    def test_dotenv_executable_override(self):
        (self.root / ".env").write_text("RTLBENCH_IRUN=/opt/cadence/bin/irun\n")
        output = self.run_cli(["build", str(FIXTURES / "chip.v"), "-o", str(self.out)])
        self.assertIn("/opt/cadence/bin/irun ", output)

    def test_invalid_config(self):
        (self.root / "rtlbench.toml").write_text('[rtlbench.build]\nvendor = "modelsim"\n')
        output = self.run_cli_error(["build", str(FIXTURES / "chip.v")])
        self.assertIn("Error while loading rtlbench configuration: Validation error in rtlbench.toml", output)
        self.assertIn("rtlbench.build.vendor", output)
        self.assertNotIn("Traceback", output)

    @mock.patch("rtlbench.cli.get_cls_by_reference")
    def test_command_error(self, mock_get_cls):
        mock_get_cls.return_value = MockCommand
        output = self.run_cli_error(["build", "error"])
        self.assertIn("Error while executing `build`: Command error", output)

    @mock.patch("rtlbench.cli.get_cls_by_reference")
    def test_unexpected_error(self, mock_get_cls):
        mock_get_cls.return_value = MockCommand
        output = self.run_cli_error(["build", "unexpected"])
        self.assertIn("Unexpected error, please report this", output)
        self.assertIn("ValueError: Unexpected error", output)

    def test_custom_step(self):
        (self.root / "rtlbench.toml").write_text('[rtlbench.steps]\nbuild = "tests.test_cli:MockCommand"\n')
        self.run_cli(["build", "valid"])

    def test_unknown_step_module(self):
        (self.root / "rtlbench.toml").write_text('[rtlbench.steps]\nlint = "no_such_module:Lint"\n')
        output = self.run_cli_error(["lint"])
        self.assertIn("Module `no_such_module` was not found", output)

    def test_malformed_config(self):
        (self.root / "rtlbench.toml").write_text("[rtlbench\n")
        output = self.run_cli_error(["build", str(FIXTURES / "chip.v")])
        self.assertIn("has a formatting error", output)
