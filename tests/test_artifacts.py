# SPDX-License-Identifier: BSD-2-Clause
import tempfile
import unittest

from pathlib import Path

from rtlbench.artifacts import EXTENSION_DIR, TESTBENCH_TEMPLATE, ArtifactBuilder
from rtlbench.config import Vendor
from rtlbench.render import JinjaRunner, RenderResult
from rtlbench.rtl import parse_file


FIXTURES = Path(__file__).parent / "fixtures"

EXTENSION_FILES = ["bridge.c", "bridge.h", "client.c", "client.h", "defines.h", "rtlbench.c", "rtlbench.h"]


class RecordingRunner:
    def __init__(self, calls):
        self.calls = calls

    def launch(self, **kwargs):
        self.calls.append(("launch", kwargs))
        return RenderResult(written=[Path(kwargs["output"]) / Path(kwargs["files"]).name])


class RecordingExporter:
    def __init__(self, calls):
        self.calls = calls

    def export(self, module_name, file_path):
        self.calls.append(("export", {"module_name": module_name, "file_path": file_path}))
        return Path(file_path) / f"{module_name}.json"


class ArtifactBuilderTestCase(unittest.TestCase):
    def test_render_order_and_arguments(self):
        calls = []
        builder = ArtifactBuilder(RecordingRunner(calls), vendor=Vendor.SYNOPSYS)
        dut = RecordingExporter(calls)
        artifacts = builder.build("out", "chip", dut, include_files=["defs.vh"])

        self.assertEqual([c[0] for c in calls], ["launch", "launch", "export"])

        testbench = calls[0][1]
        self.assertEqual(testbench["action"], "compile")
        self.assertEqual(testbench["files"], TESTBENCH_TEMPLATE)
        self.assertEqual(testbench["output"], Path("out"))
        self.assertFalse(testbench["check_for_changes"])
        self.assertTrue(testbench["quiet"])
        self.assertEqual(testbench["options"], {"vendor": "synopsys", "top": "chip", "incl": ["defs.vh"], "dut": dut})

        extension = calls[1][1]
        self.assertEqual(extension["files"], EXTENSION_DIR)
        self.assertEqual(extension["output"], Path("out"))
        self.assertFalse(extension["check_for_changes"])
        self.assertTrue(extension["quiet"])
        self.assertNotIn("options", extension)

        self.assertEqual(calls[2][1], {"module_name": "chip", "file_path": Path("out")})
        self.assertEqual(artifacts.target_definition, Path("out") / "chip.json")
        self.assertEqual(artifacts.testbench, [Path("out") / TESTBENCH_TEMPLATE.name])

    def test_render_chip(self):
        dut = parse_file(FIXTURES / "chip.v").module("chip").to_top_level()
        with tempfile.TemporaryDirectory() as tmp:
            out = Path(tmp)
            artifacts = ArtifactBuilder(JinjaRunner()).build(out, "chip", dut, include_files=["chip_defs.vh"])

            self.assertEqual(artifacts.testbench, [out / "rtlbench.v"])
            self.assertEqual(sorted(p.name for p in artifacts.extension), EXTENSION_FILES)
            self.assertEqual(artifacts.target_definition, out / "chip.json")

            testbench = (out / "rtlbench.v").read_text()
            self.assertIn("module rtlbench;", testbench)
            self.assertIn('`include "chip_defs.vh"', testbench)
            self.assertIn("chip dut (", testbench)
            self.assertIn("reg [7:0] din_drive = 0;", testbench)
            self.assertIn("wire [7:0] dout;", testbench)
            self.assertIn("gpio_drive_en ? gpio_drive : 4'bz;", testbench)
            self.assertIn(".dout(dout),", testbench)
            self.assertIn(".gpio(gpio)\n", testbench)
            self.assertIn("$shm_open", testbench)
            self.assertNotIn("$vcdpluson", testbench)

    def test_vendor_preset(self):
        dut = parse_file(FIXTURES / "chip.v").module("chip").to_top_level()
        with tempfile.TemporaryDirectory() as tmp:
            ArtifactBuilder(JinjaRunner(), vendor=Vendor.ICARUS).build(tmp, "chip", dut)
            testbench = (Path(tmp) / "rtlbench.v").read_text()
            self.assertNotIn("$shm_open", testbench)
            self.assertNotIn("$vcdpluson", testbench)
            self.assertIn("$dumpfile", testbench)
            self.assertNotIn("`include", testbench)

    def test_rebuild_is_identical(self):
        dut = parse_file(FIXTURES / "chip.v").module("chip").to_top_level()
        with tempfile.TemporaryDirectory() as tmp:
            out = Path(tmp)
            builder = ArtifactBuilder(JinjaRunner())
            builder.build(out, "chip", dut)
            first = {p.name: p.read_bytes() for p in out.iterdir()}
            (out / "rtlbench.v").write_text("edited by hand")
            builder.build(out, "chip", dut)
            second = {p.name: p.read_bytes() for p in out.iterdir()}
            self.assertEqual(first, second)
