# SPDX-License-Identifier: BSD-2-Clause
import unittest

from pathlib import Path

import pytest

from rtlbench import AmbiguousTopLevel, NoModulesFound
from rtlbench.resolver import resolve_top_level
from rtlbench.rtl import ModuleDecl, VerilogAST, parse_file


FIXTURES = Path(__file__).parent / "fixtures"


class ResolveTopLevelTestCase(unittest.TestCase):
    def test_single_module(self):
        ast = parse_file(FIXTURES / "chip.v")
        self.assertIs(resolve_top_level(ast), ast.module("chip"))

    def test_single_module_ignores_name(self):
        ast = parse_file(FIXTURES / "chip.v")
        self.assertEqual(resolve_top_level(ast, "something_else").name, "chip")

    def test_instantiated_modules_are_not_candidates(self):
        ast = parse_file(FIXTURES / "hierarchy.v")
        self.assertEqual(resolve_top_level(ast).name, "soc")

    def test_ambiguous(self):
        ast = parse_file(FIXTURES / "two_tops.v")
        with self.assertRaises(AmbiguousTopLevel) as cm:
            resolve_top_level(ast)
        self.assertEqual(cm.exception.candidates, ["top_tb", "alu_core"])
        self.assertIn("--top", str(cm.exception))
        self.assertIn("\n  top_tb\n  alu_core", str(cm.exception))

    def test_name_selects_candidate(self):
        ast = parse_file(FIXTURES / "two_tops.v")
        self.assertIs(resolve_top_level(ast, "alu_core"), ast.module("alu_core"))
        self.assertIs(resolve_top_level(ast, "top_tb"), ast.module("top_tb"))

    def test_unknown_name_is_ambiguous(self):
        ast = parse_file(FIXTURES / "two_tops.v")
        with self.assertRaises(AmbiguousTopLevel) as cm:
            resolve_top_level(ast, "missing")
        self.assertEqual(cm.exception.candidates, ["top_tb", "alu_core"])

    def test_name_match_is_case_sensitive(self):
        ast = parse_file(FIXTURES / "two_tops.v")
        with self.assertRaises(AmbiguousTopLevel):
            resolve_top_level(ast, "ALU_CORE")

    def test_falls_back_to_all_modules(self):
        ast = parse_file(FIXTURES / "mutual.v")
        with self.assertRaises(AmbiguousTopLevel) as cm:
            resolve_top_level(ast)
        self.assertEqual(cm.exception.candidates, ["ping", "pong"])
        self.assertEqual(resolve_top_level(ast, "pong").name, "pong")

    def test_no_modules(self):
        ast = parse_file(FIXTURES / "empty.v")
        with self.assertRaises(NoModulesFound) as cm:
            resolve_top_level(ast)
        self.assertEqual(cm.exception.path, FIXTURES / "empty.v")


def test_name_cannot_select_instantiated_module():
    ast = VerilogAST(path=Path("x.v"), modules=[
        ModuleDecl("a", instantiates=["c"]),
        ModuleDecl("b"),
        ModuleDecl("c"),
    ])
    with pytest.raises(AmbiguousTopLevel) as e:
        resolve_top_level(ast, "c")
    assert e.value.candidates == ["a", "b"]
