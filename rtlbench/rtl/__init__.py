# SPDX-License-Identifier: BSD-2-Clause
"""RTL source handling for rtlbench.

Example usage::

    from rtlbench.rtl import parse_file

    ast = parse_file("rtl/chip.v", source_dirs=["rtl/include"])
    for mod in ast.top_level_modules:
        print(mod.name, [p.name for p in mod.ports])
"""

from .ast import DIRECTIONS, ModuleDecl, PortDecl, VerilogAST
from .expr import ExpressionError, evaluate
from .parser import parse_file, parse_text

__all__ = [
    "DIRECTIONS",
    "ModuleDecl",
    "PortDecl",
    "VerilogAST",
    "ExpressionError",
    "evaluate",
    "parse_file",
    "parse_text",
]
