# SPDX-License-Identifier: BSD-2-Clause
"""
Evaluation of constant Verilog expressions, as found in parameter defaults and
packed ranges.
"""

import ast
import math
import operator
import re

from typing import Mapping, Union

_BASED_NUMBER = re.compile(r"(\d[\d_]*)?\s*'[sS]?([bBoOdDhH])\s*([0-9a-fA-F_]+)")
_DECIMAL = re.compile(r"\b\d[\d_]*\b")
_BASES = {'b': 2, 'o': 8, 'd': 10, 'h': 16}

_BINOPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.floordiv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
    ast.LShift: operator.lshift,
    ast.RShift: operator.rshift,
    ast.BitAnd: operator.and_,
    ast.BitOr: operator.or_,
    ast.BitXor: operator.xor,
}

_UNARYOPS = {
    ast.USub: operator.neg,
    ast.UAdd: operator.pos,
    ast.Invert: operator.invert,
}


def clog2(value: int) -> int:
    "Verilog ``$clog2``"
    if value <= 1:
        return 0
    return math.ceil(math.log2(value))


_FUNCTIONS = {"clog2": clog2}


class ExpressionError(ValueError):
    pass


def _to_python(text: str) -> str:
    def based(m):
        return str(int(m.group(3).replace("_", ""), _BASES[m.group(2).lower()]))

    text = _BASED_NUMBER.sub(based, text)
    text = _DECIMAL.sub(lambda m: m.group(0).replace("_", ""), text)
    text = text.replace("$clog2", "clog2").replace(">>>", ">>").replace("<<<", "<<")
    return text


def evaluate(text: str, env: Mapping[str, Union[int, str]]) -> int:
    """
    Evaluate an integer Verilog constant expression.

    ``env`` maps parameter names to values; only ``int`` values can be referenced.

    Raises:
        ExpressionError: the expression is not a supported constant expression
    """
    try:
        tree = ast.parse(_to_python(text.strip()), mode="eval")
    except SyntaxError as e:
        raise ExpressionError(f"Cannot parse expression `{text}`") from e

    def _eval(node):
        match node:
            case ast.Expression():
                return _eval(node.body)
            case ast.Constant(value=int() as value):
                return value
            case ast.Name(id=name):
                value = env.get(name)
                if not isinstance(value, int):
                    raise ExpressionError(f"Unknown parameter `{name}` in `{text}`")
                return value
            case ast.BinOp(op=op) if type(op) in _BINOPS:
                return _BINOPS[type(op)](_eval(node.left), _eval(node.right))
            case ast.UnaryOp(op=op) if type(op) in _UNARYOPS:
                return _UNARYOPS[type(op)](_eval(node.operand))
            case ast.Call(func=ast.Name(id=fn), args=[arg]) if fn in _FUNCTIONS:
                return _FUNCTIONS[fn](_eval(arg))
            case _:
                raise ExpressionError(f"Unsupported construct in `{text}`")

    try:
        return _eval(tree)
    except ZeroDivisionError as e:
        raise ExpressionError(f"Division by zero in `{text}`") from e
