# SPDX-License-Identifier: BSD-2-Clause
"""
Module level Verilog/SystemVerilog parser.

This is not a full language front end. It finds module declarations, their
parameters and ports, and which modules of the file instantiate which, which is
all that top-level resolution and pin export need.
"""

import logging
import re

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .ast import DIRECTIONS, ModuleDecl, PortDecl, VerilogAST
from .expr import ExpressionError, evaluate

logger = logging.getLogger(__name__)

MAX_INCLUDE_DEPTH = 16

_LEXICAL_RE = re.compile(r'(`include\s+"[^"\n]*")|("(?:\\.|[^"\\\n])*")|//[^\n]*|/\*.*?\*/', re.DOTALL)
_LITERAL_RE = re.compile(r'"@(\d+)"')
_INCLUDE_RE = re.compile(r'`include\s+"([^"]+)"')
_DEFINE_RE = re.compile(r"^[ \t]*`define[ \t]+([A-Za-z_]\w*)(?![\w(])[ \t]*([^\n]*)$", re.MULTILINE)
_MACRO_USE_RE = re.compile(r"`([A-Za-z_]\w*)")
_MODULE_TOKEN_RE = re.compile(r"\b(?:(macromodule|module)\s+(?:(?:automatic|static)\s+)?([A-Za-z_]\w*)|endmodule)\b")
_PARAM_STMT_RE = re.compile(r"\b(parameter|localparam)\b([^;]*);")
_BODY_PORT_RE = re.compile(r"(?:^|;)\s*(input|output|inout)\b([^;]*)(?=;)", re.MULTILINE)
_RANGE_RE = re.compile(r"\[([^\]:]+):([^\]]+)\]")
_DECL_NAME_RE = re.compile(r"^(.*?)\b([A-Za-z_]\w*)\s*((?:\[[^\]]*\]\s*)*)$", re.DOTALL)


def _strip_comments(text: str, literals: List[str]) -> str:
    """
    Remove comments, and set string literals aside into ``literals``.

    Each literal is replaced by a ``"@<index>"`` placeholder so that nothing
    inside it is taken for a comment, a keyword or a declaration. The file
    names of `include directives are left in place.
    """
    def _replace(m):
        if m.group(1):
            return m.group(1)
        if m.group(2):
            literals.append(m.group(2))
            return f'"@{len(literals) - 1}"'
        # Keep line structure so that body declarations can still be matched per line
        return "\n" * m.group(0).count("\n")

    return _LEXICAL_RE.sub(_replace, text)


def _restore_literals(text: str, literals: Sequence[str]) -> str:
    return _LITERAL_RE.sub(lambda m: literals[int(m.group(1))], text)


def _expand_includes(text: str, path: Path, source_dirs: Sequence[Path], literals: List[str],
                     depth: int = 0) -> str:
    """Inline `include directives, searching the including file's directory then each source dir"""
    if depth >= MAX_INCLUDE_DEPTH:
        logger.warning(f"Include depth limit reached in {path}, not expanding further")
        return text

    def _include(m):
        name = m.group(1)
        for d in [path.parent, *source_dirs]:
            candidate = Path(d) / name
            if candidate.is_file():
                logger.debug(f"Including {candidate} from {path}")
                included = _strip_comments(candidate.read_text(), literals)
                return _expand_includes(included, candidate, source_dirs, literals, depth + 1)
        logger.warning(f"Could not find include file `{name}` (included from {path})")
        return ""

    return _INCLUDE_RE.sub(_include, text)


def _expand_macros(text: str) -> str:
    """Substitute argument-less `define macros, dropping the definitions"""
    defines: Dict[str, str] = {}

    def _collect(m):
        defines[m.group(1)] = m.group(2).strip()
        return ""

    text = _DEFINE_RE.sub(_collect, text)
    if not defines:
        return text
    logger.debug(f"Expanding macros {sorted(defines)}")
    return _MACRO_USE_RE.sub(lambda m: defines.get(m.group(1), m.group(0)), text)


def _balanced(text: str, start: int) -> int:
    """Given the index of an opening parenthesis, return the index just after its match"""
    depth = 0
    for i in range(start, len(text)):
        if text[i] == "(":
            depth += 1
        elif text[i] == ")":
            depth -= 1
            if depth == 0:
                return i + 1
    raise ValueError("unbalanced parentheses")


def _split_top_level(text: str, sep: str = ",") -> List[str]:
    "Split on ``sep`` outside of any (), [] or {} nesting"
    parts = []
    depth = 0
    current = ""
    for c in text:
        if c in "([{":
            depth += 1
        elif c in ")]}":
            depth -= 1
        if c == sep and depth == 0:
            parts.append(current)
            current = ""
        else:
            current += c
    if current.strip():
        parts.append(current)
    return [p.strip() for p in parts if p.strip()]


def _split_header(text: str) -> Tuple[str, str, str]:
    """
    Split the text following a module name into its parameter port list, its
    port list and its body.
    """
    pos = 0
    params = ""
    ports = ""
    m = re.match(r"\s*(?:import\s+[^;]*;\s*)*", text)
    if m:
        pos = m.end()
    if text.startswith("#", pos):
        open_paren = text.index("(", pos)
        end = _balanced(text, open_paren)
        params = text[open_paren + 1:end - 1]
        pos = end
    m = re.match(r"\s*", text[pos:])
    pos += m.end() if m else 0
    if text.startswith("(", pos):
        end = _balanced(text, pos)
        ports = text[pos + 1:end - 1]
        pos = end
    semicolon = text.find(";", pos)
    if semicolon < 0:
        raise ValueError("module header is not terminated")
    return params, ports, text[semicolon + 1:]


def _parse_assignments(text: str, env: Dict[str, Union[int, str]],
                       literals: Sequence[str]) -> Dict[str, Union[int, str]]:
    """Parse ``[parameter] [type] [range] NAME = EXPR`` items, evaluating into ``env``"""
    found: Dict[str, Union[int, str]] = {}
    for item in _split_top_level(text):
        lhs, eq, rhs = item.partition("=")
        if not eq:
            continue
        m = _DECL_NAME_RE.match(lhs.strip())
        if not m:
            continue
        name = m.group(2)
        rhs = _restore_literals(rhs.strip(), literals)
        try:
            value: Union[int, str] = evaluate(rhs, env)
        except ExpressionError:
            logger.debug(f"Parameter {name} = `{rhs}` is not an integer constant")
            value = rhs
        env[name] = value
        found[name] = value
    return found


def _parse_parameters(header_params: str, body: str, literals: Sequence[str]) -> Tuple[Dict[str, Union[int, str]], Dict[str, Union[int, str]]]:
    """Return (overridable parameters, evaluation environment including localparams)"""
    env: Dict[str, Union[int, str]] = {}
    parameters: Dict[str, Union[int, str]] = {}

    # In a parameter port list a bare `NAME = value` continues the previous kind
    kind = "parameter"
    for item in _split_top_level(header_params):
        m = re.match(r"(parameter|localparam)\b(.*)$", item, re.DOTALL)
        if m:
            kind, item = m.group(1), m.group(2)
        found = _parse_assignments(item, env, literals)
        if kind == "parameter":
            parameters.update(found)

    for m in _PARAM_STMT_RE.finditer(body):
        found = _parse_assignments(m.group(2), env, literals)
        if m.group(1) == "parameter" and not header_params:
            parameters.update(found)
    return parameters, env


def _width(prefix: str, env: Dict[str, Union[int, str]], port_name: str) -> int:
    m = _RANGE_RE.search(prefix)
    if not m:
        if re.search(r"\binteger\b", prefix):
            return 32
        return 1
    try:
        msb = evaluate(m.group(1), env)
        lsb = evaluate(m.group(2), env)
    except ExpressionError as e:
        logger.warning(f"Cannot work out the width of port `{port_name}`, assuming 1 bit: {e}")
        return 1
    return abs(msb - lsb) + 1


def _parse_declaration(text: str) -> Optional[Tuple[Optional[str], str, str]]:
    """Split a port declaration into (direction, packed prefix, name)"""
    text = text.split("=")[0].strip()
    m = _DECL_NAME_RE.match(text)
    if not m:
        return None
    prefix = m.group(1)
    words = prefix.split()
    direction = words[0] if words and words[0] in DIRECTIONS else None
    return direction, prefix, m.group(2)


def _parse_ports(header_ports: str, body: str, env: Dict[str, Union[int, str]]) -> List[PortDecl]:
    ports: List[PortDecl] = []
    items = _split_top_level(header_ports)

    if any(item.split()[0] in DIRECTIONS for item in items if item.split()):
        # ANSI style, undirected items inherit the previous declaration
        direction, prefix = "input", ""
        for item in items:
            decl = _parse_declaration(item)
            if decl is None:
                logger.debug(f"Skipping port declaration `{item}`")
                continue
            item_direction, item_prefix, name = decl
            if item_direction:
                direction, prefix = item_direction, item_prefix
            elif item_prefix.strip():
                prefix = item_prefix
            ports.append(PortDecl(name, direction, _width(prefix, env, name)))
        return ports

    # Non-ANSI style, directions come from the module body
    declared: Dict[str, PortDecl] = {}
    for m in _BODY_PORT_RE.finditer(body):
        direction = m.group(1)
        names = _split_top_level(m.group(2))
        prefix = ""
        for i, item in enumerate(names):
            decl = _parse_declaration(f"{direction} {item}" if i == 0 else item)
            if decl is None:
                continue
            _, item_prefix, name = decl
            if i == 0:
                prefix = item_prefix
            declared[name] = PortDecl(name, direction, _width(prefix, env, name))

    for item in items:
        name = item.strip().lstrip(".")
        if name in declared:
            ports.append(declared[name])
        else:
            logger.warning(f"Port `{name}` has no direction declaration, assuming input")
            ports.append(PortDecl(name, "input", 1))
    return ports


def _find_instantiations(body: str, names: Sequence[str], own_name: str) -> List[str]:
    found = []
    for name in names:
        if name == own_name:
            continue
        pattern = rf"\b{re.escape(name)}\s*(?:#\s*\(.*?\)\s*)?[A-Za-z_]\w*\s*(?:\[[^\]]*\]\s*)?\("
        if re.search(pattern, body, re.DOTALL):
            found.append(name)
    return found


def parse_text(text: str, path: Path, source_dirs: Sequence[Path] = ()) -> Optional[VerilogAST]:
    """
    Parse Verilog source text.

    Returns:
        The parsed file, or None if its module structure is malformed
    """
    literals: List[str] = []
    text = _strip_comments(text, literals)
    text = _expand_macros(_expand_includes(text, path, source_dirs, literals))

    # (name, start of header, end of body) for every module
    spans: List[Tuple[str, int, int]] = []
    open_module: Optional[Tuple[str, int]] = None
    for m in _MODULE_TOKEN_RE.finditer(text):
        if m.group(1):
            if open_module is not None:
                logger.error(f"Module `{m.group(2)}` declared inside module `{open_module[0]}` in {path}")
                return None
            open_module = (m.group(2), m.end())
        else:
            if open_module is None:
                logger.error(f"Found endmodule without a matching module in {path}")
                return None
            spans.append((open_module[0], open_module[1], m.start()))
            open_module = None
    if open_module is not None:
        logger.error(f"Module `{open_module[0]}` has no endmodule in {path}")
        return None

    names = [name for name, _, _ in spans]
    if len(set(names)) != len(names):
        logger.error(f"Duplicate module declarations in {path}")
        return None

    ast = VerilogAST(path=path)
    for name, start, end in spans:
        try:
            header_params, header_ports, body = _split_header(text[start:end])
        except ValueError as e:
            logger.error(f"Malformed header for module `{name}` in {path}: {e}")
            return None
        parameters, env = _parse_parameters(header_params, body, literals)
        module = ModuleDecl(
            name=name,
            ports=_parse_ports(header_ports, body, env),
            parameters=parameters,
            instantiates=_find_instantiations(body, names, name),
            source=path,
        )
        logger.debug(f"Found module {module.name}: {len(module.ports)} ports, "
                     f"instantiates {module.instantiates}")
        ast.modules.append(module)
    return ast


def parse_file(path: Union[str, Path], source_dirs: Sequence[Union[str, Path]] = ()) -> Optional[VerilogAST]:
    """
    Parse a Verilog/SystemVerilog file.

    Args:
        path: the file to parse
        source_dirs: extra directories searched for `include files, after the
            directory containing ``path``

    Returns:
        The parsed file, or None if it could not be read or parsed
    """
    path = Path(path)
    try:
        text = path.read_text()
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Unable to read {path}: {e}")
        return None
    return parse_text(text, path, [Path(d) for d in source_dirs])
