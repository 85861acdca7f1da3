# SPDX-License-Identifier: BSD-2-Clause
"""
In-memory model of the design under test, and its export as a target definition.

The target definition file describes the pins of the top-level module so that a
downstream application can drive the design through the generated testbench.
"""

from __future__ import annotations

import logging
import re

from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Literal, Optional, Union

from amaranth import Shape
from amaranth.lib import wiring
from amaranth.lib.wiring import In, Out
from pydantic import BaseModel

from .errors import ExportError

if TYPE_CHECKING:
    from .rtl import ModuleDecl

logger = logging.getLogger(__name__)

TARGET_EXTENSION = ".json"


class Pin(BaseModel):
    """
    A pin of the design under test.

    Attributes:
        name: the RTL port name
        direction: ``input``, ``output`` or ``inout``, from the design's point of view
        width: number of bits
        member: name of the pin in the amaranth signature of the design, set in
            exported target definitions
    """
    name: str
    direction: Literal["input", "output", "inout"]
    width: int = 1
    member: Optional[str] = None


class TargetDefinition(BaseModel):
    """
    Contents of an exported target definition file.

    Attributes:
        name: top-level module name
        source: RTL file the module was parsed from
        parameters: the module's overridable parameters
        pins: pins in port order
    """
    name: str
    source: Optional[Path] = None
    parameters: Dict[str, Union[int, str]] = {}
    pins: List[Pin]


def _bidir_signature(width: int) -> wiring.Signature:
    return wiring.Signature({
        "i": In(width),
        "o": Out(width),
        "oe": Out(1),
    })


# Names amaranth accepts as signature members
_MEMBER_NAME_RE = re.compile(r"[A-Za-z][0-9A-Za-z_]*")
_RESERVED_MEMBER_NAMES = {"signature"}


def _usable(name: str) -> bool:
    return bool(_MEMBER_NAME_RE.fullmatch(name)) and name not in _RESERVED_MEMBER_NAMES


def _member_names(pin_names: List[str]) -> Dict[str, str]:
    """
    Map each pin name to a signature member name.

    Verilog allows port names that amaranth does not, such as ``_rst_n`` or
    ``signature``; those get a ``pin_`` prefix, numbered if that collides.
    """
    names: Dict[str, str] = {}
    used = set(n for n in pin_names if _usable(n))
    for pin_name in pin_names:
        if _usable(pin_name):
            names[pin_name] = pin_name
            continue
        base = "pin_" + re.sub(r"[^0-9A-Za-z_]", "_", pin_name).lstrip("_")
        candidate, n = base, 1
        while candidate in used:
            candidate = f"{base}_{n}"
            n += 1
        used.add(candidate)
        names[pin_name] = candidate
    return names


class DutModel:
    """
    The resolved top-level module, as seen by the testbench.

    Created by :meth:`rtlbench.rtl.ModuleDecl.to_top_level`.
    """

    def __init__(self, name: str, pins: List[Pin], parameters=None, source: Optional[Path] = None):
        self.name = name
        self.pins = list(pins)
        self.parameters = dict(parameters or {})
        self.source = source
        self.member_names = _member_names([p.name for p in self.pins])
        self._signature: Optional[wiring.Signature] = None

    @classmethod
    def from_module(cls, module: ModuleDecl) -> DutModel:
        pins = [Pin(name=p.name, direction=p.direction, width=p.width) for p in module.ports]  # type: ignore[arg-type]
        return cls(module.name, pins, module.parameters, module.source)

    @property
    def inputs(self) -> List[Pin]:
        return [p for p in self.pins if p.direction == "input"]

    @property
    def outputs(self) -> List[Pin]:
        return [p for p in self.pins if p.direction == "output"]

    @property
    def inouts(self) -> List[Pin]:
        return [p for p in self.pins if p.direction == "inout"]

    @property
    def signature(self) -> wiring.Signature:
        """
        Amaranth signature of the design's port interface.

        Inputs are ``In``, outputs ``Out``, and each inout becomes a nested
        signature with ``i``, ``o`` and ``oe`` members. Members are named by
        :attr:`member_names`, which differ from the pin names only where a pin
        name is not usable as a member name.

        Raises:
            ExportError: the interface cannot be modelled
        """
        if self._signature is None:
            members = {}
            try:
                for pin in self.pins:
                    name = self.member_names[pin.name]
                    match pin.direction:
                        case "input":
                            members[name] = In(pin.width)
                        case "output":
                            members[name] = Out(pin.width)
                        case "inout":
                            members[name] = Out(_bidir_signature(pin.width))
                self._signature = wiring.Signature(members)
            except (NameError, TypeError, ValueError) as e:
                raise ExportError(f"Unable to model the pins of `{self.name}`: {e}") from e
        return self._signature

    def target_definition(self) -> TargetDefinition:
        pins = []
        for pin in self.pins:
            member_name = self.member_names[pin.name]
            member = self.signature.members[member_name]
            if member.is_signature:
                width = Shape.cast(member.signature.members["i"].shape).width
                direction = "inout"
            else:
                width = Shape.cast(member.shape).width
                direction = "input" if member.flow == wiring.In else "output"
            pins.append(Pin(name=pin.name, direction=direction, width=width, member=member_name))
        return TargetDefinition(name=self.name, source=self.source, parameters=self.parameters, pins=pins)

    def export(self, module_name: str, file_path: Union[str, Path]) -> Path:
        """
        Write the target definition file ``<file_path>/<module_name>.json``.

        Any existing file at that path is replaced.

        Raises:
            ExportError: if the file cannot be written
        """
        target = Path(file_path) / f"{module_name}{TARGET_EXTENSION}"
        definition = self.target_definition()
        logger.debug(f"Exporting {len(definition.pins)} pins of {self.name} to {target}")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(definition.model_dump_json(indent=2) + "\n")
        except OSError as e:
            raise ExportError(f"Unable to write target definition {target}: {e}") from e
        return target
