# SPDX-License-Identifier: BSD-2-Clause
"""
Module-level view of a parsed Verilog file.
"""

from __future__ import annotations

import logging

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional, Union

if TYPE_CHECKING:
    from ..dut import DutModel

logger = logging.getLogger(__name__)

DIRECTIONS = ("input", "output", "inout")


@dataclass
class PortDecl:
    """
    A module port.

    Attributes:
        name: port name
        direction: one of ``input``, ``output`` or ``inout``
        width: packed width in bits
    """
    name: str
    direction: str
    width: int = 1


@dataclass
class ModuleDecl:
    """
    A module declaration found in the parsed file, and a candidate for the top-level.

    Attributes:
        name: module name, unique within the parsed file
        ports: ports in declaration order
        parameters: overridable parameters, evaluated to ``int`` where possible
        instantiates: names of the other modules of the file that this one instantiates
        source: the file the declaration came from
    """
    name: str
    ports: List[PortDecl] = field(default_factory=list)
    parameters: Dict[str, Union[int, str]] = field(default_factory=dict)
    instantiates: List[str] = field(default_factory=list)
    source: Optional[Path] = None
    _dut: Optional[DutModel] = field(default=None, repr=False, compare=False)

    def to_top_level(self) -> DutModel:
        """
        Promote this module to the top-level of the build, creating its DUT model.

        Only the first call builds the model; later calls return the same object.
        """
        if self._dut is None:
            from ..dut import DutModel
            logger.debug(f"Creating DUT model for {self.name}")
            self._dut = DutModel.from_module(self)
        return self._dut


@dataclass
class VerilogAST:
    """
    Result of parsing one RTL file (with its includes expanded).

    Attributes:
        path: the parsed file
        modules: every module declaration, in declaration order
    """
    path: Path
    modules: List[ModuleDecl] = field(default_factory=list)

    @property
    def top_level_modules(self) -> List[ModuleDecl]:
        "Modules not instantiated by any other module of the file, in declaration order"
        instantiated = set()
        for m in self.modules:
            instantiated.update(i for i in m.instantiates if i != m.name)
        return [m for m in self.modules if m.name not in instantiated]

    def module(self, name: str) -> Optional[ModuleDecl]:
        for m in self.modules:
            if m.name == name:
                return m
        return None
