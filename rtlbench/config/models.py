# SPDX-License-Identifier: BSD-2-Clause
from enum import StrEnum
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, field_validator


class Vendor(StrEnum):
    """
    A supported simulator toolchain, also used as the testbench template preset
    """
    #: Cadence Incisive, two step elaborate and snapshot flow
    CADENCE = "cadence"
    #: Synopsys VCS, compiled VPI bridge linked in through the PLI
    SYNOPSYS = "synopsys"
    #: Icarus Verilog, compile the testbench then run it with the VPI module loaded
    ICARUS = "icarus"


class OptionSpec(BaseModel):
    """
    Description of one command line option of the ``build`` step.

    The step's own options and those contributed by the surrounding application
    (the ``[[rtlbench.build.options]]`` entries of rtlbench.toml) are all described
    this way and merged into a single list before the parser is built. Options
    contributed by the application are accepted but not acted upon by rtlbench.

    Attributes:
        flags: option strings, e.g. ``["-o", "--output"]``
        help: help text
        takes_value: the option takes an argument, otherwise it is a boolean switch
        repeatable: the option may be given several times, values are collected in order
        dest: attribute name on the parsed namespace (derived from the flags if not given)
        metavar: name of the argument in help output
    """
    flags: List[str]
    help: Optional[str] = None
    takes_value: bool = False
    repeatable: bool = False
    dest: Optional[str] = None
    metavar: Optional[str] = None

    @field_validator("flags")
    @classmethod
    def _check_flags(cls, flags: List[str]) -> List[str]:
        if not flags:
            raise ValueError("at least one flag is required")
        for f in flags:
            if not f.startswith("-"):
                raise ValueError(f"option flags must start with '-': {f!r}")
        return flags


class BuildConfig(BaseModel):
    """Configuration for the ``build`` step."""
    vendor: Vendor = Vendor.CADENCE
    options: List[OptionSpec] = []


class RtlBenchConfig(BaseModel):
    """The ``[rtlbench]`` table of rtlbench.toml."""
    project_name: Optional[str] = None
    output_directory: Path = Path("output")
    steps: Optional[Dict[str, str]] = None
    build: BuildConfig = BuildConfig()


class Config(BaseModel):
    """
    Root configuration model for rtlbench.toml.

    ``root`` is not read from the file, it is filled in with the project root the
    file was found in. Constructed once per process and passed to every step.
    """
    rtlbench: RtlBenchConfig = RtlBenchConfig()
    root: Path = Path(".")

    @property
    def output_directory(self) -> Path:
        "Default output directory, anchored at the project root"
        out = self.rtlbench.output_directory
        if out.is_absolute():
            return out
        return self.root / out
