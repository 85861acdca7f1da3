# SPDX-License-Identifier: BSD-2-Clause
"""
The ``build`` step: from a top-level RTL file to a testbench, a VPI extension, a
target definition and instructions for each supported simulator.
"""

import argparse
import logging
import os

from pathlib import Path
from typing import List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from . import StepBase
from ..artifacts import ArtifactBuilder, BuildArtifacts
from ..config import Config, OptionSpec
from ..errors import ParseFailure, SourceNotFoundError, UsageError
from ..instructions import TESTBENCH_FILE, format_instructions, generate_instructions
from ..render import JinjaRunner, TemplateRunner
from ..resolver import resolve_top_level
from ..rtl import parse_file

logger = logging.getLogger(__name__)

DESCRIPTION = """\
Build a testbench and simulator VPI extension for the given top-level RTL design.

The created artifacts should be included in a compilation of the given design to create
a simulation object that can be driven through the rtlbench VPI bridge.
"""

BUILD_OPTIONS = [
    OptionSpec(flags=["-o", "--output"], dest="output", takes_value=True, metavar="DIR",
               help="Override the default output directory"),
    OptionSpec(flags=["-t", "--top"], dest="top_level_name", takes_value=True, metavar="NAME",
               help="Specify the top-level Verilog module name if rtlbench can't work it out"),
    OptionSpec(flags=["-s", "--source_dir"], dest="source_dirs", takes_value=True, repeatable=True, metavar="PATH",
               help="Directories to look for include files in (the directory containing the top-level "
                    "is already considered)"),
    OptionSpec(flags=["-i", "--incl"], dest="include_files", takes_value=True, repeatable=True, metavar="FILE",
               help="Files to `include into the testbench"),
    OptionSpec(flags=["-d", "--debugger"], dest="debugger",
               help="Enable the debugger"),
]


class BuildOptions(BaseModel):
    """
    Options for one build, fixed once the command line has been parsed.

    Attributes:
        rtl_top: the top-level RTL file
        output_directory: where artifacts are written
        top_level_name: explicit top-level module name, used when the file has several candidates
        source_dirs: extra include search directories, in command line order
        include_files: files to `include into the testbench
        debugger: enable debugger attachment
    """
    model_config = ConfigDict(frozen=True)

    rtl_top: Path
    output_directory: Path
    top_level_name: Optional[str] = None
    source_dirs: Tuple[Path, ...] = ()
    include_files: Tuple[str, ...] = ()
    debugger: bool = False

    @classmethod
    def from_args(cls, args: argparse.Namespace, config: Config) -> "BuildOptions":
        if not args.rtl_top:
            raise UsageError("You must supply a path to the top-level RTL file")
        return cls(
            rtl_top=Path(args.rtl_top),
            output_directory=Path(args.output) if args.output else config.output_directory,
            top_level_name=args.top_level_name,
            source_dirs=tuple(Path(d) for d in args.source_dirs or []),
            include_files=tuple(args.include_files or []),
            debugger=bool(args.debugger),
        )


def option_specs(config: Config) -> List[OptionSpec]:
    "The step's own options followed by those the application contributes"
    return BUILD_OPTIONS + list(config.rtlbench.build.options)


def add_option(parser: argparse.ArgumentParser, spec: OptionSpec):
    kwargs = {"help": spec.help}
    if spec.dest:
        kwargs["dest"] = spec.dest
    if spec.takes_value:
        kwargs["action"] = "append" if spec.repeatable else "store"
        if spec.metavar:
            kwargs["metavar"] = spec.metavar
    else:
        kwargs["action"] = "count" if spec.repeatable else "store_true"
    parser.add_argument(*spec.flags, **kwargs)


class BuildStep(StepBase):
    """Build a testbench and VPI extension for a top-level RTL design."""

    def __init__(self, config: Config, runner: Optional[TemplateRunner] = None,
                 environ: Optional[Mapping[str, str]] = None):
        self._config = config
        self._runner = runner if runner is not None else JinjaRunner()
        self._environ = environ if environ is not None else os.environ

    def build_cli_parser(self, parser):
        parser.description = DESCRIPTION
        parser.formatter_class = argparse.RawDescriptionHelpFormatter
        parser.add_argument("rtl_top", nargs="?", metavar="TOP_LEVEL_RTL_FILE",
                            help="The top-level RTL file of the design")
        for spec in option_specs(self._config):
            add_option(parser, spec)

    def run_cli(self, args):
        self.build(BuildOptions.from_args(args, self._config))

    def build(self, options: BuildOptions) -> BuildArtifacts:
        """
        Resolve the top-level module, write the artifacts and print the simulator instructions.
        """
        if not options.rtl_top.exists():
            raise SourceNotFoundError(options.rtl_top)

        ast = parse_file(options.rtl_top, options.source_dirs)
        if not ast:
            raise ParseFailure(options.rtl_top)

        mod = resolve_top_level(ast, options.top_level_name)
        logger.info(f"Top-level module is {mod.name}")
        dut = mod.to_top_level()
        if options.debugger:
            logger.debug("Debugger enabled")

        builder = ArtifactBuilder(self._runner, vendor=self._config.rtlbench.build.vendor)
        artifacts = builder.build(options.output_directory, mod.name, dut, options.include_files)

        blocks = generate_instructions(mod.name, options.rtl_top, options.output_directory,
                                       self._environ, options.source_dirs)
        self._report(options, mod.name, artifacts)
        print(format_instructions(blocks))
        return artifacts

    def _report(self, options: BuildOptions, top: str, artifacts: BuildArtifacts):
        print()
        print()
        print("Testbench and VPI extension created!")
        print()
        print(f"  {options.output_directory}/{TESTBENCH_FILE}")
        print()
        print("This file can be imported into a downstream application to define the pins of the DUT:")
        print()
        print(f"  {artifacts.target_definition}")
        print()
        print(f"See below for what to do now to create a simulation object for {top} with your particular simulator:")
        print()
