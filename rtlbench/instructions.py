# SPDX-License-Identifier: BSD-2-Clause
"""
Simulator specific instructions for using a generated testbench.

rtlbench does not run any simulator itself; licensing, installation paths and
site specific flags are outside of its control. Instead it prints what to add to
the user's own build script for each supported toolchain, along with an example
command that should work for the file that was just parsed.

Everything here is a pure function of its arguments: no file system access and
no environment lookups (the environment is passed in).
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Sequence, Union

from .config import Vendor

TESTBENCH_TOP = "rtlbench"
TESTBENCH_FILE = f"{TESTBENCH_TOP}.v"
EXTENSION_NAME = "rtlbench"
RULE = "-" * 59

# Environment variables overriding the simulator executable names
IRUN_ENV = "RTLBENCH_IRUN"
VCS_ENV = "RTLBENCH_VCS"


@dataclass(frozen=True)
class InstructionBlock:
    toolchain: Vendor
    title: str
    text: str


def _banner(title: str) -> List[str]:
    return [RULE, title, RULE, ""]


def _script_lines(lines: Sequence[str]) -> List[str]:
    "Format as continuation lines of a build script"
    out = [f"  {line} \\" for line in lines[:-1]]
    out.append(f"  {lines[-1]}")
    return out


def _cadence(top: str, rtl_top: str, out: str, include_dirs: Sequence[str], environ: Mapping[str, str]) -> InstructionBlock:
    title = "Cadence Incisive (irun)"
    irun = environ.get(IRUN_ENV) or "irun"
    options = ['-ccargs "-std=c99"', f"-top {TESTBENCH_TOP}", "-elaborate", f"-snapshot {TESTBENCH_TOP}",
               "-access +rw", "-timescale 1ns/1ns"]
    incdirs = " ".join(f"-incdir {d}" for d in include_dirs)
    lines = _banner(title)
    lines += ["Add the following to your build script (AND REMOVE ANY OTHER TESTBENCH!):", ""]
    lines += _script_lines([f"{out}/{TESTBENCH_FILE}", f"{out}/*.c", *options])
    lines += ["",
              f"Here is an example which may work for {top} in the file you just parsed "
              "(add additional -incdir options at the end if required):",
              "",
              f"  {irun} {rtl_top} {out}/{TESTBENCH_FILE} {out}/*.c {' '.join(options)} {incdirs}",
              "",
              "Copy the following directory (produced by irun) to simulation/<target>/cadence/. "
              "within your application:",
              "",
              "  INCA_libs",
              ""]
    return InstructionBlock(Vendor.CADENCE, title, "\n".join(lines))


def _synopsys(top: str, rtl_top: str, out: str, include_dirs: Sequence[str], environ: Mapping[str, str]) -> InstructionBlock:
    title = "Synopsys VCS"
    vcs = environ.get(VCS_ENV) or "vcs"
    sources = [f"{out}/{TESTBENCH_FILE}", f"{out}/bridge.c", f"{out}/client.c"]
    options = ['-CFLAGS "-std=c99"', "+vpi", f"-use_vpiobj {out}/{EXTENSION_NAME}.c",
               "+define+RTLBENCH_VCD", "-timescale=1ns/1ns"]
    incdirs = " ".join(f"+incdir+{d}" for d in include_dirs)
    lines = _banner(title)
    lines += ["Add the following to your build script (AND REMOVE ANY OTHER TESTBENCH!):", ""]
    lines += _script_lines([*sources, *options])
    lines += ["",
              f"Here is an example which may work for {top} in the file you just parsed "
              "(add additional +incdir+ options at the end if required):",
              "",
              f"  {vcs} {rtl_top} {' '.join(sources)} {' '.join(options)} {incdirs}",
              "",
              "Copy the following files (produced by vcs) to simulation/<target>/synopsys/. "
              "within your application:",
              "",
              "  simv",
              "  simv.daidir",
              ""]
    return InstructionBlock(Vendor.SYNOPSYS, title, "\n".join(lines))


def _icarus(top: str, rtl_top: str, out: str, include_dirs: Sequence[str], environ: Mapping[str, str]) -> InstructionBlock:
    title = "Icarus Verilog"
    incdirs = " ".join(f"-I {d}" for d in include_dirs)
    lines = _banner(title)
    lines += ["Compile the VPI extension using the following command:",
              "",
              f"  (cd {out} && iverilog-vpi *.c --name={EXTENSION_NAME})",
              "",
              "Add the following to your build script (AND REMOVE ANY OTHER TESTBENCH!):",
              ""]
    lines += _script_lines([f"{out}/{TESTBENCH_FILE}", f"-o {TESTBENCH_TOP}.vvp", "-DRTLBENCH_VCD"])
    lines += ["",
              f"Here is an example which may work for {top} in the file you just parsed "
              "(add additional source dirs with more -I options at the end if required):",
              "",
              f"  iverilog {rtl_top} {out}/{TESTBENCH_FILE} -o {TESTBENCH_TOP}.vvp -DICARUS -DRTLBENCH_VCD {incdirs}",
              "",
              "Copy the following files to simulation/<target>/icarus/. within your application:",
              "",
              f"  {out}/{EXTENSION_NAME}.vpi",
              f"  {TESTBENCH_TOP}.vvp   (produced by the iverilog command)",
              ""]
    return InstructionBlock(Vendor.ICARUS, title, "\n".join(lines))


_GENERATORS = {
    Vendor.CADENCE: _cadence,
    Vendor.SYNOPSYS: _synopsys,
    Vendor.ICARUS: _icarus,
}


def generate_instructions(top: str, rtl_top: Union[str, Path], output_directory: Union[str, Path],
                          environ: Mapping[str, str], source_dirs: Sequence[Union[str, Path]] = ()) -> List[InstructionBlock]:
    """
    Build the instructions for every supported toolchain, in a fixed order.

    Args:
        top: name of the resolved top-level module
        rtl_top: the RTL file that was parsed; its directory is the first include dir hint
        output_directory: where the testbench and extension sources were written
        environ: environment to take executable name overrides from
        source_dirs: further include directories, hinted after the RTL file's directory
    """
    include_dirs = [str(Path(rtl_top).parent)] + [str(d) for d in source_dirs]
    return [
        gen(top, str(rtl_top), str(output_directory), include_dirs, environ)
        for gen in _GENERATORS.values()
    ]


def format_instructions(blocks: Sequence[InstructionBlock]) -> str:
    return "\n".join(block.text for block in blocks)
