# SPDX-License-Identifier: BSD-2-Clause
"""
Generation of the testbench, VPI extension sources and target definition.
"""

from __future__ import annotations

import logging

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, List, Protocol, Sequence, Union

from .config import Vendor
from .render import TEMPLATES_DIR, TemplateRunner

if TYPE_CHECKING:
    from .dut import DutModel

logger = logging.getLogger(__name__)

TESTBENCH_TEMPLATE = TEMPLATES_DIR / "rtlbench.v.jinja"
EXTENSION_DIR = TEMPLATES_DIR / "ext"


class DutExporter(Protocol):
    def export(self, module_name: str, file_path: Union[str, Path]) -> Path:
        ...


@dataclass
class BuildArtifacts:
    """
    Files written by a build.

    Attributes:
        output_directory: where everything was written
        testbench: the rendered testbench wrapper files
        extension: the VPI extension source files
        target_definition: the exported pin definition of the top-level
    """
    output_directory: Path
    testbench: List[Path] = field(default_factory=list)
    extension: List[Path] = field(default_factory=list)
    target_definition: Path | None = None


class ArtifactBuilder:
    """
    Renders the build artifacts into an output directory.

    Every run renders unconditionally and replaces whatever a previous run left;
    nothing is cleaned up if a step fails part way through.
    """

    def __init__(self, runner: TemplateRunner, vendor: Vendor = Vendor.CADENCE,
                 testbench_template: Path = TESTBENCH_TEMPLATE, extension_dir: Path = EXTENSION_DIR):
        self._runner = runner
        self._vendor = vendor
        self._testbench_template = testbench_template
        self._extension_dir = extension_dir

    def build(self, output_directory: Union[str, Path], top: str, dut: DutModel | DutExporter,
              include_files: Sequence[str] = ()) -> BuildArtifacts:
        output_directory = Path(output_directory)
        artifacts = BuildArtifacts(output_directory)

        logger.info(f"Rendering testbench for {top} into {output_directory}")
        result = self._runner.launch(
            action="compile",
            files=self._testbench_template,
            output=output_directory,
            check_for_changes=False,
            quiet=True,
            options={"vendor": str(self._vendor), "top": top, "incl": list(include_files), "dut": dut},
        )
        artifacts.testbench = list(result.written)

        logger.info(f"Rendering VPI extension sources into {output_directory}")
        result = self._runner.launch(
            action="compile",
            files=self._extension_dir,
            output=output_directory,
            check_for_changes=False,
            quiet=True,
        )
        artifacts.extension = list(result.written)

        artifacts.target_definition = dut.export(top, file_path=output_directory)
        return artifacts
