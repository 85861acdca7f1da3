# SPDX-License-Identifier: BSD-2-Clause
"""
Base class for rtlbench command line steps.
"""

from abc import ABC


class StepBase(ABC):
    """Base class for rtlbench build steps."""

    def __init__(self, config):
        ...

    def build_cli_parser(self, parser):
        "Build the cli parser for this step"
        ...

    def run_cli(self, args):
        "Called when this step's is used from `rtlbench` command"
        self.build()

    def build(self, *args):
        "builds the design"
        ...
