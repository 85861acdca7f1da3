# SPDX-License-Identifier: BSD-2-Clause
"""
Exceptions raised by rtlbench.

Every failure that should end a command cleanly is an :class:`RtlBenchError`;
the CLI prints it and exits with status 1.
"""

from typing import Iterable


class RtlBenchError(Exception):
    """Base exception for rtlbench errors"""
    pass


class UnexpectedError(RtlBenchError):
    pass


class UsageError(RtlBenchError):
    """Bad or missing command line input"""
    pass


class SourceNotFoundError(RtlBenchError):
    """The top-level RTL file does not exist"""

    def __init__(self, path):
        self.path = path
        super().__init__(f"File does not exist: {path}")


class ParseFailure(RtlBenchError):
    def __init__(self, path):
        self.path = path
        super().__init__(f"Sorry, but the given top-level RTL file failed to parse: {path}")


class NoModulesFound(RtlBenchError):
    def __init__(self, path=None):
        self.path = path
        super().__init__("Sorry, couldn't find any Verilog module declarations in that file")


class AmbiguousTopLevel(RtlBenchError):
    """
    More than one module could be the top-level and none was selected.

    Attributes:
        candidates: every candidate name, in the order the parser reported them
    """

    def __init__(self, candidates: Iterable[str]):
        self.candidates = list(candidates)
        names = "\n".join(f"  {c}" for c in self.candidates)
        super().__init__(
            "Sorry, couldn't work out what the top-level module is, please help by running "
            "again and specifying it via the --top switch with one of the following names:\n"
            f"{names}"
        )


class RenderError(RtlBenchError):
    pass


class ExportError(RtlBenchError):
    pass
