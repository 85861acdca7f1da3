# SPDX-License-Identifier: BSD-2-Clause
"""
rtlbench: build a simulator-agnostic testbench and VPI extension for an RTL design.
"""

import importlib.metadata

from .errors import (
    RtlBenchError,
    UsageError,
    SourceNotFoundError,
    ParseFailure,
    NoModulesFound,
    AmbiguousTopLevel,
    RenderError,
    ExportError,
)
from .utils import get_cls_by_reference
from .config import Config, parse_config, find_root

try:
    __version__ = importlib.metadata.version("rtlbench")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    '__version__',
    'RtlBenchError',
    'UsageError',
    'SourceNotFoundError',
    'ParseFailure',
    'NoModulesFound',
    'AmbiguousTopLevel',
    'RenderError',
    'ExportError',
    'Config',
    'parse_config',
    'find_root',
    'get_cls_by_reference',
]
