# SPDX-License-Identifier: BSD-2-Clause
"""
Configuration management for rtlbench.

This module provides configuration models and parsing functionality
for rtlbench.toml configuration files.
"""

# Configuration models
from .models import (
    Vendor,
    OptionSpec,
    BuildConfig,
    RtlBenchConfig,
    Config,
)

# Parsing utilities
from .parser import (
    CONFIG_FILE,
    find_root,
    parse_config,
    _parse_config_file,
)

__all__ = [
    'Vendor',
    'OptionSpec',
    'BuildConfig',
    'RtlBenchConfig',
    'Config',
    'CONFIG_FILE',
    'find_root',
    'parse_config',
    '_parse_config_file',
]
