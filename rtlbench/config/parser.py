# SPDX-License-Identifier: BSD-2-Clause
"""
Configuration file parsing and utilities.
"""

import logging
import os

import tomli

from pathlib import Path
from typing import Optional
from pydantic import ValidationError

from ..errors import RtlBenchError
from .models import Config

logger = logging.getLogger(__name__)

CONFIG_FILE = "rtlbench.toml"


def find_root(environ=None) -> Path:
    """
    Return the project root: ``RTLBENCH_ROOT`` if set, else the current directory.
    """
    environ = os.environ if environ is None else environ
    if "RTLBENCH_ROOT" in environ:
        logger.debug(f"RTLBENCH_ROOT={environ['RTLBENCH_ROOT']} found in environment")
        return Path(environ["RTLBENCH_ROOT"]).absolute()
    logger.debug(f"RTLBENCH_ROOT not found in environment, using {os.getcwd()}")
    return Path.cwd()


def _parse_config_file(config_file, root: Optional[Path] = None) -> Config:
    """Parse a specific rtlbench.toml configuration file."""

    with open(config_file, "rb") as f:
        config_dict = tomli.load(f)

    if root is None:
        root = Path(config_file).absolute().parent

    try:
        return Config.model_validate({**config_dict, "root": root})
    except ValidationError as e:
        # Format Pydantic validation errors in a user-friendly way
        error_messages = []
        for error in e.errors():
            location = ".".join(str(loc) for loc in error["loc"])
            message = error["msg"]
            error_messages.append(f"Error at '{location}': {message}")

        error_str = "\n".join(error_messages)
        raise RtlBenchError(f"Validation error in {CONFIG_FILE}:\n{error_str}")


def parse_config(root: Optional[Path] = None) -> Config:
    """
    Build the process-wide configuration.

    A missing rtlbench.toml is not an error, every setting has a default.
    """
    if root is None:
        root = find_root()
    config_file = Path(root) / CONFIG_FILE
    if not config_file.exists():
        logger.debug(f"No {CONFIG_FILE} at {root}, using defaults")
        return Config(root=Path(root))
    try:
        return _parse_config_file(config_file, root=Path(root))
    except tomli.TOMLDecodeError as e:
        raise RtlBenchError(f"{config_file} has a formatting error: {e}")
