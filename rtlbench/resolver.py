# SPDX-License-Identifier: BSD-2-Clause
"""
Selection of the top-level module of a parsed RTL file.
"""

import logging

from typing import Optional

from .errors import AmbiguousTopLevel, NoModulesFound
from .rtl import ModuleDecl, VerilogAST

logger = logging.getLogger(__name__)


def resolve_top_level(ast: VerilogAST, top_level_name: Optional[str] = None) -> ModuleDecl:
    """
    Work out which module of ``ast`` is the top-level.

    The candidates are the modules that no other module of the file instantiates,
    or every module if that leaves none. A single candidate is always selected.
    Otherwise ``top_level_name`` must exactly match one of the candidate names; a
    name that matches none is treated the same as no name at all.

    Raises:
        NoModulesFound: the file declares no modules
        AmbiguousTopLevel: several candidates and none selected by name
    """
    candidates = ast.top_level_modules
    if not candidates:
        logger.debug("No uninstantiated modules, considering all modules")
        candidates = ast.modules
    logger.debug(f"Top-level candidates: {[c.name for c in candidates]}")

    if len(candidates) == 0:
        raise NoModulesFound(ast.path)
    if len(candidates) == 1:
        return candidates[0]

    if top_level_name:
        for c in candidates:
            if c.name == top_level_name:
                return c
        logger.debug(f"--top {top_level_name} does not name any candidate")
    raise AmbiguousTopLevel(c.name for c in candidates)
