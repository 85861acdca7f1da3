# SPDX-License-Identifier: BSD-2-Clause
"""
Core utility functions for rtlbench
"""

import importlib
import logging

from .errors import RtlBenchError

logger = logging.getLogger(__name__)


def get_cls_by_reference(reference: str, context: str):
    """
    Dynamically import and return a class by its module:class reference string.

    Args:
        reference: String in format "module.path:ClassName"
        context: Description of where this reference came from (for error messages)

    Returns:
        The class object

    Raises:
        RtlBenchError: If module or class cannot be found
    """
    logger.debug(f"get_cls_by_reference({reference}, {context})")
    module_ref, _, class_ref = reference.partition(":")
    try:
        module_obj = importlib.import_module(module_ref)
    except ModuleNotFoundError as e:
        logger.debug(f"import_module({module_ref}) caused {e}")
        raise RtlBenchError(
            f"Module `{module_ref}` was not found (referenced by {context} in [rtlbench.steps])"
        ) from e
    try:
        return getattr(module_obj, class_ref)
    except AttributeError as e:
        logger.debug(f"getattr({module_obj}, {class_ref}) caused {e}")
        raise RtlBenchError(
            f"Class `{class_ref}` not found in module `{module_ref}` "
            f"(referenced by {context} in [rtlbench.steps])"
        ) from e
