# SPDX-License-Identifier: BSD-2-Clause
"""
Template rendering runner.

Renders a template file, or a directory of templates, into an output directory.
Files whose name ends in ``.jinja`` are rendered with Jinja2 and written without
that suffix, everything else is copied as-is.
"""

import logging

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from .errors import RenderError

logger = logging.getLogger(__name__)

TEMPLATE_SUFFIX = ".jinja"
TEMPLATES_DIR = Path(__file__).parent / "templates"


@dataclass
class RenderResult:
    """
    Attributes:
        written: files written to the output directory
        unchanged: files left alone because their content was already up to date
    """
    written: List[Path] = field(default_factory=list)
    unchanged: List[Path] = field(default_factory=list)


class TemplateRunner(Protocol):
    def launch(self, *, action: str, files: Union[str, Path], output: Union[str, Path],
               check_for_changes: bool = True, quiet: bool = False,
               options: Optional[Dict[str, Any]] = None) -> RenderResult:
        ...


class JinjaRunner:
    """
    :class:`TemplateRunner` backed by Jinja2.

    Only the ``compile`` action is supported. When ``check_for_changes`` is set,
    outputs whose content would not change are not rewritten.
    """

    def launch(self, *, action: str, files: Union[str, Path], output: Union[str, Path],
               check_for_changes: bool = True, quiet: bool = False,
               options: Optional[Dict[str, Any]] = None) -> RenderResult:
        if action != "compile":
            raise RenderError(f"Unsupported template action `{action}`")

        source = Path(files)
        output = Path(output)
        if source.is_dir():
            sources = sorted(p for p in source.rglob("*") if p.is_file())
            base = source
        elif source.is_file():
            sources = [source]
            base = source.parent
        else:
            raise RenderError(f"Template source not found: {source}")

        env = Environment(
            loader=FileSystemLoader(str(base)),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )

        result = RenderResult()
        for src in sources:
            rel = src.relative_to(base)
            if src.name.endswith(TEMPLATE_SUFFIX):
                dest = output / rel.parent / src.name[:-len(TEMPLATE_SUFFIX)]
                try:
                    content = env.get_template(rel.as_posix()).render(**(options or {}))
                except TemplateError as e:
                    raise RenderError(f"Failed to render {src}: {e}") from e
                self._write(dest, content.encode(), check_for_changes, result)
            else:
                dest = output / rel
                self._write(dest, src.read_bytes(), check_for_changes, result)
            if not quiet:
                print(f"  Created {dest}")
        return result

    def _write(self, dest: Path, content: bytes, check_for_changes: bool, result: RenderResult):
        if check_for_changes and dest.is_file() and dest.read_bytes() == content:
            logger.debug(f"{dest} is up to date")
            result.unchanged.append(dest)
            return
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_bytes(content)
        except OSError as e:
            raise RenderError(f"Unable to write {dest}: {e}") from e
        logger.debug(f"Wrote {dest}")
        result.written.append(dest)
