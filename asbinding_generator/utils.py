#!/usr/bin/env python3
"""
Shared plumbing for the AngelScript binding generator: logging setup, the
Jinja2 renderer and file output.

Templates are looked up in the user's templates directory first and in the
packaged `templates/` directory second, so a project can override a single
template without copying the rest.

Generated files are written through a temporary file and only when their
content changed, which keeps incremental engine builds from recompiling
untouched glue.
"""

from __future__ import annotations

import functools
import logging
import os
import sys
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO, Union

from jinja2 import (
    BaseLoader,
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    PackageLoader,
    StrictUndefined,
    TemplateNotFound,
)

logger = logging.getLogger(__name__)

PACKAGE_NAME = "asbinding_generator"
DEFAULT_LOG_FORMAT = "%(levelname)s: %(message)s"


# ----------------------------------------
# Logging
# ----------------------------------------

def _resolve_level(level: Optional[Union[int, str]]) -> int:
    if level is None:
        return logging.INFO
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return int(level)


def configure_logging(
    level: Optional[Union[int, str]] = None,
    *,
    to_file: Optional[Union[str, Path]] = None,
    fmt: Optional[str] = None,
    stream: Optional[TextIO] = None,
    propagate_package_loggers: bool = True,
) -> None:
    """
    Route all log records to `stream` (stderr by default) and, optionally, to
    `to_file`. Any handlers already on the root logger are replaced, so calling
    this twice does not duplicate output.

    `level` accepts a logging constant or its name ('DEBUG', 'warning', ...).
    """
    resolved = _resolve_level(level)
    formatter = logging.Formatter(fmt or DEFAULT_LOG_FORMAT)

    root = logging.getLogger()
    for old in list(root.handlers):
        root.removeHandler(old)
    root.setLevel(resolved)

    new_handlers: List[logging.Handler] = [logging.StreamHandler(stream or sys.stderr)]
    if to_file:
        new_handlers.append(logging.FileHandler(str(to_file), mode="w", encoding="utf-8"))
    for handler in new_handlers:
        handler.setLevel(resolved)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    package_logger = logging.getLogger(PACKAGE_NAME)
    package_logger.setLevel(resolved)
    package_logger.propagate = propagate_package_loggers


# ----------------------------------------
# Templates
# ----------------------------------------

def _package_templates_loader() -> BaseLoader:
    bundled = Path(__file__).resolve().parent / "templates"
    if bundled.is_dir():
        return FileSystemLoader(str(bundled))
    # Not on a plain filesystem (zipapp, wheel cache); ask the import system
    return PackageLoader(PACKAGE_NAME, "templates")


class TemplateRenderer:
    """
    Jinja2 environment over the user templates directory (if any) and the
    packaged templates. Rendering is strict: a missing context variable is an
    error, not an empty string.
    """

    def __init__(self, templates_dir: Optional[Path] = None) -> None:
        search: List[BaseLoader] = []
        if templates_dir is not None:
            user_dir = Path(templates_dir)
            if user_dir.is_dir():
                search.append(FileSystemLoader(str(user_dir)))
            else:
                logger.warning("Templates directory %s not found; falling back to packaged templates", user_dir)
        search.append(_package_templates_loader())

        self.env = Environment(
            loader=ChoiceLoader(search),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            autoescape=False,
        )

    def render(self, template_name: str, context: Dict[str, Any]) -> str:
        try:
            template = self.env.get_template(template_name)
        except TemplateNotFound as e:
            raise RuntimeError(
                f"Template '{template_name}' not found in the templates directory or the package templates"
            ) from e
        return template.render(**context)


@functools.lru_cache(maxsize=1)
def default_renderer() -> TemplateRenderer:
    """Renderer over the packaged templates, shared by callers that do not bring their own."""
    return TemplateRenderer(None)


# ----------------------------------------
# Output files
# ----------------------------------------

def ensure_dir(p: Path) -> None:
    Path(p).mkdir(parents=True, exist_ok=True)


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def _current_content(path: Path, encoding: str) -> Optional[str]:
    if not path.is_file():
        return None
    return normalize_newlines(path.read_text(encoding=encoding))


def atomic_write_text(
    path: Path,
    content: str,
    encoding: str = "utf-8",
    only_if_changed: bool = True,
) -> bool:
    """
    Replace `path` with `content` (LF newlines) via a sibling temporary file.
    Returns False when the file already held the same text and was left alone.
    """
    path = Path(path)
    text = normalize_newlines(content)
    ensure_dir(path.parent)

    if only_if_changed and _current_content(path, encoding) == text:
        logger.debug("Unchanged: %s", path)
        return False

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="\n") as f:
            f.write(text)
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except BaseException:
        os.unlink(tmp_name)
        raise
    logger.info("Wrote %s", path)
    return True


def write_text(path: Path, content: str, encoding: str = "utf-8", dry_run: bool = False) -> None:
    if dry_run:
        logger.info("Dry-run: would write %s (%d bytes)", path, len(content.encode(encoding)))
        return
    atomic_write_text(path, content, encoding=encoding)


__all__ = [
    "TemplateRenderer",
    "configure_logging",
    "default_renderer",
    "ensure_dir",
    "normalize_newlines",
    "atomic_write_text",
    "write_text",
]
