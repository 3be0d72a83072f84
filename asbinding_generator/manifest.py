#!/usr/bin/env python3
"""
JSON manifest describing a generation run: generator metadata, invocation,
environment, the catalog snapshot and which declarations were bound or skipped.
"""

from __future__ import annotations

import json
import logging
import os
import platform
import shlex
import sys
from datetime import datetime, timezone
from importlib import metadata as importlib_metadata
from pathlib import Path
from typing import Any, Dict, Optional

from .catalog import BindingInputs
from .emitters.angelscript_emitter import GenerationReport
from .models import GenerationContext
from .utils import write_text

logger = logging.getLogger(__name__)

DIST_NAME = "asbinding-generator"
MANIFEST_FILE = "manifest.json"


def _generator_version() -> str:
    try:
        return importlib_metadata.version(DIST_NAME)
    except importlib_metadata.PackageNotFoundError:
        # Running from a source checkout
        return "unknown"


def build_manifest(
    ctx: GenerationContext,
    report: GenerationReport,
    inputs: Optional[BindingInputs] = None,
) -> Dict[str, Any]:
    argv = list(getattr(sys, "argv", []) or [])
    manifest: Dict[str, Any] = {
        "generator": {
            "name": DIST_NAME,
            "version": _generator_version(),
        },
        "invocation": {
            "argv": argv,
            "command_line": " ".join(shlex.quote(a) for a in argv) if argv else "",
        },
        "environment": {
            "python_version": sys.version,
            "python_executable": sys.executable,
            "platform": platform.platform(),
            "cwd": os.getcwd(),
            "timestamp_utc": datetime.now(timezone.utc).isoformat(),
        },
        "context": ctx.to_dict(),
        "report": report.to_dict(),
    }
    if inputs is not None:
        manifest["catalog"] = inputs.catalog.to_dict()
    return manifest


def emit_manifest(
    ctx: GenerationContext,
    report: GenerationReport,
    inputs: Optional[BindingInputs] = None,
) -> Path:
    """
    Write <output_dir>/manifest.json next to the generated glue.
    Useful for finding out why a given function did not get registered.
    """
    manifest_path = ctx.output_dir / MANIFEST_FILE
    content = json.dumps(build_manifest(ctx, report, inputs), indent=2)
    write_text(manifest_path, content, dry_run=ctx.dry_run)
    logger.debug("Manifest written to %s", manifest_path)
    return manifest_path


__all__ = [
    "build_manifest",
    "emit_manifest",
    "MANIFEST_FILE",
]
