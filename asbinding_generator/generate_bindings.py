#!/usr/bin/env python3
"""
AngelScript glue generator for Urho3D-style engine headers.

This entrypoint wires together:
- Catalog building (libclang-based header traversal, or a JSON catalog)
- Conversion of every signature into script declarations and glue
- Emitting (Jinja2-based) of wrapper functions and registration calls

Outputs:
- <output_dir>/<output_file> (default GeneratedGlue.cpp)
- <optional> <output_dir>/manifest.json (bound and skipped declarations)

Usage (example):
  python -m asbinding_generator.generate_bindings \
    --headers Source/Urho3D/Scene \
    --include-filter Source/Urho3D \
    --clang-args "-ISource/Urho3D -std=c++17" \
    --output-dir Source/Urho3D/AngelScript/Generated

  python -m asbinding_generator.generate_bindings --catalog-json catalog.json

Notes:
- Header parsing needs libclang; --catalog-json does not.
"""

from __future__ import annotations

import argparse
import re
import shlex
import sys
from pathlib import Path
from typing import List, Optional, Sequence
import logging

logger = logging.getLogger(__name__)

# Local modules
from .catalog import BindingInputs, load_catalog
from .config import DEFAULT_CONFIG, ConversionConfig
from .emitters.angelscript_emitter import AngelScriptEmitter, EmitterConfig
from .manifest import emit_manifest
from .models import GenerationContext
from .utils import TemplateRenderer, configure_logging

HEADER_SUFFIXES = (".h", ".hpp", ".hh", ".hxx")


# --------------------------
# Helpers
# --------------------------

def discover_header_files(paths: List[str]) -> List[Path]:
    """
    Expand files and directories into a unique list of header files.
    """
    results: List[Path] = []
    for p in paths:
        pp = Path(p)
        if pp.is_file() and pp.suffix.lower() in HEADER_SUFFIXES:
            results.append(pp.resolve())
        elif pp.is_dir():
            results.extend(sorted(f.resolve() for f in pp.rglob("*") if f.suffix.lower() in HEADER_SUFFIXES))
        else:
            logger.warning("Skipping non-existent path: %s", p)

    seen: set = set()
    unique: List[Path] = []
    for f in results:
        if f in seen:
            continue
        seen.add(f)
        unique.append(f)
    return unique


def _log_level(ns: argparse.Namespace) -> int:
    if ns.log_level:
        return getattr(logging, str(ns.log_level).upper(), logging.INFO)
    if ns.verbose >= 1:
        return logging.DEBUG
    if ns.quiet >= 2:
        return logging.ERROR
    if ns.quiet == 1:
        return logging.WARNING
    return logging.INFO


def _split_clang_args(raw: str) -> List[str]:
    if not raw:
        return []
    try:
        return shlex.split(raw)
    except ValueError as ex:
        # Unbalanced quotes; fall back to whitespace split
        logger.warning("Falling back to naive clang args split due to parsing error: %s", ex)
        return raw.split()


# --------------------------
# CLI
# --------------------------

def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Generate AngelScript registration glue from C++ headers")

    src = p.add_argument_group("inputs")
    src.add_argument(
        "--headers",
        action="append",
        default=[],
        help="Header file or directory to parse (repeatable). Directories are searched recursively.",
    )
    src.add_argument(
        "--clang-args",
        default="",
        help="Additional clang arguments (e.g., -I/path/include -DURHO3D_PHYSICS -std=c++17)",
    )
    src.add_argument(
        "--catalog-json",
        default=None,
        help="Read the catalog and declarations from a JSON file instead of parsing headers.",
    )
    src.add_argument(
        "--include-filter",
        action="append",
        default=[],
        help="Only collect declarations whose file path starts with any of these prefixes. Repeatable.",
    )
    src.add_argument(
        "--exclude-regex",
        default="",
        help="Regex to exclude classes by name.",
    )
    src.add_argument(
        "--strip-namespace",
        action="append",
        default=None,
        help="Namespace qualifier removed from type spellings (default: Urho3D). Repeatable.",
    )

    out = p.add_argument_group("output")
    out.add_argument(
        "--output-dir",
        default="generated",
        help="Output directory for generated code.",
    )
    out.add_argument(
        "--output-file",
        default="GeneratedGlue.cpp",
        help="Name of the generated glue source.",
    )
    out.add_argument(
        "--templates-dir",
        default=None,
        help="Optional templates directory. Templates found there override the packaged ones.",
    )
    out.add_argument(
        "--register-function",
        default=EmitterConfig.register_function,
        help="Name of the generated registration function.",
    )
    out.add_argument(
        "--no-fields",
        action="store_true",
        help="Do not register public fields as object properties.",
    )
    out.add_argument(
        "--no-manifest",
        action="store_true",
        help="Do not emit the JSON manifest alongside generated sources.",
    )
    out.add_argument(
        "--dry-run",
        action="store_true",
        help="Convert everything and report, but do not write files.",
    )

    log = p.add_argument_group("logging")
    log.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for DEBUG, which lists every skipped declaration).",
    )
    log.add_argument(
        "-q",
        "--quiet",
        action="count",
        default=0,
        help="Decrease verbosity (-q for WARNING, -qq for ERROR).",
    )
    log.add_argument(
        "--log-level",
        type=str.upper,
        choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"],
        default=None,
        help="Explicit log level (overrides -v/-q).",
    )
    log.add_argument(
        "--log-format",
        default="%(levelname)s: %(message)s",
        help="Logging format string.",
    )
    log.add_argument(
        "--log-file",
        default=None,
        help="Optional file to write logs to.",
    )

    return p.parse_args(argv)


def collect_inputs(ns: argparse.Namespace, config: ConversionConfig) -> Optional[BindingInputs]:
    """
    Build the binding inputs from --catalog-json or --headers.
    Returns None when neither yields anything to work on.
    """
    if ns.catalog_json:
        return load_catalog(ns.catalog_json, config=config)

    headers = discover_header_files(ns.headers)
    if not headers:
        return None

    # Imported here so that JSON-only runs do not need libclang
    from .parsing.clang_catalog import DEFAULT_STRIP_NAMESPACES, collect_bindings_from_headers

    return collect_bindings_from_headers(
        headers=headers,
        clang_args=_split_clang_args(ns.clang_args),
        include_filters=ns.include_filter or None,
        exclude_regex=re.compile(ns.exclude_regex) if ns.exclude_regex else None,
        strip_namespaces=ns.strip_namespace or DEFAULT_STRIP_NAMESPACES,
        config=config,
    )


# --------------------------
# Main
# --------------------------

def main(argv: Optional[Sequence[str]] = None) -> int:
    ns = parse_args(argv)

    configure_logging(level=_log_level(ns), to_file=ns.log_file, fmt=ns.log_format)

    ctx = GenerationContext(
        output_dir=Path(ns.output_dir).resolve(),
        templates_dir=Path(ns.templates_dir).resolve() if ns.templates_dir else None,
        output_file=ns.output_file,
        dry_run=ns.dry_run,
    )

    try:
        renderer = TemplateRenderer(ctx.templates_dir)
    except Exception:
        logger.exception("Failed to initialize templating")
        return 1

    if not ns.catalog_json and not ns.headers:
        logger.error("Nothing to do. Provide --headers or --catalog-json.")
        return 2

    try:
        inputs = collect_inputs(ns, DEFAULT_CONFIG)
    except Exception:
        logger.exception("Failed to collect declarations")
        return 3
    if inputs is None:
        logger.error("No headers found to parse.")
        return 2

    try:
        emitter = AngelScriptEmitter(
            ctx=ctx,
            renderer=renderer,
            config=EmitterConfig(
                register_function=ns.register_function,
                emit_fields=not ns.no_fields,
            ),
        )
        report = emitter.emit(inputs)
    except Exception:
        logger.exception("Failed to generate files")
        return 4

    if not ns.no_manifest:
        try:
            emit_manifest(ctx, report, inputs)
        except Exception:
            logger.exception("Failed to emit generation manifest")
            return 5

    if ctx.dry_run:
        logger.info("Dry-run complete (no files written).")
    return 0


if __name__ == "__main__":
    sys.exit(main())
