#!/usr/bin/env python3
"""
Clang-based catalog builder.

Traverses engine headers with libclang and produces the inputs of a binding
run: a SymbolCatalog (classes, enums, `using`/`typedef` aliases) plus the
free functions, class methods and public fields to bind.

Key features:
- Class discovery with include path filters and exclusion regex.
- Ref-counted detection by walking base classes up to RefCounted.
- Doc markers (NO_BIND, FAKE_REF, @internal) taken from raw comments.
- Parameter default values recovered from the declaration tokens.
- Deduplication via Clang USR.

Requirements:
- Python clang bindings (pip install clang)
- libclang available on the system or discoverable via standard mechanisms
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)

try:
    from clang import cindex  # type: ignore
except ImportError:  # pragma: no cover
    cindex = None  # Lazy error on use

from ..catalog import BindingInputs, SymbolCatalog
from ..config import ConversionConfig
from ..models import (
    ClassInfo,
    CppType,
    EnumInfo,
    FieldInfo,
    FunctionInfo,
    FunctionKind,
    ParameterInfo,
    UsingInfo,
)

REF_COUNTED_ROOT = "RefCounted"
DEFAULT_STRIP_NAMESPACES: Tuple[str, ...] = ("Urho3D",)

_INTERNAL_MARKERS = ("@internal", "\\internal")
_CLASS_KINDS = ("CLASS_DECL", "STRUCT_DECL")


# --------------------------
# libclang setup
# --------------------------

def ensure_libclang_loaded() -> None:
    """
    Ensure clang.cindex is importable and the shared library can be loaded.
    """
    if cindex is None:
        raise RuntimeError(
            "libclang (clang.cindex) is not available. Install clang Python bindings "
            "(e.g., pip install clang) and ensure libclang is discoverable."
        )
    try:
        cindex.Index.create()
    except cindex.LibclangError as e:
        raise RuntimeError(f"libclang shared library could not be loaded: {e}") from e


def parse_translation_unit(header: Path, clang_args: List[str]):
    """
    Parse a single header as C++ without function bodies.
    """
    idx = cindex.Index.create()
    args = list(clang_args)
    if not any(a.startswith("-x") for a in args):
        args = ["-x", "c++"] + args
    # Silence warnings from system headers
    if not any(a.startswith("-W") for a in args):
        args.append("-Wno-everything")
    return idx.parse(
        str(header),
        args=args,
        options=(
            cindex.TranslationUnit.PARSE_SKIP_FUNCTION_BODIES
            | cindex.TranslationUnit.PARSE_INCOMPLETE
        ),
    )


# --------------------------
# Helpers
# --------------------------

_SYSTEM_DIR_PREFIXES: Tuple[str, ...] = ("/usr/include", "/usr/local/include", "/usr/lib")


def _location_file(node: Any) -> Optional[str]:
    loc = node.location
    if loc is None or loc.file is None:
        return None
    return str(Path(str(loc.file.name)).resolve())


def _should_consider_location(node: Any, include_filters: Optional[List[str]]) -> bool:
    """
    If filters are provided, only accept nodes whose file path starts with any filter.
    Otherwise, exclude system header locations.
    """
    fpath = _location_file(node)
    if fpath is None:
        return node.kind.name in ("NAMESPACE", "TRANSLATION_UNIT")
    if include_filters:
        return any(fpath.startswith(f) for f in include_filters)
    return not fpath.startswith(_SYSTEM_DIR_PREFIXES)


def _location_string(node: Any, root: Optional[str]) -> str:
    fpath = _location_file(node)
    if fpath is None:
        return ""
    return f"{_relative_header(fpath, root)}:{node.location.line}"


def _relative_header(fpath: str, root: Optional[str]) -> str:
    """Header path relative to the matching include filter, e.g. 'Scene/Node.h'."""
    if root and fpath.startswith(root):
        return fpath[len(root):].lstrip("/")
    return fpath


class _SpellingCleaner:
    """Drops known namespace qualifiers ('Urho3D::Node' -> 'Node') from clang type spellings."""

    def __init__(self, namespaces: Iterable[str]) -> None:
        names = [re.escape(n) for n in namespaces if n]
        self._re = re.compile(r"\b(?:%s)::" % "|".join(names)) if names else None

    def __call__(self, spelling: str) -> str:
        return self._re.sub("", spelling) if self._re else spelling


def _join_tokens(tokens: List[str]) -> str:
    out = ""
    for tok in tokens:
        # Keep a space only between two word-like tokens ("unsigned int")
        if out and (out[-1].isalnum() or out[-1] == "_") and (tok[0].isalnum() or tok[0] == "_"):
            out += " "
        out += tok
    return out


def _default_value(param: Any) -> Optional[str]:
    """
    Text after '=' in a parameter declaration, or None.
    """
    tokens = [t.spelling for t in param.get_tokens()]
    if "=" not in tokens:
        return None
    value = tokens[tokens.index("=") + 1:]
    return _join_tokens(value) or None


def _is_public(node: Any) -> bool:
    return node.access_specifier == cindex.AccessSpecifier.PUBLIC


# --------------------------
# Collector
# --------------------------

class _Collector:
    """
    Accumulates catalog entries and declarations across translation units.
    """

    def __init__(
        self,
        include_filters: Optional[List[str]],
        exclude_regex: Optional[re.Pattern],
        clean: _SpellingCleaner,
    ) -> None:
        self.include_filters = include_filters
        self.exclude_regex = exclude_regex
        self.clean = clean
        self.classes: Dict[str, ClassInfo] = {}
        self.enums: Dict[str, EnumInfo] = {}
        self.usings: Dict[str, UsingInfo] = {}
        self.functions: Dict[str, FunctionInfo] = {}
        self.fields: Dict[str, FieldInfo] = {}

    # ---- Paths ----

    def _header_for(self, node: Any) -> str:
        fpath = _location_file(node) or ""
        root = next((f for f in (self.include_filters or []) if fpath.startswith(f)), None)
        return _relative_header(fpath, root)

    def _location_for(self, node: Any) -> str:
        fpath = _location_file(node) or ""
        root = next((f for f in (self.include_filters or []) if fpath.startswith(f)), None)
        return _location_string(node, root)

    def _cpp_type(self, tp: Any) -> CppType:
        return CppType.from_spelling(self.clean(tp.spelling))

    # ---- Traversal ----

    def visit(self, node: Any) -> None:
        kind_name = node.kind.name
        if kind_name not in ("TRANSLATION_UNIT",) and not _should_consider_location(node, self.include_filters):
            return

        if kind_name == "NAMESPACE" or kind_name == "TRANSLATION_UNIT":
            for c in node.get_children():
                self.visit(c)
        elif kind_name in _CLASS_KINDS:
            self._visit_class(node, nested=False)
        elif kind_name == "ENUM_DECL":
            self._visit_enum(node)
        elif kind_name in ("TYPE_ALIAS_DECL", "TYPEDEF_DECL"):
            self._visit_alias(node)
        elif kind_name == "FUNCTION_DECL":
            self._visit_function(node, None, FunctionKind.FREE)

    def _visit_class(self, node: Any, nested: bool) -> None:
        name = node.spelling
        if not node.is_definition() or not name:
            return
        if self.exclude_regex and self.exclude_regex.search(name):
            logger.info("Excluding class '%s' due to exclude regex", name)
            return

        comment = node.raw_comment or ""
        is_internal = any(m in comment for m in _INTERNAL_MARKERS)
        if nested and not _is_public(node):
            is_internal = True

        bases = tuple(
            self.clean(c.type.spelling)
            for c in node.get_children()
            if c.kind.name == "CXX_BASE_SPECIFIER"
        )
        usr = node.get_usr() or ""
        key = usr or name
        if key not in self.classes:
            self.classes[key] = ClassInfo(
                name=name,
                id=usr,
                is_internal=is_internal,
                comment=comment,
                header_file=self._header_for(node),
                bases=bases,
            )

        for c in node.get_children():
            ck = c.kind.name
            if ck in _CLASS_KINDS:
                self._visit_class(c, nested=True)
            elif ck == "ENUM_DECL" and _is_public(c):
                self._visit_enum(c)
            elif not _is_public(c) or is_internal:
                continue
            elif ck == "CXX_METHOD":
                kind = FunctionKind.STATIC if c.is_static_method() else FunctionKind.INSTANCE
                self._visit_function(c, name, kind)
            elif ck == "FIELD_DECL":
                self._visit_field(c, name)

    def _visit_enum(self, node: Any) -> None:
        name = node.spelling
        if not name or name in self.enums:
            return
        values = tuple(c.spelling for c in node.get_children() if c.kind.name == "ENUM_CONSTANT_DECL")
        self.enums[name] = EnumInfo(name=name, values=values, header_file=self._header_for(node))

    def _visit_alias(self, node: Any) -> None:
        name = node.spelling
        if not name or name in self.usings:
            return
        target = self.clean(node.underlying_typedef_type.spelling)
        self.usings[name] = UsingInfo(name=name, target=target)

    def _visit_function(self, node: Any, class_name: Optional[str], kind: FunctionKind) -> None:
        name = node.spelling
        if not name or name.startswith("operator"):
            return
        usr = node.get_usr() or ""
        key = usr or f"{class_name}::{name}:{node.type.spelling}"
        if key in self.functions:
            return

        params = [
            ParameterInfo(
                name=p.spelling or f"arg{i}",
                cpp_type=self._cpp_type(p.type),
                default_value=_default_value(p),
            )
            for i, p in enumerate(node.get_arguments(), start=1)
        ]
        self.functions[key] = FunctionInfo(
            name=name,
            return_type=self._cpp_type(node.result_type),
            parameters=params,
            kind=kind,
            class_name=class_name,
            is_const=kind == FunctionKind.INSTANCE and node.is_const_method(),
            header_file=self._header_for(node),
            location=self._location_for(node),
            usr=usr,
        )

    def _visit_field(self, node: Any, class_name: str) -> None:
        key = node.get_usr() or f"{class_name}::{node.spelling}"
        if key in self.fields:
            return
        self.fields[key] = FieldInfo(
            name=node.spelling,
            cpp_type=self._cpp_type(node.type),
            class_name=class_name,
            header_file=self._header_for(node),
            location=self._location_for(node),
        )

    # ---- Post-processing ----

    def resolved_classes(self) -> List[ClassInfo]:
        """Classes with is_ref_counted filled in from their base chains."""
        by_name = {c.name: c for c in self.classes.values()}
        memo: Dict[str, bool] = {}

        def ref_counted(name: str, seen: Tuple[str, ...] = ()) -> bool:
            if name == REF_COUNTED_ROOT:
                return True
            if name in memo:
                return memo[name]
            ci = by_name.get(name)
            if ci is None or name in seen:
                return False
            memo[name] = any(ref_counted(b, seen + (name,)) for b in ci.bases)
            return memo[name]

        out: List[ClassInfo] = []
        for ci in self.classes.values():
            rc = ref_counted(ci.name)
            out.append(ClassInfo(
                name=ci.name,
                id=ci.id,
                is_internal=ci.is_internal,
                is_ref_counted=rc,
                comment=ci.comment,
                header_file=ci.header_file,
                bases=ci.bases,
            ))
        return sorted(out, key=lambda c: c.name)


# --------------------------
# Public API
# --------------------------

def collect_bindings_from_headers(
    headers: Iterable[Path],
    clang_args: List[str],
    include_filters: Optional[List[str]] = None,
    exclude_regex: Optional[re.Pattern] = None,
    strip_namespaces: Iterable[str] = DEFAULT_STRIP_NAMESPACES,
    config: Optional[ConversionConfig] = None,
    emit_diagnostics: bool = True,
) -> BindingInputs:
    """
    Parse headers and return the catalog plus functions and fields to bind.

    Parameters:
    - headers: Header files to parse (directories must be expanded by the caller).
    - clang_args: Command line arguments for clang (include paths, defines, -std, etc.).
    - include_filters: Only declarations whose file starts with one of these prefixes are
      collected; header paths are recorded relative to the matching prefix.
    - exclude_regex: Regular expression to exclude classes by name.
    - strip_namespaces: Namespace qualifiers removed from type spellings.
    - emit_diagnostics: Whether to log clang diagnostics.
    """
    ensure_libclang_loaded()

    filters = [str(Path(f).resolve()) for f in (include_filters or [])]
    collector = _Collector(filters or None, exclude_regex, _SpellingCleaner(strip_namespaces))

    for header in headers:
        tu = parse_translation_unit(header, clang_args)
        if emit_diagnostics:
            for diag in tu.diagnostics:
                logger.warning("[clang] %s", diag)
        collector.visit(tu.cursor)

    catalog = SymbolCatalog(
        classes=collector.resolved_classes(),
        enums=collector.enums.values(),
        usings=collector.usings.values(),
        config=config,
    )
    inputs = BindingInputs(
        catalog=catalog,
        functions=list(collector.functions.values()),
        fields=list(collector.fields.values()),
    )
    logger.info(
        "Collected %r, %d function(s) and %d field(s)",
        catalog, len(inputs.functions), len(inputs.fields),
    )
    return inputs


__all__ = [
    "collect_bindings_from_headers",
    "parse_translation_unit",
    "ensure_libclang_loaded",
]
