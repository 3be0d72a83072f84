#!/usr/bin/env python3
"""
Wrapper function naming.

Names are a pure function of (class, function name, ordered parameter base
types, template-variant flag). Overloads whose parameters differ only by
qualifiers (Node* vs Node&) sanitize to the same name; use
find_wrapper_name_collisions() to detect those before emitting.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from .models import CppType, FunctionInfo, FunctionKind


_STRIPPED_TOKENS = (" ", "::", "<", ">", "*")


def sanitize_type_name(type_name: str) -> str:
    """'Vector<SharedPtr<Node>>' -> 'VectorSharedPtrNode'"""
    for token in _STRIPPED_TOKENS:
        type_name = type_name.replace(token, "")
    return type_name


def function_wrapper_name(name: str, parameter_types: Sequence[CppType]) -> str:
    if not parameter_types:
        return name + "_void"
    return name + "".join("_" + sanitize_type_name(t.name) for t in parameter_types)


def compute_wrapper_name(
    name: str,
    parameter_types: Sequence[CppType],
    class_name: Optional[str] = None,
    template_version: bool = False,
) -> str:
    result = function_wrapper_name(name, parameter_types)
    if class_name:
        result = f"{class_name}_{result}"
    if template_version:
        result += "_template"
    return result


def wrapper_name_for(function: FunctionInfo, template_version: bool = False) -> str:
    """Wrapper name for a parsed function; the template suffix applies to instance methods only."""
    class_name = function.class_name if function.kind != FunctionKind.FREE else None
    return compute_wrapper_name(
        function.name,
        [p.cpp_type for p in function.parameters],
        class_name=class_name,
        template_version=template_version and function.kind == FunctionKind.INSTANCE,
    )


def find_wrapper_name_collisions(functions: Iterable[FunctionInfo]) -> Dict[str, List[FunctionInfo]]:
    """
    Group functions by wrapper name and return only the groups with more than
    one distinct C++ signature.
    """
    groups: Dict[str, List[FunctionInfo]] = {}
    for fn in functions:
        groups.setdefault(wrapper_name_for(fn), []).append(fn)

    collisions: Dict[str, List[FunctionInfo]] = {}
    for wrapper_name, fns in groups.items():
        if len({fn.cpp_signature for fn in fns}) > 1:
            collisions[wrapper_name] = fns
    return collisions


__all__ = [
    "sanitize_type_name",
    "function_wrapper_name",
    "compute_wrapper_name",
    "wrapper_name_for",
    "find_wrapper_name_collisions",
]
