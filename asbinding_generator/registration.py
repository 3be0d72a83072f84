#!/usr/bin/env python3
"""
AngelScript registration expressions (asFUNCTIONPR / asMETHODPR).

These always carry the native signature of the original function, never the
converted script types: the runtime's registration layer takes the real C++
function pointer type.
"""

from __future__ import annotations

import re
from typing import Mapping, Optional, Sequence

from .models import CppType, FunctionInfo, FunctionKind


def specialize(spelling: str, specialization: Optional[Mapping[str, str]]) -> str:
    """Replace template parameter names (whole identifiers only) with concrete types."""
    if not specialization:
        return spelling
    for param, concrete in specialization.items():
        spelling = re.sub(rf"\b{re.escape(param)}\b", concrete, spelling)
    return spelling


def join_param_types(parameter_types: Sequence[CppType], specialization: Optional[Mapping[str, str]] = None) -> str:
    return ", ".join(specialize(t.spelling, specialization) for t in parameter_types)


def generate_registration_expression(
    name: str,
    parameter_types: Sequence[CppType],
    return_type: CppType,
    class_name: Optional[str] = None,
    kind: FunctionKind = FunctionKind.FREE,
    is_const: bool = False,
    template_version: bool = False,
    specialization: Optional[Mapping[str, str]] = None,
) -> str:
    params = f"({join_param_types(parameter_types, specialization)})"
    return_spelling = return_type.spelling

    if kind == FunctionKind.INSTANCE:
        if is_const:
            params += " const"
        owner = "T" if template_version else class_name
        return f"asMETHODPR({owner}, {name}, {params}, {return_spelling})"

    callee = f"{class_name}::{name}" if kind == FunctionKind.STATIC and class_name else name
    return f"asFUNCTIONPR({callee}, {params}, {return_spelling})"


def registration_expression_for(function: FunctionInfo, template_version: bool = False) -> str:
    return generate_registration_expression(
        function.name,
        [p.cpp_type for p in function.parameters],
        function.return_type,
        class_name=function.class_name,
        kind=function.kind,
        is_const=function.is_const,
        template_version=template_version,
        specialization=function.template_specialization,
    )


__all__ = [
    "specialize",
    "join_param_types",
    "generate_registration_expression",
    "registration_expression_for",
]
