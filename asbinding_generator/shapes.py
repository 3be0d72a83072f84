#!/usr/bin/env python3
"""
Container/pointer shape classification.

Every C++ type occurrence is reduced to exactly one Shape before conversion.
The converter keeps one rule per ShapeKind and usage, so adding a kind here
without a matching rule fails at import time (see converter._check_rule_tables).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from .config import DEFAULT_CONFIG, ConversionConfig
from .models import CppType


class ShapeKind(Enum):
    VOID = auto()
    STRING_SEQUENCE = auto()               # Vector<String> / StringVector
    VALUE_SEQUENCE = auto()                # PODVector<T>
    POINTER_SEQUENCE = auto()              # PODVector<T*>
    SINGLE_OWNER_HANDLE = auto()           # SharedPtr<T>
    SINGLE_OWNER_HANDLE_SEQUENCE = auto()  # Vector<SharedPtr<T>>
    CONTEXT = auto()                       # the engine context type
    PLAIN = auto()                         # everything else


@dataclass(frozen=True)
class Shape:
    kind: ShapeKind
    element: Optional[str] = None  # T for the templated shapes


_IDENT = r"(\w+)"


def _template_pattern(template: str, inner: str) -> "re.Pattern[str]":
    return re.compile(rf"{re.escape(template)}<{inner}>")


def classify_shape(cpp_type: CppType, config: ConversionConfig = DEFAULT_CONFIG) -> Shape:
    """
    Classify on the base name alone; qualifier and usage checks belong to the rules.
    Element types must be single identifiers, so 'PODVector<Vector<int>>' is PLAIN.
    """
    name = cpp_type.name

    if name == "void":
        return Shape(ShapeKind.VOID)
    if name in config.string_sequence_names:
        return Shape(ShapeKind.STRING_SEQUENCE)
    if name == config.context_type:
        return Shape(ShapeKind.CONTEXT)

    m = _template_pattern(config.single_owner_template, _IDENT).fullmatch(name)
    if m:
        return Shape(ShapeKind.SINGLE_OWNER_HANDLE, m.group(1))

    inner_handle = rf"{re.escape(config.single_owner_template)}<{_IDENT}>"
    m = _template_pattern(config.handle_sequence_template, inner_handle).fullmatch(name)
    if m:
        return Shape(ShapeKind.SINGLE_OWNER_HANDLE_SEQUENCE, m.group(1))

    m = _template_pattern(config.value_sequence_template, _IDENT + r"\*").fullmatch(name)
    if m:
        return Shape(ShapeKind.POINTER_SEQUENCE, m.group(1))

    m = _template_pattern(config.value_sequence_template, _IDENT).fullmatch(name)
    if m:
        return Shape(ShapeKind.VALUE_SEQUENCE, m.group(1))

    return Shape(ShapeKind.PLAIN)


__all__ = [
    "ShapeKind",
    "Shape",
    "classify_shape",
]
