#!/usr/bin/env python3
"""
Translation of C++ default-argument literals to AngelScript.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

CPP_TO_SCRIPT_VALUES: Mapping[str, str] = MappingProxyType({
    "nullptr": "null",
    "Variant::emptyVariantMap": "VariantMap()",
    "NPOS": "String::NPOS",
})


def cpp_value_to_script(cpp_value: str) -> str:
    return CPP_TO_SCRIPT_VALUES.get(cpp_value, cpp_value)


def escape_quotes(text: str) -> str:
    # Declarations are embedded in C++ string literals
    return text.replace('"', '\\"')


def translate_default_value(cpp_value: str) -> str:
    """Script spelling of a default value, ready to append after ' = '."""
    return escape_quotes(cpp_value_to_script(cpp_value))


__all__ = [
    "CPP_TO_SCRIPT_VALUES",
    "cpp_value_to_script",
    "escape_quotes",
    "translate_default_value",
]
