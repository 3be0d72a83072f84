#!/usr/bin/env python3
"""
C++ primitive type names -> AngelScript primitive names.

References:
- https://www.angelcode.com/angelscript/sdk/docs/manual/doc_datatypes_primitives.html
- https://en.cppreference.com/w/cpp/language/types
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional

from .errors import UnknownPrimitiveError


PRIMITIVE_TYPES: Mapping[str, str] = MappingProxyType({
    "bool": "bool",
    "char": "int8",
    "signed char": "int8",
    "unsigned char": "uint8",
    "short": "int16",
    "unsigned short": "uint16",
    "int": "int",
    "unsigned": "uint",
    "unsigned int": "uint",
    "long long": "int64",
    "unsigned long long": "uint64",
    "float": "float",
    "double": "double",
    # Registered by the engine's manual bindings
    "long": "long",
    "unsigned long": "ulong",
    "size_t": "size_t",
    "SDL_JoystickID": "SDL_JoystickID",
})


def lookup_primitive(cpp_name: str) -> Optional[str]:
    """Exact, case-sensitive lookup. None means "not a primitive"."""
    return PRIMITIVE_TYPES.get(cpp_name)


def primitive_to_script(cpp_name: str) -> str:
    script_name = lookup_primitive(cpp_name)
    if script_name is None:
        raise UnknownPrimitiveError(f"{cpp_name} not a primitive type")
    return script_name


def script_name_or_self(cpp_name: str) -> str:
    """Primitive mapping with fallback to the type's own name."""
    script_name = lookup_primitive(cpp_name)
    return script_name if script_name is not None else cpp_name


def is_primitive(cpp_name: str) -> bool:
    return cpp_name in PRIMITIVE_TYPES


__all__ = [
    "PRIMITIVE_TYPES",
    "lookup_primitive",
    "primitive_to_script",
    "script_name_or_self",
    "is_primitive",
]
