#!/usr/bin/env python3
"""
Data models for the AngelScript binding generator.

This module provides strongly-typed, serializable data structures to describe:
- C++ type occurrences (name + pointer/reference/const qualifiers)
- Function parameters, free functions, static and instance methods
- Classes, enums and `using` aliases known to the symbol catalog
- Conversion results and wrapper descriptors produced by the core
- Generation context (paths, flags)

The models are consumed by:
- The catalog builders (libclang traversal or JSON loading) that populate them
- The converter and wrapper generator that map them to AngelScript
- The emitter/templates (Jinja2) that render the generated glue source
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

# --------------------------
# C++ Type model
# --------------------------

_DROPPED_KEYWORDS = ("volatile", "class", "struct", "enum", "typename")


def _split_declarator_suffix(spelling: str) -> Tuple[str, str]:
    """
    Split 'const Vector<Node*> * const &' into ('const Vector<Node*>', '* const &').
    Only '*', '&' and 'const' after the outermost type name belong to the suffix.
    """
    s = spelling.rstrip()
    end = len(s)
    while end > 0:
        ch = s[end - 1]
        if ch in "*& \t":
            end -= 1
            continue
        if s[:end].endswith("const") and (end - 5 == 0 or not (s[end - 6].isalnum() or s[end - 6] == "_")):
            # 'const' directly after a '*' qualifies the pointer, not the pointee
            before = s[:end - 5].rstrip()
            if before.endswith("*") or before.endswith("&"):
                end -= 5
                continue
        break
    return s[:end], s[end:]


def _top_level_words(head: str) -> List[str]:
    """Words outside template brackets."""
    words: List[str] = []
    depth = 0
    current = ""
    for ch in head:
        if ch == "<":
            depth += 1
        elif ch == ">":
            depth -= 1
        if depth == 0 and ch.isspace():
            if current:
                words.append(current)
            current = ""
        else:
            current += ch
    if current:
        words.append(current)
    return words


def normalize_type_name(name: str) -> str:
    """
    Canonical spelling of a base type name: no spaces around template
    punctuation, single spaces elsewhere ('Vector< SharedPtr< Node > >' ->
    'Vector<SharedPtr<Node>>', 'unsigned  int' -> 'unsigned int').
    """
    s = re.sub(r"\s+", " ", name.strip())
    s = re.sub(r"\s*([<>,*&])\s*", r"\1", s)
    return s


@dataclass(frozen=True)
class CppType:
    """
    One occurrence of a C++ type.

    `name` is the base type including template arguments, without top-level
    const/pointer/reference qualifiers. Qualifier flags are independent; the
    rvalue-reference, double-pointer and reference-to-pointer shapes are kept
    so the converter can reject them explicitly.
    """
    name: str
    is_const: bool = False
    is_reference: bool = False
    is_pointer: bool = False
    is_rvalue_reference: bool = False
    is_double_pointer: bool = False
    is_reference_to_pointer: bool = False

    @staticmethod
    def from_spelling(spelling: str) -> CppType:
        """
        Parse a C++ type spelling such as 'const Vector<String>&', 'Node*',
        'int&&', 'Node**', 'Node*&' or 'char const*'.
        """
        head, suffix = _split_declarator_suffix(spelling or "")
        ptr_ops = "".join(ch for ch in suffix if ch in "*&")

        words = _top_level_words(head)
        is_const = "const" in words
        words = [w for w in words if w != "const" and w not in _DROPPED_KEYWORDS]
        name = normalize_type_name(" ".join(words)) or "void"

        stars = ptr_ops.count("*")
        is_rvalue = ptr_ops.endswith("&&")
        is_reference = ptr_ops.endswith("&") and not is_rvalue
        return CppType(
            name=name,
            is_const=is_const,
            is_reference=is_reference,
            is_pointer=stars > 0,
            is_rvalue_reference=is_rvalue,
            is_double_pointer=stars >= 2,
            is_reference_to_pointer=is_reference and stars > 0,
        )

    @property
    def spelling(self) -> str:
        """Canonical C++ text for this occurrence."""
        out = f"const {self.name}" if self.is_const else self.name
        if self.is_double_pointer:
            out += "**"
        elif self.is_pointer:
            out += "*"
        if self.is_rvalue_reference:
            out += "&&"
        elif self.is_reference:
            out += "&"
        return out

    def __str__(self) -> str:
        return self.spelling

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "spelling": self.spelling,
            "is_const": self.is_const,
            "is_reference": self.is_reference,
            "is_pointer": self.is_pointer,
            "is_rvalue_reference": self.is_rvalue_reference,
            "is_double_pointer": self.is_double_pointer,
            "is_reference_to_pointer": self.is_reference_to_pointer,
        }

    @staticmethod
    def from_dict(d: Any) -> CppType:
        # Accept a bare spelling string as shorthand
        if isinstance(d, str):
            return CppType.from_spelling(d)
        if "name" not in d and "spelling" in d:
            return CppType.from_spelling(d["spelling"])
        return CppType(
            name=normalize_type_name(d["name"]),
            is_const=bool(d.get("is_const", False)),
            is_reference=bool(d.get("is_reference", False)),
            is_pointer=bool(d.get("is_pointer", False)),
            is_rvalue_reference=bool(d.get("is_rvalue_reference", False)),
            is_double_pointer=bool(d.get("is_double_pointer", False)),
            is_reference_to_pointer=bool(d.get("is_reference_to_pointer", False)),
        )


class Usage(Enum):
    """Where a type occurrence appears in a signature."""
    PARAMETER = auto()
    RETURN = auto()


# --------------------------
# Function/Parameter models
# --------------------------

class FunctionKind(Enum):
    FREE = auto()
    STATIC = auto()
    INSTANCE = auto()


@dataclass
class ParameterInfo:
    name: str
    cpp_type: CppType
    default_value: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "cpp_type": self.cpp_type.to_dict(),
            "default_value": self.default_value,
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> ParameterInfo:
        return ParameterInfo(
            name=d["name"],
            cpp_type=CppType.from_dict(d.get("cpp_type", d.get("type", "void"))),
            default_value=d.get("default_value"),
        )


@dataclass
class FunctionInfo:
    """
    A free function, class static method or class instance method.
    Overloads are represented as separate instances.
    """
    name: str
    return_type: CppType
    parameters: List[ParameterInfo] = field(default_factory=list)
    kind: FunctionKind = FunctionKind.FREE
    class_name: Optional[str] = None
    is_const: bool = False
    header_file: str = ""
    location: str = ""  # e.g. "Scene/Node.h:123"
    # Template parameter -> concrete type, for members of class templates
    template_specialization: Dict[str, str] = field(default_factory=dict)
    usr: str = ""

    @property
    def qualified_name(self) -> str:
        return f"{self.class_name}::{self.name}" if self.class_name else self.name

    @property
    def cpp_signature(self) -> str:
        """
        Human-friendly C++ signature string (without default values), used for diagnostics.
        """
        params = ", ".join(p.cpp_type.spelling for p in self.parameters)
        const_q = " const" if self.is_const and self.kind == FunctionKind.INSTANCE else ""
        static_q = "static " if self.kind == FunctionKind.STATIC else ""
        return f"{static_q}{self.return_type.spelling} {self.qualified_name}({params}){const_q}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "qualified_name": self.qualified_name,
            "kind": self.kind.name,
            "class_name": self.class_name,
            "is_const": self.is_const,
            "return_type": self.return_type.to_dict(),
            "parameters": [p.to_dict() for p in self.parameters],
            "header_file": self.header_file,
            "location": self.location,
            "template_specialization": dict(self.template_specialization),
            "cpp_signature": self.cpp_signature,
            "usr": self.usr,
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> FunctionInfo:
        return FunctionInfo(
            name=d["name"],
            return_type=CppType.from_dict(d.get("return_type", "void")),
            parameters=[ParameterInfo.from_dict(p) for p in d.get("parameters", [])],
            kind=FunctionKind[d.get("kind", "FREE")],
            class_name=d.get("class_name"),
            is_const=bool(d.get("is_const", False)),
            header_file=d.get("header_file", ""),
            location=d.get("location", ""),
            template_specialization=dict(d.get("template_specialization", {})),
            usr=d.get("usr", ""),
        )


@dataclass
class FieldInfo:
    """A public, non-static data member, registered as an object property."""
    name: str
    cpp_type: CppType
    class_name: str
    header_file: str = ""
    location: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "cpp_type": self.cpp_type.to_dict(),
            "class_name": self.class_name,
            "header_file": self.header_file,
            "location": self.location,
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> FieldInfo:
        return FieldInfo(
            name=d["name"],
            cpp_type=CppType.from_dict(d.get("cpp_type", d.get("type", "void"))),
            class_name=d["class_name"],
            header_file=d.get("header_file", ""),
            location=d.get("location", ""),
        )


# --------------------------
# Catalog entries
# --------------------------

@dataclass(frozen=True)
class ClassInfo:
    name: str
    id: str = ""  # stable id (clang USR or documentation compound id)
    is_internal: bool = False
    is_ref_counted: bool = False
    comment: str = ""
    header_file: str = ""
    bases: Tuple[str, ...] = ()

    def has_marker(self, marker: str) -> bool:
        return marker in self.comment

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "id": self.id,
            "is_internal": self.is_internal,
            "is_ref_counted": self.is_ref_counted,
            "comment": self.comment,
            "header_file": self.header_file,
            "bases": list(self.bases),
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> ClassInfo:
        return ClassInfo(
            name=d["name"],
            id=d.get("id", ""),
            is_internal=bool(d.get("is_internal", False)),
            is_ref_counted=bool(d.get("is_ref_counted", False)),
            comment=d.get("comment", ""),
            header_file=d.get("header_file", ""),
            bases=tuple(d.get("bases", ())),
        )


@dataclass(frozen=True)
class EnumInfo:
    name: str
    values: Tuple[str, ...] = ()
    header_file: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "values": list(self.values), "header_file": self.header_file}

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> EnumInfo:
        return EnumInfo(name=d["name"], values=tuple(d.get("values", ())), header_file=d.get("header_file", ""))


@dataclass(frozen=True)
class UsingInfo:
    name: str
    target: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "target": self.target}

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> UsingInfo:
        return UsingInfo(name=d["name"], target=d.get("target", ""))


# --------------------------
# Conversion output
# --------------------------

@dataclass(frozen=True)
class ConversionResult:
    """
    Result of converting one parameter or return type.

    - script_declaration: text for the AngelScript-visible declaration
    - native_override_declaration: wrapper-side C++ type (return) or
      "type name" (parameter) replacing the original, when the script runtime
      can not pass the original shape
    - glue_statement: one C++ statement, unindented. For parameters it declares
      a local with the original parameter name; for returns it performs the return.
    """
    script_declaration: str
    native_override_declaration: Optional[str] = None
    glue_statement: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "script_declaration": self.script_declaration,
            "native_override_declaration": self.native_override_declaration,
            "glue_statement": self.glue_statement,
        }


@dataclass(frozen=True)
class WrapperDescriptor:
    function: FunctionInfo
    converted_params: Tuple[ConversionResult, ...]
    converted_return: ConversionResult
    name: str
    template_version: bool = False
    guard_macro: Optional[str] = None

    @property
    def wrapper_return_type(self) -> str:
        return self.converted_return.native_override_declaration or self.function.return_type.spelling

    @property
    def returns_void(self) -> bool:
        return self.wrapper_return_type == "void"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "function": self.function.to_dict(),
            "converted_params": [c.to_dict() for c in self.converted_params],
            "converted_return": self.converted_return.to_dict(),
            "template_version": self.template_version,
            "guard_macro": self.guard_macro,
        }


# --------------------------
# Generation context
# --------------------------

@dataclass
class GenerationContext:
    """
    Parameters for a single generation run.

    Paths are absolute. Emitters should rely on these rather than guessing.
    """
    output_dir: Path
    templates_dir: Optional[Path] = None
    output_file: str = "GeneratedGlue.cpp"
    dry_run: bool = False

    @property
    def output_path(self) -> Path:
        return self.output_dir / self.output_file

    def to_dict(self) -> Dict[str, Any]:
        return {
            "output_dir": str(self.output_dir),
            "templates_dir": str(self.templates_dir) if self.templates_dir else None,
            "output_file": self.output_file,
            "dry_run": self.dry_run,
        }


__all__ = [
    "CppType",
    "Usage",
    "FunctionKind",
    "ParameterInfo",
    "FunctionInfo",
    "FieldInfo",
    "ClassInfo",
    "EnumInfo",
    "UsingInfo",
    "ConversionResult",
    "WrapperDescriptor",
    "GenerationContext",
    "normalize_type_name",
]
