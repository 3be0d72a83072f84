#!/usr/bin/env python3
"""
Variable converter: maps C++ parameter and return types to AngelScript.

This module decides, for one type occurrence and its usage (parameter or
return), what the script runtime sees and what glue the wrapper needs:

- Primitives, catalog classes and enums map to their script names
- Pointers become borrowed handles (`T@+`) only for ref-counted or FAKE_REF classes
- `const T&` parameters become `const T&in`
- Engine containers (Vector<String>, PODVector<T>, PODVector<T*>,
  Vector<SharedPtr<T>>) are passed as CScriptArray* with conversion glue
- `SharedPtr<T>` returns hand their single reference over to the runtime

Typical usage:

    from .catalog import SymbolCatalog
    from .converter import VariableConverter
    from .models import CppType, Usage

    converter = VariableConverter(catalog)
    result = converter.convert(CppType.from_spelling("const Vector<String>&"), "names", Usage.PARAMETER)
    # result.script_declaration == "Array<String>@+"
    # result.native_override_declaration == "CScriptArray* names_conv"

Design notes:
- Each type is first reduced to a Shape (shapes.py); the rule tables below
  hold one rule per ShapeKind and usage. A rule returns None to fall through
  to the general ladder (`_fallback_declaration`).
- Rejections raise a BindingError subclass immediately. Callers skip the
  signature and carry on.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional

from .catalog import SymbolCatalog
from .config import ConversionConfig
from .default_values import translate_default_value
from .errors import (
    DisallowedContextUsage,
    UnbindableReason,
    UnbindableType,
    UnsupportedDefaultValue,
    UnsupportedOwnershipTransfer,
    UnsupportedPointerOwnership,
    UnsupportedQualifierShape,
)
from .models import ConversionResult, CppType, Usage
from .primitives import script_name_or_self
from .resolver import TypeResolver
from .shapes import Shape, ShapeKind, classify_shape


class VariableConverter:
    """
    Converts parameter and return types against a fixed SymbolCatalog.
    Stateless apart from the catalog, so one instance can serve a whole run.
    """

    def __init__(self, catalog: SymbolCatalog, config: Optional[ConversionConfig] = None) -> None:
        self.catalog = catalog
        self.config = config or catalog.config
        self.resolver = TypeResolver(catalog)

    # ---- Public API ----

    def convert(
        self,
        cpp_type: CppType,
        name: str = "",
        usage: Usage = Usage.PARAMETER,
        default_value: Optional[str] = None,
    ) -> ConversionResult:
        """
        Convert one occurrence. `name` may be empty for return types.
        Raises a BindingError subclass when the occurrence can not be bound.
        """
        self._reject_qualifier_shape(cpp_type)

        shape = classify_shape(cpp_type, self.config)
        rules = _RETURN_RULES if usage == Usage.RETURN else _PARAMETER_RULES
        result = rules[shape.kind](self, cpp_type, shape, name, default_value)
        if result is not None:
            return result

        return ConversionResult(script_declaration=self._fallback_declaration(cpp_type, usage, default_value))

    def script_declaration(self, cpp_type: CppType, usage: Usage) -> str:
        """
        Declaration-only conversion for signatures registered without a
        wrapper. Container shapes have no glue here, so they go through the
        general ladder and are rejected there.
        """
        self._reject_qualifier_shape(cpp_type)
        return self._fallback_declaration(cpp_type, usage, None)

    # ---- Shared checks ----

    def _reject_qualifier_shape(self, t: CppType) -> None:
        if t.is_rvalue_reference or t.is_double_pointer or t.is_reference_to_pointer:
            raise UnsupportedQualifierShape(
                f'Error: type "{t.spelling}" can not automatically bind', t.spelling
            )

    def _reject_denylisted(self, t: CppType, element: str) -> None:
        if element in self.config.ownership_denylist:
            raise UnsupportedOwnershipTransfer(
                f'Error: type "{t.spelling}" can not automatically bind: '
                f'ownership of "{element}" can not be transferred to the script runtime',
                t.spelling,
            )

    def _reject_default(self, t: CppType, default_value: Optional[str]) -> None:
        if default_value:
            raise UnsupportedDefaultValue(
                f'Error: default value "{default_value}" for "{t.spelling}" is not supported',
                t.spelling,
                default_value=default_value,
            )

    def _converted_param_name(self, name: str) -> str:
        return name + self.config.converted_param_suffix

    def _array_param(self, name: str) -> str:
        return f"{self.config.script_array_type} {self._converted_param_name(name)}"

    # ---- Return rules ----

    def _void_return(self, t: CppType, shape: Shape, name: str, default_value: Optional[str]) -> Optional[ConversionResult]:
        if t.is_pointer:
            return None
        return ConversionResult(script_declaration="void")

    def _string_sequence_return(self, t, shape, name, default_value):
        # Works for both Vector<String> and const Vector<String>&
        if t.is_pointer:
            return None
        return ConversionResult(
            script_declaration="Array<String>@",
            native_override_declaration=self.config.script_array_type,
            glue_statement='return VectorToArray<String>(result, "Array<String>");',
        )

    def _single_owner_handle_return(self, t, shape, name, default_value):
        element = shape.element or ""
        script_element = script_name_or_self(element)
        self._reject_denylisted(t, element)
        return ConversionResult(
            script_declaration=f"{script_element}@+",
            native_override_declaration=f"{element}*",
            glue_statement="return result.Detach();",
        )

    def _handle_sequence_return(self, t, shape, name, default_value):
        element = shape.element or ""
        script_element = script_name_or_self(element)
        if shape.kind == ShapeKind.SINGLE_OWNER_HANDLE_SEQUENCE:
            self._reject_denylisted(t, element)
        return ConversionResult(
            script_declaration=f"Array<{script_element}@>@",
            native_override_declaration=self.config.script_array_type,
            glue_statement=f'return VectorToHandleArray(result, "Array<{script_element}@>");',
        )

    def _value_sequence_return(self, t, shape, name, default_value):
        # Returned by value or by const reference; a mutable reference is not a copy
        if t.is_const != t.is_reference:
            return None
        script_element = script_name_or_self(shape.element or "")
        return ConversionResult(
            script_declaration=f"Array<{script_element}>@",
            native_override_declaration=self.config.script_array_type,
            glue_statement=f'return VectorToArray(result, "Array<{script_element}>");',
        )

    def _context_return(self, t, shape, name, default_value):
        raise DisallowedContextUsage(f'Error: type "{t.spelling}" can not be returned', t.spelling)

    # ---- Parameter rules ----

    def _context_parameter(self, t, shape, name, default_value):
        raise DisallowedContextUsage(
            f'{self.config.context_type} can be used as the first parameter of constructors only',
            t.spelling,
        )

    def _string_sequence_parameter(self, t, shape, name, default_value):
        # The alias spelling is only recognised for returns
        if t.name != self.config.string_sequence_template_name or not (t.is_const and t.is_reference):
            return None
        declaration = "Array<String>@+"
        if default_value:
            declaration += " = null"
        return ConversionResult(
            script_declaration=declaration,
            native_override_declaration=self._array_param(name),
            glue_statement=f"{t.name} {name} = ArrayToVector<String>({self._converted_param_name(name)});",
        )

    def _value_sequence_parameter(self, t, shape, name, default_value):
        if not (t.is_const and t.is_reference):
            return None
        element = shape.element or ""
        self._reject_default(t, default_value)
        return ConversionResult(
            script_declaration=f"Array<{script_name_or_self(element)}>@+",
            native_override_declaration=self._array_param(name),
            glue_statement=f"{t.name} {name} = ArrayToPODVector<{element}>({self._converted_param_name(name)});",
        )

    def _pointer_sequence_parameter(self, t, shape, name, default_value):
        if not (t.is_const and t.is_reference):
            return None
        element = shape.element or ""
        self._reject_default(t, default_value)
        return ConversionResult(
            script_declaration=f"Array<{script_name_or_self(element)}@>@",
            native_override_declaration=self._array_param(name),
            glue_statement=f"{t.name} {name} = ArrayToPODVector<{element}*>({self._converted_param_name(name)});",
        )

    def _handle_sequence_parameter(self, t, shape, name, default_value):
        if not (t.is_const and t.is_reference):
            return None
        element = shape.element or ""
        self._reject_denylisted(t, element)
        self._reject_default(t, default_value)
        return ConversionResult(
            script_declaration=f"Array<{script_name_or_self(element)}@>@+",
            native_override_declaration=self._array_param(name),
            glue_statement=f"{t.name} {name} = HandleArrayToVector<{element}>({self._converted_param_name(name)});",
        )

    def _no_rule(self, t, shape, name, default_value):
        return None

    # ---- General ladder ----

    def _fallback_declaration(self, t: CppType, usage: Usage, default_value: Optional[str]) -> str:
        if t.name == self.config.context_type and usage == Usage.RETURN:
            raise DisallowedContextUsage(f'Error: type "{t.spelling}" can not be returned', t.spelling)

        # Rejects scoped, unknown, internal, NO_BIND and aliased names
        self.resolver.require_bindable(t)

        script_name = script_name_or_self(t.name)

        if script_name == "void" and t.is_pointer:
            raise UnbindableType(
                'Error: type "void*" can not automatically bind', t.spelling, reason=UnbindableReason.VOID_POINTER
            )
        if "<" in script_name:
            raise UnbindableType(
                f'Error: type "{t.spelling}" can not automatically bind',
                t.spelling,
                reason=UnbindableReason.TEMPLATE_RESIDUE,
            )

        if t.is_const and t.is_reference and usage == Usage.PARAMETER:
            declaration = f"const {script_name}&in"
        else:
            declaration = script_name
            if t.is_reference:
                declaration += "&"
            elif t.is_pointer:
                if not self.resolver.supports_handles(t.name):
                    raise UnsupportedPointerOwnership(
                        f'Error: type "{t.spelling}" can not automatically bind: '
                        f'"{t.name}" is neither ref-counted nor marked {self.config.fake_ref_marker}',
                        t.spelling,
                    )
                declaration += "@+"
            if usage == Usage.RETURN and t.is_const and not t.is_pointer:
                declaration = "const " + declaration

        if default_value:
            declaration += " = " + translate_default_value(default_value)
        return declaration


# --------------------------
# Rule tables
# --------------------------

_Rule = Callable[[VariableConverter, CppType, Shape, str, Optional[str]], Optional[ConversionResult]]

_RETURN_RULES: Dict[ShapeKind, _Rule] = {
    ShapeKind.VOID: VariableConverter._void_return,
    ShapeKind.STRING_SEQUENCE: VariableConverter._string_sequence_return,
    ShapeKind.SINGLE_OWNER_HANDLE: VariableConverter._single_owner_handle_return,
    ShapeKind.SINGLE_OWNER_HANDLE_SEQUENCE: VariableConverter._handle_sequence_return,
    ShapeKind.POINTER_SEQUENCE: VariableConverter._handle_sequence_return,
    ShapeKind.VALUE_SEQUENCE: VariableConverter._value_sequence_return,
    ShapeKind.CONTEXT: VariableConverter._context_return,
    ShapeKind.PLAIN: VariableConverter._no_rule,
}

_PARAMETER_RULES: Dict[ShapeKind, _Rule] = {
    ShapeKind.VOID: VariableConverter._no_rule,
    ShapeKind.STRING_SEQUENCE: VariableConverter._string_sequence_parameter,
    ShapeKind.SINGLE_OWNER_HANDLE: VariableConverter._no_rule,
    ShapeKind.SINGLE_OWNER_HANDLE_SEQUENCE: VariableConverter._handle_sequence_parameter,
    ShapeKind.POINTER_SEQUENCE: VariableConverter._pointer_sequence_parameter,
    ShapeKind.VALUE_SEQUENCE: VariableConverter._value_sequence_parameter,
    ShapeKind.CONTEXT: VariableConverter._context_parameter,
    ShapeKind.PLAIN: VariableConverter._no_rule,
}


def _check_rule_tables() -> None:
    for label, table in (("return", _RETURN_RULES), ("parameter", _PARAMETER_RULES)):
        missing = [k.name for k in ShapeKind if k not in table]
        if missing:
            raise RuntimeError(f"No {label} conversion rule for shape(s): {', '.join(missing)}")


_check_rule_tables()


__all__ = [
    "VariableConverter",
]
