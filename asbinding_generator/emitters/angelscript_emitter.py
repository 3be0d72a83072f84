#!/usr/bin/env python3
"""
AngelScript glue emitter.

This emitter uses the VariableConverter to:
- Only register functions whose parameter and return types can cross the
  boundary, either directly or through generated wrappers.
- Render wrapper functions (container and SharedPtr conversions) and the
  registration calls for every bound function and public field.
- Record every skipped declaration with the reason it was rejected.

Outputs:
- <output_dir>/<output_file> (wrappers + registration function)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Set

from ..catalog import BindingInputs
from ..converter import VariableConverter
from ..errors import BindingError
from ..models import ConversionResult, FieldInfo, FunctionInfo, FunctionKind, GenerationContext, Usage, WrapperDescriptor
from ..naming import find_wrapper_name_collisions
from ..registration import registration_expression_for
from ..utils import TemplateRenderer, write_text
from ..wrappers import build_wrapper_descriptor, generate_wrapper_source, needs_wrapper

logger = logging.getLogger(__name__)


# --------------------------
# Configuration
# --------------------------

@dataclass(frozen=True)
class EmitterConfig:
    """
    Configuration for the AngelScript glue emitter.
    """
    bindings_template: str = "bindings.cpp.j2"
    namespace: str = "Urho3D"
    register_function: str = "ASRegisterGenerated"
    includes: Sequence[str] = ("../Precompiled.h", "../AngelScript/APITemplates.h")
    # Prefix stripped from header paths when rendering #include lines
    header_strip_prefix: str = ""
    # Emit a "// <C++ signature>" comment above each registration call
    emit_signature_comments: bool = True
    emit_fields: bool = True


# --------------------------
# Report
# --------------------------

@dataclass
class Registration:
    statements: List[str]
    guard_macro: Optional[str] = None
    comment: Optional[str] = None


@dataclass
class GenerationReport:
    bound: List[Dict[str, Any]] = field(default_factory=list)
    skipped: List[Dict[str, Any]] = field(default_factory=list)

    def record_skip(self, what: str, error: Any) -> None:
        entry = {"declaration": what}
        if isinstance(error, BindingError):
            entry.update(error.to_dict())
        else:
            entry["message"] = str(error)
        self.skipped.append(entry)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bound_count": len(self.bound),
            "skipped_count": len(self.skipped),
            "bound": list(self.bound),
            "skipped": list(self.skipped),
        }


# --------------------------
# Emitter
# --------------------------

def script_function_declaration(
    function: FunctionInfo,
    converted_params: Sequence[ConversionResult],
    converted_return: ConversionResult,
) -> str:
    """'Node@+ GetChild(const String&in, bool = false) const'"""
    params = ", ".join(c.script_declaration for c in converted_params)
    decl = f"{converted_return.script_declaration} {function.name}({params})"
    if function.kind == FunctionKind.INSTANCE and function.is_const:
        decl += " const"
    return decl


class AngelScriptEmitter:
    """
    Emit AngelScript registration glue for a set of functions and fields.

    Usage:
        emitter = AngelScriptEmitter(ctx, renderer, config=config)
        report = emitter.emit(inputs)
    """

    def __init__(
        self,
        ctx: GenerationContext,
        renderer: TemplateRenderer,
        config: Optional[EmitterConfig] = None,
    ) -> None:
        self.ctx = ctx
        self.renderer = renderer
        self.config = config or EmitterConfig()

    # ---- Public API ----

    def emit(self, inputs: BindingInputs) -> GenerationReport:
        """
        Convert everything, render the glue source and write it. Returns the report.
        """
        converter = VariableConverter(inputs.catalog)
        report = GenerationReport()
        wrappers: List[str] = []
        registrations: List[Registration] = []

        converted: List[WrapperDescriptor] = []
        for fn in inputs.functions:
            descriptor = self._convert_function(fn, converter, report)
            if descriptor is not None:
                converted.append(descriptor)

        excluded = self._colliding_wrappers(converted, report)

        for descriptor in converted:
            if id(descriptor.function) in excluded:
                continue
            self._bind_function(descriptor, report, wrappers, registrations)

        if self.config.emit_fields:
            for fi in inputs.fields:
                self._bind_field(fi, converter, report, registrations)

        context = {
            "includes": list(self.config.includes),
            "headers": self._headers(inputs),
            "namespace": self.config.namespace,
            "register_function": self.config.register_function,
            "wrappers": wrappers,
            "registrations": registrations,
        }
        content = self.renderer.render(self.config.bindings_template, context)
        write_text(self.ctx.output_path, content, dry_run=self.ctx.dry_run)

        logger.info(
            "Bound %d declaration(s), skipped %d; output: %s",
            len(report.bound), len(report.skipped), self.ctx.output_path,
        )
        return report

    # ---- Internals ----

    def _convert_function(
        self,
        fn: FunctionInfo,
        converter: VariableConverter,
        report: GenerationReport,
    ) -> Optional[WrapperDescriptor]:
        try:
            return build_wrapper_descriptor(fn, converter)
        except BindingError as e:
            logger.debug("Skipping %s: %s", fn.cpp_signature, e)
            report.record_skip(fn.cpp_signature, e)
            return None

    def _colliding_wrappers(self, converted: Sequence[WrapperDescriptor], report: GenerationReport) -> Set[int]:
        """
        Among converted functions that get a generated wrapper, overloads whose
        wrapper names collide keep only their first declaration. Functions
        registered directly emit no identifier and never collide.
        Returns ids of the FunctionInfo objects to leave out.
        """
        wrapped = [
            d.function for d in converted
            if needs_wrapper(d.converted_params, d.converted_return)
        ]
        excluded: Set[int] = set()
        for wrapper_name, fns in find_wrapper_name_collisions(wrapped).items():
            kept, dropped = fns[0], fns[1:]
            for fn in dropped:
                logger.warning(
                    "Wrapper name %s of %s collides with %s; skipping",
                    wrapper_name, fn.cpp_signature, kept.cpp_signature,
                )
                report.record_skip(fn.cpp_signature, f"wrapper name {wrapper_name} collides with {kept.cpp_signature}")
                excluded.add(id(fn))
        return excluded

    def _bind_function(
        self,
        descriptor: WrapperDescriptor,
        report: GenerationReport,
        wrappers: List[str],
        registrations: List[Registration],
    ) -> None:
        fn = descriptor.function
        declaration = script_function_declaration(fn, descriptor.converted_params, descriptor.converted_return)
        wrapped = needs_wrapper(descriptor.converted_params, descriptor.converted_return)
        if wrapped:
            wrappers.append(generate_wrapper_source(descriptor, self.renderer))
            function_pointer = f"asFUNCTION({descriptor.name})"
        else:
            function_pointer = registration_expression_for(fn)

        if fn.kind == FunctionKind.INSTANCE:
            call_conv = "asCALL_CDECL_OBJFIRST" if wrapped else "asCALL_THISCALL"
            statements = [
                f'engine->RegisterObjectMethod("{fn.class_name}", "{declaration}", {function_pointer}, {call_conv});'
            ]
        elif fn.kind == FunctionKind.STATIC:
            statements = [
                f'engine->SetDefaultNamespace("{fn.class_name}");',
                f'engine->RegisterGlobalFunction("{declaration}", {function_pointer}, asCALL_CDECL);',
                'engine->SetDefaultNamespace("");',
            ]
        else:
            statements = [f'engine->RegisterGlobalFunction("{declaration}", {function_pointer}, asCALL_CDECL);']

        registrations.append(Registration(
            statements=statements,
            guard_macro=descriptor.guard_macro,
            comment=fn.cpp_signature if self.config.emit_signature_comments else None,
        ))
        report.bound.append({
            "declaration": fn.cpp_signature,
            "script_declaration": declaration,
            "wrapper": descriptor.name if wrapped else None,
            "registration": function_pointer,
        })

    def _bind_field(
        self,
        fi: FieldInfo,
        converter: VariableConverter,
        report: GenerationReport,
        registrations: List[Registration],
    ) -> None:
        what = f"{fi.cpp_type.spelling} {fi.class_name}::{fi.name}"
        try:
            # Properties have no glue; only the declaration-only ladder applies
            script_type = converter.script_declaration(fi.cpp_type, Usage.RETURN)
        except BindingError as e:
            logger.debug("Skipping field %s: %s", what, e)
            report.record_skip(what, e)
            return

        declaration = f"{script_type} {fi.name}"
        registrations.append(Registration(
            statements=[
                f'engine->RegisterObjectProperty("{fi.class_name}", "{declaration}", '
                f'offsetof({fi.class_name}, {fi.name}));'
            ],
            guard_macro=converter.config.guard_macro_for_header(fi.header_file),
            comment=what if self.config.emit_signature_comments else None,
        ))
        report.bound.append({"declaration": what, "script_declaration": declaration, "wrapper": None})

    def _headers(self, inputs: BindingInputs) -> List[str]:
        seen: List[str] = []
        for decl in list(inputs.functions) + list(inputs.fields):
            header = decl.header_file
            if not header:
                continue
            prefix = self.config.header_strip_prefix
            if prefix and header.startswith(prefix):
                header = header[len(prefix):]
            if header not in seen:
                seen.append(header)
        return seen


__all__ = [
    "EmitterConfig",
    "AngelScriptEmitter",
    "GenerationReport",
    "Registration",
    "script_function_declaration",
]
