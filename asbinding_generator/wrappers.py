#!/usr/bin/env python3
"""
Wrapper generation for functions whose signatures need glue.

A wrapper is a static C++ function with the script-compatible native
signature (CScriptArray* instead of containers, raw pointers instead of
SharedPtr) that converts arguments, forwards to the original function and
converts the result. Free functions, class static methods and class instance
methods are supported; instance wrappers take the object as a leading
`ClassName* ptr` parameter.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from .config import ConversionConfig
from .converter import VariableConverter
from .models import ConversionResult, FunctionInfo, FunctionKind, Usage, WrapperDescriptor
from .naming import wrapper_name_for
from .utils import TemplateRenderer, default_renderer

WRAPPER_TEMPLATE = "wrapper.cpp.j2"


def convert_function(
    function: FunctionInfo,
    converter: VariableConverter,
) -> Tuple[Tuple[ConversionResult, ...], ConversionResult]:
    """
    Convert every parameter and the return type of `function`.
    Returns (params, return); the first BindingError propagates to the caller.
    """
    converted_params = tuple(
        converter.convert(p.cpp_type, p.name, Usage.PARAMETER, p.default_value)
        for p in function.parameters
    )
    converted_return = converter.convert(function.return_type, "", Usage.RETURN)
    return converted_params, converted_return


def build_wrapper_descriptor(
    function: FunctionInfo,
    converter: VariableConverter,
    template_version: bool = False,
    config: Optional[ConversionConfig] = None,
) -> WrapperDescriptor:
    cfg = config or converter.config
    converted_params, converted_return = convert_function(function, converter)
    return WrapperDescriptor(
        function=function,
        converted_params=converted_params,
        converted_return=converted_return,
        name=wrapper_name_for(function, template_version),
        template_version=template_version and function.kind == FunctionKind.INSTANCE,
        guard_macro=cfg.guard_macro_for_header(function.header_file),
    )


def needs_wrapper(converted_params: Sequence[ConversionResult], converted_return: ConversionResult) -> bool:
    """True when any conversion changes the native shape, i.e. the original can not be registered directly."""
    if converted_return.native_override_declaration or converted_return.glue_statement:
        return True
    return any(c.native_override_declaration or c.glue_statement for c in converted_params)


def _wrapper_params(descriptor: WrapperDescriptor) -> List[str]:
    fn = descriptor.function
    params: List[str] = []
    if fn.kind == FunctionKind.INSTANCE:
        params.append(f"{fn.class_name}* ptr")
    for param, converted in zip(fn.parameters, descriptor.converted_params):
        params.append(converted.native_override_declaration or f"{param.cpp_type.spelling} {param.name}")
    return params


def _callee(fn: FunctionInfo) -> str:
    if fn.kind == FunctionKind.INSTANCE:
        return f"ptr->{fn.name}"
    if fn.kind == FunctionKind.STATIC:
        return f"{fn.class_name}::{fn.name}"
    return fn.name


def wrapper_template_context(descriptor: WrapperDescriptor) -> Dict:
    fn = descriptor.function
    if len(descriptor.converted_params) != len(fn.parameters):
        raise ValueError(
            f"{fn.qualified_name}: {len(descriptor.converted_params)} converted parameter(s) "
            f"for {len(fn.parameters)} parameter(s)"
        )
    returns_void = descriptor.returns_void
    return {
        "guard_macro": descriptor.guard_macro,
        "location": fn.location,
        "return_type": descriptor.wrapper_return_type,
        "name": descriptor.name,
        "params": _wrapper_params(descriptor),
        "param_glue": [c.glue_statement for c in descriptor.converted_params if c.glue_statement],
        "result_binding": "" if returns_void else f"{fn.return_type.spelling} result = ",
        "callee": _callee(fn),
        "args": [p.name for p in fn.parameters],
        "return_glue": descriptor.converted_return.glue_statement,
        "returns_void": returns_void,
    }


def generate_wrapper_source(descriptor: WrapperDescriptor, renderer: Optional[TemplateRenderer] = None) -> str:
    """Render the complete wrapper function (guard included) as C++ text."""
    return (renderer or default_renderer()).render(WRAPPER_TEMPLATE, wrapper_template_context(descriptor))


__all__ = [
    "WRAPPER_TEMPLATE",
    "convert_function",
    "build_wrapper_descriptor",
    "needs_wrapper",
    "wrapper_template_context",
    "generate_wrapper_source",
]
