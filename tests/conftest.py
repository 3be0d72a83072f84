#!/usr/bin/env python3
"""Shared pytest fixtures: a small Urho3D-like symbol catalog and converters over it."""

import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path
BASE_DIR = Path(__file__).resolve().parent.parent
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from asbinding_generator.catalog import BindingInputs, SymbolCatalog
from asbinding_generator.converter import VariableConverter
from asbinding_generator.models import (
    ClassInfo,
    CppType,
    EnumInfo,
    FieldInfo,
    FunctionInfo,
    FunctionKind,
    ParameterInfo,
    UsingInfo,
)
from asbinding_generator.utils import TemplateRenderer


# ---------------------------------------------------------------------------
# Sample catalog
# ---------------------------------------------------------------------------

SAMPLE_CLASSES = [
    ClassInfo(name="RefCounted", id="c:@N@Urho3D@S@RefCounted", is_ref_counted=True),
    ClassInfo(name="Node", id="c:@N@Urho3D@S@Node", is_ref_counted=True, header_file="Scene/Node.h", bases=("Animatable",)),
    ClassInfo(name="Component", id="c:@N@Urho3D@S@Component", is_ref_counted=True, header_file="Scene/Component.h"),
    ClassInfo(name="RigidBody", id="c:@N@Urho3D@S@RigidBody", is_ref_counted=True, header_file="Physics/RigidBody.h"),
    ClassInfo(name="Image", id="c:@N@Urho3D@S@Image", is_ref_counted=True, header_file="Resource/Image.h"),
    ClassInfo(name="WorkItem", id="c:@N@Urho3D@S@WorkItem", is_ref_counted=True, header_file="Core/WorkQueue.h"),
    ClassInfo(name="Context", id="c:@N@Urho3D@S@Context", is_ref_counted=True, header_file="Core/Context.h"),
    ClassInfo(name="String", id="c:@N@Urho3D@S@String", header_file="Container/Str.h"),
    ClassInfo(name="Vector3", id="c:@N@Urho3D@S@Vector3", header_file="Math/Vector3.h"),
    ClassInfo(name="IntVector2", id="c:@N@Urho3D@S@IntVector2", header_file="Math/Vector2.h"),
    ClassInfo(name="Variant", id="c:@N@Urho3D@S@Variant", header_file="Core/Variant.h"),
    ClassInfo(name="Ray", id="c:@N@Urho3D@S@Ray", header_file="Math/Ray.h"),
    ClassInfo(name="Plain", id="c:@N@Urho3D@S@Plain", header_file="Core/Plain.h"),
    ClassInfo(name="Serializer", id="c:@N@Urho3D@S@Serializer", comment="/// Abstract stream for writing. FAKE_REF"),
    ClassInfo(name="Hidden", id="c:@N@Urho3D@S@Hidden", comment="/// Not for scripts. NO_BIND"),
    ClassInfo(name="Detail", id="c:@N@Urho3D@S@Detail", is_internal=True, is_ref_counted=True),
]

SAMPLE_ENUMS = [
    EnumInfo(name="CreateMode", values=("REPLICATED", "LOCAL"), header_file="Scene/Node.h"),
    EnumInfo(name="TransformSpace", values=("TS_LOCAL", "TS_PARENT", "TS_WORLD")),
]

SAMPLE_USINGS = [
    UsingInfo(name="StringVector", target="Vector<String>"),
    UsingInfo(name="VariantMap", target="HashMap<StringHash, Variant>"),
    UsingInfo(name="ResourceRefList", target="Vector<ResourceRef>"),
]


def make_type(spelling: str) -> CppType:
    return CppType.from_spelling(spelling)


def make_function(
    name: str,
    ret: str = "void",
    params=(),
    kind: FunctionKind = FunctionKind.FREE,
    class_name=None,
    is_const: bool = False,
    header_file: str = "",
) -> FunctionInfo:
    """params: sequence of (spelling, name) or (spelling, name, default)."""
    parameters = []
    for p in params:
        spelling, pname = p[0], p[1]
        default = p[2] if len(p) > 2 else None
        parameters.append(ParameterInfo(name=pname, cpp_type=make_type(spelling), default_value=default))
    return FunctionInfo(
        name=name,
        return_type=make_type(ret),
        parameters=parameters,
        kind=kind,
        class_name=class_name,
        is_const=is_const,
        header_file=header_file,
    )


@pytest.fixture
def catalog():
    return SymbolCatalog(classes=SAMPLE_CLASSES, enums=SAMPLE_ENUMS, usings=SAMPLE_USINGS)


@pytest.fixture
def converter(catalog):
    return VariableConverter(catalog)


@pytest.fixture
def renderer():
    return TemplateRenderer(None)


@pytest.fixture
def sample_inputs(catalog):
    """A mix of bindable and unbindable declarations."""
    functions = [
        make_function("GetChild", "Node*", [("const String&", "name"), ("bool", "recursive", "false")],
                      kind=FunctionKind.INSTANCE, class_name="Node", is_const=True, header_file="Scene/Node.h"),
        make_function("GetChildren", "const Vector<SharedPtr<Node>>&", [("bool", "recursive", "false")],
                      kind=FunctionKind.INSTANCE, class_name="Node", is_const=True, header_file="Scene/Node.h"),
        make_function("SetTags", "void", [("const Vector<String>&", "tags")],
                      kind=FunctionKind.INSTANCE, class_name="Node", header_file="Scene/Node.h"),
        make_function("GetCollidingBodies", "void", [("PODVector<RigidBody*>&", "result")],
                      kind=FunctionKind.INSTANCE, class_name="RigidBody", is_const=True,
                      header_file="Physics/RigidBody.h"),
        make_function("SetMass", "void", [("float", "mass")],
                      kind=FunctionKind.INSTANCE, class_name="RigidBody", header_file="Physics/RigidBody.h"),
        make_function("GetObjectCategories", "StringVector", [],
                      kind=FunctionKind.STATIC, class_name="Node", header_file="Scene/Node.h"),
        make_function("GetRandom", "float", [("float", "range")], header_file="Math/Random.h"),
        make_function("GetContext", "Context*", [], header_file="Core/Object.h"),
        make_function("Release", "void", [("Hidden*", "hidden")], header_file="Core/Hidden.h"),
    ]
    fields = [
        FieldInfo(name="origin_", cpp_type=make_type("Vector3"), class_name="Ray", header_file="Math/Ray.h"),
        FieldInfo(name="owner_", cpp_type=make_type("Plain*"), class_name="Ray", header_file="Math/Ray.h"),
    ]
    return BindingInputs(catalog=catalog, functions=functions, fields=fields)
