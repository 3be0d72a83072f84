"""
Tests for the AngelScript emitter, the manifest and the command line entry point.

Run: pytest tests/test_emitter.py -v
"""

import json
import logging

import pytest

from asbinding_generator.catalog import BindingInputs
from asbinding_generator.emitters.angelscript_emitter import (
    AngelScriptEmitter,
    EmitterConfig,
    script_function_declaration,
)
from asbinding_generator.generate_bindings import discover_header_files, main
from asbinding_generator.manifest import MANIFEST_FILE, emit_manifest
from asbinding_generator.models import FunctionKind, GenerationContext
from asbinding_generator.wrappers import build_wrapper_descriptor

from conftest import make_function


@pytest.fixture
def ctx(tmp_path):
    return GenerationContext(output_dir=tmp_path / "out")


def emit(ctx, renderer, inputs, **config):
    emitter = AngelScriptEmitter(ctx, renderer, EmitterConfig(**config))
    report = emitter.emit(inputs)
    return report, ctx.output_path.read_text(encoding="utf-8")


class TestScriptDeclarations:
    def test_const_method(self, converter):
        fn = make_function("GetChild", "Node*", [("const String&", "name"), ("bool", "recursive", "false")],
                           kind=FunctionKind.INSTANCE, class_name="Node", is_const=True)
        d = build_wrapper_descriptor(fn, converter)
        assert script_function_declaration(fn, d.converted_params, d.converted_return) == (
            "Node@+ GetChild(const String&in, bool = false) const"
        )

    def test_static_method_has_no_const(self, converter):
        fn = make_function("GetObjectCategories", "StringVector", kind=FunctionKind.STATIC, class_name="Node")
        d = build_wrapper_descriptor(fn, converter)
        assert script_function_declaration(fn, d.converted_params, d.converted_return) == (
            "Array<String>@ GetObjectCategories()"
        )


class TestAngelScriptEmitter:
    def test_registrations(self, ctx, renderer, sample_inputs):
        _, text = emit(ctx, renderer, sample_inputs)
        assert (
            'engine->RegisterObjectMethod("Node", "Node@+ GetChild(const String&in, bool = false) const", '
            "asMETHODPR(Node, GetChild, (const String&, bool) const, Node*), asCALL_THISCALL);"
        ) in text
        assert (
            'engine->RegisterObjectMethod("Node", "Array<Node@>@ GetChildren(bool = false) const", '
            "asFUNCTION(Node_GetChildren_bool), asCALL_CDECL_OBJFIRST);"
        ) in text
        assert (
            'engine->RegisterGlobalFunction("float GetRandom(float)", '
            "asFUNCTIONPR(GetRandom, (float), float), asCALL_CDECL);"
        ) in text
        assert 'engine->RegisterObjectProperty("Ray", "Vector3 origin_", offsetof(Ray, origin_));' in text

    def test_static_methods_use_class_namespace(self, ctx, renderer, sample_inputs):
        _, text = emit(ctx, renderer, sample_inputs)
        lines = [line.strip() for line in text.splitlines()]
        i = lines.index('engine->SetDefaultNamespace("Node");')
        assert lines[i + 1] == (
            'engine->RegisterGlobalFunction("Array<String>@ GetObjectCategories()", '
            "asFUNCTION(Node_GetObjectCategories_void), asCALL_CDECL);"
        )
        assert lines[i + 2] == 'engine->SetDefaultNamespace("");'

    def test_wrappers_precede_registration_function(self, ctx, renderer, sample_inputs):
        _, text = emit(ctx, renderer, sample_inputs, register_function="RegisterGlue")
        wrapper_at = text.index("static CScriptArray* Node_GetChildren_bool(Node* ptr, bool recursive)")
        assert wrapper_at < text.index("void RegisterGlue(asIScriptEngine* engine)")
        assert '#include "Scene/Node.h"' in text
        assert '#include "../AngelScript/APITemplates.h"' in text

    def test_guarded_registration(self, ctx, renderer, sample_inputs):
        _, text = emit(ctx, renderer, sample_inputs)
        lines = [line.strip() for line in text.splitlines()]
        i = next(n for n, line in enumerate(lines) if "SetMass" in line and "RegisterObjectMethod" in line)
        assert "#ifdef URHO3D_PHYSICS" in lines[i - 2:i]
        assert lines[i + 1] == "#endif"
        assert text.count("#ifdef") == text.count("#endif")

    def test_report(self, ctx, renderer, sample_inputs):
        report, _ = emit(ctx, renderer, sample_inputs)
        skipped = {entry["declaration"]: entry for entry in report.skipped}
        assert len(report.bound) == 7
        assert len(skipped) == 4
        assert skipped["Context* GetContext()"]["kind"] == "DisallowedContextUsage"
        assert skipped["void Release(Hidden*)"]["kind"] == "MarkedNoBind"
        assert skipped["Plain* Ray::owner_"]["kind"] == "UnsupportedPointerOwnership"
        assert skipped["void RigidBody::GetCollidingBodies(PODVector<RigidBody*>&) const"]["reason"] == "unknown"

    def test_skips_are_logged_at_debug(self, ctx, renderer, sample_inputs, caplog):
        with caplog.at_level(logging.DEBUG, logger="asbinding_generator"):
            emit(ctx, renderer, sample_inputs)
        assert any("Skipping Context* GetContext()" in r.getMessage() for r in caplog.records)

    def test_fields_can_be_disabled(self, ctx, renderer, sample_inputs):
        _, text = emit(ctx, renderer, sample_inputs, emit_fields=False)
        assert "RegisterObjectProperty" not in text

    def test_colliding_wrapper_names_keep_first(self, ctx, renderer, catalog, caplog):
        first = make_function("Load", "SharedPtr<Image>", [("Node*", "node")])
        second = make_function("Load", "SharedPtr<Image>", [("Node&", "node")])
        inputs = BindingInputs(catalog=catalog, functions=[first, second])
        with caplog.at_level(logging.WARNING, logger="asbinding_generator"):
            report, text = emit(ctx, renderer, inputs)
        assert "Image@+ Load(Node@+)" in text
        assert "Load(Node&)" not in text
        assert text.count("static Image* Load_Node(") == 1
        assert [entry["declaration"] for entry in report.skipped] == ["SharedPtr<Image> Load(Node&)"]
        assert any(r.levelno == logging.WARNING for r in caplog.records)

    def test_directly_registered_overloads_do_not_collide(self, ctx, renderer, catalog):
        by_pointer = make_function("Attach", params=[("Node*", "node")])
        by_reference = make_function("Attach", params=[("Node&", "node")])
        mutable = make_function("GetParent", "Node*", kind=FunctionKind.INSTANCE, class_name="Node")
        const = make_function("GetParent", "const Node*", kind=FunctionKind.INSTANCE, class_name="Node", is_const=True)
        inputs = BindingInputs(catalog=catalog, functions=[by_pointer, by_reference, mutable, const])
        report, text = emit(ctx, renderer, inputs)
        assert len(report.bound) == 4
        assert report.skipped == []
        assert "Attach(Node@+)" in text
        assert "Attach(Node&)" in text
        assert '"Node@+ GetParent()"' in text
        assert '"Node@+ GetParent() const"' in text
        assert "asMETHODPR(Node, GetParent, () const, const Node*)" in text

    def test_unbindable_overload_does_not_suppress_bindable_one(self, ctx, renderer, catalog):
        by_pointer = make_function("Load", "SharedPtr<Image>", [("Plain*", "source")])
        by_reference = make_function("Load", "SharedPtr<Image>", [("const Plain&", "source")])
        inputs = BindingInputs(catalog=catalog, functions=[by_pointer, by_reference])
        report, text = emit(ctx, renderer, inputs)
        assert [entry["declaration"] for entry in report.bound] == ["SharedPtr<Image> Load(const Plain&)"]
        assert report.skipped[0]["kind"] == "UnsupportedPointerOwnership"
        assert "static Image* Load_Plain(const Plain& source)" in text
        assert "Image@+ Load(const Plain&in)" in text

    def test_dry_run_writes_nothing(self, tmp_path, renderer, sample_inputs):
        ctx = GenerationContext(output_dir=tmp_path / "out", dry_run=True)
        report = AngelScriptEmitter(ctx, renderer).emit(sample_inputs)
        assert report.bound
        assert not ctx.output_path.exists()

    def test_user_templates_override_package_templates(self, tmp_path, sample_inputs):
        from asbinding_generator.utils import TemplateRenderer

        templates = tmp_path / "templates"
        templates.mkdir()
        (templates / "bindings.cpp.j2").write_text(
            "{% for reg in registrations %}{{ reg.statements | join(' ') }}\n{% endfor %}", encoding="utf-8"
        )
        ctx = GenerationContext(output_dir=tmp_path / "out", templates_dir=templates)
        _, text = emit(ctx, TemplateRenderer(templates), sample_inputs)
        assert not text.startswith("//")
        assert "RegisterObjectProperty" in text


class TestManifest:
    def test_manifest_lists_bound_and_skipped(self, ctx, renderer, sample_inputs):
        report, _ = emit(ctx, renderer, sample_inputs)
        path = emit_manifest(ctx, report, sample_inputs)
        data = json.loads(path.read_text(encoding="utf-8"))
        assert path.name == MANIFEST_FILE
        assert data["generator"]["name"] == "asbinding-generator"
        assert data["report"]["bound_count"] == 7
        assert data["report"]["skipped_count"] == 4
        assert any(c["name"] == "Node" for c in data["catalog"]["classes"])


class TestCommandLine:
    def _write_catalog(self, tmp_path, sample_inputs):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps(sample_inputs.to_dict()), encoding="utf-8")
        return path

    def test_generates_from_catalog_json(self, tmp_path, sample_inputs):
        catalog_path = self._write_catalog(tmp_path, sample_inputs)
        out = tmp_path / "generated"
        assert main(["--catalog-json", str(catalog_path), "--output-dir", str(out), "-q"]) == 0
        text = (out / "GeneratedGlue.cpp").read_text(encoding="utf-8")
        assert "void ASRegisterGenerated(asIScriptEngine* engine)" in text
        assert (out / "manifest.json").exists()

    def test_dry_run_and_no_manifest(self, tmp_path, sample_inputs):
        catalog_path = self._write_catalog(tmp_path, sample_inputs)
        out = tmp_path / "generated"
        assert main(["--catalog-json", str(catalog_path), "--output-dir", str(out), "--dry-run", "-q"]) == 0
        assert not out.exists()
        assert main(["--catalog-json", str(catalog_path), "--output-dir", str(out), "--no-manifest", "-q"]) == 0
        assert (out / "GeneratedGlue.cpp").exists()
        assert not (out / "manifest.json").exists()

    def test_exit_codes(self, tmp_path):
        assert main(["-q"]) == 2
        assert main(["--headers", str(tmp_path / "missing"), "-q"]) == 2
        assert main(["--catalog-json", str(tmp_path / "missing.json"), "-q"]) == 3

    def test_discover_header_files(self, tmp_path):
        (tmp_path / "Scene").mkdir()
        (tmp_path / "Scene" / "Node.h").write_text("", encoding="utf-8")
        (tmp_path / "Scene" / "Node.cpp").write_text("", encoding="utf-8")
        (tmp_path / "Math.hpp").write_text("", encoding="utf-8")
        found = discover_header_files([str(tmp_path), str(tmp_path / "Math.hpp")])
        assert sorted(p.name for p in found) == ["Math.hpp", "Node.h"]
