"""
Tests for the libclang catalog builder (asbinding_generator/parsing/clang_catalog.py).

Skipped when the clang bindings or the libclang shared library are unavailable.

Run: pytest tests/test_clang_catalog.py -v
"""

import pytest

pytest.importorskip("clang.cindex")

from asbinding_generator.models import FunctionKind
from asbinding_generator.parsing import clang_catalog
from asbinding_generator.parsing.clang_catalog import _join_tokens, collect_bindings_from_headers

try:
    clang_catalog.ensure_libclang_loaded()
    HAVE_LIBCLANG = True
except RuntimeError:
    HAVE_LIBCLANG = False

requires_libclang = pytest.mark.skipif(not HAVE_LIBCLANG, reason="libclang shared library not available")


HEADER = """
namespace Urho3D
{

class RefCounted
{
public:
    void AddRef();
};

class Animatable : public RefCounted
{
};

/// Scene node.
class Node : public Animatable
{
public:
    Node* GetChild(const char* name, bool recursive = false) const;
    static int GetCount();
    Node& operator=(const Node& rhs);
    float weight_;

    struct Listener
    {
        int id_;
    };

private:
    void Rebuild();
    int dirty_;
};

/// @internal
class Detail
{
public:
    int value_;
};

enum CreateMode
{
    REPLICATED,
    LOCAL
};

using NodeId = unsigned;

int Add(int a, int b = 3);

}
"""


@pytest.fixture
def inputs(tmp_path):
    scene = tmp_path / "Scene"
    scene.mkdir()
    header = scene / "Node.h"
    header.write_text(HEADER, encoding="utf-8")
    return collect_bindings_from_headers(
        headers=[header],
        clang_args=["-std=c++17"],
        include_filters=[str(tmp_path)],
        emit_diagnostics=False,
    )


def test_join_tokens():
    assert _join_tokens(["Variant", "::", "emptyVariantMap"]) == "Variant::emptyVariantMap"
    assert _join_tokens(["unsigned", "(", "-", "1", ")"]) == "unsigned(-1)"
    assert _join_tokens(["String", "(", '"a b"', ")"]) == 'String("a b")'


@requires_libclang
class TestClangCatalog:
    def test_classes(self, inputs):
        catalog = inputs.catalog
        node = catalog.lookup_class_by_name("Node")
        assert node.is_ref_counted
        assert node.bases == ("Animatable",)
        assert node.header_file == "Scene/Node.h"
        assert node.id and catalog.lookup_class_by_id(node.id) is node
        assert catalog.lookup_class_by_name("Detail").is_internal
        assert not catalog.lookup_class_by_name("Listener").is_ref_counted

    def test_enums_and_aliases(self, inputs):
        assert inputs.catalog.lookup_enum("CreateMode").values == ("REPLICATED", "LOCAL")
        assert inputs.catalog.usings["NodeId"].target == "unsigned int"

    def test_functions(self, inputs):
        by_name = {fn.qualified_name: fn for fn in inputs.functions}
        get_child = by_name["Node::GetChild"]
        assert get_child.kind == FunctionKind.INSTANCE
        assert get_child.is_const
        assert get_child.return_type.name == "Node" and get_child.return_type.is_pointer
        assert [p.name for p in get_child.parameters] == ["name", "recursive"]
        assert get_child.parameters[1].default_value == "false"
        assert get_child.location.startswith("Scene/Node.h:")

        assert by_name["Node::GetCount"].kind == FunctionKind.STATIC
        assert by_name["Add"].kind == FunctionKind.FREE
        assert by_name["Add"].parameters[1].default_value == "3"

    def test_skips_operators_and_private_members(self, inputs):
        names = {fn.qualified_name for fn in inputs.functions}
        assert "Node::Rebuild" not in names
        assert not any("operator" in n for n in names)

    def test_fields(self, inputs):
        fields = {(f.class_name, f.name) for f in inputs.fields}
        assert ("Node", "weight_") in fields
        assert ("Listener", "id_") in fields
        assert ("Node", "dirty_") not in fields
        # Members of internal classes are not collected
        assert ("Detail", "value_") not in fields
