"""
Tests for the type reconciler.
"""

import pytest


@pytest.fixture
def graph(make_graph, lambda_style_model):
    return make_graph(lambda_style_model)


@pytest.fixture
def lineage(graph):
    from fieldgen.lineage import resolve_lineage
    return resolve_lineage(graph)


class TestReconcileType:
    """Tests for choosing one type per field."""

    def test_agreeing_occurrences(self, graph, lineage):
        """Should use the shared type when every occurrence agrees."""
        from fieldgen.reconciler import reconcile_type

        type_ref = reconcile_type(graph, "Name", lineage.get("Name"))

        assert graph.describe(type_ref) == "string"

    def test_divergent_occurrences_are_ambiguous(self, graph, lineage):
        """Should fail with TypeAmbiguity instead of picking one."""
        from fieldgen.errors import TypeAmbiguity
        from fieldgen.reconciler import reconcile_type

        with pytest.raises(TypeAmbiguity) as exc_info:
            reconcile_type(graph, "Code", lineage.get("Code"))

        assert exc_info.value.field == "Code"
        assert exc_info.value.code == "type_ambiguity"
        assert "CreateCode in CreateFoo input" in exc_info.value.message
        assert "GetCode in GetFoo output" in exc_info.value.message

    def test_redirect_resolves_ambiguity(self, graph, lineage):
        """Should take exactly the redirected type and ignore other occurrences."""
        from fieldgen.config import FieldConfig, SourceFieldConfig
        from fieldgen.reconciler import reconcile_type

        override = FieldConfig(source=SourceFieldConfig(operation="GetFoo", path="Code"))

        type_ref = reconcile_type(graph, "Code", lineage.get("Code"), override)

        assert graph.describe(type_ref) == "GetCode"

    def test_redirect_to_missing_operation(self, graph, lineage):
        """Should fail with BadSourceRedirect when the operation does not exist."""
        from fieldgen.config import FieldConfig, SourceFieldConfig
        from fieldgen.errors import BadSourceRedirect
        from fieldgen.reconciler import reconcile_type

        override = FieldConfig(source=SourceFieldConfig(operation="ReadFoo", path="Code"))

        with pytest.raises(BadSourceRedirect, match="ReadFoo does not exist"):
            reconcile_type(graph, "Code", lineage.get("Code"), override)

    def test_redirect_to_missing_path(self, graph):
        """Should fail with BadSourceRedirect when a path segment does not exist."""
        from fieldgen.config import FieldConfig, SourceFieldConfig
        from fieldgen.errors import BadSourceRedirect
        from fieldgen.reconciler import reconcile_type

        override = FieldConfig(
            source=SourceFieldConfig(operation="GetFoo", path="Code.RepositoryType")
        )

        with pytest.raises(BadSourceRedirect, match="Code.RepositoryType"):
            reconcile_type(graph, "CodeRepositoryType", [], override)

    def test_attribute_field_is_string_without_lineage(self, graph):
        """Should type attribute fields as string even with no occurrences."""
        from fieldgen.config import FieldConfig
        from fieldgen.reconciler import reconcile_type
        from fieldgen.shapes import TypeRef

        type_ref = reconcile_type(graph, "Policy", [], FieldConfig(is_attribute=True))

        assert type_ref == TypeRef.string()

    def test_attribute_field_skips_ambiguity(self, graph, lineage):
        """Should not raise TypeAmbiguity for attribute fields."""
        from fieldgen.config import FieldConfig
        from fieldgen.reconciler import reconcile_type
        from fieldgen.shapes import TypeRef

        type_ref = reconcile_type(graph, "Code", lineage.get("Code"), FieldConfig(is_attribute=True))

        assert type_ref == TypeRef.string()

    def test_attribute_with_redirect_conflicts(self, graph):
        """Should reject is_attribute combined with a `from` redirect."""
        from fieldgen.config import FieldConfig, SourceFieldConfig
        from fieldgen.errors import ConflictingOverride
        from fieldgen.reconciler import reconcile_type

        override = FieldConfig(
            is_attribute=True,
            source=SourceFieldConfig(operation="GetFoo", path="Name"),
        )

        with pytest.raises(ConflictingOverride):
            reconcile_type(graph, "Name", [], override)

    def test_no_occurrences_is_unknown(self, graph):
        """Should fail with UnknownField when there is nothing to take a type from."""
        from fieldgen.errors import UnknownField
        from fieldgen.reconciler import reconcile_type

        with pytest.raises(UnknownField):
            reconcile_type(graph, "Ghost", [])

    def test_redirect_through_list_keeps_collection_type(self, make_graph, repository_model):
        """Should type a redirect across a list member as a list of the leaf type."""
        from fieldgen.config import FieldConfig, SourceFieldConfig
        from fieldgen.reconciler import reconcile_type

        graph = make_graph(repository_model)
        override = FieldConfig(
            source=SourceFieldConfig(operation="CreateRepository", path="Tags.Key")
        )

        type_ref = reconcile_type(graph, "TagKeys", [], override)

        assert graph.describe(type_ref) == "list<string>"

    def test_equivalent_recursive_shapes_agree(self, make_graph):
        """Should not report TypeAmbiguity for same-structure recursive shapes."""
        from fieldgen.lineage import resolve_lineage
        from fieldgen.reconciler import reconcile_type

        graph = make_graph({
            "shapes": {
                "CreateFooRequest": {"members": {"Tree": "NodeA"}},
                "NodeA": {"members": {"Value": "string", "Child": "NodeA"}},
                "GetFooResponse": {"members": {"Tree": "NodeB"}},
                "NodeB": {"members": {"Value": "string", "Child": "NodeB"}},
            },
            "operations": [
                {"name": "CreateFoo", "input": "CreateFooRequest"},
                {"name": "GetFoo", "output": "GetFooResponse"},
            ],
        })
        lineage = resolve_lineage(graph)

        type_ref = reconcile_type(graph, "Tree", lineage.get("Tree"))

        assert graph.describe(type_ref) == "NodeA"
