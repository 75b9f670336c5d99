"""Unit tests for association classification.

Tests cover:
- Kind resolution for has-one, has-many, many-to-many and belongs-to
- Relevance checks for non-relationship names
- Default association inference with reserved names excluded
"""

import pytest

from draftflow import (
    AssociationKind,
    ConfigurationError,
    default_draft_associations,
    is_relevant,
    reflect_association,
    resolve_association,
)
from fixtures.business_graph import Business, Category, Employee, Image, Tag


class TestReflectAssociation:
    """Resolve relationship names into AssociationSpec"""

    def test_has_many(self):
        spec = reflect_association(Business, "employees")
        assert spec.kind is AssociationKind.TO_MANY
        assert spec.target is Employee
        assert spec.is_draftable
        assert spec.owns_targets

    def test_has_one(self):
        spec = reflect_association(Business, "address")
        assert spec.kind is AssociationKind.TO_ONE
        assert spec.is_draftable

    def test_many_to_many(self):
        spec = reflect_association(Image, "tags")
        assert spec.kind is AssociationKind.MANY_TO_MANY
        assert spec.target is Tag
        assert spec.is_draftable
        assert not spec.owns_targets

    def test_belongs_to_is_not_draftable(self):
        spec = reflect_association(Employee, "business")
        assert spec.kind is AssociationKind.BELONGS_TO
        assert not spec.is_draftable

    def test_column_is_not_an_association(self):
        assert reflect_association(Business, "name") is None

    def test_unknown_name(self):
        assert reflect_association(Business, "nonexistent_assoc") is None

    def test_resolve_unknown_name_fails_loudly(self):
        with pytest.raises(ConfigurationError, match="nonexistent_assoc"):
            resolve_association(Business, "nonexistent_assoc")


class TestIsRelevant:
    """Relevance of relationship names for drafting"""

    @pytest.mark.parametrize("name", ["employees", "images", "address", "vending_machines"])
    def test_owned_associations_are_relevant(self, name):
        assert is_relevant(Business, name) is True

    def test_many_to_many_is_relevant(self):
        assert is_relevant(Image, "tags") is True

    def test_belongs_to_is_not_relevant(self):
        assert is_relevant(Employee, "business") is False
        assert is_relevant(Business, "approved_version") is False

    def test_attributes_and_unknown_names_are_not_relevant(self):
        assert is_relevant(Business, "name") is False
        assert is_relevant(Business, "nonexistent_assoc") is False

    def test_repeated_calls_agree(self):
        results = {is_relevant(Business, "employees") for _ in range(5)}
        assert results == {True}


class TestDefaultDraftAssociations:
    """Default association set inferred from the mapper"""

    def test_business_defaults(self):
        assert set(default_draft_associations(Business)) == {
            "employees",
            "images",
            "address",
            "vending_machines",
        }

    def test_reserved_link_names_excluded(self):
        defaults = default_draft_associations(Business)
        assert "draft" not in defaults
        assert "approved_version" not in defaults

    def test_self_referential_children(self):
        assert default_draft_associations(Category) == ("children",)

    def test_type_without_relationships(self):
        assert default_draft_associations(Tag) == ()
