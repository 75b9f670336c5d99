"""Unit tests for the shallow clone primitive."""

from sqlalchemy import inspect as sa_inspect

from draftflow import shallow_clone
from fixtures.business_graph import Business, Category


class TestShallowClone:
    """Column-only copy of one entity"""

    def test_copies_columns(self, business):
        clone = shallow_clone(business)

        assert clone is not business
        assert type(clone) is Business
        assert clone.id == business.id
        assert clone.name == business.name
        assert clone.created_at == business.created_at

    def test_excluded_attributes_stay_unset(self, business):
        clone = shallow_clone(business, exclude={"id", "created_at"})

        assert clone.id is None
        assert clone.created_at is None
        assert business.id is not None

    def test_relationships_not_copied(self, business):
        clone = shallow_clone(business)

        assert clone.employees == []
        assert clone.address is None
        assert len(business.employees) == 3

    def test_clone_is_transient(self, business):
        clone = shallow_clone(business)
        assert sa_inspect(clone).transient

    def test_foreign_keys_copied(self, db_session):
        root = Category(name="root", children=[Category(name="leaf")])
        db_session.add(root)
        db_session.commit()

        clone = shallow_clone(root.children[0], exclude={"id"})

        assert clone.parent_id == root.id
        assert clone.name == "leaf"
