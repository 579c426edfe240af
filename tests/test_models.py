"""Tests for the schema graph models."""

import pytest

from tbldoc.errors import NotFoundError
from tbldoc.schema.models import (
    Column,
    Constraint,
    DriverInfo,
    Relation,
    Schema,
    Table,
)


class TestLookup:
    """Name lookups on Schema and Table."""

    def test_find_table(self, ab_schema: Schema) -> None:
        assert ab_schema.find_table_by_name("b").name == "b"

    def test_find_table_missing(self, ab_schema: Schema) -> None:
        with pytest.raises(NotFoundError):
            ab_schema.find_table_by_name("zzz")

    def test_find_table_is_case_sensitive(self, ab_schema: Schema) -> None:
        with pytest.raises(NotFoundError):
            ab_schema.find_table_by_name("A")

    def test_find_column(self, ab_schema: Schema) -> None:
        b = ab_schema.find_table_by_name("b")
        assert b.find_column_by_name("a_id").data_type == "int"

    def test_find_column_missing(self, ab_schema: Schema) -> None:
        b = ab_schema.find_table_by_name("b")
        with pytest.raises(NotFoundError, match="on table 'b'"):
            b.find_column_by_name("nope")

    def test_first_match_is_canonical(self) -> None:
        first = Table(name="t", comment="first")
        second = Table(name="t", comment="second")
        schema = Schema(tables=[first, second])
        assert schema.find_table_by_name("t") is first

    def test_relations_for_skips_unknown_ids(self, ab_schema: Schema) -> None:
        relation = ab_schema.relations[0]
        assert ab_schema.relations_for([relation.id, 42]) == [relation]


class TestDefaults:
    """Field defaults and aliases."""

    def test_column_defaults(self) -> None:
        col = Column(name="id")
        assert col.nullable is True
        assert col.default is None
        assert col.comment == ""
        assert col.parent_relations == []
        assert col.child_relations == []

    def test_aliases_accepted(self) -> None:
        relation = Relation.model_validate(
            {
                "table": "b",
                "columns": ["a_id"],
                "parentTable": "a",
                "parentColumns": ["id"],
                "def": "Additional Relation",
            }
        )
        assert relation.parent_table == "a"
        assert relation.definition == "Additional Relation"

    def test_constraint_type_alias(self) -> None:
        con = Constraint.model_validate({"name": "pk", "type": "PRIMARY KEY"})
        assert con.constraint_type == "PRIMARY KEY"
        assert con.reference_table is None


class TestRepairAndJson:
    """JSON snapshots and back-reference reconstruction."""

    def test_back_references_not_serialized(self, ab_schema: Schema) -> None:
        data = ab_schema.model_dump(by_alias=True)
        column = data["tables"][1]["columns"][1]
        assert "parent_relations" not in column
        assert "child_relations" not in column

    def test_json_round_trip_with_repair(self, blog_schema: Schema) -> None:
        blog_schema.driver = DriverInfo(name="postgres", database_version="16.2")
        text = blog_schema.model_dump_json(by_alias=True)

        loaded = Schema.model_validate_json(text)
        loaded.repair()

        assert [t.name for t in loaded.tables] == [t.name for t in blog_schema.tables]
        assert len(loaded.relations) == 4
        assert loaded.driver.database_version == "16.2"
        users_id = loaded.find_table_by_name("users").find_column_by_name("id")
        assert len(users_id.child_relations) == 2
        assert {r.table for r in loaded.relations_for(users_id.child_relations)} == {
            "posts",
            "comments",
        }

    def test_repair_rejects_dangling_relation(self) -> None:
        schema = Schema(
            tables=[Table(name="b", columns=[Column(name="a_id")])],
            relations=[
                Relation(table="b", columns=["a_id"], parent_table="a", parent_columns=["id"])
            ],
        )
        with pytest.raises(NotFoundError):
            schema.repair()

    def test_repair_is_idempotent(self, ab_schema: Schema) -> None:
        ab_schema.repair()
        ab_schema.repair()
        a_id = ab_schema.find_table_by_name("b").find_column_by_name("a_id")
        assert a_id.parent_relations == [ab_schema.relations[0].id]


class TestSort:
    """Canonical ordering."""

    def test_sorts_tables_and_members(self, blog_schema: Schema) -> None:
        blog_schema.sort()
        assert [t.name for t in blog_schema.tables] == [
            "comment_stars",
            "comments",
            "logs",
            "post_counts",
            "posts",
            "users",
        ]
        users = blog_schema.find_table_by_name("users")
        assert [c.name for c in users.columns] == ["email", "id", "username"]
        assert [r.table for r in blog_schema.relations] == [
            "comment_stars",
            "comments",
            "comments",
            "posts",
        ]

    def test_sort_is_stable_for_equal_names(self, blog_schema: Schema) -> None:
        """Two relations owned by ``comments`` keep their insertion order."""
        before = [r.id for r in blog_schema.relations if r.table == "comments"]
        blog_schema.sort()
        after = [r.id for r in blog_schema.relations if r.table == "comments"]
        assert after == before

    def test_sort_twice_is_noop(self, blog_schema: Schema) -> None:
        blog_schema.sort()
        first = blog_schema.model_dump()
        blog_schema.sort()
        assert blog_schema.model_dump() == first

    def test_sort_is_case_sensitive(self) -> None:
        schema = Schema(tables=[Table(name="b"), Table(name="B"), Table(name="a")])
        schema.sort()
        assert [t.name for t in schema.tables] == ["B", "a", "b"]

    def test_back_references_follow_relation_order(self, blog_schema: Schema) -> None:
        blog_schema.sort()
        users_id = blog_schema.find_table_by_name("users").find_column_by_name("id")
        tables = [r.table for r in blog_schema.relations_for(users_id.child_relations)]
        assert tables == ["comments", "posts"]

    def test_sort_keeps_bidirectionality(self, blog_schema: Schema) -> None:
        blog_schema.sort()
        for relation in blog_schema.relations:
            table = blog_schema.find_table_by_name(relation.table)
            for name in relation.columns:
                assert relation.id in table.find_column_by_name(name).parent_relations
