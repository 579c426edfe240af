"""Pydantic models for the cross-referenced schema graph.

The graph is stored as an arena rooted at ``Schema``:

- Tables are identified by their (unique) name.
- Columns are identified by their (unique) name within a table.
- Relations are identified by an integer id allocated by ``Schema``.

A ``Relation`` stores table and column *names*; a ``Column`` stores the *ids*
of the relations it takes part in. Removing a relation from the graph is
therefore a matter of dropping its id from every list, and no object
reference can outlive its target.

Usage:
    from tbldoc.schema.models import Schema, Table, Column

    schema = Schema(name="app", tables=[
        Table(name="users", columns=[Column(name="id", data_type="int")]),
    ])
    users = schema.find_table_by_name("users")
    users.find_column_by_name("id")
"""

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field

from tbldoc.errors import NotFoundError

TYPE_PK = "PRIMARY KEY"
TYPE_UNIQUE = "UNIQUE"
TYPE_FK = "FOREIGN KEY"
TYPE_UNKNOWN = "UNKNOWN"

TABLE_TYPE_BASE = "BASE TABLE"
TABLE_TYPE_VIEW = "VIEW"


class _Model(BaseModel):
    """Accept both field names and camelCase aliases on input."""

    model_config = ConfigDict(populate_by_name=True)


class DriverInfo(_Model):
    """Engine metadata reported by a driver."""

    name: str
    database_version: str = Field(default="", alias="databaseVersion")


class Column(_Model):
    """A table column.

    ``parent_relations`` holds the ids of relations in which this column is
    on the foreign-key side; ``child_relations`` holds the ids of relations in
    which it is the referenced column. Both are rebuilt by
    ``Schema.repair()`` and are not part of the JSON snapshot.

    Example:
        >>> col = Column(name="id", data_type="uuid")
        >>> col.nullable
        True
    """

    name: str
    data_type: str = Field(default="", alias="type")
    nullable: bool = True
    default: str | None = None
    comment: str = ""
    parent_relations: list[int] = Field(default_factory=list, exclude=True)
    child_relations: list[int] = Field(default_factory=list, exclude=True)


class Constraint(_Model):
    """A table constraint as reported by the engine."""

    name: str
    constraint_type: str = Field(default=TYPE_UNKNOWN, alias="type")
    definition: str = Field(default="", alias="def")
    table: str | None = None
    columns: list[str] = Field(default_factory=list)
    reference_table: str | None = Field(default=None, alias="referenceTable")
    reference_columns: list[str] = Field(default_factory=list, alias="referenceColumns")


class Index(_Model):
    """A table index."""

    name: str
    definition: str = Field(default="", alias="def")
    table: str | None = None
    columns: list[str] = Field(default_factory=list)


class Trigger(_Model):
    """A table trigger."""

    name: str
    definition: str = Field(default="", alias="def")


class Relation(_Model):
    """An edge between the foreign-key columns of ``table`` and the referenced
    columns of ``parent_table``.

    ``columns[i]`` pairs with ``parent_columns[i]``. ``virtual`` marks a
    relation declared in configuration rather than derived from a constraint.
    """

    id: int = -1
    table: str
    columns: list[str] = Field(default_factory=list)
    parent_table: str = Field(alias="parentTable")
    parent_columns: list[str] = Field(default_factory=list, alias="parentColumns")
    definition: str = Field(default="", alias="def")
    virtual: bool = False


class Table(_Model):
    """A table or view with its columns and attached objects."""

    name: str
    table_type: str = Field(default=TABLE_TYPE_BASE, alias="type")
    comment: str = ""
    definition: str = Field(default="", alias="def")
    columns: list[Column] = Field(default_factory=list)
    indexes: list[Index] = Field(default_factory=list)
    constraints: list[Constraint] = Field(default_factory=list)
    triggers: list[Trigger] = Field(default_factory=list)

    def find_column_by_name(self, name: str) -> Column:
        """Return the first column named *name*.

        Raises:
            NotFoundError: If the table has no such column.
        """
        for column in self.columns:
            if column.name == name:
                return column
        raise NotFoundError(f"not found column '{name}' on table '{self.name}'")


class Schema(_Model):
    """Root of the schema graph."""

    name: str = ""
    tables: list[Table] = Field(default_factory=list)
    relations: list[Relation] = Field(default_factory=list)
    driver: DriverInfo | None = None

    def find_table_by_name(self, name: str) -> Table:
        """Return the first table named *name*.

        Raises:
            NotFoundError: If the schema has no such table.
        """
        for table in self.tables:
            if table.name == name:
                return table
        raise NotFoundError(f"not found table '{name}'")

    def relations_for(self, relation_ids: Iterable[int]) -> list[Relation]:
        """Resolve a back-reference list into relations, preserving order."""
        by_id = {r.id: r for r in self.relations}
        return [by_id[rid] for rid in relation_ids if rid in by_id]

    def add_relation(self, relation: Relation) -> Relation:
        """Allocate an id for *relation*, append it and wire back-references.

        Every table and column named by the relation must already exist;
        resolve names before calling this so that a failure cannot leave a
        half-linked relation behind.
        """
        fk_columns = [
            self.find_table_by_name(relation.table).find_column_by_name(c)
            for c in relation.columns
        ]
        parent = self.find_table_by_name(relation.parent_table)
        pk_columns = [parent.find_column_by_name(c) for c in relation.parent_columns]

        relation.id = max((r.id for r in self.relations), default=-1) + 1
        self.relations.append(relation)
        for column in fk_columns:
            column.parent_relations.append(relation.id)
        for column in pk_columns:
            column.child_relations.append(relation.id)
        return relation

    def repair(self) -> None:
        """Rebuild relation ids and column back-references from ``relations``.

        Used after loading a JSON snapshot, where back-references are not
        serialized.

        Raises:
            NotFoundError: If a relation names a missing table or column.
        """
        for table in self.tables:
            for column in table.columns:
                column.parent_relations = []
                column.child_relations = []
        relations, self.relations = self.relations, []
        for relation in relations:
            self.add_relation(relation)

    def sort(self) -> None:
        """Sort tables, their members, and relations by name.

        The sort is stable and case-sensitive, so sorting twice is a no-op.
        Back-reference lists follow the resulting relation order.
        """
        for table in self.tables:
            table.columns.sort(key=lambda c: c.name)
            table.constraints.sort(key=lambda c: c.name)
            table.indexes.sort(key=lambda i: i.name)
            table.triggers.sort(key=lambda t: t.name)
        self.tables.sort(key=lambda t: t.name)
        self.relations.sort(key=lambda r: r.table)

        position = {r.id: i for i, r in enumerate(self.relations)}
        for table in self.tables:
            for column in table.columns:
                column.parent_relations.sort(key=lambda rid: position.get(rid, -1))
                column.child_relations.sort(key=lambda rid: position.get(rid, -1))
