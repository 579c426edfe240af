"""Config-driven schema transformation.

Applies user configuration to an already-resolved ``Schema``:

1. ``merge_additional_data``: add virtual relations and override comments.
2. ``exclude_tables``: remove tables, guarded against orphaning relations.
3. ``Schema.sort``: canonical ordering (when ``format.sort`` is enabled).

The order is fixed: exclusion must see the virtual relations added by the
merge, and sorting must see the final set of entities.

Usage:
    from tbldoc.schema.transform import modify_schema

    modify_schema(schema, config)
"""

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from tbldoc.errors import IntegrityGuardError, NotFoundError
from tbldoc.schema.models import Column, Schema
from tbldoc.schema.relations import build_relation

if TYPE_CHECKING:
    from tbldoc.config.models import AdditionalComment, AdditionalRelation, Config

logger = logging.getLogger(__name__)

DEFAULT_RELATION_DEF = "Additional Relation"


# ------------------------------------------------------------------
# Merge
# ------------------------------------------------------------------


def merge_additional_relations(
    schema: Schema, relations: Iterable["AdditionalRelation"]
) -> None:
    """Add each configured relation to *schema* as a virtual relation.

    Stops at the first relation that names a missing table or column; that
    relation is not added, relations merged before it stay.

    Raises:
        NotFoundError: With the failing relation identified in the message.
    """
    for entry in relations:
        try:
            table = schema.find_table_by_name(entry.table)
            build_relation(
                schema,
                table,
                entry.columns,
                entry.parent_table,
                entry.parent_columns,
                entry.definition or DEFAULT_RELATION_DEF,
                virtual=True,
            )
        except NotFoundError as e:
            raise NotFoundError(
                f"failed to add relation '{entry.table}' -> '{entry.parent_table}': {e}"
            ) from e


def merge_additional_comments(
    schema: Schema, comments: Iterable["AdditionalComment"]
) -> None:
    """Overwrite table and column comments from configuration.

    An empty ``table_comment`` leaves the table comment unchanged. Column
    comments are applied as given. Every name in an entry is resolved before
    any comment of that entry is written.

    Raises:
        NotFoundError: If a table or column does not exist.
    """
    for entry in comments:
        try:
            table = schema.find_table_by_name(entry.table)
        except NotFoundError as e:
            raise NotFoundError(f"failed to add table comment: {e}") from e

        targets: list[tuple[Column, str]] = []
        for name, comment in entry.column_comments.items():
            try:
                targets.append((table.find_column_by_name(name), comment))
            except NotFoundError as e:
                raise NotFoundError(f"failed to add column comment: {e}") from e

        if entry.table_comment != "":
            table.comment = entry.table_comment
        for column, comment in targets:
            column.comment = comment


def merge_additional_data(schema: Schema, config: "Config") -> None:
    """Merge configured relations, then configured comments."""
    merge_additional_relations(schema, config.relations)
    merge_additional_comments(schema, config.comments)


# ------------------------------------------------------------------
# Exclude
# ------------------------------------------------------------------


def exclude_table_from_schema(name: str, schema: Schema) -> None:
    """Remove table *name* and every relation it owns from all views of the graph.

    Relations live in three places: ``schema.relations`` and the
    ``parent_relations`` / ``child_relations`` lists of the columns on both
    sides. All three are rebuilt here before anything is assigned back.
    """
    dropped = {r.id for r in schema.relations if r.table == name}

    tables = [t for t in schema.tables if t.name != name]
    relations = [r for r in schema.relations if r.id not in dropped]
    columns = [c for t in tables for c in t.columns]
    child_lists = [[rid for rid in c.child_relations if rid not in dropped] for c in columns]
    parent_lists = [[rid for rid in c.parent_relations if rid not in dropped] for c in columns]

    schema.tables = tables
    schema.relations = relations
    for column, children, parents in zip(columns, child_lists, parent_lists):
        column.child_relations = children
        column.parent_relations = parents


def exclude_tables(schema: Schema, names: Iterable[str]) -> None:
    """Exclude each table in *names*, in order.

    A table that is the parent side of any remaining relation is not
    excluded: ``IntegrityGuardError`` is raised and tables excluded earlier
    in the same call stay excluded.

    Raises:
        IntegrityGuardError: Naming the table and its dependent table.
    """
    for name in names:
        for relation in schema.relations:
            if relation.parent_table == name:
                raise IntegrityGuardError(name, relation.table)
        exclude_table_from_schema(name, schema)
        logger.debug("Excluded table %s", name)


# ------------------------------------------------------------------
# Entry point
# ------------------------------------------------------------------


def modify_schema(schema: Schema, config: "Config") -> None:
    """Apply merge, exclude and (optionally) sort to *schema* in place."""
    merge_additional_data(schema, config)
    exclude_tables(schema, config.exclude)
    if config.format.sort:
        schema.sort()
