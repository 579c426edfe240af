"""Relation resolution from foreign-key constraint text.

Drivers report foreign keys as definition strings such as::

    FOREIGN KEY (user_id, org_id) REFERENCES users (id, org_id) ON DELETE CASCADE

This module parses that text, resolves every name against the schema, and
links the resulting ``Relation`` into the graph. Pure logic -- no I/O.

Usage:
    from tbldoc.schema.relations import resolve_relation

    table = schema.find_table_by_name("posts")
    relation = resolve_relation(schema, table, constraint.definition)
"""

import logging
import re

from tbldoc.errors import NotFoundError, ParseError
from tbldoc.schema.models import Relation, Schema, Table

logger = logging.getLogger(__name__)

FK_PATTERN = re.compile(
    r"FOREIGN\s+KEY\s*\(([^()]+)\)\s*REFERENCES\s+([^\s(]+)\s*\(([^()]+)\)",
    re.IGNORECASE,
)

_QUOTES = "\"`"


def _split_identifiers(text: str) -> list[str]:
    names = [part.strip().strip(_QUOTES) for part in text.split(",")]
    if any(not name for name in names):
        raise ParseError(f"invalid column list '({text})'")
    return names


def _unquote_table(text: str) -> str:
    return ".".join(part.strip(_QUOTES) for part in text.split("."))


def parse_fk_definition(definition: str) -> tuple[list[str], str, list[str]]:
    """Split a foreign-key definition into its three name lists.

    Args:
        definition: Constraint text, e.g. ``FOREIGN KEY (a_id) REFERENCES a (id)``.

    Returns:
        Tuple of ``(columns, parent_table, parent_columns)``. Column order is
        preserved as written.

    Raises:
        ParseError: If the text does not match the grammar or the two column
            lists have different lengths.

    Examples:
        >>> parse_fk_definition("FOREIGN KEY (a_id) REFERENCES a (id)")
        (['a_id'], 'a', ['id'])
    """
    match = FK_PATTERN.search(definition)
    if match is None:
        raise ParseError(f"can not parse foreign key definition '{definition}'")

    columns = _split_identifiers(match.group(1))
    parent_table = _unquote_table(match.group(2))
    parent_columns = _split_identifiers(match.group(3))

    if len(columns) != len(parent_columns):
        raise ParseError(
            f"column count mismatch in foreign key definition '{definition}' "
            f"({len(columns)} != {len(parent_columns)})"
        )
    return columns, parent_table, parent_columns


def _find_parent_table(schema: Schema, name: str) -> Table:
    try:
        return schema.find_table_by_name(name)
    except NotFoundError:
        # Engines may schema-qualify the referenced table (public.users).
        if "." not in name:
            raise
        return schema.find_table_by_name(name.rsplit(".", 1)[1])


def build_relation(
    schema: Schema,
    table: Table,
    columns: list[str],
    parent_table: str,
    parent_columns: list[str],
    definition: str,
    virtual: bool = False,
) -> Relation:
    """Resolve every name of a relation and link it into *schema*.

    All lookups happen before the schema is touched, so a failure leaves
    ``schema.relations`` and every back-reference list unchanged.

    Raises:
        NotFoundError: If a column, the parent table, or a parent column
            does not exist.
    """
    for name in columns:
        table.find_column_by_name(name)
    parent = _find_parent_table(schema, parent_table)
    for name in parent_columns:
        parent.find_column_by_name(name)

    relation = schema.add_relation(
        Relation(
            table=table.name,
            columns=list(columns),
            parent_table=parent.name,
            parent_columns=list(parent_columns),
            definition=definition,
            virtual=virtual,
        )
    )
    logger.debug(
        "Linked relation #%d %s(%s) -> %s(%s)",
        relation.id,
        relation.table,
        ", ".join(relation.columns),
        relation.parent_table,
        ", ".join(relation.parent_columns),
    )
    return relation


def resolve_relation(schema: Schema, table: Table, definition: str) -> Relation:
    """Parse a foreign-key definition on *table* and link it into *schema*.

    Args:
        schema: Schema holding every table the definition may reference.
        table: Owning table, already populated with its columns.
        definition: Raw constraint definition text.

    Returns:
        The new ``Relation``, already appended to ``schema.relations`` and
        referenced from the back-reference lists of every column involved.

    Raises:
        ParseError: If *definition* is malformed.
        NotFoundError: If a named table or column does not exist.
    """
    columns, parent_table, parent_columns = parse_fk_definition(definition)
    return build_relation(
        schema, table, columns, parent_table, parent_columns, definition
    )
