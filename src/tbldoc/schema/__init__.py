"""Schema graph, relation resolution, and config-driven transformation.

Usage:
    from tbldoc.schema import Schema, resolve_relation, modify_schema
"""

from tbldoc.schema.models import (
    Column,
    Constraint,
    DriverInfo,
    Index,
    Relation,
    Schema,
    Table,
    Trigger,
)
from tbldoc.schema.relations import build_relation, parse_fk_definition, resolve_relation
from tbldoc.schema.transform import (
    exclude_tables,
    merge_additional_comments,
    merge_additional_data,
    merge_additional_relations,
    modify_schema,
)

__all__ = [
    "Schema",
    "Table",
    "Column",
    "Relation",
    "Constraint",
    "Index",
    "Trigger",
    "DriverInfo",
    "parse_fk_definition",
    "resolve_relation",
    "build_relation",
    "merge_additional_data",
    "merge_additional_relations",
    "merge_additional_comments",
    "exclude_tables",
    "modify_schema",
]
