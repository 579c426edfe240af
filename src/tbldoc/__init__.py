"""tbldoc: database schema documentation with drift detection.

Builds a cross-referenced schema graph from database introspection, applies
configured overrides (virtual relations, comments, exclusions, ordering),
writes Markdown documents, and reports when those documents have drifted
from the database.

Usage:
    from tbldoc import analyze, load_config, modify_schema, diff_docs

    config = load_config()
    schema = analyze(config.dsn)
    modify_schema(schema, config)
    print(diff_docs(schema, config))
"""

__version__ = "0.1.0"

# Errors
from tbldoc.errors import (
    ConfigError,
    DataSourceError,
    DocumentIOError,
    IntegrityGuardError,
    NotFoundError,
    OutputExistsError,
    ParseError,
    TbldocError,
)

# Schema
from tbldoc.schema.models import Column, Relation, Schema, Table
from tbldoc.schema.relations import resolve_relation
from tbldoc.schema.transform import exclude_tables, merge_additional_data, modify_schema

# Config
from tbldoc.config.loader import load_config
from tbldoc.config.models import Config

# Data sources, output, diff
from tbldoc.datasource import analyze
from tbldoc.diff import diff_docs, diff_text
from tbldoc.output.files import output_exists, write_docs

__all__ = [
    # Errors
    "TbldocError",
    "NotFoundError",
    "ParseError",
    "IntegrityGuardError",
    "DocumentIOError",
    "ConfigError",
    "DataSourceError",
    "OutputExistsError",
    # Schema
    "Schema",
    "Table",
    "Column",
    "Relation",
    "resolve_relation",
    "merge_additional_data",
    "exclude_tables",
    "modify_schema",
    # Config
    "load_config",
    "Config",
    # Data sources, output, diff
    "analyze",
    "diff_docs",
    "diff_text",
    "output_exists",
    "write_docs",
]
