"""PostgreSQL driver via pg_catalog.

Queries the live database for:
- Tables and views, with comments and view definitions
- Columns (type, nullability, default, comment)
- Constraints, rendered by ``pg_get_constraintdef``
- Indexes, rendered by ``pg_get_indexdef``
- Triggers, rendered by ``pg_get_triggerdef``

Foreign keys are then linked into the schema graph through
``resolve_relation``.

Uses psycopg (v3) for PostgreSQL connections.
"""

import logging

import psycopg
from psycopg import Connection

from tbldoc.schema.models import (
    TABLE_TYPE_BASE,
    TABLE_TYPE_VIEW,
    TYPE_FK,
    TYPE_PK,
    TYPE_UNIQUE,
    TYPE_UNKNOWN,
    Column,
    Constraint,
    DriverInfo,
    Index,
    Schema,
    Table,
    Trigger,
)
from tbldoc.schema.relations import resolve_relation

logger = logging.getLogger(__name__)

_CONSTRAINT_TYPES = {
    "p": TYPE_PK,
    "u": TYPE_UNIQUE,
    "f": TYPE_FK,
    "c": "CHECK",
    "x": "EXCLUSION",
    "t": "TRIGGER",
}


class PostgresDriver:
    """Reads a PostgreSQL schema into a ``Schema``.

    Usage:
        with PostgresDriver(database_url) as driver:
            schema.driver = driver.info()
            driver.analyze(schema)
    """

    # Tables to exclude from analysis (extension/system tables)
    EXCLUDED_TABLES = {
        "schema_migrations",
        "pg_stat_statements",
        "spatial_ref_sys",
    }

    def __init__(self, database_url: str, schema_name: str = "public"):
        """Initialize with database connection URL.

        Args:
            database_url: PostgreSQL connection URL
            schema_name: PostgreSQL schema to analyze (default: public)
        """
        self._database_url = database_url
        self._schema_name = schema_name
        self._conn: Connection | None = None

    def __enter__(self) -> "PostgresDriver":
        """Context manager entry - opens connection."""
        # Append connect_timeout if not already in URL
        url = self._database_url
        if "connect_timeout" not in url:
            separator = "&" if "?" in url else "?"
            url = f"{url}{separator}connect_timeout=10"

        self._conn = psycopg.connect(url)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - closes connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def _connection(self) -> Connection:
        if not self._conn:
            raise RuntimeError("Driver not connected. Use with statement.")
        return self._conn

    def info(self) -> DriverInfo:
        """Return engine name and server version."""
        with self._connection().cursor() as cur:
            cur.execute("SHOW server_version")
            row = cur.fetchone()
        return DriverInfo(name="postgres", database_version=row[0] if row else "")

    def analyze(self, schema: Schema) -> None:
        """Append every table of the configured schema, then link foreign keys.

        Args:
            schema: Shared schema; tables from earlier data sources are kept.
        """
        added: list[Table] = []
        for oid, name, table_type, comment in self._get_tables():
            if name in self.EXCLUDED_TABLES:
                continue

            table = Table(name=name, table_type=table_type, comment=comment)
            if table_type == TABLE_TYPE_VIEW:
                table.definition = self._get_view_definition(oid, name)
            table.columns = self._get_columns(oid)
            table.constraints = self._get_constraints(oid, name)
            table.indexes = self._get_indexes(oid, name)
            table.triggers = self._get_triggers(oid)

            schema.tables.append(table)
            added.append(table)
            logger.debug("Analyzed table %s (%d columns)", name, len(table.columns))

        for table in added:
            for constraint in table.constraints:
                if constraint.constraint_type == TYPE_FK:
                    resolve_relation(schema, table, constraint.definition)

    def _get_tables(self) -> list[tuple[int, str, str, str]]:
        """Get (oid, name, type, comment) for tables and views in schema."""
        query = """
            SELECT
                c.oid,
                c.relname,
                CASE WHEN c.relkind IN ('v', 'm') THEN %s ELSE %s END,
                COALESCE(obj_description(c.oid, 'pg_class'), '')
            FROM pg_class c
            JOIN pg_namespace n ON n.oid = c.relnamespace
            WHERE n.nspname = %s
              AND c.relkind IN ('r', 'p', 'v', 'm')
            ORDER BY c.relname
        """
        with self._connection().cursor() as cur:
            cur.execute(query, (TABLE_TYPE_VIEW, TABLE_TYPE_BASE, self._schema_name))
            return [tuple(row) for row in cur.fetchall()]

    def _get_view_definition(self, oid: int, name: str) -> str:
        with self._connection().cursor() as cur:
            cur.execute("SELECT pg_get_viewdef(%s::oid, true)", (oid,))
            row = cur.fetchone()
        body = (row[0] or "").strip() if row else ""
        return f"CREATE VIEW {name} AS (\n{body}\n)"

    def _get_columns(self, oid: int) -> list[Column]:
        """Get columns for a table in ordinal order."""
        query = """
            SELECT
                a.attname,
                format_type(a.atttypid, a.atttypmod),
                NOT a.attnotnull,
                pg_get_expr(d.adbin, d.adrelid),
                COALESCE(col_description(a.attrelid, a.attnum), '')
            FROM pg_attribute a
            LEFT JOIN pg_attrdef d
                ON d.adrelid = a.attrelid
                AND d.adnum = a.attnum
            WHERE a.attrelid = %s
              AND a.attnum > 0
              AND NOT a.attisdropped
            ORDER BY a.attnum
        """
        with self._connection().cursor() as cur:
            cur.execute(query, (oid,))
            return [
                Column(
                    name=name,
                    data_type=data_type,
                    nullable=nullable,
                    default=default,
                    comment=comment,
                )
                for name, data_type, nullable, default, comment in cur.fetchall()
            ]

    def _get_constraints(self, oid: int, table_name: str) -> list[Constraint]:
        """Get constraints for a table, with column lists in key order."""
        query = """
            SELECT
                con.conname,
                con.contype,
                pg_get_constraintdef(con.oid, true),
                ARRAY(
                    SELECT a.attname
                    FROM unnest(con.conkey) WITH ORDINALITY AS k(attnum, ord)
                    JOIN pg_attribute a
                        ON a.attrelid = con.conrelid AND a.attnum = k.attnum
                    ORDER BY k.ord
                ),
                fc.relname,
                ARRAY(
                    SELECT a.attname
                    FROM unnest(con.confkey) WITH ORDINALITY AS k(attnum, ord)
                    JOIN pg_attribute a
                        ON a.attrelid = con.confrelid AND a.attnum = k.attnum
                    ORDER BY k.ord
                )
            FROM pg_constraint con
            LEFT JOIN pg_class fc ON fc.oid = con.confrelid
            WHERE con.conrelid = %s
            ORDER BY con.conname
        """
        with self._connection().cursor() as cur:
            cur.execute(query, (oid,))
            constraints = []
            for name, contype, definition, columns, ref_table, ref_columns in cur.fetchall():
                constraints.append(
                    Constraint(
                        name=name,
                        constraint_type=_CONSTRAINT_TYPES.get(contype, TYPE_UNKNOWN),
                        definition=definition,
                        table=table_name,
                        columns=list(columns or []),
                        reference_table=ref_table,
                        reference_columns=list(ref_columns or []),
                    )
                )
            return constraints

    def _get_indexes(self, oid: int, table_name: str) -> list[Index]:
        """Get indexes for a table (including the primary key index)."""
        query = """
            SELECT
                i.relname AS index_name,
                pg_get_indexdef(i.oid),
                array_agg(a.attname ORDER BY x.ordinality) AS columns
            FROM pg_index ix
            JOIN pg_class i ON i.oid = ix.indexrelid
            JOIN LATERAL unnest(ix.indkey) WITH ORDINALITY AS x(attnum, ordinality) ON TRUE
            LEFT JOIN pg_attribute a ON a.attrelid = ix.indrelid AND a.attnum = x.attnum
            WHERE ix.indrelid = %s
            GROUP BY i.relname, i.oid
            ORDER BY i.relname
        """
        with self._connection().cursor() as cur:
            cur.execute(query, (oid,))
            return [
                Index(
                    name=name,
                    definition=definition,
                    table=table_name,
                    # expression indexes report attnum 0, which has no attname
                    columns=[c for c in columns if c],
                )
                for name, definition, columns in cur.fetchall()
            ]

    def _get_triggers(self, oid: int) -> list[Trigger]:
        """Get user triggers for a table."""
        query = """
            SELECT tgname, pg_get_triggerdef(oid, true)
            FROM pg_trigger
            WHERE tgrelid = %s
              AND NOT tgisinternal
            ORDER BY tgname
        """
        with self._connection().cursor() as cur:
            cur.execute(query, (oid,))
            return [
                Trigger(name=name, definition=definition)
                for name, definition in cur.fetchall()
            ]
