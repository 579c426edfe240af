"""Tests for PostgresDriver against a scripted pg_catalog."""

from unittest.mock import MagicMock, patch

import pytest

from tbldoc.drivers.postgres import PostgresDriver
from tbldoc.schema.models import TABLE_TYPE_VIEW, TYPE_FK, TYPE_PK, Schema

TABLES = [
    (1, "users", "BASE TABLE", "Registered users"),
    (2, "posts", "BASE TABLE", ""),
    (3, "user_posts", "VIEW", ""),
    (4, "schema_migrations", "BASE TABLE", ""),
]

COLUMNS = {
    1: [
        ("id", "integer", False, "nextval('users_id_seq'::regclass)", ""),
        ("email", "text", True, None, "Login address"),
    ],
    2: [
        ("id", "integer", False, None, ""),
        ("user_id", "integer", False, None, ""),
    ],
    3: [("email", "text", True, None, "")],
}

CONSTRAINTS = {
    1: [("users_pkey", "p", "PRIMARY KEY (id)", ["id"], None, [])],
    2: [
        (
            "posts_user_id_fkey",
            "f",
            "FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE",
            ["user_id"],
            "users",
            ["id"],
        )
    ],
}

INDEXES = {
    1: [
        ("users_pkey", "CREATE UNIQUE INDEX users_pkey ON public.users USING btree (id)", ["id"]),
        ("users_lower_email", "CREATE INDEX users_lower_email ON public.users (lower(email))", [None]),
    ],
}

TRIGGERS = {
    2: [("posts_touch", "CREATE TRIGGER posts_touch BEFORE UPDATE ON public.posts ...")],
}


class FakeCursor:
    """Answers catalog queries by matching on the SQL text."""

    def __init__(self) -> None:
        self._rows: list[tuple] = []

    def __enter__(self) -> "FakeCursor":
        return self

    def __exit__(self, *exc) -> None:
        return None

    def execute(self, query: str, params: tuple = ()) -> None:
        key = params[0] if params else None
        if "SHOW server_version" in query:
            self._rows = [("16.2",)]
        elif "pg_constraint" in query:
            self._rows = CONSTRAINTS.get(key, [])
        elif "pg_index ix" in query:
            self._rows = INDEXES.get(key, [])
        elif "FROM pg_trigger" in query:
            self._rows = TRIGGERS.get(key, [])
        elif "pg_get_viewdef" in query:
            self._rows = [(" SELECT users.email\n   FROM users;",)]
        elif "pg_attrdef" in query:
            self._rows = COLUMNS.get(key, [])
        elif "relkind" in query:
            self._rows = TABLES if params[2] == "public" else []
        else:
            raise AssertionError(f"unexpected query: {query}")

    def fetchall(self) -> list[tuple]:
        return list(self._rows)

    def fetchone(self) -> tuple | None:
        return self._rows[0] if self._rows else None


@pytest.fixture
def mock_connect():
    conn = MagicMock()
    conn.cursor.side_effect = FakeCursor
    with patch("tbldoc.drivers.postgres.psycopg.connect", return_value=conn) as mock:
        yield mock


class TestConnection:
    """Connection lifecycle."""

    def test_requires_with_statement(self) -> None:
        driver = PostgresDriver("postgresql://localhost/app")
        with pytest.raises(RuntimeError, match="not connected"):
            driver.info()

    def test_appends_connect_timeout(self, mock_connect: MagicMock) -> None:
        with PostgresDriver("postgresql://localhost/app?sslmode=disable"):
            pass
        mock_connect.assert_called_once_with(
            "postgresql://localhost/app?sslmode=disable&connect_timeout=10"
        )

    def test_keeps_explicit_timeout(self, mock_connect: MagicMock) -> None:
        with PostgresDriver("postgresql://localhost/app?connect_timeout=3"):
            pass
        mock_connect.assert_called_once_with("postgresql://localhost/app?connect_timeout=3")

    def test_closes_connection(self, mock_connect: MagicMock) -> None:
        with PostgresDriver("postgresql://localhost/app"):
            pass
        mock_connect.return_value.close.assert_called_once()


class TestAnalyze:
    """Catalog rows to schema graph."""

    @pytest.fixture
    def schema(self, mock_connect: MagicMock) -> Schema:
        schema = Schema(name="app")
        with PostgresDriver("postgresql://localhost/app") as driver:
            schema.driver = driver.info()
            driver.analyze(schema)
        return schema

    def test_driver_info(self, schema: Schema) -> None:
        assert schema.driver.name == "postgres"
        assert schema.driver.database_version == "16.2"

    def test_tables_and_excluded(self, schema: Schema) -> None:
        assert [t.name for t in schema.tables] == ["users", "posts", "user_posts"]
        assert schema.find_table_by_name("users").comment == "Registered users"

    def test_columns(self, schema: Schema) -> None:
        users = schema.find_table_by_name("users")
        user_id = users.find_column_by_name("id")
        assert user_id.nullable is False
        assert user_id.default == "nextval('users_id_seq'::regclass)"
        email = users.find_column_by_name("email")
        assert email.default is None
        assert email.comment == "Login address"

    def test_constraints(self, schema: Schema) -> None:
        pk = schema.find_table_by_name("users").constraints[0]
        assert pk.constraint_type == TYPE_PK
        assert pk.columns == ["id"]
        fk = schema.find_table_by_name("posts").constraints[0]
        assert fk.constraint_type == TYPE_FK
        assert fk.reference_table == "users"

    def test_expression_index_columns(self, schema: Schema) -> None:
        indexes = schema.find_table_by_name("users").indexes
        assert indexes[0].columns == ["id"]
        assert indexes[1].columns == []

    def test_triggers(self, schema: Schema) -> None:
        assert [t.name for t in schema.find_table_by_name("posts").triggers] == ["posts_touch"]

    def test_view_definition(self, schema: Schema) -> None:
        view = schema.find_table_by_name("user_posts")
        assert view.table_type == TABLE_TYPE_VIEW
        assert view.definition == "CREATE VIEW user_posts AS (\nSELECT users.email\n   FROM users;\n)"

    def test_foreign_keys_resolved(self, schema: Schema) -> None:
        assert len(schema.relations) == 1
        relation = schema.relations[0]
        assert (relation.table, relation.parent_table) == ("posts", "users")
        users_id = schema.find_table_by_name("users").find_column_by_name("id")
        assert users_id.child_relations == [relation.id]

    def test_other_schema_name(self, mock_connect: MagicMock) -> None:
        with PostgresDriver("postgresql://localhost/app", schema_name="audit") as driver:
            schema = Schema()
            driver.analyze(schema)
        assert schema.tables == []
