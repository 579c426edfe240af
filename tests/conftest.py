"""Shared schema fixtures."""

import pytest

from tbldoc.schema.models import (
    TABLE_TYPE_VIEW,
    TYPE_FK,
    TYPE_PK,
    Column,
    Constraint,
    Index,
    Schema,
    Table,
    Trigger,
)
from tbldoc.schema.relations import resolve_relation


def _fk(table: str, name: str, definition: str) -> Constraint:
    return Constraint(name=name, constraint_type=TYPE_FK, definition=definition, table=table)


@pytest.fixture
def ab_schema() -> Schema:
    """Tables ``a(id)`` and ``b(id, a_id)`` with ``b.a_id -> a.id`` resolved."""
    a = Table(name="a", columns=[Column(name="id", data_type="int", nullable=False)])
    b = Table(
        name="b",
        columns=[
            Column(name="id", data_type="int", nullable=False),
            Column(name="a_id", data_type="int"),
        ],
        constraints=[_fk("b", "b_a_id_fkey", "FOREIGN KEY (a_id) REFERENCES a (id)")],
    )
    schema = Schema(name="testdb", tables=[a, b])
    resolve_relation(schema, b, b.constraints[0].definition)
    return schema


@pytest.fixture
def blog_schema() -> Schema:
    """A small blog schema with a composite key, a view and a lonely table.

    Relations:
        posts.user_id -> users.id
        comments.post_id -> posts.id
        comments.user_id -> users.id
        comment_stars(comment_id, post_id) -> comments(id, post_id)
    """
    users = Table(
        name="users",
        comment="Registered users",
        columns=[
            Column(name="id", data_type="integer", nullable=False),
            Column(name="username", data_type="varchar(50)", nullable=False),
            Column(name="email", data_type="text", comment="Login address"),
        ],
        constraints=[
            Constraint(
                name="users_pkey",
                constraint_type=TYPE_PK,
                definition="PRIMARY KEY (id)",
                table="users",
                columns=["id"],
            )
        ],
        indexes=[
            Index(
                name="users_pkey",
                definition="CREATE UNIQUE INDEX users_pkey ON public.users USING btree (id)",
                table="users",
                columns=["id"],
            )
        ],
    )
    posts = Table(
        name="posts",
        columns=[
            Column(name="id", data_type="integer", nullable=False),
            Column(name="user_id", data_type="integer", nullable=False),
            Column(name="title", data_type="text", default="'untitled'::text"),
        ],
        constraints=[
            _fk("posts", "posts_user_id_fk", "FOREIGN KEY (user_id) REFERENCES users(id)"),
        ],
        triggers=[
            Trigger(
                name="update_posts_updated",
                definition="CREATE TRIGGER update_posts_updated BEFORE UPDATE ON posts "
                "FOR EACH ROW EXECUTE FUNCTION touch()",
            )
        ],
    )
    comments = Table(
        name="comments",
        columns=[
            Column(name="id", data_type="integer", nullable=False),
            Column(name="post_id", data_type="integer", nullable=False),
            Column(name="user_id", data_type="integer", nullable=False),
            Column(name="body", data_type="text"),
        ],
        constraints=[
            _fk(
                "comments",
                "comments_post_id_fk",
                "FOREIGN KEY (post_id) REFERENCES posts(id) ON DELETE CASCADE",
            ),
            _fk("comments", "comments_user_id_fk", "FOREIGN KEY (user_id) REFERENCES users(id)"),
        ],
    )
    comment_stars = Table(
        name="comment_stars",
        columns=[
            Column(name="id", data_type="integer", nullable=False),
            Column(name="comment_id", data_type="integer", nullable=False),
            Column(name="comment_post_id", data_type="integer", nullable=False),
        ],
        constraints=[
            _fk(
                "comment_stars",
                "comment_stars_fk",
                'FOREIGN KEY (comment_id, comment_post_id) REFERENCES "comments" ("id", "post_id")',
            ),
        ],
    )
    logs = Table(
        name="logs",
        columns=[Column(name="id", data_type="bigint"), Column(name="message", data_type="text")],
    )
    post_counts = Table(
        name="post_counts",
        table_type=TABLE_TYPE_VIEW,
        definition="CREATE VIEW post_counts AS (\nSELECT user_id, count(*) FROM posts GROUP BY user_id\n)",
        columns=[Column(name="user_id", data_type="integer"), Column(name="count", data_type="bigint")],
    )

    schema = Schema(
        name="blog",
        tables=[users, posts, comments, comment_stars, logs, post_counts],
    )
    for table in schema.tables:
        for constraint in table.constraints:
            if constraint.constraint_type == TYPE_FK:
                resolve_relation(schema, table, constraint.definition)
    return schema
