"""Lint rules for a resolved schema.

The rule set is closed: every rule is one variant of the ``LintRule`` union,
carries its own parameters, and is evaluated by the single ``match`` in
``check_rule``.

Usage:
    from tbldoc.config.lint import run_lint

    for warn in run_lint(schema, config.lint, exclude=config.lint_exclude):
        print(warn.message)
"""

from collections.abc import Iterable
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from tbldoc.schema.models import Schema, Table


class RuleWarn(BaseModel):
    """A single lint finding."""

    message: str


# ============================================================================
# Rule variants
# ============================================================================


class RequireTableComment(BaseModel):
    kind: Literal["requireTableComment"] = "requireTableComment"
    enabled: bool = False


class RequireColumnComment(BaseModel):
    kind: Literal["requireColumnComment"] = "requireColumnComment"
    enabled: bool = False


class NoRelationTables(BaseModel):
    kind: Literal["noRelationTables"] = "noRelationTables"
    enabled: bool = False
    max: int = 0


class ColumnCount(BaseModel):
    kind: Literal["columnCount"] = "columnCount"
    enabled: bool = False
    max: int = 0


LintRule = Annotated[
    Union[RequireTableComment, RequireColumnComment, NoRelationTables, ColumnCount],
    Field(discriminator="kind"),
]


class Lint(BaseModel):
    """``[lint]`` section of the configuration."""

    model_config = ConfigDict(populate_by_name=True)

    require_table_comment: RequireTableComment = Field(
        default_factory=RequireTableComment, alias="requireTableComment"
    )
    require_column_comment: RequireColumnComment = Field(
        default_factory=RequireColumnComment, alias="requireColumnComment"
    )
    no_relation_tables: NoRelationTables = Field(
        default_factory=NoRelationTables, alias="noRelationTables"
    )
    column_count: ColumnCount = Field(default_factory=ColumnCount, alias="columnCount")

    def rules(self) -> list[LintRule]:
        """Return every configured rule, enabled or not, in a fixed order."""
        return [
            self.require_table_comment,
            self.require_column_comment,
            self.no_relation_tables,
            self.column_count,
        ]


# ============================================================================
# Evaluation
# ============================================================================


def check_rule(rule: LintRule, schema: Schema, tables: list[Table]) -> list[RuleWarn]:
    """Evaluate one rule over *tables* (a subset of ``schema.tables``)."""
    match rule:
        case RequireTableComment():
            return [
                RuleWarn(message=f"{t.name}: table comment required.")
                for t in tables
                if t.comment == ""
            ]
        case RequireColumnComment():
            return [
                RuleWarn(message=f"{t.name}.{c.name}: column comment required.")
                for t in tables
                for c in t.columns
                if c.comment == ""
            ]
        case NoRelationTables(max=limit):
            lonely = {t.name for t in tables}
            for r in schema.relations:
                lonely.discard(r.table)
                lonely.discard(r.parent_table)
            if len(lonely) > limit:
                return [
                    RuleWarn(
                        message=(
                            "schema has too many no relation tables. "
                            f"[{len(lonely)}/{limit}]"
                        )
                    )
                ]
            return []
        case ColumnCount(max=limit):
            return [
                RuleWarn(
                    message=f"{t.name} has too many columns. [{len(t.columns)}/{limit}]"
                )
                for t in tables
                if len(t.columns) > limit
            ]
        case _:
            raise TypeError(f"unknown lint rule: {rule!r}")


def run_lint(
    schema: Schema, lint: Lint, exclude: Iterable[str] = ()
) -> list[RuleWarn]:
    """Run every enabled rule and collect the warnings in rule order.

    Tables named in *exclude* are not checked.
    """
    skipped = set(exclude)
    tables = [t for t in schema.tables if t.name not in skipped]
    warns: list[RuleWarn] = []
    for rule in lint.rules():
        if rule.enabled:
            warns.extend(check_rule(rule, schema, tables))
    return warns
