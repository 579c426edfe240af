"""PlantUML renderer for ER diagram sources.

Writes one ``schema.puml`` for the whole schema and one ``<table>.puml`` per
table. A table diagram shows the table, the tables it is directly related
to, and the relations between them. Rendering the ``.puml`` sources into
images is left to PlantUML itself.

Usage:
    from tbldoc.output.plantuml import PlantUMLRenderer

    renderer = PlantUMLRenderer(comment=True)
    text = renderer.render_schema(schema)
"""

import re

from jinja2 import DictLoader, Environment, StrictUndefined

from tbldoc.schema.models import TABLE_TYPE_VIEW, Relation, Schema, Table

ER_TEMPLATE = """\
@startuml

hide circle
hide methods
skinparam linetype ortho

{% for entity in entities %}
entity "{{ entity.title }}" as {{ entity.alias }} << {{ entity.mark }} >> {
{% for line in entity.lines %}
  {{ line }}
{% endfor %}
}

{% endfor %}
{% for line in relations %}
{{ line }}
{% endfor %}

@enduml
"""

_MARK_TABLE = "(T,#5DBCD2)"
_MARK_VIEW = "(V,#C6EDDB)"


def alias(name: str) -> str:
    """Return a PlantUML identifier for a table name."""
    return re.sub(r"[^0-9A-Za-z_]", "_", name)


def _flat(text: str) -> str:
    return " ".join(text.split()).replace('"', "'")


class PlantUMLRenderer:
    """Renders ``schema.puml`` and ``<table>.puml`` diagram sources."""

    extension = ".puml"

    def __init__(self, comment: bool = False):
        self.comment = comment
        self._env = Environment(
            loader=DictLoader({"er.puml": ER_TEMPLATE}),
            autoescape=False,
            undefined=StrictUndefined,
            trim_blocks=True,
            keep_trailing_newline=True,
        )

    def _entity(self, table: Table) -> dict:
        title = table.name
        if self.comment and table.comment:
            title += f"\\n({_flat(table.comment)})"
        lines = []
        for c in table.columns:
            line = f"{c.name} [{c.data_type}]"
            if self.comment and c.comment:
                line += f" : {_flat(c.comment)}"
            lines.append(line)
        return {
            "title": title,
            "alias": alias(table.name),
            "mark": _MARK_VIEW if table.table_type == TABLE_TYPE_VIEW else _MARK_TABLE,
            "lines": lines,
        }

    @staticmethod
    def _relation(relation: Relation) -> str:
        link = "}o..||" if relation.virtual else "}o--||"
        line = f"{alias(relation.table)} {link} {alias(relation.parent_table)}"
        if relation.definition:
            line += f' : "{_flat(relation.definition)}"'
        return line

    def _render(self, tables: list[Table], relations: list[Relation]) -> str:
        return self._env.get_template("er.puml").render(
            entities=[self._entity(t) for t in tables],
            relations=[self._relation(r) for r in relations],
        )

    def render_schema(self, schema: Schema, er: bool = False) -> str:
        """Render the diagram of every table and relation."""
        return self._render(schema.tables, schema.relations)

    def render_table(self, table: Table, schema: Schema, er: bool = False) -> str:
        """Render *table* with its directly related tables."""
        relations = [
            r for r in schema.relations if table.name in (r.table, r.parent_table)
        ]
        related = {table.name}
        for r in relations:
            related.update((r.table, r.parent_table))
        tables = [table] + [
            t for t in schema.tables if t.name in related and t.name != table.name
        ]
        return self._render(tables, relations)
