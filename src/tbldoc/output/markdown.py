"""Markdown renderer for the schema index and table pages.

Templates are Jinja2; every table is pre-built as rows of cells so that the
``format.adjust`` option can pad all cells of a column to the same display
width.

Usage:
    from tbldoc.output.markdown import MarkdownRenderer

    renderer = MarkdownRenderer(adjust=True, er_format="png")
    text = renderer.render_table(table, schema, er=False)
"""

from jinja2 import DictLoader, Environment, StrictUndefined
from rich.cells import cell_len

from tbldoc.schema.models import Schema, Table

INDEX_TEMPLATE = """\
# {{ schema.name }}
{% if schema.driver %}

> {{ schema.driver.name }} {{ schema.driver.database_version }}
{% endif %}
{% if er %}

![er](schema.{{ er_format }})
{% endif %}

## Tables

{% for row in tables %}
{{ row | mdrow }}
{% endfor %}

---

> Generated by tbldoc
"""

TABLE_TEMPLATE = """\
# {{ table.name }}

## Description

{{ table.comment | nl2mdnl }}
{% if table.definition %}

<details>
<summary><strong>Table Definition</strong></summary>

```sql
{{ table.definition }}
```

</details>
{% endif %}

## Columns

{% for row in columns %}
{{ row | mdrow }}
{% endfor %}
{% for title, rows in sections if rows | length > 2 %}

## {{ title }}

{% for row in rows %}
{{ row | mdrow }}
{% endfor %}
{% endfor %}
{% if er %}

## Relations

![er]({{ table.name }}.{{ er_format }})
{% endif %}

---

> Generated by tbldoc
"""


def nl2br(text: str) -> str:
    return text.replace("\r\n", "<br>").replace("\n", "<br>").replace("\r", "<br>")


def nl2mdnl(text: str) -> str:
    return text.replace("\r\n", "  \n").replace("\n", "  \n").replace("\r", "  \n")


def _cell(text: str) -> str:
    return nl2br(text).replace("|", "\\|")


def _mdrow(row: list[str]) -> str:
    return "| " + " | ".join(row) + " |"


def _link(name: str) -> str:
    return f"[{name}]({name}.md)"


def adjust_table(rows: list[list[str]]) -> list[list[str]]:
    """Pad every cell to the widest cell of its column.

    Row 1 is the header separator and is redrawn as dashes of full width.
    Widths are terminal cell widths, so wide (e.g. CJK) characters count
    double.
    """
    widths = [0] * len(rows[0])
    for row in rows:
        for j, value in enumerate(row):
            widths[j] = max(widths[j], cell_len(value))

    adjusted = []
    for i, row in enumerate(rows):
        if i == 1:
            adjusted.append(["-" * w for w in widths])
        else:
            adjusted.append(
                [value + " " * (w - cell_len(value)) for value, w in zip(row, widths)]
            )
    return adjusted


def _header(*names: str) -> list[list[str]]:
    return [list(names), ["-" * len(n) for n in names]]


class MarkdownRenderer:
    """Renders ``README.md`` and ``<table>.md`` documents."""

    extension = ".md"

    def __init__(self, adjust: bool = False, er_format: str = "png"):
        self.adjust = adjust
        self.er_format = er_format
        self._env = Environment(
            loader=DictLoader({"index.md": INDEX_TEMPLATE, "table.md": TABLE_TEMPLATE}),
            autoescape=False,
            undefined=StrictUndefined,
            trim_blocks=True,
            keep_trailing_newline=True,
        )
        self._env.filters["nl2br"] = nl2br
        self._env.filters["nl2mdnl"] = nl2mdnl
        self._env.filters["mdrow"] = _mdrow

    def _finish(self, rows: list[list[str]]) -> list[list[str]]:
        return adjust_table(rows) if self.adjust else rows

    def render_schema(self, schema: Schema, er: bool = False) -> str:
        """Render the whole-schema index document."""
        rows = _header("Name", "Columns", "Comment", "Type")
        for t in schema.tables:
            rows.append(
                [_link(t.name), str(len(t.columns)), _cell(t.comment), t.table_type]
            )
        return self._env.get_template("index.md").render(
            schema=schema, tables=self._finish(rows), er=er, er_format=self.er_format
        )

    def render_table(self, table: Table, schema: Schema, er: bool = False) -> str:
        """Render one table page.

        *schema* is needed to resolve the column back-references into the
        related tables listed under Children and Parents.
        """
        columns = _header(
            "Name", "Type", "Default", "Nullable", "Children", "Parents", "Comment"
        )
        for c in table.columns:
            children = dict.fromkeys(r.table for r in schema.relations_for(c.child_relations))
            parents = dict.fromkeys(
                r.parent_table for r in schema.relations_for(c.parent_relations)
            )
            columns.append(
                [
                    _cell(c.name),
                    _cell(c.data_type),
                    _cell(c.default or ""),
                    "true" if c.nullable else "false",
                    " ".join(_link(n) for n in children),
                    " ".join(_link(n) for n in parents),
                    _cell(c.comment),
                ]
            )

        constraints = _header("Name", "Type", "Definition")
        for con in table.constraints:
            constraints.append(
                [_cell(con.name), con.constraint_type, _cell(con.definition)]
            )
        indexes = _header("Name", "Definition")
        for idx in table.indexes:
            indexes.append([_cell(idx.name), _cell(idx.definition)])
        triggers = _header("Name", "Definition")
        for trg in table.triggers:
            triggers.append([_cell(trg.name), _cell(trg.definition)])

        sections = [
            ("Constraints", self._finish(constraints)),
            ("Indexes", self._finish(indexes)),
            ("Triggers", self._finish(triggers)),
        ]
        return self._env.get_template("table.md").render(
            table=table,
            columns=self._finish(columns),
            sections=sections,
            er=er,
            er_format=self.er_format,
        )
