"""Document set layout and writing.

The document set for a schema is one index document (``README.md``) plus
one document per table (``<table>.md``). Unless ``er.skip`` is set, the
PlantUML sources of the ER diagrams (``schema.puml``, ``<table>.puml``) are
written alongside. An ER image with the configured format next to a
document (``schema.png`` for the index, ``<table>.png`` for a table) tells
the renderer to embed it.
"""

import logging
from pathlib import Path
from typing import Protocol

from tbldoc.config.models import Config
from tbldoc.errors import DocumentIOError, OutputExistsError
from tbldoc.output.markdown import MarkdownRenderer
from tbldoc.output.plantuml import PlantUMLRenderer
from tbldoc.schema.models import Schema, Table

logger = logging.getLogger(__name__)

SCHEMA_UNIT = "schema"


class Renderer(Protocol):
    """Turns the schema model into document text."""

    extension: str

    def render_schema(self, schema: Schema, er: bool = False) -> str: ...

    def render_table(self, table: Table, schema: Schema, er: bool = False) -> str: ...


def renderer_for(config: Config) -> Renderer:
    """Build the renderer selected by *config*."""
    return MarkdownRenderer(adjust=config.format.adjust, er_format=config.er.format)


def schema_doc_name(renderer: Renderer) -> str:
    return f"README{renderer.extension}"


def table_doc_name(table: Table, renderer: Renderer) -> str:
    return f"{table.name}{renderer.extension}"


def er_exists(doc_dir: Path, unit: str, er_format: str) -> bool:
    """Return True if an ER image for *unit* sits in *doc_dir*."""
    return (doc_dir / f"{unit}.{er_format}").exists()


def output_exists(schema: Schema, doc_dir: Path, renderer: Renderer) -> bool:
    """Return True if the index or **any** table document already exists."""
    if (doc_dir / schema_doc_name(renderer)).exists():
        return True
    return any((doc_dir / table_doc_name(t, renderer)).exists() for t in schema.tables)


def _er_units(
    schema: Schema, doc_dir: Path, renderer: PlantUMLRenderer
) -> list[tuple[Path, str]]:
    units = [(doc_dir / f"{SCHEMA_UNIT}{renderer.extension}", renderer.render_schema(schema))]
    for table in schema.tables:
        units.append(
            (doc_dir / table_doc_name(table, renderer), renderer.render_table(table, schema))
        )
    return units


def write_docs(
    schema: Schema,
    config: Config,
    force: bool = False,
    renderer: Renderer | None = None,
) -> list[Path]:
    """Render and write the full document set to ``config.doc_path``.

    Args:
        schema: Transformed schema.
        config: Loaded configuration.
        force: Overwrite existing documents.
        renderer: Renderer to use (default: from *config*).

    Returns:
        Paths written, index first, ER sources last.

    Raises:
        OutputExistsError: If documents already exist and *force* is False.
        DocumentIOError: If a document cannot be written.
    """
    if renderer is None:
        renderer = renderer_for(config)
    doc_dir = Path(config.doc_path).absolute()

    if not force and output_exists(schema, doc_dir, renderer):
        raise OutputExistsError(f"output files already exists in {doc_dir}")

    units: list[tuple[Path, str]] = [
        (
            doc_dir / schema_doc_name(renderer),
            renderer.render_schema(
                schema, er=er_exists(doc_dir, SCHEMA_UNIT, config.er.format)
            ),
        )
    ]
    for table in schema.tables:
        units.append(
            (
                doc_dir / table_doc_name(table, renderer),
                renderer.render_table(
                    table, schema, er=er_exists(doc_dir, table.name, config.er.format)
                ),
            )
        )
    if not config.er.skip:
        er_renderer = PlantUMLRenderer(comment=config.er.comment)
        units.extend(_er_units(schema, doc_dir, er_renderer))

    written = []
    try:
        doc_dir.mkdir(parents=True, exist_ok=True)
        for path, text in units:
            path.write_text(text, encoding="utf-8", newline="")
            logger.debug("Wrote %s", path)
            written.append(path)
    except OSError as e:
        raise DocumentIOError(f"failed to write documents to {doc_dir}: {e}") from e
    return written
