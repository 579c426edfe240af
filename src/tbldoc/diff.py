"""Drift detection between the schema and its persisted documents.

For the index document and each table document, the current schema is
rendered in memory ("A") and compared with the file on disk ("B") as a
line-based unified diff. Units whose texts are identical contribute
nothing, so an empty result means the documents are up to date.

Usage:
    from tbldoc.diff import diff_docs

    drift = diff_docs(schema, config)
    if drift:
        print(drift, end="")
"""

import difflib
import logging
from pathlib import Path

from tbldoc.config.models import Config
from tbldoc.errors import DocumentIOError
from tbldoc.output.files import (
    SCHEMA_UNIT,
    Renderer,
    er_exists,
    renderer_for,
    schema_doc_name,
    table_doc_name,
)
from tbldoc.schema.models import Schema

logger = logging.getLogger(__name__)

CONTEXT_LINES = 3


def split_lines(text: str) -> list[str]:
    """Split *text* after each ``\\n`` only, keeping the terminators.

    Unlike ``str.splitlines`` this leaves ``\\r``, form feeds and Unicode line
    separators inside their line.
    """
    lines = [line + "\n" for line in text.split("\n")]
    lines[-1] = lines[-1][:-1]
    if not lines[-1]:
        lines.pop()
    return lines


def diff_text(a: str, b: str, from_label: str, to_label: str) -> str:
    """Return the unified diff of *a* against *b*, or ``""`` when equal.

    Examples:
        >>> diff_text("x\\n", "x\\n", "a", "b")
        ''
        >>> print(diff_text("x\\n", "y\\n", "a", "b"), end="")
        --- a
        +++ b
        @@ -1 +1 @@
        -x
        +y
    """
    if a == b:
        return ""
    lines = difflib.unified_diff(
        split_lines(a),
        split_lines(b),
        fromfile=from_label,
        tofile=to_label,
        n=CONTEXT_LINES,
    )
    out = []
    for line in lines:
        out.append(line if line.endswith("\n") else line + "\n\\ No newline at end of file\n")
    return "".join(out)


def read_document(path: Path) -> str:
    """Read a persisted document; a missing file reads as ``""``.

    Raises:
        DocumentIOError: If the file exists but cannot be read or decoded.
    """
    try:
        with open(path, encoding="utf-8", newline="") as f:
            return f.read()
    except FileNotFoundError:
        return ""
    except (OSError, UnicodeDecodeError) as e:
        raise DocumentIOError(f"failed to read {path}: {e}") from e


def _unit_diff(current: str, path: Path, from_label: str, to_label: str) -> str:
    text = diff_text(current, read_document(path), from_label, to_label)
    if not text:
        return ""
    logger.debug("Drift detected in %s", to_label)
    return f"diff {from_label} {to_label}\n{text}"


def diff_docs(
    schema: Schema,
    config: Config,
    renderer: Renderer | None = None,
) -> str:
    """Diff every document unit of *schema* against ``config.doc_path``.

    Args:
        schema: Transformed schema.
        config: Loaded configuration; its first DSN (password masked) labels
            the "from" side.
        renderer: Renderer to use (default: from *config*).

    Returns:
        Concatenated ``diff <from> <to>`` blocks for every changed unit, or
        ``""`` if nothing changed.

    Raises:
        DocumentIOError: If an existing document cannot be read.
    """
    if renderer is None:
        renderer = renderer_for(config)
    doc_dir = Path(config.doc_path).absolute()
    from_label = config.masked_dsn()

    def to_label(name: str) -> str:
        return str(Path(config.doc_path) / name)

    name = schema_doc_name(renderer)
    current = renderer.render_schema(
        schema, er=er_exists(doc_dir, SCHEMA_UNIT, config.er.format)
    )
    chunks = [_unit_diff(current, doc_dir / name, from_label, to_label(name))]

    for table in schema.tables:
        name = table_doc_name(table, renderer)
        current = renderer.render_table(
            table, schema, er=er_exists(doc_dir, table.name, config.er.format)
        )
        chunks.append(_unit_diff(current, doc_dir / name, from_label, to_label(name)))

    return "".join(chunks)
