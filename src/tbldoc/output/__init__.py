"""Document rendering and writing.

Usage:
    from tbldoc.output import MarkdownRenderer, PlantUMLRenderer, write_docs, output_exists
"""

from tbldoc.output.files import (
    Renderer,
    er_exists,
    output_exists,
    renderer_for,
    schema_doc_name,
    table_doc_name,
    write_docs,
)
from tbldoc.output.markdown import MarkdownRenderer, adjust_table
from tbldoc.output.plantuml import PlantUMLRenderer

__all__ = [
    "Renderer",
    "MarkdownRenderer",
    "adjust_table",
    "PlantUMLRenderer",
    "renderer_for",
    "schema_doc_name",
    "table_doc_name",
    "er_exists",
    "output_exists",
    "write_docs",
]
