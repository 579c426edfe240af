"""Driver protocol definition.

A driver reads one database and populates a shared ``Schema`` with tables,
columns, constraints, indexes and triggers, then links foreign keys through
``tbldoc.schema.relations.resolve_relation``.

Usage:
    from tbldoc.drivers.base import Driver

    def analyze_with(driver: Driver, schema: Schema) -> None:
        schema.driver = driver.info()
        driver.analyze(schema)
"""

from typing import Protocol

from tbldoc.schema.models import DriverInfo, Schema


class Driver(Protocol):
    """Interface every database driver implements."""

    def analyze(self, schema: Schema) -> None:
        """Append this database's tables and relations to *schema*.

        Raises:
            NotFoundError: If a foreign key names a missing table or column.
            ParseError: If a foreign key definition is malformed.
        """
        ...

    def info(self) -> DriverInfo:
        """Return the engine name and server version."""
        ...
