"""Database drivers that turn introspection queries into schema facts."""

from tbldoc.drivers.base import Driver
from tbldoc.drivers.postgres import PostgresDriver

__all__ = ["Driver", "PostgresDriver"]
