"""Exception hierarchy for tbldoc.

Every error raised by the core derives from ``TbldocError`` so that the CLI
can catch a single base class and map it to an exit code. Each concrete
class also derives from the closest builtin so plain ``except LookupError``
or ``except OSError`` handlers keep working.
"""


class TbldocError(Exception):
    """Base class for all tbldoc errors."""

    pass


class NotFoundError(TbldocError, LookupError):
    """Raised when a named table or column does not exist in the schema."""

    pass


class ParseError(TbldocError, ValueError):
    """Raised when a constraint definition does not match the FK grammar."""

    pass


class IntegrityGuardError(TbldocError):
    """Raised when excluding a table would orphan a relation's parent side.

    Attributes:
        table: Name of the table that was requested for exclusion.
        dependent: Name of the table whose relation references ``table``.
    """

    def __init__(self, table: str, dependent: str):
        self.table = table
        self.dependent = dependent
        super().__init__(
            f"failed to exclude table '{table}': '{table}' is related by '{dependent}'"
        )


class DocumentIOError(TbldocError, OSError):
    """Raised when a persisted document cannot be read or written.

    A missing file is never reported with this error; callers treat it as
    an empty document.
    """

    pass


class ConfigError(TbldocError, ValueError):
    """Raised when the configuration file is missing or invalid."""

    pass


class DataSourceError(TbldocError):
    """Raised when a data source identifier cannot be analyzed."""

    pass


class OutputExistsError(TbldocError):
    """Raised when writing would overwrite existing documents without force."""

    pass
