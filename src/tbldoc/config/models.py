"""Pydantic models for tbldoc configuration (``.tbldoc.toml``)."""

from urllib.parse import urlsplit, urlunsplit

from pydantic import BaseModel, ConfigDict, Field

from tbldoc.config.lint import Lint

DEFAULT_DOC_PATH = "dbdoc"
DEFAULT_ER_FORMAT = "png"


def mask_dsn(dsn: str) -> str:
    """Replace the password of a URL-style DSN with ``*****``.

    DSNs without a password (or that are not URLs) are returned unchanged.
    """
    parts = urlsplit(dsn)
    if parts.password is None:
        return dsn
    userinfo, _, hostinfo = parts.netloc.rpartition("@")
    username = userinfo.split(":", 1)[0]
    return urlunsplit(parts._replace(netloc=f"{username}:*****@{hostinfo}"))


class _Model(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ============================================================================
# Output settings
# ============================================================================


class Format(_Model):
    """Document formatting switches."""

    adjust: bool = False  # pad table cells to a uniform width
    sort: bool = False  # canonical name ordering


class ER(_Model):
    """ER diagram settings."""

    skip: bool = False
    format: str = ""
    comment: bool = False


# ============================================================================
# Schema overrides
# ============================================================================


class AdditionalRelation(_Model):
    """A virtual relation declared in configuration."""

    table: str
    columns: list[str]
    parent_table: str = Field(alias="parentTable")
    parent_columns: list[str] = Field(alias="parentColumns")
    definition: str = Field(default="", alias="def")


class AdditionalComment(_Model):
    """Comment overrides for one table and its columns."""

    table: str
    table_comment: str = Field(default="", alias="tableComment")
    column_comments: dict[str, str] = Field(default_factory=dict, alias="columnComments")


# ============================================================================
# Root
# ============================================================================


class Config(_Model):
    """Complete tbldoc configuration."""

    dsn: list[str] = Field(default_factory=list)
    doc_path: str = Field(default="", alias="docPath")
    format: Format = Field(default_factory=Format)
    er: ER = Field(default_factory=ER)
    exclude: list[str] = Field(default_factory=list)
    lint: Lint = Field(default_factory=Lint)
    lint_exclude: list[str] = Field(default_factory=list, alias="lintExclude")
    relations: list[AdditionalRelation] = Field(default_factory=list)
    comments: list[AdditionalComment] = Field(default_factory=list)

    def masked_dsn(self) -> str:
        """Return the first DSN with its password replaced by ``*****``.

        Example:
            >>> Config(dsn=["pg://u:secret@db:5432/app"]).masked_dsn()
            'pg://u:*****@db:5432/app'
        """
        if not self.dsn:
            return ""
        return mask_dsn(self.dsn[0])
