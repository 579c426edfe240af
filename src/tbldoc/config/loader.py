"""Configuration loading from ``.tbldoc.toml``, the environment, and overrides."""

import logging
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from tbldoc.config.interpolate import expand_environ
from tbldoc.config.models import DEFAULT_DOC_PATH, DEFAULT_ER_FORMAT, Config
from tbldoc.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(".tbldoc.toml")


def _read_config_file(config_path: Path | None) -> dict[str, Any]:
    if config_path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return {}
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"failed to load config file {config_path}: {e}") from e

    logger.debug("Loaded config file %s", config_path)
    return data


def load_config(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
    **overrides: Any,
) -> Config:
    """Load tbldoc configuration.

    Precedence, lowest first: config file, environment
    (``TBLDOC_DSN`` -- ``;`` separated -- and ``TBLDOC_DOC_PATH``), then
    *overrides*. ``${NAME}`` references in ``dsn`` and ``docPath`` are
    expanded from *environ*.

    Args:
        config_path: Path to the TOML file. When ``None``, ``.tbldoc.toml`` in
            the working directory is used if present.
        environ: Environment mapping (default: ``os.environ``).
        **overrides: Field values that win over file and environment, e.g.
            ``doc_path="docs/schema"``. ``None`` values are ignored.

    Returns:
        Validated ``Config`` with defaults filled in.

    Raises:
        ConfigError: If the file is missing, unreadable, or invalid.
    """
    if environ is None:
        environ = os.environ

    data = _read_config_file(config_path)
    try:
        config = Config.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"invalid config: {e}") from e

    config.dsn = [expand_environ(d, environ) for d in config.dsn]
    config.doc_path = expand_environ(config.doc_path, environ)

    if environ.get("TBLDOC_DSN"):
        config.dsn = environ["TBLDOC_DSN"].split(";")
    if environ.get("TBLDOC_DOC_PATH"):
        config.doc_path = environ["TBLDOC_DOC_PATH"]

    for name, value in overrides.items():
        if value is None:
            continue
        if name == "adjust":
            config.format.adjust = config.format.adjust or value
        elif name == "sort":
            config.format.sort = config.format.sort or value
        elif name == "er_format":
            config.er.format = value
        elif name == "dsn":
            config.dsn = [value] if isinstance(value, str) else list(value)
        elif name in Config.model_fields:
            setattr(config, name, value)
        else:
            raise ConfigError(f"unknown config override '{name}'")

    if not config.doc_path:
        config.doc_path = DEFAULT_DOC_PATH
    if not config.er.format:
        config.er.format = DEFAULT_ER_FORMAT

    return config
