"""Configuration: TOML loading, environment interpolation, models, lint rules.

Usage:
    >>> from tbldoc.config import load_config, Config
"""

from tbldoc.config.interpolate import expand_environ
from tbldoc.config.lint import Lint, RuleWarn, run_lint
from tbldoc.config.loader import load_config
from tbldoc.config.models import (
    ER,
    AdditionalComment,
    AdditionalRelation,
    Config,
    Format,
    mask_dsn,
)

__all__ = [
    "load_config",
    "expand_environ",
    "mask_dsn",
    "Config",
    "Format",
    "ER",
    "AdditionalRelation",
    "AdditionalComment",
    "Lint",
    "RuleWarn",
    "run_lint",
]
