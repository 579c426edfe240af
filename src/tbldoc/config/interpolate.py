"""Environment-variable interpolation for configuration strings.

``${NAME}`` is replaced with ``environ["NAME"]``. ``$${`` is the escape
sentinel and produces a literal ``${``. Nothing else is touched, in
particular the ``{{ ... }}`` syntax of the document templates, so this
pass can run on any string before a renderer sees it.

Usage:
    from tbldoc.config.interpolate import expand_environ

    expand_environ("pg://${DB_USER}@db/app", {"DB_USER": "app"})
    # 'pg://app@db/app'
"""

import logging
import re
from collections.abc import Mapping

logger = logging.getLogger(__name__)

_PATTERN = re.compile(r"\$(\$)?\{\s*([^{}\s]+)\s*\}")


def expand_environ(value: str, environ: Mapping[str, str]) -> str:
    """Substitute ``${NAME}`` occurrences in *value* from *environ*.

    Unset variables expand to the empty string.

    Args:
        value: Raw configuration string.
        environ: Variable lookup table (pass ``os.environ`` at the edge).

    Returns:
        The interpolated string.

    Examples:
        >>> expand_environ("${A}-{{ b }}", {"A": "x"})
        'x-{{ b }}'
        >>> expand_environ("$${A}", {"A": "x"})
        '${A}'
    """

    def _replace(match: re.Match[str]) -> str:
        name = match.group(2)
        if match.group(1):
            return "${" + match.group(0)[3:]
        if name not in environ:
            logger.debug("Environment variable %s is not set", name)
            return ""
        return environ[name]

    return _PATTERN.sub(_replace, value)
