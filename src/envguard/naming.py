"""Environment variable name inference."""

from __future__ import annotations

import re

from envguard.errors import InvalidVariableNameError
from envguard.models import ENV_VAR_NAME_PATTERN
from envguard.patterns import default_env_var
from envguard.text import line_prefix

# Last identifier before an assignment operator, e.g. `api_key = "` or `apiKey: '`
_ASSIGNMENT_TARGET = re.compile(r"([a-zA-Z_][a-zA-Z0-9_]*)\s*[=:]\s*[\"'`]?\s*$")

# Keywords that can sit before `=`/`:` without being a variable name
_SKIP_IDENTIFIERS = frozenset({
    "const", "let", "var", "val", "return", "export", "default", "new", "true", "false",
})

_VALID_NAME = re.compile(ENV_VAR_NAME_PATTERN)


def to_upper_snake_case(name: str) -> str:
    """Convert an identifier to UPPER_SNAKE_CASE.

    openaiKey -> OPENAI_KEY, api-key -> API_KEY
    """
    name = re.sub(r"([a-z])([A-Z])", r"\1_\2", name)
    name = re.sub(r"[-\s]+", "_", name)
    name = re.sub(r"[^a-zA-Z0-9_]", "", name)
    return name.upper()


def infer_env_var_name(text: str, start: int, pattern_id: str) -> str:
    """Infer a variable name from the code around a secret.

    Looks back from the literal to the nearest assignment target, so
    `Client(api_key="sk-...")` yields API_KEY rather than CLIENT.

    Args:
        text: Document text
        start: Offset of the literal (quotes excluded)
        pattern_id: Pattern that produced the finding

    Returns:
        UPPER_SNAKE_CASE name, or the pattern default when no usable
        identifier precedes the literal
    """
    match = _ASSIGNMENT_TARGET.search(line_prefix(text, start))
    if match and match.group(1) not in _SKIP_IDENTIFIERS:
        candidate = to_upper_snake_case(match.group(1))
        if is_valid_env_var_name(candidate):
            return candidate
    return default_env_var(pattern_id)


def is_valid_env_var_name(name: str) -> bool:
    """True if name is a storable UPPER_SNAKE_CASE variable name."""
    return bool(_VALID_NAME.fullmatch(name))


def validate_env_var_name(name: str) -> str:
    """Return name unchanged, or raise InvalidVariableNameError.

    Caller-supplied names are never sanitized into something else.
    """
    if not is_valid_env_var_name(name):
        raise InvalidVariableNameError(name)
    return name
