"""Credential pattern registry.

Named provider patterns are checked first; the generic assignment rule
catches long quoted strings assigned to secret-sounding names.
"""

from __future__ import annotations

import re

from envguard.models import GENERIC_PATTERN_ID, CredentialPattern, Severity

DEFAULT_GENERIC_ENV_VAR = "API_KEY"

SECRET_PATTERNS: list[CredentialPattern] = [
    CredentialPattern(
        id="openai-api-key",
        name="OpenAI API Key",
        # sk-ant- belongs to Anthropic
        regex=r"sk-(?!ant-)(?:proj-)?[a-zA-Z0-9\-_]{20,}",
        default_env_var="OPENAI_API_KEY",
    ),
    CredentialPattern(
        id="anthropic-api-key",
        name="Anthropic API Key",
        regex=r"sk-ant-[a-zA-Z0-9\-_]{20,}",
        default_env_var="ANTHROPIC_API_KEY",
    ),
    CredentialPattern(
        id="aws-access-key-id",
        name="AWS Access Key ID",
        regex=r"\bAKIA[0-9A-Z]{16,}\b",
        default_env_var="AWS_ACCESS_KEY_ID",
    ),
    CredentialPattern(
        id="google-api-key",
        name="Google API Key",
        regex=r"AIza[0-9A-Za-z\-_]{33,}",
        default_env_var="GOOGLE_API_KEY",
    ),
    CredentialPattern(
        id="github-token",
        name="GitHub Personal Access Token",
        regex=r"ghp_[a-zA-Z0-9]{35,}",
        default_env_var="GITHUB_TOKEN",
    ),
    CredentialPattern(
        id="github-fine-grained-token",
        name="GitHub Fine-grained Token",
        regex=r"github_pat_[a-zA-Z0-9_]{82}",
        default_env_var="GITHUB_TOKEN",
    ),
    CredentialPattern(
        id="stripe-secret-key",
        name="Stripe Secret Key",
        regex=r"sk_live_[0-9a-zA-Z]{24,}",
        default_env_var="STRIPE_SECRET_KEY",
    ),
    CredentialPattern(
        id="stripe-publishable-key",
        name="Stripe Publishable Key",
        regex=r"pk_live_[0-9a-zA-Z]{24,}",
        default_env_var="STRIPE_PUBLISHABLE_KEY",
        severity=Severity.WARNING,
    ),
    CredentialPattern(
        id="huggingface-token",
        name="Hugging Face Token",
        regex=r"hf_[a-zA-Z0-9]{30,}",
        default_env_var="HUGGINGFACE_TOKEN",
    ),
]

# Group 1 is the value inside the quotes
GENERIC_ASSIGNMENT_PATTERN = (
    r"(?:api[_\-]?key|api[_\-]?secret|secret[_\-]?key|access[_\-]?token"
    r"|auth[_\-]?token|private[_\-]?key|openai[_\-]?key|claude[_\-]?key"
    r"|gemini[_\-]?key)"
    r"\s*[=:]\s*[\"']([a-zA-Z0-9+/=_\-.]{20,})[\"']"
)

# Compile patterns for performance
_COMPILED_PATTERNS: list[tuple[CredentialPattern, re.Pattern]] = [
    (pattern, re.compile(pattern.regex)) for pattern in SECRET_PATTERNS
]

_GENERIC_COMPILED = re.compile(GENERIC_ASSIGNMENT_PATTERN, re.IGNORECASE)

_BY_ID: dict[str, CredentialPattern] = {p.id: p for p in SECRET_PATTERNS}


def compiled_patterns() -> list[tuple[CredentialPattern, re.Pattern]]:
    """Named patterns with their compiled regexes, in registry order."""
    return list(_COMPILED_PATTERNS)


def generic_assignment_regex() -> re.Pattern:
    """Compiled generic assignment rule."""
    return _GENERIC_COMPILED


def get_pattern(pattern_id: str) -> CredentialPattern | None:
    """Look up a named pattern by id. The generic sentinel has no entry."""
    return _BY_ID.get(pattern_id)


def default_env_var(pattern_id: str) -> str:
    """Registered default variable name, or API_KEY for generic/unknown ids."""
    if pattern_id == GENERIC_PATTERN_ID:
        return DEFAULT_GENERIC_ENV_VAR
    pattern = _BY_ID.get(pattern_id)
    if pattern is None:
        return DEFAULT_GENERIC_ENV_VAR
    return pattern.default_env_var
