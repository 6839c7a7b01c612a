"""Hardcoded secret scanner.

Runs the named patterns and the generic assignment rule over a whole
document. Pure: no I/O and no shared mutable state, so it is safe to
call concurrently for different documents.
"""

from __future__ import annotations

import re
from pathlib import PurePath

from envguard.models import GENERIC_PATTERN_ID, Finding, Severity
from envguard.patterns import compiled_patterns, generic_assignment_regex
from envguard.text import line_prefix, position_at

# Environment lookups that make a literal on the same line safe
SAFE_CONTEXT_PATTERN = re.compile(
    r"process\.env\.|os\.getenv\(|os\.Getenv\(|getenv\(|ENV\[|std::env::var\("
    r"|os\.environ|GetEnvironmentVariable\("
)

LOCK_FILES = frozenset({"package-lock.json", "yarn.lock", "pnpm-lock.yaml"})
VENDOR_DIRS = frozenset({"node_modules"})
MINIFIED_SUFFIXES = (".min.js", ".min.css")


def is_already_safe(context_before: str) -> bool:
    """Check whether the text before a match already reads from the environment.

    Args:
        context_before: Line text from the line start to the match start

    Returns:
        True if an environment-lookup idiom precedes the match
    """
    return SAFE_CONTEXT_PATTERN.search(context_before) is not None


def is_env_file(file_name: str, env_file_name: str = ".env") -> bool:
    """True for the env file itself and its variants (.env.local, ...)."""
    return file_name == env_file_name or file_name.startswith(env_file_name + ".")


def should_scan(file_path: str | PurePath, env_file_name: str = ".env") -> bool:
    """Decide from the path alone whether a file is worth scanning.

    Excludes the env file and its variants, vendored dependencies,
    minified assets and package lock files.
    """
    path = PurePath(file_path)
    file_name = path.name

    if is_env_file(file_name, env_file_name):
        return False
    if any(part in VENDOR_DIRS for part in path.parts):
        return False
    if file_name.endswith(MINIFIED_SUFFIXES):
        return False
    if file_name in LOCK_FILES:
        return False

    return True


def _make_finding(
    text: str,
    document: str,
    pattern_id: str,
    start: int,
    end: int,
    message: str,
    severity: Severity,
) -> Finding:
    start_line, start_column = position_at(text, start)
    end_line, end_column = position_at(text, end)
    return Finding(
        pattern_id=pattern_id,
        document=document,
        start=start,
        end=end,
        start_line=start_line,
        start_column=start_column,
        end_line=end_line,
        end_column=end_column,
        message=message,
        severity=severity,
        value=text[start:end],
    )


def scan(text: str, document: str, env_file_name: str = ".env") -> list[Finding]:
    """Scan document text for hardcoded secrets.

    Args:
        text: Full document text
        document: Opaque document identity copied onto each finding
        env_file_name: Env file name used in finding messages

    Returns:
        Named-pattern findings in registry order, then generic findings
    """
    findings: list[Finding] = []

    for pattern, regex in compiled_patterns():
        for match in regex.finditer(text):
            if is_already_safe(line_prefix(text, match.start())):
                continue
            findings.append(_make_finding(
                text,
                document,
                pattern.id,
                match.start(),
                match.end(),
                f"{pattern.name} hardcoded! Move to {env_file_name} to prevent leaks.",
                pattern.severity,
            ))

    named_lines = {f.start_line for f in findings}

    for match in generic_assignment_regex().finditer(text):
        start, end = match.span(1)
        line, _ = position_at(text, start)
        # A named pattern on the same line wins
        if line in named_lines:
            continue
        if is_already_safe(line_prefix(text, start)):
            continue
        findings.append(_make_finding(
            text,
            document,
            GENERIC_PATTERN_ID,
            start,
            end,
            f"Hardcoded secret in variable assignment! Move to {env_file_name} for security.",
            Severity.WARNING,
        ))

    return findings


def summarize_findings(findings: list[Finding]) -> dict[str, int]:
    """Issue totals for host status displays."""
    errors = sum(1 for f in findings if f.severity == Severity.ERROR)
    return {
        "total": len(findings),
        "errors": errors,
        "warnings": len(findings) - errors,
    }


def format_issue_count(count: int) -> str:
    """Human-readable issue count, e.g. '1 issue' or '3 issues'."""
    return f"{count} issue{'s' if count != 1 else ''}"
