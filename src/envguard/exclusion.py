"""Keep the env file listed in the version-control ignore file."""

from __future__ import annotations

import re
from pathlib import Path

from envguard.logging_config import StructuredLogger
from envguard.models import ExclusionStatus
from envguard.store import append_line, read_text_file, write_text_file

logger = StructuredLogger(__name__)


def has_line(content: str, line: str) -> bool:
    """True if any line, trimmed, equals line."""
    return any(existing.strip() == line for existing in re.split(r"\r?\n", content))


def ensure_line(content: str, line: str) -> tuple[str, bool]:
    """Add line to ignore file content unless it is already listed.

    Returns:
        (new_content, changed)
    """
    if has_line(content, line):
        return content, False
    return append_line(content, line), True


def check_exclusion(root: Path, env_file_name: str, ignore_file_name: str) -> ExclusionStatus:
    """Report whether an existing env file is ignored. Never writes."""
    env_path = root / env_file_name
    ignore_path = root / ignore_file_name

    env_exists = env_path.is_file()
    excluded = has_line(read_text_file(ignore_path) or "", env_file_name)
    needs_attention = env_exists and not excluded

    if needs_attention:
        message = (
            f"{env_file_name} file found but not in {ignore_file_name}! "
            f"Your secrets may be exposed."
        )
    elif excluded:
        message = f"{env_file_name} is listed in {ignore_file_name}."
    else:
        message = f"No {env_file_name} file in workspace."

    return ExclusionStatus(
        env_file=str(env_path),
        ignore_file=str(ignore_path),
        env_file_exists=env_exists,
        excluded=excluded,
        needs_attention=needs_attention,
        message=message,
    )


def ensure_exclusion(root: Path, env_file_name: str, ignore_file_name: str) -> bool:
    """Append the env file name to the ignore file if missing.

    Returns:
        True if the ignore file was written

    Raises:
        OSError: If the ignore file cannot be written
    """
    ignore_path = root / ignore_file_name
    content = read_text_file(ignore_path) or ""
    new_content, changed = ensure_line(content, env_file_name)
    if not changed:
        return False

    write_text_file(ignore_path, new_content)
    logger.info(
        f"Added {env_file_name} to {ignore_file_name}",
        operation="exclusion.ensure",
        path=str(ignore_path),
    )
    return True
