"""Env file (NAME=value store) merging and persistence.

The merge is a pure function over the file content. Persistence reads
the whole file and rewrites it atomically (temp file + os.replace()).

Concurrency: there is no cross-process locking. Two writers updating
the same env file at once can lose an update (last writer wins).
"""

from __future__ import annotations

import os
import re
import stat
from pathlib import Path

from envguard.errors import UnsupportedValueError
from envguard.logging_config import StructuredLogger
from envguard.models import EnvEntry

logger = StructuredLogger(__name__)

_ENTRY_LINE = re.compile(r"^([A-Z_][A-Z0-9_]*)=(.*?)\r?$", re.MULTILINE)


def read_text_file(path: Path) -> str | None:
    """Read a UTF-8 text file, or None if it does not exist."""
    try:
        with open(path, encoding="utf-8", newline="") as f:
            return f.read()
    except FileNotFoundError:
        return None


def write_text_file(path: Path, content: str) -> None:
    """Write a UTF-8 text file atomically.

    An existing file keeps its permission bits.

    Raises:
        OSError: If the write or rename fails; the original file is intact
    """
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        with open(tmp_path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        if path.exists():
            os.chmod(tmp_path, stat.S_IMODE(path.stat().st_mode))
        os.replace(tmp_path, path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise


def append_line(content: str, line: str) -> str:
    """Append a line, adding a separator newline if content lacks one."""
    prefix = "\n" if content and not content.endswith("\n") else ""
    return f"{content}{prefix}{line}\n"


def validate_env_value(value: str) -> str:
    """Reject values the line-oriented format cannot hold."""
    if not value:
        raise UnsupportedValueError("value is empty")
    if "\n" in value or "\r" in value:
        raise UnsupportedValueError("value contains a line break")
    return value


def find_name_for_value(content: str, value: str) -> str | None:
    """Name of an existing entry holding exactly this value."""
    match = re.search(
        rf"^([A-Z_][A-Z0-9_]*)={re.escape(value)}\s*$",
        content,
        re.MULTILINE,
    )
    return match.group(1) if match else None


def has_name(content: str, name: str) -> bool:
    """True if an entry with this exact name exists."""
    return re.search(rf"^{re.escape(name)}=", content, re.MULTILINE) is not None


def unique_name(content: str, name: str) -> str:
    """First of name, name_2, name_3, ... not already defined."""
    candidate = name
    counter = 2
    while has_name(content, candidate):
        candidate = f"{name}_{counter}"
        counter += 1
    return candidate


def merge_env_entry(content: str, name: str, value: str) -> tuple[str, str]:
    """Merge NAME=value into env file content.

    1. If the value is already stored, its existing name is reused and
       the content is returned unchanged.
    2. Otherwise the name gets a _2, _3, ... suffix until it is free.
    3. The new line is appended, keeping the trailing newline.

    Args:
        content: Current env file content ("" when absent)
        name: Candidate variable name
        value: Secret value

    Returns:
        (actual_name, new_content)
    """
    existing = find_name_for_value(content, value)
    if existing is not None:
        return existing, content

    final_name = unique_name(content, name)
    return final_name, append_line(content, f"{final_name}={value}")


def parse_entries(content: str) -> list[EnvEntry]:
    """NAME=value entries in file order; comments and blanks are skipped."""
    return [
        EnvEntry(name=m.group(1), value=m.group(2))
        for m in _ENTRY_LINE.finditer(content)
    ]


def mask_secret(value: str, visible_chars: int = 4) -> str:
    """Show first/last N chars, mask middle.

    Returns:
        Masked string like "sk-t****mnop"
    """
    if len(value) <= visible_chars * 2:
        return "*" * len(value)
    start = value[:visible_chars]
    end = value[-visible_chars:]
    masked = "*" * min(len(value) - visible_chars * 2, 20)
    return f"{start}{masked}{end}"


class EnvStore:
    """The env file of one workspace."""

    def __init__(self, path: Path):
        self.path = path

    def read(self) -> str:
        """Current content; a missing file reads as empty."""
        return read_text_file(self.path) or ""

    def entries(self) -> list[EnvEntry]:
        """Parsed entries."""
        return parse_entries(self.read())

    def save_secret(self, name: str, value: str) -> tuple[str, bool]:
        """Persist a secret under name (or its existing/renamed name).

        Returns:
            (actual_name, written) where written is False when the value
            was already stored

        Raises:
            UnsupportedValueError: If the value cannot be stored
            OSError: If the write fails
        """
        validate_env_value(value)
        content = self.read()
        actual_name, new_content = merge_env_entry(content, name, value)

        if new_content == content:
            logger.info(
                f"Value already stored as {actual_name}",
                operation="store.merge",
                path=str(self.path),
            )
            return actual_name, False

        write_text_file(self.path, new_content)
        logger.info(
            f"Stored {actual_name} in {self.path.name}",
            operation="store.merge",
            path=str(self.path),
            renamed=actual_name != name,
            value=mask_secret(value),
        )
        return actual_name, True
