"""Workspace-wide scanning and path resolution."""

from __future__ import annotations

import fnmatch
import os
from collections.abc import Iterator
from pathlib import Path

from envguard.config import ServerConfig
from envguard.errors import DocumentNotFoundError, WorkspaceNotFoundError
from envguard.logging_config import StructuredLogger
from envguard.models import FileScanResult, Finding, WorkspaceScanResult
from envguard.scanner import format_issue_count, is_env_file, scan, should_scan, summarize_findings

logger = StructuredLogger(__name__)


def resolve_workspace(config: ServerConfig, workspace_root: str | None = None) -> Path:
    """Workspace root from the argument or config.

    Raises:
        WorkspaceNotFoundError: If no root is configured or it is not a directory
    """
    root = Path(workspace_root) if workspace_root else config.workspace_root
    if root is None:
        raise WorkspaceNotFoundError()
    root = root.expanduser().resolve()
    if not root.is_dir():
        raise WorkspaceNotFoundError(str(root))
    return root


def resolve_document(root: Path, path: str) -> Path:
    """Resolve a document path (absolute, or relative to the workspace).

    Raises:
        DocumentNotFoundError: If the path resolves outside the workspace
    """
    candidate = Path(path).expanduser()
    if not candidate.is_absolute():
        candidate = root / candidate
    resolved = candidate.resolve()
    if not resolved.is_relative_to(root.resolve()):
        raise DocumentNotFoundError(str(resolved), reason="outside workspace")
    return resolved


def read_document(path: Path) -> str:
    """Read a source document as UTF-8.

    Raises:
        DocumentNotFoundError: If the file is missing, unreadable or not text
    """
    try:
        with open(path, encoding="utf-8", newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise DocumentNotFoundError(str(path), reason=type(e).__name__) from e


def is_excluded(relative: Path, config: ServerConfig) -> bool:
    """Bulk-scan exclusion for a path relative to the workspace root."""
    if any(part in config.exclude_dirs for part in relative.parts[:-1]):
        return True
    name = relative.name
    if is_env_file(name, config.env_file_name):
        return True
    if any(fnmatch.fnmatch(name, pattern) for pattern in config.exclude_globs):
        return True
    return not should_scan(relative, config.env_file_name)


def iter_workspace_files(root: Path, config: ServerConfig) -> Iterator[Path]:
    """Eligible files under root, in a stable order."""
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in config.exclude_dirs)
        for filename in sorted(filenames):
            path = Path(dirpath) / filename
            if not is_excluded(path.relative_to(root), config):
                yield path


def scan_file(path: Path, config: ServerConfig, document: str | None = None) -> list[Finding]:
    """Scan one file on disk.

    Raises:
        DocumentNotFoundError: If the file cannot be read as text
    """
    if not config.enabled:
        return []
    text = read_document(path)
    return scan(text, document or str(path), config.env_file_name)


def scan_workspace(root: Path, config: ServerConfig) -> WorkspaceScanResult:
    """Scan every eligible file under root.

    Unreadable, binary and oversized files are skipped; one failing file
    never stops the scan.
    """
    result = WorkspaceScanResult(root=str(root))
    if not config.enabled:
        result.message = "Scanning is disabled."
        return result

    all_findings: list[Finding] = []

    for path in iter_workspace_files(root, config):
        relative = str(path.relative_to(root))
        try:
            if path.stat().st_size > config.max_file_bytes:
                result.files_skipped += 1
                continue
            data = path.read_bytes()
            if b"\x00" in data:
                result.files_skipped += 1
                continue
            findings = scan(data.decode("utf-8"), relative, config.env_file_name)
        except Exception as e:
            result.files_failed += 1
            logger.warning(
                f"Skipping unreadable file {relative}: {e}",
                document=relative,
                operation="envguard.scan.workspace",
                error_type=type(e).__name__,
            )
            continue

        result.files_scanned += 1
        if findings:
            result.files.append(FileScanResult(path=relative, findings=findings))
            all_findings.extend(findings)

    totals = summarize_findings(all_findings)
    result.total_findings = totals["total"]
    result.errors = totals["errors"]
    result.warnings = totals["warnings"]
    result.message = (
        f"Scanned {result.files_scanned} files: "
        f"{format_issue_count(result.total_findings)} found."
    )
    return result
