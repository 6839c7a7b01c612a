"""Move a hardcoded secret into the env file and rewrite the source.

Ordering: the env file is written first. The source edit is applied only
after the secret is stored, so a failure can leave the literal in place
but never loses the value.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from envguard.config import ServerConfig
from envguard.errors import (
    ReadOnlyTargetError,
    SourceEditError,
    StaleSpanError,
    StoreWriteError,
)
from envguard.exclusion import ensure_exclusion
from envguard.logging_config import StructuredLogger
from envguard.models import RemediationRequest, RemediationResult
from envguard.naming import infer_env_var_name, validate_env_var_name
from envguard.rewrite import apply_edits, plan_rewrite
from envguard.store import EnvStore, merge_env_entry, validate_env_value, write_text_file
from envguard.workspace import read_document, resolve_document

logger = StructuredLogger(__name__)


def check_span(text: str, request: RemediationRequest, path: Path) -> None:
    """Verify the request's span still holds the secret.

    Raises:
        StaleSpanError: If the document changed since the finding was computed
    """
    if request.start >= request.end or request.end > len(text):
        raise StaleSpanError(str(path), request.start, request.end)
    if text[request.start:request.end] != request.value:
        raise StaleSpanError(str(path), request.start, request.end)


def requested_name(text: str, request: RemediationRequest) -> str:
    """Caller-supplied name (validated) or the inferred one."""
    if request.variable_name:
        return validate_env_var_name(request.variable_name)
    return infer_env_var_name(text, request.start, request.pattern_id)


def _load(root: Path, request: RemediationRequest) -> tuple[Path, str]:
    path = resolve_document(root, request.document)
    text = read_document(path)
    check_span(text, request, path)
    return path, text


def preview_remediation(
    root: Path,
    config: ServerConfig,
    request: RemediationRequest,
) -> dict[str, Any]:
    """Compute the remediation without writing anything."""
    path, text = _load(root, request)
    name = requested_name(text, request)
    validate_env_value(request.value)

    content = EnvStore(root / config.env_file_name).read()
    actual_name, new_content = merge_env_entry(content, name, request.value)

    plan = plan_rewrite(
        text, request.start, request.end, path, actual_name, config.import_scan_lines
    )
    return {
        "document": str(path),
        "requested_name": name,
        "variable_name": actual_name,
        "renamed": actual_name != name,
        "already_stored": new_content == content,
        "replacement": plan.replace.text,
        "edits": [edit.model_dump() for edit in plan.edits()],
        "ecosystem": plan.ecosystem.value,
        "notice": plan.notice,
    }


def remediate(
    root: Path,
    config: ServerConfig,
    request: RemediationRequest,
) -> RemediationResult:
    """Store the secret, rewrite the source, and keep the env file ignored.

    Raises:
        DocumentNotFoundError: If the source cannot be read
        StaleSpanError: If the span no longer holds the secret
        ReadOnlyTargetError: If the source cannot be written
        InvalidVariableNameError: If a supplied name is not UPPER_SNAKE_CASE
        UnsupportedValueError: If the value cannot be stored
        StoreWriteError: If the env file write failed (source untouched)
        SourceEditError: If the source write failed (secret already stored)
    """
    path, text = _load(root, request)
    if not os.access(path, os.W_OK):
        raise ReadOnlyTargetError(str(path))

    name = requested_name(text, request)
    validate_env_value(request.value)

    store = EnvStore(root / config.env_file_name)
    try:
        actual_name, store_updated = store.save_secret(name, request.value)
    except OSError as e:
        raise StoreWriteError(str(store.path), e.strerror or type(e).__name__) from e

    plan = plan_rewrite(
        text, request.start, request.end, path, actual_name, config.import_scan_lines
    )
    # Atomic: a failed write leaves the literal in place, never an empty file
    try:
        write_text_file(path, apply_edits(text, plan.edits()))
    except OSError as e:
        raise SourceEditError(str(path), actual_name, e.strerror or type(e).__name__) from e

    exclusion_updated = False
    exclusion_note = ""
    try:
        exclusion_updated = ensure_exclusion(root, config.env_file_name, config.ignore_file_name)
    except OSError as e:
        logger.warning(
            f"Could not update {config.ignore_file_name}: {e}",
            document=str(path),
            operation="envguard.remediate.apply",
        )
        exclusion_note = f" Could not add {config.env_file_name} to {config.ignore_file_name}."

    renamed = actual_name != name
    renamed_note = ""
    if renamed and store_updated:
        renamed_note = f" (renamed to {actual_name} to avoid conflict)"
    elif renamed:
        renamed_note = f" (value already stored as {actual_name})"
    logger.info(
        f"Remediated secret as {actual_name}",
        document=str(path),
        operation="envguard.remediate.apply",
        pattern_id=request.pattern_id,
        renamed=renamed,
    )

    return RemediationResult(
        variable_name=actual_name,
        requested_name=name,
        renamed=renamed,
        store_path=str(store.path),
        store_updated=store_updated,
        exclusion_updated=exclusion_updated,
        replacement=plan.replace.text,
        import_added=plan.import_edit is not None,
        message=(
            f"{actual_name} saved to {config.env_file_name}{renamed_note} "
            f"and code updated.{exclusion_note}"
        ),
        notice=plan.notice,
    )
