"""Remediation tools: envguard.remediate.*, envguard.store.*"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from envguard.models import GENERIC_PATTERN_ID, RemediationRequest
from envguard.remediation import preview_remediation, remediate
from envguard.server import tool_handler
from envguard.store import EnvStore, mask_secret

if TYPE_CHECKING:
    from envguard.server import EnvGuardServer


def register_remediate_tools(server: EnvGuardServer) -> None:
    """Register remediation tools."""

    @server.tool("envguard.remediate.preview")
    async def envguard_remediate_preview(
        document: str,
        start: int,
        end: int,
        value: str,
        pattern_id: str = GENERIC_PATTERN_ID,
        variable_name: str | None = None,
        workspace_root: str | None = None,
    ) -> dict[str, Any]:
        """Show the variable name and source edits a remediation would make.

        Nothing is written.

        Args:
            document: File path, absolute or relative to the workspace root
            start: Start offset of the secret (quotes excluded), from a finding
            end: End offset of the secret, from a finding
            value: The secret text at start..end
            pattern_id: Finding's pattern id (used for the default name)
            variable_name: UPPER_SNAKE_CASE name to use instead of the inferred one
            workspace_root: Workspace directory (default: configured root)
        """
        return await _remediate_preview(
            server,
            document=document,
            start=start,
            end=end,
            value=value,
            pattern_id=pattern_id,
            variable_name=variable_name,
            workspace_root=workspace_root,
        )

    @server.tool("envguard.remediate.apply")
    async def envguard_remediate_apply(
        document: str,
        start: int,
        end: int,
        value: str,
        pattern_id: str = GENERIC_PATTERN_ID,
        variable_name: str | None = None,
        workspace_root: str | None = None,
    ) -> dict[str, Any]:
        """Move a hardcoded secret to the env file and replace it with an env lookup.

        The env file is written before the source. The env file is added to
        the ignore file if missing.

        Args:
            document: File path, absolute or relative to the workspace root
            start: Start offset of the secret (quotes excluded), from a finding
            end: End offset of the secret, from a finding
            value: The secret text at start..end
            pattern_id: Finding's pattern id (used for the default name)
            variable_name: UPPER_SNAKE_CASE name to use instead of the inferred one
            workspace_root: Workspace directory (default: configured root)
        """
        return await _remediate_apply(
            server,
            document=document,
            start=start,
            end=end,
            value=value,
            pattern_id=pattern_id,
            variable_name=variable_name,
            workspace_root=workspace_root,
        )

    @server.tool("envguard.store.list")
    async def envguard_store_list(workspace_root: str | None = None) -> dict[str, Any]:
        """List env file entries with masked values.

        Args:
            workspace_root: Workspace directory (default: configured root)
        """
        return await _store_list(server, workspace_root=workspace_root)


@tool_handler("envguard.remediate.preview")
async def _remediate_preview(
    server: EnvGuardServer,
    document: str,
    start: int,
    end: int,
    value: str,
    pattern_id: str = GENERIC_PATTERN_ID,
    variable_name: str | None = None,
    workspace_root: str | None = None,
) -> dict[str, Any]:
    """Preview a remediation."""
    root = server.workspace(workspace_root)
    request = RemediationRequest(
        document=document,
        start=start,
        end=end,
        value=value,
        pattern_id=pattern_id,
        variable_name=variable_name,
    )
    return preview_remediation(root, server.config, request)


@tool_handler("envguard.remediate.apply")
async def _remediate_apply(
    server: EnvGuardServer,
    document: str,
    start: int,
    end: int,
    value: str,
    pattern_id: str = GENERIC_PATTERN_ID,
    variable_name: str | None = None,
    workspace_root: str | None = None,
) -> dict[str, Any]:
    """Apply a remediation."""
    root = server.workspace(workspace_root)
    request = RemediationRequest(
        document=document,
        start=start,
        end=end,
        value=value,
        pattern_id=pattern_id,
        variable_name=variable_name,
    )

    # One env file read-modify-write at a time per workspace
    lock = await server.get_workspace_lock(root)
    async with lock:
        result = remediate(root, server.config, request)
    return result.model_dump()


@tool_handler("envguard.store.list")
async def _store_list(
    server: EnvGuardServer,
    workspace_root: str | None = None,
) -> dict[str, Any]:
    """List env file entries."""
    root = server.workspace(workspace_root)
    store = EnvStore(root / server.config.env_file_name)
    entries = store.entries()
    return {
        "store_path": str(store.path),
        "exists": store.path.is_file(),
        "entries": [
            {"name": entry.name, "value": mask_secret(entry.value)}
            for entry in entries
        ],
        "count": len(entries),
    }
