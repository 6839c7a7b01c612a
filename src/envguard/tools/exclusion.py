"""Ignore-file tools: envguard.exclusion.*"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from envguard.exclusion import check_exclusion, ensure_exclusion
from envguard.server import tool_handler

if TYPE_CHECKING:
    from envguard.server import EnvGuardServer


def register_exclusion_tools(server: EnvGuardServer) -> None:
    """Register ignore-file tools."""

    @server.tool("envguard.exclusion.check")
    async def envguard_exclusion_check(workspace_root: str | None = None) -> dict[str, Any]:
        """Check that an existing env file is listed in the ignore file.

        Args:
            workspace_root: Workspace directory (default: configured root)
        """
        return await _exclusion_check(server, workspace_root=workspace_root)

    @server.tool("envguard.exclusion.ensure")
    async def envguard_exclusion_ensure(
        confirm: bool = False,
        workspace_root: str | None = None,
    ) -> dict[str, Any]:
        """Add the env file to the ignore file.

        Args:
            confirm: Must be true; without it only the check is reported
            workspace_root: Workspace directory (default: configured root)
        """
        return await _exclusion_ensure(server, confirm=confirm, workspace_root=workspace_root)


@tool_handler("envguard.exclusion.check")
async def _exclusion_check(
    server: EnvGuardServer,
    workspace_root: str | None = None,
) -> dict[str, Any]:
    """Check ignore file."""
    root = server.workspace(workspace_root)
    config = server.config
    return check_exclusion(root, config.env_file_name, config.ignore_file_name).model_dump()


@tool_handler("envguard.exclusion.ensure")
async def _exclusion_ensure(
    server: EnvGuardServer,
    confirm: bool = False,
    workspace_root: str | None = None,
) -> dict[str, Any]:
    """Update ignore file on confirmation."""
    root = server.workspace(workspace_root)
    config = server.config

    updated = False
    if confirm:
        updated = ensure_exclusion(root, config.env_file_name, config.ignore_file_name)

    status = check_exclusion(root, config.env_file_name, config.ignore_file_name)
    result = status.model_dump()
    result["updated"] = updated
    if updated:
        result["message"] = f"Added {config.env_file_name} to {config.ignore_file_name}"
    elif not confirm and not status.excluded:
        result["message"] = f"{status.message} Pass confirm=true to add it."
    return result
