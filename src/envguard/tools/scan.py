"""Scan tools: envguard.scan.*"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from envguard.scanner import scan, should_scan, summarize_findings
from envguard.server import tool_handler
from envguard.workspace import resolve_document, scan_file, scan_workspace

if TYPE_CHECKING:
    from envguard.server import EnvGuardServer


def register_scan_tools(server: EnvGuardServer) -> None:
    """Register scan tools."""

    @server.tool("envguard.scan.document")
    async def envguard_scan_document(text: str, document: str = "untitled") -> dict[str, Any]:
        """Scan in-memory text for hardcoded secrets.

        Args:
            text: Full document text
            document: Identity echoed on each finding (path or name); its
                file name decides whether the text is scanned at all
        """
        return await _scan_document(server, text=text, document=document)

    @server.tool("envguard.scan.file")
    async def envguard_scan_file(
        path: str,
        workspace_root: str | None = None,
    ) -> dict[str, Any]:
        """Scan a file in the workspace for hardcoded secrets.

        Args:
            path: File path, absolute or relative to the workspace root
            workspace_root: Workspace directory (default: configured root)
        """
        return await _scan_file(server, path=path, workspace_root=workspace_root)

    @server.tool("envguard.scan.workspace")
    async def envguard_scan_workspace(workspace_root: str | None = None) -> dict[str, Any]:
        """Scan every eligible file in the workspace.

        Skips dependency folders, VCS metadata, build output, minified
        assets, lock files and the env file.

        Args:
            workspace_root: Workspace directory (default: configured root)
        """
        return await _scan_workspace(server, workspace_root=workspace_root)


def _findings_payload(document: str, findings: list, skipped: bool = False) -> dict[str, Any]:
    return {
        "document": document,
        "skipped": skipped,
        "findings": [f.model_dump(mode="json") for f in findings],
        **summarize_findings(findings),
    }


@tool_handler("envguard.scan.document")
async def _scan_document(
    server: EnvGuardServer,
    text: str,
    document: str = "untitled",
) -> dict[str, Any]:
    """Scan text."""
    config = server.config
    if not config.enabled or not should_scan(document, config.env_file_name):
        return _findings_payload(document, [], skipped=True)
    return _findings_payload(document, scan(text, document, config.env_file_name))


@tool_handler("envguard.scan.file")
async def _scan_file(
    server: EnvGuardServer,
    path: str,
    workspace_root: str | None = None,
) -> dict[str, Any]:
    """Scan one file."""
    config = server.config
    root = server.workspace(workspace_root)
    file_path = resolve_document(root, path)

    if not config.enabled or not should_scan(file_path, config.env_file_name):
        return _findings_payload(path, [], skipped=True)
    return _findings_payload(path, scan_file(file_path, config, document=path))


@tool_handler("envguard.scan.workspace")
async def _scan_workspace(
    server: EnvGuardServer,
    workspace_root: str | None = None,
) -> dict[str, Any]:
    """Scan a workspace."""
    root = server.workspace(workspace_root)
    return scan_workspace(root, server.config).model_dump(mode="json")
