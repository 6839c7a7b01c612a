"""envguard MCP server.

Exposes secret scanning and env-file remediation as MCP tools over stdio.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from collections.abc import Callable
from contextlib import asynccontextmanager
from functools import wraps
from pathlib import Path
from typing import Any, TypeVar

from mcp.server.fastmcp import FastMCP

from envguard.config import ServerConfig, load_config
from envguard.errors import WorkspaceNotFoundError
from envguard.exclusion import check_exclusion
from envguard.logging_config import StructuredLogger, configure_logging, correlation_id_var
from envguard.models import ExclusionStatus
from envguard.workspace import resolve_workspace

logger = StructuredLogger(__name__)

# Type for tool handlers
T = TypeVar("T")

# Track whether we've warned about tool naming (one-time only)
_WARNED_NO_NAME_SUPPORT = False


class ToolNamingError(Exception):
    """Raised when canonical tool naming fails in strict mode."""
    pass


def named_tool(mcp_server: FastMCP, canonical_name: str, *, strict: bool = True):
    """Register a tool with canonical naming.

    Args:
        mcp_server: The MCP Server instance
        canonical_name: Canonical tool name (e.g., "envguard.scan.file")
        strict: If True (default), fail fast when SDK doesn't support name=.
                If False, fall back to function names with a warning.

    Raises:
        ToolNamingError: In strict mode, if SDK doesn't support canonical naming.
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        global _WARNED_NO_NAME_SUPPORT
        try:
            return mcp_server.tool(name=canonical_name)(func)
        except TypeError as e:
            if "name" not in str(e):
                raise

            if strict:
                raise ToolNamingError(
                    f"MCP SDK doesn't support tool(name=...). "
                    f"Cannot register '{canonical_name}' with canonical name. "
                    f"Either upgrade to FastMCP/newer SDK, or set "
                    f"allow_noncanonical_tool_names=True in server config."
                ) from e

            if not _WARNED_NO_NAME_SUPPORT:
                logger.warning(
                    "MCP SDK doesn't support tool(name=...). "
                    "Falling back to function names (e.g., 'envguard_scan_file' "
                    "instead of 'envguard.scan.file')."
                )
                _WARNED_NO_NAME_SUPPORT = True

            return mcp_server.tool()(func)

    return decorator


class EnvGuardServer:
    """envguard MCP server.

    Concurrency Model:
    - Scans are pure and run without locks
    - Remediations are serialized per workspace root, so two tool calls
      never read-modify-write the same env file at once
    - Single-process only (locks are in-memory asyncio.Lock instances);
      separate processes sharing a workspace can lose env file updates
    """

    def __init__(self, config: ServerConfig | None = None):
        self.config = config or load_config()

        self.mcp = FastMCP("envguard")

        # Per-workspace remediation locks (single-process only)
        self._workspace_locks: dict[Path, asyncio.Lock] = {}
        self._lock_manager_lock: asyncio.Lock = asyncio.Lock()

        self._register_tools()

    async def start(self) -> None:
        """Start the server and surface an unignored env file."""
        self.startup_check()

    async def stop(self) -> None:
        """Stop the server."""
        self._workspace_locks.clear()

    def startup_check(self) -> ExclusionStatus | None:
        """Warn when the configured workspace has an env file that is not ignored.

        Never writes; the client confirms via envguard.exclusion.ensure.
        """
        if self.config.workspace_root is None:
            return None
        try:
            root = resolve_workspace(self.config)
        except WorkspaceNotFoundError as e:
            logger.warning(str(e), operation="envguard.startup")
            return None

        status = check_exclusion(root, self.config.env_file_name, self.config.ignore_file_name)
        if status.needs_attention:
            logger.warning(
                f"{status.message} Call envguard.exclusion.ensure with confirm=true to fix.",
                operation="envguard.startup",
                document=status.ignore_file,
            )
        return status

    def _register_tools(self) -> None:
        """Register all MCP tools."""
        from envguard.tools.exclusion import register_exclusion_tools
        from envguard.tools.remediate import register_remediate_tools
        from envguard.tools.scan import register_scan_tools

        register_scan_tools(self)
        register_remediate_tools(self)
        register_exclusion_tools(self)

    def tool(self, name: str):
        """Register a tool with canonical naming.

        Args:
            name: Canonical tool name (e.g., "envguard.scan.file")
        """
        strict = not self.config.allow_noncanonical_tool_names
        return named_tool(self.mcp, name, strict=strict)

    def workspace(self, workspace_root: str | None = None) -> Path:
        """Resolve the workspace for a tool call."""
        return resolve_workspace(self.config, workspace_root)

    # --- Lock Management ---

    async def get_workspace_lock(self, root: Path) -> asyncio.Lock:
        """Get or create the remediation lock for a workspace.

        Single-process only; does not coordinate across processes.
        """
        async with self._lock_manager_lock:
            if root not in self._workspace_locks:
                self._workspace_locks[root] = asyncio.Lock()
            return self._workspace_locks[root]


def tool_handler(operation: str):
    """Decorator for tool handlers with correlation IDs and structured logging.

    Args:
        operation: Canonical operation name (e.g., "envguard.scan.file")
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        async def wrapper(server: EnvGuardServer, **kwargs: Any) -> Any:
            correlation_id = str(uuid.uuid4())
            correlation_id_var.set(correlation_id)

            start_time = time.time()
            document = kwargs.get("document") or kwargs.get("path")

            # Never log argument values: they may hold secrets
            logger.info(
                f"Starting {operation}",
                document=document,
                operation=operation,
                input_keys=list(kwargs.keys())
            )

            try:
                result = await func(server, **kwargs)
                duration_ms = int((time.time() - start_time) * 1000)

                logger.info(
                    f"Completed {operation}",
                    document=document,
                    operation=operation,
                    duration_ms=duration_ms,
                    success=True
                )
                return result

            except Exception as e:
                duration_ms = int((time.time() - start_time) * 1000)

                logger.error(
                    f"Failed {operation}: {str(e)}",
                    document=document,
                    operation=operation,
                    duration_ms=duration_ms,
                    error=str(e),
                    error_type=type(e).__name__
                )
                raise

            finally:
                correlation_id_var.set(None)

        return wrapper
    return decorator


@asynccontextmanager
async def create_server(config: ServerConfig | None = None):
    """Create and manage server lifecycle."""
    server = EnvGuardServer(config)
    await server.start()
    try:
        yield server
    finally:
        await server.stop()


async def run_server() -> None:
    """Run the MCP server."""
    config = load_config()

    configure_logging(
        log_level=config.log_level,
        structured=config.structured_logging,
        log_file=config.log_file
    )

    async with create_server(config) as server:
        await server.mcp.run_stdio_async()


def main() -> None:
    """Entry point."""
    asyncio.run(run_server())


if __name__ == "__main__":
    main()
