"""envguard: hardcoded secret detection and env-file remediation.

Finds credential-shaped literals in source text and moves them into a
workspace env file, replacing each literal with the target language's
environment lookup.

Key features:
- Named provider patterns plus a generic secret-assignment rule
- Suppression of code that already reads from the environment
- Variable name inference from the assignment target
- Idempotent env file merge with collision renaming
- Env file kept in the ignore file
- MCP server exposing scan and remediation tools

Tool naming convention: envguard.<category>.<action>
"""

__version__ = "0.1.0"

from envguard.scanner import scan, should_scan
from envguard.server import EnvGuardServer, ToolNamingError, create_server, run_server

__all__ = [
    "EnvGuardServer",
    "ToolNamingError",
    "create_server",
    "run_server",
    "scan",
    "should_scan",
    "__version__",
]
