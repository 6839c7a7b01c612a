"""MCP Tools for envguard.

Tools use canonical naming: envguard.<category>.<action>
"""

from envguard.tools.exclusion import register_exclusion_tools
from envguard.tools.remediate import register_remediate_tools
from envguard.tools.scan import register_scan_tools

__all__ = [
    "register_scan_tools",
    "register_remediate_tools",
    "register_exclusion_tools",
]
