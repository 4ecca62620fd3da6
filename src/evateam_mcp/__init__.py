"""evateam_mcp package exports."""

from .core import (
    EvaClient,
    EvaClientError,
    EvaHTTPError,
    EvaRPCError,
    QueryBuilder,
    create_client_from_env,
    discover_tool_modules,
    register_discovered_tools,
)

__all__ = [
    "EvaClient",
    "EvaClientError",
    "EvaHTTPError",
    "EvaRPCError",
    "QueryBuilder",
    "create_client_from_env",
    "discover_tool_modules",
    "register_discovered_tools",
]
