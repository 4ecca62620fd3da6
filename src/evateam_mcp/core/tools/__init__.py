"""
Tool namespace for EVA Team MCP.

Every public coroutine in a submodule whose first parameter is `client` is
registered as a tool; see evateam_mcp.core.registry.
"""

from .errors import (
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
    ToolError,
    UnauthorizedError,
    wrap_error,
)

__all__ = [
    "ToolError",
    "NotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    "InvalidInputError",
    "wrap_error",
]
