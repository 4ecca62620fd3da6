"""Core domain surface for evateam-mcp (transport-agnostic)."""

from .client import EvaClient
from .config import EnvConfig, create_client_from_env, load_env_config
from .entities import DEFAULT_FIELDS, EntityName, StatusType
from .errors import (
    EvaClientError,
    EvaConfigError,
    EvaHTTPError,
    EvaModelValidationError,
    EvaParseError,
    EvaRPCError,
    EvaTimeoutError,
    EvaTransportError,
    QueryBuildError,
)
from .metrics import PrometheusMetrics, RequestMetrics
from .query import (
    And,
    Eq,
    Gt,
    GtOrEq,
    Like,
    Lt,
    LtOrEq,
    NotEq,
    QueryBuilder,
    between,
)
from .registry import (
    discover_tool_modules,
    iter_tool_functions,
    register_discovered_tools,
)

__all__ = [
    # Client
    "EvaClient",
    # Exceptions
    "EvaClientError",
    "EvaConfigError",
    "QueryBuildError",
    "EvaTransportError",
    "EvaTimeoutError",
    "EvaHTTPError",
    "EvaRPCError",
    "EvaParseError",
    "EvaModelValidationError",
    # Query building
    "QueryBuilder",
    "Eq",
    "NotEq",
    "Gt",
    "GtOrEq",
    "Lt",
    "LtOrEq",
    "Like",
    "And",
    "between",
    # Entities
    "EntityName",
    "StatusType",
    "DEFAULT_FIELDS",
    # Metrics
    "RequestMetrics",
    "PrometheusMetrics",
    # Config helpers
    "EnvConfig",
    "create_client_from_env",
    "load_env_config",
    # Registry helpers
    "discover_tool_modules",
    "iter_tool_functions",
    "register_discovered_tools",
]
