from __future__ import annotations

import importlib
import inspect
import logging
import pkgutil
import time
from types import ModuleType
from typing import Callable, Iterable, List, Set, get_origin, get_type_hints

from .client import EvaClient
from .observability import log_event

log = logging.getLogger("evateam_mcp.core.registry")

TOOL_PREFIX = "eva_"


# --- Discovery helpers ----------------------------------------------------- #


def discover_tool_modules(
    package_name: str = "evateam_mcp.core.tools",
) -> List[ModuleType]:
    """Import all modules under the given tools package, skipping failures."""
    modules: List[ModuleType] = []
    base_pkg = importlib.import_module(package_name)

    for finder in pkgutil.iter_modules(base_pkg.__path__, base_pkg.__name__ + "."):
        name = finder.name
        try:
            module = importlib.import_module(name)
            modules.append(module)
        except Exception as exc:  # pragma: no cover - logged, not fatal
            log.error("Failed importing tool module %s: %s", name, exc)
            continue

    return modules


def iter_tool_functions(module: ModuleType) -> Iterable[Callable]:
    """Yield public coroutines named eva_* whose first parameter is client."""
    for _, func in inspect.getmembers(module, inspect.iscoroutinefunction):
        if not func.__name__.startswith(TOOL_PREFIX):
            continue
        if func.__module__ != module.__name__:
            # Skip imported functions
            continue

        params = list(inspect.signature(func).parameters.values())
        if not params or params[0].name != "client":
            log.debug(
                "Skipping %s.%s: first parameter must be 'client'",
                module.__name__,
                func.__name__,
            )
            continue

        # FastMCP can't build a schema for Type[...] parameters
        if any(get_origin(p.annotation) is type for p in params[1:]):
            log.debug(
                "Skipping %s.%s: unsupported parameter annotation",
                module.__name__,
                func.__name__,
            )
            continue

        yield func


# --- Wrapping / registration ---------------------------------------------- #


def _wrap_tool(func: Callable, client_provider: Callable[[], EvaClient]) -> Callable:
    """Return a wrapper that injects client and hides it from the signature."""
    original_sig = inspect.signature(func)
    type_hints = get_type_hints(func)

    new_params = []
    for i, (name, param) in enumerate(original_sig.parameters.items()):
        if i == 0 and name == "client":
            continue
        ann = type_hints.get(name, param.annotation)
        new_params.append(param.replace(annotation=ann))

    return_ann = type_hints.get("return", original_sig.return_annotation)
    new_sig = inspect.Signature(parameters=new_params, return_annotation=return_ann)

    async def wrapped(*args, **kwargs):
        client = client_provider()
        start = time.perf_counter()
        try:
            result = await func(client, *args, **kwargs)
        except Exception as exc:
            log_event(
                "tool_call",
                level=logging.WARNING,
                tool=func.__name__,
                duration_ms=int((time.perf_counter() - start) * 1000),
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise
        log_event(
            "tool_call",
            tool=func.__name__,
            duration_ms=int((time.perf_counter() - start) * 1000),
        )
        return result

    wrapped.__name__ = func.__name__
    wrapped.__doc__ = func.__doc__
    wrapped.__module__ = func.__module__
    wrapped.__signature__ = new_sig  # type: ignore[attr-defined]
    return wrapped


def register_discovered_tools(
    app,
    client_provider: Callable[[], EvaClient] | EvaClient,
    modules: List[ModuleType] | None = None,
) -> List[str]:
    """
    Register discovered tools on an app that exposes a .tool decorator.
    Returns the registered tool names; duplicate names raise ValueError.
    """
    if isinstance(client_provider, EvaClient):
        _client = client_provider

        def client_provider():
            return _client

    if not hasattr(app, "tool"):
        raise TypeError("app must expose a 'tool' decorator")

    modules = modules if modules is not None else discover_tool_modules()
    seen_names: Set[str] = set()
    registered: List[str] = []

    for module in modules:
        for func in iter_tool_functions(module):
            name = func.__name__
            if name in seen_names:
                raise ValueError(f"Duplicate tool name detected: {name}")

            wrapped = _wrap_tool(func, client_provider)
            app.tool(name=name)(wrapped)
            seen_names.add(name)
            registered.append(name)
            log.info("Registered tool: %s (%s)", name, module.__name__)

    return registered


__all__ = [
    "TOOL_PREFIX",
    "discover_tool_modules",
    "iter_tool_functions",
    "register_discovered_tools",
]
