from __future__ import annotations

import asyncio
import logging
import os
from typing import Optional

from mcp.server.fastmcp import FastMCP

from evateam_mcp.core.client import EvaClient
from evateam_mcp.core.config import create_client_from_env, load_env_config
from evateam_mcp.core.logging import setup_logging
from evateam_mcp.core.metrics import PrometheusMetrics, RequestMetrics
from evateam_mcp.core.registry import register_discovered_tools

SERVER_NAME = "evateam-mcp"
CLIENT_LOGGER = "evateam_mcp.client"

log = logging.getLogger("evateam_mcp.server")


def log_level_from_env() -> str:
    """EVA_DEBUG forces DEBUG; otherwise EVA_LOG_LEVEL (default INFO)."""
    if load_env_config().debug:
        return "DEBUG"
    return os.getenv("EVA_LOG_LEVEL", "INFO")


def build_client(metrics: Optional[RequestMetrics] = None) -> EvaClient:
    client_log = logging.getLogger(CLIENT_LOGGER)
    client = create_client_from_env(logger=client_log, metrics=metrics)
    if client.debug:
        # eva.request records are emitted at DEBUG
        client_log.setLevel(logging.DEBUG)
    return client


def build_app() -> FastMCP:
    """Create the FastMCP app with every discovered tool bound to one client."""
    metrics = PrometheusMetrics()
    metrics.register()
    client = build_client(metrics)

    app = FastMCP(SERVER_NAME)
    names = register_discovered_tools(app, lambda: client)
    log.info("%s ready with %d tools", SERVER_NAME, len(names))
    return app


# --- Entry point ----------------------------------------------------------- #


async def main() -> None:
    setup_logging(log_level_from_env())
    app = build_app()
    await app.run_stdio_async()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
