import logging

import pytest
import respx
from httpx import Response
from evateam_mcp.core.errors import EvaConfigError
from evateam_mcp.core.logging import setup_logging
from evateam_mcp.server import (
    CLIENT_LOGGER,
    SERVER_NAME,
    build_app,
    build_client,
    log_level_from_env,
)

API_URL = "https://mock-eva.com/api/"


class RecordingHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture(autouse=True)
def _no_dotenv(monkeypatch):
    # Prevent load_dotenv from repopulating values from .env
    monkeypatch.setattr("evateam_mcp.core.client.load_dotenv", lambda *a, **k: None)


def test_build_app_missing_vars(monkeypatch):
    monkeypatch.delenv("EVA_API_URL", raising=False)
    monkeypatch.delenv("EVA_API_TOKEN", raising=False)

    with pytest.raises(EvaConfigError) as exc:
        build_app()

    assert "Missing EVA_API_URL or EVA_API_TOKEN" in str(exc.value)


@pytest.mark.asyncio
async def test_build_app_registers_eva_tools(monkeypatch):
    monkeypatch.setenv("EVA_API_URL", "https://mock-eva.com")
    monkeypatch.setenv("EVA_API_TOKEN", "mock-token")

    app = build_app()
    tools = await app.list_tools()
    names = {t.name for t in tools}

    assert app.name == SERVER_NAME
    assert "eva_task_list" in names
    assert "eva_stats_sprint" in names

    task_list = next(t for t in tools if t.name == "eva_task_list")
    assert "client" not in task_list.inputSchema.get("properties", {})
    assert "project_id" in task_list.inputSchema["properties"]


@pytest.fixture
def debug_env(monkeypatch):
    monkeypatch.setenv("EVA_API_URL", "https://mock-eva.com")
    monkeypatch.setenv("EVA_API_TOKEN", "mock-token")
    monkeypatch.setenv("EVA_DEBUG", "true")
    monkeypatch.delenv("EVA_LOG_LEVEL", raising=False)


def test_debug_flag_forces_debug_log_level(debug_env, monkeypatch):
    assert log_level_from_env() == "DEBUG"

    monkeypatch.setenv("EVA_DEBUG", "false")
    monkeypatch.setenv("EVA_LOG_LEVEL", "WARNING")
    assert log_level_from_env() == "WARNING"


@pytest.mark.asyncio
@pytest.mark.parametrize("configured_level", ["DEBUG", "INFO"])
async def test_debug_request_record_reaches_root_handler(debug_env, configured_level):
    root = logging.getLogger()
    client_log = logging.getLogger(CLIENT_LOGGER)
    saved = (root.handlers[:], root.level, client_log.level)
    handler = RecordingHandler()
    try:
        setup_logging(configured_level)
        root.addHandler(handler)

        async with respx.mock:
            respx.post(API_URL).mock(return_value=Response(200, json={"result": 1}))
            async with build_client() as client:
                await client.call("CmfTask.count", call_site="tasks.count")
    finally:
        root.handlers[:] = saved[0]
        root.setLevel(saved[1])
        client_log.setLevel(saved[2])

    record = next(r for r in handler.records if r.getMessage() == "eva.request")
    assert record.name == CLIENT_LOGGER
    assert record.call_site == "tasks.count"
    assert record.status == 200
