import json

import pytest
import respx
from httpx import Response
from evateam_mcp.core.client import EvaClient
from evateam_mcp.core.tools.documents import (
    eva_document_count,
    eva_document_create,
    eva_document_list,
)
from evateam_mcp.core.tools.errors import InvalidInputError, UnauthorizedError
from evateam_mcp.core.tools.projects import (
    eva_project_count,
    eva_project_create,
    eva_project_delete,
    eva_project_get,
    eva_project_list,
    eva_project_update,
)

API_URL = "https://mock-eva.com/api/"

PROJECTS_PAYLOAD = {
    "jsonrpc": "2.2",
    "result": [
        {"id": "CmfProject:1", "code": "ALPHA", "name": "Alpha"},
        {"id": "CmfProject:2", "code": "BETA", "name": "Beta", "is_template": True},
    ],
}


@pytest.fixture
def client():
    return EvaClient(base_url="https://mock-eva.com", api_token="mock-token")


def _body(route, index=0):
    return json.loads(route.calls[index].request.content)


@pytest.mark.asyncio
@respx.mock
async def test_list_projects_returns_items(client):
    route = respx.post(API_URL).mock(return_value=Response(200, json=PROJECTS_PAYLOAD))

    async with client:
        result = await eva_project_list(client, status_type="OPEN")

    assert [p["code"] for p in result["items"]] == ["ALPHA", "BETA"]
    assert result["items"][1]["is_template"] is True
    assert result["has_more"] is False

    body = _body(route)
    assert body["method"] == "CmfProject.list"
    assert body["kwargs"]["filter"] == ["cache_status_type", "==", "OPEN"]
    assert body["kwargs"]["slice"] == [0, 100]
    assert body["kwargs"]["fields"]


@pytest.mark.asyncio
@respx.mock
async def test_pagination_and_archived_flag_sent(client):
    route = respx.post(API_URL).mock(return_value=Response(200, json=PROJECTS_PAYLOAD))

    async with client:
        await eva_project_list(client, offset=20, limit=10, include_archived=True)

    kwargs = _body(route)["kwargs"]
    assert kwargs["slice"] == [20, 30]
    assert kwargs["include_archived"] is True


@pytest.mark.asyncio
@respx.mock
async def test_get_project_by_id_returns_none_when_missing(client):
    route = respx.post(API_URL).mock(return_value=Response(200, json={"result": None}))

    async with client:
        assert await eva_project_get(client, id="CmfProject:404") is None

    assert _body(route)["kwargs"]["filter"] == ["id", "==", "CmfProject:404"]


@pytest.mark.asyncio
@respx.mock
async def test_project_count_and_mutations(client):
    route = respx.post(API_URL).mock(
        side_effect=[
            Response(200, json={"result": 12}),
            Response(200, json={"result": {"id": "CmfProject:3", "code": "NEW"}}),
            Response(200, json={"result": {"id": "CmfProject:3", "name": "Renamed"}}),
            Response(200, json={}),
        ]
    )

    async with client:
        count = await eva_project_count(client)
        created = await eva_project_create(client, code="NEW", name="New")
        updated = await eva_project_update(client, "CmfProject:3", {"name": "Renamed"})
        deleted = await eva_project_delete(client, "CmfProject:3")

    assert count == {"count": 12}
    assert "slice" not in _body(route, 0)["kwargs"]
    assert created["code"] == "NEW"
    assert _body(route, 1)["kwargs"] == {"code": "NEW", "name": "New"}
    assert updated["name"] == "Renamed"
    # empty body counts as success
    assert deleted == {"ok": True}


@pytest.mark.asyncio
@respx.mock
async def test_project_list_auth_failure(client):
    respx.post(API_URL).mock(return_value=Response(401, text="Unauthorized"))

    async with client:
        with pytest.raises(UnauthorizedError) as exc:
            await eva_project_list(client)

    assert "EVA_API_TOKEN" in str(exc.value)


@pytest.mark.asyncio
async def test_project_create_requires_code(client):
    with pytest.raises(InvalidInputError):
        await eva_project_create(client, code="", name="x")


@pytest.mark.asyncio
@respx.mock
async def test_documents_scoped_to_project(client):
    route = respx.post(API_URL).mock(
        side_effect=[
            Response(200, json={"result": [{"id": "CmfDocument:1", "name": "Spec"}]}),
            Response(200, json={"result": 1}),
            Response(200, json={"result": {"id": "CmfDocument:2", "name": "Notes"}}),
        ]
    )

    async with client:
        listed = await eva_document_list(client, project_id="CmfProject:1")
        count = await eva_document_count(client, project_id="CmfProject:1")
        created = await eva_document_create(
            client, name="Notes", project_id="CmfProject:1", text=""
        )

    assert listed["items"][0]["name"] == "Spec"
    assert count == {"count": 1}
    assert created["id"] == "CmfDocument:2"
    assert _body(route, 0)["method"] == "CmfDocument.list"
    assert _body(route, 0)["kwargs"]["filter"] == ["project_id", "==", "CmfProject:1"]
    assert _body(route, 1)["method"] == "CmfDocument.count"
    assert _body(route, 2)["kwargs"] == {"name": "Notes", "project_id": "CmfProject:1"}
