import json

import pytest
import respx
from httpx import Response
from evateam_mcp.core.client import EvaClient
from evateam_mcp.core.tools.errors import InvalidInputError, NotFoundError
from evateam_mcp.core.tools.persons import (
    eva_person_count,
    eva_person_get,
    eva_person_list,
)
from evateam_mcp.core.tools.time_logs import (
    eva_timelog_count,
    eva_timelog_create,
    eva_timelog_list,
)

API_URL = "https://mock-eva.com/api/"


@pytest.fixture
def client():
    return EvaClient(base_url="https://mock-eva.com", api_token="mock-token")


def _body(route, index=0):
    return json.loads(route.calls[index].request.content)


@pytest.mark.asyncio
@respx.mock
async def test_person_list_for_project_uses_contains(client):
    route = respx.post(API_URL).mock(
        return_value=Response(
            200, json={"result": [{"id": "CmfPerson:1", "login": "ivan"}]}
        )
    )

    async with client:
        result = await eva_person_list(
            client, project_id="CmfProject:1", active_only=True
        )

    assert result["items"][0]["login"] == "ivan"
    kwargs = _body(route)["kwargs"]
    assert kwargs["filter"] == [
        ["on_vacation", "==", False],
        ["does_not_work", "==", False],
        ["projects", "contains", "CmfProject:1"],
    ]
    assert kwargs["slice"] == [0, 100]


@pytest.mark.asyncio
@respx.mock
async def test_person_get_by_login(client):
    route = respx.post(API_URL).mock(
        return_value=Response(
            200, json={"result": {"id": "CmfPerson:1", "login": "ivan"}}
        )
    )

    async with client:
        person = await eva_person_get(client, login="ivan")

    assert person["id"] == "CmfPerson:1"
    body = _body(route)
    assert body["method"] == "CmfPerson.get"
    assert body["kwargs"]["filter"] == ["login", "==", "ivan"]


@pytest.mark.asyncio
async def test_person_get_requires_id_or_login(client):
    with pytest.raises(InvalidInputError):
        await eva_person_get(client)


@pytest.mark.asyncio
@respx.mock
async def test_person_count_not_found_error(client):
    respx.post(API_URL).mock(
        return_value=Response(
            200, json={"error": {"code": 404, "message": "Not Found"}}
        )
    )

    async with client:
        with pytest.raises(NotFoundError):
            await eva_person_count(client)


@pytest.mark.asyncio
@respx.mock
async def test_timelog_list_date_range_and_project(client):
    route = respx.post(API_URL).mock(
        return_value=Response(
            200,
            json={
                "result": [
                    {"id": "CmfTimeTrackerHistory:1", "minutes_spent": 90},
                ]
            },
        )
    )

    async with client:
        result = await eva_timelog_list(
            client,
            project_id="CmfProject:1",
            date_from="2024-01-01",
            date_to="2024-01-31",
        )

    assert result["items"][0]["minutes_spent"] == 90
    body = _body(route)
    assert body["method"] == "CmfTimeTrackerHistory.list"
    assert body["kwargs"]["filter"] == [
        ["task_id.project_id", "==", "CmfProject:1"],
        ["date", ">=", "2024-01-01"],
        ["date", "<=", "2024-01-31"],
    ]
    assert body["kwargs"]["order_by"] == ["-cmf_created_at"]


@pytest.mark.asyncio
@respx.mock
async def test_timelog_create_and_count(client):
    route = respx.post(API_URL).mock(
        side_effect=[
            Response(
                200,
                json={"result": {"id": "CmfTimeTrackerHistory:2", "minutes_spent": 30}},
            ),
            Response(200, json={"result": 5}),
        ]
    )

    async with client:
        entry = await eva_timelog_create(client, task_id="CmfTask:1", minutes_spent=30)
        count = await eva_timelog_count(client, task_id="CmfTask:1")

    assert entry["minutes_spent"] == 30
    assert _body(route, 0)["kwargs"] == {"task_id": "CmfTask:1", "minutes_spent": 30}
    assert count == {"count": 5}
    assert _body(route, 1)["kwargs"]["filter"] == ["task_id", "==", "CmfTask:1"]


@pytest.mark.asyncio
async def test_timelog_create_rejects_non_positive_minutes(client):
    with pytest.raises(InvalidInputError):
        await eva_timelog_create(client, task_id="CmfTask:1", minutes_spent=0)
