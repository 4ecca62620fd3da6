import json

import httpx
import pytest
import respx
from httpx import Response
from evateam_mcp.core.client import EvaClient
from evateam_mcp.core.entities import DEFAULT_FIELDS, EntityName
from evateam_mcp.core.errors import EvaRPCError, QueryBuildError
from evateam_mcp.core.query import Eq, QueryBuilder
from evateam_mcp.core.models import Task
from evateam_mcp.core.resources import EntityResource, project_stats, sprint_stats

API_URL = "https://mock-eva.com/api/"


@pytest.fixture
def client():
    return EvaClient(base_url="https://mock-eva.com", api_token="mock-token")


def _body(route, index=0):
    return json.loads(route.calls[index].request.content)


def _ok(result):
    return Response(200, json={"jsonrpc": "2.2", "result": result})


@pytest.mark.asyncio
@respx.mock
async def test_get_injects_default_projection_when_fields_absent(client):
    route = respx.post(API_URL).mock(
        return_value=_ok({"id": "CmfTask:1", "code": "PROJ-1", "name": "One"})
    )

    async with client:
        task = await client.tasks.by_code("PROJ-1")

    body = _body(route)
    assert body["method"] == "CmfTask.get"
    assert body["kwargs"]["fields"] == list(DEFAULT_FIELDS[EntityName.TASK].get)
    assert body["kwargs"]["filter"] == ["code", "==", "PROJ-1"]
    assert body["kwargs"]["slice"] == [0, 1]
    assert task.name == "One"


@pytest.mark.asyncio
@respx.mock
async def test_explicit_fields_are_kept(client):
    route = respx.post(API_URL).mock(return_value=_ok([]))

    async with client:
        await client.projects.list(client.projects.query("id", "name"))

    body = _body(route)
    assert body["method"] == "CmfProject.list"
    assert body["kwargs"]["fields"] == ["id", "name"]


@pytest.mark.asyncio
@respx.mock
async def test_get_with_null_result_returns_none(client):
    respx.post(API_URL).mock(return_value=_ok(None))

    async with client:
        assert await client.projects.by_code("MISSING") is None


@pytest.mark.asyncio
@respx.mock
async def test_list_uses_list_projection_and_returns_models(client):
    route = respx.post(API_URL).mock(
        return_value=_ok([{"id": "CmfTask:1"}, {"id": "CmfTask:2"}])
    )

    async with client:
        tasks = await client.tasks.for_project("CmfProject:1")

    body = _body(route)
    assert body["method"] == "CmfTask.list"
    assert body["kwargs"]["fields"] == list(DEFAULT_FIELDS[EntityName.TASK].list)
    assert body["kwargs"]["filter"] == ["project_id", "==", "CmfProject:1"]
    assert [t.id for t in tasks] == ["CmfTask:1", "CmfTask:2"]


@pytest.mark.asyncio
@respx.mock
async def test_count_sends_no_projection(client):
    route = respx.post(API_URL).mock(return_value=_ok(42))

    async with client:
        total = await client.tasks.count(
            client.tasks.query().where(Eq("cache_status_type", "OPEN"))
        )

    body = _body(route)
    assert total == 42
    assert body["method"] == "CmfTask.count"
    assert "fields" not in body["kwargs"]


@pytest.mark.asyncio
async def test_builder_without_entity_fails_before_any_request(client):
    async with respx.mock(assert_all_called=False) as mock:
        route = mock.post(API_URL).mock(return_value=_ok([]))
        async with client:
            with pytest.raises(QueryBuildError):
                await client.tasks.list(QueryBuilder().select("id"))
        assert not route.called


@pytest.mark.asyncio
@respx.mock
async def test_for_sprint_uses_contains_raw_filter(client):
    route = respx.post(API_URL).mock(return_value=_ok([]))

    async with client:
        await client.tasks.for_sprint("SPR-001543")

    body = _body(route)
    assert body["method"] == "CmfTask.list"
    assert body["kwargs"]["filter"] == ["lists", "contains", "SPR-001543"]
    assert body["kwargs"]["fields"] == list(DEFAULT_FIELDS[EntityName.TASK].list)


@pytest.mark.asyncio
@respx.mock
async def test_epics_filter_on_logic_type(client):
    route = respx.post(API_URL).mock(return_value=_ok([]))

    async with client:
        await client.epics.for_project("CmfProject:1")
        await client.epics.tasks_in_epic("CmfTask:9")

    epics_body = _body(route, 0)
    assert epics_body["method"] == "CmfTask.list"
    assert epics_body["kwargs"]["filter"] == [
        ["logic_type.code", "==", "task.epic"],
        ["project_id", "==", "CmfProject:1"],
    ]
    tasks_body = _body(route, 1)
    assert tasks_body["kwargs"]["filter"] == ["epic_id", "==", "CmfTask:9"]


@pytest.mark.asyncio
@respx.mock
async def test_sprints_filter_by_prefix_and_open_status(client):
    route = respx.post(API_URL).mock(return_value=_ok([]))

    async with client:
        await client.lists.sprints("CmfProject:1", open_only=True)

    assert _body(route)["kwargs"]["filter"] == [
        ["project_id", "==", "CmfProject:1"],
        ["code", "LIKE", "SPR-%"],
        ["cache_status_type", "==", "OPEN"],
    ]


@pytest.mark.asyncio
@respx.mock
async def test_task_children_are_newest_first(client):
    route = respx.post(API_URL).mock(return_value=_ok([]))

    async with client:
        await client.comments.for_task("CmfTask:1")
        await client.status_history.for_task("CmfTask:1")

    comments = _body(route, 0)
    assert comments["method"] == "CmfComment.list"
    assert comments["kwargs"]["filter"] == ["task_id", "==", "CmfTask:1"]
    assert comments["kwargs"]["order_by"] == ["-cmf_created_at"]

    history = _body(route, 1)
    assert history["method"] == "CmfStatusHistory.list"
    assert history["kwargs"]["filter"] == ["parent_id", "==", "CmfTask:1"]


@pytest.mark.asyncio
@respx.mock
async def test_mutations_send_id_and_values(client):
    route = respx.post(API_URL).mock(
        side_effect=[
            _ok({"id": "CmfTask:1", "cache_status_type": "CLOSED"}),
            _ok({"id": "CmfDocument:1", "name": "Doc"}),
            _ok(True),
        ]
    )

    async with client:
        task = await client.tasks.update_status("CmfTask:1", "CLOSED")
        doc = await client.documents.create(name="Doc", project_id="P", text=None)
        deleted = await client.documents.delete("CmfDocument:1")

    assert _body(route, 0)["method"] == "CmfTask.update"
    assert _body(route, 0)["kwargs"] == {
        "id": "CmfTask:1",
        "cache_status_type": "CLOSED",
    }
    assert task.cache_status_type == "CLOSED"

    assert _body(route, 1)["kwargs"] == {"name": "Doc", "project_id": "P"}
    assert doc.name == "Doc"

    assert _body(route, 2)["method"] == "CmfDocument.delete"
    assert deleted is True


@pytest.mark.asyncio
@respx.mock
async def test_rpc_error_propagates_from_resource(client):
    respx.post(API_URL).mock(
        return_value=Response(
            200, json={"error": {"code": -32000, "message": "Task not found"}}
        )
    )

    async with client:
        with pytest.raises(EvaRPCError):
            await client.tasks.by_code("PROJ-404")


def _route_by_method(request: httpx.Request) -> Response:
    body = json.loads(request.content)
    method = body["method"]
    flt = body["kwargs"].get("filter")
    if method == "CmfTask.count":
        # open-task count is the two-triple filter
        if flt and isinstance(flt[0], list):
            return Response(500, text="count exploded")
        return _ok(10)
    if method == "CmfList.list":
        return _ok(
            [
                {"id": "CmfList:1", "cache_status_type": "OPEN"},
                {"id": "CmfList:2", "cache_status_type": "CLOSED"},
                {"id": "CmfList:3", "cache_status_type": "OPEN"},
            ]
        )
    if method == "CmfPerson.list":
        return _ok([{"id": "CmfPerson:1"}, {"id": "CmfPerson:2"}])
    return Response(404)


@pytest.mark.asyncio
@respx.mock
async def test_project_stats_tolerates_failing_subquery(client):
    respx.post(API_URL).mock(side_effect=_route_by_method)

    async with client:
        stats = await project_stats(client, "CmfProject:1")

    assert stats.total_tasks == 10
    assert stats.open_tasks == 0
    assert stats.active_sprints == 2
    assert stats.total_users == 2


@pytest.mark.asyncio
@respx.mock
async def test_sprint_stats_groups_by_status(client):
    route = respx.post(API_URL).mock(
        return_value=_ok(
            [
                {"id": "CmfTask:1", "cache_status_type": "OPEN"},
                {"id": "CmfTask:2", "cache_status_type": "CLOSED"},
                {"id": "CmfTask:3", "cache_status_type": "OPEN"},
            ]
        )
    )

    async with client:
        stats = await sprint_stats(client, "SPR-1")

    assert _body(route)["kwargs"]["fields"] == ["id", "cache_status_type"]
    assert stats.total_tasks == 3
    assert stats.tasks_by_status == {"OPEN": 2, "CLOSED": 1}


def test_resource_without_default_projection_needs_fields(client):
    class Unknown(EntityResource[Task]):
        entity = "CmfUnknown"
        model = Task
        name = "unknown"

    with pytest.raises(KeyError) as exc:
        Unknown(client)
    assert "CmfUnknown" in str(exc.value)

    explicit = Unknown(client, DEFAULT_FIELDS[EntityName.TASK])
    assert explicit.query().to_method() == "CmfUnknown.list"
