"""
Entity resources: typed façades over EvaClient.call.

Each resource pins an entity name and its default projections, so callers
only describe filters. A resource never interprets results beyond model
validation; an empty `get` result is returned as None.
"""

from __future__ import annotations

import logging
from typing import (
    TYPE_CHECKING,
    Any,
    ClassVar,
    Dict,
    Generic,
    List as ListT,
    Mapping,
    Optional,
    Type,
    TypeVar,
)

from .entities import (
    EPIC_FIELDS,
    EPIC_LOGIC_TYPE,
    RELEASE_CODE_PREFIX,
    SPRINT_CODE_PREFIX,
    DefaultFields,
    EntityName,
    StatusType,
    default_fields,
)
from .errors import EvaClientError
from .models import (
    Comment,
    Document,
    List,
    Person,
    Project,
    ProjectStats,
    SprintStats,
    StatusHistory,
    Task,
    TaskLink,
    TimeLog,
)
from .query import Eq, Like, QueryBuilder

if TYPE_CHECKING:
    from .client import EvaClient

log = logging.getLogger("evateam_mcp.core.resources")

M = TypeVar("M")


class EntityResource(Generic[M]):
    """CRUD and query helpers for one EVA entity."""

    entity: ClassVar[str]
    model: ClassVar[Type[Any]]
    name: ClassVar[str]

    def __init__(
        self, client: "EvaClient", fields: Optional[DefaultFields] = None
    ) -> None:
        self.client = client
        self.fields = fields or default_fields(self.entity)

    def query(self, *columns: str) -> QueryBuilder:
        """Fresh builder already bound to this entity."""
        return QueryBuilder().select(*columns).from_(self.entity)

    def _site(self, verb: str) -> str:
        return f"{self.name}.{verb}"

    def _with_fields(self, qb: QueryBuilder, projection) -> Dict[str, Any]:
        kwargs = qb.to_kwargs()
        if "fields" not in kwargs:
            kwargs["fields"] = list(projection)
        return kwargs

    async def get(self, qb: QueryBuilder) -> Optional[M]:
        method = qb.to_method("get")
        resp = await self.client.call(
            method,
            self._with_fields(qb, self.fields.get),
            result_type=Optional[self.model],
            call_site=self._site("get"),
        )
        return resp.result

    async def list(self, qb: Optional[QueryBuilder] = None) -> ListT[M]:
        qb = qb or self.query()
        method = qb.to_method()
        resp = await self.client.call(
            method,
            self._with_fields(qb, self.fields.list),
            result_type=ListT[self.model],
            call_site=self._site("list"),
        )
        return resp.result or []

    async def count(self, qb: Optional[QueryBuilder] = None) -> int:
        qb = qb or self.query()
        resp = await self.client.call(
            qb.to_method("count"),
            qb.to_kwargs(),
            result_type=int,
            call_site=self._site("count"),
        )
        return resp.result or 0

    async def list_raw(self, kwargs: Optional[Mapping[str, Any]] = None) -> ListT[M]:
        """
        List with hand-written kwargs, for filters the predicate set cannot
        express (e.g. ["lists", "contains", code]).
        """
        payload = dict(kwargs or {})
        payload.setdefault("fields", list(self.fields.list))
        resp = await self.client.call(
            f"{self.entity}.list",
            payload,
            result_type=ListT[self.model],
            call_site=self._site("list_raw"),
        )
        return resp.result or []

    async def create(self, **values: Any) -> Optional[M]:
        payload = {k: v for k, v in values.items() if v is not None}
        resp = await self.client.call(
            f"{self.entity}.create",
            payload,
            result_type=Optional[self.model],
            call_site=self._site("create"),
        )
        return resp.result

    async def update(self, id: str, updates: Mapping[str, Any]) -> Optional[M]:
        payload: Dict[str, Any] = {"id": id}
        payload.update(updates)
        resp = await self.client.call(
            f"{self.entity}.update",
            payload,
            result_type=Optional[self.model],
            call_site=self._site("update"),
        )
        return resp.result

    async def delete(self, id: str) -> bool:
        resp = await self.client.call(
            f"{self.entity}.delete",
            {"id": id},
            call_site=self._site("delete"),
        )
        # Some deployments answer with an empty result on success
        return resp.result is None or bool(resp.result)


class ProjectResource(EntityResource[Project]):
    entity = EntityName.PROJECT
    model = Project
    name = "projects"

    async def by_code(self, code: str, *fields: str) -> Optional[Project]:
        return await self.get(self.query(*fields).where(Eq("code", code)).limit(1))


class TaskResource(EntityResource[Task]):
    entity = EntityName.TASK
    model = Task
    name = "tasks"

    async def by_code(self, code: str, *fields: str) -> Optional[Task]:
        return await self.get(self.query(*fields).where(Eq("code", code)).limit(1))

    async def for_project(self, project_id: str, *fields: str) -> ListT[Task]:
        return await self.list(self.query(*fields).where(Eq("project_id", project_id)))

    async def for_sprint(self, sprint_code: str, *fields: str) -> ListT[Task]:
        # "contains" has no predicate; goes out as raw kwargs
        kwargs: Dict[str, Any] = {"filter": ["lists", "contains", sprint_code]}
        if fields:
            kwargs["fields"] = list(fields)
        return await self.list_raw(kwargs)

    async def for_person(
        self, person_id: str, *fields: str, project_id: Optional[str] = None
    ) -> ListT[Task]:
        qb = self.query(*fields)
        if project_id:
            qb.where(Eq("project_id", project_id))
        qb.where(Eq("responsible", person_id))
        return await self.list(qb)

    async def update_status(self, task_id: str, status: str) -> Optional[Task]:
        return await self.update(task_id, {"cache_status_type": status})

    async def archive(self, task_id: str) -> None:
        await self.update(task_id, {"cmf_deleted": True})


class EpicResource(EntityResource[Task]):
    """Epics are tasks whose logic type is task.epic."""

    entity = EntityName.TASK
    model = Task
    name = "epics"

    def __init__(self, client: "EvaClient") -> None:
        super().__init__(client, EPIC_FIELDS)

    def query(self, *columns: str) -> QueryBuilder:
        return super().query(*columns).where(Eq("logic_type.code", EPIC_LOGIC_TYPE))

    async def by_code(self, code: str, *fields: str) -> Optional[Task]:
        return await self.get(self.query(*fields).where(Eq("code", code)).limit(1))

    async def for_project(self, project_id: str, *fields: str) -> ListT[Task]:
        return await self.list(self.query(*fields).where(Eq("project_id", project_id)))

    async def tasks_in_epic(self, epic_id: str, *fields: str) -> ListT[Task]:
        tasks = self.client.tasks
        return await tasks.list(tasks.query(*fields).where(Eq("epic_id", epic_id)))


class DocumentResource(EntityResource[Document]):
    entity = EntityName.DOCUMENT
    model = Document
    name = "documents"

    async def by_code(self, code: str, *fields: str) -> Optional[Document]:
        return await self.get(self.query(*fields).where(Eq("code", code)).limit(1))

    async def for_project(self, project_id: str, *fields: str) -> ListT[Document]:
        return await self.list(self.query(*fields).where(Eq("project_id", project_id)))


class ListResource(EntityResource[List]):
    """Sprints (SPR-*) and releases (REL-*) share the CmfList entity."""

    entity = EntityName.LIST
    model = List
    name = "lists"

    async def by_code(self, code: str, *fields: str) -> Optional[List]:
        return await self.get(self.query(*fields).where(Eq("code", code)).limit(1))

    def _project_lists(
        self, project_id: str, prefix: Optional[str], open_only: bool, fields
    ) -> QueryBuilder:
        qb = self.query(*fields).where(Eq("project_id", project_id))
        if prefix:
            qb.where(Like("code", prefix + "%"))
        if open_only:
            qb.where(Eq("cache_status_type", StatusType.OPEN))
        return qb

    async def for_project(
        self, project_id: str, *fields: str, open_only: bool = False
    ) -> ListT[List]:
        return await self.list(self._project_lists(project_id, None, open_only, fields))

    async def sprints(
        self, project_id: str, *fields: str, open_only: bool = False
    ) -> ListT[List]:
        return await self.list(
            self._project_lists(project_id, SPRINT_CODE_PREFIX, open_only, fields)
        )

    async def releases(
        self, project_id: str, *fields: str, open_only: bool = False
    ) -> ListT[List]:
        return await self.list(
            self._project_lists(project_id, RELEASE_CODE_PREFIX, open_only, fields)
        )

    async def close(self, list_id: str) -> Optional[List]:
        return await self.update(list_id, {"cache_status_type": StatusType.CLOSED})


class PersonResource(EntityResource[Person]):
    entity = EntityName.PERSON
    model = Person
    name = "persons"

    async def by_id(self, person_id: str, *fields: str) -> Optional[Person]:
        return await self.get(self.query(*fields).where(Eq("id", person_id)).limit(1))

    async def by_login(self, login: str, *fields: str) -> Optional[Person]:
        return await self.get(self.query(*fields).where(Eq("login", login)).limit(1))

    async def for_project(self, project_id: str, *fields: str) -> ListT[Person]:
        kwargs: Dict[str, Any] = {"filter": ["projects", "contains", project_id]}
        if fields:
            kwargs["fields"] = list(fields)
        return await self.list_raw(kwargs)


class _TaskChildResource(EntityResource[M]):
    """Rows hanging off a task; listed newest first."""

    task_field: ClassVar[str] = "task_id"

    async def for_task(self, task_id: str, *fields: str) -> ListT[M]:
        qb = (
            self.query(*fields)
            .where(Eq(self.task_field, task_id))
            .order_by("-cmf_created_at")
        )
        return await self.list(qb)


class CommentResource(_TaskChildResource[Comment]):
    entity = EntityName.COMMENT
    model = Comment
    name = "comments"


class TimeLogResource(_TaskChildResource[TimeLog]):
    entity = EntityName.TIME_LOG
    model = TimeLog
    name = "time_logs"

    async def for_project(self, project_id: str, *fields: str) -> ListT[TimeLog]:
        qb = (
            self.query(*fields)
            .where(Eq("task_id.project_id", project_id))
            .order_by("-cmf_created_at")
        )
        return await self.list(qb)


class TaskLinkResource(_TaskChildResource[TaskLink]):
    entity = EntityName.TASK_LINK
    model = TaskLink
    name = "task_links"
    task_field = "source_id"

    async def incoming(self, task_id: str, *fields: str) -> ListT[TaskLink]:
        qb = (
            self.query(*fields)
            .where(Eq("target_id", task_id))
            .order_by("-cmf_created_at")
        )
        return await self.list(qb)


class StatusHistoryResource(_TaskChildResource[StatusHistory]):
    entity = EntityName.STATUS_HISTORY
    model = StatusHistory
    name = "status_history"
    task_field = "parent_id"

    async def for_project(self, project_id: str, *fields: str) -> ListT[StatusHistory]:
        qb = (
            self.query(*fields)
            .where(Eq("project_id", project_id))
            .order_by("-cmf_created_at")
        )
        return await self.list(qb)


# --- Aggregates ------------------------------------------------------------ #


async def project_stats(client: "EvaClient", project_id: str) -> ProjectStats:
    """
    Best-effort project counters. A failing sub-query is logged and leaves
    its counter at zero; the remaining counters are still filled in.
    """
    stats = ProjectStats(project_id=project_id)
    tasks = client.tasks

    try:
        stats.total_tasks = await tasks.count(
            tasks.query().where(Eq("project_id", project_id))
        )
    except EvaClientError as exc:
        log.warning("project_stats total_tasks failed: %s", exc)

    try:
        stats.open_tasks = await tasks.count(
            tasks.query()
            .where(Eq("project_id", project_id))
            .where(Eq("cache_status_type", StatusType.OPEN))
        )
    except EvaClientError as exc:
        log.warning("project_stats open_tasks failed: %s", exc)

    try:
        sprints = await client.lists.sprints(project_id, "id", "cache_status_type")
        stats.active_sprints = sum(
            1 for s in sprints if s.cache_status_type == StatusType.OPEN
        )
    except EvaClientError as exc:
        log.warning("project_stats active_sprints failed: %s", exc)

    try:
        people = await client.persons.for_project(project_id, "id")
        stats.total_users = len(people)
    except EvaClientError as exc:
        log.warning("project_stats total_users failed: %s", exc)

    return stats


async def sprint_stats(client: "EvaClient", sprint_code: str) -> SprintStats:
    """Task totals for a sprint, grouped by cache_status_type."""
    tasks = await client.tasks.for_sprint(sprint_code, "id", "cache_status_type")
    by_status: Dict[str, int] = {}
    for task in tasks:
        key = task.cache_status_type or ""
        by_status[key] = by_status.get(key, 0) + 1
    return SprintStats(
        sprint_code=sprint_code, total_tasks=len(tasks), tasks_by_status=by_status
    )


__all__ = [
    "EntityResource",
    "ProjectResource",
    "TaskResource",
    "EpicResource",
    "DocumentResource",
    "ListResource",
    "PersonResource",
    "CommentResource",
    "TimeLogResource",
    "TaskLinkResource",
    "StatusHistoryResource",
    "project_stats",
    "sprint_stats",
]
