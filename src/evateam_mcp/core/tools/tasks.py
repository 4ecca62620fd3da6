from __future__ import annotations

from typing import Any, Dict, List, Optional

from evateam_mcp.core.client import EvaClient
from evateam_mcp.core.query import Eq
from evateam_mcp.core.tools._common import (
    DEFAULT_LIMIT,
    Filter,
    build_query,
    count_result,
    dump,
    list_result,
    require,
    with_raw_filter,
)
from evateam_mcp.core.tools.errors import invalid_input, translate_errors


async def eva_task_list(
    client: EvaClient,
    project_id: Optional[str] = None,
    status_type: Optional[str] = None,
    sprint_code: Optional[str] = None,
    responsible_id: Optional[str] = None,
    logic_type_id: Optional[str] = None,
    fields: Optional[List[str]] = None,
    filters: Optional[List[Filter]] = None,
    order_by: Optional[List[str]] = None,
    offset: int = 0,
    limit: int = DEFAULT_LIMIT,
    include_archived: bool = False,
) -> Dict[str, Any]:
    """
    List tasks (CmfTask) with optional shortcut filters.
    - project_id / status_type / responsible_id / logic_type_id are ANDed.
    - sprint_code matches tasks whose lists contain the sprint.
    Returns: {items, has_more}
    """
    op = "task_list"
    tasks = client.tasks
    qb = build_query(
        tasks.query(),
        operation=op,
        fields=fields,
        filters=filters,
        order_by=order_by,
        offset=offset,
        limit=limit,
        include_archived=include_archived,
    )
    if project_id:
        qb.where(Eq("project_id", project_id))
    if status_type:
        qb.where(Eq("cache_status_type", status_type))
    if responsible_id:
        qb.where(Eq("responsible_id", responsible_id))
    if logic_type_id:
        qb.where(Eq("logic_type_id", logic_type_id))

    with translate_errors(op):
        if sprint_code:
            kwargs = with_raw_filter(qb.to_kwargs(), ["lists", "contains", sprint_code])
            items = await tasks.list_raw(kwargs)
        else:
            items = await tasks.list(qb)
    return list_result(items, limit)


async def eva_task_get(
    client: EvaClient,
    code: Optional[str] = None,
    id: Optional[str] = None,
    fields: Optional[List[str]] = None,
) -> Optional[Dict[str, Any]]:
    """Fetch one task by code (e.g. PROJ-123) or id (CmfTask:uuid)."""
    op = "task_get"
    if not code and not id:
        raise invalid_input(op, "code or id is required")

    tasks = client.tasks
    key, value = ("code", code) if code else ("id", id)
    qb = tasks.query(*(fields or ())).where(Eq(key, value)).limit(1)
    with translate_errors(op):
        task = await tasks.get(qb)
    return dump(task)


async def eva_task_count(
    client: EvaClient,
    project_id: Optional[str] = None,
    status_type: Optional[str] = None,
    filters: Optional[List[Filter]] = None,
    include_archived: bool = False,
) -> Dict[str, Any]:
    op = "task_count"
    tasks = client.tasks
    qb = build_query(
        tasks.query(),
        operation=op,
        filters=filters,
        limit=None,
        include_archived=include_archived,
    )
    if project_id:
        qb.where(Eq("project_id", project_id))
    if status_type:
        qb.where(Eq("cache_status_type", status_type))
    with translate_errors(op):
        return count_result(await tasks.count(qb))


async def eva_task_create(
    client: EvaClient,
    name: str,
    project_id: str,
    text: Optional[str] = None,
    priority: Optional[int] = None,
    deadline: Optional[str] = None,
    responsible: Optional[str] = None,
    executors: Optional[List[str]] = None,
    tags: Optional[List[str]] = None,
    lists: Optional[List[str]] = None,
    epic_id: Optional[str] = None,
    logic_type_id: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    """Create a task in a project. Omitted fields are left to server defaults."""
    op = "task_create"
    name = require(name, "name", op)
    project_id = require(project_id, "project_id", op)
    with translate_errors(op):
        task = await client.tasks.create(
            name=name,
            project_id=project_id,
            text=text,
            priority=priority,
            deadline=deadline,
            responsible=responsible,
            executors=executors or None,
            tags=tags or None,
            lists=lists or None,
            epic_id=epic_id,
            logic_type_id=logic_type_id,
        )
    return dump(task)


async def eva_task_update(
    client: EvaClient, id: str, updates: Dict[str, Any]
) -> Optional[Dict[str, Any]]:
    op = "task_update"
    task_id = require(id, "id", op)
    if not updates:
        raise invalid_input(op, "updates must not be empty")
    with translate_errors(op):
        return dump(await client.tasks.update(task_id, updates))


async def eva_task_update_status(
    client: EvaClient, id: str, status: str
) -> Optional[Dict[str, Any]]:
    """Move a task to another status type (OPEN, IN_PROGRESS, CLOSED)."""
    op = "task_update_status"
    task_id = require(id, "id", op)
    status = require(status, "status", op)
    with translate_errors(op):
        return dump(await client.tasks.update_status(task_id, status))


async def eva_task_archive(client: EvaClient, id: str) -> Dict[str, Any]:
    op = "task_archive"
    task_id = require(id, "id", op)
    with translate_errors(op):
        await client.tasks.archive(task_id)
    return {"ok": True}


async def eva_task_delete(client: EvaClient, id: str) -> Dict[str, Any]:
    op = "task_delete"
    task_id = require(id, "id", op)
    with translate_errors(op):
        ok = await client.tasks.delete(task_id)
    return {"ok": ok}
