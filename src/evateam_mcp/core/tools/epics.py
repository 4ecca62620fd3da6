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
)
from evateam_mcp.core.tools.errors import invalid_input, translate_errors


async def eva_epic_list(
    client: EvaClient,
    project_id: Optional[str] = None,
    status_type: Optional[str] = None,
    fields: Optional[List[str]] = None,
    filters: Optional[List[Filter]] = None,
    order_by: Optional[List[str]] = None,
    offset: int = 0,
    limit: int = DEFAULT_LIMIT,
) -> Dict[str, Any]:
    """List epics: tasks whose logic type is task.epic."""
    op = "epic_list"
    epics = client.epics
    qb = build_query(
        epics.query(),
        operation=op,
        fields=fields,
        filters=filters,
        order_by=order_by,
        offset=offset,
        limit=limit,
    )
    if project_id:
        qb.where(Eq("project_id", project_id))
    if status_type:
        qb.where(Eq("cache_status_type", status_type))
    with translate_errors(op):
        items = await epics.list(qb)
    return list_result(items, limit)


async def eva_epic_get(
    client: EvaClient,
    code: Optional[str] = None,
    id: Optional[str] = None,
    fields: Optional[List[str]] = None,
) -> Optional[Dict[str, Any]]:
    op = "epic_get"
    if not code and not id:
        raise invalid_input(op, "code or id is required")
    epics = client.epics
    key, value = ("code", code) if code else ("id", id)
    qb = epics.query(*(fields or ())).where(Eq(key, value)).limit(1)
    with translate_errors(op):
        return dump(await epics.get(qb))


async def eva_epic_count(
    client: EvaClient, project_id: Optional[str] = None
) -> Dict[str, Any]:
    op = "epic_count"
    epics = client.epics
    qb = epics.query()
    if project_id:
        qb.where(Eq("project_id", project_id))
    with translate_errors(op):
        return count_result(await epics.count(qb))


async def eva_epic_tasks(
    client: EvaClient,
    epic_id: str,
    fields: Optional[List[str]] = None,
    limit: int = DEFAULT_LIMIT,
) -> Dict[str, Any]:
    """Tasks that belong to one epic (by epic id)."""
    op = "epic_tasks"
    if not epic_id:
        raise invalid_input(op, "epic_id is required")
    tasks = client.tasks
    qb = build_query(
        tasks.query(), operation=op, fields=fields, limit=limit
    ).where(Eq("epic_id", epic_id))
    with translate_errors(op):
        items = await tasks.list(qb)
    return list_result(items, limit)
