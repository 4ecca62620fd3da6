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
)
from evateam_mcp.core.tools.errors import invalid_input, translate_errors


async def eva_project_list(
    client: EvaClient,
    status_type: Optional[str] = None,
    fields: Optional[List[str]] = None,
    filters: Optional[List[Filter]] = None,
    order_by: Optional[List[str]] = None,
    offset: int = 0,
    limit: int = DEFAULT_LIMIT,
    include_archived: bool = False,
) -> Dict[str, Any]:
    """
    List projects (CmfProject).
    Returns: {items, has_more}
    """
    op = "project_list"
    projects = client.projects
    qb = build_query(
        projects.query(),
        operation=op,
        fields=fields,
        filters=filters,
        order_by=order_by,
        offset=offset,
        limit=limit,
        include_archived=include_archived,
    )
    if status_type:
        qb.where(Eq("cache_status_type", status_type))
    with translate_errors(op):
        items = await projects.list(qb)
    return list_result(items, limit)


async def eva_project_get(
    client: EvaClient,
    code: Optional[str] = None,
    id: Optional[str] = None,
    fields: Optional[List[str]] = None,
) -> Optional[Dict[str, Any]]:
    op = "project_get"
    if not code and not id:
        raise invalid_input(op, "code or id is required")

    projects = client.projects
    key, value = ("code", code) if code else ("id", id)
    qb = projects.query(*(fields or ())).where(Eq(key, value)).limit(1)
    with translate_errors(op):
        return dump(await projects.get(qb))


async def eva_project_count(
    client: EvaClient,
    filters: Optional[List[Filter]] = None,
    include_archived: bool = False,
) -> Dict[str, Any]:
    op = "project_count"
    projects = client.projects
    qb = build_query(
        projects.query(),
        operation=op,
        filters=filters,
        limit=None,
        include_archived=include_archived,
    )
    with translate_errors(op):
        return count_result(await projects.count(qb))


async def eva_project_create(
    client: EvaClient,
    code: str,
    name: str,
    text: Optional[str] = None,
    workflow_id: Optional[str] = None,
    executors: Optional[List[str]] = None,
    admins: Optional[List[str]] = None,
) -> Optional[Dict[str, Any]]:
    op = "project_create"
    with translate_errors(op):
        project = await client.projects.create(
            code=require(code, "code", op),
            name=require(name, "name", op),
            text=text,
            workflow_id=workflow_id,
            executors=executors or None,
            admins=admins or None,
        )
    return dump(project)


async def eva_project_update(
    client: EvaClient, id: str, updates: Dict[str, Any]
) -> Optional[Dict[str, Any]]:
    op = "project_update"
    project_id = require(id, "id", op)
    if not updates:
        raise invalid_input(op, "updates must not be empty")
    with translate_errors(op):
        return dump(await client.projects.update(project_id, updates))


async def eva_project_delete(client: EvaClient, id: str) -> Dict[str, Any]:
    op = "project_delete"
    project_id = require(id, "id", op)
    with translate_errors(op):
        ok = await client.projects.delete(project_id)
    return {"ok": ok}
