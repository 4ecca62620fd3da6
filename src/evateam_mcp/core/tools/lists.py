"""
Tools for CmfList: sprints (SPR-*) and releases (REL-*).
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from evateam_mcp.core.client import EvaClient
from evateam_mcp.core.entities import (
    RELEASE_CODE_PREFIX,
    SPRINT_CODE_PREFIX,
    StatusType,
)
from evateam_mcp.core.query import Eq, Like
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

_KIND_PREFIX = {"sprint": SPRINT_CODE_PREFIX, "release": RELEASE_CODE_PREFIX}


async def _list_lists(
    client: EvaClient,
    op: str,
    *,
    prefix: Optional[str],
    project_id: Optional[str],
    status_type: Optional[str],
    fields: Optional[List[str]],
    filters: Optional[List[Filter]],
    order_by: Optional[List[str]],
    offset: int,
    limit: int,
    include_archived: bool,
) -> Dict[str, Any]:
    lists = client.lists
    qb = build_query(
        lists.query(),
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
    if prefix:
        qb.where(Like("code", prefix + "%"))
    if status_type:
        qb.where(Eq("cache_status_type", status_type))
    with translate_errors(op):
        items = await lists.list(qb)
    return list_result(items, limit)


async def _get_list(
    client: EvaClient,
    op: str,
    code: Optional[str],
    id: Optional[str],
    fields: Optional[List[str]],
) -> Optional[Dict[str, Any]]:
    if not code and not id:
        raise invalid_input(op, "code or id is required")
    lists = client.lists
    key, value = ("code", code) if code else ("id", id)
    qb = lists.query(*(fields or ())).where(Eq(key, value)).limit(1)
    with translate_errors(op):
        return dump(await lists.get(qb))


async def eva_list_list(
    client: EvaClient,
    project_id: Optional[str] = None,
    status_type: Optional[str] = None,
    type: Optional[str] = None,
    fields: Optional[List[str]] = None,
    filters: Optional[List[Filter]] = None,
    order_by: Optional[List[str]] = None,
    offset: int = 0,
    limit: int = DEFAULT_LIMIT,
    include_archived: bool = False,
) -> Dict[str, Any]:
    """
    List sprints and releases.
    - type: "sprint" or "release" narrows by code prefix; omitted -> both.
    Returns: {items, has_more}
    """
    op = "list_list"
    prefix = None
    if type:
        prefix = _KIND_PREFIX.get(type.lower())
        if prefix is None:
            raise invalid_input(op, f"type must be 'sprint' or 'release', got {type!r}")
    return await _list_lists(
        client,
        op,
        prefix=prefix,
        project_id=project_id,
        status_type=status_type,
        fields=fields,
        filters=filters,
        order_by=order_by,
        offset=offset,
        limit=limit,
        include_archived=include_archived,
    )


async def eva_list_get(
    client: EvaClient,
    code: Optional[str] = None,
    id: Optional[str] = None,
    fields: Optional[List[str]] = None,
) -> Optional[Dict[str, Any]]:
    return await _get_list(client, "list_get", code, id, fields)


async def eva_list_count(
    client: EvaClient,
    project_id: Optional[str] = None,
    filters: Optional[List[Filter]] = None,
) -> Dict[str, Any]:
    op = "list_count"
    lists = client.lists
    qb = build_query(lists.query(), operation=op, filters=filters, limit=None)
    if project_id:
        qb.where(Eq("project_id", project_id))
    with translate_errors(op):
        return count_result(await lists.count(qb))


async def eva_list_create(
    client: EvaClient,
    name: str,
    project_id: str,
    code: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    goal: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    op = "list_create"
    with translate_errors(op):
        created = await client.lists.create(
            name=require(name, "name", op),
            project_id=require(project_id, "project_id", op),
            code=code,
            start_date=start_date,
            end_date=end_date,
            goal=goal,
        )
    return dump(created)


async def eva_list_update(
    client: EvaClient, id: str, updates: Dict[str, Any]
) -> Optional[Dict[str, Any]]:
    op = "list_update"
    list_id = require(id, "id", op)
    if not updates:
        raise invalid_input(op, "updates must not be empty")
    with translate_errors(op):
        return dump(await client.lists.update(list_id, updates))


async def eva_list_close(client: EvaClient, id: str) -> Optional[Dict[str, Any]]:
    op = "list_close"
    list_id = require(id, "id", op)
    with translate_errors(op):
        return dump(await client.lists.close(list_id))


async def eva_list_delete(client: EvaClient, id: str) -> Dict[str, Any]:
    op = "list_delete"
    list_id = require(id, "id", op)
    with translate_errors(op):
        ok = await client.lists.delete(list_id)
    return {"ok": ok}


async def eva_sprint_list(
    client: EvaClient,
    project_id: Optional[str] = None,
    open_only: bool = False,
    fields: Optional[List[str]] = None,
    order_by: Optional[List[str]] = None,
    offset: int = 0,
    limit: int = DEFAULT_LIMIT,
) -> Dict[str, Any]:
    """List sprints (codes starting with SPR-); open_only keeps OPEN ones."""
    return await _list_lists(
        client,
        "sprint_list",
        prefix=SPRINT_CODE_PREFIX,
        project_id=project_id,
        status_type=StatusType.OPEN if open_only else None,
        fields=fields,
        filters=None,
        order_by=order_by,
        offset=offset,
        limit=limit,
        include_archived=False,
    )


async def eva_sprint_get(
    client: EvaClient,
    code: Optional[str] = None,
    id: Optional[str] = None,
    fields: Optional[List[str]] = None,
) -> Optional[Dict[str, Any]]:
    return await _get_list(client, "sprint_get", code, id, fields)


async def eva_release_list(
    client: EvaClient,
    project_id: Optional[str] = None,
    open_only: bool = False,
    fields: Optional[List[str]] = None,
    order_by: Optional[List[str]] = None,
    offset: int = 0,
    limit: int = DEFAULT_LIMIT,
) -> Dict[str, Any]:
    """List releases (codes starting with REL-)."""
    return await _list_lists(
        client,
        "release_list",
        prefix=RELEASE_CODE_PREFIX,
        project_id=project_id,
        status_type=StatusType.OPEN if open_only else None,
        fields=fields,
        filters=None,
        order_by=order_by,
        offset=offset,
        limit=limit,
        include_archived=False,
    )


async def eva_release_get(
    client: EvaClient,
    code: Optional[str] = None,
    id: Optional[str] = None,
    fields: Optional[List[str]] = None,
) -> Optional[Dict[str, Any]]:
    return await _get_list(client, "release_get", code, id, fields)
