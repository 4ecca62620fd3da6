from __future__ import annotations

from typing import Any, Dict, List, Optional

from evateam_mcp.core.client import EvaClient
from evateam_mcp.core.query import Eq, GtOrEq, LtOrEq
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


async def eva_timelog_list(
    client: EvaClient,
    task_id: Optional[str] = None,
    project_id: Optional[str] = None,
    user_id: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    fields: Optional[List[str]] = None,
    filters: Optional[List[Filter]] = None,
    offset: int = 0,
    limit: int = DEFAULT_LIMIT,
) -> Dict[str, Any]:
    """
    Time tracker entries (CmfTimeTrackerHistory), newest first.
    - date_from / date_to: inclusive bounds on the entry date (YYYY-MM-DD)
    """
    op = "timelog_list"
    logs = client.time_logs
    qb = build_query(
        logs.query(),
        operation=op,
        fields=fields,
        filters=filters,
        order_by=["-cmf_created_at"],
        offset=offset,
        limit=limit,
    )
    if task_id:
        qb.where(Eq("task_id", task_id))
    if project_id:
        qb.where(Eq("task_id.project_id", project_id))
    if user_id:
        qb.where(Eq("user_id", user_id))
    if date_from:
        qb.where(GtOrEq("date", date_from))
    if date_to:
        qb.where(LtOrEq("date", date_to))
    with translate_errors(op):
        items = await logs.list(qb)
    return list_result(items, limit)


async def eva_timelog_get(
    client: EvaClient, id: str, fields: Optional[List[str]] = None
) -> Optional[Dict[str, Any]]:
    op = "timelog_get"
    logs = client.time_logs
    qb = logs.query(*(fields or ())).where(Eq("id", require(id, "id", op)))
    with translate_errors(op):
        return dump(await logs.get(qb.limit(1)))


async def eva_timelog_count(
    client: EvaClient,
    task_id: Optional[str] = None,
    user_id: Optional[str] = None,
) -> Dict[str, Any]:
    op = "timelog_count"
    logs = client.time_logs
    qb = logs.query()
    if task_id:
        qb.where(Eq("task_id", task_id))
    if user_id:
        qb.where(Eq("user_id", user_id))
    with translate_errors(op):
        return count_result(await logs.count(qb))


async def eva_timelog_create(
    client: EvaClient,
    task_id: str,
    minutes_spent: int,
    date: Optional[str] = None,
    description: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    """Log time against a task. minutes_spent must be positive."""
    op = "timelog_create"
    if minutes_spent <= 0:
        raise invalid_input(op, "minutes_spent must be > 0")
    with translate_errors(op):
        entry = await client.time_logs.create(
            task_id=require(task_id, "task_id", op),
            minutes_spent=minutes_spent,
            date=date,
            description=description,
        )
    return dump(entry)


async def eva_timelog_update(
    client: EvaClient, id: str, updates: Dict[str, Any]
) -> Optional[Dict[str, Any]]:
    op = "timelog_update"
    log_id = require(id, "id", op)
    if not updates:
        raise invalid_input(op, "updates must not be empty")
    with translate_errors(op):
        return dump(await client.time_logs.update(log_id, updates))


async def eva_timelog_delete(client: EvaClient, id: str) -> Dict[str, Any]:
    op = "timelog_delete"
    log_id = require(id, "id", op)
    with translate_errors(op):
        ok = await client.time_logs.delete(log_id)
    return {"ok": ok}
