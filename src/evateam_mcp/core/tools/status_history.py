from __future__ import annotations

from typing import Any, Dict, List, Optional

from evateam_mcp.core.client import EvaClient
from evateam_mcp.core.query import Eq
from evateam_mcp.core.tools._common import (
    DEFAULT_LIMIT,
    build_query,
    count_result,
    dump,
    list_result,
    require,
)
from evateam_mcp.core.tools.errors import invalid_input, translate_errors


async def eva_statushistory_list(
    client: EvaClient,
    task_id: Optional[str] = None,
    project_id: Optional[str] = None,
    fields: Optional[List[str]] = None,
    offset: int = 0,
    limit: int = DEFAULT_LIMIT,
) -> Dict[str, Any]:
    """Status transitions for a task or a whole project, newest first."""
    op = "statushistory_list"
    if not task_id and not project_id:
        raise invalid_input(op, "task_id or project_id is required")

    history = client.status_history
    qb = build_query(
        history.query(),
        operation=op,
        fields=fields,
        order_by=["-cmf_created_at"],
        offset=offset,
        limit=limit,
    )
    if task_id:
        qb.where(Eq("parent_id", task_id))
    if project_id:
        qb.where(Eq("project_id", project_id))
    with translate_errors(op):
        items = await history.list(qb)
    return list_result(items, limit)


async def eva_statushistory_get(
    client: EvaClient, id: str, fields: Optional[List[str]] = None
) -> Optional[Dict[str, Any]]:
    op = "statushistory_get"
    history = client.status_history
    qb = history.query(*(fields or ())).where(Eq("id", require(id, "id", op)))
    with translate_errors(op):
        return dump(await history.get(qb.limit(1)))


async def eva_statushistory_count(
    client: EvaClient, task_id: Optional[str] = None
) -> Dict[str, Any]:
    op = "statushistory_count"
    history = client.status_history
    qb = history.query()
    if task_id:
        qb.where(Eq("parent_id", task_id))
    with translate_errors(op):
        return count_result(await history.count(qb))
