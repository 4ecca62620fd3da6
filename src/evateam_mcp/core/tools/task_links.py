from __future__ import annotations

from typing import Any, Dict, List, Optional

from evateam_mcp.core.client import EvaClient
from evateam_mcp.core.query import Eq
from evateam_mcp.core.tools._common import (
    DEFAULT_LIMIT,
    count_result,
    dump,
    list_result,
    require,
)
from evateam_mcp.core.tools.errors import invalid_input, translate_errors

_DIRECTIONS = ("outgoing", "incoming", "both")


async def eva_tasklink_list(
    client: EvaClient,
    task_id: str,
    direction: str = "both",
    fields: Optional[List[str]] = None,
    limit: int = DEFAULT_LIMIT,
) -> Dict[str, Any]:
    """
    Links of one task (CmfRelationOption), newest first.
    - direction: outgoing (task is source), incoming (task is target) or both
    """
    op = "tasklink_list"
    task_id = require(task_id, "task_id", op)
    if direction not in _DIRECTIONS:
        raise invalid_input(op, f"direction must be one of {', '.join(_DIRECTIONS)}")

    links = client.task_links
    cols = fields or ()
    items: List[Any] = []
    with translate_errors(op):
        if direction in ("outgoing", "both"):
            items.extend(await links.for_task(task_id, *cols))
        if direction in ("incoming", "both"):
            items.extend(await links.incoming(task_id, *cols))
    return list_result(items[:limit], limit)


async def eva_tasklink_get(
    client: EvaClient, id: str, fields: Optional[List[str]] = None
) -> Optional[Dict[str, Any]]:
    op = "tasklink_get"
    links = client.task_links
    qb = links.query(*(fields or ())).where(Eq("id", require(id, "id", op)))
    with translate_errors(op):
        return dump(await links.get(qb.limit(1)))


async def eva_tasklink_count(client: EvaClient, task_id: str) -> Dict[str, Any]:
    """Outgoing link count for a task."""
    op = "tasklink_count"
    links = client.task_links
    qb = links.query().where(Eq("source_id", require(task_id, "task_id", op)))
    with translate_errors(op):
        return count_result(await links.count(qb))


async def eva_tasklink_create(
    client: EvaClient,
    source_id: str,
    target_id: str,
    link_type: str,
    comment: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    op = "tasklink_create"
    with translate_errors(op):
        link = await client.task_links.create(
            source_id=require(source_id, "source_id", op),
            target_id=require(target_id, "target_id", op),
            link_type=require(link_type, "link_type", op),
            comment=comment,
        )
    return dump(link)


async def eva_tasklink_delete(client: EvaClient, id: str) -> Dict[str, Any]:
    op = "tasklink_delete"
    link_id = require(id, "id", op)
    with translate_errors(op):
        ok = await client.task_links.delete(link_id)
    return {"ok": ok}
