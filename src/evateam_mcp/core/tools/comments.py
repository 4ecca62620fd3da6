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


async def eva_comment_list(
    client: EvaClient,
    task_id: Optional[str] = None,
    fields: Optional[List[str]] = None,
    filters: Optional[List[Filter]] = None,
    offset: int = 0,
    limit: int = DEFAULT_LIMIT,
) -> Dict[str, Any]:
    """Comments, newest first; task_id narrows to one task."""
    op = "comment_list"
    comments = client.comments
    qb = build_query(
        comments.query(),
        operation=op,
        fields=fields,
        filters=filters,
        order_by=["-cmf_created_at"],
        offset=offset,
        limit=limit,
    )
    if task_id:
        qb.where(Eq("task_id", task_id))
    with translate_errors(op):
        items = await comments.list(qb)
    return list_result(items, limit)


async def eva_comment_get(
    client: EvaClient, id: str, fields: Optional[List[str]] = None
) -> Optional[Dict[str, Any]]:
    op = "comment_get"
    comments = client.comments
    qb = comments.query(*(fields or ())).where(Eq("id", require(id, "id", op)))
    with translate_errors(op):
        return dump(await comments.get(qb.limit(1)))


async def eva_comment_count(
    client: EvaClient, task_id: Optional[str] = None
) -> Dict[str, Any]:
    op = "comment_count"
    comments = client.comments
    qb = comments.query()
    if task_id:
        qb.where(Eq("task_id", task_id))
    with translate_errors(op):
        return count_result(await comments.count(qb))


async def eva_comment_create(
    client: EvaClient, task_id: str, text: str
) -> Optional[Dict[str, Any]]:
    op = "comment_create"
    with translate_errors(op):
        comment = await client.comments.create(
            task_id=require(task_id, "task_id", op), text=require(text, "text", op)
        )
    return dump(comment)


async def eva_comment_update(
    client: EvaClient, id: str, text: str
) -> Optional[Dict[str, Any]]:
    op = "comment_update"
    comment_id = require(id, "id", op)
    if not text:
        raise invalid_input(op, "text is required")
    with translate_errors(op):
        return dump(await client.comments.update(comment_id, {"text": text}))


async def eva_comment_delete(client: EvaClient, id: str) -> Dict[str, Any]:
    op = "comment_delete"
    comment_id = require(id, "id", op)
    with translate_errors(op):
        ok = await client.comments.delete(comment_id)
    return {"ok": ok}
