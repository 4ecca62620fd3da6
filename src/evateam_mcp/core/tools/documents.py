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


async def eva_document_list(
    client: EvaClient,
    project_id: Optional[str] = None,
    fields: Optional[List[str]] = None,
    filters: Optional[List[Filter]] = None,
    order_by: Optional[List[str]] = None,
    offset: int = 0,
    limit: int = DEFAULT_LIMIT,
    include_archived: bool = False,
) -> Dict[str, Any]:
    """List documents (CmfDocument), optionally within one project."""
    op = "document_list"
    docs = client.documents
    qb = build_query(
        docs.query(),
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
    with translate_errors(op):
        items = await docs.list(qb)
    return list_result(items, limit)


async def eva_document_get(
    client: EvaClient,
    code: Optional[str] = None,
    id: Optional[str] = None,
    fields: Optional[List[str]] = None,
) -> Optional[Dict[str, Any]]:
    op = "document_get"
    if not code and not id:
        raise invalid_input(op, "code or id is required")
    docs = client.documents
    key, value = ("code", code) if code else ("id", id)
    qb = docs.query(*(fields or ())).where(Eq(key, value)).limit(1)
    with translate_errors(op):
        return dump(await docs.get(qb))


async def eva_document_count(
    client: EvaClient,
    project_id: Optional[str] = None,
    filters: Optional[List[Filter]] = None,
) -> Dict[str, Any]:
    op = "document_count"
    docs = client.documents
    qb = build_query(docs.query(), operation=op, filters=filters, limit=None)
    if project_id:
        qb.where(Eq("project_id", project_id))
    with translate_errors(op):
        return count_result(await docs.count(qb))


async def eva_document_create(
    client: EvaClient,
    name: str,
    project_id: str,
    text: Optional[str] = None,
    parent_id: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    op = "document_create"
    with translate_errors(op):
        doc = await client.documents.create(
            name=require(name, "name", op),
            project_id=require(project_id, "project_id", op),
            text=text or None,
            parent_id=parent_id or None,
        )
    return dump(doc)


async def eva_document_update(
    client: EvaClient, id: str, updates: Dict[str, Any]
) -> Optional[Dict[str, Any]]:
    op = "document_update"
    doc_id = require(id, "id", op)
    if not updates:
        raise invalid_input(op, "updates must not be empty")
    with translate_errors(op):
        return dump(await client.documents.update(doc_id, updates))


async def eva_document_delete(client: EvaClient, id: str) -> Dict[str, Any]:
    op = "document_delete"
    doc_id = require(id, "id", op)
    with translate_errors(op):
        ok = await client.documents.delete(doc_id)
    return {"ok": ok}
