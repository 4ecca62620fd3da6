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
    with_raw_filter,
)
from evateam_mcp.core.tools.errors import invalid_input, translate_errors


async def eva_person_list(
    client: EvaClient,
    project_id: Optional[str] = None,
    active_only: bool = False,
    fields: Optional[List[str]] = None,
    filters: Optional[List[Filter]] = None,
    order_by: Optional[List[str]] = None,
    offset: int = 0,
    limit: int = DEFAULT_LIMIT,
) -> Dict[str, Any]:
    """
    List people (CmfPerson).
    - project_id: members of that project only
    - active_only: skip people on vacation or no longer working
    """
    op = "person_list"
    persons = client.persons
    qb = build_query(
        persons.query(),
        operation=op,
        fields=fields,
        filters=filters,
        order_by=order_by,
        offset=offset,
        limit=limit,
    )
    if active_only:
        qb.where(Eq("on_vacation", False)).where(Eq("does_not_work", False))

    with translate_errors(op):
        if project_id:
            kwargs = with_raw_filter(
                qb.to_kwargs(), ["projects", "contains", project_id]
            )
            items = await persons.list_raw(kwargs)
        else:
            items = await persons.list(qb)
    return list_result(items, limit)


async def eva_person_get(
    client: EvaClient,
    id: Optional[str] = None,
    login: Optional[str] = None,
    fields: Optional[List[str]] = None,
) -> Optional[Dict[str, Any]]:
    """Fetch one person by id (CmfPerson:uuid) or login."""
    op = "person_get"
    cols = fields or ()
    with translate_errors(op):
        if id:
            person = await client.persons.by_id(id, *cols)
        elif login:
            person = await client.persons.by_login(login, *cols)
        else:
            raise invalid_input(op, "id or login is required")
    return dump(person)


async def eva_person_count(
    client: EvaClient, filters: Optional[List[Filter]] = None
) -> Dict[str, Any]:
    op = "person_count"
    persons = client.persons
    qb = build_query(persons.query(), operation=op, filters=filters, limit=None)
    with translate_errors(op):
        return count_result(await persons.count(qb))
