from __future__ import annotations

from typing import Any, Dict

from evateam_mcp.core.client import EvaClient
from evateam_mcp.core.resources import project_stats, sprint_stats
from evateam_mcp.core.tools._common import dump, require
from evateam_mcp.core.tools.errors import translate_errors


async def eva_stats_project(client: EvaClient, project_id: str) -> Dict[str, Any]:
    """
    Project counters: total/open tasks, open sprints and members.
    Counters whose query fails are reported as 0.
    """
    op = "stats_project"
    project_id = require(project_id, "project_id", op)
    with translate_errors(op):
        stats = await project_stats(client, project_id)
    return dump(stats)


async def eva_stats_sprint(client: EvaClient, sprint_code: str) -> Dict[str, Any]:
    """Sprint task totals grouped by status type."""
    op = "stats_sprint"
    sprint_code = require(sprint_code, "sprint_code", op)
    with translate_errors(op):
        stats = await sprint_stats(client, sprint_code)
    return dump(stats)
