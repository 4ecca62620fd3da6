"""Entity names and their default field projections."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple


class EntityName:
    PROJECT = "CmfProject"
    TASK = "CmfTask"
    DOCUMENT = "CmfDocument"
    LIST = "CmfList"  # sprints and releases
    PERSON = "CmfPerson"
    TIME_LOG = "CmfTimeTrackerHistory"
    COMMENT = "CmfComment"
    TASK_LINK = "CmfRelationOption"
    STATUS_HISTORY = "CmfStatusHistory"


class StatusType:
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    CLOSED = "CLOSED"


SPRINT_CODE_PREFIX = "SPR-"
RELEASE_CODE_PREFIX = "REL-"
EPIC_LOGIC_TYPE = "task.epic"


@dataclass(frozen=True)
class DefaultFields:
    get: Tuple[str, ...]
    list: Tuple[str, ...]


_TASK_LIST = (
    "id",
    "code",
    "name",
    "project_id",
    "cache_status_type",
    "priority",
    "deadline",
    "responsible_id",
    "epic_id",
    "agile_story_points",
)

DEFAULT_FIELDS: Mapping[str, DefaultFields] = MappingProxyType(
    {
        EntityName.PROJECT: DefaultFields(
            get=(
                "id",
                "class_name",
                "code",
                "name",
                "cache_status_type",
                "workflow_type",
                "parent_id",
                "project_id",
                "cmf_owner_id",
                "workflow_id",
                "system",
                "sl_owner_lock",
                "is_template",
            ),
            list=(
                "id",
                "class_name",
                "code",
                "name",
                "cache_status_type",
                "cmf_owner_id",
                "workflow_id",
                "system",
                "sl_owner_lock",
            ),
        ),
        EntityName.TASK: DefaultFields(
            get=(
                "id",
                "code",
                "name",
                "text",
                "project_id",
                "lists",
                "cmf_owner_id",
                "responsible",
                "cache_status_type",
                "priority",
                "deadline",
                "epic",
                "tags",
                "executors",
                "waiting_for",
                "parent_id",
                "fix_versions",
                "agile_story_points",
                "components",
                "logic_type",
            ),
            list=_TASK_LIST,
        ),
        EntityName.DOCUMENT: DefaultFields(
            get=(
                "id",
                "class_name",
                "code",
                "name",
                "text",
                "project_id",
                "cache_status_type",
                "cmf_created_at",
                "cmf_modified_at",
            ),
            list=(
                "id",
                "code",
                "name",
                "project_id",
                "cache_status_type",
                "cmf_created_at",
            ),
        ),
        EntityName.LIST: DefaultFields(
            get=(
                "id",
                "class_name",
                "code",
                "name",
                "cache_status_type",
                "cache_members_count",
                "limit_days",
                "parent",
                "parent_id",
                "project_id",
                "cmf_owner_id",
                "workflow_id",
                "start_date",
                "end_date",
                "goal",
            ),
            list=(
                "id",
                "class_name",
                "code",
                "name",
                "cache_status_type",
                "cache_members_count",
                "parent",
                "parent_id",
                "project_id",
                "cmf_owner_id",
                "workflow_id",
            ),
        ),
        EntityName.PERSON: DefaultFields(
            get=(
                "id",
                "name",
                "code",
                "login",
                "email",
                "on_vacation",
                "does_not_work",
                "cmf_created_at",
            ),
            list=(
                "id",
                "name",
                "code",
                "login",
                "email",
                "on_vacation",
                "does_not_work",
            ),
        ),
        EntityName.TIME_LOG: DefaultFields(
            get=(
                "id",
                "task_id",
                "user_id",
                "user_name",
                "user_login",
                "minutes_spent",
                "date",
                "description",
                "cmf_created_at",
            ),
            list=(
                "id",
                "task_id",
                "user_id",
                "minutes_spent",
                "date",
                "cmf_created_at",
            ),
        ),
        EntityName.COMMENT: DefaultFields(
            get=("id", "task_id", "text", "cmf_author_id", "cmf_created_at"),
            list=("id", "text", "cmf_author_id", "cmf_created_at"),
        ),
        EntityName.TASK_LINK: DefaultFields(
            get=(
                "id",
                "class_name",
                "source_id",
                "target_id",
                "link_type",
                "cmf_created_at",
                "comment",
            ),
            list=("id", "source_id", "target_id", "link_type", "cmf_created_at"),
        ),
        EntityName.STATUS_HISTORY: DefaultFields(
            get=(
                "id",
                "code",
                "parent_id",
                "old_status",
                "new_status",
                "cmf_owner_id",
                "cmf_created_at",
            ),
            list=(
                "id",
                "code",
                "parent_id",
                "old_status",
                "new_status",
                "cmf_created_at",
            ),
        ),
    }
)

# Epics are tasks with logic_type.code == "task.epic"
EPIC_FIELDS = DefaultFields(
    get=(
        "id",
        "class_name",
        "code",
        "name",
        "text",
        "project_id",
        "cache_status_type",
        "logic_type",
    ),
    list=("id", "code", "name", "project_id", "cache_status_type"),
)


def default_fields(entity: str) -> DefaultFields:
    try:
        return DEFAULT_FIELDS[entity]
    except KeyError:
        raise KeyError(f"No default projection for entity {entity!r}") from None


__all__ = [
    "EntityName",
    "StatusType",
    "DefaultFields",
    "DEFAULT_FIELDS",
    "EPIC_FIELDS",
    "SPRINT_CODE_PREFIX",
    "RELEASE_CODE_PREFIX",
    "EPIC_LOGIC_TYPE",
    "default_fields",
]
