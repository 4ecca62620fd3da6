from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Generic, List as ListT, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from .entities import RELEASE_CODE_PREFIX, SPRINT_CODE_PREFIX

T = TypeVar("T")


class EvaModel(BaseModel):
    """
    Base for EVA objects. The API omits fields that were not projected,
    so everything beyond the id is optional.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    class_name: Optional[str] = None


# --- Meta ---


class FieldMeta(BaseModel):
    api_allow: bool = False
    caption: Optional[str] = None
    class_name: Optional[str] = None
    comment: Optional[str] = None
    custom: bool = False
    nullable: Optional[bool] = None
    readonly: Optional[bool] = None
    max_length: Optional[int] = None
    virtual: bool = False
    visible: bool = False
    widget: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class ClassMeta(BaseModel):
    class_name: Optional[str] = None
    code_prefix: Optional[str] = None
    fields_order: ListT[str] = Field(default_factory=list)
    field_meta: Dict[str, FieldMeta] = Field(default_factory=dict, alias="fields")
    logical_delete: bool = False
    readonly: bool = False
    ordering: ListT[str] = Field(default_factory=list)
    verbose_name: Optional[str] = None
    verbose_name_plural: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# meta is keyed by class name, e.g. {"CmfProject": {...}}
Meta = Dict[str, ClassMeta]


class RPCResponse(BaseModel, Generic[T]):
    jsonrpc: Optional[str] = None
    result: Optional[T] = None
    meta: Optional[Meta] = None

    model_config = ConfigDict(extra="ignore")


# --- Entities ---


class Project(EvaModel):
    code: Optional[str] = None
    name: Optional[str] = None
    cache_status_type: Optional[str] = None
    workflow_type: Optional[str] = None
    workflow_id: Optional[str] = None
    parent_id: Optional[str] = None
    project_id: Optional[str] = None
    cmf_owner_id: Optional[str] = None
    system: bool = False
    sl_owner_lock: bool = False
    is_template: bool = False


class Task(EvaModel):
    code: Optional[str] = None
    name: Optional[str] = None
    text: Optional[str] = None
    project_id: Optional[str] = None
    parent_id: Optional[str] = None
    lists: ListT[str] = Field(default_factory=list)
    cmf_owner_id: Optional[str] = None
    responsible: Optional[str] = None
    responsible_id: Optional[str] = None
    waiting_for: Optional[str] = None
    executors: ListT[str] = Field(default_factory=list)
    spectators: ListT[str] = Field(default_factory=list)
    tags: ListT[str] = Field(default_factory=list)
    fix_versions: ListT[str] = Field(default_factory=list)
    components: ListT[str] = Field(default_factory=list)
    priority: Optional[int] = None
    deadline: Optional[str] = None
    epic: Optional[str] = None
    epic_id: Optional[str] = None
    logic_type: Optional[Any] = None
    agile_story_points: Optional[float] = None
    cache_status_type: Optional[str] = None


class Document(EvaModel):
    code: Optional[str] = None
    name: Optional[str] = None
    text: Optional[str] = None
    project_id: Optional[str] = None
    parent_id: Optional[str] = None
    cache_status_type: Optional[str] = None
    cmf_created_at: Optional[str] = None
    cmf_modified_at: Optional[str] = None
    cmf_owner_id: Optional[str] = None
    cmf_deleted: bool = False


class Person(EvaModel):
    name: Optional[str] = None
    code: Optional[str] = None
    login: Optional[str] = None
    email: Optional[str] = None
    on_vacation: bool = False
    does_not_work: bool = False
    cmf_created_at: Optional[str] = None


class ListParent(BaseModel):
    id: str
    class_name: Optional[str] = None
    name: Optional[str] = None
    code: Optional[str] = None
    project_id: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class List(EvaModel):
    """Sprint or release (CmfList); the kind is encoded in the code prefix."""

    code: Optional[str] = None
    name: Optional[str] = None
    cache_status_type: Optional[str] = None
    cache_members_count: Optional[int] = None
    limit_days: Optional[Any] = None
    parent: Optional[ListParent] = None
    parent_id: Optional[str] = None
    project_id: Optional[str] = None
    cmf_owner_id: Optional[str] = None
    workflow_id: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    goal: Optional[str] = None
    text: Optional[str] = None
    system: bool = False

    @property
    def is_sprint(self) -> bool:
        return (self.code or "").startswith(SPRINT_CODE_PREFIX)

    @property
    def is_release(self) -> bool:
        return (self.code or "").startswith(RELEASE_CODE_PREFIX)


class Comment(EvaModel):
    task_id: Optional[str] = None
    text: Optional[str] = None
    cmf_author_id: Optional[str] = None
    cmf_created_at: Optional[str] = None


class TimeLog(EvaModel):
    task_id: Optional[str] = None
    user_id: Optional[str] = None
    user_name: Optional[str] = None
    user_login: Optional[str] = None
    minutes_spent: Optional[int] = None
    date: Optional[str] = None
    description: Optional[str] = None
    cmf_created_at: Optional[str] = None


class TaskLink(EvaModel):
    source_id: Optional[str] = None
    target_id: Optional[str] = None
    link_type: Optional[str] = None
    comment: Optional[str] = None
    cmf_created_at: Optional[str] = None


class StatusHistory(EvaModel):
    code: Optional[str] = None
    parent_id: Optional[str] = None
    project_id: Optional[str] = None
    old_status: Optional[str] = None
    new_status: Optional[str] = None
    cmf_owner_id: Optional[str] = None
    cmf_created_at: Optional[datetime] = None


class Tag(EvaModel):
    name: Optional[str] = None
    code: Optional[str] = None
    alias: ListT[str] = Field(default_factory=list)
    project_id: Optional[str] = None


class Component(EvaModel):
    name: Optional[str] = None
    code: Optional[str] = None
    project_id: Optional[str] = None
    cache_status_type: Optional[str] = None
    alias: ListT[str] = Field(default_factory=list)


class LogicType(EvaModel):
    name: Optional[str] = None
    code: Optional[str] = None
    cmf_model_name: Optional[str] = None


# --- Aggregates (computed client-side) ---


class ProjectStats(BaseModel):
    project_id: str
    total_tasks: int = 0
    open_tasks: int = 0
    active_sprints: int = 0
    total_users: int = 0


class SprintStats(BaseModel):
    sprint_code: str
    total_tasks: int = 0
    tasks_by_status: Dict[str, int] = Field(default_factory=dict)


__all__ = [
    "EvaModel",
    "FieldMeta",
    "ClassMeta",
    "Meta",
    "RPCResponse",
    "Project",
    "Task",
    "Document",
    "Person",
    "ListParent",
    "List",
    "Comment",
    "TimeLog",
    "TaskLink",
    "StatusHistory",
    "Tag",
    "Component",
    "LogicType",
    "ProjectStats",
    "SprintStats",
]
