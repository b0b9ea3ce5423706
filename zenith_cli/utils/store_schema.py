from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RecurrenceModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    # free-form on purpose: unknown frequencies are tolerated and fail closed on load
    frequency: Optional[str] = None
    interval: Optional[int] = 1


class SubtaskModel(BaseModel):
    id: str
    title: str = ""
    is_completed: bool = False


class TaskModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    title: str
    description: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[str] = None  # keep ISO string
    is_completed: bool = False
    completed_at: Optional[str] = None
    recurrence: Optional[RecurrenceModel] = None
    subtasks: List[SubtaskModel] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    project_id: Optional[str] = None
    created_at: Optional[str] = None


class ProfileModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    points: int = Field(0, ge=0)
    streak: int = Field(0, ge=0)
    last_completion_date: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None


class ProjectModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    name: str
    icon: Optional[str] = None
    color: Optional[str] = None


class UserDataModel(BaseModel):
    profile: Optional[ProfileModel] = None
    tasks: Dict[str, TaskModel] = Field(default_factory=dict)
    projects: Dict[str, ProjectModel] = Field(default_factory=dict)

    @field_validator("tasks", "projects", mode="before")
    @classmethod
    def ensure_dict(cls, v):
        """Allow list input but convert to dict keyed by id."""
        if isinstance(v, list):
            return {item.get("id"): item for item in v if item.get("id")}
        return v


class StoreFileModel(BaseModel):
    version: int = 1
    users: Dict[str, UserDataModel] = Field(default_factory=dict)
