"""
Data models representing Zenith objects (tasks, profiles, projects).

Every model round-trips through ``to_dict``/``from_dict``; the dict form is what
the document store persists.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from ..utils.logger import get_logger
from .levels import level_for_points

log = get_logger(__name__)


class Priority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class Frequency(str, Enum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def parse_priority(value: Any) -> Optional[Priority]:
    if isinstance(value, Priority):
        return value
    try:
        return Priority(value)
    except ValueError:
        if value is not None:
            log.warning("Unknown priority %r, treating task as unprioritized", value)
        return None


@dataclass(frozen=True)
class Recurrence:
    frequency: Frequency = Frequency.NONE
    interval: int = 1

    @property
    def is_active(self) -> bool:
        return self.frequency is not Frequency.NONE

    def to_dict(self) -> Dict[str, Any]:
        return {"frequency": self.frequency.value, "interval": self.interval}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["Recurrence"]:
        if not data:
            return None
        raw = data.get("frequency")
        try:
            frequency = Frequency(raw) if raw else Frequency.NONE
        except ValueError:
            # unknown rules fail closed: the task simply stops recurring
            log.warning("Unrecognized recurrence frequency %r, treating as 'none'", raw)
            frequency = Frequency.NONE
        try:
            interval = int(data.get("interval") or 1)
        except (TypeError, ValueError):
            interval = 1
        return cls(frequency=frequency, interval=max(1, interval))


@dataclass
class Subtask:
    id: str
    title: str
    is_completed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "title": self.title, "is_completed": self.is_completed}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Subtask":
        return cls(id=str(data["id"]), title=data.get("title", ""), is_completed=bool(data.get("is_completed")))


@dataclass
class Task:
    id: Optional[str]
    title: str
    description: Optional[str] = None
    priority: Optional[Priority] = Priority.MEDIUM
    due_date: Optional[datetime] = None
    is_completed: bool = False
    completed_at: Optional[datetime] = None
    recurrence: Optional[Recurrence] = None
    subtasks: List[Subtask] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    project_id: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority.value if self.priority else None,
            "due_date": format_timestamp(self.due_date),
            "is_completed": self.is_completed,
            "completed_at": format_timestamp(self.completed_at),
            "recurrence": self.recurrence.to_dict() if self.recurrence else None,
            "subtasks": [s.to_dict() for s in self.subtasks],
            "tags": sorted(set(self.tags)),
            "project_id": self.project_id,
            "created_at": format_timestamp(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        return cls(
            id=data.get("id"),
            title=data.get("title", ""),
            description=data.get("description"),
            priority=parse_priority(data.get("priority")),
            due_date=parse_timestamp(data.get("due_date")),
            is_completed=bool(data.get("is_completed")),
            completed_at=parse_timestamp(data.get("completed_at")),
            recurrence=Recurrence.from_dict(data.get("recurrence")),
            subtasks=[Subtask.from_dict(s) for s in data.get("subtasks") or []],
            tags=sorted(set(data.get("tags") or [])),
            project_id=data.get("project_id"),
            created_at=parse_timestamp(data.get("created_at")),
        )


@dataclass(frozen=True)
class TaskPatch:
    is_completed: bool
    completed_at: Optional[datetime]

    def to_dict(self) -> Dict[str, Any]:
        return {"is_completed": self.is_completed, "completed_at": format_timestamp(self.completed_at)}


@dataclass
class Profile:
    points: int = 0
    streak: int = 0
    last_completion_date: Optional[datetime] = None
    username: Optional[str] = None
    email: Optional[str] = None

    @property
    def level(self) -> int:
        return level_for_points(self.points)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "points": self.points,
            "streak": self.streak,
            "last_completion_date": format_timestamp(self.last_completion_date),
            "username": self.username,
            "email": self.email,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Profile":
        # a stored "level" from older documents is ignored; level is derived
        return cls(
            points=int(data.get("points") or 0),
            streak=int(data.get("streak") or 0),
            last_completion_date=parse_timestamp(data.get("last_completion_date")),
            username=data.get("username"),
            email=data.get("email"),
        )


PROJECT_ICONS = ("briefcase", "home", "cart", "book-open-variant", "dumbbell", "heart", "star", "flag")
PROJECT_COLORS = ("#6A5ACD", "#FF6347", "#32CD32", "#FFD700", "#00BFFF", "#FF69B4", "#9370DB")


@dataclass
class Project:
    id: Optional[str]
    name: str
    icon: str = PROJECT_ICONS[0]
    color: str = PROJECT_COLORS[0]

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "icon": self.icon, "color": self.color}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Project":
        return cls(
            id=data.get("id"),
            name=data.get("name", ""),
            icon=data.get("icon") or PROJECT_ICONS[0],
            color=data.get("color") or PROJECT_COLORS[0],
        )
