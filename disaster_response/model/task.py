"""Task records and priority ordering for the disaster response simulation."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class MalformedTaskError(ValueError):
    """Raised when a task record violates its contract."""


class TaskType(Enum):
    """Kind of work a task represents."""
    DELIVER = "deliver"
    ASSIST = "assist"


class Priority(Enum):
    """Task urgency. Anything not critical is processed after critical work."""
    LOW = "low"
    CRITICAL = "critical"


@dataclass
class Task:
    """
    A unit of work at a grid location.

    Deliver tasks must name the resource they consume; assist tasks may
    leave it empty. Priority defaults to LOW when not given.
    """
    location: Tuple[int, int]
    task_type: TaskType
    resource: Optional[str] = None
    priority: Priority = Priority.LOW
    task_id: Optional[int] = None
    completed: bool = False

    def __post_init__(self):
        if len(self.location) != 2:
            raise MalformedTaskError(f"Task location must be (x, y), got {self.location!r}")
        self.location = (int(self.location[0]), int(self.location[1]))
        if self.task_type == TaskType.DELIVER and not self.resource:
            raise MalformedTaskError("Deliver task requires a resource")

    @property
    def is_critical(self) -> bool:
        return self.priority == Priority.CRITICAL

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Task":
        """Build a task from a raw mapping (as found in YAML files)."""
        try:
            location = tuple(raw['location'])
            type_name = raw['type']
        except KeyError as e:
            raise MalformedTaskError(f"Task is missing field {e}") from None

        try:
            task_type = TaskType(str(type_name).lower())
        except ValueError:
            raise MalformedTaskError(f"Unknown task type: {type_name}") from None

        priority_name = raw.get('priority', Priority.LOW.value)
        try:
            priority = Priority(str(priority_name).lower())
        except ValueError:
            raise MalformedTaskError(f"Unknown task priority: {priority_name}") from None

        return cls(
            location=location,
            task_type=task_type,
            resource=raw.get('resource'),
            priority=priority
        )

    def label(self) -> str:
        """Short human-readable reference used in event text."""
        ident = f"#{self.task_id}" if self.task_id is not None else "#?"
        parts = [self.task_type.value, f"at {self.location}"]
        if self.resource:
            parts.append(f"resource={self.resource}")
        parts.append(f"priority={self.priority.value}")
        return f"Task {ident} ({', '.join(parts)})"


def prioritize_tasks(tasks: List[Task]) -> List[Task]:
    """
    Return tasks with critical ones first.

    sorted() is stable, so tasks of equal priority keep their queue order.
    """
    return sorted(tasks, key=lambda t: 0 if t.is_critical else 1)
