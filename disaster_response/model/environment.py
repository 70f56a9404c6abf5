"""Grid environment holding the task queue for the disaster response simulation."""

import numpy as np
from typing import Dict, Iterable, List, Optional, Tuple

from .task import Task


class DisasterEnvironment:
    """
    Shared grid with a mutable task queue.

    Coordinates are 1-indexed: valid cells are [1, width] x [1, height].
    agent_positions is bookkeeping only; agents own their positions.
    """

    def __init__(self, width: int, height: int,
                 tasks: Optional[Iterable[Task]] = None):
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid size must be positive, got {width}x{height}")
        self.width = width
        self.height = height

        self.tasks: List[Task] = []
        self.agent_positions: Dict[str, Tuple[int, int]] = {}
        self._next_task_id = 1

        for task in tasks or []:
            self.add_task(task)

    @property
    def grid_size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def add_task(self, task: Task) -> Task:
        """Append task to the queue, assigning an id if it has none."""
        if task.task_id is None:
            task.task_id = self._next_task_id
        elif any(t.task_id == task.task_id for t in self.tasks):
            raise ValueError(f"Task id {task.task_id} is already queued")
        if task.task_id >= self._next_task_id:
            self._next_task_id = task.task_id + 1
        self.tasks.append(task)
        return task

    def remove_tasks(self, tasks: Iterable[Task]) -> None:
        """Drop the given tasks from the queue (matched by identity)."""
        doomed = {id(t) for t in tasks}
        self.tasks = [t for t in self.tasks if id(t) not in doomed]

    def contains(self, position: Tuple[int, int]) -> bool:
        """Check if position is within grid bounds."""
        x, y = position
        return 1 <= x <= self.width and 1 <= y <= self.height

    def random_position(self, rng: np.random.Generator) -> Tuple[int, int]:
        """Uniformly random in-bounds position."""
        x = int(rng.integers(1, self.width + 1))
        y = int(rng.integers(1, self.height + 1))
        return (x, y)

    def record_position(self, agent_id: str, position: Tuple[int, int]) -> None:
        """Update the position lookup for an agent."""
        self.agent_positions[agent_id] = position

    def __repr__(self) -> str:
        return (f"DisasterEnvironment(grid={self.width}x{self.height}, "
                f"tasks={len(self.tasks)})")
