"""Agent roles for the disaster response simulation."""

from abc import ABC, abstractmethod
from typing import Dict, List, Tuple, TYPE_CHECKING

from . import behaviors
from .events import AgentSnapshot, SimulationEvent
from .task import Task, TaskType

if TYPE_CHECKING:
    from .rules import SimulationRules


class DisasterAgent(ABC):
    """
    Common capabilities of every responder: a fixed identity and a position.

    Each role declares which tasks it handles and what it does once it is on
    site, so the scheduler never has to branch on the concrete class.
    """

    role = "agent"

    def __init__(self, agent_id: str, position: Tuple[int, int]):
        self._id = agent_id
        self.position = (int(position[0]), int(position[1]))

    @property
    def id(self) -> str:
        return self._id

    @abstractmethod
    def handles(self, task: Task) -> bool:
        """Whether this agent acts on the given task."""

    @abstractmethod
    def perform(self, task: Task, rules: "SimulationRules") -> List[SimulationEvent]:
        """Carry out the task at the current position."""

    @abstractmethod
    def snapshot(self) -> AgentSnapshot:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id}, pos={self.position})"


class TransportAgent(DisasterAgent):
    """Carries an inventory of resources and serves deliver tasks."""

    role = "transport"

    def __init__(self, agent_id: str, position: Tuple[int, int],
                 resources: Dict[str, int]):
        super().__init__(agent_id, position)
        for name, count in resources.items():
            if count < 0:
                raise ValueError(f"Resource {name} of agent {agent_id} is negative: {count}")
        self.resources = dict(resources)

    def handles(self, task: Task) -> bool:
        return task.task_type == TaskType.DELIVER

    def perform(self, task: Task, rules: "SimulationRules") -> List[SimulationEvent]:
        return behaviors.allocate_resources(self, task, rules)

    def snapshot(self) -> AgentSnapshot:
        return AgentSnapshot(
            agent_id=self.id,
            role=self.role,
            x=self.position[0],
            y=self.position[1],
            resources=dict(self.resources)
        )

    def __repr__(self) -> str:
        return (f"TransportAgent(id={self.id}, pos={self.position}, "
                f"resources={self.resources})")


class MedicalAgent(DisasterAgent):
    """Provides on-site assistance; expertise is a free-form tag."""

    role = "medical"

    def __init__(self, agent_id: str, position: Tuple[int, int],
                 expertise: str):
        super().__init__(agent_id, position)
        self.expertise = expertise

    def handles(self, task: Task) -> bool:
        return task.task_type == TaskType.ASSIST

    def perform(self, task: Task, rules: "SimulationRules") -> List[SimulationEvent]:
        return behaviors.assist(self, task)

    def snapshot(self) -> AgentSnapshot:
        return AgentSnapshot(
            agent_id=self.id,
            role=self.role,
            x=self.position[0],
            y=self.position[1],
            expertise=self.expertise
        )

    def __repr__(self) -> str:
        return (f"MedicalAgent(id={self.id}, pos={self.position}, "
                f"expertise={self.expertise})")
