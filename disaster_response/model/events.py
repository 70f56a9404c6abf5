"""Event records and state snapshots for the disaster response simulation."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import ClassVar, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class SimulationEvent:
    """Base class for everything the engine reports back to its caller."""
    kind: ClassVar[str] = "event"

    agent_id: Optional[str] = None
    task_id: Optional[int] = None
    resource: Optional[str] = None

    def describe(self) -> str:
        return self.kind

    def to_row(self) -> Dict:
        """Flatten to a tabular row."""
        return {
            "kind": self.kind,
            "agent_id": self.agent_id or "",
            "task_id": "" if self.task_id is None else self.task_id,
            "resource": self.resource or "",
            "detail": self.describe(),
        }


@dataclass(frozen=True)
class AgentMoved(SimulationEvent):
    kind: ClassVar[str] = "moved"

    origin: Tuple[int, int] = (0, 0)
    destination: Tuple[int, int] = (0, 0)
    distance: int = 0

    def describe(self) -> str:
        return f"Agent {self.agent_id} moved to location {self.destination}"


@dataclass(frozen=True)
class ResourceAllocated(SimulationEvent):
    kind: ClassVar[str] = "allocated"

    remaining: int = 0

    def describe(self) -> str:
        return (f"Resource {self.resource} allocated successfully by "
                f"TransportAgent {self.agent_id} for task #{self.task_id}. "
                f"Remaining: {self.remaining}")


@dataclass(frozen=True)
class ResourceUnavailable(SimulationEvent):
    kind: ClassVar[str] = "unavailable"

    def describe(self) -> str:
        return (f"Resource {self.resource} unavailable! TransportAgent "
                f"{self.agent_id} is replenishing resources.")


@dataclass(frozen=True)
class ResourcesReplenished(SimulationEvent):
    kind: ClassVar[str] = "replenished"

    amount: int = 0
    delay: float = 0.0
    inventory: Dict[str, int] = field(default_factory=dict)

    def describe(self) -> str:
        return (f"TransportAgent {self.agent_id} replenished +{self.amount} "
                f"per resource in {self.delay:g}s: {self.inventory}")


@dataclass(frozen=True)
class AssistanceProvided(SimulationEvent):
    kind: ClassVar[str] = "assisted"

    location: Tuple[int, int] = (0, 0)
    priority: str = "low"
    expertise: str = ""

    def describe(self) -> str:
        return (f"MedicalAgent {self.agent_id} providing assistance at "
                f"location: {self.location} with priority: {self.priority}")


@dataclass(frozen=True)
class NegotiationSucceeded(SimulationEvent):
    kind: ClassVar[str] = "negotiation_succeeded"

    counterpart_id: str = ""
    remaining: int = 0

    def describe(self) -> str:
        return (f"MedicalAgent {self.agent_id} negotiated with TransportAgent "
                f"{self.counterpart_id}: {self.resource} granted! "
                f"Remaining: {self.remaining}")


@dataclass(frozen=True)
class NegotiationFailed(SimulationEvent):
    kind: ClassVar[str] = "negotiation_failed"

    counterpart_id: str = ""

    def describe(self) -> str:
        return (f"MedicalAgent {self.agent_id} negotiated with TransportAgent "
                f"{self.counterpart_id}: {self.resource} unavailable!")


@dataclass(frozen=True)
class MessageSent(SimulationEvent):
    kind: ClassVar[str] = "message"

    recipient_id: str = ""
    message: str = ""

    def describe(self) -> str:
        return (f"Agent {self.agent_id} sending message to Agent "
                f"{self.recipient_id}: {self.message}")


@dataclass(frozen=True)
class TaskAdded(SimulationEvent):
    kind: ClassVar[str] = "task_added"

    location: Tuple[int, int] = (0, 0)
    task_type: str = ""
    priority: str = "low"

    def describe(self) -> str:
        return (f"New task added: #{self.task_id} {self.task_type} at "
                f"{self.location} (resource={self.resource}, "
                f"priority={self.priority})")


@dataclass(frozen=True)
class TaskRejected(SimulationEvent):
    kind: ClassVar[str] = "task_rejected"

    reason: str = ""

    def describe(self) -> str:
        return f"Task #{self.task_id} rejected for agent {self.agent_id}: {self.reason}"


@dataclass(frozen=True)
class TaskRetired(SimulationEvent):
    kind: ClassVar[str] = "task_retired"

    def describe(self) -> str:
        return f"Task #{self.task_id} completed and removed from the queue"


@dataclass(frozen=True)
class AgentSnapshot:
    """Immutable snapshot of an agent at a given time step."""
    agent_id: str
    role: str  # "transport" or "medical"
    x: int
    y: int
    resources: Dict[str, int] = field(default_factory=dict)
    expertise: Optional[str] = None


@dataclass(frozen=True)
class TaskSnapshot:
    """Immutable snapshot of a queued task."""
    task_id: int
    x: int
    y: int
    task_type: str
    priority: str
    resource: Optional[str] = None


@dataclass
class SimulationState:
    """Everything that happened in one step, plus the state after it."""
    step: int
    timestamp: datetime
    restock_time: float          # cumulative simulated restock delay, seconds
    events: List[SimulationEvent]
    agents: List[AgentSnapshot]
    tasks: List[TaskSnapshot]
    metrics: Dict[str, float]

    def events_of(self, event_type: type) -> List[SimulationEvent]:
        return [e for e in self.events if isinstance(e, event_type)]

