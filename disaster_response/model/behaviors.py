"""Resource allocation, assistance, negotiation and messaging between agents."""

from typing import List, Optional, TYPE_CHECKING

from .events import (
    AssistanceProvided,
    MessageSent,
    NegotiationFailed,
    NegotiationSucceeded,
    ResourceAllocated,
    ResourcesReplenished,
    ResourceUnavailable,
    SimulationEvent,
)
from .task import MalformedTaskError, Task

if TYPE_CHECKING:
    from .rules import SimulationRules
    from .agent import DisasterAgent, MedicalAgent, TransportAgent


DEFAULT_REPLENISH_AMOUNT = 5
DEFAULT_REPLENISH_DELAY = 1.0


def allocate_resources(agent: "TransportAgent", task: Task,
                       rules: Optional["SimulationRules"] = None
                       ) -> List[SimulationEvent]:
    """
    Spend one unit of the task's resource from the agent's inventory.

    If none is left the agent restocks instead; the task is not retried
    until the next step.
    """
    resource = task.resource
    if not resource:
        raise MalformedTaskError(f"Task #{task.task_id} has no resource to allocate")

    if agent.resources.get(resource, 0) > 0:
        agent.resources[resource] -= 1
        return [ResourceAllocated(
            agent_id=agent.id,
            task_id=task.task_id,
            resource=resource,
            remaining=agent.resources[resource]
        )]

    events: List[SimulationEvent] = [ResourceUnavailable(
        agent_id=agent.id,
        task_id=task.task_id,
        resource=resource
    )]
    if rules is not None:
        events += replenish_resources(agent, rules.replenish_amount, rules.replenish_delay)
    else:
        events += replenish_resources(agent)
    return events


def replenish_resources(agent: "TransportAgent",
                        amount: int = DEFAULT_REPLENISH_AMOUNT,
                        delay: float = DEFAULT_REPLENISH_DELAY
                        ) -> List[SimulationEvent]:
    """
    Add `amount` units to every resource the agent already carries.

    The restock delay is reported on the event as simulated time; nothing
    here blocks.
    """
    for key in agent.resources:
        agent.resources[key] += amount
    return [ResourcesReplenished(
        agent_id=agent.id,
        amount=amount,
        delay=delay,
        inventory=dict(agent.resources)
    )]


def assist(agent: "MedicalAgent", task: Task) -> List[SimulationEvent]:
    """Provide assistance at the task location. Always succeeds."""
    return [AssistanceProvided(
        agent_id=agent.id,
        task_id=task.task_id,
        location=task.location,
        priority=task.priority.value,
        expertise=agent.expertise
    )]


def negotiate(medical_agent: "MedicalAgent",
              transport_agent: "TransportAgent",
              resource: str) -> List[SimulationEvent]:
    """
    Ask a transport agent to hand over one unit of a resource.

    A direct bilateral transfer: on success the transport agent's count
    drops by one, on failure nothing changes.
    """
    if transport_agent.resources.get(resource, 0) > 0:
        transport_agent.resources[resource] -= 1
        return [NegotiationSucceeded(
            agent_id=medical_agent.id,
            counterpart_id=transport_agent.id,
            resource=resource,
            remaining=transport_agent.resources[resource]
        )]
    return [NegotiationFailed(
        agent_id=medical_agent.id,
        counterpart_id=transport_agent.id,
        resource=resource
    )]


def communicate(sender: "DisasterAgent", recipient: "DisasterAgent",
                message: str) -> List[SimulationEvent]:
    return [MessageSent(
        agent_id=sender.id,
        recipient_id=recipient.id,
        message=message
    )]
