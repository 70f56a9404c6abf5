"""Distance and movement on the response grid."""

from typing import List, Optional, Tuple, TYPE_CHECKING

from .events import AgentMoved, SimulationEvent

if TYPE_CHECKING:
    from .agent import DisasterAgent
    from .environment import DisasterEnvironment


def manhattan_distance(pos1: Tuple[int, int], pos2: Tuple[int, int]) -> int:
    """Sum of horizontal and vertical distance."""
    return abs(pos1[0] - pos2[0]) + abs(pos1[1] - pos2[1])


def move_agent(agent: "DisasterAgent",
               destination: Tuple[int, int],
               environment: Optional["DisasterEnvironment"] = None,
               task_id: Optional[int] = None
               ) -> List[SimulationEvent]:
    """
    Relocate agent to destination in a single tick.

    There is no incremental stepping: the agent jumps straight to the target.
    Returns an AgentMoved event, tagged with the task that drew the agent
    there if one is given, or nothing if the agent is already there.
    """
    distance = manhattan_distance(agent.position, destination)
    if distance == 0:
        return []

    origin = agent.position
    agent.position = (int(destination[0]), int(destination[1]))
    if environment is not None:
        environment.record_position(agent.id, agent.position)

    return [AgentMoved(
        agent_id=agent.id,
        task_id=task_id,
        origin=origin,
        destination=agent.position,
        distance=distance
    )]
