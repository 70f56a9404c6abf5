"""Model package for the disaster response simulation."""

from .task import MalformedTaskError, Priority, Task, TaskType, prioritize_tasks
from .environment import DisasterEnvironment
from .agent import DisasterAgent, MedicalAgent, TransportAgent
from .movement import manhattan_distance, move_agent
from .behaviors import allocate_resources, assist, communicate, negotiate, replenish_resources
from .rules import SimulationRules
from .events import AgentSnapshot, SimulationEvent, SimulationState, TaskSnapshot
from .engine import SimulationEngine, simulate

__all__ = [
    'MalformedTaskError',
    'Priority',
    'Task',
    'TaskType',
    'prioritize_tasks',
    'DisasterEnvironment',
    'DisasterAgent',
    'MedicalAgent',
    'TransportAgent',
    'manhattan_distance',
    'move_agent',
    'allocate_resources',
    'assist',
    'communicate',
    'negotiate',
    'replenish_resources',
    'SimulationRules',
    'AgentSnapshot',
    'SimulationEvent',
    'SimulationState',
    'TaskSnapshot',
    'SimulationEngine',
    'simulate',
]
