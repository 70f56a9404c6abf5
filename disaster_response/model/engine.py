"""Simulation engine for the disaster response scenario."""

import dataclasses
import numpy as np
from datetime import datetime
from typing import Callable, Dict, Iterable, Iterator, List, Optional, TYPE_CHECKING

from .agent import DisasterAgent, MedicalAgent, TransportAgent
from .behaviors import communicate as _communicate, negotiate as _negotiate
from .environment import DisasterEnvironment
from .events import (
    AgentMoved,
    AssistanceProvided,
    NegotiationFailed,
    NegotiationSucceeded,
    ResourceAllocated,
    ResourcesReplenished,
    ResourceUnavailable,
    SimulationEvent,
    SimulationState,
    TaskAdded,
    TaskRejected,
    TaskRetired,
    TaskSnapshot,
)
from .movement import move_agent
from .rules import SimulationRules
from .task import MalformedTaskError, Priority, Task, TaskType, prioritize_tasks

if TYPE_CHECKING:
    from ..config import AgentSpec, SimulationConfig


# Events that count as a task being served
_SERVED = (ResourceAllocated, AssistanceProvided)

# Cumulative counters exposed in every snapshot's metrics
_COUNTED = {
    'moves': AgentMoved,
    'allocations': ResourceAllocated,
    'unavailable': ResourceUnavailable,
    'replenishments': ResourcesReplenished,
    'assists': AssistanceProvided,
    'negotiations_succeeded': NegotiationSucceeded,
    'negotiations_failed': NegotiationFailed,
    'injected': TaskAdded,
    'rejected': TaskRejected,
    'retired': TaskRetired,
}


class SimulationEngine:
    """
    Orchestrates the discrete-time response loop.

    Each step:
    1. Put critical tasks first (stable)
    2. Walk tasks, then agents: every agent that handles a task moves to it
       and performs it
    3. Optionally retire tasks that were served
    4. Every `injection_interval` steps, add a random task
    5. Return a state snapshot with the step's events
    """

    def __init__(self, environment: DisasterEnvironment,
                 agents: Iterable[DisasterAgent],
                 rules: Optional[SimulationRules] = None,
                 rng: Optional[np.random.Generator] = None,
                 seed: Optional[int] = None,
                 max_steps: Optional[int] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        self.environment = environment
        self.rules = rules or SimulationRules()
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.max_steps = max_steps
        self.clock = clock or datetime.now
        self.current_step = 0
        self.restock_time = 0.0

        self.agents: List[DisasterAgent] = []
        self.roster: Dict[str, DisasterAgent] = {}
        for agent in agents:
            if agent.id in self.roster:
                raise ValueError(f"Duplicate agent id: {agent.id}")
            self.agents.append(agent)
            self.roster[agent.id] = agent
            self.environment.record_position(agent.id, agent.position)

        # Events from calls made between steps, reported with the next step
        self._pending_events: List[SimulationEvent] = []
        self.counters: Dict[str, int] = {name: 0 for name in _COUNTED}

    @classmethod
    def from_config(cls, config: "SimulationConfig",
                    clock: Optional[Callable[[], datetime]] = None) -> "SimulationEngine":
        """Build environment, roster and rules from a loaded configuration."""
        # Copy tasks so the config can be reused for another run
        tasks = [dataclasses.replace(t) for t in config.tasks]
        environment = DisasterEnvironment(config.grid.width, config.grid.height, tasks)
        agents = [_build_agent(spec) for spec in config.agents]
        return cls(
            environment,
            agents,
            rules=config.rules,
            seed=config.seed,
            max_steps=config.max_steps,
            clock=clock
        )

    def step(self) -> SimulationState:
        """Execute one discrete time step."""
        self.current_step += 1
        timestamp = self.clock()

        events = self._pending_events
        self._pending_events = []

        # Phase 1: critical tasks first
        self.environment.tasks = prioritize_tasks(self.environment.tasks)

        # Phase 2: task-major, agent-minor matching
        served: List[Task] = []
        for task in self.environment.tasks:
            for agent in self.agents:
                if not agent.handles(task):
                    continue

                events += move_agent(agent, task.location, self.environment,
                                     task.task_id)
                try:
                    outcome = agent.perform(task, self.rules)
                except MalformedTaskError as e:
                    events.append(TaskRejected(
                        agent_id=agent.id,
                        task_id=task.task_id,
                        reason=str(e)
                    ))
                    continue

                events += outcome
                # identity, not equality: distinct tasks may share field values
                if (any(isinstance(e, _SERVED) for e in outcome)
                        and all(t is not task for t in served)):
                    served.append(task)

        # Phase 3: retire served tasks (off by default)
        if self.rules.retire_completed_tasks and served:
            events += self._retire(served)

        # Phase 4: periodic task injection
        if self.current_step % self.rules.injection_interval == 0:
            events += self._inject_task()

        self._tally(events)
        return self._create_state_snapshot(timestamp, events)

    def _retire(self, tasks: List[Task]) -> List[SimulationEvent]:
        for task in tasks:
            task.completed = True
        self.environment.remove_tasks(tasks)
        return [TaskRetired(task_id=t.task_id, resource=t.resource) for t in tasks]

    def _inject_task(self) -> List[SimulationEvent]:
        """Append a task with random location, type and priority."""
        task_types = list(TaskType)
        priorities = list(Priority)
        task = Task(
            location=self.environment.random_position(self.rng),
            task_type=task_types[int(self.rng.integers(len(task_types)))],
            resource=self.rules.injection_resource,
            priority=priorities[int(self.rng.integers(len(priorities)))]
        )
        self.environment.add_task(task)
        return [TaskAdded(
            task_id=task.task_id,
            resource=task.resource,
            location=task.location,
            task_type=task.task_type.value,
            priority=task.priority.value
        )]

    def negotiate(self, medical_id: str, transport_id: str,
                  resource: str) -> List[SimulationEvent]:
        """
        Let a medical agent request one unit of a resource from a transport agent.

        Not part of the per-step walk; callers trigger it explicitly. The
        events are returned and also reported with the next step, or by
        flush_events() once the run is over.
        """
        medical = self.roster[medical_id]
        transport = self.roster[transport_id]
        if not isinstance(medical, MedicalAgent):
            raise TypeError(f"Agent {medical_id} is not a medical agent")
        if not isinstance(transport, TransportAgent):
            raise TypeError(f"Agent {transport_id} is not a transport agent")

        events = _negotiate(medical, transport, resource)
        self._pending_events += events
        return events

    def communicate(self, sender_id: str, recipient_id: str,
                    message: str) -> List[SimulationEvent]:
        """Send a message between two agents of the roster."""
        events = _communicate(self.roster[sender_id], self.roster[recipient_id], message)
        self._pending_events += events
        return events

    def flush_events(self) -> List[SimulationEvent]:
        """
        Hand over events recorded since the last step and forget them.

        Negotiations or messages issued after the final step are never
        reported by a step; callers collect them here.
        """
        events = self._pending_events
        self._pending_events = []
        self._tally(events)
        return events

    def _tally(self, events: List[SimulationEvent]) -> None:
        for name, event_type in _COUNTED.items():
            self.counters[name] += sum(1 for e in events if isinstance(e, event_type))
        self.restock_time += sum(e.delay for e in events
                                 if isinstance(e, ResourcesReplenished))

    def _create_state_snapshot(self, timestamp: datetime,
                               events: List[SimulationEvent]) -> SimulationState:
        """Create snapshot of current simulation state."""
        tasks = self.environment.tasks
        task_snapshots = [
            TaskSnapshot(
                task_id=t.task_id,
                x=t.location[0],
                y=t.location[1],
                task_type=t.task_type.value,
                priority=t.priority.value,
                resource=t.resource
            )
            for t in tasks
        ]

        metrics = {
            'tasks_queued': len(tasks),
            'critical_tasks': sum(1 for t in tasks if t.is_critical),
            'restock_time': self.restock_time,
            **self.counters
        }

        return SimulationState(
            step=self.current_step,
            timestamp=timestamp,
            restock_time=self.restock_time,
            events=events,
            agents=[a.snapshot() for a in self.agents],
            tasks=task_snapshots,
            metrics=metrics
        )

    def is_finished(self) -> bool:
        """Check if simulation should terminate."""
        return self.max_steps is not None and self.current_step >= self.max_steps

    def run(self, steps: Optional[int] = None) -> Iterator[SimulationState]:
        """Yield states until `steps` more steps have run, or max_steps is reached."""
        if steps is None and self.max_steps is None:
            raise ValueError("run() needs a step count when max_steps is not set")
        target = None if steps is None else self.current_step + steps
        while not self.is_finished():
            if target is not None and self.current_step >= target:
                break
            yield self.step()

    def get_summary(self) -> Dict:
        """Get summary statistics for the simulation."""
        return {
            'total_steps': self.current_step,
            'tasks_queued': len(self.environment.tasks),
            'restock_time': self.restock_time,
            **self.counters,
            'inventories': {
                a.id: dict(a.resources) for a in self.agents
                if isinstance(a, TransportAgent)
            }
        }


def _build_agent(spec: "AgentSpec") -> DisasterAgent:
    if spec.role == "transport":
        return TransportAgent(spec.agent_id, spec.position, spec.resources)
    if spec.role == "medical":
        return MedicalAgent(spec.agent_id, spec.position, spec.expertise)
    raise ValueError(f"Unknown agent role: {spec.role}")


def simulate(environment: DisasterEnvironment,
             agents: Iterable[DisasterAgent],
             steps: int,
             rules: Optional[SimulationRules] = None,
             rng: Optional[np.random.Generator] = None,
             seed: Optional[int] = None) -> List[SimulationState]:
    """
    Run `steps` discrete steps.

    The environment and agents are mutated in place; the per-step states are
    returned in order.
    """
    engine = SimulationEngine(environment, agents, rules=rules, rng=rng,
                              seed=seed, max_steps=steps)
    return list(engine.run())
