import unittest
from datetime import datetime

import numpy as np

from disaster_response.model.agent import MedicalAgent, TransportAgent
from disaster_response.model.engine import SimulationEngine, simulate
from disaster_response.model.environment import DisasterEnvironment
from disaster_response.model.events import (
    AgentMoved,
    AssistanceProvided,
    MessageSent,
    NegotiationSucceeded,
    ResourceAllocated,
    TaskAdded,
    TaskRejected,
    TaskRetired,
)
from disaster_response.model.rules import SimulationRules
from disaster_response.model.task import Priority, Task, TaskType


FIXED_TIME = datetime(2024, 5, 1, 12, 0, 0)


def scenario():
    tasks = [
        Task.from_dict({"location": (7, 7), "type": "deliver", "resource": "food"}),
        Task.from_dict({"location": (2, 2), "type": "assist", "priority": "critical"}),
    ]
    env = DisasterEnvironment(10, 10, tasks)
    agents = [
        TransportAgent("T1", (1, 1), {"food": 10, "medicine": 5}),
        MedicalAgent("M1", (5, 5), "emergency"),
    ]
    return env, agents


class TestEndToEnd(unittest.TestCase):
    def test_single_step(self):
        env, agents = scenario()
        transport, medic = agents
        states = simulate(env, agents, 1, seed=0)

        self.assertEqual(len(states), 1)
        state = states[0]

        # critical assist task sorted ahead of the deliver task
        self.assertEqual(env.tasks[0].task_type, TaskType.ASSIST)
        self.assertEqual(env.tasks[1].task_type, TaskType.DELIVER)

        self.assertEqual(medic.position, (2, 2))
        self.assertEqual(transport.position, (7, 7))
        self.assertEqual(transport.resources, {"food": 9, "medicine": 5})

        kinds = [type(e) for e in state.events]
        self.assertEqual(kinds, [AgentMoved, AssistanceProvided, AgentMoved, ResourceAllocated])
        self.assertEqual(state.events[0].agent_id, "M1")
        self.assertEqual(state.events[2].agent_id, "T1")
        # moves name the task that drew the agent there
        self.assertEqual(state.events[0].task_id, 2)
        self.assertEqual(state.events[2].task_id, 1)

        self.assertEqual(env.agent_positions, {"T1": (7, 7), "M1": (2, 2)})

    def test_tasks_repeat_every_step_by_default(self):
        env, agents = scenario()
        transport = agents[0]
        states = simulate(env, agents, 2, seed=0)

        # second step: already on site, so no moves, but food is spent again
        self.assertEqual(transport.resources["food"], 8)
        self.assertEqual(states[1].events_of(AgentMoved), [])
        self.assertEqual(len(env.tasks), 2)


class TestInjection(unittest.TestCase):
    def test_two_tasks_in_six_steps(self):
        env = DisasterEnvironment(4, 7)
        states = simulate(env, [], 6, seed=123)

        self.assertEqual(len(env.tasks), 2)
        added_steps = [s.step for s in states if s.events_of(TaskAdded)]
        self.assertEqual(added_steps, [3, 6])

        for task in env.tasks:
            x, y = task.location
            self.assertTrue(1 <= x <= 4)
            self.assertTrue(1 <= y <= 7)
            self.assertEqual(task.resource, "food")
            self.assertIn(task.task_type, list(TaskType))
            self.assertIn(task.priority, list(Priority))

    def test_locations_always_in_bounds(self):
        env = DisasterEnvironment(3, 2)
        simulate(env, [], 300, seed=7)

        self.assertEqual(len(env.tasks), 100)
        for task in env.tasks:
            self.assertTrue(env.contains(task.location))

    def test_seed_is_reproducible(self):
        env_a = DisasterEnvironment(10, 10)
        env_b = DisasterEnvironment(10, 10)
        simulate(env_a, [], 9, seed=42)
        simulate(env_b, [], 9, rng=np.random.default_rng(42))

        self.assertEqual(
            [(t.location, t.task_type, t.priority) for t in env_a.tasks],
            [(t.location, t.task_type, t.priority) for t in env_b.tasks]
        )

    def test_custom_interval(self):
        env = DisasterEnvironment(5, 5)
        simulate(env, [], 6, rules=SimulationRules(injection_interval=2), seed=1)
        self.assertEqual(len(env.tasks), 3)

    def test_injected_ids_continue_sequence(self):
        env, agents = scenario()
        simulate(env, agents, 3, seed=5)
        self.assertEqual(sorted(t.task_id for t in env.tasks), [1, 2, 3])


class TestEngine(unittest.TestCase):
    def test_duplicate_ids_rejected(self):
        env = DisasterEnvironment(5, 5)
        with self.assertRaises(ValueError):
            SimulationEngine(env, [
                MedicalAgent("A", (1, 1), "general"),
                TransportAgent("A", (2, 2), {}),
            ])

    def test_unmatched_pairs_are_skipped(self):
        env = DisasterEnvironment(5, 5, [Task((3, 3), TaskType.ASSIST)])
        transport = TransportAgent("T1", (1, 1), {"food": 2})
        engine = SimulationEngine(env, [transport], seed=0)
        state = engine.step()

        self.assertEqual(state.events, [])
        self.assertEqual(transport.position, (1, 1))
        self.assertEqual(transport.resources, {"food": 2})

    def test_malformed_task_becomes_rejection_event(self):
        task = Task((3, 3), TaskType.DELIVER, resource="food")
        task.resource = None
        env = DisasterEnvironment(5, 5, [task, Task((4, 4), TaskType.ASSIST)])
        medic = MedicalAgent("M1", (1, 1), "general")
        engine = SimulationEngine(env, [TransportAgent("T1", (1, 1), {"food": 2}), medic], seed=0)

        state = engine.step()

        rejected = state.events_of(TaskRejected)
        self.assertEqual(len(rejected), 1)
        self.assertEqual(rejected[0].agent_id, "T1")
        self.assertEqual(rejected[0].task_id, 1)
        # the run carried on with the next task
        self.assertEqual(medic.position, (4, 4))
        self.assertEqual(len(state.events_of(AssistanceProvided)), 1)

    def test_retire_completed_tasks(self):
        env, agents = scenario()
        rules = SimulationRules(retire_completed_tasks=True)
        states = simulate(env, agents, 2, rules=rules, seed=0)

        retired = states[0].events_of(TaskRetired)
        self.assertEqual(sorted(e.task_id for e in retired), [1, 2])
        self.assertEqual(env.tasks, [])
        self.assertEqual(agents[0].resources["food"], 9)
        self.assertEqual(states[1].events, [])

    def test_retire_tasks_with_equal_fields(self):
        env = DisasterEnvironment(5, 5)
        # two distinct queue entries that compare equal field by field
        twins = [Task((2, 2), TaskType.ASSIST, task_id=7),
                 Task((2, 2), TaskType.ASSIST, task_id=7)]
        env.tasks.extend(twins)
        engine = SimulationEngine(env, [MedicalAgent("M1", (1, 1), "general")],
                                  rules=SimulationRules(retire_completed_tasks=True), seed=0)
        state = engine.step()

        self.assertEqual(env.tasks, [])
        self.assertEqual(len(state.events_of(TaskRetired)), 2)
        self.assertTrue(all(t.completed for t in twins))

    def test_failed_allocation_is_not_retired(self):
        env = DisasterEnvironment(5, 5, [Task((2, 2), TaskType.DELIVER, resource="food")])
        transport = TransportAgent("T1", (1, 1), {"food": 0})
        engine = SimulationEngine(env, [transport],
                                  rules=SimulationRules(retire_completed_tasks=True), seed=0)
        engine.step()

        self.assertEqual(len(env.tasks), 1)
        self.assertFalse(env.tasks[0].completed)
        self.assertEqual(transport.resources["food"], 5)

    def test_restock_time_accumulates(self):
        env = DisasterEnvironment(5, 5, [Task((1, 1), TaskType.DELIVER, resource="food")])
        transport = TransportAgent("T1", (1, 1), {"food": 0})
        engine = SimulationEngine(env, [transport],
                                  rules=SimulationRules(replenish_delay=2.5), seed=0)
        state = engine.step()

        self.assertEqual(state.restock_time, 2.5)
        self.assertEqual(state.metrics['replenishments'], 1)
        self.assertEqual(state.metrics['unavailable'], 1)

    def test_negotiate_through_engine(self):
        env, agents = scenario()
        engine = SimulationEngine(env, agents, seed=0, clock=lambda: FIXED_TIME)

        events = engine.negotiate("M1", "T1", "medicine")
        self.assertIsInstance(events[0], NegotiationSucceeded)
        self.assertEqual(agents[0].resources["medicine"], 4)

        state = engine.step()
        self.assertIs(state.events[0], events[0])
        self.assertEqual(state.metrics['negotiations_succeeded'], 1)
        self.assertEqual(state.timestamp, FIXED_TIME)

    def test_negotiate_checks_roles(self):
        env, agents = scenario()
        engine = SimulationEngine(env, agents, seed=0)
        with self.assertRaises(TypeError):
            engine.negotiate("T1", "M1", "food")
        with self.assertRaises(KeyError):
            engine.negotiate("M9", "T1", "food")

    def test_communicate_through_engine(self):
        env, agents = scenario()
        engine = SimulationEngine(env, agents, seed=0)
        events = engine.communicate("T1", "M1", "en route")
        self.assertIsInstance(events[0], MessageSent)
        self.assertEqual(engine.step().events_of(MessageSent), events)

    def test_flush_events_after_last_step(self):
        env, agents = scenario()
        engine = SimulationEngine(env, agents, seed=0, max_steps=1)
        list(engine.run())

        events = engine.negotiate("M1", "T1", "medicine")
        events += engine.communicate("M1", "T1", "thanks")

        flushed = engine.flush_events()
        self.assertEqual(flushed, events)
        self.assertEqual(engine.flush_events(), [])
        self.assertEqual(engine.counters["negotiations_succeeded"], 1)

    def test_run_respects_max_steps(self):
        env, agents = scenario()
        engine = SimulationEngine(env, agents, seed=0, max_steps=4)
        self.assertEqual(len(list(engine.run(steps=2))), 2)
        self.assertEqual(len(list(engine.run())), 2)
        self.assertTrue(engine.is_finished())
        self.assertEqual(list(engine.run()), [])

    def test_run_without_bound_raises(self):
        env, agents = scenario()
        engine = SimulationEngine(env, agents, seed=0)
        with self.assertRaises(ValueError):
            list(engine.run())

    def test_summary(self):
        env, agents = scenario()
        engine = SimulationEngine(env, agents, seed=0, max_steps=3)
        list(engine.run())
        summary = engine.get_summary()

        self.assertEqual(summary['total_steps'], 3)
        self.assertEqual(summary['allocations'], 3)
        self.assertEqual(summary['injected'], 1)
        self.assertEqual(summary['inventories'], {"T1": {"food": 7, "medicine": 5}})

    def test_zero_steps(self):
        env, agents = scenario()
        self.assertEqual(simulate(env, agents, 0), [])


class TestEnvironment(unittest.TestCase):
    def test_rejects_bad_size(self):
        with self.assertRaises(ValueError):
            DisasterEnvironment(0, 5)

    def test_task_ids_are_unique_and_contiguous(self):
        env = DisasterEnvironment(5, 5)
        env.add_task(Task((1, 1), TaskType.ASSIST))
        env.add_task(Task((2, 2), TaskType.ASSIST))

        with self.assertRaises(ValueError):
            env.add_task(Task((3, 3), TaskType.ASSIST, task_id=1))

        env.add_task(Task((4, 4), TaskType.ASSIST))
        self.assertEqual([t.task_id for t in env.tasks], [1, 2, 3])

    def test_explicit_task_ids(self):
        env = DisasterEnvironment(5, 5)
        env.add_task(Task((1, 1), TaskType.ASSIST, task_id=10))
        env.add_task(Task((1, 1), TaskType.ASSIST))
        self.assertEqual([t.task_id for t in env.tasks], [10, 11])

        # a lower free id does not move the counter
        env.add_task(Task((1, 1), TaskType.ASSIST, task_id=4))
        env.add_task(Task((1, 1), TaskType.ASSIST))
        self.assertEqual([t.task_id for t in env.tasks], [10, 11, 4, 12])

    def test_retired_id_can_be_reused(self):
        env = DisasterEnvironment(5, 5, [Task((1, 1), TaskType.ASSIST)])
        env.remove_tasks(list(env.tasks))
        env.add_task(Task((2, 2), TaskType.ASSIST, task_id=1))
        self.assertEqual([t.task_id for t in env.tasks], [1])

    def test_contains(self):
        env = DisasterEnvironment(3, 4)
        self.assertTrue(env.contains((1, 1)))
        self.assertTrue(env.contains((3, 4)))
        self.assertFalse(env.contains((0, 1)))
        self.assertFalse(env.contains((4, 4)))


if __name__ == '__main__':
    unittest.main()
