"""Configuration dataclasses and YAML loader for the disaster response simulation."""

from dataclasses import dataclass, field
from typing import List, Tuple, Dict, Any, Optional
from pathlib import Path
import yaml

from .model.rules import SimulationRules
from .model.task import Task


@dataclass
class GridConfig:
    width: int
    height: int


@dataclass
class AgentSpec:
    agent_id: str
    role: str  # "transport" or "medical"
    position: Tuple[int, int]
    resources: Dict[str, int] = field(default_factory=dict)
    expertise: str = "general"


@dataclass
class SimulationConfig:
    grid: GridConfig
    max_steps: int
    tasks: List[Task]
    agents: List[AgentSpec]
    rules: SimulationRules = field(default_factory=SimulationRules)

    # Export flags (can be overridden by CLI)
    csv_enabled: bool = True
    snapshot_enabled: bool = True
    gif_enabled: bool = False
    quiet: bool = False
    seed: Optional[int] = None
    out_dir: Path = field(default_factory=lambda: Path("./output"))


ROLES = ("transport", "medical")


def _parse_agents(agents_raw: List[Dict]) -> List[AgentSpec]:
    """Parse agent roster from raw YAML data."""
    agents = []
    seen = set()
    for a in agents_raw:
        agent_id = str(a['id'])
        if agent_id in seen:
            raise ValueError(f"Duplicate agent id: {agent_id}")
        seen.add(agent_id)

        role = a['role'].lower()
        if role not in ROLES:
            raise ValueError(f"Unknown agent role: {a['role']}")

        agents.append(AgentSpec(
            agent_id=agent_id,
            role=role,
            position=tuple(a['position']),
            resources={k: int(v) for k, v in (a.get('resources') or {}).items()},
            expertise=a.get('expertise', 'general')
        ))
    return agents


def _parse_rules(rules_raw: Dict[str, Any]) -> SimulationRules:
    """Parse scheduling rules, falling back to defaults."""
    defaults = SimulationRules()
    return SimulationRules(
        injection_interval=rules_raw.get('injection_interval', defaults.injection_interval),
        injection_resource=rules_raw.get('injection_resource', defaults.injection_resource),
        replenish_amount=rules_raw.get('replenish_amount', defaults.replenish_amount),
        replenish_delay=rules_raw.get('replenish_delay', defaults.replenish_delay),
        retire_completed_tasks=rules_raw.get('retire_completed_tasks',
                                             defaults.retire_completed_tasks)
    )


def load_config(config_path: Path) -> SimulationConfig:
    """Load and validate YAML configuration file."""
    with open(config_path) as f:
        raw = yaml.safe_load(f)

    # Parse grid config
    grid = GridConfig(
        width=raw['grid']['width'],
        height=raw['grid']['height']
    )
    if grid.width <= 0 or grid.height <= 0:
        raise ValueError(f"Grid size must be positive, got {grid.width}x{grid.height}")

    # Tasks raise MalformedTaskError (a ValueError) on bad records
    tasks = [Task.from_dict(t) for t in raw.get('tasks') or []]

    agents = _parse_agents(raw.get('agents') or [])

    rules = _parse_rules(raw.get('rules') or {})

    sim_raw = raw.get('simulation') or {}

    # Parse export config (optional)
    export_raw = raw.get('export') or {}

    return SimulationConfig(
        grid=grid,
        max_steps=sim_raw.get('max_steps', 50),
        tasks=tasks,
        agents=agents,
        rules=rules,
        csv_enabled=export_raw.get('csv', True),
        snapshot_enabled=export_raw.get('snapshot', True),
        gif_enabled=export_raw.get('gif', False),
        seed=sim_raw.get('seed')
    )
