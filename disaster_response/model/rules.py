"""Tunable scheduling rules for the disaster response simulation."""

from dataclasses import dataclass


@dataclass
class SimulationRules:
    injection_interval: int = 3       # add a random task every N steps
    injection_resource: str = "food"
    replenish_amount: int = 5         # units added per resource on restock
    replenish_delay: float = 1.0      # simulated seconds per restock
    retire_completed_tasks: bool = False

    def __post_init__(self):
        if self.injection_interval <= 0:
            raise ValueError(f"injection_interval must be positive, got {self.injection_interval}")
        if self.replenish_amount < 0:
            raise ValueError(f"replenish_amount must not be negative, got {self.replenish_amount}")
