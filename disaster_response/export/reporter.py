"""Summary report generation for the disaster response simulation."""

from typing import List, Dict, Optional, TYPE_CHECKING
from pathlib import Path

if TYPE_CHECKING:
    from ..model.events import SimulationState


class Reporter:
    """Generates summary statistics and formatted text report."""

    def __init__(self, config_path: str, seed: Optional[int]):
        self.config_path = config_path
        self.seed = seed
        self.step_metrics: List[Dict] = []
        self.peak_queue = 0
        self.peak_critical = 0
        self.restock_steps = 0

    def update(self, state: "SimulationState") -> None:
        """Accumulate metrics per step."""
        self.step_metrics.append(state.metrics.copy())

        queued = int(state.metrics.get('tasks_queued', 0))
        critical = int(state.metrics.get('critical_tasks', 0))
        self.peak_queue = max(self.peak_queue, queued)
        self.peak_critical = max(self.peak_critical, critical)

        if any(e.kind == 'replenished' for e in state.events):
            self.restock_steps += 1

    def generate_summary(self, final_state: "SimulationState",
                         output_dir: Path,
                         csv_enabled: bool,
                         snapshot_enabled: bool,
                         gif_enabled: bool) -> str:
        """Returns formatted text report."""
        metrics = final_state.metrics
        allocations = int(metrics.get('allocations', 0))
        unavailable = int(metrics.get('unavailable', 0))
        attempts = allocations + unavailable
        success_pct = (allocations / attempts * 100) if attempts > 0 else 0

        lines = [
            "",
            "=" * 80,
            "                    DISASTER RESPONSE SIMULATION REPORT",
            "=" * 80,
            f"Configuration: {self.config_path}",
            f"Random Seed: {self.seed if self.seed is not None else 'None (random)'}",
            "",
            "SIMULATION METRICS",
            "-" * 40,
            f"Total Steps:           {final_state.step}",
            f"Tasks Queued:          {int(metrics.get('tasks_queued', 0))} "
            f"(peak {self.peak_queue}, critical peak {self.peak_critical})",
            f"Tasks Injected:        {int(metrics.get('injected', 0))}",
            f"Tasks Retired:         {int(metrics.get('retired', 0))}",
            f"Agent Moves:           {int(metrics.get('moves', 0))}",
            f"Allocations:           {allocations} / {attempts} ({success_pct:.1f}%)",
            f"Replenishments:        {int(metrics.get('replenishments', 0))} "
            f"in {self.restock_steps} steps ({final_state.restock_time:.1f}s restocking)",
            f"Assists:               {int(metrics.get('assists', 0))}",
            f"Negotiations:          {int(metrics.get('negotiations_succeeded', 0))} ok, "
            f"{int(metrics.get('negotiations_failed', 0))} failed",
            f"Rejected Tasks:        {int(metrics.get('rejected', 0))}",
            "",
            "FINAL AGENT STATE",
            "-" * 40,
        ]

        for agent in final_state.agents:
            if agent.role == 'transport':
                detail = ", ".join(f"{k}={v}" for k, v in sorted(agent.resources.items()))
            else:
                detail = f"expertise={agent.expertise}"
            lines.append(f"{agent.agent_id:<20} {agent.role:<10} ({agent.x}, {agent.y})  {detail}")

        lines += [
            "",
            "OUTPUT FILES",
            "-" * 40,
        ]

        # Output file paths
        if csv_enabled:
            lines.append(f"CSV Log:    {output_dir / 'event_log.csv'}")
        else:
            lines.append("CSV Log:    (disabled)")

        if snapshot_enabled:
            lines.append(f"Snapshot:   {output_dir / 'final_state.png'}")
        else:
            lines.append("Snapshot:   (disabled)")

        if gif_enabled:
            lines.append(f"Animation:  {output_dir / 'simulation.gif'}")
        else:
            lines.append("Animation:  (disabled)")

        lines.append("=" * 80)

        return "\n".join(lines)
