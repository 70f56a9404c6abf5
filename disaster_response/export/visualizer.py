"""Visualization and export for the disaster response simulation."""

import numpy as np
import matplotlib
matplotlib.use('Agg')  # Use non-interactive backend
import matplotlib.pyplot as plt
from pathlib import Path
from typing import List, TYPE_CHECKING
from PIL import Image
import io

if TYPE_CHECKING:
    from ..model.events import SimulationState


class Visualizer:
    """
    Generates visual outputs using matplotlib.

    Supports:
    - Single PNG snapshots
    - Animated GIF compilation
    """

    # Color scheme
    COLORS = {
        'floor': '#ECF0F1',      # Light gray
        'gridline': '#BDC3C7',
        'deliver': '#F39C12',    # Orange
        'assist': '#27AE60',     # Green
        'critical': '#C0392B',   # Dark red outline
        'transport': '#3498DB',  # Blue
        'medical': '#E74C3C',    # Red
    }

    def __init__(self, grid_width: int, grid_height: int):
        self.width = grid_width
        self.height = grid_height
        self.frames: List[Image.Image] = []

    def _create_figure(self, state: "SimulationState") -> plt.Figure:
        """Create matplotlib figure for state visualization."""
        aspect = self.width / self.height
        fig_height = 6
        fig_width = max(6, fig_height * aspect)
        fig, ax = plt.subplots(figsize=(fig_width, fig_height))

        ax.set_facecolor(self.COLORS['floor'])
        # Cells are 1-indexed; draw boundaries between them
        ax.set_xticks(np.arange(0.5, self.width + 1, 1), minor=True)
        ax.set_yticks(np.arange(0.5, self.height + 1, 1), minor=True)
        ax.grid(which='minor', color=self.COLORS['gridline'], linewidth=0.5)

        # Draw tasks
        for task in state.tasks:
            edge = self.COLORS['critical'] if task.priority == 'critical' else 'black'
            ax.plot(task.x, task.y, 's', color=self.COLORS[task.task_type],
                    markersize=14, markeredgecolor=edge,
                    markeredgewidth=2 if task.priority == 'critical' else 0.5,
                    alpha=0.6)

        # Draw agents, nudged apart so co-located agents stay visible
        for i, agent in enumerate(state.agents):
            offset = 0.15 * ((i % 3) - 1)
            ax.plot(agent.x + offset, agent.y, 'o', color=self.COLORS[agent.role],
                    markersize=8, markeredgecolor='white', markeredgewidth=0.5)
            ax.annotate(agent.agent_id, (agent.x + offset, agent.y),
                        textcoords='offset points', xytext=(4, 6), fontsize=7)

        ax.set_title(f'Step {state.step} | Tasks: {len(state.tasks)} | '
                     f'Allocations: {int(state.metrics.get("allocations", 0))} | '
                     f'Assists: {int(state.metrics.get("assists", 0))}')
        ax.set_xlabel('X')
        ax.set_ylabel('Y')

        ax.set_xlim(0.5, self.width + 0.5)
        ax.set_ylim(0.5, self.height + 0.5)
        ax.set_aspect('equal')

        legend_elements = [
            plt.Line2D([0], [0], marker='o', color='w', label='Transport',
                       markerfacecolor=self.COLORS['transport'], markersize=8),
            plt.Line2D([0], [0], marker='o', color='w', label='Medical',
                       markerfacecolor=self.COLORS['medical'], markersize=8),
            plt.Line2D([0], [0], marker='s', color='w', label='Deliver task',
                       markerfacecolor=self.COLORS['deliver'], markersize=8),
            plt.Line2D([0], [0], marker='s', color='w', label='Assist task',
                       markerfacecolor=self.COLORS['assist'], markersize=8),
        ]
        ax.legend(handles=legend_elements, loc='upper right', fontsize=8)

        plt.tight_layout()
        return fig

    def buffer_frame(self, state: "SimulationState") -> None:
        """Store frame for GIF generation."""
        fig = self._create_figure(state)

        # Convert to PIL Image
        buf = io.BytesIO()
        fig.savefig(buf, format='png', dpi=80)
        buf.seek(0)
        img = Image.open(buf).copy()
        self.frames.append(img)
        buf.close()
        plt.close(fig)

    def save_snapshot(self, state: "SimulationState", output_path: Path) -> None:
        """Save single PNG image of current state."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig = self._create_figure(state)
        fig.savefig(output_path, dpi=150, bbox_inches='tight')
        plt.close(fig)

    def generate_gif(self, output_path: Path, fps: int = 4) -> None:
        """Compile buffered frames into animated GIF."""
        if not self.frames:
            return

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        duration = int(1000 / fps)  # milliseconds per frame

        self.frames[0].save(
            output_path,
            save_all=True,
            append_images=self.frames[1:],
            duration=duration,
            loop=0
        )
