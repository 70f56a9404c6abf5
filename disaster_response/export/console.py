"""Plain-text rendering of simulation steps."""

import sys
from typing import List, Optional, TextIO, TYPE_CHECKING

if TYPE_CHECKING:
    from ..model.events import SimulationState


class ConsoleRenderer:
    """Prints a banner, a timestamp and one line per event for each step."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout

    def format_step(self, state: "SimulationState") -> List[str]:
        lines = [
            "",
            f"=== Step {state.step} ===",
            f"Timestamp: {state.timestamp.isoformat(sep=' ', timespec='seconds')}",
        ]
        lines.extend(event.describe() for event in state.events)
        return lines

    def render(self, state: "SimulationState") -> None:
        print("\n".join(self.format_step(state)), file=self.stream)
