"""CSV event log for the disaster response simulation."""

import csv
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..model.events import SimulationEvent, SimulationState


class CSVWriter:
    """
    Streams every event of the run to a CSV file, one row per event.

    Output format:
        step,timestamp,kind,agent_id,task_id,resource,detail
        1,2024-05-01T12:00:00,moved,Medical_1,2,,Agent Medical_1 moved to location (2, 2)
        1,2024-05-01T12:00:00,assisted,Medical_1,2,,MedicalAgent Medical_1 providing ...
    """

    FIELDNAMES = ['step', 'timestamp', 'kind', 'agent_id', 'task_id', 'resource', 'detail']

    def __init__(self, output_path: Path):
        self.output_path = Path(output_path)
        self.file = None
        self.writer: Optional[csv.DictWriter] = None
        self.rows_written = 0

    @property
    def is_open(self) -> bool:
        return self.file is not None

    def open(self) -> None:
        """Create the file (and its directory) and write the header."""
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.file = open(self.output_path, 'w', newline='')
        self.writer = csv.DictWriter(self.file, fieldnames=self.FIELDNAMES)
        self.writer.writeheader()

    def write_events(self, step: int, timestamp: datetime,
                     events: Iterable["SimulationEvent"]) -> None:
        """Write a batch of events stamped with a step number and time."""
        if not self.is_open:
            self.open()
        stamp = timestamp.isoformat(timespec='seconds')
        for event in events:
            row = event.to_row()
            row['step'] = step
            row['timestamp'] = stamp
            self.writer.writerow(row)
            self.rows_written += 1
        self.file.flush()

    def append(self, state: "SimulationState") -> None:
        """Write the events of one step."""
        self.write_events(state.step, state.timestamp, state.events)

    def close(self) -> None:
        if self.file:
            self.file.close()
            self.file = None
            self.writer = None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
