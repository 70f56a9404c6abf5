"""I/O package for the disaster response simulation."""

from .console import ConsoleRenderer
from .csv_writer import CSVWriter
from .visualizer import Visualizer
from .reporter import Reporter

__all__ = ['ConsoleRenderer', 'CSVWriter', 'Visualizer', 'Reporter']
