"""Discrete-time multi-agent disaster response simulation."""

__version__ = "0.1.0"
