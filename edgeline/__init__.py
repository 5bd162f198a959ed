"""Edgeline: encirclement rules engine and heuristic opponent AI."""

__version__ = "1.0.0"
