"""Text enhancement with model fallback and heuristic quality validation."""

__version__ = "0.1.0"
