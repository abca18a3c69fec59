"""Adaptive workout engine: difficulty, live adaptation, progression and substitution."""

__version__ = "0.1.0"
