"""Hisaab: personal finance tracking with a pure calculation engine."""

__version__ = "0.1.0"
