"""Prio Router - Eisenhower task classification with confidence-driven model escalation."""

__version__ = "0.1.0"
