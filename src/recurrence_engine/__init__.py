"""Recurrence & series engine for auto-scheduled habits and recurring tasks."""

__version__ = "0.1.0"
