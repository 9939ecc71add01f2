"""Planner: task/habit planning with integrated time tracking"""

__version__ = "1.0.0"
