"""Zenith List: tasks, projects, streaks and levels from the command line."""

__version__ = "1.0.0"
