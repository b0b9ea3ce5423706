"""
Zenith API layer package.
Domain models, the completion engine and the document store port.
"""

from .completion import CompletionResult, complete_task
from .data_models import Frequency, Priority, Profile, Project, Recurrence, Subtask, Task, TaskPatch
from .levels import level_for_points, level_progress
from .store import MemoryStore, Transaction
from .task_operations import TaskService

__all__ = [
    'CompletionResult',
    'complete_task',
    'Frequency',
    'Priority',
    'Profile',
    'Project',
    'Recurrence',
    'Subtask',
    'Task',
    'TaskPatch',
    'level_for_points',
    'level_progress',
    'MemoryStore',
    'Transaction',
    'TaskService',
]
