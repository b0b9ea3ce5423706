"""Domain errors raised by the Zenith API layer."""


class ZenithError(Exception):
    """Base class for every error the CLI reports to the user."""


class ProfileNotFound(ZenithError):
    def __init__(self, user_id: str):
        super().__init__(f"No profile for user '{user_id}'. Run 'zenith init' first.")
        self.user_id = user_id


class ProfileExists(ZenithError):
    def __init__(self, user_id: str):
        super().__init__(f"A profile for user '{user_id}' already exists.")
        self.user_id = user_id


class TaskNotFound(ZenithError):
    def __init__(self, task_id: str):
        super().__init__(f"Task '{task_id}' not found.")
        self.task_id = task_id


class ProjectNotFound(ZenithError):
    def __init__(self, project_id: str):
        super().__init__(f"Project '{project_id}' not found.")
        self.project_id = project_id


class SubtaskNotFound(ZenithError):
    def __init__(self, task_id: str, subtask_id: str):
        super().__init__(f"Subtask '{subtask_id}' not found on task '{task_id}'.")
        self.task_id = task_id
        self.subtask_id = subtask_id


class AlreadyCompleted(ZenithError):
    def __init__(self, task_id: str):
        super().__init__(f"Task '{task_id}' is already completed.")
        self.task_id = task_id


class TransactionConflict(ZenithError):
    """A document read inside a transaction changed before commit."""


class InvalidTaskError(ZenithError):
    pass


class StoreError(ZenithError):
    pass


class AIProviderError(ZenithError):
    pass
