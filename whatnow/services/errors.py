class TaskError(Exception):
    """Base class for task lifecycle failures."""


class ValidationError(TaskError):
    """Malformed input: empty text, bad id list, foreign id in a reorder."""


class NotFoundError(TaskError):
    """
    Unknown id, another owner's id, or a task in the wrong lifecycle state.
    The message never says which of these it was.
    """

    def __init__(self, message: str = "Task not found"):
        super().__init__(message)


class StoreError(TaskError):
    """Transaction or connectivity failure; nothing was committed."""
