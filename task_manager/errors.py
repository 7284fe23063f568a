"""Error taxonomy for task operations.

Every failure surfaces to HTTP callers as ``{"message": ...}`` with the
status code carried by the exception.
"""


class TaskManagerError(Exception):
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class Unauthorized(TaskManagerError):
    status_code = 401


class InvalidInput(TaskManagerError):
    status_code = 400


class NotFound(TaskManagerError):
    status_code = 404


class Internal(TaskManagerError):
    status_code = 500

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message)
