"""Domain errors raised by the services; routes translate them to HTTP statuses."""


class TaskManagerError(Exception):
    """Base class for errors the API turns into client-facing responses."""

    status_code = 400
    message = "Request failed."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class InvalidCredentialsError(TaskManagerError):
    # Same message for unknown user and wrong password
    status_code = 401
    message = "Invalid credentials"


class DuplicateUsernameError(TaskManagerError):
    status_code = 409
    message = "Username already exists"


class PushNotConfiguredError(TaskManagerError):
    status_code = 503
    message = "VAPID keys not configured"
