"""Errors raised while deploying an ECS Express service."""

from botocore.exceptions import ClientError


class DeploymentError(RuntimeError):
    """Base error for a failed deployment invocation."""


class ValidationError(DeploymentError):
    """Raised when deployment inputs are missing or malformed."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class RemoteRequestError(DeploymentError):
    """Raised when a create, update or tagging request is rejected."""


class StabilizationFailure(DeploymentError):
    """Raised when the service or its deployment reaches a bad terminal state."""


class StabilizationTimeout(DeploymentError):
    """Raised when the service does not stabilise within the wait ceiling."""


def error_code(exc: ClientError) -> str:
    """Return the AWS error code carried by a client error."""
    return str(exc.response.get("Error", {}).get("Code", ""))


def error_message(exc: ClientError) -> str:
    """Return the AWS error message, falling back to the exception text."""
    message = exc.response.get("Error", {}).get("Message")
    return str(message) if message else str(exc)
