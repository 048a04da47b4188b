"""Deployment error reporting for the CLI."""

from collections.abc import Iterator

from botocore.exceptions import (
    ClientError,
    EndpointConnectionError,
    NoCredentialsError,
    ProfileNotFound,
)
from rich.markup import escape

from ecs_express_deploy.cli.ui import console
from ecs_express_deploy.core.deployments.aws_ecs_express import ValidationError
from ecs_express_deploy.core.deployments.aws_ecs_express.errors import error_code

# Excludes AccessDenied, which signals missing permissions rather than bad credentials.
CREDENTIAL_ERROR_CODES = frozenset(
    {
        "ExpiredToken",
        "ExpiredTokenException",
        "InvalidClientTokenId",
        "InvalidSignatureException",
        "UnrecognizedClientException",
    }
)
EXPIRED_TOKEN_TEXT = "security token included in the request is expired"


def report_deploy_error(exc: Exception) -> None:
    """Render a deployment failure as a single message with guidance.

    Args:
        exc: Raised exception from the deployment.
    """
    if isinstance(exc, ValidationError):
        console.print(f"[red]{escape(str(exc))}[/red]")
        return

    if is_aws_auth_error(exc):
        console.print(
            "[red]AWS authentication failed. Your credentials are missing, invalid, "
            "or expired.[/red]"
        )
        console.print(
            "[dim]Configure credentials for the job (for example with OIDC role "
            "assumption) or set AWS_PROFILE, then retry.[/dim]"
        )
        return

    if is_aws_endpoint_error(exc):
        console.print("[red]Could not reach AWS endpoint from this environment.[/red]")
        console.print("[dim]Check network connectivity and AWS region configuration.[/dim]")
        return

    console.print(f"[red]{escape(str(exc))}[/red]")


def is_aws_auth_error(exc: BaseException) -> bool:
    """Return true when the failure or anything it was raised from is a credential problem."""
    return any(_is_credential_failure(item) for item in exception_chain(exc))


def is_aws_endpoint_error(exc: BaseException) -> bool:
    """Return true when the failure was caused by an unreachable AWS endpoint."""
    return any(isinstance(item, EndpointConnectionError) for item in exception_chain(exc))


def exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield the exception and each cause or context behind it, once each."""
    visited: set[int] = set()
    item: BaseException | None = exc
    while item is not None and id(item) not in visited:
        visited.add(id(item))
        yield item
        item = item.__cause__ or item.__context__


def _is_credential_failure(item: BaseException) -> bool:
    if isinstance(item, (NoCredentialsError, ProfileNotFound)):
        return True
    if isinstance(item, ClientError):
        return error_code(item) in CREDENTIAL_ERROR_CODES
    return EXPIRED_TOKEN_TEXT in str(item).lower()
