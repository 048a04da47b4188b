"""Create and update requests for ECS Express services."""

import logging
from collections.abc import Callable
from typing import Any, cast

from botocore.exceptions import ClientError

from ecs_express_deploy.core.deployments.aws_ecs_express.errors import (
    RemoteRequestError,
    error_code,
    error_message,
)
from ecs_express_deploy.core.deployments.aws_ecs_express.models import (
    DispatchResult,
    Operation,
    ServiceSpecification,
)

logger = logging.getLogger(__name__)

ACCESS_DENIED_CODES = frozenset({"AccessDeniedException", "AccessDenied"})


def dispatch_request(
    ecs: Any,
    service_arn: str | None,
    exists: bool,
    spec: ServiceSpecification,
) -> DispatchResult:
    """Update the service when it exists, otherwise create it.

    Args:
        ecs: boto3 ECS client.
        service_arn: Locally computed service ARN, or None when the service is unnamed.
        exists: Whether the existence check found a live service.
        spec: Normalised service specification.

    Returns:
        The resulting service ARN and the raw response.
    """
    if exists:
        if not service_arn:
            raise RemoteRequestError("Cannot update a service without a service ARN.")
        logger.info("Will UPDATE existing service")
        logger.info("Updating Express Gateway service...")
        operation = Operation.UPDATE
        response = _send(
            ecs.update_express_gateway_service,
            {"serviceArn": service_arn, **spec.to_update_request()},
            spec.cluster_name,
        )
        logger.info("Service updated successfully")
    else:
        logger.info("Will CREATE new service")
        logger.info("Creating Express Gateway service...")
        operation = Operation.CREATE
        response = _send(ecs.create_express_gateway_service, spec.to_request(), spec.cluster_name)
        logger.info("Service created successfully")

    result_arn = response_service_arn(response) or service_arn
    if not result_arn:
        raise RemoteRequestError(
            f"{operation.value.title()} request succeeded but no service ARN was returned."
        )
    logger.info("Service ARN: %s", result_arn)
    return DispatchResult(service_arn=result_arn, operation=operation, raw_response=response)


def translate_client_error(exc: ClientError, cluster: str) -> RemoteRequestError | None:
    """Rewrap known AWS errors with actionable guidance.

    Returns None for errors that should propagate unchanged.
    """
    code = error_code(exc)
    message = error_message(exc)
    if code in ACCESS_DENIED_CODES:
        return RemoteRequestError(
            f"Access denied: {message}. Check that the execution role and infrastructure "
            "role exist and that the caller has the IAM permissions to use both."
        )
    if code == "InvalidParameterException":
        return RemoteRequestError(
            f"Invalid parameter: {message}. Check the action inputs for invalid values."
        )
    if code == "ClusterNotFoundException":
        return RemoteRequestError(
            f"Cluster not found: '{cluster}'. Check that the cluster exists in the "
            f"configured region. {message}"
        )
    return None


def response_service_arn(response: dict[str, Any]) -> str | None:
    """Return the service ARN carried by a create or update response."""
    service = response.get("service") or {}
    arn = service.get("serviceArn")
    return cast(str, arn) if arn else None


def _send(call: Callable[..., Any], request: dict[str, Any], cluster: str) -> dict[str, Any]:
    try:
        return cast(dict[str, Any], call(**request))
    except ClientError as exc:
        translated = translate_client_error(exc, cluster)
        if translated is None:
            raise
        raise translated from exc
