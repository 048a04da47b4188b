"""Existence checks for the target ECS service."""

import logging
from typing import Any

from botocore.exceptions import ClientError

from ecs_express_deploy.core.deployments.aws_ecs_express.errors import error_code
from ecs_express_deploy.core.deployments.aws_ecs_express.models import (
    LookupOutcome,
    ServiceLookup,
    Tag,
)

logger = logging.getLogger(__name__)

REMOVED_STATUS = "INACTIVE"
NOT_FOUND_CODES = frozenset(
    {"ClusterNotFoundException", "ServiceNotFoundException", "ResourceNotFoundException"}
)


def resolve_service(ecs: Any, cluster: str, service_name: str | None) -> ServiceLookup:
    """Classify the target service as existing or eligible for creation.

    Args:
        ecs: boto3 ECS client.
        cluster: Cluster name or ARN.
        service_name: Service name; blank means the platform assigns one.

    Returns:
        The lookup result. Only ``LookupOutcome.FOUND`` counts as existing.
    """
    if not service_name or not service_name.strip():
        logger.info("No service name provided, will create new service")
        return ServiceLookup(outcome=LookupOutcome.SKIPPED)

    try:
        response = ecs.describe_services(
            cluster=cluster,
            services=[service_name],
            include=["TAGS"],
        )
    except ClientError as exc:
        if error_code(exc) in NOT_FOUND_CODES:
            logger.info("Service or cluster not found, will create new service")
            return ServiceLookup(outcome=LookupOutcome.NOT_FOUND)
        raise

    services = response.get("services", [])
    if not services:
        logger.info("Service does not exist, will create new service")
        return ServiceLookup(outcome=LookupOutcome.NOT_FOUND)

    service = services[0]
    status = str(service.get("status", ""))
    if status == REMOVED_STATUS:
        logger.info("Service exists with status %s, will create new service", status)
        return ServiceLookup(outcome=LookupOutcome.REMOVED, status=status)

    logger.info("Service exists with status: %s", status)
    return ServiceLookup(
        outcome=LookupOutcome.FOUND,
        status=status,
        current_tags=tags_from_response(service.get("tags", [])),
    )


def tags_from_response(items: list[dict[str, Any]]) -> tuple[Tag, ...]:
    """Convert ECS tag dictionaries into tags."""
    return tuple(
        Tag(key=str(item["key"]), value=str(item.get("value", "")))
        for item in items
        if item.get("key")
    )
