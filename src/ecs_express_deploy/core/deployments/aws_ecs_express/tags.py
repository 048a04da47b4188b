"""Tag reconciliation for existing ECS Express services."""

import logging
from collections.abc import Iterable
from typing import Any

from botocore.exceptions import ClientError

from ecs_express_deploy.core.deployments.aws_ecs_express.dispatch import translate_client_error
from ecs_express_deploy.core.deployments.aws_ecs_express.errors import (
    RemoteRequestError,
    error_message,
)
from ecs_express_deploy.core.deployments.aws_ecs_express.models import (
    DEFAULT_CLUSTER,
    Tag,
    TagChanges,
)

logger = logging.getLogger(__name__)


def compute_tag_changes(current: Iterable[Tag], desired: Iterable[Tag] | None) -> TagChanges:
    """Return the minimal removals and additions to reach the desired tags.

    Keys present remotely but not desired are removed. Desired tags whose value
    differs from (or is missing in) the current set are added. For duplicate
    desired keys the last value wins.
    """
    current_values = {tag.key: tag.value for tag in current}
    desired_values: dict[str, str] = {}
    for tag in desired or ():
        desired_values[tag.key] = tag.value

    to_remove = tuple(key for key in current_values if key not in desired_values)
    to_add = tuple(
        Tag(key=key, value=value)
        for key, value in desired_values.items()
        if current_values.get(key) != value
    )
    return TagChanges(to_remove=to_remove, to_add=to_add)


def reconcile_tags(
    ecs: Any,
    service_arn: str,
    current: Iterable[Tag],
    desired: Iterable[Tag] | None,
    cluster: str = DEFAULT_CLUSTER,
) -> TagChanges:
    """Apply tag removals and then additions to an existing service.

    Raises:
        RemoteRequestError: If either tagging call fails. Access-denied, invalid
            parameter and missing-cluster errors carry the same guidance as the
            create and update requests.
    """
    changes = compute_tag_changes(current, desired)
    if changes.is_empty:
        logger.info("Tags are up to date, no changes needed")
        return changes

    if changes.to_remove:
        logger.info("Removing tags: %s", ", ".join(changes.to_remove))
        try:
            ecs.untag_resource(resourceArn=service_arn, tagKeys=list(changes.to_remove))
        except ClientError as exc:
            raise _tagging_error(exc, cluster, f"Failed to remove tags from {service_arn}") from exc

    if changes.to_add:
        logger.info("Adding tags: %s", ", ".join(tag.key for tag in changes.to_add))
        try:
            ecs.tag_resource(
                resourceArn=service_arn,
                tags=[tag.to_request() for tag in changes.to_add],
            )
        except ClientError as exc:
            raise _tagging_error(exc, cluster, f"Failed to add tags to {service_arn}") from exc

    return changes


def _tagging_error(exc: ClientError, cluster: str, action: str) -> RemoteRequestError:
    translated = translate_client_error(exc, cluster)
    if translated is not None:
        return translated
    return RemoteRequestError(f"{action}: {error_message(exc)}")
