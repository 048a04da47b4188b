"""Deployment entrypoint for ECS Express services."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from boto3.session import Session
from botocore.exceptions import ClientError

from ecs_express_deploy.core.deployments.aws_ecs_express.dispatch import (
    dispatch_request,
    translate_client_error,
)
from ecs_express_deploy.core.deployments.aws_ecs_express.errors import ValidationError
from ecs_express_deploy.core.deployments.aws_ecs_express.existence import resolve_service
from ecs_express_deploy.core.deployments.aws_ecs_express.identity import build_service_arn
from ecs_express_deploy.core.deployments.aws_ecs_express.models import DeploymentOutcome
from ecs_express_deploy.core.deployments.aws_ecs_express.session import session_region
from ecs_express_deploy.core.deployments.aws_ecs_express.spec_builder import (
    DeployInputs,
    build_specification,
)
from ecs_express_deploy.core.deployments.aws_ecs_express.stabilization import (
    StabilizationPoller,
    extract_endpoint,
)
from ecs_express_deploy.core.deployments.aws_ecs_express.tags import reconcile_tags
from ecs_express_deploy.core.settings import DeploySettings

logger = logging.getLogger(__name__)

DEFAULT_WAIT_MINUTES = 30
STATUS_ACTIVE = "ACTIVE"
STATUS_SUBMITTED = "SUBMITTED"
# Deployments are filtered by createdAt against the local clock, which may run ahead of AWS.
CLOCK_SKEW_MARGIN = timedelta(seconds=30)


@dataclass
class DeployOptions:
    """Behavioural switches for a deployment."""

    update_tags: bool = False
    wait_for_service_stability: bool = True
    wait_for_minutes: int = DEFAULT_WAIT_MINUTES


def resolve_wait_minutes(requested: int, maximum: int) -> int:
    """Validate the requested wait and clamp it to the configured maximum."""
    if requested < 1:
        raise ValidationError(
            f"Invalid wait-for-minutes: {requested}. Must be at least 1", field="wait-for-minutes"
        )
    if requested > maximum:
        logger.warning(
            "wait-for-minutes %d exceeds the maximum of %d, using %d",
            requested,
            maximum,
            maximum,
        )
        return maximum
    return requested


def deploy_service(
    session: Session,
    inputs: DeployInputs,
    options: DeployOptions,
    settings: DeploySettings,
    emit_output: Callable[[str, str], None],
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
    now: Callable[[], datetime] = lambda: datetime.now(UTC),
) -> DeploymentOutcome:
    """Create or update the Express service and wait for it to stabilise.

    Args:
        session: boto3 session used for the ECS client.
        inputs: Raw deployment inputs.
        options: Tagging and waiting behaviour.
        settings: Deployer settings (poll cadence and wait ceiling).
        emit_output: Callback receiving ``(name, value)`` output pairs.
        clock: Monotonic clock used to bound the wait.
        sleep: Sleep function used between polls.
        now: Wall clock used to filter deployments created by this run.

    Returns:
        The service ARN, final status and endpoint.
    """
    logger.info("Amazon ECS Deploy Express Service started")
    spec = build_specification(inputs)
    wait_minutes = resolve_wait_minutes(options.wait_for_minutes, settings.max_wait_minutes)

    region = session_region(session)
    cluster = spec.cluster_name
    service_arn = None
    if spec.service_name:
        service_arn = build_service_arn(
            region, spec.execution_role_arn, cluster, spec.service_name
        )
        logger.info("Constructed service ARN: %s", service_arn)

    ecs = session.client("ecs")
    try:
        lookup = resolve_service(ecs, cluster, spec.service_name)
    except ClientError as exc:
        translated = translate_client_error(exc, cluster)
        if translated is None:
            raise
        raise translated from exc

    if lookup.exists and service_arn:
        if options.update_tags:
            reconcile_tags(ecs, service_arn, lookup.current_tags, spec.tags, cluster=cluster)
        elif spec.tags is not None:
            logger.info("Tags are applied on create only; set update-tags to change them")

    started_at = now() - CLOCK_SKEW_MARGIN
    result = dispatch_request(ecs, service_arn, lookup.exists, spec)
    emit_output("service-arn", result.service_arn)

    if not options.wait_for_service_stability:
        logger.info("Not waiting for service stability")
        endpoint = extract_endpoint(result.raw_response.get("service") or {})
        if endpoint:
            emit_output("endpoint", endpoint)
        emit_output("status", STATUS_SUBMITTED)
        return DeploymentOutcome(
            service_arn=result.service_arn,
            operation=result.operation,
            status=STATUS_SUBMITTED,
            endpoint=endpoint,
        )

    poller = StabilizationPoller(
        ecs,
        service_arn=result.service_arn,
        cluster=cluster,
        started_at=started_at,
        timeout_seconds=wait_minutes * 60,
        poll_interval_seconds=settings.poll_interval_seconds,
        clock=clock,
        sleep=sleep,
    )
    stabilized = poller.wait()
    if stabilized.endpoint:
        logger.info("Service endpoint: %s", stabilized.endpoint)
        emit_output("endpoint", stabilized.endpoint)
    emit_output("status", STATUS_ACTIVE)
    return DeploymentOutcome(
        service_arn=result.service_arn,
        operation=result.operation,
        status=STATUS_ACTIVE,
        endpoint=stabilized.endpoint,
    )
