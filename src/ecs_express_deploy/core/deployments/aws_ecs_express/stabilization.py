"""Wait for an ECS Express service deployment to stabilise.

The poller is a small state machine. Each tick describes the service, then
locates the deployment started by this invocation (listing only deployments
created after the request was submitted, so a stale record from an earlier
rollout is never tracked) and finally checks that deployment's status.

Only conclusive states are fatal: a service that is draining or inactive, or a
deployment that failed or was stopped. Errors raised by the describe and list
calls are logged and retried on the next tick.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, cast

from botocore.exceptions import BotoCoreError, ClientError

from ecs_express_deploy.core.deployments.aws_ecs_express.errors import (
    StabilizationFailure,
    StabilizationTimeout,
)
from ecs_express_deploy.core.deployments.aws_ecs_express.models import DeploymentRecord

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 15

ACTIVE_SERVICE_STATUS = "ACTIVE"
FAILED_SERVICE_STATUSES = frozenset({"INACTIVE", "DRAINING"})
SUCCESSFUL_DEPLOYMENT_STATUS = "SUCCESSFUL"
FAILED_DEPLOYMENT_STATUSES = frozenset(
    {"FAILED", "STOPPED", "ROLLBACK_SUCCESSFUL", "ROLLBACK_FAILED"}
)


class PollState(Enum):
    """States of the stabilisation poller."""

    WAITING_SERVICE_ACTIVE = "WAITING_SERVICE_ACTIVE"
    LOCATING_DEPLOYMENT = "LOCATING_DEPLOYMENT"
    WAITING_DEPLOYMENT_TERMINAL = "WAITING_DEPLOYMENT_TERMINAL"
    STABLE = "STABLE"
    FAILED = "FAILED"
    TIMED_OUT = "TIMED_OUT"

    @property
    def is_terminal(self) -> bool:
        return self in {PollState.STABLE, PollState.FAILED, PollState.TIMED_OUT}


@dataclass(frozen=True)
class StabilizationResult:
    """Final state of a successful wait."""

    state: PollState
    service_arn: str
    service_status: str | None = None
    deployment_arn: str | None = None
    endpoint: str | None = None


def classify_service_status(status: str | None) -> PollState:
    """Map a service status to the next poller state."""
    if status in FAILED_SERVICE_STATUSES:
        return PollState.FAILED
    if status == ACTIVE_SERVICE_STATUS:
        return PollState.LOCATING_DEPLOYMENT
    return PollState.WAITING_SERVICE_ACTIVE


def classify_deployment_status(status: str | None) -> PollState:
    """Map a service deployment status to the next poller state."""
    if status == SUCCESSFUL_DEPLOYMENT_STATUS:
        return PollState.STABLE
    if status in FAILED_DEPLOYMENT_STATUSES:
        return PollState.FAILED
    return PollState.WAITING_DEPLOYMENT_TERMINAL


def service_status(service: dict[str, Any]) -> str | None:
    """Return the status code of a described Express service."""
    status = service.get("status")
    if isinstance(status, dict):
        status = status.get("statusCode")
    return str(status) if status else None


def extract_endpoint(service: dict[str, Any]) -> str | None:
    """Return the first ingress endpoint of the first active configuration."""
    configurations = service.get("activeConfigurations") or []
    if not configurations:
        return None
    ingress_paths = configurations[0].get("ingressPaths") or []
    if not ingress_paths:
        return None
    endpoint = ingress_paths[0].get("endpoint")
    return cast(str, endpoint) if endpoint else None


def latest_deployment(items: list[dict[str, Any]]) -> DeploymentRecord | None:
    """Return the most recently created deployment from a listing."""
    records = [
        DeploymentRecord(
            arn=str(item["serviceDeploymentArn"]),
            status=str(item.get("status", "")),
            created_at=item.get("createdAt"),
        )
        for item in items
        if item.get("serviceDeploymentArn")
    ]
    if not records:
        return None
    dated = [record for record in records if record.created_at is not None]
    if dated:
        return max(dated, key=lambda record: cast(datetime, record.created_at))
    return records[0]


class StabilizationPoller:
    """Poll a service and its newest deployment until a terminal state."""

    def __init__(
        self,
        ecs: Any,
        service_arn: str,
        cluster: str,
        started_at: datetime,
        timeout_seconds: float,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._ecs = ecs
        self._service_arn = service_arn
        self._cluster = cluster
        self._started_at = started_at
        self._timeout_seconds = timeout_seconds
        self._poll_interval_seconds = poll_interval_seconds
        self._clock = clock
        self._sleep = sleep
        self.state = PollState.WAITING_SERVICE_ACTIVE
        self.deployment_arn: str | None = None
        self.endpoint: str | None = None
        self.last_service_status: str | None = None

    def wait(self) -> StabilizationResult:
        """Block until the deployment succeeds.

        Raises:
            StabilizationFailure: The service or deployment reached a bad terminal state.
            StabilizationTimeout: The wait ceiling elapsed first.
        """
        logger.info(
            "Waiting up to %d minutes for service to stabilise...",
            round(self._timeout_seconds / 60),
        )
        start = self._clock()
        while True:
            elapsed = self._clock() - start
            if elapsed > self._timeout_seconds:
                self.state = PollState.TIMED_OUT
                raise StabilizationTimeout(
                    f"Timed out after {round(elapsed)} seconds waiting for service "
                    f"{self._service_arn} to stabilise (last state {self._describe_progress()}). "
                    "The deployment may still be in progress."
                )

            try:
                self.state = self._tick()
            except StabilizationFailure:
                self.state = PollState.FAILED
                raise
            except (ClientError, BotoCoreError) as exc:
                logger.warning("Error checking deployment status, will retry: %s", exc)

            if self.state is PollState.STABLE:
                logger.info("Service is stable")
                return StabilizationResult(
                    state=self.state,
                    service_arn=self._service_arn,
                    service_status=self.last_service_status,
                    deployment_arn=self.deployment_arn,
                    endpoint=self.endpoint,
                )

            self._sleep(self._poll_interval_seconds)

    def _tick(self) -> PollState:
        service = self._describe_service()
        status = service_status(service)
        self.last_service_status = status

        state = classify_service_status(status)
        if state is PollState.FAILED:
            raise StabilizationFailure(
                f"Service {self._service_arn} entered status {status} while waiting for "
                "stabilisation"
            )
        if state is PollState.WAITING_SERVICE_ACTIVE:
            logger.info("Service status: %s, waiting for ACTIVE", status or "UNKNOWN")
            return state

        if self.deployment_arn is None:
            record = self._locate_deployment()
            if record is None:
                logger.info("Waiting for the service deployment to be listed")
                return PollState.LOCATING_DEPLOYMENT
            logger.info("Tracking deployment %s", record.arn)
            self.deployment_arn = record.arn

        deployment_status = self._describe_deployment_status(self.deployment_arn)
        state = classify_deployment_status(deployment_status)
        if state is PollState.FAILED:
            raise StabilizationFailure(
                f"Deployment {self.deployment_arn} finished with status {deployment_status}"
            )
        if state is PollState.STABLE:
            self.endpoint = extract_endpoint(service)
            return state

        logger.info("Deployment status: %s", deployment_status or "UNKNOWN")
        return state

    def _describe_service(self) -> dict[str, Any]:
        response = self._ecs.describe_express_gateway_service(serviceArn=self._service_arn)
        return cast(dict[str, Any], response.get("service") or {})

    def _locate_deployment(self) -> DeploymentRecord | None:
        response = self._ecs.list_service_deployments(
            service=self._service_arn,
            cluster=self._cluster,
            createdAt={"after": self._started_at},
        )
        return latest_deployment(response.get("serviceDeployments", []))

    def _describe_deployment_status(self, deployment_arn: str) -> str | None:
        response = self._ecs.describe_service_deployments(serviceDeploymentArns=[deployment_arn])
        deployments = response.get("serviceDeployments", [])
        if not deployments:
            return None
        status = deployments[0].get("status")
        return str(status) if status else None

    def _describe_progress(self) -> str:
        if self.deployment_arn:
            return f"{self.state.value}, deployment {self.deployment_arn}"
        return self.state.value
