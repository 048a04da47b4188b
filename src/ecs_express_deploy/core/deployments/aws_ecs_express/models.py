"""Data models for ECS Express service deployment."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

DEFAULT_CLUSTER = "default"


def _compact(values: dict[str, Any]) -> dict[str, Any]:
    """Drop keys whose value is None so the platform defaults apply."""
    return {key: value for key, value in values.items() if value is not None}


@dataclass(frozen=True)
class KeyValuePair:
    """Container environment variable."""

    name: str
    value: str

    def to_request(self) -> dict[str, str]:
        return {"name": self.name, "value": self.value}


@dataclass(frozen=True)
class Secret:
    """Container secret sourced from Secrets Manager or SSM."""

    name: str
    value_from: str

    def to_request(self) -> dict[str, str]:
        return {"name": self.name, "valueFrom": self.value_from}


@dataclass(frozen=True)
class Tag:
    """Resource tag."""

    key: str
    value: str

    def to_request(self) -> dict[str, str]:
        return {"key": self.key, "value": self.value}


@dataclass(frozen=True)
class AwsLogsConfiguration:
    """CloudWatch Logs settings for the primary container."""

    log_group: str | None = None
    log_stream_prefix: str | None = None

    def to_request(self) -> dict[str, Any]:
        return _compact({"logGroup": self.log_group, "logStreamPrefix": self.log_stream_prefix})


@dataclass(frozen=True)
class RepositoryCredentials:
    """Private registry credentials for the primary container."""

    credentials_parameter: str

    def to_request(self) -> dict[str, str]:
        return {"credentialsParameter": self.credentials_parameter}


@dataclass(frozen=True)
class PrimaryContainer:
    """The single container run by an Express service."""

    image: str
    container_port: int | None = None
    environment: tuple[KeyValuePair, ...] | None = None
    secrets: tuple[Secret, ...] | None = None
    command: tuple[str, ...] | None = None
    aws_logs_configuration: AwsLogsConfiguration | None = None
    repository_credentials: RepositoryCredentials | None = None

    def to_request(self) -> dict[str, Any]:
        return _compact(
            {
                "image": self.image,
                "containerPort": self.container_port,
                "environment": (
                    [item.to_request() for item in self.environment]
                    if self.environment is not None
                    else None
                ),
                "secrets": (
                    [item.to_request() for item in self.secrets]
                    if self.secrets is not None
                    else None
                ),
                "command": list(self.command) if self.command is not None else None,
                "awsLogsConfiguration": (
                    self.aws_logs_configuration.to_request()
                    if self.aws_logs_configuration
                    else None
                ),
                "repositoryCredentials": (
                    self.repository_credentials.to_request()
                    if self.repository_credentials
                    else None
                ),
            }
        )


@dataclass(frozen=True)
class NetworkConfiguration:
    """Subnets and security groups for the service tasks."""

    subnets: tuple[str, ...]
    security_groups: tuple[str, ...] | None = None

    def to_request(self) -> dict[str, Any]:
        return _compact(
            {
                "subnets": list(self.subnets),
                "securityGroups": (
                    list(self.security_groups) if self.security_groups is not None else None
                ),
            }
        )


@dataclass(frozen=True)
class ScalingTarget:
    """Auto scaling bounds and target metric."""

    min_task_count: int | None = None
    max_task_count: int | None = None
    auto_scaling_metric: str | None = None
    auto_scaling_target_value: float | None = None

    def to_request(self) -> dict[str, Any]:
        return _compact(
            {
                "minTaskCount": self.min_task_count,
                "maxTaskCount": self.max_task_count,
                "autoScalingMetric": self.auto_scaling_metric,
                "autoScalingTargetValue": self.auto_scaling_target_value,
            }
        )


# Accepted by create_express_gateway_service but not by the update call.
CREATE_ONLY_FIELDS = frozenset({"infrastructureRoleArn", "serviceName", "cluster", "tags"})


@dataclass(frozen=True)
class ServiceSpecification:
    """Normalised request for creating or updating an Express service."""

    execution_role_arn: str
    infrastructure_role_arn: str
    primary_container: PrimaryContainer
    cpu: str | None = None
    memory: str | None = None
    task_role_arn: str | None = None
    network_configuration: NetworkConfiguration | None = None
    service_name: str | None = None
    cluster: str | None = None
    health_check_path: str | None = None
    scaling_target: ScalingTarget | None = None
    tags: tuple[Tag, ...] | None = None

    @property
    def cluster_name(self) -> str:
        """Return the target cluster, resolving the implicit default."""
        return self.cluster or DEFAULT_CLUSTER

    def to_request(self) -> dict[str, Any]:
        """Render the create request, omitting every absent field."""
        return _compact(
            {
                "executionRoleArn": self.execution_role_arn,
                "infrastructureRoleArn": self.infrastructure_role_arn,
                "primaryContainer": self.primary_container.to_request(),
                "cpu": self.cpu,
                "memory": self.memory,
                "taskRoleArn": self.task_role_arn,
                "networkConfiguration": (
                    self.network_configuration.to_request()
                    if self.network_configuration
                    else None
                ),
                "serviceName": self.service_name,
                "cluster": self.cluster,
                "healthCheckPath": self.health_check_path,
                "scalingTarget": (
                    self.scaling_target.to_request() if self.scaling_target else None
                ),
                "tags": [tag.to_request() for tag in self.tags] if self.tags is not None else None,
            }
        )

    def to_update_request(self) -> dict[str, Any]:
        """Render the update request fields (the service ARN is added by the caller)."""
        return {
            key: value
            for key, value in self.to_request().items()
            if key not in CREATE_ONLY_FIELDS
        }


class LookupOutcome(Enum):
    """Classification of an existence check."""

    FOUND = "FOUND"
    NOT_FOUND = "NOT_FOUND"
    REMOVED = "REMOVED"
    SKIPPED = "SKIPPED"


@dataclass(frozen=True)
class ServiceLookup:
    """Result of resolving whether the target service exists."""

    outcome: LookupOutcome
    status: str | None = None
    current_tags: tuple[Tag, ...] = ()

    @property
    def exists(self) -> bool:
        return self.outcome is LookupOutcome.FOUND


@dataclass(frozen=True)
class TagChanges:
    """Tag mutations needed to reach the desired tag set."""

    to_remove: tuple[str, ...] = ()
    to_add: tuple[Tag, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.to_remove and not self.to_add


class Operation(Enum):
    """Mutating request issued for the service."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of a create or update request."""

    service_arn: str
    operation: Operation
    raw_response: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DeploymentRecord:
    """A service deployment as reported by ECS."""

    arn: str
    status: str
    created_at: datetime | None = None


@dataclass(frozen=True)
class DeploymentOutcome:
    """Final values reported back to the caller."""

    service_arn: str
    operation: Operation
    status: str
    endpoint: str | None = None
