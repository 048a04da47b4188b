"""Build a normalised Express service specification from raw inputs."""

import json
import logging
from dataclasses import dataclass
from typing import Any

from ecs_express_deploy.core.deployments.aws_ecs_express.errors import ValidationError
from ecs_express_deploy.core.deployments.aws_ecs_express.identity import parse_role_arn
from ecs_express_deploy.core.deployments.aws_ecs_express.models import (
    DEFAULT_CLUSTER,
    AwsLogsConfiguration,
    KeyValuePair,
    NetworkConfiguration,
    PrimaryContainer,
    RepositoryCredentials,
    ScalingTarget,
    Secret,
    ServiceSpecification,
    Tag,
)

logger = logging.getLogger(__name__)


@dataclass
class DeployInputs:
    """Raw deployment inputs as received from the host environment.

    ``None`` means the input was not provided at all. An empty string means it
    was provided blank; only ``tags`` treats the two differently.
    """

    image: str | None = None
    execution_role_arn: str | None = None
    infrastructure_role_arn: str | None = None
    service_name: str | None = None
    cluster: str | None = None
    container_port: str | None = None
    environment_variables: str | None = None
    secrets: str | None = None
    command: str | None = None
    log_group: str | None = None
    log_stream_prefix: str | None = None
    repository_credentials: str | None = None
    cpu: str | None = None
    memory: str | None = None
    task_role_arn: str | None = None
    subnets: str | None = None
    security_groups: str | None = None
    health_check_path: str | None = None
    min_task_count: str | None = None
    max_task_count: str | None = None
    auto_scaling_metric: str | None = None
    auto_scaling_target_value: str | None = None
    tags: str | None = None


def build_specification(inputs: DeployInputs) -> ServiceSpecification:
    """Validate inputs and build the service specification.

    Args:
        inputs: Raw deployment inputs.

    Returns:
        The specification with every blank optional input omitted.
    """
    image = _required(inputs.image, "image")
    execution_role_arn = _required(inputs.execution_role_arn, "execution-role-arn")
    infrastructure_role_arn = _required(inputs.infrastructure_role_arn, "infrastructure-role-arn")
    parse_role_arn(execution_role_arn, "execution-role-arn")
    parse_role_arn(infrastructure_role_arn, "infrastructure-role-arn")

    logger.info("Container image: %s", image)
    logger.debug("Execution role ARN: %s", execution_role_arn)
    logger.debug("Infrastructure role ARN: %s", infrastructure_role_arn)

    cluster = _optional(inputs.cluster)
    if cluster == DEFAULT_CLUSTER:
        cluster = None

    return ServiceSpecification(
        execution_role_arn=execution_role_arn,
        infrastructure_role_arn=infrastructure_role_arn,
        primary_container=_build_primary_container(image, inputs),
        cpu=_optional(inputs.cpu),
        memory=_optional(inputs.memory),
        task_role_arn=_optional(inputs.task_role_arn),
        network_configuration=_build_network_configuration(inputs),
        service_name=_optional(inputs.service_name),
        cluster=cluster,
        health_check_path=_optional(inputs.health_check_path),
        scaling_target=_build_scaling_target(inputs),
        tags=parse_tags(inputs.tags),
    )


def parse_tags(text: str | None) -> tuple[Tag, ...] | None:
    """Parse tags from a JSON array or from ``key=value`` lines.

    Returns ``None`` when tags were not provided and an empty tuple when they
    were provided blank.
    """
    if text is None:
        return None
    stripped = text.strip()
    if not stripped:
        return ()
    if stripped.startswith("["):
        return _parse_json_tags(stripped)

    tags = []
    for line in stripped.splitlines():
        line = line.strip()
        if not line:
            continue
        if "=" not in line:
            raise ValidationError(
                f"Invalid tag format: '{line}'. Expected key=value", field="tags"
            )
        key, value = line.split("=", 1)
        key = key.strip()
        if not key:
            raise ValidationError(f"Invalid tag format: '{line}'. Tag key is empty", field="tags")
        tags.append(Tag(key=key, value=value.strip()))
    return tuple(tags)


def parse_list(text: str | None) -> tuple[str, ...]:
    """Split a comma-separated input, dropping blank items."""
    if not text:
        return ()
    return tuple(item.strip() for item in text.split(",") if item.strip())


def _parse_json_tags(text: str) -> tuple[Tag, ...]:
    items = _parse_json_array(text, "tags")
    tags = []
    for item in items:
        if not isinstance(item, dict) or not str(item.get("key", "")).strip():
            raise ValidationError(
                f"Invalid tags: each entry must be an object with a non-empty key, got {item!r}",
                field="tags",
            )
        tags.append(Tag(key=str(item["key"]).strip(), value=_json_text(item.get("value"))))
    return tuple(tags)


def _build_primary_container(image: str, inputs: DeployInputs) -> PrimaryContainer:
    log_group = _optional(inputs.log_group)
    log_stream_prefix = _optional(inputs.log_stream_prefix)
    logs_configuration = None
    if log_group or log_stream_prefix:
        logs_configuration = AwsLogsConfiguration(
            log_group=log_group, log_stream_prefix=log_stream_prefix
        )

    credentials_parameter = _optional(inputs.repository_credentials)
    repository_credentials = (
        RepositoryCredentials(credentials_parameter=credentials_parameter)
        if credentials_parameter
        else None
    )

    return PrimaryContainer(
        image=image,
        container_port=_parse_int(inputs.container_port, "container-port"),
        environment=_parse_environment(inputs.environment_variables),
        secrets=_parse_secrets(inputs.secrets),
        command=_parse_command(inputs.command),
        aws_logs_configuration=logs_configuration,
        repository_credentials=repository_credentials,
    )


def _build_network_configuration(inputs: DeployInputs) -> NetworkConfiguration | None:
    subnets = parse_list(inputs.subnets)
    if not subnets:
        return None
    security_groups = parse_list(inputs.security_groups)
    return NetworkConfiguration(subnets=subnets, security_groups=security_groups or None)


def _build_scaling_target(inputs: DeployInputs) -> ScalingTarget | None:
    target = ScalingTarget(
        min_task_count=_parse_int(inputs.min_task_count, "min-task-count"),
        max_task_count=_parse_int(inputs.max_task_count, "max-task-count"),
        auto_scaling_metric=_optional(inputs.auto_scaling_metric),
        auto_scaling_target_value=_parse_float(
            inputs.auto_scaling_target_value, "auto-scaling-target-value"
        ),
    )
    if target == ScalingTarget():
        return None
    return target


def _parse_environment(text: str | None) -> tuple[KeyValuePair, ...] | None:
    value = _optional(text)
    if value is None:
        return None
    items = _parse_json_array(value, "environment-variables")
    pairs = []
    for item in items:
        if not isinstance(item, dict) or "name" not in item:
            raise ValidationError(
                "Invalid environment-variables: each entry must be an object with "
                f"'name' and 'value', got {item!r}",
                field="environment-variables",
            )
        pairs.append(KeyValuePair(name=str(item["name"]), value=_json_text(item.get("value"))))
    return tuple(pairs)


def _parse_secrets(text: str | None) -> tuple[Secret, ...] | None:
    value = _optional(text)
    if value is None:
        return None
    items = _parse_json_array(value, "secrets")
    secrets = []
    for item in items:
        if not isinstance(item, dict) or "name" not in item or "valueFrom" not in item:
            raise ValidationError(
                "Invalid secrets: each entry must be an object with 'name' and 'valueFrom', "
                f"got {item!r}",
                field="secrets",
            )
        secrets.append(Secret(name=str(item["name"]), value_from=str(item["valueFrom"])))
    return tuple(secrets)


def _parse_command(text: str | None) -> tuple[str, ...] | None:
    value = _optional(text)
    if value is None:
        return None
    items = _parse_json_array(value, "command")
    return tuple(str(item) for item in items)


def _parse_json_array(text: str, field: str) -> list[Any]:
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"Invalid JSON for {field}: {exc}", field=field) from exc
    if not isinstance(parsed, list):
        raise ValidationError(
            f"Invalid JSON for {field}: expected an array, got {type(parsed).__name__}",
            field=field,
        )
    return parsed


def _json_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value)


def _parse_int(text: str | None, field: str) -> int | None:
    value = _optional(text)
    if value is None:
        return None
    try:
        return int(value, 10)
    except ValueError as exc:
        raise ValidationError(f"Invalid {field}: '{value}' is not an integer", field=field) from exc


def _parse_float(text: str | None, field: str) -> float | None:
    value = _optional(text)
    if value is None:
        return None
    try:
        return float(value)
    except ValueError as exc:
        raise ValidationError(f"Invalid {field}: '{value}' is not a number", field=field) from exc


def _required(text: str | None, field: str) -> str:
    value = _optional(text)
    if value is None:
        raise ValidationError(f"Input required and not supplied: {field}", field=field)
    return value


def _optional(text: str | None) -> str | None:
    if text is None:
        return None
    stripped = text.strip()
    return stripped or None
