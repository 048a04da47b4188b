"""Service ARN construction for ECS Express services."""

from dataclasses import dataclass

from ecs_express_deploy.core.deployments.aws_ecs_express.errors import ValidationError


@dataclass(frozen=True)
class RoleArn:
    """The parts of an IAM role ARN needed to address other resources."""

    partition: str
    account_id: str


def parse_role_arn(role_arn: str, field: str = "execution-role-arn") -> RoleArn:
    """Split an IAM role ARN into partition and account ID.

    Args:
        role_arn: ARN in the form ``arn:<partition>:iam::<account-id>:role/<name>``.
        field: Input name reported when the ARN is malformed.

    Returns:
        The partition and account ID of the role.
    """
    parts = role_arn.strip().split(":")
    if len(parts) < 6 or parts[0] != "arn" or not parts[1] or not parts[4]:
        raise ValidationError(
            f"Invalid {field}: expected arn:<partition>:iam::<account-id>:role/<name>, "
            f"got '{role_arn}'",
            field=field,
        )
    return RoleArn(partition=parts[1], account_id=parts[4])


def build_service_arn(region: str, execution_role_arn: str, cluster: str, service_name: str) -> str:
    """Return the deterministic ARN of an ECS service."""
    role = parse_role_arn(execution_role_arn)
    return format_service_arn(role.partition, region, role.account_id, cluster, service_name)


def format_service_arn(
    partition: str, region: str, account_id: str, cluster: str, service_name: str
) -> str:
    """Concatenate the parts of an ECS service ARN."""
    return f"arn:{partition}:ecs:{region}:{account_id}:service/{cluster}/{service_name}"
