"""ECS Express deploy - create or update Amazon ECS Express Mode services."""

from ecs_express_deploy.core.deployments.aws_ecs_express import (
    DeployInputs,
    DeployOptions,
    DeploymentOutcome,
    deploy_service,
)

__all__ = [
    "DeployInputs",
    "DeployOptions",
    "DeploymentOutcome",
    "deploy_service",
]
