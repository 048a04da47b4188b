"""AWS ECS Express service deployment helpers."""

from ecs_express_deploy.core.deployments.aws_ecs_express.deploy import (
    DeployOptions,
    deploy_service,
    resolve_wait_minutes,
)
from ecs_express_deploy.core.deployments.aws_ecs_express.dispatch import (
    dispatch_request,
    translate_client_error,
)
from ecs_express_deploy.core.deployments.aws_ecs_express.errors import (
    DeploymentError,
    RemoteRequestError,
    StabilizationFailure,
    StabilizationTimeout,
    ValidationError,
)
from ecs_express_deploy.core.deployments.aws_ecs_express.existence import resolve_service
from ecs_express_deploy.core.deployments.aws_ecs_express.identity import (
    build_service_arn,
    parse_role_arn,
)
from ecs_express_deploy.core.deployments.aws_ecs_express.models import (
    DeploymentOutcome,
    DispatchResult,
    LookupOutcome,
    Operation,
    ServiceLookup,
    ServiceSpecification,
    Tag,
    TagChanges,
)
from ecs_express_deploy.core.deployments.aws_ecs_express.session import (
    create_session,
    session_region,
)
from ecs_express_deploy.core.deployments.aws_ecs_express.spec_builder import (
    DeployInputs,
    build_specification,
    parse_tags,
)
from ecs_express_deploy.core.deployments.aws_ecs_express.stabilization import (
    PollState,
    StabilizationPoller,
    StabilizationResult,
)
from ecs_express_deploy.core.deployments.aws_ecs_express.tags import (
    compute_tag_changes,
    reconcile_tags,
)

__all__ = [
    "DeployInputs",
    "DeployOptions",
    "DeploymentError",
    "DeploymentOutcome",
    "DispatchResult",
    "LookupOutcome",
    "Operation",
    "PollState",
    "RemoteRequestError",
    "ServiceLookup",
    "ServiceSpecification",
    "StabilizationFailure",
    "StabilizationPoller",
    "StabilizationResult",
    "StabilizationTimeout",
    "Tag",
    "TagChanges",
    "ValidationError",
    "build_service_arn",
    "build_specification",
    "compute_tag_changes",
    "create_session",
    "deploy_service",
    "dispatch_request",
    "parse_role_arn",
    "parse_tags",
    "reconcile_tags",
    "resolve_service",
    "resolve_wait_minutes",
    "session_region",
    "translate_client_error",
]
