"""CLI entrypoint for ECS Express deployments.

Every input can be given as an option or through the ``INPUT_<NAME>``
environment variable that GitHub Actions sets for action inputs.
"""

import logging
from collections.abc import Callable
from typing import Any

import click

from ecs_express_deploy.cli.errors import report_deploy_error
from ecs_express_deploy.cli.outputs import OutputWriter
from ecs_express_deploy.core.deployments.aws_ecs_express import (
    DeployInputs,
    DeployOptions,
    create_session,
    deploy_service,
)
from ecs_express_deploy.core.deployments.aws_ecs_express.deploy import DEFAULT_WAIT_MINUTES
from ecs_express_deploy.core.settings import get_settings

logger = logging.getLogger(__name__)

STRING_INPUTS = [
    ("image", "Container image URI."),
    ("execution-role-arn", "Task execution role ARN."),
    ("infrastructure-role-arn", "Infrastructure role ARN used by ECS Express Mode."),
    ("cluster", "Cluster name (defaults to 'default')."),
    ("container-port", "Port the container listens on."),
    ("environment-variables", 'JSON array of {"name", "value"} objects.'),
    ("secrets", 'JSON array of {"name", "valueFrom"} objects.'),
    ("command", "JSON array of command arguments."),
    ("log-group", "CloudWatch log group."),
    ("log-stream-prefix", "CloudWatch log stream prefix."),
    ("repository-credentials", "Secret ARN for private registry credentials."),
    ("cpu", "Task CPU units."),
    ("memory", "Task memory in MiB."),
    ("task-role-arn", "Task role ARN."),
    ("subnets", "Comma-separated subnet IDs."),
    ("security-groups", "Comma-separated security group IDs."),
    ("health-check-path", "Health check path for the load balancer."),
    ("min-task-count", "Minimum number of tasks."),
    ("max-task-count", "Maximum number of tasks."),
    ("auto-scaling-metric", "Auto scaling metric, e.g. AVERAGE_CPU."),
    ("auto-scaling-target-value", "Target value for the auto scaling metric."),
    ("tags", "JSON array of {key, value} objects or key=value lines."),
]


def _envvar(name: str) -> str:
    return f"INPUT_{name.upper()}"


def string_inputs(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach one string option per deployment input."""
    for name, help_text in reversed(STRING_INPUTS):
        func = click.option(f"--{name}", envvar=_envvar(name), default=None, help=help_text)(
            func
        )
    return func


@click.group()
def cli() -> None:
    """Deploy container images to Amazon ECS Express Mode services."""


@cli.command()
@string_inputs
@click.option(
    "--service-name",
    "--service",
    "service_name",
    envvar=[_envvar("service-name"), _envvar("service")],
    default=None,
    help="Service name; omitted means ECS assigns one.",
)
@click.option(
    "--update-tags",
    envvar=_envvar("update-tags"),
    type=click.BOOL,
    default=False,
    show_default=True,
    help="Reconcile tags on an existing service.",
)
@click.option(
    "--wait-for-service-stability",
    envvar=_envvar("wait-for-service-stability"),
    type=click.BOOL,
    default=True,
    show_default=True,
    help="Wait for the deployment to finish.",
)
@click.option(
    "--wait-for-minutes",
    envvar=_envvar("wait-for-minutes"),
    type=int,
    default=DEFAULT_WAIT_MINUTES,
    show_default=True,
    help="How long to wait for the deployment.",
)
@click.option("--log-level", default=None, help="Logging level (overrides settings).")
@click.pass_context
def deploy(
    ctx: click.Context,
    update_tags: bool,
    wait_for_service_stability: bool,
    wait_for_minutes: int,
    log_level: str | None,
    **values: str | None,
) -> None:
    """Create or update an ECS Express service.

    Args:
        ctx: Click context for the command invocation.
        update_tags: Whether tags on an existing service are reconciled.
        wait_for_service_stability: Whether to wait for the deployment.
        wait_for_minutes: Wait ceiling in minutes.
        log_level: Optional logging level override.
        values: Raw string inputs keyed by parameter name.
    """
    aws_settings, deploy_settings = get_settings()
    logging.basicConfig(
        level=(log_level or deploy_settings.log_level).upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )

    inputs = DeployInputs(**values)
    options = DeployOptions(
        update_tags=update_tags,
        wait_for_service_stability=wait_for_service_stability,
        wait_for_minutes=wait_for_minutes,
    )
    writer = OutputWriter.from_env()
    try:
        session = create_session(aws_settings)
        outcome = deploy_service(session, inputs, options, deploy_settings, writer)
    except Exception as exc:  # noqa: BLE001
        logger.debug("Deployment failed", exc_info=True)
        report_deploy_error(exc)
        ctx.exit(1)

    logger.info("Deployment finished with status %s", outcome.status)


def main() -> None:
    """Run the CLI."""
    cli()
