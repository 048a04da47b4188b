"""AWS session helpers."""

import boto3

from ecs_express_deploy.core.deployments.aws_ecs_express.errors import ValidationError
from ecs_express_deploy.core.settings import AWSSettings


def create_session(settings: AWSSettings) -> boto3.session.Session:
    """Create a boto3 session."""
    if settings.profile:
        return boto3.session.Session(
            profile_name=settings.profile,
            region_name=settings.region,
        )

    return boto3.session.Session(region_name=settings.region)


def session_region(session: boto3.session.Session) -> str:
    """Return the session region, failing when none is configured."""
    region = session.region_name
    if not region:
        raise ValidationError(
            "AWS region is not configured. Set AWS_REGION or configure a profile region.",
            field="region",
        )
    return str(region)
