"""ECS Express deploy core modules."""

from ecs_express_deploy.core.settings import AWSSettings, DeploySettings, get_settings

__all__ = [
    "AWSSettings",
    "DeploySettings",
    "get_settings",
]
