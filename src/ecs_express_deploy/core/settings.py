"""Runtime settings for ECS Express deployments."""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE_PATH = ".env"


class AWSSettings(BaseSettings):
    """AWS session configuration."""

    model_config = SettingsConfigDict(
        env_prefix="AWS_",
        env_file=ENV_FILE_PATH,
        extra="ignore",
        populate_by_name=True,
    )

    region: str | None = Field(
        default=None,
        validation_alias=AliasChoices("AWS_REGION", "AWS_DEFAULT_REGION"),
        description="AWS region",
    )
    profile: str | None = Field(default=None, description="AWS named profile")


class DeploySettings(BaseSettings):
    """Polling and logging behaviour of the deployer."""

    model_config = SettingsConfigDict(
        env_prefix="EXPRESS_DEPLOY_",
        env_file=ENV_FILE_PATH,
        extra="ignore",
    )

    poll_interval_seconds: float = Field(
        default=15, gt=0, description="Delay between stabilisation checks"
    )
    # Upper bound for wait-for-minutes; longer requests are clamped.
    max_wait_minutes: int = Field(default=360, gt=0, description="Longest allowed wait")
    log_level: str = Field(default="INFO", description="Python logging level")


def get_settings() -> tuple[AWSSettings, DeploySettings]:
    """Load AWS and deployer settings from the environment."""
    return AWSSettings(), DeploySettings()
