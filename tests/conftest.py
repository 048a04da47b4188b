"""Shared fixtures for the deployment tests."""

from collections.abc import Callable
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from ecs_express_deploy.core.deployments.aws_ecs_express import DeployInputs

IMAGE = "123456789012.dkr.ecr.us-east-1.amazonaws.com/my-app:latest"
EXECUTION_ROLE_ARN = "arn:aws:iam::123456789012:role/ecsTaskExecutionRole"
INFRASTRUCTURE_ROLE_ARN = "arn:aws:iam::123456789012:role/ecsInfrastructureRole"


class FakeClock:
    """Monotonic clock that only advances when sleep is called."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def make_client_error(
    code: str, message: str = "request failed", operation: str = "Operation"
) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


@pytest.fixture
def client_error() -> Callable[..., ClientError]:
    """Factory for botocore client errors with a given code."""
    return make_client_error


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ecs() -> MagicMock:
    """A mock ECS client with no scripted responses."""
    return MagicMock(name="ecs")


@pytest.fixture
def required_inputs() -> DeployInputs:
    """Inputs carrying only the three required values."""
    return DeployInputs(
        image=IMAGE,
        execution_role_arn=EXECUTION_ROLE_ARN,
        infrastructure_role_arn=INFRASTRUCTURE_ROLE_ARN,
    )
