"""Tests for create and update requests."""

from collections.abc import Callable
from dataclasses import replace
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from ecs_express_deploy.core.deployments.aws_ecs_express import (
    DeployInputs,
    Operation,
    RemoteRequestError,
    build_specification,
    dispatch_request,
)

SERVICE_ARN = "arn:aws:ecs:us-east-1:123456789012:service/default/web"


def test_create_sends_full_specification(ecs: MagicMock, required_inputs: DeployInputs) -> None:
    spec = build_specification(
        replace(required_inputs, service_name="web", tags="team=platform", cpu="512")
    )
    ecs.create_express_gateway_service.return_value = {"service": {"serviceArn": SERVICE_ARN}}

    result = dispatch_request(ecs, SERVICE_ARN, exists=False, spec=spec)

    ecs.create_express_gateway_service.assert_called_once_with(**spec.to_request())
    ecs.update_express_gateway_service.assert_not_called()
    assert result.operation is Operation.CREATE
    assert result.service_arn == SERVICE_ARN


def test_update_carries_arn_and_mutable_fields(
    ecs: MagicMock, required_inputs: DeployInputs
) -> None:
    spec = build_specification(
        replace(
            required_inputs,
            service_name="web",
            cluster="production",
            tags="team=platform",
            memory="2048",
        )
    )
    ecs.update_express_gateway_service.return_value = {"service": {"serviceArn": SERVICE_ARN}}

    result = dispatch_request(ecs, SERVICE_ARN, exists=True, spec=spec)

    kwargs = ecs.update_express_gateway_service.call_args.kwargs
    assert kwargs["serviceArn"] == SERVICE_ARN
    assert kwargs["executionRoleArn"] == required_inputs.execution_role_arn
    assert kwargs["memory"] == "2048"
    assert kwargs["primaryContainer"] == {"image": required_inputs.image}
    for create_only in ("infrastructureRoleArn", "serviceName", "cluster", "tags"):
        assert create_only not in kwargs
    assert result.operation is Operation.UPDATE


def test_nameless_create_takes_arn_from_response(
    ecs: MagicMock, required_inputs: DeployInputs
) -> None:
    assigned = "arn:aws:ecs:us-east-1:123456789012:service/default/generated-1a2b"
    ecs.create_express_gateway_service.return_value = {"service": {"serviceArn": assigned}}

    result = dispatch_request(ecs, None, exists=False, spec=build_specification(required_inputs))

    assert result.service_arn == assigned


def test_update_falls_back_to_computed_arn(ecs: MagicMock, required_inputs: DeployInputs) -> None:
    ecs.update_express_gateway_service.return_value = {"service": {}}
    spec = build_specification(replace(required_inputs, service_name="web"))

    result = dispatch_request(ecs, SERVICE_ARN, exists=True, spec=spec)

    assert result.service_arn == SERVICE_ARN


def test_missing_arn_everywhere_is_an_error(
    ecs: MagicMock, required_inputs: DeployInputs
) -> None:
    ecs.create_express_gateway_service.return_value = {}

    with pytest.raises(RemoteRequestError, match="no service ARN"):
        dispatch_request(ecs, None, exists=False, spec=build_specification(required_inputs))


@pytest.mark.parametrize(
    "code, expected",
    [
        ("AccessDeniedException", "IAM permissions"),
        ("AccessDenied", "execution role and infrastructure role"),
        ("InvalidParameterException", "Invalid parameter"),
        ("ClusterNotFoundException", "'production'"),
    ],
)
def test_known_errors_are_rewrapped(
    ecs: MagicMock,
    required_inputs: DeployInputs,
    client_error: Callable[..., ClientError],
    code: str,
    expected: str,
) -> None:
    error = client_error(code, "remote said no")
    ecs.create_express_gateway_service.side_effect = error
    spec = build_specification(replace(required_inputs, cluster="production"))

    with pytest.raises(RemoteRequestError) as exc_info:
        dispatch_request(ecs, None, exists=False, spec=spec)

    assert expected in str(exc_info.value)
    assert "remote said no" in str(exc_info.value)
    assert exc_info.value.__cause__ is error


def test_cluster_not_found_suggests_region_check(
    ecs: MagicMock, required_inputs: DeployInputs, client_error: Callable[..., ClientError]
) -> None:
    ecs.update_express_gateway_service.side_effect = client_error("ClusterNotFoundException")
    spec = build_specification(replace(required_inputs, service_name="web"))

    with pytest.raises(RemoteRequestError, match="region"):
        dispatch_request(ecs, SERVICE_ARN, exists=True, spec=spec)


def test_unknown_errors_propagate_unchanged(
    ecs: MagicMock, required_inputs: DeployInputs, client_error: Callable[..., ClientError]
) -> None:
    error = client_error("ServerException", "internal error")
    ecs.create_express_gateway_service.side_effect = error

    with pytest.raises(ClientError) as exc_info:
        dispatch_request(ecs, None, exists=False, spec=build_specification(required_inputs))

    assert exc_info.value is error
