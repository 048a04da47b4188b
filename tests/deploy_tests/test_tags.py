"""Tests for tag reconciliation on existing services."""

from collections.abc import Callable
from unittest.mock import MagicMock, call

import pytest
from botocore.exceptions import ClientError

from ecs_express_deploy.core.deployments.aws_ecs_express import (
    RemoteRequestError,
    Tag,
    compute_tag_changes,
    reconcile_tags,
)

SERVICE_ARN = "arn:aws:ecs:us-east-1:123456789012:service/default/web"


def test_diff_is_minimal() -> None:
    changes = compute_tag_changes(
        current=[Tag("A", "1"), Tag("B", "2")],
        desired=[Tag("B", "2"), Tag("C", "3")],
    )

    assert changes.to_remove == ("A",)
    assert changes.to_add == (Tag("C", "3"),)


def test_changed_value_is_re_added_not_removed() -> None:
    changes = compute_tag_changes(current=[Tag("env", "dev")], desired=[Tag("env", "prod")])

    assert changes.to_remove == ()
    assert changes.to_add == (Tag("env", "prod"),)


def test_omitted_desired_tags_remove_everything() -> None:
    changes = compute_tag_changes(current=[Tag("A", "1"), Tag("B", "2")], desired=None)

    assert changes.to_remove == ("A", "B")
    assert changes.to_add == ()


def test_last_duplicate_desired_key_wins() -> None:
    changes = compute_tag_changes(current=[], desired=[Tag("env", "dev"), Tag("env", "prod")])

    assert changes.to_add == (Tag("env", "prod"),)


def test_no_changes_makes_no_calls(ecs: MagicMock) -> None:
    changes = reconcile_tags(ecs, SERVICE_ARN, [Tag("A", "1")], [Tag("A", "1")])

    assert changes.is_empty
    assert ecs.method_calls == []


def test_removals_are_applied_before_additions(ecs: MagicMock) -> None:
    reconcile_tags(
        ecs,
        SERVICE_ARN,
        current=[Tag("A", "1"), Tag("B", "2")],
        desired=[Tag("B", "2"), Tag("C", "3")],
    )

    assert ecs.method_calls == [
        call.untag_resource(resourceArn=SERVICE_ARN, tagKeys=["A"]),
        call.tag_resource(resourceArn=SERVICE_ARN, tags=[{"key": "C", "value": "3"}]),
    ]


def test_only_additions_skip_untag(ecs: MagicMock) -> None:
    reconcile_tags(ecs, SERVICE_ARN, current=[], desired=[Tag("C", "3")])

    ecs.untag_resource.assert_not_called()
    ecs.tag_resource.assert_called_once()


def test_untag_failure_stops_before_tagging(
    ecs: MagicMock, client_error: Callable[..., ClientError]
) -> None:
    ecs.untag_resource.side_effect = client_error("ThrottlingException", "Rate exceeded")

    with pytest.raises(RemoteRequestError, match="Failed to remove tags"):
        reconcile_tags(ecs, SERVICE_ARN, [Tag("A", "1")], [Tag("C", "3")])

    ecs.tag_resource.assert_not_called()


def test_tag_failure_is_fatal(ecs: MagicMock, client_error: Callable[..., ClientError]) -> None:
    ecs.tag_resource.side_effect = client_error("InvalidParameterException", "bad tag")

    with pytest.raises(RemoteRequestError, match="bad tag"):
        reconcile_tags(ecs, SERVICE_ARN, [], [Tag("C", "3")])


def test_access_denied_on_tagging_carries_iam_guidance(
    ecs: MagicMock, client_error: Callable[..., ClientError]
) -> None:
    ecs.tag_resource.side_effect = client_error(
        "AccessDeniedException", "User is not authorized to perform ecs:TagResource"
    )

    with pytest.raises(RemoteRequestError) as exc_info:
        reconcile_tags(ecs, SERVICE_ARN, [], [Tag("C", "3")], cluster="prod")

    message = str(exc_info.value)
    assert message.startswith("Access denied: User is not authorized")
    assert "IAM permissions" in message


def test_missing_cluster_on_untag_names_the_cluster(
    ecs: MagicMock, client_error: Callable[..., ClientError]
) -> None:
    ecs.untag_resource.side_effect = client_error("ClusterNotFoundException", "gone")

    with pytest.raises(RemoteRequestError, match="Cluster not found: 'prod'"):
        reconcile_tags(ecs, SERVICE_ARN, [Tag("A", "1")], [], cluster="prod")

    ecs.tag_resource.assert_not_called()
