from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from planaccess.domain.model import AccessTuple, PlanAccess, PlanInOrgAccess, PublicAccess
from planaccess.domain.reconciliation import (
    AccessApplier,
    AccessDiff,
    ApplyResult,
    public_flag_changes,
)

if TYPE_CHECKING:
    from tests.support.platform import FakePlatform


def _applier(platform: FakePlatform) -> AccessApplier:
    return AccessApplier(platform.visibilities, platform.plans)


def test_creates_before_deletes_in_sorted_order(platform: FakePlatform) -> None:
    stale = platform.grant("db", "large", "org-b")
    diff = AccessDiff(
        to_create=frozenset(
            {AccessTuple("db", "small", "org-b"), AccessTuple("db", "small", "org-a")}
        ),
        to_delete=frozenset({AccessTuple("db", "large", "org-b")}),
    )

    result = _applier(platform)(diff, platform.snapshot("db-broker"), result=ApplyResult())

    assert platform.mutations() == [
        ("create", platform.plan_id("db", "small"), "org-a"),
        ("create", platform.plan_id("db", "small"), "org-b"),
        ("delete", stale.id),
    ]
    assert (result.created, result.deleted) == (2, 1)


def test_conflicting_create_is_counted_not_raised(platform: FakePlatform) -> None:
    platform.grant("db", "small", "org-a")
    diff = AccessDiff(to_create=frozenset({AccessTuple("db", "small", "org-a")}))

    result = _applier(platform)(diff, platform.snapshot("db-broker"), result=ApplyResult())

    assert result.already_present == 1
    assert result.created == 0
    assert platform.granted() == {AccessTuple("db", "small", "org-a")}


def test_delete_of_absent_grant_is_skipped(platform: FakePlatform) -> None:
    diff = AccessDiff(to_delete=frozenset({AccessTuple("db", "small", "org-a")}))

    result = _applier(platform)(diff, platform.snapshot("db-broker"), result=ApplyResult())

    assert result.already_absent == 1
    assert platform.mutations() == []


def test_grant_deleted_concurrently_is_treated_as_absent(platform: FakePlatform) -> None:
    visibility = platform.grant("db", "small", "org-a")
    platform.visibilities.missing_on_delete.add(visibility.id)
    diff = AccessDiff(to_delete=frozenset({AccessTuple("db", "small", "org-a")}))

    result = _applier(platform)(diff, platform.snapshot("db-broker"), result=ApplyResult())

    assert (result.deleted, result.already_absent) == (0, 1)


def test_failure_aborts_remaining_operations(
    platform: FakePlatform,
    caplog: pytest.LogCaptureFixture,
) -> None:
    platform.visibilities.fail_on_create.add((platform.plan_id("db", "small"), "org-a"))
    platform.grant("db", "large", "org-b")
    diff = AccessDiff(
        to_create=frozenset(
            {AccessTuple("db", "large", "org-a"), AccessTuple("db", "small", "org-a")}
        ),
        to_delete=frozenset({AccessTuple("db", "large", "org-b")}),
    )

    with pytest.raises(RuntimeError, match="platform rejected"):
        _applier(platform)(diff, platform.snapshot("db-broker"), result=ApplyResult())

    assert platform.mutations() == [("create", platform.plan_id("db", "large"), "org-a")]
    assert "Applied 1 of 2 creations before failure" in caplog.text


def test_public_flag_changes_target_declared_services(platform: FakePlatform) -> None:
    snapshot = platform.snapshot("db-broker")

    changes = public_flag_changes([PublicAccess(service="db")], snapshot)

    assert {(change.plan.name, change.public) for change in changes} == {
        ("small", True),
        ("large", True),
    }


def test_public_flag_changes_fall_back_to_non_public(platform: FakePlatform) -> None:
    platform.set_public("db", "small", True)
    snapshot = platform.snapshot("db-broker")

    changes = public_flag_changes(
        [PlanInOrgAccess(service="db", plan="small", org_id="org-a")], snapshot
    )

    assert [(change.plan.name, change.public) for change in changes] == [("small", False)]


def test_public_flags_skip_services_not_in_policy(platform: FakePlatform) -> None:
    broker = platform.brokers.find_by_name("db-broker")
    assert broker is not None
    platform.add_service(broker, "cache", {"shared": True})

    changes = public_flag_changes(
        [PlanAccess(service="db", plan="small")], platform.snapshot("db-broker")
    )

    assert all(change.plan.name != "shared" for change in changes)


def test_apply_public_flags_updates_plan_store(platform: FakePlatform) -> None:
    snapshot = platform.snapshot("db-broker")
    changes = public_flag_changes([PublicAccess(service="db")], snapshot)
    result = ApplyResult()

    _applier(platform).apply_public_flags(changes, result=result)

    assert result.public_flags_updated == 2
    assert platform.is_public("db", "small")
    assert platform.is_public("db", "large")
