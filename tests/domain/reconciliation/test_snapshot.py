from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from planaccess.domain.reconciliation import ServiceNotFoundError, fetch_snapshot

if TYPE_CHECKING:
    from tests.support.platform import FakePlatform


def test_fetch_snapshot_attaches_plans_to_their_services(platform: FakePlatform) -> None:
    broker = platform.brokers.find_by_name("db-broker")
    assert broker is not None
    platform.add_service(broker, "cache", {"shared": True})

    snapshot = fetch_snapshot(broker, catalog=platform.catalog, directory=platform.directory)

    assert [service.label for service in snapshot.services] == ["db", "cache"]
    assert [plan.name for plan in snapshot.service("db").plans] == ["small", "large"]
    assert snapshot.service("cache").has_public_plan
    assert snapshot.org_ids == ("org-a", "org-b")


def test_fetch_snapshot_honours_org_page_limit(platform: FakePlatform) -> None:
    platform.add_orgs("org-c", "org-d", "org-e")
    broker = platform.brokers.find_by_name("db-broker")
    assert broker is not None

    snapshot = fetch_snapshot(
        broker, catalog=platform.catalog, directory=platform.directory, page_limit=1
    )

    assert snapshot.org_ids == ("org-a", "org-b")


def test_snapshot_service_lookup_fails_for_unknown_label(platform: FakePlatform) -> None:
    snapshot = platform.snapshot("db-broker")

    with pytest.raises(ServiceNotFoundError):
        snapshot.service("cache")


def test_with_public_flags_projects_without_mutating(platform: FakePlatform) -> None:
    snapshot = platform.snapshot("db-broker")
    small = snapshot.plan(snapshot.service("db"), "small")

    projected = snapshot.with_public_flags({small.id: True})

    assert projected.service("db").has_public_plan
    assert not snapshot.service("db").has_public_plan
    assert snapshot.with_public_flags({}) is snapshot
