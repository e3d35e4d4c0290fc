from __future__ import annotations

import pytest

from tests.support.platform import FakePlatform


@pytest.fixture
def platform() -> FakePlatform:
    """Broker ``db-broker`` offering ``db`` (small, large) to ``org-a`` and ``org-b``."""

    fake = FakePlatform()
    broker = fake.add_broker("db-broker")
    fake.add_service(broker, "db", {"small": False, "large": False})
    fake.add_orgs("org-a", "org-b")
    return fake


@pytest.fixture(autouse=True)
def _cloudfoundry_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "CF_API_ENDPOINT",
        "CF_ACCESS_TOKEN",
        "CF_SKIP_SSL_VALIDATION",
        "CF_MAX_CALLS_PER_SECOND",
    ):
        monkeypatch.delenv(name, raising=False)
