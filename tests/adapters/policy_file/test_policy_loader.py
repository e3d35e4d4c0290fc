from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from planaccess.adapters.policy_file import PolicyFileError, load_access_policy
from planaccess.config import MissingConfigurationError
from planaccess.domain.model import (
    BrokerRegistration,
    OrgAccess,
    PlanAccess,
    PlanInOrgAccess,
    PublicAccess,
)

if TYPE_CHECKING:
    from pathlib import Path

POLICY = """
[broker]
name = "db-broker"
url = "https://broker.example.com"
username = "admin"
password_env = "DB_BROKER_PASSWORD"

[[service_access]]
service = "db"
plan = "small"
org_id = "org-a"

[[service_access]]
service = "db"
plan = "large"

[[service_access]]
service = "db"
org_id = "org-b"

[[service_access]]
service = "cache"
plan = ""
"""


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "policy.toml"
    path.write_text(content, encoding="utf-8")
    return path


def test_load_access_policy_translates_declarations(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("DB_BROKER_PASSWORD", "s3cret")

    policy = load_access_policy(_write(tmp_path, POLICY))

    assert policy.broker_name == "db-broker"
    assert policy.registration == BrokerRegistration(
        name="db-broker",
        url="https://broker.example.com",
        username="admin",
        password="s3cret",
    )
    assert policy.declarations == (
        PlanInOrgAccess(service="db", plan="small", org_id="org-a"),
        PlanAccess(service="db", plan="large"),
        OrgAccess(service="db", org_id="org-b"),
        PublicAccess(service="cache"),
    )


def test_broker_without_url_is_lookup_only(tmp_path: Path) -> None:
    policy = load_access_policy(_write(tmp_path, '[broker]\nname = "db-broker"\n'))

    assert policy.registration is None
    assert policy.declarations == ()


def test_missing_password_variable_is_a_configuration_error(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.delenv("DB_BROKER_PASSWORD", raising=False)

    with pytest.raises(MissingConfigurationError, match="DB_BROKER_PASSWORD"):
        load_access_policy(_write(tmp_path, POLICY))


@pytest.mark.parametrize(
    ("content", "fragment"),
    [
        ('[broker]\nname = "b"\nurl = "ftp://broker"\n', "broker.url"),
        ('[broker]\nname = "  "\n', "broker.name"),
        ('[broker]\nname = "b"\nflavour = "x"\n', "broker.flavour"),
        ('[broker]\nname = "b"\n[[service_access]]\nplan = "small"\n', "service_access.0.service"),
        ("[broker\n", "invalid TOML"),
        ("", "broker"),
    ],
)
def test_invalid_policy_is_rejected_with_path(
    tmp_path: Path,
    content: str,
    fragment: str,
) -> None:
    path = _write(tmp_path, content)

    with pytest.raises(PolicyFileError) as excinfo:
        load_access_policy(path)

    assert excinfo.value.path == path
    assert fragment in str(excinfo.value)


def test_missing_file_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(PolicyFileError, match="cannot read policy file"):
        load_access_policy(tmp_path / "absent.toml")
