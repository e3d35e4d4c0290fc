"""Translate a validated policy document into domain declarations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from planaccess.config.env import require_env_var
from planaccess.domain.model import AccessPolicy, BrokerRegistration, declare_access

if TYPE_CHECKING:
    from .schema import BrokerSection, PolicyDocument


def to_broker_registration(section: BrokerSection) -> BrokerRegistration | None:
    """Registration for brokers that carry a url; ``None`` for lookup-only policies.

    The password is read from the environment variable named by ``password_env``.
    """

    if section.url is None:
        return None
    password = require_env_var(section.password_env) if section.password_env else None
    return BrokerRegistration(
        name=section.name,
        url=section.url,
        username=section.username,
        password=password,
        force_update=section.force_update,
    )


def to_access_policy(document: PolicyDocument) -> AccessPolicy:
    declarations = tuple(
        declare_access(entry.service, entry.plan, entry.org_id)
        for entry in document.service_access
    )
    return AccessPolicy(
        broker_name=document.broker.name,
        declarations=declarations,
        registration=to_broker_registration(document.broker),
    )
