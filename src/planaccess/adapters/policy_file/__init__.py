"""Access policy files (TOML)."""

from __future__ import annotations

from .loader import PolicyFileError, load_access_policy, load_policy_document
from .schema import BrokerSection, PolicyDocument, ServiceAccessEntry
from .translator import to_access_policy, to_broker_registration

__all__ = [
    "BrokerSection",
    "PolicyDocument",
    "PolicyFileError",
    "ServiceAccessEntry",
    "load_access_policy",
    "load_policy_document",
    "to_access_policy",
    "to_broker_registration",
]
