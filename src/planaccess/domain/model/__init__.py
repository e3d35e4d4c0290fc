"""Domain model for broker catalogs and plan access."""

from __future__ import annotations

from .access import (
    AccessDeclaration,
    AccessKind,
    AccessPolicy,
    AccessTuple,
    OrgAccess,
    PlanAccess,
    PlanInOrgAccess,
    PublicAccess,
    access_as_mapping,
    declare_access,
)
from .platform import (
    BrokerRegistration,
    Organization,
    PlanVisibility,
    ServiceBroker,
    ServiceOffering,
    ServicePlan,
)

__all__ = [
    "AccessDeclaration",
    "AccessKind",
    "AccessPolicy",
    "AccessTuple",
    "BrokerRegistration",
    "OrgAccess",
    "Organization",
    "PlanAccess",
    "PlanInOrgAccess",
    "PlanVisibility",
    "PublicAccess",
    "ServiceBroker",
    "ServiceOffering",
    "ServicePlan",
    "access_as_mapping",
    "declare_access",
]
