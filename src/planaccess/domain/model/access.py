"""Access declarations (compact form) and access tuples (expanded form).

A declaration names a service and optionally a plan and/or an organization.
The four combinations are modelled as separate variants so that every stage
handles each case explicitly:

- ``PublicAccess``      service only: every plan is public
- ``OrgAccess``         service + org: every plan granted to one organization
- ``PlanAccess``        service + plan: one plan granted to every organization
- ``PlanInOrgAccess``   service + plan + org: one plan granted to one organization
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from .platform import BrokerRegistration


class AccessKind(StrEnum):
    PUBLIC = "public"
    ORG = "org"
    PLAN = "plan"
    PLAN_IN_ORG = "plan_in_org"


@dataclass(frozen=True, slots=True, kw_only=True)
class PublicAccess:
    service: str
    kind: Literal[AccessKind.PUBLIC] = AccessKind.PUBLIC

    @property
    def plan(self) -> None:
        return None

    @property
    def org_id(self) -> None:
        return None


@dataclass(frozen=True, slots=True, kw_only=True)
class OrgAccess:
    service: str
    org_id: str
    kind: Literal[AccessKind.ORG] = AccessKind.ORG

    @property
    def plan(self) -> None:
        return None


@dataclass(frozen=True, slots=True, kw_only=True)
class PlanAccess:
    service: str
    plan: str
    kind: Literal[AccessKind.PLAN] = AccessKind.PLAN

    @property
    def org_id(self) -> None:
        return None


@dataclass(frozen=True, slots=True, kw_only=True)
class PlanInOrgAccess:
    service: str
    plan: str
    org_id: str
    kind: Literal[AccessKind.PLAN_IN_ORG] = AccessKind.PLAN_IN_ORG


type AccessDeclaration = PublicAccess | OrgAccess | PlanAccess | PlanInOrgAccess


@dataclass(frozen=True, slots=True, order=True)
class AccessTuple:
    """Fully concrete unit of access; the only form that is diffed."""

    service: str
    plan: str
    org_id: str

    def __str__(self) -> str:
        return f"{self.service}/{self.plan}@{self.org_id}"


def declare_access(
    service: str,
    plan: str | None = None,
    org_id: str | None = None,
) -> AccessDeclaration:
    """Build the declaration variant matching the given fields.

    Blank strings are treated as absent.
    """

    service = service.strip()
    if not service:
        raise ValueError("Access declaration requires a service")
    plan = (plan or "").strip() or None
    org_id = (org_id or "").strip() or None

    if plan is not None and org_id is not None:
        return PlanInOrgAccess(service=service, plan=plan, org_id=org_id)
    if plan is not None:
        return PlanAccess(service=service, plan=plan)
    if org_id is not None:
        return OrgAccess(service=service, org_id=org_id)
    return PublicAccess(service=service)


def access_as_mapping(declaration: AccessDeclaration) -> dict[str, str]:
    """Render a declaration with empty strings for absent fields."""

    return {
        "service": declaration.service,
        "plan": declaration.plan or "",
        "org_id": declaration.org_id or "",
    }


@dataclass(frozen=True, slots=True, kw_only=True)
class AccessPolicy:
    """Desired access for one broker, optionally with its registration."""

    broker_name: str
    declarations: tuple[AccessDeclaration, ...] = ()
    registration: BrokerRegistration | None = None
