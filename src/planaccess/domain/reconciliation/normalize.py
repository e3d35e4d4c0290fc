"""Observed-state normalization: platform grants back into compact declarations.

Responsibilities of this stage:
- read plan visibility grants for every non-public plan of the broker catalog
- collapse full coverage into wildcard declarations
- avoid any mutation of the platform

Two behaviours are kept exactly as the platform tooling always had them and are
open for product clarification:
- the first public plan marks the whole service as public, sibling plans are
  not examined
- collapsing per-organization records uses an (org, plan) bookkeeping key even
  though the collapsed record has no plan
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Protocol

from planaccess.domain.model import OrgAccess, PlanAccess, PlanInOrgAccess, PublicAccess

if TYPE_CHECKING:
    from collections.abc import Sequence

    from planaccess.domain.model import AccessDeclaration, ServiceOffering
    from planaccess.domain.ports import VisibilityStore

    from .snapshot import PlatformSnapshot

log = getLogger(__name__)


class NormalizeObservedAccess(Protocol):
    def __call__(self, snapshot: PlatformSnapshot) -> list[AccessDeclaration]: ...


@dataclass(slots=True)
class ObservedAccessNormalizer:
    """Produce the compact declarations describing what is currently granted."""

    visibilities: VisibilityStore

    def __call__(self, snapshot: PlatformSnapshot) -> list[AccessDeclaration]:
        declarations: list[AccessDeclaration] = []
        for service in snapshot.services:
            declarations.extend(self._normalize_service(service, snapshot))
        log.debug(
            "Normalized observed access for broker %s into %s declarations",
            snapshot.broker.name,
            len(declarations),
        )
        return declarations

    def _normalize_service(
        self,
        service: ServiceOffering,
        snapshot: PlatformSnapshot,
    ) -> list[AccessDeclaration]:
        in_all_orgs: list[AccessDeclaration] = []
        plan_in_org: list[PlanInOrgAccess] = []
        unlisted: list[AccessDeclaration] = []
        all_plans_in_all_orgs = True
        known_orgs = set(snapshot.org_ids)

        for plan in service.plans:
            if plan.public:
                return [PublicAccess(service=service.label)]
            granted = self.visibilities.search(plan_id=plan.id)
            granted_orgs = {visibility.organization_id for visibility in granted}
            if known_orgs <= granted_orgs:
                in_all_orgs.append(PlanAccess(service=service.label, plan=plan.name))
                # grants beyond the listed directory are not covered by the wildcard
                unlisted.extend(
                    PlanInOrgAccess(service=service.label, plan=plan.name, org_id=org_id)
                    for org_id in sorted(granted_orgs - known_orgs)
                )
                continue
            all_plans_in_all_orgs = False
            plan_in_org.extend(
                PlanInOrgAccess(
                    service=service.label,
                    plan=plan.name,
                    org_id=visibility.organization_id,
                )
                for visibility in granted
            )

        if all_plans_in_all_orgs:
            return [PublicAccess(service=service.label), *unlisted]

        collapsed, explicit = compact_org_access(plan_in_org, plan_count=len(service.plans))
        return _unique([*in_all_orgs, *unlisted, *collapsed, *explicit])


def compact_org_access(
    records: Sequence[PlanInOrgAccess],
    *,
    plan_count: int,
) -> tuple[list[OrgAccess], list[PlanInOrgAccess]]:
    """Split explicit grants into per-organization wildcards and leftovers.

    An organization holding as many explicit grants as the service has plans
    collapses into one ``OrgAccess``. Bookkeeping is keyed by (org, plan).
    """

    collapsed: list[OrgAccess] = []
    explicit: list[PlanInOrgAccess] = []
    seen: set[tuple[str, str]] = set()
    for record in records:
        key = (record.org_id, record.plan)
        if key in seen:
            continue
        if sum(1 for other in records if other.org_id == record.org_id) == plan_count:
            collapsed.append(OrgAccess(service=record.service, org_id=record.org_id))
            seen.add(key)
            continue
        explicit.append(record)
    return collapsed, explicit


def _unique(declarations: list[AccessDeclaration]) -> list[AccessDeclaration]:
    return list(dict.fromkeys(declarations))
