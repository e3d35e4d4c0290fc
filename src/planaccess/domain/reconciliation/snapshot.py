"""Read-only catalog and organization snapshot for one reconciliation pass.

Every stage receives the snapshot explicitly instead of querying the platform
for catalog or directory data. A snapshot is fetched at the start of a pass and
discarded afterwards; nothing is cached between passes.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, replace
from logging import getLogger
from typing import TYPE_CHECKING

from .errors import PlanNotFoundError, ServiceNotFoundError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from planaccess.domain.model import (
        Organization,
        ServiceBroker,
        ServiceOffering,
        ServicePlan,
    )
    from planaccess.domain.ports import CatalogProvider, OrgDirectory

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PlatformSnapshot:
    broker: ServiceBroker
    organizations: tuple[Organization, ...]

    @property
    def services(self) -> tuple[ServiceOffering, ...]:
        return self.broker.services

    @property
    def org_ids(self) -> tuple[str, ...]:
        return tuple(org.id for org in self.organizations)

    def service(self, reference: str) -> ServiceOffering:
        """Resolve a service by label or id."""

        for service in self.broker.services:
            if service.matches(reference):
                return service
        raise ServiceNotFoundError(service=reference, broker=self.broker.name)

    def plan(self, service: ServiceOffering, reference: str) -> ServicePlan:
        """Resolve a plan by name or id within ``service``."""

        plan = service.find_plan(reference)
        if plan is None:
            raise PlanNotFoundError(plan=reference, service=service.label)
        return plan

    def with_public_flags(self, flags: Mapping[str, bool]) -> PlatformSnapshot:
        """Return a snapshot reflecting plan public flags (keyed by plan id)."""

        if not flags:
            return self
        services = tuple(service.with_public_flags(flags) for service in self.broker.services)
        return replace(self, broker=replace(self.broker, services=services))


def fetch_snapshot(
    broker: ServiceBroker,
    *,
    catalog: CatalogProvider,
    directory: OrgDirectory,
    page_limit: int = 0,
) -> PlatformSnapshot:
    """Load the broker catalog and the organization directory."""

    services = list(catalog.list_services(broker.id))
    plans_by_service: dict[str, list[ServicePlan]] = defaultdict(list)
    if services:
        for plan in catalog.list_plans([service.id for service in services]):
            plans_by_service[plan.service_id].append(plan)

    loaded_services = tuple(
        replace(service, plans=tuple(plans_by_service.get(service.id, ())))
        for service in services
    )
    organizations = tuple(directory.list_organizations(page_limit))
    log.debug(
        "Loaded snapshot for broker %s: services=%s, plans=%s, organizations=%s",
        broker.name,
        len(loaded_services),
        sum(len(service.plans) for service in loaded_services),
        len(organizations),
    )
    return PlatformSnapshot(
        broker=replace(broker, services=loaded_services),
        organizations=organizations,
    )
