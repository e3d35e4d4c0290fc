"""
Platform resources as seen by the reconciliation core:
organizations, broker catalogs and plan visibility grants.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(frozen=True, slots=True, kw_only=True)
class Organization:
    id: str
    name: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ServicePlan:
    """A purchasable tier of a service.

    ``public`` plans are visible to every organization without grant records.
    """

    id: str
    name: str
    service_id: str
    public: bool = False

    def matches(self, reference: str) -> bool:
        return reference in (self.name, self.id)


@dataclass(frozen=True, slots=True, kw_only=True)
class ServiceOffering:
    id: str
    label: str
    plans: tuple[ServicePlan, ...] = ()

    def matches(self, reference: str) -> bool:
        return reference in (self.label, self.id)

    def find_plan(self, reference: str) -> ServicePlan | None:
        """Return the plan named or identified by ``reference`` owned by this service."""

        for plan in self.plans:
            if plan.matches(reference) and plan.service_id == self.id:
                return plan
        return None

    @property
    def has_public_plan(self) -> bool:
        return any(plan.public for plan in self.plans)

    def with_public_flags(self, flags: Mapping[str, bool]) -> ServiceOffering:
        """Return a copy whose plans carry the public flags in ``flags`` (keyed by plan id)."""

        if not any(plan.id in flags for plan in self.plans):
            return self
        plans = tuple(
            replace(plan, public=flags[plan.id]) if plan.id in flags else plan
            for plan in self.plans
        )
        return replace(self, plans=plans)


@dataclass(frozen=True, slots=True, kw_only=True)
class ServiceBroker:
    """A registered service catalog provider and, once loaded, its catalog."""

    id: str
    name: str
    url: str
    username: str | None = None
    services: tuple[ServiceOffering, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True, kw_only=True)
class BrokerRegistration:
    """Desired registration of a broker on the platform."""

    name: str
    url: str
    username: str | None = None
    password: str | None = None
    force_update: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class PlanVisibility:
    """Grant permitting one organization to provision one non-public plan."""

    id: str
    plan_id: str
    organization_id: str
