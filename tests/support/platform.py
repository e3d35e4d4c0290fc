"""In-memory platform fakes implementing every port of a reconciliation pass."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from itertools import count
from typing import TYPE_CHECKING

from planaccess.domain.model import (
    AccessTuple,
    Organization,
    PlanVisibility,
    ServiceBroker,
    ServiceOffering,
    ServicePlan,
)
from planaccess.domain.ports import VisibilityConflictError, VisibilityNotFoundError
from planaccess.domain.reconciliation import PlatformSnapshot, fetch_snapshot

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from planaccess.domain.model import BrokerRegistration


@dataclass
class PlatformState:
    brokers: dict[str, ServiceBroker] = field(default_factory=dict)
    services: dict[str, ServiceOffering] = field(default_factory=dict)
    plans: dict[str, ServicePlan] = field(default_factory=dict)
    organizations: list[Organization] = field(default_factory=list)
    visibilities: dict[str, PlanVisibility] = field(default_factory=dict)
    calls: list[tuple[str, ...]] = field(default_factory=list)
    ids: count[int] = field(default_factory=lambda: count(1))

    def next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self.ids)}"


@dataclass
class FakeBrokerRegistry:
    state: PlatformState

    def find_by_name(self, name: str) -> ServiceBroker | None:
        return next((b for b in self.state.brokers.values() if b.name == name), None)

    def create(self, registration: BrokerRegistration) -> ServiceBroker:
        broker = ServiceBroker(
            id=self.state.next_id("broker"),
            name=registration.name,
            url=registration.url,
            username=registration.username,
        )
        self.state.brokers[broker.id] = broker
        self.state.calls.append(("create_broker", broker.name))
        return broker

    def update(self, broker_id: str, registration: BrokerRegistration) -> ServiceBroker:
        broker = replace(
            self.state.brokers[broker_id],
            name=registration.name,
            url=registration.url,
            username=registration.username,
        )
        self.state.brokers[broker_id] = broker
        self.state.calls.append(("update_broker", broker.name))
        return broker

    def delete(self, broker_id: str) -> None:
        broker = self.state.brokers.pop(broker_id)
        self.state.calls.append(("delete_broker", broker.name))


@dataclass
class FakeCatalog:
    state: PlatformState

    def list_services(self, broker_id: str) -> list[ServiceOffering]:
        return [s for s in self.state.services.values() if s.id.startswith(f"{broker_id}:")]

    def list_plans(self, service_ids: Sequence[str]) -> list[ServicePlan]:
        wanted = set(service_ids)
        return [plan for plan in self.state.plans.values() if plan.service_id in wanted]


@dataclass
class FakeOrgDirectory:
    state: PlatformState
    page_size: int = 2

    def list_organizations(self, page_limit: int = 0) -> list[Organization]:
        orgs = self.state.organizations
        if page_limit:
            return orgs[: page_limit * self.page_size]
        return list(orgs)


@dataclass
class FakeVisibilityStore:
    state: PlatformState
    conflict_on_create: set[tuple[str, str]] = field(default_factory=set)
    missing_on_delete: set[str] = field(default_factory=set)
    fail_on_create: set[tuple[str, str]] = field(default_factory=set)

    def search(
        self,
        *,
        plan_id: str | None = None,
        org_id: str | None = None,
    ) -> list[PlanVisibility]:
        self.state.calls.append(("search", plan_id or "", org_id or ""))
        return [
            visibility
            for visibility in self.state.visibilities.values()
            if (plan_id is None or visibility.plan_id == plan_id)
            and (org_id is None or visibility.organization_id == org_id)
        ]

    def create(self, plan_id: str, org_id: str) -> PlanVisibility:
        if (plan_id, org_id) in self.fail_on_create:
            raise RuntimeError(f"platform rejected {plan_id}/{org_id}")
        if (plan_id, org_id) in self.conflict_on_create or any(
            v.plan_id == plan_id and v.organization_id == org_id
            for v in self.state.visibilities.values()
        ):
            raise VisibilityConflictError(plan_id=plan_id, org_id=org_id)
        visibility = PlanVisibility(
            id=self.state.next_id("visibility"),
            plan_id=plan_id,
            organization_id=org_id,
        )
        self.state.visibilities[visibility.id] = visibility
        self.state.calls.append(("create", plan_id, org_id))
        return visibility

    def delete(self, visibility_id: str) -> None:
        if visibility_id in self.missing_on_delete:
            self.state.visibilities.pop(visibility_id, None)
            raise VisibilityNotFoundError(visibility_id)
        if self.state.visibilities.pop(visibility_id, None) is None:
            raise VisibilityNotFoundError(visibility_id)
        self.state.calls.append(("delete", visibility_id))


@dataclass
class FakePlanStore:
    state: PlatformState

    def set_public(self, plan: ServicePlan, service_id: str, public: bool) -> None:
        assert self.state.plans[plan.id].service_id == service_id
        self.state.plans[plan.id] = replace(self.state.plans[plan.id], public=public)
        self.state.calls.append(("set_public", plan.id, str(public)))


class FakePlatform:
    """A broker catalog, organization directory and visibility store held in memory."""

    def __init__(self) -> None:
        self.state = PlatformState()
        self.brokers = FakeBrokerRegistry(self.state)
        self.catalog = FakeCatalog(self.state)
        self.directory = FakeOrgDirectory(self.state)
        self.visibilities = FakeVisibilityStore(self.state)
        self.plans = FakePlanStore(self.state)

    def add_broker(self, name: str, url: str = "https://broker.example.com") -> ServiceBroker:
        broker = ServiceBroker(id=f"{name}-guid", name=name, url=url)
        self.state.brokers[broker.id] = broker
        return broker

    def add_service(
        self,
        broker: ServiceBroker,
        label: str,
        plans: Mapping[str, bool],
    ) -> ServiceOffering:
        """Add ``label`` with plans given as ``{name: public}``."""

        service = ServiceOffering(id=f"{broker.id}:{label}", label=label)
        self.state.services[service.id] = service
        for name, public in plans.items():
            plan = ServicePlan(
                id=f"{service.id}:{name}", name=name, service_id=service.id, public=public
            )
            self.state.plans[plan.id] = plan
        return service

    def add_orgs(self, *org_ids: str) -> None:
        self.state.organizations.extend(Organization(id=org_id) for org_id in org_ids)

    def plan_id(self, service: str, plan: str) -> str:
        return next(
            p.id
            for p in self.state.plans.values()
            if p.name == plan and self.state.services[p.service_id].label == service
        )

    def grant(self, service: str, plan: str, org_id: str) -> PlanVisibility:
        visibility = PlanVisibility(
            id=self.state.next_id("visibility"),
            plan_id=self.plan_id(service, plan),
            organization_id=org_id,
        )
        self.state.visibilities[visibility.id] = visibility
        return visibility

    def set_public(self, service: str, plan: str, public: bool) -> None:
        plan_id = self.plan_id(service, plan)
        self.state.plans[plan_id] = replace(self.state.plans[plan_id], public=public)

    def is_public(self, service: str, plan: str) -> bool:
        return self.state.plans[self.plan_id(service, plan)].public

    def granted(self) -> set[AccessTuple]:
        granted: set[AccessTuple] = set()
        for visibility in self.state.visibilities.values():
            plan = self.state.plans[visibility.plan_id]
            service = self.state.services[plan.service_id]
            granted.add(AccessTuple(service.label, plan.name, visibility.organization_id))
        return granted

    def mutations(self) -> list[tuple[str, ...]]:
        return [call for call in self.state.calls if call[0] != "search"]

    def snapshot(self, broker_name: str, *, page_limit: int = 0) -> PlatformSnapshot:
        broker = self.brokers.find_by_name(broker_name)
        assert broker is not None
        return fetch_snapshot(
            broker, catalog=self.catalog, directory=self.directory, page_limit=page_limit
        )


def make_snapshot(
    plans: Mapping[str, Mapping[str, bool]],
    org_ids: Sequence[str],
    *,
    broker_name: str = "db-broker",
) -> PlatformSnapshot:
    """Build a snapshot directly from ``{service: {plan: public}}``."""

    broker = ServiceBroker(id=f"{broker_name}-guid", name=broker_name, url="https://b.example")
    services = tuple(
        ServiceOffering(
            id=f"{label}-guid",
            label=label,
            plans=tuple(
                ServicePlan(
                    id=f"{label}-{name}-guid",
                    name=name,
                    service_id=f"{label}-guid",
                    public=public,
                )
                for name, public in service_plans.items()
            ),
        )
        for label, service_plans in plans.items()
    )
    return PlatformSnapshot(
        broker=replace(broker, services=services),
        organizations=tuple(Organization(id=org_id) for org_id in org_ids),
    )
