"""Translate Cloud Controller resources into platform entities."""

from __future__ import annotations

from typing import TYPE_CHECKING

from planaccess.domain.model import (
    Organization,
    PlanVisibility,
    ServiceBroker,
    ServiceOffering,
    ServicePlan,
)

from .schema import ServiceBrokerRequest

if TYPE_CHECKING:
    from planaccess.domain.model import BrokerRegistration

    from .schema import (
        OrganizationResource,
        ServiceBrokerResource,
        ServicePlanResource,
        ServicePlanVisibilityResource,
        ServiceResource,
    )


def to_service_broker(resource: ServiceBrokerResource) -> ServiceBroker:
    return ServiceBroker(
        id=resource.metadata.guid,
        name=resource.entity.name,
        url=resource.entity.broker_url,
        username=resource.entity.auth_username,
    )


def to_service_offering(resource: ServiceResource) -> ServiceOffering:
    return ServiceOffering(id=resource.metadata.guid, label=resource.entity.label)


def to_service_plan(resource: ServicePlanResource) -> ServicePlan:
    return ServicePlan(
        id=resource.metadata.guid,
        name=resource.entity.name,
        service_id=resource.entity.service_guid,
        public=resource.entity.public,
    )


def to_organization(resource: OrganizationResource) -> Organization:
    return Organization(id=resource.metadata.guid, name=resource.entity.name)


def to_plan_visibility(resource: ServicePlanVisibilityResource) -> PlanVisibility:
    return PlanVisibility(
        id=resource.metadata.guid,
        plan_id=resource.entity.service_plan_guid,
        organization_id=resource.entity.organization_guid,
    )


def to_broker_request(registration: BrokerRegistration) -> ServiceBrokerRequest:
    return ServiceBrokerRequest(
        name=registration.name,
        broker_url=registration.url,
        auth_username=registration.username,
        auth_password=registration.password,
    )
