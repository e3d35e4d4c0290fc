"""Domain services for service broker registrations."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from planaccess.domain.model import BrokerRegistration, ServiceBroker
    from planaccess.domain.ports import BrokerRegistry

log = getLogger(__name__)


class BrokerNotFoundError(LookupError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Service broker '{name}' is not registered")


def needs_update(broker: ServiceBroker, registration: BrokerRegistration) -> bool:
    """Whether the registered broker drifted from ``registration``.

    Passwords cannot be read back from the platform, so a password change only
    triggers an update through ``force_update``.
    """

    return (
        registration.force_update
        or broker.url != registration.url
        or (broker.username or None) != (registration.username or None)
    )


def ensure_broker_registration(
    registry: BrokerRegistry,
    registration: BrokerRegistration,
) -> ServiceBroker:
    """Register the broker when missing, update it when it drifted."""

    existing = registry.find_by_name(registration.name)
    if existing is None:
        log.info("Registering service broker %s at %s", registration.name, registration.url)
        return registry.create(registration)

    if needs_update(existing, registration):
        log.info("Updating service broker %s (%s)", registration.name, existing.id)
        return registry.update(existing.id, registration)

    log.info(
        "Skipping registration of service broker %s because it already exists",
        registration.name,
    )
    return existing


def require_broker(registry: BrokerRegistry, name: str) -> ServiceBroker:
    broker = registry.find_by_name(name)
    if broker is None:
        raise BrokerNotFoundError(name)
    return broker


def deregister_broker(registry: BrokerRegistry, name: str) -> bool:
    """Delete the broker registration; returns ``False`` when it did not exist."""

    broker = registry.find_by_name(name)
    if broker is None:
        log.warning("Service broker %s is not registered, nothing to remove", name)
        return False
    registry.delete(broker.id)
    log.info("Removed service broker %s (%s)", name, broker.id)
    return True
