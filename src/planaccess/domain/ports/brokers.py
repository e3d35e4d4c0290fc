"""Port for service broker registrations."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from planaccess.domain.model import BrokerRegistration, ServiceBroker


@runtime_checkable
class BrokerRegistry(Protocol):
    """Lookup and lifecycle of broker registrations (catalog not included)."""

    def find_by_name(self, name: str) -> ServiceBroker | None: ...

    def create(self, registration: BrokerRegistration) -> ServiceBroker: ...

    def update(self, broker_id: str, registration: BrokerRegistration) -> ServiceBroker: ...

    def delete(self, broker_id: str) -> None: ...


__all__ = ["BrokerRegistry"]
