"""Ports for reading a broker catalog and the organization directory."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from planaccess.domain.model import Organization, ServiceOffering, ServicePlan


@runtime_checkable
class CatalogProvider(Protocol):
    """Read-only access to the services and plans a broker offers."""

    def list_services(self, broker_id: str) -> Sequence[ServiceOffering]:
        """Return the broker's services; plans are loaded separately."""
        ...

    def list_plans(self, service_ids: Sequence[str]) -> Sequence[ServicePlan]: ...


@runtime_checkable
class OrgDirectory(Protocol):
    """Enumerates every organization known to the platform."""

    def list_organizations(self, page_limit: int = 0) -> Sequence[Organization]:
        """Return organizations, reading at most ``page_limit`` pages (0 = all)."""
        ...


__all__ = ["CatalogProvider", "OrgDirectory"]
