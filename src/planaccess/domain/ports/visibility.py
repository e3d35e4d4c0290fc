"""Ports for plan visibility grants and plan public flags."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from planaccess.domain.model import PlanVisibility, ServicePlan


class VisibilityConflictError(RuntimeError):
    """Raised when a grant for the (plan, organization) combination already exists."""

    def __init__(self, *, plan_id: str, org_id: str, message: str | None = None) -> None:
        self.plan_id = plan_id
        self.org_id = org_id
        super().__init__(
            message or f"Visibility for plan '{plan_id}' in organization '{org_id}' already exists"
        )


class VisibilityNotFoundError(LookupError):
    """Raised when deleting a grant that no longer exists."""

    def __init__(self, visibility_id: str) -> None:
        self.visibility_id = visibility_id
        super().__init__(f"Plan visibility '{visibility_id}' not found")


@runtime_checkable
class VisibilityStore(Protocol):
    """Create, search and delete plan visibility grants."""

    def search(
        self,
        *,
        plan_id: str | None = None,
        org_id: str | None = None,
    ) -> Sequence[PlanVisibility]: ...

    def create(self, plan_id: str, org_id: str) -> PlanVisibility:
        """Grant ``plan_id`` to ``org_id``; raises ``VisibilityConflictError`` on duplicates."""
        ...

    def delete(self, visibility_id: str) -> None:
        """Revoke a grant; raises ``VisibilityNotFoundError`` when it is already gone."""
        ...


@runtime_checkable
class PlanStore(Protocol):
    def set_public(self, plan: ServicePlan, service_id: str, public: bool) -> None: ...


__all__ = [
    "PlanStore",
    "VisibilityConflictError",
    "VisibilityNotFoundError",
    "VisibilityStore",
]
