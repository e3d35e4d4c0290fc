"""Errors raised while resolving declarations against a broker catalog."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from planaccess.domain.model import AccessDeclaration


class AccessReconciliationError(RuntimeError):
    """Base class for fatal reconciliation errors."""


class ServiceNotFoundError(AccessReconciliationError, LookupError):
    def __init__(self, *, service: str, broker: str) -> None:
        self.service = service
        self.broker = broker
        super().__init__(f"Service '{service}' doesn't exist in broker '{broker}'.")


class PlanNotFoundError(AccessReconciliationError, LookupError):
    def __init__(self, *, plan: str, service: str) -> None:
        self.plan = plan
        self.service = service
        super().__init__(f"Plan '{plan}' doesn't exist in service '{service}'.")


class PublicAccessExpansionError(AccessReconciliationError, ValueError):
    """Raised when a whole-service declaration is expanded into tuples.

    Such declarations are applied through plan public flags instead.
    """

    def __init__(self, declaration: AccessDeclaration) -> None:
        self.declaration = declaration
        super().__init__(
            f"Declaration for service '{declaration.service}' without plan and organization "
            "denotes public access and cannot be expanded"
        )
