"""Domain port definitions for adapters."""

from __future__ import annotations

from .brokers import BrokerRegistry
from .catalog import CatalogProvider, OrgDirectory
from .visibility import (
    PlanStore,
    VisibilityConflictError,
    VisibilityNotFoundError,
    VisibilityStore,
)

__all__ = [
    "BrokerRegistry",
    "CatalogProvider",
    "OrgDirectory",
    "PlanStore",
    "VisibilityConflictError",
    "VisibilityNotFoundError",
    "VisibilityStore",
]
