"""Service-broker access reconciliation core.

Layered flow of one pass:
1) resolve and expand the desired declarations against the pass snapshot
2) switch plan public flags for services named by the policy
3) normalize observed grants into compact declarations
4) expand the observed declarations
5) diff observed and desired tuples
6) create missing grants, then revoke unwanted ones
"""

from __future__ import annotations

from .apply import AccessApplier, ApplyResult, PublicFlagChange, public_flag_changes
from .diff import AccessDiff, diff_access
from .engine import ReconciliationEngine, ReconciliationResult, build_engine, reconcile_access
from .errors import (
    AccessReconciliationError,
    PlanNotFoundError,
    PublicAccessExpansionError,
    ServiceNotFoundError,
)
from .expand import expand_declaration, expand_declarations, expand_observed
from .normalize import ObservedAccessNormalizer, compact_org_access
from .snapshot import PlatformSnapshot, fetch_snapshot

__all__ = [
    "AccessApplier",
    "AccessDiff",
    "AccessReconciliationError",
    "ApplyResult",
    "ObservedAccessNormalizer",
    "PlanNotFoundError",
    "PlatformSnapshot",
    "PublicAccessExpansionError",
    "PublicFlagChange",
    "ReconciliationEngine",
    "ReconciliationResult",
    "ServiceNotFoundError",
    "build_engine",
    "compact_org_access",
    "diff_access",
    "expand_declaration",
    "expand_declarations",
    "expand_observed",
    "fetch_snapshot",
    "public_flag_changes",
    "reconcile_access",
]
