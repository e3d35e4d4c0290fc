"""Orchestrator for one access reconciliation pass.

The engine composes stage interfaces but does not prescribe concrete adapters:
expansion, normalization, diffing and application can each be swapped, which
keeps the pass testable against fixture snapshots.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from .apply import AccessApplier, ApplyResult, public_flag_changes, public_services
from .diff import AccessDiff, diff_access
from .expand import expand_declarations, expand_observed
from .normalize import ObservedAccessNormalizer

if TYPE_CHECKING:
    from collections.abc import Sequence

    from planaccess.domain.model import AccessDeclaration
    from planaccess.domain.ports import PlanStore, VisibilityStore

    from .apply import ApplyAccessDiff, PublicFlagChange
    from .diff import DiffAccess
    from .expand import ExpandDeclarations
    from .normalize import NormalizeObservedAccess
    from .snapshot import PlatformSnapshot

log = getLogger(__name__)


@dataclass(slots=True, kw_only=True)
class ReconciliationResult:
    diff: AccessDiff
    public_changes: tuple[PublicFlagChange, ...] = ()
    observed: tuple[AccessDeclaration, ...] = ()
    applied: ApplyResult = field(default_factory=ApplyResult)
    dry_run: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.public_changes) or not self.diff.is_empty


@dataclass(slots=True, kw_only=True)
class ReconciliationEngine:
    """Run a full pass from desired declarations to platform operations."""

    normalize: NormalizeObservedAccess
    apply: ApplyAccessDiff
    expand_desired: ExpandDeclarations = expand_declarations
    expand_observed: ExpandDeclarations = expand_observed
    diff: DiffAccess = diff_access

    def reconcile(
        self,
        desired: Sequence[AccessDeclaration],
        snapshot: PlatformSnapshot,
        *,
        dry_run: bool = False,
    ) -> ReconciliationResult:
        """Reconcile ``desired`` against the platform state behind ``snapshot``.

        The desired policy is fully resolved before the first mutation, so
        unknown services or plans abort the pass without side effects.
        """

        public_by_service = public_services(desired, snapshot)
        desired_tuples = self.expand_desired(
            [
                declaration
                for declaration in desired
                if not public_by_service[snapshot.service(declaration.service).id]
            ],
            snapshot,
        )

        result = ApplyResult()
        changes = public_flag_changes(desired, snapshot)
        if changes and not dry_run:
            self.apply.apply_public_flags(changes, result=result)
        snapshot = snapshot.with_public_flags({change.plan.id: change.public for change in changes})

        observed = self.normalize(snapshot)
        observed_tuples = self.expand_observed(observed, snapshot)
        diff = self.diff(observed_tuples, desired_tuples)
        log.info(
            "Access diff for broker %s: create=%s, delete=%s, public_flag_changes=%s",
            snapshot.broker.name,
            len(diff.to_create),
            len(diff.to_delete),
            len(changes),
        )

        if not dry_run and not diff.is_empty:
            self.apply(diff, snapshot, result=result)

        return ReconciliationResult(
            diff=diff,
            public_changes=changes,
            observed=tuple(observed),
            applied=result,
            dry_run=dry_run,
        )


def build_engine(*, visibilities: VisibilityStore, plans: PlanStore) -> ReconciliationEngine:
    return ReconciliationEngine(
        normalize=ObservedAccessNormalizer(visibilities),
        apply=AccessApplier(visibilities, plans),
    )


def reconcile_access(
    desired: Sequence[AccessDeclaration],
    snapshot: PlatformSnapshot,
    *,
    visibilities: VisibilityStore,
    plans: PlanStore,
    dry_run: bool = False,
) -> ReconciliationResult:
    """Single entry point: normalize, expand both sides, diff and apply."""

    engine = build_engine(visibilities=visibilities, plans=plans)
    return engine.reconcile(desired, snapshot, dry_run=dry_run)
