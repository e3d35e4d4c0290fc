"""Apply stage: public flags, grant creations and grant revocations.

Responsibilities of this stage:
- switch plan public flags for services named by the desired policy
- create missing grants, tolerating grants that already exist
- revoke unwanted grants, tolerating grants that are already gone

Creations are fully processed before deletions. A failure aborts the stage,
logs how far it got and propagates the error unchanged; earlier operations of
the pass are not rolled back.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Protocol

from planaccess.domain.model import PublicAccess
from planaccess.domain.ports import VisibilityConflictError, VisibilityNotFoundError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from planaccess.domain.model import AccessDeclaration, AccessTuple, ServicePlan
    from planaccess.domain.ports import PlanStore, VisibilityStore

    from .diff import AccessDiff
    from .snapshot import PlatformSnapshot

log = getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class PublicFlagChange:
    service_id: str
    plan: ServicePlan
    public: bool


@dataclass(slots=True)
class ApplyResult:
    """Summary of the operations performed against the platform."""

    public_flags_updated: int = 0
    created: int = 0
    already_present: int = 0
    deleted: int = 0
    already_absent: int = 0


class ApplyAccessDiff(Protocol):
    def apply_public_flags(
        self,
        changes: Sequence[PublicFlagChange],
        *,
        result: ApplyResult,
    ) -> None: ...

    def __call__(
        self,
        diff: AccessDiff,
        snapshot: PlatformSnapshot,
        *,
        result: ApplyResult,
    ) -> ApplyResult: ...


def public_services(
    declarations: Iterable[AccessDeclaration],
    snapshot: PlatformSnapshot,
) -> dict[str, bool]:
    """Target public flag per service id named by ``declarations``.

    A service is public when any whole-service declaration names it; every
    other named service falls back to non-public.
    """

    targets: dict[str, bool] = {}
    for declaration in declarations:
        service = snapshot.service(declaration.service)
        is_public = isinstance(declaration, PublicAccess)
        targets[service.id] = targets.get(service.id, False) or is_public
    return targets


def public_flag_changes(
    declarations: Iterable[AccessDeclaration],
    snapshot: PlatformSnapshot,
) -> tuple[PublicFlagChange, ...]:
    """Plans whose public flag differs from the target of their service."""

    targets = public_services(declarations, snapshot)
    return tuple(
        PublicFlagChange(service_id=service.id, plan=plan, public=targets[service.id])
        for service in snapshot.services
        if service.id in targets
        for plan in service.plans
        if plan.public != targets[service.id]
    )


@dataclass(slots=True)
class AccessApplier:
    visibilities: VisibilityStore
    plans: PlanStore

    def apply_public_flags(
        self,
        changes: Sequence[PublicFlagChange],
        *,
        result: ApplyResult,
    ) -> None:
        for change in changes:
            log.info(
                "Setting plan %s (%s) public=%s",
                change.plan.name,
                change.plan.id,
                change.public,
            )
            self.plans.set_public(change.plan, change.service_id, change.public)
            result.public_flags_updated += 1

    def __call__(
        self,
        diff: AccessDiff,
        snapshot: PlatformSnapshot,
        *,
        result: ApplyResult,
    ) -> ApplyResult:
        to_create = sorted(diff.to_create)
        to_delete = sorted(diff.to_delete)

        for index, access in enumerate(to_create):
            try:
                self._grant(access, snapshot, result)
            except Exception:
                log.error("Applied %s of %s creations before failure", index, len(to_create))
                raise

        for index, access in enumerate(to_delete):
            try:
                self._revoke(access, snapshot, result)
            except Exception:
                log.error("Applied %s of %s deletions before failure", index, len(to_delete))
                raise

        return result

    def _grant(self, access: AccessTuple, snapshot: PlatformSnapshot, result: ApplyResult) -> None:
        plan = self._resolve_plan(access, snapshot)
        try:
            self.visibilities.create(plan.id, access.org_id)
        except VisibilityConflictError:
            log.info(
                "Skipping creation of service access %s on org %s with plan %s: already granted",
                access.service,
                access.org_id,
                access.plan,
            )
            result.already_present += 1
            return
        log.info("Granted %s", access)
        result.created += 1

    def _revoke(self, access: AccessTuple, snapshot: PlatformSnapshot, result: ApplyResult) -> None:
        plan = self._resolve_plan(access, snapshot)
        existing = self.visibilities.search(plan_id=plan.id, org_id=access.org_id)
        if not existing:
            log.debug("No visibility to revoke for %s", access)
            result.already_absent += 1
            return
        try:
            self.visibilities.delete(existing[0].id)
        except VisibilityNotFoundError:
            log.debug("Visibility %s for %s already deleted", existing[0].id, access)
            result.already_absent += 1
            return
        log.info("Revoked %s", access)
        result.deleted += 1

    @staticmethod
    def _resolve_plan(access: AccessTuple, snapshot: PlatformSnapshot) -> ServicePlan:
        service = snapshot.service(access.service)
        return snapshot.plan(service, access.plan)
