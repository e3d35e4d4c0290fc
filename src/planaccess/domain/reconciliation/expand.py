"""Expansion of compact access declarations into concrete access tuples.

Expansion is a pure function of a declaration and the pass snapshot. Tuples
carry the resolved service label and plan name, so a declaration written with
ids compares equal to the same access observed on the platform.
"""

from __future__ import annotations

from functools import singledispatch
from typing import TYPE_CHECKING, Protocol

from planaccess.domain.model import (
    AccessTuple,
    OrgAccess,
    PlanAccess,
    PlanInOrgAccess,
    PublicAccess,
)

from .errors import PublicAccessExpansionError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from planaccess.domain.model import AccessDeclaration, ServiceOffering

    from .snapshot import PlatformSnapshot


class ExpandDeclarations(Protocol):
    def __call__(
        self,
        declarations: Iterable[AccessDeclaration],
        snapshot: PlatformSnapshot,
    ) -> frozenset[AccessTuple]: ...


def expand_declaration(
    declaration: AccessDeclaration,
    snapshot: PlatformSnapshot,
) -> frozenset[AccessTuple]:
    """Return every tuple denoted by ``declaration``.

    Raises ``ServiceNotFoundError``/``PlanNotFoundError`` for references missing
    from the catalog and ``PublicAccessExpansionError`` for whole-service
    declarations, which callers handle through plan public flags.
    """

    service = snapshot.service(declaration.service)
    return frozenset(_expand(declaration, service, snapshot))


def expand_declarations(
    declarations: Iterable[AccessDeclaration],
    snapshot: PlatformSnapshot,
) -> frozenset[AccessTuple]:
    """Union of the expansion of every non-public declaration.

    Whole-service declarations are skipped; fails on the first error.
    """

    tuples: set[AccessTuple] = set()
    for declaration in declarations:
        if isinstance(declaration, PublicAccess):
            continue
        tuples.update(expand_declaration(declaration, snapshot))
    return frozenset(tuples)


def expand_observed(
    declarations: Iterable[AccessDeclaration],
    snapshot: PlatformSnapshot,
) -> frozenset[AccessTuple]:
    """Expand declarations produced by the observed-state normalizer.

    A whole-service declaration stands for nothing when the service has a
    public plan, and for every plan in every organization otherwise (the
    normalizer emits it when grants cover all plans in all organizations).
    """

    tuples: set[AccessTuple] = set()
    for declaration in declarations:
        if not isinstance(declaration, PublicAccess):
            tuples.update(expand_declaration(declaration, snapshot))
            continue
        service = snapshot.service(declaration.service)
        if service.has_public_plan:
            continue
        tuples.update(_all_plans_in_all_orgs(service, snapshot))
    return frozenset(tuples)


@singledispatch
def _expand(
    declaration: object,
    service: ServiceOffering,
    snapshot: PlatformSnapshot,
) -> Iterable[AccessTuple]:
    raise TypeError(f"Unsupported access declaration: {declaration!r}")


@_expand.register(PublicAccess)
def _(
    declaration: PublicAccess,
    service: ServiceOffering,
    snapshot: PlatformSnapshot,
) -> Iterable[AccessTuple]:
    raise PublicAccessExpansionError(declaration)


@_expand.register(PlanInOrgAccess)
def _(
    declaration: PlanInOrgAccess,
    service: ServiceOffering,
    snapshot: PlatformSnapshot,
) -> Iterable[AccessTuple]:
    plan = snapshot.plan(service, declaration.plan)
    return (AccessTuple(service.label, plan.name, declaration.org_id),)


@_expand.register(OrgAccess)
def _(
    declaration: OrgAccess,
    service: ServiceOffering,
    snapshot: PlatformSnapshot,
) -> Iterable[AccessTuple]:
    return tuple(AccessTuple(service.label, plan.name, declaration.org_id) for plan in service.plans)


@_expand.register(PlanAccess)
def _(
    declaration: PlanAccess,
    service: ServiceOffering,
    snapshot: PlatformSnapshot,
) -> Iterable[AccessTuple]:
    plan = snapshot.plan(service, declaration.plan)
    return tuple(AccessTuple(service.label, plan.name, org_id) for org_id in snapshot.org_ids)


def _all_plans_in_all_orgs(
    service: ServiceOffering,
    snapshot: PlatformSnapshot,
) -> Iterable[AccessTuple]:
    return tuple(
        AccessTuple(service.label, plan.name, org_id)
        for plan in service.plans
        for org_id in snapshot.org_ids
    )
