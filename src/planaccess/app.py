"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Protocol

from planaccess.adapters.cloudfoundry import CloudControllerClient
from planaccess.config import get_cloudfoundry_config
from planaccess.domain.brokers import (
    deregister_broker,
    ensure_broker_registration,
    require_broker,
)
from planaccess.domain.reconciliation import (
    ObservedAccessNormalizer,
    fetch_snapshot,
    reconcile_access,
)

if TYPE_CHECKING:
    from planaccess.domain.model import AccessDeclaration, AccessPolicy
    from planaccess.domain.ports import (
        BrokerRegistry,
        CatalogProvider,
        OrgDirectory,
        PlanStore,
        VisibilityStore,
    )
    from planaccess.domain.reconciliation import PlatformSnapshot, ReconciliationResult


log = getLogger(__name__)


class PlatformClient(Protocol):
    """Bundle of the platform ports a pass needs."""

    @property
    def brokers(self) -> BrokerRegistry: ...

    @property
    def catalog(self) -> CatalogProvider: ...

    @property
    def directory(self) -> OrgDirectory: ...

    @property
    def visibilities(self) -> VisibilityStore: ...

    @property
    def plans(self) -> PlanStore: ...


def build_platform_client() -> PlatformClient:
    return CloudControllerClient(config=get_cloudfoundry_config())


def _load_snapshot(client: PlatformClient, broker_name: str, page_limit: int) -> PlatformSnapshot:
    broker = require_broker(client.brokers, broker_name)
    return fetch_snapshot(
        broker,
        catalog=client.catalog,
        directory=client.directory,
        page_limit=page_limit,
    )


def apply_access_policy(
    policy: AccessPolicy,
    *,
    client: PlatformClient | None = None,
    dry_run: bool = False,
    page_limit: int = 0,
) -> ReconciliationResult:
    """Register the policy's broker when requested and reconcile its plan access."""

    effective_client = client or build_platform_client()
    log.info(
        "Starting access reconciliation: broker=%s, declarations=%s, dry_run=%s",
        policy.broker_name,
        len(policy.declarations),
        dry_run,
    )

    if policy.registration is not None:
        if dry_run:
            log.info("Dry run: not registering service broker %s", policy.broker_name)
        else:
            ensure_broker_registration(effective_client.brokers, policy.registration)

    snapshot = _load_snapshot(effective_client, policy.broker_name, page_limit)
    result = reconcile_access(
        policy.declarations,
        snapshot,
        visibilities=effective_client.visibilities,
        plans=effective_client.plans,
        dry_run=dry_run,
    )

    applied = result.applied
    log.info(
        "Finished access reconciliation for %s: public_flags=%s, created=%s, "
        "already_present=%s, deleted=%s, already_absent=%s, dry_run=%s",
        policy.broker_name,
        applied.public_flags_updated,
        applied.created,
        applied.already_present,
        applied.deleted,
        applied.already_absent,
        dry_run,
    )
    return result


def show_broker_access(
    broker_name: str,
    *,
    client: PlatformClient | None = None,
    page_limit: int = 0,
) -> list[AccessDeclaration]:
    """Observed access of a broker's catalog, in compact declaration form."""

    effective_client = client or build_platform_client()
    snapshot = _load_snapshot(effective_client, broker_name, page_limit)
    return ObservedAccessNormalizer(effective_client.visibilities)(snapshot)


def remove_broker(broker_name: str, *, client: PlatformClient | None = None) -> bool:
    effective_client = client or build_platform_client()
    return deregister_broker(effective_client.brokers, broker_name)
