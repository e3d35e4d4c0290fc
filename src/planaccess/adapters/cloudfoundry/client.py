"""Cloud Controller v2 API client."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from planaccess.adapters.http_resilience import ResilientClient
from planaccess.domain.ports import VisibilityConflictError, VisibilityNotFoundError

from .schema import (
    CCErrorResponse,
    CCPage,
    OrganizationResource,
    ServiceBrokerResource,
    ServicePlanResource,
    ServicePlanUpdateRequest,
    ServicePlanVisibilityRequest,
    ServicePlanVisibilityResource,
    ServiceResource,
)
from .translator import (
    to_broker_request,
    to_organization,
    to_plan_visibility,
    to_service_broker,
    to_service_offering,
    to_service_plan,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    import httpx
    from pydantic import BaseModel

    from planaccess.config.cloudfoundry import CloudFoundryConfig
    from planaccess.config.http_resilience import ResilienceConfig
    from planaccess.domain.model import (
        BrokerRegistration,
        Organization,
        PlanVisibility,
        ServiceBroker,
        ServiceOffering,
        ServicePlan,
    )
    from planaccess.domain.ports import (
        BrokerRegistry,
        CatalogProvider,
        OrgDirectory,
        PlanStore,
        VisibilityStore,
    )

log = getLogger(__name__)

BROKERS_PATH = "/v2/service_brokers"
SERVICES_PATH = "/v2/services"
PLANS_PATH = "/v2/service_plans"
ORGANIZATIONS_PATH = "/v2/organizations"
VISIBILITIES_PATH = "/v2/service_plan_visibilities"
DEFAULT_RESULTS_PER_PAGE = 100

type QueryParams = list[tuple[str, str]]


class CloudControllerAPIError(RuntimeError):
    """Raised when the Cloud Controller answers with an unexpected status or payload."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        code: int | None = None,
        error_code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.code = code
        self.error_code = error_code


def _error_from_response(response: httpx.Response) -> CCErrorResponse:
    try:
        return CCErrorResponse.model_validate(response.json())
    except (ValueError, ValidationError):
        return CCErrorResponse(description=response.text)


def _api_error(response: httpx.Response) -> CloudControllerAPIError:
    error = _error_from_response(response)
    message = (
        f"Cloud Controller {response.request.method} {response.request.url.path} "
        f"failed with {response.status_code}: {error.description or response.reason_phrase}"
    )
    return CloudControllerAPIError(
        message,
        status=response.status_code,
        code=error.code,
        error_code=error.error_code,
    )


def _ensure_success(response: httpx.Response) -> None:
    if response.is_success:
        return
    raise _api_error(response)


def _payload(response: httpx.Response) -> dict[str, object]:
    payload = response.json()
    if not isinstance(payload, dict):
        raise CloudControllerAPIError(
            "Unexpected Cloud Controller response payload", status=response.status_code
        )
    return payload


class CloudControllerClient:
    """Blocking facade over the Cloud Controller v2 API.

    Implements every platform port used by a reconciliation pass. Each call
    opens its own ``ResilientClient``; listings follow ``next_url`` until the
    last page.
    """

    def __init__(
        self,
        *,
        config: CloudFoundryConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
        results_per_page: int = DEFAULT_RESULTS_PER_PAGE,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self._results_per_page = results_per_page

    # Brokers

    def find_by_name(self, name: str) -> ServiceBroker | None:
        brokers = asyncio.run(
            self._list_async(BROKERS_PATH, [("q", f"name:{name}")], ServiceBrokerResource)
        )
        for resource in brokers:
            if resource.entity.name == name:
                return to_service_broker(resource)
        return None

    def create(self, registration: BrokerRegistration) -> ServiceBroker:
        resource = asyncio.run(
            self._send_async(
                "POST",
                BROKERS_PATH,
                to_broker_request(registration),
                ServiceBrokerResource,
            )
        )
        return to_service_broker(resource)

    def update(self, broker_id: str, registration: BrokerRegistration) -> ServiceBroker:
        resource = asyncio.run(
            self._send_async(
                "PUT",
                f"{BROKERS_PATH}/{broker_id}",
                to_broker_request(registration),
                ServiceBrokerResource,
            )
        )
        return to_service_broker(resource)

    def delete(self, broker_id: str) -> None:
        asyncio.run(self._delete_async(f"{BROKERS_PATH}/{broker_id}"))

    # Catalog

    def list_services(self, broker_id: str) -> list[ServiceOffering]:
        resources = asyncio.run(
            self._list_async(
                SERVICES_PATH,
                [("q", f"service_broker_guid:{broker_id}")],
                ServiceResource,
            )
        )
        return [to_service_offering(resource) for resource in resources]

    def list_plans(self, service_ids: Sequence[str]) -> list[ServicePlan]:
        if not service_ids:
            return []
        resources = asyncio.run(
            self._list_async(
                PLANS_PATH,
                [("q", f"service_guid IN {','.join(service_ids)}")],
                ServicePlanResource,
            )
        )
        return [to_service_plan(resource) for resource in resources]

    def list_organizations(self, page_limit: int = 0) -> list[Organization]:
        resources = asyncio.run(
            self._list_async(ORGANIZATIONS_PATH, [], OrganizationResource, page_limit=page_limit)
        )
        return [to_organization(resource) for resource in resources]

    # Visibilities

    def search(
        self,
        *,
        plan_id: str | None = None,
        org_id: str | None = None,
    ) -> list[PlanVisibility]:
        params: QueryParams = []
        if plan_id is not None:
            params.append(("q", f"service_plan_guid:{plan_id}"))
        if org_id is not None:
            params.append(("q", f"organization_guid:{org_id}"))
        resources = asyncio.run(
            self._list_async(VISIBILITIES_PATH, params, ServicePlanVisibilityResource)
        )
        return [to_plan_visibility(resource) for resource in resources]

    def create_visibility(self, plan_id: str, org_id: str) -> PlanVisibility:
        resource = asyncio.run(self._create_visibility_async(plan_id, org_id))
        return to_plan_visibility(resource)

    def delete_visibility(self, visibility_id: str) -> None:
        try:
            asyncio.run(self._delete_async(f"{VISIBILITIES_PATH}/{visibility_id}"))
        except CloudControllerAPIError as exc:
            if exc.status == 404:
                raise VisibilityNotFoundError(visibility_id) from exc
            raise

    # Plans

    def set_public(self, plan: ServicePlan, service_id: str, public: bool) -> None:
        log.debug(
            "Updating plan %s (%s) of service %s: public=%s", plan.name, plan.id, service_id, public
        )
        asyncio.run(
            self._send_async(
                "PUT",
                f"{PLANS_PATH}/{plan.id}",
                ServicePlanUpdateRequest(public=public),
                ServicePlanResource,
            )
        )

    # Port views

    @property
    def brokers(self) -> BrokerRegistry:
        return self

    @property
    def catalog(self) -> CatalogProvider:
        return self

    @property
    def directory(self) -> OrgDirectory:
        return self

    @property
    def visibilities(self) -> VisibilityStore:
        return _VisibilityStoreView(self)

    @property
    def plans(self) -> PlanStore:
        return self

    # Transport

    async def _create_visibility_async(
        self,
        plan_id: str,
        org_id: str,
    ) -> ServicePlanVisibilityResource:
        body = ServicePlanVisibilityRequest(service_plan_guid=plan_id, organization_guid=org_id)
        async with self._client_factory(self._resilience) as client:
            response = await client.post(VISIBILITIES_PATH, json=body.model_dump())
        if response.status_code == 400:
            error = _error_from_response(response)
            if error.is_visibility_conflict:
                raise VisibilityConflictError(
                    plan_id=plan_id, org_id=org_id, message=error.description or None
                )
        _ensure_success(response)
        return ServicePlanVisibilityResource.model_validate(_payload(response))

    async def _send_async[ResourceT: BaseModel](
        self,
        method: str,
        path: str,
        body: BaseModel,
        resource_type: type[ResourceT],
    ) -> ResourceT:
        async with self._client_factory(self._resilience) as client:
            response = await client.request(
                method, path, json=body.model_dump(exclude_none=True)
            )
        _ensure_success(response)
        return resource_type.model_validate(_payload(response))

    async def _delete_async(self, path: str) -> None:
        async with self._client_factory(self._resilience) as client:
            response = await client.delete(path)
        _ensure_success(response)

    async def _list_async[ResourceT: BaseModel](
        self,
        path: str,
        params: QueryParams,
        resource_type: type[ResourceT],
        *,
        page_limit: int = 0,
    ) -> list[ResourceT]:
        """Collect every resource of a listing, reading at most ``page_limit`` pages (0 = all)."""

        resources: list[ResourceT] = []
        next_url: str | None = path
        query: QueryParams | None = [*params, ("results-per-page", str(self._results_per_page))]
        pages = 0

        async with self._client_factory(self._resilience) as client:
            while next_url is not None:
                response = await client.get(next_url, params=query)
                _ensure_success(response)
                page = CCPage.model_validate(_payload(response))
                resources.extend(resource_type.model_validate(item) for item in page.resources)
                pages += 1
                if page_limit and pages >= page_limit:
                    log.debug("Stopping %s listing after %s page(s)", path, pages)
                    break
                # next_url carries its own query string
                next_url = page.next_url
                query = None

        return resources


class _VisibilityStoreView:
    """Exposes the visibility operations under the ``VisibilityStore`` names.

    ``create`` and ``delete`` on the client itself belong to broker registrations.
    """

    def __init__(self, client: CloudControllerClient) -> None:
        self._client = client

    def search(
        self,
        *,
        plan_id: str | None = None,
        org_id: str | None = None,
    ) -> list[PlanVisibility]:
        return self._client.search(plan_id=plan_id, org_id=org_id)

    def create(self, plan_id: str, org_id: str) -> PlanVisibility:
        return self._client.create_visibility(plan_id, org_id)

    def delete(self, visibility_id: str) -> None:
        self._client.delete_visibility(visibility_id)
