"""Pydantic models describing Cloud Controller v2 payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

type CCGuid = str

VISIBILITY_ALREADY_EXISTS_ERROR = "CF-ServicePlanVisibilityAlreadyExists"
VISIBILITY_ALREADY_TAKEN_DESCRIPTION = (
    "This combination of ServicePlan and Organization is already taken"
)


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class CCBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class CCMetadata(CCBaseModel):
    guid: CCGuid
    url: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class CCPage(CCBaseModel):
    """One page of a listing; ``resources`` are validated per resource type."""

    total_results: int = 0
    total_pages: int = 0
    prev_url: str | None = None
    next_url: str | None = None
    resources: list[dict[str, object]] = Field(default_factory=list)


class ServiceBrokerEntity(CCBaseModel):
    name: str
    broker_url: str
    auth_username: str | None = None
    space_guid: CCGuid | None = None

    _normalize_username = field_validator("auth_username", mode="before")(_blank_to_none)


class ServiceBrokerResource(CCBaseModel):
    metadata: CCMetadata
    entity: ServiceBrokerEntity


class ServiceEntity(CCBaseModel):
    label: str
    service_broker_guid: CCGuid
    active: bool = True
    description: str | None = None


class ServiceResource(CCBaseModel):
    metadata: CCMetadata
    entity: ServiceEntity


class ServicePlanEntity(CCBaseModel):
    name: str
    service_guid: CCGuid
    public: bool = False
    free: bool = True
    unique_id: str | None = None


class ServicePlanResource(CCBaseModel):
    metadata: CCMetadata
    entity: ServicePlanEntity


class OrganizationEntity(CCBaseModel):
    name: str | None = None
    status: str | None = None


class OrganizationResource(CCBaseModel):
    metadata: CCMetadata
    entity: OrganizationEntity


class ServicePlanVisibilityEntity(CCBaseModel):
    service_plan_guid: CCGuid
    organization_guid: CCGuid


class ServicePlanVisibilityResource(CCBaseModel):
    metadata: CCMetadata
    entity: ServicePlanVisibilityEntity


class CCErrorResponse(CCBaseModel):
    code: int | None = None
    description: str = ""
    error_code: str | None = None

    @property
    def is_visibility_conflict(self) -> bool:
        return (
            self.error_code == VISIBILITY_ALREADY_EXISTS_ERROR
            or VISIBILITY_ALREADY_TAKEN_DESCRIPTION in self.description
        )


class ServiceBrokerRequest(CCBaseModel):
    name: str
    broker_url: str
    auth_username: str | None = None
    auth_password: str | None = None


class ServicePlanVisibilityRequest(CCBaseModel):
    service_plan_guid: CCGuid
    organization_guid: CCGuid


class ServicePlanUpdateRequest(CCBaseModel):
    public: bool
