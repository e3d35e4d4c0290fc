"""Pydantic models describing the access policy TOML document."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class PolicyBaseModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class BrokerSection(PolicyBaseModel):
    name: str = Field(min_length=1)
    url: str | None = None
    username: str | None = None
    password_env: str | None = None
    force_update: bool = False

    _normalize_optional = field_validator("url", "username", "password_env", mode="before")(
        _blank_to_none
    )

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("broker name must not be blank")
        return stripped

    @field_validator("url")
    @classmethod
    def _validate_url(cls, value: str | None) -> str | None:
        if value is not None and not value.startswith(("http://", "https://")):
            raise ValueError("broker url must begin with http:// or https://")
        return value


class ServiceAccessEntry(PolicyBaseModel):
    service: str = Field(min_length=1)
    plan: str | None = None
    org_id: str | None = None

    _normalize_optional = field_validator("plan", "org_id", mode="before")(_blank_to_none)

    @field_validator("service")
    @classmethod
    def _strip_service(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("service must not be blank")
        return stripped


class PolicyDocument(PolicyBaseModel):
    broker: BrokerSection
    service_access: list[ServiceAccessEntry] = Field(default_factory=list)
