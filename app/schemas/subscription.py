"""Subscription schemas for resource parsing and API responses."""

from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator


class SubscriptionChannelType(str, Enum):
    """Delivery channel type."""

    REST_HOOK = "rest-hook"
    WEBSOCKET = "websocket"
    EMAIL = "email"
    SMS = "sms"
    MESSAGE = "message"


class SubscriptionStatus(str, Enum):
    """Subscription status."""

    REQUESTED = "requested"
    ACTIVE = "active"
    ERROR = "error"
    OFF = "off"


class SubscriptionChannel(BaseModel):
    """Subscription.channel element."""

    type: SubscriptionChannelType | None = None
    endpoint: str | None = None
    payload: str | None = None
    header: list[str] = []

    model_config = {"extra": "allow"}


class SubscriptionDefinition(BaseModel):
    """Subscription resource body as submitted in FHIR JSON."""

    resource_type: Literal["Subscription"] = Field(
        default="Subscription", alias="resourceType"
    )
    id: str | None = None
    status: SubscriptionStatus | None = None
    criteria: str | None = None
    reason: str | None = None
    end: datetime | None = None
    error: str | None = None
    channel: SubscriptionChannel = Field(default_factory=SubscriptionChannel)

    model_config = {"populate_by_name": True, "extra": "allow"}

    @field_validator("channel", mode="before")
    @classmethod
    def null_channel_is_empty(cls, value: Any) -> Any:
        # A null channel carries no type; ChannelValidator reports it
        if value is None:
            return {}
        return value

    @property
    def channel_type(self) -> SubscriptionChannelType | None:
        return self.channel.type

    @property
    def channel_endpoint(self) -> str | None:
        return self.channel.endpoint

    @property
    def channel_payload(self) -> str | None:
        return self.channel.payload


class SubscriptionDTO(BaseModel):
    """Stored subscription response schema."""

    id: str
    version: int
    last_updated: datetime = Field(..., alias="lastUpdated")
    resource: dict[str, Any]
    index_entry_id: int | None = Field(default=None, alias="indexEntryId")

    model_config = {"populate_by_name": True}


class SubscriptionVersionDTO(BaseModel):
    """Single entry of a subscription's version history."""

    version: int
    updated_at: datetime = Field(..., alias="updatedAt")
    deleted_at: datetime | None = Field(default=None, alias="deletedAt")
    resource: dict[str, Any] = {}

    model_config = {"populate_by_name": True}


class SubscriptionIndexEntryDTO(BaseModel):
    """Subscription index entry response schema."""

    id: int
    created_at: datetime = Field(..., alias="createdAt")
    resource_pid: int = Field(..., alias="resourcePid")

    model_config = {"populate_by_name": True}


class SubscriptionValidationResult(BaseModel):
    """Result of validating a subscription without storing it."""

    valid: bool = True
    resource_type: str = Field(..., alias="resourceType")
    criteria_params: list[tuple[str, str]] = Field(
        default=[], alias="criteriaParams"
    )

    model_config = {"populate_by_name": True}
