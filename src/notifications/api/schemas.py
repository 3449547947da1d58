"""Pydantic request/response models for the Notifications API.

API schemas are separate from Protean commands (anti-corruption pattern).
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request Models
# ---------------------------------------------------------------------------
class SavePushTokenRequest(BaseModel):
    device_token: str = Field(..., min_length=1, max_length=255, examples=["ExponentPushToken[xxxxxxxx]"])
    actor_id: str | None = Field(None, description="Authenticated user issuing the write")


class UpdatePreferencesRequest(BaseModel):
    push_notifications: bool | None = None
    order_status_updates: bool | None = None
    order_confirmations: bool | None = None
    delivery_notifications: bool | None = None
    promotional_offers: bool | None = None


class MarkReadRequest(BaseModel):
    user_id: str | None = None


# ---------------------------------------------------------------------------
# Response Models
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"


class UpdatedResponse(BaseModel):
    updated: int


class DispatchResponse(BaseModel):
    sent: int
    failed: int
    total: int


class PendingCountResponse(BaseModel):
    pending: int


class PreferencesResponse(BaseModel):
    preference_id: str
    user_id: str
    push_notifications: bool
    order_status_updates: bool
    order_confirmations: bool
    delivery_notifications: bool
    promotional_offers: bool


class NotificationResponse(BaseModel):
    notification_id: str
    notification_type: str
    title: str
    body: str
    status: str
    data: dict = {}
    created_at: datetime | None = None
    read_at: datetime | None = None


class NotificationListResponse(BaseModel):
    notifications: list[NotificationResponse]
    unread_count: int
