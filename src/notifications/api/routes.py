"""FastAPI routes for the Notifications domain.

Thin adapters that translate HTTP requests into domain commands.
No business logic — just schema→command→response translation.
"""

from fastapi import APIRouter, HTTPException, Query
from notifications.api.schemas import (
    DispatchResponse,
    MarkReadRequest,
    NotificationListResponse,
    NotificationResponse,
    PendingCountResponse,
    PreferencesResponse,
    SavePushTokenRequest,
    StatusResponse,
    UpdatedResponse,
    UpdatePreferencesRequest,
)
from notifications.backend.domain_backend import query_user_notifications
from notifications.notification.delivery import DeliverPendingNotifications, count_pending
from notifications.notification.read import MarkNotificationRead
from notifications.preference.management import UpdateNotificationPreferences, find_preference
from notifications.registration.management import ClearPushToken, SavePushToken
from protean.exceptions import InvalidOperationError
from protean.utils.globals import current_domain

router = APIRouter(prefix="/notifications", tags=["notifications"])


# ---------------------------------------------------------------------------
# Delivery trigger
# ---------------------------------------------------------------------------
@router.post("/dispatch", response_model=DispatchResponse)
async def dispatch_pending() -> DispatchResponse:
    """Deliver every pending notification through the push channel."""
    result = current_domain.process(DeliverPendingNotifications(), asynchronous=False)
    return DispatchResponse(**result)


@router.get("/pending-count", response_model=PendingCountResponse)
async def pending_count() -> PendingCountResponse:
    return PendingCountResponse(pending=count_pending())


# ---------------------------------------------------------------------------
# Push tokens
# ---------------------------------------------------------------------------
@router.put("/push-tokens/{user_id}", response_model=UpdatedResponse)
async def save_push_token(user_id: str, body: SavePushTokenRequest) -> UpdatedResponse:
    """Attach a device token. ``updated=0`` means the profile is not resolvable yet."""
    command = SavePushToken(user_id=user_id, device_token=body.device_token, actor_id=body.actor_id)
    try:
        updated = current_domain.process(command, asynchronous=False)
    except InvalidOperationError as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from None
    return UpdatedResponse(updated=updated)


@router.delete("/push-tokens/{user_id}", response_model=UpdatedResponse)
async def clear_push_token(user_id: str, actor_id: str | None = None) -> UpdatedResponse:
    command = ClearPushToken(user_id=user_id, actor_id=actor_id)
    try:
        updated = current_domain.process(command, asynchronous=False)
    except InvalidOperationError as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from None
    return UpdatedResponse(updated=updated)


# ---------------------------------------------------------------------------
# Preferences
# ---------------------------------------------------------------------------
@router.get("/preferences/{user_id}", response_model=PreferencesResponse)
async def get_preferences(user_id: str) -> PreferencesResponse:
    """Get a user's notification preferences."""
    pref = find_preference(user_id)
    if pref is None:
        raise HTTPException(status_code=404, detail=f"No preferences for user {user_id}")
    return PreferencesResponse(
        preference_id=str(pref.id),
        user_id=str(pref.user_id),
        push_notifications=pref.push_notifications,
        order_status_updates=pref.order_status_updates,
        order_confirmations=pref.order_confirmations,
        delivery_notifications=pref.delivery_notifications,
        promotional_offers=pref.promotional_offers,
    )


@router.put("/preferences/{user_id}", response_model=StatusResponse)
async def update_preferences(user_id: str, body: UpdatePreferencesRequest) -> StatusResponse:
    """Update a user's notification preferences."""
    command = UpdateNotificationPreferences(user_id=user_id, **body.model_dump())
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Inbox
# ---------------------------------------------------------------------------
@router.get("/users/{user_id}", response_model=NotificationListResponse)
async def get_user_notifications(user_id: str, limit: int = Query(50, ge=1, le=200)) -> NotificationListResponse:
    """A user's notifications, newest first."""
    results = query_user_notifications(user_id, limit)
    return NotificationListResponse(
        notifications=[
            NotificationResponse(
                notification_id=str(n.id),
                notification_type=n.notification_type,
                title=n.title,
                body=n.body,
                status=n.status,
                data=n.payload(),
                created_at=n.created_at,
                read_at=n.read_at,
            )
            for n in results
        ],
        unread_count=sum(1 for n in results if n.read_at is None),
    )


@router.put("/{notification_id}/read", response_model=StatusResponse)
async def mark_read(notification_id: str, body: MarkReadRequest | None = None) -> StatusResponse:
    """Mark a notification read. Repeating the call changes nothing."""
    command = MarkNotificationRead(notification_id=notification_id, user_id=body.user_id if body else None)
    try:
        current_domain.process(command, asynchronous=False)
    except InvalidOperationError as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from None
    return StatusResponse()
