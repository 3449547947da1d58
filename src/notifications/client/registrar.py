"""Push token registrar — attach the device push token to the signed-in user.

Right after sign-up the profile row may not be resolvable yet, so a save that
updates nothing (or is refused by the row-level ownership check) is retried a
fixed number of times with a fixed delay. When the budget runs out the
registrar reports ``profile_not_ready`` and leaves any earlier registration
alone. Transport failures are reported immediately as ``network``.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum

import structlog
from notifications.backend.port import BackendUnavailableError, NotificationBackendPort
from notifications.device.port import DevicePort
from notifications.domain import custom_setting
from shared.result import Err, Ok, Result

logger = structlog.get_logger(__name__)

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_RETRY_DELAY = 1.0


class RegistrationErrorKind(Enum):
    INVALID_USER = "invalid_user"
    TOKEN_UNAVAILABLE = "token_unavailable"
    PROFILE_NOT_READY = "profile_not_ready"
    NETWORK = "network"


@dataclass(frozen=True)
class RegistrationError:
    kind: RegistrationErrorKind
    message: str
    attempts: int = 0


class PushTokenRegistrar:
    def __init__(
        self,
        device: DevicePort,
        backend: NotificationBackendPort,
        max_attempts: int | None = None,
        retry_delay: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.device = device
        self.backend = backend
        self.max_attempts = max_attempts or custom_setting("PUSH_TOKEN_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS)
        self.retry_delay = (
            retry_delay
            if retry_delay is not None
            else custom_setting("PUSH_TOKEN_RETRY_DELAY_SECONDS", DEFAULT_RETRY_DELAY)
        )
        self._sleep = sleep
        self.token: str | None = None

    async def register_for_user(self, user_id: str | None) -> Result:
        """Acquire the device token and save it for ``user_id``. Returns ``Ok(token)`` or ``Err(RegistrationError)``."""
        if not user_id:
            return Err(
                RegistrationError(
                    kind=RegistrationErrorKind.INVALID_USER,
                    message="Cannot register a push token without a resolved profile",
                )
            )

        token = await self.device.get_push_token()
        if not token:
            logger.info("Push token unavailable", user_id=user_id)
            return Err(
                RegistrationError(
                    kind=RegistrationErrorKind.TOKEN_UNAVAILABLE,
                    message="The device did not provide a push token",
                )
            )

        for attempt in range(1, self.max_attempts + 1):
            try:
                saved = await self.backend.save_push_token(user_id, token)
            except BackendUnavailableError as exc:
                logger.warning("Push token save failed", user_id=user_id, attempt=attempt, error=str(exc))
                return Err(
                    RegistrationError(kind=RegistrationErrorKind.NETWORK, message=str(exc), attempts=attempt)
                )

            if saved:
                self.token = token
                logger.info("Push token registered", user_id=user_id, attempt=attempt)
                return Ok(token)

            logger.info("Profile not ready for push token", user_id=user_id, attempt=attempt)
            if attempt < self.max_attempts:
                await self._sleep(self.retry_delay)

        return Err(
            RegistrationError(
                kind=RegistrationErrorKind.PROFILE_NOT_READY,
                message=f"Profile for {user_id} not ready after {self.max_attempts} attempts",
                attempts=self.max_attempts,
            )
        )

    async def unregister(self, user_id: str) -> Result:
        """Clear the user's token on sign-out. ``Ok(True)`` when a token was removed."""
        try:
            cleared = await self.backend.clear_push_token(user_id)
        except BackendUnavailableError as exc:
            logger.warning("Push token clear failed", user_id=user_id, error=str(exc))
            return Err(RegistrationError(kind=RegistrationErrorKind.NETWORK, message=str(exc)))

        self.token = None
        return Ok(cleared)
