"""DeliverySettings aggregate (CQRS) — the configured working-hours window.

Admins record a new settings row whenever the window changes; the newest
active row wins. Without any row, the window from the domain's ``[custom]``
configuration applies.
"""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, String
from protean.utils.globals import current_domain

from ordering.domain import custom_setting, ordering
from ordering.working_hours.events import WorkingHoursConfigured
from ordering.working_hours.policy import DEFAULT_LANGUAGE, WorkingHoursWindow, parse_time_of_day

logger = structlog.get_logger(__name__)

SUPPORTED_LANGUAGES = ("tr", "en", "ru")


def _validate_time(label: str, value: str) -> str:
    try:
        parsed = parse_time_of_day(value)
    except ValueError:
        raise ValidationError({label: [f"Invalid time format: {value}. Use HH:MM or HH:MM:SS"]}) from None
    return parsed.strftime("%H:%M:%S")


@ordering.aggregate
class DeliverySettings:
    working_hours_start = String(required=True, max_length=8)
    working_hours_end = String(required=True, max_length=8)
    is_working_hours_enabled = Boolean(default=True)
    working_hours_message_tr = String(max_length=500)
    working_hours_message_en = String(max_length=500)
    working_hours_message_ru = String(max_length=500)
    is_active = Boolean(default=True)
    created_at = DateTime()

    @classmethod
    def configure(cls, start: str, end: str, enabled: bool = True, messages: dict | None = None):
        """Record a new active working-hours window."""
        messages = messages or {}
        unknown = set(messages) - set(SUPPORTED_LANGUAGES)
        if unknown:
            raise ValidationError({"messages": [f"Unsupported languages: {', '.join(sorted(unknown))}"]})

        now = datetime.now(UTC)
        settings = cls(
            working_hours_start=_validate_time("working_hours_start", start),
            working_hours_end=_validate_time("working_hours_end", end),
            is_working_hours_enabled=enabled,
            working_hours_message_tr=messages.get("tr"),
            working_hours_message_en=messages.get("en"),
            working_hours_message_ru=messages.get("ru"),
            is_active=True,
            created_at=now,
        )
        settings.raise_(
            WorkingHoursConfigured(
                settings_id=str(settings.id),
                working_hours_start=settings.working_hours_start,
                working_hours_end=settings.working_hours_end,
                is_working_hours_enabled=enabled,
                configured_at=now,
            )
        )
        return settings

    def deactivate(self) -> None:
        self.is_active = False

    def messages(self) -> dict[str, str]:
        return {
            language: getattr(self, f"working_hours_message_{language}")
            for language in SUPPORTED_LANGUAGES
            if getattr(self, f"working_hours_message_{language}")
        }

    def to_window(self) -> WorkingHoursWindow:
        return WorkingHoursWindow.from_settings(
            start=self.working_hours_start,
            end=self.working_hours_end,
            enabled=self.is_working_hours_enabled,
            messages=self.messages(),
            default_language=custom_setting("WORKING_HOURS_DEFAULT_LANGUAGE", DEFAULT_LANGUAGE),
        )


@ordering.command(part_of="DeliverySettings")
class ConfigureWorkingHours:
    """Replace the active working-hours window."""

    start = String(required=True, max_length=8)
    end = String(required=True, max_length=8)
    enabled = Boolean(default=True)
    message_tr = String(max_length=500)
    message_en = String(max_length=500)
    message_ru = String(max_length=500)


@ordering.command_handler(part_of=DeliverySettings)
class ConfigureWorkingHoursHandler:
    @handle(ConfigureWorkingHours)
    def configure_working_hours(self, command):
        repo = current_domain.repository_for(DeliverySettings)
        for previous in repo._dao.query.filter(is_active=True).all().items:
            previous.deactivate()
            repo.add(previous)

        messages = {
            language: getattr(command, f"message_{language}")
            for language in SUPPORTED_LANGUAGES
            if getattr(command, f"message_{language}")
        }
        settings = DeliverySettings.configure(
            start=command.start,
            end=command.end,
            enabled=command.enabled,
            messages=messages,
        )
        repo.add(settings)

        logger.info(
            "Working hours configured",
            settings_id=str(settings.id),
            start=settings.working_hours_start,
            end=settings.working_hours_end,
            enabled=settings.is_working_hours_enabled,
        )
        return str(settings.id)


def configured_window() -> WorkingHoursWindow:
    """Window from the domain configuration, used until an admin records settings."""
    return WorkingHoursWindow.from_settings(
        start=custom_setting("WORKING_HOURS_START", "09:00:00"),
        end=custom_setting("WORKING_HOURS_END", "22:00:00"),
        enabled=custom_setting("WORKING_HOURS_ENABLED", False),
        messages=custom_setting("WORKING_HOURS_MESSAGES", {}),
        default_language=custom_setting("WORKING_HOURS_DEFAULT_LANGUAGE", DEFAULT_LANGUAGE),
    )


def current_window() -> WorkingHoursWindow:
    """The newest active settings row as a window, falling back to configuration."""
    repo = current_domain.repository_for(DeliverySettings)
    rows = repo._dao.query.filter(is_active=True).order_by("-created_at").limit(1).all().items
    if rows:
        return rows[0].to_window()
    return configured_window()
