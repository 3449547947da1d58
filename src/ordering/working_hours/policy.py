"""Working-hours policy — decides whether the service currently accepts orders.

``evaluate`` is pure: it takes the window, a moment and a language and returns
a status. Scheduling re-evaluation and showing alerts belong to the caller
(see ``ordering.working_hours.alert``).

Comparison happens on the time of day at second resolution with both bounds
inclusive. Display strips seconds, so ``09:00:00`` renders as ``09:00``.

A window whose start is later than its end spans midnight (``22:00``-``02:00``
is open at ``23:30`` and at ``01:00``). This extends the plain
``start <= now <= end`` rule, under which such a window would never be open;
windows with ``start <= end`` behave exactly as that rule says.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, time

DEFAULT_LANGUAGE = "tr"


def parse_time_of_day(value) -> time:
    """Accept a ``time`` or an ``HH:MM`` / ``HH:MM:SS`` string."""
    if isinstance(value, time):
        return value.replace(microsecond=0)
    parts = str(value).strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid time of day: {value!r}. Use HH:MM or HH:MM:SS")
    hour, minute = int(parts[0]), int(parts[1])
    second = int(parts[2]) if len(parts) == 3 else 0
    return time(hour, minute, second)


def format_hhmm(moment: time) -> str:
    return f"{moment.hour:02d}:{moment.minute:02d}"


@dataclass(frozen=True)
class WorkingHoursWindow:
    """Configured open/close window with per-language out-of-hours messages."""

    start: time
    end: time
    enabled: bool = True
    messages: Mapping[str, str] = field(default_factory=dict)
    default_language: str = DEFAULT_LANGUAGE

    @classmethod
    def from_settings(
        cls,
        start,
        end,
        enabled: bool = True,
        messages: Mapping[str, str] | None = None,
        default_language: str = DEFAULT_LANGUAGE,
    ) -> "WorkingHoursWindow":
        return cls(
            start=parse_time_of_day(start),
            end=parse_time_of_day(end),
            enabled=bool(enabled),
            messages=dict(messages or {}),
            default_language=default_language,
        )

    @property
    def spans_midnight(self) -> bool:
        return self.start > self.end

    def contains(self, moment: time) -> bool:
        moment = moment.replace(microsecond=0)
        if self.spans_midnight:
            return moment >= self.start or moment <= self.end
        return self.start <= moment <= self.end

    def template_for(self, language: str | None) -> str:
        if language and self.messages.get(language):
            return self.messages[language]
        return self.messages.get(self.default_language, "")

    def render_message(self, language: str | None) -> str:
        template = self.template_for(language)
        return template.replace("{start}", format_hhmm(self.start)).replace("{end}", format_hhmm(self.end))


@dataclass(frozen=True)
class WorkingHoursStatus:
    within_hours: bool
    message: str
    enabled: bool
    start: str
    end: str

    @property
    def accepting_orders(self) -> bool:
        return self.within_hours


def evaluate(window: WorkingHoursWindow, now: datetime | time, language: str | None = None) -> WorkingHoursStatus:
    """Evaluate ``window`` at ``now`` and render the out-of-hours message in ``language``."""
    start, end = format_hhmm(window.start), format_hhmm(window.end)

    if not window.enabled:
        return WorkingHoursStatus(within_hours=True, message="", enabled=False, start=start, end=end)

    moment = now.time() if isinstance(now, datetime) else now
    within = window.contains(moment)
    return WorkingHoursStatus(
        within_hours=within,
        message="" if within else window.render_message(language),
        enabled=True,
        start=start,
        end=end,
    )
