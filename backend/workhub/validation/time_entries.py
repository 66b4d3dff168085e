"""
Time-entry validation.

Checks a proposed time entry against the project it books on and the
entries the same user already has on that day. Every rule is evaluated so
the caller gets the complete list of problems in one pass; errors block the
save, warnings are only reported.
"""
import os
from dataclasses import dataclass, replace
from datetime import date, time, timedelta
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Callable, Dict, Iterable, Optional, Tuple
from uuid import UUID

PROJECT_INACTIVE = "PROJECT_INACTIVE"
INVALID_HOURS = "INVALID_HOURS"
TIME_MISMATCH = "TIME_MISMATCH"
OVERLAPPING_ENTRY = "OVERLAPPING_ENTRY"
DAILY_LIMIT_EXCEEDED = "DAILY_LIMIT_EXCEEDED"
FUTURE_DATE = "FUTURE_DATE"

# Hours are stored with two decimals; every rule runs on the stored value.
HOURS_PRECISION = Decimal("0.01")

MESSAGES = {
    PROJECT_INACTIVE: "Hours cannot be booked on a missing or inactive project",
    INVALID_HOURS: "Hours must be greater than zero and within the per-entry maximum",
    TIME_MISMATCH: "Start and end time must both be set, end after start, and match the hours",
    OVERLAPPING_ENTRY: "The time range overlaps another entry on the same day",
    DAILY_LIMIT_EXCEEDED: "Total hours for the day exceed the daily ceiling",
    FUTURE_DATE: "Entries cannot be created for future dates",
}


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


def _decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_hours(value) -> Decimal:
    """Round hours to the precision they are stored with."""
    hours = _decimal(value)
    if not hours.is_finite():
        return hours
    return hours.quantize(HOURS_PRECISION, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class TimeEntryRules:
    """Tunable limits. Defaults come from the environment."""

    max_hours_per_entry: Decimal = Decimal("24")
    daily_hours_ceiling: Decimal = Decimal("12")
    hard_daily_cap: bool = False
    future_grace_days: int = 0
    duration_tolerance_minutes: int = 1

    @classmethod
    def from_env(cls) -> "TimeEntryRules":
        return cls(
            max_hours_per_entry=Decimal(os.getenv("MAX_HOURS_PER_ENTRY", "24")),
            daily_hours_ceiling=Decimal(os.getenv("DAILY_HOURS_CEILING", "12")),
            hard_daily_cap=_env_bool("HARD_DAILY_CAP", "false"),
            future_grace_days=int(os.getenv("FUTURE_GRACE_DAYS", "0")),
            duration_tolerance_minutes=int(os.getenv("DURATION_TOLERANCE_MINUTES", "1")),
        )

    def with_overrides(self, overrides: Optional[Dict[str, Any]]) -> "TimeEntryRules":
        """Apply a tenant's `time_entries` settings block on top of these rules."""
        if not overrides:
            return self
        changes = {}
        for key in ("max_hours_per_entry", "daily_hours_ceiling"):
            if overrides.get(key) is not None:
                changes[key] = _decimal(overrides[key])
        if overrides.get("hard_daily_cap") is not None:
            changes["hard_daily_cap"] = bool(overrides["hard_daily_cap"])
        for key in ("future_grace_days", "duration_tolerance_minutes"):
            if overrides.get(key) is not None:
                changes[key] = int(overrides[key])
        return replace(self, **changes)


@dataclass(frozen=True)
class TimeEntryDraft:
    """A time entry that has not been persisted yet."""

    user_id: UUID
    project_id: UUID
    date: date
    hours: Decimal
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    entry_id: Optional[UUID] = None  # set when re-validating an existing entry

    @property
    def has_range(self) -> bool:
        return self.start_time is not None and self.end_time is not None


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of one validation pass."""

    errors: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.errors

    def messages(self) -> Tuple[str, ...]:
        return tuple(describe(code) for code in self.errors)


def describe(code: str) -> str:
    return MESSAGES.get(code, code)


def _minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def _ranges_overlap(start_a: time, end_a: time, start_b: time, end_b: time) -> bool:
    # Half-open ranges: 09:00-13:00 and 13:00-17:00 do not overlap.
    return _minutes(start_a) < _minutes(end_b) and _minutes(start_b) < _minutes(end_a)


class TimeEntryValidator:
    """Pure business-rule check for time entries."""

    def __init__(self, rules: Optional[TimeEntryRules] = None,
                 today: Callable[[], date] = date.today):
        self.rules = rules or TimeEntryRules.from_env()
        self.today = today

    def validate(self, draft: TimeEntryDraft, existing_entries: Iterable[Any],
                 project: Optional[Any]) -> ValidationResult:
        """
        Validate a draft against its project and the user's entries that day.

        Args:
            draft: Proposed entry
            existing_entries: Entries of the same user on the same date
                (objects with id, start_time, end_time and hours)
            project: Referenced project (object with `active`) or None

        Returns:
            ValidationResult: Ordered errors and warnings
        """
        errors = []
        warnings = []
        others = [e for e in existing_entries
                  if draft.entry_id is None or getattr(e, "id", None) != draft.entry_id]

        if project is None or not getattr(project, "active", False):
            errors.append(PROJECT_INACTIVE)

        try:
            hours = quantize_hours(draft.hours)
        except (InvalidOperation, ValueError):
            hours = None
        if hours is None or not hours.is_finite() or hours <= 0 or hours > self.rules.max_hours_per_entry:
            errors.append(INVALID_HOURS)

        if self._time_mismatch(draft, hours):
            errors.append(TIME_MISMATCH)

        if draft.has_range and draft.end_time > draft.start_time:
            for entry in others:
                if entry.start_time is None or entry.end_time is None:
                    continue
                if _ranges_overlap(draft.start_time, draft.end_time, entry.start_time, entry.end_time):
                    errors.append(OVERLAPPING_ENTRY)
                    break

        if hours is not None and hours.is_finite():
            day_total = sum((_decimal(e.hours) for e in others), Decimal("0")) + hours
            if day_total > self.rules.daily_hours_ceiling:
                if self.rules.hard_daily_cap:
                    errors.append(DAILY_LIMIT_EXCEEDED)
                else:
                    warnings.append(DAILY_LIMIT_EXCEEDED)

        if draft.date > self.today() + timedelta(days=self.rules.future_grace_days):
            errors.append(FUTURE_DATE)

        return ValidationResult(errors=tuple(errors), warnings=tuple(warnings))

    def _time_mismatch(self, draft: TimeEntryDraft, hours: Optional[Decimal]) -> bool:
        if draft.start_time is None and draft.end_time is None:
            return False
        if not draft.has_range:
            return True
        if draft.end_time <= draft.start_time:
            return True
        if hours is None or not hours.is_finite():
            return False
        span = _minutes(draft.end_time) - _minutes(draft.start_time)
        return abs(Decimal(span) - hours * 60) > self.rules.duration_tolerance_minutes
