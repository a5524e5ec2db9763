"""Draft sessions for override editors.

A draft is the scratch copy an open editor works against. It is seeded from
committed values when the editor opens, mutated freely while open, validated
on every change and finally either committed or discarded.

Three operations are deliberately kept apart:

- revert: one field back to the value it currently inherits
- reset: every field back to the snapshot taken when the editor opened
- collapse: at commit time, a value equal to the inherited one is stored as None
"""

import logging
from collections.abc import Callable
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import NamedTuple

from ..config import config
from ..exceptions import DraftStateError
from ..messages import (
    DURATION_NOT_INTEGER,
    DURATION_NOT_INTEGER_MESSAGE,
    DURATION_TOO_SHORT,
    DURATION_TOO_SHORT_MESSAGE,
    PRICE_NEGATIVE,
    PRICE_NEGATIVE_MESSAGE,
    PRICE_NOT_NUMBER,
    PRICE_NOT_NUMBER_MESSAGE,
)
from ..models import LocationService, OverridePayload, StaffService, ValidationIssue
from .currency import DEFAULT_MINOR_UNITS, DisplayAmount, from_storage, to_storage
from .resolver import collapse, collapse_override

logger = logging.getLogger(__name__)


class DraftStatus(str, Enum):
    """Lifecycle of a draft session."""

    CLOSED = "closed"
    EDITING = "editing"
    SAVING = "saving"


class InheritedValues(NamedTuple):
    """Values a tier falls back to when it has no override."""

    price_minor: int
    duration_minutes: int


def parse_price(value: DisplayAmount) -> tuple[Decimal | None, ValidationIssue | None]:
    """Parse a display price.

    Empty input means 0. Returns the parsed amount or the validation issue.
    """
    if value is None or isinstance(value, bool):
        return Decimal("0"), None
    text = str(value).strip()
    if not text:
        return Decimal("0"), None
    try:
        amount = Decimal(text)
    except InvalidOperation:
        return None, ValidationIssue(field="price", code=PRICE_NOT_NUMBER, message=PRICE_NOT_NUMBER_MESSAGE)
    if not amount.is_finite():
        return None, ValidationIssue(field="price", code=PRICE_NOT_NUMBER, message=PRICE_NOT_NUMBER_MESSAGE)
    if amount < 0:
        return None, ValidationIssue(field="price", code=PRICE_NEGATIVE, message=PRICE_NEGATIVE_MESSAGE)
    return amount, None


def duration_too_short(minimum: int) -> ValidationIssue:
    return ValidationIssue(
        field="duration",
        code=DURATION_TOO_SHORT,
        message=DURATION_TOO_SHORT_MESSAGE.format(minimum=minimum),
    )


def parse_duration(text: str | None, minimum: int = 1) -> tuple[int | None, ValidationIssue | None]:
    """Parse raw duration input.

    Returns ``(None, None)`` for empty input, the parsed minutes when valid,
    otherwise the validation issue.
    """
    raw = (text or "").strip()
    if not raw:
        return None, None
    if not raw.isdigit():
        return None, ValidationIssue(
            field="duration", code=DURATION_NOT_INTEGER, message=DURATION_NOT_INTEGER_MESSAGE
        )
    minutes = int(raw)
    if minutes < minimum:
        return None, duration_too_short(minimum)
    return minutes, None


class DurationField:
    """Free-typed duration input.

    While focused the raw text is kept exactly as typed, even when invalid.
    Blur is the only point where invalid text is rejected.
    """

    def __init__(self, minimum: int | None = None):
        self.minimum = minimum if minimum is not None else config.engine.min_duration_minutes
        self.text: str | None = None
        self.error: ValidationIssue | None = None

    @property
    def focused(self) -> bool:
        return self.text is not None

    @property
    def chips(self) -> list[int]:
        """Quick-pick durations offered next to the input."""
        return [minutes for minutes in config.engine.duration_chips if minutes >= self.minimum]

    def focus(self, current: int) -> None:
        self.text = str(current)

    def type(self, text: str) -> int | None:
        """Record a keystroke and return the minutes it parses to, if valid."""
        self.text = text
        minutes, self.error = parse_duration(text, self.minimum)
        return minutes

    def blur(self) -> int | None:
        """Leave the field.

        Returns:
            Accepted minutes, or None when the field must revert to its
            inherited value. Empty input reverts silently; "0" and
            unparseable input revert and keep a validation error.
        """
        text, self.text = self.text, None
        minutes, self.error = parse_duration(text, self.minimum)
        return minutes

    def pick(self, minutes: int) -> ValidationIssue | None:
        """Apply a quick-pick value, clearing any pending error.

        Values below the minimum are rejected and leave the field untouched
        apart from the reported error.
        """
        if minutes < self.minimum:
            self.error = duration_too_short(self.minimum)
            return self.error
        if self.focused:
            self.text = str(minutes)
        self.error = None
        return None

    def clear(self) -> None:
        self.text = None
        self.error = None


class OverrideDraft:
    """Draft session of a single-row override editor.

    Used by the location service row, the service pill and the per-service
    staff popover. Holds the edited custom values (None meaning inherited),
    a snapshot taken at open time for Reset, and per-field validation errors.
    Displayed values are derived from the current inherited values, so a
    field the user never touched keeps following inheritance.
    """

    def __init__(
        self,
        service_id: int,
        inherited: Callable[[], InheritedValues],
        minor_units: int = DEFAULT_MINOR_UNITS,
    ):
        """Create a closed draft.

        Args:
            service_id: Service being edited.
            inherited: Returns the values the edited tier currently inherits.
                Called again at save time, inheritance may change while open.
            minor_units: Currency minor units for display price input.
        """
        self.service_id = service_id
        self.minor_units = minor_units
        self._inherited = inherited

        self.status = DraftStatus.CLOSED
        self.committed = OverridePayload(service_id=service_id)
        self.custom_price_minor: int | None = None
        self.custom_duration_minutes: int | None = None
        self.duration = DurationField()
        self.price_error: ValidationIssue | None = None
        self._initial: tuple[int | None, int | None] = (None, None)

    @classmethod
    def for_location_service(
        cls,
        location_service: LocationService,
        minor_units: int = DEFAULT_MINOR_UNITS,
        current: Callable[[], LocationService] | None = None,
    ) -> "OverrideDraft":
        """Draft of a location row, inheriting from the service defaults.

        ``current`` returns the row as it is now and is re-read whenever the
        inherited values are needed. Without it the given row is used as is.
        """
        lookup = current or (lambda: location_service)

        def inherited() -> InheritedValues:
            row = lookup()
            return InheritedValues(row.default_price_minor, row.default_duration_minutes)

        return cls(location_service.service_id, inherited, minor_units)

    @classmethod
    def for_staff_service(
        cls,
        staff_service: StaffService,
        minor_units: int = DEFAULT_MINOR_UNITS,
        current: Callable[[], StaffService] | None = None,
    ) -> "OverrideDraft":
        """Draft of a staff row, inheriting from the location's effective values."""
        lookup = current or (lambda: staff_service)

        def inherited() -> InheritedValues:
            row = lookup()
            return InheritedValues(row.inherited_price_minor, row.inherited_duration_minutes)

        return cls(staff_service.service_id, inherited, minor_units)

    @property
    def inherited(self) -> InheritedValues:
        return self._inherited()

    @property
    def price_minor(self) -> int:
        if self.custom_price_minor is not None:
            return self.custom_price_minor
        return self.inherited.price_minor

    @property
    def duration_minutes(self) -> int:
        if self.custom_duration_minutes is not None:
            return self.custom_duration_minutes
        return self.inherited.duration_minutes

    @property
    def is_open(self) -> bool:
        return self.status is not DraftStatus.CLOSED

    @property
    def errors(self) -> dict[str, ValidationIssue]:
        found: dict[str, ValidationIssue] = {}
        if self.price_error is not None:
            found["price"] = self.price_error
        if self.duration.error is not None:
            found["duration"] = self.duration.error
        return found

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def is_dirty(self) -> bool:
        return (self.custom_price_minor, self.custom_duration_minutes) != self._initial

    @property
    def can_save(self) -> bool:
        return self.status is DraftStatus.EDITING and self.is_dirty and not self.has_errors

    @property
    def price(self) -> Decimal:
        return from_storage(self.price_minor, self.minor_units)

    @property
    def duration_display(self) -> str:
        """Raw text while the duration is focused, the draft value otherwise."""
        if self.duration.focused:
            return self.duration.text or ""
        return str(self.duration_minutes)

    @property
    def is_custom(self) -> bool:
        """Whether the draft would be stored as an override right now."""
        payload = self.build_payload()
        return payload.custom_price_minor is not None or payload.custom_duration_minutes is not None

    def _require_editing(self) -> None:
        if self.status is not DraftStatus.EDITING:
            raise DraftStateError(f"Draft for service {self.service_id} is {self.status.value}")

    def _apply_price(self, price_minor: int | None) -> None:
        self.custom_price_minor = collapse(price_minor, self.inherited.price_minor)

    def _apply_duration(self, minutes: int | None) -> None:
        self.custom_duration_minutes = collapse(minutes, self.inherited.duration_minutes)

    def open(self, committed: OverridePayload | None = None) -> None:
        """Seed the draft from committed values and take the reset snapshot."""
        if committed is not None and committed.service_id != self.service_id:
            raise DraftStateError(
                f"Committed row for service {committed.service_id} "
                f"cannot seed draft for service {self.service_id}"
            )
        self.committed = committed or OverridePayload(service_id=self.service_id)
        self.custom_price_minor = self.committed.custom_price_minor
        self.custom_duration_minutes = self.committed.custom_duration_minutes
        self._initial = (self.custom_price_minor, self.custom_duration_minutes)
        self.price_error = None
        self.duration.clear()
        self.status = DraftStatus.EDITING
        logger.debug(f"Opened draft for service {self.service_id}")

    def set_price(self, value: DisplayAmount) -> ValidationIssue | None:
        """Apply display price input. Invalid input keeps the previous value."""
        self._require_editing()
        amount, self.price_error = parse_price(value)
        if amount is not None:
            self._apply_price(to_storage(amount, self.minor_units))
        return self.price_error

    def set_price_minor(self, price_minor: int | None) -> None:
        """Apply a price in minor units, None meaning the inherited price."""
        self._require_editing()
        if price_minor is not None and price_minor < 0:
            self.price_error = ValidationIssue(
                field="price", code=PRICE_NEGATIVE, message=PRICE_NEGATIVE_MESSAGE
            )
            return
        self.price_error = None
        self._apply_price(price_minor)

    def focus_duration(self) -> None:
        self._require_editing()
        self.duration.focus(self.duration_minutes)

    def type_duration(self, text: str) -> ValidationIssue | None:
        """Apply a keystroke; the draft value follows only valid input."""
        self._require_editing()
        if not self.duration.focused:
            self.duration.focus(self.duration_minutes)
        minutes = self.duration.type(text)
        if minutes is not None:
            self._apply_duration(minutes)
        return self.duration.error

    def blur_duration(self) -> ValidationIssue | None:
        """Leave the duration input, reverting to the inherited value when rejected."""
        self._require_editing()
        if not self.duration.focused:
            return self.duration.error
        self._apply_duration(self.duration.blur())
        return self.duration.error

    def pick_duration(self, minutes: int) -> ValidationIssue | None:
        """Quick-pick chip: set the duration directly and clear any pending error.

        A value below the minimum duration is rejected and the draft value is kept.
        """
        self._require_editing()
        issue = self.duration.pick(minutes)
        if issue is None:
            self._apply_duration(minutes)
        return issue

    def revert_price(self) -> None:
        self._require_editing()
        self.price_error = None
        self.custom_price_minor = None

    def revert_duration(self) -> None:
        self._require_editing()
        self.duration.clear()
        self.custom_duration_minutes = None

    def revert_to_inherited(self) -> None:
        """Revert both fields; saving afterwards stores no override."""
        self.revert_price()
        self.revert_duration()

    def reset(self) -> None:
        """Restore the snapshot taken at open time, not the inherited values."""
        self._require_editing()
        self.custom_price_minor, self.custom_duration_minutes = self._initial
        self.price_error = None
        self.duration.clear()

    def build_payload(self) -> OverridePayload:
        """Collapse the draft against the freshly computed inherited values."""
        inherited = self.inherited
        price, duration = collapse_override(
            self.custom_price_minor,
            self.custom_duration_minutes,
            inherited.price_minor,
            inherited.duration_minutes,
        )
        return OverridePayload(
            service_id=self.service_id,
            custom_price_minor=price,
            custom_duration_minutes=duration,
        )

    def begin_save(self) -> OverridePayload:
        """Freeze the draft for a save and return the row to persist."""
        self._require_editing()
        if self.duration.focused:
            self.blur_duration()
        if self.has_errors:
            raise DraftStateError(f"Draft for service {self.service_id} has validation errors")
        if not self.is_dirty:
            raise DraftStateError(f"Draft for service {self.service_id} has no changes")
        payload = self.build_payload()
        self.status = DraftStatus.SAVING
        return payload

    def complete_save(self, payload: OverridePayload, success: bool = True) -> None:
        """Close on success; on failure keep the draft for a retry."""
        if self.status is not DraftStatus.SAVING:
            raise DraftStateError(f"Draft for service {self.service_id} is not saving")
        if success:
            self.committed = payload
            self.status = DraftStatus.CLOSED
            logger.info(
                f"Committed override for service {self.service_id}: "
                f"price={payload.custom_price_minor}, duration={payload.custom_duration_minutes}"
            )
        else:
            self.status = DraftStatus.EDITING
            logger.warning(f"Save failed for service {self.service_id}, draft kept for retry")

    def save(self) -> OverridePayload:
        """Fire-and-forget commit: close immediately and hand back the row."""
        payload = self.begin_save()
        self.complete_save(payload)
        return payload

    def cancel(self) -> None:
        """Discard the draft without committing anything."""
        if self.status is DraftStatus.SAVING:
            raise DraftStateError(f"Draft for service {self.service_id} is saving")
        self.status = DraftStatus.CLOSED
        self.price_error = None
        self.duration.clear()
        self.custom_price_minor, self.custom_duration_minutes = self._initial
