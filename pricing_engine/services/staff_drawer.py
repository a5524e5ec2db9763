"""Staff services drawer session.

Edits every service of one staff member at one location in a single draft.
Rows come from the reconciliation layer; edits are applied to the draft rows
immediately (values equal to the inherited ones collapse to None as they are
entered) and the whole list is saved as one replacement batch.

Unlike single-row editors the drawer stays open while a save is in flight
and only closes once the save is confirmed.
"""

import logging
from collections.abc import Sequence

from ..exceptions import DraftStateError, UnknownServiceError
from ..messages import PRICE_NEGATIVE, PRICE_NEGATIVE_MESSAGE
from ..models import (
    LocationService,
    ServiceFilter,
    StaffService,
    StaffServicesPayload,
    StaffServiceUpdate,
    ValidationIssue,
)
from .change_detection import is_dirty
from .currency import DEFAULT_MINOR_UNITS, DisplayAmount, to_storage
from .drafts import DraftStatus, DurationField, duration_too_short, parse_price
from .reconciliation import count_custom, count_enabled, filter_staff_services, merge_staff_services
from .resolver import collapse, collapse_override, staff_row_is_custom

logger = logging.getLogger(__name__)


class StaffServicesDraft:
    """Draft session of the staff services drawer."""

    def __init__(self, location_id: int, user_id: int, minor_units: int = DEFAULT_MINOR_UNITS):
        self.location_id = location_id
        self.user_id = user_id
        self.minor_units = minor_units

        self.status = DraftStatus.CLOSED
        self.filter = ServiceFilter.ALL
        self.rows: list[StaffService] = []
        self.committed: list[StaffService] = []
        self._initial: list[StaffService] = []
        self._durations: dict[int, DurationField] = {}
        self._price_errors: dict[int, ValidationIssue] = {}

    # Lifecycle

    @property
    def is_open(self) -> bool:
        return self.status is not DraftStatus.CLOSED

    @property
    def is_saving(self) -> bool:
        return self.status is DraftStatus.SAVING

    def _require_editing(self) -> None:
        if self.status is not DraftStatus.EDITING:
            raise DraftStateError(
                f"Staff drawer for user {self.user_id} at location {self.location_id} "
                f"is {self.status.value}"
            )

    def open(
        self,
        location_services: Sequence[LocationService],
        staff_services: Sequence[StaffService],
    ) -> None:
        """Merge the location's services with the staff settings and start editing.

        The merged list, synthesized rows included, is the baseline for both
        change detection and Reset.
        """
        self.rows = merge_staff_services(location_services, staff_services)
        self.committed = list(self.rows)
        self._initial = list(self.rows)
        self._durations = {}
        self._price_errors = {}
        self.filter = ServiceFilter.ALL
        self.status = DraftStatus.EDITING
        logger.debug(
            f"Opened staff drawer for user {self.user_id} at location {self.location_id} "
            f"with {len(self.rows)} services"
        )

    def refresh_location(self, location_services: Sequence[LocationService]) -> None:
        """Re-apply the location's assignment list while open, keeping draft edits.

        Inherited values follow the location's current effective values,
        services that left the location disappear and newly assigned ones
        appear disabled.
        """
        if not self.is_open:
            return
        self.rows = merge_staff_services(location_services, self.rows)
        self.committed = merge_staff_services(location_services, self.committed)
        self._initial = merge_staff_services(location_services, self._initial)
        current = {row.service_id for row in self.rows}
        self._durations = {k: v for k, v in self._durations.items() if k in current}
        self._price_errors = {k: v for k, v in self._price_errors.items() if k in current}

    def cancel(self) -> None:
        """Close the drawer and discard the whole draft.

        Not allowed while a save is in flight; the drawer stays open until
        the save is confirmed or fails.
        """
        if self.status is DraftStatus.SAVING:
            raise DraftStateError(f"Staff drawer for user {self.user_id} is saving")
        self._close()

    def _close(self) -> None:
        self.status = DraftStatus.CLOSED
        self.rows = []
        self._initial = []
        self._durations = {}
        self._price_errors = {}

    # Derived state

    def visible_rows(self) -> list[StaffService]:
        """Rows matching the current filter, reflecting in-progress edits."""
        return filter_staff_services(self.rows, self.filter)

    def set_filter(self, service_filter: ServiceFilter | str) -> None:
        self.filter = ServiceFilter(service_filter)

    @property
    def enabled_count(self) -> int:
        return count_enabled(self.rows)

    @property
    def custom_count(self) -> int:
        return count_custom(self.rows)

    @property
    def is_dirty(self) -> bool:
        return is_dirty(self.rows, self.committed)

    @property
    def errors(self) -> dict[int, list[ValidationIssue]]:
        """Validation issues per service id."""
        found: dict[int, list[ValidationIssue]] = {}
        for service_id, issue in self._price_errors.items():
            found.setdefault(service_id, []).append(issue)
        for service_id, field in self._durations.items():
            if field.error is not None:
                found.setdefault(service_id, []).append(field.error)
        return found

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def can_save(self) -> bool:
        return self.status is DraftStatus.EDITING and self.is_dirty and not self.has_errors

    def row(self, service_id: int) -> StaffService:
        for row in self.rows:
            if row.service_id == service_id:
                return row
        raise UnknownServiceError(service_id)

    def duration_display(self, service_id: int) -> str:
        field = self._durations.get(service_id)
        if field is not None and field.focused:
            return field.text or ""
        return str(self.row(service_id).effective_duration_minutes)

    # Edits

    def _replace(self, service_id: int, **update: object) -> StaffService:
        for index, row in enumerate(self.rows):
            if row.service_id == service_id:
                changed = row.model_copy(update=update)
                changed = changed.model_copy(update={"is_custom": staff_row_is_custom(changed)})
                self.rows[index] = changed
                return changed
        raise UnknownServiceError(service_id)

    def _duration_field(self, service_id: int) -> DurationField:
        self.row(service_id)
        return self._durations.setdefault(service_id, DurationField())

    def toggle(self, service_id: int, can_perform: bool) -> StaffService:
        """Enable or disable a service. Stored custom values are kept either way."""
        self._require_editing()
        return self._replace(service_id, can_perform=can_perform)

    def set_custom_price(self, service_id: int, price_minor: int | None) -> StaffService:
        """Set the custom price in minor units; the inherited price collapses to None."""
        self._require_editing()
        row = self.row(service_id)
        if price_minor is not None and price_minor < 0:
            self._price_errors[service_id] = ValidationIssue(
                field="price", code=PRICE_NEGATIVE, message=PRICE_NEGATIVE_MESSAGE
            )
            return row
        self._price_errors.pop(service_id, None)
        return self._replace(
            service_id, custom_price_minor=collapse(price_minor, row.inherited_price_minor)
        )

    def set_price(self, service_id: int, value: DisplayAmount) -> ValidationIssue | None:
        """Apply display price input for a row."""
        self._require_editing()
        row = self.row(service_id)
        amount, issue = parse_price(value)
        if issue is not None:
            self._price_errors[service_id] = issue
            return issue
        self._price_errors.pop(service_id, None)
        price_minor = to_storage(amount, self.minor_units)
        self._replace(service_id, custom_price_minor=collapse(price_minor, row.inherited_price_minor))
        return None

    def set_custom_duration(self, service_id: int, minutes: int | None) -> StaffService:
        """Set the custom duration; the inherited duration collapses to None.

        A duration below the minimum is rejected: the row keeps its value and
        the row's duration error is set.
        """
        self._require_editing()
        row = self.row(service_id)
        if minutes is not None:
            field = self._duration_field(service_id)
            if minutes < field.minimum:
                field.error = duration_too_short(field.minimum)
                return row
            field.error = None
        return self._replace(
            service_id, custom_duration_minutes=collapse(minutes, row.inherited_duration_minutes)
        )

    def focus_duration(self, service_id: int) -> None:
        self._require_editing()
        self._duration_field(service_id).focus(self.row(service_id).effective_duration_minutes)

    def type_duration(self, service_id: int, text: str) -> ValidationIssue | None:
        """Keystroke in a row's duration input. Empty input means inherited."""
        self._require_editing()
        field = self._duration_field(service_id)
        if not field.focused:
            field.focus(self.row(service_id).effective_duration_minutes)
        minutes = field.type(text)
        if minutes is not None or not text.strip():
            self.set_custom_duration(service_id, minutes)
        return field.error

    def blur_duration(self, service_id: int) -> ValidationIssue | None:
        """Leave a row's duration input; rejected text reverts to the inherited value."""
        self._require_editing()
        field = self._duration_field(service_id)
        if not field.focused:
            return field.error
        self.set_custom_duration(service_id, field.blur())
        return field.error

    def pick_duration(self, service_id: int, minutes: int) -> StaffService:
        """Quick-pick chip for a row's duration. Values below the minimum are rejected."""
        self._require_editing()
        if self._duration_field(service_id).pick(minutes) is not None:
            return self.row(service_id)
        return self.set_custom_duration(service_id, minutes)

    def duration_chips(self, service_id: int) -> list[int]:
        return self._duration_field(service_id).chips

    def revert_price(self, service_id: int) -> StaffService:
        self._require_editing()
        self._price_errors.pop(service_id, None)
        return self._replace(service_id, custom_price_minor=None)

    def revert_duration(self, service_id: int) -> StaffService:
        self._require_editing()
        self._duration_field(service_id).clear()
        return self._replace(service_id, custom_duration_minutes=None)

    def reset(self) -> None:
        """Restore every row to the snapshot taken when the drawer opened."""
        self._require_editing()
        self.rows = list(self._initial)
        self._durations = {}
        self._price_errors = {}

    # Save

    def build_payload(self) -> StaffServicesPayload:
        """Full replacement list, every row collapsed against its inherited values."""
        updates = []
        for row in self.rows:
            price, duration = collapse_override(
                row.custom_price_minor,
                row.custom_duration_minutes,
                row.inherited_price_minor,
                row.inherited_duration_minutes,
            )
            updates.append(
                StaffServiceUpdate(
                    service_id=row.service_id,
                    can_perform=row.can_perform,
                    custom_price_minor=price,
                    custom_duration_minutes=duration,
                )
            )
        return StaffServicesPayload(location_id=self.location_id, user_id=self.user_id, services=updates)

    def begin_save(self) -> StaffServicesPayload:
        """Disable further saves and return the batch to persist."""
        self._require_editing()
        for service_id, field in list(self._durations.items()):
            if field.focused:
                self.blur_duration(service_id)
        if self.has_errors:
            raise DraftStateError(f"Staff drawer for user {self.user_id} has validation errors")
        if not self.is_dirty:
            raise DraftStateError(f"Staff drawer for user {self.user_id} has no changes")
        payload = self.build_payload()
        self.status = DraftStatus.SAVING
        return payload

    def complete_save(self, payload: StaffServicesPayload, success: bool = True) -> None:
        """Close once the save is confirmed; keep the draft alive on failure."""
        if self.status is not DraftStatus.SAVING:
            raise DraftStateError(f"Staff drawer for user {self.user_id} is not saving")
        if not success:
            self.status = DraftStatus.EDITING
            logger.warning(
                f"Saving services of user {self.user_id} at location {self.location_id} failed, "
                f"draft kept for retry"
            )
            return

        saved = {update.service_id: update for update in payload.services}
        committed = []
        for row in self.rows:
            update = saved.get(row.service_id)
            if update is not None:
                row = row.model_copy(
                    update={
                        "custom_price_minor": update.custom_price_minor,
                        "custom_duration_minutes": update.custom_duration_minutes,
                    }
                )
                row = row.model_copy(update={"is_custom": staff_row_is_custom(row)})
            committed.append(row)
        self.committed = committed
        logger.info(
            f"Saved {len(payload.services)} services of user {self.user_id} "
            f"at location {self.location_id}"
        )
        self._close()
