"""Per-service staff overrides session.

Lists every staff member's override for one service at one location and
edits them as a batch. The parent may know fresher location values than the
server response (unsaved location edits); those supersede the inherited
values carried by the fetched rows.
"""

import logging
from collections.abc import Sequence

from ..exceptions import DraftStateError
from ..models import ServiceStaffOverridesPayload, StaffMemberOverrideUpdate, StaffOverrideData
from .change_detection import OVERRIDE_FIELDS, is_dirty, rows_differ
from .drafts import DraftStatus
from .resolver import collapse_override

logger = logging.getLogger(__name__)


class ServiceStaffOverridesDraft:
    """Batch editor of staff overrides for a single service."""

    def __init__(self, location_id: int, service_id: int):
        self.location_id = location_id
        self.service_id = service_id
        self.status = DraftStatus.CLOSED
        self.members: list[StaffOverrideData] = []
        self.original: list[StaffOverrideData] = []

    @property
    def is_open(self) -> bool:
        return self.status is not DraftStatus.CLOSED

    def open(
        self,
        members: Sequence[StaffOverrideData],
        effective_price_minor: int | None = None,
        effective_duration_minutes: int | None = None,
    ) -> None:
        """Seed the session from fetched overrides.

        Args:
            members: Staff overrides returned for the service.
            effective_price_minor: Location's current effective price, if known.
            effective_duration_minutes: Location's current effective duration, if known.
        """
        update: dict[str, int] = {}
        if effective_price_minor is not None:
            update["inherited_price_minor"] = effective_price_minor
        if effective_duration_minutes is not None:
            update["inherited_duration_minutes"] = effective_duration_minutes

        self.members = [member.model_copy(update=update) for member in members]
        self.original = list(self.members)
        self.status = DraftStatus.EDITING

    def _require_editing(self) -> None:
        if self.status is not DraftStatus.EDITING:
            raise DraftStateError(f"Staff overrides of service {self.service_id} are {self.status.value}")

    def _index(self, user_id: int) -> int:
        for index, member in enumerate(self.members):
            if member.user_id == user_id:
                return index
        raise DraftStateError(f"User {user_id} has no override for service {self.service_id}")

    def update_member(
        self, user_id: int, custom_price_minor: int | None, custom_duration_minutes: int | None
    ) -> StaffOverrideData:
        """Replace one member's custom values (local only)."""
        self._require_editing()
        index = self._index(user_id)
        member = self.members[index].model_copy(
            update={
                "custom_price_minor": custom_price_minor,
                "custom_duration_minutes": custom_duration_minutes,
            }
        )
        self.members[index] = member
        return member

    def revert_member(self, user_id: int) -> StaffOverrideData:
        """Drop one member's override so they inherit the location values."""
        return self.update_member(user_id, None, None)

    @property
    def is_dirty(self) -> bool:
        return is_dirty(self.members, self.original, key="user_id", fields=OVERRIDE_FIELDS)

    def changed_members(self) -> list[StaffOverrideData]:
        original = {member.user_id: member for member in self.original}
        return [
            member
            for member in self.members
            if member.user_id not in original
            or rows_differ(member, original[member.user_id], OVERRIDE_FIELDS)
        ]

    def build_payload(self) -> ServiceStaffOverridesPayload:
        """Changed members only, each collapsed against the inherited values."""
        updates = []
        for member in self.changed_members():
            price, duration = collapse_override(
                member.custom_price_minor,
                member.custom_duration_minutes,
                member.inherited_price_minor,
                member.inherited_duration_minutes,
            )
            updates.append(
                StaffMemberOverrideUpdate(
                    user_id=member.user_id,
                    custom_price_minor=price,
                    custom_duration_minutes=duration,
                )
            )
        return ServiceStaffOverridesPayload(
            location_id=self.location_id, service_id=self.service_id, staff_overrides=updates
        )

    def begin_save(self) -> ServiceStaffOverridesPayload:
        self._require_editing()
        if not self.is_dirty:
            raise DraftStateError(f"Staff overrides of service {self.service_id} have no changes")
        payload = self.build_payload()
        self.status = DraftStatus.SAVING
        return payload

    def complete_save(self, payload: ServiceStaffOverridesPayload, success: bool = True) -> None:
        if self.status is not DraftStatus.SAVING:
            raise DraftStateError(f"Staff overrides of service {self.service_id} are not saving")
        if not success:
            self.status = DraftStatus.EDITING
            logger.warning(f"Saving staff overrides of service {self.service_id} failed, draft kept")
            return
        saved = {update.user_id: update for update in payload.staff_overrides}
        self.members = [
            member.model_copy(
                update={
                    "custom_price_minor": saved[member.user_id].custom_price_minor,
                    "custom_duration_minutes": saved[member.user_id].custom_duration_minutes,
                }
            )
            if member.user_id in saved
            else member
            for member in self.members
        ]
        self.original = list(self.members)
        self.status = DraftStatus.CLOSED
        logger.info(f"Saved {len(saved)} staff overrides of service {self.service_id}")

    def cancel(self) -> None:
        """Restore the fetched overrides and close."""
        self.members = list(self.original)
        self.status = DraftStatus.CLOSED
