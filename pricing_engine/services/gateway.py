"""Persistence hand-off for committed drafts.

The engine does not talk HTTP itself; it hands payloads to an
``OverrideGateway``. The in-memory gateway keeps the last committed state
and is used for local runs and tests.

The ``save_*`` helpers wrap a draft's begin/complete save around a gateway
call: a failed save never loses the draft, so the user can retry.
"""

import logging
from abc import ABC, abstractmethod

from ..exceptions import PersistenceError
from ..models import (
    OverridePayload,
    ServiceStaffOverridesPayload,
    StaffServicesPayload,
)
from .drafts import OverrideDraft
from .staff_drawer import StaffServicesDraft
from .staff_overrides import ServiceStaffOverridesDraft

logger = logging.getLogger(__name__)


class OverrideGateway(ABC):
    @abstractmethod
    async def save_location_override(self, location_id: int, payload: OverridePayload) -> None:
        """Replace the location override of one service."""
        raise NotImplementedError

    @abstractmethod
    async def save_staff_override(
        self, location_id: int, user_id: int, payload: OverridePayload
    ) -> None:
        """Replace one staff member's override of one service."""
        raise NotImplementedError

    @abstractmethod
    async def save_staff_services(self, payload: StaffServicesPayload) -> None:
        """Replace every service setting of a staff member at a location."""
        raise NotImplementedError

    @abstractmethod
    async def save_service_staff_overrides(self, payload: ServiceStaffOverridesPayload) -> None:
        """Replace staff overrides of one service at a location."""
        raise NotImplementedError


class InMemoryOverrideGateway(OverrideGateway):
    """Gateway that stores committed payloads in dictionaries."""

    def __init__(self) -> None:
        self.location_overrides: dict[tuple[int, int], OverridePayload] = {}
        self.staff_overrides: dict[tuple[int, int, int], OverridePayload] = {}
        self.staff_services: dict[tuple[int, int], StaffServicesPayload] = {}
        self.saves = 0
        self._fail_next = 0

    def fail_next(self, count: int = 1) -> None:
        """Make the next ``count`` saves raise PersistenceError."""
        self._fail_next = count

    def _check(self) -> None:
        if self._fail_next:
            self._fail_next -= 1
            raise PersistenceError("Save rejected by in-memory gateway")
        self.saves += 1

    async def save_location_override(self, location_id: int, payload: OverridePayload) -> None:
        self._check()
        self.location_overrides[(location_id, payload.service_id)] = payload

    async def save_staff_override(
        self, location_id: int, user_id: int, payload: OverridePayload
    ) -> None:
        self._check()
        self.staff_overrides[(location_id, user_id, payload.service_id)] = payload
        batch = self.staff_services.get((location_id, user_id))
        if batch is not None:
            services = [
                update.model_copy(
                    update={
                        "custom_price_minor": payload.custom_price_minor,
                        "custom_duration_minutes": payload.custom_duration_minutes,
                    }
                )
                if update.service_id == payload.service_id
                else update
                for update in batch.services
            ]
            self.staff_services[(location_id, user_id)] = batch.model_copy(update={"services": services})

    async def save_staff_services(self, payload: StaffServicesPayload) -> None:
        self._check()
        self.staff_services[(payload.location_id, payload.user_id)] = payload
        for update in payload.services:
            self.staff_overrides[(payload.location_id, payload.user_id, update.service_id)] = OverridePayload(
                service_id=update.service_id,
                custom_price_minor=update.custom_price_minor,
                custom_duration_minutes=update.custom_duration_minutes,
            )

    async def save_service_staff_overrides(self, payload: ServiceStaffOverridesPayload) -> None:
        self._check()
        for update in payload.staff_overrides:
            self.staff_overrides[(payload.location_id, update.user_id, payload.service_id)] = OverridePayload(
                service_id=payload.service_id,
                custom_price_minor=update.custom_price_minor,
                custom_duration_minutes=update.custom_duration_minutes,
            )


async def save_location_draft(
    draft: OverrideDraft, gateway: OverrideGateway, location_id: int
) -> bool:
    """Persist a location row draft. Returns False when the save failed."""
    payload = draft.begin_save()
    try:
        await gateway.save_location_override(location_id, payload)
    except PersistenceError as e:
        logger.error(f"Failed to save location override for service {draft.service_id}: {e}")
        draft.complete_save(payload, success=False)
        return False
    draft.complete_save(payload)
    return True


async def save_staff_draft(
    draft: OverrideDraft, gateway: OverrideGateway, location_id: int, user_id: int
) -> bool:
    """Persist a single staff row draft. Returns False when the save failed."""
    payload = draft.begin_save()
    try:
        await gateway.save_staff_override(location_id, user_id, payload)
    except PersistenceError as e:
        logger.error(f"Failed to save staff override for service {draft.service_id}: {e}")
        draft.complete_save(payload, success=False)
        return False
    draft.complete_save(payload)
    return True


async def save_staff_drawer(draft: StaffServicesDraft, gateway: OverrideGateway) -> bool:
    """Persist the staff drawer; it closes only after the gateway confirms."""
    payload = draft.begin_save()
    try:
        await gateway.save_staff_services(payload)
    except PersistenceError as e:
        logger.error(f"Failed to save services of user {draft.user_id}: {e}")
        draft.complete_save(payload, success=False)
        return False
    draft.complete_save(payload)
    return True


async def save_service_staff_overrides(
    draft: ServiceStaffOverridesDraft, gateway: OverrideGateway
) -> bool:
    """Persist a per-service staff overrides batch."""
    payload = draft.begin_save()
    try:
        await gateway.save_service_staff_overrides(payload)
    except PersistenceError as e:
        logger.error(f"Failed to save staff overrides of service {draft.service_id}: {e}")
        draft.complete_save(payload, success=False)
        return False
    draft.complete_save(payload)
    return True
