"""Tests for the persistence hand-off of committed drafts."""

import pytest

from pricing_engine.core.container import Container
from pricing_engine.models import OverridePayload, StaffOverrideData
from pricing_engine.services.drafts import DraftStatus, OverrideDraft
from pricing_engine.services.gateway import (
    InMemoryOverrideGateway,
    save_location_draft,
    save_service_staff_overrides,
    save_staff_draft,
    save_staff_drawer,
)
from pricing_engine.services.staff_drawer import StaffServicesDraft
from pricing_engine.services.staff_overrides import ServiceStaffOverridesDraft


@pytest.fixture
def gateway():
    return InMemoryOverrideGateway()


@pytest.mark.asyncio
async def test_location_row_save(gateway, location_services):
    draft = OverrideDraft.for_location_service(location_services[0])
    draft.open(OverridePayload(service_id=1, custom_price_minor=1200))
    draft.pick_duration(45)

    assert await save_location_draft(draft, gateway, location_id=10) is True
    assert draft.status is DraftStatus.CLOSED
    assert gateway.location_overrides[(10, 1)] == OverridePayload(
        service_id=1, custom_price_minor=1200, custom_duration_minutes=45
    )


@pytest.mark.asyncio
async def test_failed_save_keeps_draft_for_retry(gateway, location_services):
    draft = OverrideDraft.for_location_service(location_services[0])
    draft.open()
    draft.set_price("14.99")
    gateway.fail_next()

    assert await save_location_draft(draft, gateway, location_id=10) is False
    assert draft.status is DraftStatus.EDITING
    assert draft.price_minor == 1499
    assert gateway.location_overrides == {}

    assert await save_location_draft(draft, gateway, location_id=10) is True
    assert gateway.location_overrides[(10, 1)].custom_price_minor == 1499


@pytest.mark.asyncio
async def test_staff_drawer_save(gateway, location_services, staff_services):
    drawer = StaffServicesDraft(location_id=10, user_id=7)
    drawer.open(location_services, staff_services)
    drawer.toggle(3, True)
    drawer.set_custom_price(1, 1300)

    gateway.fail_next()
    assert await save_staff_drawer(drawer, gateway) is False
    assert drawer.is_open is True
    assert drawer.row(3).can_perform is True

    assert await save_staff_drawer(drawer, gateway) is True
    assert drawer.is_open is False
    saved = gateway.staff_services[(10, 7)]
    assert [update.service_id for update in saved.services] == [1, 2, 3]
    assert gateway.staff_overrides[(10, 7, 1)].custom_price_minor == 1300

    single = OverrideDraft.for_staff_service(drawer.committed[0])
    single.open(OverridePayload(service_id=1, custom_price_minor=1300, custom_duration_minutes=45))
    single.revert_price()
    assert await save_staff_draft(single, gateway, location_id=10, user_id=7) is True
    assert gateway.staff_services[(10, 7)].services[0].custom_price_minor is None


@pytest.mark.asyncio
async def test_service_staff_overrides_save(gateway):
    session = ServiceStaffOverridesDraft(location_id=10, service_id=1)
    session.open(
        [
            StaffOverrideData(
                user_id=7,
                first_name="Ana",
                last_name="Pop",
                custom_price_minor=1500,
                inherited_price_minor=1000,
                inherited_duration_minutes=60,
            )
        ]
    )
    session.revert_member(7)
    assert await save_service_staff_overrides(session, gateway) is True
    assert gateway.staff_overrides[(10, 7, 1)].model_dump() == OverridePayload(service_id=1).model_dump()


def test_container_wiring():
    container = Container()
    assert container.gateway() is container.gateway()
    assert container.currency_service().get_minor_units("EUR") == 2
    assert container.resolver(minor_units=3).minor_units == 3
