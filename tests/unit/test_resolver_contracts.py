"""Contract tests for three-tier override resolution.

These tests pin down how service defaults, location overrides and staff
overrides combine into effective values and custom flags.
"""

from decimal import Decimal
from itertools import product

from pricing_engine.models import LocationOverride, Service, StaffOverride
from pricing_engine.services.resolver import OverrideResolver, collapse, collapse_override


def _location(service_id=1, price=None, duration=None):
    return LocationOverride(
        service_id=service_id, location_id=10, custom_price_minor=price, custom_duration_minutes=duration
    )


def _staff(service_id=1, price=None, duration=None, can_perform=True):
    return StaffOverride(
        service_id=service_id,
        location_id=10,
        user_id=7,
        can_perform=can_perform,
        custom_price_minor=price,
        custom_duration_minutes=duration,
    )


class TestResolverContracts:
    """Test the effective value contracts."""

    def test_inheritance_through_location(self, haircut):
        """Location price override, staff duration override."""
        result = OverrideResolver().resolve(haircut, _location(price=1200), _staff(duration=45))

        assert result.staff.price == Decimal("12.00")
        assert result.staff.price_minor == 1200
        assert result.staff.duration_minutes == 45
        assert result.staff_is_custom is True
        assert result.location_is_custom is True
        assert result.location.price_minor == 1200
        assert result.location.duration_minutes == 60
        assert result.staff_enabled is True

    def test_chain_for_all_combinations(self, haircut):
        resolver = OverrideResolver()
        values = [None, 0, 1500]
        durations = [None, 30, 75]
        for loc_price, staff_price, loc_duration, staff_duration in product(
            values, values, durations, durations
        ):
            result = resolver.resolve(
                haircut,
                _location(price=loc_price, duration=loc_duration),
                _staff(price=staff_price, duration=staff_duration),
            )
            expected_price = next(
                v for v in (staff_price, loc_price, haircut.default_price_minor) if v is not None
            )
            expected_duration = next(
                v for v in (staff_duration, loc_duration, haircut.default_duration_minutes) if v is not None
            )
            assert result.staff.price_minor == expected_price
            assert result.staff.duration_minutes == expected_duration
            assert result.location_is_custom == (loc_price is not None or loc_duration is not None)
            assert result.staff_is_custom == (staff_price is not None or staff_duration is not None)

    def test_missing_rows_inherit_everything(self, haircut):
        result = OverrideResolver().resolve(haircut)

        assert result.location.price_minor == 1000
        assert result.location.duration_minutes == 60
        assert result.staff.price_minor == 1000
        assert result.staff.duration_minutes == 60
        assert result.location_is_custom is False
        assert result.staff_is_custom is False
        assert result.staff_enabled is False

    def test_missing_staff_row_matches_location(self, haircut):
        result = OverrideResolver().resolve(haircut, _location(price=1200, duration=50))

        assert result.staff_enabled is False
        assert result.staff_is_custom is False
        assert result.staff.price_minor == result.location.price_minor == 1200
        assert result.staff.duration_minutes == result.location.duration_minutes == 50

    def test_disabled_staff_keeps_values_but_is_not_custom(self, haircut):
        result = OverrideResolver().resolve(haircut, None, _staff(price=900, can_perform=False))

        assert result.staff_enabled is False
        assert result.staff_is_custom is False
        assert result.staff.is_custom is False
        assert result.staff.price_minor == 900

    def test_explicit_can_perform_gate_wins(self, haircut):
        result = OverrideResolver().resolve(haircut, None, _staff(price=900, can_perform=False), can_perform=True)
        assert result.staff_enabled is True
        assert result.staff_is_custom is True

    def test_mismatched_rows_are_ignored(self, haircut):
        result = OverrideResolver().resolve(haircut, _location(service_id=2, price=1), _staff(service_id=2, price=1))

        assert result.location.price_minor == 1000
        assert result.staff.price_minor == 1000
        assert result.location_is_custom is False
        assert result.staff_is_custom is False

    def test_invalid_stored_values_fall_back_to_inherited(self, haircut):
        broken = LocationOverride.model_construct(
            service_id=1, location_id=10, custom_price_minor=-5, custom_duration_minutes=0
        )
        result = OverrideResolver().resolve(haircut, broken)
        assert result.location.price_minor == 1000
        assert result.location.duration_minutes == 60
        assert result.location_is_custom is False

    def test_display_price_uses_minor_units(self):
        service = Service(service_id=5, name="Massage", default_price_minor=12345, default_duration_minutes=30)
        assert OverrideResolver(minor_units=3).resolve(service).location.price == Decimal("12.345")
        assert OverrideResolver(minor_units=0).resolve(service).location.price == Decimal("12345")

    def test_resolve_location_matches_rows_by_service(self, haircut, coloring, beard_trim):
        results = OverrideResolver().resolve_location(
            [haircut, coloring, beard_trim],
            [_location(service_id=2, price=5000), _location(service_id=42, price=1)],
            [_staff(service_id=3, duration=25)],
        )
        assert [r.service_id for r in results] == [1, 2, 3]
        assert results[1].location.price_minor == 5000
        assert results[2].staff.duration_minutes == 25
        assert results[0].location_is_custom is False


class TestCollapseContracts:
    def test_collapse_on_equality(self):
        assert collapse(1000, 1000) is None
        assert collapse(1200, 1000) == 1200
        assert collapse(None, 1000) is None

    def test_fields_collapse_independently(self):
        assert collapse_override(1000, 45, 1000, 60) == (None, 45)
        assert collapse_override(1200, 60, 1000, 60) == (1200, None)

    def test_collapse_is_idempotent(self):
        first = collapse_override(1000, 45, 1000, 60)
        assert collapse_override(*first, 1000, 60) == first
