"""Global test configuration and fixtures.

Provides shared fixtures for all tests: catalog services, location rows,
staff rows and environment setup. Ensures test isolation and consistency.
"""

import os

import pytest

from pricing_engine.models import Category, LocationOverride, LocationService, Service, StaffService


@pytest.fixture(autouse=True)
def test_environment():
    """Setup test environment variables for all tests."""
    test_env = {
        "LOG_LEVEL": "DEBUG",
    }

    # Store original values
    original_env = {}
    for key, value in test_env.items():
        original_env[key] = os.environ.get(key)
        os.environ[key] = value

    yield

    # Restore original values
    for key, original_value in original_env.items():
        if original_value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = original_value


@pytest.fixture
def hair_category():
    return Category(id=3, name="Hair", color="#ffcc00")


@pytest.fixture
def haircut(hair_category):
    """Service default price 10.00, duration 60."""
    return Service(
        service_id=1,
        name="Haircut",
        category=hair_category,
        default_price_minor=1000,
        default_duration_minutes=60,
    )


@pytest.fixture
def coloring(hair_category):
    return Service(
        service_id=2,
        name="Coloring",
        category=hair_category,
        default_price_minor=4500,
        default_duration_minutes=90,
    )


@pytest.fixture
def beard_trim():
    return Service(service_id=3, name="Beard trim", default_price_minor=800, default_duration_minutes=20)


@pytest.fixture
def location_services(haircut, coloring, beard_trim):
    """Services assigned to location 10; haircut has a location price of 12.00."""
    return [
        LocationService.from_service(
            haircut, LocationOverride(service_id=1, location_id=10, custom_price_minor=1200)
        ),
        LocationService.from_service(coloring),
        LocationService.from_service(
            beard_trim, LocationOverride(service_id=3, location_id=10, custom_duration_minutes=30)
        ),
    ]


@pytest.fixture
def staff_services():
    """Existing settings of staff member 7 at location 10.

    Beard trim was never configured; service 99 has been removed from the location.
    """
    return [
        StaffService(
            service_id=1,
            service_name="Haircut",
            can_perform=True,
            inherited_price_minor=1200,
            inherited_duration_minutes=60,
            custom_duration_minutes=45,
            is_custom=True,
        ),
        StaffService(
            service_id=2,
            service_name="Coloring",
            can_perform=False,
            inherited_price_minor=4500,
            inherited_duration_minutes=90,
            custom_price_minor=5000,
            is_custom=False,
        ),
        StaffService(
            service_id=99,
            service_name="Discontinued",
            can_perform=True,
            inherited_price_minor=100,
            inherited_duration_minutes=10,
            custom_price_minor=200,
            is_custom=True,
        ),
    ]
