"""Data models for the pricing engine.

Defines Pydantic models for every data structure the engine reads from or
hands to the persistence layer: catalog services, location and staff
overrides, the joined rows used by editors, resolved effective values and
the outbound save payloads. Prices are stored as integer minor units
(e.g. cents); display prices are always Decimal.
"""

from decimal import Decimal
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Category(BaseModel):
    """Service category reference used for grouping and badges."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    color: str | None = None


class Service(BaseModel):
    """Catalog service owned by the business.

    Attributes:
        service_id: Catalog identifier.
        name: Service display name.
        category: Optional category reference.
        default_price_minor: Default price in currency minor units.
        default_duration_minutes: Default duration in minutes.
    """

    model_config = ConfigDict(frozen=True)

    service_id: int
    name: str
    category: Category | None = None
    default_price_minor: int = Field(ge=0)
    default_duration_minutes: int = Field(ge=1)


class LocationOverride(BaseModel):
    """Per-location override of a service's price and/or duration.

    ``None`` in either custom field means "inherit the service default" for
    that field, independently of the other field.
    """

    model_config = ConfigDict(frozen=True)

    service_id: int
    location_id: int
    custom_price_minor: int | None = Field(default=None, ge=0)
    custom_duration_minutes: int | None = Field(default=None, ge=1)

    @property
    def is_custom(self) -> bool:
        return self.custom_price_minor is not None or self.custom_duration_minutes is not None


class StaffOverride(BaseModel):
    """Per-staff override of a service at one location.

    Custom values inherit from the location's effective value. Stored custom
    values survive ``can_perform`` being switched off.
    """

    model_config = ConfigDict(frozen=True)

    service_id: int
    location_id: int
    user_id: int
    can_perform: bool = False
    custom_price_minor: int | None = Field(default=None, ge=0)
    custom_duration_minutes: int | None = Field(default=None, ge=1)


class LocationService(BaseModel):
    """Service assigned to a location, joined with its location override.

    Attributes:
        service_id: Catalog identifier.
        service_name: Service display name.
        category: Optional category reference.
        default_price_minor: Service default price in minor units.
        default_duration_minutes: Service default duration.
        custom_price_minor: Location price override, None when inherited.
        custom_duration_minutes: Location duration override, None when inherited.
        staff_count: How many team members can perform the service here.
        staff_with_overrides: How many enabled team members have custom values.
    """

    model_config = ConfigDict(frozen=True)

    service_id: int
    service_name: str
    category: Category | None = None
    default_price_minor: int = Field(ge=0)
    default_duration_minutes: int = Field(ge=1)
    custom_price_minor: int | None = Field(default=None, ge=0)
    custom_duration_minutes: int | None = Field(default=None, ge=1)
    staff_count: int = 0
    staff_with_overrides: int = 0

    @classmethod
    def from_service(
        cls, service: Service, override: LocationOverride | None = None
    ) -> "LocationService":
        """Join a catalog service with its (optional) location override."""
        return cls(
            service_id=service.service_id,
            service_name=service.name,
            category=service.category,
            default_price_minor=service.default_price_minor,
            default_duration_minutes=service.default_duration_minutes,
            custom_price_minor=override.custom_price_minor if override else None,
            custom_duration_minutes=override.custom_duration_minutes if override else None,
        )

    @property
    def effective_price_minor(self) -> int:
        if self.custom_price_minor is not None:
            return self.custom_price_minor
        return self.default_price_minor

    @property
    def effective_duration_minutes(self) -> int:
        if self.custom_duration_minutes is not None:
            return self.custom_duration_minutes
        return self.default_duration_minutes

    @property
    def is_custom(self) -> bool:
        return self.custom_price_minor is not None or self.custom_duration_minutes is not None


class StaffService(BaseModel):
    """Row of the staff services drawer.

    Attributes:
        service_id: Catalog identifier.
        service_name: Service display name.
        can_perform: Whether the staff member performs the service here.
        category: Optional category reference.
        inherited_price_minor: Location effective price the row inherits.
        inherited_duration_minutes: Location effective duration the row inherits.
        custom_price_minor: Staff price override, None when inherited.
        custom_duration_minutes: Staff duration override, None when inherited.
        is_custom: True when enabled and at least one custom value is set.
    """

    model_config = ConfigDict(frozen=True)

    service_id: int
    service_name: str
    can_perform: bool = False
    category: Category | None = None
    inherited_price_minor: int = Field(ge=0)
    inherited_duration_minutes: int = Field(ge=1)
    custom_price_minor: int | None = Field(default=None, ge=0)
    custom_duration_minutes: int | None = Field(default=None, ge=1)
    is_custom: bool = False

    @property
    def effective_price_minor(self) -> int:
        if self.custom_price_minor is not None:
            return self.custom_price_minor
        return self.inherited_price_minor

    @property
    def effective_duration_minutes(self) -> int:
        if self.custom_duration_minutes is not None:
            return self.custom_duration_minutes
        return self.inherited_duration_minutes

    @property
    def has_stored_override(self) -> bool:
        """Custom values are present, regardless of ``can_perform``."""
        return self.custom_price_minor is not None or self.custom_duration_minutes is not None


class EffectiveValue(BaseModel):
    """Price and duration actually applied at one tier.

    Attributes:
        price_minor: Effective price in minor units.
        price: Effective price in display units.
        duration_minutes: Effective duration.
        is_custom: Whether the tier carries an explicit override.
    """

    model_config = ConfigDict(frozen=True)

    price_minor: int
    price: Decimal
    duration_minutes: int
    is_custom: bool = False


class ResolvedOverride(BaseModel):
    """Resolution result for one (service, location, staff) combination."""

    model_config = ConfigDict(frozen=True)

    service_id: int
    location: EffectiveValue
    staff: EffectiveValue
    location_is_custom: bool
    staff_is_custom: bool
    staff_enabled: bool


class CurrencyMeta(BaseModel):
    """Currency metadata used for display and minor-unit conversion.

    Attributes:
        code: Uppercase ISO-4217 code.
        label: Human readable name.
        symbol: Display symbol, None when the code itself is shown.
        minor_units: Number of decimal places of the smallest unit.
        selectable: False for legacy currencies kept for old data.
    """

    model_config = ConfigDict(frozen=True)

    code: str
    label: str
    symbol: str | None = None
    minor_units: Literal[0, 2, 3] = 2
    selectable: bool = True


class ServiceFilter(str, Enum):
    """Staff drawer list filter."""

    ALL = "all"
    ENABLED = "enabled"
    CUSTOM = "custom"


class ValidationIssue(BaseModel):
    """Inline field validation error. Never raised."""

    model_config = ConfigDict(frozen=True)

    field: Literal["price", "duration"]
    code: str
    message: str


class OverridePayload(BaseModel):
    """Single-row commit handed to the persistence layer."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    service_id: int = Field(alias="serviceId")
    custom_price_minor: int | None = Field(default=None, alias="customPrice")
    custom_duration_minutes: int | None = Field(default=None, alias="customDuration")


class StaffServiceUpdate(BaseModel):
    """One entry of the staff drawer's batched save."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    service_id: int = Field(alias="serviceId")
    can_perform: bool = Field(alias="canPerform")
    custom_price_minor: int | None = Field(default=None, alias="customPrice")
    custom_duration_minutes: int | None = Field(default=None, alias="customDuration")


class StaffServicesPayload(BaseModel):
    """Full replacement list of a staff member's services at a location."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    location_id: int = Field(alias="locationId")
    user_id: int = Field(alias="userId")
    services: list[StaffServiceUpdate]


class StaffOverrideData(BaseModel):
    """A staff member's override for one service, as listed per service."""

    model_config = ConfigDict(frozen=True)

    user_id: int
    first_name: str
    last_name: str
    email: str = ""
    custom_price_minor: int | None = Field(default=None, ge=0)
    custom_duration_minutes: int | None = Field(default=None, ge=1)
    inherited_price_minor: int = Field(ge=0)
    inherited_duration_minutes: int = Field(ge=1)

    @property
    def is_custom(self) -> bool:
        return self.custom_price_minor is not None or self.custom_duration_minutes is not None


class StaffMemberOverrideUpdate(BaseModel):
    """One entry of the per-service staff overrides save."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    user_id: int = Field(alias="userId")
    custom_price_minor: int | None = Field(default=None, alias="customPrice")
    custom_duration_minutes: int | None = Field(default=None, alias="customDuration")


class ServiceStaffOverridesPayload(BaseModel):
    """Batched save of every staff override for one service at a location."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    location_id: int = Field(alias="locationId")
    service_id: int = Field(alias="serviceId")
    staff_overrides: list[StaffMemberOverrideUpdate] = Field(alias="staffOverrides")


class CopyStaffSetupPayload(BaseModel):
    """Request to copy one staff member's setup onto another."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    location_id: int = Field(alias="locationId")
    source_user_id: int = Field(alias="sourceUserId")
    target_user_id: int = Field(alias="targetUserId")
    copy_enabled_services: bool = Field(default=True, alias="copyEnabledServices")
    copy_custom_pricing: bool = Field(default=True, alias="copyCustomPricing")


class LocationServiceSummary(BaseModel):
    """Staff counters shown on a location service row."""

    service_id: int
    staff_count: int = 0
    staff_with_overrides: int = 0


class StaffSummary(BaseModel):
    """Counters shown for a team member at a location."""

    user_id: int
    services_enabled: int = 0
    overrides_count: int = 0
