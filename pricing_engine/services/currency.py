"""Currency minor-unit conversion service.

Prices are stored as integer minor units (cents for EUR/USD) and shown as
decimal display amounts. Conversion always rounds half-up instead of
truncating, so 2.99 becomes exactly 299 and converts back to 2.99.

Unknown currency codes and unsupported minor-unit counts fall back to the
configured default instead of raising: bad currency metadata must never
break an editor.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from ..config import Config, config
from ..messages import (
    DURATION_HOURS,
    DURATION_HOURS_MINUTES,
    DURATION_MINUTES,
    PRICE_WITH_CODE,
    PRICE_WITH_SYMBOL,
)
from ..models import CurrencyMeta

logger = logging.getLogger(__name__)

SUPPORTED_MINOR_UNITS = (0, 2, 3)
DEFAULT_MINOR_UNITS = 2

DisplayAmount = Decimal | int | float | str | None


def normalize_minor_units(minor_units: int | None) -> int:
    """Return ``minor_units`` when supported, otherwise the 2-digit default."""
    if minor_units in SUPPORTED_MINOR_UNITS:
        return minor_units
    logger.warning(f"Unsupported minor units {minor_units!r}, using {DEFAULT_MINOR_UNITS}")
    return DEFAULT_MINOR_UNITS


def to_decimal(display: DisplayAmount) -> Decimal:
    """Parse a display amount. Empty, None and unparseable input become 0."""
    if display is None or isinstance(display, bool):
        return Decimal("0")
    if isinstance(display, Decimal):
        value = display
    else:
        # str() keeps floats such as 2.99 from dragging binary noise along
        text = str(display).strip()
        if not text:
            return Decimal("0")
        try:
            value = Decimal(text)
        except InvalidOperation:
            logger.debug(f"Unparseable display amount {display!r}, using 0")
            return Decimal("0")
    if not value.is_finite():
        return Decimal("0")
    return value


def to_storage(display: DisplayAmount, minor_units: int = DEFAULT_MINOR_UNITS) -> int:
    """Convert a display amount to integer minor units.

    Args:
        display: Amount as shown to users (e.g. 2.99 or "12.50").
        minor_units: Currency minor units (0, 2 or 3).

    Returns:
        Integer amount in minor units, e.g. 299 for 2.99 with 2 minor units.
    """
    value = to_decimal(display)
    if value == 0:
        return 0

    units = normalize_minor_units(minor_units)
    scaled = value.scaleb(units).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(scaled)


def from_storage(stored: int | None, minor_units: int = DEFAULT_MINOR_UNITS) -> Decimal:
    """Convert integer minor units to a display amount.

    Args:
        stored: Amount in minor units, None is treated as 0.
        minor_units: Currency minor units (0, 2 or 3).

    Returns:
        Decimal display amount, e.g. Decimal("2.99") for 299.
    """
    if not stored:
        return Decimal("0")

    units = normalize_minor_units(minor_units)
    return Decimal(int(stored)).scaleb(-units)


def format_duration(minutes: int) -> str:
    """Format a duration as "1h 30m", "2h" or "45m"."""
    hours, mins = divmod(max(int(minutes), 0), 60)
    if hours and mins:
        return DURATION_HOURS_MINUTES.format(hours=hours, minutes=mins)
    if hours:
        return DURATION_HOURS.format(hours=hours)
    return DURATION_MINUTES.format(minutes=mins)


class CurrencyService:
    """Currency registry with minor-unit aware price conversion."""

    def __init__(self, config: Config):
        """Build the registry from the configured currency table.

        Args:
            config: Engine configuration holding the currency table and defaults.
        """
        self.config = config
        self._currencies: dict[str, CurrencyMeta] = {}

        for entry in config.currencies:
            try:
                meta = CurrencyMeta(
                    code=str(entry["code"]).upper(),
                    label=entry.get("label", entry["code"]),
                    symbol=entry.get("symbol"),
                    minor_units=entry.get("minor_units", DEFAULT_MINOR_UNITS),
                    selectable=entry.get("selectable", True),
                )
            except (KeyError, ValueError) as e:
                logger.warning(f"Skipping invalid currency entry {entry!r}: {e}")
                continue
            self._currencies[meta.code] = meta

        logger.debug(f"Currency registry loaded with {len(self._currencies)} currencies")

    @property
    def default_code(self) -> str:
        return self.config.engine.default_currency.upper()

    def _fallback(self) -> CurrencyMeta:
        meta = self._currencies.get(self.default_code)
        if meta is not None:
            return meta
        return CurrencyMeta(
            code=self.default_code,
            label=self.default_code,
            minor_units=normalize_minor_units(self.config.engine.default_minor_units),
        )

    def get_currency(self, code: str | None) -> CurrencyMeta:
        """Get currency metadata, case-insensitive.

        Unknown or missing codes resolve to the default currency.
        """
        if code:
            meta = self._currencies.get(code.strip().upper())
            if meta is not None:
                return meta
        logger.warning(f"Unknown currency code {code!r}, falling back to {self.default_code}")
        return self._fallback()

    def get_minor_units(self, code: str | None) -> int:
        """Get the number of minor units for a currency code."""
        if code and code.strip().upper() in self._currencies:
            return self._currencies[code.strip().upper()].minor_units
        # Unknown codes always get two digits, whatever the default currency uses
        logger.warning(f"Unknown currency code {code!r}, assuming {DEFAULT_MINOR_UNITS} minor units")
        return DEFAULT_MINOR_UNITS

    def selectable_currencies(self) -> list[CurrencyMeta]:
        """Currencies that may be picked for a business, legacy ones excluded."""
        return [meta for meta in self._currencies.values() if meta.selectable]

    def price_to_storage(self, display: DisplayAmount, code: str | None) -> int:
        return to_storage(display, self.get_minor_units(code))

    def price_from_storage(self, stored: int | None, code: str | None) -> Decimal:
        return from_storage(stored, self.get_minor_units(code))

    def format_price(self, stored: int | None, code: str | None) -> str:
        """Format a stored price with its currency symbol (or code).

        Args:
            stored: Amount in minor units.
            code: Currency code.

        Returns:
            Display string such as "€12.50" or "12.50 XYZ".
        """
        meta = self.get_currency(code)
        units = self.get_minor_units(code)
        amount = from_storage(stored, units).quantize(Decimal(1).scaleb(-units))
        if meta.symbol:
            return PRICE_WITH_SYMBOL.format(symbol=meta.symbol, amount=amount)
        return PRICE_WITH_CODE.format(amount=amount, code=meta.code)


_currency_service: CurrencyService | None = None


def get_currency_service() -> CurrencyService:
    """Get the lazily created currency service bound to the global config."""
    global _currency_service
    if _currency_service is None:
        _currency_service = CurrencyService(config)
    return _currency_service


def price_to_storage(display: DisplayAmount, code: str | None = None) -> int:
    """Functional wrapper around CurrencyService.price_to_storage."""
    return get_currency_service().price_to_storage(display, code)


def price_from_storage(stored: int | None, code: str | None = None) -> Decimal:
    """Functional wrapper around CurrencyService.price_from_storage."""
    return get_currency_service().price_from_storage(stored, code)
