"""User-facing validation messages and display templates.

Centralizes inline validation messages and formatting templates used by the
editors so that wording stays consistent across every editor surface.
"""

# Validation error codes
DURATION_NOT_INTEGER = "duration_not_integer"
DURATION_TOO_SHORT = "duration_too_short"
PRICE_NOT_NUMBER = "price_not_number"
PRICE_NEGATIVE = "price_negative"

# Validation messages
DURATION_NOT_INTEGER_MESSAGE = "Duration must be a whole number of minutes"
DURATION_TOO_SHORT_MESSAGE = "Duration must be at least {minimum} minute(s)"
PRICE_NOT_NUMBER_MESSAGE = "Price must be a number"
PRICE_NEGATIVE_MESSAGE = "Price cannot be negative"

# Display templates
DURATION_HOURS_MINUTES = "{hours}h {minutes}m"
DURATION_HOURS = "{hours}h"
DURATION_MINUTES = "{minutes}m"
PRICE_WITH_SYMBOL = "{symbol}{amount}"
PRICE_WITH_CODE = "{amount} {code}"

# Navigation guard
UNSAVED_CHANGES_WARNING = "You have unsaved changes. Leave without saving?"
