"""Exceptions raised by the pricing engine.

Field validation problems are reported as ValidationIssue values and never
raised; the exceptions below signal programming errors at the editor seams
and persistence failures reported by gateways.
"""


class PricingEngineError(Exception):
    """Base class for pricing engine errors."""
    pass


class DraftStateError(PricingEngineError):
    """Raised when a draft operation is not allowed in the session's current state."""
    pass


class UnknownServiceError(PricingEngineError):
    """Raised when an editor is asked to change a service it does not hold."""

    def __init__(self, service_id: int):
        super().__init__(f"Service {service_id} is not part of this editor")
        self.service_id = service_id


class PersistenceError(PricingEngineError):
    """Raised by gateways when a save is rejected or cannot be delivered."""
    pass
