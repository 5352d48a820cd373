class BackendUpstreamError(RuntimeError):
    """Raised when the back-office API fails (timeouts, network errors, error statuses)."""
    pass


class AvailabilitySourceError(BackendUpstreamError):
    """Raised when the availability source cannot answer."""
    pass


class PriceQuoteError(BackendUpstreamError):
    """Raised when the pricing-rules service cannot answer."""
    pass


class ContractGatewayError(BackendUpstreamError):
    """Raised when the contract-creation endpoint rejects or cannot be reached."""
    pass


class ReferenceDataError(BackendUpstreamError):
    """Raised when packages, add-ons, contract types or dresses cannot be loaded."""
    pass


class InvalidTransitionError(RuntimeError):
    """Raised when a draft operation is called in a state that does not allow it."""
    pass
