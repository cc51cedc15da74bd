"""Error types raised by the link store, the lifecycle service and the processor client."""


class PaymentLinkError(Exception):
    """Base class for payment link failures."""


class ValidationError(PaymentLinkError, ValueError):
    """The caller supplied invalid input (e.g. missing customer email)."""


class NotFoundError(PaymentLinkError, LookupError):
    """No payment link exists for the given identifier."""

    def __init__(self, link_id: str):
        super().__init__(f"Payment link {link_id} not found")
        self.link_id = link_id


class InvalidTransitionError(PaymentLinkError):
    """The requested status change is not allowed from the current status."""

    def __init__(self, link_id: str, current_status: str, target_status: str):
        super().__init__(f"Cannot move {current_status} link {link_id} to {target_status}")
        self.link_id = link_id
        self.current_status = current_status
        self.target_status = target_status


class ConflictError(PaymentLinkError):
    """A payment link with the same identifier already exists."""

    def __init__(self, link_id: str):
        super().__init__(f"Payment link {link_id} already exists")
        self.link_id = link_id


class UpstreamError(Exception):
    """Base class for failures talking to the payment processor."""


class UpstreamAuthError(UpstreamError):
    """The processor refused or failed to issue an access token."""


class UpstreamTimeoutError(UpstreamError):
    """A call to the processor did not finish within the configured timeout."""


class ProcessorError(UpstreamError):
    """The processor rejected a customer profile request."""
