"""
Pipeline Exceptions

Every failure the booking-to-settlement pipeline can surface to a caller.

- ValidationError: rejected locally, before any network call
- ResolutionError / GuestResolutionError: guest lookup and create both failed
- MissingRatePlanError: room type cannot be priced, reservation never attempted
- ReservationCreateError: the reservation POST failed
- PaymentInitiationError: the payment intent could not be created
- PollTransientError: one status poll failed; absorbed by the polling loop
- TimedOutError / CancelledByUser / PaymentFailedError: terminal settlement
  outcomes for callers that prefer exceptions over outcome events
"""


class BookingPipelineError(Exception):
    """Base class for all pipeline errors."""


class ValidationError(BookingPipelineError, ValueError):
    """Input rejected before reaching the network layer."""


class SubmissionInProgressError(ValidationError):
    """A second submit arrived while the first one is still running."""


class ResolutionError(BookingPipelineError):
    """Identity could not be resolved."""


class GuestResolutionError(ResolutionError):
    """Guest lookup and guest creation both failed."""


class MissingRatePlanError(BookingPipelineError):
    """No rate plan is available for the requested room type."""


class ReservationCreateError(BookingPipelineError):
    """The reservation API rejected or failed the create request."""


class ReservationUpdateError(BookingPipelineError):
    """The reservation API failed to record a payment status change."""


class PaymentInitiationError(BookingPipelineError):
    """Payment intent creation failed; no polling was started."""


class PollTransientError(BookingPipelineError):
    """A single status poll failed. Never terminal."""


class SettlementAlreadyActiveError(BookingPipelineError):
    """Another polling loop already owns this order code."""


class SettlementError(BookingPipelineError):
    """Base class for terminal, non-successful settlement outcomes."""


class TimedOutError(SettlementError):
    """The polling ceiling elapsed without a terminal answer."""


class CancelledByUser(SettlementError):
    """The user closed the payment view."""


class PaymentFailedError(SettlementError):
    """The provider reported an explicit failed/cancelled status."""
