"""Base exceptions shared by the onboarding services.

Services raise subclasses of these; routers translate the category into an
HTTP status (not found → 404, state conflict → 409, invalid request → 400).
Validators never raise: they return result dicts so callers can show
partial feedback.
"""


class OnboardingServiceError(Exception):
    """Base exception for onboarding service errors."""

    pass


class NotFoundError(OnboardingServiceError):
    """A required record (location, account, onboarding, approval) is missing."""

    pass


class StateConflictError(OnboardingServiceError):
    """The record's current state does not allow the operation."""

    pass


class InvalidRequestError(OnboardingServiceError):
    """The request itself is malformed (bad range, nothing to copy, ...)."""

    pass


class LocationNotFoundError(NotFoundError):
    pass
