"""Error taxonomy for the handoff flow."""


class HandoffError(Exception):
    """Base error carrying a client-facing category and HTTP status."""

    category = "internal"
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class InputError(HandoffError):
    """The request is missing a required field or carries an invalid one."""

    category = "input"
    status_code = 400
    default_message = "Invalid request"


class SessionNotFoundError(HandoffError):
    """The session id is unknown."""

    category = "not_found"
    status_code = 404
    default_message = "Session not found/expired"


class SessionExpiredError(HandoffError):
    """The session existed but its TTL has elapsed."""

    category = "expired"
    status_code = 410
    default_message = "Session expired"


class ExtractionFailureError(HandoffError):
    """No usable card number could be read from the image."""

    category = "extraction_failed"
    status_code = 422
    default_message = (
        "Card number not detected. Please capture again with better lighting."
    )


class UpstreamFailureError(HandoffError):
    """The text recognizer failed."""

    category = "upstream_failed"
    status_code = 502
    default_message = "Text recognition failed. Please try again."


class UpstreamTimeoutError(UpstreamFailureError):
    """The text recognizer did not answer in time."""

    status_code = 504
    default_message = "Text recognition timed out. Please try again."


class BaseUrlUnavailableError(HandoffError):
    """No public base URL could be resolved for the hand-off links."""

    category = "misconfigured"
    status_code = 500
    default_message = (
        "PUBLIC_BASE_URL must be configured for secure hosted deployment."
    )
