"""Error taxonomy for event and roster operations.

Client errors (bad input, policy violations) are terminal for the request.
Server errors are transient: the caller may retry them.
"""

CLIENT = "client"
SERVER = "server"


class EventsError(Exception):
    """Base class for all errors surfaced by the events domain."""

    code = "events_error"
    status_code = 400
    source = CLIENT
    retryable = False

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_detail(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "source": self.source,
            "retryable": self.retryable,
        }


class NotFoundError(EventsError):
    """Raised when an event, event date or roster entry does not exist."""

    code = "not_found"
    status_code = 404


class AlreadySignedUpError(EventsError):
    code = "already_signed_up"
    status_code = 409

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(f"User '{user_id}' is already signed up for this date")


class CapacityExceededError(EventsError):
    code = "capacity_exceeded"
    status_code = 409

    def __init__(self, available_spots: int) -> None:
        self.available_spots = available_spots
        super().__init__(f"All {available_spots} spots for this date are taken")


class SignupClosedError(EventsError):
    code = "signup_closed"
    status_code = 409


class GuestsNotAllowedError(EventsError):
    code = "guests_not_allowed"
    status_code = 403


class ForbiddenError(EventsError):
    """Raised when an actor acts on somebody else's behalf or lacks a permission."""

    code = "forbidden"
    status_code = 403


class InvalidInputError(EventsError):
    code = "invalid_input"
    status_code = 400


class ConflictError(EventsError):
    code = "conflict"
    status_code = 409


class VersionConflictError(EventsError):
    """Raised when the stored document changed between read and write."""

    code = "version_conflict"
    status_code = 503
    source = SERVER
    retryable = True


class UpstreamUnavailableError(EventsError):
    """Raised when the store, identity provider or notifier fails or times out."""

    code = "upstream_unavailable"
    status_code = 503
    source = SERVER
    retryable = True
