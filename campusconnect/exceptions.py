# campusconnect/exceptions.py
"""
Error taxonomy raised by the booking core.

Every error carries the HTTP status the API layer answers with; the
handler registered in main.py turns them into ``{"detail": ...}`` bodies.
"""


class CampusConnectError(Exception):
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(CampusConnectError):
    """Malformed or missing input."""
    status_code = 400


class NotFoundError(CampusConnectError):
    """Referenced room or booking request is absent (or the room is inactive)."""
    status_code = 404


class ConflictError(CampusConnectError):
    """Requested interval overlaps an admitted booking of the same room and date."""
    status_code = 409

    def __init__(self, detail: str = "room already booked for this time slot"):
        super().__init__(detail)


class PermissionDeniedError(CampusConnectError):
    """Role or ownership check failed."""
    status_code = 403


class InvalidStateError(CampusConnectError):
    """Operation not allowed in the booking's current lifecycle state."""
    status_code = 409
