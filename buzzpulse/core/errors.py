"""
Error taxonomy shared by the store, the signer and the HTTP handlers.

Every error carries the HTTP status it maps to and a stable ``code`` that is
returned to clients in the ``{"ok": false, "error": ..., "code": ...}``
envelope.
"""


class PulseError(Exception):
    status_code = 500
    code = "Internal"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.code)
        self.message = message or self.code


class InvalidInput(PulseError):
    status_code = 400
    code = "InvalidInput"


class InvalidCell(InvalidInput):
    pass


class InvalidBBox(InvalidInput):
    pass


class InvalidCellType(InvalidInput):
    pass


class Unauthorized(PulseError):
    status_code = 401
    code = "Unauthorized"


class NotPresent(PulseError):
    status_code = 403
    code = "NotPresent"


class NotFound(PulseError):
    status_code = 404
    code = "NotFound"


class StoreConflict(PulseError):
    """Compare-and-set retries on a cell row were exhausted."""
    status_code = 500
    code = "Internal"
