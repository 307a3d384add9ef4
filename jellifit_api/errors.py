"""
Error taxonomy for the API

Orchestrators raise these; a single exception handler in main.py maps them
to HTTP responses. Adaptor internals never reach the response body.
"""

from typing import Optional


class JelliFitError(Exception):
    """Base class for errors surfaced to API callers"""

    status_code = 500
    detail = "Internal server error"

    def __init__(self, detail: Optional[str] = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class NotFoundError(JelliFitError):
    status_code = 404
    detail = "Not found"


class NotAuthorizedError(JelliFitError):
    status_code = 401
    detail = "Not authorized"


class UnsupportedMediaError(JelliFitError):
    status_code = 415
    detail = "Unsupported input format"


class IdentifierExhaustedError(JelliFitError):
    """Raised when no unused event identifier was found within the attempt limit"""

    status_code = 503
    detail = "Could not allocate an event identifier, try again"


class AdaptorError(JelliFitError):
    """Opaque failure from the storage backend"""

    status_code = 500
    detail = "Storage backend failure"


class EventIdConflictError(AdaptorError):
    """Raised by an adaptor when create_event is given an identifier that already exists"""

    status_code = 409
    detail = "Event identifier already exists"


class WordListError(RuntimeError):
    """Bundled name generator word lists are missing or malformed"""

    pass
