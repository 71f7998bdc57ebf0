"""
Error taxonomy shared by the services and the HTTP layer.

Each error carries the status code it is reported with, so the Flask
error handler can render any of them as {"error": message}.
"""


class RatingsError(Exception):
    status_code = 500

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class InvalidInput(RatingsError):
    """Client supplied a malformed rating; not retried."""
    status_code = 400


class NotFound(RatingsError):
    status_code = 404


class Conflict(RatingsError):
    """The session already rated this pair."""
    status_code = 409


class InsufficientCatalog(RatingsError):
    status_code = 400


class StorageError(RatingsError):
    """Database failure. The caller may retry the whole request."""
    status_code = 500


class ExternalIOError(RatingsError):
    """Corpus or sync log could not be read or written. Safe to re-run."""
    status_code = 500
