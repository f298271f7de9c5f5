"""Error kinds raised by the catalog services.

Every error carries the HTTP status it maps to; the handlers in
``handwerk.main`` turn them into ``{"error": message}`` bodies.
"""


class HandwerkError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(HandwerkError):
    """Bad input shape, size or type. User-correctable."""
    status_code = 400


class CapacityError(HandwerkError):
    """Favorite or featured cap exceeded."""
    status_code = 400


class Unauthorized(HandwerkError):
    status_code = 401


class NotFound(HandwerkError):
    status_code = 404


class UpstreamError(HandwerkError):
    """Storage or database failure; message comes from the underlying client."""
    status_code = 500


class DecodeError(HandwerkError):
    status_code = 400


class EncodeError(HandwerkError):
    status_code = 500
