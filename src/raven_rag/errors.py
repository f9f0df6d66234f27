"""
Error taxonomy for raven-rag.

Every error carries the HTTP status it maps to and a message that is safe
to show to callers. Internal detail (upstream responses, stack traces) is
logged where the error is raised and never placed in the message.
"""

from typing import Optional


class RavenError(Exception):
    """Base class for all errors surfaced to callers."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRequest(RavenError):
    """Missing or malformed input. User-correctable."""

    status_code = 400
    default_message = "Invalid request"


class DimensionMismatch(InvalidRequest):
    """A vector's length differs from the store's embedding dimensionality."""

    default_message = "Embedding dimensionality does not match the knowledge base"

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Embedding dimensionality mismatch: expected {expected}, got {actual}"
        )


class Unauthorized(RavenError):
    """No admin credential was presented."""

    status_code = 401
    default_message = "Unauthorized"


class Forbidden(Unauthorized):
    """An admin credential was presented but is not accepted."""

    status_code = 403
    default_message = "Forbidden"


class NotFound(RavenError):
    status_code = 404
    default_message = "Not found"


class UpstreamUnavailable(RavenError):
    """Embedding or completion gateway unreachable, unconfigured, timed out or erroring."""

    status_code = 500
    default_message = "AI service unavailable"


class RateLimited(RavenError):
    """Upstream reported quota or rate exhaustion."""

    status_code = 429
    default_message = "AI service rate limit reached, please retry later"


class StorageFailure(RavenError):
    """The durable knowledge snapshot could not be written."""

    status_code = 500
    default_message = "Knowledge base could not be saved"
