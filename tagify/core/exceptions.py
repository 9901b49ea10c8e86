# ============================================================================
# FILE: tagify/core/exceptions.py
# ============================================================================
from typing import Optional


class TagifyError(Exception):
    """Base class for errors raised by the tagging core"""

    status_code = 500
    public_message = "Internal server error"

    def __init__(self, message: str, operation: Optional[str] = None, resource_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.resource_id = resource_id

    def __str__(self) -> str:
        context = []
        if self.operation:
            context.append(f"operation={self.operation}")
        if self.resource_id:
            context.append(f"id={self.resource_id}")
        if context:
            return f"{self.message} ({', '.join(context)})"
        return self.message


class ValidationError(TagifyError):
    """Malformed input: limit out of range, empty or duplicate tags"""

    status_code = 422

    @property
    def public_message(self) -> str:
        return self.message


class NotFound(TagifyError):
    """Playlist does not exist locally or on Spotify"""

    status_code = 404
    public_message = "Playlist not found"


class Forbidden(TagifyError):
    """Caller is not the owner of the playlist"""

    status_code = 403
    public_message = "Not allowed to modify this playlist"


class Unauthenticated(TagifyError):
    """No valid bearer credential is available"""

    status_code = 401
    public_message = "Not authenticated"


class UpstreamError(TagifyError):
    """Spotify call failed (network, non-2xx or malformed response)"""

    status_code = 502
    public_message = "Upstream service error"
