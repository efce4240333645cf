"""
API error values and their classification.

An ApiError is a value carried inside a fetch result, never raised. The
dispatcher classifies it to decide whether the failure is local to one
resource field or global to the session.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    NETWORK_OR_SERVER = "network_or_server"
    AUTH_REQUIRED = "auth_required"
    FORBIDDEN = "forbidden"
    # Not a user-visible error; labels discarded responses in logs and metrics.
    STALE_RESPONSE = "stale_response"


@dataclass(frozen=True)
class ApiError:
    """
    Failed API call.

    Fields:
        status: HTTP status (0 for transport failures)
        code: Stable machine-readable error code (e.g., "NOT_FOUND")
        message: Human-readable message
    """
    status: int
    code: str
    message: str = ""

    @staticmethod
    def network(message: str) -> "ApiError":
        return ApiError(status=0, code="NETWORK_ERROR", message=message)


def classify(error: ApiError) -> ErrorKind:
    if error.status == 401:
        return ErrorKind.AUTH_REQUIRED
    if error.status == 403:
        return ErrorKind.FORBIDDEN
    return ErrorKind.NETWORK_OR_SERVER
