"""
Typed error results returned by the upload service.

Service operations return (value, error) pairs; callers branch on
error.code instead of catching exceptions.
"""
import enum
from dataclasses import dataclass


class UploadErrorCode(str, enum.Enum):
    """Failure classes of the upload protocol."""
    PAYLOAD_TOO_LARGE = "payload_too_large"  # Size outside 1..max, checked before anything else
    INVALID_INPUT = "invalid_input"          # Malformed request or failed upload verification
    CONFLICT = "conflict"                    # Slug or object key already committed
    NOT_FOUND = "not_found"                  # Unknown slug
    UNAVAILABLE = "unavailable"              # Registry or storage unreachable
    INTERNAL = "internal"                    # Signer missing or broken


@dataclass(frozen=True)
class UploadError:
    """A failed service call."""
    code: UploadErrorCode
    message: str

    @property
    def retryable(self) -> bool:
        """Only transient unavailability may be retried with the same input."""
        return self.code == UploadErrorCode.UNAVAILABLE

    def to_dict(self) -> dict:
        return {
            "code": self.code.value,
            "message": self.message,
            "retryable": self.retryable,
        }
