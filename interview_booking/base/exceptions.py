"""Error taxonomy for the booking service.

Every failure the reservation flow can report is a ``BookingError`` subclass
carrying its ``kind`` and the HTTP status the API answers with.
"""

from typing import Any, Dict, Iterable, List


class BookingError(Exception):
    """Base exception for all booking errors."""

    kind = "BookingError"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.message, "kind": self.kind, "status_code": self.status_code}


class ValidationFailed(BookingError):
    """Raised when required profile fields or slot choices are missing."""

    kind = "ValidationFailed"
    status_code = 400


class InvalidEmail(BookingError):
    """Raised when the email address is not syntactically valid."""

    kind = "InvalidEmail"
    status_code = 400

    def __init__(self, message: str = "Invalid email format"):
        super().__init__(message)


class DuplicateEmail(BookingError):
    """Raised when a candidate with the same email already exists."""

    kind = "DuplicateEmail"
    status_code = 409

    def __init__(self, email: str):
        super().__init__("A candidate with this email already exists")
        self.email = email


class SlotNotFound(BookingError):
    """Raised when a requested slot id does not exist."""

    kind = "SlotNotFound"
    status_code = 404

    def __init__(self, slot_id: str):
        super().__init__(f"Time slot not found: {slot_id}")
        self.slot_id = slot_id

    def to_payload(self) -> Dict[str, Any]:
        payload = super().to_payload()
        payload["slotId"] = self.slot_id
        return payload


class SlotsUnavailable(BookingError):
    """Raised when one or more requested slots are already taken."""

    kind = "SlotsUnavailable"
    status_code = 409

    def __init__(self, ids: Iterable[str]):
        super().__init__("Some selected time slots are no longer available")
        self.ids: List[str] = list(ids)

    def to_payload(self) -> Dict[str, Any]:
        payload = super().to_payload()
        payload["unavailableSlots"] = self.ids
        return payload


class CandidateNotFound(BookingError):
    kind = "CandidateNotFound"
    status_code = 404

    def __init__(self, candidate_id: str):
        super().__init__("Candidate not found")
        self.candidate_id = candidate_id


class StorageUnavailable(BookingError):
    """Raised when the persistence collaborator fails.

    The API never shows ``message`` to end users; it is logged instead.
    """

    kind = "StorageUnavailable"
    status_code = 500


class ConfigError(BookingError):
    """Raised when the service cannot be assembled from its settings."""

    kind = "ConfigError"
    status_code = 500
