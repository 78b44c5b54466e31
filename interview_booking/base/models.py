from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from interview_booking.utils.slot_ids import describe_slot


class CamelModel(BaseModel):
    """Snake_case attributes in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# === 🗓 Time Slots ===

class TimeSlot(CamelModel):
    id: str = Field(..., description="Canonical slot id, YYYY-MM-DD-HH:mm")
    date: str = Field(..., description="Display date, YYYY-MM-DD")
    time: str = Field(..., description="Display time, HH:mm")
    day: str = Field(..., description="Weekday name")
    taken: bool = False
    taken_by: Optional[str] = Field(None, description="Id of the candidate holding the slot")
    taken_at: Optional[datetime] = Field(None, description="When the slot was booked")

    @model_validator(mode="after")
    def check_taken_fields(self):
        if self.taken and (self.taken_by is None or self.taken_at is None):
            raise ValueError("A taken slot needs both takenBy and takenAt")
        if not self.taken and (self.taken_by is not None or self.taken_at is not None):
            raise ValueError("A free slot cannot carry takenBy or takenAt")
        return self

    @classmethod
    def from_id(cls, slot_id: str) -> "TimeSlot":
        """Build a free slot with display fields derived from its id."""
        slot_date, slot_time, day = describe_slot(slot_id)
        return cls(id=slot_id, date=slot_date, time=slot_time, day=day)


# === 👤 Candidates ===

def normalize_email(email: str) -> str:
    """Key used for email uniqueness: trimmed and lower-cased."""
    return email.strip().lower()


class CandidateProfile(CamelModel):
    """Profile fields as submitted by the form; validated by the reservation service."""

    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    timezone: Optional[str] = None
    experience: Optional[str] = None
    motivation: Optional[str] = None
    additional_notes: Optional[str] = None


class CandidateSubmission(CandidateProfile):
    selected_slots: List[str] = Field(default_factory=list, description="Requested slot ids, in order")

    def profile(self) -> CandidateProfile:
        return CandidateProfile(**self.model_dump(exclude={"selected_slots"}))


class Candidate(CamelModel):
    id: str
    full_name: str
    email: str
    phone: str = ""
    timezone: str
    experience: str = ""
    motivation: str = ""
    additional_notes: str = ""
    selected_slots: List[str]
    created_at: datetime


# === 📤 Responses ===

class SubmissionResult(CamelModel):
    message: str = "Candidate created successfully"
    candidate_id: str
    booked_count: int = Field(..., alias="bookedSlots")


class AvailableSlotsResponse(CamelModel):
    available_slots: List[TimeSlot]
    total_available: int
    total_slots: int


class AllSlotsResponse(CamelModel):
    time_slots: List[TimeSlot]


class BookedSlotsSummary(CamelModel):
    booked_slots: List[str]
    total_booked: int


class ReportSummary(CamelModel):
    total_candidates: int
    total_slots_booked: int
    available_slots: int
    total_slots: int
    booking_rate: int = Field(..., description="Booked share of all slots, whole percent")


class ErrorResponse(BaseModel):
    error: str
    kind: str
    status_code: int
