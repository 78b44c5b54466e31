# interview_booking/services/reservation_service.py

import math
import threading
from datetime import datetime, timezone
from functools import lru_cache
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from email_validator import EmailNotValidError, validate_email

from interview_booking.base.config import settings
from interview_booking.base.exceptions import (
    BookingError,
    CandidateNotFound,
    DuplicateEmail,
    InvalidEmail,
    SlotNotFound,
    SlotsUnavailable,
    StorageUnavailable,
    ValidationFailed,
)
from interview_booking.base.logging_config import booking_logger as logger
from interview_booking.base.metrics import available_slots_gauge, booking_submissions_total, slots_booked_total
from interview_booking.base.models import (
    BookedSlotsSummary,
    Candidate,
    CandidateProfile,
    ReportSummary,
    SubmissionResult,
    TimeSlot,
)
from interview_booking.services.candidate_store import CandidateStore
from interview_booking.services.id_allocator import IdAllocator
from interview_booking.services.slot_store import SlotStore
from interview_booking.storage import StorageBackend, build_storage
from interview_booking.utils.slot_ids import generate_slot_ids, is_valid_slot_id, parse_clock

REQUIRED_FIELDS = (("full_name", "fullName"), ("email", "email"), ("timezone", "timezone"))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReservationService:
    """
    Single entry point for booking interview slots.

    One lock covers the slot store, the candidate store and the storage write
    for a booking, so concurrent submissions over the same slots behave as if
    they ran one after another, and readers never see a candidate without its
    slots (or the reverse).
    """

    def __init__(self, storage: StorageBackend, now: Callable[[], datetime] = _utcnow):
        self.storage = storage
        self._now = now
        self._lock = threading.Lock()

        self.slots = SlotStore(storage.load_slots())
        self.candidates = CandidateStore(storage.load_candidates())
        self.ids = IdAllocator(candidate.id for candidate in self.candidates.list_all())
        available_slots_gauge.set(len(self.slots.list_available()))

        logger.info(
            f"[Reservation] Loaded {len(self.slots)} slots and {len(self.candidates)} candidates "
            f"from {storage.name} storage"
        )

    # === Setup ===

    def seed_slots(self, slot_ids: Iterable[str]) -> int:
        """Create free slots for ``slot_ids`` if the store is still empty."""
        with self._lock:
            if len(self.slots):
                return 0
            new_slots = [TimeSlot.from_id(slot_id) for slot_id in slot_ids]
            self.storage.save_slots(new_slots)
            self.slots.seed(new_slots)
            available_slots_gauge.set(len(new_slots))

        logger.info(f"[Seed] Seeded {len(new_slots)} time slots")
        return len(new_slots)

    # === Submission ===

    def submit(self, profile: CandidateProfile, requested_slot_ids: Sequence[str]) -> SubmissionResult:
        try:
            result = self._submit(profile, requested_slot_ids)
        except BookingError as e:
            booking_submissions_total.labels(outcome=e.kind).inc()
            raise

        booking_submissions_total.labels(outcome="success").inc()
        slots_booked_total.inc(result.booked_count)
        return result

    def _submit(self, profile: CandidateProfile, requested_slot_ids: Sequence[str]) -> SubmissionResult:
        requested = list(requested_slot_ids or [])
        fields = self._validate_profile(profile, requested)
        email = fields["email"]

        if self.candidates.find_by_email(email) is not None:
            logger.info(f"[Submit] Rejected duplicate email {email}")
            raise DuplicateEmail(email)

        with self._lock:
            # re-checked here: another submit may have committed since the checks above
            if self.candidates.find_by_email(email) is not None:
                raise DuplicateEmail(email)
            self.slots.check_free(requested)

            candidate_id = self.ids.next_id()
            now = self._now()
            candidate = Candidate(id=candidate_id, selected_slots=requested, created_at=now, **fields)
            taken = self.slots.taken_versions(requested, candidate_id, now)

            try:
                self.storage.commit_booking(candidate, taken)
            except StorageUnavailable:
                logger.exception(f"[Submit] Storage failed while booking for {candidate_id}")
                self._resync()
                raise
            except (DuplicateEmail, SlotsUnavailable):
                logger.warning(f"[Submit] Storage is ahead of memory, reloading before rejecting {candidate_id}")
                self._resync()
                raise

            self.candidates.insert(candidate)
            self.slots.mark_taken(requested, candidate_id, now)
            available_slots_gauge.set(len(self.slots.list_available()))

        logger.info(f"[Submit] Candidate {candidate_id} booked {len(requested)} slot(s): {requested}")
        return SubmissionResult(candidate_id=candidate_id, booked_count=len(requested))

    def _resync(self) -> None:
        """
        Reload both stores from storage. Called with the lock held after a
        write whose outcome on disk may differ from memory.
        """
        try:
            slots = SlotStore(self.storage.load_slots())
            candidates = CandidateStore(self.storage.load_candidates())
        except (BookingError, ValueError):
            logger.exception("[Reservation] Reload from storage failed, keeping in-memory state")
            return

        self.slots = slots
        self.candidates = candidates
        self.ids = IdAllocator(candidate.id for candidate in candidates.list_all())
        available_slots_gauge.set(len(slots.list_available()))
        logger.info(f"[Reservation] Reloaded {len(slots)} slots and {len(candidates)} candidates")

    @staticmethod
    def _validate_profile(profile: CandidateProfile, requested: List[str]) -> Dict[str, str]:
        for attr, wire_name in REQUIRED_FIELDS:
            value = getattr(profile, attr)
            if value is None or not value.strip():
                raise ValidationFailed(f"Missing required field: {wire_name}")

        if not requested:
            raise ValidationFailed("Please select at least one time slot")
        if len(set(requested)) != len(requested):
            raise ValidationFailed("Each time slot can only be selected once")
        for slot_id in requested:
            if not is_valid_slot_id(slot_id):
                raise ValidationFailed(f"Invalid time slot id: {slot_id}")

        email = profile.email.strip()
        try:
            validate_email(email, check_deliverability=False)
        except EmailNotValidError as e:
            raise InvalidEmail() from e

        return {
            "full_name": profile.full_name.strip(),
            "email": email,
            "phone": (profile.phone or "").strip(),
            "timezone": profile.timezone.strip(),
            "experience": profile.experience or "",
            "motivation": profile.motivation or "",
            "additional_notes": profile.additional_notes or "",
        }

    # === Queries ===

    def list_available_slots(self) -> List[TimeSlot]:
        with self._lock:
            return self.slots.list_available()

    def list_all_slots(self) -> List[TimeSlot]:
        with self._lock:
            return self.slots.list_all()

    def get_slot(self, slot_id: str) -> TimeSlot:
        if not is_valid_slot_id(slot_id):
            raise ValidationFailed(f"Invalid time slot id: {slot_id}")
        with self._lock:
            slot = self.slots.get(slot_id)
        if slot is None:
            raise SlotNotFound(slot_id)
        return slot

    def list_all_candidates(self) -> List[Candidate]:
        with self._lock:
            return self.candidates.list_all()

    def get_candidate_by_id(self, candidate_id: str) -> Candidate:
        with self._lock:
            candidate = self.candidates.find_by_id(candidate_id)
        if candidate is None:
            raise CandidateNotFound(candidate_id)
        return candidate

    def booked_slot_summary(self) -> BookedSlotsSummary:
        with self._lock:
            candidates = self.candidates.list_all()
        booked = list(dict.fromkeys(slot_id for c in candidates for slot_id in c.selected_slots))
        return BookedSlotsSummary(booked_slots=booked, total_booked=len(booked))

    def report_summary(self) -> ReportSummary:
        with self._lock:
            candidates = self.candidates.list_all()
            slots = self.slots.list_all()

        booked = sum(len(c.selected_slots) for c in candidates)
        available = sum(1 for slot in slots if not slot.taken)
        rate = math.floor(booked * 100 / len(slots) + 0.5) if slots else 0
        return ReportSummary(
            total_candidates=len(candidates),
            total_slots_booked=booked,
            available_slots=available,
            total_slots=len(slots),
            booking_rate=rate,
        )


def build_reservation_service(storage: Optional[StorageBackend] = None) -> ReservationService:
    service = ReservationService(storage or build_storage(settings))
    if settings.SEED_SLOTS_ON_STARTUP:
        service.seed_slots(generate_slot_ids(
            settings.SEED_START_DATE,
            settings.SEED_END_DATE,
            parse_clock(settings.SEED_DAY_START),
            parse_clock(settings.SEED_DAY_END),
            interval_minutes=settings.SEED_INTERVAL_MINUTES,
            business_days_only=settings.SEED_BUSINESS_DAYS_ONLY,
        ))
    return service


@lru_cache()
def get_reservation_service() -> ReservationService:
    return build_reservation_service()
