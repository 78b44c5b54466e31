import os
import tempfile
from datetime import datetime, timezone

import pytest

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="interview_booking_logs_"))
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("SEED_SLOTS_ON_STARTUP", "false")

from interview_booking.base.models import CandidateProfile  # noqa: E402
from interview_booking.services.reservation_service import ReservationService  # noqa: E402
from interview_booking.storage import MemoryStorage  # noqa: E402

SLOT_A = "2025-08-12-16:00"
SLOT_B = "2025-08-12-16:30"
SLOT_C = "2025-08-13-17:00"
FIXED_NOW = datetime(2025, 8, 1, 9, 30, tzinfo=timezone.utc)


def make_profile(**overrides) -> CandidateProfile:
    fields = {
        "full_name": "Ada Lovelace",
        "email": "ada@analytical.org",
        "phone": "+44 20 7946 0000",
        "timezone": "Europe/London",
        "experience": "Wrote the first published algorithm.",
    }
    fields.update(overrides)
    return CandidateProfile(**fields)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def service(storage):
    svc = ReservationService(storage, now=lambda: FIXED_NOW)
    svc.seed_slots([SLOT_A, SLOT_B, SLOT_C])
    return svc
