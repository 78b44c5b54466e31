import json
import os
from datetime import datetime, timezone
from pathlib import Path

import pytest

from conftest import SLOT_A, SLOT_B, make_profile
from interview_booking.base.exceptions import DuplicateEmail, SlotsUnavailable, StorageUnavailable
from interview_booking.base.models import Candidate, TimeSlot
from interview_booking.services.reservation_service import ReservationService
from interview_booking.storage import JsonFileStorage
from interview_booking.storage.json_files import CANDIDATES_FILE, JOURNAL_FILE, TIME_SLOTS_FILE

NOW = datetime(2025, 8, 1, 12, 0, tzinfo=timezone.utc)


def booked(slot_id, candidate_id):
    return TimeSlot.from_id(slot_id).model_copy(update={"taken": True, "taken_by": candidate_id, "taken_at": NOW})


def make_candidate(candidate_id, slot_ids):
    return Candidate(
        id=candidate_id,
        full_name="Alan Turing",
        email=f"alan{candidate_id}@bletchley.org",
        timezone="Europe/London",
        selected_slots=slot_ids,
        created_at=NOW,
    )


def test_missing_files_load_as_empty(tmp_path):
    storage = JsonFileStorage(tmp_path / "data")
    assert storage.load_slots() == []
    assert storage.load_candidates() == []


def test_files_use_original_document_layout(tmp_path):
    storage = JsonFileStorage(tmp_path)
    storage.save_slots([TimeSlot.from_id(SLOT_A), TimeSlot.from_id(SLOT_B)])
    storage.commit_booking(make_candidate("100", [SLOT_A]), [booked(SLOT_A, "100")])

    slots_doc = json.loads((tmp_path / TIME_SLOTS_FILE).read_text(encoding="utf-8"))
    assert [s["id"] for s in slots_doc["timeSlots"]] == [SLOT_A, SLOT_B]
    assert slots_doc["timeSlots"][0]["takenBy"] == "100"
    assert slots_doc["timeSlots"][1]["takenBy"] is None
    assert slots_doc["timeSlots"][1]["takenAt"] is None

    candidates_doc = json.loads((tmp_path / CANDIDATES_FILE).read_text(encoding="utf-8"))
    assert candidates_doc[0]["id"] == "100"
    assert candidates_doc[0]["fullName"] == "Alan Turing"
    assert candidates_doc[0]["selectedSlots"] == [SLOT_A]
    assert not (tmp_path / JOURNAL_FILE).exists()


def test_booking_survives_reopen(tmp_path):
    storage = JsonFileStorage(tmp_path)
    storage.save_slots([TimeSlot.from_id(SLOT_A)])
    storage.commit_booking(make_candidate("100", [SLOT_A]), [booked(SLOT_A, "100")])

    reopened = JsonFileStorage(tmp_path)
    [slot] = reopened.load_slots()
    assert slot.taken_by == "100" and slot.taken_at == NOW
    assert [c.id for c in reopened.load_candidates()] == ["100"]


def test_leftover_journal_is_replayed(tmp_path):
    storage = JsonFileStorage(tmp_path)
    storage.save_slots([TimeSlot.from_id(SLOT_A)])

    journal = {
        "candidates": [make_candidate("200", [SLOT_A]).model_dump(by_alias=True, mode="json")],
        "timeSlots": [booked(SLOT_A, "200").model_dump(by_alias=True, mode="json")],
    }
    (tmp_path / JOURNAL_FILE).write_text(json.dumps(journal), encoding="utf-8")

    recovered = JsonFileStorage(tmp_path)
    assert [c.id for c in recovered.load_candidates()] == ["200"]
    assert recovered.load_slots()[0].taken_by == "200"
    assert not (tmp_path / JOURNAL_FILE).exists()


def test_malformed_journal_is_reported(tmp_path):
    (tmp_path / JOURNAL_FILE).write_text('{"candidates": []}', encoding="utf-8")
    with pytest.raises(StorageUnavailable):
        JsonFileStorage(tmp_path)


def test_corrupt_file_raises_instead_of_loading_empty(tmp_path):
    (tmp_path / CANDIDATES_FILE).write_text("[{not json", encoding="utf-8")
    storage = JsonFileStorage(tmp_path)
    with pytest.raises(StorageUnavailable):
        storage.load_candidates()


def test_invalid_slot_record_raises(tmp_path):
    bad = {"timeSlots": [{"id": SLOT_A, "date": "2025-08-12", "time": "16:00", "day": "Tuesday", "taken": True}]}
    (tmp_path / TIME_SLOTS_FILE).write_text(json.dumps(bad), encoding="utf-8")
    with pytest.raises(StorageUnavailable):
        JsonFileStorage(tmp_path).load_slots()


def test_commit_for_unknown_slot_raises(tmp_path):
    storage = JsonFileStorage(tmp_path)
    with pytest.raises(StorageUnavailable):
        storage.commit_booking(make_candidate("300", [SLOT_A]), [booked(SLOT_A, "300")])
    assert storage.load_candidates() == []


def test_reservation_service_restarts_from_json_files(tmp_path):
    service = ReservationService(JsonFileStorage(tmp_path))
    service.seed_slots([SLOT_A, SLOT_B])
    first = service.submit(make_profile(), [SLOT_A])

    restarted = ReservationService(JsonFileStorage(tmp_path))
    assert restarted.get_candidate_by_id(first.candidate_id).selected_slots == [SLOT_A]
    assert [slot.id for slot in restarted.list_available_slots()] == [SLOT_B]

    second = restarted.submit(make_profile(email="second@candidates.org"), [SLOT_B])
    assert int(second.candidate_id) > int(first.candidate_id)


def test_booking_is_kept_when_journal_cleanup_fails(tmp_path, monkeypatch):
    service = ReservationService(JsonFileStorage(tmp_path))
    service.seed_slots([SLOT_A, SLOT_B])
    journal = tmp_path / JOURNAL_FILE

    original_unlink = Path.unlink
    failures = []

    def unlink_failing_once(self, *args, **kwargs):
        if self == journal and not failures:
            failures.append(self)
            raise PermissionError("journal is locked")
        return original_unlink(self, *args, **kwargs)

    monkeypatch.setattr(Path, "unlink", unlink_failing_once)

    first = service.submit(make_profile(), [SLOT_A])
    assert journal.exists()
    assert service.get_candidate_by_id(first.candidate_id).selected_slots == [SLOT_A]

    with pytest.raises(DuplicateEmail):
        service.submit(make_profile(), [SLOT_B])

    second = service.submit(make_profile(email="grace@hopper.io"), [SLOT_B])
    assert not journal.exists()

    restarted = ReservationService(JsonFileStorage(tmp_path))
    assert [c.id for c in restarted.list_all_candidates()] == [first.candidate_id, second.candidate_id]
    assert restarted.list_available_slots() == []


def test_journaled_booking_is_rolled_forward_after_file_replace_fails(tmp_path, monkeypatch):
    service = ReservationService(JsonFileStorage(tmp_path))
    service.seed_slots([SLOT_A, SLOT_B])

    original_replace = os.replace
    failures = []

    def replace_failing_once(src, dst, *args, **kwargs):
        if Path(dst) == tmp_path / CANDIDATES_FILE and not failures:
            failures.append(dst)
            raise OSError("no space left on device")
        return original_replace(src, dst, *args, **kwargs)

    monkeypatch.setattr(os, "replace", replace_failing_once)

    result = service.submit(make_profile(), [SLOT_A])
    assert failures
    assert (tmp_path / JOURNAL_FILE).exists()
    assert [c.id for c in service.list_all_candidates()] == [result.candidate_id]

    restarted = ReservationService(JsonFileStorage(tmp_path))
    assert [c.id for c in restarted.list_all_candidates()] == [result.candidate_id]
    assert [slot.id for slot in restarted.list_available_slots()] == [SLOT_B]
    assert not (tmp_path / JOURNAL_FILE).exists()


def test_failed_journal_write_changes_nothing(tmp_path, monkeypatch):
    service = ReservationService(JsonFileStorage(tmp_path))
    service.seed_slots([SLOT_A])

    original_replace = os.replace
    failures = []

    def replace_failing_once(src, dst, *args, **kwargs):
        if Path(dst) == tmp_path / JOURNAL_FILE and not failures:
            failures.append(dst)
            raise OSError("read-only file system")
        return original_replace(src, dst, *args, **kwargs)

    monkeypatch.setattr(os, "replace", replace_failing_once)

    with pytest.raises(StorageUnavailable):
        service.submit(make_profile(), [SLOT_A])

    assert service.list_all_candidates() == []
    assert [slot.id for slot in service.list_available_slots()] == [SLOT_A]
    assert not (tmp_path / JOURNAL_FILE).exists()
    assert JsonFileStorage(tmp_path).load_candidates() == []

    result = service.submit(make_profile(), [SLOT_A])
    assert [c.id for c in JsonFileStorage(tmp_path).load_candidates()] == [result.candidate_id]


def test_commit_rejects_slot_already_taken_on_disk(tmp_path):
    storage = JsonFileStorage(tmp_path)
    storage.save_slots([TimeSlot.from_id(SLOT_A), TimeSlot.from_id(SLOT_B)])
    storage.commit_booking(make_candidate("100", [SLOT_A]), [booked(SLOT_A, "100")])

    with pytest.raises(SlotsUnavailable):
        storage.commit_booking(make_candidate("101", [SLOT_B, SLOT_A]), [booked(SLOT_B, "101"), booked(SLOT_A, "101")])

    assert [c.id for c in storage.load_candidates()] == ["100"]
    assert [slot.id for slot in storage.load_slots() if not slot.taken] == [SLOT_B]


def test_commit_rejects_email_already_on_disk(tmp_path):
    storage = JsonFileStorage(tmp_path)
    storage.save_slots([TimeSlot.from_id(SLOT_A), TimeSlot.from_id(SLOT_B)])
    storage.commit_booking(make_candidate("100", [SLOT_A]), [booked(SLOT_A, "100")])

    duplicate = make_candidate("101", [SLOT_B]).model_copy(update={"email": "ALAN100@bletchley.org"})
    with pytest.raises(DuplicateEmail):
        storage.commit_booking(duplicate, [booked(SLOT_B, "101")])

    assert [c.id for c in storage.load_candidates()] == ["100"]


def test_stale_service_reloads_when_disk_is_ahead(tmp_path):
    first = ReservationService(JsonFileStorage(tmp_path))
    first.seed_slots([SLOT_A, SLOT_B])
    stale = ReservationService(JsonFileStorage(tmp_path))

    winner = first.submit(make_profile(), [SLOT_A])

    with pytest.raises(SlotsUnavailable):
        stale.submit(make_profile(email="grace@hopper.io"), [SLOT_A])

    assert [c.id for c in stale.list_all_candidates()] == [winner.candidate_id]
    assert [slot.id for slot in stale.list_available_slots()] == [SLOT_B]
