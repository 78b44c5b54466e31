import contextlib
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

from pydantic import ValidationError

from interview_booking.base.exceptions import DuplicateEmail, SlotsUnavailable, StorageUnavailable
from interview_booking.base.logging_config import storage_logger as logger
from interview_booking.base.models import Candidate, TimeSlot, normalize_email
from interview_booking.storage.base import StorageBackend

# === File Layout ===
CANDIDATES_FILE = "candidates.json"
TIME_SLOTS_FILE = "time-slots.json"
JOURNAL_FILE = ".booking-journal.json"


class JsonFileStorage(StorageBackend):
    """
    Stores candidates and slots as two JSON documents in ``data_dir``.

    ``candidates.json`` holds a list of candidates and ``time-slots.json`` holds
    ``{"timeSlots": [...]}``. A booking touches both files, so it is written
    through a journal: the journal with both new documents lands first, then
    each file is replaced atomically, then the journal is removed. A journal
    left behind by a crash is replayed on open and before each load or commit.
    """

    name = "json"

    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir)
        self.candidates_path = self.data_dir / CANDIDATES_FILE
        self.slots_path = self.data_dir / TIME_SLOTS_FILE
        self.journal_path = self.data_dir / JOURNAL_FILE

        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailable(f"Cannot create data directory {self.data_dir}: {e}") from e

        self.recover()

    # === Low-level IO ===

    def _read_json(self, path: Path, default: Any) -> Any:
        if not path.exists():
            return default
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"[JsonStorage] Failed to read {path}: {e}")
            raise StorageUnavailable(f"Failed to read {path.name}: {e}") from e

    def _write_atomic(self, path: Path, payload: Any) -> None:
        fd, tmp_path = tempfile.mkstemp(dir=self.data_dir, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp_path)
            raise

    def _apply(self, document: Dict[str, Any]) -> None:
        """
        Write both collections through the journal.

        The booking is committed once the journal is on disk. A failure after
        that point leaves the journal behind for ``recover`` to roll forward.
        """
        try:
            self._write_atomic(self.journal_path, document)
        except OSError as e:
            raise StorageUnavailable(f"Failed to write booking journal: {e}") from e

        try:
            self._roll_forward(document)
        except OSError as e:
            logger.warning(f"[JsonStorage] Booking journaled but not applied yet, will roll forward later: {e}")

    def _roll_forward(self, document: Dict[str, Any]) -> None:
        self._write_atomic(self.slots_path, {"timeSlots": document["timeSlots"]})
        self._write_atomic(self.candidates_path, document["candidates"])
        self.journal_path.unlink()

    def recover(self) -> None:
        """Roll a leftover journal forward into both files."""
        if not self.journal_path.exists():
            return

        document = self._read_json(self.journal_path, None)
        if not isinstance(document, dict) or "candidates" not in document or "timeSlots" not in document:
            raise StorageUnavailable(f"Booking journal {self.journal_path} is malformed")

        logger.warning("[JsonStorage] Replaying unfinished booking journal")
        try:
            self._roll_forward(document)
        except OSError as e:
            raise StorageUnavailable(f"Failed to replay booking journal: {e}") from e

    # === Raw documents ===

    def _raw_slots(self) -> List[Dict[str, Any]]:
        document = self._read_json(self.slots_path, {"timeSlots": []})
        if not isinstance(document, dict) or not isinstance(document.get("timeSlots", []), list):
            raise StorageUnavailable(f"{TIME_SLOTS_FILE} is malformed")
        return document.get("timeSlots", [])

    def _raw_candidates(self) -> List[Dict[str, Any]]:
        document = self._read_json(self.candidates_path, [])
        if not isinstance(document, list):
            raise StorageUnavailable(f"{CANDIDATES_FILE} is malformed")
        return document

    # === StorageBackend ===

    def load_slots(self) -> List[TimeSlot]:
        self.recover()
        try:
            return [TimeSlot.model_validate(item) for item in self._raw_slots()]
        except ValidationError as e:
            raise StorageUnavailable(f"{TIME_SLOTS_FILE} holds an invalid slot: {e}") from e

    def load_candidates(self) -> List[Candidate]:
        self.recover()
        try:
            return [Candidate.model_validate(item) for item in self._raw_candidates()]
        except ValidationError as e:
            raise StorageUnavailable(f"{CANDIDATES_FILE} holds an invalid candidate: {e}") from e

    def save_slots(self, slots: Sequence[TimeSlot]) -> None:
        payload = {"timeSlots": [slot.model_dump(by_alias=True, mode="json") for slot in slots]}
        try:
            self._write_atomic(self.slots_path, payload)
        except OSError as e:
            raise StorageUnavailable(f"Failed to write {TIME_SLOTS_FILE}: {e}") from e
        logger.info(f"[JsonStorage] Saved {len(slots)} time slots")

    def commit_booking(self, candidate: Candidate, taken_slots: Sequence[TimeSlot]) -> None:
        self.recover()

        raw_slots = self._raw_slots()
        positions = {item.get("id"): index for index, item in enumerate(raw_slots)}

        for slot in taken_slots:
            if slot.id not in positions:
                raise StorageUnavailable(f"Slot {slot.id} is missing from {TIME_SLOTS_FILE}")
            if raw_slots[positions[slot.id]].get("taken"):
                raise SlotsUnavailable([slot.id])
            raw_slots[positions[slot.id]] = slot.model_dump(by_alias=True, mode="json")

        raw_candidates = self._raw_candidates()
        email_key = normalize_email(candidate.email)
        if any(normalize_email(item.get("email") or "") == email_key for item in raw_candidates):
            raise DuplicateEmail(candidate.email)
        raw_candidates.append(candidate.model_dump(by_alias=True, mode="json"))

        self._apply({"candidates": raw_candidates, "timeSlots": raw_slots})
        logger.info(f"[JsonStorage] Committed candidate {candidate.id} with {len(taken_slots)} slot(s)")
