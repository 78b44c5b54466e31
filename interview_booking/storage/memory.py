from typing import Dict, List, Sequence

from interview_booking.base.models import Candidate, TimeSlot
from interview_booking.storage.base import StorageBackend


class MemoryStorage(StorageBackend):
    """Keeps both collections in process memory. Nothing survives a restart."""

    name = "memory"

    def __init__(self):
        self._slots: Dict[str, TimeSlot] = {}
        self._candidates: List[Candidate] = []

    def load_slots(self) -> List[TimeSlot]:
        return [slot.model_copy() for slot in self._slots.values()]

    def load_candidates(self) -> List[Candidate]:
        return [candidate.model_copy(deep=True) for candidate in self._candidates]

    def save_slots(self, slots: Sequence[TimeSlot]) -> None:
        self._slots = {slot.id: slot.model_copy() for slot in slots}

    def commit_booking(self, candidate: Candidate, taken_slots: Sequence[TimeSlot]) -> None:
        for slot in taken_slots:
            self._slots[slot.id] = slot.model_copy()
        self._candidates.append(candidate.model_copy(deep=True))
