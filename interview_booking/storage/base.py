from abc import ABC, abstractmethod
from typing import List, Sequence

from interview_booking.base.models import Candidate, TimeSlot


class StorageBackend(ABC):
    """
    Persistence collaborator for the two booking collections.

    ``commit_booking`` is the only write on the hot path: it must store the new
    candidate and the slots it took as one atomic, durable unit before it
    returns. Any persistence failure surfaces as ``StorageUnavailable``.
    """

    name = "abstract"

    @abstractmethod
    def load_slots(self) -> List[TimeSlot]:
        ...

    @abstractmethod
    def load_candidates(self) -> List[Candidate]:
        ...

    @abstractmethod
    def save_slots(self, slots: Sequence[TimeSlot]) -> None:
        """Replace the stored slot collection. Used for seeding."""

    @abstractmethod
    def commit_booking(self, candidate: Candidate, taken_slots: Sequence[TimeSlot]) -> None:
        """Insert ``candidate`` and persist the updated ``taken_slots`` atomically."""

    def close(self) -> None:
        pass
