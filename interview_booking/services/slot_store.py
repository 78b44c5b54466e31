# interview_booking/services/slot_store.py

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from interview_booking.base.exceptions import SlotNotFound, SlotsUnavailable
from interview_booking.base.models import TimeSlot

logger = logging.getLogger("slot_store")


class SlotStore:
    """
    Authoritative set of bookable time slots, in seed order.

    The store does no locking of its own; ``ReservationService`` owns the lock
    that guards it together with the candidate store.
    """

    def __init__(self, slots: Iterable[TimeSlot] = ()):
        self._slots: Dict[str, TimeSlot] = {}
        self.seed(slots)

    def seed(self, slots: Iterable[TimeSlot]) -> None:
        for slot in slots:
            if slot.id in self._slots:
                raise ValueError(f"Duplicate slot id: {slot.id}")
            self._slots[slot.id] = slot

    def __len__(self) -> int:
        return len(self._slots)

    def get(self, slot_id: str) -> Optional[TimeSlot]:
        slot = self._slots.get(slot_id)
        return slot.model_copy() if slot else None

    def list_all(self) -> List[TimeSlot]:
        return [slot.model_copy() for slot in self._slots.values()]

    def list_available(self) -> List[TimeSlot]:
        return [slot.model_copy() for slot in self._slots.values() if not slot.taken]

    def check_free(self, slot_ids: Iterable[str]) -> None:
        """Raise unless every id exists and is still free."""
        slot_ids = list(slot_ids)
        for slot_id in slot_ids:
            if slot_id not in self._slots:
                raise SlotNotFound(slot_id)

        taken = [slot_id for slot_id in slot_ids if self._slots[slot_id].taken]
        if taken:
            raise SlotsUnavailable(taken)

    def taken_versions(self, slot_ids: Iterable[str], candidate_id: str, timestamp: datetime) -> List[TimeSlot]:
        """Return the slots as they will look once booked, without changing the store."""
        slot_ids = list(slot_ids)
        self.check_free(slot_ids)
        return [
            self._slots[slot_id].model_copy(update={"taken": True, "taken_by": candidate_id, "taken_at": timestamp})
            for slot_id in slot_ids
        ]

    def mark_taken(self, slot_ids: Iterable[str], candidate_id: str, timestamp: datetime) -> List[TimeSlot]:
        """
        Book every slot in ``slot_ids`` for ``candidate_id``.

        All-or-nothing: if any id is unknown or already taken, nothing changes and
        ``SlotNotFound`` / ``SlotsUnavailable`` names the offending ids.
        """
        slot_ids = list(dict.fromkeys(slot_ids))
        updated = self.taken_versions(slot_ids, candidate_id, timestamp)
        for slot in updated:
            self._slots[slot.id] = slot

        logger.debug(f"[SlotStore] {len(updated)} slot(s) taken by {candidate_id}")
        return [slot.model_copy() for slot in updated]
