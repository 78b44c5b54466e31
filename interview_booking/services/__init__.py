"""
Interview Booking Services Module

The slot store and candidate store hold the booking state; the reservation
service is the only component allowed to change both of them together.
"""

# === State Stores ===
from .slot_store import SlotStore
from .candidate_store import CandidateStore

# === Reservation Flow ===
from .id_allocator import IdAllocator
from .reservation_service import ReservationService, build_reservation_service, get_reservation_service

# === Exported Interface ===
__all__ = [
    "SlotStore",
    "CandidateStore",
    "IdAllocator",
    "ReservationService",
    "build_reservation_service",
    "get_reservation_service",
]
