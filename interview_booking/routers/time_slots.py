from fastapi import APIRouter, Depends

from interview_booking.base.models import AllSlotsResponse, AvailableSlotsResponse, BookedSlotsSummary, TimeSlot
from interview_booking.services.reservation_service import ReservationService, get_reservation_service

router = APIRouter(tags=["Time Slots"])


@router.get("/time-slots", response_model=AvailableSlotsResponse)
def list_available_slots(service: ReservationService = Depends(get_reservation_service)):
    all_slots = service.list_all_slots()
    available = [slot for slot in all_slots if not slot.taken]
    return AvailableSlotsResponse(
        available_slots=available,
        total_available=len(available),
        total_slots=len(all_slots),
    )


@router.get("/time-slots/all", response_model=AllSlotsResponse)
def list_all_slots(service: ReservationService = Depends(get_reservation_service)):
    return AllSlotsResponse(time_slots=service.list_all_slots())


@router.get("/time-slots/{slot_id}", response_model=TimeSlot)
def get_slot(slot_id: str, service: ReservationService = Depends(get_reservation_service)):
    return service.get_slot(slot_id)


@router.get("/slots/availability", response_model=BookedSlotsSummary)
def booked_slots(service: ReservationService = Depends(get_reservation_service)):
    return service.booked_slot_summary()
