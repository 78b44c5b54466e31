import logging
from typing import List

from fastapi import APIRouter, Depends, status

from interview_booking.base.models import (
    Candidate,
    CandidateSubmission,
    ErrorResponse,
    ReportSummary,
    SubmissionResult,
)
from interview_booking.services.reservation_service import ReservationService, get_reservation_service

router = APIRouter(prefix="/candidates", tags=["Candidates"])
logger = logging.getLogger("candidates_router")


# === API Endpoints ===

@router.post(
    "",
    response_model=SubmissionResult,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def submit_candidate(
    submission: CandidateSubmission,
    service: ReservationService = Depends(get_reservation_service),
):
    logger.info(f"[Candidates] Submission with {len(submission.selected_slots)} requested slot(s)")
    return service.submit(submission.profile(), submission.selected_slots)


@router.get("", response_model=List[Candidate])
def list_candidates(service: ReservationService = Depends(get_reservation_service)):
    return service.list_all_candidates()


@router.get("/report/summary", response_model=ReportSummary)
def report_summary(service: ReservationService = Depends(get_reservation_service)):
    return service.report_summary()


@router.get("/{candidate_id}", response_model=Candidate, responses={404: {"model": ErrorResponse}})
def get_candidate(candidate_id: str, service: ReservationService = Depends(get_reservation_service)):
    return service.get_candidate_by_id(candidate_id)
