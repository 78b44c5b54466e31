from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence

from sqlalchemy import create_engine, delete, func, select, update
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from interview_booking.base.exceptions import DuplicateEmail, SlotsUnavailable, StorageUnavailable
from interview_booking.base.logging_config import storage_logger as logger
from interview_booking.base.models import Candidate, TimeSlot, normalize_email
from interview_booking.storage.base import StorageBackend
from interview_booking.storage.sql_models import Base, CandidateModel, TimeSlotModel


def _to_aware_utc(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _slot_from_row(row: TimeSlotModel) -> TimeSlot:
    return TimeSlot(
        id=row.slot_id,
        date=row.slot_date,
        time=row.slot_time,
        day=row.day,
        taken=row.taken,
        taken_by=row.taken_by,
        taken_at=_to_aware_utc(row.taken_at),
    )


def _candidate_from_row(row: CandidateModel) -> Candidate:
    return Candidate(
        id=row.candidate_id,
        full_name=row.full_name,
        email=row.email,
        phone=row.phone or "",
        timezone=row.timezone,
        experience=row.experience or "",
        motivation=row.motivation or "",
        additional_notes=row.additional_notes or "",
        selected_slots=list(row.selected_slots or []),
        created_at=_to_aware_utc(row.created_at),
    )


class SqlStorage(StorageBackend):
    """
    SQLAlchemy-backed storage. Each booking is one transaction; the slot update
    is conditional on ``taken = false`` so that separate processes sharing the
    database still cannot book the same slot twice.
    """

    name = "sql"

    def __init__(self, database_url: str, echo: bool = False):
        url = make_url(database_url)
        connect_args = {}
        if url.get_backend_name() == "sqlite":
            connect_args["check_same_thread"] = False
            if url.database and url.database != ":memory:":
                Path(url.database).parent.mkdir(parents=True, exist_ok=True)

        try:
            self.engine = create_engine(database_url, echo=echo, connect_args=connect_args)
            self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False)
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            raise StorageUnavailable(f"Cannot open database: {e}") from e

        logger.info(f"[SqlStorage] Connected to {url.render_as_string(hide_password=True)}")

    def load_slots(self) -> List[TimeSlot]:
        try:
            with self.SessionLocal() as session:
                rows = session.scalars(select(TimeSlotModel).order_by(TimeSlotModel.position.asc())).all()
                return [_slot_from_row(row) for row in rows]
        except SQLAlchemyError as e:
            raise StorageUnavailable(f"Failed to load time slots: {e}") from e

    def load_candidates(self) -> List[Candidate]:
        try:
            with self.SessionLocal() as session:
                rows = session.scalars(select(CandidateModel).order_by(CandidateModel.position.asc())).all()
                return [_candidate_from_row(row) for row in rows]
        except SQLAlchemyError as e:
            raise StorageUnavailable(f"Failed to load candidates: {e}") from e

    def save_slots(self, slots: Sequence[TimeSlot]) -> None:
        try:
            with self.SessionLocal.begin() as session:
                session.execute(delete(TimeSlotModel))
                session.add_all([
                    TimeSlotModel(
                        slot_id=slot.id,
                        slot_date=slot.date,
                        slot_time=slot.time,
                        day=slot.day,
                        position=index,
                        taken=slot.taken,
                        taken_by=slot.taken_by,
                        taken_at=slot.taken_at,
                    )
                    for index, slot in enumerate(slots)
                ])
        except SQLAlchemyError as e:
            raise StorageUnavailable(f"Failed to save time slots: {e}") from e
        logger.info(f"[SqlStorage] Saved {len(slots)} time slots")

    def commit_booking(self, candidate: Candidate, taken_slots: Sequence[TimeSlot]) -> None:
        try:
            with self.SessionLocal.begin() as session:
                position = session.scalar(select(func.coalesce(func.max(CandidateModel.position), 0))) + 1
                session.add(CandidateModel(
                    candidate_id=candidate.id,
                    position=position,
                    full_name=candidate.full_name,
                    email=candidate.email,
                    email_key=normalize_email(candidate.email),
                    phone=candidate.phone,
                    timezone=candidate.timezone,
                    experience=candidate.experience,
                    motivation=candidate.motivation,
                    additional_notes=candidate.additional_notes,
                    selected_slots=list(candidate.selected_slots),
                    created_at=candidate.created_at,
                ))

                for slot in taken_slots:
                    result = session.execute(
                        update(TimeSlotModel)
                        .where(TimeSlotModel.slot_id == slot.id, TimeSlotModel.taken.is_(False))
                        .values(taken=True, taken_by=slot.taken_by, taken_at=slot.taken_at)
                    )
                    if result.rowcount != 1:
                        raise SlotsUnavailable([slot.id])
        except IntegrityError as e:
            logger.warning(f"[SqlStorage] Integrity error for candidate {candidate.id}: {e.orig}")
            if "email" in str(e.orig).lower():
                raise DuplicateEmail(candidate.email) from e
            raise StorageUnavailable(f"Failed to commit booking for candidate {candidate.id}: {e}") from e
        except SQLAlchemyError as e:
            raise StorageUnavailable(f"Failed to commit booking for candidate {candidate.id}: {e}") from e

        logger.info(f"[SqlStorage] Committed candidate {candidate.id} with {len(taken_slots)} slot(s)")

    def close(self) -> None:
        self.engine.dispose()
