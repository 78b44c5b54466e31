# interview_booking/storage/sql_models.py

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class TimeSlotModel(Base):
    __tablename__ = "time_slots"

    slot_id = Column(String, primary_key=True, index=True)  # YYYY-MM-DD-HH:mm
    slot_date = Column(String, nullable=False)
    slot_time = Column(String, nullable=False)
    day = Column(String, nullable=False)
    position = Column(Integer, nullable=False)  # seed order
    taken = Column(Boolean, default=False, nullable=False)
    taken_by = Column(String, nullable=True)
    taken_at = Column(DateTime(timezone=True), nullable=True)


class CandidateModel(Base):
    __tablename__ = "candidates"

    candidate_id = Column(String, primary_key=True, index=True)
    position = Column(Integer, nullable=False)  # insertion order
    full_name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    email_key = Column(String, nullable=False, unique=True)  # trimmed, lower-cased email
    phone = Column(String, default="")
    timezone = Column(String, nullable=False)
    experience = Column(Text, default="")
    motivation = Column(Text, default="")
    additional_notes = Column(Text, default="")
    selected_slots = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
