# interview_booking/services/candidate_store.py

import logging
from typing import Dict, Iterable, List, Optional

from interview_booking.base.exceptions import DuplicateEmail
from interview_booking.base.models import Candidate, normalize_email

logger = logging.getLogger("candidate_store")


class CandidateStore:
    """Submitted candidates in insertion order, unique by email."""

    def __init__(self, candidates: Iterable[Candidate] = ()):
        self._candidates: List[Candidate] = []
        self._by_id: Dict[str, Candidate] = {}
        self._by_email: Dict[str, Candidate] = {}
        for candidate in candidates:
            self.insert(candidate)

    def __len__(self) -> int:
        return len(self._candidates)

    def find_by_email(self, email: str) -> Optional[Candidate]:
        candidate = self._by_email.get(normalize_email(email))
        return candidate.model_copy(deep=True) if candidate else None

    def find_by_id(self, candidate_id: str) -> Optional[Candidate]:
        candidate = self._by_id.get(candidate_id)
        return candidate.model_copy(deep=True) if candidate else None

    def insert(self, candidate: Candidate) -> None:
        if self.find_by_email(candidate.email) is not None:
            raise DuplicateEmail(candidate.email)
        if candidate.id in self._by_id:
            raise ValueError(f"Duplicate candidate id: {candidate.id}")

        self._candidates.append(candidate)
        self._by_id[candidate.id] = candidate
        self._by_email[normalize_email(candidate.email)] = candidate
        logger.debug(f"[CandidateStore] Inserted candidate {candidate.id}")

    def list_all(self) -> List[Candidate]:
        return [candidate.model_copy(deep=True) for candidate in self._candidates]
