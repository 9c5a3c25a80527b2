# services/riasec_engine/interfaces.py
"""
Collaborator interfaces injected into the scoring and report components.
Implementations live in the application layer (SQLAlchemy, Redis, Gemini).
"""
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from .models import AnswerRow, DeterministicSections, NarrativeResult, ReportEnvelope


class AnswerSource(ABC):
    """Read access to the section catalog and a test attempt's answers."""

    @abstractmethod
    async def list_dimension_sections(self) -> List[int]:
        """Returns the ordinals among 5..10 that exist in the section catalog."""
        raise NotImplementedError

    @abstractmethod
    async def fetch_dimension_answers(self, test_attempt_id: int) -> List[AnswerRow]:
        """Returns every answer of the attempt whose question sits in a dimension section."""
        raise NotImplementedError


class CategoryWriter(ABC):

    @abstractmethod
    async def assign_category(self, question_id: int, code: str) -> None:
        """Persists the dimension code on the question. Must be idempotent."""
        raise NotImplementedError


class NarrativeGenerator(ABC):

    @abstractmethod
    async def generate(
        self, scores: Dict[str, float], sections: DeterministicSections
    ) -> NarrativeResult:
        """
        Produces prose for a report. Implementations report failures through
        NarrativeResult.error instead of raising.
        """
        raise NotImplementedError


class ReportCache(ABC):

    @abstractmethod
    async def find(self, test_attempt_id: int) -> Optional[ReportEnvelope]:
        raise NotImplementedError

    @abstractmethod
    async def store(self, test_attempt_id: int, envelope: ReportEnvelope) -> bool:
        """Returns True when the envelope was written."""
        raise NotImplementedError
