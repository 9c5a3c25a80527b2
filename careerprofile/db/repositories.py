# careerprofile/db/repositories.py
"""
SQLAlchemy implementations of the RIASEC engine collaborators.
"""
import logging
from typing import List, Optional

from pydantic import ValidationError
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from careerprofile.db.models import Answer, InterpretedResult, Question, Section
from services.riasec_engine.definitions import DIMENSION_SECTION_ORDINALS
from services.riasec_engine.interfaces import AnswerSource, CategoryWriter, ReportCache
from services.riasec_engine.models import AnswerRow, ReportEnvelope

logger = logging.getLogger(__name__)


class SqlAlchemyAnswerSource(AnswerSource):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_dimension_sections(self) -> List[int]:
        stmt = (
            select(Section.order_index)
            .where(Section.order_index.in_(DIMENSION_SECTION_ORDINALS))
            .order_by(Section.order_index)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def fetch_dimension_answers(self, test_attempt_id: int) -> List[AnswerRow]:
        stmt = (
            select(
                Answer.answer_text,
                Question.id,
                Question.question_type,
                Question.category,
                Section.order_index,
            )
            .join(Question, Answer.question_id == Question.id)
            .join(Section, Question.section_id == Section.id)
            .where(
                Answer.test_attempt_id == test_attempt_id,
                Section.order_index.in_(DIMENSION_SECTION_ORDINALS),
            )
            .order_by(Section.order_index, Question.order_index, Question.id)
        )
        result = await self.session.execute(stmt)
        return [
            AnswerRow(
                answer_text=answer_text,
                question_id=question_id,
                question_kind=question_type,
                question_category=category,
                section_ordinal=order_index,
            )
            for answer_text, question_id, question_type, category, order_index in result.all()
        ]


class SqlAlchemyCategoryWriter(CategoryWriter):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def assign_category(self, question_id: int, code: str) -> None:
        # Savepoint per write: a failed UPDATE leaves the request transaction usable
        async with self.session.begin_nested():
            await self.session.execute(
                update(Question).where(Question.id == question_id).values(category=code)
            )


class SqlAlchemyReportCache(ReportCache):
    """Keeps the report envelope in interpreted_results.riasec_report."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get_result(self, test_attempt_id: int) -> Optional[InterpretedResult]:
        result = await self.session.execute(
            select(InterpretedResult).where(InterpretedResult.test_attempt_id == test_attempt_id)
        )
        return result.scalars().first()

    async def find(self, test_attempt_id: int) -> Optional[ReportEnvelope]:
        row = await self._get_result(test_attempt_id)
        if row is None or not row.riasec_report:
            return None

        stored = row.riasec_report
        if not isinstance(stored, dict):
            logger.warning(f"Ignoring non-object cached RIASEC report for test attempt {test_attempt_id}")
            return None
        # Older rows hold the bare report without the scores wrapper
        if "report" not in stored:
            stored = {"scores": {}, "report": stored}
        try:
            return ReportEnvelope.model_validate(stored)
        except ValidationError as e:
            logger.warning(f"Ignoring unreadable cached RIASEC report for test attempt {test_attempt_id}: {e}")
            return None

    async def store(self, test_attempt_id: int, envelope: ReportEnvelope) -> bool:
        row = await self._get_result(test_attempt_id)
        if row is None:
            logger.warning(f"No interpreted result found for attempt {test_attempt_id}, cannot cache RIASEC report")
            return False
        row.riasec_report = envelope.to_storage()
        await self.session.flush()
        return True
