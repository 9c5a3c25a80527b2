import pytest
from typing import Dict, List, Optional

from services.riasec_engine.definitions import DIMENSION_SECTION_ORDINALS
from services.riasec_engine.interfaces import (
    AnswerSource,
    CategoryWriter,
    NarrativeGenerator,
    ReportCache,
)
from services.riasec_engine.models import (
    AnswerRow,
    DeterministicSections,
    NarrativeDimension,
    NarrativeFields,
    NarrativeResult,
    ReportEnvelope,
)


class FakeAnswerSource(AnswerSource):
    def __init__(self):
        self.sections: List[int] = list(DIMENSION_SECTION_ORDINALS)
        self.rows: List[AnswerRow] = []
        self.error: Optional[Exception] = None
        self.fetch_calls = 0

    async def list_dimension_sections(self) -> List[int]:
        if self.error:
            raise self.error
        return list(self.sections)

    async def fetch_dimension_answers(self, test_attempt_id: int) -> List[AnswerRow]:
        self.fetch_calls += 1
        if self.error:
            raise self.error
        return list(self.rows)


class FakeCategoryWriter(CategoryWriter):
    def __init__(self):
        self.writes: Dict[int, str] = {}
        self.fail_for: set = set()

    async def assign_category(self, question_id: int, code: str) -> None:
        if question_id in self.fail_for:
            raise RuntimeError(f"write failed for question {question_id}")
        self.writes[question_id] = code


class FakeReportCache(ReportCache):
    def __init__(self):
        self.entries: Dict[int, ReportEnvelope] = {}
        self.store_calls = 0
        self.find_error: Optional[Exception] = None
        self.store_error: Optional[Exception] = None

    async def find(self, test_attempt_id: int) -> Optional[ReportEnvelope]:
        if self.find_error:
            raise self.find_error
        return self.entries.get(test_attempt_id)

    async def store(self, test_attempt_id: int, envelope: ReportEnvelope) -> bool:
        self.store_calls += 1
        if self.store_error:
            raise self.store_error
        self.entries[test_attempt_id] = envelope
        return True


class FakeNarrativeGenerator(NarrativeGenerator):
    def __init__(self):
        self.result = NarrativeResult(
            fields=NarrativeFields(
                insight="A clear and consistent interest pattern.",
                top_qualities=["Hands-on", "Analytical", "Curious"],
                dimensions={
                    "R": NarrativeDimension(
                        personalized_analysis="Enjoys building and fixing things.",
                        core_strengths=["Practical", "Mechanical"],
                        growth_areas=["Delegation"],
                        work_style_preferences="Prefers tangible outcomes.",
                    )
                },
            )
        )
        self.calls = 0

    async def generate(self, scores, sections: DeterministicSections) -> NarrativeResult:
        self.calls += 1
        return self.result


@pytest.fixture
def answer_source():
    return FakeAnswerSource()

@pytest.fixture
def category_writer():
    return FakeCategoryWriter()

@pytest.fixture
def report_cache():
    return FakeReportCache()

@pytest.fixture
def narrative_generator():
    return FakeNarrativeGenerator()

@pytest.fixture
def make_row():
    """Builds an AnswerRow; category defaults to the section's own code."""
    codes = {5: "R", 6: "I", 7: "A", 8: "S", 9: "E", 10: "C"}
    counter = {"next": 1}

    def _make(section=5, answer="C", kind="LIKERT_SCALE", category="__section__", question_id=None):
        if question_id is None:
            question_id = counter["next"]
            counter["next"] += 1
        if category == "__section__":
            category = codes.get(section)
        return AnswerRow(
            answer_text=answer,
            question_id=question_id,
            question_kind=kind,
            question_category=category,
            section_ordinal=section,
        )

    return _make
