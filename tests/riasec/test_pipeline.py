# tests/riasec/test_pipeline.py
import pytest
from unittest.mock import AsyncMock, MagicMock

from services.riasec_engine.aggregator import ScoreAggregator
from services.riasec_engine.composer import ReportComposer
from services.riasec_engine.models import (
    EngineError,
    ErrorKind,
    NarrativeResult,
    ScoreResult,
)
from services.riasec_engine.pipeline import ReportService


def realistic_rows(make_row):
    return [
        make_row(section=5, answer="E"),
        make_row(section=6, answer="D"),
        make_row(section=7, answer="B"),
        make_row(section=8, answer="A"),
        make_row(section=9, answer="A"),
        make_row(section=10, answer="A"),
    ]


@pytest.fixture
def service(answer_source, category_writer, narrative_generator, report_cache):
    return ReportService(
        ScoreAggregator(answer_source, category_writer),
        ReportComposer(narrative_generator),
        report_cache,
    )


@pytest.mark.asyncio
async def test_first_request_scores_composes_and_stores(service, answer_source, report_cache, make_row):
    answer_source.rows = realistic_rows(make_row)

    outcome = await service.get_report(11)

    assert outcome.from_cache is False
    assert outcome.scoring_error is None
    assert outcome.narrative_error is None
    assert outcome.envelope.scores == {"R": 100.0, "I": 75.0, "A": 25.0, "S": 0.0, "E": 0.0, "C": 0.0}
    assert report_cache.entries[11] == outcome.envelope


@pytest.mark.asyncio
async def test_cache_hit_short_circuits(service, answer_source, narrative_generator, make_row):
    answer_source.rows = realistic_rows(make_row)
    first = await service.get_report(11)

    # answers change after the first report; the cached envelope wins
    answer_source.rows = [make_row(section=5, answer="A")]
    second = await service.get_report(11)

    assert second.from_cache is True
    assert second.envelope == first.envelope
    assert answer_source.fetch_calls == 1
    assert narrative_generator.calls == 1


@pytest.mark.asyncio
async def test_narrative_failure_returns_uncached_report(service, answer_source, narrative_generator, report_cache, make_row):
    answer_source.rows = realistic_rows(make_row)
    narrative_generator.result = NarrativeResult(error="Gemini API server error. Please try again later.")

    outcome = await service.get_report(11)

    assert outcome.narrative_error.kind == ErrorKind.NARRATIVE_UNAVAILABLE
    assert outcome.envelope.report.riasec_profile.decision_risk.level == "Low Risk"
    assert report_cache.store_calls == 0

    # a later request retries the narrative
    await service.get_report(11)
    assert narrative_generator.calls == 2


@pytest.mark.asyncio
async def test_scoring_error_stops_the_pipeline(report_cache):
    aggregator = MagicMock(spec=ScoreAggregator)
    aggregator.compute_scores = AsyncMock(return_value=ScoreResult(
        scores={c: 0.0 for c in "RIASEC"},
        error=EngineError(kind=ErrorKind.NO_ANSWERS_FOUND, message="No answers found"),
    ))
    composer = MagicMock(spec=ReportComposer)
    composer.compose = AsyncMock()
    service = ReportService(aggregator, composer, report_cache)

    outcome = await service.get_report(5)

    assert outcome.scoring_error.kind == ErrorKind.NO_ANSWERS_FOUND
    assert outcome.envelope is None
    composer.compose.assert_not_called()
    assert report_cache.store_calls == 0


@pytest.mark.asyncio
async def test_all_zero_scores_are_still_composed(service, answer_source, make_row):
    answer_source.rows = [make_row(section=s, answer="A") for s in range(5, 11)]

    outcome = await service.get_report(8)

    assert outcome.scoring_error is None
    assert [t.code for t in outcome.envelope.report.riasec_profile.top_traits] == ["A", "C", "E"]


@pytest.mark.asyncio
async def test_cache_failures_are_not_fatal(service, answer_source, report_cache, make_row):
    answer_source.rows = realistic_rows(make_row)
    report_cache.find_error = ConnectionError("cache down")
    report_cache.store_error = ConnectionError("cache down")

    outcome = await service.get_report(11)

    assert outcome.envelope is not None
    assert outcome.from_cache is False
    assert report_cache.store_calls == 1
