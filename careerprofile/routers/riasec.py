# careerprofile/routers/riasec.py
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from careerprofile.cache.report_cache import RedisReportCache
from careerprofile.core.config import gemini_settings
from careerprofile.db.repositories import (
    SqlAlchemyAnswerSource,
    SqlAlchemyCategoryWriter,
    SqlAlchemyReportCache,
)
from careerprofile.db.session import db_session
from careerprofile.schemas.riasec import ComposeRequest, RepairResponse, ReportResponse, ScoresResponse
from services.riasec_engine.aggregator import ScoreAggregator
from services.riasec_engine.composer import ReportComposer
from services.riasec_engine.models import (
    DeterministicSections,
    DimensionDiagnostics,
    EngineError,
    ErrorKind,
    InvalidScoresError,
)
from services.riasec_engine.narrative import GeminiNarrativeGenerator
from services.riasec_engine.pipeline import ReportService

router = APIRouter()
logger = logging.getLogger(__name__)

SCORING_ERROR_STATUS = {
    ErrorKind.NO_ANSWERS_FOUND: 404,
    ErrorKind.NO_SCORED_DIMENSIONS: 422,
    ErrorKind.SECTIONS_NOT_FOUND: 503,
    ErrorKind.SCORING_FAILED: 500,
}

def get_narrative_generator() -> GeminiNarrativeGenerator:
    return GeminiNarrativeGenerator(
        api_key=gemini_settings.api_key,
        model=gemini_settings.model,
        api_version=gemini_settings.api_version,
        base_url=gemini_settings.base_url,
        timeout=gemini_settings.timeout_seconds,
        max_retries=gemini_settings.max_retries,
        base_delay=gemini_settings.base_delay_seconds,
    )

def get_score_aggregator(session: AsyncSession = Depends(db_session)) -> ScoreAggregator:
    return ScoreAggregator(SqlAlchemyAnswerSource(session), SqlAlchemyCategoryWriter(session))

def get_report_composer(
    narrative_generator: GeminiNarrativeGenerator = Depends(get_narrative_generator),
) -> ReportComposer:
    return ReportComposer(narrative_generator)

def get_report_service(
    session: AsyncSession = Depends(db_session),
    aggregator: ScoreAggregator = Depends(get_score_aggregator),
    composer: ReportComposer = Depends(get_report_composer),
) -> ReportService:
    return ReportService(aggregator, composer, RedisReportCache(SqlAlchemyReportCache(session)))

def _raise_for(error: EngineError, status_code: int) -> None:
    raise HTTPException(
        status_code=status_code,
        detail={"kind": error.kind.value, "message": error.message, "details": error.details},
    )

@router.get("/riasec/report/{test_attempt_id}", response_model=ReportResponse)
async def get_riasec_report(
    test_attempt_id: int,
    service: ReportService = Depends(get_report_service),
):
    """
    Returns the RIASEC report envelope for a test attempt, computing and
    caching it on first request.
    """
    outcome = await service.get_report(test_attempt_id)
    if outcome.scoring_error:
        logger.error(f"RIASEC scoring failed for test attempt {test_attempt_id}: {outcome.scoring_error.message}")
        _raise_for(outcome.scoring_error, SCORING_ERROR_STATUS.get(outcome.scoring_error.kind, 500))

    return ReportResponse(
        test_attempt_id=test_attempt_id,
        from_cache=outcome.from_cache,
        scores=outcome.envelope.scores,
        report=outcome.envelope.report,
        narrative_error=outcome.narrative_error.message if outcome.narrative_error else None,
    )

@router.get("/riasec/scores/{test_attempt_id}", response_model=ScoresResponse)
async def get_riasec_scores(
    test_attempt_id: int,
    aggregator: ScoreAggregator = Depends(get_score_aggregator),
):
    result = await aggregator.compute_scores(test_attempt_id)
    return ScoresResponse(
        test_attempt_id=test_attempt_id,
        scores=result.scores,
        error=result.error,
        answer_counts=result.answer_counts,
        answers_seen=result.answers_seen,
        skipped_question_ids=result.skipped_question_ids,
    )

@router.post("/riasec/compose", response_model=DeterministicSections)
async def compose_riasec_sections(
    request: ComposeRequest,
    composer: ReportComposer = Depends(get_report_composer),
):
    """Deterministic report sections for the supplied scores; no narrative call."""
    try:
        return composer.compose_deterministic_sections(request.scores)
    except InvalidScoresError as e:
        logger.error(f"Invalid scores: {e}")
        raise HTTPException(status_code=422, detail=str(e))

@router.get("/riasec/diagnostics/{test_attempt_id}", response_model=DimensionDiagnostics)
async def get_riasec_diagnostics(
    test_attempt_id: int,
    aggregator: ScoreAggregator = Depends(get_score_aggregator),
):
    return await aggregator.diagnose(test_attempt_id)

@router.post("/riasec/categories/repair/{test_attempt_id}", response_model=RepairResponse)
async def repair_riasec_categories(
    test_attempt_id: int,
    aggregator: ScoreAggregator = Depends(get_score_aggregator),
):
    report = await aggregator.repair_categories(test_attempt_id)
    if report.error:
        _raise_for(report.error, SCORING_ERROR_STATUS.get(report.error.kind, 500))
    logger.info(f"Category repair for test attempt {test_attempt_id}: {report.applied_count} applied")
    return RepairResponse(
        test_attempt_id=test_attempt_id,
        corrections=report.corrections,
        applied=report.applied_count,
        failed_question_ids=report.failed_question_ids,
    )
