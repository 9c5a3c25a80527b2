# services/riasec_engine/pipeline.py
"""
Report pipeline: cache check, score, compose, store.
"""
import logging

from .aggregator import ScoreAggregator
from .composer import ReportComposer
from .interfaces import ReportCache
from .models import ReportEnvelope, ReportOutcome

logger = logging.getLogger(__name__)


class ReportService:
    """
    Produces the report envelope for a test attempt.

    A cached envelope is returned as is. Otherwise the attempt is scored and
    composed; the envelope is stored only when the narrative succeeded, so a
    report built without prose is returned but recomputed on the next request.
    """

    def __init__(self, aggregator: ScoreAggregator, composer: ReportComposer, cache: ReportCache):
        self.aggregator = aggregator
        self.composer = composer
        self.cache = cache

    async def get_report(self, test_attempt_id: int) -> ReportOutcome:
        cached = await self._find_cached(test_attempt_id)
        if cached is not None:
            logger.info(f"Returning cached RIASEC report for test attempt {test_attempt_id}")
            return ReportOutcome(test_attempt_id=test_attempt_id, envelope=cached, from_cache=True)

        result = await self.aggregator.compute_scores(test_attempt_id)
        if result.error:
            return ReportOutcome(test_attempt_id=test_attempt_id, scoring_error=result.error)

        composed = await self.composer.compose(result.scores)
        envelope = ReportEnvelope(scores=result.scores, report=composed.report)

        if composed.narrative_error is None:
            await self._store(test_attempt_id, envelope)
        else:
            logger.info(
                f"Report for test attempt {test_attempt_id} composed without narrative; not caching"
            )

        return ReportOutcome(
            test_attempt_id=test_attempt_id,
            envelope=envelope,
            narrative_error=composed.narrative_error,
        )

    async def _find_cached(self, test_attempt_id: int):
        try:
            return await self.cache.find(test_attempt_id)
        except Exception as e:
            logger.warning(f"Report cache lookup failed for test attempt {test_attempt_id}: {e}")
            return None

    async def _store(self, test_attempt_id: int, envelope: ReportEnvelope) -> None:
        try:
            stored = await self.cache.store(test_attempt_id, envelope)
        except Exception as e:
            logger.warning(f"Failed to cache RIASEC report for test attempt {test_attempt_id}: {e}")
            return
        if stored:
            logger.info(f"RIASEC report cached for test attempt {test_attempt_id}")
