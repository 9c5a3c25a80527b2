# services/riasec_engine/aggregator.py
"""
RIASEC Score Aggregator

Turns a test attempt's answers in sections 5..10 into six percentages.
Questions whose category tag is missing or invalid are healed from their
section before scoring; the repair can also be run on its own.
"""
import logging
import math
import re
from typing import Dict, Iterable, List, Optional

from .definitions import (
    DIMENSION_SECTION_ORDINALS,
    LIKERT_NEUTRAL,
    LIKERT_SCALE,
    LIKERT_VALUES,
    MULTIPLE_CHOICE,
    RIASEC_CODES,
    SECTION_TO_CODE,
)
from .interfaces import AnswerSource, CategoryWriter
from .models import (
    AnswerRow,
    CategoryCorrection,
    DimensionDiagnostics,
    EngineError,
    ErrorKind,
    RepairReport,
    ScoreResult,
)

logger = logging.getLogger(__name__)

# Leading numeric prefix, same leniency as a JavaScript parseFloat.
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))")


def zero_scores() -> Dict[str, float]:
    return {code: 0.0 for code in RIASEC_CODES}


def round_half_up(value: float, digits: int = 0) -> float:
    """Rounds halves towards +infinity (not banker's rounding)."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def normalize_category(raw: Optional[str]) -> Optional[str]:
    """Returns the dimension code for a category tag, or None when it is not one."""
    if raw is None:
        return None
    code = raw.strip().upper()
    return code if code in RIASEC_CODES else None


def extract_answer_value(question_kind: Optional[str], answer_text: Optional[str]) -> float:
    """
    Converts a response into a numeric value on the 1..5 scale.

    LIKERT_SCALE answers map A..E to 1..5 and anything else to the neutral 3.
    MULTIPLE_CHOICE answers use the same letter map, otherwise the leading
    number in the text, otherwise 0. Other question kinds contribute 0.
    """
    text = answer_text or ""
    token = text.strip().upper()

    if question_kind == LIKERT_SCALE:
        if token in LIKERT_VALUES:
            return LIKERT_VALUES[token]
        logger.warning(f"Invalid Likert answer '{answer_text}', defaulting to {LIKERT_NEUTRAL}")
        return LIKERT_NEUTRAL

    if question_kind == MULTIPLE_CHOICE:
        if token in LIKERT_VALUES:
            return LIKERT_VALUES[token]
        match = _LEADING_FLOAT.match(text)
        if match:
            return float(match.group(1))
        return 0.0

    return 0.0


def to_percentage(average: float) -> float:
    """
    Maps a 1..5 average onto 0..100, two decimals, clamped.

    Clamping happens before rounding so an infinite average (a choice answer
    such as "1e400") lands on a bound. A NaN average scores 0.
    """
    percentage = ((average - 1) / 4) * 100
    if math.isnan(percentage):
        return 0.0
    return round_half_up(min(100.0, max(0.0, percentage)), 2)


def plan_category_repairs(rows: Iterable[AnswerRow]) -> List[CategoryCorrection]:
    """
    Lists one correction per question whose category tag is missing or invalid
    and whose section ordinal identifies a dimension.
    """
    corrections: List[CategoryCorrection] = []
    seen = set()
    for row in rows:
        if row.question_id in seen:
            continue
        if normalize_category(row.question_category) is not None:
            continue
        code = SECTION_TO_CODE.get(row.section_ordinal)
        if code is None:
            continue
        seen.add(row.question_id)
        corrections.append(
            CategoryCorrection(
                question_id=row.question_id,
                category=code,
                section_ordinal=row.section_ordinal,
            )
        )
    return corrections


def apply_category_corrections(
    rows: Iterable[AnswerRow], corrections: Iterable[CategoryCorrection]
) -> List[AnswerRow]:
    """Returns copies of the rows with corrected categories; the input is untouched."""
    by_question = {c.question_id: c.category for c in corrections}
    healed = []
    for row in rows:
        if row.question_id in by_question:
            healed.append(row.model_copy(update={"question_category": by_question[row.question_id]}))
        else:
            healed.append(row)
    return healed


def score_rows(rows: List[AnswerRow]) -> ScoreResult:
    """
    Scores rows that already carry their category tags.
    Rows without a valid tag are skipped and reported.
    """
    totals = {code: 0.0 for code in RIASEC_CODES}
    counts = {code: 0 for code in RIASEC_CODES}
    skipped: List[int] = []

    for row in rows:
        code = normalize_category(row.question_category)
        if code is None:
            logger.error(
                f"Question {row.question_id} has no valid RIASEC category "
                f"(found: {row.question_category!r}). Skipping."
            )
            skipped.append(row.question_id)
            continue
        totals[code] += extract_answer_value(row.question_kind, row.answer_text)
        counts[code] += 1

    scores = zero_scores()
    for code in RIASEC_CODES:
        if counts[code] > 0:
            scores[code] = to_percentage(totals[code] / counts[code])

    error = None
    if sum(counts.values()) == 0:
        ordinals = sorted({r.section_ordinal for r in rows if r.section_ordinal is not None})
        error = EngineError(
            kind=ErrorKind.NO_SCORED_DIMENSIONS,
            message="No valid RIASEC category questions found in RIASEC sections (5-10)",
            details={
                "answers_seen": len(rows),
                "questions_skipped": len(skipped),
                "section_ordinals": ordinals,
            },
        )

    return ScoreResult(
        scores=scores,
        error=error,
        answer_counts=counts,
        answers_seen=len(rows),
        skipped_question_ids=skipped,
    )


class ScoreAggregator:
    """Scores a test attempt through an AnswerSource, healing categories on the way."""

    def __init__(
        self,
        answer_source: AnswerSource,
        category_writer: Optional[CategoryWriter] = None,
        persist_repairs: bool = True,
    ):
        self.answer_source = answer_source
        self.category_writer = category_writer
        self.persist_repairs = persist_repairs

    async def compute_scores(self, test_attempt_id: int) -> ScoreResult:
        try:
            present = await self.answer_source.list_dimension_sections()
            missing = [o for o in DIMENSION_SECTION_ORDINALS if o not in set(present)]
            if missing:
                return ScoreResult(
                    scores=zero_scores(),
                    error=EngineError(
                        kind=ErrorKind.SECTIONS_NOT_FOUND,
                        message="RIASEC sections (5-10) not found",
                        details={"missing_sections": missing},
                    ),
                )

            rows = await self.answer_source.fetch_dimension_answers(test_attempt_id)
        except Exception as e:
            logger.exception(f"Failed to load answers for test attempt {test_attempt_id}")
            return ScoreResult(
                scores=zero_scores(),
                error=EngineError(kind=ErrorKind.SCORING_FAILED, message=str(e)),
            )

        logger.info(f"Found {len(rows)} answers for RIASEC sections in test attempt {test_attempt_id}")
        if not rows:
            return ScoreResult(
                scores=zero_scores(),
                error=EngineError(
                    kind=ErrorKind.NO_ANSWERS_FOUND,
                    message="No answers found for RIASEC section questions",
                ),
            )

        corrections = plan_category_repairs(rows)
        failed: List[int] = []
        if corrections and self.persist_repairs and self.category_writer is not None:
            failed = await self._write_corrections(corrections)

        result = score_rows(apply_category_corrections(rows, corrections))
        result.corrections = corrections
        result.failed_question_ids = failed
        if result.error:
            logger.error(f"Scoring failed for test attempt {test_attempt_id}: {result.error.message}")
        else:
            logger.info(f"RIASEC scores for test attempt {test_attempt_id}: {result.scores}")
        return result

    async def repair_categories(self, test_attempt_id: int) -> RepairReport:
        """Plans and persists category corrections without scoring."""
        if self.category_writer is None:
            raise RuntimeError("repair_categories requires a CategoryWriter")
        rows = await self.answer_source.fetch_dimension_answers(test_attempt_id)
        corrections = plan_category_repairs(rows)
        report = RepairReport(test_attempt_id=test_attempt_id, corrections=corrections)
        if not rows:
            report.error = EngineError(
                kind=ErrorKind.NO_ANSWERS_FOUND,
                message="No answers found for RIASEC section questions",
            )
            return report
        report.failed_question_ids = await self._write_corrections(corrections)
        return report

    async def diagnose(self, test_attempt_id: int) -> DimensionDiagnostics:
        """Read-only view of the attempt's category health and a preview of its scores."""
        present = sorted(await self.answer_source.list_dimension_sections())
        rows = await self.answer_source.fetch_dimension_answers(test_attempt_id)

        missing_category: List[int] = []
        mismatches: List[int] = []
        for row in rows:
            code = normalize_category(row.question_category)
            expected = SECTION_TO_CODE.get(row.section_ordinal)
            if code is None:
                if row.question_id not in missing_category:
                    missing_category.append(row.question_id)
            elif expected is not None and code != expected and row.question_id not in mismatches:
                logger.warning(
                    f"Question {row.question_id} is tagged '{code}' but sits in section "
                    f"{row.section_ordinal} ({expected})"
                )
                mismatches.append(row.question_id)

        pending = plan_category_repairs(rows)
        diagnostics = DimensionDiagnostics(
            test_attempt_id=test_attempt_id,
            sections_present=present,
            missing_sections=[o for o in DIMENSION_SECTION_ORDINALS if o not in present],
            questions_missing_category=missing_category,
            category_mismatches=mismatches,
            pending_corrections=pending,
        )
        if rows:
            preview = score_rows(apply_category_corrections(rows, pending))
            diagnostics.preview = preview
            diagnostics.answers_per_dimension = preview.answer_counts
            diagnostics.unresolvable_question_ids = preview.skipped_question_ids
        return diagnostics

    async def _write_corrections(self, corrections: List[CategoryCorrection]) -> List[int]:
        failed = []
        for correction in corrections:
            try:
                await self.category_writer.assign_category(correction.question_id, correction.category)
                logger.info(
                    f"Assigned category '{correction.category}' to question {correction.question_id} "
                    f"(section {correction.section_ordinal})"
                )
            except Exception as e:
                logger.error(f"Failed to assign category to question {correction.question_id}: {e}")
                failed.append(correction.question_id)
        if len(failed) < len(corrections):
            logger.info(f"Assigned RIASEC categories to {len(corrections) - len(failed)} questions")
        return failed
