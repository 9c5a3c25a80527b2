# services/riasec_engine/composer.py
"""
RIASEC Report Composer

Every classification in a report (ranking, match levels, decision risk and
career pathways) is computed here from the six scores. Prose from a
NarrativeGenerator is merged afterwards into the text-only fields.
"""
import logging
from typing import Dict, List, Mapping, Optional, Sequence

from .aggregator import round_half_up
from .definitions import (
    CONFIDENCE_LABELS,
    DEFAULT_DEGREE,
    DEFAULT_FOCUS,
    DEFAULT_PERSONA,
    DEFAULT_ROLE,
    DEGREE_BY_PAIR,
    DEVELOPING,
    DIMENSIONS,
    FALLBACK_DEGREES,
    FALLBACK_ROLES,
    FOCUS_BY_ROLE,
    HIGH_MATCH,
    HIGH_MATCH_THRESHOLD,
    HIGH_RISK,
    HIGHLY_STABLE,
    LOW_MATCH,
    LOW_RISK,
    MODERATE_MATCH,
    MODERATE_MATCH_THRESHOLD,
    MODERATE_RISK,
    MODERATELY_STABLE,
    PATHWAY_COUNT,
    PERSONA_BY_ROLE,
    RIASEC_CODES,
    ROLE_BY_PAIR,
)
from .interfaces import NarrativeGenerator
from .models import (
    CareerPathway,
    ComposedReport,
    DecisionRisk,
    DeterministicSections,
    DimensionReport,
    EngineError,
    ErrorKind,
    InvalidScoresError,
    NarrativeFields,
    PathwayConfidence,
    RankedDimension,
    RiasecProfile,
    RiasecReport,
    TopTrait,
)

logger = logging.getLogger(__name__)


def validate_scores(scores: Mapping[str, float]) -> Dict[str, float]:
    missing = [code for code in RIASEC_CODES if scores.get(code) is None]
    if missing:
        raise InvalidScoresError(
            f"All RIASEC scores (R, I, A, S, E, C) are required; missing {', '.join(missing)}"
        )
    try:
        return {code: float(scores[code]) for code in RIASEC_CODES}
    except (TypeError, ValueError) as e:
        raise InvalidScoresError(f"RIASEC scores must be numeric: {e}") from e


def rank_scores(scores: Mapping[str, float]) -> List[RankedDimension]:
    """Descending by score, ties broken by ascending code."""
    ranked = sorted(RIASEC_CODES, key=lambda code: (-scores[code], code))
    return [
        RankedDimension(
            code=code,
            label=DIMENSIONS[code]["label"],
            title=DIMENSIONS[code]["title"],
            score=scores[code],
        )
        for code in ranked
    ]


def match_level(score: float) -> str:
    if score >= HIGH_MATCH_THRESHOLD:
        return HIGH_MATCH
    if score >= MODERATE_MATCH_THRESHOLD:
        return MODERATE_MATCH
    return LOW_MATCH


def classify_decision_risk(ranking: Sequence[RankedDimension]) -> DecisionRisk:
    top, second, third = (r.score for r in ranking[:3])
    lowest = ranking[-1].score
    gap_top_second = top - second
    gap_second_third = second - third

    if gap_top_second < 10 and gap_second_third < 10:
        return DecisionRisk(level=MODERATE_RISK, stability=DEVELOPING)
    if gap_top_second >= 15 and gap_second_third >= 10:
        return DecisionRisk(level=LOW_RISK, stability=HIGHLY_STABLE)
    if top < 50 or (top - lowest) < 20:
        return DecisionRisk(level=HIGH_RISK, stability=DEVELOPING)
    return DecisionRisk(level=MODERATE_RISK, stability=MODERATELY_STABLE)


def _confidence(level: str) -> PathwayConfidence:
    return PathwayConfidence(level=level, label=CONFIDENCE_LABELS[level])


def calculate_confidence(
    riasec_mix: str,
    top3_codes: Sequence[str],
    top3_scores: Sequence[float],
    all_scores: Mapping[str, float],
) -> PathwayConfidence:
    """
    Rates how well a pathway's RIASEC mix fits the student's top three codes.

    Args:
        riasec_mix: Dash-joined codes, e.g. "R-I-A".
        top3_codes: The student's three highest codes, in rank order.
        top3_scores: Scores matching top3_codes.
        all_scores: All six scores.
    """
    codes = [c for c in riasec_mix.split("-") if c]
    if len(codes) < 2:
        return _confidence("LOW")

    primary, secondary = codes[0], codes[1]
    tertiary = codes[2] if len(codes) > 2 else None

    primary_score = all_scores.get(primary, 0) or 0
    secondary_score = all_scores.get(secondary, 0) or 0
    tertiary_score = (all_scores.get(tertiary, 0) or 0) if tertiary else 0

    padded = list(top3_scores) + [0] * (3 - len(top3_scores))
    top_score = padded[0]
    ranked_scores = padded[:3]

    def rank_of(code: Optional[str]) -> int:
        if code is None or code not in top3_codes:
            return -1
        return list(top3_codes).index(code)

    primary_rank = rank_of(primary)
    secondary_rank = rank_of(secondary)
    tertiary_rank = rank_of(tertiary)

    primary_gap = 0 if primary_rank == 0 else top_score - primary_score
    if secondary_rank >= 0:
        secondary_gap = abs(ranked_scores[secondary_rank] - secondary_score)
    else:
        secondary_gap = top_score - secondary_score

    matches_in_top3 = sum(1 for r in (primary_rank, secondary_rank, tertiary_rank) if r >= 0)
    avg_score = (primary_score + secondary_score + tertiary_score) / (3 if tertiary else 2)
    avg_top_score = sum(ranked_scores) / 3

    score_fit = avg_score / max(avg_top_score, 1)
    gap_penalty = (primary_gap + secondary_gap) / max(top_score, 1)

    if (
        primary_rank == 0
        and secondary_rank == 1
        and matches_in_top3 >= 2
        and primary_score >= 30
        and score_fit >= 0.85
        and gap_penalty <= 0.15
    ):
        return _confidence("HIGH")
    if (
        primary_rank == 0
        and matches_in_top3 >= 2
        and primary_score >= 25
        and score_fit >= 0.70
        and gap_penalty <= 0.25
    ):
        return _confidence("MODERATE")
    if 0 <= primary_rank <= 2 and matches_in_top3 >= 1 and primary_score >= 20 and score_fit >= 0.60:
        return _confidence("MODERATE")
    return _confidence("LOW")


def _unique(items):
    seen = []
    for item in items:
        if item not in seen:
            seen.append(item)
    return seen


def derive_career_pathways(
    ranking: Sequence[RankedDimension], scores: Mapping[str, float]
) -> List[CareerPathway]:
    primary, secondary, tertiary = (r.code for r in ranking[:3])
    riasec_mix = f"{primary}-{secondary}-{tertiary}"

    roles = _unique(
        ROLE_BY_PAIR.get(pair, DEFAULT_ROLE)
        for pair in ((primary, secondary), (primary, tertiary), (secondary, tertiary))
    )
    roles += [r for r in FALLBACK_ROLES if r not in roles][: PATHWAY_COUNT - len(roles)]
    roles = roles[:PATHWAY_COUNT]

    degree_pairs = (
        (primary, secondary),
        (primary, tertiary),
        (secondary, tertiary),
        (secondary, primary),
        (tertiary, primary),
        (tertiary, secondary),
    )
    degrees = _unique(DEGREE_BY_PAIR.get(pair, DEFAULT_DEGREE) for pair in degree_pairs)
    degrees += [d for d in FALLBACK_DEGREES if d not in degrees]

    top3_codes = [r.code for r in ranking[:3]]
    top3_scores = [r.score for r in ranking[:3]]

    pathways = []
    used_degrees = set()
    for idx, role in enumerate(roles):
        degree = degrees[idx] if idx < len(degrees) else None
        if degree is None or degree in used_degrees:
            available = [d for d in FALLBACK_DEGREES if d not in used_degrees]
            degree = available[idx % len(available)] if available else DEFAULT_DEGREE
        used_degrees.add(degree)

        confidence = calculate_confidence(riasec_mix, top3_codes, top3_scores, scores)
        pathways.append(
            CareerPathway(
                degree=degree,
                riasec_mix=riasec_mix,
                career_role=role,
                professional_persona=PERSONA_BY_ROLE.get(role, DEFAULT_PERSONA),
                core_tasks_focus=FOCUS_BY_ROLE.get(role, DEFAULT_FOCUS),
                confidence=confidence.label,
                confidence_level=confidence.level,
            )
        )
    return pathways


def compose_deterministic_sections(scores: Mapping[str, float]) -> DeterministicSections:
    """
    Computes every non-prose part of a report.

    Raises:
        InvalidScoresError: If any of the six scores is missing or not numeric.
    """
    values = validate_scores(scores)
    ranking = rank_scores(values)
    return DeterministicSections(
        ranking=ranking,
        top_traits=[
            TopTrait(code=r.code, label=r.label, score=int(round_half_up(r.score)))
            for r in ranking[:3]
        ],
        match_levels={code: match_level(values[code]) for code in RIASEC_CODES},
        decision_risk=classify_decision_risk(ranking),
        career_pathways=derive_career_pathways(ranking, values),
    )


def build_report(
    scores: Mapping[str, float],
    sections: DeterministicSections,
    narrative: Optional[NarrativeFields] = None,
) -> RiasecReport:
    """Assembles the report; narrative only ever fills prose fields."""
    narrative = narrative or NarrativeFields()

    dimensions = []
    for code in RIASEC_CODES:
        prose = narrative.dimensions.get(code)
        dimension = DimensionReport(
            code=code,
            title=DIMENSIONS[code]["title"],
            score=int(round_half_up(float(scores[code]))),
            match_level=sections.match_levels[code],
            tagline=DIMENSIONS[code]["tagline"],
        )
        if prose is not None:
            dimension.personalized_analysis = prose.personalized_analysis
            dimension.core_strengths = list(prose.core_strengths)
            dimension.growth_areas = list(prose.growth_areas)
            dimension.work_style_preferences = prose.work_style_preferences
        dimensions.append(dimension)

    return RiasecReport(
        riasec_profile=RiasecProfile(
            decision_risk=DecisionRisk(
                level=sections.decision_risk.level,
                stability=sections.decision_risk.stability,
                insight=narrative.insight,
            ),
            top_qualities=list(narrative.top_qualities),
            top_traits=[t.model_copy() for t in sections.top_traits],
        ),
        dimensions=dimensions,
        career_pathways=[p.model_copy() for p in sections.career_pathways],
    )


class ReportComposer:
    """Builds full reports, asking the narrative generator for prose when one is configured."""

    def __init__(self, narrative_generator: Optional[NarrativeGenerator] = None):
        self.narrative_generator = narrative_generator

    def compose_deterministic_sections(self, scores: Mapping[str, float]) -> DeterministicSections:
        return compose_deterministic_sections(scores)

    async def compose(self, scores: Mapping[str, float]) -> ComposedReport:
        sections = compose_deterministic_sections(scores)
        values = validate_scores(scores)

        narrative: Optional[NarrativeFields] = None
        narrative_error: Optional[EngineError] = None
        if self.narrative_generator is None:
            narrative_error = EngineError(
                kind=ErrorKind.NARRATIVE_UNAVAILABLE,
                message="No narrative generator configured",
            )
        else:
            try:
                result = await self.narrative_generator.generate(values, sections)
            except Exception as e:
                logger.exception("Narrative generator raised instead of reporting an error")
                narrative_error = EngineError(kind=ErrorKind.NARRATIVE_UNAVAILABLE, message=str(e))
            else:
                if result.error or result.fields is None:
                    narrative_error = EngineError(
                        kind=ErrorKind.NARRATIVE_UNAVAILABLE,
                        message=result.error or "Narrative generator returned no content",
                    )
                else:
                    narrative = result.fields

        if narrative_error:
            logger.warning(f"Composing report without narrative: {narrative_error.message}")

        return ComposedReport(
            report=build_report(values, sections, narrative),
            sections=sections,
            narrative_error=narrative_error,
        )
