from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorKind(str, Enum):
    SECTIONS_NOT_FOUND = "SectionsNotFound"
    NO_ANSWERS_FOUND = "NoAnswersFound"
    NO_SCORED_DIMENSIONS = "NoScoredDimensions"
    NARRATIVE_UNAVAILABLE = "NarrativeUnavailable"
    SCORING_FAILED = "ScoringFailed"


class EngineError(BaseModel):
    """Error surfaced as a value across component boundaries."""
    kind: ErrorKind
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


# --- Scoring ---

class AnswerRow(BaseModel):
    answer_text: Optional[str] = None
    question_id: int
    question_kind: Optional[str] = None
    question_category: Optional[str] = None
    section_ordinal: Optional[int] = None


class CategoryCorrection(BaseModel):
    question_id: int
    category: str
    section_ordinal: int


class RepairReport(BaseModel):
    test_attempt_id: int
    corrections: List[CategoryCorrection] = Field(default_factory=list)
    failed_question_ids: List[int] = Field(default_factory=list)
    error: Optional[EngineError] = None

    @property
    def applied_count(self) -> int:
        return len(self.corrections) - len(self.failed_question_ids)


class ScoreResult(BaseModel):
    scores: Dict[str, float]
    error: Optional[EngineError] = None
    answer_counts: Dict[str, int] = Field(default_factory=dict)
    answers_seen: int = 0
    skipped_question_ids: List[int] = Field(default_factory=list)
    corrections: List[CategoryCorrection] = Field(default_factory=list)
    failed_question_ids: List[int] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


class DimensionDiagnostics(BaseModel):
    test_attempt_id: int
    sections_present: List[int] = Field(default_factory=list)
    missing_sections: List[int] = Field(default_factory=list)
    answers_per_dimension: Dict[str, int] = Field(default_factory=dict)
    questions_missing_category: List[int] = Field(default_factory=list)
    category_mismatches: List[int] = Field(default_factory=list)
    unresolvable_question_ids: List[int] = Field(default_factory=list)
    pending_corrections: List[CategoryCorrection] = Field(default_factory=list)
    preview: Optional[ScoreResult] = None


# --- Report composition ---

class RankedDimension(BaseModel):
    code: str
    label: str
    title: str
    score: float


class TopTrait(BaseModel):
    code: str
    label: str
    score: int


class DecisionRisk(BaseModel):
    level: str
    stability: str
    insight: Optional[str] = None


class PathwayConfidence(BaseModel):
    level: str
    label: str


class CareerPathway(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    degree: str
    riasec_mix: str = Field(..., alias="riasecMix")
    career_role: str = Field(..., alias="careerRole")
    professional_persona: str = Field(..., alias="professionalPersona")
    core_tasks_focus: str = Field(..., alias="coreTasksFocus")
    confidence: str
    confidence_level: str = Field(..., alias="confidenceLevel")


class DeterministicSections(BaseModel):
    ranking: List[RankedDimension]
    top_traits: List[TopTrait]
    match_levels: Dict[str, str]
    decision_risk: DecisionRisk
    career_pathways: List[CareerPathway]


class DimensionReport(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    code: str
    title: str
    score: int
    match_level: str = Field(..., alias="matchLevel")
    tagline: str
    personalized_analysis: Optional[str] = Field(None, alias="personalizedAnalysis")
    core_strengths: List[str] = Field(default_factory=list, alias="coreStrengths")
    growth_areas: List[str] = Field(default_factory=list, alias="growthAreas")
    work_style_preferences: Optional[str] = Field(None, alias="workStylePreferences")


class RiasecProfile(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    decision_risk: DecisionRisk = Field(..., alias="decisionRisk")
    top_qualities: List[str] = Field(default_factory=list, alias="topQualities")
    top_traits: List[TopTrait] = Field(..., alias="topTraits")


class RiasecReport(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    riasec_profile: RiasecProfile = Field(..., alias="riasecProfile")
    dimensions: List[DimensionReport]
    career_pathways: List[CareerPathway] = Field(default_factory=list, alias="careerPathways")


class ReportEnvelope(BaseModel):
    """Cached record for one test attempt: the six scores plus the composed report."""
    scores: Dict[str, float]
    report: RiasecReport

    def to_storage(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# --- Narrative ---

class NarrativeDimension(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    personalized_analysis: Optional[str] = Field(None, alias="personalizedAnalysis")
    core_strengths: List[str] = Field(default_factory=list, alias="coreStrengths")
    growth_areas: List[str] = Field(default_factory=list, alias="growthAreas")
    work_style_preferences: Optional[str] = Field(None, alias="workStylePreferences")


class NarrativeFields(BaseModel):
    """The prose-only portion of a report, as supplied by the text generator."""
    insight: Optional[str] = None
    top_qualities: List[str] = Field(default_factory=list)
    dimensions: Dict[str, NarrativeDimension] = Field(default_factory=dict)


class NarrativeResult(BaseModel):
    fields: Optional[NarrativeFields] = None
    error: Optional[str] = None


class ComposedReport(BaseModel):
    report: RiasecReport
    sections: DeterministicSections
    narrative_error: Optional[EngineError] = None


class ReportOutcome(BaseModel):
    test_attempt_id: int
    envelope: Optional[ReportEnvelope] = None
    from_cache: bool = False
    scoring_error: Optional[EngineError] = None
    narrative_error: Optional[EngineError] = None


# Custom Error Classes
class InvalidScoresError(ValueError):
    """Raised when a score mapping is missing one of the six dimensions."""
    pass

class NarrativeGenerationError(Exception):
    """The text generator failed or returned an unusable payload."""
    pass

class RetryableNarrativeError(NarrativeGenerationError):
    """Transient text generator failure (rate limit, server error, network)."""
    pass
