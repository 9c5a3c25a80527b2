# careerprofile/schemas/riasec.py
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from services.riasec_engine.models import CategoryCorrection, EngineError, RiasecReport

class ReportResponse(BaseModel):
    test_attempt_id: int
    from_cache: bool
    scores: Dict[str, float]
    report: RiasecReport
    narrative_error: Optional[str] = None

class ScoresResponse(BaseModel):
    test_attempt_id: int
    scores: Dict[str, float]
    error: Optional[EngineError] = None
    answer_counts: Dict[str, int] = Field(default_factory=dict)
    answers_seen: int = 0
    skipped_question_ids: List[int] = Field(default_factory=list)

class ComposeRequest(BaseModel):
    scores: Dict[str, float]  # code → percentage, all six required

class RepairResponse(BaseModel):
    test_attempt_id: int
    corrections: List[CategoryCorrection]
    applied: int
    failed_question_ids: List[int]
