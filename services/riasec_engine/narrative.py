# services/riasec_engine/narrative.py
"""
Gemini-backed narrative generator.

Only prose comes back from the model: the decision-risk insight, top
qualities and per-dimension analysis. Scores, labels and pathways are never
read from the response.
"""
import json
import logging
import re
from typing import Any, Dict, Mapping, Optional

import httpx
from pydantic import ValidationError
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .definitions import DIMENSIONS, DISCOURAGED_PHRASES, RIASEC_CODES
from .interfaces import NarrativeGenerator
from .models import (
    DeterministicSections,
    NarrativeDimension,
    NarrativeFields,
    NarrativeGenerationError,
    NarrativeResult,
    RetryableNarrativeError,
)

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com"
DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_API_VERSION = "v1"

AUTH_FAILED = "Gemini API authentication failed. Please check your API key."
RATE_LIMITED = "Gemini API rate limit exceeded. Please try again in a few minutes."
SERVER_ERROR = "Gemini API server error. Please try again later."
NETWORK_ERROR = "Network error: Could not reach AI service. Please check your connection and try again."
TIMEOUT_ERROR = "Request timeout: AI service took too long to respond. Please try again."
MISSING_API_KEY = "GEMINI_API_KEY environment variable is not set"

_DOUBLE_PUNCTUATION = re.compile(r"[.,]\s*[.,]")
_WHITESPACE = re.compile(r"\s+")


def remove_discouraged_phrases(text: str) -> str:
    for phrase in DISCOURAGED_PHRASES:
        text = re.sub(re.escape(phrase), "", text, flags=re.IGNORECASE)
    text = _WHITESPACE.sub(" ", text)
    text = _DOUBLE_PUNCTUATION.sub(".", text)
    return text.strip()


def strip_code_fences(text: str) -> str:
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    if text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def extract_response_text(data: Any) -> str:
    """Pulls the first candidate's text out of a generateContent response."""
    candidates = data.get("candidates") if isinstance(data, dict) else None
    if not isinstance(candidates, list) or not candidates:
        logger.error(f"Invalid Gemini API response structure: {data!r}")
        raise NarrativeGenerationError("Invalid response from AI service. Please try again.")

    candidate = candidates[0] if isinstance(candidates[0], dict) else {}
    parts = (candidate.get("content") or {}).get("parts")
    if not isinstance(parts, list) or not parts:
        logger.error(f"Invalid Gemini API response content: {candidate!r}")
        raise NarrativeGenerationError("AI service returned empty content. Please try again.")

    ratings = candidate.get("safetyRatings") or []
    if any(isinstance(r, dict) and r.get("blocked") for r in ratings):
        logger.error(f"Content blocked by safety filters: {ratings!r}")
        raise NarrativeGenerationError("Content was blocked by safety filters. Please try again.")

    text = parts[0].get("text") if isinstance(parts[0], dict) else None
    if not text or not isinstance(text, str):
        raise NarrativeGenerationError("AI service returned invalid response. Please try again.")
    return text


def parse_narrative(text: str) -> NarrativeFields:
    """
    Parses the model's JSON report into NarrativeFields, dropping every
    non-prose field and cleaning discouraged phrasing.
    """
    body = strip_code_fences(text)
    if not body:
        raise NarrativeGenerationError("AI service returned empty response. Please try again.")

    try:
        report = json.loads(body)
    except json.JSONDecodeError as e:
        logger.error(f"JSON parse error: {e}. Response text (first 500 chars): {body[:500]}")
        raise NarrativeGenerationError("Failed to parse AI response. Please try again.") from e

    if (
        not isinstance(report, dict)
        or not isinstance(report.get("riasecProfile"), dict)
        or not isinstance(report.get("dimensions"), list)
    ):
        raise NarrativeGenerationError("Invalid report structure from AI service")

    profile = report["riasecProfile"]
    decision_risk = profile.get("decisionRisk") if isinstance(profile.get("decisionRisk"), dict) else {}
    insight = decision_risk.get("insight")
    if isinstance(insight, str) and insight:
        insight = remove_discouraged_phrases(insight)
    else:
        insight = None

    top_qualities = profile.get("topQualities")
    if not isinstance(top_qualities, list):
        top_qualities = []

    dimensions: Dict[str, NarrativeDimension] = {}
    try:
        for item in report["dimensions"]:
            if not isinstance(item, dict):
                continue
            code = str(item.get("code", "")).strip().upper()
            if code not in RIASEC_CODES or code in dimensions:
                continue
            dimension = NarrativeDimension.model_validate(item)
            if dimension.personalized_analysis:
                dimension.personalized_analysis = remove_discouraged_phrases(dimension.personalized_analysis)
            dimensions[code] = dimension
        fields = NarrativeFields(
            insight=insight,
            top_qualities=[str(q) for q in top_qualities],
            dimensions=dimensions,
        )
    except ValidationError as e:
        raise NarrativeGenerationError("Invalid report structure from AI service") from e

    missing = [code for code in RIASEC_CODES if code not in dimensions]
    if missing:
        logger.warning(f"Missing dimensions in report: {', '.join(missing)}")
    return fields


def build_prompt(scores: Mapping[str, float], sections: DeterministicSections) -> str:
    risk = sections.decision_risk
    score_lines = "\n".join(f"{code}: {scores[code]}" for code in RIASEC_CODES)
    dimension_lines = "\n".join(
        f"- {code} {DIMENSIONS[code]['title']}: {sections.match_levels[code]}" for code in RIASEC_CODES
    )
    traits = ", ".join(f"{t.code} ({t.label}) {t.score}" for t in sections.top_traits)
    return f"""You are a Holland Code (RIASEC) assessment writer.
Write short professional prose for the profile below. Return valid JSON only.

SCORES:
{score_lines}

MATCH LEVELS:
{dimension_lines}

TOP TRAITS: {traits}
DECISION RISK: {risk.level} / {risk.stability}

OUTPUT FORMAT:
{{
  "riasecProfile": {{
    "decisionRisk": {{"insight": "1 concise sentence"}},
    "topQualities": ["short phrase", "short phrase", "short phrase"]
  }},
  "dimensions": [
    {{
      "code": "R",
      "personalizedAnalysis": "2 concise sentences",
      "coreStrengths": ["short bullet", "short bullet", "short bullet"],
      "growthAreas": ["short bullet", "short bullet"],
      "workStylePreferences": "1 concise sentence"
    }}
  ]
}}
Include one entry per code R, I, A, S, E, C. Do not include career pathways.
"""


class GeminiNarrativeGenerator(NarrativeGenerator):
    """Calls the Gemini generateContent REST endpoint and sanitizes its answer."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        api_version: str = DEFAULT_API_VERSION,
        base_url: str = GEMINI_BASE_URL,
        timeout: float = 60.0,
        max_retries: int = 3,
        base_delay: float = 2.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.api_version = api_version
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.base_delay = base_delay
        self._client = client

    @property
    def url(self) -> str:
        return f"{self.base_url}/{self.api_version}/models/{self.model}:generateContent"

    async def generate(
        self, scores: Mapping[str, float], sections: DeterministicSections
    ) -> NarrativeResult:
        if not self.api_key or not self.api_key.strip():
            return NarrativeResult(error=MISSING_API_KEY)

        prompt = build_prompt(scores, sections)
        logger.info(f"Generating RIASEC narrative with Gemini API: {self.model}")
        try:
            data = await self._call_api(prompt)
            fields = parse_narrative(extract_response_text(data))
        except NarrativeGenerationError as e:
            logger.error(f"Narrative generation failed: {e}")
            return NarrativeResult(error=str(e))
        return NarrativeResult(fields=fields)

    async def _call_api(self, prompt: str) -> Dict[str, Any]:
        payload = {"contents": [{"parts": [{"text": prompt}]}]}

        @retry(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.base_delay),  # 2s, 4s, 8s
            retry=retry_if_exception_type(RetryableNarrativeError),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        async def _post() -> Dict[str, Any]:
            if self._client is not None:
                return await self._send(self._client, payload)
            async with httpx.AsyncClient() as client:
                return await self._send(client, payload)

        return await _post()

    async def _send(self, client: httpx.AsyncClient, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = await client.post(
                self.url,
                params={"key": self.api_key},
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            logger.warning(f"Gemini request timed out: {e}")
            raise RetryableNarrativeError(TIMEOUT_ERROR) from e
        except httpx.RequestError as e:
            logger.warning(f"Gemini request error: {e}")
            raise RetryableNarrativeError(NETWORK_ERROR) from e

        status = response.status_code
        if status >= 400:
            logger.error(f"Gemini API error ({status}): {response.text}")
            if status == 429:
                raise RetryableNarrativeError(RATE_LIMITED)
            if 500 <= status < 600:
                raise RetryableNarrativeError(SERVER_ERROR)
            if status in (401, 403):
                raise NarrativeGenerationError(AUTH_FAILED)
            raise NarrativeGenerationError(_api_error_message(response) or f"API error ({status}). Please try again.")

        try:
            return response.json()
        except ValueError as e:
            raise NarrativeGenerationError("Invalid response from AI service. Please try again.") from e


def _api_error_message(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return None
