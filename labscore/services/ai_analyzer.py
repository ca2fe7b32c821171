import json
import logging
import re
import time
from collections.abc import Callable

from labscore.config import settings
from labscore.schemas.analysis import HealthAnalysisResult, Recommendation, UserProfile
from labscore.schemas.biomarker import BiomarkerReading
from labscore.services.analyzer import LocalHealthAnalyzer
from labscore.services.cache import AnalysisCache, fingerprint

logger = logging.getLogger(__name__)

MAX_AI_FINDINGS = 8


def _extract_json_obj(raw_text: str) -> dict | None:
    match = re.search(r"\{.*\}", raw_text, flags=re.DOTALL)
    if not match:
        return None
    try:
        payload = json.loads(match.group(0))
    except json.JSONDecodeError:
        return None
    return payload if isinstance(payload, dict) else None


def _default_llm_factory(model: str, api_key: str):
    from llama_index.llms.openai import OpenAI

    return OpenAI(model=model, api_key=api_key, temperature=0.1)


def build_prompt(readings: list[BiomarkerReading], baseline: HealthAnalysisResult, user_profile: UserProfile | None) -> str:
    biomarker_summary = "\n".join(
        f"{r.name}: {r.value:g} {r.unit} [{'ABNORMAL' if r.is_abnormal else 'NORMAL'}]" for r in readings
    )
    age = user_profile.age if user_profile and user_profile.age is not None else "Unknown"
    gender = user_profile.gender if user_profile and user_profile.gender else "Unknown"
    return f"""
You are a professional medical analyst. Review the lab results below and return STRICT JSON only with schema:
{{"summary": "<2-3 sentences>", "keyFindings": ["<finding>"], "recommendations": [{{"category": "<string>", "priority": "low|moderate|high", "recommendation": "<string>", "reasoning": "<string>"}}]}}

Rules:
- Do not restate the health score or risk level; they are fixed at {baseline.health_score} and {baseline.risk_level}.
- Flag values that need prompt medical attention.
- Keep recommendations specific and actionable.

Patient: {age}y, {gender}
Biomarkers:
{biomarker_summary}
"""


def _parse_recommendations(raw: object) -> list[Recommendation]:
    if not isinstance(raw, list):
        return []
    parsed = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        priority = item.get("priority")
        if priority not in {"low", "moderate", "high"}:
            priority = "moderate"
        if not item.get("recommendation"):
            continue
        parsed.append(
            Recommendation(
                category=str(item.get("category") or "General"),
                priority=priority,
                recommendation=str(item["recommendation"]),
                reasoning=str(item.get("reasoning") or ""),
                evidence_level="moderate",
            )
        )
    return parsed


class AIHealthAnalyzer:
    """LLM-enriched analysis with response caching, retries and rule-based fallback.

    Score and risk tier always come from the deterministic engine; the model
    only rewrites the narrative fields and adds recommendations.
    """

    def __init__(
        self,
        local_analyzer: LocalHealthAnalyzer,
        cache: AnalysisCache,
        llm_factory: Callable[[str, str], object] | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.local_analyzer = local_analyzer
        self.cache = cache
        self.llm_factory = llm_factory or _default_llm_factory
        self._sleep = sleep

    def get_health_insights(
        self,
        readings: list[BiomarkerReading],
        user_profile: UserProfile | None = None,
        history: list[BiomarkerReading] | None = None,
        force_refresh: bool = False,
    ) -> HealthAnalysisResult:
        key = fingerprint(readings, user_profile, history)
        if not force_refresh:
            cached = self.cache.get(key)
            if cached is not None:
                logger.info("Analysis cache hit")
                return cached.model_copy(update={"cache_hit": True}, deep=True)

        baseline = self.local_analyzer.analyze(readings, user_profile=user_profile, history=history)
        result = self._enrich(readings, baseline, user_profile) or baseline
        self.cache.set(key, result)
        return result.model_copy(deep=True)

    def _enrich(
        self,
        readings: list[BiomarkerReading],
        baseline: HealthAnalysisResult,
        user_profile: UserProfile | None,
    ) -> HealthAnalysisResult | None:
        if not settings.ai_analysis_enabled or not settings.openai_api_key:
            return None
        try:
            llm = self.llm_factory(settings.ai_model, settings.openai_api_key)
        except ImportError:
            logger.warning("llama_index is not installed; using rule-based analysis")
            return None

        started = time.perf_counter()
        payload = self._complete_with_retry(llm, build_prompt(readings, baseline, user_profile))
        if payload is None:
            return None

        key_findings = [str(f) for f in payload.get("keyFindings") or [] if f][:MAX_AI_FINDINGS]
        summary = payload.get("summary")
        return baseline.model_copy(
            update={
                "summary": summary if isinstance(summary, str) and summary.strip() else baseline.summary,
                "key_findings": key_findings or baseline.key_findings,
                "recommendations": baseline.recommendations + _parse_recommendations(payload.get("recommendations")),
                "confidence": settings.ai_confidence,
                "model_version": settings.ai_model,
                "processing_time": baseline.processing_time + int((time.perf_counter() - started) * 1000),
            }
        )

    def _complete_with_retry(self, llm, prompt: str) -> dict | None:
        attempts = max(settings.ai_max_attempts, 1)
        for attempt in range(1, attempts + 1):
            try:
                response = llm.complete(prompt)
            except Exception as exc:
                logger.warning("LLM call failed (attempt %d/%d): %s", attempt, attempts, exc)
            else:
                payload = _extract_json_obj(getattr(response, "text", str(response)))
                if payload is not None:
                    return payload
                logger.warning("LLM returned no JSON payload (attempt %d/%d)", attempt, attempts)
            if attempt < attempts:
                self._sleep(settings.ai_retry_backoff_seconds * attempt)
        logger.error("LLM analysis failed after %d attempts; using rule-based analysis", attempts)
        return None
