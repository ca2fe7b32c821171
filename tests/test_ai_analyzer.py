import json

import pytest

from labscore.config import settings
from labscore.errors import NoDataAvailable
from labscore.services.ai_analyzer import AIHealthAnalyzer
from labscore.services.cache import AnalysisCache, fingerprint


class FakeResponse:
    def __init__(self, text: str):
        self.text = text


class FakeLLM:
    def __init__(self, responses):
        self.responses = list(responses)
        self.prompts = []

    def complete(self, prompt: str):
        self.prompts.append(prompt)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return FakeResponse(response)


@pytest.fixture()
def llm_enabled(monkeypatch):
    monkeypatch.setattr(settings, "openai_api_key", "test-key")
    monkeypatch.setattr(settings, "ai_analysis_enabled", True)
    monkeypatch.setattr(settings, "ai_max_attempts", 3)


def _analyzer(local_analyzer, llm=None, cache=None):
    sleeps = []
    analyzer = AIHealthAnalyzer(
        local_analyzer=local_analyzer,
        cache=cache or AnalysisCache(ttl_seconds=600),
        llm_factory=(lambda model, api_key: llm) if llm else None,
        sleep=sleeps.append,
    )
    return analyzer, sleeps


def test_fingerprint_is_order_independent(reading):
    a = [reading("Glucose", 95), reading("ALT", 30)]
    assert fingerprint(a) == fingerprint(list(reversed(a)))
    assert fingerprint(a) != fingerprint([reading("Glucose", 96), reading("ALT", 30)])


def test_cache_expires_entries_on_read(local_analyzer, reading):
    now = [0.0]
    cache = AnalysisCache(ttl_seconds=10, clock=lambda: now[0])
    result = local_analyzer.analyze([reading("Glucose", 95)])
    cache.set("key", result)
    assert cache.get("key") is result
    now[0] = 11.0
    assert cache.get("key") is None
    assert len(cache) == 0


def test_without_llm_uses_rules_and_caches(local_analyzer, reading):
    analyzer, _ = _analyzer(local_analyzer)
    readings = [reading("Glucose", 95)]

    first = analyzer.get_health_insights(readings)
    second = analyzer.get_health_insights(list(readings))
    refreshed = analyzer.get_health_insights(readings, force_refresh=True)

    assert first.model_version == "local-rules"
    assert first.cache_hit is False
    assert second.cache_hit is True
    assert second.health_score == first.health_score
    assert refreshed.cache_hit is False


def test_llm_enriches_narrative_but_not_score(local_analyzer, reading, llm_enabled):
    payload = {
        "summary": "Blood sugar is high.",
        "keyFindings": ["Glucose markedly elevated"],
        "recommendations": [
            {"category": "Metabolic", "priority": "high", "recommendation": "See a doctor", "reasoning": "High glucose"}
        ],
    }
    llm = FakeLLM([f"Here you go: {json.dumps(payload)}"])
    analyzer, _ = _analyzer(local_analyzer, llm)
    baseline = local_analyzer.analyze([reading("Glucose", 250, is_abnormal=True)])

    result = analyzer.get_health_insights([reading("Glucose", 250, is_abnormal=True)])

    assert result.health_score == baseline.health_score
    assert result.risk_level == "CRITICAL"
    assert result.summary == "Blood sugar is high."
    assert result.key_findings == ["Glucose markedly elevated"]
    assert result.recommendations[-1].recommendation == "See a doctor"
    assert result.confidence == settings.ai_confidence
    assert result.model_version == settings.ai_model
    assert "Glucose: 250 mg/dL [ABNORMAL]" in llm.prompts[0]


def test_llm_retries_with_backoff(local_analyzer, reading, llm_enabled):
    llm = FakeLLM([RuntimeError("throttled"), "not json", json.dumps({"summary": "ok"})])
    analyzer, sleeps = _analyzer(local_analyzer, llm)

    result = analyzer.get_health_insights([reading("Glucose", 95)])

    assert result.summary == "ok"
    assert len(llm.prompts) == 3
    assert sleeps == [settings.ai_retry_backoff_seconds * 1, settings.ai_retry_backoff_seconds * 2]


def test_llm_failure_falls_back_to_rules(local_analyzer, reading, llm_enabled):
    llm = FakeLLM([RuntimeError("down")] * 3)
    analyzer, _ = _analyzer(local_analyzer, llm)

    result = analyzer.get_health_insights([reading("Glucose", 95)])

    assert result.model_version == "local-rules"
    assert result.confidence == 0.9


def test_no_data_propagates(local_analyzer):
    analyzer, _ = _analyzer(local_analyzer)
    with pytest.raises(NoDataAvailable):
        analyzer.get_health_insights([])


def test_fingerprint_separates_abnormal_flag(reading):
    assert fingerprint([reading("Glucose", 130, is_abnormal=False)]) != fingerprint(
        [reading("Glucose", 130, is_abnormal=True)]
    )


def test_fingerprint_separates_history(reading):
    current = [reading("LDL Cholesterol", 110)]
    assert fingerprint(current) == fingerprint(current, history=[])
    assert fingerprint(current) != fingerprint(current, history=[reading("LDL Cholesterol", 190)])
    assert fingerprint(current, history=[reading("LDL Cholesterol", 190)]) != fingerprint(
        current, history=[reading("LDL Cholesterol", 150)]
    )


def test_flipped_flag_is_not_served_from_cache(local_analyzer, reading):
    analyzer, _ = _analyzer(local_analyzer)

    normal = analyzer.get_health_insights([reading("Glucose", 130)])
    flagged = analyzer.get_health_insights([reading("Glucose", 130, is_abnormal=True)])

    assert flagged.cache_hit is False
    assert normal.risk_level == "LOW"
    assert flagged.risk_level == "CRITICAL"
    assert flagged.health_score < normal.health_score


def test_history_is_not_served_from_cache(local_analyzer, reading):
    analyzer, _ = _analyzer(local_analyzer)
    current = [reading("LDL Cholesterol", 110, is_abnormal=True)]

    with_history = analyzer.get_health_insights(current, history=[reading("LDL Cholesterol", 190, is_abnormal=True)])
    without_history = analyzer.get_health_insights(current, history=[])

    assert [t.biomarker for t in with_history.trends] == ["LDL Cholesterol"]
    assert without_history.cache_hit is False
    assert without_history.trends == []


def test_cache_drops_expired_entries_on_write(local_analyzer, reading):
    now = [0.0]
    cache = AnalysisCache(ttl_seconds=10, clock=lambda: now[0])
    result = local_analyzer.analyze([reading("Glucose", 95)])
    cache.set("old-1", result)
    cache.set("old-2", result)
    now[0] = 11.0
    cache.set("fresh", result)
    assert len(cache) == 1
    assert cache.get("fresh") is result


def test_cached_result_is_isolated_from_callers(local_analyzer, reading):
    analyzer, _ = _analyzer(local_analyzer)
    readings = [reading("Total Cholesterol", 220, is_abnormal=True)]

    first = analyzer.get_health_insights(readings)
    first.key_findings.append("tampered")
    first.recommendations.clear()
    second = analyzer.get_health_insights(readings)
    second.system_reviews.cardiovascular.findings.append("tampered")
    third = analyzer.get_health_insights(readings)

    assert third.cache_hit is True
    assert "tampered" not in third.key_findings
    assert [r.category for r in third.recommendations] == ["Cardiovascular", "Medical", "Monitoring"]
    assert third.system_reviews.cardiovascular.findings == ["Elevated Total Cholesterol: 220 mg/dL"]
