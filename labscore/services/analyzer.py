"""Deterministic rule-based health analysis.

Readings flow one way: classification of abnormal values, per-system review,
score aggregation and recommendations, then assembly into one
``HealthAnalysisResult``. The analyzer holds only the injected catalog, so a
single instance can serve concurrent requests.
"""
import logging
import math
import time

from labscore.errors import InvalidReading, NoDataAvailable
from labscore.schemas.analysis import AbnormalValue, HealthAnalysisResult, SystemReviews, UserProfile
from labscore.schemas.biomarker import BiomarkerReading
from labscore.services.catalog import ReferenceCatalog
from labscore.services.classifier import identify_abnormal_values
from labscore.services.recommendations import generate_recommendations
from labscore.services.scoring import assess_risk_level, calculate_health_score, letter_grade
from labscore.services.system_review import review_all_systems
from labscore.services.trend_analyzer import analyze_trends

logger = logging.getLogger(__name__)

MAX_KEY_FINDINGS_VALUES = 5
COMPREHENSIVE_PANEL_SIZE = 15
RULE_BASED_CONFIDENCE = 0.9
ALL_NORMAL_FINDING = "All major biomarkers within normal ranges"


def validate_reading(reading: BiomarkerReading) -> None:
    if not math.isfinite(reading.value):
        raise InvalidReading(reading.name, reading.value)


def partition_readings(readings: list[BiomarkerReading]) -> tuple[list[BiomarkerReading], list[InvalidReading]]:
    valid = []
    rejected = []
    for reading in readings:
        try:
            validate_reading(reading)
        except InvalidReading as exc:
            logger.warning("Skipping reading: %s", exc)
            rejected.append(exc)
            continue
        valid.append(reading)
    return valid, rejected


def _format_number(value: float) -> str:
    return f"{value:g}"


def generate_key_findings(abnormal_values: list[AbnormalValue], system_reviews: SystemReviews) -> list[str]:
    findings = [
        f"{v.biomarker}: {_format_number(v.value)} {v.unit} ({v.concern})"
        for v in abnormal_values[:MAX_KEY_FINDINGS_VALUES]
    ]
    for system, review in system_reviews.items():
        if review.status == "ABNORMAL":
            findings.append(f"{system.label} system needs attention")
    return findings or [ALL_NORMAL_FINDING]


def generate_summary(health_score: int, abnormal_count: int) -> str:
    grade = letter_grade(health_score)
    if abnormal_count == 0:
        return (
            f"Excellent health profile (Grade {grade}) with all major biomarkers within optimal ranges. "
            "Continue current health practices and maintain regular monitoring schedule. "
            f"Your health score of {health_score} indicates strong overall wellness."
        )
    if abnormal_count <= 2:
        return (
            f"Good health profile (Grade {grade}) with {abnormal_count} biomarker(s) requiring attention. "
            "Focus on targeted interventions for identified areas while maintaining overall healthy practices. "
            f"Health score: {health_score}."
        )
    return (
        f"Health profile (Grade {grade}) shows {abnormal_count} biomarkers outside normal ranges requiring "
        "comprehensive intervention. Recommend healthcare provider consultation and systematic approach to "
        f"address identified issues. Health score: {health_score}."
    )


class LocalHealthAnalyzer:
    def __init__(self, catalog: ReferenceCatalog):
        self.catalog = catalog

    def analyze(
        self,
        readings: list[BiomarkerReading],
        user_profile: UserProfile | None = None,
        history: list[BiomarkerReading] | None = None,
    ) -> HealthAnalysisResult:
        started = time.perf_counter()
        valid, rejected = partition_readings(readings)
        if not valid:
            raise NoDataAvailable()

        logger.info("Analyzing %d biomarkers with the local rules engine", len(valid))

        abnormal_values = identify_abnormal_values(valid, self.catalog)
        system_reviews = review_all_systems(valid)
        health_score = calculate_health_score(system_reviews, len(abnormal_values), len(valid))
        risk_level = assess_risk_level(health_score, abnormal_values)

        result = HealthAnalysisResult(
            health_score=health_score,
            risk_level=risk_level,
            key_findings=generate_key_findings(abnormal_values, system_reviews),
            abnormal_values=abnormal_values,
            system_reviews=system_reviews,
            recommendations=generate_recommendations(abnormal_values, system_reviews),
            trends=analyze_trends(valid, history, self.catalog),
            summary=generate_summary(health_score, len(abnormal_values)),
            confidence=RULE_BASED_CONFIDENCE,
            data_completeness=min(len(valid) / COMPREHENSIVE_PANEL_SIZE, 1.0),
            processing_time=int((time.perf_counter() - started) * 1000),
            invalid_readings=[exc.biomarker_name for exc in rejected],
        )
        logger.info("Local analysis finished: score=%d risk=%s", result.health_score, result.risk_level)
        return result
