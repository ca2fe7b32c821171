import math
from fractions import Fraction

from labscore.errors import NoDataAvailable
from labscore.schemas.analysis import AbnormalValue, RiskLevel, SystemReviews

SYSTEM_WEIGHT = Fraction(3, 5)
ABNORMAL_WEIGHT = Fraction(2, 5)
ABNORMAL_PENALTY_SCALE = 40

GRADE_CUTOFFS = ((90, "A"), (80, "B"), (70, "C"), (60, "D"))


def round_half_up(value: Fraction) -> int:
    return math.floor(value + Fraction(1, 2))


def calculate_health_score(system_reviews: SystemReviews, abnormal_count: int, total_count: int) -> int:
    """Blend the mean system score (60%) with the share of normal readings (40%).

    Computed with exact fractions and rounded half up, so a blended 89.5
    becomes 90 rather than depending on float representation.
    """
    if total_count <= 0:
        raise NoDataAvailable()

    scores = system_reviews.scores()
    avg_system_score = Fraction(sum(scores), len(scores))
    abnormal_penalty = Fraction(abnormal_count, total_count) * ABNORMAL_PENALTY_SCALE
    blended = avg_system_score * SYSTEM_WEIGHT + (100 - abnormal_penalty) * ABNORMAL_WEIGHT
    return max(min(round_half_up(blended), 100), 0)


def assess_risk_level(health_score: int, abnormal_values: list[AbnormalValue]) -> RiskLevel:
    if any(value.urgency == "urgent" for value in abnormal_values):
        return "CRITICAL"
    if health_score < 60:
        return "HIGH"
    if health_score < 80 or len(abnormal_values) > 3:
        return "MODERATE"
    return "LOW"


def letter_grade(health_score: int) -> str:
    for cutoff, grade in GRADE_CUTOFFS:
        if health_score >= cutoff:
            return grade
    return "F"
