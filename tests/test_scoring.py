from fractions import Fraction

import pytest

from labscore.errors import NoDataAvailable
from labscore.schemas.analysis import AbnormalValue
from labscore.services.recommendations import generate_recommendations
from labscore.services.scoring import (
    assess_risk_level,
    calculate_health_score,
    letter_grade,
    round_half_up,
)
from labscore.services.system_review import review_all_systems


def _abnormal(name: str, urgency: str = "soon") -> AbnormalValue:
    return AbnormalValue(
        biomarker=name,
        value=1,
        unit="",
        reference_range=None,
        concern="Outside normal reference range",
        urgency=urgency,
        clinical_significance="",
    )


def test_round_half_up():
    assert round_half_up(Fraction(179, 2)) == 90
    assert round_half_up(Fraction(181, 2)) == 91
    assert round_half_up(Fraction(8949, 100)) == 89


def test_example_score_rounds_half_up(reading):
    readings = [reading("Total Cholesterol", 220, is_abnormal=True), reading("Glucose", 95)]
    reviews = review_all_systems(readings)
    assert calculate_health_score(reviews, abnormal_count=1, total_count=2) == 90


def test_score_is_clamped_and_bounded(reading):
    names = ["Total Cholesterol", "LDL Cholesterol", "HDL Cholesterol", "Triglycerides", "Glucose",
             "Hemoglobin A1C", "ALT", "AST", "Creatinine", "BUN", "Hemoglobin", "TSH"]
    readings = [reading(n, 1, is_abnormal=True) for n in names]
    score = calculate_health_score(review_all_systems(readings), len(readings), len(readings))
    assert 0 <= score <= 100
    assert score == 45


def test_zero_readings_is_a_precondition_failure(reading):
    with pytest.raises(NoDataAvailable):
        calculate_health_score(review_all_systems([]), 0, 0)


def test_urgent_value_is_always_critical():
    assert assess_risk_level(99, [_abnormal("Glucose", "urgent")]) == "CRITICAL"


@pytest.mark.parametrize(
    "score,abnormal_count,expected",
    [(59, 0, "HIGH"), (60, 0, "MODERATE"), (79, 1, "MODERATE"), (85, 4, "MODERATE"), (85, 3, "LOW"), (80, 0, "LOW")],
)
def test_risk_tiers(score, abnormal_count, expected):
    values = [_abnormal(f"Marker {i}") for i in range(abnormal_count)]
    assert assess_risk_level(score, values) == expected


@pytest.mark.parametrize("score,grade", [(95, "A"), (90, "A"), (89, "B"), (75, "C"), (60, "D"), (59, "F")])
def test_letter_grade(score, grade):
    assert letter_grade(score) == grade


def test_monitoring_recommendation_is_unconditional(reading):
    recommendations = generate_recommendations([], review_all_systems([reading("Glucose", 90)]))
    assert [r.category for r in recommendations] == ["Monitoring"]
    assert "every 3-6 months" in recommendations[0].recommendation


def test_system_recommendations_follow_status(reading):
    readings = [reading(n, 300, is_abnormal=True) for n in ("Total Cholesterol", "LDL Cholesterol", "Triglycerides")]
    readings.append(reading("ALT", 90, is_abnormal=True, unit="U/L"))
    reviews = review_all_systems(readings)
    recommendations = generate_recommendations([_abnormal("ALT")], reviews)

    by_category = {r.category: r for r in recommendations}
    assert [r.category for r in recommendations] == ["Cardiovascular", "Metabolic", "Hepatic", "Medical", "Monitoring"]
    assert by_category["Cardiovascular"].priority == "high"
    assert by_category["Cardiovascular"].timeline == "2-4 weeks"
    assert by_category["Metabolic"].priority == "moderate"
    assert by_category["Hepatic"].timeline == "1-3 months"
    assert by_category["Hepatic"].recommendation == "Limit alcohol consumption"
    assert by_category["Hepatic"].reasoning == "hepatic system shows abnormalities requiring intervention"
    assert by_category["Medical"].timeline == "Within 2 weeks"
