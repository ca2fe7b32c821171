from dataclasses import dataclass

from labscore.schemas.analysis import SystemReview, SystemReviews
from labscore.schemas.biomarker import BiomarkerReading, BodySystem


@dataclass(frozen=True)
class SystemRule:
    key_markers: tuple[str, ...]
    penalty: int
    # Abnormal count above which the system escalates to ABNORMAL; None never escalates.
    escalate_above: int | None
    finding_template: str
    normal_finding: str
    abnormal_recommendations: tuple[str, ...]
    normal_recommendations: tuple[str, ...]
    risk_factor_template: str


SYSTEM_RULES: dict[BodySystem, SystemRule] = {
    BodySystem.CARDIOVASCULAR: SystemRule(
        key_markers=("Total Cholesterol", "LDL Cholesterol", "HDL Cholesterol", "Triglycerides"),
        penalty=25,
        escalate_above=2,
        finding_template="Elevated {name}: {value} {unit}",
        normal_finding="Lipid profile within normal ranges",
        abnormal_recommendations=(
            "Heart-healthy diet (Mediterranean style)",
            "Regular aerobic exercise (150 min/week)",
            "Consider lipid medication if indicated",
        ),
        normal_recommendations=(
            "Maintain current cardiovascular health practices",
            "Regular exercise continuation",
        ),
        risk_factor_template="{tag}",
    ),
    BodySystem.METABOLIC: SystemRule(
        key_markers=("Glucose", "Hemoglobin A1C", "Triglycerides"),
        penalty=30,
        escalate_above=1,
        finding_template="{name} elevated: {value} {unit}",
        normal_finding="Glucose metabolism appears normal",
        abnormal_recommendations=(
            "Weight management if indicated",
            "Reduce refined carbohydrates",
            "Regular blood sugar monitoring",
        ),
        normal_recommendations=("Maintain healthy weight", "Continue balanced diet"),
        risk_factor_template="{tag}",
    ),
    BodySystem.HEPATIC: SystemRule(
        key_markers=("ALT", "AST", "Bilirubin", "Alkaline Phosphatase"),
        penalty=35,
        escalate_above=None,
        finding_template="Elevated {name}: {value} {unit}",
        normal_finding="Liver function markers within normal range",
        abnormal_recommendations=(
            "Limit alcohol consumption",
            "Review medications",
            "Consider hepatology consultation",
        ),
        normal_recommendations=("Continue liver-healthy practices", "Moderate alcohol intake"),
        risk_factor_template="elevated_{tag}",
    ),
    BodySystem.RENAL: SystemRule(
        key_markers=("Creatinine", "BUN", "eGFR"),
        penalty=40,
        escalate_above=None,
        finding_template="{name} abnormal: {value} {unit}",
        normal_finding="Kidney function appears normal",
        abnormal_recommendations=(
            "Increase water intake",
            "Monitor blood pressure",
            "Consider nephrology referral",
        ),
        normal_recommendations=("Maintain adequate hydration", "Regular blood pressure monitoring"),
        risk_factor_template="impaired_{tag}",
    ),
    BodySystem.HEMATOLOGIC: SystemRule(
        key_markers=("Hemoglobin", "Hematocrit", "White Blood Cells", "Platelets", "Vitamin B12"),
        penalty=25,
        escalate_above=None,
        finding_template="{name} abnormal: {value} {unit}",
        normal_finding="Blood parameters within normal range",
        abnormal_recommendations=(
            "Iron-rich diet if anemic",
            "B12/folate supplementation if low",
            "Hematology consultation if severe",
        ),
        normal_recommendations=("Continue balanced nutrition", "Regular blood monitoring"),
        risk_factor_template="{tag}",
    ),
    BodySystem.ENDOCRINE: SystemRule(
        key_markers=("TSH", "T3", "T4", "Vitamin D", "Testosterone", "Estradiol"),
        penalty=30,
        escalate_above=None,
        finding_template="{name} abnormal: {value} {unit}",
        normal_finding="Endocrine function appears normal",
        abnormal_recommendations=(
            "Endocrinology consultation",
            "Hormone optimization",
            "Vitamin D supplementation if low",
        ),
        normal_recommendations=("Continue healthy lifestyle", "Regular hormone monitoring"),
        risk_factor_template="{tag}_imbalance",
    ),
}

NO_DATA_FINDING = "No data available for this system"


def _risk_tag(name: str) -> str:
    return "_".join(name.lower().split())


def _format_value(value: float) -> str:
    return f"{value:g}"


def _dedupe(items) -> list[str]:
    return list(dict.fromkeys(items))


def review_system(readings: list[BiomarkerReading], system: BodySystem) -> SystemReview:
    rule = SYSTEM_RULES[system]
    markers = [reading for reading in readings if reading.name in rule.key_markers]
    if not markers:
        return SystemReview(status="NORMAL", findings=[NO_DATA_FINDING], recommendations=[], risk_factors=[], score=100)

    abnormal = [reading for reading in markers if reading.is_abnormal]
    score = max(100 - len(abnormal) * rule.penalty, 0)

    if not abnormal:
        status = "NORMAL"
    elif rule.escalate_above is not None and len(abnormal) > rule.escalate_above:
        status = "ABNORMAL"
    else:
        status = "NEEDS_ATTENTION"

    if abnormal:
        findings = [
            rule.finding_template.format(name=r.name, value=_format_value(r.value), unit=r.unit).rstrip()
            for r in abnormal
        ]
        recommendations = _dedupe(rule.abnormal_recommendations)
    else:
        findings = [rule.normal_finding]
        recommendations = _dedupe(rule.normal_recommendations)

    return SystemReview(
        status=status,
        findings=findings,
        recommendations=recommendations,
        risk_factors=_dedupe(rule.risk_factor_template.format(tag=_risk_tag(r.name)) for r in abnormal),
        score=score,
    )


def review_all_systems(readings: list[BiomarkerReading]) -> SystemReviews:
    return SystemReviews(**{system.value: review_system(readings, system) for system in BodySystem})
