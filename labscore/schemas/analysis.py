from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from labscore.schemas.biomarker import Band, BiomarkerReading, BodySystem

Urgency = Literal["routine", "soon", "urgent"]
SystemStatus = Literal["NORMAL", "NEEDS_ATTENTION", "ABNORMAL"]
RiskLevel = Literal["LOW", "MODERATE", "HIGH", "CRITICAL"]
Priority = Literal["low", "moderate", "high"]
TrendDirection = Literal["improving", "stable", "declining"]


class Severity(BaseModel):
    model_config = ConfigDict(frozen=True)

    concern: str
    urgency: Urgency


class UserProfile(BaseModel):
    age: int | None = None
    gender: str | None = None
    height: float | None = None
    weight: float | None = None


class AbnormalValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    biomarker: str
    value: float
    unit: str
    reference_range: str | None
    concern: str
    urgency: Urgency
    clinical_significance: str
    band: Band | None = None
    category: BodySystem | None = None


class SystemReview(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: SystemStatus
    findings: list[str]
    recommendations: list[str]
    risk_factors: list[str]
    score: int = Field(ge=0, le=100)


class SystemReviews(BaseModel):
    """Exactly one review per body system."""
    model_config = ConfigDict(frozen=True)

    cardiovascular: SystemReview
    metabolic: SystemReview
    hepatic: SystemReview
    renal: SystemReview
    hematologic: SystemReview
    endocrine: SystemReview

    def items(self) -> list[tuple[BodySystem, SystemReview]]:
        return [(system, getattr(self, system.value)) for system in BodySystem]

    def scores(self) -> list[int]:
        return [review.score for _, review in self.items()]


class Recommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: str
    priority: Priority
    recommendation: str
    reasoning: str
    actionable: bool = True
    evidence_level: Priority = "high"
    timeline: str | None = None
    estimated_cost: str | None = None
    difficulty: str | None = None


class Trend(BaseModel):
    model_config = ConfigDict(frozen=True)

    biomarker: str
    direction: TrendDirection
    change_percent: float
    timeframe: str
    confidence: float


class HealthAnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    health_score: int = Field(ge=0, le=100)
    risk_level: RiskLevel
    key_findings: list[str]
    abnormal_values: list[AbnormalValue]
    system_reviews: SystemReviews
    recommendations: list[Recommendation]
    trends: list[Trend]
    summary: str
    confidence: float
    data_completeness: float
    processing_time: int
    invalid_readings: list[str] = Field(default_factory=list)
    cache_hit: bool = False
    model_version: str = "local-rules"


class AnalyzeRequest(BaseModel):
    user_id: str | None = None
    readings: list[BiomarkerReading]
    user_profile: UserProfile | None = None
    force_refresh: bool = False
