from labscore.schemas.analysis import AbnormalValue, Recommendation, SystemReviews

MEDICAL_FOLLOW_UP = Recommendation(
    category="Medical",
    priority="high",
    recommendation="Schedule comprehensive health assessment with healthcare provider",
    reasoning="Multiple biomarkers outside normal range require professional evaluation",
    evidence_level="high",
    timeline="Within 2 weeks",
    estimated_cost="$200-600",
    difficulty="Easy",
)

ROUTINE_MONITORING = Recommendation(
    category="Monitoring",
    priority="moderate",
    recommendation="Implement regular biomarker tracking every 3-6 months",
    reasoning="Consistent monitoring enables early detection and progress tracking",
    evidence_level="moderate",
    timeline="Ongoing",
    estimated_cost="$150-400 per test",
    difficulty="Easy",
)


def generate_recommendations(abnormal_values: list[AbnormalValue], system_reviews: SystemReviews) -> list[Recommendation]:
    recommendations = []
    for system, review in system_reviews.items():
        if review.status == "NORMAL" or not review.recommendations:
            continue
        escalated = review.status == "ABNORMAL"
        recommendations.append(
            Recommendation(
                category=system.label,
                priority="high" if escalated else "moderate",
                recommendation=review.recommendations[0],
                reasoning=f"{system.value} system shows abnormalities requiring intervention",
                evidence_level="high",
                timeline="2-4 weeks" if escalated else "1-3 months",
                estimated_cost="$100-500",
                difficulty="Moderate",
            )
        )

    if abnormal_values:
        recommendations.append(MEDICAL_FOLLOW_UP)
    recommendations.append(ROUTINE_MONITORING)
    return recommendations
