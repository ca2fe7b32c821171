from labscore.models.biomarker import BiomarkerReferenceRecord, BiomarkerValueRecord
from labscore.models.health_insight import HealthInsightRecord

__all__ = [
    "BiomarkerReferenceRecord",
    "BiomarkerValueRecord",
    "HealthInsightRecord",
]
