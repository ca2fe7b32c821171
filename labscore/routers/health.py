import json
import logging
import math
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from labscore.database import get_db
from labscore.models.biomarker import BiomarkerValueRecord
from labscore.models.health_insight import HealthInsightRecord
from labscore.routers.deps import get_health_analyzer
from labscore.schemas.analysis import AnalyzeRequest, HealthAnalysisResult
from labscore.schemas.biomarker import BiomarkerReading
from labscore.services.ai_analyzer import AIHealthAnalyzer

router = APIRouter(prefix="/api/health", tags=["health"])
logger = logging.getLogger(__name__)


def _load_history(db: Session, user_id: str) -> list[BiomarkerReading]:
    rows = db.query(BiomarkerValueRecord).filter(BiomarkerValueRecord.user_id == user_id).all()
    return [
        BiomarkerReading(
            name=row.name,
            value=row.value,
            unit=row.unit or "",
            reference_range=row.reference_range,
            is_abnormal=row.is_abnormal,
            test_date=row.test_date,
        )
        for row in rows
    ]


def _store_readings(db: Session, user_id: str, readings: list[BiomarkerReading]) -> None:
    for reading in readings:
        if not math.isfinite(reading.value):
            continue
        db.add(
            BiomarkerValueRecord(
                user_id=user_id,
                name=reading.name,
                value=reading.value,
                unit=reading.unit,
                reference_range=reading.reference_range,
                is_abnormal=reading.is_abnormal,
                test_date=reading.test_date,
            )
        )


def _upsert_insight(db: Session, user_id: str, result: HealthAnalysisResult) -> None:
    payload = result.model_dump_json()
    insight = db.query(HealthInsightRecord).filter(HealthInsightRecord.user_id == user_id).first()
    if insight is None:
        insight = HealthInsightRecord(user_id=user_id)
    insight.health_score = result.health_score
    insight.risk_level = result.risk_level
    insight.summary = result.summary
    insight.confidence = result.confidence
    insight.model_version = result.model_version
    insight.processing_time = result.processing_time
    insight.payload = payload
    insight.updated_at = datetime.utcnow()
    db.add(insight)


@router.post("/analyze")
def analyze(
    payload: AnalyzeRequest,
    db: Session = Depends(get_db),
    analyzer: AIHealthAnalyzer = Depends(get_health_analyzer),
):
    history = _load_history(db, payload.user_id) if payload.user_id else None
    result = analyzer.get_health_insights(
        payload.readings,
        user_profile=payload.user_profile,
        history=history,
        force_refresh=payload.force_refresh,
    )

    if payload.user_id:
        _store_readings(db, payload.user_id, payload.readings)
        _upsert_insight(db, payload.user_id, result)
        db.commit()
        logger.info("Stored %d readings and latest insight for user %s", len(payload.readings), payload.user_id)

    return {
        "statusCode": 200,
        "message": "Analysis completed",
        "data": result.model_dump(mode="json"),
        "metadata": {
            "total_biomarkers": len(payload.readings),
            "abnormal_count": len(result.abnormal_values),
            "history_points": len(history) if history else 0,
        },
    }


@router.get("/insights/{user_id}")
def latest_insight(user_id: str, db: Session = Depends(get_db)):
    insight = db.query(HealthInsightRecord).filter(HealthInsightRecord.user_id == user_id).first()
    if not insight:
        raise HTTPException(status_code=404, detail="No health insight found")
    return {
        "statusCode": 200,
        "message": "Success",
        "data": {
            **json.loads(insight.payload),
            "updated_at": insight.updated_at.isoformat(),
        },
    }
