from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from labscore.database import get_db
from labscore.models.biomarker import BiomarkerReferenceRecord, BiomarkerValueRecord
from labscore.schemas.biomarker import BiomarkerCatalogItem, BiomarkerHistoryPoint

router = APIRouter(prefix="/api/biomarkers", tags=["biomarkers"])


@router.get("/catalog")
def catalog(db: Session = Depends(get_db)):
    rows = db.query(BiomarkerReferenceRecord).order_by(BiomarkerReferenceRecord.category, BiomarkerReferenceRecord.standard_name).all()
    items = [
        BiomarkerCatalogItem(
            id=row.id,
            standard_name=row.standard_name,
            category=row.category,
            description=row.description,
            typical_unit=row.typical_unit,
            typical_range=row.typical_range,
        ).model_dump()
        for row in rows
    ]
    return {"statusCode": 200, "message": "Success", "data": items}


@router.get("/{user_id}/history")
def history(user_id: str, db: Session = Depends(get_db)):
    rows = (
        db.query(BiomarkerValueRecord)
        .filter(BiomarkerValueRecord.user_id == user_id)
        .order_by(BiomarkerValueRecord.test_date.is_(None).desc(), BiomarkerValueRecord.test_date.asc(), BiomarkerValueRecord.id.asc())
        .all()
    )
    points = [
        BiomarkerHistoryPoint(
            name=row.name,
            value=row.value,
            unit=row.unit,
            reference_range=row.reference_range,
            is_abnormal=row.is_abnormal,
            test_date=row.test_date.isoformat() if row.test_date else None,
        ).model_dump()
        for row in rows
    ]
    return {"statusCode": 200, "message": "Success", "data": points}
