from labscore.database import SessionLocal
from labscore.models.biomarker import BiomarkerReferenceRecord


BIOMARKERS = [
    # Lipid panel
    {
        "name": "Total Cholesterol",
        "unit": "mg/dL",
        "ranges": {"optimal": (0, 200), "borderline": (200, 239), "high": (240, 999)},
        "category": "cardiovascular",
        "significance": "Primary risk factor for coronary heart disease",
        "recommendations": {
            "high": ["Heart-healthy diet", "Regular exercise", "Consider statin therapy"],
            "borderline": ["Dietary modifications", "Increase physical activity"],
        },
    },
    {
        "name": "LDL Cholesterol",
        "unit": "mg/dL",
        "ranges": {"optimal": (0, 100), "borderline": (100, 159), "high": (160, 999)},
        "category": "cardiovascular",
        "significance": "Bad cholesterol - primary target for lipid-lowering therapy",
        "recommendations": {
            "high": ["Statin therapy consideration", "Intensive lifestyle changes"],
            "borderline": ["Dietary fat reduction", "Regular cardio exercise"],
        },
    },
    {
        "name": "HDL Cholesterol",
        "unit": "mg/dL",
        "ranges": {"low": (0, 40), "borderline": (40, 59), "optimal": (60, 999)},
        "category": "cardiovascular",
        "significance": "Good cholesterol - protective against heart disease",
        "recommendations": {
            "low": ["Increase physical activity", "Quit smoking", "Moderate alcohol"],
            "borderline": ["Regular aerobic exercise", "Weight management"],
        },
    },
    {
        "name": "Triglycerides",
        "unit": "mg/dL",
        "ranges": {"optimal": (0, 150), "borderline": (150, 199), "high": (200, 999)},
        "category": "metabolic",
        "significance": "Associated with metabolic syndrome and cardiovascular risk",
        "recommendations": {
            "high": ["Weight loss", "Reduce simple carbohydrates", "Omega-3 supplements"],
            "borderline": ["Dietary modifications", "Regular exercise"],
        },
    },
    # Glucose metabolism
    {
        "name": "Glucose",
        "unit": "mg/dL",
        "ranges": {"optimal": (70, 100), "borderline": (100, 125), "high": (126, 999)},
        "category": "metabolic",
        "significance": "Primary marker for diabetes screening",
        "recommendations": {
            "high": ["Diabetes evaluation", "Dietary counseling", "Weight management"],
            "borderline": ["Pre-diabetes monitoring", "Lifestyle modifications"],
        },
    },
    {
        "name": "Hemoglobin A1C",
        "unit": "%",
        "ranges": {"optimal": (0, 5.7), "borderline": (5.7, 6.4), "high": (6.5, 20)},
        "category": "metabolic",
        "significance": "3-month average blood sugar control",
        "recommendations": {
            "high": ["Diabetes management", "Medication review", "Endocrinologist referral"],
            "borderline": ["Pre-diabetes intervention", "Regular monitoring"],
        },
    },
    # Liver function
    {
        "name": "ALT",
        "unit": "U/L",
        "ranges": {"optimal": (0, 40), "borderline": (40, 80), "high": (80, 999)},
        "category": "hepatic",
        "significance": "Liver enzyme indicating hepatocellular damage",
        "recommendations": {
            "high": ["Liver function evaluation", "Alcohol cessation", "Medication review"],
            "borderline": ["Lifestyle modifications", "Repeat testing"],
        },
    },
    {
        "name": "AST",
        "unit": "U/L",
        "ranges": {"optimal": (0, 40), "borderline": (40, 80), "high": (80, 999)},
        "category": "hepatic",
        "significance": "Liver enzyme, also found in heart and muscle",
        "recommendations": {
            "high": ["Comprehensive liver evaluation", "Cardiac assessment"],
            "borderline": ["Monitor trends", "Lifestyle review"],
        },
    },
    # Kidney function
    {
        "name": "Creatinine",
        "unit": "mg/dL",
        "ranges": {"optimal": (0.6, 1.2), "borderline": (1.2, 2.0), "high": (2.0, 999)},
        "category": "renal",
        "significance": "Kidney function marker",
        "recommendations": {
            "high": ["Nephrology referral", "Blood pressure control", "Medication review"],
            "borderline": ["Monitor kidney function", "Hydration optimization"],
        },
    },
    {
        "name": "BUN",
        "unit": "mg/dL",
        "ranges": {"optimal": (7, 20), "borderline": (20, 30), "high": (30, 999)},
        "category": "renal",
        "significance": "Kidney function and protein metabolism",
        "recommendations": {
            "high": ["Kidney function assessment", "Protein intake review"],
            "borderline": ["Hydration increase", "Monitor trends"],
        },
    },
    # Complete blood count
    {
        "name": "Hemoglobin",
        "unit": "g/dL",
        "ranges": {"low": (0, 12), "optimal": (12, 16), "high": (16, 999)},
        "category": "hematologic",
        "significance": "Oxygen-carrying capacity of blood",
        "recommendations": {
            "low": ["Iron deficiency evaluation", "Dietary iron increase", "B12/folate check"],
            "high": ["Hydration assessment", "Sleep apnea screening"],
        },
    },
    # Thyroid
    {
        "name": "TSH",
        "unit": "mIU/L",
        "ranges": {"low": (0, 0.4), "optimal": (0.4, 4.0), "high": (4.0, 999)},
        "category": "endocrine",
        "significance": "Thyroid stimulating hormone - primary thyroid marker",
        "recommendations": {
            "high": ["Hypothyroidism evaluation", "Thyroid hormone replacement"],
            "low": ["Hyperthyroidism assessment", "Endocrinology referral"],
        },
    },
    # Vitamins
    {
        "name": "Vitamin D",
        "unit": "ng/mL",
        "ranges": {"low": (0, 30), "optimal": (30, 100), "high": (100, 999)},
        "category": "endocrine",
        "significance": "Bone health, immune function, mood regulation",
        "recommendations": {
            "low": ["Vitamin D supplementation", "Sun exposure increase", "Dietary sources"],
            "high": ["Reduce supplementation", "Monitor calcium levels"],
        },
    },
    {
        "name": "Vitamin B12",
        "unit": "pg/mL",
        "ranges": {"low": (0, 300), "optimal": (300, 900), "high": (900, 999)},
        "category": "hematologic",
        "significance": "Nerve function, red blood cell formation",
        "recommendations": {
            "low": ["B12 supplementation", "Dietary B12 increase", "Absorption evaluation"],
            "high": ["Review supplements", "Monitor for underlying conditions"],
        },
    },
]


def _format_range(ranges: dict) -> str | None:
    optimal = ranges.get("optimal")
    if not optimal:
        return None
    low, high = optimal
    return f"{low}-{high}"


def seed_biomarker_catalog():
    db = SessionLocal()
    try:
        existing = {
            row.standard_name: row
            for row in db.query(BiomarkerReferenceRecord).all()
        }
        for item in BIOMARKERS:
            match = existing.get(item["name"])
            if match:
                match.category = item["category"]
                match.description = item["significance"]
                match.typical_unit = item["unit"]
                match.typical_range = _format_range(item["ranges"])
                db.add(match)
                continue

            db.add(
                BiomarkerReferenceRecord(
                    standard_name=item["name"],
                    category=item["category"],
                    description=item["significance"],
                    typical_unit=item["unit"],
                    typical_range=_format_range(item["ranges"]),
                )
            )
        db.commit()
    finally:
        db.close()
