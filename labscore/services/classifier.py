from labscore.schemas.analysis import AbnormalValue, Severity
from labscore.schemas.biomarker import BiomarkerReading
from labscore.services.catalog import ReferenceCatalog

NORMAL_CONCERN = "Within normal range"
GENERIC_CONCERN = "Outside normal reference range"
GENERIC_SIGNIFICANCE = "Biomarker outside normal range requires attention"

CONCERNS = {
    "Total Cholesterol": "Increased cardiovascular disease risk",
    "LDL Cholesterol": "Increased risk of atherosclerosis",
    "HDL Cholesterol": "Reduced cardioprotective benefit",
    "Triglycerides": "Associated with metabolic syndrome",
    "Glucose": "Potential diabetes risk",
    "Creatinine": "Possible kidney function impairment",
    "ALT": "Liver function concern",
    "TSH": "Thyroid function imbalance",
}

URGENT_WATCHLIST = ("glucose", "creatinine", "troponin", "potassium")


def is_urgent_marker(name: str) -> bool:
    lowered = name.lower()
    return any(term in lowered for term in URGENT_WATCHLIST)


def classify(reading: BiomarkerReading) -> Severity:
    if not reading.is_abnormal:
        return Severity(concern=NORMAL_CONCERN, urgency="routine")
    concern = CONCERNS.get(reading.name, GENERIC_CONCERN)
    urgency = "urgent" if is_urgent_marker(reading.name) else "soon"
    return Severity(concern=concern, urgency=urgency)


def describe_abnormal(reading: BiomarkerReading, catalog: ReferenceCatalog) -> AbnormalValue:
    severity = classify(reading)
    reference = catalog.get(reading.name)
    return AbnormalValue(
        biomarker=reading.name,
        value=reading.value,
        unit=reading.unit,
        reference_range=reading.reference_range,
        concern=severity.concern,
        urgency=severity.urgency,
        clinical_significance=reference.significance if reference else GENERIC_SIGNIFICANCE,
        band=catalog.band_for(reading.name, reading.value),
        category=reference.category if reference else None,
    )


def identify_abnormal_values(readings: list[BiomarkerReading], catalog: ReferenceCatalog) -> list[AbnormalValue]:
    return [describe_abnormal(reading, catalog) for reading in readings if reading.is_abnormal]
