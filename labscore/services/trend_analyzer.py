from labscore.schemas.analysis import Trend, TrendDirection
from labscore.schemas.biomarker import BiomarkerReading
from labscore.services.catalog import ReferenceCatalog

STABLE_THRESHOLD_PERCENT = 5.0
TREND_CONFIDENCE = 0.7


def compute_delta(prev: float | None, curr: float | None) -> float | None:
    if prev is None or curr is None or prev == 0:
        return None
    return ((curr - prev) / abs(prev)) * 100.0


def _distance_from_optimal(catalog: ReferenceCatalog, name: str, value: float) -> float | None:
    reference = catalog.get(name)
    if reference is None or "optimal" not in reference.ranges:
        return None
    low, high = reference.ranges["optimal"]
    if value < low:
        return low - value
    if value > high:
        return value - high
    return 0.0


def _direction(catalog: ReferenceCatalog, previous: BiomarkerReading, current: BiomarkerReading, delta: float) -> TrendDirection:
    if abs(delta) <= STABLE_THRESHOLD_PERCENT:
        return "stable"
    prev_distance = _distance_from_optimal(catalog, previous.name, previous.value)
    curr_distance = _distance_from_optimal(catalog, current.name, current.value)
    if prev_distance is None or curr_distance is None:
        return "declining" if current.is_abnormal else "improving"
    if curr_distance < prev_distance:
        return "improving"
    if curr_distance > prev_distance:
        return "declining"
    return "stable"


def _timeframe(previous: BiomarkerReading, current: BiomarkerReading) -> str:
    prev_date, curr_date = previous.test_date, current.test_date
    if prev_date is None or curr_date is None:
        return "since last test"
    days = abs(curr_date.timestamp() - prev_date.timestamp()) // 86400
    return f"{int(days)} days"


def _latest_by_name(history: list[BiomarkerReading]) -> dict[str, BiomarkerReading]:
    latest: dict[str, BiomarkerReading] = {}
    for reading in sorted(history, key=lambda r: r.test_date.timestamp() if r.test_date else float("-inf")):
        latest[reading.name] = reading
    return latest


def analyze_trends(
    readings: list[BiomarkerReading],
    history: list[BiomarkerReading] | None,
    catalog: ReferenceCatalog,
) -> list[Trend]:
    if not history:
        return []

    previous_by_name = _latest_by_name(history)
    trends = []
    seen = set()
    for current in readings:
        if current.name in seen:
            continue
        seen.add(current.name)
        previous = previous_by_name.get(current.name)
        if previous is None:
            continue
        delta = compute_delta(previous.value, current.value)
        if delta is None:
            continue
        trends.append(
            Trend(
                biomarker=current.name,
                direction=_direction(catalog, previous, current, delta),
                change_percent=round(delta, 2),
                timeframe=_timeframe(previous, current),
                confidence=TREND_CONFIDENCE,
            )
        )
    return trends
