import hashlib
import json
import threading
import time
from collections.abc import Callable

from labscore.schemas.analysis import HealthAnalysisResult, UserProfile
from labscore.schemas.biomarker import BiomarkerReading


def _reading_key(reading: BiomarkerReading) -> str:
    return json.dumps(reading.model_dump(mode="json"), sort_keys=True)


def fingerprint(
    readings: list[BiomarkerReading],
    user_profile: UserProfile | None = None,
    history: list[BiomarkerReading] | None = None,
) -> str:
    """Order-independent cache key over every input that shapes the result.

    Each reading contributes all of its fields (flag, unit and date included),
    and the prior readings that drive trends are part of the key.
    """
    key_data = {
        "biomarkers": sorted(_reading_key(r) for r in readings),
        "history": sorted(_reading_key(r) for r in history or []),
        "profile": user_profile.model_dump(mode="json") if user_profile else None,
    }
    return hashlib.sha256(json.dumps(key_data, sort_keys=True).encode("utf-8")).hexdigest()


class AnalysisCache:
    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[HealthAnalysisResult, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> HealthAnalysisResult | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            result, stored_at = entry
            if self._clock() - stored_at > self.ttl_seconds:
                del self._entries[key]
                return None
            return result

    def set(self, key: str, result: HealthAnalysisResult) -> None:
        with self._lock:
            now = self._clock()
            expired = [k for k, (_, stored_at) in self._entries.items() if now - stored_at > self.ttl_seconds]
            for stale_key in expired:
                del self._entries[stale_key]
            self._entries[key] = (result, now)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
