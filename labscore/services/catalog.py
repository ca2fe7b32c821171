from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from labscore.schemas.biomarker import Band, BiomarkerReference
from labscore.seed.biomarker_catalog import BIOMARKERS

# Checked most severe first so a value sitting on a shared bound lands in the worse band.
_BAND_PRECEDENCE: tuple[Band, ...] = ("high", "low", "borderline", "optimal")


class ReferenceCatalog:
    """Read-only biomarker lookup keyed by exact display name."""

    def __init__(self, references: Iterable[BiomarkerReference]):
        entries = {}
        for reference in references:
            entries[reference.name] = reference
        self._entries: Mapping[str, BiomarkerReference] = MappingProxyType(entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[BiomarkerReference]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, name: str) -> BiomarkerReference | None:
        return self._entries.get(name)

    def band_for(self, name: str, value: float) -> Band | None:
        reference = self._entries.get(name)
        if reference is None:
            return None
        for band in _BAND_PRECEDENCE:
            bounds = reference.ranges.get(band)
            if bounds and bounds[0] <= value <= bounds[1]:
                return band
        return None


def build_reference_catalog(records: Iterable[dict] | None = None) -> ReferenceCatalog:
    if records is None:
        records = BIOMARKERS
    return ReferenceCatalog(BiomarkerReference(**record) for record in records)
