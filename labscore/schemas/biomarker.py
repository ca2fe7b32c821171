from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Band = Literal["optimal", "borderline", "high", "low"]


class BodySystem(str, Enum):
    CARDIOVASCULAR = "cardiovascular"
    METABOLIC = "metabolic"
    HEPATIC = "hepatic"
    RENAL = "renal"
    HEMATOLOGIC = "hematologic"
    ENDOCRINE = "endocrine"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class BiomarkerReading(BaseModel):
    """One lab value from a single test event, as produced by report extraction."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Biomarker display name, matched exactly against the catalog")
    value: float = Field(description="Measured value")
    unit: str = Field(default="", description="Unit as printed on the report")
    reference_range: str | None = Field(default=None, description="Reference range text from the report")
    is_abnormal: bool = Field(default=False, description="Abnormal flag computed upstream")
    test_date: datetime | None = Field(default=None, description="When the sample was taken")


class BiomarkerReference(BaseModel):
    """Static catalog entry describing a biomarker's bands and guidance."""
    model_config = ConfigDict(frozen=True)

    name: str
    unit: str
    category: BodySystem
    significance: str
    ranges: dict[Band, tuple[float, float]]
    recommendations: dict[Band, list[str]] = Field(default_factory=dict)


class BiomarkerCatalogItem(BaseModel):
    id: int
    standard_name: str
    category: str
    description: str | None
    typical_unit: str | None
    typical_range: str | None


class BiomarkerHistoryPoint(BaseModel):
    name: str
    value: float
    unit: str | None
    reference_range: str | None
    is_abnormal: bool
    test_date: str | None
