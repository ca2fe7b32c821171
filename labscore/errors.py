class AnalysisError(Exception):
    """Base class for failures raised by the health analysis engine."""


class NoDataAvailable(AnalysisError):
    def __init__(self, message: str = "No biomarker data available for analysis"):
        super().__init__(message)


class InvalidReading(AnalysisError):
    """A single reading that cannot be scored, e.g. a NaN or infinite value."""

    def __init__(self, biomarker_name: str, value: object):
        self.biomarker_name = biomarker_name
        self.value = value
        super().__init__(f"Invalid value for {biomarker_name}: {value!r}")
