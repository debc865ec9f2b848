"""
Error taxonomy for the smart import flow.

Only the plan stage can fail an import. Extraction anomalies are recovered
per row and merging is total, so neither has an exception type here.
"""


class SmartImportError(Exception):
    """Base class for failures that abort a smart import without side effects."""


class PlanRequestFailure(SmartImportError):
    """The provider call that produces the import plan failed."""


class PlanMalformed(SmartImportError):
    """The provider answered, but nothing in the answer parses as a JSON object."""

    def __init__(self, message: str, raw_output: str = ""):
        super().__init__(message)
        self.raw_output = raw_output
