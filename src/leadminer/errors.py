"""
LeadMiner exception hierarchy.

Extractors never raise on missing review data and digest delivery never
raises; everything below is surfaced to the caller (the CLI maps them to
exit code 1).
"""


class LeadMinerError(Exception):
    """Base class for all LeadMiner errors."""
    pass


class RecordValidationError(LeadMinerError):
    """A raw business record is missing required identity fields."""
    pass


class LeadStoreError(LeadMinerError):
    """Reading or writing a persisted lead file failed."""
    pass


class ApifyError(LeadMinerError):
    """Scraping provider not configured or request failed."""
    pass


class NoLeadsError(LeadMinerError):
    """Acquisition returned no records; nothing to process."""
    pass


class PipelineError(LeadMinerError):
    """A pipeline stage failed; the run produced no complete artifact set."""

    def __init__(self, stage: str, message: str):
        self.stage = stage
        super().__init__(f"Stage '{stage}' failed: {message}")
