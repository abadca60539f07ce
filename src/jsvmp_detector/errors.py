"""Exception types for the detection run.

Configuration and input errors abort a run before any batch is sent.
Per-batch failures never escape the batch processor; only a run where
every batch failed surfaces as ``AllBatchesFailedError``.
"""

from __future__ import annotations


class DetectionError(Exception):
    """Base class for errors raised by the detector."""


class ConfigurationError(DetectionError):
    """No usable model backend is configured."""


class InputFileError(DetectionError):
    """The file to analyze does not exist or is not a file."""


class ResponseParseError(DetectionError, ValueError):
    """A model response is not valid detection JSON."""


class AllBatchesFailedError(DetectionError):
    """Every batch of a run failed; carries each batch's error."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__(f"All batches failed: {'; '.join(self.errors)}")
