"""
Harmonic Analysis Errors

Local, recoverable failures raised by the detection pipeline. The scanner
turns each of these into a per-cycle status or a skipped-window counter;
none of them is fatal to a scan of another (symbol, timeframe).
"""


class HarmonicAnalysisError(Exception):
    """Base class for detection pipeline errors."""


class InsufficientData(HarmonicAnalysisError):
    """Not enough candles or swing points to form a pattern window."""

    def __init__(self, message: str, available: int = 0, required: int = 0):
        super().__init__(message)
        self.available = available
        self.required = required


class UndefinedRatio(HarmonicAnalysisError):
    """A leg ratio's reference leg has zero price distance."""

    def __init__(self, leg: str):
        super().__init__(f"Reference leg for {leg} has zero price distance")
        self.leg = leg
