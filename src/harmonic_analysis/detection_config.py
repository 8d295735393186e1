"""
Harmonic Detection Configuration

Centralized configuration for the pattern detection pipeline. Supplied by
the caller (scheduler, CLI or environment) and never mutated by a scan.
"""

import os
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class DetectionConfig:
    """
    All configurable parameters for harmonic pattern detection.

    Attributes:
        min_confidence: Minimum 0-100 confidence for a candidate to be emitted.
            Confidence exactly equal to the threshold is emitted. Default 70.
        swing_window: Odd number of candles compared when looking for a local
            extremum. 3 compares each candle with one neighbor per side.
        stop_loss_buffer_pct: Distance of the stop-loss beyond X, as a
            percentage of X's price. Default 1.0 (1%).
        max_candles: Size of the snapshot taken from the tail of the candle
            stream for one scan.
        setup_validity_bars: Number of candles of the pattern's timeframe a
            TradeSetup stays valid after detection.
        prz_tolerance_pct: Half-width of the potential reversal zone around D,
            as a percentage of D's price. Default 1.5.
        project_completions: Whether the scanner projects D for forming
            patterns on the trailing four swings.

    Example:
        >>> config = DetectionConfig.default()
        >>> config.min_confidence
        70.0
        >>> config.with_min_confidence(80).min_confidence
        80.0
    """
    min_confidence: float = 70.0
    swing_window: int = 3
    stop_loss_buffer_pct: float = 1.0
    max_candles: int = 500
    setup_validity_bars: int = 20
    prz_tolerance_pct: float = 1.5
    project_completions: bool = False

    def __post_init__(self) -> None:
        if not 0 <= self.min_confidence <= 100:
            raise ValueError(
                f"min_confidence must be within [0, 100], got {self.min_confidence}"
            )
        if self.swing_window < 3 or self.swing_window % 2 == 0:
            raise ValueError(
                f"swing_window must be an odd number >= 3, got {self.swing_window}"
            )
        if self.stop_loss_buffer_pct < 0:
            raise ValueError("stop_loss_buffer_pct cannot be negative")
        if self.max_candles < self.swing_window:
            raise ValueError("max_candles must be at least swing_window")
        if self.setup_validity_bars < 1:
            raise ValueError("setup_validity_bars must be positive")
        if self.prz_tolerance_pct < 0:
            raise ValueError("prz_tolerance_pct cannot be negative")

    @classmethod
    def default(cls) -> "DetectionConfig":
        """Create a config with default values."""
        return cls()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DetectionConfig":
        """
        Build a config from HARMONIC_* environment variables.

        Unset variables keep their defaults. Recognized names:
        HARMONIC_MIN_CONFIDENCE, HARMONIC_SWING_WINDOW,
        HARMONIC_STOP_LOSS_BUFFER_PCT, HARMONIC_MAX_CANDLES,
        HARMONIC_SETUP_VALIDITY_BARS, HARMONIC_PRZ_TOLERANCE_PCT,
        HARMONIC_PROJECT_COMPLETIONS.
        """
        env = os.environ if environ is None else environ
        overrides: dict = {}

        float_fields = {
            "HARMONIC_MIN_CONFIDENCE": "min_confidence",
            "HARMONIC_STOP_LOSS_BUFFER_PCT": "stop_loss_buffer_pct",
            "HARMONIC_PRZ_TOLERANCE_PCT": "prz_tolerance_pct",
        }
        int_fields = {
            "HARMONIC_SWING_WINDOW": "swing_window",
            "HARMONIC_MAX_CANDLES": "max_candles",
            "HARMONIC_SETUP_VALIDITY_BARS": "setup_validity_bars",
        }
        for var, name in float_fields.items():
            if env.get(var):
                overrides[name] = float(env[var])
        for var, name in int_fields.items():
            if env.get(var):
                overrides[name] = int(env[var])
        if env.get("HARMONIC_PROJECT_COMPLETIONS"):
            overrides["project_completions"] = (
                env["HARMONIC_PROJECT_COMPLETIONS"].lower() in ("true", "1", "yes")
            )

        return cls(**overrides)

    def with_min_confidence(self, min_confidence: float) -> "DetectionConfig":
        """
        Create a new config with a different emission threshold.

        Since DetectionConfig is frozen, this creates a new instance.
        """
        return replace(self, min_confidence=float(min_confidence))

    def with_swing_window(self, swing_window: int) -> "DetectionConfig":
        """Create a new config with a different swing comparison window."""
        return replace(self, swing_window=swing_window)

    def with_stop_loss_buffer(self, stop_loss_buffer_pct: float) -> "DetectionConfig":
        """Create a new config with a different stop-loss buffer percentage."""
        return replace(self, stop_loss_buffer_pct=stop_loss_buffer_pct)

    def with_overrides(self, **kwargs: Any) -> "DetectionConfig":
        """
        Create a new config with arbitrary fields replaced.

        Example:
            >>> DetectionConfig.default().with_overrides(max_candles=200).max_candles
            200
        """
        return replace(self, **kwargs)
