"""Centralized constants for harmonic analysis."""

# Standard Fibonacci retracement levels (fraction of the measured leg).
RETRACEMENT_LEVELS = [
    0.0,
    0.236,   # Shallow retracement
    0.382,   # Standard retracement
    0.5,     # Half retracement
    0.618,   # Golden retracement
    0.786,   # Deep retracement (Gartley D)
    0.886,   # Deepest retracement (Bat D)
    1.0,     # Full retracement
]

# Extension / projection levels used by the BCD and XAD legs of the
# extension patterns (Butterfly, Crab).
EXTENSION_LEVELS = [
    1.13,
    1.272,   # Butterfly XAD, Gartley BCD
    1.414,   # Cypher ABC
    1.618,   # Golden extension, Crab XAD
    2.0,     # Bat BCD
    2.24,    # Butterfly BCD
    2.618,
    3.14,    # Crab BCD
    3.618,
]

# Take-profit targets as retracements of the CD leg, measured from D back
# toward C. The last one is the full retracement to C.
TAKE_PROFIT_RETRACEMENTS = (0.382, 0.618, 1.0)

# Each leg contributes at most this many points to a 0-100 confidence score.
LEG_SCORE_WEIGHT = 25.0
MAX_CONFIDENCE = 100.0

# Number of swing points in a harmonic window (X, A, B, C, D).
PATTERN_POINT_COUNT = 5
POINT_LABELS = ("X", "A", "B", "C", "D")

# Marker placed on a TradeSetup whose entry equals its stop-loss.
DEGENERATE_RR = "DEGENERATE_RR"

# Projected D points: PRZ half-width and confidence floor.
PROJECTION_PRZ_TOLERANCE = 0.01
PROJECTION_MIN_CONFIDENCE = 50.0

# Projected C points rest on a single leg, so they carry a flat confidence.
C_PROJECTION_CONFIDENCE = 70.0
