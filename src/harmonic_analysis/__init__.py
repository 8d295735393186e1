# Harmonic Analysis Module
#
# Five-point harmonic pattern detection: swing extraction, leg ratios,
# template matching, confidence scoring and pattern/setup emission.

from .types import Candle, SwingLabel, SwingPoint
from .exceptions import HarmonicAnalysisError, InsufficientData, UndefinedRatio
from .timeframe import Timeframe, parse_timeframe, timeframe_milliseconds
from .detection_config import DetectionConfig

# Detection pipeline, leaves first
from .swing_extractor import SwingSequence, extract_swings
from .ratio_calculator import Leg, LegRatios, compute_leg_ratios, window_ratios
from .templates import PATTERN_PRECEDENCE, RATIO_TEMPLATES, PatternType, RatioBand, RatioTemplate
from .template_matcher import match_leg, match_template, match_templates
from .confidence_scorer import ScoredCandidate, leg_score, score_candidate, select_best
from .emitter import PatternEmitter, build_trade_setup
from .point_predictor import predict_c_points, predict_completions, project_c_point, project_completion
from .scanner import PatternScanner, ScanResult, ScanStage, ScanStatus, scan_candles

# Output records
from .models import (
    CompletionProjection,
    Emission,
    HarmonicPattern,
    PatternPoint,
    PotentialReversalZone,
    TradeDirection,
    TradeSetup,
)
