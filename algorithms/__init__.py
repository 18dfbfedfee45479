from .math_tools import MathTools
from .normalization import Normalizer
from .readiness import FourFactorReadiness, CompositeReadiness, score_readiness
from .load_windows import RollingWindowAggregator, ACWRCalculator, build_load_windows
from .pr_detector import PRDetector
from .finisher_selector import FinisherProtocolSelector
from .series_formatter import SeriesFormatter

__all__ = [
    "MathTools",
    "Normalizer",
    "FourFactorReadiness",
    "CompositeReadiness",
    "score_readiness",
    "RollingWindowAggregator",
    "ACWRCalculator",
    "build_load_windows",
    "PRDetector",
    "FinisherProtocolSelector",
    "SeriesFormatter",
]
