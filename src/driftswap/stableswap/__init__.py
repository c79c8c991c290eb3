from .bridge import NestedPoolBridge
from .drift import DriftRateSnapshot
from .metapool import DriftingMetaPool
from .pool import StableswapPool
from .precision import PrecisionNormalizer
from .types import (
    AmplificationState,
    BasePool,
    DriftingMetaPoolState,
    DriftRateSource,
    LiquidityCalculation,
    StableswapPoolState,
    SwapCalculation,
)

__all__ = (
    "AmplificationState",
    "BasePool",
    "DriftRateSnapshot",
    "DriftRateSource",
    "DriftingMetaPool",
    "DriftingMetaPoolState",
    "LiquidityCalculation",
    "NestedPoolBridge",
    "PrecisionNormalizer",
    "StableswapPool",
    "StableswapPoolState",
    "SwapCalculation",
)
