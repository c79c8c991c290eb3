from .checksum_cache import get_checksum_address
from .config import settings
from .version import __version__

# isort: split

from .logging import logger
from .stableswap import (
    AmplificationState,
    DriftingMetaPool,
    DriftingMetaPoolState,
    DriftRateSnapshot,
    NestedPoolBridge,
    PrecisionNormalizer,
    StableswapPool,
    StableswapPoolState,
)
from .token import PooledToken

__all__ = (
    "AmplificationState",
    "DriftRateSnapshot",
    "DriftingMetaPool",
    "DriftingMetaPoolState",
    "NestedPoolBridge",
    "PooledToken",
    "PrecisionNormalizer",
    "StableswapPool",
    "StableswapPoolState",
    "__version__",
    "get_checksum_address",
    "logger",
    "settings",
)
