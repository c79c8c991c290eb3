from driftswap.exceptions.amplification import AmplificationError
from driftswap.exceptions.base import DriftswapError, DriftswapValueError
from driftswap.exceptions.liquidity_pool import LiquidityPoolError, SlippageExceeded
from driftswap.exceptions.solver import DidNotConverge, SolverError

from . import amplification, liquidity_pool, solver

__all__ = (
    "AmplificationError",
    "DidNotConverge",
    "DriftswapError",
    "DriftswapValueError",
    "LiquidityPoolError",
    "SlippageExceeded",
    "SolverError",
    "amplification",
    "liquidity_pool",
    "solver",
)
