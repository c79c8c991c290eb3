from .liquidity_pool import AbstractLiquidityPool
from .pool_state import AbstractPoolState

__all__ = (
    "AbstractLiquidityPool",
    "AbstractPoolState",
)
