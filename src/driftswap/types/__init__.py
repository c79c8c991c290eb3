from .abstract import AbstractLiquidityPool, AbstractPoolState

__all__ = (
    "AbstractLiquidityPool",
    "AbstractPoolState",
)
