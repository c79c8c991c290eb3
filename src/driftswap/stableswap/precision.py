import dataclasses
from collections.abc import Iterable, Sequence
from typing import Self

from driftswap.constants import POOL_PRECISION_DECIMALS
from driftswap.libraries.wad_ray_math import RAY, ray_div_floor, ray_mul_floor


@dataclasses.dataclass(slots=True, frozen=True)
class PrecisionNormalizer:
    """
    Converts between native token amounts and the pool's common 18 decimal unit.

    Each token also carries a rate, expressed as a ray, which is applied after the decimal
    adjustment. Plain tokens use a rate of exactly one ray, a drift-adjusted token uses its current
    exchange rate, and a base pool share uses the base pool's virtual price.
    """

    precision_multipliers: tuple[int, ...]

    @classmethod
    def from_decimals(cls, decimals: Iterable[int]) -> Self:
        return cls(
            precision_multipliers=tuple(
                10 ** (POOL_PRECISION_DECIMALS - token_decimals) for token_decimals in decimals
            )
        )

    @property
    def unit_rates(self) -> tuple[int, ...]:
        return (RAY,) * len(self.precision_multipliers)

    def normalize(self, amount: int, index: int, rates: Sequence[int]) -> int:
        return ray_mul_floor(amount * self.precision_multipliers[index], rates[index])

    def xp(self, balances: Sequence[int], rates: Sequence[int]) -> tuple[int, ...]:
        return tuple(self.normalize(balance, i, rates) for i, balance in enumerate(balances))

    def remove_rate(self, amount: int, index: int, rates: Sequence[int]) -> int:
        """
        Undo the rate applied to a normalized amount, leaving it in 18 decimal units.
        """

        return ray_div_floor(amount, rates[index])

    def denormalize(self, amount: int, index: int) -> int:
        return amount // self.precision_multipliers[index]
