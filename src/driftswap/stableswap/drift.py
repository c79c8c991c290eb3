from driftswap.exceptions.liquidity_pool import InvalidDriftRate
from driftswap.libraries.wad_ray_math import RAY
from driftswap.logging import logger


class DriftRateSnapshot:
    """
    A drift rate source that holds the most recently snapped exchange rate, as a ray.

    The snapshot is not refreshed on read, so a pool priced against it sees whatever value was last
    written with `update`.
    """

    def __init__(self, rate: int = RAY) -> None:
        if rate <= 0:
            raise InvalidDriftRate(rate)
        self._rate = rate

    def current_rate(self) -> int:
        return self._rate

    def update(self, rate: int) -> None:
        if rate <= 0:
            raise InvalidDriftRate(rate)
        logger.debug(f"Drift rate snapshot updated: {self._rate} -> {rate}")
        self._rate = rate
