import dataclasses
from collections.abc import Sequence
from typing import TYPE_CHECKING

from driftswap.config import Settings
from driftswap.exceptions.liquidity_pool import InvalidDriftRate, InvalidPoolParameters
from driftswap.libraries.wad_ray_math import wad_to_ray
from driftswap.logging import logger
from driftswap.stableswap.pool import StableswapPool
from driftswap.stableswap.types import (
    BasePool,
    DriftingMetaPoolState,
    DriftRateSource,
    StableswapPoolState,
)
from driftswap.token import PooledToken


class DriftingMetaPool(StableswapPool):
    """
    A metapool whose last token is the share token of a base pool, and whose drift token is priced
    by an external exchange rate.

    The base pool share is valued at the base pool's virtual price, which is cached for
    `config.metapool.base_cache_expire_time` seconds. Execute operations persist a refreshed cache
    value, quote operations do not. The drift rate is read once per operation from `rate_source`.
    """

    def __init__(
        self,
        address: str,
        tokens: Sequence[PooledToken],
        lp_token: PooledToken,
        a: int,
        swap_fee: int,
        admin_fee: int,
        *,
        base_pool: BasePool,
        rate_source: DriftRateSource,
        timestamp: int,
        drift_index: int = 0,
        config: Settings | None = None,
        silent: bool = False,
    ) -> None:
        if not tokens or tokens[-1] != base_pool.lp_token:
            raise InvalidPoolParameters(message="The last token must be the base pool share token")
        if not 0 <= drift_index < len(tokens) - 1:
            raise InvalidPoolParameters(
                message="The drift token cannot be the base pool share token"
            )

        base_virtual_price = base_pool.get_virtual_price(timestamp)
        if base_virtual_price == 0:
            raise InvalidPoolParameters(message="The base pool has no liquidity")

        super().__init__(
            address=address,
            tokens=tokens,
            lp_token=lp_token,
            a=a,
            swap_fee=swap_fee,
            admin_fee=admin_fee,
            config=config,
            silent=silent,
        )

        self.base_pool = base_pool
        self.rate_source = rate_source
        self.drift_index = drift_index
        self.base_lp_index = len(self.tokens) - 1
        self._state = DriftingMetaPoolState(
            address=self.address,
            timestamp=None,
            balances=self._state.balances,
            admin_balances=self._state.admin_balances,
            total_supply=0,
            base_virtual_price=base_virtual_price,
            base_cache_last_updated=timestamp,
        )

        if not silent:
            logger.info(
                f"• Base pool: {base_pool.name}, virtual price {base_virtual_price}, "
                f"drift token {self.tokens[drift_index]}"
            )

    @property
    def state(self) -> DriftingMetaPoolState:
        if TYPE_CHECKING:
            assert isinstance(self._state, DriftingMetaPoolState)
        return self._state

    @property
    def tokens_underlying(self) -> tuple[PooledToken, ...]:
        """
        The metapool tokens other than the base pool share, followed by the base pool tokens.
        """

        return self.tokens[: self.base_lp_index] + self.base_pool.tokens

    def _refreshed_state(self, timestamp: int) -> DriftingMetaPoolState:
        state = self.state
        if timestamp > state.base_cache_last_updated + self.config.metapool.base_cache_expire_time:
            return dataclasses.replace(
                state,
                base_virtual_price=self.base_pool.get_virtual_price(timestamp),
                base_cache_last_updated=timestamp,
            )
        return state

    def _get_rates(self, state: StableswapPoolState) -> tuple[int, ...]:
        if TYPE_CHECKING:
            assert isinstance(state, DriftingMetaPoolState)

        drift_rate = self.rate_source.current_rate()
        if drift_rate <= 0:
            raise InvalidDriftRate(drift_rate)

        rates = list(self.normalizer.unit_rates)
        rates[self.drift_index] = drift_rate
        rates[self.base_lp_index] = wad_to_ray(state.base_virtual_price)
        return tuple(rates)

    def get_base_virtual_price(self, timestamp: int) -> int:
        """
        Return the base pool virtual price used for pricing at `timestamp`, without updating the
        cache.
        """

        return self._refreshed_state(timestamp).base_virtual_price

    def update_base_virtual_price(self, timestamp: int) -> int:
        """
        Refresh the cached base pool virtual price if it has expired, and return the cached value.
        """

        with self._state_lock:
            state = self._refreshed_state(timestamp)
            if state is not self._state:
                logger.debug(f"{self} base virtual price cache updated: {state.base_virtual_price}")
                self._commit(state)
        return state.base_virtual_price
