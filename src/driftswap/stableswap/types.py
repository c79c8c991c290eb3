import dataclasses
from collections.abc import Sequence
from typing import Protocol

from driftswap.token import PooledToken
from driftswap.types.abstract import AbstractPoolState


@dataclasses.dataclass(slots=True, frozen=True)
class AmplificationState:
    """
    A linear ramp of the amplification coefficient. All values are scaled by A_PRECISION.
    """

    initial_a: int
    future_a: int
    initial_a_time: int
    future_a_time: int


@dataclasses.dataclass(slots=True, frozen=True, kw_only=True)
class StableswapPoolState(AbstractPoolState):
    balances: tuple[int, ...]
    admin_balances: tuple[int, ...]
    total_supply: int


@dataclasses.dataclass(slots=True, frozen=True, kw_only=True)
class DriftingMetaPoolState(StableswapPoolState):
    base_virtual_price: int
    base_cache_last_updated: int


@dataclasses.dataclass(slots=True, frozen=True, kw_only=True)
class SwapCalculation:
    """
    The outcome of a two-token exchange. `fee` and `admin_fee` are both expressed in the native
    units of the output token. `balances` holds the pool balances after the exchange, excluding the
    admin fee.
    """

    amount_in: int
    amount_out: int
    fee: int
    admin_fee: int
    balances: tuple[int, ...]


@dataclasses.dataclass(slots=True, frozen=True, kw_only=True)
class LiquidityCalculation:
    """
    The outcome of a deposit or withdrawal. `token_amount` is the number of pool shares minted or
    burned, and `amounts` the per-token amounts deposited or withdrawn.
    """

    token_amount: int
    amounts: tuple[int, ...]
    fees: tuple[int, ...]
    admin_fees: tuple[int, ...]
    balances: tuple[int, ...]


class DriftRateSource(Protocol):
    """
    Supplies the exchange rate of the drift-adjusted token as a ray (1e27 == parity).
    """

    def current_rate(self) -> int: ...


class BasePool(Protocol):
    """
    The subset of pool behavior a metapool relies on when its last token is another pool's share.
    """

    name: str
    tokens: tuple[PooledToken, ...]
    lp_token: PooledToken
    swap_fee: int

    @property
    def state(self) -> StableswapPoolState: ...

    def restore_state(self, state: StableswapPoolState) -> None: ...

    def get_token_balance(self, index: int) -> int: ...

    def get_virtual_price(self, timestamp: int) -> int: ...

    def calculate_token_amount(
        self, amounts: Sequence[int], deposit: bool, timestamp: int
    ) -> int: ...

    def quote_swap(
        self, token_index_from: int, token_index_to: int, dx: int, timestamp: int
    ) -> int: ...

    def quote_remove_liquidity(self, amount: int) -> tuple[int, ...]: ...

    def quote_remove_liquidity_one_token(
        self, token_amount: int, token_index: int, timestamp: int
    ) -> int: ...

    def swap(
        self,
        token_index_from: int,
        token_index_to: int,
        dx: int,
        min_dy: int,
        timestamp: int,
        deadline: int | None = None,
    ) -> int: ...

    def add_liquidity(
        self,
        amounts: Sequence[int],
        min_to_mint: int,
        timestamp: int,
        deadline: int | None = None,
    ) -> int: ...

    def remove_liquidity(
        self,
        amount: int,
        min_amounts: Sequence[int],
        timestamp: int,
        deadline: int | None = None,
    ) -> tuple[int, ...]: ...

    def remove_liquidity_one_token(
        self,
        token_amount: int,
        token_index: int,
        min_amount: int,
        timestamp: int,
        deadline: int | None = None,
    ) -> int: ...
