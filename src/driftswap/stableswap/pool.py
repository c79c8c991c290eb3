import dataclasses
from collections.abc import Sequence
from threading import Lock
from typing import Any

from eth_typing import ChecksumAddress

from driftswap.checksum_cache import get_checksum_address
from driftswap.config import Settings, settings
from driftswap.constants import FEE_DENOMINATOR, POOL_PRECISION_DECIMALS
from driftswap.exceptions.liquidity_pool import (
    ArityMismatch,
    DeadlineNotMet,
    ExcessiveBurn,
    FeeTooHigh,
    InsufficientBalance,
    InsufficientMint,
    InsufficientOutput,
    InsufficientShares,
    InsufficientWithdrawal,
    InvalidPoolParameters,
    TokenIndexOutOfRange,
    TokenNotFound,
)
from driftswap.logging import logger
from driftswap.stableswap import amplification
from driftswap.stableswap.liquidity import (
    calculate_add_liquidity,
    calculate_remove_liquidity,
    calculate_remove_liquidity_imbalance,
    calculate_remove_liquidity_one_token,
    calculate_token_amount,
    calculate_virtual_price,
    check_non_negative,
)
from driftswap.stableswap.precision import PrecisionNormalizer
from driftswap.stableswap.swap import calculate_swap
from driftswap.stableswap.types import (
    AmplificationState,
    LiquidityCalculation,
    StableswapPoolState,
    SwapCalculation,
)
from driftswap.token import PooledToken
from driftswap.types.abstract import AbstractLiquidityPool

MAX_TOKENS = 32


def check_deadline(deadline: int | None, timestamp: int) -> None:
    if deadline is not None and timestamp > deadline:
        raise DeadlineNotMet(deadline=deadline, timestamp=timestamp)


class StableswapPool(AbstractLiquidityPool):
    """
    A stableswap pool holding between 2 and 32 tokens.

    Every operation takes the current time as `timestamp`. Quote methods return the result of an
    operation without modifying the pool. Execute methods perform every check before committing a
    new pool state, so a failed call leaves the pool untouched.
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
        config: Settings | None = None,
        silent: bool = False,
    ) -> None:
        self.config = config if config is not None else settings

        if not 1 < len(tokens) <= MAX_TOKENS:
            raise InvalidPoolParameters(
                message=f"Pools must hold between 2 and {MAX_TOKENS} tokens"
            )
        if len(set(tokens)) != len(tokens):
            raise InvalidPoolParameters(message="Duplicate tokens")
        for token in tokens:
            if not 0 <= token.decimals <= POOL_PRECISION_DECIMALS:
                raise InvalidPoolParameters(message="Token decimals exceeds max")
        if not 0 < a < self.config.amplification.max_a:
            raise InvalidPoolParameters(message="_a exceeds maximum")
        if swap_fee >= self.config.fees.max_swap_fee:
            raise FeeTooHigh(swap_fee, self.config.fees.max_swap_fee)
        if admin_fee >= self.config.fees.max_admin_fee:
            raise FeeTooHigh(admin_fee, self.config.fees.max_admin_fee)

        self.address: ChecksumAddress = get_checksum_address(address)
        self.tokens: tuple[PooledToken, ...] = tuple(tokens)
        self.lp_token = lp_token
        self.swap_fee = swap_fee
        self.admin_fee = admin_fee
        self.normalizer = PrecisionNormalizer.from_decimals(token.decimals for token in self.tokens)
        self._amplification = amplification.initial_amplification(a)

        self._state: StableswapPoolState = StableswapPoolState(
            address=self.address,
            timestamp=None,
            balances=(0,) * len(self.tokens),
            admin_balances=(0,) * len(self.tokens),
            total_supply=0,
        )
        self._state_lock = Lock()

        token_string = "-".join([token.symbol for token in self.tokens])
        self.name = f"{token_string} ({self.__class__.__name__}, {100 * self.swap_fee / FEE_DENOMINATOR:.2f}%)"  # noqa:E501

        if not silent:
            logger.info(f"{self.name} @ {self.address}, A={a}, fee={self.swap_fee}")
            for token_id, token in enumerate(self.tokens):
                logger.info(f"• Token {token_id}: {token} ({token.decimals} decimals)")

    def __getstate__(self) -> dict[str, Any]:
        # Remove objects that cannot be pickled
        dropped_attributes = ("_state_lock",)

        with self._state_lock:
            return {k: v for k, v in self.__dict__.items() if k not in dropped_attributes}

    def __setstate__(self, state: dict[str, Any]) -> None:
        self.__dict__.update(state)
        self._state_lock = Lock()

    def __repr__(self) -> str:  # pragma: no cover
        token_string = "-".join([token.symbol for token in self.tokens])
        return f"{self.__class__.__name__}(address={self.address}, tokens={token_string}, fee={self.swap_fee}, A={self._amplification.future_a})"  # noqa:E501

    @property
    def admin_balances(self) -> tuple[int, ...]:
        return self.state.admin_balances

    @property
    def amplification(self) -> AmplificationState:
        return self._amplification

    @property
    def balances(self) -> tuple[int, ...]:
        return self.state.balances

    @property
    def state(self) -> StableswapPoolState:
        return self._state

    @property
    def total_supply(self) -> int:
        return self.state.total_supply

    def restore_state(self, state: StableswapPoolState) -> None:
        """
        Replace the pool state with a previously recorded snapshot.
        """

        with self._state_lock:
            self._state = state
        logger.debug(f"{self} state restored to {state}")

    def _commit(self, state: StableswapPoolState) -> None:
        self._state = state

    def _refreshed_state(self, timestamp: int) -> StableswapPoolState:  # noqa:ARG002
        """
        Return the state that operations at `timestamp` are priced against. Execute operations
        commit their result on top of this state.
        """

        return self._state

    def _get_rates(self, state: StableswapPoolState) -> tuple[int, ...]:  # noqa:ARG002
        """
        Return the per-token rates, as rays, applied after the decimal adjustment.
        """

        return self.normalizer.unit_rates

    def pricing(self, timestamp: int) -> tuple[StableswapPoolState, tuple[int, ...], int]:
        """
        Read the state, rates and amplification once for an operation at `timestamp`.
        """

        state = self._refreshed_state(timestamp)
        return state, self._get_rates(state), self.get_a_precise(timestamp)

    def _check_token_index(self, index: int) -> None:
        if not 0 <= index < len(self.tokens):
            raise TokenIndexOutOfRange(index)

    @staticmethod
    def _future_state(
        state: StableswapPoolState,
        *,
        balances: tuple[int, ...],
        admin_fees: Sequence[int],
        total_supply: int,
        timestamp: int,
    ) -> StableswapPoolState:
        return dataclasses.replace(
            state,
            balances=balances,
            admin_balances=tuple(
                admin_balance + admin_fee
                for admin_balance, admin_fee in zip(state.admin_balances, admin_fees, strict=True)
            ),
            total_supply=total_supply,
            timestamp=timestamp,
        )

    # Token lookup

    def get_token(self, index: int) -> PooledToken:
        self._check_token_index(index)
        return self.tokens[index]

    def get_token_index(self, token: PooledToken | str | bytes) -> int:
        try:
            return self.tokens.index(token)  # type:ignore[arg-type]
        except ValueError:
            raise TokenNotFound from None

    def get_token_balance(self, index: int) -> int:
        self._check_token_index(index)
        return self.balances[index]

    def get_admin_balance(self, index: int) -> int:
        self._check_token_index(index)
        return self.admin_balances[index]

    # Amplification

    def get_a(self, timestamp: int) -> int:
        return amplification.get_a(self._amplification, timestamp)

    def get_a_precise(self, timestamp: int) -> int:
        return amplification.get_a_precise(self._amplification, timestamp)

    def ramp_a(self, future_a: int, future_time: int, timestamp: int) -> None:
        """
        Start ramping the amplification coefficient toward `future_a`, reaching it at
        `future_time`.
        """

        with self._state_lock:
            self._amplification = amplification.ramp_a(
                state=self._amplification,
                future_a=future_a,
                future_time=future_time,
                timestamp=timestamp,
                config=self.config.amplification,
            )
        logger.debug(
            f"{self} ramping A from {self._amplification.initial_a} to "
            f"{self._amplification.future_a} by {future_time}"
        )

    def stop_ramp_a(self, timestamp: int) -> None:
        with self._state_lock:
            self._amplification = amplification.stop_ramp_a(self._amplification, timestamp)
        logger.debug(f"{self} ramp stopped at A={self._amplification.future_a}")

    # Fees

    def set_swap_fee(self, swap_fee: int) -> None:
        if swap_fee > self.config.fees.max_swap_fee:
            raise FeeTooHigh(swap_fee, self.config.fees.max_swap_fee)
        self.swap_fee = swap_fee
        logger.debug(f"{self} swap fee set to {swap_fee}")

    def set_admin_fee(self, admin_fee: int) -> None:
        if admin_fee > self.config.fees.max_admin_fee:
            raise FeeTooHigh(admin_fee, self.config.fees.max_admin_fee)
        self.admin_fee = admin_fee
        logger.debug(f"{self} admin fee set to {admin_fee}")

    def withdraw_admin_fees(self, timestamp: int) -> tuple[int, ...]:
        """
        Zero the accrued admin balances and return the amounts withdrawn.
        """

        with self._state_lock:
            withdrawn = self._state.admin_balances
            self._commit(
                dataclasses.replace(
                    self._state,
                    admin_balances=(0,) * len(self.tokens),
                    timestamp=timestamp,
                )
            )
        logger.debug(f"{self} admin fees withdrawn: {withdrawn}")
        return withdrawn

    # Virtual price

    def get_virtual_price(self, timestamp: int) -> int:
        """
        Return the value of one pool share in terms of the invariant, scaled to 18 decimals.
        """

        state, rates, a_precise = self.pricing(timestamp)
        return calculate_virtual_price(
            normalizer=self.normalizer,
            balances=state.balances,
            rates=rates,
            a_precise=a_precise,
            total_supply=state.total_supply,
        )

    # Swaps

    def _simulate_swap(
        self,
        token_index_from: int,
        token_index_to: int,
        dx: int,
        timestamp: int,
    ) -> tuple[SwapCalculation, StableswapPoolState]:
        state, rates, a_precise = self.pricing(timestamp)
        result = calculate_swap(
            normalizer=self.normalizer,
            balances=state.balances,
            rates=rates,
            a_precise=a_precise,
            swap_fee=self.swap_fee,
            admin_fee=self.admin_fee,
            token_index_from=token_index_from,
            token_index_to=token_index_to,
            dx=dx,
        )
        admin_fees = [0] * len(self.tokens)
        admin_fees[token_index_to] = result.admin_fee
        return result, self._future_state(
            state,
            balances=result.balances,
            admin_fees=admin_fees,
            total_supply=state.total_supply,
            timestamp=timestamp,
        )

    def quote_swap(
        self,
        token_index_from: int,
        token_index_to: int,
        dx: int,
        timestamp: int,
    ) -> int:
        """
        Calculate the amount of `token_index_to` received for `dx` of `token_index_from`.
        """

        result, _ = self._simulate_swap(token_index_from, token_index_to, dx, timestamp)
        return result.amount_out

    def swap(
        self,
        token_index_from: int,
        token_index_to: int,
        dx: int,
        min_dy: int,
        timestamp: int,
        deadline: int | None = None,
        caller_balance: int | None = None,
    ) -> int:
        """
        Exchange `dx` of `token_index_from` for at least `min_dy` of `token_index_to`.
        """

        with self._state_lock:
            check_deadline(deadline, timestamp)
            check_non_negative([min_dy])
            if caller_balance is not None and dx > caller_balance:
                raise InsufficientBalance

            result, future_state = self._simulate_swap(
                token_index_from, token_index_to, dx, timestamp
            )
            if result.amount_out < min_dy:
                raise InsufficientOutput(result.amount_out, min_dy)
            self._commit(future_state)

        logger.debug(
            f"{self} swap: {dx} {self.tokens[token_index_from]} -> "
            f"{result.amount_out} {self.tokens[token_index_to]} (admin fee {result.admin_fee})"
        )
        return result.amount_out

    # Liquidity

    def calculate_token_amount(
        self,
        amounts: Sequence[int],
        deposit: bool,
        timestamp: int,
    ) -> int:
        """
        Estimate the shares minted or burned by depositing or withdrawing `amounts`, without
        imbalance fees.
        """

        state, rates, a_precise = self.pricing(timestamp)
        return calculate_token_amount(
            normalizer=self.normalizer,
            balances=state.balances,
            rates=rates,
            a_precise=a_precise,
            total_supply=state.total_supply,
            amounts=amounts,
            deposit=deposit,
        )

    def _apply_liquidity_result(
        self,
        state: StableswapPoolState,
        result: LiquidityCalculation,
        total_supply: int,
        timestamp: int,
    ) -> StableswapPoolState:
        return self._future_state(
            state,
            balances=result.balances,
            admin_fees=result.admin_fees,
            total_supply=total_supply,
            timestamp=timestamp,
        )

    def _simulate_add_liquidity(
        self,
        amounts: Sequence[int],
        timestamp: int,
    ) -> tuple[LiquidityCalculation, StableswapPoolState]:
        state, rates, a_precise = self.pricing(timestamp)
        result = calculate_add_liquidity(
            normalizer=self.normalizer,
            balances=state.balances,
            rates=rates,
            a_precise=a_precise,
            swap_fee=self.swap_fee,
            admin_fee=self.admin_fee,
            total_supply=state.total_supply,
            amounts=amounts,
        )
        return result, self._apply_liquidity_result(
            state, result, state.total_supply + result.token_amount, timestamp
        )

    def quote_add_liquidity(self, amounts: Sequence[int], timestamp: int) -> int:
        result, _ = self._simulate_add_liquidity(amounts, timestamp)
        return result.token_amount

    def add_liquidity(
        self,
        amounts: Sequence[int],
        min_to_mint: int,
        timestamp: int,
        deadline: int | None = None,
    ) -> int:
        """
        Deposit `amounts` and return the number of pool shares minted.
        """

        with self._state_lock:
            check_deadline(deadline, timestamp)
            check_non_negative([min_to_mint])
            result, future_state = self._simulate_add_liquidity(amounts, timestamp)
            if result.token_amount < min_to_mint:
                raise InsufficientMint(result.token_amount, min_to_mint)
            self._commit(future_state)

        logger.debug(f"{self} add liquidity: {tuple(amounts)} -> {result.token_amount} shares")
        return result.token_amount

    def _simulate_remove_liquidity(
        self,
        amount: int,
        timestamp: int,
    ) -> tuple[LiquidityCalculation, StableswapPoolState]:
        state = self._refreshed_state(timestamp)
        result = calculate_remove_liquidity(
            balances=state.balances,
            total_supply=state.total_supply,
            amount=amount,
        )
        return result, self._apply_liquidity_result(
            state, result, state.total_supply - amount, timestamp
        )

    def quote_remove_liquidity(self, amount: int) -> tuple[int, ...]:
        """
        Calculate the proportional amounts received for burning `amount` shares.
        """

        return calculate_remove_liquidity(
            balances=self.balances,
            total_supply=self.total_supply,
            amount=amount,
        ).amounts

    def remove_liquidity(
        self,
        amount: int,
        min_amounts: Sequence[int],
        timestamp: int,
        deadline: int | None = None,
        caller_shares: int | None = None,
    ) -> tuple[int, ...]:
        """
        Burn `amount` shares for a proportional share of every token.
        """

        with self._state_lock:
            check_deadline(deadline, timestamp)
            if caller_shares is not None and amount > caller_shares:
                raise InsufficientShares
            if len(min_amounts) != len(self.tokens):
                raise ArityMismatch(message="minAmounts must match poolTokens")
            check_non_negative(min_amounts)

            result, future_state = self._simulate_remove_liquidity(amount, timestamp)
            for withdrawn, minimum in zip(result.amounts, min_amounts, strict=True):
                if withdrawn < minimum:
                    raise InsufficientWithdrawal(withdrawn, minimum)
            self._commit(future_state)

        logger.debug(f"{self} remove liquidity: {amount} shares -> {result.amounts}")
        return result.amounts

    def _simulate_remove_liquidity_imbalance(
        self,
        amounts: Sequence[int],
        timestamp: int,
    ) -> tuple[LiquidityCalculation, StableswapPoolState]:
        state, rates, a_precise = self.pricing(timestamp)
        result = calculate_remove_liquidity_imbalance(
            normalizer=self.normalizer,
            balances=state.balances,
            rates=rates,
            a_precise=a_precise,
            swap_fee=self.swap_fee,
            admin_fee=self.admin_fee,
            total_supply=state.total_supply,
            amounts=amounts,
        )
        return result, self._apply_liquidity_result(
            state, result, state.total_supply - result.token_amount, timestamp
        )

    def quote_remove_liquidity_imbalance(self, amounts: Sequence[int], timestamp: int) -> int:
        result, _ = self._simulate_remove_liquidity_imbalance(amounts, timestamp)
        return result.token_amount

    def remove_liquidity_imbalance(
        self,
        amounts: Sequence[int],
        max_burn_amount: int,
        timestamp: int,
        deadline: int | None = None,
        caller_shares: int | None = None,
    ) -> int:
        """
        Withdraw exactly `amounts`, burning at most `max_burn_amount` shares. Returns the number of
        shares burned.
        """

        with self._state_lock:
            check_deadline(deadline, timestamp)
            check_non_negative([max_burn_amount])
            if caller_shares is not None and max_burn_amount > caller_shares:
                raise InsufficientShares

            result, future_state = self._simulate_remove_liquidity_imbalance(amounts, timestamp)
            if result.token_amount > max_burn_amount:
                raise ExcessiveBurn(result.token_amount, max_burn_amount)
            self._commit(future_state)

        logger.debug(
            f"{self} remove liquidity imbalance: {tuple(amounts)} for {result.token_amount} shares"
        )
        return result.token_amount

    def _simulate_remove_liquidity_one_token(
        self,
        token_amount: int,
        token_index: int,
        timestamp: int,
    ) -> tuple[LiquidityCalculation, StableswapPoolState]:
        state, rates, a_precise = self.pricing(timestamp)
        result = calculate_remove_liquidity_one_token(
            normalizer=self.normalizer,
            balances=state.balances,
            rates=rates,
            a_precise=a_precise,
            swap_fee=self.swap_fee,
            admin_fee=self.admin_fee,
            total_supply=state.total_supply,
            token_amount=token_amount,
            token_index=token_index,
        )
        return result, self._apply_liquidity_result(
            state, result, state.total_supply - token_amount, timestamp
        )

    def quote_remove_liquidity_one_token(
        self,
        token_amount: int,
        token_index: int,
        timestamp: int,
    ) -> int:
        result, _ = self._simulate_remove_liquidity_one_token(token_amount, token_index, timestamp)
        return result.amounts[token_index]

    def remove_liquidity_one_token(
        self,
        token_amount: int,
        token_index: int,
        min_amount: int,
        timestamp: int,
        deadline: int | None = None,
        caller_shares: int | None = None,
    ) -> int:
        """
        Burn `token_amount` shares for a single token.
        """

        with self._state_lock:
            check_deadline(deadline, timestamp)
            check_non_negative([min_amount])
            if caller_shares is not None and token_amount > caller_shares:
                raise InsufficientShares

            result, future_state = self._simulate_remove_liquidity_one_token(
                token_amount, token_index, timestamp
            )
            dy = result.amounts[token_index]
            if dy < min_amount:
                raise InsufficientWithdrawal(dy, min_amount)
            self._commit(future_state)

        logger.debug(
            f"{self} remove liquidity one token: {token_amount} shares -> "
            f"{dy} {self.tokens[token_index]}"
        )
        return dy
