"""
Operations on a metapool expressed in terms of the base pool's underlying tokens.

Underlying token indices list the metapool tokens other than the base pool share, followed by the
base pool tokens. For a metapool [RAI, baseLP] over a base pool [DAI, USDC, USDT], the underlying
tokens are [RAI, DAI, USDC, USDT].
"""

import contextlib
from collections.abc import Generator, Sequence

from driftswap.constants import FEE_DENOMINATOR, POOL_PRECISION
from driftswap.exceptions.liquidity_pool import (
    ArityMismatch,
    InsufficientOutput,
    TokenIndexOutOfRange,
)
from driftswap.logging import logger
from driftswap.stableswap.invariant import get_y
from driftswap.stableswap.liquidity import check_non_negative
from driftswap.stableswap.metapool import DriftingMetaPool
from driftswap.stableswap.pool import check_deadline
from driftswap.token import PooledToken


class NestedPoolBridge:
    """
    Routes underlying token swaps, deposits and withdrawals through the base pool and the metapool.

    Composite operations either complete on both pools or leave both untouched. Failures raised by
    either pool propagate unchanged.
    """

    def __init__(self, pool: DriftingMetaPool) -> None:
        self.pool = pool
        self.base_pool = pool.base_pool
        self.base_lp_index = pool.base_lp_index

    @property
    def tokens(self) -> tuple[PooledToken, ...]:
        return self.pool.tokens_underlying

    @contextlib.contextmanager
    def _all_or_nothing(self) -> Generator[None, None, None]:
        meta_state = self.pool.state
        base_state = self.base_pool.state
        try:
            yield
        except Exception:
            self.pool.restore_state(meta_state)
            self.base_pool.restore_state(base_state)
            raise

    def _check_underlying_index(self, index: int) -> None:
        if not 0 <= index < len(self.tokens):
            raise TokenIndexOutOfRange(index)

    def _split_amounts(self, amounts: Sequence[int]) -> tuple[list[int], list[int]]:
        if len(amounts) != len(self.tokens):
            raise ArityMismatch
        return list(amounts[: self.base_lp_index]), list(amounts[self.base_lp_index :])

    # Swaps

    def calculate_swap_underlying(
        self,
        token_index_from: int,
        token_index_to: int,
        dx: int,
        timestamp: int,
    ) -> int:
        """
        Estimate the output of swapping between two underlying tokens.

        A deposit into the base pool is valued with the fee-less share estimate, so the result can
        differ slightly from `swap_underlying`.
        """

        self._check_underlying_index(token_index_from)
        self._check_underlying_index(token_index_to)
        if token_index_from == token_index_to:
            raise TokenIndexOutOfRange(token_index_to)

        base_lp_index = self.base_lp_index
        from_base = token_index_from >= base_lp_index
        to_base = token_index_to >= base_lp_index

        if from_base and to_base:
            return self.base_pool.quote_swap(
                token_index_from - base_lp_index,
                token_index_to - base_lp_index,
                dx,
                timestamp,
            )

        state, rates, a_precise = self.pool.pricing(timestamp)
        normalizer = self.pool.normalizer
        xp = normalizer.xp(state.balances, rates)

        if from_base:
            base_amounts = [0] * len(self.base_pool.tokens)
            base_amounts[token_index_from - base_lp_index] = dx
            x = self.base_pool.calculate_token_amount(base_amounts, True, timestamp)
            x = x * state.base_virtual_price // POOL_PRECISION
            meta_index_from = base_lp_index
        else:
            x = normalizer.normalize(dx, token_index_from, rates)
            meta_index_from = token_index_from

        meta_index_to = base_lp_index if to_base else token_index_to

        y = get_y(a_precise, meta_index_from, meta_index_to, x + xp[meta_index_from], xp)
        dy = xp[meta_index_to] - y - 1
        dy -= dy * self.pool.swap_fee // FEE_DENOMINATOR

        if to_base:
            return self.base_pool.quote_remove_liquidity_one_token(
                dy * POOL_PRECISION // state.base_virtual_price,
                token_index_to - base_lp_index,
                timestamp,
            )

        return normalizer.denormalize(
            normalizer.remove_rate(dy, meta_index_to, rates),
            meta_index_to,
        )

    def swap_underlying(
        self,
        token_index_from: int,
        token_index_to: int,
        dx: int,
        min_dy: int,
        timestamp: int,
        deadline: int | None = None,
    ) -> int:
        """
        Swap `dx` of one underlying token for at least `min_dy` of another.
        """

        check_deadline(deadline, timestamp)
        check_non_negative([min_dy])
        self._check_underlying_index(token_index_from)
        self._check_underlying_index(token_index_to)
        if token_index_from == token_index_to:
            raise TokenIndexOutOfRange(token_index_to)

        base_lp_index = self.base_lp_index
        from_base = token_index_from >= base_lp_index
        to_base = token_index_to >= base_lp_index

        if from_base and to_base:
            return self.base_pool.swap(
                token_index_from - base_lp_index,
                token_index_to - base_lp_index,
                dx,
                min_dy,
                timestamp,
                deadline,
            )

        with self._all_or_nothing():
            # Price the base pool share before this operation changes the base pool
            self.pool.update_base_virtual_price(timestamp)

            if from_base:
                base_amounts = [0] * len(self.base_pool.tokens)
                base_amounts[token_index_from - base_lp_index] = dx
                meta_dx = self.base_pool.add_liquidity(base_amounts, 0, timestamp, deadline)
                meta_index_from = base_lp_index
            else:
                meta_dx = dx
                meta_index_from = token_index_from

            if to_base:
                base_lp_amount = self.pool.swap(
                    meta_index_from, base_lp_index, meta_dx, 0, timestamp, deadline
                )
                dy = self.base_pool.remove_liquidity_one_token(
                    base_lp_amount, token_index_to - base_lp_index, 0, timestamp, deadline
                )
            else:
                dy = self.pool.swap(
                    meta_index_from, token_index_to, meta_dx, 0, timestamp, deadline
                )

            if dy < min_dy:
                raise InsufficientOutput(dy, min_dy)

        logger.debug(
            f"{self.pool} swap underlying: {dx} {self.tokens[token_index_from]} -> "
            f"{dy} {self.tokens[token_index_to]}"
        )
        return dy

    # Deposits

    def calculate_token_amount_underlying(
        self,
        amounts: Sequence[int],
        deposit: bool,
        timestamp: int,
    ) -> int:
        """
        Estimate the metapool shares minted or burned for underlying `amounts`, without fees.
        """

        meta_amounts, base_amounts = self._split_amounts(amounts)
        base_lp_amount = self.base_pool.calculate_token_amount(base_amounts, deposit, timestamp)
        return self.pool.calculate_token_amount(
            [*meta_amounts, base_lp_amount], deposit, timestamp
        )

    def add_liquidity_underlying(
        self,
        amounts: Sequence[int],
        min_to_mint: int,
        timestamp: int,
        deadline: int | None = None,
    ) -> int:
        """
        Deposit underlying `amounts`. Base pool tokens are first deposited into the base pool and
        the resulting shares deposited into the metapool.
        """

        check_deadline(deadline, timestamp)
        meta_amounts, base_amounts = self._split_amounts(amounts)

        with self._all_or_nothing():
            base_lp_amount = 0
            if any(amount > 0 for amount in base_amounts):
                base_lp_amount = self.base_pool.add_liquidity(base_amounts, 0, timestamp, deadline)
            minted = self.pool.add_liquidity(
                [*meta_amounts, base_lp_amount], min_to_mint, timestamp, deadline
            )

        logger.debug(f"{self.pool} add liquidity underlying: {tuple(amounts)} -> {minted} shares")
        return minted

    # Withdrawals

    def quote_remove_liquidity_underlying(self, amount: int) -> tuple[int, ...]:
        meta_amounts = self.pool.quote_remove_liquidity(amount)
        base_amounts = self.base_pool.quote_remove_liquidity(meta_amounts[self.base_lp_index])
        return meta_amounts[: self.base_lp_index] + base_amounts

    def remove_liquidity_underlying(
        self,
        amount: int,
        min_amounts: Sequence[int],
        timestamp: int,
        deadline: int | None = None,
    ) -> tuple[int, ...]:
        """
        Burn `amount` metapool shares for a proportional share of every underlying token.
        """

        check_deadline(deadline, timestamp)
        meta_min_amounts, base_min_amounts = self._split_amounts(min_amounts)

        with self._all_or_nothing():
            meta_amounts = self.pool.remove_liquidity(
                amount, [*meta_min_amounts, 0], timestamp, deadline
            )
            base_amounts = self.base_pool.remove_liquidity(
                meta_amounts[self.base_lp_index], base_min_amounts, timestamp, deadline
            )

        withdrawn = meta_amounts[: self.base_lp_index] + base_amounts
        logger.debug(f"{self.pool} remove liquidity underlying: {amount} shares -> {withdrawn}")
        return withdrawn

    def quote_remove_liquidity_one_token_underlying(
        self,
        token_amount: int,
        token_index: int,
        timestamp: int,
    ) -> int:
        self._check_underlying_index(token_index)

        if token_index < self.base_lp_index:
            return self.pool.quote_remove_liquidity_one_token(token_amount, token_index, timestamp)

        base_lp_amount = self.pool.quote_remove_liquidity_one_token(
            token_amount, self.base_lp_index, timestamp
        )
        return self.base_pool.quote_remove_liquidity_one_token(
            base_lp_amount, token_index - self.base_lp_index, timestamp
        )

    def remove_liquidity_one_token_underlying(
        self,
        token_amount: int,
        token_index: int,
        min_amount: int,
        timestamp: int,
        deadline: int | None = None,
    ) -> int:
        """
        Burn `token_amount` metapool shares for a single underlying token.
        """

        check_deadline(deadline, timestamp)
        self._check_underlying_index(token_index)

        if token_index < self.base_lp_index:
            return self.pool.remove_liquidity_one_token(
                token_amount, token_index, min_amount, timestamp, deadline
            )

        with self._all_or_nothing():
            base_lp_amount = self.pool.remove_liquidity_one_token(
                token_amount, self.base_lp_index, 0, timestamp, deadline
            )
            dy = self.base_pool.remove_liquidity_one_token(
                base_lp_amount, token_index - self.base_lp_index, min_amount, timestamp, deadline
            )

        logger.debug(
            f"{self.pool} remove liquidity one token underlying: {token_amount} shares -> "
            f"{dy} {self.tokens[token_index]}"
        )
        return dy
