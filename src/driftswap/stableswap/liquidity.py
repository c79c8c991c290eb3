"""
Deposit and withdrawal math.

Imbalanced deposits and withdrawals are charged a fee on each token's deviation from the balance it
would hold if the operation had been proportional.
"""

from collections.abc import Iterable, Sequence

from driftswap.constants import FEE_DENOMINATOR, POOL_PRECISION
from driftswap.exceptions.liquidity_pool import (
    ArityMismatch,
    ExceedsAvailable,
    ExceedsTotalSupply,
    InvalidAmount,
    InvariantNotIncreased,
    MustSupplyAllTokens,
    TokenIndexOutOfRange,
    WithdrawExceedsAvailable,
    ZeroBurn,
    ZeroWithdrawal,
)
from driftswap.stableswap.invariant import get_d, get_y_d
from driftswap.stableswap.precision import PrecisionNormalizer
from driftswap.stableswap.types import LiquidityCalculation


def fee_per_token(swap_fee: int, n_coins: int) -> int:
    return swap_fee * n_coins // (4 * (n_coins - 1))


def check_non_negative(amounts: Iterable[int]) -> None:
    for amount in amounts:
        if amount < 0:
            raise InvalidAmount(amount)


def calculate_virtual_price(
    *,
    normalizer: PrecisionNormalizer,
    balances: Sequence[int],
    rates: Sequence[int],
    a_precise: int,
    total_supply: int,
) -> int:
    """
    The invariant per pool share, scaled to 18 decimals. Returns zero for an empty pool.
    """

    if total_supply == 0:
        return 0
    d = get_d(normalizer.xp(balances, rates), a_precise)
    return d * POOL_PRECISION // total_supply


def calculate_token_amount(
    *,
    normalizer: PrecisionNormalizer,
    balances: Sequence[int],
    rates: Sequence[int],
    a_precise: int,
    total_supply: int,
    amounts: Sequence[int],
    deposit: bool,
) -> int:
    """
    Estimate the shares minted by a deposit or burned by a withdrawal of `amounts`. Imbalance fees
    are not included, so the estimate is suitable for slippage limits but not for exact results.
    """

    if len(amounts) != len(balances):
        raise ArityMismatch
    check_non_negative(amounts)

    d_0 = get_d(normalizer.xp(balances, rates), a_precise)

    new_balances = []
    for balance, amount in zip(balances, amounts, strict=True):
        if deposit:
            new_balances.append(balance + amount)
        else:
            if amount > balance:
                raise ExceedsAvailable
            new_balances.append(balance - amount)

    d_1 = get_d(normalizer.xp(new_balances, rates), a_precise)

    if total_supply == 0:
        # The first deposit mints the invariant itself
        return d_1 if deposit else 0

    diff = d_1 - d_0 if deposit else d_0 - d_1
    return diff * total_supply // d_0


def _charge_imbalance_fees(
    *,
    d_0: int,
    d_1: int,
    old_balances: Sequence[int],
    new_balances: list[int],
    swap_fee: int,
    admin_fee: int,
) -> tuple[tuple[int, ...], tuple[int, ...], tuple[int, ...]]:
    """
    Deduct the imbalance fee from each token's new balance in place.

    Returns the per-token fees, the admin share of those fees, and the balances the pool retains
    (new balance less the admin share).
    """

    fee = fee_per_token(swap_fee, len(old_balances))
    fees = []
    admin_fees = []
    pool_balances = []

    for i, old_balance in enumerate(old_balances):
        ideal_balance = d_1 * old_balance // d_0
        difference = abs(ideal_balance - new_balances[i])
        token_fee = fee * difference // FEE_DENOMINATOR
        token_admin_fee = token_fee * admin_fee // FEE_DENOMINATOR
        fees.append(token_fee)
        admin_fees.append(token_admin_fee)
        pool_balances.append(new_balances[i] - token_admin_fee)
        new_balances[i] -= token_fee

    return tuple(fees), tuple(admin_fees), tuple(pool_balances)


def calculate_add_liquidity(
    *,
    normalizer: PrecisionNormalizer,
    balances: Sequence[int],
    rates: Sequence[int],
    a_precise: int,
    swap_fee: int,
    admin_fee: int,
    total_supply: int,
    amounts: Sequence[int],
) -> LiquidityCalculation:
    """
    Calculate the shares minted for depositing `amounts`, including imbalance fees.
    """

    n_coins = len(balances)
    if len(amounts) != n_coins:
        raise ArityMismatch
    check_non_negative(amounts)

    d_0 = 0
    if total_supply != 0:
        d_0 = get_d(normalizer.xp(balances, rates), a_precise)

    new_balances = []
    for balance, amount in zip(balances, amounts, strict=True):
        if total_supply == 0 and amount <= 0:
            raise MustSupplyAllTokens
        new_balances.append(balance + amount)

    d_1 = get_d(normalizer.xp(new_balances, rates), a_precise)
    if d_1 <= d_0:
        raise InvariantNotIncreased

    if total_supply == 0:
        return LiquidityCalculation(
            token_amount=d_1,
            amounts=tuple(amounts),
            fees=(0,) * n_coins,
            admin_fees=(0,) * n_coins,
            balances=tuple(new_balances),
        )

    fees, admin_fees, pool_balances = _charge_imbalance_fees(
        d_0=d_0,
        d_1=d_1,
        old_balances=balances,
        new_balances=new_balances,
        swap_fee=swap_fee,
        admin_fee=admin_fee,
    )
    d_2 = get_d(normalizer.xp(new_balances, rates), a_precise)

    return LiquidityCalculation(
        token_amount=(d_2 - d_0) * total_supply // d_0,
        amounts=tuple(amounts),
        fees=fees,
        admin_fees=admin_fees,
        balances=pool_balances,
    )


def calculate_remove_liquidity(
    *,
    balances: Sequence[int],
    total_supply: int,
    amount: int,
) -> LiquidityCalculation:
    """
    Calculate the proportional withdrawal for burning `amount` shares. No fee is charged.
    """

    check_non_negative([amount])
    if amount > total_supply or total_supply == 0:
        raise ExceedsTotalSupply

    amounts = tuple(balance * amount // total_supply for balance in balances)
    return LiquidityCalculation(
        token_amount=amount,
        amounts=amounts,
        fees=(0,) * len(balances),
        admin_fees=(0,) * len(balances),
        balances=tuple(
            balance - withdrawn for balance, withdrawn in zip(balances, amounts, strict=True)
        ),
    )


def calculate_remove_liquidity_imbalance(
    *,
    normalizer: PrecisionNormalizer,
    balances: Sequence[int],
    rates: Sequence[int],
    a_precise: int,
    swap_fee: int,
    admin_fee: int,
    total_supply: int,
    amounts: Sequence[int],
) -> LiquidityCalculation:
    """
    Calculate the shares burned to withdraw exactly `amounts`, including imbalance fees. The burn is
    rounded up by one share in the pool's favor.
    """

    if len(amounts) != len(balances):
        raise ArityMismatch(message="Amounts should match pool tokens")
    check_non_negative(amounts)
    if total_supply == 0:
        raise ExceedsTotalSupply

    d_0 = get_d(normalizer.xp(balances, rates), a_precise)

    new_balances = []
    for balance, amount in zip(balances, amounts, strict=True):
        if amount > balance:
            raise ExceedsAvailable
        new_balances.append(balance - amount)

    d_1 = get_d(normalizer.xp(new_balances, rates), a_precise)

    fees, admin_fees, pool_balances = _charge_imbalance_fees(
        d_0=d_0,
        d_1=d_1,
        old_balances=balances,
        new_balances=new_balances,
        swap_fee=swap_fee,
        admin_fee=admin_fee,
    )
    d_2 = get_d(normalizer.xp(new_balances, rates), a_precise)

    token_amount = (d_0 - d_2) * total_supply // d_0
    if token_amount == 0:
        raise ZeroBurn

    return LiquidityCalculation(
        token_amount=token_amount + 1,
        amounts=tuple(amounts),
        fees=fees,
        admin_fees=admin_fees,
        balances=pool_balances,
    )


def calculate_remove_liquidity_one_token(
    *,
    normalizer: PrecisionNormalizer,
    balances: Sequence[int],
    rates: Sequence[int],
    a_precise: int,
    swap_fee: int,
    admin_fee: int,
    total_supply: int,
    token_amount: int,
    token_index: int,
) -> LiquidityCalculation:
    """
    Calculate the amount of a single token received for burning `token_amount` shares.

    The invariant is reduced in proportion to the burned shares and the withdrawn token's balance is
    solved against it. Fees are then charged on every token's deviation from a proportional
    withdrawal, and the token's balance is solved again against the fee-reduced balances.
    """

    n_coins = len(balances)
    if not 0 <= token_index < n_coins:
        raise TokenIndexOutOfRange(token_index)
    check_non_negative([token_amount])
    if token_amount == 0:
        raise ZeroWithdrawal
    if token_amount > total_supply or total_supply == 0:
        raise ExceedsTotalSupply

    xp = normalizer.xp(balances, rates)
    d_0 = get_d(xp, a_precise)
    d_1 = d_0 - token_amount * d_0 // total_supply

    if token_amount > xp[token_index]:
        raise WithdrawExceedsAvailable

    new_y = get_y_d(a_precise, token_index, xp, d_1)

    fee = fee_per_token(swap_fee, n_coins)
    xp_reduced = []
    for i, xp_i in enumerate(xp):
        if i == token_index:
            dx_expected = xp_i * d_1 // d_0 - new_y
        else:
            dx_expected = xp_i - xp_i * d_1 // d_0
        xp_reduced.append(xp_i - dx_expected * fee // FEE_DENOMINATOR)

    dy = xp_reduced[token_index] - get_y_d(a_precise, token_index, xp_reduced, d_1)

    dy = normalizer.remove_rate(dy, token_index, rates)
    new_y = normalizer.remove_rate(new_y, token_index, rates)
    current_y = normalizer.remove_rate(xp[token_index], token_index, rates)

    if dy < 1:
        raise ZeroWithdrawal
    dy = normalizer.denormalize(dy - 1, token_index)
    dy_fee = normalizer.denormalize(current_y - new_y, token_index) - dy
    dy_admin_fee = dy_fee * admin_fee // FEE_DENOMINATOR

    amounts = [0] * n_coins
    amounts[token_index] = dy
    admin_fees = [0] * n_coins
    admin_fees[token_index] = dy_admin_fee
    fees = [0] * n_coins
    fees[token_index] = dy_fee
    new_balances = list(balances)
    new_balances[token_index] -= dy + dy_admin_fee

    return LiquidityCalculation(
        token_amount=token_amount,
        amounts=tuple(amounts),
        fees=tuple(fees),
        admin_fees=tuple(admin_fees),
        balances=tuple(new_balances),
    )
