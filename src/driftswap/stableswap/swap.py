from collections.abc import Sequence

from driftswap.constants import FEE_DENOMINATOR
from driftswap.exceptions.liquidity_pool import InvalidSwapInputAmount, TokenIndexOutOfRange
from driftswap.stableswap.invariant import get_y
from driftswap.stableswap.precision import PrecisionNormalizer
from driftswap.stableswap.types import SwapCalculation


def _check_indices(n_coins: int, token_index_from: int, token_index_to: int) -> None:
    for index in (token_index_from, token_index_to):
        if not 0 <= index < n_coins:
            raise TokenIndexOutOfRange(index)
    if token_index_from == token_index_to:
        raise TokenIndexOutOfRange(token_index_to)


def calculate_swap(
    *,
    normalizer: PrecisionNormalizer,
    balances: Sequence[int],
    rates: Sequence[int],
    a_precise: int,
    swap_fee: int,
    admin_fee: int,
    token_index_from: int,
    token_index_to: int,
    dx: int,
) -> SwapCalculation:
    """
    Calculate the output of exchanging `dx` of token `token_index_from` for token `token_index_to`.

    The input is scaled by its rate before solving for the new output balance, and the output is
    unscaled by its rate before the trade fee is deducted and the result is converted back to the
    output token's decimals.
    """

    _check_indices(len(balances), token_index_from, token_index_to)
    if dx <= 0:
        raise InvalidSwapInputAmount

    xp = normalizer.xp(balances, rates)
    x = normalizer.normalize(dx, token_index_from, rates) + xp[token_index_from]
    y = get_y(a_precise, token_index_from, token_index_to, x, xp)

    dy = xp[token_index_to] - y - 1
    if dy < 0:
        raise InvalidSwapInputAmount

    dy = normalizer.remove_rate(dy, token_index_to, rates)
    dy_fee = dy * swap_fee // FEE_DENOMINATOR
    dy = normalizer.denormalize(dy - dy_fee, token_index_to)
    dy_admin_fee = normalizer.denormalize(dy_fee * admin_fee // FEE_DENOMINATOR, token_index_to)

    new_balances = list(balances)
    new_balances[token_index_from] += dx
    new_balances[token_index_to] -= dy + dy_admin_fee

    return SwapCalculation(
        amount_in=dx,
        amount_out=dy,
        fee=normalizer.denormalize(dy_fee, token_index_to),
        admin_fee=dy_admin_fee,
        balances=tuple(new_balances),
    )
