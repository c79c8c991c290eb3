"""
Newton's method solvers for the stableswap invariant.

The invariant D relates the normalized balances x_i of an n-token pool with amplification A:

    A * n**n * sum(x_i) + D = A * D * n**n + D**(n+1) / (n**n * prod(x_i))

Amplification values are passed with A_PRECISION applied, and the pool convention `Ann = A * n` is
used in place of `A * n**n`.
"""

from collections.abc import Sequence

from driftswap.constants import A_PRECISION
from driftswap.exceptions.base import DriftswapValueError
from driftswap.exceptions.solver import DidNotConverge, ZeroBalance

MAX_LOOP_LIMIT = 256


def _within_one(a: int, b: int) -> bool:
    return abs(a - b) <= 1


def get_d(xp: Sequence[int], a_precise: int) -> int:
    """
    Solve for the invariant D of the normalized balances `xp`.
    """

    n_coins = len(xp)
    s = sum(xp)
    if s == 0:
        return 0
    if 0 in xp:
        raise ZeroBalance

    d = s
    a_nn = a_precise * n_coins

    for _ in range(MAX_LOOP_LIMIT):
        d_p = d
        for x in xp:
            d_p = d_p * d // (x * n_coins)
        d_prev = d
        d = (
            (a_nn * s // A_PRECISION + d_p * n_coins)
            * d
            // ((a_nn - A_PRECISION) * d // A_PRECISION + (n_coins + 1) * d_p)
        )
        if _within_one(d, d_prev):
            return d

    raise DidNotConverge(quantity="D", iterations=MAX_LOOP_LIMIT)


def _solve_y(c: int, b: int, d: int) -> int:
    """
    Solve y**2 + (b - D) * y = c by iteration, starting from y = D.
    """

    y = d
    for _ in range(MAX_LOOP_LIMIT):
        y_prev = y
        y = (y * y + c) // (2 * y + b - d)
        if _within_one(y, y_prev):
            return y

    raise DidNotConverge(quantity="y", iterations=MAX_LOOP_LIMIT)


def get_y(
    a_precise: int,
    token_index_from: int,
    token_index_to: int,
    x: int,
    xp: Sequence[int],
) -> int:
    """
    Calculate the new normalized balance of `token_index_to` that preserves D after the balance of
    `token_index_from` is set to `x`.
    """

    n_coins = len(xp)
    if token_index_from == token_index_to:
        raise DriftswapValueError(message="Can't compare token to itself")
    if not (0 <= token_index_from < n_coins and 0 <= token_index_to < n_coins):
        raise DriftswapValueError(message="Tokens must be in pool")

    d = get_d(xp, a_precise)
    c = d
    s = 0
    a_nn = n_coins * a_precise

    for i in range(n_coins):
        if i == token_index_from:
            _x = x
        elif i != token_index_to:
            _x = xp[i]
        else:
            continue
        s += _x
        c = c * d // (_x * n_coins)

    c = c * d * A_PRECISION // (a_nn * n_coins)
    b = s + d * A_PRECISION // a_nn
    return _solve_y(c=c, b=b, d=d)


def get_y_d(a_precise: int, token_index: int, xp: Sequence[int], d: int) -> int:
    """
    Calculate the normalized balance of `token_index` that satisfies the invariant `d`, holding all
    other balances fixed.
    """

    n_coins = len(xp)
    if not 0 <= token_index < n_coins:
        raise DriftswapValueError(message="Token not found")

    c = d
    s = 0
    a_nn = n_coins * a_precise

    for i in range(n_coins):
        if i == token_index:
            continue
        _x = xp[i]
        s += _x
        c = c * d // (_x * n_coins)

    c = c * d * A_PRECISION // (a_nn * n_coins)
    b = s + d * A_PRECISION // a_nn
    return _solve_y(c=c, b=b, d=d)
