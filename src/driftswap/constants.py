__all__ = (
    "A_PRECISION",
    "FEE_DENOMINATOR",
    "MAX_UINT256",
    "POOL_PRECISION",
    "POOL_PRECISION_DECIMALS",
)

import typing


def _max_uint(bits: int) -> int:
    return typing.cast("int", 2**bits - 1)


MAX_UINT256 = _max_uint(256)

# Balances are scaled to this many decimal places before entering the invariant
POOL_PRECISION_DECIMALS = 18
POOL_PRECISION = 10**POOL_PRECISION_DECIMALS

# Amplification values are stored multiplied by this factor
A_PRECISION = 100

# Denominator for swap and admin fees, e.g. a fee of 10**7 is 0.1%
FEE_DENOMINATOR = 10**10
