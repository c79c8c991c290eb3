from driftswap.constants import MAX_UINT256
from driftswap.exceptions.base import DriftswapValueError
from driftswap.exceptions.solver import ArithmeticOverflow

# Wad: decimal numbers with 18 digits of precision
WAD = 10**18

# Ray: decimal numbers with 27 digits of precision
RAY = 10**27

# Ratio to convert between Wad and Ray
WAD_RAY_RATIO = 10**9


def _raise_on_overflow(value: int) -> None:
    if value > MAX_UINT256:
        raise ArithmeticOverflow


def _raise_on_zero_division(divisor: int) -> None:
    if divisor == 0:
        raise DriftswapValueError(message="Division by zero")


def ray_mul_floor(a: int, b: int) -> int:
    """
    Multiplies a value by a ray, truncating the result.
    """

    _raise_on_overflow(a * b)
    return (a * b) // RAY


def ray_div_floor(a: int, b: int) -> int:
    """
    Divides a value by a ray, truncating the result.
    """

    _raise_on_overflow(a * RAY)
    _raise_on_zero_division(b)
    return (a * RAY) // b


def wad_to_ray(a: int) -> int:
    """
    Convert wad value up to ray.
    """

    _raise_on_overflow(a * WAD_RAY_RATIO)
    return a * WAD_RAY_RATIO

