from typing import Any

from driftswap.exceptions.base import DriftswapError


class SolverError(DriftswapError):
    """
    Exception raised by the invariant solver and fixed-point math helpers.
    """


class DidNotConverge(SolverError):
    """
    Raised when an iterative invariant calculation exhausts its iteration limit. This should never
    occur for realistic balances and indicates a broken pool invariant.
    """

    def __init__(self, quantity: str, iterations: int) -> None:
        self.quantity = quantity
        self.iterations = iterations
        super().__init__(
            message=f"{quantity} calculation did not converge after {iterations} iterations."
        )

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.quantity, self.iterations)


class ZeroBalance(SolverError):
    """
    Raised when the invariant is requested for a balance set containing a zero balance alongside
    non-zero balances.
    """

    def __init__(self) -> None:
        super().__init__(message="Cannot solve the invariant with a zero balance.")


class ArithmeticOverflow(SolverError):
    """
    Raised when a fixed-point operation exceeds the uint256 range.
    """

    def __init__(self) -> None:
        super().__init__(message="Result exceeds the uint256 range.")
