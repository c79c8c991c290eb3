from typing import Any

from driftswap.exceptions.base import DriftswapError


class LiquidityPoolError(DriftswapError):
    """
    Exception raised inside liquidity pool helpers.
    """


# 2nd level exceptions for Liquidity Pool classes
class ArityMismatch(LiquidityPoolError):
    """
    An amounts sequence does not have one entry per pooled token.
    """

    def __init__(self, message: str = "Amounts must match pooled tokens") -> None:
        super().__init__(message=message)


class DeadlineNotMet(LiquidityPoolError):
    def __init__(self, deadline: int, timestamp: int) -> None:
        self.deadline = deadline
        self.timestamp = timestamp
        super().__init__(message="Deadline not met")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.deadline, self.timestamp)


class ExceedsAvailable(LiquidityPoolError):
    def __init__(self) -> None:
        super().__init__(message="Cannot withdraw more than available")


class ExceedsTotalSupply(LiquidityPoolError):
    def __init__(self) -> None:
        super().__init__(message="Cannot exceed total supply")


class FeeTooHigh(LiquidityPoolError):
    def __init__(self, fee: int, maximum: int) -> None:
        self.fee = fee
        self.maximum = maximum
        super().__init__(message=f"Fee {fee} exceeds the maximum of {maximum}")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.fee, self.maximum)


class InsufficientBalance(LiquidityPoolError):
    def __init__(self) -> None:
        super().__init__(message="Cannot swap more than you own")


class InsufficientShares(LiquidityPoolError):
    def __init__(self) -> None:
        super().__init__(message="Cannot burn more shares than you own")


class InvalidAmount(LiquidityPoolError):
    """
    Raised when a token amount, share amount or slippage limit is negative.
    """

    def __init__(self, amount: int) -> None:
        self.amount = amount
        super().__init__(message=f"Amounts cannot be negative, got {amount}")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.amount,)


class InvalidDriftRate(LiquidityPoolError):
    def __init__(self, rate: int) -> None:
        self.rate = rate
        super().__init__(message=f"Drift rate must be positive, got {rate}")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.rate,)


class InvalidPoolParameters(LiquidityPoolError):
    """
    Raised when a pool cannot be built from the provided tokens and parameters.
    """


class InvalidSwapInputAmount(LiquidityPoolError):
    def __init__(self) -> None:
        super().__init__(message="The swap input amount must be greater than zero.")


class InvariantNotIncreased(LiquidityPoolError):
    def __init__(self) -> None:
        super().__init__(message="D should increase")


class MustSupplyAllTokens(LiquidityPoolError):
    def __init__(self) -> None:
        super().__init__(message="Must supply all tokens in pool")


class SlippageExceeded(LiquidityPoolError):
    """
    Raised when the result of an operation is worse than the caller-provided limit.
    """

    def __init__(self, amount: int, limit: int, message: str) -> None:
        self.amount = amount
        self.limit = limit
        super().__init__(message=message)

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.amount, self.limit)


class InsufficientOutput(SlippageExceeded):
    def __init__(self, amount: int, limit: int) -> None:
        super().__init__(amount, limit, message="Swap didn't result in min tokens")


class InsufficientMint(SlippageExceeded):
    def __init__(self, amount: int, limit: int) -> None:
        super().__init__(amount, limit, message="Couldn't mint min requested")


class InsufficientWithdrawal(SlippageExceeded):
    def __init__(self, amount: int, limit: int) -> None:
        super().__init__(amount, limit, message="Withdrawal amount is below the requested minimum")


class ExcessiveBurn(SlippageExceeded):
    def __init__(self, amount: int, limit: int) -> None:
        super().__init__(amount, limit, message="tokenAmount > maxBurnAmount")


class TokenIndexOutOfRange(LiquidityPoolError):
    def __init__(self, index: int) -> None:
        self.index = index
        super().__init__(message="Token index out of range")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.index,)


class TokenNotFound(LiquidityPoolError):
    def __init__(self) -> None:
        super().__init__(message="Token does not exist")


class WithdrawExceedsAvailable(LiquidityPoolError):
    def __init__(self) -> None:
        super().__init__(message="Withdraw exceeds available")


class ZeroBurn(LiquidityPoolError):
    def __init__(self) -> None:
        super().__init__(message="Burnt amount cannot be zero")


class ZeroWithdrawal(LiquidityPoolError):
    def __init__(self) -> None:
        super().__init__(message="Withdrawal amount rounds down to zero")
