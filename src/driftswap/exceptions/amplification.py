from typing import Any

from driftswap.exceptions.base import DriftswapError


class AmplificationError(DriftswapError):
    """
    Exception raised when an amplification ramp cannot be started or stopped.
    """


class RampTooSoon(AmplificationError):
    def __init__(self) -> None:
        super().__init__(message="Wait 1 day before starting ramp")


class RampTooShort(AmplificationError):
    def __init__(self) -> None:
        super().__init__(message="Insufficient ramp time")


class AOutOfBounds(AmplificationError):
    def __init__(self) -> None:
        super().__init__(message="futureA_ must be > 0 and < MAX_A")


class AChangeTooSmall(AmplificationError):
    """
    The requested target is below the current A divided by the maximum change factor.
    """

    def __init__(self, future_a: int) -> None:
        self.future_a = future_a
        super().__init__(message="futureA_ is too small")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.future_a,)


class AChangeTooLarge(AmplificationError):
    """
    The requested target is above the current A multiplied by the maximum change factor.
    """

    def __init__(self, future_a: int) -> None:
        self.future_a = future_a
        super().__init__(message="futureA_ is too large")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.future_a,)


class AlreadyStopped(AmplificationError):
    def __init__(self) -> None:
        super().__init__(message="Ramp is already stopped")
