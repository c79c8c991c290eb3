"""
Time-dependent amplification coefficient.

A pool's amplification coefficient can be ramped linearly between two values over a period of at
least `min_ramp_time` seconds. The schedule is an immutable `AmplificationState`, and every function
here takes the current timestamp explicitly.
"""

from driftswap.config import AmplificationSettings
from driftswap.constants import A_PRECISION
from driftswap.exceptions.amplification import (
    AChangeTooLarge,
    AChangeTooSmall,
    AlreadyStopped,
    AOutOfBounds,
    RampTooShort,
    RampTooSoon,
)
from driftswap.stableswap.types import AmplificationState


def initial_amplification(a: int) -> AmplificationState:
    """
    Build a stable (non-ramping) schedule for a pool created with amplification `a`.
    """

    a_precise = a * A_PRECISION
    return AmplificationState(
        initial_a=a_precise,
        future_a=a_precise,
        initial_a_time=0,
        future_a_time=0,
    )


def is_ramping(state: AmplificationState, timestamp: int) -> bool:
    return timestamp < state.future_a_time


def get_a_precise(state: AmplificationState, timestamp: int) -> int:
    """
    Return the amplification coefficient at `timestamp`, scaled by A_PRECISION.
    """

    t_1 = state.future_a_time
    a_1 = state.future_a

    if timestamp < t_1:
        t_0 = state.initial_a_time
        a_0 = state.initial_a
        if a_1 > a_0:
            return a_0 + (a_1 - a_0) * (timestamp - t_0) // (t_1 - t_0)
        return a_0 - (a_0 - a_1) * (timestamp - t_0) // (t_1 - t_0)

    return a_1


def get_a(state: AmplificationState, timestamp: int) -> int:
    return get_a_precise(state, timestamp) // A_PRECISION


def ramp_a(
    state: AmplificationState,
    future_a: int,
    future_time: int,
    timestamp: int,
    config: AmplificationSettings,
) -> AmplificationState:
    """
    Start a ramp from the currently effective A toward `future_a` (unscaled), ending at
    `future_time`.
    """

    if timestamp < state.initial_a_time + config.ramp_cooldown:
        raise RampTooSoon
    if future_time < timestamp + config.min_ramp_time:
        raise RampTooShort
    if not 0 < future_a < config.max_a:
        raise AOutOfBounds

    initial_a_precise = get_a_precise(state, timestamp)
    future_a_precise = future_a * A_PRECISION

    if future_a_precise < initial_a_precise:
        if future_a_precise * config.max_a_change < initial_a_precise:
            raise AChangeTooSmall(future_a)
    elif future_a_precise > initial_a_precise * config.max_a_change:
        raise AChangeTooLarge(future_a)

    return AmplificationState(
        initial_a=initial_a_precise,
        future_a=future_a_precise,
        initial_a_time=timestamp,
        future_a_time=future_time,
    )


def stop_ramp_a(state: AmplificationState, timestamp: int) -> AmplificationState:
    """
    Freeze the coefficient at its currently interpolated value.
    """

    if state.future_a_time <= timestamp:
        raise AlreadyStopped

    current_a = get_a_precise(state, timestamp)
    return AmplificationState(
        initial_a=current_a,
        future_a=current_a,
        initial_a_time=timestamp,
        future_a_time=timestamp,
    )
