import pytest

from driftswap.config import AmplificationSettings
from driftswap.exceptions.amplification import (
    AChangeTooLarge,
    AChangeTooSmall,
    AlreadyStopped,
    AOutOfBounds,
    RampTooShort,
    RampTooSoon,
)
from driftswap.stableswap.amplification import (
    get_a,
    get_a_precise,
    initial_amplification,
    is_ramping,
    ramp_a,
    stop_ramp_a,
)

START = 1_700_000_000
ONE_DAY = 86_400
RAMP_TIME = 14 * ONE_DAY

DEFAULT_SETTINGS = AmplificationSettings()


def test_initial_amplification() -> None:
    state = initial_amplification(50)
    assert state.initial_a == state.future_a == 5000
    assert not is_ramping(state, START)
    assert get_a(state, START) == 50
    assert get_a_precise(state, START) == 5000


def test_linear_ramp() -> None:
    state = ramp_a(initial_amplification(50), 100, START + RAMP_TIME, START, DEFAULT_SETTINGS)
    assert is_ramping(state, START)
    assert get_a_precise(state, START) == 5000
    assert get_a_precise(state, START + RAMP_TIME // 2) == 7500
    assert get_a_precise(state, START + RAMP_TIME) == 10000
    assert get_a_precise(state, START + 2 * RAMP_TIME) == 10000
    assert not is_ramping(state, START + RAMP_TIME)


def test_downward_ramp() -> None:
    state = ramp_a(initial_amplification(50), 25, START + RAMP_TIME, START, DEFAULT_SETTINGS)
    assert get_a_precise(state, START + RAMP_TIME // 2) == 3750
    assert get_a(state, START + RAMP_TIME) == 25


def test_ramp_limits() -> None:
    state = initial_amplification(50)
    with pytest.raises(RampTooShort):
        ramp_a(state, 100, START + RAMP_TIME - 1, START, DEFAULT_SETTINGS)
    with pytest.raises(AOutOfBounds):
        ramp_a(state, 0, START + RAMP_TIME, START, DEFAULT_SETTINGS)
    with pytest.raises(AOutOfBounds):
        ramp_a(state, DEFAULT_SETTINGS.max_a, START + RAMP_TIME, START, DEFAULT_SETTINGS)
    with pytest.raises(AChangeTooSmall):
        ramp_a(state, 24, START + RAMP_TIME, START, DEFAULT_SETTINGS)
    with pytest.raises(AChangeTooLarge):
        ramp_a(state, 101, START + RAMP_TIME, START, DEFAULT_SETTINGS)


def test_ramp_cooldown() -> None:
    state = ramp_a(initial_amplification(50), 60, START + RAMP_TIME, START, DEFAULT_SETTINGS)
    with pytest.raises(RampTooSoon):
        ramp_a(state, 70, START + ONE_DAY + RAMP_TIME, START + ONE_DAY - 1, DEFAULT_SETTINGS)

    # A new ramp starts from the currently interpolated value
    restarted = ramp_a(state, 70, START + ONE_DAY + RAMP_TIME, START + ONE_DAY, DEFAULT_SETTINGS)
    assert restarted.initial_a == get_a_precise(state, START + ONE_DAY)


def test_configured_ramp_limits() -> None:
    config = AmplificationSettings(max_a_change=10, min_ramp_time=3600, ramp_cooldown=60)
    state = ramp_a(initial_amplification(50), 500, START + 3600, START, config)
    assert get_a(state, START + 3600) == 500
    with pytest.raises(RampTooSoon):
        ramp_a(state, 100, START + 7200, START + 59, config)


def test_stop_ramp() -> None:
    state = ramp_a(initial_amplification(50), 100, START + RAMP_TIME, START, DEFAULT_SETTINGS)
    stopped = stop_ramp_a(state, START + RAMP_TIME // 2)
    assert get_a_precise(stopped, START + RAMP_TIME // 2) == 7500
    assert get_a_precise(stopped, START + RAMP_TIME) == 7500

    with pytest.raises(AlreadyStopped):
        stop_ramp_a(stopped, START + RAMP_TIME // 2)
    with pytest.raises(AlreadyStopped):
        stop_ramp_a(state, START + RAMP_TIME)
