import logging

import pytest

from driftswap.config import Settings
from driftswap.libraries.wad_ray_math import RAY
from driftswap.logging import logger
from driftswap.stableswap import (
    DriftingMetaPool,
    DriftRateSnapshot,
    NestedPoolBridge,
    StableswapPool,
)
from driftswap.token import PooledToken

# Fixed starting time for pool operations, well past the ramp cool-down measured from zero
START_TIMESTAMP = 1_700_000_000

BASE_POOL_ADDRESS = "0x" + "aa" * 20
META_POOL_ADDRESS = "0x" + "bb" * 20


@pytest.fixture(scope="session", autouse=True)
def _set_driftswap_logging():
    """
    Set the logging level to DEBUG for the test run
    """
    logger.setLevel(logging.DEBUG)


@pytest.fixture
def config() -> Settings:
    return Settings()


@pytest.fixture
def now() -> int:
    return START_TIMESTAMP


@pytest.fixture
def dai() -> PooledToken:
    return PooledToken(
        address="0x6b175474e89094c44da98b954eedeac495271d0f",
        symbol="DAI",
        decimals=18,
    )


@pytest.fixture
def usdc() -> PooledToken:
    return PooledToken(
        address="0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48",
        symbol="USDC",
        decimals=6,
    )


@pytest.fixture
def usdt() -> PooledToken:
    return PooledToken(
        address="0xdac17f958d2ee523a2206206994597c13d831ec7",
        symbol="USDT",
        decimals=6,
    )


@pytest.fixture
def rai() -> PooledToken:
    return PooledToken(
        address="0x03ab458634910aad20ef5f1c8ee96f1d6ac54919",
        symbol="RAI",
        decimals=18,
    )


@pytest.fixture
def base_lp_token() -> PooledToken:
    return PooledToken(address="0x" + "11" * 20, symbol="saddleUSD", decimals=18)


@pytest.fixture
def meta_lp_token() -> PooledToken:
    return PooledToken(address="0x" + "22" * 20, symbol="raiUSD", decimals=18)


@pytest.fixture
def base_pool(
    config: Settings,
    now: int,
    dai: PooledToken,
    usdc: PooledToken,
    usdt: PooledToken,
    base_lp_token: PooledToken,
) -> StableswapPool:
    """
    A DAI/USDC/USDT pool with A=200 and a 0.04% fee, seeded with three deposits of 100 of each token
    """

    pool = StableswapPool(
        address=BASE_POOL_ADDRESS,
        tokens=(dai, usdc, usdt),
        lp_token=base_lp_token,
        a=200,
        swap_fee=4 * 10**6,
        admin_fee=0,
        config=config,
    )
    for _ in range(3):
        pool.add_liquidity([10**20, 10**8, 10**8], 0, timestamp=now)
    return pool


@pytest.fixture
def rate_source() -> DriftRateSnapshot:
    return DriftRateSnapshot(RAY)


@pytest.fixture
def meta_pool(
    config: Settings,
    now: int,
    rai: PooledToken,
    base_lp_token: PooledToken,
    meta_lp_token: PooledToken,
    base_pool: StableswapPool,
    rate_source: DriftRateSnapshot,
) -> DriftingMetaPool:
    """
    A RAI/saddleUSD metapool with A=50 and a 0.1% fee, seeded with 1 of each token at parity
    """

    pool = DriftingMetaPool(
        address=META_POOL_ADDRESS,
        tokens=(rai, base_lp_token),
        lp_token=meta_lp_token,
        a=50,
        swap_fee=10**7,
        admin_fee=0,
        base_pool=base_pool,
        rate_source=rate_source,
        timestamp=now,
        config=config,
    )
    pool.add_liquidity([10**18, 10**18], 0, timestamp=now)
    return pool


@pytest.fixture
def bridge(meta_pool: DriftingMetaPool) -> NestedPoolBridge:
    return NestedPoolBridge(meta_pool)
