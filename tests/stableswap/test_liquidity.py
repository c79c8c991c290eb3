import pytest

from driftswap.constants import FEE_DENOMINATOR
from driftswap.exceptions.liquidity_pool import (
    ArityMismatch,
    ExceedsAvailable,
    ExceedsTotalSupply,
    InvalidAmount,
    InvariantNotIncreased,
    MustSupplyAllTokens,
    TokenIndexOutOfRange,
    WithdrawExceedsAvailable,
    ZeroBurn,
    ZeroWithdrawal,
)
from driftswap.stableswap.liquidity import (
    calculate_add_liquidity,
    calculate_remove_liquidity,
    calculate_remove_liquidity_imbalance,
    calculate_remove_liquidity_one_token,
    calculate_token_amount,
    calculate_virtual_price,
    fee_per_token,
)
from driftswap.stableswap.precision import PrecisionNormalizer

NORMALIZER = PrecisionNormalizer.from_decimals([18, 18])
RATES = NORMALIZER.unit_rates
BALANCES = (10**18, 10**18)
TOTAL_SUPPLY = 2 * 10**18
A_PRECISE = 5000
SWAP_FEE = 10**7

POOL = {
    "normalizer": NORMALIZER,
    "rates": RATES,
    "a_precise": A_PRECISE,
}


def test_fee_per_token() -> None:
    assert fee_per_token(10**7, 2) == 5 * 10**6
    assert fee_per_token(4 * 10**6, 3) == 15 * 10**5


def test_virtual_price() -> None:
    assert calculate_virtual_price(**POOL, balances=BALANCES, total_supply=TOTAL_SUPPLY) == 10**18
    assert calculate_virtual_price(**POOL, balances=(0, 0), total_supply=0) == 0


def test_token_amount_estimate() -> None:
    assert (
        calculate_token_amount(
            **POOL,
            balances=(0, 0),
            total_supply=0,
            amounts=(10**18, 10**18),
            deposit=True,
        )
        == 2 * 10**18
    )
    assert (
        calculate_token_amount(
            **POOL,
            balances=BALANCES,
            total_supply=TOTAL_SUPPLY,
            amounts=(10**18, 10**18),
            deposit=True,
        )
        == 2 * 10**18
    )
    assert (
        calculate_token_amount(
            **POOL,
            balances=BALANCES,
            total_supply=TOTAL_SUPPLY,
            amounts=(5 * 10**17, 5 * 10**17),
            deposit=False,
        )
        == 10**18
    )
    with pytest.raises(ExceedsAvailable):
        calculate_token_amount(
            **POOL,
            balances=BALANCES,
            total_supply=TOTAL_SUPPLY,
            amounts=(2 * 10**18, 0),
            deposit=False,
        )
    with pytest.raises(ArityMismatch):
        calculate_token_amount(
            **POOL,
            balances=BALANCES,
            total_supply=TOTAL_SUPPLY,
            amounts=(10**18,),
            deposit=True,
        )


class TestAddLiquidity:
    def test_first_deposit(self) -> None:
        result = calculate_add_liquidity(
            **POOL,
            balances=(0, 0),
            swap_fee=SWAP_FEE,
            admin_fee=0,
            total_supply=0,
            amounts=(10**18, 10**18),
        )
        assert result.token_amount == 2 * 10**18
        assert result.fees == (0, 0)
        assert result.balances == (10**18, 10**18)

    def test_first_deposit_requires_every_token(self) -> None:
        with pytest.raises(MustSupplyAllTokens):
            calculate_add_liquidity(
                **POOL,
                balances=(0, 0),
                swap_fee=SWAP_FEE,
                admin_fee=0,
                total_supply=0,
                amounts=(10**18, 0),
            )

    def test_balanced_deposit_pays_no_fee(self) -> None:
        result = calculate_add_liquidity(
            **POOL,
            balances=BALANCES,
            swap_fee=SWAP_FEE,
            admin_fee=0,
            total_supply=TOTAL_SUPPLY,
            amounts=(10**18, 10**18),
        )
        assert result.token_amount == 2 * 10**18
        assert result.fees == (0, 0)

    def test_imbalanced_deposit_pays_fee(self) -> None:
        result = calculate_add_liquidity(
            **POOL,
            balances=BALANCES,
            swap_fee=SWAP_FEE,
            admin_fee=5 * 10**9,
            total_supply=TOTAL_SUPPLY,
            amounts=(10**18, 3 * 10**18),
        )
        assert result.token_amount == 3991672211258372957
        assert all(fee > 0 for fee in result.fees)
        assert result.admin_fees == tuple(
            fee * 5 * 10**9 // FEE_DENOMINATOR for fee in result.fees
        )
        assert result.balances == (
            2 * 10**18 - result.admin_fees[0],
            4 * 10**18 - result.admin_fees[1],
        )

    def test_empty_deposit(self) -> None:
        with pytest.raises(InvariantNotIncreased):
            calculate_add_liquidity(
                **POOL,
                balances=BALANCES,
                swap_fee=SWAP_FEE,
                admin_fee=0,
                total_supply=TOTAL_SUPPLY,
                amounts=(0, 0),
            )


class TestRemoveLiquidity:
    def test_proportional(self) -> None:
        result = calculate_remove_liquidity(
            balances=(10**18, 3 * 10**6),
            total_supply=TOTAL_SUPPLY,
            amount=10**18,
        )
        assert result.amounts == (5 * 10**17, 15 * 10**5)
        assert result.balances == (5 * 10**17, 15 * 10**5)

    def test_exceeds_total_supply(self) -> None:
        with pytest.raises(ExceedsTotalSupply):
            calculate_remove_liquidity(
                balances=BALANCES,
                total_supply=TOTAL_SUPPLY,
                amount=TOTAL_SUPPLY + 1,
            )
        with pytest.raises(ExceedsTotalSupply):
            calculate_remove_liquidity(balances=(0, 0), total_supply=0, amount=0)


class TestRemoveLiquidityImbalance:
    def test_burn_exceeds_fee_free_estimate(self) -> None:
        amounts = (5 * 10**17, 0)
        estimate = calculate_token_amount(
            **POOL,
            balances=BALANCES,
            total_supply=TOTAL_SUPPLY,
            amounts=amounts,
            deposit=False,
        )
        result = calculate_remove_liquidity_imbalance(
            **POOL,
            balances=BALANCES,
            swap_fee=SWAP_FEE,
            admin_fee=0,
            total_supply=TOTAL_SUPPLY,
            amounts=amounts,
        )
        assert result.token_amount > estimate
        assert result.fees[0] > 0

    def test_balanced_withdrawal_rounds_burn_up(self) -> None:
        result = calculate_remove_liquidity_imbalance(
            **POOL,
            balances=BALANCES,
            swap_fee=SWAP_FEE,
            admin_fee=0,
            total_supply=TOTAL_SUPPLY,
            amounts=(5 * 10**17, 5 * 10**17),
        )
        assert result.token_amount == 10**18 + 1

    def test_errors(self) -> None:
        with pytest.raises(ArityMismatch):
            calculate_remove_liquidity_imbalance(
                **POOL,
                balances=BALANCES,
                swap_fee=SWAP_FEE,
                admin_fee=0,
                total_supply=TOTAL_SUPPLY,
                amounts=(10**17,),
            )
        with pytest.raises(ExceedsAvailable):
            calculate_remove_liquidity_imbalance(
                **POOL,
                balances=BALANCES,
                swap_fee=SWAP_FEE,
                admin_fee=0,
                total_supply=TOTAL_SUPPLY,
                amounts=(2 * 10**18, 0),
            )
        with pytest.raises(ZeroBurn):
            calculate_remove_liquidity_imbalance(
                **POOL,
                balances=BALANCES,
                swap_fee=SWAP_FEE,
                admin_fee=0,
                total_supply=TOTAL_SUPPLY,
                amounts=(0, 0),
            )
        with pytest.raises(ExceedsTotalSupply):
            calculate_remove_liquidity_imbalance(
                **POOL,
                balances=(0, 0),
                swap_fee=SWAP_FEE,
                admin_fee=0,
                total_supply=0,
                amounts=(0, 0),
            )


class TestRemoveLiquidityOneToken:
    def test_received_amount(self) -> None:
        result = calculate_remove_liquidity_one_token(
            **POOL,
            balances=BALANCES,
            swap_fee=SWAP_FEE,
            admin_fee=0,
            total_supply=TOTAL_SUPPLY,
            token_amount=10**18,
            token_index=0,
        )
        assert result.amounts == (954404308901884931, 0)
        assert result.balances == (10**18 - 954404308901884931, 10**18)
        assert result.fees[0] > 0

    def test_admin_fee(self) -> None:
        result = calculate_remove_liquidity_one_token(
            **POOL,
            balances=BALANCES,
            swap_fee=SWAP_FEE,
            admin_fee=5 * 10**9,
            total_supply=TOTAL_SUPPLY,
            token_amount=10**17,
            token_index=1,
        )
        assert result.admin_fees == (0, result.fees[1] * 5 * 10**9 // FEE_DENOMINATOR)
        assert result.balances[1] == 10**18 - result.amounts[1] - result.admin_fees[1]

    def test_errors(self) -> None:
        with pytest.raises(TokenIndexOutOfRange):
            calculate_remove_liquidity_one_token(
                **POOL,
                balances=BALANCES,
                swap_fee=SWAP_FEE,
                admin_fee=0,
                total_supply=TOTAL_SUPPLY,
                token_amount=10**17,
                token_index=2,
            )
        with pytest.raises(ExceedsTotalSupply):
            calculate_remove_liquidity_one_token(
                **POOL,
                balances=BALANCES,
                swap_fee=SWAP_FEE,
                admin_fee=0,
                total_supply=TOTAL_SUPPLY,
                token_amount=TOTAL_SUPPLY + 1,
                token_index=0,
            )
        with pytest.raises(WithdrawExceedsAvailable):
            calculate_remove_liquidity_one_token(
                **POOL,
                balances=BALANCES,
                swap_fee=SWAP_FEE,
                admin_fee=0,
                total_supply=TOTAL_SUPPLY,
                token_amount=15 * 10**17,
                token_index=0,
            )

    def test_zero_shares(self) -> None:
        with pytest.raises(ZeroWithdrawal):
            calculate_remove_liquidity_one_token(
                **POOL,
                balances=BALANCES,
                swap_fee=SWAP_FEE,
                admin_fee=0,
                total_supply=TOTAL_SUPPLY,
                token_amount=0,
                token_index=0,
            )


def test_negative_amounts_are_rejected() -> None:
    with pytest.raises(InvalidAmount):
        calculate_token_amount(
            **POOL,
            balances=BALANCES,
            total_supply=TOTAL_SUPPLY,
            amounts=(-(10**17), 0),
            deposit=False,
        )
    with pytest.raises(InvalidAmount):
        calculate_add_liquidity(
            **POOL,
            balances=BALANCES,
            swap_fee=SWAP_FEE,
            admin_fee=0,
            total_supply=TOTAL_SUPPLY,
            amounts=(10**17, -1),
        )
    with pytest.raises(InvalidAmount):
        calculate_remove_liquidity(
            balances=BALANCES,
            total_supply=TOTAL_SUPPLY,
            amount=-(10**18),
        )
    with pytest.raises(InvalidAmount):
        calculate_remove_liquidity_imbalance(
            **POOL,
            balances=BALANCES,
            swap_fee=SWAP_FEE,
            admin_fee=0,
            total_supply=TOTAL_SUPPLY,
            amounts=(-(10**17), 0),
        )
    with pytest.raises(InvalidAmount):
        calculate_remove_liquidity_one_token(
            **POOL,
            balances=BALANCES,
            swap_fee=SWAP_FEE,
            admin_fee=0,
            total_supply=TOTAL_SUPPLY,
            token_amount=-1,
            token_index=0,
        )
