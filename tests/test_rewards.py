from dataclasses import replace

import pytest

from marsprotocol.errors import ArithmeticOverflow, NotFound
from marsprotocol.numbers import Decimal
from marsprotocol.rewards import (
    AssetIncentive,
    IncentivesState,
    Market,
    RedBankQuerier,
    UserCollateral,
    compute_asset_incentive_index,
    compute_user_accrued_rewards,
    compute_user_unclaimed_rewards,
    update_asset_incentive_index,
)


def _incentive(eps, start_time, duration=300, last_updated=0, index=None):
    return AssetIncentive(
        emission_per_second=eps,
        start_time=start_time,
        duration=duration,
        index=Decimal.one() if index is None else index,
        last_updated=last_updated,
    )


def test_update_index_if_zero_emission():
    ai = _incentive(0, 0)
    expected = replace(ai, last_updated=1)
    update_asset_incentive_index(ai, 100, 1)
    assert ai == expected


def test_update_index_if_zero_amount():
    ai = _incentive(50, 0)
    expected = replace(ai, last_updated=1)
    update_asset_incentive_index(ai, 0, 1)
    assert ai == expected


def test_update_index_if_current_block_lt_start_time():
    ai = _incentive(50, 10)
    expected = replace(ai, last_updated=9)
    update_asset_incentive_index(ai, 100, 9)
    assert ai == expected


def test_update_index_if_current_block_eq_start_time():
    ai = _incentive(50, 10)
    expected = replace(ai, last_updated=10)
    update_asset_incentive_index(ai, 100, 10)
    assert ai == expected


def test_update_index_if_current_block_gt_start_time():
    ai = _incentive(20, 10)
    update_asset_incentive_index(ai, 100, 11)
    assert ai == replace(ai, index=Decimal.from_ratio(12, 10), last_updated=11)
    assert ai.index == Decimal.from_ratio(12, 10)
    assert ai.last_updated == 11

    update_asset_incentive_index(ai, 100, 13)
    assert ai.index == Decimal.from_ratio(16, 10)
    assert ai.last_updated == 13


def test_update_index_if_last_updated_eq_end_time():
    ai = _incentive(50, 10, last_updated=310)
    expected = replace(ai, last_updated=311)
    update_asset_incentive_index(ai, 100, 311)
    assert ai == expected


def test_update_index_if_last_updated_gt_end_time():
    ai = _incentive(50, 10, last_updated=311)
    expected = replace(ai, last_updated=312)
    update_asset_incentive_index(ai, 100, 312)
    assert ai == expected


def test_update_index_if_last_updated_lt_end_time():
    ai = _incentive(20, 10, last_updated=309)
    update_asset_incentive_index(ai, 100, 310)
    assert ai.index == Decimal.from_ratio(12, 10)
    assert ai.last_updated == 310


def test_update_index_if_not_updated_till_finished():
    ai = _incentive(20, 10, last_updated=0)
    update_asset_incentive_index(ai, 100, 320)
    assert ai.index == Decimal.from_ratio(610, 10)
    assert ai.last_updated == 320


def test_compute_asset_incentive_index_start_after_end():
    with pytest.raises(ArithmeticOverflow) as info:
        compute_asset_incentive_index(Decimal.zero(), 100, 200_000, 1000, 10)
    assert info.value == ArithmeticOverflow("Sub", 1000, 10)


@pytest.mark.parametrize(
    "previous, eps, total, start, end, expected",
    [
        (Decimal.zero(), 100, 200_000, 0, 1000, Decimal.from_ratio(1, 2)),
        (Decimal.from_ratio(1, 2), 2000, 5_000_000, 20_000, 30_000, Decimal.from_ratio(9, 2)),
    ],
)
def test_compute_asset_incentive_index(previous, eps, total, start, end, expected):
    assert compute_asset_incentive_index(previous, eps, total, start, end) == expected


@pytest.mark.parametrize(
    "amount, user_index, asset_index, expected",
    [
        (0, Decimal.one(), Decimal.from_ratio(2, 1), 0),
        (100, Decimal.zero(), Decimal.from_ratio(2, 1), 200),
        (100, Decimal.one(), Decimal.from_ratio(2, 1), 100),
    ],
)
def test_compute_user_accrued_rewards(amount, user_index, asset_index, expected):
    assert compute_user_accrued_rewards(amount, user_index, asset_index) == expected


def test_compute_user_accrued_rewards_negative_raises():
    with pytest.raises(ArithmeticOverflow):
        compute_user_accrued_rewards(100, Decimal.from_ratio(2, 1), Decimal.one())


def _setup(user_balance=10_000):
    querier = RedBankQuerier()
    querier.set_market(Market(denom="uosmo", collateral_total_scaled=100_000))
    querier.set_user_collateral(
        "user", UserCollateral(denom="uosmo", amount_scaled=user_balance)
    )
    state = IncentivesState()
    state.asset_incentives["uosmo"] = AssetIncentive(
        emission_per_second=100,
        start_time=500_000,
        duration=8_640_000,
        index=Decimal.zero(),
        last_updated=500_000,
    )
    return state, querier


def test_unclaimed_rewards_for_one_tenth_share():
    state, querier = _setup()
    total, statuses = compute_user_unclaimed_rewards(state, querier, 600_000, "user")
    # 100_000 s * 100 per second * 1/10th of total deposit
    assert total == 1_000_000
    assert len(statuses) == 1
    status = statuses[0]
    assert status.denom == "uosmo"
    assert status.user_index_current == Decimal.zero()
    assert status.asset_incentive_updated.index == Decimal.from_ratio(100, 1)
    assert status.asset_incentive_updated.last_updated == 600_000


def test_unclaimed_rewards_leave_state_untouched():
    state, querier = _setup()
    compute_user_unclaimed_rewards(state, querier, 600_000, "user")
    assert state.asset_incentives["uosmo"].index == Decimal.zero()
    assert state.asset_incentives["uosmo"].last_updated == 500_000
    assert state.user_asset_indices == {}


def test_unclaimed_rewards_include_previous_rewards():
    state, querier = _setup()
    state.user_unclaimed_rewards["user"] = 50_000
    state.user_asset_indices[("user", "uosmo")] = Decimal.from_ratio(100, 1)
    total, statuses = compute_user_unclaimed_rewards(state, querier, 600_000, "user")
    assert total == 50_000
    assert statuses[0].user_index_current == Decimal.from_ratio(100, 1)


def test_unclaimed_rewards_skip_zero_balance():
    state, querier = _setup(user_balance=0)
    total, statuses = compute_user_unclaimed_rewards(state, querier, 600_000, "user")
    assert total == 0
    assert statuses == []


def test_unclaimed_rewards_in_denom_order():
    state, querier = _setup()
    querier.set_market(Market(denom="uatom", collateral_total_scaled=100_000))
    querier.set_user_collateral("user", UserCollateral(denom="uatom", amount_scaled=5))
    state.asset_incentives["uatom"] = AssetIncentive(
        emission_per_second=0,
        start_time=0,
        duration=10,
        index=Decimal.zero(),
        last_updated=0,
    )
    _, statuses = compute_user_unclaimed_rewards(state, querier, 600_000, "user")
    assert [s.denom for s in statuses] == ["uatom", "uosmo"]


def test_missing_market_raises():
    state, _ = _setup()
    with pytest.raises(NotFound):
        compute_user_unclaimed_rewards(state, RedBankQuerier(), 600_000, "user")


def test_querier_defaults_to_empty_collateral():
    querier = RedBankQuerier()
    assert querier.user_collateral("nobody", "uosmo") == UserCollateral(denom="uosmo")