"""Incentive index accounting and reward computation."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterator

from .errors import ArithmeticOverflow, NotFound
from .numbers import Decimal, checked_add, checked_mul, checked_sub


@dataclass
class AssetIncentive:
    """Emission schedule and accumulated reward index of one asset."""

    emission_per_second: int
    start_time: int
    duration: int
    index: Decimal
    last_updated: int

    @property
    def end_time(self) -> int:
        return self.start_time + self.duration


@dataclass(frozen=True)
class Market:
    """The part of a lending market the incentives contract reads."""

    denom: str
    collateral_total_scaled: int = 0


@dataclass(frozen=True)
class UserCollateral:
    """A user's collateral position in one asset."""

    denom: str
    amount_scaled: int = 0
    amount: int = 0
    enabled: bool = True


class RedBankQuerier:
    """Answers market and user-collateral queries for the incentives contract."""

    def __init__(self) -> None:
        self._markets: dict[str, Market] = {}
        self._collaterals: dict[tuple[str, str], UserCollateral] = {}

    def set_market(self, market: Market) -> None:
        self._markets[market.denom] = market

    def set_user_collateral(self, user: str, collateral: UserCollateral) -> None:
        self._collaterals[(user, collateral.denom)] = collateral

    def market(self, denom: str) -> Market:
        try:
            return self._markets[denom]
        except KeyError:
            raise NotFound(f"market {denom}") from None

    def user_collateral(self, user: str, denom: str) -> UserCollateral:
        """The user's collateral, or an empty position if there is none."""
        return self._collaterals.get((user, denom), UserCollateral(denom=denom))


@dataclass
class IncentivesState:
    """Stored incentives, per-user indices and per-user unclaimed rewards."""

    asset_incentives: dict[str, AssetIncentive] = field(default_factory=dict)
    user_asset_indices: dict[tuple[str, str], Decimal] = field(default_factory=dict)
    user_unclaimed_rewards: dict[str, int] = field(default_factory=dict)

    def incentives_in_order(self) -> Iterator[tuple[str, AssetIncentive]]:
        """Stored incentives in ascending denom order."""
        for denom in sorted(self.asset_incentives):
            yield denom, self.asset_incentives[denom]


@dataclass
class UserAssetIncentiveStatus:
    """A user's stored index next to an asset incentive brought up to date."""

    denom: str
    user_index_current: Decimal
    asset_incentive_updated: AssetIncentive


def update_asset_incentive_index(
    asset_incentive: AssetIncentive,
    total_amount_scaled: int,
    current_block_time: int,
) -> None:
    """Accrue emissions into the incentive's index up to ``current_block_time``.

    The incentive is modified in place; storing it is left to the caller.
    """
    end_time = asset_incentive.end_time
    if (
        current_block_time != asset_incentive.last_updated
        and current_block_time > asset_incentive.start_time
        and asset_incentive.last_updated < end_time
        and total_amount_scaled != 0
        and asset_incentive.emission_per_second != 0
    ):
        time_start = max(asset_incentive.start_time, asset_incentive.last_updated)
        time_end = min(current_block_time, end_time)
        asset_incentive.index = compute_asset_incentive_index(
            asset_incentive.index,
            asset_incentive.emission_per_second,
            total_amount_scaled,
            time_start,
            time_end,
        )
    asset_incentive.last_updated = current_block_time


def compute_asset_incentive_index(
    previous_index: Decimal,
    emission_per_second: int,
    total_amount_scaled: int,
    time_start: int,
    time_end: int,
) -> Decimal:
    """Index after emitting for ``time_end - time_start`` seconds over the total amount."""
    if time_start > time_end:
        raise ArithmeticOverflow("Sub", time_start, time_end)
    seconds_elapsed = time_end - time_start
    emission = checked_mul(emission_per_second, seconds_elapsed)
    return previous_index + Decimal.from_ratio(emission, total_amount_scaled)


def compute_user_accrued_rewards(
    user_amount_scaled: int,
    user_asset_index: Decimal,
    asset_incentive_index: Decimal,
) -> int:
    """Rewards earned between the user's index and the (up to date) asset index."""
    return checked_sub(
        asset_incentive_index.mul_floor(user_amount_scaled),
        user_asset_index.mul_floor(user_amount_scaled),
    )


def compute_user_unclaimed_rewards(
    state: IncentivesState,
    querier: RedBankQuerier,
    block_time: int,
    user_addr: str,
) -> tuple[int, list[UserAssetIncentiveStatus]]:
    """Total unclaimed rewards of a user and the statuses to commit.

    Nothing in ``state`` is modified.
    """
    total = state.user_unclaimed_rewards.get(user_addr, 0)
    statuses: list[UserAssetIncentiveStatus] = []

    for denom, stored in state.incentives_in_order():
        collateral = querier.user_collateral(user_addr, denom)
        market = querier.market(denom)

        # Without a balance there is nothing to accrue; indices catch up on the
        # next balance change.
        if collateral.amount_scaled == 0:
            continue

        asset_incentive = replace(stored)
        update_asset_incentive_index(
            asset_incentive, market.collateral_total_scaled, block_time
        )

        user_index = state.user_asset_indices.get((user_addr, denom), Decimal.zero())
        if user_index != asset_incentive.index:
            accrued = compute_user_accrued_rewards(
                collateral.amount_scaled, user_index, asset_incentive.index
            )
            total = checked_add(total, accrued)

        statuses.append(
            UserAssetIncentiveStatus(
                denom=denom,
                user_index_current=user_index,
                asset_incentive_updated=asset_incentive,
            )
        )

    return total, statuses