"""Contract that distributes MARS rewards to depositors of lending markets."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Optional

from .address_provider import MarsAddressType
from .errors import InvalidDenom, InvalidIncentive, NotFound, StdError, Unauthorized
from .numbers import Decimal, checked_add
from .owner import Owner, OwnerUpdate
from .response import BankSend, Response
from .rewards import (
    AssetIncentive,
    IncentivesState,
    RedBankQuerier,
    compute_user_accrued_rewards,
    compute_user_unclaimed_rewards,
    update_asset_incentive_index,
)

DEFAULT_LIMIT = 5
MAX_LIMIT = 10

_MIN_DENOM_LEN = 3
_MAX_DENOM_LEN = 128
_DENOM_SPECIAL_CHARS = "/:._-"
_MIN_ADDR_LEN = 3
_MAX_ADDR_LEN = 54

AddressResolver = Callable[[str, MarsAddressType], str]


def _role_named_address(address_provider: str, address_type: MarsAddressType) -> str:
    """Resolve a role to an address carrying the role's own name."""
    return str(address_type)


def validate_native_denom(denom: str) -> None:
    """Reject denominations that are not valid native coin denoms."""
    if not _MIN_DENOM_LEN <= len(denom) <= _MAX_DENOM_LEN:
        raise InvalidDenom("Invalid denom length")
    first = denom[0]
    if not (first.isascii() and first.isalpha()):
        raise InvalidDenom("First character is not ASCII alphabetic")
    if not all(
        (c.isascii() and c.isalnum()) or c in _DENOM_SPECIAL_CHARS for c in denom[1:]
    ):
        raise InvalidDenom(
            "Not all characters are ASCII alphanumeric or one of:  /  :  .  _  -"
        )


def _validate_addr(human: str) -> str:
    if len(human) < _MIN_ADDR_LEN:
        raise StdError("Invalid input: human address too short")
    if len(human) > _MAX_ADDR_LEN:
        raise StdError("Invalid input: human address too long")
    if human.lower() != human:
        raise StdError("Invalid input: address not normalized")
    return human


@dataclass
class IncentivesConfig:
    address_provider: str
    mars_denom: str


@dataclass(frozen=True)
class IncentivesConfigResponse:
    owner: Optional[str]
    proposed_new_owner: Optional[str]
    address_provider: str
    mars_denom: str


@dataclass(frozen=True)
class AssetIncentiveResponse:
    denom: str
    emission_per_second: int
    start_time: int
    duration: int
    index: Decimal
    last_updated: int

    @classmethod
    def from_incentive(
        cls, denom: str, asset_incentive: AssetIncentive
    ) -> AssetIncentiveResponse:
        return cls(
            denom=denom,
            emission_per_second=asset_incentive.emission_per_second,
            start_time=asset_incentive.start_time,
            duration=asset_incentive.duration,
            index=asset_incentive.index,
            last_updated=asset_incentive.last_updated,
        )


def _params_for_existing_incentive(
    asset_incentive: AssetIncentive,
    emission_per_second: Optional[int],
    start_time: Optional[int],
    duration: Optional[int],
    current_block_time: int,
) -> tuple[int, int, int]:
    end_time = asset_incentive.end_time
    if start_time is not None:
        if asset_incentive.start_time <= current_block_time <= end_time:
            raise InvalidIncentive("can't modify start_time if incentive in progress")
        if start_time < current_block_time:
            raise InvalidIncentive("start_time can't be less than current block time")
        new_start = start_time
    else:
        if end_time < current_block_time:
            raise InvalidIncentive("start_time is required for new incentive")
        new_start = asset_incentive.start_time

    if duration is not None:
        if duration == 0:
            raise InvalidIncentive("duration can't be 0")
        if new_start + duration < current_block_time:
            raise InvalidIncentive("end_time can't be less than current block time")
        new_duration = duration
    else:
        new_duration = asset_incentive.duration

    new_emission = (
        asset_incentive.emission_per_second
        if emission_per_second is None
        else emission_per_second
    )
    return new_start, new_duration, new_emission


def _params_for_new_incentive(
    start_time: Optional[int],
    duration: Optional[int],
    emission_per_second: Optional[int],
    current_block_time: int,
) -> tuple[int, int, int]:
    if start_time is None or duration is None or emission_per_second is None:
        raise InvalidIncentive("all params are required during incentive initialization")
    if duration == 0:
        raise InvalidIncentive("duration can't be 0")
    if start_time < current_block_time:
        raise InvalidIncentive("start_time can't be less than current block time")
    return start_time, duration, emission_per_second


class Incentives:
    """Tracks reward emissions per asset and what each user has earned."""

    def __init__(
        self,
        owner: str,
        address_provider: str,
        mars_denom: str,
        querier: RedBankQuerier,
    ) -> None:
        self._owner = Owner(owner)
        self._config = IncentivesConfig(
            address_provider=_validate_addr(address_provider),
            mars_denom=mars_denom,
        )
        self.querier = querier
        self.state = IncentivesState()
        self.address_resolver: AddressResolver = _role_named_address

    def _red_bank_address(self) -> str:
        return self.address_resolver(
            self._config.address_provider, MarsAddressType.RED_BANK
        )

    # Actions

    def set_asset_incentive(
        self,
        sender: str,
        block_time: int,
        denom: str,
        emission_per_second: Optional[int] = None,
        start_time: Optional[int] = None,
        duration: Optional[int] = None,
    ) -> Response:
        """Create an incentive for ``denom`` or change the existing one."""
        self._owner.assert_owner(sender)
        validate_native_denom(denom)

        stored = self.state.asset_incentives.get(denom)
        if stored is not None:
            new_start, new_duration, new_emission = _params_for_existing_incentive(
                stored, emission_per_second, start_time, duration, block_time
            )
            self._red_bank_address()
            market = self.querier.market(denom)
            incentive = replace(stored)
            update_asset_incentive_index(
                incentive, market.collateral_total_scaled, block_time
            )
            incentive.emission_per_second = new_emission
            incentive.start_time = new_start
            incentive.duration = new_duration
        else:
            new_start, new_duration, new_emission = _params_for_new_incentive(
                start_time, duration, emission_per_second, block_time
            )
            incentive = AssetIncentive(
                emission_per_second=new_emission,
                start_time=new_start,
                duration=new_duration,
                index=Decimal.zero(),
                last_updated=block_time,
            )

        self.state.asset_incentives[denom] = incentive

        return Response().add_attributes(
            [
                ("action", "set_asset_incentive"),
                ("denom", denom),
                ("emission_per_second", incentive.emission_per_second),
                ("start_time", incentive.start_time),
                ("duration", incentive.duration),
            ]
        )

    def balance_change(
        self,
        sender: str,
        block_time: int,
        user_addr: str,
        denom: str,
        user_amount_scaled_before: int,
        total_amount_scaled_before: int,
    ) -> Response:
        """Accrue a user's rewards before the lending market changes their balance."""
        if sender != self._red_bank_address():
            raise Unauthorized()

        stored = self.state.asset_incentives.get(denom)
        if stored is None:
            # The triggering call must still succeed when there is no incentive.
            return Response()

        incentive = replace(stored)
        update_asset_incentive_index(incentive, total_amount_scaled_before, block_time)
        self.state.asset_incentives[denom] = incentive

        key = (user_addr, denom)
        user_index = self.state.user_asset_indices.get(key, Decimal.zero())
        accrued = 0

        if user_index != incentive.index:
            accrued = compute_user_accrued_rewards(
                user_amount_scaled_before, user_index, incentive.index
            )
            if accrued != 0:
                unclaimed = self.state.user_unclaimed_rewards.get(user_addr)
                self.state.user_unclaimed_rewards[user_addr] = (
                    accrued if unclaimed is None else checked_add(unclaimed, accrued)
                )
            self.state.user_asset_indices[key] = incentive.index

        return Response().add_attributes(
            [
                ("action", "balance_change"),
                ("denom", denom),
                ("user", user_addr),
                ("rewards_accrued", accrued),
                ("asset_index", incentive.index),
            ]
        )

    def claim_rewards(self, sender: str, block_time: int) -> Response:
        """Send the sender all their unclaimed rewards."""
        self._red_bank_address()
        total, statuses = compute_user_unclaimed_rewards(
            self.state, self.querier, block_time, sender
        )

        for status in statuses:
            updated = status.asset_incentive_updated
            self.state.asset_incentives[status.denom] = updated
            if updated.index != status.user_index_current:
                self.state.user_asset_indices[(sender, status.denom)] = updated.index

        self.state.user_unclaimed_rewards[sender] = 0

        response = Response()
        if total != 0:
            response.add_message(
                BankSend(
                    to_address=sender, amount=total, denom=self._config.mars_denom
                )
            )
        return response.add_attributes(
            [
                ("action", "claim_rewards"),
                ("user", sender),
                ("mars_rewards", total),
            ]
        )

    def update_config(
        self,
        sender: str,
        address_provider: Optional[str] = None,
        mars_denom: Optional[str] = None,
    ) -> Response:
        self._owner.assert_owner(sender)
        if mars_denom is not None:
            validate_native_denom(mars_denom)
        if address_provider is not None:
            self._config.address_provider = _validate_addr(address_provider)
        if mars_denom is not None:
            self._config.mars_denom = mars_denom
        return Response().add_attribute("action", "update_config")

    def update_owner(self, sender: str, update: OwnerUpdate) -> Response:
        return self._owner.update(sender, update)

    # Queries

    def config(self) -> IncentivesConfigResponse:
        state = self._owner.query()
        return IncentivesConfigResponse(
            owner=state.owner,
            proposed_new_owner=state.proposed,
            address_provider=self._config.address_provider,
            mars_denom=self._config.mars_denom,
        )

    def asset_incentive(self, denom: str) -> AssetIncentiveResponse:
        try:
            incentive = self.state.asset_incentives[denom]
        except KeyError:
            raise NotFound(f"asset incentive {denom}") from None
        return AssetIncentiveResponse.from_incentive(denom, incentive)

    def asset_incentives(
        self, start_after: Optional[str] = None, limit: Optional[int] = None
    ) -> list[AssetIncentiveResponse]:
        """Incentives in ascending denom order, paginated."""
        count = min(DEFAULT_LIMIT if limit is None else limit, MAX_LIMIT)
        items = [
            AssetIncentiveResponse.from_incentive(denom, incentive)
            for denom, incentive in self.state.incentives_in_order()
            if start_after is None or denom > start_after
        ]
        return items[:count]

    def user_unclaimed_rewards(self, block_time: int, user: str) -> int:
        self._red_bank_address()
        user_addr = _validate_addr(user)
        total, _ = compute_user_unclaimed_rewards(
            self.state, self.querier, block_time, user_addr
        )
        return total