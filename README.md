# marsprotocol

Plain-Python, in-memory models of two contracts from a money-market lending
protocol:

* **Address provider** (`marsprotocol.address_provider`): an owner-managed
  registry that maps protocol roles (`MarsAddressType`) to addresses. Addresses
  that carry the chain's prefix are checked the way the local chain would check
  them. Addresses of other chains must decode as bech32.
* **Incentives** (`marsprotocol.incentives`): reward emissions per denom, index
  accounting when balances change, and reward claiming. The index and reward
  arithmetic lives in `marsprotocol.rewards`.

`marsprotocol.numbers` supplies `Decimal`, a non-negative fixed-point number
with 18 decimal places, and `checked_add`, `checked_sub` and `checked_mul`.
These three raise `ArithmeticOverflow` when a result leaves the unsigned 128-bit
range. `marsprotocol.owner` holds the two-step ownership model.
`marsprotocol.response` holds the `Response` and `BankSend` values that
actions return.

## Installation

```
pip install .
```

The package needs Python 3.10 or newer and has no dependencies.

## Address provider

```python
from marsprotocol.address_provider import AddressProvider, MarsAddressType

provider = AddressProvider(owner="osmo_owner", prefix="osmo")
provider.set_address("osmo_owner", MarsAddressType.RED_BANK, "osmo_red_bank")

print(provider.address(MarsAddressType.RED_BANK).address)   # osmo_red_bank
print(provider.addresses([MarsAddressType.RED_BANK]))
print(provider.all_addresses(start_after=None, limit=10))
```

`all_addresses` returns entries in ascending order of the role name. It returns
10 entries by default and never more than 30. `address` raises `NotFound` for a
role that has no address.

These errors can be raised, and all of them are `ContractError` subclasses from
`marsprotocol.errors`:

* `NotOwner` when the sender is not the owner.
* `InvalidChainPrefix` at construction, when the owner does not start with the
  prefix.
* `InvalidAddress` for an address on another chain that fails bech32 decoding.
* `StdError` for an address with the local prefix that is too short, too long,
  or not lower case.

`bech32_decode`, `assert_valid_addr` and `assert_valid_prefix` are available on
their own.

## Ownership

```python
from marsprotocol.owner import AcceptProposed, ClearProposed, ProposeNewOwner

provider.update_owner("osmo_owner", ProposeNewOwner(proposed="new_admin"))
provider.update_owner("new_admin", AcceptProposed())
print(provider.config().owner)            # new_admin
```

Only the owner may propose a new owner or clear a proposal (`ClearProposed`).
Anyone other than the proposed address who tries to accept gets `Unauthorized`.

## Incentives

The incentives contract reads market totals and user collateral through a
`RedBankQuerier` from `marsprotocol.rewards`. You fill it yourself with
`Market` and `UserCollateral` records.

```python
from marsprotocol.incentives import Incentives
from marsprotocol.rewards import Market, RedBankQuerier, UserCollateral

querier = RedBankQuerier()
querier.set_market(Market(denom="uosmo", collateral_total_scaled=100_000))
querier.set_user_collateral("user", UserCollateral(denom="uosmo", amount_scaled=10_000))

incentives = Incentives(
    owner="owner",
    address_provider="address_provider",
    mars_denom="umars",
    querier=querier,
)

incentives.set_asset_incentive(
    "owner", 1_000_000, "uosmo",
    emission_per_second=100, start_time=1_000_000, duration=86_400,
)
print(incentives.user_unclaimed_rewards(1_100_000, "user"))
response = incentives.claim_rewards("user", 1_100_000)
print(response.messages)                  # [BankSend(to_address='user', ...)]
```

* A new incentive needs all three parameters. A change to an existing incentive
  may leave any of them out. Invalid parameters raise `InvalidIncentive`, and
  the reason says which rule was broken. Denoms are checked with
  `validate_native_denom`, which raises `InvalidDenom`.
* `balance_change` may only be called by the red bank. The red bank's address
  comes from the `address_resolver` attribute. By default it resolves a role to
  its own name, so the red bank is `"red_bank"`. Any other sender gets
  `Unauthorized`. If the denom has no incentive, the call does nothing.
* `claim_rewards` commits the updated indices and clears the sender's unclaimed
  rewards. If anything is owed, it returns a `BankSend` in the reward denom.
* `asset_incentives` returns incentives in ascending denom order. It returns 5
  by default and never more than 10.

## What the package does not do

All state is kept in memory on the objects. Nothing is persisted, and there is
no command-line tool. The lending market itself is not modelled: its figures
come only from what you put into `RedBankQuerier`. The incentives contract does
not look up addresses in an `AddressProvider` unless you set `address_resolver`
to do so.

## Running the tests

```
pip install ".[test]"
pytest
```