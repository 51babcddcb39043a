"""Registry mapping protocol roles to contract addresses."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from .errors import InvalidAddress, InvalidChainPrefix, NotFound, StdError
from .owner import Owner, OwnerUpdate
from .response import Response

DEFAULT_LIMIT = 10
MAX_LIMIT = 30

_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
_GENERATOR = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)
_BECH32_CONST = 1
_BECH32M_CONST = 0x2BC830A3
_MIN_ADDR_LEN = 3
_MAX_ADDR_LEN = 54


class MarsAddressType(str, Enum):
    INCENTIVES = "incentives"
    ORACLE = "oracle"
    RED_BANK = "red_bank"
    REWARDS_COLLECTOR = "rewards_collector"
    PROTOCOL_ADMIN = "protocol_admin"
    FEE_COLLECTOR = "fee_collector"
    SAFETY_FUND = "safety_fund"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class AddressResponseItem:
    address_type: MarsAddressType
    address: str


@dataclass(frozen=True)
class AddressProviderConfig:
    owner: Optional[str]
    proposed_new_owner: Optional[str]
    prefix: str


def _polymod(values: Iterable[int]) -> int:
    chk = 1
    for value in values:
        top = chk >> 25
        chk = ((chk & 0x1FFFFFF) << 5) ^ value
        for i, gen in enumerate(_GENERATOR):
            if (top >> i) & 1:
                chk ^= gen
    return chk


def _hrp_expand(hrp: str) -> list[int]:
    return [ord(c) >> 5 for c in hrp] + [0] + [ord(c) & 31 for c in hrp]


def bech32_decode(address: str) -> tuple[str, list[int]]:
    """Decode a bech32 or bech32m string into its prefix and 5-bit data."""
    if any(not 33 <= ord(c) <= 126 for c in address):
        raise ValueError("invalid character")
    if address.lower() != address and address.upper() != address:
        raise ValueError("mixed case")
    address = address.lower()
    pos = address.rfind("1")
    if pos < 1 or pos + 7 > len(address):
        raise ValueError("invalid separator position")
    hrp = address[:pos]
    data = [_CHARSET.find(c) for c in address[pos + 1 :]]
    if -1 in data:
        raise ValueError("invalid data character")
    if _polymod(_hrp_expand(hrp) + data) not in (_BECH32_CONST, _BECH32M_CONST):
        raise ValueError("invalid checksum")
    return hrp, data[:-6]


def _validate_local_addr(human: str) -> None:
    if len(human) < _MIN_ADDR_LEN:
        raise StdError("Invalid input: human address too short")
    if len(human) > _MAX_ADDR_LEN:
        raise StdError("Invalid input: human address too long")
    if human.lower() != human:
        raise StdError("Invalid input: address not normalized")


def assert_valid_addr(human: str, prefix: str) -> None:
    """Validate an address of this chain, or any bech32 address of another chain."""
    if human.startswith(prefix):
        _validate_local_addr(human)
        return
    try:
        bech32_decode(human)
    except ValueError:
        raise InvalidAddress(human) from None


def assert_valid_prefix(owner: str, prefix: str) -> None:
    """The prefix must be the one the owner's address carries."""
    if not owner.startswith(prefix):
        raise InvalidChainPrefix(prefix)


class AddressProvider:
    """Owner-managed store of protocol contract addresses."""

    def __init__(self, owner: str, prefix: str) -> None:
        assert_valid_prefix(owner, prefix)
        self._owner = Owner(owner)
        self._prefix = prefix
        self._addresses: dict[MarsAddressType, str] = {}

    def set_address(
        self, sender: str, address_type: MarsAddressType, address: str
    ) -> Response:
        self._owner.assert_owner(sender)
        assert_valid_addr(address, self._prefix)
        self._addresses[address_type] = address
        return (
            Response()
            .add_attribute("action", "set_address")
            .add_attribute("address_type", str(address_type))
            .add_attribute("address", address)
        )

    def update_owner(self, sender: str, update: OwnerUpdate) -> Response:
        return self._owner.update(sender, update)

    def config(self) -> AddressProviderConfig:
        state = self._owner.query()
        return AddressProviderConfig(
            owner=state.owner,
            proposed_new_owner=state.proposed,
            prefix=self._prefix,
        )

    def address(self, address_type: MarsAddressType) -> AddressResponseItem:
        try:
            stored = self._addresses[address_type]
        except KeyError:
            raise NotFound(f"address of {address_type}") from None
        return AddressResponseItem(address_type=address_type, address=stored)

    def addresses(
        self, address_types: Iterable[MarsAddressType]
    ) -> list[AddressResponseItem]:
        return [self.address(address_type) for address_type in address_types]

    def all_addresses(
        self,
        start_after: Optional[MarsAddressType] = None,
        limit: Optional[int] = None,
    ) -> list[AddressResponseItem]:
        """Stored addresses in ascending key order, paginated."""
        count = min(DEFAULT_LIMIT if limit is None else limit, MAX_LIMIT)
        keys = sorted(self._addresses, key=lambda t: t.value)
        if start_after is not None:
            keys = [k for k in keys if k.value > start_after.value]
        return [
            AddressResponseItem(address_type=k, address=self._addresses[k])
            for k in keys[:count]
        ]