"""Two-step contract ownership."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from .errors import NotOwner, Unauthorized
from .response import Response


@dataclass(frozen=True)
class ProposeNewOwner:
    """Owner proposes another address to take over."""

    proposed: str


@dataclass(frozen=True)
class ClearProposed:
    """Owner withdraws the pending proposal."""


@dataclass(frozen=True)
class AcceptProposed:
    """Proposed address accepts ownership."""


OwnerUpdate = Union[ProposeNewOwner, ClearProposed, AcceptProposed]


@dataclass(frozen=True)
class OwnerState:
    owner: Optional[str]
    proposed: Optional[str]


class Owner:
    """Tracks the current owner and an optional proposed successor."""

    def __init__(self, owner: str) -> None:
        self._owner: Optional[str] = owner
        self._proposed: Optional[str] = None

    def is_owner(self, sender: str) -> bool:
        return self._owner is not None and sender == self._owner

    def assert_owner(self, sender: str) -> None:
        if not self.is_owner(sender):
            raise NotOwner()

    def update(self, sender: str, update: OwnerUpdate) -> Response:
        """Apply an ownership change requested by ``sender``."""
        if isinstance(update, ProposeNewOwner):
            self.assert_owner(sender)
            self._proposed = update.proposed
            return (
                Response()
                .add_attribute("action", "propose_new_owner")
                .add_attribute("proposed", update.proposed)
            )
        if isinstance(update, ClearProposed):
            self.assert_owner(sender)
            self._proposed = None
            return Response().add_attribute("action", "clear_proposed")
        if isinstance(update, AcceptProposed):
            if self._proposed is None or sender != self._proposed:
                raise Unauthorized()
            self._owner = self._proposed
            self._proposed = None
            return (
                Response()
                .add_attribute("action", "accept_proposed")
                .add_attribute("new_owner", sender)
            )
        raise TypeError(f"unknown owner update: {update!r}")

    def query(self) -> OwnerState:
        return OwnerState(owner=self._owner, proposed=self._proposed)