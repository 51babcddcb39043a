"""Results returned by contract actions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable


@dataclass(frozen=True)
class BankSend:
    """Transfer of ``amount`` of ``denom`` to ``to_address``."""

    to_address: str
    amount: int
    denom: str


@dataclass
class Response:
    """Attributes and outgoing messages produced by an action."""

    attributes: list[tuple[str, str]] = field(default_factory=list)
    messages: list[BankSend] = field(default_factory=list)

    def add_attribute(self, key: str, value: object) -> Response:
        self.attributes.append((key, str(value)))
        return self

    def add_attributes(self, attributes: Iterable[tuple[str, object]]) -> Response:
        for key, value in attributes:
            self.add_attribute(key, value)
        return self

    def add_message(self, message: BankSend) -> Response:
        self.messages.append(message)
        return self