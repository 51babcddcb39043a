"""Exceptions raised by the contracts."""

from __future__ import annotations


class ContractError(Exception):
    """Base class of every error a contract reports."""

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ContractError):
            return NotImplemented
        return type(self) is type(other) and self.args == other.args

    def __hash__(self) -> int:
        return hash((type(self), self.args))


class StdError(ContractError):
    """Generic failure from the execution environment."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"Generic error: {self.message}"


class ArithmeticOverflow(StdError):
    """An integer operation left the unsigned 128-bit range."""

    def __init__(self, operation: str, operand1: object, operand2: object) -> None:
        ContractError.__init__(self, operation, operand1, operand2)
        self.message = f"Cannot {operation} with {operand1} and {operand2}"
        self.operation = operation
        self.operand1 = operand1
        self.operand2 = operand2

    def __str__(self) -> str:
        return f"Overflow: {self.message}"


class NotFound(StdError):
    """A stored value that was asked for does not exist."""

    def __init__(self, kind: str) -> None:
        ContractError.__init__(self, kind)
        self.message = kind
        self.kind = kind

    def __str__(self) -> str:
        return f"{self.kind} not found"


class NotOwner(ContractError):
    """The caller is not the contract owner."""

    def __str__(self) -> str:
        return "Caller is not owner"


class Unauthorized(ContractError):
    """The caller may not perform this action."""

    def __str__(self) -> str:
        return "Unauthorized"


class InvalidAddress(ContractError):
    """An address failed validation."""

    def __init__(self, address: str) -> None:
        super().__init__(address)
        self.address = address

    def __str__(self) -> str:
        return f"Invalid address: {self.address}"


class InvalidChainPrefix(ContractError):
    """The configured prefix does not match the owner's address."""

    def __init__(self, prefix: str) -> None:
        super().__init__(prefix)
        self.prefix = prefix

    def __str__(self) -> str:
        return f"Invalid chain prefix: {self.prefix}"


class InvalidIncentive(ContractError):
    """Incentive parameters were rejected."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason

    def __str__(self) -> str:
        return f"Invalid incentive: {self.reason}"


class InvalidDenom(ContractError):
    """A coin denomination failed validation."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason

    def __str__(self) -> str:
        return f"Invalid denom: {self.reason}"