"""In-memory address provider and incentives contracts of a lending protocol."""

__version__ = "0.1.0"

__all__ = [
    "address_provider",
    "errors",
    "incentives",
    "numbers",
    "owner",
    "response",
    "rewards",
]