"""Typed reverts raised by contracts running on the ledger.

Every error a contract raises is a ``Revert``. The ledger restores its
pre-call snapshot before the exception reaches the caller, so nothing a
failed call did is observable afterwards.
"""

from __future__ import annotations


class Revert(Exception):
    """Base class for contract reverts.

    Attributes:
        reason: Human-readable revert reason
    """

    def __init__(self, reason: str = ""):
        super().__init__(reason)
        self.reason = reason


class AlreadyInitialized(Revert):
    """Fee enforcement was initialized a second time."""

    def __init__(self):
        super().__init__("already initialized")


class InvalidFeeContract(Revert):
    """Fee contract address is the zero address."""

    def __init__(self, address=None):
        super().__init__(f"invalid fee contract: {address!r}")
        self.address = address


class InsufficientFunds(Revert):
    """Supplied value or contract balance does not cover the fee.

    Attributes:
        balance: Contract balance at the time of the check
        fee: Fee that had to be covered
    """

    def __init__(self, balance: int, fee: int):
        super().__init__(f"insufficient funds: balance {balance}, fee {fee}")
        self.balance = balance
        self.fee = fee


class InvalidRate(Revert):
    """Rate feed answered with a zero or negative rate."""

    def __init__(self, rate: int):
        super().__init__(f"invalid rate from feed: {rate}")
        self.rate = rate


class TransferFailed(Revert):
    """A native value transfer could not be completed."""

    def __init__(self, sender: str, recipient: str, amount: int, reason: str = ""):
        message = f"transfer of {amount} wei from {sender} to {recipient} failed"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.sender = sender
        self.recipient = recipient
        self.amount = amount
