"""Interfaces of the external contracts the package consumes.

The fee contract and the rate feed are deployed by other parties; only
their call surface is modelled here.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

# ERC-165 interface identifiers
INTERFACE_META_ID = bytes.fromhex("01ffc9a7")
PRICE_ORACLE_INTERFACE_ID = bytes.fromhex("50e9a715")

# Rate feed answers carry 8 decimals
RATE_FEED_DECIMALS = 8


@runtime_checkable
class FeeContract(Protocol):
    """Authoritative source of the application fee."""

    def get_fee(self) -> int:
        """Current fee in wei."""
        ...

    def update_fee(self) -> None:
        """Refresh the stored fee from the fee oracle."""
        ...

    def query_oracle(self) -> int:
        """Fee the oracle would set right now, in wei."""
        ...

    def next_reset_time(self) -> int:
        """Timestamp after which ``update_fee`` changes the fee."""
        ...

    def set_grace_contract(self, enabled: bool) -> None:
        """Register ``msg.sender`` as a grace contract."""
        ...


@runtime_checkable
class RateFeed(Protocol):
    """Aggregator-style price feed (USD per native token)."""

    def latest_answer(self) -> int:
        ...
