"""Premium strategies for the price oracle.

A strategy turns ``(name, expires, duration, now)`` into a premium in
attoUSD. The oracle converts it to wei with the same rate as the base
price. Strategies may advertise extra ERC-165 interface ids through
``interface_ids``.
"""

from __future__ import annotations

from typing import FrozenSet, Protocol, runtime_checkable

from ..types import AttoUSD
from .config import ExponentialPremiumConfig
from .kernel import decayed_premium, exponential_premium


@runtime_checkable
class PremiumStrategy(Protocol):
    """Computes the premium charged on top of the base rent."""

    interface_ids: FrozenSet[bytes]

    def premium(self, name: str, expires: int, duration: int, now: int) -> AttoUSD:
        ...


class NoPremium:
    """No premium, ever."""

    interface_ids: FrozenSet[bytes] = frozenset()

    def premium(self, name: str, expires: int, duration: int, now: int) -> AttoUSD:
        return AttoUSD(0)


class ExponentialPremium:
    """Dutch-auction premium for names released after the grace period.

    The premium starts at ``start_premium - end_value`` when the grace
    period ends, halves every day and is zero after ``total_days``.

    Args:
        config: ExponentialPremiumConfig instance
    """

    interface_ids: FrozenSet[bytes] = frozenset()

    def __init__(self, config: ExponentialPremiumConfig):
        self.config = config

    @property
    def end_value(self) -> int:
        return self.config.end_value

    def decayed_premium(self, elapsed: int) -> int:
        """Start premium after ``elapsed`` seconds of decay, before subtracting ``end_value``."""
        return decayed_premium(self.config.start_premium, elapsed)

    def premium(self, name: str, expires: int, duration: int, now: int) -> AttoUSD:
        return exponential_premium(
            self.config.start_premium,
            self.config.end_value,
            expires,
            self.config.grace_period,
            now,
        )
