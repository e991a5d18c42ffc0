"""Stable price oracle contract.

Rent is priced in USD per second by name length, multiplied by the
registration duration and converted to wei with the rate feed. Quotes
also carry the application fee so a caller can budget the full payment
of a fee-protected registration.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from ..interfaces import FeeContract, INTERFACE_META_ID, PRICE_ORACLE_INTERFACE_ID, RateFeed
from ..ledger import Contract, Ledger
from ..types import Address, AttoUSD, Wei
from . import kernel
from .config import PriceOracleConfig
from .premium import NoPremium, PremiumStrategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriceQuote:
    """Price of a registration.

    Attributes:
        base: Rent in wei
        premium: Premium in wei
        fee: Application fee in wei
    """
    base: Wei
    premium: Wei
    fee: Wei

    @property
    def total(self) -> Wei:
        """Value a caller must send to cover rent, premium and fee."""
        return Wei(self.base + self.premium + self.fee)


class PriceOracle(Contract):
    """Length-tiered price oracle with a pluggable premium.

    Example:
        >>> oracle = ledger.deploy(PriceOracle, config, sender=deployer)
        >>> quote = oracle.price("alice", expires=0, duration=365 * 86400)
        >>> quote.total

    Args:
        ledger: Ledger the contract lives on
        address: Contract address
        config: PriceOracleConfig instance
        premium_strategy: Premium strategy (default: ``NoPremium``)
    """

    def __init__(
        self,
        ledger: Ledger,
        address: Address,
        config: PriceOracleConfig,
        premium_strategy: Optional[PremiumStrategy] = None,
    ):
        super().__init__(ledger, address)
        self.config = config
        self.premium_strategy = premium_strategy if premium_strategy is not None else NoPremium()

    def latest_rate(self) -> int:
        """Latest feed answer (USD per native token, 8 decimals).

        Raises:
            InvalidRate: If the feed answers zero or a negative rate
        """
        feed: RateFeed = self.ledger.contract_at(Address(self.config.price_feed))
        return kernel.validate_rate(feed.latest_answer())

    def usd_to_native(self, amount: int) -> Wei:
        return kernel.usd_to_native(amount, self.latest_rate())

    def native_to_usd(self, amount: int) -> AttoUSD:
        return kernel.native_to_usd(amount, self.latest_rate())

    def enforcement_fee(self) -> Wei:
        """Fee the next protected call will charge.

        If the fee contract is due for a reset, the freshly queried oracle
        value is reported instead of the stale stored fee.
        """
        if self.config.fee_contract is None:
            return Wei(0)

        fee_contract: FeeContract = self.ledger.contract_at(Address(self.config.fee_contract))
        if self.ledger.timestamp > fee_contract.next_reset_time():
            return Wei(fee_contract.query_oracle())
        return Wei(fee_contract.get_fee())

    def _premium_usd(self, name: str, expires: int, duration: int) -> AttoUSD:
        return self.premium_strategy.premium(name, expires, duration, self.ledger.timestamp)

    def premium(self, name: str, expires: int, duration: int) -> Wei:
        """Premium for ``name`` in wei."""
        return self.usd_to_native(self._premium_usd(name, expires, duration))

    def price(self, name: str, expires: int, duration: int) -> PriceQuote:
        """Quote registering or renewing ``name`` for ``duration`` seconds.

        Args:
            name: Label being priced; its length selects the rent tier
            expires: Current expiry of the name (0 if never registered)
            duration: Registration duration in seconds

        Returns:
            PriceQuote with base and premium in wei and the application fee

        Raises:
            InvalidRate: If the rate feed answer is not positive
        """
        rate = self.latest_rate()
        base_usd = kernel.base_price(self.config.rent_prices, name, duration)
        premium_usd = self._premium_usd(name, expires, duration)

        quote = PriceQuote(
            base=kernel.usd_to_native(base_usd, rate),
            premium=kernel.usd_to_native(premium_usd, rate),
            fee=self.enforcement_fee(),
        )
        logger.debug("Quoted %r for %ds at rate %d: %s", name, duration, rate, quote)
        return quote

    quote = price

    def supports_interface(self, interface_id: Union[bytes, str]) -> bool:
        """ERC-165 interface discovery."""
        if isinstance(interface_id, str):
            interface_id = bytes.fromhex(interface_id.removeprefix("0x"))
        return (
            interface_id == INTERFACE_META_ID
            or interface_id == PRICE_ORACLE_INTERFACE_ID
            or interface_id in self.premium_strategy.interface_ids
        )
