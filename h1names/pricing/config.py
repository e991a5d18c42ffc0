"""Price oracle configuration with unit-aware Pydantic models.

Prices accept either raw integers in canonical units (attoUSD per second,
attoUSD, seconds) or unit strings parsed by pint:
- Rent prices: "5 USD / year", "640 USD / year"
- Premiums: "100M USD", "2500 USD"
- Durations: "90 days", "2 weeks"
"""

from __future__ import annotations

import re
from typing import Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..fields import integer_field
from ..units import UnitManager

ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")
DEFAULT_GRACE_PERIOD = 90 * 86400


def _validate_address(value: Optional[str], field_name: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str) or not ADDRESS_PATTERN.match(value):
        raise ValueError(f"{field_name} must be a 0x-prefixed 20-byte address, got {value!r}")
    if int(value, 16) == 0:
        raise ValueError(f"{field_name} must not be the zero address")
    return value


class PriceOracleConfig(BaseModel):
    """Configuration of a stable price oracle.

    Example:
        >>> config = PriceOracleConfig(
        ...     price1_letter="640 USD / year",
        ...     price2_letter="640 USD / year",
        ...     price3_letter="640 USD / year",
        ...     price4_letter="160 USD / year",
        ...     price5_letter="5 USD / year",
        ...     price_feed=feed.address,
        ...     fee_contract=fee.address,
        ... )
    """

    price1_letter: int = Field(description="Rent for 1-character names, attoUSD per second")
    price2_letter: int = Field(description="Rent for 2-character names, attoUSD per second")
    price3_letter: int = Field(description="Rent for 3-character names, attoUSD per second")
    price4_letter: int = Field(description="Rent for 4-character names, attoUSD per second")
    price5_letter: int = Field(description="Rent for names of 5 or more characters, attoUSD per second")

    price_feed: str = Field(description="Address of the USD rate feed")
    fee_contract: Optional[str] = Field(
        default=None,
        description="Address of the fee contract (no fee is quoted if unset)"
    )

    model_config = ConfigDict(frozen=True)

    _validate_prices = field_validator(
        "price1_letter", "price2_letter", "price3_letter", "price4_letter", "price5_letter",
        mode="before"
    )(integer_field("price/time"))

    @field_validator("price_feed", mode="before")
    def _validate_price_feed(cls, v):
        if v is None:
            raise ValueError("price_feed is required")
        return _validate_address(v, "price_feed")

    @field_validator("fee_contract", mode="before")
    def _validate_fee_contract(cls, v):
        if v == "":
            return None
        return _validate_address(v, "fee_contract")

    @classmethod
    def from_rent_prices(
        cls,
        rent_prices: Sequence,
        price_feed: str,
        fee_contract: Optional[str] = None,
    ) -> PriceOracleConfig:
        """Build a config from the five-element price list used at deployment.

        Args:
            rent_prices: Prices for lengths 1, 2, 3, 4 and 5-or-more
            price_feed: Rate feed address
            fee_contract: Fee contract address

        Raises:
            ValueError: If ``rent_prices`` does not have five entries
        """
        if len(rent_prices) != 5:
            raise ValueError(f"Expected 5 rent prices, got {len(rent_prices)}")
        return cls(
            price1_letter=rent_prices[0],
            price2_letter=rent_prices[1],
            price3_letter=rent_prices[2],
            price4_letter=rent_prices[3],
            price5_letter=rent_prices[4],
            price_feed=price_feed,
            fee_contract=fee_contract,
        )

    @property
    def rent_prices(self) -> Tuple[int, int, int, int, int]:
        return (
            self.price1_letter,
            self.price2_letter,
            self.price3_letter,
            self.price4_letter,
            self.price5_letter,
        )

    def summary(self, format: str = "markdown") -> str:
        """Generate summary of the price oracle configuration.

        Args:
            format: Output format ('markdown', 'text', or 'dict')

        Returns:
            Formatted summary string
        """
        if format == "dict":
            return str(self.model_dump())

        manager = UnitManager.instance()

        def per_year(price: int) -> str:
            qty = manager.registry.Quantity(price, "attoUSD / second").to("USD / year")
            return f"{qty.magnitude:.4g}"

        labels = ["1 letter", "2 letters", "3 letters", "4 letters", "5+ letters"]
        lines = []

        if format == "markdown":
            lines.append("# Price Oracle Configuration\n")
            lines.append("| Name length | Rent | Units |")
            lines.append("|-------------|------|-------|")
            for label, price in zip(labels, self.rent_prices):
                lines.append(f"| {label} | {per_year(price)} | USD/year |")
            lines.append(f"\nPrice feed: `{self.price_feed}`")
            lines.append(f"Fee contract: `{self.fee_contract or '-'}`")
        else:
            lines.append("Price Oracle Configuration")
            lines.append("-" * 40)
            for label, price in zip(labels, self.rent_prices):
                lines.append(f"  {label}: {per_year(price)} USD/year")
            lines.append(f"  Price feed: {self.price_feed}")
            lines.append(f"  Fee contract: {self.fee_contract or '-'}")

        return "\n".join(lines)


class ExponentialPremiumConfig(BaseModel):
    """Configuration of the exponentially decaying re-registration premium.

    Example:
        >>> config = ExponentialPremiumConfig(
        ...     start_premium="100M USD",
        ...     total_days=21,
        ... )
        >>> config.end_value == config.start_premium >> 21
        True
    """

    start_premium: int = Field(description="Premium when the grace period ends, attoUSD")
    total_days: int = Field(gt=0, description="Days until the premium reaches zero")
    grace_period: int = Field(
        default=DEFAULT_GRACE_PERIOD,
        description="Seconds after expiry before the premium starts, default 90 days"
    )

    model_config = ConfigDict(frozen=True)

    _validate_start_premium = field_validator("start_premium", mode="before")(
        integer_field("price")
    )

    _validate_grace_period = field_validator("grace_period", mode="before")(
        integer_field("time", "second")
    )

    @property
    def end_value(self) -> int:
        """Value the decay stops at, subtracted from every premium."""
        return self.start_premium >> self.total_days

    def summary(self, format: str = "markdown") -> str:
        """Generate summary of the premium configuration.

        Args:
            format: Output format ('markdown', 'text', or 'dict')
        """
        if format == "dict":
            return str(self.model_dump())

        start_usd = self.start_premium / 10 ** 18
        grace_days = self.grace_period / 86400

        if format == "markdown":
            return "\n".join([
                "# Exponential Premium Configuration\n",
                "| Parameter | Value | Units |",
                "|-----------|--------|-------|",
                f"| Start premium | {start_usd:.4g} | USD |",
                f"| Total days | {self.total_days} | day |",
                f"| Grace period | {grace_days:.4g} | day |",
            ])

        return "\n".join([
            "Exponential Premium Configuration",
            "-" * 40,
            f"  Start premium: {start_usd:.4g} USD",
            f"  Total days: {self.total_days}",
            f"  Grace period: {grace_days:.4g} days",
        ])
