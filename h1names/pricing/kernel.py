"""Integer pricing kernels.

Pure functions over Python ints that reproduce the on-chain arithmetic
exactly: truncating division everywhere, 8-decimal rate feed answers and
18-decimal fixed point for the premium decay.
"""

from __future__ import annotations

from typing import Sequence

from ..errors import InvalidRate
from ..interfaces import RATE_FEED_DECIMALS
from ..types import AttoUSD, Wei

PRECISION = 10 ** 18
RATE_SCALE = 10 ** RATE_FEED_DECIMALS
SECONDS_PER_DAY = 86400

# 0.5 ** (2**i / 65536) in 18-decimal fixed point, for bit i of the
# fractional day (16 bits of resolution)
HALVING_FACTORS = (
    999989423469314432,
    999978847050491904,
    999957694548431104,
    999915390886613504,
    999830788931929088,
    999661606496243712,
    999323327502650752,
    998647112890970240,
    997296056085470080,
    994599423483633152,
    989228013193975424,
    978572062087700096,
    957603280698573696,
    917004043204671232,
    840896415253714560,
    707106781186547584,
)
FRACTION_BITS = len(HALVING_FACTORS)


def unit_price(rent_prices: Sequence[int], name_length: int) -> AttoUSD:
    """Select the per-second price tier for a name length.

    Args:
        rent_prices: Five prices for lengths 1, 2, 3, 4 and 5-or-more
        name_length: Number of characters (code points) in the name

    Returns:
        Price in attoUSD per second
    """
    if len(rent_prices) != 5:
        raise ValueError(f"Expected 5 rent prices, got {len(rent_prices)}")

    if name_length >= 5:
        return AttoUSD(rent_prices[4])
    if name_length == 4:
        return AttoUSD(rent_prices[3])
    if name_length == 3:
        return AttoUSD(rent_prices[2])
    if name_length == 2:
        return AttoUSD(rent_prices[1])
    return AttoUSD(rent_prices[0])


def base_price(rent_prices: Sequence[int], name: str, duration: int) -> AttoUSD:
    """Rental price of ``name`` for ``duration`` seconds, in attoUSD."""
    if duration < 0:
        raise ValueError(f"Duration must be non-negative, got {duration}")
    return AttoUSD(unit_price(rent_prices, len(name)) * duration)


def validate_rate(rate: int) -> int:
    """Return ``rate`` if usable for conversion.

    Raises:
        InvalidRate: If the feed answer is zero or negative
    """
    if rate <= 0:
        raise InvalidRate(rate)
    return rate


def usd_to_native(amount: int, rate: int) -> Wei:
    """Convert attoUSD to wei: ``amount * 1e8 // rate``."""
    return Wei(amount * RATE_SCALE // validate_rate(rate))


def native_to_usd(amount: int, rate: int) -> AttoUSD:
    """Convert wei to attoUSD: ``amount * rate // 1e8``."""
    return AttoUSD(amount * validate_rate(rate) // RATE_SCALE)


def add_fractional_premium(fraction: int, premium: int) -> int:
    """Apply the decay for a fraction of a day given in 1/65536 units."""
    for bit, factor in enumerate(HALVING_FACTORS):
        if fraction & (1 << bit):
            premium = premium * factor // PRECISION
    return premium


def decayed_premium(start_premium: int, elapsed: int) -> int:
    """Premium halved once per day elapsed, with 16-bit sub-day resolution.

    Args:
        start_premium: Premium at ``elapsed == 0``, in attoUSD
        elapsed: Seconds since the decay started

    Returns:
        Decayed premium in attoUSD
    """
    days_past = elapsed * PRECISION // SECONDS_PER_DAY
    int_days = days_past // PRECISION
    premium = start_premium >> int_days
    part_day = days_past - int_days * PRECISION
    fraction = part_day * (1 << FRACTION_BITS) // PRECISION
    return add_fractional_premium(fraction, premium)


def exponential_premium(
    start_premium: int,
    end_value: int,
    expires: int,
    grace_period: int,
    now: int,
) -> AttoUSD:
    """Premium for re-registering an expired name.

    Zero until the grace period ends, then decays from
    ``start_premium - end_value`` and reaches zero once the decayed value
    falls to ``end_value``.
    """
    released = expires + grace_period
    if released > now:
        return AttoUSD(0)

    premium = decayed_premium(start_premium, now - released)
    if premium >= end_value:
        return AttoUSD(premium - end_value)
    return AttoUSD(0)
