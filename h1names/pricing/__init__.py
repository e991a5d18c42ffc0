"""Pricing module: stable price oracle with pluggable premiums."""

from .config import PriceOracleConfig, ExponentialPremiumConfig
from .premium import PremiumStrategy, NoPremium, ExponentialPremium
from .oracle import PriceOracle, PriceQuote
from .kernel import (
    base_price,
    decayed_premium,
    exponential_premium,
    native_to_usd,
    unit_price,
    usd_to_native,
)
from .schedule import PremiumSchedule, premium_schedule

__all__ = [
    'PriceOracleConfig',
    'ExponentialPremiumConfig',
    'PremiumStrategy',
    'NoPremium',
    'ExponentialPremium',
    'PriceOracle',
    'PriceQuote',
    'base_price',
    'decayed_premium',
    'exponential_premium',
    'native_to_usd',
    'unit_price',
    'usd_to_native',
    'PremiumSchedule',
    'premium_schedule',
]
