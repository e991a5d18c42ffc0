"""Premium decay schedules computed with JAX.

Evaluates the exponential premium curve over many points at once for
analysis and plotting. Values are floats in USD and only approximate the
integer kernel; charging always goes through ``kernel.exponential_premium``.
"""

from __future__ import annotations

import dataclasses
from typing import Optional

import jax
import jax.numpy as jnp
import pint
from penzai.core import struct

from ..fields import quantity_field
from ..units import QuantityInput, UnitManager, UnitSpec
from .config import ExponentialPremiumConfig
from .kernel import PRECISION, SECONDS_PER_DAY

USD_SPEC = UnitSpec(dimension="price", symbol="USD", to_canonical=float(PRECISION))


def premium_curve(
    start_usd: jax.Array,
    end_usd: jax.Array,
    elapsed_days: jax.Array
) -> jax.Array:
    """Premium in USD after ``elapsed_days`` of decay.

    Args:
        start_usd: Start premium in USD
        end_usd: Value the decay stops at, in USD
        elapsed_days: Days since the grace period ended (array)

    Returns:
        Array of premiums, zero where the decayed value is below ``end_usd``
    """
    decayed = start_usd * jnp.exp2(-elapsed_days)
    return jnp.where(decayed >= end_usd, decayed - end_usd, 0.0)


@struct.pytree_dataclass
class PremiumSchedule(struct.Struct):
    """Premium sampled over time since the end of the grace period.

    Attributes:
        elapsed: Seconds since the grace period ended
        premium: Premium at each sample, in USD
        units: UnitSpec metadata for ``premium``
    """
    elapsed: jax.Array
    premium: jax.Array
    units: UnitSpec = dataclasses.field(
        default=USD_SPEC, metadata={'pytree_node': False}
    )

    def premium_at(self, elapsed: float) -> float:
        """Linearly interpolated premium (USD) at ``elapsed`` seconds."""
        return float(jnp.interp(elapsed, self.elapsed, self.premium))

    def to_quantity(self, manager: Optional[UnitManager] = None) -> pint.Quantity:
        """Premium samples as a pint Quantity array."""
        if manager is None:
            manager = UnitManager.instance()
        return manager.registry.Quantity(jax.device_get(self.premium), self.units.symbol)


def premium_schedule(
    config: ExponentialPremiumConfig,
    horizon: QuantityInput = "30 days",
    points: int = 721,
) -> PremiumSchedule:
    """Sample the premium curve from the end of the grace period.

    Args:
        config: ExponentialPremiumConfig instance
        horizon: How far to sample (e.g. "30 days", or seconds)
        points: Number of evenly spaced samples, including both ends

    Returns:
        PremiumSchedule

    Example:
        >>> schedule = premium_schedule(ExponentialPremiumConfig(
        ...     start_premium="100M USD", total_days=21
        ... ))
        >>> schedule.premium_at(86400.0)  # about 50M USD after one day
    """
    if points < 2:
        raise ValueError(f"Need at least 2 points, got {points}")

    horizon_seconds, _ = quantity_field("time", "second", min_value=0.0)(horizon)
    if horizon_seconds <= 0:
        raise ValueError(f"Horizon must be positive, got {horizon}")

    elapsed = jnp.linspace(0.0, horizon_seconds, points)
    start_usd = jnp.asarray(config.start_premium / PRECISION)
    end_usd = jnp.asarray(config.end_value / PRECISION)

    premium = premium_curve(start_usd, end_usd, elapsed / SECONDS_PER_DAY)
    return PremiumSchedule(elapsed=elapsed, premium=premium)
