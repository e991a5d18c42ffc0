"""Unit management for h1names using pint.

This module provides the foundation for unit-aware configuration with:
- UnitManager: Singleton registry management and unit conversions
- UnitSpec: Metadata describing the units a value was given in
- Exact conversion of user inputs ("100M USD", "0.001 ether") to the
  integer canonical units the ledger works in (attoUSD, wei, seconds)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Union, Optional, ClassVar

import pint

# Type alias for inputs that can be converted to quantities
QuantityInput = Union[str, float, int, pint.Quantity]


def _to_decimal(value: Union[int, float]) -> Decimal:
    if isinstance(value, int):
        return Decimal(value)
    return Decimal(f"{float(value):.15g}")


@dataclass(frozen=True)
class UnitSpec:
    """Immutable metadata for units.

    Attributes:
        dimension: Dimension name (e.g., "time", "price", "native")
        symbol: Unit symbol string (e.g., "day", "USD", "ether")
        to_canonical: Factor to convert from this unit to canonical
    """
    dimension: str
    symbol: str
    to_canonical: float = 1.0

    def __hash__(self):
        return hash((self.dimension, self.symbol, self.to_canonical))


class UnitManager:
    """Manages unit registry and conversions for h1names.

    Canonical units are the ones the contracts compute in:
    attoUSD for prices, wei for native amounts and seconds for time.
    """

    _instance: ClassVar[Optional[UnitManager]] = None

    def __init__(self, registry: Optional[pint.UnitRegistry] = None):
        """Initialize with optional custom registry.

        Args:
            registry: Custom pint registry. If None, creates default.
        """
        self.registry = registry or pint.UnitRegistry()

        # Aliases and native units must exist before canonical_units
        self._setup_aliases()
        self.load_custom_units()

        attousd = self.registry.Unit("attoUSD")
        self.canonical_units = {
            "time": self.registry.second,
            "price": attousd,
            "native": self.registry.wei,
            "price/time": attousd / self.registry.second,
            "dimensionless": self.registry.dimensionless,
        }

    @classmethod
    def instance(cls) -> UnitManager:
        """Get or create the singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def _setup_aliases(self) -> None:
        """Set up currency and time aliases."""
        try:
            _ = self.registry.USD
        except (AttributeError, pint.UndefinedUnitError):
            self.registry.define('USD = [currency]')

        if not hasattr(self.registry, 'day'):
            self.registry.define('day = 24 * hour')
        if not hasattr(self.registry, 'week'):
            self.registry.define('week = 7 * day')
        if not hasattr(self.registry, 'year'):
            self.registry.define('year = 365.25 * day')

    def load_custom_units(self, paths: Optional[list[Path]] = None) -> None:
        """Load custom unit definitions from files.

        Args:
            paths: List of paths to unit definition files.
                   If None, loads eth_units.txt next to this module.

        Raises:
            FileNotFoundError: If a specified path doesn't exist
        """
        if paths is None:
            default_path = Path(__file__).parent / 'eth_units.txt'
            paths = [default_path] if default_path.exists() else []

        for path in paths:
            if not path.exists():
                raise FileNotFoundError(f"Unit definition file not found: {path}")

            self.registry.load_definitions(str(path))

    def ensure_quantity(
        self,
        value: QuantityInput,
        default_unit: Optional[str] = None
    ) -> pint.Quantity:
        """Convert input to a pint Quantity.

        Args:
            value: String, number, or Quantity to convert
            default_unit: Unit to use if value is a bare number

        Returns:
            pint.Quantity object

        Raises:
            ValueError: If string cannot be parsed as quantity
        """
        if isinstance(value, pint.Quantity):
            return value
        elif isinstance(value, str):
            # Financial shorthand: "100M USD" -> "100e6 USD"
            if 'USD' in value:
                value = re.sub(r'(\d+(?:\.\d+)?)\s*M\s*USD', r'\g<1>e6 USD', value)
                value = re.sub(r'(\d+(?:\.\d+)?)\s*[kK]\s*USD', r'\g<1>e3 USD', value)

            try:
                q = self.registry(value)
                if not isinstance(q, pint.Quantity):
                    q = self.registry.Quantity(q, default_unit or 'dimensionless')
                return q
            except Exception as e:
                raise ValueError(f"Cannot parse '{value}' as quantity: {e}")
        else:
            return self.registry.Quantity(value, default_unit or 'dimensionless')

    def to_canonical(
        self,
        quantity: pint.Quantity,
        dimension: str
    ) -> tuple[float, UnitSpec]:
        """Convert quantity to canonical units for dimension.

        Args:
            quantity: pint Quantity to convert
            dimension: Target dimension name

        Returns:
            Tuple of (canonical_value, unit_spec)

        Raises:
            ValueError: If quantity dimension doesn't match target
        """
        if dimension not in self.canonical_units:
            raise ValueError(f"Unknown dimension '{dimension}'")

        canonical_unit = self.canonical_units[dimension]

        try:
            canonical_quantity = quantity.to(canonical_unit)
        except pint.DimensionalityError as e:
            raise ValueError(
                f"Cannot convert {quantity} to dimension '{dimension}': {e}"
            )

        # Factor from units, not magnitudes, so zero values work
        one_original = self.registry.Quantity(1.0, quantity.units)
        conversion_factor = float(one_original.to(canonical_unit).magnitude)

        return (
            canonical_quantity.magnitude,
            UnitSpec(
                dimension=dimension,
                symbol=str(quantity.units),
                to_canonical=conversion_factor
            )
        )

    def to_canonical_int(
        self,
        quantity: pint.Quantity,
        dimension: str
    ) -> tuple[int, UnitSpec]:
        """Convert quantity to an integer in canonical units.

        Magnitude and conversion factor are combined as decimals rounded
        to 15 significant digits, so that round inputs such as "100M USD"
        land on exact integers (10**26 attoUSD) instead of the nearest
        float. The result is truncated toward zero like on-chain integer
        arithmetic.

        Args:
            quantity: pint Quantity to convert
            dimension: Target dimension name

        Returns:
            Tuple of (canonical_int, unit_spec)
        """
        _, spec = self.to_canonical(quantity, dimension)
        magnitude = _to_decimal(quantity.magnitude)
        factor = _to_decimal(spec.to_canonical)
        return int(magnitude * factor), spec

    def from_canonical(
        self,
        value: Union[int, float],
        spec: UnitSpec
    ) -> pint.Quantity:
        """Reconstruct pint Quantity from canonical value and spec.

        Args:
            value: Canonical value
            spec: UnitSpec with dimension and symbol info

        Returns:
            pint.Quantity in original units
        """
        original_value = value / spec.to_canonical if spec.to_canonical != 0 else value
        return self.registry.Quantity(original_value, spec.symbol)

    def infer_dimension(self, quantity: pint.Quantity) -> str:
        """Infer dimension name from quantity.

        Args:
            quantity: pint Quantity to analyze

        Returns:
            Best matching dimension name
        """
        for dim_name, canonical_unit in self.canonical_units.items():
            try:
                _ = quantity.to(canonical_unit)
                return dim_name
            except pint.DimensionalityError:
                continue

        return str(quantity.dimensionality)
