"""Pydantic field validators for unit-aware configurations.

Provides field validators that parse user-friendly unit inputs
("5 USD / year", "100M USD", "90 days") and convert them to the
canonical values the contracts compute with.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from .units import UnitManager, UnitSpec


def quantity_field(
    dimension: str,
    default_unit: Optional[str] = None,
    min_value: Optional[float] = None,
    max_value: Optional[float] = None,
) -> Callable:
    """Create a validator converting quantity inputs to canonical floats.

    Args:
        dimension: Expected dimension (e.g., "time", "price")
        default_unit: Unit to apply to bare numbers
        min_value: Optional minimum value in canonical units
        max_value: Optional maximum value in canonical units

    Returns:
        Validator returning (canonical_float, unit_spec)
    """
    def validator(value: Any, info: Optional[Any] = None) -> tuple[float, UnitSpec]:
        manager = UnitManager.instance()

        try:
            quantity = manager.ensure_quantity(value, default_unit)
        except Exception as e:
            raise ValueError(f"Cannot parse quantity: {e}")

        try:
            canonical_value, spec = manager.to_canonical(quantity, dimension)
        except ValueError as e:
            raise ValueError(f"Dimension mismatch: {e}")

        _check_bounds(canonical_value, dimension, min_value, max_value)
        return float(canonical_value), spec

    return validator


def integer_field(
    dimension: str,
    default_unit: Optional[str] = None,
    min_value: Optional[int] = 0,
    max_value: Optional[int] = None,
) -> Callable:
    """Create a validator converting quantity inputs to canonical integers.

    Plain ints are taken to already be in canonical units (attoUSD,
    wei, seconds) and pass through untouched, so large on-chain values
    stay exact. Strings and pint Quantities are converted and truncated.

    Args:
        dimension: Expected dimension (e.g., "price", "native", "time")
        default_unit: Unit to apply to bare floats
        min_value: Minimum value in canonical units (default 0)
        max_value: Optional maximum value in canonical units

    Returns:
        Validator returning the canonical int

    Example:
        class RentConfig(BaseModel):
            start_premium: int

            _validate_start = field_validator("start_premium", mode="before")(
                integer_field("price", "USD")
            )
    """
    def validator(value: Any, info: Optional[Any] = None) -> int:
        if isinstance(value, bool):
            raise ValueError("Expected a quantity, got a bool")

        if isinstance(value, int):
            canonical_value = value
        else:
            manager = UnitManager.instance()
            try:
                quantity = manager.ensure_quantity(value, default_unit)
            except Exception as e:
                raise ValueError(f"Cannot parse quantity: {e}")

            try:
                canonical_value, _ = manager.to_canonical_int(quantity, dimension)
            except ValueError as e:
                raise ValueError(f"Dimension mismatch: {e}")

        _check_bounds(canonical_value, dimension, min_value, max_value)
        return canonical_value

    return validator


def _check_bounds(value, dimension: str, min_value, max_value) -> None:
    if min_value is not None and value < min_value:
        raise ValueError(
            f"Value {value} below minimum {min_value} "
            f"(in canonical {dimension} units)"
        )
    if max_value is not None and value > max_value:
        raise ValueError(
            f"Value {value} above maximum {max_value} "
            f"(in canonical {dimension} units)"
        )
