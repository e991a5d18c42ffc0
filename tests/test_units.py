"""Tests for UnitManager and the unit-aware field validators."""

import pint
import pytest

from h1names import UnitManager, UnitSpec, integer_field, quantity_field


@pytest.fixture
def manager():
    return UnitManager.instance()


class TestUnitManager:
    """Tests for registry setup and conversions."""

    def test_singleton(self):
        """Test that instance() always returns the same manager."""
        assert UnitManager.instance() is UnitManager.instance()

    def test_native_units_loaded(self, manager):
        """Test that wei and ether come from eth_units.txt."""
        qty = manager.ensure_quantity("2 ether")
        assert qty.to("wei").magnitude == pytest.approx(2e18)

    def test_atto_prefix(self, manager):
        """Test that attoUSD is understood through the SI prefix."""
        qty = manager.ensure_quantity("1 USD")
        assert qty.to("attoUSD").magnitude == pytest.approx(1e18)

    def test_ensure_quantity_passthrough(self, manager):
        """Test that quantities are returned untouched."""
        qty = manager.registry.Quantity(3, "day")
        assert manager.ensure_quantity(qty) is qty

    def test_ensure_quantity_default_unit(self, manager):
        """Test that bare numbers get the default unit."""
        qty = manager.ensure_quantity(5, "day")
        assert qty.to("second").magnitude == pytest.approx(5 * 86400)

    def test_unparseable(self, manager):
        """Test that garbage strings raise ValueError."""
        with pytest.raises(ValueError):
            manager.ensure_quantity("five bananas per fortnight ++")

    def test_to_canonical(self, manager):
        """Test conversion to canonical seconds."""
        value, spec = manager.to_canonical(manager.ensure_quantity("2 hours"), "time")

        assert value == pytest.approx(7200)
        assert spec.dimension == "time"
        assert spec.to_canonical == pytest.approx(3600)

    def test_to_canonical_dimension_mismatch(self, manager):
        """Test that incompatible dimensions raise ValueError."""
        with pytest.raises(ValueError):
            manager.to_canonical(manager.ensure_quantity("2 hours"), "price")

    def test_unknown_dimension(self, manager):
        with pytest.raises(ValueError):
            manager.to_canonical(manager.ensure_quantity("2 hours"), "mood")

    @pytest.mark.parametrize("text,dimension,expected", [
        ("100M USD", "price", 10 ** 26),
        ("2.5k USD", "price", 2500 * 10 ** 18),
        ("0.001 ether", "native", 10 ** 15),
        ("90 days", "time", 90 * 86400),
    ])
    def test_to_canonical_int_exact(self, manager, text, dimension, expected):
        """Test that round inputs convert to exact integers."""
        value, _ = manager.to_canonical_int(manager.ensure_quantity(text), dimension)
        assert value == expected
        assert isinstance(value, int)

    def test_from_canonical(self, manager):
        """Test reconstructing a quantity from canonical value."""
        spec = UnitSpec(dimension="time", symbol="hour", to_canonical=3600.0)
        qty = manager.from_canonical(7200, spec)

        assert qty.magnitude == pytest.approx(2)
        assert qty.units == manager.registry.hour

    def test_infer_dimension(self, manager):
        assert manager.infer_dimension(manager.ensure_quantity("3 gwei")) == "native"
        assert manager.infer_dimension(manager.ensure_quantity("3 USD")) == "price"


class TestFields:
    """Tests for pydantic field validator factories."""

    def test_integer_field_int_passthrough(self):
        """Test that ints are canonical and stay exact."""
        validator = integer_field("price")
        big = 10 ** 26 + 1
        assert validator(big) == big

    def test_integer_field_string(self):
        validator = integer_field("native")
        assert validator("3 gwei") == 3 * 10 ** 9

    def test_integer_field_rejects_bool(self):
        with pytest.raises(ValueError):
            integer_field("price")(True)

    def test_integer_field_bounds(self):
        """Test the default non-negative bound and a maximum."""
        with pytest.raises(ValueError, match="below minimum"):
            integer_field("price")(-5)
        with pytest.raises(ValueError, match="above maximum"):
            integer_field("time", max_value=60)("2 minutes")

    def test_integer_field_dimension_mismatch(self):
        with pytest.raises(ValueError, match="Dimension mismatch"):
            integer_field("time")("5 USD")

    def test_quantity_field(self):
        """Test float conversion with unit metadata."""
        value, spec = quantity_field("time", "second")("1.5 days")

        assert value == pytest.approx(129600.0)
        assert spec.symbol == "day"

    def test_quantity_field_bounds(self):
        with pytest.raises(ValueError):
            quantity_field("time", "second", min_value=0.0)(-1)
