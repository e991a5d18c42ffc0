"""Pytest configuration, shared fixtures and test-only contracts."""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Set, Union

import numpy as np
import jax.numpy as jnp
import pytest

from h1names import (
    Contract,
    ExponentialPremiumConfig,
    Ledger,
    NativeApplication,
    PriceOracle,
    PriceOracleConfig,
    Revert,
    application_fee,
)


# Default tolerances for float comparisons
RTOL_DEFAULT = 1e-6  # Relative tolerance
ATOL_DEFAULT = 1e-7  # Absolute tolerance

GENESIS_TIME = 1_700_000_000
FEE = 10 ** 15  # 0.001 native token, the Haven1 application fee
RATE = 160_000_000_000  # 1600 USD per token, 8 decimals
DAY = 86400


def assert_close(
    actual: Union[float, jnp.ndarray, np.ndarray],
    expected: Union[float, jnp.ndarray, np.ndarray],
    rtol: float = RTOL_DEFAULT,
    atol: float = ATOL_DEFAULT,
    msg: str = ""
):
    """Assert that two values are close within tolerance.

    Handles JAX arrays, NumPy arrays, and Python floats uniformly.

    Args:
        actual: Actual value
        expected: Expected value
        rtol: Relative tolerance (default: 1e-6)
        atol: Absolute tolerance (default: 1e-7)
        msg: Optional message for assertion failure
    """
    actual_val = float(actual) if hasattr(actual, '__float__') else actual
    expected_val = float(expected) if hasattr(expected, '__float__') else expected

    assert actual_val == pytest.approx(expected_val, rel=rtol, abs=atol), (
        f"{msg}\nExpected: {expected_val}\nActual: {actual_val}\n"
        f"Diff: {abs(actual_val - expected_val)}"
    )


@pytest.fixture
def close():
    """Fixture providing assert_close function.

    Usage:
        def test_something(close):
            close(actual, expected)
    """
    return assert_close


# Test-only contracts

@dataclass
class FakeFeeState:
    fee: int = 0
    oracle_fee: int = 0
    next_reset_time: int = 0
    reset_interval: int = DAY
    updates: int = 0
    grace_contracts: Set[str] = field(default_factory=set)


class FakeFeeContract(Contract):
    """Fee contract stand-in: stored fee replaced by the oracle fee on reset."""

    def __init__(self, ledger, address, fee, oracle_fee=None, reset_interval=DAY):
        super().__init__(ledger, address)
        state = self._state
        state.fee = fee
        state.oracle_fee = fee if oracle_fee is None else oracle_fee
        state.reset_interval = reset_interval
        state.next_reset_time = ledger.timestamp + reset_interval

    @property
    def _state(self) -> FakeFeeState:
        return self.storage("fee", FakeFeeState)

    @property
    def updates(self) -> int:
        return self._state.updates

    @property
    def grace_contracts(self) -> Set[str]:
        return set(self._state.grace_contracts)

    def set_oracle_fee(self, fee):
        self._state.oracle_fee = fee

    def get_fee(self):
        return self._state.fee

    def query_oracle(self):
        return self._state.oracle_fee

    def next_reset_time(self):
        return self._state.next_reset_time

    def update_fee(self):
        state = self._state
        if self.ledger.timestamp > state.next_reset_time:
            state.fee = state.oracle_fee
            state.next_reset_time = self.ledger.timestamp + state.reset_interval
            state.updates += 1

    def set_grace_contract(self, enabled):
        if enabled:
            self._state.grace_contracts.add(self.msg.sender)
        else:
            self._state.grace_contracts.discard(self.msg.sender)

    def receive(self):
        pass


class RejectingFeeContract(FakeFeeContract):
    """Fee contract whose receive hook reverts."""

    def receive(self):
        raise Revert("fees not accepted")


@dataclass
class FakeFeedState:
    answer: int = 0


class FakeRateFeed(Contract):
    """Rate feed stand-in answering a settable rate."""

    def __init__(self, ledger, address, answer):
        super().__init__(ledger, address)
        self.set_answer(answer)

    def set_answer(self, answer):
        self.storage("feed", FakeFeedState).answer = answer

    def latest_answer(self):
        return self.storage("feed", FakeFeedState).answer


@dataclass
class RegistryState:
    names: List[str] = field(default_factory=list)
    deposits: Dict[str, int] = field(default_factory=lambda: defaultdict(int))
    residuals_seen: List[int] = field(default_factory=list)


class SampleRegistry(NativeApplication):
    """Application exercising every fee enforcement mode."""

    @property
    def registry_state(self) -> RegistryState:
        return self.storage("test.registry", RegistryState)

    @application_fee()
    def ping(self):
        return "pong"

    @application_fee(payable=True)
    def deposit(self):
        residual = self.fee_enforcement.current_residual_value()
        state = self.registry_state
        state.deposits[self.msg.sender] += residual
        state.residuals_seen.append(residual)
        return residual

    @application_fee(payable=True, refund_remaining=True)
    def register(self, name):
        state = self.registry_state
        state.names.append(name)
        state.residuals_seen.append(self.fee_enforcement.current_residual_value())
        return self.balance

    @application_fee(payable=True)
    def explode(self):
        self.registry_state.names.append("never")
        raise Revert("boom")


# Fixtures

@pytest.fixture
def ledger():
    return Ledger(timestamp=GENESIS_TIME)


@pytest.fixture
def deployer(ledger):
    return ledger.account("deployer", balance=10 ** 24)


@pytest.fixture
def alice(ledger):
    return ledger.account("alice", balance=10 ** 21)


@pytest.fixture
def fee_contract(ledger, deployer):
    return ledger.deploy(FakeFeeContract, FEE, sender=deployer)


@pytest.fixture
def rejecting_fee_contract(ledger, deployer):
    return ledger.deploy(RejectingFeeContract, FEE, sender=deployer)


@pytest.fixture
def rate_feed(ledger, deployer):
    return ledger.deploy(FakeRateFeed, RATE, sender=deployer)


@pytest.fixture
def registry(ledger, deployer, fee_contract):
    return ledger.deploy(SampleRegistry, fee_contract.address, sender=deployer)


@pytest.fixture
def registry_cls():
    return SampleRegistry


@pytest.fixture
def oracle_config(rate_feed, fee_contract):
    # Rent prices deployed on Haven1: 640/160/5 USD per year for 3/4/5+ letters
    return PriceOracleConfig.from_rent_prices(
        [0, 0, 20294266869609, 5073566717402, 158548959919],
        price_feed=rate_feed.address,
        fee_contract=fee_contract.address,
    )


@pytest.fixture
def oracle(ledger, deployer, oracle_config):
    return ledger.deploy(PriceOracle, oracle_config, sender=deployer)


@pytest.fixture
def premium_config():
    return ExponentialPremiumConfig(start_premium="100M USD", total_days=21)
