"""h1names: name-service registration economics on a simulated Haven1 ledger."""

from .units import UnitManager, UnitSpec, QuantityInput
from .fields import quantity_field, integer_field
from .errors import (
    Revert,
    AlreadyInitialized,
    InvalidFeeContract,
    InsufficientFunds,
    InvalidRate,
    TransferFailed,
)
from .ledger import Ledger, Contract, CallFrame, ZERO_ADDRESS, is_zero_address
from .interfaces import (
    FeeContract,
    RateFeed,
    INTERFACE_META_ID,
    PRICE_ORACLE_INTERFACE_ID,
)
from .enforcement import (
    FeeEnforcement,
    FeeModuleState,
    STORAGE_NAMESPACE,
    application_fee,
)
from .application import NativeApplication
from .pricing import (
    PriceOracleConfig,
    ExponentialPremiumConfig,
    PremiumStrategy,
    NoPremium,
    ExponentialPremium,
    PriceOracle,
    PriceQuote,
    PremiumSchedule,
    premium_schedule,
)

__all__ = [
    # Units
    'UnitManager',
    'UnitSpec',
    'QuantityInput',
    # Fields
    'quantity_field',
    'integer_field',
    # Errors
    'Revert',
    'AlreadyInitialized',
    'InvalidFeeContract',
    'InsufficientFunds',
    'InvalidRate',
    'TransferFailed',
    # Ledger
    'Ledger',
    'Contract',
    'CallFrame',
    'ZERO_ADDRESS',
    'is_zero_address',
    # External interfaces
    'FeeContract',
    'RateFeed',
    'INTERFACE_META_ID',
    'PRICE_ORACLE_INTERFACE_ID',
    # Fee enforcement
    'FeeEnforcement',
    'FeeModuleState',
    'STORAGE_NAMESPACE',
    'application_fee',
    'NativeApplication',
    # Pricing
    'PriceOracleConfig',
    'ExponentialPremiumConfig',
    'PremiumStrategy',
    'NoPremium',
    'ExponentialPremium',
    'PriceOracle',
    'PriceQuote',
    'PremiumSchedule',
    'premium_schedule',
]
