"""Storage layout of the fee enforcement module."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..types import Address, Wei

# Namespace key under which the module keeps its state in the host
# contract's storage. Application state lives under other keys.
STORAGE_NAMESPACE = "h1.storage.NativeApplication"


@dataclass
class FeeModuleState:
    """Mutable state of the fee enforcement module.

    Attributes:
        fee_contract: Fee contract address, set once by ``initialize``
        msg_value_after_fee: ``msg.value`` minus the fee, only non-zero
            while a payable protected call is executing
    """

    fee_contract: Optional[Address] = None
    msg_value_after_fee: Wei = Wei(0)
