"""Deployable application contract with fee enforcement wired in."""

from __future__ import annotations

from typing import Any, List, Sequence, Tuple

from .enforcement import FeeEnforcement
from .ledger import Contract, Ledger
from .types import Address


class NativeApplication(Contract):
    """Composition root for fee-charging application contracts.

    Holds a ``FeeEnforcement`` component initialized with the fee contract
    at construction. Subclasses add business methods decorated with
    ``application_fee``.

    Args:
        ledger: Ledger the contract lives on
        address: Contract address
        fee_contract: Address of the fee contract
    """

    def __init__(self, ledger: Ledger, address: Address, fee_contract: Address):
        super().__init__(ledger, address)
        self.fee_enforcement = FeeEnforcement(self)
        self.fee_enforcement.initialize(fee_contract)

    def multicall(self, calls: Sequence[Tuple[str, Sequence[Any]]]) -> List[Any]:
        """Run several methods of this contract in the current call.

        Each ``(method_name, args)`` pair runs as a delegatecall, so every
        sub-call sees the same ``msg.value``. A failing sub-call reverts
        the whole batch.

        Returns:
            Results of the sub-calls in order
        """
        return [
            self.ledger.delegatecall(self, method, *args)
            for method, args in calls
        ]
