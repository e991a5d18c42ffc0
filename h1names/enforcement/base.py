"""Per-call application fee enforcement.

``FeeEnforcement`` is composed into a host contract and wraps units of
business logic with the fee protocol: refresh the fee, check that both
``msg.value`` and the host's balance cover it, pay it to the fee contract,
run the logic, optionally refund what is left, and clear the residual
value. ``application_fee`` is the decorator form for contract methods.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Optional, TypeVar

from ..errors import AlreadyInitialized, InsufficientFunds, InvalidFeeContract, Revert
from ..interfaces import FeeContract
from ..ledger import Contract, is_zero_address
from ..types import Address, Wei
from .state import STORAGE_NAMESPACE, FeeModuleState

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class FeeEnforcement:
    """Fee enforcement component owned by a host contract.

    The component keeps its state in the host's storage under its own
    namespace, so host fields and module fields never collide.

    Example:
        >>> class Registrar(Contract):
        ...     def __init__(self, ledger, address, fee_contract):
        ...         super().__init__(ledger, address)
        ...         self.fee_enforcement = FeeEnforcement(self)
        ...         self.fee_enforcement.initialize(fee_contract)
        ...
        ...     @application_fee(payable=True)
        ...     def register(self, name):
        ...         paid = self.fee_enforcement.current_residual_value()

    Args:
        host: Contract the module charges fees for
        namespace: Storage namespace for ``FeeModuleState``
    """

    def __init__(self, host: Contract, namespace: str = STORAGE_NAMESPACE):
        self.host = host
        self.namespace = namespace

    @property
    def _state(self) -> FeeModuleState:
        return self.host.storage(self.namespace, FeeModuleState)

    @property
    def fee_contract(self) -> Optional[Address]:
        """Configured fee contract address, or None before initialization."""
        return self._state.fee_contract

    def initialize(self, fee_contract: Address) -> None:
        """Set the fee contract exactly once and register as grace contract.

        Args:
            fee_contract: Address of the fee contract

        Raises:
            AlreadyInitialized: If a fee contract is already set
            InvalidFeeContract: If ``fee_contract`` is the zero address
        """
        state = self._state
        if state.fee_contract is not None:
            raise AlreadyInitialized()
        if is_zero_address(fee_contract):
            raise InvalidFeeContract(fee_contract)

        self.host.ledger.call(self.host.address, fee_contract, "set_grace_contract", True)
        state.fee_contract = fee_contract
        logger.debug("%s initialized with fee contract %s", self.host.address, fee_contract)

    def _resolve_fee_contract(self) -> FeeContract:
        address = self._state.fee_contract
        if address is None:
            raise Revert("fee enforcement is not initialized")
        return self.host.ledger.contract_at(address)

    def update_fee(self) -> None:
        """Ask the fee contract to refresh its fee once its reset time passed."""
        fee_contract = self._resolve_fee_contract()
        if self.host.ledger.timestamp > fee_contract.next_reset_time():
            self.host.ledger.call(self.host.address, fee_contract, "update_fee")

    def get_fee(self) -> Wei:
        return Wei(self._resolve_fee_contract().get_fee())

    def current_residual_value(self) -> Wei:
        """``msg.value`` left after the fee; zero outside a payable protected call."""
        return self._state.msg_value_after_fee

    def protected_call(
        self,
        payable_function: bool,
        refund_remaining: bool,
        inner: Callable[..., Any],
        *args,
        **kwargs
    ) -> Any:
        """Run ``inner`` with the fee protocol around it.

        Must execute inside a ledger call to the host contract. The balance
        check guards multicalls, where every delegatecall sees the full
        ``msg.value`` but the fee has already been paid out of the balance
        by earlier sub-calls.

        Args:
            payable_function: Record ``msg.value - fee`` for ``inner``
            refund_remaining: Send the host's whole balance back to
                ``msg.sender`` after ``inner`` returns
            inner: Business logic to run
            *args: Positional arguments for ``inner``
            **kwargs: Keyword arguments for ``inner``

        Returns:
            Whatever ``inner`` returns

        Raises:
            InsufficientFunds: If ``msg.value`` or the balance is below the fee
            TransferFailed: If paying the fee or the refund fails
        """
        ledger = self.host.ledger
        msg = self.host.msg

        self.update_fee()
        fee = self.get_fee()

        balance = self.host.balance
        if msg.value < fee or balance < fee:
            raise InsufficientFunds(balance, fee)

        if payable_function:
            self._state.msg_value_after_fee = Wei(msg.value - fee)

        fee_contract = self._state.fee_contract
        ledger.send_value(self.host.address, fee_contract, fee)
        logger.debug("Charged %d wei fee to %s for %s", fee, msg.sender, self.host.address)

        result = inner(*args, **kwargs)

        if refund_remaining:
            remaining = self.host.balance
            if remaining > 0:
                ledger.send_value(self.host.address, msg.sender, remaining)
                logger.debug("Refunded %d wei to %s", remaining, msg.sender)

        self._state.msg_value_after_fee = Wei(0)
        return result


def application_fee(payable: bool = False, refund_remaining: bool = False) -> Callable[[F], F]:
    """Decorate a contract method so every call pays the application fee.

    The decorated method's owner must expose a ``fee_enforcement``
    attribute holding a ``FeeEnforcement``.

    Args:
        payable: Whether the method consumes ``msg.value`` beyond the fee
        refund_remaining: Whether leftover balance goes back to the caller
    """
    def decorator(method: F) -> F:
        @functools.wraps(method)
        def wrapper(self, *args, **kwargs):
            return self.fee_enforcement.protected_call(
                payable, refund_remaining, method, self, *args, **kwargs
            )
        return wrapper  # type: ignore[return-value]
    return decorator
