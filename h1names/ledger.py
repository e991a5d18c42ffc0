"""In-process ledger that hosts the contracts.

The ledger owns everything a contract may mutate: native balances and
per-contract namespaced storage. Each call, sub-call, delegatecall and
value transfer runs inside a snapshot, and any exception restores the
snapshot before propagating, which gives the all-or-nothing semantics of
an EVM transaction.

Contracts keep their mutable state in ``Ledger`` storage, fetched through
``Contract.storage`` on every access. Attributes set in ``__init__`` are
treated as immutables.
"""

from __future__ import annotations

import copy
import hashlib
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional, Type, TypeVar, Union

from .errors import Revert, TransferFailed
from .types import Address, Timestamp, Wei

logger = logging.getLogger(__name__)

ZERO_ADDRESS = Address("0x" + "0" * 40)

C = TypeVar("C", bound="Contract")

# Contract plumbing that calls and multicalls must not reach
_INTERNAL_ATTRIBUTES = frozenset({"ledger", "address", "storage", "msg", "balance"})


def is_zero_address(address: Optional[str]) -> bool:
    """True for None, the empty string and the all-zero address."""
    return not address or address.lower() == ZERO_ADDRESS


def _restore_mapping(live: Dict[Any, Any], saved: Dict[Any, Any]) -> None:
    live.clear()
    live.update(saved)


def _restore_object(live: Any, saved: Any) -> Any:
    """Write ``saved`` back into ``live`` and return the object to keep.

    Objects are reset in place so that references held by a caller that
    caught a failed sub-call still see the ledger's state.
    """
    if live is saved:
        return live
    if type(live) is not type(saved):
        return saved
    if isinstance(live, dict):
        restored = {
            key: _restore_object(live[key], value) if key in live else value
            for key, value in saved.items()
        }
        _restore_mapping(live, restored)
    elif isinstance(live, list):
        live[:] = saved
    elif isinstance(live, set):
        live.clear()
        live.update(saved)
    elif hasattr(live, "__dict__"):
        attributes = vars(live)
        restored = {
            key: _restore_object(attributes[key], value) if key in attributes else value
            for key, value in vars(saved).items()
        }
        _restore_mapping(attributes, restored)
    else:
        return saved
    return live


def _restore_storage(
    live: Dict[Address, Dict[str, Any]],
    saved: Dict[Address, Dict[str, Any]]
) -> None:
    for address in list(live):
        if address not in saved:
            del live[address]
    for address, slots in saved.items():
        live_slots = live.setdefault(address, {})
        _restore_object(live_slots, slots)


@dataclass(frozen=True)
class CallFrame:
    """Execution context of a call (``msg.sender``, ``msg.value``).

    Attributes:
        sender: Address that made the call
        value: Native value sent with the call, in wei
        target: Address of the contract being executed
    """
    sender: Address
    value: Wei
    target: Address


class Contract:
    """Base class for contracts deployed on a ``Ledger``.

    Subclasses take ``(ledger, address, *args)`` in their constructor and
    are created through ``Ledger.deploy``.
    """

    def __init__(self, ledger: Ledger, address: Address):
        self.ledger = ledger
        self.address = address

    @property
    def msg(self) -> CallFrame:
        """Frame of the call currently executing."""
        return self.ledger.current_frame()

    @property
    def balance(self) -> Wei:
        return self.ledger.balance_of(self.address)

    def storage(self, namespace: str, factory: Callable[[], Any]) -> Any:
        """Return this contract's state object stored under ``namespace``."""
        return self.ledger.storage_slot(self.address, namespace, factory)

    def receive(self) -> None:
        """Hook run on plain value transfers to this contract."""
        raise Revert(f"{type(self).__name__} does not accept native transfers")


class Ledger:
    """World state: balances, contract storage, block time and call frames.

    Example:
        >>> ledger = Ledger(timestamp=1_700_000_000)
        >>> alice = ledger.account("alice", balance=10**18)
        >>> fee_contract = ledger.deploy(SomeFeeContract, 10**15, sender=alice)
        >>> ledger.call(alice, fee_contract, "update_fee")
    """

    def __init__(self, timestamp: int = 0):
        self.timestamp = Timestamp(timestamp)
        self._balances: Dict[Address, int] = {}
        self._storage: Dict[Address, Dict[str, Any]] = {}
        self._contracts: Dict[Address, Contract] = {}
        self._frames: List[CallFrame] = []
        self._nonce = 0

    # Accounts and time

    def new_address(self, label: str = "account") -> Address:
        """Derive a fresh, deterministic address."""
        self._nonce += 1
        digest = hashlib.sha256(f"{label}:{self._nonce}".encode()).hexdigest()
        return Address("0x" + digest[:40])

    def account(self, label: str = "account", balance: int = 0) -> Address:
        """Create an externally owned account, optionally funded."""
        address = self.new_address(label)
        if balance:
            self.mint(address, balance)
        return address

    def mint(self, address: Address, amount: int) -> None:
        """Credit native tokens out of thin air (genesis allocation)."""
        if amount < 0:
            raise ValueError(f"Mint amount must be non-negative, got {amount}")
        self._balances[address] = self._balances.get(address, 0) + amount

    def balance_of(self, address: Address) -> Wei:
        return Wei(self._balances.get(address, 0))

    def advance_time(self, seconds: int) -> Timestamp:
        """Move the block timestamp forward."""
        if seconds < 0:
            raise ValueError(f"Cannot move time backwards by {seconds}s")
        self.timestamp = Timestamp(self.timestamp + seconds)
        return self.timestamp

    # Contracts and storage

    def contract_at(self, address: Address) -> Contract:
        try:
            return self._contracts[address]
        except KeyError:
            raise Revert(f"no contract at {address}") from None

    def is_contract(self, address: Address) -> bool:
        return address in self._contracts

    def storage_slot(self, address: Address, namespace: str, factory: Callable[[], Any]) -> Any:
        slots = self._storage.setdefault(address, {})
        if namespace not in slots:
            slots[namespace] = factory()
        return slots[namespace]

    def current_frame(self) -> CallFrame:
        if not self._frames:
            raise RuntimeError("No call is executing on the ledger")
        return self._frames[-1]

    @contextmanager
    def _atomic(self) -> Iterator[None]:
        balances = dict(self._balances)
        storage = copy.deepcopy(self._storage)
        contracts = dict(self._contracts)
        try:
            yield
        except Exception as e:
            _restore_mapping(self._balances, balances)
            _restore_storage(self._storage, storage)
            _restore_mapping(self._contracts, contracts)
            logger.debug("Rolled back ledger state after %s: %s", type(e).__name__, e)
            raise

    @contextmanager
    def _frame(self, frame: CallFrame) -> Iterator[CallFrame]:
        self._frames.append(frame)
        try:
            yield frame
        finally:
            self._frames.pop()

    def _move(self, sender: Address, recipient: Address, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Transfer amount must be non-negative, got {amount}")
        available = self._balances.get(sender, 0)
        if available < amount:
            raise TransferFailed(
                sender, recipient, amount, f"balance {available} too low"
            )
        self._balances[sender] = available - amount
        self._balances[recipient] = self._balances.get(recipient, 0) + amount

    # Execution

    def _entry_point(self, contract: Contract, method: str) -> Callable[..., Any]:
        if method.startswith("_") or method in _INTERNAL_ATTRIBUTES:
            raise Revert(f"{type(contract).__name__}.{method} is not callable")
        function = getattr(contract, method, None)
        if not callable(function):
            raise Revert(f"{type(contract).__name__} has no method {method!r}")
        return function

    def deploy(
        self,
        contract_cls: Type[C],
        *args,
        sender: Address,
        value: int = 0,
        **kwargs
    ) -> C:
        """Deploy a contract, running its constructor as a call.

        Args:
            contract_cls: Contract subclass to instantiate
            *args: Constructor arguments after ``(ledger, address)``
            sender: Deployer address
            value: Native value sent to the constructor
            **kwargs: Constructor keyword arguments

        Returns:
            The deployed contract
        """
        address = self.new_address(contract_cls.__name__)
        with self._atomic():
            if value:
                self._move(sender, address, value)
            with self._frame(CallFrame(sender, Wei(value), address)):
                contract = contract_cls(self, address, *args, **kwargs)
            self._contracts[address] = contract

        logger.debug("Deployed %s at %s", contract_cls.__name__, address)
        return contract

    def call(
        self,
        sender: Address,
        contract: Union[Contract, Address],
        method: str,
        *args,
        value: int = 0,
        **kwargs
    ) -> Any:
        """Call ``method`` on ``contract`` as ``sender``, sending ``value``.

        The value moves to the contract before the method runs. If the
        method raises, every change made during the call is undone.
        """
        target = contract if isinstance(contract, Contract) else self.contract_at(contract)
        function = self._entry_point(target, method)

        with self._atomic():
            if value:
                self._move(sender, target.address, value)
            with self._frame(CallFrame(sender, Wei(value), target.address)):
                return function(*args, **kwargs)

    def delegatecall(self, contract: Contract, method: str, *args, **kwargs) -> Any:
        """Run ``method`` in the current frame.

        ``msg.sender`` and ``msg.value`` are those of the enclosing call and
        no value moves, so several delegatecalls in one multicall all see
        the same ``msg.value``.
        """
        frame = self.current_frame()
        function = self._entry_point(contract, method)

        with self._atomic():
            with self._frame(frame):
                return function(*args, **kwargs)

    def send_value(self, sender: Address, recipient: Address, amount: int) -> None:
        """Transfer native value, reverting on any failure.

        Transfers to a contract run its ``receive`` hook. A revert inside the
        hook, or a balance that is too low, raises ``TransferFailed``.
        """
        with self._atomic():
            self._move(sender, recipient, amount)
            receiver = self._contracts.get(recipient)
            if receiver is not None:
                try:
                    with self._frame(CallFrame(sender, Wei(amount), recipient)):
                        receiver.receive()
                except TransferFailed:
                    raise
                except Revert as e:
                    raise TransferFailed(sender, recipient, amount, e.reason) from e
