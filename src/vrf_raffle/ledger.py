"""
In-process ledger that hosts the raffle and its oracle.

Every state-mutating contract call runs inside `Ledger.transaction()`:
balances, contract storage, deployed contracts and emitted events are
snapshotted on entry and restored if the call raises, so a failed call
leaves no partial effects. Transactions nest; an inner failure that is
caught by the caller only rolls back the inner frame.
"""

from __future__ import annotations

import copy
import hashlib
import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Set, TypeVar

from .errors import InsufficientBalance, UnknownContract

log = logging.getLogger(__name__)

C = TypeVar("C", bound="Contract")


@dataclass(frozen=True)
class Event:
    address: str
    name: str
    args: Dict[str, Any] = field(default_factory=dict)
    block_number: int = 0
    timestamp: int = 0


class Contract:
    """Base for objects whose storage lives behind the ledger's transactions."""

    def __init__(self, ledger: "Ledger", address: str) -> None:
        self.ledger = ledger
        self.address = address

    @property
    def balance(self) -> int:
        return self.ledger.get_balance(self.address)

    def _storage(self) -> Dict[str, Any]:
        return {k: v for k, v in vars(self).items() if k != "ledger"}


@dataclass
class _Snapshot:
    balances: Dict[str, int]
    event_count: int
    contracts: Dict[str, Contract]
    storage: Dict[str, Dict[str, Any]]


class Ledger:
    def __init__(self, timestamp: Optional[int] = None) -> None:
        self.timestamp = int(time.time()) if timestamp is None else int(timestamp)
        self.block_number = 0
        self.events: List[Event] = []
        self._balances: Dict[str, int] = {}
        self._contracts: Dict[str, Contract] = {}
        self._rejecting: Set[str] = set()
        self._nonce = 0
        self._depth = 0
        self._lock = threading.RLock()

    # Accounts

    def generate_address(self, label: str = "account") -> str:
        self._nonce += 1
        digest = hashlib.sha256(f"{label}:{self._nonce}".encode("utf-8")).hexdigest()
        return "0x" + digest[:40]

    def get_balance(self, address: str) -> int:
        return self._balances.get(address, 0)

    def set_balance(self, address: str, amount: int) -> None:
        if amount < 0:
            raise ValueError("Balance cannot be negative.")
        self._balances[address] = int(amount)

    def reject_payments(self, address: str, reject: bool = True) -> None:
        """Marks an account as one whose incoming plain transfers fail."""
        if reject:
            self._rejecting.add(address)
        else:
            self._rejecting.discard(address)

    def transfer(self, sender: str, to: str, amount: int) -> None:
        """Moves value as part of a call; raises when the sender cannot cover it."""
        if amount < 0:
            raise ValueError("Transfer amount cannot be negative.")
        balance = self.get_balance(sender)
        if balance < amount:
            raise InsufficientBalance(sender, balance, amount)
        self._balances[sender] = balance - amount
        self._balances[to] = self.get_balance(to) + amount

    def send(self, sender: str, to: str, amount: int) -> bool:
        """Plain value transfer that reports failure instead of raising."""
        if to in self._rejecting:
            log.debug("Transfer of %d wei to %s rejected by recipient", amount, to)
            return False
        try:
            self.transfer(sender, to, amount)
        except InsufficientBalance as e:
            log.debug("Transfer failed: %s", e)
            return False
        return True

    # Clock

    def time_travel(self, seconds: int) -> None:
        if seconds < 0:
            raise ValueError("Cannot travel backwards in time.")
        self.timestamp += int(seconds)

    def mine(self, blocks: int = 1) -> None:
        self.block_number += blocks

    # Contracts

    def deploy(
        self,
        factory: Callable[..., C],
        deployer: str,
        *args: Any,
        address: Optional[str] = None,
        **kwargs: Any,
    ) -> C:
        address = address or self.generate_address(getattr(factory, "__name__", "contract"))
        with self.transaction():
            contract = factory(self, address, *args, **kwargs)
            self._contracts[address] = contract
            self.emit(address, "Deployed", deployer=deployer, contract=type(contract).__name__)
        log.debug("Deployed %s at %s", type(contract).__name__, address)
        return contract

    def contract_at(self, address: str) -> Contract:
        contract = self._contracts.get(address)
        if contract is None:
            raise UnknownContract(address)
        return contract

    # Events

    def emit(self, address: str, name: str, **args: Any) -> Event:
        event = Event(
            address=address,
            name=name,
            args=args,
            block_number=self.block_number + 1,
            timestamp=self.timestamp,
        )
        self.events.append(event)
        return event

    def events_named(self, name: str, address: Optional[str] = None) -> List[Event]:
        return [
            e
            for e in self.events
            if e.name == name and (address is None or e.address == address)
        ]

    # Transactions

    @contextmanager
    def transaction(self) -> Iterator["Ledger"]:
        with self._lock:
            snapshot = self._snapshot()
            self._depth += 1
            try:
                yield self
            except BaseException:
                self._restore(snapshot)
                raise
            finally:
                self._depth -= 1
            if not self._depth:
                self.block_number += 1

    def _snapshot(self) -> _Snapshot:
        # Copies every contract's storage, so a call costs O(total storage).
        # Fine for simulated rounds; large ledgers would want copy-on-write.
        return _Snapshot(
            balances=dict(self._balances),
            event_count=len(self.events),
            contracts=dict(self._contracts),
            storage={
                addr: copy.deepcopy(c._storage()) for addr, c in self._contracts.items()
            },
        )

    def _restore(self, snapshot: _Snapshot) -> None:
        self._balances = snapshot.balances
        del self.events[snapshot.event_count :]
        self._contracts = snapshot.contracts
        for addr, storage in snapshot.storage.items():
            vars(self._contracts[addr]).update(storage)
