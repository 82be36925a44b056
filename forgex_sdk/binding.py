"""
Adapter slots and wallet binding state

Every provider has one slot in the client's AdapterTable. A slot is either
Present (holding a constructed adapter) or Absent (holding the reason it
could not be built). Reads and writes of the table go through one lock;
fan-out operations work on a snapshot so a concurrent bind() or unbind()
never tears them.
"""

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Generic, Iterator, Optional, Tuple, TypeVar

from .errors import AdapterUnavailable

A = TypeVar("A")

WALLET_NOT_BOUND = "wallet not bound"
KEYPAIR_REQUIRED = "requires a raw keypair; wallet adapters never expose one"


@dataclass(frozen=True)
class AdapterSlot(Generic[A]):
    """
    Present(adapter) or Absent(reason)

    Usage:
        slot = client.slot("tensor")
        if slot.is_present:
            await slot.adapter.get_collections()
        else:
            print(slot.reason)
    """
    name: str
    adapter: Optional[A] = None
    reason: Optional[str] = None

    @classmethod
    def present(cls, name: str, adapter: A) -> "AdapterSlot[A]":
        return cls(name=name, adapter=adapter)

    @classmethod
    def absent(cls, name: str, reason: str) -> "AdapterSlot[A]":
        return cls(name=name, reason=reason)

    @property
    def is_present(self) -> bool:
        return self.adapter is not None

    def unwrap(self) -> A:
        """The adapter, or AdapterUnavailable carrying the absence reason"""
        if self.adapter is None:
            raise AdapterUnavailable(self.name, self.reason or "not configured")
        return self.adapter

    def __repr__(self) -> str:
        if self.is_present:
            return f"Present({self.name})"
        return f"Absent({self.name}: {self.reason})"


class AdapterTable:
    """Lock-guarded name -> AdapterSlot mapping"""

    def __init__(self):
        self._lock = threading.Lock()
        self._slots: Dict[str, AdapterSlot] = {}

    def get(self, name: str) -> AdapterSlot:
        with self._lock:
            slot = self._slots.get(name)
        if slot is None:
            return AdapterSlot.absent(name, "unknown provider")
        return slot

    def set(self, slot: AdapterSlot):
        with self._lock:
            self._slots[slot.name] = slot

    def set_many(self, slots):
        """Replace several slots atomically"""
        with self._lock:
            for slot in slots:
                self._slots[slot.name] = slot

    def snapshot(self) -> Dict[str, AdapterSlot]:
        with self._lock:
            return dict(self._slots)

    def names(self) -> Tuple[str, ...]:
        with self._lock:
            return tuple(self._slots)

    def __iter__(self) -> Iterator[AdapterSlot]:
        return iter(self.snapshot().values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._slots)


class BindingState(Enum):
    UNBOUND = "unbound"
    BOUND = "bound"


@dataclass
class BindingStatus:
    """
    Wallet binding state

    Attributes:
        state: UNBOUND or BOUND
        public_key: Bound wallet public key (base58)
        bound: Wallet-dependent providers currently present
        unavailable: Wallet-dependent providers that are absent, with reason
    """
    state: BindingState
    public_key: Optional[str] = None
    bound: Tuple[str, ...] = ()
    unavailable: Dict[str, str] = field(default_factory=dict)

    @property
    def is_bound(self) -> bool:
        return self.state is BindingState.BOUND
