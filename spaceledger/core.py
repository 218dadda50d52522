"""
Core types and pure functions for the space-rental ledger.

This module provides the foundational data structures and protocols for the ledger:
1. Protocols: LedgerView for read-only ledger access
2. Immutable data structures: Move, Listing, ListingChange, PendingTransaction, Transaction
3. Exceptions: LedgerError and domain-specific error types
4. Type aliases: Positions, BalanceMap
5. Argument validation helpers shared by the transaction builders

All functions in this module are pure and operate on read-only views.
No function can mutate ledger state directly.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import (
    Dict, List, Optional, Any, Protocol,
    Tuple, FrozenSet, runtime_checkable, TYPE_CHECKING
)

if TYPE_CHECKING:
    from .rates import RateConfig


# ============================================================================
# CONSTANTS
# ============================================================================

# Reserved wallet for issuance and redemption.
# The system wallet is exempt from balance validation and can hold any balance,
# so every unit's total supply across all wallets stays at zero.
SYSTEM_WALLET = "system"

# Distinguished account that collects commission and funds refunds.
# Unlike SYSTEM_WALLET it is an ordinary wallet and can never go negative.
PLATFORM_WALLET = "platform"

# Identity holding Role.OWNER when a ledger is created without an explicit owner.
DEFAULT_OWNER = "owner"

# Unit symbols (strings, not enum, matching the move records).
UNIT_HOURS = "HOURS"        # ReservationBalance
UNIT_CREDITS = "CREDITS"    # MonetaryBalance

UNITS = (UNIT_HOURS, UNIT_CREDITS)

# Default rate configuration.
DEFAULT_PRICE_PER_HOUR = 500
DEFAULT_COMMISSION_PERCENT = 5
DEFAULT_REFUND_PERCENT = 90
DEFAULT_RESERVATION_CAP = 1000
DEFAULT_CAPACITY_CEILING = 10000

MAX_PERCENT = 100


# ============================================================================
# TYPE ALIASES
# ============================================================================

# Mapping from wallet ID to quantity held by that wallet for a specific unit.
Positions = Dict[str, int]

# Mapping from unit symbol to quantity held in a single wallet.
BalanceMap = Dict[str, int]


# ============================================================================
# ENUMS
# ============================================================================

class ExecuteResult(Enum):
    """
    Outcome of a transaction execution attempt.

    APPLIED: Transaction was validated and applied to the ledger.
    REJECTED: Transaction failed validation (insufficient balance, capacity
              breach, stale listing, ...). Ledger state is unchanged.
    """
    APPLIED = "applied"
    REJECTED = "rejected"


class OriginType(Enum):
    """
    Classification of where a transaction originated.

    Used for the audit trail.
    """
    LISTING = "listing"         # add_listing / remove_listing
    RENTAL = "rental"           # rent
    REFUND = "refund"           # refund
    PURCHASE = "purchase"       # purchase of reservation hours
    SYSTEM = "system"           # host issuance (deposit)


class Role(Enum):
    """Access role of an identity. Only OWNER may change configuration."""
    OWNER = "owner"
    PARTICIPANT = "participant"


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerError(Exception):
    """Base exception for all ledger-related errors."""
    pass


class Unauthorized(LedgerError):
    """Raised when a caller without the OWNER role invokes a privileged operation."""
    pass


class InvalidParameter(LedgerError):
    """Raised when an argument is outside its allowed bounds."""
    pass


class InvalidDuration(InvalidParameter):
    """Raised when an hours argument is zero or negative."""
    pass


class InvalidPrice(InvalidParameter):
    """Raised when a price is zero or negative."""
    pass


class SameParty(LedgerError):
    """Raised when both sides of a transfer are the same identity."""
    pass


class InsufficientListing(LedgerError):
    """Raised when a listing holds fewer hours than requested."""
    pass


class InsufficientReservation(LedgerError):
    """Raised when a wallet holds fewer reservation hours than required."""
    pass


class InsufficientFunds(LedgerError):
    """Raised when a wallet holds fewer credits than required."""
    pass


class CapacityExceeded(LedgerError):
    """Raised when listed hours would exceed the global capacity ceiling."""
    pass


class RefundUnfunded(LedgerError):
    """Raised when the platform wallet cannot cover a refund."""
    pass


class ReservationCapExceeded(LedgerError):
    """Raised when a purchase would push a wallet past the per-user reservation cap."""
    pass


class StaleListing(LedgerError):
    """Raised when a pending listing change was built against an outdated listing."""
    pass


# ============================================================================
# ARGUMENT VALIDATION
# ============================================================================

def require_int(name: str, value: Any, error: type = InvalidParameter) -> int:
    """
    Check that value is a plain int (bool is rejected).

    Raises:
        error: If value is not an int.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise error(f"{name} must be an integer, got {type(value).__name__}")
    return value


def require_hours(hours: Any) -> int:
    """Validate a positive whole number of hours."""
    require_int("hours", hours, InvalidDuration)
    if hours <= 0:
        raise InvalidDuration(f"hours must be positive, got {hours}")
    return hours


def require_price(price: Any) -> int:
    """Validate a positive integer price."""
    require_int("price", price, InvalidPrice)
    if price <= 0:
        raise InvalidPrice(f"price must be positive, got {price}")
    return price


def require_identity(name: str, identity: Any) -> str:
    """Validate a non-empty identity string."""
    if not isinstance(identity, str) or not identity.strip():
        raise InvalidParameter(f"{name} must be a non-empty string")
    return identity


def require_participant(name: str, identity: Any) -> str:
    """Validate an identity that may hold balances and listings (not the system wallet)."""
    require_identity(name, identity)
    if identity == SYSTEM_WALLET:
        raise InvalidParameter(f"{name} cannot be the system wallet")
    return identity


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class LedgerView(Protocol):
    """
    Read-only interface to ledger state.

    Transaction builders receive a LedgerView and declare their read-only
    intent by accepting nothing more. The Ledger class implements this
    protocol but also provides mutation methods. For testing, FakeView
    provides a minimal implementation.
    """

    @property
    def current_time(self) -> datetime:
        """Return the current logical time of the ledger."""
        ...

    @property
    def rates(self) -> 'RateConfig':
        """Return the current rate configuration."""
        ...

    @property
    def platform_wallet(self) -> str:
        """Return the identity of the platform account."""
        ...

    @property
    def capacity_reserved(self) -> int:
        """Return the number of hours currently listed across all wallets."""
        ...

    def get_balance(self, wallet_id: str, unit_symbol: str) -> int:
        """
        Return the balance of a specific unit in a wallet.

        Returns 0 if the wallet has never been written.
        """
        ...

    def get_listing(self, wallet_id: str) -> 'Listing':
        """Return the wallet's listing, or an empty listing if it has none."""
        ...


# ============================================================================
# CORE DATA STRUCTURES
# ============================================================================

@dataclass(frozen=True, slots=True)
class Listing:
    """
    Hours a participant offers for rent at a fixed price per hour.

    Attributes:
        hours: Hours currently offered (never negative).
        price: Price per hour in credits. Preserved when hours drop to zero.
    """
    hours: int = 0
    price: int = 0

    def __post_init__(self):
        require_int("hours", self.hours)
        require_int("price", self.price)
        if self.hours < 0:
            raise InvalidParameter(f"Listing hours cannot be negative, got {self.hours}")
        if self.price < 0:
            raise InvalidParameter(f"Listing price cannot be negative, got {self.price}")
        if self.hours > 0 and self.price == 0:
            raise InvalidPrice("A listing with hours must have a positive price")

    def is_empty(self) -> bool:
        return self.hours == 0

    def __repr__(self) -> str:
        return f"Listing({self.hours}h @ {self.price})"


EMPTY_LISTING = Listing()


@dataclass(frozen=True, slots=True)
class ListingChange:
    """
    Record of a listing change for transaction logging.

    Stores complete before/after snapshots. The ledger refuses to apply
    the change if `old` no longer matches the stored listing.

    Attributes:
        owner: Wallet whose listing changed
        old: Listing before the change
        new: Listing after the change
    """
    owner: str
    old: Listing
    new: Listing

    @property
    def hours_delta(self) -> int:
        """Signed change in listed hours (drives the capacity counter)."""
        return self.new.hours - self.old.hours


@dataclass(frozen=True, slots=True)
class Move:
    """
    A single transfer of value between two wallets.

    Attributes:
        quantity: The amount to transfer (positive integer).
        unit_symbol: UNIT_HOURS or UNIT_CREDITS.
        source: The wallet ID from which value is debited.
        dest: The wallet ID to which value is credited.
        contract_id: Identifier of the operation generating this move.

    This class is immutable (frozen=True) and memory-optimized (slots=True).
    All fields are validated in __post_init__.
    """
    quantity: int
    unit_symbol: str
    source: str
    dest: str
    contract_id: str

    def __post_init__(self):
        if not self.source or not self.source.strip():
            raise ValueError("Move source cannot be empty")
        if not self.dest or not self.dest.strip():
            raise ValueError("Move dest cannot be empty")
        if self.unit_symbol not in UNITS:
            raise ValueError(f"Move unit_symbol must be one of {UNITS}, got {self.unit_symbol!r}")
        if not self.contract_id or not self.contract_id.strip():
            raise ValueError("Move contract_id cannot be empty")
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise ValueError(f"Move quantity must be int, got {type(self.quantity)}")
        if self.quantity <= 0:
            raise ValueError(f"Move quantity must be positive, got {self.quantity}")
        if self.source == self.dest:
            raise ValueError("Source and dest must be different")

    def __repr__(self) -> str:
        return f"Move({self.quantity} {self.unit_symbol}: {self.source}→{self.dest})"


@dataclass(frozen=True, slots=True)
class TransactionOrigin:
    """
    Immutable record of a transaction's origin for audit purposes.

    Attributes:
        origin_type: Classification of the operation (LISTING, RENTAL, ...)
        source_id: Identity of the caller that requested the operation
        event_type: Specific event within the operation (e.g., "ADD", "REMOVE")
    """
    origin_type: OriginType
    source_id: str
    event_type: Optional[str] = None

    def __repr__(self) -> str:
        parts = [f"{self.origin_type.value}:{self.source_id}"]
        if self.event_type:
            parts.append(f"event={self.event_type}")
        return f"Origin({', '.join(parts)})"


@dataclass(frozen=True, slots=True)
class PendingTransaction:
    """
    A transaction specification before execution - represents INTENT.

    Created by the transaction builders and submitted to Ledger.execute().

    Attributes:
        moves: Tuple of value transfers between wallets
        listing_changes: Tuple of listing updates (old and new snapshots)
        origin: Who/what created this transaction and why
        timestamp: When this pending transaction was created
    """
    moves: Tuple[Move, ...]
    listing_changes: Tuple[ListingChange, ...]
    origin: TransactionOrigin
    timestamp: datetime

    @property
    def capacity_delta(self) -> int:
        return sum(lc.hours_delta for lc in self.listing_changes)

    def is_empty(self) -> bool:
        """Return True if this pending transaction has no moves and no listing changes."""
        return not self.moves and not self.listing_changes

    def __repr__(self) -> str:
        return (f"PendingTransaction({len(self.moves)} moves, "
                f"{len(self.listing_changes)} listing changes, {self.origin})")


def build_transaction(
    view: LedgerView,
    moves: List[Move],
    listing_changes: Optional[List[ListingChange]] = None,
    origin: Optional[TransactionOrigin] = None,
) -> PendingTransaction:
    """
    Build a PendingTransaction from moves and listing changes.

    This is the standard way to create transactions.

    Args:
        view: Read-only ledger view (provides current_time)
        moves: List of moves to include in the transaction
        listing_changes: Optional list of ListingChange objects
        origin: Transaction origin (defaults to a SYSTEM origin)

    Returns:
        A PendingTransaction ready for execution

    Example:
        def compute_payout(view, wallet, amount):
            moves = [Move(amount, UNIT_CREDITS, view.platform_wallet, wallet, "payout")]
            return build_transaction(view, moves)
    """
    if origin is None:
        origin = TransactionOrigin(
            origin_type=OriginType.SYSTEM,
            source_id=SYSTEM_WALLET,
        )

    return PendingTransaction(
        moves=tuple(moves),
        listing_changes=tuple(listing_changes or ()),
        origin=origin,
        timestamp=view.current_time,
    )


@dataclass(frozen=True, slots=True)
class Transaction:
    """
    An executed, immutable record of ledger state changes - represents FACT.

    Created by the ledger when executing a PendingTransaction.

    Attributes:
        moves: Tuple of value transfers between wallets
        listing_changes: Tuple of listing updates
        origin: Who/what created this transaction and why
        timestamp: When the PendingTransaction was created
        exec_id: Unique execution identifier (ledger + sequence + time)
        ledger_name: Name of the ledger that executed this
        execution_time: When this was executed and logged
        sequence_number: Monotonic sequence within the ledger (for ordering)
        capacity_before: Capacity counter before execution
        capacity_after: Capacity counter after execution
        contract_ids: Set of contract IDs from moves (auto-populated)
    """
    moves: Tuple[Move, ...]
    listing_changes: Tuple[ListingChange, ...]
    origin: TransactionOrigin
    timestamp: datetime
    exec_id: str
    ledger_name: str
    execution_time: datetime
    sequence_number: int
    capacity_before: int
    capacity_after: int
    contract_ids: FrozenSet[str] = None

    def __post_init__(self):
        if not self.moves and not self.listing_changes:
            raise ValueError("Transaction must have moves or listing_changes")
        if self.contract_ids is None:
            object.__setattr__(
                self, 'contract_ids',
                frozenset(m.contract_id for m in self.moves)
            )

    def __repr__(self) -> str:
        w = 80  # Inner content width
        bar = "─" * w

        def pad(text: str) -> str:
            if len(text) > w:
                return text[:w-3] + "..."
            return text + " " * (w - len(text))

        lines = [
            "",
            f"┌{bar}┐",
            f"│{pad(' Transaction: ' + self.exec_id)}│",
            f"├{bar}┤",
            f"│{pad('   execution_time : ' + str(self.execution_time))}│",
            f"│{pad('   sequence       : ' + str(self.sequence_number))}│",
            f"│{pad('   origin         : ' + repr(self.origin))}│",
            f"│{pad(f'   capacity       : {self.capacity_before} → {self.capacity_after}')}│",
            f"├{bar}┤",
            f"│{pad(' Moves (' + str(len(self.moves)) + '):')}│",
        ]
        for i, move in enumerate(self.moves):
            move_str = f"   [{i}] {move.quantity} {move.unit_symbol}: {move.source} → {move.dest}"
            lines.append(f"│{pad(move_str)}│")
        if self.listing_changes:
            lines.append(f"├{bar}┤")
            lines.append(f"│{pad(' Listing Changes (' + str(len(self.listing_changes)) + '):')}│")
            for lc in self.listing_changes:
                lines.append(f"│{pad(f'   [{lc.owner}] {lc.old!r} → {lc.new!r}')}│")
        lines.append(f"└{bar}┘")
        return "\n".join(lines)
