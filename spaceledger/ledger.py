"""
ledger.py - Stateful Space-Rental Ledger

The Ledger class is the central state manager for the marketplace.
It is the only module that mutates state, ensuring controlled and auditable changes.

Key responsibilities:
    - Implements LedgerView protocol for safe read-only access by transaction builders
    - Executes transactions atomically (all moves and listing changes, or none)
    - Owns the balance maps, the listing registry, the capacity counter and the rates
    - Enforces the single OWNER role on configuration setters
    - Always validates and always logs - no exceptions
"""

from __future__ import annotations
from datetime import datetime
from typing import Dict, List, Set, Optional, Any
import threading

from .core import (
    # Types
    Listing, Transaction, PendingTransaction,
    ExecuteResult, OriginType, Role,
    Positions, BalanceMap,
    # Constants
    SYSTEM_WALLET, PLATFORM_WALLET, DEFAULT_OWNER,
    UNIT_HOURS, UNIT_CREDITS, UNITS, EMPTY_LISTING,
    # Exceptions
    LedgerError, Unauthorized, InvalidParameter,
    InsufficientReservation, InsufficientFunds, RefundUnfunded, StaleListing,
    # Helper functions
    require_identity, require_participant,
)
from .rates import RateConfig
from .capacity import reserve_capacity, available_capacity
from .transactions import (
    compute_add_listing, compute_remove_listing,
    compute_rent, compute_refund,
    compute_deposit, compute_purchase,
)


class Ledger:
    """
    Single-ledger accounting engine with full validation and audit trail.

    Implements the LedgerView protocol, allowing the ledger to be passed to
    the transaction builders, which only use its read-only methods.

    Design Principles:
        - Always validates: Every transaction is checked against balance
          non-negativity, listing backing, stale listings and the capacity
          ceiling before anything is written.
        - Always logs: Every applied transaction is recorded in the audit trail.

    Thread Safety:
        Every mutating call runs under one re-entrant lock per ledger, so
        operations are serialized end to end and no caller observes a
        half-applied transaction.

    Example:
        ledger = Ledger("main", owner="admin")
        ledger.deposit("admin", "alice", 5000)
        ledger.purchase("alice", 10)
        ledger.add_listing("alice", 10, 100)

        ledger.deposit("admin", "bob", 5000)
        ledger.purchase("bob", 5)
        ledger.rent("bob", "alice", 5)
    """

    def __init__(
        self,
        name: str,
        owner: str = DEFAULT_OWNER,
        rates: Optional[RateConfig] = None,
        platform_wallet: str = PLATFORM_WALLET,
        initial_time: Optional[datetime] = None,
        verbose: bool = True,
        test_mode: bool = False
    ):
        """
        Create a ledger.

        Args:
            name: Ledger identifier
            owner: Identity granted Role.OWNER (may change configuration)
            rates: Initial rate configuration (default: RateConfig())
            platform_wallet: Identity that collects commission and funds refunds
            initial_time: Starting time for the ledger (default: 1970-01-01)
            verbose: Enable debug output (default: True)
            test_mode: Enable test mode to allow set_balance() calls (default: False)
        """
        require_participant("owner", owner)
        require_participant("platform_wallet", platform_wallet)

        self.name = name
        self.balances: Dict[str, Dict[str, int]] = {}
        self.listings: Dict[str, Listing] = {}
        self.transaction_log: List[Transaction] = []
        self._rates: RateConfig = rates if rates is not None else RateConfig()
        self._capacity_reserved: int = 0
        self._owner = owner
        self._platform_wallet = platform_wallet
        self._current_time: datetime = initial_time or datetime(1970, 1, 1)
        self.verbose = verbose
        self._test_mode = test_mode
        # Monotonic sequence counter for execution ordering
        self._next_sequence: int = 0
        self._lock = threading.RLock()

    # ========================================================================
    # LedgerView PROTOCOL IMPLEMENTATION (read-only methods)
    # ========================================================================

    @property
    def current_time(self) -> datetime:
        """Current logical time of the ledger."""
        return self._current_time

    @property
    def rates(self) -> RateConfig:
        """Current rate configuration (immutable snapshot)."""
        return self._rates

    @property
    def platform_wallet(self) -> str:
        return self._platform_wallet

    @property
    def owner(self) -> str:
        return self._owner

    @property
    def capacity_reserved(self) -> int:
        """Hours currently listed across all wallets."""
        return self._capacity_reserved

    @property
    def available_capacity(self) -> int:
        """Hours that can still be listed before reaching the ceiling."""
        return available_capacity(self._capacity_reserved, self._rates.capacity_ceiling)

    def get_balance(self, wallet_id: str, unit_symbol: str) -> int:
        """
        Get the balance of a specific unit in a wallet.

        Args:
            wallet_id: Wallet identifier
            unit_symbol: UNIT_HOURS or UNIT_CREDITS

        Returns:
            Current balance (0 if the wallet has never been written)

        Raises:
            InvalidParameter: If unit_symbol is not a ledger unit
        """
        if unit_symbol not in UNITS:
            raise InvalidParameter(f"Unknown unit {unit_symbol!r}")
        return self.balances.get(wallet_id, {}).get(unit_symbol, 0)

    def get_reservation_balance(self, wallet_id: str) -> int:
        """Reservation hours held by a wallet."""
        return self.get_balance(wallet_id, UNIT_HOURS)

    def get_monetary_balance(self, wallet_id: str) -> int:
        """Credits held by a wallet."""
        return self.get_balance(wallet_id, UNIT_CREDITS)

    def get_listing(self, wallet_id: str) -> Listing:
        """The wallet's listing, or an empty Listing(0, 0) if it never listed."""
        return self.listings.get(wallet_id, EMPTY_LISTING)

    def list_listings(self) -> Dict[str, Listing]:
        """All listings with hours on offer, keyed by owner."""
        return {w: listing for w, listing in sorted(self.listings.items()) if listing.hours > 0}

    def get_positions(self, unit_symbol: str) -> Positions:
        """
        Get all non-zero positions for a specific unit across all wallets.

        Returns:
            Dictionary mapping wallet IDs to their non-zero balances for this unit
        """
        if unit_symbol not in UNITS:
            raise InvalidParameter(f"Unknown unit {unit_symbol!r}")
        return {
            w: bals[unit_symbol]
            for w, bals in sorted(self.balances.items())
            if bals.get(unit_symbol, 0) != 0
        }

    def get_wallet_balances(self, wallet_id: str) -> BalanceMap:
        """Get all balances for a wallet (every unit, zeros included)."""
        return {unit: self.get_balance(wallet_id, unit) for unit in UNITS}

    def list_wallets(self) -> Set[str]:
        """All identities the ledger has written, plus the system and platform wallets."""
        return (set(self.balances) | set(self.listings)
                | {SYSTEM_WALLET, self._platform_wallet})

    def total_supply(self, unit_symbol: str) -> int:
        """
        Sum of a unit across all wallets, system wallet included.

        Zero whenever every balance change went through a transaction,
        because issuance and redemption post against SYSTEM_WALLET.
        """
        if unit_symbol not in UNITS:
            raise InvalidParameter(f"Unknown unit {unit_symbol!r}")
        return sum(self.balances[w].get(unit_symbol, 0) for w in sorted(self.balances))

    def verify_invariants(
        self,
        expected_supplies: Optional[Dict[str, int]] = None,
    ) -> Dict[str, Any]:
        """
        Check every cross-entity invariant of the ledger.

        Checks performed:
        1. Conservation: total supply of each unit matches expected_supplies
           (only for units present in expected_supplies)
        2. Capacity counter equals the sum of all listed hours
        3. Capacity counter does not exceed the ceiling
        4. No balance outside SYSTEM_WALLET is negative

        Args:
            expected_supplies: Optional dict mapping unit symbols to expected totals.
                               Pass {UNIT_HOURS: 0, UNIT_CREDITS: 0} for a ledger
                               never touched by set_balance().

        Returns:
            Dict with keys:
            - 'valid': bool - True if all invariants hold
            - 'supplies': Dict[str, int] - Current total supply for each unit
            - 'capacity': Dict[str, int] - reserved, listed and ceiling
            - 'discrepancies': List[Dict] - Details of any violations

        Example:
            result = ledger.verify_invariants({UNIT_HOURS: 0, UNIT_CREDITS: 0})
            assert result['valid'], f"Invariant violated: {result['discrepancies']}"
        """
        supplies = {unit: self.total_supply(unit) for unit in UNITS}
        discrepancies = []

        for unit, expected in (expected_supplies or {}).items():
            actual = supplies.get(unit, 0)
            if actual != expected:
                discrepancies.append({
                    'check': 'conservation',
                    'unit': unit,
                    'expected': expected,
                    'actual': actual,
                })

        listed = sum(listing.hours for listing in self.listings.values())
        if listed != self._capacity_reserved:
            discrepancies.append({
                'check': 'capacity_matches_listings',
                'expected': listed,
                'actual': self._capacity_reserved,
            })
        if self._capacity_reserved > self._rates.capacity_ceiling:
            discrepancies.append({
                'check': 'capacity_ceiling',
                'expected': self._rates.capacity_ceiling,
                'actual': self._capacity_reserved,
            })

        for wallet, bals in sorted(self.balances.items()):
            if wallet == SYSTEM_WALLET:
                continue
            for unit, qty in bals.items():
                if qty < 0:
                    discrepancies.append({
                        'check': 'non_negative',
                        'wallet': wallet,
                        'unit': unit,
                        'actual': qty,
                    })

        return {
            'valid': len(discrepancies) == 0,
            'supplies': supplies,
            'capacity': {
                'reserved': self._capacity_reserved,
                'listed': listed,
                'ceiling': self._rates.capacity_ceiling,
            },
            'discrepancies': discrepancies,
        }

    # ========================================================================
    # ACCESS CONTROL
    # ========================================================================

    def role_of(self, identity: str) -> Role:
        """Return the Role held by an identity."""
        return Role.OWNER if identity == self._owner else Role.PARTICIPANT

    def _require_owner(self, caller: str) -> None:
        if self.role_of(caller) is not Role.OWNER:
            raise Unauthorized(f"{caller} does not hold the {Role.OWNER.value} role")

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        """
        Hand the OWNER role to another identity.

        Raises:
            Unauthorized: If caller is not the current owner
            InvalidParameter: If new_owner is empty or the system wallet
        """
        with self._lock:
            self._require_owner(caller)
            require_participant("new_owner", new_owner)
            old_owner = self._owner
            self._owner = new_owner
            if self.verbose:
                print(f"⚙ owner: {old_owner} → {new_owner}")

    # ========================================================================
    # RATE CONFIGURATION (Mutating, owner only)
    # ========================================================================

    def _replace_rates(self, caller: str, field_name: str, build) -> None:
        """Swap in a new RateConfig built from the current one. One scalar changes."""
        with self._lock:
            self._require_owner(caller)
            old_value = getattr(self._rates, field_name)
            self._rates = build(self._rates)
            if self.verbose:
                print(f"⚙ {field_name}: {old_value} → {getattr(self._rates, field_name)}")

    def set_price(self, caller: str, price: int) -> None:
        """
        Set the global price per reservation hour.

        Raises:
            Unauthorized: If caller is not the owner
            InvalidPrice: If price <= 0
        """
        self._replace_rates(caller, 'price_per_hour', lambda r: r.with_price(price))

    def set_commission_rate(self, caller: str, rate: int) -> None:
        """Set the rental commission percentage (0..100)."""
        self._replace_rates(caller, 'commission_percent', lambda r: r.with_commission(rate))

    def set_refund_rate(self, caller: str, rate: int) -> None:
        """Set the refund percentage (0..100)."""
        self._replace_rates(caller, 'refund_percent', lambda r: r.with_refund(rate))

    def set_reservation_cap(self, caller: str, cap: int) -> None:
        """Set the per-wallet reservation cap (positive)."""
        self._replace_rates(caller, 'reservation_cap', lambda r: r.with_reservation_cap(cap))

    def set_capacity_ceiling(self, caller: str, ceiling: int) -> None:
        """
        Set the global capacity ceiling.

        Raises:
            Unauthorized: If caller is not the owner
            InvalidParameter: If ceiling is negative or below the committed capacity
        """
        self._replace_rates(
            caller, 'capacity_ceiling',
            lambda r: r.with_capacity_ceiling(ceiling, self._capacity_reserved),
        )

    # ========================================================================
    # TIME MANAGEMENT
    # ========================================================================

    def advance_time(self, new_time: datetime) -> None:
        """
        Advance the ledger's logical clock to a new time.

        Time can only move forward, never backward.

        Raises:
            ValueError: If new_time is before the current time
        """
        with self._lock:
            if new_time < self._current_time:
                raise ValueError(
                    f"Cannot move time backwards: {new_time} < {self._current_time}"
                )
            self._current_time = new_time

    # ========================================================================
    # TEST SUPPORT (Mutating)
    # ========================================================================

    def set_balance(self, wallet_id: str, unit_symbol: str, quantity: int) -> None:
        """
        Set a wallet's balance for a unit directly.

        WARNING: This method bypasses double-entry accounting and is only
        available in test mode. For production use, go through deposit(),
        purchase() or execute() instead.

        Raises:
            LedgerError: If called when test_mode is False
        """
        if not self._test_mode:
            raise LedgerError(
                "set_balance() is disabled in production mode. "
                "Use deposit(), purchase() or execute() to modify balances. "
                "Set test_mode=True when creating Ledger for testing."
            )
        require_identity("wallet_id", wallet_id)
        if unit_symbol not in UNITS:
            raise InvalidParameter(f"Unknown unit {unit_symbol!r}")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
            raise InvalidParameter(f"quantity must be a non-negative integer, got {quantity!r}")
        with self._lock:
            self.balances.setdefault(wallet_id, {})[unit_symbol] = quantity

    # ========================================================================
    # TRANSACTION EXECUTION (Mutating)
    # ========================================================================

    def _generate_exec_id(self, sequence: int) -> str:
        """
        Generate a unique execution ID.

        Format: exec:{ledger_name}:{sequence:012d}:{timestamp_micros}
        """
        micros = int(self._current_time.timestamp() * 1_000_000)
        return f"exec:{self.name}:{sequence:012d}:{micros}"

    def execute(self, pending: PendingTransaction, strict: bool = False) -> ExecuteResult:
        """
        Execute a PendingTransaction atomically.

        All moves, listing changes and the capacity update succeed together
        or not at all. Nothing is written until every check has passed.

        Args:
            pending: PendingTransaction to execute
            strict: Re-raise the validation error instead of returning REJECTED

        Returns:
            ExecuteResult.APPLIED if successful
            ExecuteResult.REJECTED if validation failed

        Raises:
            LedgerError: Only when strict=True and validation failed
        """
        with self._lock:
            if pending.is_empty():
                return ExecuteResult.APPLIED

            try:
                new_capacity = self._validate_pending(pending)
            except LedgerError as e:
                if self.verbose:
                    print(f"✗ REJECTED: {type(e).__name__}: {e}")
                if strict:
                    raise
                return ExecuteResult.REJECTED

            sequence = self._next_sequence
            self._next_sequence += 1

            tx = Transaction(
                moves=pending.moves,
                listing_changes=pending.listing_changes,
                origin=pending.origin,
                timestamp=pending.timestamp,
                exec_id=self._generate_exec_id(sequence),
                ledger_name=self.name,
                execution_time=self._current_time,
                sequence_number=sequence,
                capacity_before=self._capacity_reserved,
                capacity_after=new_capacity,
            )

            self._execute_moves(tx.moves)
            for lc in tx.listing_changes:
                self.listings[lc.owner] = lc.new
            self._capacity_reserved = new_capacity

            # Log transaction (always - audit trail is mandatory)
            self.transaction_log.append(tx)

            if self.verbose:
                self._print_tx_result(tx, "APPLIED", "✓")
            return ExecuteResult.APPLIED

    def _print_tx_result(self, tx: Transaction, result: str, icon: str) -> None:
        """Print transaction details with a result line in place of the closing border."""
        lines = repr(tx).split('\n')
        w = 80
        bar = "─" * w
        lines[-1] = f"├{bar}┤"
        lines.append(f"│{(' ' + icon + ' ' + result).ljust(w)}│")
        lines.append(f"└{bar}┘")
        print("\n".join(lines))

    def _validate_pending(self, pending: PendingTransaction) -> int:
        """
        Validate a pending transaction against all constraints.

        Checks performed:
        1. Timestamp validation (transaction must not be from the future)
        2. Listing changes were built against the current listings
        3. Capacity ceiling after the net listing delta
        4. Non-negative balances for every wallet except SYSTEM_WALLET
        5. Grown listings stay backed by the owner's reservation hours

        Args:
            pending: PendingTransaction to validate

        Returns:
            The capacity counter value to commit.

        Raises:
            LedgerError: The typed error describing the first failed check
        """
        if pending.timestamp > self._current_time:
            raise LedgerError("future timestamp")

        # Replay listing changes in order so several changes to one owner chain correctly
        working: Dict[str, Listing] = {}
        for lc in pending.listing_changes:
            current = working.get(lc.owner, self.get_listing(lc.owner))
            if current != lc.old:
                raise StaleListing(
                    f"listing for {lc.owner} is {current!r}, transaction expected {lc.old!r}"
                )
            working[lc.owner] = lc.new

        new_capacity = reserve_capacity(
            self._capacity_reserved, pending.capacity_delta, self._rates.capacity_ceiling
        )

        net: Dict[tuple, int] = {}
        for move in pending.moves:
            key_src = (move.source, move.unit_symbol)
            key_dst = (move.dest, move.unit_symbol)
            net[key_src] = net.get(key_src, 0) - move.quantity
            net[key_dst] = net.get(key_dst, 0) + move.quantity

        # SYSTEM_WALLET is exempt from balance validation (issuance/redemption)
        for (wallet, unit_sym), delta in sorted(net.items()):
            if wallet == SYSTEM_WALLET:
                continue
            proposed = self.get_balance(wallet, unit_sym) + delta
            if proposed >= 0:
                continue
            if unit_sym == UNIT_HOURS:
                raise InsufficientReservation(f"{wallet} {unit_sym}: {proposed} < 0")
            if wallet == self._platform_wallet and pending.origin.origin_type is OriginType.REFUND:
                raise RefundUnfunded(f"{wallet} {unit_sym}: {proposed} < 0")
            raise InsufficientFunds(f"{wallet} {unit_sym}: {proposed} < 0")

        for owner, listing in working.items():
            if listing.hours <= self.get_listing(owner).hours:
                continue
            backing = self.get_balance(owner, UNIT_HOURS) + net.get((owner, UNIT_HOURS), 0)
            if listing.hours > backing:
                raise InsufficientReservation(
                    f"{owner} lists {listing.hours} hours backed by only {backing}"
                )

        return new_capacity

    def _execute_moves(self, moves) -> None:
        """Apply all moves to wallet balances (debit source, credit dest)."""
        for move in moves:
            src = self.balances.setdefault(move.source, {})
            src[move.unit_symbol] = src.get(move.unit_symbol, 0) - move.quantity
            dst = self.balances.setdefault(move.dest, {})
            dst[move.unit_symbol] = dst.get(move.unit_symbol, 0) + move.quantity

    def _submit(self, pending: PendingTransaction) -> Transaction:
        """Execute strictly and return the logged Transaction."""
        self.execute(pending, strict=True)
        return self.transaction_log[-1]

    # ========================================================================
    # MARKETPLACE OPERATIONS (Mutating)
    # ========================================================================
    #
    # Each operation builds its transaction and executes it under the ledger
    # lock, so the state read by the builder is the state the ledger validates.

    def add_listing(self, caller: str, hours: int, price: int) -> Transaction:
        """
        Offer hours held in reservation for rent at a price per hour.

        Raises:
            InvalidDuration, InvalidPrice, InsufficientReservation, CapacityExceeded
        """
        with self._lock:
            return self._submit(compute_add_listing(self, caller, hours, price))

    def remove_listing(self, caller: str, hours: int) -> Transaction:
        """
        Withdraw hours from the caller's listing.

        Raises:
            InvalidDuration, InsufficientListing
        """
        with self._lock:
            return self._submit(compute_remove_listing(self, caller, hours))

    def rent(self, caller: str, lister: str, hours: int) -> Transaction:
        """
        Rent hours from lister's listing, paying price * hours plus commission.

        Raises:
            SameParty, InvalidDuration, InsufficientListing,
            InsufficientReservation, InsufficientFunds
        """
        with self._lock:
            return self._submit(compute_rent(self, caller, lister, hours))

    def refund(self, caller: str, hours: int) -> Transaction:
        """
        Return reservation hours for credits at the current refund rate.

        Raises:
            InvalidDuration, InsufficientReservation, RefundUnfunded
        """
        with self._lock:
            return self._submit(compute_refund(self, caller, hours))

    def purchase(self, caller: str, hours: int) -> Transaction:
        """
        Buy reservation hours at the global price, up to the reservation cap.

        Raises:
            InvalidDuration, ReservationCapExceeded, InsufficientFunds
        """
        with self._lock:
            return self._submit(compute_purchase(self, caller, hours))

    def deposit(self, caller: str, wallet: str, amount: int) -> Transaction:
        """
        Issue credits to a wallet. Owner only.

        Raises:
            Unauthorized, InvalidParameter
        """
        with self._lock:
            self._require_owner(caller)
            return self._submit(compute_deposit(self, wallet, amount))

    # ========================================================================
    # LEDGER OPERATIONS
    # ========================================================================

    def snapshot(self) -> Dict[str, Any]:
        """
        Plain-data copy of every piece of mutable state.

        Two snapshots compare equal exactly when the ledgers hold the same
        balances, listings, capacity, rates and owner.
        """
        with self._lock:
            return {
                'balances': {w: dict(b) for w, b in sorted(self.balances.items())},
                'listings': {w: (listing.hours, listing.price) for w, listing in sorted(self.listings.items())},
                'capacity_reserved': self._capacity_reserved,
                'rates': self._rates,
                'owner': self._owner,
            }

    def clone(self) -> Ledger:
        """
        Create a deep copy of this ledger.

        All state is fully independent: modifications to the clone will not
        affect the original ledger, and vice versa. The transaction log is
        copied (its records are immutable).

        Returns:
            A new Ledger instance with identical state
        """
        with self._lock:
            cloned = Ledger.__new__(Ledger)
            cloned.name = self.name
            cloned._current_time = self._current_time
            cloned.verbose = self.verbose
            cloned._test_mode = self._test_mode
            cloned._rates = self._rates
            cloned._owner = self._owner
            cloned._platform_wallet = self._platform_wallet
            cloned._capacity_reserved = self._capacity_reserved
            cloned.balances = {w: dict(b) for w, b in self.balances.items()}
            cloned.listings = dict(self.listings)
            cloned.transaction_log = list(self.transaction_log)
            cloned._next_sequence = self._next_sequence
            cloned._lock = threading.RLock()
            return cloned
