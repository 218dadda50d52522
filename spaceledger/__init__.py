"""
spaceledger - Space-Rental Marketplace Ledger

A single-ledger accounting engine tracking reservation hours, credits,
listings and global listing capacity for a peer-to-peer space-rental market.

Usage:
    from spaceledger import Ledger, RateConfig

    ledger = Ledger("main", owner="admin", rates=RateConfig(price_per_hour=500))

    # Host issues credits; participants buy reservation hours
    ledger.deposit("admin", "alice", 10000)
    ledger.purchase("alice", 10)

    # Alice offers her hours at 100 credits each
    ledger.add_listing("alice", 10, 100)

    # Bob rents 5 of them (he must hold 5 reservation hours himself)
    ledger.deposit("admin", "bob", 10000)
    ledger.purchase("bob", 5)
    ledger.rent("bob", "alice", 5)

    # Bob returns 3 hours for 90% of the global price
    ledger.refund("bob", 3)
"""

# Core types
from .core import (
    LedgerView,
    Move,
    Listing,
    ListingChange,
    Transaction,
    PendingTransaction,
    TransactionOrigin,
    OriginType,
    ExecuteResult,
    Role,
    build_transaction,
    EMPTY_LISTING,
    LedgerError,
    Unauthorized,
    InvalidParameter,
    InvalidDuration,
    InvalidPrice,
    SameParty,
    InsufficientListing,
    InsufficientReservation,
    InsufficientFunds,
    CapacityExceeded,
    RefundUnfunded,
    ReservationCapExceeded,
    StaleListing,
    SYSTEM_WALLET,
    PLATFORM_WALLET,
    DEFAULT_OWNER,
    UNIT_HOURS,
    UNIT_CREDITS,
)

# Rates
from .rates import (
    RateConfig,
    compute_commission,
    compute_rental_total,
    compute_refund_amount,
    compute_purchase_cost,
)

# Capacity
from .capacity import (
    reserve_capacity,
    available_capacity,
)

# Ledger
from .ledger import Ledger

# Transactions
from .transactions import (
    compute_add_listing,
    compute_remove_listing,
    compute_listed_hours,
    compute_rent,
    quote_rent,
    compute_refund,
    compute_deposit,
    compute_purchase,
)

__all__ = [
    # Core
    'LedgerView', 'Move', 'Listing', 'ListingChange', 'Transaction',
    'PendingTransaction', 'TransactionOrigin', 'OriginType', 'ExecuteResult', 'Role',
    'build_transaction', 'EMPTY_LISTING',
    'LedgerError', 'Unauthorized', 'InvalidParameter', 'InvalidDuration', 'InvalidPrice',
    'SameParty', 'InsufficientListing', 'InsufficientReservation', 'InsufficientFunds',
    'CapacityExceeded', 'RefundUnfunded', 'ReservationCapExceeded', 'StaleListing',
    'SYSTEM_WALLET', 'PLATFORM_WALLET', 'DEFAULT_OWNER', 'UNIT_HOURS', 'UNIT_CREDITS',
    # Rates
    'RateConfig', 'compute_commission', 'compute_rental_total',
    'compute_refund_amount', 'compute_purchase_cost',
    # Capacity
    'reserve_capacity', 'available_capacity',
    # Ledger
    'Ledger',
    # Transactions
    'compute_add_listing', 'compute_remove_listing', 'compute_listed_hours',
    'compute_rent', 'quote_rent', 'compute_refund',
    'compute_deposit', 'compute_purchase',
]

__version__ = '1.0.0'
