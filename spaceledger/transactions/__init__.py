"""
Transactions module - Builders for every ledger state transition.

Each builder takes a read-only LedgerView, validates its preconditions and
returns a PendingTransaction for Ledger.execute():
- Listing registry: add and remove listed hours
- Rentals: pay for hours taken from another participant's listing
- Refunds: return reservation hours for discounted credits
- Funding: credit deposits and reservation purchases

All builders are re-exported here for convenience.
"""

# Listings
from .listing import (
    compute_add_listing,
    compute_remove_listing,
    compute_listed_hours,
)

# Rentals
from .rent import (
    compute_rent,
    quote_rent,
)

# Refunds
from .refund import (
    compute_refund,
)

# Funding
from .funding import (
    compute_deposit,
    compute_purchase,
)

__all__ = [
    'compute_add_listing', 'compute_remove_listing', 'compute_listed_hours',
    'compute_rent', 'quote_rent',
    'compute_refund',
    'compute_deposit', 'compute_purchase',
]
