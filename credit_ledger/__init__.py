"""
Credit Ledger

A personal credit ledger for small shopkeepers: who owes us money
(customers and their transactions) and whom we owe (creditors and their
payables), with partial payments, import/export and cloud backup.

DESIGN PRINCIPLES:
1. Derived balances are always recomputed, never edited by hand
2. Every change produces a new snapshot; nothing is mutated in place
3. Imports and restores merge, they never overwrite
4. Every change must be auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Credit Ledger Team"
