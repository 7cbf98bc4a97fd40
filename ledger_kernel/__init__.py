"""
Ledger Kernel

A batch double-entry bookkeeping engine with:
- Chart-of-accounts and accounting-period validation
- Per-batch parsing with aggregated record errors
- Counter-account and opening-balance (primo) expansion
- Automatic VAT postings
- Per-account balances
"""

__version__ = "0.1.0"
