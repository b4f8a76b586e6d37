"""
Workforce Kernel - Approval & Balance Accounting Engine

A transactional core for a workforce portal with:
- Time entry and leave request review lifecycles
- A per-employee, per-year leave balance ledger
- Direct-manager-or-admin approval routing
- Atomic decision + ledger deduction
- Best-effort notifications on every visible transition
"""

__version__ = "0.1.0"
