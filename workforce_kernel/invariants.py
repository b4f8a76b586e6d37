"""
Kernel Invariants Contract.

These invariants are structural law. They are hardcoded in the ledger,
the lifecycle services and database constraints. No configuration set or
leave category may override them.

This module exists solely to declare these invariants explicitly. The
enforcement is distributed across BalanceLedger, TimeEntryService,
LeaveRequestService, ApprovalRouter and the ORM check constraints.
"""

from enum import Enum, unique


@unique
class KernelInvariant(str, Enum):
    """Non-configurable invariants enforced by the kernel.

    Each value names one structural guarantee that the kernel provides
    unconditionally. Configuration may influence *how much* leave is
    allocated, but never *whether* these rules apply.
    """

    BALANCE_EQUATION = "balance_equation"
    """balance == allocated - used on every ledger row after every
    mutation. Enforced by BalancePosition arithmetic and a DB check
    constraint on leave_balances."""

    NON_NEGATIVE_BALANCE = "non_negative_balance"
    """A deduction never drives balance below zero. Enforced by the
    locked re-check in BalanceLedger.post_deduction."""

    SINGLE_DECISION = "single_decision"
    """Exactly one decision can succeed from pending/submitted. Enforced
    by compare-and-set UPDATEs on the stored status."""

    ATOMIC_APPROVAL = "atomic_approval"
    """A leave approval and its ledger deduction commit together or not
    at all. Enforced by the SAVEPOINT in LeaveRequestService.decide."""

    DIRECT_MANAGER_ROUTING = "direct_manager_routing"
    """Only the subject's direct manager or an admin may decide.
    Enforced by ApprovalRouter."""

    LEDGER_CHOKE_POINT = "ledger_choke_point"
    """used/balance are mutated only through BalanceLedger. No other
    component writes those columns."""


# All invariants as a frozenset for programmatic checks.
ALL_KERNEL_INVARIANTS: frozenset[KernelInvariant] = frozenset(KernelInvariant)

# The kernel package may not import from these packages.
# This is enforced by tests/architecture/test_workforce_boundaries.py.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = (
    "workforce_config",
    "workforce_services",
)
