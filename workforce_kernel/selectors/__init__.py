"""Read-only selectors for the workforce kernel."""

from workforce_kernel.selectors.approval_queue_selector import ApprovalQueueSelector
from workforce_kernel.selectors.ledger_selector import (
    BalanceView,
    LedgerSelector,
    ReconciliationRow,
)
from workforce_kernel.selectors.notification_selector import NotificationSelector

__all__ = [
    "ApprovalQueueSelector",
    "BalanceView",
    "LedgerSelector",
    "NotificationSelector",
    "ReconciliationRow",
]
