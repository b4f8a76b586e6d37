"""Write-side services.  All of them flush; none of them commit."""

from workforce_kernel.services.balance_ledger import BalanceLedger
from workforce_kernel.services.directory_service import DirectoryService
from workforce_kernel.services.leave_request_service import LeaveRequestService
from workforce_kernel.services.notification_service import (
    NotificationHook,
    NotificationService,
)
from workforce_kernel.services.time_entry_service import TimeEntryService

__all__ = [
    "BalanceLedger",
    "DirectoryService",
    "LeaveRequestService",
    "NotificationHook",
    "NotificationService",
    "TimeEntryService",
]
