"""ORM models for the workforce kernel."""

from workforce_kernel.models.employee import EmployeeModel
from workforce_kernel.models.leave import (
    LeaveBalanceModel,
    LeaveCategoryModel,
    LeaveRequestModel,
)
from workforce_kernel.models.notification import NotificationModel
from workforce_kernel.models.project import ProjectAssignmentModel, ProjectModel
from workforce_kernel.models.time_entry import TimeEntryModel

__all__ = [
    "EmployeeModel",
    "LeaveBalanceModel",
    "LeaveCategoryModel",
    "LeaveRequestModel",
    "NotificationModel",
    "ProjectAssignmentModel",
    "ProjectModel",
    "TimeEntryModel",
]
