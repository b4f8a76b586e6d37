"""
Typed Exception Hierarchy for the Workforce Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

The approval engine has a small set of outcomes that callers must tell apart
precisely: a reviewer who is not allowed to decide, a request that was
already decided, a balance that ran out between request and approval.
Parsing message strings for these is fragile, so:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example - WRONG way to handle errors:
    try:
        leave_service.decide(actor, request_id, DecisionOutcome.APPROVED)
    except Exception as e:
        if "balance" in str(e):  # FRAGILE - message might change
            show_balance_warning()

Example - RIGHT way (what this module enables):
    try:
        leave_service.decide(actor, request_id, DecisionOutcome.APPROVED)
    except InsufficientBalanceError as e:
        api_response(code=e.code, requested=e.requested, available=e.available)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from WorkforceKernelError:

    WorkforceKernelError (base)
    |
    +-- LifecycleError
    |   +-- InvalidStateError
    |
    +-- AuthorizationError
    |   +-- UnauthorizedError
    |       +-- ProjectNotAssignedError
    |
    +-- LedgerError
    |   +-- InsufficientBalanceError
    |   +-- LedgerRowMissingError
    |   +-- ReversalExceedsUsageError
    |
    +-- ValidationError
    |   +-- InvalidHoursError
    |   +-- InvalidLeaveRequestError
    |   +-- AttachmentRequiredError
    |   +-- EmptyBatchError
    |
    +-- NotFoundError
        +-- EmployeeNotFoundError
        +-- ProjectNotFoundError
        +-- TimeEntryNotFoundError
        +-- LeaveRequestNotFoundError
        +-- LeaveCategoryNotFoundError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Lifecycle       | INVALID_STATE               | Action not allowed from current state
----------------|-----------------------------|-----------------------------------------
Authorization   | UNAUTHORIZED                | Not direct manager / admin / owner
                | PROJECT_NOT_ASSIGNED        | Logging time on an unassigned project
----------------|-----------------------------|-----------------------------------------
Ledger          | INSUFFICIENT_BALANCE        | Day count exceeds remaining balance
                | LEDGER_ROW_MISSING          | No row for (employee, year, category)
                | REVERSAL_EXCEEDS_USAGE      | Reversal larger than recorded usage
----------------|-----------------------------|-----------------------------------------
Validation      | INVALID_HOURS               | Hours outside [0, 24]
                | INVALID_LEAVE_REQUEST       | Bad dates / half-day period / backup
                | ATTACHMENT_REQUIRED         | Category requires an attachment
                | EMPTY_BATCH                 | Bulk decision with no entries
----------------|-----------------------------|-----------------------------------------
Not found       | EMPLOYEE_NOT_FOUND          | Employee ID doesn't exist
                | PROJECT_NOT_FOUND           | Project ID doesn't exist
                | TIME_ENTRY_NOT_FOUND        | Time entry ID doesn't exist
                | LEAVE_REQUEST_NOT_FOUND     | Leave request ID doesn't exist
                | LEAVE_CATEGORY_NOT_FOUND    | Leave category ID doesn't exist

===============================================================================
HANDLING PATTERNS
===============================================================================

1. USER-FACING OUTCOMES (expected, translate to a response):

    except (UnauthorizedError, InsufficientBalanceError, InvalidStateError) as e:
        return {"error": e.code, "message": str(e)}

2. DATA-INTEGRITY FAILURES (never expected in a provisioned system):

    except LedgerRowMissingError as e:
        page_on_call(e)  # already logged at CRITICAL by the ledger

3. NOTIFICATION FAILURES never surface here. The dispatcher hook logs
   and swallows them so a transition is never rolled back by delivery.

===============================================================================
DESIGN DECISIONS
===============================================================================

1. WHY INHERIT FROM Exception (not ValueError, etc.)?
   Domain exceptions should be catchable as a group. Inheriting from
   built-in types mixes domain errors with programming errors.

2. WHY code CLASS ATTRIBUTE (not instance)?
   Codes are static per exception type, so InvalidStateError.code is
   available without instantiation.

3. WHY STORE ALL CONTEXT AS ATTRIBUTES?
   Exceptions are logged as structured JSON (see logging_config). Every
   public attribute becomes an ``exc_<name>`` field in the log line.

===============================================================================
"""

from decimal import Decimal


class WorkforceKernelError(Exception):
    """
    Base exception for all workforce kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "WORKFORCE_KERNEL_ERROR"


# Lifecycle exceptions


class LifecycleError(WorkforceKernelError):
    """Base exception for state machine violations."""

    code: str = "LIFECYCLE_ERROR"


class InvalidStateError(LifecycleError):
    """Operation attempted from a state that does not permit it."""

    code: str = "INVALID_STATE"

    def __init__(
        self,
        entity_type: str,
        entity_id: str,
        current_state: str,
        action: str,
    ):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.current_state = current_state
        self.action = action
        super().__init__(
            f"Cannot {action} {entity_type} {entity_id} "
            f"in state '{current_state}'"
        )


# Authorization exceptions


class AuthorizationError(WorkforceKernelError):
    """Base exception for authorization failures."""

    code: str = "AUTHORIZATION_ERROR"


class UnauthorizedError(AuthorizationError):
    """Caller lacks the relationship or role required for the action."""

    code: str = "UNAUTHORIZED"

    def __init__(self, actor_id: str, action: str, reason: str):
        self.actor_id = actor_id
        self.action = action
        self.reason = reason
        super().__init__(f"Actor {actor_id} may not {action}: {reason}")


class ProjectNotAssignedError(UnauthorizedError):
    """Employee tried to log time against a project they are not on."""

    code: str = "PROJECT_NOT_ASSIGNED"

    def __init__(self, actor_id: str, project_id: str):
        self.project_id = project_id
        super().__init__(
            actor_id,
            "log time",
            f"not assigned to project {project_id}",
        )


# Ledger exceptions


class LedgerError(WorkforceKernelError):
    """Base exception for leave balance ledger errors."""

    code: str = "LEDGER_ERROR"


class InsufficientBalanceError(LedgerError):
    """
    Requested day count exceeds the remaining balance.

    Raised both at request creation (advisory check) and at approval
    (authoritative re-check under a row lock).
    """

    code: str = "INSUFFICIENT_BALANCE"

    def __init__(
        self,
        employee_id: str,
        year: int,
        category_id: str,
        requested: Decimal,
        available: Decimal,
    ):
        self.employee_id = employee_id
        self.year = year
        self.category_id = category_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient leave balance for employee {employee_id} "
            f"({category_id}, {year}): requested {requested}, "
            f"available {available}"
        )


class LedgerRowMissingError(LedgerError):
    """
    No ledger row exists for (employee, year, category).

    This is a data-integrity violation -- onboarding provisions every row.
    It is never repaired automatically.
    """

    code: str = "LEDGER_ROW_MISSING"

    def __init__(self, employee_id: str, year: int, category_id: str):
        self.employee_id = employee_id
        self.year = year
        self.category_id = category_id
        super().__init__(
            f"No leave balance row for employee {employee_id}, "
            f"year {year}, category {category_id}"
        )


class ReversalExceedsUsageError(LedgerError):
    """A reversal would drive `used` below zero."""

    code: str = "REVERSAL_EXCEEDS_USAGE"

    def __init__(self, employee_id: str, days: Decimal, used: Decimal):
        self.employee_id = employee_id
        self.days = days
        self.used = used
        super().__init__(
            f"Cannot reverse {days} days for employee {employee_id}: "
            f"only {used} used"
        )


# Validation exceptions


class ValidationError(WorkforceKernelError):
    """Base exception for rejected input."""

    code: str = "VALIDATION_ERROR"


class InvalidHoursError(ValidationError):
    """Hours outside [0, 24]."""

    code: str = "INVALID_HOURS"

    def __init__(self, hours: str):
        self.hours = hours
        super().__init__(f"Hours must be between 0 and 24, got {hours}")


class InvalidLeaveRequestError(ValidationError):
    """Leave request fields are inconsistent."""

    code: str = "INVALID_LEAVE_REQUEST"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid leave request: {reason}")


class AttachmentRequiredError(ValidationError):
    """The leave category requires a supporting attachment."""

    code: str = "ATTACHMENT_REQUIRED"

    def __init__(self, category_name: str):
        self.category_name = category_name
        super().__init__(f"{category_name} requests require an attachment")


class EmptyBatchError(ValidationError):
    """A bulk decision was requested with no entries."""

    code: str = "EMPTY_BATCH"

    def __init__(self):
        super().__init__("Bulk decision requires at least one entry")


# Not-found exceptions


class NotFoundError(WorkforceKernelError):
    """Base exception for missing referenced entities."""

    code: str = "NOT_FOUND"


class EmployeeNotFoundError(NotFoundError):
    """Employee with given ID was not found."""

    code: str = "EMPLOYEE_NOT_FOUND"

    def __init__(self, employee_id: str):
        self.employee_id = employee_id
        super().__init__(f"Employee not found: {employee_id}")


class ProjectNotFoundError(NotFoundError):
    """Project with given ID was not found."""

    code: str = "PROJECT_NOT_FOUND"

    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__(f"Project not found: {project_id}")


class TimeEntryNotFoundError(NotFoundError):
    """Time entry with given ID was not found."""

    code: str = "TIME_ENTRY_NOT_FOUND"

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"Time entry not found: {entry_id}")


class LeaveRequestNotFoundError(NotFoundError):
    """Leave request with given ID was not found."""

    code: str = "LEAVE_REQUEST_NOT_FOUND"

    def __init__(self, request_id: str):
        self.request_id = request_id
        super().__init__(f"Leave request not found: {request_id}")


class LeaveCategoryNotFoundError(NotFoundError):
    """Leave category with given ID was not found."""

    code: str = "LEAVE_CATEGORY_NOT_FOUND"

    def __init__(self, category_id: str):
        self.category_id = category_id
        super().__init__(f"Leave category not found: {category_id}")
