"""
HR Portal Services.

Business logic for leave requests, approvals and dashboards.
"""

from modules.hr_portal.services.approval import (
    LeaveApprovalService,
    LeaveDecision,
    apply_taken_days,
)
from modules.hr_portal.services.dashboard import (
    EMPLOYEE_NOT_FOUND_MESSAGE,
    DashboardService,
    build_turnover_chart,
    turnover_rate,
)
from modules.hr_portal.services.leave_request import (
    INVALID_DATES_MESSAGE,
    LEAVE_SUBMITTED_MESSAGE,
    LeaveRequestService,
    validate_date_range,
)

__all__ = [
    "LeaveApprovalService",
    "LeaveDecision",
    "apply_taken_days",
    "DashboardService",
    "build_turnover_chart",
    "turnover_rate",
    "EMPLOYEE_NOT_FOUND_MESSAGE",
    "LeaveRequestService",
    "validate_date_range",
    "INVALID_DATES_MESSAGE",
    "LEAVE_SUBMITTED_MESSAGE",
]
