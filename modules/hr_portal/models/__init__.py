"""
HR Portal Models.

Pydantic views of the backend tables (employees, leaveBalances,
leaveRequests, offboardingTasks).
"""

from modules.hr_portal.models.records import (
    BALANCES_TABLE,
    EMPLOYEES_TABLE,
    LEAVE_REQUESTS_TABLE,
    OFFBOARDING_TABLE,
    EmployeeName,
    EmployeeRecord,
    LeaveBalance,
    LeaveRequestRecord,
    LeaveStatus,
    LeaveType,
    inclusive_day_count,
)

__all__ = [
    "EMPLOYEES_TABLE",
    "BALANCES_TABLE",
    "LEAVE_REQUESTS_TABLE",
    "OFFBOARDING_TABLE",
    "EmployeeName",
    "EmployeeRecord",
    "LeaveBalance",
    "LeaveRequestRecord",
    "LeaveStatus",
    "LeaveType",
    "inclusive_day_count",
]
