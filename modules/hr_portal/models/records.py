"""
Backend table records.

Column names on the wire are camelCase (firstName, employeeId, ...); the
models expose snake_case attributes through aliases and accept either form.
"""

from datetime import date
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

EMPLOYEES_TABLE = "employees"
BALANCES_TABLE = "leaveBalances"
LEAVE_REQUESTS_TABLE = "leaveRequests"
OFFBOARDING_TABLE = "offboardingTasks"

RecordId = Union[int, str]
Days = Union[int, float]


class LeaveType(str, Enum):
    VACATION = "vacation"
    SICK = "sick"
    MATERNITY = "maternity"
    PATERNITY = "paternity"

    def __str__(self) -> str:
        return self.value

    @property
    def label(self) -> str:
        return self.value.title()


class LeaveStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    def __str__(self) -> str:
        return self.value


def inclusive_day_count(start_date: date, end_date: date) -> int:
    """Calendar days from start to end, both included (Jan 1..Jan 3 -> 3)."""
    return (end_date - start_date).days + 1


class TableRecord(BaseModel):
    """Base for rows read from the backend."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_row(self) -> dict[str, Any]:
        """Wire representation (camelCase columns, unset values dropped)."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class EmployeeName(TableRecord):
    """Embedded `employees (firstName, lastName)` on a leave request."""

    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


class EmployeeRecord(EmployeeName):
    """Row of the `employees` table."""

    id: Optional[RecordId] = None
    user_id: Optional[str] = None
    email: Optional[str] = None
    hire_date: Optional[date] = Field(None, alias="hireDate")
    department: Optional[Any] = None
    position: Optional[Any] = None
    status: Optional[str] = None
    role: Optional[str] = None


class LeaveBalance(TableRecord):
    """Row of the `leaveBalances` table; remaining = accrued - taken."""

    id: Optional[RecordId] = None
    employee_id: RecordId = Field(..., alias="employeeId")
    leave_type: str = Field(..., alias="leaveType")
    accrued_days: Days = Field(0, alias="accruedDays")
    taken_days: Days = Field(0, alias="takenDays")
    remaining_days: Days = Field(0, alias="remainingDays")


class LeaveRequestRecord(TableRecord):
    """Row of the `leaveRequests` table, optionally with the embedded employee name."""

    id: Optional[RecordId] = None
    employee_id: RecordId = Field(..., alias="employeeId")
    leave_type: str = Field(..., alias="leaveType")
    start_date: date = Field(..., alias="startDate")
    end_date: date = Field(..., alias="endDate")
    reason: Optional[str] = None
    status: LeaveStatus = LeaveStatus.PENDING
    employee: Optional[EmployeeName] = Field(None, alias="employees")

    @property
    def day_count(self) -> int:
        return inclusive_day_count(self.start_date, self.end_date)

    @property
    def employee_name(self) -> str:
        return self.employee.full_name if self.employee else ""
