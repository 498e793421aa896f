"""
Dashboard Service.

Read models for the employee and HR/Admin dashboards. Every page load runs
these queries again; a failed query leaves its lists empty and carries the
provider's message for display.
"""

import logging
from typing import Union

from core.backend import BackendService, Err, Identity, Ok, Result
from modules.hr_portal.models import (
    BALANCES_TABLE,
    EMPLOYEES_TABLE,
    LEAVE_REQUESTS_TABLE,
    OFFBOARDING_TABLE,
    EmployeeRecord,
    LeaveBalance,
    LeaveRequestRecord,
    LeaveStatus,
)
from modules.hr_portal.schemas.dashboard import (
    TURNOVER_COLORS,
    TURNOVER_DATASET_LABEL,
    TURNOVER_LABELS,
    ChartDataset,
    EmployeeDashboard,
    HrAdminDashboard,
    TurnoverChart,
)

logger = logging.getLogger(__name__)

EMPLOYEE_NOT_FOUND_MESSAGE = "Employee data not found."


def turnover_rate(total_employees: int, offboarded: int) -> Union[int, float]:
    """Offboarded as a percentage of all employees, 2 decimals; 0 with no employees."""
    if total_employees <= 0:
        return 0
    return round(offboarded / total_employees * 100, 2)


def build_turnover_chart(total_employees: int, offboarded: int) -> TurnoverChart:
    return TurnoverChart(
        labels=list(TURNOVER_LABELS),
        datasets=[
            ChartDataset(
                label=TURNOVER_DATASET_LABEL,
                data=[total_employees, offboarded, turnover_rate(total_employees, offboarded)],
                background_color=list(TURNOVER_COLORS),
            )
        ],
    )


class DashboardService:
    """
    Loads dashboard data for the signed-in user.

    Args:
        gateway: Backend gateway carrying the user's access token.
    """

    def __init__(self, gateway: BackendService) -> None:
        self._gateway = gateway

    async def get_employee(self, identity: Identity) -> Result[EmployeeRecord]:
        """Employee record linked to an auth identity (NOT_FOUND when absent)."""
        result = await (
            self._gateway.table(EMPLOYEES_TABLE)
            .select("*")
            .eq("user_id", identity.id)
            .single()
            .execute()
        )
        if isinstance(result, Err):
            return result
        return Ok(EmployeeRecord.model_validate(result.value))

    async def get_employee_id(self, identity: Identity) -> Result[object]:
        employee = await self.get_employee(identity)
        if isinstance(employee, Err):
            return employee
        return Ok(employee.value.id)

    async def load_employee_dashboard(self, identity: Identity) -> EmployeeDashboard:
        employee = await self.get_employee(identity)
        if isinstance(employee, Err):
            if employee.is_not_found:
                logger.warning(f"No employee record for identity {identity.id}")
                return EmployeeDashboard()
            logger.error(f"Error fetching employee dashboard data: {employee.message}")
            return EmployeeDashboard(error=employee.message)

        record = employee.value
        balances = await (
            self._gateway.table(BALANCES_TABLE)
            .select("*")
            .eq("employeeId", record.id)
            .execute()
        )
        if isinstance(balances, Err):
            logger.error(f"Error fetching leave balances: {balances.message}")
            return EmployeeDashboard(employee=record, error=balances.message)

        pending = await (
            self._gateway.table(LEAVE_REQUESTS_TABLE)
            .select("*")
            .eq("employeeId", record.id)
            .eq("status", LeaveStatus.PENDING.value)
            .execute()
        )
        if isinstance(pending, Err):
            logger.error(f"Error fetching pending leave requests: {pending.message}")
            return EmployeeDashboard(
                employee=record,
                balances=[LeaveBalance.model_validate(row) for row in balances.value or []],
                error=pending.message,
            )

        return EmployeeDashboard(
            employee=record,
            balances=[LeaveBalance.model_validate(row) for row in balances.value or []],
            pending_requests=[LeaveRequestRecord.model_validate(row) for row in pending.value or []],
        )

    async def load_hr_admin_dashboard(self) -> HrAdminDashboard:
        employees = await self._gateway.table(EMPLOYEES_TABLE).select("id, department").execute()
        offboarded = await self._gateway.table(OFFBOARDING_TABLE).select("employeeId").execute()

        for result in (employees, offboarded):
            if isinstance(result, Err):
                logger.error(f"Error fetching HR/Admin dashboard data: {result.message}")
                return HrAdminDashboard(error=result.message)

        total = len(employees.value or [])
        offboarded_count = len(offboarded.value or [])

        pending = await (
            self._gateway.table(LEAVE_REQUESTS_TABLE)
            .select("*, employees (firstName, lastName)")
            .eq("status", LeaveStatus.PENDING.value)
            .execute()
        )

        dashboard = HrAdminDashboard(
            total_employees=total,
            offboarded_count=offboarded_count,
            turnover_rate=turnover_rate(total, offboarded_count),
            turnover_chart=build_turnover_chart(total, offboarded_count),
        )
        if isinstance(pending, Err):
            logger.error(f"Error fetching pending leave requests: {pending.message}")
            return dashboard.model_copy(update={"error": pending.message})

        return dashboard.model_copy(
            update={
                "pending_requests": [
                    LeaveRequestRecord.model_validate(row) for row in pending.value or []
                ]
            }
        )
