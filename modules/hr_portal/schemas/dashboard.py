"""
Dashboard read models.

Built fresh on every page load; nothing here is cached.
"""

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from modules.hr_portal.models import EmployeeRecord, LeaveBalance, LeaveRequestRecord

TURNOVER_LABELS = ["Total Employees", "Offboarded", "Turnover Rate (%)"]
TURNOVER_COLORS = ["#4CAF50", "#FF6384", "#FFCE56"]
TURNOVER_DATASET_LABEL = "Employee Overview"


class ChartDataset(BaseModel):
    """One Chart.js dataset; serialised with Chart.js key names."""

    model_config = ConfigDict(populate_by_name=True)

    label: str
    data: list[Union[int, float]]
    background_color: list[str] = Field(default_factory=list, alias="backgroundColor")


class TurnoverChart(BaseModel):
    labels: list[str] = Field(default_factory=list)
    datasets: list[ChartDataset] = Field(default_factory=list)


class EmployeeDashboard(BaseModel):
    employee: Optional[EmployeeRecord] = None
    balances: list[LeaveBalance] = Field(default_factory=list)
    pending_requests: list[LeaveRequestRecord] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def employee_found(self) -> bool:
        return self.employee is not None and self.employee.id is not None


class HrAdminDashboard(BaseModel):
    total_employees: int = 0
    offboarded_count: int = 0
    turnover_rate: float = 0
    turnover_chart: TurnoverChart = Field(default_factory=TurnoverChart)
    pending_requests: list[LeaveRequestRecord] = Field(default_factory=list)
    error: Optional[str] = None
