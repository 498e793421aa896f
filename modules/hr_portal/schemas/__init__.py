"""
HR Portal Schemas.

Pydantic models for request/response validation.
"""

from modules.hr_portal.schemas.dashboard import (
    ChartDataset,
    EmployeeDashboard,
    HrAdminDashboard,
    TurnoverChart,
)
from modules.hr_portal.schemas.leave import (
    ErrorResponse,
    LeaveDecisionResponse,
    LeaveRequestCreate,
    LeaveSubmitResponse,
)

__all__ = [
    "ChartDataset",
    "EmployeeDashboard",
    "HrAdminDashboard",
    "TurnoverChart",
    "ErrorResponse",
    "LeaveDecisionResponse",
    "LeaveRequestCreate",
    "LeaveSubmitResponse",
]
