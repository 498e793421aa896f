"""
Conftest for HR Portal Module Tests.

Seed helpers for leave requests and balances on top of the shared
FakeBackend fixtures.
"""

from typing import Any, Callable

import pytest


@pytest.fixture
def hr_settings():
    """HR portal settings with defaults (no HR_* environment)."""
    from modules.hr_portal.core.config import HrPortalSettings

    return HrPortalSettings(_env_file=None)


@pytest.fixture
def seed_leave_request(fake_backend) -> Callable[..., dict[str, Any]]:
    """Factory: store a leave request row for an employee row."""
    def _seed(
        employee: dict[str, Any],
        leave_type: str = "vacation",
        start: str = "2025-03-10",
        end: str = "2025-03-12",
        status: str = "pending",
        reason: str = "Family trip",
    ) -> dict[str, Any]:
        return fake_backend.add_row("leaveRequests", {
            "employeeId": employee["id"],
            "leaveType": leave_type,
            "startDate": start,
            "endDate": end,
            "reason": reason,
            "status": status,
        })

    return _seed


@pytest.fixture
def seed_balance(fake_backend) -> Callable[..., dict[str, Any]]:
    """Factory: store a leave balance row for an employee row."""
    def _seed(
        employee: dict[str, Any],
        leave_type: str = "vacation",
        accrued: float = 10,
        taken: float = 2,
    ) -> dict[str, Any]:
        return fake_backend.add_row("leaveBalances", {
            "employeeId": employee["id"],
            "leaveType": leave_type,
            "accruedDays": accrued,
            "takenDays": taken,
            "remainingDays": accrued - taken,
        })

    return _seed


@pytest.fixture
def employee_row(fake_backend) -> dict[str, Any]:
    user = fake_backend.add_user("jane.doe@corp.com")
    return fake_backend.add_employee(user, role="employee")


@pytest.fixture
def app_context(backend_env):
    """AppContext loaded from the backend test environment."""
    from core.app_context import AppContext, ConfigLoader

    loader = ConfigLoader()
    loader.load()
    return AppContext(loader)
