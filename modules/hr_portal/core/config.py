"""
HR Portal Module Configuration.

Manages environment variables specific to the HR Portal module.
Uses prefix HR_ to avoid conflicts with framework settings.
"""

from functools import lru_cache
from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from modules.hr_portal.models.records import LeaveType


class HrPortalSettings(BaseSettings):
    """
    HR Portal settings loaded from environment variables.

    All variables use the HR_ prefix for module isolation.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    default_leave_type: Annotated[
        LeaveType,
        Field(
            description="Leave type preselected on the request form",
            validation_alias="HR_DEFAULT_LEAVE_TYPE",
        ),
    ] = LeaveType.VACATION

    auto_create_missing_balance: Annotated[
        bool,
        Field(
            description=(
                "On approval, create a zero-accrual balance row when the employee "
                "has none for the leave type (otherwise only log a warning)"
            ),
            validation_alias="HR_AUTO_CREATE_MISSING_BALANCE",
        ),
    ] = True

    employee_dashboard_title: Annotated[
        str,
        Field(
            validation_alias="HR_EMPLOYEE_DASHBOARD_TITLE",
        ),
    ] = "Employee Dashboard"

    hr_admin_dashboard_title: Annotated[
        str,
        Field(
            validation_alias="HR_ADMIN_DASHBOARD_TITLE",
        ),
    ] = "HR/Admin Dashboard"


@lru_cache
def get_hr_portal_settings() -> HrPortalSettings:
    """
    Get cached HR Portal settings.

    Uses LRU cache to ensure settings are loaded only once.
    """
    return HrPortalSettings()
