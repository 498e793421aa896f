"""
Leave Request Schemas.

Pydantic models for the leave form and HR decisions.
"""

from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modules.hr_portal.core.config import get_hr_portal_settings
from modules.hr_portal.models import LeaveBalance, LeaveRequestRecord, LeaveType


class LeaveRequestCreate(BaseModel):
    """
    Leave form input.

    Dates are optional here so that a missing date reaches the form's own
    validation (and its message) instead of a generic 422. A missing or
    blank leave type falls back to HR_DEFAULT_LEAVE_TYPE.
    """

    model_config = ConfigDict(populate_by_name=True)

    leave_type: LeaveType = Field(
        default_factory=lambda: get_hr_portal_settings().default_leave_type,
        alias="leaveType",
    )
    start_date: Optional[date] = Field(None, alias="startDate")
    end_date: Optional[date] = Field(None, alias="endDate")
    reason: str = Field("", max_length=2000)

    @field_validator("leave_type", mode="before")
    @classmethod
    def blank_leave_type_is_default(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return get_hr_portal_settings().default_leave_type
        return value

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def blank_date_is_missing(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("reason", mode="before")
    @classmethod
    def none_reason_is_blank(cls, value: Any) -> Any:
        return "" if value is None else value


class LeaveSubmitResponse(BaseModel):
    """Response after a leave request is stored."""

    success: bool = True
    message: str
    request: LeaveRequestRecord


class LeaveDecisionResponse(BaseModel):
    """Response after an approve/reject decision."""

    success: bool = True
    message: str
    changed: bool = Field(..., description="False when the same decision was already recorded")
    request: LeaveRequestRecord
    balance: Optional[LeaveBalance] = None


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: str = Field(..., description="Error type identifier")
    message: str = Field(..., description="Human-readable error message")
