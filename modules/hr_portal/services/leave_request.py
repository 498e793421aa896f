"""
Leave Request Service.

Validates the leave form locally and stores one pending request. Invalid
date ranges never reach the backend.
"""

import inspect
import logging
from datetime import date
from typing import Any, Awaitable, Callable, Optional, Union

from core.backend import BackendService, Err, ErrorKind, Ok, Result
from modules.hr_portal.models import (
    LEAVE_REQUESTS_TABLE,
    LeaveRequestRecord,
    LeaveStatus,
    LeaveType,
)

logger = logging.getLogger(__name__)

INVALID_DATES_MESSAGE = "Please select valid start and end dates."
LEAVE_SUBMITTED_MESSAGE = "Leave request submitted successfully!"

SuccessCallback = Callable[[LeaveRequestRecord], Union[None, Awaitable[None]]]


def validate_date_range(start_date: Optional[date], end_date: Optional[date]) -> Optional[Err]:
    """Both dates are required and start may not be after end."""
    if start_date is None or end_date is None or start_date > end_date:
        return Err(ErrorKind.VALIDATION, INVALID_DATES_MESSAGE)
    return None


class LeaveRequestService:
    """
    Service for employee leave submissions.

    Args:
        gateway: Backend gateway carrying the employee's access token.
    """

    def __init__(self, gateway: BackendService) -> None:
        self._gateway = gateway

    async def submit(
        self,
        employee_id: Any,
        leave_type: Union[LeaveType, str],
        start_date: Optional[date],
        end_date: Optional[date],
        reason: str = "",
        on_success: Optional[SuccessCallback] = None,
    ) -> Result[LeaveRequestRecord]:
        """
        Submit a leave request in pending state.

        Args:
            employee_id: The employee's record id.
            leave_type: One of the LeaveType values.
            start_date: First day of leave.
            end_date: Last day of leave (inclusive).
            reason: Optional free text.
            on_success: Called (or awaited) with the stored record.

        Returns:
            Ok(record), Err(VALIDATION) for bad input, or the backend's Err.
        """
        invalid = validate_date_range(start_date, end_date)
        if invalid is not None:
            logger.info(f"Rejected leave form for employee {employee_id}: invalid dates")
            return invalid

        try:
            leave_type = LeaveType(leave_type)
        except ValueError:
            return Err(ErrorKind.VALIDATION, f"Unknown leave type: {leave_type}")

        row = {
            "employeeId": employee_id,
            "leaveType": leave_type.value,
            "startDate": start_date.isoformat(),
            "endDate": end_date.isoformat(),
            "reason": reason or "",
            "status": LeaveStatus.PENDING.value,
        }

        result = await self._gateway.table(LEAVE_REQUESTS_TABLE).insert(row).execute()
        if isinstance(result, Err):
            logger.error(f"Leave request error: {result.message}")
            return result

        rows = result.value or []
        record = LeaveRequestRecord.model_validate(rows[0] if rows else row)
        logger.info(
            f"Leave request stored for employee {employee_id}: "
            f"{record.leave_type} {record.start_date}..{record.end_date} ({record.day_count} day(s))"
        )

        if on_success is not None:
            outcome = on_success(record)
            if inspect.isawaitable(outcome):
                await outcome

        return Ok(record)
