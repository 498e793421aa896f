"""
Leave Approval Service.

HR decisions on pending leave requests.

Decision rules:
    - The status update only matches rows still `pending`, so a request is
      decided once even when two HR users click at the same time.
    - Repeating the decision already recorded is a no-op (no second
      balance change); the opposite decision is a CONFLICT.
    - Approval adds the inclusive day count to `takenDays` of the
      (employeeId, leaveType) balance and recomputes `remainingDays`.
    - When that balance write fails the request goes back to `pending`, so
      the approval can be retried without losing the balance change.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from core.backend import BackendService, Err, ErrorKind, Ok, Result
from modules.hr_portal.core.config import HrPortalSettings, get_hr_portal_settings
from modules.hr_portal.models import (
    BALANCES_TABLE,
    LEAVE_REQUESTS_TABLE,
    LeaveBalance,
    LeaveRequestRecord,
    LeaveStatus,
)

logger = logging.getLogger(__name__)

UPDATE_FAILED_MESSAGE = "Failed to update leave request."


@dataclass(frozen=True)
class LeaveDecision:
    request: LeaveRequestRecord
    changed: bool
    balance: Optional[LeaveBalance] = None


def apply_taken_days(balance: LeaveBalance, days: int) -> LeaveBalance:
    """Add taken days and recompute remaining = accrued - taken."""
    taken = balance.taken_days + days
    return balance.model_copy(
        update={"taken_days": taken, "remaining_days": balance.accrued_days - taken}
    )


class LeaveApprovalService:
    """
    Service for approving and rejecting leave requests.

    Args:
        gateway: Backend gateway carrying the HR user's access token.
        settings: Module settings. Uses the cached instance if not provided.
    """

    def __init__(
        self,
        gateway: BackendService,
        settings: HrPortalSettings | None = None,
    ) -> None:
        self._gateway = gateway
        self._settings = settings or get_hr_portal_settings()

    async def approve(self, request_id: Any) -> Result[LeaveDecision]:
        return await self._decide(request_id, LeaveStatus.APPROVED)

    async def reject(self, request_id: Any) -> Result[LeaveDecision]:
        return await self._decide(request_id, LeaveStatus.REJECTED)

    async def _decide(self, request_id: Any, status: LeaveStatus) -> Result[LeaveDecision]:
        updated = await (
            self._gateway.table(LEAVE_REQUESTS_TABLE)
            .update({"status": status.value})
            .eq("id", request_id)
            .eq("status", LeaveStatus.PENDING.value)
            .execute()
        )
        if isinstance(updated, Err):
            logger.error(f"Leave approval error for request {request_id}: {updated.message}")
            return updated

        rows = updated.value or []
        if not rows:
            return await self._already_decided(request_id, status)

        record = LeaveRequestRecord.model_validate(rows[0])
        logger.info(f"Leave request {request_id} {status} ({record.day_count} day(s))")

        balance = None
        if status is LeaveStatus.APPROVED:
            applied = await self._apply_to_balance(record)
            if isinstance(applied, Err):
                await self._reopen(request_id)
                return applied
            balance = applied.value

        return Ok(LeaveDecision(request=record, changed=True, balance=balance))

    async def _reopen(self, request_id: Any) -> None:
        """Put an approval back to pending after its balance write failed, so it can be retried."""
        reverted = await (
            self._gateway.table(LEAVE_REQUESTS_TABLE)
            .update({"status": LeaveStatus.PENDING.value})
            .eq("id", request_id)
            .eq("status", LeaveStatus.APPROVED.value)
            .execute()
        )
        if isinstance(reverted, Err):
            logger.error(
                f"Leave request {request_id} stays approved without a balance update: {reverted.message}"
            )
            return
        logger.warning(f"Leave request {request_id} returned to pending; balance update failed")

    async def _already_decided(self, request_id: Any, status: LeaveStatus) -> Result[LeaveDecision]:
        """Nothing pending matched: tell a repeat apart from a conflict or a bad id."""
        current = await (
            self._gateway.table(LEAVE_REQUESTS_TABLE)
            .select("*")
            .eq("id", request_id)
            .single()
            .execute()
        )
        if isinstance(current, Err):
            if current.is_not_found:
                return Err(ErrorKind.NOT_FOUND, f"Leave request {request_id} not found.", current.code)
            return current

        record = LeaveRequestRecord.model_validate(current.value)
        if record.status is status:
            logger.info(f"Leave request {request_id} already {status}; nothing to do")
            return Ok(LeaveDecision(request=record, changed=False))

        logger.warning(
            f"Leave request {request_id} is already {record.status}; refusing to mark it {status}"
        )
        return Err(ErrorKind.CONFLICT, f"Leave request {request_id} has already been {record.status}.")

    async def _apply_to_balance(self, record: LeaveRequestRecord) -> Result[Optional[LeaveBalance]]:
        days = record.day_count
        found = await (
            self._gateway.table(BALANCES_TABLE)
            .select("*")
            .eq("employeeId", record.employee_id)
            .eq("leaveType", record.leave_type)
            .single()
            .execute()
        )

        if isinstance(found, Ok):
            balance = apply_taken_days(LeaveBalance.model_validate(found.value), days)
            saved = await (
                self._gateway.table(BALANCES_TABLE)
                .update({"takenDays": balance.taken_days, "remainingDays": balance.remaining_days})
                .eq("id", balance.id)
                .execute()
            )
            if isinstance(saved, Err):
                logger.error(f"Failed to update leave balance {balance.id}: {saved.message}")
                return saved
            rows = saved.value or []
            return Ok(LeaveBalance.model_validate(rows[0]) if rows else balance)

        if not found.is_not_found:
            return found

        if not self._settings.auto_create_missing_balance:
            logger.warning(
                f"No existing balance for employee {record.employee_id} leave type "
                f"{record.leave_type}. Consider adding initial balances."
            )
            return Ok(None)

        balance = apply_taken_days(
            LeaveBalance(employee_id=record.employee_id, leave_type=record.leave_type),
            days,
        )
        created = await self._gateway.table(BALANCES_TABLE).insert(balance.to_row()).execute()
        if isinstance(created, Err):
            logger.error(
                f"Failed to create leave balance for employee {record.employee_id}: {created.message}"
            )
            return created

        logger.info(
            f"Created {record.leave_type} balance for employee {record.employee_id} "
            f"(accrued 0, taken {balance.taken_days})"
        )
        rows = created.value or []
        return Ok(LeaveBalance.model_validate(rows[0]) if rows else balance)
