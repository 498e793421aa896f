"""
HR Portal JSON API.

The dashboard and leave operations as JSON, mounted at /api/hr. Access is
enforced by the same route guard as the pages (401 anonymous, 403 wrong role).
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from core.backend import BackendService, Err, ErrorKind
from core.dependencies import SessionDep, UserBackendDep, require_roles
from core.session import Role
from modules.hr_portal.schemas import (
    EmployeeDashboard,
    ErrorResponse,
    HrAdminDashboard,
    LeaveDecisionResponse,
    LeaveRequestCreate,
    LeaveSubmitResponse,
)
from modules.hr_portal.services import (
    EMPLOYEE_NOT_FOUND_MESSAGE,
    LEAVE_SUBMITTED_MESSAGE,
    DashboardService,
    LeaveApprovalService,
    LeaveRequestService,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/hr", tags=["HR Portal"])

EmployeeAccess = Depends(require_roles(Role.EMPLOYEE, Role.HR_ADMIN))
HrAdminAccess = Depends(require_roles(Role.HR_ADMIN))

_STATUS_FOR_KIND = {
    ErrorKind.VALIDATION: status.HTTP_422_UNPROCESSABLE_CONTENT,
    ErrorKind.AUTH: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.QUERY: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.CONNECTION: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.CONFIGURATION: status.HTTP_503_SERVICE_UNAVAILABLE,
}

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    code: {"model": ErrorResponse} for code in (401, 403, 404, 409, 422, 502, 503)
}


def http_error(err: Err) -> HTTPException:
    """Map a gateway error onto an HTTP error with the provider's message."""
    return HTTPException(
        status_code=_STATUS_FOR_KIND.get(err.kind, status.HTTP_502_BAD_GATEWAY),
        detail={"error": err.kind.value, "message": err.message},
    )


# =============================================================================
# Session & dashboards
# =============================================================================

@router.get("/session")
async def get_session_info(session: SessionDep) -> dict[str, Any]:
    return session.to_dict()


@router.get(
    "/employee-dashboard",
    response_model=EmployeeDashboard,
    responses=_ERROR_RESPONSES,
    dependencies=[EmployeeAccess],
)
async def get_employee_dashboard(session: SessionDep, backend: UserBackendDep) -> EmployeeDashboard:
    dashboard = await DashboardService(backend).load_employee_dashboard(session.identity)
    if dashboard.error:
        raise http_error(Err(ErrorKind.QUERY, dashboard.error))
    if not dashboard.employee_found:
        raise http_error(Err(ErrorKind.NOT_FOUND, EMPLOYEE_NOT_FOUND_MESSAGE))
    return dashboard


@router.get(
    "/hr-admin-dashboard",
    response_model=HrAdminDashboard,
    responses=_ERROR_RESPONSES,
    dependencies=[HrAdminAccess],
)
async def get_hr_admin_dashboard(backend: UserBackendDep) -> HrAdminDashboard:
    dashboard = await DashboardService(backend).load_hr_admin_dashboard()
    if dashboard.error:
        raise http_error(Err(ErrorKind.QUERY, dashboard.error))
    return dashboard


# =============================================================================
# Leave requests
# =============================================================================

@router.post(
    "/leave-requests",
    response_model=LeaveSubmitResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_ERROR_RESPONSES,
    dependencies=[EmployeeAccess],
)
async def create_leave_request(
    payload: LeaveRequestCreate,
    session: SessionDep,
    backend: UserBackendDep,
) -> LeaveSubmitResponse:
    employee_id = await DashboardService(backend).get_employee_id(session.identity)
    if isinstance(employee_id, Err):
        if employee_id.is_not_found:
            raise http_error(Err(ErrorKind.NOT_FOUND, EMPLOYEE_NOT_FOUND_MESSAGE))
        raise http_error(employee_id)

    result = await LeaveRequestService(backend).submit(
        employee_id.value,
        payload.leave_type,
        payload.start_date,
        payload.end_date,
        payload.reason,
    )
    if isinstance(result, Err):
        raise http_error(result)

    return LeaveSubmitResponse(message=LEAVE_SUBMITTED_MESSAGE, request=result.value)


async def _decide(backend: BackendService, request_id: str, approve: bool) -> LeaveDecisionResponse:
    service = LeaveApprovalService(backend)
    result = await (service.approve(request_id) if approve else service.reject(request_id))
    if isinstance(result, Err):
        raise http_error(result)

    decision = result.value
    if decision.changed:
        message = f"Leave request {decision.request.status}."
    else:
        message = f"Leave request was already {decision.request.status}."
    return LeaveDecisionResponse(
        message=message,
        changed=decision.changed,
        request=decision.request,
        balance=decision.balance,
    )


@router.post(
    "/leave-requests/{request_id}/approve",
    response_model=LeaveDecisionResponse,
    responses=_ERROR_RESPONSES,
    dependencies=[HrAdminAccess],
)
async def approve_leave_request(request_id: str, backend: UserBackendDep) -> LeaveDecisionResponse:
    return await _decide(backend, request_id, approve=True)


@router.post(
    "/leave-requests/{request_id}/reject",
    response_model=LeaveDecisionResponse,
    responses=_ERROR_RESPONSES,
    dependencies=[HrAdminAccess],
)
async def reject_leave_request(request_id: str, backend: UserBackendDep) -> LeaveDecisionResponse:
    return await _decide(backend, request_id, approve=False)
