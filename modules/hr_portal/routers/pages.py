"""
HR Portal Page Router.

Server-rendered dashboards and the form posts they submit. Every mutation
redirects (303) back to its dashboard, which re-fetches everything.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, Response
from pydantic import ValidationError

from core.backend import BackendService, Err
from core.dependencies import SessionDep, TemplatesDep, UserBackendDep
from core.session import (
    EMPLOYEE_DASHBOARD_PATH,
    HR_ADMIN_DASHBOARD_PATH,
    ROUTE_ROLES,
    SessionState,
    authorize,
)
from core.templating import guard_response, page_context, redirect
from modules.hr_portal.core.config import get_hr_portal_settings
from modules.hr_portal.models import LeaveType
from modules.hr_portal.schemas import LeaveRequestCreate
from modules.hr_portal.services import (
    EMPLOYEE_NOT_FOUND_MESSAGE,
    INVALID_DATES_MESSAGE,
    LEAVE_SUBMITTED_MESSAGE,
    DashboardService,
    LeaveApprovalService,
    LeaveRequestService,
)
from modules.hr_portal.services.approval import UPDATE_FAILED_MESSAGE

logger = logging.getLogger(__name__)

router = APIRouter(tags=["HR Portal Pages"])

INVALID_LEAVE_TYPE_MESSAGE = "Please select a valid leave type."


def _flash(request: Request, message: str, is_error: bool = False) -> None:
    request.app.state.session_store.flash(request.state.session_key, message, is_error)


def _form_error_message(error: ValidationError) -> str:
    fields = {str(part) for item in error.errors() for part in item["loc"]}
    if fields & {"leave_type", "leaveType"}:
        return INVALID_LEAVE_TYPE_MESSAGE
    return INVALID_DATES_MESSAGE


# =============================================================================
# Dashboards
# =============================================================================

@router.get(EMPLOYEE_DASHBOARD_PATH, response_class=HTMLResponse)
async def employee_dashboard(
    request: Request,
    session: SessionDep,
    backend: UserBackendDep,
    templates: TemplatesDep,
) -> Response:
    decision = authorize(session, ROUTE_ROLES[EMPLOYEE_DASHBOARD_PATH])
    response = guard_response(request, decision, session)
    if response is not None:
        return response

    settings = get_hr_portal_settings()
    dashboard = await DashboardService(backend).load_employee_dashboard(session.identity)

    return templates.TemplateResponse(
        request,
        "employee_dashboard.html",
        page_context(
            request,
            session,
            title=settings.employee_dashboard_title,
            dashboard=dashboard,
            not_found_message=EMPLOYEE_NOT_FOUND_MESSAGE,
            leave_types=list(LeaveType),
            default_leave_type=settings.default_leave_type,
            show_form=request.query_params.get("apply") == "1",
        ),
    )


@router.get(HR_ADMIN_DASHBOARD_PATH, response_class=HTMLResponse)
async def hr_admin_dashboard(
    request: Request,
    session: SessionDep,
    backend: UserBackendDep,
    templates: TemplatesDep,
) -> Response:
    decision = authorize(session, ROUTE_ROLES[HR_ADMIN_DASHBOARD_PATH])
    response = guard_response(request, decision, session)
    if response is not None:
        return response

    settings = get_hr_portal_settings()
    dashboard = await DashboardService(backend).load_hr_admin_dashboard()

    return templates.TemplateResponse(
        request,
        "hr_admin_dashboard.html",
        page_context(
            request,
            session,
            title=settings.hr_admin_dashboard_title,
            dashboard=dashboard,
            chart=dashboard.turnover_chart.model_dump(by_alias=True),
        ),
    )


# =============================================================================
# Form posts
# =============================================================================

@router.post("/leave-requests")
async def submit_leave_request(
    request: Request,
    session: SessionDep,
    backend: UserBackendDep,
    leave_type: Annotated[str, Form(alias="leaveType")] = "",
    start_date: Annotated[str, Form(alias="startDate")] = "",
    end_date: Annotated[str, Form(alias="endDate")] = "",
    reason: Annotated[str, Form()] = "",
) -> Response:
    decision = authorize(session, ROUTE_ROLES[EMPLOYEE_DASHBOARD_PATH])
    response = guard_response(request, decision, session)
    if response is not None:
        return response

    try:
        form = LeaveRequestCreate(
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
        )
    except ValidationError as e:
        logger.info(f"Leave form rejected: {e.error_count()} validation error(s)")
        _flash(request, _form_error_message(e), is_error=True)
        return redirect(f"{EMPLOYEE_DASHBOARD_PATH}?apply=1")

    dashboards = DashboardService(backend)
    employee_id = await dashboards.get_employee_id(session.identity)
    if isinstance(employee_id, Err):
        message = EMPLOYEE_NOT_FOUND_MESSAGE if employee_id.is_not_found else employee_id.message
        _flash(request, message, is_error=True)
        return redirect(EMPLOYEE_DASHBOARD_PATH)

    result = await LeaveRequestService(backend).submit(
        employee_id.value,
        form.leave_type,
        form.start_date,
        form.end_date,
        form.reason,
        on_success=lambda record: _flash(request, LEAVE_SUBMITTED_MESSAGE),
    )
    if isinstance(result, Err):
        _flash(request, result.message, is_error=True)
        return redirect(f"{EMPLOYEE_DASHBOARD_PATH}?apply=1")

    return redirect(EMPLOYEE_DASHBOARD_PATH)


async def _decide(
    request: Request,
    session: SessionState,
    backend: BackendService,
    request_id: str,
    approve: bool,
) -> Response:
    decision = authorize(session, ROUTE_ROLES[HR_ADMIN_DASHBOARD_PATH])
    response = guard_response(request, decision, session)
    if response is not None:
        return response

    service = LeaveApprovalService(backend)
    result = await (service.approve(request_id) if approve else service.reject(request_id))

    if isinstance(result, Err):
        _flash(request, result.message or UPDATE_FAILED_MESSAGE, is_error=True)
    elif result.value.changed:
        _flash(request, f"Leave request {result.value.request.status}.")
    else:
        _flash(request, f"Leave request was already {result.value.request.status}.")

    return redirect(HR_ADMIN_DASHBOARD_PATH)


@router.post("/leave-requests/{request_id}/approve")
async def approve_leave_request(
    request: Request,
    request_id: str,
    session: SessionDep,
    backend: UserBackendDep,
) -> Response:
    return await _decide(request, session, backend, request_id, approve=True)


@router.post("/leave-requests/{request_id}/reject")
async def reject_leave_request(
    request: Request,
    request_id: str,
    session: SessionDep,
    backend: UserBackendDep,
) -> Response:
    return await _decide(request, session, backend, request_id, approve=False)
