"""
HR Portal Module Entry Point.

Implements IAppModule interface for integration with the admin system framework.
Serves the employee and HR/admin dashboards, leave submission and the
approval workflow.
"""

import logging
from pathlib import Path
from typing import Any, Optional, TYPE_CHECKING

from fastapi import APIRouter

from core.interface import IAppModule
from modules.hr_portal.core.config import get_hr_portal_settings
from modules.hr_portal.routers import api_router, pages_router

if TYPE_CHECKING:
    from core.app_context import AppContext

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


class HrPortalModule(IAppModule):
    """
    HR Portal Module.

    Features:
        - Employee dashboard: leave balances, pending requests, leave form
        - HR/Admin dashboard: turnover chart, pending requests to review
        - Leave approval / rejection with balance bookkeeping

    Routes:
        - Pages at the site root (/employee-dashboard, /hr-admin-dashboard, ...)
        - JSON API at /api/hr/*
    """

    def __init__(self) -> None:
        self._context: Optional["AppContext"] = None
        self._api_router: Optional[APIRouter] = None
        self._page_router: Optional[APIRouter] = None
        self._settings = get_hr_portal_settings()

    def get_module_name(self) -> str:
        """Return module identifier."""
        return "hr_portal"

    def on_entry(self, context: "AppContext") -> None:
        """
        Initialize the HR portal module.

        Called by the framework during application startup.

        Args:
            context: Application context from the main framework.
        """
        self._context = context
        logger.info("HR portal module initializing...")

        self._api_router = APIRouter()
        self._api_router.include_router(api_router)

        self._page_router = APIRouter()
        self._page_router.include_router(pages_router)

        if not context.config.is_backend_configured():
            logger.warning(
                "Backend not configured; HR portal pages will report errors until "
                f"{', '.join(context.config.missing_backend_settings())} are set"
            )

        context.log_event("HR portal module loaded", "HR_PORTAL")
        logger.info("HR portal module initialized")

    def get_api_router(self) -> Optional[APIRouter]:
        """
        Return the API router for this module.

        Returns:
            APIRouter with endpoints at /api/hr/*
        """
        return self._api_router

    def get_page_router(self) -> Optional[APIRouter]:
        """Return the HTML page router (mounted at the site root)."""
        return self._page_router

    def get_template_dir(self) -> Path:
        return TEMPLATES_DIR

    def get_status(self) -> dict[str, Any]:
        """Return current module status for monitoring."""
        status = "active"
        details = {
            "Default Leave Type": self._settings.default_leave_type.value,
            "Auto-create Balances": str(self._settings.auto_create_missing_balance),
        }

        if self._context is None:
            status = "initializing"
        elif not self._context.config.is_backend_configured():
            status = "warning"
            details["Backend"] = "Not configured"
        else:
            details["Backend"] = "Configured"

        return {"status": status, "details": details}

    def on_shutdown(self) -> None:
        """Cleanup when module is shutting down."""
        logger.info("HR portal module shutting down")
        self._api_router = None
        self._page_router = None


# Module factory function for dynamic loading
def create_module() -> HrPortalModule:
    """Factory function for module instantiation."""
    return HrPortalModule()
