"""HR Portal module - leave requests, balances and HR approvals."""

from modules.hr_portal.hr_portal_module import HrPortalModule, create_module

__all__ = ["HrPortalModule", "create_module"]
