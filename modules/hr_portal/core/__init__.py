"""HR Portal module configuration."""

from modules.hr_portal.core.config import HrPortalSettings, get_hr_portal_settings

__all__ = ["HrPortalSettings", "get_hr_portal_settings"]
