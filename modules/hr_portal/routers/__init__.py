"""
HR Portal Routers.

`pages_router` serves the HTML dashboards and form posts at the site root;
`api_router` serves the same operations as JSON under /api/hr.
"""

from modules.hr_portal.routers.api import router as api_router
from modules.hr_portal.routers.pages import router as pages_router

__all__ = ["api_router", "pages_router"]
