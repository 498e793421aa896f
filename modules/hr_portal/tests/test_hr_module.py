"""
Unit Tests for HrPortalModule.

Tests the IAppModule implementation: identity, routers and status.
"""

import pytest


@pytest.fixture
def module():
    from modules.hr_portal import create_module
    from modules.hr_portal.core.config import get_hr_portal_settings

    get_hr_portal_settings.cache_clear()
    yield create_module()
    get_hr_portal_settings.cache_clear()


class TestHrPortalModule:
    """Tests for HrPortalModule."""

    def test_is_app_module(self, module):
        from core.interface import IAppModule

        assert isinstance(module, IAppModule)
        assert module.get_module_name() == "hr_portal"

    def test_routers_before_entry(self, module):
        assert module.get_api_router() is None
        assert module.get_page_router() is None
        assert module.get_status()["status"] == "initializing"

    def test_on_entry_builds_routers(self, module, app_context):
        module.on_entry(app_context)

        api_paths = {route.path for route in module.get_api_router().routes}
        page_paths = {route.path for route in module.get_page_router().routes}

        assert "/hr/leave-requests/{request_id}/approve" in api_paths
        assert "/hr/employee-dashboard" in api_paths
        assert "/employee-dashboard" in page_paths
        assert "/leave-requests" in page_paths

    def test_template_dir(self, module):
        template_dir = module.get_template_dir()

        assert (template_dir / "employee_dashboard.html").is_file()
        assert (template_dir / "hr_admin_dashboard.html").is_file()

    def test_status_active(self, module, app_context):
        module.on_entry(app_context)

        status = module.get_status()

        assert status["status"] == "active"
        assert status["details"]["Backend"] == "Configured"
        assert status["details"]["Default Leave Type"] == "vacation"

    def test_status_warning_without_backend(self, module, monkeypatch):
        from core.app_context import AppContext, ConfigLoader

        monkeypatch.delenv("SUPABASE_URL", raising=False)
        monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)
        loader = ConfigLoader()
        loader.load()

        module.on_entry(AppContext(loader))

        assert module.get_status()["status"] == "warning"
        assert module.get_status()["details"]["Backend"] == "Not configured"

    def test_shutdown_clears_routers(self, module, app_context):
        module.on_entry(app_context)

        module.on_shutdown()

        assert module.get_api_router() is None
        assert module.get_page_router() is None
