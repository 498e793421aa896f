"""
Pytest Configuration and Framework Fixtures.

Provides common test fixtures for framework unit tests. Backend and
application fixtures live in the project-level conftest.py.
"""

from typing import Optional

import pytest

from core.backend import AuthSession, Identity


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture
def config_loader(backend_env):
    """Create a ConfigLoader instance with mock environment."""
    from core.app_context import ConfigLoader

    loader = ConfigLoader()
    loader.load()
    return loader


@pytest.fixture
def app_context(config_loader):
    """Create an AppContext instance with mock environment."""
    from core.app_context import AppContext

    return AppContext(config_loader)


# =============================================================================
# Session Fixtures
# =============================================================================


@pytest.fixture
def make_auth_session():
    """Factory for AuthSession values."""
    def _create(
        user_id: str = "user-1",
        email: str = "jane.doe@corp.com",
        expires_at: Optional[float] = None,
        access_token: str = "access-x",
        refresh_token: str = "refresh-x",
    ) -> AuthSession:
        return AuthSession(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=expires_at if expires_at is not None else 4_000_000_000.0,
            identity=Identity(id=user_id, email=email),
        )

    return _create


# =============================================================================
# Module Fixtures
# =============================================================================


class MockModule:
    """Mock module implementation for testing."""

    def __init__(self, name: str = "mock_module"):
        self._name = name
        self._initialized = False
        self._shutdown = False

    def get_module_name(self) -> str:
        return self._name

    def on_entry(self, context) -> None:
        self._initialized = True

    def get_api_router(self):
        return None

    def get_page_router(self):
        return None

    def get_template_dir(self):
        return None

    async def async_startup(self) -> None:
        pass

    def on_shutdown(self) -> None:
        self._shutdown = True


@pytest.fixture
def mock_module():
    """Create a mock module instance."""
    return MockModule()


@pytest.fixture
def mock_module_factory():
    """Factory for creating mock modules with custom names."""
    def _create(name: str):
        return MockModule(name)
    return _create


@pytest.fixture
def fresh_registry():
    """A new ModuleRegistry (the singleton is reset before and after)."""
    from core.registry import ModuleRegistry

    ModuleRegistry.reset()
    registry = ModuleRegistry()
    yield registry
    ModuleRegistry.reset()
