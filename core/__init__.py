"""Core module - Application kernel components."""
from core.app_context import AppContext, ConfigLoader
from core.interface import IAppModule
from core.logging_config import setup_logging
from core.registry import ModuleRegistry, ModuleLoader
from core.server import create_base_app, register_fallback_route, set_registry

# FastAPI Dependencies (for use with Annotated[..., Depends(...)])
from core.dependencies import (
    AuthControllerDep,
    BackendServiceDep,
    ConfigDep,
    HttpClientDep,
    SessionDep,
    SessionStoreDep,
    TemplatesDep,
    UserBackendDep,
    get_auth_controller,
    get_backend,
    get_config,
    get_session,
    require_roles,
)

__all__ = [
    "AppContext", "ConfigLoader", "IAppModule",
    "ModuleRegistry", "ModuleLoader",
    "create_base_app", "register_fallback_route", "set_registry",
    "setup_logging",
    # FastAPI Dependencies
    "AuthControllerDep", "BackendServiceDep", "ConfigDep", "HttpClientDep",
    "SessionDep", "SessionStoreDep", "TemplatesDep", "UserBackendDep",
    "get_auth_controller", "get_backend", "get_config", "get_session",
    "require_roles",
]
