"""
IAppModule - contract between the application shell and a feature module.

A module names itself, receives the AppContext once, and may contribute a
page router, an API router and a template directory.
"""
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from fastapi import APIRouter

    from core.app_context import AppContext


class IAppModule(ABC):
    """
    Abstract interface for pluggable application modules.
    All feature modules must implement this interface to be registered.
    """

    @abstractmethod
    def get_module_name(self) -> str:
        """
        Returns the unique identifier for this module.
        Used for registry lookup and log messages.

        Returns:
            str: The module's unique name (e.g., 'hr_portal')
        """
        pass

    @abstractmethod
    def on_entry(self, context: "AppContext") -> None:
        """
        Called when the module is first loaded/activated.
        Build routers and read settings here.

        Args:
            context: The application context containing shared services
        """
        pass

    def get_api_router(self) -> Optional["APIRouter"]:
        """JSON API router, mounted under /api. None if the module has no API."""
        return None

    def get_page_router(self) -> Optional["APIRouter"]:
        """HTML page router, mounted at the site root. None if the module has no pages."""
        return None

    def get_template_dir(self) -> Optional[Path]:
        """Directory of Jinja2 templates the module's pages render."""
        return None

    async def async_startup(self) -> None:
        """Called once the event loop is running (FastAPI lifespan startup)."""
        pass

    def on_shutdown(self) -> None:
        """
        Called when the module is being unloaded.
        Override for cleanup logic.
        """
        pass

    def get_status(self) -> dict:
        """
        Returns the current status of the module for monitoring.

        Returns:
            dict: Status info with structure:
                  {
                      "status": "active" | "warning" | "error" | "initializing",
                      "details": { "key": "value" }
                  }
        """
        return {
            "status": "active",
            "details": {}
        }
