"""
Module Registry.

Holds the feature modules loaded at startup, runs their lifecycle hooks and
mounts what they contribute (page routers, API routers, template dirs) on
the FastAPI application.
"""
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional, Type
import importlib
import logging

from core.interface import IAppModule
from core.app_context import AppContext

if TYPE_CHECKING:
    from fastapi import FastAPI

API_PREFIX = "/api"


class ModuleRegistry:
    """
    Registry for managing application modules.
    Allows dynamic registration and lookup of modules.
    """

    _instance: Optional["ModuleRegistry"] = None

    def __new__(cls) -> "ModuleRegistry":
        """Singleton pattern to ensure single registry instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self) -> None:
        if self._initialized:
            return

        self._modules: Dict[str, IAppModule] = {}
        self._logger = logging.getLogger(__name__)
        self._context: Optional[AppContext] = None
        self._initialized = True

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton (tests build a fresh registry per app)."""
        cls._instance = None

    def set_context(self, context: AppContext) -> None:
        """Set the application context for module initialization."""
        self._context = context

    def register(self, module: IAppModule) -> bool:
        """
        Register a module with the registry.

        Args:
            module: The module instance to register

        Returns:
            bool: True if registration successful, False otherwise
        """
        module_name = module.get_module_name()

        if module_name in self._modules:
            self._logger.warning(f"Module '{module_name}' already registered. Skipping.")
            return False

        self._modules[module_name] = module
        self._logger.info(f"Module '{module_name}' registered successfully.")

        if self._context:
            try:
                module.on_entry(self._context)
                self._context.log_event(f"Module '{module_name}' initialized", "SUCCESS")
            except Exception as e:
                self._logger.error(f"Failed to initialize module '{module_name}': {e}")
                self._context.log_event(f"Module '{module_name}' init failed: {e}", "ERROR")

        return True

    def register_class(self, module_class: Type[IAppModule]) -> bool:
        """Register a module by its class (instantiates automatically)."""
        try:
            module_instance = module_class()
        except Exception as e:
            self._logger.error(f"Failed to instantiate module class {module_class.__name__}: {e}")
            return False
        return self.register(module_instance)

    def unregister(self, module_name: str) -> bool:
        """
        Unregister a module from the registry.

        Returns:
            bool: True if unregistration successful, False otherwise
        """
        if module_name not in self._modules:
            self._logger.warning(f"Module '{module_name}' not found in registry.")
            return False

        module = self._modules[module_name]
        try:
            module.on_shutdown()
        except Exception as e:
            self._logger.error(f"Error during module '{module_name}' shutdown: {e}")

        del self._modules[module_name]
        self._logger.info(f"Module '{module_name}' unregistered.")
        return True

    def get_module(self, module_name: str) -> Optional[IAppModule]:
        return self._modules.get(module_name)

    def get_all_modules(self) -> List[IAppModule]:
        return list(self._modules.values())

    def get_module_names(self) -> List[str]:
        return list(self._modules.keys())

    def get_template_dirs(self) -> List[Path]:
        """Template directories contributed by registered modules."""
        dirs = []
        for module in self._modules.values():
            template_dir = module.get_template_dir()
            if template_dir is not None:
                dirs.append(template_dir)
        return dirs

    def mount_routers(self, app: "FastAPI", api_prefix: str = API_PREFIX) -> int:
        """
        Include every module's routers: pages at the site root, JSON under `api_prefix`.

        Must run before the catch-all fallback route is registered.

        Returns:
            int: Number of routers mounted
        """
        mounted = 0
        for name, module in self._modules.items():
            page_router = module.get_page_router()
            if page_router is not None:
                app.include_router(page_router)
                mounted += 1
                self._log(f"Registered page router for module: {name}")

            api_router = module.get_api_router()
            if api_router is not None:
                app.include_router(api_router, prefix=api_prefix)
                mounted += 1
                self._log(f"Registered API router for module: {name} at {api_prefix}")
        return mounted

    def _log(self, message: str) -> None:
        self._logger.info(message)
        if self._context:
            self._context.log_event(message, "LOADER")

    async def async_startup_all(self) -> None:
        """Run async startup hooks once the event loop is running."""
        for module_name, module in self._modules.items():
            try:
                await module.async_startup()
            except Exception as e:
                self._logger.error(f"Async startup failed for module '{module_name}': {e}")

    def shutdown_all(self) -> None:
        """Shutdown all registered modules."""
        for module_name in list(self._modules.keys()):
            self.unregister(module_name)
        self._logger.info("All modules shut down.")


class ModuleLoader:
    """
    Dynamic module loader for discovering and loading modules.
    """

    def __init__(self, registry: ModuleRegistry) -> None:
        self._registry = registry
        self._logger = logging.getLogger(__name__)

    def load_package(self, package_name: str) -> int:
        """
        Import a package and register every IAppModule it exports.

        Args:
            package_name: Dotted package name (e.g. "modules.hr_portal")

        Returns:
            int: Number of modules registered
        """
        module = importlib.import_module(package_name)
        loaded_count = 0
        for attr_name in dir(module):
            attr = getattr(module, attr_name)
            if (isinstance(attr, type) and
                    issubclass(attr, IAppModule) and
                    attr is not IAppModule):
                if self._registry.register_class(attr):
                    loaded_count += 1
                    self._logger.info(f"Loaded package module: {package_name}")
        return loaded_count

    def load_from_directory(self, modules_path: str) -> int:
        """
        Load package modules (modules/<name>/__init__.py) from a directory.

        Args:
            modules_path: Path to the modules directory

        Returns:
            int: Number of modules loaded
        """
        path = Path(modules_path)
        if not path.exists():
            self._logger.warning(f"Modules directory '{modules_path}' does not exist.")
            return 0

        loaded_count = 0
        for subdir in sorted(path.iterdir()):
            if not subdir.is_dir() or subdir.name.startswith("_"):
                continue
            if not (subdir / "__init__.py").exists():
                continue

            try:
                loaded_count += self.load_package(f"{path.name}.{subdir.name}")
            except Exception as e:
                self._logger.error(f"Error loading package module '{subdir.name}': {e}")

        return loaded_count
