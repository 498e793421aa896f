"""
AppContext - Dependency Injection Container.
Holds the configuration and the process-wide runtime state.
"""
from typing import Any, Dict, Optional
from dataclasses import dataclass, field
from pathlib import Path
import os
import logging

from dotenv import load_dotenv


@dataclass
class ConfigLoader:
    """Configuration loader from environment variables."""

    _config: Dict[str, Any] = field(default_factory=dict)

    def load(self, env_path: Optional[str] = None) -> None:
        """Load configuration from .env file."""
        if env_path:
            load_dotenv(env_path)
        else:
            # Try to find .env in project root
            project_root = Path(__file__).parent.parent
            env_file = project_root / ".env"
            if env_file.exists():
                load_dotenv(env_file)

        self._config = {
            "server": {
                "host": os.getenv("SERVER_HOST", "127.0.0.1"),
                "port": int(os.getenv("SERVER_PORT", "8000")),
                "base_url": os.getenv("BASE_URL", "")
            },
            "app": {
                "debug": os.getenv("APP_DEBUG", "true").lower() == "true",
                "log_level": os.getenv("APP_LOG_LEVEL", "INFO")
            },
            "backend": {
                "url": os.getenv("SUPABASE_URL", ""),
                "anon_key": os.getenv("SUPABASE_ANON_KEY", ""),
                "timeout": float(os.getenv("SUPABASE_TIMEOUT", "30"))
            },
            "session": {
                "cookie_name": os.getenv("SESSION_COOKIE_NAME", "hr_session"),
                "cookie_secure": os.getenv("SESSION_COOKIE_SECURE", "false").lower() == "true"
            }
        }

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by dot notation key."""
        keys = key.split('.')
        value = self._config
        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def is_backend_configured(self) -> bool:
        """Check if the managed backend URL and anon key are set."""
        return bool(
            self.get("backend.url") and
            self.get("backend.anon_key")
        )

    def missing_backend_settings(self) -> list[str]:
        """Names of required backend variables that are not set."""
        missing = []
        if not self.get("backend.url"):
            missing.append("SUPABASE_URL")
        if not self.get("backend.anon_key"):
            missing.append("SUPABASE_ANON_KEY")
        return missing


class AppContext:
    """
    Application Context - Central Dependency Injection Container.
    """

    def __init__(self, config_loader: Optional[ConfigLoader] = None) -> None:
        self._logger = logging.getLogger(__name__)
        if config_loader is None:
            config_loader = ConfigLoader()
            config_loader.load()
        self._config_loader = config_loader

        # Event log for the status endpoint
        self._event_log: list[str] = []
        self._max_log_entries: int = 500

        # Runtime state
        self._server_running: bool = False
        self._server_port: int = self._config_loader.get("server.port", 8000)

        missing = self._config_loader.missing_backend_settings()
        if missing:
            # Startup continues; every backend call will report CONFIGURATION
            self._logger.error(
                f"Backend not configured: missing {', '.join(missing)}. "
                "Set them in .env to enable sign-in and data access."
            )

    @property
    def config(self) -> ConfigLoader:
        """Access the configuration loader."""
        return self._config_loader

    def log_event(self, message: str, level: str = "INFO") -> None:
        """Log an event to both logger and event log."""
        from datetime import datetime
        timestamp = datetime.now().strftime("%H:%M:%S")
        formatted = f"[{timestamp}] [{level}] {message}"

        self._event_log.append(formatted)
        if len(self._event_log) > self._max_log_entries:
            self._event_log = self._event_log[-self._max_log_entries:]

        self._logger.info(message)

    def get_event_log(self) -> list[str]:
        """Get the current event log."""
        return self._event_log.copy()

    def set_server_status(self, running: bool, port: int = 8000) -> None:
        """Update server status."""
        self._server_running = running
        self._server_port = port

    def get_server_status(self) -> tuple[bool, int]:
        """Get current server status."""
        return (self._server_running, self._server_port)
