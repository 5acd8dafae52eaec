"""Application Settings and Configuration.

This module provides application-wide settings that combine configuration
from the configuration manager with application-specific defaults.

Security Impact:
    - Settings are loaded from the configuration manager
    - The token secret is only reachable through AuthConfig.token_secret
"""

import os
from typing import Optional

from patient_registry import __version__
from patient_registry.infrastructure.config_manager import AuthConfig, ConfigManager, ServerConfig

# Application metadata
APP_NAME = "Patient Registry"
APP_VERSION = __version__
APP_DESCRIPTION = "This service provides an API to manage patient data."


class Settings:
    """Application settings loaded from configuration manager and environment.

    Parameters:
        config_manager: Source of auth/server configuration; loaded from the
            environment on first use when omitted
    """

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        self._config_manager = config_manager
        self._auth_config: Optional[AuthConfig] = None
        self._server_config: Optional[ServerConfig] = None

        self.app_name = os.getenv("PR_APP_NAME", APP_NAME)
        self.log_level = os.getenv("PR_LOG_LEVEL", "INFO")
        self.json_logs = os.getenv("PR_JSON_LOGS", "false").lower() == "true"

    @property
    def config_manager(self) -> ConfigManager:
        if self._config_manager is None:
            self._config_manager = ConfigManager.from_environment()
        return self._config_manager

    @property
    def auth(self) -> AuthConfig:
        """Token and hashing configuration (loaded lazily)."""
        if self._auth_config is None:
            self._auth_config = self.config_manager.get_auth_config()
        return self._auth_config

    @property
    def server(self) -> ServerConfig:
        """HTTP server configuration (loaded lazily)."""
        if self._server_config is None:
            self._server_config = self.config_manager.get_server_config()
        return self._server_config
