"""Configuration Manager for Secure Credential Handling.

This module loads the registry's configuration (token signing, password
hashing, HTTP server) from environment variables or a JSON file into typed
Pydantic models.

Security Impact:
    - The token signing secret is held as SecretStr and never logged
    - Configuration is validated before use (fail-fast)

Architecture:
    - Infrastructure layer, isolated from the domain
    - Type-safe configuration using Pydantic models
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, SecretStr, field_validator

logger = logging.getLogger(__name__)

# Defaults mirror a local development setup; override via environment in any real deployment
DEFAULT_TOKEN_SECRET = "change-me"
DEFAULT_ISSUER = "localhost"
DEFAULT_TOKEN_EXPIRATION_MINUTES = 10
DEFAULT_BCRYPT_ROUNDS = 12
DEFAULT_HOST = "localhost"
DEFAULT_PORT = 8080


class AuthConfig(BaseModel):
    """Token and password hashing configuration.

    Parameters:
        token_secret: HMAC key used to sign bearer tokens (secret)
        issuer: Value of the ``iss`` claim; tokens from another issuer are rejected
        token_expiration_minutes: Token lifetime
        bcrypt_rounds: bcrypt cost factor (log2 of iterations)
    """

    token_secret: SecretStr = Field(default=SecretStr(DEFAULT_TOKEN_SECRET), description="Token signing key (secret)")
    issuer: str = Field(default=DEFAULT_ISSUER, description="Token issuer")
    token_expiration_minutes: int = Field(default=DEFAULT_TOKEN_EXPIRATION_MINUTES, description="Token lifetime in minutes")
    bcrypt_rounds: int = Field(default=DEFAULT_BCRYPT_ROUNDS, description="bcrypt cost factor")

    @field_validator("token_secret")
    @classmethod
    def validate_token_secret(cls, v: SecretStr) -> SecretStr:
        """Reject an empty signing key."""
        if not v.get_secret_value().strip():
            raise ValueError("Token secret must not be empty")
        return v

    @field_validator("issuer")
    @classmethod
    def validate_issuer(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Token issuer must not be empty")
        return v.strip()

    @field_validator("token_expiration_minutes")
    @classmethod
    def validate_expiration(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"Token expiration must be positive. Got: {v}")
        return v

    @field_validator("bcrypt_rounds")
    @classmethod
    def validate_bcrypt_rounds(cls, v: int) -> int:
        """bcrypt accepts cost factors 4..31."""
        if not 4 <= v <= 31:
            raise ValueError(f"bcrypt rounds must be between 4 and 31. Got: {v}")
        return v


class ServerConfig(BaseModel):
    """HTTP server configuration.

    Parameters:
        host: Interface to bind
        port: TCP port to bind
        cors_origins: Origins allowed by the CORS middleware
        enable_hsts: Emit Strict-Transport-Security (only behind HTTPS)
    """

    host: str = Field(default=DEFAULT_HOST, description="Bind host")
    port: int = Field(default=DEFAULT_PORT, description="Bind port")
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    enable_hsts: bool = Field(default=False, description="Send HSTS header")

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not 0 < v < 65536:
            raise ValueError(f"Port must be between 1 and 65535. Got: {v}")
        return v

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Accept a comma separated string as well as a list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v


class ConfigManager:
    """Configuration loader for auth and server settings.

    Example Usage:
        ```python
        config = ConfigManager.from_environment()
        auth_config = config.get_auth_config()

        config = ConfigManager.from_file("registry.json")
        server_config = config.get_server_config()
        ```
    """

    def __init__(self, config_data: Dict[str, Any]):
        self._config_data = config_data
        self._auth_config: Optional[AuthConfig] = None
        self._server_config: Optional[ServerConfig] = None

    @classmethod
    def from_environment(cls) -> 'ConfigManager':
        """Load configuration from environment variables.

        Environment Variables:
            - PR_TOKEN_SECRET: Token signing key (secret)
            - PR_TOKEN_ISSUER: Token issuer
            - PR_TOKEN_EXPIRATION_MINUTES: Token lifetime
            - PR_BCRYPT_ROUNDS: bcrypt cost factor
            - PR_HOST / PR_PORT: HTTP bind address
            - PR_CORS_ORIGINS: Comma separated allowed origins
            - PR_ENABLE_HSTS: "true" to send HSTS

        A ``.env`` file in the working directory is loaded first if present.
        Unset variables fall back to the model defaults.
        """
        env_path = Path.cwd() / ".env"
        if env_path.exists():
            load_dotenv(env_path)
            logger.debug(f"Loaded environment variables from {env_path}")

        def env(name: str) -> Optional[str]:
            value = os.getenv(name)
            return value if value not in (None, "") else None

        auth = {
            "token_secret": env("PR_TOKEN_SECRET"),
            "issuer": env("PR_TOKEN_ISSUER"),
            "token_expiration_minutes": env("PR_TOKEN_EXPIRATION_MINUTES"),
            "bcrypt_rounds": env("PR_BCRYPT_ROUNDS"),
        }
        server = {
            "host": env("PR_HOST"),
            "port": env("PR_PORT"),
            "cors_origins": env("PR_CORS_ORIGINS"),
            "enable_hsts": env("PR_ENABLE_HSTS"),
        }

        return cls({
            "auth": {k: v for k, v in auth.items() if v is not None},
            "server": {k: v for k, v in server.items() if v is not None},
        })

    @classmethod
    def from_file(cls, config_path: str) -> 'ConfigManager':
        """Load configuration from a JSON file with "auth" and "server" sections.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file is not valid JSON
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        if config_file.stat().st_mode & 0o077 != 0:
            logger.warning(
                f"Configuration file has overly permissive permissions: {config_path}. "
                "Consider setting to 600 since it may hold the token secret."
            )

        try:
            with open(config_file, 'r') as f:
                config_data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file: {str(e)}")

        return cls(config_data)

    def get_auth_config(self) -> AuthConfig:
        if self._auth_config is None:
            self._auth_config = AuthConfig(**self._config_data.get("auth", {}))
            if self._auth_config.token_secret.get_secret_value() == DEFAULT_TOKEN_SECRET:
                logger.warning("Using the default token secret; set PR_TOKEN_SECRET outside development")
        return self._auth_config

    def get_server_config(self) -> ServerConfig:
        if self._server_config is None:
            self._server_config = ServerConfig(**self._config_data.get("server", {}))
        return self._server_config
