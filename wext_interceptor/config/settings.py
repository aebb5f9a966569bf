"""
Configuration management for the webhook interceptor.

Settings are read from environment variables, after a local ``.env``
file (if any) has been loaded with python-dotenv.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from ..utils.exceptions import ConfigurationError

# Load environment variables from .env file
load_dotenv()


DEFAULT_REPOSITORY_HEADER = "Wext-Repository-Url"
DEFAULT_EVENT_HEADER = "Wext-Incoming-Event"
DEFAULT_ACTIONS_HEADER = "Wext-Incoming-Actions"

_TRUTHY = ("true", "1", "yes", "on")


@dataclass(frozen=True)
class FilterHeaderNames:
    """
    Names of the request headers that carry a trigger's declared filter.
    
    Passed explicitly to the filter parsing code so the matcher never
    reads module-level globals.
    """

    repository: str = DEFAULT_REPOSITORY_HEADER
    events: str = DEFAULT_EVENT_HEADER
    actions: str = DEFAULT_ACTIONS_HEADER


@dataclass
class Settings:
    """
    Interceptor settings loaded from environment variables.
    
    All settings have defaults; values are validated on instantiation.
    """

    # Logging Configuration
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_format: str = field(default_factory=lambda: os.getenv("LOG_FORMAT", "text"))
    log_file: Optional[str] = field(default_factory=lambda: os.getenv("LOG_FILE") or None)

    # Declared filter headers
    repository_header: str = field(default_factory=lambda: os.getenv("WEXT_REPOSITORY_HEADER", DEFAULT_REPOSITORY_HEADER))
    event_header: str = field(default_factory=lambda: os.getenv("WEXT_EVENT_HEADER", DEFAULT_EVENT_HEADER))
    actions_header: str = field(default_factory=lambda: os.getenv("WEXT_ACTIONS_HEADER", DEFAULT_ACTIONS_HEADER))

    # Whitespace around declared action entries is ignored unless disabled
    trim_action_entries: bool = field(default_factory=lambda: os.getenv("WEXT_TRIM_ACTIONS", "true").lower() in _TRUTHY)

    # HTTP adapter Configuration
    server_host: str = field(default_factory=lambda: os.getenv("SERVER_HOST", "0.0.0.0"))
    server_port: int = field(default_factory=lambda: int(os.getenv("SERVER_PORT", "8080")))
    trigger_name: str = field(default_factory=lambda: os.getenv("WEXT_TRIGGER_NAME", "default"))
    secret_name: str = field(default_factory=lambda: os.getenv("WEXT_SECRET_NAME", "webhook-secret"))
    secret_token: str = field(default_factory=lambda: os.getenv("WEXT_SECRET_TOKEN", ""))
    access_token: str = field(default_factory=lambda: os.getenv("WEXT_ACCESS_TOKEN", ""))

    def __post_init__(self):
        """Validate settings after initialization."""
        self.log_level = self.log_level.upper()
        self.log_format = self.log_format.lower()

        if self.log_level not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            raise ConfigurationError(
                "log_level must be one of: DEBUG, INFO, WARNING, ERROR, CRITICAL",
                config_key="log_level",
                config_value=self.log_level,
            )

        if self.log_format not in ["json", "text"]:
            raise ConfigurationError(
                "log_format must be one of: json, text",
                config_key="log_format",
                config_value=self.log_format,
            )

        if not 0 < self.server_port < 65536:
            raise ConfigurationError(
                "server_port must be between 1 and 65535",
                config_key="server_port",
                config_value=str(self.server_port),
            )

        for key in ("repository_header", "event_header", "actions_header"):
            if not getattr(self, key).strip():
                raise ConfigurationError(f"{key} cannot be empty", config_key=key)

    @property
    def filter_headers(self) -> FilterHeaderNames:
        """Header names used to read a declared filter from a request."""
        return FilterHeaderNames(
            repository=self.repository_header,
            events=self.event_header,
            actions=self.actions_header,
        )

    @classmethod
    def from_env(cls, **kwargs) -> "Settings":
        """Create Settings instance from environment variables with optional overrides."""
        env_vars = {}

        env_mapping = {
            "LOG_LEVEL": "log_level",
            "LOG_FORMAT": "log_format",
            "LOG_FILE": "log_file",
            "WEXT_REPOSITORY_HEADER": "repository_header",
            "WEXT_EVENT_HEADER": "event_header",
            "WEXT_ACTIONS_HEADER": "actions_header",
            "WEXT_TRIM_ACTIONS": "trim_action_entries",
            "SERVER_HOST": "server_host",
            "SERVER_PORT": "server_port",
            "WEXT_TRIGGER_NAME": "trigger_name",
            "WEXT_SECRET_NAME": "secret_name",
            "WEXT_SECRET_TOKEN": "secret_token",
            "WEXT_ACCESS_TOKEN": "access_token",
        }

        for env_var, field_name in env_mapping.items():
            if env_var in os.environ:
                env_vars[field_name] = os.environ[env_var]

        for key, value in env_vars.items():
            if key == "trim_action_entries":
                env_vars[key] = value.lower() in _TRUTHY
            elif key == "server_port":
                try:
                    env_vars[key] = int(value)
                except ValueError:
                    raise ConfigurationError(
                        "SERVER_PORT must be an integer",
                        config_key="server_port",
                        config_value=value,
                    )

        env_vars.update(kwargs)

        return cls(**env_vars)
