"""
Configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables at the moment an instance is created.  There is
deliberately no module-level instance: ``main.create_app`` builds one
at process start, validates it and passes it by parameter to every
component that needs it.

Two settings are required, the tabular store application identifier
(``APPSHEET_APP_ID``) and its access key (``APPSHEET_ACCESS_KEY``).
Their absence is reported by :meth:`Settings.validate` as
``ConfigurationMissing`` and stops the application from starting.
"""

import os
from dataclasses import dataclass, field
from typing import List

from .errors import ConfigurationMissing


def _env(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = field(default_factory=lambda: _env("PROJECT_NAME", "Store Records API"))
    api_version: str = field(default_factory=lambda: _env("API_VERSION", "1.0.0"))
    log_level: str = field(default_factory=lambda: _env("LOG_LEVEL", "INFO"))
    # Optional path of a log file in addition to the console handler.
    log_file: str = field(default_factory=lambda: _env("LOG_FILE"))

    # Identifier of the application that owns the tables and the access
    # key sent with every request.  Both are required.
    app_id: str = field(default_factory=lambda: _env("APPSHEET_APP_ID"))
    access_key: str = field(default_factory=lambda: _env("APPSHEET_ACCESS_KEY"))

    base_url: str = field(
        default_factory=lambda: _env("APPSHEET_BASE_URL", "https://api.appsheet.com/api/v2")
    )
    # Locale and timezone are sent as ``Properties`` on Add and Edit so
    # that dates and numbers are interpreted the way the form entered them.
    locale: str = field(default_factory=lambda: _env("APPSHEET_LOCALE", "ja-JP"))
    timezone: str = field(default_factory=lambda: _env("APPSHEET_TIMEZONE"))
    request_timeout: float = field(
        default_factory=lambda: float(_env("RECORD_SERVICE_TIMEOUT", "30"))
    )

    # Static bearer token guarding the HTTP routes.  Empty disables the guard.
    api_token: str = field(default_factory=lambda: _env("API_TOKEN"))

    def missing_required(self) -> List[str]:
        """Return the environment variable names of unset required settings."""
        missing = []
        if not self.app_id:
            missing.append("APPSHEET_APP_ID")
        if not self.access_key:
            missing.append("APPSHEET_ACCESS_KEY")
        return missing

    def validate(self) -> "Settings":
        """Raise ``ConfigurationMissing`` if a required setting is absent."""
        missing = self.missing_required()
        if missing:
            raise ConfigurationMissing(missing)
        return self
