"""
YAML settings loader.

Loads importer settings from YAML files with:
- Environment variable substitution
- Validation of enum and numeric values
- Default values
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml
import structlog

from task_importer.core.fetcher import EXPORT_URL_TEMPLATE, PUBLISH_URL_TEMPLATE
from task_importer.core.locator import DEFAULT_SHEETS_HOST
from task_importer.core.models import DedupeStrategy

logger = structlog.get_logger(__name__)


DEFAULT_SETTINGS_FILE = "settings.yml"


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variables in text.

    Supports formats:
    - ${VAR_NAME} - required, empty string (with a warning) if missing
    - ${VAR_NAME:-default} - optional with default

    Args:
        text: Text with env var placeholders

    Returns:
        Text with substituted values
    """
    def replace(match):
        var_expr = match.group(1)
        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name, default)
        else:
            value = os.getenv(var_expr)
            if value is None:
                logger.warning("env_var_not_set", var=var_expr)
                return ""
            return value

    return re.sub(r"\$\{([^}]+)\}", replace, text)


@dataclass
class Settings:
    """Importer settings."""

    sheets_host: str = DEFAULT_SHEETS_HOST
    export_url_template: str = EXPORT_URL_TEMPLATE
    publish_url_template: str = PUBLISH_URL_TEMPLATE

    fetch_timeout: float = 30.0
    max_retries: int = 3

    dedupe: DedupeStrategy = DedupeStrategy.ENABLED

    db_path: str = "tasks.sqlite3"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, data: dict) -> "Settings":
        """
        Create from dictionary (e.g., from YAML).

        Raises:
            ValueError: If a value has the wrong type or is out of range
        """
        defaults = cls()

        try:
            dedupe = DedupeStrategy(str(data.get("dedupe", defaults.dedupe.value)).lower())
        except ValueError:
            raise ValueError(
                f"Invalid dedupe setting: {data.get('dedupe')!r} (expected 'enabled' or 'disabled')"
            )

        fetch_timeout = float(data.get("fetch_timeout", defaults.fetch_timeout))
        if fetch_timeout <= 0:
            raise ValueError("fetch_timeout must be positive")

        max_retries = int(data.get("max_retries", defaults.max_retries))
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")

        return cls(
            sheets_host=data.get("sheets_host", defaults.sheets_host),
            export_url_template=data.get("export_url_template", defaults.export_url_template),
            publish_url_template=data.get("publish_url_template", defaults.publish_url_template),
            fetch_timeout=fetch_timeout,
            max_retries=max_retries,
            dedupe=dedupe,
            db_path=str(data.get("db_path", defaults.db_path)),
            log_level=str(data.get("log_level", defaults.log_level)).upper(),
        )


class ConfigLoader:
    """
    Settings loader.

    Loads YAML settings files and validates them.
    """

    def __init__(self, config_dir: Optional[str] = None):
        """
        Initialize config loader.

        Args:
            config_dir: Directory containing config files
                       (defaults to package config directory)
        """
        if config_dir:
            self.config_dir = Path(config_dir)
        else:
            self.config_dir = Path(__file__).parent

    def load_file(self, filename: str) -> dict:
        """
        Load YAML config file.

        Args:
            filename: Config file name (relative to config_dir)

        Returns:
            Parsed config dict
        """
        filepath = self.config_dir / filename

        if not filepath.exists():
            raise FileNotFoundError(f"Config file not found: {filepath}")

        logger.debug("loading_config", file=str(filepath))

        with open(filepath, "r", encoding="utf-8") as f:
            content = f.read()

        content = substitute_env_vars(content)
        config = yaml.safe_load(content)

        return config or {}

    def load_settings(self, filename: str = DEFAULT_SETTINGS_FILE) -> Settings:
        """
        Load settings from YAML.

        Args:
            filename: Settings file name

        Returns:
            Settings object
        """
        return Settings.from_dict(self.load_file(filename))


def load_settings(config_path: Optional[str] = None) -> Settings:
    """
    Convenience function to load settings.

    Args:
        config_path: Optional path to a settings YAML file

    Returns:
        Settings object
    """
    if config_path:
        loader = ConfigLoader(str(Path(config_path).parent))
        return loader.load_settings(Path(config_path).name)

    return ConfigLoader().load_settings()
