import os
from pathlib import Path
from string import Template
from typing import Optional

import structlog
import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from plumly_summarizer.models.config import SummarizerSettings

logger = structlog.get_logger()


class ConfigValidationError(Exception):
    """Configuration validation failed"""

    pass


class ConfigManager:
    """Loads summarizer settings from YAML with ${VAR} substitution"""

    def __init__(self, config_path: Optional[str] = None, load_env: bool = True):
        self.config_path = Path(config_path) if config_path else None
        self.load_env = load_env
        self.env_loaded = False
        self._settings: Optional[SummarizerSettings] = None

    def load_settings(self) -> SummarizerSettings:
        """Load and validate settings.

        Without a config path, defaults are used. The API key falls back to
        ANTHROPIC_API_KEY when the file does not set one.
        """
        if self._settings:
            return self._settings

        # 1. Load environment
        if self.load_env and not self.env_loaded:
            load_dotenv()
            self.env_loaded = True

        config_data = self._read_config() if self.config_path else {}

        # 2. Validate with Pydantic
        try:
            settings = SummarizerSettings(**config_data)
        except ValidationError as e:
            raise ConfigValidationError(f"Invalid configuration: {e}")

        # 3. Environment fallback for the API key
        if not settings.llm.api_key and os.environ.get("ANTHROPIC_API_KEY"):
            llm = settings.llm.model_copy(
                update={"api_key": os.environ["ANTHROPIC_API_KEY"]}
            )
            settings = settings.model_copy(update={"llm": llm})

        self._settings = settings
        logger.info(
            "config_loaded",
            path=str(self.config_path) if self.config_path else None,
            model=settings.llm.model,
            max_retries=settings.retry.max_retries,
        )
        return settings

    def _read_config(self) -> dict:
        assert self.config_path is not None
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        try:
            raw_content = self.config_path.read_text()
        except OSError as e:
            raise ConfigValidationError(f"Failed to read config file: {e}")

        try:
            # safe_substitute leaves unknown ${VAR} references untouched
            substituted = Template(raw_content).safe_substitute(os.environ)
            config_data = yaml.safe_load(substituted)
        except (yaml.YAMLError, ValueError) as e:
            raise ConfigValidationError(
                f"Failed to parse YAML or substitute variables: {e}"
            )

        if config_data is None:
            return {}
        if not isinstance(config_data, dict):
            raise ConfigValidationError("Configuration root must be a mapping")
        return config_data
