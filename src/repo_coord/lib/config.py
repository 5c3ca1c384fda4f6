"""
Configuration management for the coordination planner.

Handles loading and validation of configuration from environment variables,
configuration files, and default values.
"""

import os
import logging
from pathlib import Path
from typing import Dict, Any, Optional, List

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator


logger = logging.getLogger(__name__)


class PlannerConfig(BaseModel):
    """Configuration for the planning pipeline."""

    ecosystem_file: Optional[str] = Field(default=None, description="YAML ecosystem definition (built-in if unset)")
    default_output_format: str = Field(default="table", description="CLI output format")

    @field_validator("default_output_format")
    @classmethod
    def validate_output_format(cls, v: str) -> str:
        valid_formats = ["table", "json"]
        if v.lower() not in valid_formats:
            raise ValueError(f"Output format must be one of {valid_formats}")
        return v.lower()


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    log_level: str = Field(default="INFO", description="Logging level")
    log_dir: str = Field(default="./logs", description="Log directory")
    log_to_file: bool = Field(default=False, description="Also write logs under log_dir")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()


class APIConfig(BaseModel):
    """Configuration for API server."""

    host: str = Field(default="localhost", description="API server host")
    port: int = Field(default=8000, ge=1024, le=65535, description="API server port")
    debug: bool = Field(default=False, description="Enable debug mode")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], description="CORS allowed origins")


class Config(BaseModel):
    """Main configuration class combining all configuration sections."""

    planner: PlannerConfig = Field(default_factory=PlannerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    api: APIConfig = Field(default_factory=APIConfig)

    model_config = ConfigDict(extra="forbid")


def _env_flag(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


class ConfigManager:
    """
    Manager for loading and accessing configuration.

    Supports configuration from environment variables, YAML files,
    and provides defaults with validation.
    """

    def __init__(self, config_file: Optional[str] = None, env_file: Optional[str] = None):
        """
        Initialize configuration manager.

        Args:
            config_file: Path to YAML configuration file
            env_file: Path to .env file for environment variables
        """
        self.config_file = config_file
        self.env_file = env_file
        self._config: Optional[Config] = None

        # Load environment variables
        if env_file and Path(env_file).exists():
            load_dotenv(env_file)
        elif Path(".env").exists():
            load_dotenv(".env")

    def load_config(self) -> Config:
        """
        Load configuration from all sources.

        Returns:
            Validated configuration object
        """
        if self._config is not None:
            return self._config

        config_data = {}

        if self.config_file and Path(self.config_file).exists():
            config_data = self._load_yaml_config(self.config_file)

        # Environment overrides file values
        env_overrides = self._load_env_config()
        config_data = self._merge_config(config_data, env_overrides)

        self._config = Config(**config_data)

        logger.info("Configuration loaded successfully")
        return self._config

    def _load_yaml_config(self, config_file: str) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        try:
            with open(config_file, 'r') as f:
                config_data = yaml.safe_load(f)
            logger.info(f"Loaded configuration from {config_file}")
            return config_data or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config file {config_file}: {e}")
            return {}

    def _load_env_config(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        env_config = {}

        planner_config = {}
        if os.getenv("REPO_COORD_ECOSYSTEM_FILE"):
            planner_config["ecosystem_file"] = os.getenv("REPO_COORD_ECOSYSTEM_FILE")
        if os.getenv("REPO_COORD_OUTPUT_FORMAT"):
            planner_config["default_output_format"] = os.getenv("REPO_COORD_OUTPUT_FORMAT")

        if planner_config:
            env_config["planner"] = planner_config

        logging_config = {}
        if os.getenv("LOG_LEVEL"):
            logging_config["log_level"] = os.getenv("LOG_LEVEL")
        if os.getenv("LOG_DIR"):
            logging_config["log_dir"] = os.getenv("LOG_DIR")
        if os.getenv("LOG_TO_FILE"):
            logging_config["log_to_file"] = _env_flag(os.getenv("LOG_TO_FILE"))

        if logging_config:
            env_config["logging"] = logging_config

        api_config = {}
        if os.getenv("API_HOST"):
            api_config["host"] = os.getenv("API_HOST")
        if os.getenv("API_PORT"):
            try:
                api_config["port"] = int(os.getenv("API_PORT"))
            except ValueError:
                logger.warning("Invalid API_PORT, using default")
        if os.getenv("API_DEBUG"):
            api_config["debug"] = _env_flag(os.getenv("API_DEBUG"))

        if api_config:
            env_config["api"] = api_config

        return env_config

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge configuration dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value

        return result

    def get_config(self) -> Config:
        """Get the current configuration."""
        if self._config is None:
            return self.load_config()
        return self._config


# Global configuration manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager(
    config_file: Optional[str] = None,
    env_file: Optional[str] = None
) -> ConfigManager:
    """
    Get global configuration manager instance.

    A manager is rebuilt whenever explicit file paths are given.

    Args:
        config_file: Path to YAML configuration file
        env_file: Path to .env file

    Returns:
        ConfigManager instance
    """
    global _config_manager

    if _config_manager is None or config_file or env_file:
        _config_manager = ConfigManager(config_file, env_file)

    return _config_manager


def get_config() -> Config:
    """Get the current configuration."""
    return get_config_manager().get_config()


def setup_logging(config: Optional[Config] = None, console_level: Optional[int] = None) -> None:
    """
    Setup logging based on configuration.

    Args:
        config: Configuration to apply (the global one if omitted)
        console_level: Level for the console handler, defaulting to the configured level
    """
    if config is None:
        config = get_config()

    log_level = getattr(logging, config.logging.log_level, logging.INFO)

    detailed_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    simple_formatter = logging.Formatter(
        '%(levelname)s - %(name)s - %(message)s'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(min(log_level, console_level) if console_level is not None else log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level if console_level is not None else log_level)
    console_handler.setFormatter(simple_formatter)
    root_logger.addHandler(console_handler)

    if config.logging.log_to_file:
        log_dir = Path(config.logging.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_dir / "repo_coord.log")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(detailed_formatter)
        root_logger.addHandler(file_handler)

        error_handler = logging.FileHandler(log_dir / "errors.log")
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(detailed_formatter)
        root_logger.addHandler(error_handler)

    logger.debug("Logging setup completed")


# Example configuration template
CONFIG_TEMPLATE = """
# Cross-Repository Coordination Planner Configuration

planner:
  # ecosystem_file: "./ecosystem.yaml"  # Built-in Loqa ecosystem if unset
  default_output_format: "table"  # or "json"

logging:
  log_level: "INFO"
  log_dir: "./logs"
  log_to_file: false

api:
  host: "localhost"
  port: 8000
  debug: false
"""


def create_config_template(file_path: str) -> None:
    """Create a configuration template file."""
    with open(file_path, 'w') as f:
        f.write(CONFIG_TEMPLATE)
    logger.info(f"Configuration template created at {file_path}")
