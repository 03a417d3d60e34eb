"""Configuration template substitution utilities."""

import os
import re
from pathlib import Path

import yaml
from loguru import logger
from pydantic_core import ValidationError

from src.book_service.runtime.config.config_data import ConfigData


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variable placeholders in text.

    Supports formats:
    - ${VAR_NAME} - required variable (raises error if missing)
    - ${VAR_NAME:-default} - optional with default value
    - ${VAR_NAME:?error_message} - required with custom error message
    """
    def replacer(match):
        var_expr = match.group(1)

        # ${VAR:-default}
        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name, default)

        # ${VAR:?message}
        elif ":?" in var_expr:
            var_name, error_msg = var_expr.split(":?", 1)
            value = os.getenv(var_name)
            if value is None:
                raise ValueError(f"Required environment variable {var_name}: {error_msg}")
            return value

        # ${VAR}
        else:
            value = os.getenv(var_expr)
            if value is None:
                raise ValueError(f"Required environment variable {var_expr} not set")
            return value

    pattern = r'\$\{([^}]+)\}'
    return re.sub(pattern, replacer, text)


def apply_environment_overrides(env_mode: str) -> list[str]:
    """Promote ``<ENV>_``-prefixed environment variables to their bare names.

    With ``APP_ENVIRONMENT=test``, ``TEST_DATABASE_URL`` becomes
    ``DATABASE_URL`` before the template is rendered. Returns the names that
    were set.
    """
    prefix = f"{env_mode.upper()}_"
    applied = []
    for var_name, var_value in list(os.environ.items()):
        if not var_name.startswith(prefix) or var_name == prefix:
            continue
        new_var_name = var_name[len(prefix):]
        os.environ[new_var_name] = var_value
        applied.append(new_var_name)
        logger.debug(f"Set environment variable {new_var_name} from {var_name}")
    return applied


def load_templated_yaml(file_path: Path) -> ConfigData:
    """
    Load a YAML file with environment variable substitution.

    Args:
        file_path: Path to the YAML file

    Returns:
        Parsed configuration with environment variables substituted

    Raises:
        ValueError: If required environment variables are missing or the
            file does not hold a valid configuration
        FileNotFoundError: If the YAML file doesn't exist
    """
    with open(file_path) as f:
        content = f.read()

    env_mode = os.getenv("APP_ENVIRONMENT", "development")
    logger.info(f"Loading configuration for environment: {env_mode}")
    applied = apply_environment_overrides(env_mode)
    if applied:
        logger.info(f"Applied environment-specific overrides: {sorted(applied)}")

    substituted_content = substitute_env_vars(content)

    try:
        loaded = yaml.safe_load(substituted_content)
        if not loaded:
            raise ValueError("Failed to parse YAML")
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e

    try:
        config_data = loaded.get("config", {}) or {}
        return ConfigData(**config_data)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e


def load_config(file_path: Path | None = None) -> ConfigData:
    """Load the application configuration, falling back to defaults.

    The path defaults to ``APP_CONFIG_FILE`` or ``config.yaml`` in the
    working directory.
    """
    if file_path is None:
        file_path = Path(os.getenv("APP_CONFIG_FILE", "config.yaml"))

    if not file_path.exists():
        logger.warning(f"Configuration file {file_path} not found; using defaults")
        return ConfigData()

    return load_templated_yaml(file_path)
