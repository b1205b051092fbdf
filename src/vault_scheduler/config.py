"""
Configuration Management for Vault Scheduler
Pydantic Settings-based configuration with environment variable overrides.

Loading Priority (highest to lowest):
1. Environment Variables (via .env file and OS env)
2. YAML Configuration Files (configs/*.yaml)
3. Schema defaults

Environment Variable Mapping:
- Section fields: SYSTEM_VAULT_PATH maps to system.vault_path
- LOGGING_LEVEL maps to logging.level
- OBSIDIAN_VAULT_PATH is accepted as an alias for system.vault_path
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

# Load environment variables from .env file
load_dotenv()


# --- 1. Section Schemas ---


class SystemConfig(BaseModel):
    """Where the scheduler data lives."""
    vault_path: str = Field(default_factory=lambda: str(Path.home() / "Documents" / "Obsidian"))
    data_folder: str = "SchedulerData"
    debug_mode: bool = False
    version: str = "0.1.0"


class LoggingConfig(BaseModel):
    """Schema for loguru sinks."""
    level: str = "INFO"
    log_dir: str = "logs"
    file_enabled: bool = True
    rotation: str = "00:00"
    retention: str = "7 days"
    compression: str = "zip"


class DisplayConfig(BaseModel):
    """Terminal rendering options."""
    show_item_ids: bool = True
    max_items_per_cell: int = 3


# --- 2. Main Configuration Class ---


class SchedulerConfig(BaseSettings):
    """
    Top-level configuration object.
    YAML is loaded first, then ENV variables override individual values.
    """
    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    system: SystemConfig = Field(default_factory=SystemConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """
        Only explicit values. ENV is merged field-by-field in _merge_yaml_with_env,
        so a shell variable such as DISPLAY is never read as a whole section.
        """
        return (init_settings,)

    @property
    def data_dir(self) -> Path:
        return Path(self.system.vault_path).expanduser() / self.system.data_folder


# --- 3. Configuration Loader with YAML + ENV Merging ---

SECTIONS = ("system", "logging", "display")

# Env keys that do not follow the SECTION_FIELD convention
SPECIAL_CASES = {
    "OBSIDIAN_VAULT_PATH": ("system", "vault_path"),
    "SCHEDULER_VAULT_PATH": ("system", "vault_path"),
    "SCHEDULER_DEBUG": ("system", "debug_mode"),
}


def _load_yaml_config(yaml_path: Path) -> Dict[str, Any]:
    """Load and return YAML configuration as dictionary."""
    if not yaml_path.exists():
        logger.warning(f"Config file not found: {yaml_path}")
        return {}

    try:
        with open(yaml_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to load {yaml_path}: {e}")
        return {}

    if not isinstance(data, dict):
        logger.error(f"Ignoring {yaml_path}: top level must be a mapping")
        return {}
    return data


def _convert_env_value(value: str) -> Any:
    """Convert string environment value to appropriate Python type."""
    if value.lower() in ("true", "yes"):
        return True
    if value.lower() in ("false", "no"):
        return False

    try:
        return int(value)
    except ValueError:
        pass

    # Remove surrounding quotes if present
    if (value.startswith('"') and value.endswith('"')) or \
       (value.startswith("'") and value.endswith("'")):
        return value[1:-1]

    return value


def _deep_merge(base: Dict[str, Any], update: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge dictionary 'update' into 'base'."""
    result = base.copy()

    for key, value in update.items():
        if isinstance(value, dict) and key in result and isinstance(result[key], dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def _merge_yaml_with_env(yaml_data: Dict[str, Any], environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """
    Apply environment overrides on top of the YAML data.

    Supported formats:
    - SYSTEM_VAULT_PATH -> system.vault_path
    - LOGGING_LEVEL -> logging.level
    - DISPLAY_SHOW_ITEM_IDS -> display.show_item_ids
    - OBSIDIAN_VAULT_PATH -> system.vault_path (special case)
    """
    env_vars = {k: v for k, v in (environ if environ is not None else os.environ).items() if k.isupper()}
    result = {key: dict(value) if isinstance(value, dict) else value for key, value in yaml_data.items()}

    for env_key, (section, field) in SPECIAL_CASES.items():
        if env_key in env_vars:
            result.setdefault(section, {})[field] = _convert_env_value(env_vars[env_key])
            logger.debug(f"ENV override (special): {env_key} -> {section}.{field}")

    for env_key, env_value in env_vars.items():
        if env_key in SPECIAL_CASES:
            continue

        section, _, field = env_key.lower().partition("_")
        if section not in SECTIONS or not field:
            continue

        schema = SchedulerConfig.model_fields[section].annotation
        if field not in schema.model_fields:
            continue

        result.setdefault(section, {})[field] = _convert_env_value(env_value)
        logger.debug(f"ENV override: {env_key} -> {section}.{field}")

    return result


def load_config(config_dir: Optional[Path | str] = None) -> SchedulerConfig:
    """
    Load configuration from YAML files and merge with environment variables.

    Args:
        config_dir: Optional path to configuration directory. Defaults to 'configs/'.

    Returns:
        SchedulerConfig: Loaded configuration object.
    """
    if config_dir is None:
        candidates = [
            Path.cwd() / "configs",
            Path(__file__).parent.parent.parent / "configs",
        ]
        config_dir = next((p for p in candidates if p.exists()), None)

    master_data: Dict[str, Any] = {}

    if not config_dir or not Path(config_dir).exists():
        logger.warning("Config directory 'configs/' not found. Using defaults.")
    else:
        config_dir = Path(config_dir)
        logger.info(f"Loading configuration from: {config_dir}")

        yaml_files = sorted(list(config_dir.glob("*.yaml")) + list(config_dir.glob("*.yml")))
        if not yaml_files:
            logger.warning(f"No YAML files found in {config_dir}. Using defaults.")

        for file_path in yaml_files:
            file_data = _load_yaml_config(file_path)
            if not file_data:
                continue
            logger.debug(f"Loaded {file_path.name} -> Keys: {list(file_data.keys())}")
            master_data = _deep_merge(master_data, file_data)

    merged_data = _merge_yaml_with_env(master_data)

    try:
        return SchedulerConfig(**merged_data)
    except ValidationError as e:
        logger.error(f"Configuration Validation Error: {e}")
        return SchedulerConfig()


@lru_cache(maxsize=1)
def get_config() -> SchedulerConfig:
    """Get the process-wide configuration instance."""
    return load_config()
