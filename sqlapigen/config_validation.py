"""
Configuration loading and validation.

Values come from an optional YAML file and from the command line; CLI values
win. The merged dictionary is validated against ``ToolConfigSchema``.
"""

from argparse import Namespace
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Self, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from .constants import DefaultConfig
from .exceptions import ConfigurationError
from .generators.base import Feature, ProjectConfig

logger = logging.getLogger(__name__)

PROJECT_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_\-]*$")
BASE_PACKAGE_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")
RATE_LIMIT_RE = re.compile(r"^\s*\d+\s*/\s*(second|minute|hour|day)\s*$", re.IGNORECASE)
MAIL_FROM_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class ToolConfigSchema(BaseModel):
    """Pydantic schema defining the expected structure and types for the configuration."""

    schema_file: Optional[str] = Field(
        default=None,
        description="Path to the SQL schema file.",
    )
    output_dir: str = Field(
        DefaultConfig.OUTPUT_DIR,
        min_length=1,
        description="Directory for generated project output.",
    )
    project_name: str = Field(
        DefaultConfig.PROJECT_NAME,
        min_length=1,
        description="Name of the generated project.",
    )
    base_package: str = Field(
        DefaultConfig.BASE_PACKAGE,
        min_length=1,
        description="Dotted base package or namespace for generated code.",
    )
    language: str = Field(
        DefaultConfig.LANGUAGE,
        min_length=1,
        description="Target language (java, csharp, go, rust, typescript, php, python).",
    )
    framework: Optional[str] = Field(
        default=None,
        description="Target framework; the language default when omitted.",
    )
    features: List[str] = Field(
        default_factory=lambda: [Feature.parse(name).value for name in DefaultConfig.FEATURES],
        description="Optional capabilities to generate.",
    )
    include_tables: Optional[List[str]] = Field(
        default=None,
        description="Optional list of specific table names (strings) to include.",
    )
    exclude_tables: Optional[List[str]] = Field(
        default=None, description="Optional list of table names (strings) to exclude."
    )
    language_version: Optional[str] = Field(default=None, description="Target language version.")
    framework_version: Optional[str] = Field(default=None, description="Target framework version.")
    jwt_access_token_minutes: int = Field(
        DefaultConfig.JWT_ACCESS_TOKEN_MINUTES, gt=0, description="Lifetime of JWT access tokens."
    )
    jwt_refresh_token_days: int = Field(
        DefaultConfig.JWT_REFRESH_TOKEN_DAYS, gt=0, description="Lifetime of JWT refresh tokens."
    )
    cache_ttl_seconds: int = Field(
        DefaultConfig.CACHE_TTL_SECONDS, gt=0, description="How long cached entity lookups stay fresh."
    )
    password_reset_token_minutes: int = Field(
        DefaultConfig.PASSWORD_RESET_TOKEN_MINUTES, gt=0, description="Lifetime of password reset tokens."
    )
    mail_from: str = Field(DefaultConfig.MAIL_FROM, description="Sender address of generated mail.")
    rate_limit: str = Field(
        DefaultConfig.RATE_LIMIT,
        description="Requests allowed per client, as '<count>/<second|minute|hour|day>'.",
    )
    api_prefix: str = Field(DefaultConfig.API_PREFIX, description="Path prefix of every API route.")
    overwrite: bool = Field(default=False, description="Replace files that already exist.")
    options: Dict[str, Any] = Field(
        default_factory=dict,
        description="Generator-specific options (e.g. namespace, module_path).",
    )

    model_config = ConfigDict(
        extra="ignore",  # Allow and ignore extra fields from input dict
    )

    @field_validator("project_name")
    @classmethod
    def check_project_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Project name cannot be blank.")
        if not PROJECT_NAME_RE.match(v):
            raise ValueError(
                f"'{v}' must start with a letter and contain only letters, digits, '-' or '_'."
            )
        return v

    @field_validator("base_package")
    @classmethod
    def check_base_package(cls, v: str) -> str:
        if not BASE_PACKAGE_RE.match(v):
            raise ValueError(f"'{v}' is not a dotted package name (e.g. com.example.api).")
        return v

    @field_validator("language", "framework")
    @classmethod
    def normalize_target(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip().lower() or None

    @field_validator("features", mode="before")
    @classmethod
    def check_features(cls, v: Any) -> List[str]:
        """Accept a list or a comma-separated string; names are normalized to feature values."""
        if isinstance(v, str):
            v = [item for item in v.split(",") if item.strip()]
        if not isinstance(v, list):
            raise ValueError("features must be a list or a comma-separated string.")
        return [Feature.parse(str(item)).value for item in v]

    @field_validator("include_tables", "exclude_tables", mode="before")
    @classmethod
    def check_table_names_list(cls, v: Optional[List[Any]]) -> Optional[List[str]]:
        """Ensure items in table lists are non-empty strings."""
        if v is None:
            return None
        if isinstance(v, str):
            v = v.split(",")
        if not isinstance(v, list):
            raise ValueError("include_tables/exclude_tables must be a list.")
        processed_list = []
        for index, item in enumerate(v):
            if not isinstance(item, str):
                raise ValueError(
                    f"Item at index {index} must be a string, found: {type(item).__name__}"
                )
            stripped_item = item.strip()
            if not stripped_item:
                raise ValueError(
                    f"Item at index {index} cannot be empty or just whitespace."
                )
            processed_list.append(stripped_item)
        return processed_list

    @field_validator("rate_limit")
    @classmethod
    def check_rate_limit(cls, v: str) -> str:
        if not RATE_LIMIT_RE.match(v):
            raise ValueError(f"Rate limit '{v}' must look like '100/minute'.")
        return re.sub(r"\s+", "", v).lower()

    @field_validator("mail_from")
    @classmethod
    def check_mail_from(cls, v: str) -> str:
        v = v.strip()
        if not MAIL_FROM_RE.match(v):
            raise ValueError(f"'{v}' is not a mail address.")
        return v

    @field_validator("api_prefix")
    @classmethod
    def check_api_prefix(cls, v: str) -> str:
        v = v.strip()
        if v and not v.startswith("/"):
            v = "/" + v
        return v.rstrip("/")

    @model_validator(mode="after")
    def check_table_filters(self) -> Self:
        """Perform cross-field validation checks."""
        if self.include_tables and self.exclude_tables:
            excluded = {name.lower() for name in self.exclude_tables}
            overlap = sorted({name for name in self.include_tables if name.lower() in excluded})
            if overlap:
                raise ValueError(
                    f"Tables cannot be both included and excluded: {', '.join(overlap)}"
                )
        return self


def _describe_errors(error: ValidationError) -> List[str]:
    messages = []
    for item in error.errors():
        loc_parts = [str(loc_item) for loc_item in item.get("loc", ())]
        loc_str = " -> ".join(loc_parts) if loc_parts else "Model Level"
        messages.append(f"{loc_str}: {item.get('msg', 'Unknown validation error')}")
    return messages


def validate_and_parse_config(config_dict: Dict[str, Any], config_file: Optional[str] = None) -> ToolConfigSchema:
    """
    Validates a raw configuration dictionary against the ToolConfigSchema.

    Raises:
        ConfigurationError: With one ``location: message`` line per failed field.
    """
    try:
        validated_config = ToolConfigSchema.model_validate(config_dict)
        logger.debug("Configuration dictionary parsed and validated successfully against schema.")
        return validated_config
    except ValidationError as e:
        messages = _describe_errors(e)
        for message in messages:
            logger.debug(f"Configuration error: {message}")
        raise ConfigurationError(
            "Configuration validation failed: " + "; ".join(messages),
            config_file=config_file,
            context={"errors": messages},
        ) from e


def read_config_file(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Read a YAML configuration file into a dictionary.

    Raises:
        ConfigurationError: If the file is missing, unreadable or not a YAML mapping.
    """
    config_file = Path(config_path)
    if not config_file.is_file():
        raise ConfigurationError(f"Config file not found: {config_path}", config_file=str(config_path))
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Error parsing YAML file {config_path}: {e}", config_file=str(config_path)) from e
    except OSError as e:
        raise ConfigurationError(f"Error reading config file {config_path}: {e}", config_file=str(config_path)) from e

    if yaml_config is None:
        return {}
    if not isinstance(yaml_config, dict):
        raise ConfigurationError(
            f"Content in config file {config_path} is not a mapping.",
            config_file=str(config_path),
        )
    logger.debug(f"Loaded configuration from {config_path}")
    return yaml_config


def load_config(config_path: Optional[str], cli_args: Optional[Namespace] = None) -> ToolConfigSchema:
    """
    Loads configuration from YAML file, merges with CLI arguments,
    validates the result, and returns a validated Pydantic model instance.
    """
    raw_config: Dict[str, Any] = {}
    if config_path:
        raw_config.update(read_config_file(config_path))

    # Only arguments that were actually given override the file
    cli_dict = vars(cli_args) if cli_args is not None else {}
    overridden_keys = set()
    for key, value in cli_dict.items():
        if value is None or key not in ToolConfigSchema.model_fields:
            continue
        if value is False and key in raw_config:
            continue
        raw_config[key] = value
        overridden_keys.add(key)
    if overridden_keys:
        logger.debug(f"Overridden config keys from CLI arguments: {sorted(overridden_keys)}")

    validated_config = validate_and_parse_config(raw_config, config_file=config_path)
    validated_config.output_dir = str(Path(validated_config.output_dir).resolve())

    logger.debug("Configuration loaded and validated successfully.")
    return validated_config


def to_project_config(tool_config: ToolConfigSchema) -> ProjectConfig:
    """The generator-facing view of a validated tool configuration."""
    options = dict(tool_config.options)
    options.update({
        "api_prefix": tool_config.api_prefix,
        "rate_limit": tool_config.rate_limit,
        "jwt_access_token_minutes": tool_config.jwt_access_token_minutes,
        "jwt_refresh_token_days": tool_config.jwt_refresh_token_days,
        "cache_ttl_seconds": tool_config.cache_ttl_seconds,
        "password_reset_token_minutes": tool_config.password_reset_token_minutes,
        "mail_from": tool_config.mail_from,
    })
    return ProjectConfig(
        project_name=tool_config.project_name,
        base_package=tool_config.base_package,
        features={Feature.parse(name) for name in tool_config.features},
        language_version=tool_config.language_version,
        framework_version=tool_config.framework_version,
        options=options,
    )
