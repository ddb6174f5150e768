# ============================================================================
# PerfMark - Configuration Management
#
# Purpose: Load and manage configuration from YAML and env vars
# Inputs: YAML files, environment variables
# Outputs: Config model with all settings
# Dependencies: pyyaml, pydantic, pathlib
# Usage: config = Config.from_default() or Config.from_yaml("path.yaml")
#
# Changelog:
#   2026-03-02: Initial configuration system
#   2026-03-06: PerfConfig.record_failures
#   2026-03-10: PerfConfig.delivery (sync | buffered), ReportingConfig.history_limit
# ============================================================================

import os
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, Field, ValidationError

from PerfMark.errors import ConfigurationError
from PerfMark.logging_utils import DEFAULT_FORMAT


class PerfConfig(BaseModel):
    """Measurement behaviour."""

    enabled: bool = False  # Report informational measurements
    delivery: Literal["sync", "buffered"] = "sync"
    record_failures: bool = True  # Emit a FAILED measurement when wrapped work raises


class ReportingConfig(BaseModel):
    """How results are formatted and retained."""

    precision: int = Field(default=3, ge=0, le=9)
    result_label: str = "Result Time (ms)"
    history_limit: Optional[int] = Field(default=100, ge=1)  # None keeps every batch


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = DEFAULT_FORMAT


class Config(BaseModel):
    """Root configuration object."""

    perf: PerfConfig = Field(default_factory=PerfConfig)
    reporting: ReportingConfig = Field(default_factory=ReportingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: str) -> "Config":
        """
        Load configuration from a YAML file with environment variable overrides.

        Args:
            path: Path to YAML configuration file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ConfigurationError: If the YAML is invalid or fails validation
        """
        yaml_path = Path(path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        try:
            with open(yaml_path, "r") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}", details=str(e)) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Build a Config from a plain mapping, applying environment overrides."""
        data = cls._apply_env_overrides(cls._with_sections(data))
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError("Invalid configuration", details=str(e)) from e

    @classmethod
    def from_default(cls) -> "Config":
        """
        Load configuration from the default config file.

        Returns:
            Config instance
        """
        package_root = Path(__file__).parent.parent.parent
        default_config = package_root / "configs" / "default.yaml"

        if default_config.exists():
            return cls.from_yaml(str(default_config))
        return cls.from_dict({})

    @classmethod
    def _with_sections(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        """Make sure every section exists as a dict so env overrides can target it."""
        out = dict(data)
        for section in cls.model_fields:
            value = out.get(section)
            out[section] = dict(value) if isinstance(value, dict) else {}
        return out

    @classmethod
    def _apply_env_overrides(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply environment variable overrides to configuration.

        Environment variables follow the pattern:
        PERFMARK_<SECTION>_<KEY>=value

        Field names may contain underscores (e.g. record_failures), so the
        section is matched first and the remainder taken as the key.

        Examples:
            PERFMARK_PERF_ENABLED=1                  → data["perf"]["enabled"]
            PERFMARK_REPORTING_HISTORY_LIMIT=10      → data["reporting"]["history_limit"]

        Args:
            data: Configuration dictionary

        Returns:
            Updated configuration dictionary
        """
        prefix = "PERFMARK_"
        section_keys = sorted(data.keys(), key=len, reverse=True)

        for env_key, env_value in os.environ.items():
            if not env_key.startswith(prefix):
                continue

            remainder = env_key[len(prefix) :].lower()

            for section in section_keys:
                section_prefix = section + "_"
                if not remainder.startswith(section_prefix):
                    continue
                section_data = data.get(section)
                if isinstance(section_data, dict):
                    section_data[remainder[len(section_prefix) :]] = cls._parse_env_value(env_value)
                break

        return data

    @staticmethod
    def _parse_env_value(value: str) -> Any:
        """
        Parse environment variable value to appropriate type.

        Args:
            value: String value from environment

        Returns:
            Parsed value (str, int, float, bool or None)
        """
        if value.lower() in ("true", "yes", "1"):
            return True
        if value.lower() in ("false", "no", "0"):
            return False
        if value.lower() in ("none", "null"):
            return None

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value
