#!/usr/bin/env python3

"""
Configuration management for the gene expression pipeline.

Centralized configuration with support for file-based configuration
and environment variable overrides.
"""

import os
import json
import logging
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any

import yaml

from .exceptions import ConfigurationError


def _parse_bool(value: str) -> bool:
    return value.lower() in ('true', '1', 'yes')


@dataclass
class PipelineConfig:
    """Centralized configuration for the gene expression pipeline."""

    # Performance settings
    memory_limit_mb: int = 4096
    batch_size: int = 256  # splice variants between memory checks
    enable_memory_monitoring: bool = True

    # Reference data
    codon_table_path: Optional[str] = None

    # Processing options
    deduplicate_per_promoter: bool = False
    strict_alphabet: bool = False

    # Output settings
    mass_unit: str = "u"
    charge_unit: str = "e"
    include_headers: bool = False
    write_tsv: bool = True
    generate_reports: bool = True

    # Advanced settings
    parallel_workers: int = 1
    debug_mode: bool = False

    @classmethod
    def from_file(cls, config_path: str) -> 'PipelineConfig':
        """Load configuration from file (JSON or YAML)."""
        if not os.path.exists(config_path):
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, 'r') as f:
                if config_path.lower().endswith(('.yaml', '.yml')):
                    config_data = yaml.safe_load(f)
                else:
                    config_data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid configuration file format: {e}")
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML configuration file format: {e}")
        except OSError as e:
            raise ConfigurationError(f"Error loading configuration: {e}")

        if not isinstance(config_data, dict):
            raise ConfigurationError(f"Configuration file must contain a mapping: {config_path}")

        return cls.from_dict(config_data)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'PipelineConfig':
        """Create configuration from dictionary."""
        # Filter out unknown keys
        known_keys = set(cls.__dataclass_fields__.keys())
        filtered_dict = {k: v for k, v in config_dict.items() if k in known_keys}

        try:
            return cls(**filtered_dict)
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration parameters: {e}")

    @classmethod
    def from_env(cls) -> 'PipelineConfig':
        """Load configuration from environment variables."""
        config = cls()

        env_mappings = {
            'PIPELINE_MEMORY_LIMIT_MB': ('memory_limit_mb', int),
            'PIPELINE_BATCH_SIZE': ('batch_size', int),
            'PIPELINE_CODON_TABLE': ('codon_table_path', str),
            'PIPELINE_PARALLEL_WORKERS': ('parallel_workers', int),
            'PIPELINE_DEDUPLICATE_PER_PROMOTER': ('deduplicate_per_promoter', _parse_bool),
            'PIPELINE_STRICT_ALPHABET': ('strict_alphabet', _parse_bool),
            'PIPELINE_DEBUG_MODE': ('debug_mode', _parse_bool),
        }

        for env_var, (field_name, converter) in env_mappings.items():
            env_value = os.getenv(env_var)
            if env_value:
                try:
                    setattr(config, field_name, converter(env_value))
                except (ValueError, TypeError) as e:
                    raise ConfigurationError(f"Invalid environment variable {env_var}: {e}")

        config.validate()
        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    def save_to_file(self, config_path: str) -> None:
        """Save configuration to file."""
        config_dict = self.to_dict()

        try:
            with open(config_path, 'w') as f:
                if config_path.lower().endswith(('.yaml', '.yml')):
                    yaml.safe_dump(config_dict, f, default_flow_style=False)
                else:
                    json.dump(config_dict, f, indent=2)
        except OSError as e:
            raise ConfigurationError(f"Error saving configuration: {e}")

    def validate(self) -> None:
        """Validate configuration parameters."""
        if self.memory_limit_mb < 100:
            raise ConfigurationError("memory_limit_mb must be >= 100")

        if self.batch_size < 1:
            raise ConfigurationError("batch_size must be >= 1")

        if self.parallel_workers < 1:
            raise ConfigurationError("parallel_workers must be >= 1")

        if not isinstance(self.mass_unit, str) or not isinstance(self.charge_unit, str):
            raise ConfigurationError("mass_unit and charge_unit must be strings")

    def __post_init__(self):
        """Validate configuration after initialization."""
        self.validate()


def load_config(config_path: Optional[str] = None,
                use_env: bool = True) -> PipelineConfig:
    """
    Load configuration with priority: file > environment > defaults.

    Args:
        config_path: Path to configuration file (optional)
        use_env: Whether to load environment variables

    Returns:
        PipelineConfig: Loaded configuration
    """
    config = PipelineConfig()

    if use_env:
        try:
            env_config = PipelineConfig.from_env()
            # Merge non-default values from environment
            for field_name in PipelineConfig.__dataclass_fields__:
                env_value = getattr(env_config, field_name)
                if env_value != getattr(config, field_name):
                    setattr(config, field_name, env_value)
        except ConfigurationError as e:
            # Environment config is optional
            logging.warning(f"Ignoring environment configuration: {e}")

    if config_path:
        file_config = PipelineConfig.from_file(config_path)
        for field_name in PipelineConfig.__dataclass_fields__:
            setattr(config, field_name, getattr(file_config, field_name))

    return config
