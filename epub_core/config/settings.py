"""
Configuration Settings
======================

Configuration dataclasses for resource handling and transform stages.
"""

from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, Union
import json
import logging

import yaml

from epub_core.errors import ConfigurationError

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


@dataclass
class ResourceConfig:
    """Resource decoding configuration."""

    default_encoding: str = "UTF-8"
    encoding_prefix_size: int = 4096  # Bytes inspected for an encoding declaration
    title_scan_chunk_size: int = 8192


@dataclass
class TransformConfig:
    """XSLT transform configuration."""

    xslt_path: str = ""
    serialize_transforms: bool = True
    allow_network: bool = False
    pretty_print: bool = False


@dataclass
class PipelineConfig:
    """
    Complete configuration.

    Example:
        config = PipelineConfig()
        config.transform.xslt_path = "xslt/cleanup.xsl"
        config.resource.default_encoding = "ISO-8859-1"
        save_config(config, Path("config.yaml"))
    """

    resource: ResourceConfig = field(default_factory=ResourceConfig)
    transform: TransformConfig = field(default_factory=TransformConfig)

    log_level: str = "INFO"

    # Custom extensions
    custom: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'resource': asdict(self.resource),
            'transform': asdict(self.transform),
            'log_level': self.log_level,
            'custom': self.custom,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'PipelineConfig':
        """
        Create from dictionary.

        Raises:
            ConfigurationError: If a section contains unknown keys
        """
        config = cls()
        try:
            if 'resource' in data:
                config.resource = ResourceConfig(**data['resource'])
            if 'transform' in data:
                config.transform = TransformConfig(**data['transform'])
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration section: {e}") from e

        if 'log_level' in data:
            config.log_level = data['log_level']
        if 'custom' in data:
            config.custom = data['custom']

        return config


def load_config(config_path: Path) -> PipelineConfig:
    """
    Load configuration from file.

    Supports JSON and YAML formats based on file extension.

    Args:
        config_path: Path to config file

    Returns:
        PipelineConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If file format is not supported
        ConfigurationError: If the file content is not a valid configuration
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    suffix = config_path.suffix.lower()

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            if suffix in ['.yaml', '.yml']:
                data = yaml.safe_load(f)
            elif suffix == '.json':
                data = json.load(f)
            else:
                raise ValueError(f"Unsupported config format: {suffix}")
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot parse {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")

    logger.info(f"Loaded configuration from {config_path}")
    return PipelineConfig.from_dict(data)


def save_config(config: PipelineConfig, config_path: Path) -> None:
    """
    Save configuration to file.

    Supports JSON and YAML formats based on file extension.

    Raises:
        ValueError: If file format is not supported
    """
    suffix = config_path.suffix.lower()
    if suffix not in ['.yaml', '.yml', '.json']:
        raise ValueError(f"Unsupported config format: {suffix}")

    data = config.to_dict()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, 'w', encoding='utf-8') as f:
        if suffix == '.json':
            json.dump(data, f, indent=2)
        else:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    logger.info(f"Saved configuration to {config_path}")


def get_default_config() -> PipelineConfig:
    """Get default configuration."""
    return PipelineConfig()


def configure_logging(level: Union[str, PipelineConfig] = "INFO") -> None:
    """
    Set up root logging with the standard format.

    Args:
        level: Level name, or a PipelineConfig whose ``log_level`` is used
    """
    if isinstance(level, PipelineConfig):
        level = level.log_level
    numeric_level = getattr(logging, str(level).upper(), logging.INFO)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    logging.basicConfig(
        level=numeric_level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )
    logging.getLogger().setLevel(numeric_level)
