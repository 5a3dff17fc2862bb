"""
Configuration Management
========================

Configuration utilities for resource processing.
"""

from epub_core.config.settings import (
    PipelineConfig,
    ResourceConfig,
    TransformConfig,
    load_config,
    save_config,
    get_default_config,
    configure_logging,
)

__all__ = [
    "PipelineConfig",
    "ResourceConfig",
    "TransformConfig",
    "load_config",
    "save_config",
    "get_default_config",
    "configure_logging",
]
