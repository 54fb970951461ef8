"""Configuration management for fontcompare.

This module provides configuration management using Pydantic models.
Configuration is built once from CLI arguments and never changes afterwards.

Key classes:
- AxisFilter: Style, weight and stretch restrictions
- SelectionConfig: Include/exclude patterns and comparison mode
- CompileConfig: Typst compiler settings
- RenderConfig: Rasterization settings
- ProcessingConfig: Concurrency settings
- OutputConfig: Output and report paths
- LoggingConfig: Logging settings
- RunConfig: Main application settings
"""

from fontcompare.config.settings import (
    AxisFilter,
    CompileConfig,
    LoggingConfig,
    OutputConfig,
    ProcessingConfig,
    RenderConfig,
    RunConfig,
    SelectionConfig,
    compile_pattern,
    default_output_path,
)

__all__ = [
    "AxisFilter",
    "CompileConfig",
    "LoggingConfig",
    "OutputConfig",
    "ProcessingConfig",
    "RenderConfig",
    "RunConfig",
    "SelectionConfig",
    "compile_pattern",
    "default_output_path",
]
