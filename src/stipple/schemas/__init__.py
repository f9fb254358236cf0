"""Pydantic configuration schemas for the Stipple pipeline.

This module provides strictly typed configuration models for the dot
effect pipeline. All configuration validation, coercion, and
normalization happens at schema validation time via Pydantic.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
DotParameters : class
    Immutable dot transform parameter snapshot
DownloadOptions : class
    Immutable encode request options
ParamConfig : class
    Defaults (complete)
UserConfig : class
    User-facing configuration (forgiving, minimal)
CLIConfig : class
    Command-line operational overrides
"""

from stipple.schemas.resolve import resolve_config
from stipple.schemas.internal import InternalConfig, DotParameters, DownloadOptions
from stipple.schemas.param import ParamConfig
from stipple.schemas.user import UserConfig
from stipple.schemas.cli import CLIConfig

__all__ = [
    'resolve_config',
    'InternalConfig',
    'DotParameters',
    'DownloadOptions',
    'ParamConfig',
    'UserConfig',
    'CLIConfig',
]
