"""ParamConfig: Complete defaults for the Stipple pipeline.

This module defines the complete default configuration. ALL pipeline
parameters must have defaults here. No runtime code should define fallback
values - this is the single source of truth for defaults.

The render and encoder defaults mirror the control surface of the dot effect
tool (block size 6, max radius 3, spacing 1, threshold 20 %, light
background, 1x speed, quality 15).

Runtime code NEVER reads from ParamConfig directly - it only receives InternalConfig.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator
from stipple.schemas.base import StippleBaseModel


# =============================================================================
# Nested Configuration Models
# =============================================================================

class RenderConfig(StippleBaseModel):
    """Dot transform parameters.

    UI slider ranges are block_size 4..40, max_radius 1..20, spacing 0..10
    and threshold_percent 0..100. Only the lower bounds are enforced since the
    numeric inputs accept larger values.
    """
    block_size: int = Field(6, ge=4, description="Edge length of a sampling block in pixels")
    max_radius: int = Field(3, ge=1, description="Maximum dot radius in pixels")
    spacing: int = Field(1, ge=0, description="Gap added between block origins")
    threshold_percent: int = Field(20, ge=0, le=100, description="Minimum average brightness (percent of 255)")
    dark_background: bool = False


class PreviewConfig(StippleBaseModel):
    """Preview container geometry and resampling."""
    container_width: int = Field(800, ge=0)
    container_height: int = Field(600, ge=0)
    max_canvas_size: int = Field(4096, ge=1)
    resample: Literal["nearest", "box", "bilinear", "bicubic", "lanczos"] = "bilinear"
    resize_debounce_ms: int = Field(100, ge=0)

    @field_validator("resample", mode="before")
    @classmethod
    def normalize_resample(cls, v):
        """Normalize filter names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v


class AnimationConfig(StippleBaseModel):
    """Animation playback settings."""
    tick_ms: int = Field(10, ge=1, description="Milliseconds per source delay tick")
    min_delay_ms: int = Field(100, ge=0, description="Floor applied to every frame delay")
    honor_disposal: bool = False
    capture_max_frames: Optional[int] = Field(None, ge=1)


class EncoderConfig(StippleBaseModel):
    """Animated GIF encoder settings."""
    speed_factor: float = Field(1.0, gt=0, description="Playback speed, UI range 1..5 step 0.5")
    quality: int = Field(15, description="Palette sampling stride, lower is better")
    workers: int = Field(2, ge=1)
    loop: int = Field(0, ge=0, description="0 loops forever")
    filename: str = "dot-effect.gif"

    @field_validator("speed_factor", mode="before")
    @classmethod
    def coerce_speed_factor_to_float(cls, v):
        """Allow int or float for speed_factor."""
        return float(v)


class InputConfig(StippleBaseModel):
    """Input file classification."""
    animated_media_types: list[str] = Field(default_factory=lambda: ["image/gif"])
    strict_media_types: bool = False

    @field_validator("animated_media_types", mode="before")
    @classmethod
    def normalize_media_types(cls, v):
        """Normalize media types to lowercase."""
        if isinstance(v, (list, tuple)):
            return [str(t).lower().strip() for t in v]
        return v


class OutputConfig(StippleBaseModel):
    """Output file configuration."""
    base_dir: str = "output"
    still_format: Literal["png", "jpeg", "webp"] = "png"


class LoggingConfig(StippleBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(StippleBaseModel):
    """Complete configuration with all defaults.

    This is the single source of truth for all pipeline parameters.
    Every tunable parameter MUST have a default here.

    Usage
    -----
    This config is NOT used directly by runtime code. It serves as the
    base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg, cli_cfg)

    Runtime code only sees InternalConfig.
    """

    render: RenderConfig = Field(default_factory=RenderConfig)
    preview: PreviewConfig = Field(default_factory=PreviewConfig)
    animation: AnimationConfig = Field(default_factory=AnimationConfig)
    encoder: EncoderConfig = Field(default_factory=EncoderConfig)
    input: InputConfig = Field(default_factory=InputConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
