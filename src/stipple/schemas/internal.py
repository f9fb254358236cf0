"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized, and contains NO optional fields that processing code depends on.

``DotParameters`` and ``DownloadOptions`` are the two runtime snapshots that
travel through the pipeline on their own: the orchestrator swaps its
``DotParameters`` reference on every control change and each animation tick
reads one snapshot, while ``DownloadOptions`` is built fresh for each encode
request.
"""

from typing import Literal, Optional
from pydantic import Field, ConfigDict
from stipple.schemas.base import StippleBaseModel


_FROZEN = ConfigDict(
    extra='forbid',
    validate_assignment=True,
    use_enum_values=True,
    str_strip_whitespace=True,
    frozen=True,
)


# =============================================================================
# Runtime snapshots
# =============================================================================

class DotParameters(StippleBaseModel):
    """Immutable dot transform parameters for one render."""
    block_size: int = Field(ge=4)
    max_radius: int = Field(ge=1)
    spacing: int = Field(ge=0)
    threshold_percent: int = Field(ge=0, le=100)
    dark_background: bool

    model_config = _FROZEN

    @property
    def step(self) -> int:
        """Distance between consecutive block origins."""
        return self.block_size + self.spacing


class DownloadOptions(StippleBaseModel):
    """Immutable options for one encode request."""
    speed_factor: float = Field(gt=0)
    quality: int

    model_config = _FROZEN

    @property
    def frame_delay_ms(self) -> float:
        """Uniform per-frame delay of the re-encoded animation."""
        return 100 / self.speed_factor


# =============================================================================
# Nested Configuration Models (Runtime)
# =============================================================================

class InternalPreviewConfig(StippleBaseModel):
    """Runtime preview configuration."""
    container_width: int
    container_height: int
    max_canvas_size: int
    resample: Literal["nearest", "box", "bilinear", "bicubic", "lanczos"]
    resize_debounce_ms: int


class InternalAnimationConfig(StippleBaseModel):
    """Runtime animation configuration."""
    tick_ms: int
    min_delay_ms: int
    honor_disposal: bool
    capture_max_frames: Optional[int]


class InternalEncoderConfig(StippleBaseModel):
    """Runtime encoder configuration."""
    speed_factor: float = Field(gt=0)
    quality: int
    workers: int = Field(ge=1)
    loop: int
    filename: str


class InternalInputConfig(StippleBaseModel):
    """Runtime input classification configuration."""
    animated_media_types: list[str]
    strict_media_types: bool


class InternalOutputConfig(StippleBaseModel):
    """Runtime output configuration."""
    base_dir: str
    still_format: Literal["png", "jpeg", "webp"]


class InternalLoggingConfig(StippleBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(StippleBaseModel):
    """Authoritative runtime configuration.

    This is the ONLY configuration schema that processing code sees.
    It is fully validated, immutable, and contains explicit values for
    all parameters.

    Usage
    -----
    Runtime modules receive InternalConfig and access fields directly:

        def __init__(self, config: InternalConfig):
            self.max_canvas_size = config.preview.max_canvas_size  # NOT .get()
            self.min_delay_ms = config.animation.min_delay_ms

    Rules
    -----
    - NO .get() calls
    - NO fallback defaults
    - NO validation

    All of that happens during config resolution, not in runtime code.
    """

    render: DotParameters
    preview: InternalPreviewConfig
    animation: InternalAnimationConfig
    encoder: InternalEncoderConfig
    input: InternalInputConfig
    output: InternalOutputConfig
    logging: InternalLoggingConfig

    model_config = _FROZEN

    def download_options(self) -> DownloadOptions:
        """Build download options from the configured encoder defaults."""
        return DownloadOptions(
            speed_factor=self.encoder.speed_factor,
            quality=self.encoder.quality,
        )
