"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs in a variety of formats, with aliases
for common naming patterns (e.g., BLOCK_SIZE → block_size, THRESHOLD →
threshold_percent).

UserConfig is intentionally minimal - users only specify what they want
to override from the defaults. Validation is lenient to accept both
uppercase and lowercase keys, floats where integers are expected, etc.
"""

from typing import Optional
from pydantic import Field, field_validator
from stipple.schemas.base import StippleBaseModel


class UserRenderConfig(StippleBaseModel):
    """User-facing render config."""
    block_size: Optional[int] = None
    max_radius: Optional[int] = None
    spacing: Optional[int] = None
    threshold_percent: Optional[int] = None
    dark_background: Optional[bool] = None


class UserPreviewConfig(StippleBaseModel):
    """User-facing preview config."""
    container_width: Optional[int] = None
    container_height: Optional[int] = None
    max_canvas_size: Optional[int] = None
    resample: Optional[str] = None
    resize_debounce_ms: Optional[int] = None

    @field_validator("resample", mode="before")
    @classmethod
    def normalize_resample(cls, v):
        """Normalize filter names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v


class UserAnimationConfig(StippleBaseModel):
    """User-facing animation config."""
    tick_ms: Optional[int] = None
    min_delay_ms: Optional[int] = None
    honor_disposal: Optional[bool] = None
    capture_max_frames: Optional[int] = None


class UserEncoderConfig(StippleBaseModel):
    """User-facing encoder config."""
    speed_factor: Optional[float] = None
    quality: Optional[int] = None
    workers: Optional[int] = None
    loop: Optional[int] = None
    filename: Optional[str] = None


class UserInputConfig(StippleBaseModel):
    """User-facing input config."""
    animated_media_types: Optional[list[str]] = None
    strict_media_types: Optional[bool] = None


class UserConfig(StippleBaseModel):
    """User-facing configuration schema.

    Minimal, forgiving, and uses common aliases. Users only specify
    what they want to override from ParamConfig defaults.

    This config is converted to internal overrides during resolution.

    Usage
    -----
        user_cfg = UserConfig(
            block_size=8,
            threshold=35,
            dark_background=True,
            base_dir="/tmp/stipple",
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    # Dot transform settings (flat aliases)
    block_size: Optional[int] = Field(None, alias="BLOCK_SIZE")
    max_radius: Optional[int] = Field(None, alias="MAX_RADIUS")
    spacing: Optional[int] = Field(None, alias="SPACING")
    threshold: Optional[int] = Field(None, alias="THRESHOLD")
    dark_background: Optional[bool] = Field(None, alias="DARK_BACKGROUND")

    # Download settings (flat aliases)
    speed_factor: Optional[float] = Field(None, alias="SPEED_FACTOR")
    quality: Optional[int] = Field(None, alias="QUALITY")

    # Preview settings (flat aliases)
    container_width: Optional[int] = Field(None, alias="CONTAINER_WIDTH")
    container_height: Optional[int] = Field(None, alias="CONTAINER_HEIGHT")

    # Output
    base_dir: Optional[str] = Field(None, alias="BASE_DIR")
    log_level: Optional[str] = Field(None, alias="LOG_LEVEL")

    # Nested overrides (advanced users)
    render: Optional[UserRenderConfig] = None
    preview: Optional[UserPreviewConfig] = None
    animation: Optional[UserAnimationConfig] = None
    encoder: Optional[UserEncoderConfig] = None
    input: Optional[UserInputConfig] = None

    model_config = StippleBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown legacy keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @field_validator("block_size", "max_radius", "spacing", "threshold", "quality",
                     "container_width", "container_height", mode="before")
    @classmethod
    def coerce_integer_fields(cls, v):
        """Accept whole floats (e.g. 6.0 from a slider) for integer fields."""
        if isinstance(v, float) and v.is_integer():
            return int(v)
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Normalize log level names to uppercase."""
        if isinstance(v, str):
            return v.upper().strip()
        return v

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        # Render section
        render = {}
        if self.block_size is not None:
            render["block_size"] = self.block_size
        if self.max_radius is not None:
            render["max_radius"] = self.max_radius
        if self.spacing is not None:
            render["spacing"] = self.spacing
        if self.threshold is not None:
            render["threshold_percent"] = self.threshold
        if self.dark_background is not None:
            render["dark_background"] = self.dark_background

        # Merge with explicit render config
        if self.render is not None:
            render.update(self.render.model_dump(exclude_none=True))

        if render:
            overrides["render"] = render

        # Preview section
        preview = {}
        if self.container_width is not None:
            preview["container_width"] = self.container_width
        if self.container_height is not None:
            preview["container_height"] = self.container_height

        if self.preview is not None:
            preview.update(self.preview.model_dump(exclude_none=True))

        if preview:
            overrides["preview"] = preview

        # Encoder section
        encoder = {}
        if self.speed_factor is not None:
            encoder["speed_factor"] = self.speed_factor
        if self.quality is not None:
            encoder["quality"] = self.quality

        if self.encoder is not None:
            encoder.update(self.encoder.model_dump(exclude_none=True))

        if encoder:
            overrides["encoder"] = encoder

        if self.animation is not None:
            animation = self.animation.model_dump(exclude_none=True)
            if animation:
                overrides["animation"] = animation

        if self.input is not None:
            input_cfg = self.input.model_dump(exclude_none=True)
            if input_cfg:
                overrides["input"] = input_cfg

        if self.base_dir is not None:
            overrides["output"] = {"base_dir": str(self.base_dir)}

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
