"""CLIConfig: Command-line operational overrides.

Minimal configuration for settings that commonly change between runs:
dot parameters, download options, output paths, verbosity.

This schema handles command-line arguments parsed by argparse.
"""

from typing import Literal, Optional
from stipple.schemas.base import StippleBaseModel


class CLIConfig(StippleBaseModel):
    """Command-line configuration overrides.

    Highest priority in config resolution.

    Usage
    -----
        cli_cfg = CLIConfig(
            block_size=10,
            dark_background=True,
            base_dir="/scratch/stipple_output",
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    block_size: Optional[int] = None
    max_radius: Optional[int] = None
    spacing: Optional[int] = None
    threshold: Optional[int] = None
    dark_background: Optional[bool] = None
    speed_factor: Optional[float] = None
    quality: Optional[int] = None
    container_width: Optional[int] = None
    container_height: Optional[int] = None
    base_dir: Optional[str] = None
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None

    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        render = {}
        for name, key in (("block_size", "block_size"),
                          ("max_radius", "max_radius"),
                          ("spacing", "spacing"),
                          ("threshold", "threshold_percent"),
                          ("dark_background", "dark_background")):
            value = getattr(self, name)
            if value is not None:
                render[key] = value
        if render:
            overrides["render"] = render

        encoder = {}
        if self.speed_factor is not None:
            encoder["speed_factor"] = self.speed_factor
        if self.quality is not None:
            encoder["quality"] = self.quality
        if encoder:
            overrides["encoder"] = encoder

        preview = {}
        if self.container_width is not None:
            preview["container_width"] = self.container_width
        if self.container_height is not None:
            preview["container_height"] = self.container_height
        if preview:
            overrides["preview"] = preview

        if self.base_dir is not None:
            overrides["output"] = {"base_dir": str(self.base_dir)}

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
