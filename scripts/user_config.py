"""Stipple User Configuration.

This is the user-facing configuration file. Modify settings here to customize
the dot effect. Defaults for everything else live in stipple.schemas.param.

Usage:
    python scripts/run_stipple.py photo.jpg --config scripts/user_config.py
    python scripts/run_stipple.py spinner.gif --config scripts/user_config.py --cycles 2
"""

CONFIG = {
    # ========================================================================
    # DOT TRANSFORM
    # ========================================================================
    "BLOCK_SIZE": 6,          # Block edge length in pixels (4-40)
    "MAX_RADIUS": 3,          # Dot radius of a fully white block (1-20)
    "SPACING": 1,             # Gap between blocks (0-10)
    "THRESHOLD": 20,          # Blocks at or below this brightness % stay empty
    "DARK_BACKGROUND": False, # True: white dots on black

    # ========================================================================
    # PREVIEW
    # ========================================================================
    "CONTAINER_WIDTH": 800,
    "CONTAINER_HEIGHT": 600,

    # ========================================================================
    # DOWNLOAD
    # ========================================================================
    "SPEED_FACTOR": 1.0,      # 1-5, exported frame delay is 100 / speed ms
    "QUALITY": 15,            # Palette sampling stride, lower is better

    "BASE_DIR": "output",     # All outputs go here
    "LOG_LEVEL": "INFO",
}
