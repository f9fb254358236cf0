#!/usr/bin/env python3
"""Stipple dot-effect runner.

Usage:
    python scripts/run_stipple.py photo.jpg
    python scripts/run_stipple.py spinner.gif --config scripts/user_config.py
    python scripts/run_stipple.py spinner.gif --speed-factor 2 --cycles 3

Note: User config in scripts/user_config.py, defaults in stipple.schemas.param
"""

import sys

from stipple.cli.run_stipple import main


if __name__ == "__main__":
    sys.exit(main())
