"""Core stipple execution logic.

This module contains the actual runner, separated from argument parsing.
Scripts are thin wrappers; this is the real implementation.
"""

import json
import logging
import argparse
import importlib.util
from pathlib import Path
from typing import Optional, Dict, Any, Tuple

from stipple.setup_directories import setup_output_directories
from stipple.media.classify import MediaKind
from stipple.pipeline.orchestrator import StippleOrchestrator
from stipple.schemas import resolve_config, ParamConfig, UserConfig, CLIConfig


logger = logging.getLogger(__name__)


def load_user_config_dict(config_path: str) -> dict:
    """Load user config dict from Python file.

    Returns the raw dict before Pydantic validation.

    Parameters
    ----------
    config_path : str
        Path to user config Python file containing CONFIG dict.

    Returns
    -------
    dict
        Raw user configuration dictionary.

    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    ValueError
        If no CONFIG dict found in file.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    spec = importlib.util.spec_from_file_location("config_module", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    for name in dir(module):
        if name.startswith('CONFIG'):
            obj = getattr(module, name)
            if isinstance(obj, dict):
                return obj

    raise ValueError(f"No CONFIG dict found in {path}")


def parse_container(value: str) -> Tuple[int, int]:
    """Parse a ``WIDTHxHEIGHT`` container size."""
    try:
        width, height = (int(part) for part in value.lower().split("x"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Container must look like 800x600, got {value!r}")
    return width, height


def run_stipple(
    input_path: str,
    user_config_path: Optional[str] = None,
    cli_args: Optional[Dict[str, Any]] = None,
    cycles: int = 1,
    verbose: bool = False,
) -> Optional[Path]:
    """Render the dot effect of one input file.

    This is the core execution function. It:
    1. Loads and resolves configuration (Param < User < CLI)
    2. Sets up output directories
    3. Loads the input through the orchestrator
    4. Writes ``renders/<name>_dots.png`` for still images, or renders
       ``cycles`` loops of an animation and writes
       ``animations/dot-effect.gif``

    Parameters
    ----------
    input_path : str
        Image or animated GIF to process.
    user_config_path : str, optional
        Path to user config file (Python file with CONFIG dict).
    cli_args : dict, optional
        CLI argument overrides, see CLIConfig. All optional.
    cycles : int, optional
        Number of full animation loops to capture (default 1).
    verbose : bool, optional
        If True, enable DEBUG logging and print full resolved config.

    Returns
    -------
    Path or None
        Written file, or None when the input was ignored or nothing was
        rendered.

    Raises
    ------
    FileNotFoundError
        If the input or the user config does not exist.
    StippleError
        If the input cannot be decoded or the encoder fails.

    Examples
    --------
    ::

        run_stipple("photo.jpg", cli_args={"block_size": 10, "dark_background": True})
        run_stipple("spinner.gif", "scripts/user_config.py", cycles=2)
    """
    if not Path(input_path).exists():
        raise FileNotFoundError(f"Input not found: {input_path}")

    param_cfg = ParamConfig()

    user_cfg_dict = load_user_config_dict(user_config_path) if user_config_path else {}
    user_cfg = UserConfig.model_validate(user_cfg_dict)

    cli_args = dict(cli_args or {})
    if verbose and "log_level" not in cli_args:
        cli_args["log_level"] = "DEBUG"

    cli_dict = {k: v for k, v in cli_args.items() if v is not None}
    cli_cfg = CLIConfig.model_validate(cli_dict) if cli_dict else CLIConfig()

    config = resolve_config(param_cfg, user_cfg, cli_cfg)
    output_dirs = setup_output_directories(config.output.base_dir)

    print(f"\n{'='*60}")
    print("Stipple Dot Effect")
    print('='*60)
    print(f"Input:  {input_path}")
    print(f"Config: {user_config_path or '(defaults)'}")
    print(f"Output: {output_dirs['base']}")
    print('='*60)

    if verbose:
        print("\nFull Internal Configuration:")
        print(json.dumps(config.model_dump(), indent=2))
        print('='*60)

    orchestrator = StippleOrchestrator(config, output_dirs)
    orchestrator.setup_logging()
    try:
        kind = orchestrator.load_file(input_path)
        if kind is None:
            return None

        if kind is MediaKind.STILL:
            return orchestrator.save_still(Path(input_path).name)

        orchestrator.render_animation(cycles)
        future = orchestrator.request_download()
        if future is None:
            logger.warning("No frames rendered, container %dx%d", *orchestrator.container)
            return None
        return future.result()
    finally:
        orchestrator.stop()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Render a dot (stipple) effect of an image or animated GIF")
    parser.add_argument("input", help="Image or animated GIF")
    parser.add_argument("--config", help="Path to user config file")
    parser.add_argument("--block-size", type=int, help="Block edge length in pixels (>= 4)")
    parser.add_argument("--max-radius", type=int, help="Radius of a fully bright block (>= 1)")
    parser.add_argument("--spacing", type=int, help="Gap between blocks (>= 0)")
    parser.add_argument("--threshold", type=int, help="Brightness threshold percent (0-100)")
    parser.add_argument("--dark-background", action="store_true", default=None,
                        help="White dots on black")
    parser.add_argument("--speed-factor", type=float, help="Playback speed of the exported GIF")
    parser.add_argument("--quality", type=int, help="Palette sampling stride (lower is better)")
    parser.add_argument("--container", type=parse_container, help="Preview size, e.g. 800x600")
    parser.add_argument("--cycles", type=int, default=1, help="Animation loops to capture")
    parser.add_argument("--base-dir", help="Output directory")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    container_width, container_height = args.container if args.container else (None, None)
    cli_args = {
        "block_size": args.block_size,
        "max_radius": args.max_radius,
        "spacing": args.spacing,
        "threshold": args.threshold,
        "dark_background": args.dark_background,
        "speed_factor": args.speed_factor,
        "quality": args.quality,
        "container_width": container_width,
        "container_height": container_height,
        "base_dir": args.base_dir,
    }

    result = run_stipple(args.input, args.config, cli_args,
                         cycles=args.cycles, verbose=args.verbose)
    if result is None:
        print("Nothing written")
        return 1
    print(f"Written: {result}")
    return 0
