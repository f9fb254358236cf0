"""
Directory setup for stipple outputs.

Flat layout under one base directory:
- renders/     dot-effect PNGs of still images
- animations/  re-encoded GIFs (fixed name, overwritten per download)
- logs/        pipeline log file
"""

from pathlib import Path
from datetime import datetime


def setup_output_directories(base_output_dir=None, verbose=False):
    """
    Set up the output directory structure.

    Parameters
    ----------
    base_output_dir : str or Path, optional
        Base output directory. If None, uses ./output.
    verbose : bool, optional
        Print the created directories.

    Returns
    -------
    dict
        Dictionary with paths: 'base', 'renders', 'animations', 'logs'
    """
    if base_output_dir is None:
        base_output_dir = Path.cwd() / "output"

    base_output_dir = Path(base_output_dir).expanduser().resolve()

    directories = {
        "base": base_output_dir,
        "renders": base_output_dir / "renders",
        "animations": base_output_dir / "animations",
        "logs": base_output_dir / "logs",
    }

    for path in directories.values():
        path.mkdir(parents=True, exist_ok=True)

    if verbose:
        print("\nOutput directories created:")
        for key, path in directories.items():
            print(f"  {key:12s}: {path}")
        print("=" * 70 + "\n")

    return directories


def get_render_path(output_dirs, source_name, fmt="png", timestamp=None):
    """
    Get the output path of a rendered still image.

    Parameters
    ----------
    output_dirs : dict
        Output directories from setup_output_directories()
    source_name : str or Path
        Input file name; only its stem is used.
    fmt : str
        Image format / extension ('png', 'jpeg', 'webp').
    timestamp : datetime, optional
        If given, appended to the file name as HHMMSS.

    Returns
    -------
    Path
        Full path: renders/<stem>_dots[_HHMMSS].<fmt>

    Example
    -------
    >>> get_render_path(dirs, 'photos/cat.jpg')
    Path('output/renders/cat_dots.png')
    """
    stem = Path(source_name).stem or "image"
    suffix = f"_{timestamp.strftime('%H%M%S')}" if isinstance(timestamp, datetime) else ""
    ext = fmt[1:] if fmt.startswith('.') else fmt

    render_dir = output_dirs["renders"]
    render_dir.mkdir(parents=True, exist_ok=True)
    return render_dir / f"{stem}_dots{suffix}.{ext}"


def get_animation_path(output_dirs, filename="dot-effect.gif"):
    """
    Get the output path of the re-encoded animation.

    Returns
    -------
    Path
        Full path: animations/<filename>
    """
    animation_dir = output_dirs["animations"]
    animation_dir.mkdir(parents=True, exist_ok=True)
    return animation_dir / filename


def get_log_path(output_dirs):
    """
    Get the pipeline log file path.

    Returns
    -------
    Path
        Full path: logs/stipple.log
    """
    log_dir = output_dirs["logs"]
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / "stipple.log"
