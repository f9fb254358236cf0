"""Command-line interface modules for stipple.

This package contains core execution logic, making scripts/ optional and deletable.
"""

from stipple.cli.run_stipple import run_stipple, main

__all__ = ['run_stipple', 'main']
