"""Pipeline contracts: fail-fast enforcement of stage invariants.

This package enforces semantic guarantees between pipeline stages.
Contracts fail immediately and loudly when pipeline stages don't produce
their promised invariants.

Key principle:
- Pydantic validates config correctness
- Contracts validate pipeline correctness
- Algorithms handle per-block edge cases locally
"""

from stipple.contracts.failure import ContractViolation
from stipple.contracts.base import require
from stipple.contracts.raster import assert_raster, assert_same_shape
from stipple.contracts.animation import assert_decoded, assert_captured

__all__ = [
    "ContractViolation",
    "require",
    "assert_raster",
    "assert_same_shape",
    "assert_decoded",
    "assert_captured",
]
