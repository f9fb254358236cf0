"""Centralized failure type for contract violations.

Contracts fail fast, loud, and once. All violations raise the same
exception type, allowing caller to handle pipeline bugs uniformly.
"""


class ContractViolation(RuntimeError):
    """Raised when a pipeline contract is violated.

    This indicates a bug in pipeline logic, not bad user input. It means a
    pipeline stage did not produce the invariants it promised, or a caller
    skipped a precondition it was responsible for.

    Key distinction:
    - ValueError: User/config error (handled by Pydantic)
    - StippleError: Input/encoder failure to report to the user
    - ContractViolation: Pipeline bug (programmer error)
    """
    pass
