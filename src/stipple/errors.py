"""Errors surfaced to the caller of the Stipple pipeline.

Key distinction:
- ValidationError: User/config error (handled by Pydantic)
- StippleError subclasses: input or encoder failures the user must see
- ContractViolation: Pipeline bug (programmer error), see stipple.contracts
"""


class StippleError(Exception):
    """Base class for errors reported to the user."""


class UnsupportedMediaError(StippleError):
    """Input is neither an animated container nor a still image.

    Only raised when ``input.strict_media_types`` is enabled; otherwise the
    input is ignored with a warning.
    """

    def __init__(self, media_type):
        self.media_type = media_type
        super().__init__(f"Unsupported file type: {media_type!r}")


class DecodeError(StippleError):
    """The animation decoder could not parse the container."""


class EncodeError(StippleError):
    """The encoder rejected the frame sequence or failed internally."""
