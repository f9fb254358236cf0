"""`Stipple` - dot-effect rendering for still images and animations.

Subpackages:
- render: Scaler, dot transform, still image processing
- media: Animation decoding, GIF encoding, media type classification
- pipeline: Animation playback loop, frame capture, orchestration
- schemas: Pydantic configuration

"""

__version__ = "0.1.0"
