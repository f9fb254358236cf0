"""Media boundary: input classification, animation decoding, GIF encoding."""

from stipple.media.classify import MediaKind, classify_media_type, guess_media_type
from stipple.media.decoder import AnimationDecoder, AnimationFrame, DecodedAnimation
from stipple.media.encoder import AnimationEncoder, frame_delays

__all__ = [
    'MediaKind', 'classify_media_type', 'guess_media_type',
    'AnimationDecoder', 'AnimationFrame', 'DecodedAnimation',
    'AnimationEncoder', 'frame_delays',
]
