"""Media type classification for the input boundary.

Every input is routed to exactly one branch: animated container, still
image, or unsupported.
"""

import io
import logging
import mimetypes
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Iterable, Optional, Union

from PIL import Image, UnidentifiedImageError

__all__ = ['MediaKind', 'classify_media_type', 'guess_media_type']

logger = logging.getLogger(__name__)


class MediaKind(str, Enum):
    """Processing branch selected for an input."""
    ANIMATION = "animation"
    STILL = "still"
    UNSUPPORTED = "unsupported"


def guess_media_type(source: Union[str, Path, bytes, BinaryIO]) -> Optional[str]:
    """Guess the declared media type of an input.

    Paths are classified by extension. Raw bytes are sniffed with Pillow
    (format identification only, no pixel decode).
    """
    if isinstance(source, (bytes, bytearray)):
        return _sniff(io.BytesIO(bytes(source)))

    if hasattr(source, "read"):
        name = getattr(source, "name", None)
        if isinstance(name, str):
            media_type, _ = mimetypes.guess_type(name)
            if media_type:
                return media_type
        position = source.tell()
        try:
            return _sniff(source)
        finally:
            source.seek(position)

    media_type, _ = mimetypes.guess_type(str(source))
    return media_type


def _sniff(stream) -> Optional[str]:
    try:
        with Image.open(stream) as im:
            return Image.MIME.get(im.format)
    except (UnidentifiedImageError, OSError):
        logger.debug("Could not identify image format from content")
        return None


def classify_media_type(media_type: Optional[str],
                        animated_media_types: Iterable[str]) -> MediaKind:
    """Map a media type onto a processing branch.

    Parameters
    ----------
    media_type : str or None
        Declared media type, e.g. ``"image/gif"``.
    animated_media_types : iterable of str
        Media types handled as animations (``["image/gif"]`` by default).

    Returns
    -------
    MediaKind

    Examples
    --------
    >>> classify_media_type("image/gif", ["image/gif"])
    <MediaKind.ANIMATION: 'animation'>
    >>> classify_media_type("image/png", ["image/gif"])
    <MediaKind.STILL: 'still'>
    >>> classify_media_type("text/plain", ["image/gif"])
    <MediaKind.UNSUPPORTED: 'unsupported'>
    """
    if not media_type:
        return MediaKind.UNSUPPORTED

    media_type = media_type.lower().strip()
    if media_type in set(animated_media_types):
        return MediaKind.ANIMATION
    if media_type.startswith("image/"):
        return MediaKind.STILL
    return MediaKind.UNSUPPORTED
