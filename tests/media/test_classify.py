"""Tests for input media classification."""

import io

import pytest
from PIL import Image

from stipple.media.classify import MediaKind, classify_media_type, guess_media_type
from tests.helpers.gif_factory import make_gif_bytes, solid_frame

pytestmark = pytest.mark.unit

ANIMATED = ["image/gif"]


class TestClassify:

    def test_gif_is_animation(self):
        assert classify_media_type("image/gif", ANIMATED) is MediaKind.ANIMATION

    @pytest.mark.parametrize("media_type", ["image/png", "image/jpeg", "image/webp", "IMAGE/BMP"])
    def test_other_images_are_still(self, media_type):
        assert classify_media_type(media_type, ANIMATED) is MediaKind.STILL

    @pytest.mark.parametrize("media_type", [None, "", "text/plain", "video/mp4", "application/pdf"])
    def test_everything_else_is_unsupported(self, media_type):
        assert classify_media_type(media_type, ANIMATED) is MediaKind.UNSUPPORTED

    def test_animated_types_are_configurable(self):
        assert classify_media_type("image/webp", ["image/gif", "image/webp"]) is MediaKind.ANIMATION
        assert classify_media_type("image/gif", []) is MediaKind.STILL


class TestGuessMediaType:

    @pytest.mark.parametrize("name, expected", [
        ("spinner.gif", "image/gif"),
        ("photo.PNG", "image/png"),
        ("photo.jpg", "image/jpeg"),
        ("notes.txt", "text/plain"),
    ])
    def test_guess_from_name(self, name, expected):
        assert guess_media_type(name) == expected

    def test_unknown_extension(self):
        assert guess_media_type("archive.nothing-known") is None

    def test_sniff_gif_bytes(self):
        data = make_gif_bytes([solid_frame(4, 4, (255, 0, 0)), solid_frame(4, 4, (0, 0, 255))])
        assert guess_media_type(data) == "image/gif"

    def test_sniff_png_bytes(self):
        buffer = io.BytesIO()
        Image.new("RGB", (2, 2)).save(buffer, format="PNG")
        assert guess_media_type(buffer.getvalue()) == "image/png"

    def test_garbage_bytes(self):
        assert guess_media_type(b"not an image at all") is None

    def test_file_object_position_is_restored(self):
        stream = io.BytesIO(make_gif_bytes([solid_frame(4, 4, (0, 255, 0))]))
        assert guess_media_type(stream) == "image/gif"
        assert stream.tell() == 0
