"""Tests for background GIF encoding."""

import io

import numpy as np
import pytest
from PIL import Image

from stipple.errors import EncodeError
from stipple.media.encoder import AnimationEncoder, frame_delays, quantize_frame
from stipple.schemas.internal import DownloadOptions
from tests.helpers.gif_factory import raster

pytestmark = [pytest.mark.unit, pytest.mark.pipeline]

WHITE = (255, 255, 255, 255)
BLACK = (0, 0, 0, 255)


@pytest.fixture
def encoder(internal_config):
    enc = AnimationEncoder(internal_config)
    yield enc
    enc.close()


def frames_of(*colors, size=(12, 8)):
    return [raster(size[0], size[1], c) for c in colors]


class TestFrameDelays:

    def test_speed_factor_two_halves_the_delay(self):
        assert frame_delays(2, DownloadOptions(speed_factor=2, quality=15)) == [50.0, 50.0]

    def test_default_speed(self):
        assert frame_delays(3, DownloadOptions(speed_factor=1, quality=15)) == [100.0] * 3

    def test_fractional_speed(self):
        assert frame_delays(1, DownloadOptions(speed_factor=2.5, quality=15)) == [40.0]


class TestPrepareFrames:

    def test_source_delays_are_replaced(self, encoder):
        """Every frame is submitted at 100 / speed ms."""
        prepared = encoder.prepare_frames(frames_of(WHITE, BLACK),
                                          DownloadOptions(speed_factor=2, quality=15))

        assert len(prepared) == 2
        assert [f.delay_ms for f in prepared] == [50.0, 50.0]
        assert all(f.image.mode == "P" for f in prepared)

    def test_frame_order_is_preserved(self, encoder):
        colors = [(i * 20, 0, 0, 255) for i in range(8)]
        prepared = encoder.prepare_frames(frames_of(*colors), DownloadOptions(speed_factor=1, quality=1))

        reds = [f.image.convert("RGB").getpixel((0, 0))[0] for f in prepared]
        assert reds == [c[0] for c in colors]

    def test_mismatched_sizes_follow_first_frame(self, encoder):
        frames = [raster(12, 8, WHITE), raster(6, 4, BLACK)]
        prepared = encoder.prepare_frames(frames, DownloadOptions(speed_factor=1, quality=15))

        assert [f.image.size for f in prepared] == [(12, 8), (12, 8)]


class TestRequestEncode:

    def test_empty_frames_is_a_noop(self, encoder):
        assert encoder.request_encode([], DownloadOptions(speed_factor=1, quality=15)) is None

    def test_encodes_animated_gif(self, encoder):
        future = encoder.request_encode(frames_of(WHITE, BLACK, WHITE),
                                        DownloadOptions(speed_factor=2, quality=15))
        data = future.result(timeout=30)

        with Image.open(io.BytesIO(data)) as im:
            assert im.format == "GIF"
            assert im.size == (12, 8)
            assert im.n_frames == 3
            assert im.info.get("loop") == 0
            durations = []
            for index in range(im.n_frames):
                im.seek(index)
                durations.append(im.info["duration"])
                expected = 255 if index % 2 == 0 else 0
                assert im.convert("RGB").getpixel((5, 5)) == (expected,) * 3
        assert durations == [50, 50, 50]

    def test_identical_frames_are_all_written(self, encoder):
        """A still stretch of an animation keeps one GIF frame per capture."""
        data = encoder.encode(frames_of(WHITE, WHITE, WHITE, BLACK),
                              DownloadOptions(speed_factor=2, quality=15))

        with Image.open(io.BytesIO(data)) as im:
            assert im.n_frames == 4
            durations = []
            for index in range(im.n_frames):
                im.seek(index)
                durations.append(im.info["duration"])
        assert durations == [50, 50, 50, 50]

    def test_single_repeated_frame(self, encoder):
        data = encoder.encode(frames_of(WHITE, WHITE), DownloadOptions(speed_factor=1, quality=15))

        with Image.open(io.BytesIO(data)) as im:
            assert im.n_frames == 2
            im.seek(1)
            assert im.info["duration"] == 100
            assert im.convert("RGB").getpixel((0, 0)) == (255, 255, 255)

    def test_caller_list_is_copied(self, encoder):
        frames = frames_of(WHITE, BLACK)
        future = encoder.request_encode(frames, DownloadOptions(speed_factor=1, quality=15))
        frames.clear()

        assert len(future.result(timeout=30)) > 0

    def test_failures_surface_through_future(self, encoder):
        bad = [np.zeros((4, 4, 3), dtype=np.uint8)]
        future = encoder.request_encode(bad, DownloadOptions(speed_factor=1, quality=15))

        with pytest.raises(EncodeError, match="Could not encode animation"):
            future.result(timeout=30)


def test_quantize_keeps_two_tone_colors():
    src = raster(8, 8, WHITE)
    src[2:5, 2:5] = BLACK

    out = quantize_frame(src, quality=15).convert("RGB")

    assert out.getpixel((0, 0)) == (255, 255, 255)
    assert out.getpixel((3, 3)) == (0, 0, 0)
