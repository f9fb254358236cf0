import io
import logging

import numpy as np
import pytest
from PIL import Image
from pydantic import ValidationError

from stipple.errors import DecodeError, UnsupportedMediaError
from stipple.media.classify import MediaKind
from stipple.pipeline.animator import PipelinePhase
from stipple.pipeline.orchestrator import StippleOrchestrator
from stipple.render.dot_transform import BLACK, WHITE
from tests.helpers.gif_factory import make_gif_bytes, make_gif_file, make_png_file, solid_frame
from tests.helpers.waiting import wait_for

pytestmark = [pytest.mark.unit, pytest.mark.pipeline]


@pytest.fixture
def make_orchestrator(internal_config, pipeline_output_dirs):
    created = []

    def _make(config=None, output_dirs=pipeline_output_dirs):
        orch = StippleOrchestrator(config or internal_config, output_dirs)
        created.append(orch)
        return orch

    yield _make

    for orch in created:
        orch.stop()


@pytest.fixture
def orch(make_orchestrator):
    return make_orchestrator()


def red_white_gif(width=40, height=40):
    return make_gif_bytes([solid_frame(width, height, (255, 0, 0)),
                           solid_frame(width, height, (255, 255, 255))], durations=100)


def green_gif(width=20, height=10):
    return make_gif_bytes([solid_frame(width, height, (0, 255, 0)),
                           solid_frame(width, height, (0, 128, 0))], durations=100)


def test_orchestrator_initialization(orch, internal_config, pipeline_output_dirs):
    assert orch.config == internal_config
    assert orch.output_dirs == pipeline_output_dirs
    assert orch.parameters == internal_config.render
    assert orch.container == (800, 600)
    assert orch.kind is None
    assert orch.latest_raster is None


def test_stop_is_idempotent(orch):
    orch.stop()
    orch.stop()


def test_setup_logging_writes_log_file(orch, pipeline_output_dirs):
    orch.setup_logging()
    try:
        logging.getLogger("stipple.test").info("hello log")
        for handler in logging.getLogger().handlers:
            handler.flush()
        log_path = pipeline_output_dirs["logs"] / "stipple.log"
        assert log_path.exists()
        assert "hello log" in log_path.read_text()
    finally:
        root = logging.getLogger()
        for handler in root.handlers[:]:
            root.removeHandler(handler)
            handler.close()


class TestStill:

    def test_load_png_renders_immediately(self, orch, temp_dir):
        path = make_png_file(temp_dir / "white.png", 30, 20)

        assert orch.load_file(path) is MediaKind.STILL
        assert orch.kind is MediaKind.STILL
        assert orch.latest_raster.shape == (20, 30, 4)
        assert orch.pipeline.phase is PipelinePhase.IDLE

    def test_parameter_change_rerenders(self, orch, temp_dir):
        orch.load_file(make_png_file(temp_dir / "white.png", 30, 20))
        assert tuple(orch.latest_raster[0, 0]) == WHITE

        params = orch.update_parameters(dark_background=True)

        assert params.dark_background is True
        assert tuple(orch.latest_raster[0, 0]) == BLACK

    def test_invalid_parameter_is_rejected(self, orch):
        before = orch.parameters
        with pytest.raises(ValidationError):
            orch.update_parameters(block_size=2)
        assert orch.parameters == before

    def test_immediate_resize(self, orch, temp_dir):
        orch.load_file(make_png_file(temp_dir / "big.png", 1000, 500))
        # default 800x600 container, width-limited
        assert orch.latest_raster.shape == (400, 800, 4)

        orch.resize_preview(400, 400, immediate=True)

        assert orch.container == (400, 400)
        assert orch.latest_raster.shape == (200, 400, 4)

    def test_resize_is_debounced(self, orch, temp_dir):
        orch.load_file(make_png_file(temp_dir / "big.png", 1000, 500))

        orch.resize_preview(600, 600)
        orch.resize_preview(200, 200)

        assert wait_for(lambda: orch.latest_raster.shape == (100, 200, 4))

    def test_render_racing_a_reset_is_dropped(self, orch, temp_dir):
        orch.load_file(make_png_file(temp_dir / "white.png", 30, 20))
        render = orch.still_processor.process

        def render_then_reset(*args, **kwargs):
            result = render(*args, **kwargs)
            orch.reset()
            return result

        orch.still_processor.process = render_then_reset
        orch.resize_preview(20, 20, immediate=True)

        assert orch.kind is None
        assert orch.latest_raster is None

    def test_save_still(self, orch, temp_dir, pipeline_output_dirs):
        orch.load_file(make_png_file(temp_dir / "white.png", 30, 20))

        path = orch.save_still("white.png")

        assert path == pipeline_output_dirs["renders"] / "white_dots.png"
        with Image.open(path) as im:
            assert im.size == (30, 20)

    def test_load_from_bytes_with_media_type(self, orch):
        buffer = io.BytesIO()
        Image.new("RGB", (12, 12), (255, 255, 255)).save(buffer, format="PNG")

        assert orch.load_file(buffer.getvalue(), media_type="image/png") is MediaKind.STILL
        assert orch.latest_raster.shape == (12, 12, 4)


class TestInputBoundary:

    def test_unsupported_file_is_ignored(self, orch, temp_dir):
        still = make_png_file(temp_dir / "white.png", 30, 20)
        orch.load_file(still)
        raster = orch.latest_raster

        notes = temp_dir / "notes.txt"
        notes.write_text("hello")

        assert orch.load_file(notes) is None
        assert orch.kind is MediaKind.STILL
        assert orch.latest_raster is raster

    def test_strict_mode_raises(self, make_orchestrator, make_config, temp_dir):
        orch = make_orchestrator(make_config(input={"strict_media_types": True}))
        notes = temp_dir / "notes.txt"
        notes.write_text("hello")

        with pytest.raises(UnsupportedMediaError, match="Unsupported file type: 'text/plain'") as excinfo:
            orch.load_file(notes)
        assert excinfo.value.media_type == "text/plain"

    def test_decode_failure_leaves_pipeline_idle(self, orch):
        orch.load_file(red_white_gif(), media_type="image/gif")
        assert orch.pipeline.phase is PipelinePhase.PLAYING

        with pytest.raises(DecodeError):
            orch.load_file(b"definitely not an image", media_type="image/gif")

        assert orch.kind is None
        assert orch.pipeline.phase is PipelinePhase.IDLE
        assert len(orch.store) == 0

    def test_broken_still_raises_decode_error(self, orch):
        with pytest.raises(DecodeError, match="Could not decode image"):
            orch.load_file(b"definitely not an image", media_type="image/png")
        assert orch.kind is None

    def test_oversized_still_raises_decode_error(self, orch, temp_dir, monkeypatch):
        path = make_png_file(temp_dir / "big.png", 40, 40)
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10)

        with pytest.raises(DecodeError, match="Could not decode image"):
            orch.load_file(path)
        assert orch.kind is None


class TestAnimation:

    def test_load_gif_starts_playing(self, orch, temp_dir):
        path = make_gif_file(temp_dir / "anim.gif", [solid_frame(40, 40, (255, 0, 0)),
                                                     solid_frame(40, 40, (0, 0, 255))])

        assert orch.load_file(path) is MediaKind.ANIMATION
        assert orch.pipeline.phase is PipelinePhase.PLAYING
        assert len(orch.store) == 0

    def test_render_animation_cycles(self, orch):
        orch.load_file(red_white_gif(), media_type="image/gif")

        assert orch.render_animation(cycles=3) == 6
        assert len(orch.store) == 6
        assert orch.latest_raster.shape == (40, 40, 4)

    def test_render_animation_when_idle(self, orch):
        assert orch.render_animation() == 0

    def test_new_file_replaces_captured_frames(self, orch):
        """Frames of a superseded animation never reach a later encode."""
        orch.load_file(red_white_gif(40, 40), media_type="image/gif")
        orch.render_animation(cycles=2)
        assert len(orch.store) == 4

        orch.load_file(green_gif(20, 10), media_type="image/gif")
        assert len(orch.store) == 0

        orch.render_animation(cycles=1)
        frames = orch.store.snapshot()
        assert len(frames) == 2
        assert all(f.shape == (10, 20, 4) for f in frames)

    def test_new_file_during_threaded_playback(self, orch):
        orch.start(configure_logging=False)
        orch.load_file(red_white_gif(40, 40), media_type="image/gif")
        assert wait_for(lambda: len(orch.store) >= 2)

        orch.load_file(green_gif(20, 10), media_type="image/gif")
        assert all(f.shape == (10, 20, 4) for f in orch.store.snapshot())

        assert wait_for(lambda: len(orch.store) >= 2)
        frames = orch.store.snapshot()
        assert all(f.shape == (10, 20, 4) for f in frames)

        future = orch.request_download()
        path = future.result(timeout=30)
        with Image.open(path) as im:
            assert im.size == (20, 10)

    def test_parameter_change_applies_to_next_tick(self, orch):
        orch.load_file(red_white_gif(), media_type="image/gif")
        orch.render_animation(cycles=1)
        assert tuple(orch.latest_raster[0, 0]) == WHITE

        orch.update_parameters(dark_background=True)
        orch.render_animation(cycles=1)
        assert tuple(orch.latest_raster[0, 0]) == BLACK


class TestDownload:

    def test_nothing_captured_is_a_noop(self, orch):
        assert orch.request_download() is None

    def test_writes_fixed_name(self, orch, pipeline_output_dirs):
        orch.load_file(red_white_gif(), media_type="image/gif")
        orch.render_animation(cycles=1)

        path = orch.request_download().result(timeout=30)

        assert path == pipeline_output_dirs["animations"] / "dot-effect.gif"
        with Image.open(path) as im:
            assert im.n_frames == 2
            assert im.info["duration"] == 100

    def test_speed_factor_from_options(self, orch):
        from stipple.schemas.internal import DownloadOptions

        orch.load_file(red_white_gif(), media_type="image/gif")
        orch.render_animation(cycles=1)

        path = orch.request_download(DownloadOptions(speed_factor=2, quality=15)).result(timeout=30)

        with Image.open(path) as im:
            assert im.info["duration"] == 50

    def test_without_output_dirs_returns_bytes(self, make_orchestrator):
        orch = make_orchestrator(output_dirs=None)
        orch.load_file(red_white_gif(), media_type="image/gif")
        orch.render_animation(cycles=1)

        data = orch.request_download().result(timeout=30)

        assert isinstance(data, bytes)
        assert data[:6] in (b"GIF87a", b"GIF89a")
