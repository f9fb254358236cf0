import pytest

from stipple.media.decoder import AnimationFrame, DecodedAnimation
from stipple.pipeline.animator import AnimationPipeline
from stipple.setup_directories import setup_output_directories
from tests.helpers.gif_factory import raster as solid_patch


@pytest.fixture
def make_animation():
    """Build a DecodedAnimation of full-screen solid frames.

    ``frames`` is a list of ``(rgba, delay_ticks)`` or
    ``(rgba, delay_ticks, disposal)`` tuples.
    """
    def _make(width, height, frames):
        decoded = []
        for entry in frames:
            rgba, delay = entry[0], entry[1]
            disposal = entry[2] if len(entry) > 2 else 0
            decoded.append(AnimationFrame(solid_patch(width, height, rgba), 0, 0, delay, disposal))
        return DecodedAnimation(frames=decoded, width=width, height=height)

    return _make


@pytest.fixture
def make_pipeline(internal_config, make_params):
    """Pipeline with mutable parameter and container holders."""
    created = []

    def _make(config=None, container=(800, 600), **param_overrides):
        holder = {
            "params": make_params(**param_overrides),
            "container": container,
        }
        pipeline = AnimationPipeline(
            config or internal_config,
            parameters=lambda: holder["params"],
            container=lambda: holder["container"],
        )
        pipeline.holder = holder
        created.append(pipeline)
        return pipeline

    yield _make

    for pipeline in created:
        if pipeline.is_alive():
            pipeline.stop()
            pipeline.join(timeout=5)


@pytest.fixture
def pipeline_output_dirs(temp_dir):
    """Output directories for pipeline tests."""
    return setup_output_directories(temp_dir)
