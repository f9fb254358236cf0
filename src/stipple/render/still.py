"""Still image processing: fit, resample, dot transform."""

import logging
from typing import Optional, Tuple, Union, TYPE_CHECKING

import numpy as np
from PIL import Image

from stipple.render.scaler import fit, container_is_usable
from stipple.render.raster import to_raster, resample, flatten
from stipple.render.dot_transform import render

if TYPE_CHECKING:
    from stipple.schemas import InternalConfig, DotParameters

__all__ = ['StillImageProcessor']

logger = logging.getLogger(__name__)


class StillImageProcessor:
    """Applies the scaler then the dot transform to a single image.

    The processor is stateless apart from its configuration; the caller
    re-invokes ``process`` whenever the parameters or the container size
    change.

    Example usage::

        processor = StillImageProcessor(config)
        raster = processor.process(Image.open("photo.jpg"), (800, 600))
    """

    def __init__(self, config: "InternalConfig"):
        """Store preview settings.

        Parameters
        ----------
        config : InternalConfig
            Fully validated runtime configuration. Uses
            ``preview.max_canvas_size`` and ``preview.resample``.
        """
        self.config = config
        self.max_canvas_size = config.preview.max_canvas_size
        self.resample_method = config.preview.resample

    def process(self, image: Union[Image.Image, np.ndarray],
                container: Tuple[int, int],
                params: Optional["DotParameters"] = None) -> Optional[np.ndarray]:
        """Render the dot effect of ``image`` fitted into ``container``.

        Parameters
        ----------
        image : PIL.Image.Image or np.ndarray
            Decoded source image.
        container : tuple of int
            ``(width, height)`` of the preview container.
        params : DotParameters, optional
            Parameter snapshot. Defaults to ``config.render``.

        Returns
        -------
        np.ndarray or None
            Rendered raster, or None when the container (or the fitted
            size) is degenerate.
        """
        params = params if params is not None else self.config.render
        source = to_raster(image)
        source_height, source_width = source.shape[:2]

        container_width, container_height = container
        if not container_is_usable(container_width, container_height):
            logger.debug("Container %dx%d is empty, skipping still render",
                         container_width, container_height)
            return None
        if source_width == 0 or source_height == 0:
            logger.debug("Empty source image, skipping still render")
            return None

        width, height = fit(source_width, source_height,
                            container_width, container_height,
                            self.max_canvas_size)
        if width == 0 or height == 0:
            logger.debug("Fitted size %dx%d is empty, skipping still render", width, height)
            return None

        drawn = flatten(resample(source, width, height, self.resample_method))
        result = render(drawn, params)
        logger.info("Rendered still image %dx%d -> %dx%d",
                    source_width, source_height, width, height)
        return result
