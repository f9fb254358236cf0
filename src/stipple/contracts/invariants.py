"""Formal pipeline invariants.

This file documents what each stage MUST produce. This is architecture, not code.
Use this file as a reviewer anchor and system reference.
"""

PIPELINE_INVARIANTS = {
    "raster": [
        "RGBA uint8 array shaped (height, width, 4)",
        "Buffer length == width * height * 4",
        "Every stage returns a new array (only the logical canvas is mutated in place)",
    ],

    "dot_transform": [
        "Output shape == input shape",
        "Only the background and dot colors appear in the output",
        "Same raster + same parameters => byte-identical output",
        "A block whose average brightness equals the cutoff draws nothing",
    ],

    "scaler": [
        "Never exceeds max_canvas_size on either axis",
        "Never upscales beyond the source resolution",
        "Aspect ratio preserved to within floor rounding",
    ],

    "decode": [
        "Logical canvas width and height are positive",
        "At least one frame",
        "Each patch is a raster placed at a non-negative offset",
    ],

    "capture": [
        "Empty immediately after a new animation is loaded",
        "One raster appended per tick of the current animation",
        "Never holds rasters from two different animations",
    ],

    "encode": [
        "Every frame is written with delay 100 / speed_factor ms",
        "Frames are written in capture order",
    ],
}

# Which stages are optional vs required
STAGE_REQUIREMENTS = {
    "decode": "ANIMATION_ONLY",
    "scaler": "REQUIRED",
    "dot_transform": "REQUIRED",
    "capture": "ANIMATION_ONLY",
    "encode": "ON_DEMAND",
}
