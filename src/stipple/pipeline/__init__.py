"""Pipeline modules.

- orchestrator: input routing, live parameters, downloads
- animator: animation loop thread
- frame_capture: rendered frame store
- debounce: resize debouncing
"""

from stipple.pipeline.orchestrator import StippleOrchestrator
from stipple.pipeline.animator import AnimationPipeline, AnimationState, PipelinePhase
from stipple.pipeline.frame_capture import FrameCaptureStore
from stipple.pipeline.debounce import Debouncer

__all__ = [
    "StippleOrchestrator",
    "AnimationPipeline",
    "AnimationState",
    "PipelinePhase",
    "FrameCaptureStore",
    "Debouncer",
]
