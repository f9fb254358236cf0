import numpy as np
import pytest

from stipple.pipeline.frame_capture import FrameCaptureStore

pytestmark = pytest.mark.unit


def frame(value):
    return np.full((2, 2, 4), value, dtype=np.uint8)


def test_append_stores_copies():
    store = FrameCaptureStore()
    src = frame(1)
    store.append(src)
    src[...] = 9

    assert len(store) == 1
    assert store.snapshot()[0][0, 0, 0] == 1


def test_snapshot_is_independent_of_later_appends():
    store = FrameCaptureStore()
    store.append(frame(1))
    snap = store.snapshot()
    store.append(frame(2))

    assert len(snap) == 1
    assert len(store) == 2


def test_clear_empties_store():
    store = FrameCaptureStore()
    store.append(frame(1))
    store.clear()

    assert len(store) == 0
    assert store.snapshot() == []


def test_unbounded_by_default():
    store = FrameCaptureStore()
    for i in range(500):
        store.append(frame(i % 256))
    assert len(store) == 500


def test_max_frames_drops_oldest():
    store = FrameCaptureStore(max_frames=3)
    for i in range(5):
        store.append(frame(i))

    assert [f[0, 0, 0] for f in store.snapshot()] == [2, 3, 4]
