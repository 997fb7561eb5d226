import numpy as np
import pytest

from livefeed.adapters.camera.mock_camera import make_planar_frame
from livefeed.core.contracts import Plane, PlanarFrame
from livefeed.core.resources import PipelineResources


class TestPixelBuffer:

    def test_allocated_once_per_size(self):
        res = PipelineResources()
        first = res.ensure_pixels(8, 4)
        assert first.shape == (32,)
        assert first.dtype == np.uint32
        assert res.ensure_pixels(8, 4) is first

    def test_size_change_reallocates(self):
        res = PipelineResources()
        first = res.ensure_pixels(8, 4)
        second = res.ensure_pixels(4, 4)
        assert second is not first
        assert second.size == 16
        assert (res.width, res.height) == (4, 4)

    def test_release_drops_buffers(self):
        res = PipelineResources()
        res.ensure_pixels(2, 2)
        res.materialize(make_planar_frame(2, 2))
        res.release()
        assert res.pixels is None
        assert res.planes == [None, None, None]


class TestScratchPlanes:

    def test_copies_out_of_frame(self):
        frame = make_planar_frame(4, 2, y=50, u=60, v=70, row_padding=2)
        res = PipelineResources()
        y, u, v = res.materialize(frame)
        frame.planes[0].data[:] = 0
        assert y.size == frame.planes[0].length
        assert np.all(y.reshape(2, 6)[:, :4] == 50)
        assert u[0] == 60 and v[0] == 70

    def test_buffers_reused_for_same_capacity(self):
        res = PipelineResources()
        res.materialize(make_planar_frame(4, 4, y=1))
        bufs = list(res.planes)
        y, _, _ = res.materialize(make_planar_frame(4, 4, y=2))
        assert all(a is b for a, b in zip(bufs, res.planes))
        assert np.all(y == 2)

    def test_buffers_grow_per_plane(self):
        res = PipelineResources()
        res.materialize(make_planar_frame(4, 4))
        small = res.planes[0]
        res.materialize(make_planar_frame(4, 4, row_padding=8))
        assert res.planes[0] is not small
        assert res.planes[0].size >= 12 * 4

    def test_accepts_bytes_planes(self):
        planes = [Plane(bytes([9] * 4), row_stride=2), Plane(b"\x80", row_stride=1), Plane(b"\x80", row_stride=1)]
        y, u, v = PipelineResources().materialize(PlanarFrame(planes, 2, 2))
        assert y.tolist() == [9, 9, 9, 9]


class TestPlanarFrame:

    def test_close_exactly_once(self):
        calls = []
        frame = make_planar_frame(2, 2, on_close=calls.append)
        frame.close()
        assert frame.closed
        assert calls == [frame]
        with pytest.raises(RuntimeError):
            frame.close()
        assert len(calls) == 1

    def test_requires_three_planes(self):
        with pytest.raises(ValueError):
            PlanarFrame([Plane(b"\0", 1)], 1, 1)
