import numpy as np
import pytest

from livefeed.adapters.camera.base import SingleFrameSource
from livefeed.adapters.camera.cv2_camera import bgr_to_planar
from livefeed.adapters.camera.mock_camera import SyntheticCamera, make_planar_frame
from livefeed.core.color import yuv420_to_argb8888


class TestMakePlanarFrame:

    def test_planar_layout(self):
        frame = make_planar_frame(6, 4, row_padding=2)
        y, u, v = frame.planes
        assert (y.row_stride, y.pixel_stride, y.length) == (8, 1, 32)
        assert (u.row_stride, u.pixel_stride, u.length) == (5, 1, 10)
        assert v.length == 10

    def test_interleaved_layout_shares_memory(self):
        frame = make_planar_frame(4, 2, u=11, v=22, uv_pixel_stride=2)
        _, u, v = frame.planes
        assert u.pixel_stride == v.pixel_stride == 2
        assert u.data.tolist() == [11, 22, 11]
        assert v.data.tolist() == [22, 11, 22]

    def test_rejects_bad_content_shape(self):
        with pytest.raises(ValueError):
            make_planar_frame(4, 4, y=np.zeros((3, 3)))

    def test_rejects_unknown_pixel_stride(self):
        with pytest.raises(ValueError):
            make_planar_frame(4, 4, uv_pixel_stride=3)


class TestSyntheticCamera:

    def test_tracks_outstanding_frames(self, status):
        camera = SyntheticCamera(status, width=4, height=4)
        a, b = camera.acquire_latest(), camera.acquire_latest()
        assert camera.outstanding == {1, 2}
        a.close()
        assert camera.outstanding == {2}
        camera.release()
        assert any("never released" in line for line in status.logs)
        b.close()
        assert camera.released == 2

    def test_max_frames(self, status):
        camera = SyntheticCamera(status, width=4, height=4, max_frames=1)
        assert camera.acquire_latest() is not None
        assert camera.acquire_latest() is None

    def test_stream_config(self, status):
        cfg = SyntheticCamera(status, width=320, height=240, sensor_orientation=270).stream_config()
        assert (cfg.width, cfg.height, cfg.sensor_orientation) == (320, 240, 270)


class TestSingleFrameSource:

    def test_serves_once(self):
        frame = make_planar_frame(4, 2)
        source = SingleFrameSource(frame, sensor_orientation=90)
        assert source.stream_config().width == 4
        assert source.acquire_latest() is frame
        assert source.acquire_latest() is None


class TestBgrToPlanar:

    def test_i420_planes(self):
        frame = bgr_to_planar(np.zeros((6, 8, 3), dtype=np.uint8))
        y, u, v = frame.planes
        assert (frame.width, frame.height) == (8, 6)
        assert (y.length, u.length, v.length) == (48, 12, 12)
        assert (y.row_stride, u.row_stride) == (8, 4)

    def test_odd_size_is_cropped_to_even(self):
        frame = bgr_to_planar(np.zeros((5, 7, 3), dtype=np.uint8))
        assert (frame.width, frame.height) == (6, 4)

    def test_too_small(self):
        with pytest.raises(ValueError):
            bgr_to_planar(np.zeros((1, 1, 3), dtype=np.uint8))

    def test_gray_survives_conversion(self):
        bgr = np.full((8, 8, 3), 128, dtype=np.uint8)
        frame = bgr_to_planar(bgr)
        y, u, v = frame.planes
        pixels = yuv420_to_argb8888(y.data, u.data, v.data, 8, 8, y.row_stride, u.row_stride, 1)
        channels = [(pixels >> s) & 0xFF for s in (16, 8, 0)]
        for ch in channels:
            assert np.all(np.abs(ch.astype(int) - 128) <= 3)
