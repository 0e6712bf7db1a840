"""
Unit tests for MainViewModel

Qt is required; tests are skipped when PySide6 is not installed.
"""

import numpy as np
import pytest

pytest.importorskip("PySide6")

from dicos_viewer.models import Frame, Study, StudyAttributes  # noqa: E402
from dicos_viewer.viewmodels.main_view_model import (  # noqa: E402
    MainViewModel,
    fit_size,
    raster_to_qimage,
)


class _SignalRecorder:
    """Counts emissions of the view model's signals"""

    def __init__(self, view_model):
        self.counts = {}
        self.messages = []
        for name in ("study_loaded", "frame_changed", "window_changed", "patient_info_changed"):
            self.counts[name] = 0
            getattr(view_model, name).connect(lambda name=name: self._hit(name))
        view_model.status_message.connect(self.messages.append)

    def _hit(self, name):
        self.counts[name] += 1


@pytest.fixture
def view_model(qapp):
    return MainViewModel()


@pytest.fixture
def study():
    frames = [Frame(np.full((4, 6), value, dtype=np.int16)) for value in (-1000, 40, 1000)]
    attrs = StudyAttributes(
        patient_name="Doe^John",
        patient_id="P001",
        study_description="ABDOMEN",
        window_center=40,
        window_width=400,
    )
    return Study(frames=frames, attributes=attrs)


class TestFitSize:
    """Test aspect-preserving fit"""

    @pytest.mark.parametrize(
        "native,bounds,expected",
        [
            ((512, 512), (300, 600), (300, 300)),
            ((100, 200), (400, 400), (200, 400)),
            ((10, 10), (0, 0), (10, 10)),
            ((1000, 1), (10, 10), (10, 1)),
        ],
    )
    def test_fit(self, native, bounds, expected):
        assert fit_size(native, bounds) == expected


class TestRasterToQImage:
    """Test numpy -> QImage conversion"""

    def test_pixels_preserved(self, qapp):
        raster = np.array([[0, 128, 255]], dtype=np.uint8)
        qimg = raster_to_qimage(raster)
        assert (qimg.width(), qimg.height()) == (3, 1)
        assert qimg.pixelColor(1, 0).red() == 128
        assert qimg.pixelColor(2, 0).red() == 255


class TestLoading:
    """Test applying a loaded study"""

    def test_apply_study(self, view_model, study):
        recorder = _SignalRecorder(view_model)
        assert view_model.apply_study(study) is True
        assert view_model.has_frames
        assert view_model.window_values() == (40, 400)
        assert view_model.get_patient_info() == {
            "name": "Doe^John",
            "patient_id": "P001",
            "study": "ABDOMEN",
        }
        assert view_model.frame_label() == "1/3"
        for name in ("study_loaded", "frame_changed", "window_changed", "patient_info_changed"):
            assert recorder.counts[name] == 1

    def test_missing_window_keeps_current(self, view_model, study):
        study.attributes.window_center = None
        study.attributes.window_width = None
        view_model.set_window(-600, 1500)
        view_model.apply_study(study)
        assert view_model.window_values() == (-600, 1500)

    def test_empty_study_rejected(self, view_model, study):
        view_model.apply_study(study)
        recorder = _SignalRecorder(view_model)
        assert view_model.apply_study(Study(frames=[])) is False
        assert recorder.counts["study_loaded"] == 0
        assert recorder.messages
        assert view_model.store.count == 3

    def test_load_failure_reports_status(self, view_model, tmp_path):
        recorder = _SignalRecorder(view_model)
        assert view_model.load_path(tmp_path / "missing.dcm") is False
        assert recorder.messages and "加载失败" in recorder.messages[0]
        assert not view_model.has_frames

    def test_load_file(self, view_model, write_dicom):
        path = write_dicom("scan.dcm", np.zeros((3, 3), dtype=np.int16), window_center="50", window_width="350")
        assert view_model.load_file(path) is True
        assert view_model.window_values() == (50, 350)
        assert view_model.source == path


class TestNavigation:
    """Test frame navigation commands"""

    def test_wraps(self, view_model, study):
        view_model.apply_study(study)
        view_model.previous_frame()
        assert view_model.frame_label() == "3/3"
        view_model.next_frame()
        assert view_model.frame_label() == "1/3"
        view_model.select_frame(4)
        assert view_model.frame_label() == "2/3"

    def test_no_op_when_empty(self, view_model):
        recorder = _SignalRecorder(view_model)
        view_model.next_frame()
        view_model.previous_frame()
        view_model.select_frame(2)
        assert recorder.counts["frame_changed"] == 0
        assert view_model.frame_label() == "1/1"


class TestWindow:
    """Test window commands"""

    def test_set_level_and_width(self, view_model):
        recorder = _SignalRecorder(view_model)
        view_model.set_level(-600)
        view_model.set_width(1500)
        assert view_model.window_values() == (-600, 1500)
        assert recorder.counts["window_changed"] == 2

    def test_apply_preset(self, view_model):
        assert view_model.apply_preset("Brain") is True
        assert view_model.window_values() == (40, 80)

    def test_unknown_preset(self, view_model):
        before = view_model.window_values()
        assert view_model.apply_preset("Liver") is False
        assert view_model.window_values() == before

    def test_preset_names(self, view_model):
        assert view_model.preset_names()[0] == "Abdomen"


class TestDisplayImage:
    """Test get_display_image"""

    def test_none_when_empty(self, view_model):
        assert view_model.get_display_image((100, 100)) is None

    def test_windowed_pixels(self, view_model, study):
        view_model.apply_study(study)
        view_model.select_frame(1)
        qimg = view_model.get_display_image()
        assert (qimg.height(), qimg.width()) == (4, 6)
        assert qimg.pixelColor(0, 0).red() == 128

    def test_fits_bounds(self, view_model, study):
        view_model.apply_study(study)
        qimg = view_model.get_display_image((100, 300))
        assert (qimg.height(), qimg.width()) == (100, 150)
        assert qimg.pixelColor(10, 10).red() == 0
