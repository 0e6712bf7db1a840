"""
Shared pytest fixtures for dicos_viewer tests.

Provides in-memory frames, a loaded FrameStore, a helper that writes real
DICOM files with pydicom, and an offscreen QApplication for Qt tests.
"""

import os
from pathlib import Path

import numpy as np
import pytest
from pydicom.dataset import Dataset, FileMetaDataset
from pydicom.uid import CTImageStorage, ExplicitVRLittleEndian, generate_uid

from dicos_viewer.models import Frame, FrameStore


# ============================================================================
# Frame Fixtures
# ============================================================================


@pytest.fixture
def ramp_frame():
    """4x4 int16 frame with samples -400 .. 350 in steps of 50"""
    samples = np.arange(-400, 400, 50, dtype=np.int16).reshape(4, 4)
    return Frame(samples)


@pytest.fixture
def three_frames():
    """Three 2x3 frames filled with 0, 100 and 200"""
    return [Frame(np.full((2, 3), value, dtype=np.int16)) for value in (0, 100, 200)]


@pytest.fixture
def loaded_store(three_frames):
    """FrameStore loaded with three_frames"""
    store = FrameStore()
    store.load(three_frames)
    return store


# ============================================================================
# DICOM File Fixtures
# ============================================================================


def build_dataset(
    pixels: np.ndarray,
    patient_name="Doe^John",
    patient_id="P001",
    study="CHEST CT",
    window_center="40",
    window_width="400",
    instance=1,
    series_uid=None,
) -> Dataset:
    """Build a CT dataset with signed 16-bit pixel data (2-D or N x H x W)."""
    pixels = np.asarray(pixels, dtype=np.int16)
    meta = FileMetaDataset()
    meta.MediaStorageSOPClassUID = CTImageStorage
    meta.MediaStorageSOPInstanceUID = generate_uid()
    meta.TransferSyntaxUID = ExplicitVRLittleEndian

    ds = Dataset()
    ds.file_meta = meta
    ds.SOPClassUID = CTImageStorage
    ds.SOPInstanceUID = meta.MediaStorageSOPInstanceUID
    ds.SeriesInstanceUID = series_uid or generate_uid()
    ds.StudyInstanceUID = generate_uid()
    ds.Modality = "CT"
    ds.InstanceNumber = instance
    ds.PatientName = patient_name
    ds.PatientID = patient_id
    ds.StudyDescription = study
    ds.Manufacturer = "ACME"
    if window_center is not None:
        ds.WindowCenter = window_center
    if window_width is not None:
        ds.WindowWidth = window_width

    if pixels.ndim == 3:
        ds.NumberOfFrames = pixels.shape[0]
        rows, cols = pixels.shape[1:]
    else:
        rows, cols = pixels.shape
    ds.Rows = rows
    ds.Columns = cols
    ds.SamplesPerPixel = 1
    ds.PhotometricInterpretation = "MONOCHROME2"
    ds.BitsAllocated = 16
    ds.BitsStored = 16
    ds.HighBit = 15
    ds.PixelRepresentation = 1
    ds.PixelData = pixels.astype("<i2").tobytes()
    return ds


@pytest.fixture
def write_dicom(tmp_path):
    """Factory writing a DICOM file under tmp_path and returning its path"""

    def _write(name, pixels, **kwargs) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        build_dataset(pixels, **kwargs).save_as(path, enforce_file_format=True)
        return path

    return _write


# ============================================================================
# Qt Fixtures
# ============================================================================


@pytest.fixture(scope="session")
def qapp():
    """Offscreen QApplication shared by all Qt tests"""
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    qt_widgets = pytest.importorskip("PySide6.QtWidgets")
    app = qt_widgets.QApplication.instance() or qt_widgets.QApplication([])
    yield app
