"""
Unit tests for attribute decoding and the DICOS tag name table
"""

import numpy as np
import pytest
from pydicom.dataelem import DataElement
from pydicom.dataset import Dataset

from dicos_viewer.models import LoadError
from dicos_viewer.models.attributes import (
    Opaque,
    PersonName,
    PixelFrames,
    ShortText,
    WindowValue,
    decode_dataset,
    decode_element,
    frames_from_dataset,
    parse_window_value,
)
from dicos_viewer.models.dicos_tags import DICOS_TAGS, format_tag, lookup_tag_name

from conftest import build_dataset


class TestTagLookup:
    """Test lookup_tag_name"""

    def test_dicos_private_tag(self):
        assert lookup_tag_name(0x001F, 0x1009) == "DICOSVersion"
        assert len(DICOS_TAGS) == 9

    def test_falls_back_to_dictionary_keyword(self):
        assert lookup_tag_name(0x0010, 0x0010) == "PatientName"

    def test_unknown_tag(self):
        assert lookup_tag_name(0x0011, 0x1234) == ""

    def test_format_tag(self):
        assert format_tag(0x7FE0, 0x0010) == "(7FE0,0010)"


class TestParseWindowValue:
    """Test parse_window_value"""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("40", 40),
            ("-600.0", -600),
            ("40\\80", 40),
            (["400", "40"], 400),
            (1500.4, 1500),
            ("", None),
            ("abc", None),
            ([], None),
            (None, None),
        ],
    )
    def test_values(self, value, expected):
        assert parse_window_value(value) == expected


class TestDecodeElement:
    """Test decode_element variants"""

    def test_person_name(self):
        attr = decode_element(DataElement(0x00100010, "PN", "Doe^John"))
        assert isinstance(attr, PersonName)
        assert attr.text == "Doe^John"
        assert attr.name == "PatientName"

    def test_short_text(self):
        attr = decode_element(DataElement(0x00081030, "LO", "ABDOMEN"))
        assert isinstance(attr, ShortText)
        assert attr.text == "ABDOMEN"

    def test_window_value(self):
        attr = decode_element(DataElement(0x00281050, "DS", ["40", "80"]))
        assert isinstance(attr, WindowValue)
        assert attr.value == 40

    def test_opaque_bytes(self):
        attr = decode_element(DataElement(0x001F1001, "OB", b"\x00\x01"))
        assert isinstance(attr, Opaque)
        assert attr.name == "ThreatDetectionReport"
        assert (attr.group, attr.element) == (0x001F, 0x1001)

    def test_unknown_tag_named_by_number(self):
        attr = decode_element(DataElement(0x00111234, "LO", "x"))
        assert attr.name == "(0011,1234)"

    def test_pixel_frames(self):
        ds = build_dataset(np.zeros((2, 2), dtype=np.int16))
        attr = decode_element(ds["PixelData"], ds)
        assert isinstance(attr, PixelFrames)
        assert len(attr.frames) == 1


class TestFramesFromDataset:
    """Test frames_from_dataset"""

    def test_single_frame(self):
        pixels = np.array([[1, -2], [3, -4]], dtype=np.int16)
        frames = frames_from_dataset(build_dataset(pixels))
        assert len(frames) == 1
        assert np.array_equal(frames[0].samples, pixels)

    def test_multi_frame(self):
        pixels = np.arange(12, dtype=np.int16).reshape(3, 2, 2)
        frames = frames_from_dataset(build_dataset(pixels))
        assert len(frames) == 3
        assert np.array_equal(frames[2].samples, pixels[2])

    def test_no_pixel_data(self):
        assert frames_from_dataset(Dataset()) == []

    def test_color_rejected(self):
        ds = build_dataset(np.zeros((2, 2), dtype=np.int16))
        ds.SamplesPerPixel = 3
        with pytest.raises(LoadError):
            frames_from_dataset(ds)


class TestDecodeDataset:
    """Test decode_dataset"""

    def test_collects_display_attributes(self):
        ds = build_dataset(
            np.zeros((2, 2), dtype=np.int16),
            patient_name="Roe^Jane",
            patient_id="ID42",
            study="HEAD",
            window_center="50",
            window_width="350",
        )
        frames, attrs = decode_dataset(ds)
        assert len(frames) == 1
        assert attrs.patient_name == "Roe^Jane"
        assert attrs.patient_id == "ID42"
        assert attrs.study_description == "HEAD"
        assert (attrs.window_center, attrs.window_width) == (50, 350)
        names = {attr.name for attr in attrs.extras}
        assert "Manufacturer" in names
        assert "PatientName" not in names

    def test_defaults_without_labels(self):
        ds = Dataset()
        ds.Modality = "CT"
        frames, attrs = decode_dataset(ds)
        assert frames == []
        assert attrs.patient_name == "anon"
        assert attrs.study_description == "ANON"
        assert attrs.window_center is None

    def test_empty_labels_keep_defaults(self):
        ds = build_dataset(np.zeros((2, 2), dtype=np.int16), patient_name="", patient_id="", study="")
        _, attrs = decode_dataset(ds)
        assert attrs.patient_name == "anon"
        assert attrs.patient_id == "anon"
        assert attrs.study_description == "ANON"
        names = {attr.name for attr in attrs.extras}
        assert "PatientID" not in names
