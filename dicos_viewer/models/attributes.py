# -*- coding: utf-8 -*-
"""
DICOM/DICOS 属性解码（Model）。
解析阶段把 pydicom 的数据元素一次性解码为有限的几种类型，
显示层只消费像素帧与窗宽窗位默认值，不再在渲染时按标签动态判断。
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np
from pydicom.dataelem import DataElement
from pydicom.dataset import Dataset

from .dicos_tags import format_tag, lookup_tag_name
from .errors import LoadError
from .frame_store import Frame

PIXEL_DATA_TAG = 0x7FE00010

# 直接按文本显示的值表示（VR）
_TEXT_VRS = {"AE", "AS", "CS", "DA", "DS", "DT", "IS", "LO", "LT", "SH", "ST", "TM", "UC", "UI", "UT"}

# 左侧面板显示的标签 -> StudyAttributes 字段
_LABEL_FIELDS = {
    "PatientName": "patient_name",
    "PatientID": "patient_id",
    "StudyDescription": "study_description",
}


@dataclass(frozen=True)
class Attribute:
    """解码后属性的公共部分：原始标签与可读名称。"""

    tag: int
    name: str

    @property
    def group(self) -> int:
        return self.tag >> 16

    @property
    def element(self) -> int:
        return self.tag & 0xFFFF


@dataclass(frozen=True)
class PixelFrames(Attribute):
    frames: Tuple[Frame, ...] = ()


@dataclass(frozen=True)
class PersonName(Attribute):
    text: str = ""


@dataclass(frozen=True)
class ShortText(Attribute):
    text: str = ""


@dataclass(frozen=True)
class WindowValue(Attribute):
    # 无法解析为整数时为 None
    value: Optional[int] = None


@dataclass(frozen=True)
class Opaque(Attribute):
    text: str = ""


@dataclass
class StudyAttributes:
    """
    一次检查中显示层关心的属性。
    - patient_name / patient_id / study_description：左侧信息面板
    - window_center / window_width：加载后的默认窗位/窗宽，缺失时为 None
    - extras：其余属性，仅用于诊断日志
    """

    patient_name: str = "anon"
    patient_id: str = "anon"
    study_description: str = "ANON"
    window_center: Optional[int] = None
    window_width: Optional[int] = None
    extras: List[Attribute] = field(default_factory=list)


def parse_window_value(value) -> Optional[int]:
    """取多值字符串的第一个值并转为整数，例如 "40\\80" -> 40、"-600.0" -> -600。"""
    if value is None:
        return None
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        if len(value) == 0:
            return None
        value = value[0]
    text = str(value).split("\\")[0].strip()
    if not text:
        return None
    try:
        return int(round(float(text)))
    except ValueError:
        return None


def frames_from_dataset(ds: Dataset) -> List[Frame]:
    """
    从 Dataset 取出全部灰度帧。
    单帧数据 pixel_array 为 (H, W)，多帧为 (N, H, W)；没有像素数据时返回空列表。
    """
    if "PixelData" not in ds:
        return []
    try:
        arr = ds.pixel_array
    except Exception as e:
        # pydicom 在缺少解码器或数据损坏时抛出多种异常
        raise LoadError(f"无法解码像素数据：{e}") from e
    samples_per_pixel = int(ds.get("SamplesPerPixel", 1) or 1)
    if samples_per_pixel != 1:
        raise LoadError(f"仅支持灰度图像，SamplesPerPixel={samples_per_pixel}")
    arr = np.asarray(arr)
    if arr.ndim == 2:
        return [Frame(arr)]
    if arr.ndim == 3:
        return [Frame(arr[i]) for i in range(arr.shape[0])]
    raise LoadError(f"不支持的像素数组维度：{arr.shape}")


def decode_element(elem: DataElement, ds: Optional[Dataset] = None) -> Attribute:
    """把单个数据元素解码为 Attribute 的某个子类。"""
    tag = int(elem.tag)
    group, element = tag >> 16, tag & 0xFFFF
    name = lookup_tag_name(group, element) or format_tag(group, element)

    if tag == PIXEL_DATA_TAG:
        frames = tuple(frames_from_dataset(ds)) if ds is not None else ()
        return PixelFrames(tag=tag, name=name, frames=frames)
    if elem.keyword in ("WindowCenter", "WindowWidth"):
        return WindowValue(tag=tag, name=name, value=parse_window_value(elem.value))
    if elem.VR == "PN":
        return PersonName(tag=tag, name=name, text=str(elem.value or ""))
    if elem.VR in _TEXT_VRS and elem.VM <= 1:
        return ShortText(tag=tag, name=name, text=str(elem.value if elem.value is not None else ""))
    return Opaque(tag=tag, name=name, text=elem.repval)


def decode_dataset(ds: Dataset) -> Tuple[List[Frame], StudyAttributes]:
    """
    遍历顶层数据元素，返回 (帧列表, 检查属性)。
    像素数据只解码一次；其余未被显示层使用的属性放入 extras。
    """
    frames: List[Frame] = []
    attrs = StudyAttributes()
    for elem in ds:
        attr = decode_element(elem, ds)
        keyword = elem.keyword
        if isinstance(attr, PixelFrames):
            frames = list(attr.frames)
        elif keyword in _LABEL_FIELDS:
            # 空值保留匿名默认
            if attr.text:
                setattr(attrs, _LABEL_FIELDS[keyword], attr.text)
        elif keyword == "WindowCenter":
            attrs.window_center = attr.value
        elif keyword == "WindowWidth":
            attrs.window_width = attr.value
        else:
            attrs.extras.append(attr)
    return frames, attrs
