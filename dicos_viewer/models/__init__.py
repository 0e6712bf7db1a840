# -*- coding: utf-8 -*-
"""
Model 层：与 UI 无关的核心数据与变换。
- Frame / FrameStore：有序帧序列与当前帧索引（环形导航）
- WindowParameters / WindowedImage：窗宽窗位与按需生成的 8 位灰度图
- loader / attributes：DICOM/DICOS 读取与属性解码
"""

from .attributes import StudyAttributes, decode_dataset
from .errors import (
    EmptyInputError,
    EmptyStoreError,
    LoadError,
    NoActiveFrameError,
    ViewerError,
)
from .frame_store import Frame, FrameStore
from .loader import Study, load_directory, load_file, load_path
from .window import WINDOW_PRESETS, WindowParameters, apply_window, preset_window
from .windowed_image import WindowedImage

__all__ = [
    "EmptyInputError",
    "EmptyStoreError",
    "Frame",
    "FrameStore",
    "LoadError",
    "NoActiveFrameError",
    "Study",
    "StudyAttributes",
    "ViewerError",
    "WINDOW_PRESETS",
    "WindowParameters",
    "WindowedImage",
    "apply_window",
    "decode_dataset",
    "load_directory",
    "load_file",
    "load_path",
    "preset_window",
]
