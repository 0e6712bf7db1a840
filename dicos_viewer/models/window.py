# -*- coding: utf-8 -*-
"""
窗宽窗位（Model）。
- WindowParameters：窗位 level / 窗宽 width
- WINDOW_PRESETS：常用 CT 预设
- apply_window：原始样本 -> 8 位灰度的线性窗口变换
- resample_nearest：窗口变换之后的最近邻缩放

取整规则：四舍五入（floor(x + 0.5)），即 0.5 一律向上进位。
例如 level=40, width=400 时样本 40 的结果为 round(127.5) = 128。
"""

from collections import OrderedDict
from dataclasses import dataclass, replace
from typing import Tuple

import numpy as np


@dataclass(frozen=True)
class WindowParameters:
    """
    窗位/窗宽，不可变；修改时整体替换，便于 render 读取一致快照。
    width 为 0 时变换退化为以 level 为阈值的二值化。
    """

    level: int = 40
    width: int = 380

    @property
    def low(self) -> float:
        return self.level - abs(self.width) / 2

    @property
    def high(self) -> float:
        return self.level + abs(self.width) / 2

    def with_level(self, level: int) -> "WindowParameters":
        return replace(self, level=int(level))

    def with_width(self, width: int) -> "WindowParameters":
        return replace(self, width=int(width))


# 预设名 -> (窗位, 窗宽)，顺序即界面下拉框顺序
WINDOW_PRESETS: "OrderedDict[str, Tuple[int, int]]" = OrderedDict(
    [
        ("Abdomen", (40, 400)),
        ("Bone", (400, 1800)),
        ("Brain", (40, 80)),
        ("Lungs", (600, 1500)),
        ("Mediastinum", (50, 350)),
    ]
)


def preset_window(name: str) -> WindowParameters:
    """按预设名返回 WindowParameters，未知名称抛 KeyError。"""
    level, width = WINDOW_PRESETS[name]
    return WindowParameters(level=level, width=width)


def _window_values(values: np.ndarray, level: float, width: float) -> np.ndarray:
    """对任意数值数组执行窗口变换（float64 计算），返回 uint8。"""
    s = np.asarray(values, dtype=np.float64)
    if width == 0:
        # 零窗宽：以 level 为阈值的二值化，避免除零
        return np.where(s >= level, 255, 0).astype(np.uint8)
    half = abs(width) / 2.0
    low = level - half
    high = level + half
    scaled = (s - low) * 255.0 / (high - low)
    np.clip(scaled, 0.0, 255.0, out=scaled)
    return np.floor(scaled + 0.5).astype(np.uint8)


def window_lut(level: float, width: float, dtype) -> Tuple[np.ndarray, int]:
    """
    为 8/16 位整数类型预计算查找表。
    返回 (lut, offset)：样本 s 的结果为 lut[s - offset]。
    """
    info = np.iinfo(dtype)
    values = np.arange(info.min, info.max + 1, dtype=np.int64)
    return _window_values(values, level, width), int(info.min)


def apply_window(samples: np.ndarray, level: float, width: float) -> np.ndarray:
    """
    线性窗口变换：
    low = level - width/2，high = level + width/2；
    s <= low -> 0，s >= high -> 255，其余 round(255 * (s - low) / (high - low))。
    8/16 位整数帧走查找表，其余类型直接计算，两条路径结果一致。
    """
    arr = np.asarray(samples)
    if arr.dtype.kind in "iu" and arr.dtype.itemsize <= 2:
        lut, offset = window_lut(level, width, arr.dtype)
        return lut[arr.astype(np.int64) - offset]
    return _window_values(arr, level, width)


def resample_nearest(raster: np.ndarray, target_hw: Tuple[int, int]) -> np.ndarray:
    """
    最近邻缩放到目标 (height, width)。
    只搬运已有像素值，因此不会产生超出原像素范围的灰度。
    """
    target_h, target_w = int(target_hw[0]), int(target_hw[1])
    if target_h <= 0 or target_w <= 0:
        raise ValueError(f"目标尺寸必须为正：{target_w}x{target_h}")
    src_h, src_w = raster.shape[:2]
    if (src_h, src_w) == (target_h, target_w):
        return raster.copy()
    # 目标像素中心映射回源像素
    rows = ((np.arange(target_h) + 0.5) * src_h / target_h).astype(np.int64)
    cols = ((np.arange(target_w) + 0.5) * src_w / target_w).astype(np.int64)
    np.clip(rows, 0, src_h - 1, out=rows)
    np.clip(cols, 0, src_w - 1, out=cols)
    return np.ascontiguousarray(raster[rows[:, None], cols[None, :]])
