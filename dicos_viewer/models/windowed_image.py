# -*- coding: utf-8 -*-
"""
窗口化图像（Model）。
由 (当前帧, 窗宽窗位, 目标尺寸) 按需生成 8 位灰度图；不缓存任何结果。
"""

import threading
from typing import Callable, Optional, Tuple

import numpy as np

from .errors import EmptyStoreError, NoActiveFrameError
from .frame_store import FrameStore
from .window import WindowParameters, apply_window, resample_nearest

# 诊断回调：接收一次渲染的摘要字典，由调用方注入
RenderHook = Callable[[dict], None]


class WindowedImage:
    """
    窗口化图像。
    - 只读访问 FrameStore，从不修改它
    - set_level / set_width 仅替换参数，不触发计算；render 时才拉取当前帧计算
    - render 开始时一次性读取帧与参数快照，并发修改不会造成半新半旧的结果
    """

    def __init__(
        self,
        store: FrameStore,
        window: Optional[WindowParameters] = None,
        target_size: Optional[Tuple[int, int]] = None,
        on_render: Optional[RenderHook] = None,
    ):
        self._store = store
        self._lock = threading.Lock()
        self._window = window if window is not None else WindowParameters()
        self._target_size = self._check_size(target_size)
        self._on_render = on_render

    @property
    def store(self) -> FrameStore:
        return self._store

    @property
    def window(self) -> WindowParameters:
        """当前窗宽窗位快照。"""
        with self._lock:
            return self._window

    @property
    def target_size(self) -> Optional[Tuple[int, int]]:
        """目标 (height, width)，None 表示按原始尺寸输出。"""
        with self._lock:
            return self._target_size

    # ---------- 参数修改（不重算） ----------

    def set_level(self, value: int) -> None:
        with self._lock:
            self._window = self._window.with_level(value)

    def set_width(self, value: int) -> None:
        with self._lock:
            self._window = self._window.with_width(value)

    def set_window(self, level: int, width: int) -> None:
        """同时设置窗位与窗宽（例如应用预设），两者一起生效。"""
        with self._lock:
            self._window = WindowParameters(level=int(level), width=int(width))

    def set_target_size(self, target_size: Optional[Tuple[int, int]]) -> None:
        size = self._check_size(target_size)
        with self._lock:
            self._target_size = size

    # ---------- 渲染 ----------

    def render(self) -> np.ndarray:
        """
        生成当前帧的 8 位灰度图，形状为目标尺寸 (H, W)。
        先做窗口变换再缩放，避免钳位边界两侧的灰度被插值抹平。
        没有当前帧时抛 NoActiveFrameError。
        """
        try:
            frame, index, count = self._store.snapshot()
        except EmptyStoreError as e:
            raise NoActiveFrameError("没有可显示的图像帧") from e
        with self._lock:
            window = self._window
            target = self._target_size

        raster = apply_window(frame.samples, window.level, window.width)
        if target is not None and target != frame.shape:
            raster = resample_nearest(raster, target)

        if self._on_render is not None:
            self._on_render(
                {
                    "frame": index,
                    "frames": count,
                    "window_level": window.level,
                    "window_width": window.width,
                    "native_size": frame.shape,
                    "size": raster.shape,
                }
            )
        return raster

    @staticmethod
    def _check_size(target_size: Optional[Tuple[int, int]]) -> Optional[Tuple[int, int]]:
        if target_size is None:
            return None
        h, w = int(target_size[0]), int(target_size[1])
        if h <= 0 or w <= 0:
            raise ValueError(f"目标尺寸必须为正：{w}x{h}")
        return h, w
