# -*- coding: utf-8 -*-
"""
主界面 ViewModel（MVVM）。
负责：DICOM/DICOS 加载、帧导航、窗宽窗位与预设、患者信息、显示图像生成。
View 通过信号接收刷新通知，通过方法获取展示数据与执行命令。
"""

import logging
from pathlib import Path
from typing import Optional, Tuple, Union

import numpy as np
from PySide6.QtCore import QObject, Signal
from PySide6.QtGui import QImage

from dicos_viewer.models import (
    WINDOW_PRESETS,
    EmptyInputError,
    FrameStore,
    NoActiveFrameError,
    Study,
    ViewerError,
    WindowedImage,
    WindowParameters,
    load_directory,
    load_file,
    load_path,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def fit_size(native_hw: Tuple[int, int], bounds_hw: Tuple[int, int]) -> Tuple[int, int]:
    """保持宽高比，把原始尺寸缩放到能完整放入 bounds 的最大尺寸（至少 1x1）。"""
    nh, nw = native_hw
    bh, bw = bounds_hw
    if nh <= 0 or nw <= 0 or bh <= 0 or bw <= 0:
        return max(nh, 1), max(nw, 1)
    scale = min(bh / nh, bw / nw)
    return max(int(round(nh * scale)), 1), max(int(round(nw * scale)), 1)


def raster_to_qimage(raster: np.ndarray) -> QImage:
    """uint8 (H, W) 灰度数组 -> 独立持有数据的 QImage。"""
    raster = np.ascontiguousarray(raster, dtype=np.uint8)
    h, w = raster.shape
    qimg = QImage(raster.data, w, h, w, QImage.Format_Grayscale8)
    # copy 后 QImage 不再引用 numpy 缓冲区
    return qimg.copy()


class MainViewModel(QObject):
    """
    主界面 ViewModel。
    - 持有 FrameStore 与 WindowedImage，提供加载、翻帧、设置窗宽窗位等命令
    - 按显示区域尺寸生成窗口化后的 QImage，供 View 直接显示
    - 发出信号：study_loaded, frame_changed, window_changed, patient_info_changed, status_message
    """

    # 检查加载完成
    study_loaded = Signal()
    # 当前帧变化（View 刷新图像与层号标签）
    frame_changed = Signal()
    # 窗宽窗位变化（View 刷新图像与输入框）
    window_changed = Signal()
    # 患者信息更新（View 刷新左侧面板）
    patient_info_changed = Signal()
    # 状态栏文案
    status_message = Signal(str)

    def __init__(self, default_level: int = 40, default_width: int = 380, parent=None):
        super().__init__(parent)
        self._store = FrameStore()
        self._image = WindowedImage(
            self._store,
            WindowParameters(level=default_level, width=default_width),
            on_render=self._log_render,
        )
        self._patient_info: dict = {"name": "anon", "patient_id": "anon", "study": "ANON"}
        self._source: Optional[Path] = None

    @property
    def store(self) -> FrameStore:
        return self._store

    @property
    def image(self) -> WindowedImage:
        return self._image

    @property
    def has_frames(self) -> bool:
        return not self._store.is_empty

    @property
    def source(self) -> Optional[Path]:
        """当前检查的来源文件或目录，未加载时为 None。"""
        return self._source

    # ---------- 命令：数据加载 ----------

    def load_path(self, path: PathLike) -> bool:
        """按路径类型加载文件或目录；成功返回 True，失败发出 status_message。"""
        return self._load(load_path, path)

    def load_file(self, path: PathLike) -> bool:
        return self._load(load_file, path)

    def load_directory(self, path: PathLike) -> bool:
        return self._load(load_directory, path)

    def _load(self, loader, path: PathLike) -> bool:
        try:
            study = loader(path)
        except ViewerError as e:
            logger.error("load failed", extra={"path": str(path), "error": str(e)})
            self.status_message.emit(f"加载失败：{e}")
            return False
        return self.apply_study(study)

    def apply_study(self, study: Study) -> bool:
        """
        用加载结果替换当前检查。
        数据集中的 WindowCenter/WindowWidth 覆盖当前窗位/窗宽；其余属性写入诊断日志。
        """
        try:
            self._store.load(study.frames)
        except EmptyInputError as e:
            logger.error("no images found", extra={"path": str(study.source)})
            self.status_message.emit(f"加载失败：{e}")
            return False

        attrs = study.attributes
        current = self._image.window
        level = attrs.window_center if attrs.window_center is not None else current.level
        width = attrs.window_width if attrs.window_width is not None else current.width
        self._image.set_window(level, width)

        self._source = study.source
        self._patient_info = {
            "name": attrs.patient_name,
            "patient_id": attrs.patient_id,
            "study": attrs.study_description,
        }
        for attr in attrs.extras:
            logger.info("tag", extra={"tag": attr.name, "value": _attr_text(attr)})

        self.status_message.emit(f"已加载：{study.source}，共 {study.frame_count} 帧")
        self.study_loaded.emit()
        self.patient_info_changed.emit()
        self.window_changed.emit()
        self.frame_changed.emit()
        return True

    # ---------- 命令：帧导航 ----------

    def next_frame(self) -> None:
        if self._store.is_empty:
            return
        self._store.next()
        self.frame_changed.emit()

    def previous_frame(self) -> None:
        if self._store.is_empty:
            return
        self._store.previous()
        self.frame_changed.emit()

    def select_frame(self, index: int) -> None:
        if self._store.is_empty:
            return
        self._store.select(index)
        self.frame_changed.emit()

    def frame_label(self) -> str:
        """层号标签 "当前/总数"（从 1 开始），未加载时为 "1/1"。"""
        position = self._store.position()
        if position is None:
            return "1/1"
        index, count = position
        return f"{index + 1}/{count}"

    # ---------- 命令：窗宽窗位 ----------

    def set_level(self, level: int) -> None:
        self._image.set_level(level)
        self.window_changed.emit()

    def set_width(self, width: int) -> None:
        self._image.set_width(width)
        self.window_changed.emit()

    def set_window(self, level: int, width: int) -> None:
        """同时设置窗位、窗宽，并发出 window_changed。"""
        self._image.set_window(level, width)
        self.window_changed.emit()

    def apply_preset(self, name: str) -> bool:
        """应用预设窗位/窗宽；未知预设返回 False。"""
        if name not in WINDOW_PRESETS:
            return False
        level, width = WINDOW_PRESETS[name]
        self.set_window(level, width)
        return True

    def preset_names(self) -> list:
        return list(WINDOW_PRESETS)

    def window_values(self) -> Tuple[int, int]:
        """返回 (窗位, 窗宽)，供 View 同步输入框（避免循环触发）。"""
        window = self._image.window
        return window.level, window.width

    # ---------- 供 View 获取展示数据 ----------

    def get_patient_info(self) -> dict:
        return dict(self._patient_info)

    def get_display_image(self, bounds_hw: Optional[Tuple[int, int]] = None) -> Optional[QImage]:
        """
        生成当前帧的显示图像。
        bounds_hw 为显示区域 (height, width)，图像按宽高比缩放到其中；None 表示原始尺寸。
        未加载数据时返回 None。
        """
        try:
            frame = self._store.active()
        except ViewerError:
            return None
        target = fit_size(frame.shape, bounds_hw) if bounds_hw is not None else None
        self._image.set_target_size(target)
        try:
            raster = self._image.render()
        except NoActiveFrameError:
            return None
        return raster_to_qimage(raster)

    def _log_render(self, info: dict) -> None:
        logger.debug("render", extra=info)


def _attr_text(attr) -> str:
    for name in ("text", "value"):
        if hasattr(attr, name):
            return str(getattr(attr, name))
    return ""
