# -*- coding: utf-8 -*-
"""
图像视图（View）。
仅负责展示与交互：滚轮翻帧、右键拖拽调窗宽窗位；
窗口化与缩放均由 ViewModel 提供。
"""

from typing import TYPE_CHECKING

from PySide6.QtCore import Qt
from PySide6.QtGui import QMouseEvent, QPixmap, QResizeEvent, QWheelEvent
from PySide6.QtWidgets import QFrame, QLabel, QSizePolicy, QVBoxLayout

if TYPE_CHECKING:
    from dicos_viewer.viewmodels.main_view_model import MainViewModel

# 右键拖拽每像素对应的窗宽/窗位变化量
DRAG_STEP = 4


class ImageView(QFrame):
    """
    当前帧显示区域。
    - 按 Label 当前尺寸向 ViewModel 请求等比缩放后的灰度图
    - 滚轮：向上下一帧，向下上一帧
    - 右键拖拽：水平调窗宽，垂直调窗位
    """

    def __init__(self, view_model: "MainViewModel", parent=None):
        super().__init__(parent)
        self.setFrameShape(QFrame.StyledPanel)
        self.setObjectName("ImageView")
        self._view_model = view_model
        self._last_right_pos = None

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self._image_label = QLabel()
        self._image_label.setAlignment(Qt.AlignCenter)
        self._image_label.setSizePolicy(QSizePolicy.Ignored, QSizePolicy.Ignored)
        self._image_label.setStyleSheet("background-color: black;")
        layout.addWidget(self._image_label, 1)
        self._show_placeholder()

    def refresh_display(self) -> None:
        """帧、窗宽窗位或尺寸变化时调用：重新获取显示图像。"""
        if not self._view_model.has_frames:
            self._show_placeholder()
            return
        label_w = max(self._image_label.width(), 1)
        label_h = max(self._image_label.height(), 1)
        qimg = self._view_model.get_display_image((label_h, label_w))
        if qimg is None:
            self._show_placeholder()
            return
        self._image_label.setPixmap(QPixmap.fromImage(qimg))

    def _show_placeholder(self) -> None:
        self._image_label.clear()
        self._image_label.setText("未加载数据")

    def resizeEvent(self, event: QResizeEvent) -> None:
        super().resizeEvent(event)
        self.refresh_display()

    def wheelEvent(self, event: QWheelEvent) -> None:
        """滚轮：在帧序列中环形切换。"""
        if not self._view_model.has_frames:
            return
        if event.angleDelta().y() > 0:
            self._view_model.next_frame()
        else:
            self._view_model.previous_frame()
        event.accept()

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() == Qt.RightButton:
            self._last_right_pos = event.position()
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        if event.button() == Qt.RightButton:
            self._last_right_pos = None
        super().mouseReleaseEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        """右键拖拽：更新窗宽窗位。"""
        if event.buttons() & Qt.RightButton:
            if self._last_right_pos is None:
                self._last_right_pos = event.position()
            delta = event.position() - self._last_right_pos
            self._last_right_pos = event.position()
            level, width = self._view_model.window_values()
            width = max(1, int(width + delta.x() * DRAG_STEP))
            level = int(level - delta.y() * DRAG_STEP)
            self._view_model.set_window(level, width)
            event.accept()
            return
        super().mouseMoveEvent(event)
