# -*- coding: utf-8 -*-
"""
主窗口（View）。
仅负责布局、菜单、左侧面板、快捷键与 ViewModel 的绑定；
业务逻辑与数据均由 ViewModel 提供。
"""

import os
from pathlib import Path
from typing import TYPE_CHECKING

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QIntValidator, QKeyEvent, QKeySequence
from PySide6.QtWidgets import (
    QComboBox,
    QFileDialog,
    QFormLayout,
    QFrame,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QStatusBar,
    QVBoxLayout,
    QWidget,
)

from dicos_viewer.models.loader import FILE_EXTENSIONS
from dicos_viewer.views.image_view import ImageView

if TYPE_CHECKING:
    from dicos_viewer.viewmodels.main_view_model import MainViewModel


# 深色主题 QSS
STYLESHEET = """
QMainWindow { background-color: #1E1E2E; color: #E0E0E0; }
QLabel { color: #E0E0E0; }
QGroupBox { color: #FFFFFF; font-weight: bold; border: 1px solid #303040; margin-top: 8px; }
QGroupBox::title { subcontrol-origin: margin; left: 6px; }
QFrame { background-color: #252535; }
QLineEdit, QComboBox { background-color: #1E1E2E; color: #E0E0E0; border: 1px solid #303040; padding: 2px; }
QPushButton {
    background-color: #3A86FF; color: white; border-radius: 4px; padding: 4px 10px;
}
QPushButton:hover { background-color: #2563EB; }
"""

# 窗位/窗宽输入框允许的范围
VALUE_MIN = -32768
VALUE_MAX = 65535


class MainWindow(QMainWindow):
    """
    主窗口 View。
    - 左侧：患者信息、窗位/窗宽输入与预设、翻帧按钮与层号、全屏
    - 中间：ImageView
    - 快捷键：Up 下一帧，Down 上一帧，F 切换全屏
    """

    def __init__(self, view_model: "MainViewModel", parent=None):
        super().__init__(parent)
        self._view_model = view_model
        self.setWindowTitle("DICOM Viewer")
        self.resize(600, 400)
        self.setStyleSheet(STYLESHEET)

        self._create_menu()
        central = QWidget(self)
        self.setCentralWidget(central)
        main_layout = QHBoxLayout(central)
        main_layout.setContentsMargins(0, 0, 0, 0)

        left_panel = self._create_left_panel()
        left_panel.setFixedWidth(200)
        main_layout.addWidget(left_panel)

        self._image_view = ImageView(self._view_model)
        main_layout.addWidget(self._image_view, 1)

        status = QStatusBar()
        status.setStyleSheet("color: #E0E0E0; background-color: #151521;")
        self.setStatusBar(status)
        self.statusBar().showMessage("就绪")

        # 绑定 ViewModel 信号
        self._view_model.frame_changed.connect(self._on_frame_changed)
        self._view_model.window_changed.connect(self._on_window_changed)
        self._view_model.patient_info_changed.connect(self._on_patient_info_changed)
        self._view_model.status_message.connect(self.statusBar().showMessage)

        self._on_window_changed()

    @property
    def image_view(self) -> ImageView:
        return self._image_view

    def _create_menu(self) -> None:
        """构建顶部菜单栏。"""
        menu_bar = self.menuBar()
        file_menu = menu_bar.addMenu("文件")
        open_file_action = QAction("打开文件", self)
        open_file_action.setShortcut(QKeySequence.StandardKey.Open)
        open_file_action.triggered.connect(self._on_open_file)
        file_menu.addAction(open_file_action)
        open_dir_action = QAction("打开目录", self)
        open_dir_action.triggered.connect(self._on_open_folder)
        file_menu.addAction(open_dir_action)
        exit_action = QAction("退出", self)
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)
        view_menu = menu_bar.addMenu("视图")
        full_action = QAction("全屏", self)
        full_action.triggered.connect(self.toggle_full_screen)
        view_menu.addAction(full_action)

    def _create_left_panel(self) -> QWidget:
        """左侧面板：患者信息、窗宽窗位、翻帧导航。"""
        panel = QFrame()
        panel.setFrameShape(QFrame.StyledPanel)
        layout = QVBoxLayout(panel)
        layout.setContentsMargins(8, 8, 8, 8)
        layout.setSpacing(8)

        form = QFormLayout()
        form.setLabelAlignment(Qt.AlignLeft)
        self._label_id = QLabel("anon")
        self._label_name = QLabel("anon")
        self._label_study = QLabel("ANON")
        form.addRow("ID", self._label_id)
        form.addRow("Name", self._label_name)
        form.addRow("Study", self._label_study)
        layout.addLayout(form)

        window_box = QGroupBox("Window")
        window_form = QFormLayout(window_box)
        validator = QIntValidator(VALUE_MIN, VALUE_MAX, self)
        self._edit_level = QLineEdit()
        self._edit_level.setValidator(validator)
        self._edit_level.textEdited.connect(self._on_level_edited)
        self._edit_width = QLineEdit()
        self._edit_width.setValidator(validator)
        self._edit_width.textEdited.connect(self._on_width_edited)
        self._combo_preset = QComboBox()
        self._combo_preset.addItem("")
        self._combo_preset.addItems(self._view_model.preset_names())
        self._combo_preset.textActivated.connect(self._on_preset_selected)
        window_form.addRow("Level", self._edit_level)
        window_form.addRow("Width", self._edit_width)
        window_form.addRow("Preset", self._combo_preset)
        layout.addWidget(window_box)

        self._btn_next = QPushButton("▲")
        self._btn_next.clicked.connect(self._view_model.next_frame)
        self._label_frame = QLabel(self._view_model.frame_label())
        self._label_frame.setAlignment(Qt.AlignCenter)
        self._btn_prev = QPushButton("▼")
        self._btn_prev.clicked.connect(self._view_model.previous_frame)
        # 按钮不抢键盘焦点，保证 Up/Down 始终用于翻帧
        self._btn_next.setFocusPolicy(Qt.NoFocus)
        self._btn_prev.setFocusPolicy(Qt.NoFocus)
        layout.addWidget(self._btn_next)
        slice_row = QHBoxLayout()
        slice_row.addWidget(QLabel("Slice"))
        slice_row.addWidget(self._label_frame, 1)
        layout.addLayout(slice_row)
        layout.addWidget(self._btn_prev)

        layout.addStretch(1)
        btn_full = QPushButton("Full Screen")
        btn_full.setFocusPolicy(Qt.NoFocus)
        btn_full.clicked.connect(self.toggle_full_screen)
        layout.addWidget(btn_full)
        return panel

    # ---------- 菜单与输入槽 ----------

    def _on_open_file(self) -> None:
        """菜单「打开文件」：选文件后交给 ViewModel 加载。"""
        patterns = " ".join(f"*{ext}" for ext in FILE_EXTENSIONS)
        file_path, _ = QFileDialog.getOpenFileName(
            self, "选择 DICOM/DICOS 文件", os.getcwd(),
            f"DICOM/DICOS ({patterns});;所有文件 (*)",
        )
        if not file_path:
            return
        if not self._view_model.load_file(Path(file_path)):
            QMessageBox.critical(self, "错误", "加载文件失败，请查看状态栏或日志。")

    def _on_open_folder(self) -> None:
        """菜单「打开目录」：选目录后交给 ViewModel 加载全部帧。"""
        dir_path = QFileDialog.getExistingDirectory(self, "选择 DICOM/DICOS 目录", os.getcwd())
        if not dir_path:
            return
        if not self._view_model.load_directory(Path(dir_path)):
            QMessageBox.critical(self, "错误", "加载目录失败，请查看状态栏或日志。")

    def _on_level_edited(self, text: str) -> None:
        value = _parse_int(text)
        if value is not None:
            self._view_model.set_level(value)

    def _on_width_edited(self, text: str) -> None:
        value = _parse_int(text)
        if value is not None:
            self._view_model.set_width(value)

    def _on_preset_selected(self, name: str) -> None:
        if name:
            self._view_model.apply_preset(name)

    def toggle_full_screen(self) -> None:
        if self.isFullScreen():
            self.showNormal()
        else:
            self.showFullScreen()

    def keyPressEvent(self, event: QKeyEvent) -> None:
        """Up：下一帧；Down：上一帧；F：切换全屏。输入框内的 F 不触发全屏。"""
        key = event.key()
        if key == Qt.Key_Up:
            self._view_model.next_frame()
        elif key == Qt.Key_Down:
            self._view_model.previous_frame()
        elif key == Qt.Key_F:
            self.toggle_full_screen()
        else:
            super().keyPressEvent(event)
            return
        event.accept()

    # ---------- ViewModel 信号槽 ----------

    def _on_frame_changed(self) -> None:
        self._label_frame.setText(self._view_model.frame_label())
        self._image_view.refresh_display()

    def _on_window_changed(self) -> None:
        """窗宽窗位变化：刷新图像，输入框与 ViewModel 同步（正在编辑的输入框不覆盖）。"""
        level, width = self._view_model.window_values()
        for edit, value in ((self._edit_level, level), (self._edit_width, width)):
            if not edit.hasFocus() and edit.text() != str(value):
                edit.setText(str(value))
        self._image_view.refresh_display()

    def _on_patient_info_changed(self) -> None:
        info = self._view_model.get_patient_info()
        self._label_id.setText(info.get("patient_id", "anon"))
        self._label_name.setText(info.get("name", "anon"))
        self._label_study.setText(info.get("study", "ANON"))


def _parse_int(text: str):
    try:
        return int(text)
    except ValueError:
        return None
