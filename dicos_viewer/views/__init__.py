# -*- coding: utf-8 -*-
"""
View 层：纯 UI 展示与用户输入，通过 ViewModel 获取数据与执行命令。
- ImageView：当前帧显示、滚轮翻帧、右键拖拽调窗
- MainWindow：主窗口布局、菜单、左侧面板、快捷键，与 ViewModel 绑定
"""

from .image_view import ImageView
from .main_window import MainWindow

__all__ = ["ImageView", "MainWindow"]
