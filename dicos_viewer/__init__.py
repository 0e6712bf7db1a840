# -*- coding: utf-8 -*-
"""
DICOM/DICOS 灰度切片浏览器（MVVM）。
- models：帧序列、窗宽窗位变换与文件加载，不依赖 Qt
- viewmodels：状态与命令，信号驱动 View
- views：Qt 界面
"""

__version__ = "0.1.0"
