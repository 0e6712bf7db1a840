# -*- coding: utf-8 -*-
"""
Model 层错误类型。
核心模型只抛出、不记录日志；由 ViewModel 捕获后转为状态栏文案或对话框。
"""

from pathlib import Path
from typing import Optional, Union


class ViewerError(Exception):
    """浏览器内所有可恢复错误的基类。"""


class EmptyInputError(ViewerError):
    """load 收到空帧序列，而调用方要求至少一帧。"""


class EmptyStoreError(ViewerError):
    """尚未成功加载任何帧时读取当前帧。"""


class NoActiveFrameError(EmptyStoreError):
    """render 时没有可用的当前帧。"""


class LoadError(ViewerError):
    """DICOM/DICOS 文件或目录无法解析。"""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        super().__init__(message)
        self.path = Path(path) if path is not None else None

    def __str__(self) -> str:
        message = super().__str__()
        if self.path is None:
            return message
        return f"{message}：{self.path}"
