# -*- coding: utf-8 -*-
"""
帧序列（Model）。
持有一次检查的全部解码帧与当前帧索引；不包含 UI、文件 IO 与日志。
"""

import threading
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .errors import EmptyInputError, EmptyStoreError


@dataclass(frozen=True, eq=False)
class Frame:
    """
    单帧原始像素。
    - samples 维度为 (H, W)，保持源数据的整数类型（常见为 int16）
    - 构造后只读，由 FrameStore 独占持有
    """

    samples: np.ndarray
    width: int = field(init=False)
    height: int = field(init=False)

    def __post_init__(self):
        arr = np.array(self.samples, copy=True)
        if arr.ndim != 2:
            raise ValueError(f"帧数据必须为二维 (H, W)，实际维度 {arr.ndim}")
        height, width = arr.shape
        if height <= 0 or width <= 0:
            raise ValueError(f"帧尺寸必须为正：{width}x{height}")
        arr.setflags(write=False)
        # frozen dataclass 只能通过 object.__setattr__ 初始化派生字段
        object.__setattr__(self, "samples", arr)
        object.__setattr__(self, "width", int(width))
        object.__setattr__(self, "height", int(height))

    @classmethod
    def from_sequence(cls, samples: Sequence[int], width: int, height: int, dtype=None) -> "Frame":
        """
        由一维样本序列与宽高构造，要求 len(samples) == width * height。
        dtype 为 None 时由 numpy 推断；指定整数类型时样本超出其取值范围抛 ValueError。
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"帧尺寸必须为正：{width}x{height}")
        arr = np.asarray(samples)
        if dtype is not None:
            dtype = np.dtype(dtype)
            if dtype.kind in "iu" and arr.size:
                info = np.iinfo(dtype)
                lo, hi = arr.min(), arr.max()
                if lo < info.min or hi > info.max:
                    raise ValueError(
                        f"样本范围 [{lo}, {hi}] 超出 {dtype.name} 的取值范围 [{info.min}, {info.max}]"
                    )
            arr = arr.astype(dtype)
        if arr.size != width * height:
            raise ValueError(
                f"样本数 {arr.size} 与帧尺寸 {width}x{height} 不一致"
            )
        return cls(arr.reshape(height, width))

    @property
    def shape(self) -> Tuple[int, int]:
        """(height, width)。"""
        return self.height, self.width


class FrameStore:
    """
    有序帧序列 + 当前帧索引。
    - 插入顺序即采集/显示顺序
    - select 环形导航：越过末帧回到首帧，越过首帧回到末帧
    - 帧序列与索引由同一把锁保护，load 整体替换，读者不会看到新旧混搭的状态
    """

    def __init__(self, frames: Optional[Iterable[Frame]] = None):
        self._lock = threading.Lock()
        self._frames: Tuple[Frame, ...] = ()
        self._active_index: Optional[int] = None
        if frames is not None:
            self.load(frames)

    # ---------- 命令 ----------

    def load(self, frames: Iterable[Frame], require_frames: bool = True) -> None:
        """
        整体替换帧序列并把当前索引重置为 0。
        require_frames 为 True 时空序列抛 EmptyInputError，且原序列保持不变；
        为 False 时接受空序列，存储变为空。
        """
        new_frames = tuple(frames)
        if not new_frames and require_frames:
            raise EmptyInputError("未找到任何图像帧")
        with self._lock:
            self._frames = new_frames
            self._active_index = 0 if new_frames else None

    def select(self, index: int) -> int:
        """按环形规则设置当前帧并返回新索引；任意整数均合法。"""
        with self._lock:
            count = self._require_count()
            self._active_index = ((index % count) + count) % count
            return self._active_index

    def next(self) -> int:
        """下一帧（末帧之后回到首帧）。"""
        with self._lock:
            count = self._require_count()
            self._active_index = (self._active_index + 1) % count
            return self._active_index

    def previous(self) -> int:
        """上一帧（首帧之前回到末帧）。"""
        with self._lock:
            count = self._require_count()
            self._active_index = (self._active_index - 1 + count) % count
            return self._active_index

    # ---------- 查询 ----------

    def active(self) -> Frame:
        with self._lock:
            self._require_count()
            return self._frames[self._active_index]

    def snapshot(self) -> Tuple[Frame, int, int]:
        """一次性读取 (当前帧, 当前索引, 帧数)，供 render 使用。"""
        with self._lock:
            count = self._require_count()
            return self._frames[self._active_index], self._active_index, count

    def position(self) -> Optional[Tuple[int, int]]:
        """一次性读取 (当前索引, 帧数)，未加载时为 None。"""
        with self._lock:
            if not self._frames:
                return None
            return self._active_index, len(self._frames)

    @property
    def frames(self) -> List[Frame]:
        with self._lock:
            return list(self._frames)

    @property
    def active_index(self) -> Optional[int]:
        """当前帧索引，未加载时为 None。"""
        with self._lock:
            return self._active_index

    @property
    def count(self) -> int:
        with self._lock:
            return len(self._frames)

    @property
    def is_empty(self) -> bool:
        return self.count == 0

    def __len__(self) -> int:
        return self.count

    def _require_count(self) -> int:
        # 调用方需已持有 _lock
        count = len(self._frames)
        if count == 0:
            raise EmptyStoreError("尚未加载任何图像帧")
        return count
