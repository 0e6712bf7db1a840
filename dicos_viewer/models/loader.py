# -*- coding: utf-8 -*-
"""
DICOM/DICOS 加载（Model）。
负责从单个文件或目录读取数据集并解码为帧与检查属性，不包含 UI。
- 单文件：pydicom 直接读取
- 目录：SimpleITK (GDCM) 给出序列文件顺序，逐个用 pydicom 读取后按顺序拼接全部帧
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence, Tuple, Union

import pydicom
import SimpleITK as sitk
from pydicom.dataset import Dataset

from .attributes import StudyAttributes, decode_dataset, frames_from_dataset
from .errors import LoadError
from .frame_store import Frame

logger = logging.getLogger(__name__)

# 打开文件对话框使用的扩展名
FILE_EXTENSIONS: Tuple[str, ...] = (".dcm", ".dcs")

PathLike = Union[str, Path]


@dataclass
class Study:
    """一次加载的结果：有序帧、检查属性与来源路径。"""

    frames: List[Frame]
    attributes: StudyAttributes = field(default_factory=StudyAttributes)
    source: Path = Path(".")

    @property
    def frame_count(self) -> int:
        return len(self.frames)


def read_dataset(path: PathLike) -> Dataset:
    """用 pydicom 读取单个文件，任何解析失败统一转为 LoadError。"""
    path = Path(path)
    try:
        return pydicom.dcmread(str(path))
    except Exception as e:
        raise LoadError(f"无法解析 DICOM 文件（{e}）", path) from e


def load_file(path: PathLike) -> Study:
    """读取单个 DICOM/DICOS 文件。"""
    path = Path(path)
    ds = read_dataset(path)
    try:
        frames, attrs = decode_dataset(ds)
    except LoadError as e:
        e.path = path
        raise
    logger.info("loaded file", extra={"path": str(path), "frames": len(frames)})
    return Study(frames=frames, attributes=attrs, source=path)


def series_file_names(directory: PathLike) -> List[Path]:
    """
    目录内的文件顺序。
    每个 GDCM 序列内部按空间位置排序，序列之间按 GDCM 返回的顺序拼接；
    不属于任何序列的文件按文件名排序追加在最后。找不到序列时即为按文件名排序的全部文件。
    """
    directory = Path(directory)
    listing = sorted(p for p in directory.iterdir() if p.is_file())
    reader = sitk.ImageSeriesReader()
    series_ids: Sequence[str] = reader.GetGDCMSeriesIDs(str(directory))
    if not series_ids:
        logger.debug("no GDCM series found, using directory listing", extra={"path": str(directory)})
        return listing

    ordered: List[Path] = []
    for series_id in series_ids:
        names: Sequence[str] = reader.GetGDCMSeriesFileNames(str(directory), series_id)
        ordered.extend(Path(n) for n in names)
    seen = set(ordered)
    loose = [p for p in listing if p not in seen]
    logger.debug(
        "GDCM series ordered",
        extra={"path": str(directory), "series": len(series_ids), "loose_files": len(loose)},
    )
    return ordered + loose


def load_directory(directory: PathLike) -> Study:
    """
    读取目录内全部文件并按顺序拼接帧。
    第一个文件必须可解析，它同时提供检查属性；后续无法解析的文件记录日志后跳过。
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise LoadError("目录不存在", directory)
    files = series_file_names(directory)
    if not files:
        raise LoadError("目录下没有文件", directory)

    first = read_dataset(files[0])
    try:
        frames, attrs = decode_dataset(first)
    except LoadError as e:
        e.path = files[0]
        raise

    for path in files[1:]:
        try:
            frames.extend(frames_from_dataset(read_dataset(path)))
        except LoadError as e:
            logger.error("could not open dicom file in folder", extra={"path": str(path), "error": str(e)})
            continue

    logger.info(
        "loaded directory",
        extra={"path": str(directory), "files": len(files), "frames": len(frames)},
    )
    return Study(frames=frames, attributes=attrs, source=directory)


def load_path(path: PathLike) -> Study:
    """根据路径类型分派到 load_directory 或 load_file。"""
    path = Path(path)
    if path.is_dir():
        return load_directory(path)
    if not path.exists():
        raise LoadError("文件不存在", path)
    return load_file(path)
