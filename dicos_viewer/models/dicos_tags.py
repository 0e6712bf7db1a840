# -*- coding: utf-8 -*-
"""
DICOS 私有标签名称表。
仅用于诊断日志中显示可读的标签名，与图像变换无关。
"""

from typing import Dict, Tuple

from pydicom.datadict import keyword_for_tag

# (group, element) -> 名称
DICOS_TAGS: Dict[Tuple[int, int], str] = {
    (0x001F, 0x1001): "ThreatDetectionReport",
    (0x001F, 0x1002): "ThreatImageProjectionImage",
    (0x001F, 0x1003): "ThreatDescription",
    (0x001F, 0x1004): "Owner",
    (0x001F, 0x1005): "ObjectOfInspection",
    (0x001F, 0x1006): "Itinerary",
    (0x001F, 0x1007): "AutomatedThreatRecognitionAlgorithm",
    (0x001F, 0x1008): "ImageModalityType",
    (0x001F, 0x1009): "DICOSVersion",
}


def lookup_tag_name(group: int, element: int) -> str:
    """先查 DICOS 私有表，再查 pydicom 数据字典；都没有时返回空串。"""
    name = DICOS_TAGS.get((group, element))
    if name:
        return name
    return keyword_for_tag((group << 16) | element)


def format_tag(group: int, element: int) -> str:
    """(gggg,eeee) 形式，查不到名称时作为日志键。"""
    return f"({group:04X},{element:04X})"
