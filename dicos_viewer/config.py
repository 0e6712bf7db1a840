# -*- coding: utf-8 -*-
"""
启动配置。
命令行参数优先，其次环境变量 DICOS_VIEWER_LOG_LEVEL / DICOS_VIEWER_LOG_FILE，最后为默认值。
"""

import argparse
import os
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence, Tuple

ENV_LOG_LEVEL = "DICOS_VIEWER_LOG_LEVEL"
ENV_LOG_FILE = "DICOS_VIEWER_LOG_FILE"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class ViewerConfig:
    """浏览器启动配置。"""

    # 启动时打开的文件或目录
    path: Optional[str] = None
    # 未从数据集读到窗位/窗宽时使用的默认值
    default_level: int = 40
    default_width: int = 380
    # 主窗口初始尺寸 (宽, 高)
    window_size: Tuple[int, int] = (600, 400)
    log_level: str = "INFO"
    log_json: bool = True
    log_source: bool = False
    log_file: Optional[str] = None
    full_screen: bool = False

    @classmethod
    def from_args(
        cls,
        argv: Optional[Sequence[str]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "ViewerConfig":
        env = os.environ if environ is None else environ
        args = build_parser().parse_args(argv)
        log_level = (args.log_level or env.get(ENV_LOG_LEVEL) or "INFO").upper()
        if log_level not in LOG_LEVELS:
            log_level = "INFO"
        return cls(
            path=args.path,
            default_level=args.level,
            default_width=args.width,
            log_level=log_level,
            log_json=not args.plain_log,
            log_source=args.log_source,
            log_file=args.log_file or env.get(ENV_LOG_FILE) or None,
            full_screen=args.full_screen,
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dicos-viewer",
        description="DICOM/DICOS 灰度切片浏览器",
    )
    parser.add_argument("path", nargs="?", default=None, help="启动时打开的文件或目录")
    parser.add_argument("--level", type=int, default=40, help="默认窗位（默认 40）")
    parser.add_argument("--width", type=int, default=380, help="默认窗宽（默认 380）")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help=f"日志级别，也可通过 {ENV_LOG_LEVEL} 设置",
    )
    parser.add_argument("--log-file", default=None, help=f"滚动日志文件路径，也可通过 {ENV_LOG_FILE} 设置")
    parser.add_argument("--plain-log", action="store_true", help="输出纯文本日志而非 JSON")
    parser.add_argument("--log-source", action="store_true", help="日志中包含源码位置")
    parser.add_argument("--full-screen", action="store_true", help="全屏启动")
    return parser
